"""Android Binary XML (ABX) wire constants."""

PROTOCOL_MAGIC_VERSION_0 = b"ABX\x00"

XML_HEADER = '<?xml version="1.0" encoding="UTF-8"?>'

# Command tokens (low nibble)
START_DOCUMENT = 0
END_DOCUMENT = 1
START_TAG = 2
END_TAG = 3
TEXT = 4
CDSECT = 5
ENTITY_REF = 6
IGNORABLE_WHITESPACE = 7
PROCESSING_INSTRUCTION = 8
COMMENT = 9
DOCDECL = 10
ATTRIBUTE = 15

# Type tokens (high nibble)
TYPE_STRING = 2 << 4
TYPE_STRING_INTERNED = 3 << 4
TYPE_BYTES_HEX = 4 << 4
TYPE_BYTES_BASE64 = 5 << 4
TYPE_INT = 6 << 4
TYPE_INT_HEX = 7 << 4
TYPE_LONG = 8 << 4
TYPE_LONG_HEX = 9 << 4
TYPE_FLOAT = 10 << 4
TYPE_DOUBLE = 11 << 4
TYPE_BOOLEAN_TRUE = 12 << 4
TYPE_BOOLEAN_FALSE = 13 << 4

COMMAND_MASK = 0x0F
TYPE_MASK = 0xF0

# Index value announcing a new entry in the interned string table
INTERNED_NEW = 0xFFFF

# Tag names that locate the per-user policy node
RESTRICTIONS_USER_TAG = "restrictions_user"
RESTRICTIONS_TAG = "restrictions"
