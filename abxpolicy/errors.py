"""Error types raised while decoding or patching ABX data."""


class AbxError(Exception):
    """Base class for every ABX decode/patch failure."""


class InvalidMagicHeader(AbxError):
    def __init__(self, expected: bytes, actual: bytes):
        self.expected = expected
        self.actual = actual
        super().__init__(
            "Invalid ABX file format - magic header mismatch. "
            f"Expected: {expected.hex(' ').upper()}, got: {actual.hex(' ').upper()}"
        )


class ReadError(AbxError):
    """A fixed-width or length-prefixed field could not be read in full."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Failed to read {field} from stream")


class InvalidUtf8Error(AbxError):
    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Invalid UTF-8 in {field}")


class InvalidInternedStringIndex(AbxError):
    def __init__(self, index: int):
        self.index = index
        super().__init__(f"Invalid interned string index: {index}")


class UnknownAttributeType(AbxError):
    def __init__(self, type_info: int):
        self.type_info = type_info
        super().__init__(f"Unknown attribute type: {type_info}")


class ParseError(AbxError):
    pass


class PatchError(AbxError):
    pass
