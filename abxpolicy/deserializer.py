"""
Binary XML deserializer: turns an ABX token stream back into XML text.

While decoding it can also record where every attribute lives in the source
stream (``Policy`` records) and where a new attribute would go inside the
per-user ``<restrictions>`` node. The patcher relies on both.
"""

import base64
import math
from dataclasses import dataclass, field

import numpy

from . import protocol as p
from .errors import AbxError, InvalidMagicHeader, ReadError, UnknownAttributeType
from .reader import FastDataInput


@dataclass(frozen=True)
class Policy:
    """Byte span ``[start_offset, end_offset)`` of one decoded attribute."""
    name: str
    start_offset: int
    end_offset: int


@dataclass
class DecodeResult:
    policies: list[Policy] = field(default_factory=list)
    restriction_node_offset: int | None = None
    warnings: list[str] = field(default_factory=list)


def encode_xml_entities(text: str) -> str:
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&apos;")
    )


def format_float(value) -> str:
    """
    Shortest round-trip digits, positional, no trailing ".0"; ``value`` is a
    numpy float32 or float64 so the shortest form matches its width.
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    return numpy.format_float_positional(value, unique=True, trim="-")


# Text-like commands: (prefix, suffix, escape)
_TEXT_COMMANDS = {
    p.TEXT: ("", "", True),
    p.CDSECT: ("<![CDATA[", "]]>", False),
    p.COMMENT: ("<!--", "-->", False),
    p.PROCESSING_INSTRUCTION: ("<?", "?>", False),
    p.DOCDECL: ("<!DOCTYPE ", ">", False),
    p.ENTITY_REF: ("&", ";", False),
    p.IGNORABLE_WHITESPACE: ("", "", False),
}


class BinaryXmlDeserializer:
    """
    Single-use ABX → XML decoder.

    ``reader`` must support read/seek/tell, ``output`` is a text stream.
    The magic header is checked here, before any token is read.
    """

    def __init__(self, reader, output, collect_policies: bool = False):
        magic = reader.read(len(p.PROTOCOL_MAGIC_VERSION_0))
        if len(magic) != len(p.PROTOCOL_MAGIC_VERSION_0):
            raise ReadError("magic header")
        if magic != p.PROTOCOL_MAGIC_VERSION_0:
            raise InvalidMagicHeader(p.PROTOCOL_MAGIC_VERSION_0, magic)

        self.input = FastDataInput(reader)
        self.output = output
        self.collect_policies = collect_policies
        self.policies: list[Policy] = []
        self.restriction_node_offset: int | None = None
        self.warnings: list[str] = []
        self._already_read_restrictions_user = False
        # One-token lookahead left over from scanning a tag's attributes
        self._pending: int | None = None

    def deserialize(self) -> DecodeResult:
        """
        Decode until END_DOCUMENT or end of input.

        A malformed token stops decoding without raising: the error is kept
        in ``warnings`` and whatever was already written stays written.
        """
        self.output.write(p.XML_HEADER)

        while self._pending is not None or not self.input.is_eof():
            try:
                if not self._process_token():
                    break
            except AbxError as e:
                self.warnings.append(f"Error parsing token: {e}")
                break

        return DecodeResult(
            policies=list(self.policies),
            restriction_node_offset=self.restriction_node_offset,
            warnings=list(self.warnings),
        )

    def _next_token(self) -> int:
        if self._pending is not None:
            token, self._pending = self._pending, None
            return token
        return self.input.read_byte()

    def _peek_token(self) -> int | None:
        if self._pending is None:
            try:
                self._pending = self.input.read_byte()
            except ReadError:
                return None
        return self._pending

    def _process_token(self) -> bool:
        token = self._next_token()
        command = token & p.COMMAND_MASK
        type_info = token & p.TYPE_MASK

        if command == p.START_DOCUMENT:
            return True

        if command == p.END_DOCUMENT:
            return False

        if command == p.START_TAG:
            self._process_start_tag()
            return True

        if command == p.END_TAG:
            tag_name = self.input.read_interned_utf()
            self.output.write(f"</{tag_name}>")
            return True

        if command in _TEXT_COMMANDS:
            if type_info == p.TYPE_STRING:
                prefix, suffix, escape = _TEXT_COMMANDS[command]
                text = self.input.read_utf()
                if command == p.TEXT and not text:
                    return True
                if escape:
                    text = encode_xml_entities(text)
                self.output.write(f"{prefix}{text}{suffix}")
            return True

        self.warnings.append(f"Unknown token: {command}")
        return True

    def _process_start_tag(self) -> None:
        tag_name = self.input.read_interned_utf()

        if tag_name == p.RESTRICTIONS_USER_TAG:
            self._already_read_restrictions_user = True
        if tag_name == p.RESTRICTIONS_TAG and self._already_read_restrictions_user:
            self.restriction_node_offset = self.input.tell()

        self.output.write(f"<{tag_name}")

        while True:
            token = self._peek_token()
            if token is None or token & p.COMMAND_MASK != p.ATTRIBUTE:
                break
            self._pending = None
            self._process_attribute(token)

        self.output.write(">")

    def _process_attribute(self, token: int) -> None:
        # Token byte was already consumed
        start_offset = self.input.tell() - 1
        type_info = token & p.TYPE_MASK
        name = self.input.read_interned_utf()
        self.output.write(f' {name}="')
        self.output.write(self._read_attribute_value(type_info))
        end_offset = self.input.tell()
        self.output.write('"')

        if self.collect_policies:
            self.policies.append(Policy(name, start_offset, end_offset))

    def _read_attribute_value(self, type_info: int) -> str:
        inp = self.input
        if type_info == p.TYPE_STRING:
            return encode_xml_entities(inp.read_utf())
        if type_info == p.TYPE_STRING_INTERNED:
            return encode_xml_entities(inp.read_interned_utf())
        if type_info == p.TYPE_INT:
            return str(inp.read_int())
        if type_info == p.TYPE_INT_HEX:
            return f"0x{inp.read_int() & 0xFFFFFFFF:X}"
        if type_info == p.TYPE_LONG:
            return str(inp.read_long())
        if type_info == p.TYPE_LONG_HEX:
            return f"0x{inp.read_long() & 0xFFFFFFFFFFFFFFFF:X}"
        if type_info == p.TYPE_FLOAT:
            return format_float(numpy.float32(inp.read_float()))
        if type_info == p.TYPE_DOUBLE:
            return format_float(numpy.float64(inp.read_double()))
        if type_info == p.TYPE_BOOLEAN_TRUE:
            return "true"
        if type_info == p.TYPE_BOOLEAN_FALSE:
            return "false"
        if type_info == p.TYPE_BYTES_HEX:
            return inp.read_bytes(inp.read_short()).hex().upper()
        if type_info == p.TYPE_BYTES_BASE64:
            return base64.b64encode(inp.read_bytes(inp.read_short())).decode("ascii")
        raise UnknownAttributeType(type_info)
