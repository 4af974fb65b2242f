#!/usr/bin/env python3
"""
Token-by-token dump of an ABX file, for debugging offsets and the trailer.

Usage: python -m abxpolicy.dump <file.abx> [-n MAX_TOKENS] [--trailer]
"""
import argparse
import io
import sys
from dataclasses import dataclass

import hexdump

from . import protocol as p
from .errors import AbxError, InvalidMagicHeader, UnknownAttributeType
from .reader import FastDataInput

COMMAND_NAMES = {
    p.START_DOCUMENT: "START_DOCUMENT",
    p.END_DOCUMENT: "END_DOCUMENT",
    p.START_TAG: "START_TAG",
    p.END_TAG: "END_TAG",
    p.TEXT: "TEXT",
    p.CDSECT: "CDSECT",
    p.ENTITY_REF: "ENTITY_REF",
    p.IGNORABLE_WHITESPACE: "IGNORABLE_WHITESPACE",
    p.PROCESSING_INSTRUCTION: "PROCESSING_INSTRUCTION",
    p.COMMENT: "COMMENT",
    p.DOCDECL: "DOCDECL",
    p.ATTRIBUTE: "ATTRIBUTE",
}

TYPE_NAMES = {
    0: "NULL",
    p.TYPE_STRING: "STRING",
    p.TYPE_STRING_INTERNED: "STRING_INTERNED",
    p.TYPE_BYTES_HEX: "BYTES_HEX",
    p.TYPE_BYTES_BASE64: "BYTES_BASE64",
    p.TYPE_INT: "INT",
    p.TYPE_INT_HEX: "INT_HEX",
    p.TYPE_LONG: "LONG",
    p.TYPE_LONG_HEX: "LONG_HEX",
    p.TYPE_FLOAT: "FLOAT",
    p.TYPE_DOUBLE: "DOUBLE",
    p.TYPE_BOOLEAN_TRUE: "BOOLEAN_TRUE",
    p.TYPE_BOOLEAN_FALSE: "BOOLEAN_FALSE",
}

# Attribute payloads that are plain fixed-width numbers
_FIXED_WIDTH = {
    p.TYPE_INT: 4,
    p.TYPE_INT_HEX: 4,
    p.TYPE_FLOAT: 4,
    p.TYPE_LONG: 8,
    p.TYPE_LONG_HEX: 8,
    p.TYPE_DOUBLE: 8,
    p.TYPE_BOOLEAN_TRUE: 0,
    p.TYPE_BOOLEAN_FALSE: 0,
}


@dataclass
class Token:
    offset: int
    end: int
    value: int
    name: str = ""

    @property
    def command(self) -> int:
        return self.value & p.COMMAND_MASK

    @property
    def type_info(self) -> int:
        return self.value & p.TYPE_MASK


def _skip_value(inp: FastDataInput, type_info: int) -> None:
    if type_info == p.TYPE_STRING:
        inp.read_utf()
    elif type_info == p.TYPE_STRING_INTERNED:
        inp.read_interned_utf()
    elif type_info in (p.TYPE_BYTES_HEX, p.TYPE_BYTES_BASE64):
        inp.read_bytes(inp.read_short())
    elif type_info in _FIXED_WIDTH:
        inp.read_bytes(_FIXED_WIDTH[type_info])
    else:
        raise UnknownAttributeType(type_info)


def walk_tokens(data: bytes, max_tokens: int = 0):
    """
    Yield every token after the magic header with its byte span. Stops after
    END_DOCUMENT; the bytes that follow are the trailer.
    """
    magic = data[:len(p.PROTOCOL_MAGIC_VERSION_0)]
    if magic != p.PROTOCOL_MAGIC_VERSION_0:
        raise InvalidMagicHeader(p.PROTOCOL_MAGIC_VERSION_0, magic)
    inp = FastDataInput(io.BytesIO(data))
    inp.seek(len(p.PROTOCOL_MAGIC_VERSION_0))
    count = 0
    while not inp.is_eof():
        offset = inp.tell()
        value = inp.read_byte()
        token = Token(offset, offset, value)
        if token.command in (p.START_TAG, p.END_TAG):
            token.name = inp.read_interned_utf()
        elif token.command == p.ATTRIBUTE:
            token.name = inp.read_interned_utf()
            _skip_value(inp, token.type_info)
        elif token.command not in (p.START_DOCUMENT, p.END_DOCUMENT) and token.type_info == p.TYPE_STRING:
            inp.read_utf()
        token.end = inp.tell()
        yield token
        count += 1
        if token.command == p.END_DOCUMENT or (max_tokens and count >= max_tokens):
            return


def describe(token: Token) -> str:
    command = COMMAND_NAMES.get(token.command, f"Unknown({token.command})")
    type_name = TYPE_NAMES.get(token.type_info, f"Unknown({token.type_info >> 4})")
    line = f"  Pos {token.offset:05d}-{token.end:05d}: 0x{token.value:02x} -> {command} ({type_name})"
    if token.name:
        line += f" {token.name}"
    return line


def parse_args(argv):
    ap = argparse.ArgumentParser(prog="abx-dump", description="Dump ABX tokens with byte offsets")
    ap.add_argument("file", help="Path to ABX file")
    ap.add_argument("-n", dest="max_tokens", type=int, default=0, help="Stop after N tokens")
    ap.add_argument("--trailer", action="store_true", help="Hexdump the bytes after END_DOCUMENT")
    return ap.parse_args(argv)


def main(argv=None):
    ns = parse_args(sys.argv[1:] if argv is None else argv)
    with open(ns.file, "rb") as f:
        data = f.read()

    print(f"Analyzing {len(data)} bytes of ABX data:")
    end = len(p.PROTOCOL_MAGIC_VERSION_0)
    try:
        for token in walk_tokens(data, ns.max_tokens):
            print(describe(token))
            end = token.end
    except AbxError as e:
        print(f"Stopped at offset {end}: {e}", file=sys.stderr)
        return 1

    if ns.trailer:
        print(f"\nTrailer ({len(data) - end} bytes from offset {end}):")
        print(hexdump.hexdump(data[end:], result="return"))
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
