"""Decode Android Binary XML (ABX) and patch user restriction policies in place."""

from .deserializer import BinaryXmlDeserializer, DecodeResult, Policy, encode_xml_entities
from .errors import (
    AbxError,
    InvalidInternedStringIndex,
    InvalidMagicHeader,
    InvalidUtf8Error,
    ParseError,
    PatchError,
    ReadError,
    UnknownAttributeType,
)
from .reader import FastDataInput
from .seekable import SeekableReader

__all__ = [
    "AbxError",
    "BinaryXmlDeserializer",
    "DecodeResult",
    "FastDataInput",
    "InvalidInternedStringIndex",
    "InvalidMagicHeader",
    "InvalidUtf8Error",
    "ParseError",
    "PatchError",
    "Policy",
    "ReadError",
    "SeekableReader",
    "UnknownAttributeType",
    "encode_xml_entities",
]
