"""List the user restriction policies set in a decoded profile."""

import io
from pathlib import Path

from lxml import etree

from .deserializer import BinaryXmlDeserializer
from .protocol import RESTRICTIONS_TAG, RESTRICTIONS_USER_TAG
from .seekable import SeekableReader


def parse_xml(xml: str):
    """Root element of decoded XML, or None. Entities are never expanded."""
    if not xml.strip():
        return None
    # Decoder output may be truncated after a bad token
    parser = etree.XMLParser(recover=True, resolve_entities=False)
    return etree.fromstring(xml.encode("utf-8"), parser=parser)


def get_policy_list(xml: str) -> list[str]:
    """
    Attribute names of every ``<restrictions>`` element that opens after a
    ``<restrictions_user>`` element, in document order.
    """
    root = parse_xml(xml)
    if root is None:
        return []

    names: list[str] = []
    in_user_restrictions = False
    for element in root.iter(tag=etree.Element):
        if element.tag == RESTRICTIONS_USER_TAG:
            in_user_restrictions = True
        elif element.tag == RESTRICTIONS_TAG and in_user_restrictions:
            names.extend(element.attrib.keys())
    return names


def decode_xml(path: str | Path) -> str:
    output = io.StringIO()
    with open(path, "rb") as f:
        BinaryXmlDeserializer(SeekableReader(f), output).deserialize()
    return output.getvalue()


def read_policy_list(path: str | Path) -> list[str]:
    return get_policy_list(decode_xml(path))
