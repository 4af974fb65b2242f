"""Small ABX writer used to build test fixtures in memory."""

import struct

from abxpolicy import protocol as p


class AbxWriter:
    def __init__(self, magic: bytes = p.PROTOCOL_MAGIC_VERSION_0):
        self.buf = bytearray(magic)
        self.interned: dict[str, int] = {}

    def tell(self) -> int:
        return len(self.buf)

    def raw(self, data: bytes) -> "AbxWriter":
        self.buf += data
        return self

    def token(self, value: int) -> "AbxWriter":
        self.buf.append(value)
        return self

    def short(self, value: int) -> "AbxWriter":
        self.buf += struct.pack(">H", value)
        return self

    def utf(self, text: str) -> "AbxWriter":
        data = text.encode("utf-8")
        self.short(len(data))
        self.buf += data
        return self

    def interned_utf(self, text: str) -> "AbxWriter":
        if text in self.interned:
            return self.short(self.interned[text])
        self.interned[text] = len(self.interned)
        self.short(0xFFFF)
        return self.utf(text)

    def start_document(self):
        return self.token(p.START_DOCUMENT | p.TYPE_STRING_INTERNED)

    def end_document(self):
        return self.token(p.END_DOCUMENT)

    def start_tag(self, name: str):
        return self.token(p.START_TAG | p.TYPE_STRING_INTERNED).interned_utf(name)

    def end_tag(self, name: str):
        return self.token(p.END_TAG | p.TYPE_STRING_INTERNED).interned_utf(name)

    def text(self, command: int, text: str):
        return self.token(command | p.TYPE_STRING).utf(text)

    def attribute(self, type_info: int, name: str, payload: bytes = b""):
        self.token(p.ATTRIBUTE | type_info).interned_utf(name)
        self.buf += payload
        return self

    def attr_string(self, name: str, value: str):
        data = value.encode("utf-8")
        return self.attribute(p.TYPE_STRING, name, struct.pack(">H", len(data)) + data)

    def attr_int(self, name: str, value: int):
        return self.attribute(p.TYPE_INT, name, struct.pack(">i", value))

    def attr_bool(self, name: str, value: bool = True):
        return self.attribute(p.TYPE_BOOLEAN_TRUE if value else p.TYPE_BOOLEAN_FALSE, name)

    def getvalue(self) -> bytes:
        return bytes(self.buf)


def user_profile(
    policies=("no_sms", "no_config_wifi"),
    trailer=b"\x00\x00\x00\x03\x00\x00\x00\x00",
    base_policies=("no_debugging_features",),
):
    """
    A users/<id>.xml-shaped profile with boolean policies under
    <restrictions_user><restrictions .../></restrictions_user>.

    The trailer is an opaque run of bytes after END_DOCUMENT so the byte 5th
    from the end is easy to observe (0x03 here).
    """
    w = AbxWriter()
    w.start_document()
    w.start_tag("user").attr_int("id", 0).attr_string("name", "Owner")
    w.start_tag("restrictions")
    for name in base_policies:
        w.attr_bool(name)
    w.end_tag("restrictions")
    w.start_tag("restrictions_user")
    w.start_tag("restrictions")
    for name in policies:
        w.attr_bool(name)
    w.end_tag("restrictions")
    w.end_tag("restrictions_user")
    w.end_tag("user")
    w.end_document()
    w.raw(trailer)
    return w.getvalue()
