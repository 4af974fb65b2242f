"""
Byte-level policy patches on a raw ABX buffer.

Offsets come from ``BinaryXmlDeserializer`` (``Policy`` spans and the
restriction node offset). Nothing here re-checks them against the buffer:
they must have been computed from this exact buffer.

Trailer byte: every added or removed policy node moves the byte 5th from the
end of the file by one. This was observed on real ``users/<id>.xml`` files
and has not been confirmed against the format definition. Kept as-is for
compatibility with existing files.
"""

import struct
from dataclasses import dataclass
from typing import Iterable

from .deserializer import Policy
from .errors import PatchError

# Attribute token (TYPE_BOOLEAN_TRUE | ATTRIBUTE) + new interned name marker
POLICY_NODE_BYTES = b"\xcf\xff\xff"

TRAILER_OFFSET = 5

ACTION_ADDED = "added"
ACTION_REMOVED = "removed"


@dataclass
class PatchOutcome:
    action: str
    data: bytearray
    # the node bytes removed from or inserted into the buffer
    node: bytes
    policy: Policy | None = None


def policy_to_bytes(policy_name: str) -> bytes:
    name = policy_name.encode("utf-8")
    if len(name) > 0xFFFF:
        raise PatchError(f"Policy name too long ({len(name)} bytes)")
    return POLICY_NODE_BYTES + struct.pack(">H", len(name)) + name


def bump_trailer(buffer: bytearray, delta: int) -> None:
    if len(buffer) >= TRAILER_OFFSET:
        buffer[-TRAILER_OFFSET] = (buffer[-TRAILER_OFFSET] + delta) & 0xFF


def remove_policy(buffer: bytes, policy: Policy) -> bytearray:
    data = bytearray(buffer)
    del data[policy.start_offset:policy.end_offset]
    bump_trailer(data, -1)
    return data


def insert_policy(buffer: bytes, offset: int | None, policy_name: str) -> bytearray:
    if offset is None:
        raise PatchError(
            "No <restrictions> node after <restrictions_user> found; "
            "cannot place a new policy"
        )
    node = policy_to_bytes(policy_name)
    data = bytearray(buffer)
    data[offset:offset] = node
    bump_trailer(data, 1)
    return data


def filter_policies(policies: Iterable[Policy], known_names: Iterable[str]) -> list[Policy]:
    """Keep only attributes that are real policies (decode reports every attribute)."""
    names = set(known_names)
    return [policy for policy in policies if policy.name in names]


def toggle_policy(
    buffer: bytes,
    policies: Iterable[Policy],
    known_names: Iterable[str],
    restriction_offset: int | None,
    policy_name: str,
) -> PatchOutcome:
    """
    Remove ``policy_name`` if it is set, otherwise add it.

    The same name can also sit on an earlier ``<restrictions>`` node; only
    the one inside the per-user node (at or after ``restriction_offset``) is
    removed, falling back to the last match.
    """
    matches = [p for p in filter_policies(policies, known_names) if p.name == policy_name]
    if matches:
        policy = next(
            (p for p in matches if restriction_offset is not None and p.start_offset >= restriction_offset),
            matches[-1],
        )
        node = bytes(buffer[policy.start_offset:policy.end_offset])
        return PatchOutcome(ACTION_REMOVED, remove_policy(buffer, policy), node, policy)

    data = insert_policy(buffer, restriction_offset, policy_name)
    return PatchOutcome(ACTION_ADDED, data, policy_to_bytes(policy_name))
