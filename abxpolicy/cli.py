#!/usr/bin/env python3
"""
Android device policy editor.

Toggles a user restriction policy in an ABX user profile by patching the
binary file directly: a policy that is set gets removed, one that is not
gets added under the per-user <restrictions> node.
"""
import argparse
import io
import sys

import hexdump

from .converter import report_warnings
from .deserializer import BinaryXmlDeserializer, DecodeResult
from .errors import AbxError
from .patcher import ACTION_REMOVED, TRAILER_OFFSET, toggle_policy
from .policies import decode_xml, get_policy_list

DEFAULT_PROFILE_PATH = "/data/system/users/0.xml"


def parse_args(argv):
    p = argparse.ArgumentParser(prog="abx-policy", description="Android device policy editor")
    p.add_argument("-p", "--policy-name", help="Name of policy you want to enable/disable")
    p.add_argument(
        "--profile-path",
        default=DEFAULT_PROFILE_PATH,
        help="Input file. For the primary user on android devices, this is "
        f"typically {DEFAULT_PROFILE_PATH}",
    )
    p.add_argument("-o", "--out", help="Output file name")
    p.add_argument("--list-policies", action="store_true", help="List available policies and exit")
    p.add_argument(
        "--overwrite", action="store_true", help="Overwrite the original file instead of writing --out"
    )
    p.add_argument("-v", dest="verbose", action="count", default=0)
    ns = p.parse_args(argv)

    if not ns.list_policies:
        if not ns.policy_name:
            p.error("the following arguments are required: -p/--policy-name")
        if not ns.out and not ns.overwrite:
            p.error("the following arguments are required: -o/--out (or pass --overwrite)")
    return ns


def load_profile(path: str) -> tuple[bytes, str, DecodeResult]:
    """Raw bytes, decoded XML and policy offsets, all from one read of ``path``."""
    with open(path, "rb") as f:
        data = f.read()
    output = io.StringIO()
    result = BinaryXmlDeserializer(io.BytesIO(data), output, collect_policies=True).deserialize()
    report_warnings(result)
    return data, output.getvalue(), result


def list_policies(ns) -> int:
    _, xml, _ = load_profile(ns.profile_path)
    for name in get_policy_list(xml):
        print(name)
    return 0


def edit_policy(ns) -> int:
    data, xml, result = load_profile(ns.profile_path)
    out_path = ns.profile_path if ns.overwrite else ns.out

    outcome = toggle_policy(
        data,
        result.policies,
        get_policy_list(xml),
        result.restriction_node_offset,
        ns.policy_name,
    )

    if outcome.action == ACTION_REMOVED:
        policy = outcome.policy
        print(f"REMOVING the {policy.name} policy")
        print()
        print(
            f"Found {policy.name} with start offset {policy.start_offset} "
            f"and end offset {policy.end_offset}"
        )
    else:
        print(f"CREATING the {ns.policy_name} policy")
        if ns.verbose:
            print(f"Inserting at offset {result.restriction_node_offset}")
    print(hexdump.hexdump(outcome.node, result="return"))

    if ns.verbose and len(data) >= TRAILER_OFFSET:
        print(
            f"Trailer byte: 0x{data[-TRAILER_OFFSET]:02X} -> "
            f"0x{outcome.data[-TRAILER_OFFSET]:02X} "
            f"({len(data)} -> {len(outcome.data)} bytes)"
        )

    with open(out_path, "wb") as f:
        f.write(outcome.data)

    if outcome.action == ACTION_REMOVED:
        print(f"Successfully disabled the {ns.policy_name} policy")
        print(f"Wrote XML without policy to {out_path}!")
    else:
        print(f"Successfully added the {ns.policy_name} policy")
        print()
        print(f"Wrote XML with the new policy to {out_path}!")

    print()
    print("You may want to double check that this XML matches your expectations.")
    print("Watch out for any syntax errors that the ABX -> XML conversion caused.")
    print(decode_xml(out_path))
    return 0


def main(argv=None):
    ns = parse_args(sys.argv[1:] if argv is None else argv)
    try:
        if ns.list_policies:
            return list_policies(ns)
        return edit_policy(ns)
    except (AbxError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
