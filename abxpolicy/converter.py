#!/usr/bin/env python3
"""
Convert Android Binary XML (ABX) to human-readable XML.

Usage: abx2xml [-i] <input> [output]

Input can be '-' to read stdin, output can be '-' to write stdout. With -i
the converted XML overwrites the input file.
"""
import argparse
import io
import sys

from .deserializer import BinaryXmlDeserializer, DecodeResult
from .errors import AbxError, ParseError
from .seekable import SeekableReader


def report_warnings(result: DecodeResult) -> None:
    for warning in result.warnings:
        print(f"Warning: {warning}", file=sys.stderr)


def convert(reader, writer) -> DecodeResult:
    """Decode ABX from ``reader`` (read/seek/tell) into text stream ``writer``."""
    result = BinaryXmlDeserializer(reader, writer, collect_policies=False).deserialize()
    report_warnings(result)
    return result


def convert_bytes(data: bytes) -> str:
    output = io.StringIO()
    convert(io.BytesIO(data), output)
    return output.getvalue()


def convert_file(input_path: str, output_path: str) -> DecodeResult:
    if input_path == output_path:
        return convert_file_in_place(input_path)
    with open(input_path, "rb") as src, open(output_path, "w", encoding="utf-8") as dst:
        return convert(src, dst)


def convert_file_in_place(file_path: str) -> DecodeResult:
    # The whole file is decoded before it gets truncated
    with open(file_path, "rb") as f:
        data = f.read()
    output = io.StringIO()
    result = convert(io.BytesIO(data), output)
    with open(file_path, "w", encoding="utf-8") as f:
        f.write(output.getvalue())
    return result


def convert_stdin_stdout() -> DecodeResult:
    result = convert(SeekableReader(sys.stdin.buffer), sys.stdout)
    sys.stdout.flush()
    return result


def convert_stdin_to_file(output_path: str) -> DecodeResult:
    with open(output_path, "w", encoding="utf-8") as dst:
        return convert(SeekableReader(sys.stdin.buffer), dst)


def convert_file_to_stdout(input_path: str) -> DecodeResult:
    with open(input_path, "rb") as src:
        result = convert(src, sys.stdout)
    sys.stdout.flush()
    return result


def parse_args(argv):
    p = argparse.ArgumentParser(
        prog="abx2xml",
        description="Converts Android Binary XML (ABX) to human-readable XML.",
    )
    p.add_argument(
        "-i",
        "--in-place",
        dest="in_place",
        action="store_true",
        help="Overwrite input file with converted output",
    )
    p.add_argument("input", help="Input file path (use '-' for stdin)")
    p.add_argument("output", nargs="?", help="Output file path (use '-' for stdout)")
    return p.parse_args(argv)


def run(ns) -> DecodeResult:
    if ns.in_place and ns.input == "-":
        raise ParseError("Cannot use -i option with stdin input")

    output = ns.output
    if output is None:
        output = ns.input if ns.in_place else "-"

    if ns.input == "-" and output == "-":
        return convert_stdin_stdout()
    if ns.input == "-":
        return convert_stdin_to_file(output)
    if output == "-":
        return convert_file_to_stdout(ns.input)
    return convert_file(ns.input, output)


def main(argv=None):
    ns = parse_args(sys.argv[1:] if argv is None else argv)
    try:
        run(ns)
    except BrokenPipeError:
        return 0
    except (AbxError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
