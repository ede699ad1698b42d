"""Command line entry point: identify a binary and describe Mach-O files."""

from __future__ import annotations

import sys
from typing import Optional, Sequence

from binpeek.macho import analyse, is_mach_o
from binpeek.pe import PE_MAGIC, is_pe


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the tool on a single file path; return the exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) != 1:
        print("ERROR: Need a file")
        return 1

    path = args[0]
    print(f"INFO: Get a file: {path}")
    try:
        stream = open(path, "rb")
    except OSError as exc:
        print(f"ERROR: fopen() failed: {exc.strerror}", file=sys.stderr)
        return 1

    with stream:
        if is_pe(stream):
            print(f"Found e_magic: 0x{PE_MAGIC:x}")
            print("INFO: This is probably a PE-file")
        elif is_mach_o(stream):
            magic = int.from_bytes(stream.read(4), "little")
            stream.seek(0)
            print(f"Found MH_Magic: 0x{magic:x}")
            print("INFO: This is probably a Mach-O-file")
            try:
                analyse(stream, sys.stdout)
            except ValueError as exc:
                print(f"ERROR: {exc}", file=sys.stderr)
                return 1
        else:
            print("ERROR: I don't know what is it...")
    return 0


if __name__ == "__main__":
    sys.exit(main())