"""Detection of PE (MZ) executables."""

from typing import BinaryIO

PE_MAGIC = 0x5A4D


def is_pe(stream: BinaryIO) -> bool:
    """Return True if the stream starts with the DOS ``MZ`` magic.

    The stream is rewound to its start afterwards.
    """
    data = stream.read(2)
    stream.seek(0)
    if len(data) < 2:
        return False
    return int.from_bytes(data, "little") == PE_MAGIC