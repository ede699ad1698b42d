"""Reading and describing Mach-O headers, load commands and segments."""

from __future__ import annotations

import struct
import sys
from dataclasses import dataclass
from typing import BinaryIO, Iterable, Optional, Sequence, TextIO

from binpeek.bits import format_binary

MH_MAGIC = 0xFEEDFACE
MH_CIGAM = 0xCEFAEDFE
MH_MAGIC_64 = 0xFEEDFACF
MH_CIGAM_64 = 0xCFFAEDFE

LC_REQ_DYLD = 0x80000000
LC_SEGMENT = 0x1
LC_SEGMENT_64 = 0x19

_CPU_ARCH_ABI64 = 0x01000000
_MAGICS_32 = (MH_MAGIC, MH_CIGAM)
_MAGICS_64 = (MH_MAGIC_64, MH_CIGAM_64)

_HEADER_32 = struct.Struct("<IiiIIII")
_HEADER_64 = struct.Struct("<IiiIIIII")
_LOAD_COMMAND = struct.Struct("<II")
_SEGMENT_32 = struct.Struct("<II16sIIIIiiII")
_SEGMENT_64 = struct.Struct("<II16sQQQQiiII")

_CPU_TYPES = {
    0x01: "VAX",
    0x02: "ROMP",
    0x04: "NS32032",
    0x05: "NS32332",
    0x06: "MC680x0",
    0x07: "x86",
    0x08: "MIPS",
    0x09: "NS32352",
    0x0B: "HP-PA",
    0x0C: "ARM",
    0x0D: "MC88000",
    0x0E: "SPARC",
    0x0F: "i860 (big-endian)",
    0x10: "i860 (little-endian) or maybe DEC Alpha",
    0x11: "RS/6000",
    0x12: "PowerPC / MC98000",
}

_CPU_SUBTYPES = {
    0x0: "All ARM processors",
    0x3: "All x86 processors",
}

_FILE_TYPES = {
    0x1: "Relocatable object file",
    0x2: "Demand paged executable file",
    0x3: "Fixed VM shared library file",
    0x4: "Core file",
    0x5: "Preloaded executable file",
    0x6: "Dynamically bound shared library file",
    0x7: "Dynamic link editor",
    0x8: "Dynamically bound bundle file",
    0x9: "Shared library stub for static linking only, no section contents",
    0xA: "Companion file with only debug sections",
    0xB: "x86_64 kexts",
    0xC: "A file composed of other Mach-Os to be run in the same userspace "
         "sharing a single linkedit",
}

_LOAD_COMMANDS = {
    0x1: "LC_SEGMENT",
    0x2: "LC_SYMTAB",
    0x3: "LC_SYMSEG",
    0x4: "LC_THREAD",
    0x5: "LC_UNIXTHREAD",
    0x6: "LC_LOADFVMLIB",
    0x7: "LC_IDFVMLIB",
    0x8: "LC_IDENT",
    0x9: "LC_FVMFILE",
    0xA: "LC_PREPAGE",
    0xB: "LC_DYSYMTAB",
    0xC: "LC_LOAD_DYLIB",
    0xD: "LC_ID_DYLIB",
    0xE: "LC_LOAD_DYLINKER",
    0xF: "LC_ID_DYLINKER",
    0x10: "LC_PREBOUND_DYLIB",
    0x11: "LC_ROUTINES",
    0x12: "LC_SUB_FRAMEWORK",
    0x13: "LC_SUB_UMBRELLA",
    0x14: "LC_SUB_CLIENT",
    0x15: "LC_SUB_LIBRARY",
    0x16: "LC_TWOLEVEL_HINTS",
    0x17: "LC_PREBIND_CKSUM",
    0x18 | LC_REQ_DYLD: "LC_LOAD_WEAK_DYLIB",
    0x19: "LC_SEGMENT_64",
    0x1A: "LC_ROUTINES_64",
    0x1B: "LC_UUID",
    0x1C | LC_REQ_DYLD: "LC_RPATH",
    0x1D: "LC_CODE_SIGNATURE",
    0x1E: "LC_SEGMENT_SPLIT_INFO",
    0x1F | LC_REQ_DYLD: "LC_REEXPORT_DYLIB",
    0x20: "LC_LAZY_LOAD_DYLIB",
    0x21: "LC_ENCRYPTION_INFO",
    0x22 | LC_REQ_DYLD: "LC_DYLD_INFO",
    0x23 | LC_REQ_DYLD: "LC_LOAD_UPWARD_DYLIB",
    0x24: "LC_VERSION_MIN_MACOSX",
    0x25: "LC_VERSION_MIN_IPHONEOS",
    0x26: "LC_FUNCTION_STARTS",
    0x27: "LC_DYLD_ENVIRONMENT",
    0x28 | LC_REQ_DYLD: "LC_MAIN",
    0x29: "LC_DATA_IN_CODE",
    0x2A: "LC_SOURCE_VERSION",
    0x2B: "LC_DYLIB_CODE_SIGN_DRS",
    0x2C: "LC_ENCRYPTION_INFO_64",
    0x2D: "LC_LINKER_OPTION",
    0x2E: "LC_LINKER_OPTIMIZATION_HINT",
    0x2F: "LC_VERSION_MIN_TVOS",
    0x30: "LC_VERSION_MIN_WATCHOS",
    0x31: "LC_NOTE",
    0x32: "LC_BUILD_VERSION",
    0x33 | LC_REQ_DYLD: "LC_DYLD_EXPORTS_TRIE",
    0x34 | LC_REQ_DYLD: "LC_DYLD_CHAINED_FIXUPS",
    0x35 | LC_REQ_DYLD: "LC_FILESET_ENTRY",
}

_SEGMENT_FLAGS = {
    0x0: "default",
    0x1: "SG_HIGHVM",
    0x2: "SG_FVMLIB",
    0x4: "SG_NORELOC",
    0x8: "SG_PROTECTED_VERSION_1",
    0x10: "SG_READ_ONLY",
}


@dataclass(frozen=True)
class MachHeader:
    """The fixed header at the start of a Mach-O file."""

    magic: int
    cputype: int
    cpusubtype: int
    filetype: int
    ncmds: int
    sizeofcmds: int
    flags: int
    reserved: int = 0

    @property
    def is_64(self) -> bool:
        return self.magic in _MAGICS_64

    @property
    def size(self) -> int:
        """Size of the header on disk in bytes."""
        return (_HEADER_64 if self.is_64 else _HEADER_32).size


@dataclass(frozen=True)
class LoadCommand:
    """The common prefix of every load command."""

    cmd: int
    cmdsize: int

    @property
    def name(self) -> str:
        return load_command_name(self.cmd)


@dataclass(frozen=True)
class SegmentCommand:
    """An LC_SEGMENT or LC_SEGMENT_64 load command."""

    cmd: int
    cmdsize: int
    segname: str
    vmaddr: int
    vmsize: int
    fileoff: int
    filesize: int
    maxprot: int
    initprot: int
    nsects: int
    flags: int

    @property
    def is_64(self) -> bool:
        return self.cmd == LC_SEGMENT_64


def _read_magic(stream: BinaryIO) -> Optional[int]:
    data = stream.read(4)
    stream.seek(0)
    if len(data) < 4:
        return None
    return int.from_bytes(data, "little")


def _read_struct(stream: BinaryIO, layout: struct.Struct, what: str) -> tuple:
    data = stream.read(layout.size)
    if len(data) < layout.size:
        raise ValueError(f"truncated {what}: expected {layout.size} bytes, got {len(data)}")
    return layout.unpack(data)


def is_mach_o(stream: BinaryIO) -> bool:
    """Return True if the stream starts with any Mach-O magic; rewinds it."""
    return _read_magic(stream) in _MAGICS_32 + _MAGICS_64


def is_mach_o_64(stream: BinaryIO) -> bool:
    """Return True if the stream starts with a 64-bit Mach-O magic; rewinds it."""
    return _read_magic(stream) in _MAGICS_64


def cputype_name(cpu_type: int, is_64: bool) -> str:
    """Describe a CPU type; for 64-bit files the ABI64 bit must be set."""
    mask = _CPU_ARCH_ABI64 if is_64 else 0
    for base, name in _CPU_TYPES.items():
        if cpu_type == base | mask:
            return name
    return "Unknown Mach-O cputype"


def cpusubtype_name(cpusubtype: int) -> str:
    """Describe a CPU subtype."""
    return _CPU_SUBTYPES.get(cpusubtype, "Unknown Mach-O cpusubtype")


def filetype_name(filetype: int) -> str:
    """Describe a Mach-O file type."""
    return _FILE_TYPES.get(filetype, "Unknown Mach-O filetype")


def load_command_name(cmd: int) -> str:
    """Return the LC_* name of a load command, or "Unknown"."""
    return _LOAD_COMMANDS.get(cmd, "Unknown")


def segment_flag_name(flag: int) -> str:
    """Describe a segment flags value."""
    return _SEGMENT_FLAGS.get(flag, "Unknown Mach-O segment flag")


def read_header(stream: BinaryIO) -> MachHeader:
    """Read the Mach-O header from the start of the stream."""
    magic = _read_magic(stream)
    if magic in _MAGICS_64:
        fields = _read_struct(stream, _HEADER_64, "Mach-O header")
    elif magic in _MAGICS_32:
        fields = _read_struct(stream, _HEADER_32, "Mach-O header")
    else:
        raise ValueError("not a Mach-O file")
    return MachHeader(*fields)


def read_load_commands(stream: BinaryIO, header: MachHeader) -> list[LoadCommand]:
    """Read the cmd/cmdsize pair of each of the header's load commands."""
    commands = []
    offset = header.size
    for _ in range(header.ncmds):
        stream.seek(offset)
        command = LoadCommand(*_read_struct(stream, _LOAD_COMMAND, "load command"))
        commands.append(command)
        offset += command.cmdsize
    return commands


def read_segments(
    stream: BinaryIO, header: MachHeader, commands: Iterable[LoadCommand]
) -> list[Optional[SegmentCommand]]:
    """Read segment commands; one entry per command, None for non-segments."""
    segments: list[Optional[SegmentCommand]] = []
    offset = header.size
    for command in commands:
        layout = {LC_SEGMENT_64: _SEGMENT_64, LC_SEGMENT: _SEGMENT_32}.get(command.cmd)
        if layout is None:
            segments.append(None)
        else:
            stream.seek(offset)
            cmd, cmdsize, raw_name, *rest = _read_struct(stream, layout, "segment command")
            segname = raw_name.split(b"\0", 1)[0].decode("latin-1")
            segments.append(SegmentCommand(cmd, cmdsize, segname, *rest))
        offset += command.cmdsize
    return segments


def format_header(header: MachHeader) -> str:
    """Describe a Mach-O header as text."""
    if header.is_64:
        lines = ["", "======== MACH_HEADER_64 ========", "64-bit Mach-O file"]
    else:
        lines = ["", "======== MACH_HEADER ========", "32-bit Mach-O file"]
    lines += [
        f"magic: 0x{header.magic:x}",
        f"cputype: 0x{header.cputype & 0xFFFFFFFF:x} "
        f"({cputype_name(header.cputype, header.is_64)})",
        f"cpusubtype: 0x{header.cpusubtype & 0xFFFFFFFF:x} "
        f"({cpusubtype_name(header.cpusubtype)})",
        f"filetype: 0x{header.filetype:x} ({filetype_name(header.filetype)})",
        f"ncmds: {header.ncmds}",
        f"sizeofcmds: {header.sizeofcmds}",
    ]
    if header.is_64:
        lines.append(f"flags: {format_binary(header.flags)}")
        lines.append(f"reserved: 0x{header.reserved:x}")
    else:
        lines.append(f"flags: 0x{header.flags:x}")
    return "\n".join(lines) + "\n"


def format_load_commands(commands: Sequence[LoadCommand]) -> str:
    """Describe load commands as an indexed table."""
    lines = ["", "============== LOAD COMMANDS ==============", "index\t\tcmd\t\tcmd_size"]
    lines += [
        f"[{index}]\t{command.name:>16}\t{command.cmdsize}"
        for index, command in enumerate(commands)
    ]
    return "\n".join(lines) + "\n"


def _segment_lines(segment: SegmentCommand) -> list[str]:
    if segment.is_64:
        name, addr_width = "LC_SEGMENT_64", 16
    else:
        name, addr_width = "LC_SEGMENT", 8
    return [
        f"cmd: 0x{segment.cmd:x} ({name})",
        f"cmdsize: {segment.cmdsize}",
        f"segname: {segment.segname}",
        f"vmaddr: 0x{segment.vmaddr:0{addr_width}x}",
        f"vmsize: 0x{segment.vmsize:0{addr_width}x}",
        f"fileoff: {segment.fileoff}",
        f"filesize: {segment.filesize}",
        f"maxprot: 0x{segment.maxprot & 0xFFFFFFFF:08x}",
        f"initprot: 0x{segment.initprot & 0xFFFFFFFF:08x}",
        f"nsects: {segment.nsects}",
        f"flags: 0x{segment.flags:x} ({segment_flag_name(segment.flags)})",
    ]


def format_segments(segments: Iterable[Optional[SegmentCommand]]) -> str:
    """Describe each command's structure; non-segment entries get only a banner."""
    lines = []
    for segment in segments:
        lines += ["", "============== COMMAND STRUCTURE INFO =============="]
        if segment is not None:
            lines += _segment_lines(segment)
    return "\n".join(lines) + "\n" if lines else ""


def analyse(stream: BinaryIO, out: Optional[TextIO] = None) -> MachHeader:
    """Describe a 64-bit Mach-O file to ``out``; 32-bit files are only read."""
    out = sys.stdout if out is None else out
    header = read_header(stream)
    if header.is_64:
        out.write(format_header(header))
        commands = read_load_commands(stream, header)
        out.write(format_load_commands(commands))
        out.write(format_segments(read_segments(stream, header, commands)))
    return header