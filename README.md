# binpeek

A small command-line tool and library for looking inside executable files.

Given a file, binpeek checks whether it starts with a PE (`MZ`) or Mach-O
magic number. For 64-bit Mach-O files it then prints:

- the Mach-O header: magic, CPU type and subtype, file type, number and size
  of load commands, flags shown in binary, and the reserved field;
- a table of load commands with their index, name and size;
- a "COMMAND STRUCTURE INFO" block for every load command. For
  `LC_SEGMENT` and `LC_SEGMENT_64` commands the block holds the segment
  name, VM address and size, file offset and size, protections, number of
  sections and flags. For other commands only the banner is printed.

## Installation

```
pip install .
```

## Command line

```
binpeek path/to/binary
```

The tool takes exactly one argument and prints:

- `INFO: Get a file: <path>`;
- for a PE file, `Found e_magic: 0x5a4d` and `INFO: This is probably a PE-file`;
- for a Mach-O file, `Found MH_Magic: 0x...`,
  `INFO: This is probably a Mach-O-file` and, for 64-bit files, the report
  described above;
- otherwise, `ERROR: I don't know what is it...`.

Exit status is 0 on success. It is 1 when no file (or more than one) is
given, when the file cannot be opened, or when a Mach-O file is too short
for its header, load commands or segment commands; the error is written to
standard error in the last two cases.

## Library

```python
from binpeek.macho import is_mach_o, read_header, read_load_commands, format_header

with open("a.out", "rb") as stream:
    if is_mach_o(stream):
        header = read_header(stream)
        print(format_header(header))
        for command in read_load_commands(stream, header):
            print(command.name, command.cmdsize)
```

### `binpeek.pe`

- `PE_MAGIC`: the DOS `MZ` magic, `0x5A4D`.
- `is_pe(stream)`: True if the stream begins with `MZ`.

### `binpeek.macho`

- Magic constants `MH_MAGIC`, `MH_CIGAM`, `MH_MAGIC_64`, `MH_CIGAM_64` and
  load-command constants `LC_REQ_DYLD`, `LC_SEGMENT`, `LC_SEGMENT_64`.
- Detection: `is_mach_o(stream)`, `is_mach_o_64(stream)`.
- Name lookups: `cputype_name(cpu_type, is_64)`, `cpusubtype_name(cpusubtype)`,
  `filetype_name(filetype)`, `load_command_name(cmd)`,
  `segment_flag_name(flag)`. Unknown values give an "Unknown ..." string.
- Readers:
  - `read_header(stream)` returns a `MachHeader` (with `is_64` and `size`
    properties); it raises `ValueError` for a stream that is not Mach-O or
    is truncated.
  - `read_load_commands(stream, header)` returns a list of `LoadCommand`
    (`cmd`, `cmdsize`, and a `name` property).
  - `read_segments(stream, header, commands)` returns one entry per command:
    a `SegmentCommand` for segment commands and `None` for the rest.
  - Truncated data raises `ValueError`.
- Formatters returning text: `format_header(header)`,
  `format_load_commands(commands)`, `format_segments(segments)`.
- `analyse(stream, out=None)` reads the header and, for 64-bit files, writes
  the full report to `out` (standard output by default). It returns the
  `MachHeader`.

### `binpeek.bits`

- `format_binary(num)` renders a value as 32 bits in groups of four, each
  group followed by a space; negative numbers appear in two's complement.

### `binpeek.cli`

- `main(argv=None)` runs the command and returns its exit status.

Detection functions leave the stream positioned at its start.

## What binpeek does not do

- PE files are only recognised by their `MZ` magic; no PE headers are read.
- ELF files and fat (universal) Mach-O binaries are not recognised.
- 32-bit Mach-O files are recognised and their header is read, but no
  report is printed for them.
- All fields are read as little-endian, so byte-swapped (`MH_CIGAM*`) files
  are recognised but their fields are not decoded correctly.
- Sections inside segments are not listed.

## Tests

```
pip install .[test]
pytest
```