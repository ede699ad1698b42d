import struct

from binpeek.cli import main
from binpeek.macho import MH_MAGIC_64


def _write(tmp_path, name, data):
    path = tmp_path / name
    path.write_bytes(data)
    return str(path)


def test_no_arguments(capsys):
    assert main([]) == 1
    assert "ERROR: Need a file" in capsys.readouterr().out


def test_too_many_arguments(capsys):
    assert main(["a", "b"]) == 1
    assert "ERROR: Need a file" in capsys.readouterr().out


def test_missing_file(tmp_path, capsys):
    path = str(tmp_path / "missing.bin")
    assert main([path]) == 1
    captured = capsys.readouterr()
    assert f"INFO: Get a file: {path}" in captured.out
    assert "ERROR: fopen() failed" in captured.err


def test_pe_file(tmp_path, capsys):
    path = _write(tmp_path, "a.exe", b"MZ" + bytes(62))
    assert main([path]) == 0
    out = capsys.readouterr().out
    assert "INFO: This is probably a PE-file" in out
    assert "Found e_magic: 0x5a4d" in out


def test_mach_o_file(tmp_path, capsys):
    seg = struct.pack("<II16sQQQQiiII", 0x19, 72, b"__PAGEZERO", 0, 0x1000, 0, 0, 0, 0, 0, 0)
    header = struct.pack("<IiiIIIII", MH_MAGIC_64, 0x0100000C, 0, 2, 1, len(seg), 0, 0)
    path = _write(tmp_path, "a.out", header + seg)
    assert main([path]) == 0
    out = capsys.readouterr().out
    assert "INFO: This is probably a Mach-O-file" in out
    assert f"Found MH_Magic: 0x{MH_MAGIC_64:x}" in out
    assert "segname: __PAGEZERO" in out
    assert "(ARM)" in out


def test_unknown_file(tmp_path, capsys):
    path = _write(tmp_path, "x.bin", b"\x7fELF" + bytes(12))
    assert main([path]) == 0
    assert "ERROR: I don't know what is it..." in capsys.readouterr().out


def test_truncated_mach_o(tmp_path, capsys):
    header = struct.pack("<IiiIIIII", MH_MAGIC_64, 0x01000007, 3, 2, 1, 72, 0, 0)
    path = _write(tmp_path, "short", header)
    assert main([path]) == 1
    assert "truncated" in capsys.readouterr().err