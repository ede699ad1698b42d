"""Identify PE and Mach-O executables and report Mach-O headers, load commands and segments."""

__version__ = "0.1.0"
__all__ = ["bits", "cli", "macho", "pe"]