"""Embedded OS support routines: formatting, console output, strings, bump allocation, line editing, trap dumps, TLB sizing and device-tree address translation."""

__version__ = "0.1.0"

__all__ = [
    "allocator",
    "console",
    "devtree",
    "errors",
    "formatting",
    "readline",
    "strings",
    "tlb",
    "traps",
]