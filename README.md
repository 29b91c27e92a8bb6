# libos

Support routines for small embedded operating systems, as plain Python
with no dependencies outside the standard library.

## Modules

- `libos.formatting`: `format_string(fmt, *args)` and
  `snprintf(size, fmt, *args)`, C-style formatting with flags
  (`# 0 - + space '`), width and precision (including `*`), length
  modifiers (`hh h l ll j t z`) and the conversions
  `%d %i %u %o %x %X %c %s %p %n`. `%n` takes a callable, which is called
  with the number of characters produced so far. `snprintf` returns the
  text that fits in `size - 1` characters together with the full length.
- `libos.console`: `Console(stream)` with `putchar`, `puts` and `printf`,
  writing to any text stream under a lock. `printf` formats into a
  4096-character buffer and returns the formatted length, capped at that
  size.
- `libos.strings`: `strtoull`, `strtoll`, `strstr`, `strcmp`, `strncmp`,
  `strnlen`, `memchr` and `memrchr`. Text is treated as NUL-terminated.
  `strtoull`/`strtoll` return `(value, end_index)` and raise
  `InvalidError` when no digit is found or `OutOfRangeError` on overflow.
  Leading whitespace is not skipped.
- `libos.allocator`: `BumpAllocator(start, size)` and
  `BumpAllocator.from_bounds(start, end)`. `alloc(size, align)` returns
  an aligned address and raises `NoMemoryError` when the range runs out.
  Memory is never freed.
- `libos.readline`: `Readline(prompt, action)`, a line editor that is fed
  terminal input and collects terminal output. It works on dumb
  terminals, where only typing and backspace are supported. Once an ANSI
  terminal reports its width, it also supports cursor movement, in-line
  editing and a 256-entry history.
- `libos.traps`: the `Vector` enum, `trap_name`, the `TrapFrame`
  dataclass, and `traceback` and `dump_regs`, which return register dumps
  and stack back-chain walks as text.
- `libos.tlb`: Book E TLB size helpers (`pages_to_tsize_msb`,
  `pages_to_tsize_lsb`, `max_valid_tsize`, `natural_alignment`,
  `tsize_to_pages`, `tsize_to_pages_roundup`, `max_page_size`,
  `max_page_tsize`), `CpuFeature` and the `CpuCaps` dataclass.
- `libos.devtree`: `DeviceNode` (with `add_child`, `find`, `prop_cells`),
  `get_addr_format`, `get_addr_format_nozero`, `xlate_one`,
  `xlate_reg_raw`, `xlate_reg`, `dt_get_reg` and `get_stdout`. Addresses
  are translated through `ranges` on generic buses. PCI address encodings
  are not supported.
- `libos.errors`: `ErrorCode` and the `LibosError` exception family.
  `error_for_code(code)` returns an exception instance for a numeric
  code.

## Install

    pip install .

## Examples

    from libos.formatting import format_string, snprintf

    format_string("%08x|%-5d|%s", 0xBEEF, 42, "ok")   # '0000beef|42   |ok'
    snprintf(6, "%s", "truncated")                    # ('trunc', 9)

    from libos.strings import strtoull
    strtoull("ff", 16)                                # (255, 2)

    from libos.allocator import BumpAllocator
    heap = BumpAllocator(0x1000, 0x100)
    heap.alloc(16, 8)                                 # 0x1000

    from libos.devtree import DeviceNode, dt_get_reg, get_stdout
    root = DeviceNode()
    soc = root.add_child("soc", {
        "#address-cells": 1, "#size-cells": 1,
        "ranges": [0x0, 0x0, 0xFE000000, 0x1000000],
    })
    uart = soc.add_child("serial@11c500", {"reg": [0x11C500, 0x100]})
    root.add_child("chosen", {"linux,stdout-path": "/soc/serial@11c500"})
    dt_get_reg(uart)                                  # (0xfe11c500, 0x100)
    get_stdout(root) is uart                          # True

    from libos.readline import Readline
    rl = Readline("> ", lambda line: print("got", line))
    rl.start()
    rl.feed("ls\r")                                   # action runs with "ls"
    rl.take_output()                                  # escape codes, prompt and echo

    from libos.traps import Vector, trap_name
    trap_name(Vector.DSI)                             # 'data storage interrupt'

## What it does not do

The package has no command-line program and does not touch hardware.
`Readline` does not read from or write to a terminal itself: the caller
passes input to `feed` and sends the text from `take_output` to the
terminal. The trap helpers format register state that the caller
supplies, and the caller provides memory reads through `read_word`.
The device-tree helpers work on `DeviceNode` trees built in Python and
do not parse flattened device-tree blobs.

## Tests

    pip install .[test]
    pytest