"""printf-style formatting with the library's own conversion rules."""

from __future__ import annotations

from enum import IntFlag
from typing import Any, Callable, Iterator

_MASK64 = (1 << 64) - 1
_INT_BITS = 32
_LONG_BITS = 64


class _Flag(IntFlag):
    ALT_FORM = 0x0001
    ZERO_PAD = 0x0002
    LEFT_JUSTIFY = 0x0004
    LEAVE_BLANK = 0x0008
    ALWAYS_SIGN = 0x0010
    GROUP_THOUSANDS = 0x0020
    LONG = 0x0040
    LONG_LONG = 0x0080
    SHORT = 0x0100
    SHORT_SHORT = 0x0200
    INTMAX = 0x0400
    PTRDIFF = 0x0800
    SIZE_T = 0x1000
    CAPITAL_HEX = 0x2000
    SIGNED = 0x4000
    HAS_PRECISION = 0x8000


_NONE = _Flag(0)


def _signed(value: int, bits: int) -> int:
    value &= (1 << bits) - 1
    if value >= 1 << (bits - 1):
        value -= 1 << bits
    return value


def _unsigned(value: int, bits: int) -> int:
    return value & ((1 << bits) - 1)


def _arg_bits(flags: _Flag) -> int:
    if flags & (_Flag.INTMAX | _Flag.LONG_LONG | _Flag.SIZE_T | _Flag.PTRDIFF):
        return 64
    if flags & _Flag.LONG:
        return _LONG_BITS
    if flags & _Flag.SHORT_SHORT:
        return 8
    if flags & _Flag.SHORT:
        return 16
    return _INT_BITS


def _digits(uval: int, radix: int, capital: bool) -> str:
    spec = {8: "o", 10: "d", 16: "X" if capital else "x"}[radix]
    return format(uval, spec)


def _format_number(value: int, radix: int, width: int, precision: int, flags: _Flag) -> str:
    out: list[str] = []

    if flags & _Flag.SIGNED:
        uval = -value if value < 0 else value
    else:
        uval = value & _MASK64

    # An explicit precision of 0 suppresses all output for a zero value.
    if uval != 0 or not flags & _Flag.HAS_PRECISION or precision != 0:
        digits = _digits(uval, radix, bool(flags & _Flag.CAPITAL_HEX))
    else:
        digits = ""

    length = len(digits)
    extra = 0

    if flags & _Flag.SIGNED:
        if value < 0:
            out.append("-")
            extra += 1
        elif flags & _Flag.ALWAYS_SIGN:
            out.append("+")
            extra += 1
        elif flags & _Flag.LEAVE_BLANK:
            out.append(" ")
            extra += 1

    if flags & _Flag.ALT_FORM and value != 0:
        if radix == 8 and (not flags & _Flag.HAS_PRECISION or precision <= length):
            flags |= _Flag.HAS_PRECISION
            precision = length + 1
        if radix == 16:
            out.append("0x")
            extra += 2

    if flags & _Flag.HAS_PRECISION and length < precision:
        zeros = precision - length
        length = precision
    else:
        zeros = 0

    length += extra

    if not flags & _Flag.LEFT_JUSTIFY and length < width:
        out.append(("0" if flags & _Flag.ZERO_PAD else " ") * (width - length))
    out.append("0" * zeros)
    out.append(digits)
    if flags & _Flag.LEFT_JUSTIFY and length < width:
        out.append(" " * (width - length))
    return "".join(out)


def _next_arg(args: Iterator[Any]) -> Any:
    try:
        return next(args)
    except StopIteration:
        raise TypeError("not enough arguments for format string") from None


def _int_arg(args: Iterator[Any]) -> int:
    value = _next_arg(args)
    if not isinstance(value, int):
        raise TypeError(f"integer argument expected, got {type(value).__name__}")
    return value


def format_string(fmt: str, *args: Any) -> str:
    """Format ``fmt`` with ``args`` and return the complete result.

    A ``%n`` conversion takes a callable, which is called with the number
    of characters produced so far.
    """
    out: list[str] = []
    produced = 0
    arg_iter = iter(args)

    def emit(text: str) -> None:
        nonlocal produced
        out.append(text)
        produced += len(text)

    in_spec = False
    flags = _NONE
    width = 0
    precision = 0
    pos = 0
    end = len(fmt)

    while pos < end:
        ch = fmt[pos]

        if not in_spec:
            if ch == "%":
                in_spec = True
                flags = _NONE
                width = 0
                precision = 0
            else:
                emit(ch)
            pos += 1
            continue

        literal = False

        if ch == "#":
            flags |= _Flag.ALT_FORM
        elif ch == "0" and not flags & _Flag.HAS_PRECISION:
            flags |= _Flag.ZERO_PAD
        elif ch.isdigit() and ch.isascii():
            if flags & _Flag.HAS_PRECISION:
                literal = True
            else:
                while pos < end and "0" <= fmt[pos] <= "9":
                    width = width * 10 + int(fmt[pos])
                    pos += 1
                continue
        elif ch == "*":
            if width or flags & _Flag.HAS_PRECISION:
                literal = True
            else:
                width = _signed(_int_arg(arg_iter), _INT_BITS)
                if width < 0:
                    width = -width
                    flags |= _Flag.LEFT_JUSTIFY
        elif ch == ".":
            flags |= _Flag.HAS_PRECISION
            if pos + 1 < end and fmt[pos + 1] == "*":
                pos += 1
                precision = max(_signed(_int_arg(arg_iter), _INT_BITS), 0)
            else:
                while pos + 1 < end and "0" <= fmt[pos + 1] <= "9":
                    pos += 1
                    precision = precision * 10 + int(fmt[pos])
        elif ch == "-":
            flags |= _Flag.LEFT_JUSTIFY
        elif ch == " ":
            flags |= _Flag.LEAVE_BLANK
        elif ch == "+":
            flags |= _Flag.ALWAYS_SIGN
        elif ch == "'":
            flags |= _Flag.GROUP_THOUSANDS
        elif ch == "l":
            flags |= _Flag.LONG_LONG if flags & _Flag.LONG else _Flag.LONG
        elif ch == "h":
            flags |= _Flag.SHORT_SHORT if flags & _Flag.SHORT else _Flag.SHORT
        elif ch == "j":
            flags |= _Flag.INTMAX
        elif ch == "t":
            flags |= _Flag.PTRDIFF
        elif ch == "z":
            flags |= _Flag.SIZE_T
        elif ch in "di":
            value = _signed(_int_arg(arg_iter), _arg_bits(flags))
            emit(_format_number(value, 10, width, precision, flags | _Flag.SIGNED))
            in_spec = False
        elif ch in "Xxou":
            radix = {"X": 16, "x": 16, "o": 8, "u": 10}[ch]
            if ch == "X":
                flags |= _Flag.CAPITAL_HEX
            value = _unsigned(_int_arg(arg_iter), _arg_bits(flags))
            emit(_format_number(value, radix, width, precision, flags))
            in_spec = False
        elif ch == "c":
            value = _next_arg(arg_iter)
            if isinstance(value, str) and len(value) == 1:
                emit(value)
            elif isinstance(value, int):
                emit(chr(value & 0xFF))
            else:
                raise TypeError("%c requires an integer or a single character")
            in_spec = False
        elif ch == "s":
            value = _next_arg(arg_iter)
            if value is None:
                value = "(null)"
            elif not isinstance(value, str):
                raise TypeError(f"%s requires a string, got {type(value).__name__}")
            if flags & _Flag.HAS_PRECISION:
                value = value[:precision]
            pad = " " * (width - len(value)) if len(value) < width else ""
            emit(value + pad if flags & _Flag.LEFT_JUSTIFY else pad + value)
            in_spec = False
        elif ch == "p":
            value = _unsigned(_int_arg(arg_iter), _LONG_BITS)
            emit(_format_number(value, 16, width, precision, flags))
            in_spec = False
        elif ch == "n":
            sink: Callable[[int], Any] = _next_arg(arg_iter)
            if not callable(sink):
                raise TypeError("%n requires a callable")
            sink(produced)
            in_spec = False
        else:
            literal = True

        if literal:
            emit(ch)
            in_spec = False
        pos += 1

    return "".join(out)


def snprintf(size: int, fmt: str, *args: Any) -> tuple[str, int]:
    """Format into a buffer of ``size`` characters, terminator included.

    Returns the text that fits (at most ``size - 1`` characters) and the
    length the complete result would have had.
    """
    if size < 0:
        raise ValueError("size must not be negative")
    full = format_string(fmt, *args)
    if size == 0:
        return "", len(full)
    return full[: size - 1], len(full)