"""String and memory search and comparison helpers with the library's rules.

Text arguments are treated like NUL-terminated strings: anything from the
first ``"\\0"`` onward is ignored.
"""

from __future__ import annotations

from .errors import InvalidError, OutOfRangeError

_ULLONG_MAX = (1 << 64) - 1
_LLONG_MAX = (1 << 63) - 1


def _terminated(s: str) -> str:
    nul = s.find("\0")
    return s if nul < 0 else s[:nul]


def _digit_value(c: str, base: int) -> int | None:
    if "0" <= c <= "9":
        value = ord(c) - ord("0")
    elif "a" <= c <= "z":
        value = ord(c) - ord("a") + 10
    elif "A" <= c <= "Z":
        value = ord(c) - ord("A") + 10
    else:
        return None
    return value if value < base else None


def strtoull(text: str, base: int) -> tuple[int, int]:
    """Parse an unsigned 64-bit number at the start of ``text``.

    Leading whitespace is not skipped.  Returns the value and the index of
    the first character not consumed.  Raises InvalidError when no digit is
    found and OutOfRangeError when the value does not fit in 64 bits.
    """
    if not 2 <= base <= 36:
        raise ValueError(f"base must be between 2 and 36, got {base}")
    text = _terminated(text)
    value = 0
    end = 0
    for c in text:
        digit = _digit_value(c, base)
        if digit is None:
            break
        value = value * base + digit
        if value > _ULLONG_MAX:
            raise OutOfRangeError(f"value does not fit in 64 bits: {text!r}")
        end += 1
    if end == 0:
        raise InvalidError(f"no digits to parse in {text!r}")
    return value, end


def strtoll(text: str, base: int) -> tuple[int, int]:
    """Parse a signed 64-bit number, with an optional leading ``-``.

    Returns the value and the index of the first character not consumed.
    """
    negative = text.startswith("-")
    offset = 1 if negative else 0
    magnitude, end = strtoull(text[offset:], base)
    if negative:
        if magnitude > _LLONG_MAX + 1:
            raise OutOfRangeError(f"value does not fit in a signed 64-bit integer: {text!r}")
        return -magnitude, end + offset
    if magnitude > _LLONG_MAX:
        raise OutOfRangeError(f"value does not fit in a signed 64-bit integer: {text!r}")
    return magnitude, end


def strstr(haystack: str, needle: str) -> int | None:
    """Return the index of the first occurrence of ``needle``, or None.

    An empty needle matches at index 0.
    """
    haystack = _terminated(haystack)
    needle = _terminated(needle)
    index = haystack.find(needle)
    return index if index >= 0 else None


def strcmp(s1: str, s2: str) -> int:
    """Compare two strings.

    Returns zero when equal, otherwise the difference ``s2[i] - s1[i]`` at
    the first differing position (a missing character counts as 0), so the
    result is positive when ``s1`` sorts first.
    """
    return strncmp(s1, s2, max(len(s1), len(s2)) + 1)


def strncmp(s1: str, s2: str, n: int) -> int:
    """Compare at most ``n`` characters; same sign convention as strcmp."""
    s1 = _terminated(s1)
    s2 = _terminated(s2)
    for i in range(n):
        a = ord(s1[i]) if i < len(s1) else 0
        b = ord(s2[i]) if i < len(s2) else 0
        if a != b or a == 0:
            return b - a
    return 0


def strnlen(s: str, n: int) -> int:
    """Return the length of ``s`` up to its terminator, but at most ``n``."""
    return min(len(_terminated(s)), max(n, 0))


def memchr(data: bytes, c: int, length: int) -> int | None:
    """Find byte ``c`` among the first ``length`` bytes of ``data``.

    The search also stops at the first zero byte.  Returns the index found,
    or None.
    """
    target = c & 0xFF
    for index, byte in enumerate(data[: max(length, 0)]):
        if byte == target:
            return index
        if byte == 0:
            return None
    return None


def memrchr(data: bytes, c: int, length: int) -> int | None:
    """Find byte ``c`` searching backwards from ``data[length - 1]``.

    The search also stops at the first zero byte met.  Returns the index
    found, or None.
    """
    target = c & 0xFF
    for index in reversed(range(min(max(length, 0), len(data)))):
        byte = data[index]
        if byte == target:
            return index
        if byte == 0:
            return None
    return None