"""Library error codes and the exceptions that carry them."""

from __future__ import annotations

from enum import IntEnum


class ErrorCode(IntEnum):
    """Numeric library error codes; they start at -256."""

    BADTREE = -256
    NOMEM = -257
    NOTRANS = -258
    BUSY = -259
    INVALID = -260
    BADIMAGE = -261
    BADADDR = -262
    RANGE = -263
    UNHANDLED = -264
    NOTFOUND = -265
    WOULDBLOCK = -266
    UNKNOWN = -267
    HARDWARE = -268
    NORESOURCE = -269


class LibosError(Exception):
    """Base class of all library errors."""

    code: ErrorCode = ErrorCode.UNKNOWN
    description = "library error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message if message is not None else self.description)


class BadTreeError(LibosError):
    """Semantic error in device tree."""

    code = ErrorCode.BADTREE
    description = "semantic error in device tree"


class NoMemoryError(LibosError):
    """Out of memory."""

    code = ErrorCode.NOMEM
    description = "out of memory"


class NoTranslationError(LibosError):
    """No translation possible."""

    code = ErrorCode.NOTRANS
    description = "no translation possible"


class BusyError(LibosError):
    """Resource busy."""

    code = ErrorCode.BUSY
    description = "resource busy"


class InvalidError(LibosError):
    """Invalid request or argument."""

    code = ErrorCode.INVALID
    description = "invalid request or argument"


class BadImageError(LibosError):
    """Data image is invalid or broken."""

    code = ErrorCode.BADIMAGE
    description = "data image is invalid or broken"


class BadAddressError(LibosError):
    """Bad pointer or address."""

    code = ErrorCode.BADADDR
    description = "bad pointer or address"


class OutOfRangeError(LibosError):
    """Value out of range."""

    code = ErrorCode.RANGE
    description = "value out of range"


class UnhandledError(LibosError):
    """Operation not handled."""

    code = ErrorCode.UNHANDLED
    description = "operation not handled"


class NotFoundError(LibosError):
    """Item not found."""

    code = ErrorCode.NOTFOUND
    description = "item not found"


class WouldBlockError(LibosError):
    """Operation would block; try again."""

    code = ErrorCode.WOULDBLOCK
    description = "operation would block; try again"


class UnknownError(LibosError):
    """Unknown failure."""

    code = ErrorCode.UNKNOWN
    description = "unknown failure"


class HardwareError(LibosError):
    """Hardware error."""

    code = ErrorCode.HARDWARE
    description = "hardware error"


class NoResourceError(LibosError):
    """Out of non-memory resource."""

    code = ErrorCode.NORESOURCE
    description = "out of non-memory resource"


_BY_CODE: dict[ErrorCode, type[LibosError]] = {
    cls.code: cls
    for cls in (
        BadTreeError,
        NoMemoryError,
        NoTranslationError,
        BusyError,
        InvalidError,
        BadImageError,
        BadAddressError,
        OutOfRangeError,
        UnhandledError,
        NotFoundError,
        WouldBlockError,
        UnknownError,
        HardwareError,
        NoResourceError,
    )
}


def error_for_code(code: int) -> LibosError:
    """Return an exception instance for a numeric error code.

    Raises ValueError if the code is not a library error code.
    """
    try:
        key = ErrorCode(code)
    except ValueError:
        raise ValueError(f"not a library error code: {code}") from None
    return _BY_CODE[key]()