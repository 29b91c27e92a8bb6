"""Exception vectors, trap names and register dumps for Book E cores."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Callable, Optional

from .formatting import format_string

WORD_MASK = 0xFFFFFFFF
WORD_SIZE = 4

MSR_PR = 0x00004000
MSR_GS = 0x10000000

ReadWord = Callable[[int], int]


class Vector(IntEnum):
    """Interrupt vector offsets (IVOR numbers)."""

    CRIT_INT = 0
    MCHECK = 1
    DSI = 2
    ISI = 3
    EXT_INT = 4
    ALIGN = 5
    PROGRAM = 6
    FPUNAVAIL = 7
    SYSCALL = 8
    AUXUNAVAIL = 9
    DECR = 10
    FIT = 11
    WDOG = 12
    DTLB = 13
    ITLB = 14
    DEBUG = 15
    ALTIVECUNAVAIL = 32
    ALTIVECASSIST = 33
    PERFMON = 35
    DOORBELL = 36
    DOORBELLC = 37
    GDOORBELL = 38
    GDOORBELLC = 39
    HCALL = 40
    EHPRIV = 41
    LRAT = 42
    LAST = 255


_NAMES: dict[int, str] = {
    Vector.CRIT_INT: "critical input",
    Vector.MCHECK: "machine check",
    Vector.DSI: "data storage interrupt",
    Vector.ISI: "instruction storage interrupt",
    Vector.EXT_INT: "external interrupt",
    Vector.ALIGN: "alignment",
    Vector.PROGRAM: "program",
    Vector.SYSCALL: "system call",
    Vector.DECR: "decrementer",
    Vector.FIT: "fixed-interval timer",
    Vector.WDOG: "watchdog timer",
    Vector.DTLB: "data tlb miss",
    Vector.ITLB: "instruction tlb miss",
    Vector.DEBUG: "debug",
    Vector.PERFMON: "performance monitoring",
    Vector.ALTIVECUNAVAIL: "altivec unavailable",
    Vector.ALTIVECASSIST: "altivec assist",
    Vector.DOORBELL: "doorbell",
    Vector.DOORBELLC: "doorbell critical",
}

_HYPERVISOR_NAMES: dict[int, str] = {
    Vector.GDOORBELL: "guest doorbell",
    Vector.GDOORBELLC: "guest doorbell critical",
    Vector.HCALL: "hcall",
    Vector.EHPRIV: "ehpriv",
    Vector.LRAT: "lrat miss",
}


@dataclass
class TrapFrame:
    """Register state saved when an exception was taken."""

    gpregs: list[int] = field(default_factory=lambda: [0] * 32)
    srr0: int = 0
    srr1: int = 0
    lr: int = 0
    ctr: int = 0
    cr: int = 0
    xer: int = 0
    exc: int = 0
    traplevel: int = 0

    def __post_init__(self) -> None:
        if len(self.gpregs) != 32:
            raise ValueError(f"expected 32 general purpose registers, got {len(self.gpregs)}")


def trap_name(vector: int, hypervisor: bool = False) -> str:
    """Return the human-readable name of an exception vector."""
    name = _NAMES.get(vector)
    if name is None and hypervisor:
        name = _HYPERVISOR_NAMES.get(vector)
    return name if name is not None else "unknown"


def _word(read_word: ReadWord, address: int) -> int:
    return read_word(address & WORD_MASK) & WORD_MASK


def traceback(frame: TrapFrame, read_word: ReadWord) -> str:
    """Walk the stack back chain starting at r1 and describe it.

    ``read_word`` returns the word stored at an address.
    """
    sp = frame.gpregs[1] & WORD_MASK
    out = [
        format_string(
            "sp %p %lx %lx %lx %lx\n",
            sp,
            *(_word(read_word, sp + WORD_SIZE * i) for i in range(4)),
        ),
        "Traceback: ",
    ]

    sp = _word(read_word, sp)
    depth = 1
    while sp != 0:
        if depth % 7 == 0:
            out.append("\n")
        ret = (_word(read_word, sp + WORD_SIZE) - 4) & WORD_MASK
        out.append(format_string("0x%08lx ", ret))
        sp = _word(read_word, sp)
        depth += 1

    out.append("\n")
    return "".join(out)


def dump_regs(
    frame: TrapFrame,
    esr: int = 0,
    dear: int = 0,
    pir: int = 0,
    read_word: Optional[ReadWord] = None,
    hypervisor: bool = False,
) -> str:
    """Describe the saved registers, with a stack traceback for kernel traps.

    The traceback is included only when the trap came from supervisor
    (and, with ``hypervisor``, non-guest) state and ``read_word`` is given.
    """
    out = [format_string("%s\n", trap_name(frame.exc, hypervisor))]
    out.append(
        format_string(
            "NIP 0x%08lx MSR 0x%08lx LR 0x%08lx ESR 0x%08lx EXC %d\n"
            "CTR 0x%08lx CR 0x%08x XER 0x%08x DEAR 0x%08lx PIR %lu\n"
            "Prev trap level %d\n",
            frame.srr0,
            frame.srr1,
            frame.lr,
            esr,
            frame.exc,
            frame.ctr,
            frame.cr,
            frame.xer,
            dear,
            pir,
            frame.traplevel,
        )
    )

    for index, value in enumerate(frame.gpregs):
        out.append(format_string("r%02d 0x%08lx  ", index, value))
        if index & 3 == 3:
            out.append("\n")

    user_bits = MSR_GS | MSR_PR if hypervisor else MSR_PR
    if not frame.srr1 & user_bits and read_word is not None:
        out.append(traceback(frame, read_word))

    return "".join(out)