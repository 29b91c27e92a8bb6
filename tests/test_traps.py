import pytest

from libos.traps import MSR_GS, MSR_PR, TrapFrame, Vector, dump_regs, trap_name, traceback


def _memory_reader(mem):
    return lambda address: mem.get(address, 0)


def _frame(**kwargs):
    regs = [0] * 32
    regs[1] = 0x100
    return TrapFrame(gpregs=regs, **kwargs)


_CHAIN = {
    0x100: 0x200,
    0x200: 0x300,
    0x204: 0x1004,
    0x300: 0,
    0x304: 0x2004,
}


def test_known_names():
    assert trap_name(Vector.DSI) == "data storage interrupt"
    assert trap_name(Vector.DECR) == "decrementer"
    assert trap_name(Vector.DOORBELLC) == "doorbell critical"


def test_unlisted_vector_is_unknown():
    assert trap_name(Vector.FPUNAVAIL) == "unknown"
    assert trap_name(200) == "unknown"


def test_hypervisor_names_only_with_hypervisor():
    assert trap_name(Vector.HCALL) == "unknown"
    assert trap_name(Vector.HCALL, True) == "hcall"
    assert trap_name(Vector.LRAT, True) == "lrat miss"


def test_frame_requires_32_registers():
    with pytest.raises(ValueError):
        TrapFrame(gpregs=[0] * 31)


def test_traceback_follows_chain():
    text = traceback(_frame(), _memory_reader(_CHAIN))
    assert "Traceback: " in text
    entries = text.split("Traceback: ")[1].split()
    assert entries == ["0x00001000", "0x00002000"]
    assert text.endswith("\n")


def test_traceback_empty_chain():
    text = traceback(_frame(), _memory_reader({}))
    assert text.split("Traceback: ")[1] == "\n"


def test_dump_regs_layout():
    frame = _frame(exc=Vector.PROGRAM, srr0=0x1000)
    text = dump_regs(frame, read_word=_memory_reader(_CHAIN))
    lines = text.splitlines()
    assert lines[0] == "program"
    assert lines[1].startswith("NIP 0x00001000 ")
    reg_lines = [line for line in lines if line.startswith("r")]
    assert len(reg_lines) == 8
    assert reg_lines[0].startswith("r00 ")
    assert "r31 " in reg_lines[-1]
    assert "Traceback: " in text


def test_dump_regs_user_mode_skips_traceback():
    frame = _frame(exc=Vector.DSI, srr1=MSR_PR)
    text = dump_regs(frame, read_word=_memory_reader(_CHAIN))
    assert "Traceback" not in text


def test_dump_regs_guest_state_only_matters_in_hypervisor():
    frame = _frame(exc=Vector.DSI, srr1=MSR_GS)
    reader = _memory_reader(_CHAIN)
    assert "Traceback" in dump_regs(frame, read_word=reader)
    assert "Traceback" not in dump_regs(frame, read_word=reader, hypervisor=True)