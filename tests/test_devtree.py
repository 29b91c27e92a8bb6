import pytest

from libos.devtree import (
    DeviceNode,
    dt_get_reg,
    get_addr_format,
    get_addr_format_nozero,
    get_stdout,
    xlate_one,
    xlate_reg,
    xlate_reg_raw,
)
from libos.errors import BadTreeError, NoTranslationError, NotFoundError

SOC_BASE = 0xFE000000
SOC_SIZE = 0x1000000
UART_OFFSET = 0x11C500


def build_tree():
    root = DeviceNode("", {"#address-cells": 2, "#size-cells": 2})
    soc = root.add_child(
        "soc@fe000000",
        {
            "#address-cells": 1,
            "#size-cells": 1,
            "ranges": [0, 0, SOC_BASE, SOC_SIZE],
        },
    )
    uart = soc.add_child(
        "serial@11c500", {"reg": [UART_OFFSET, 0x100, UART_OFFSET + 0x100, 0x80]}
    )
    root.add_child("chosen", {"linux,stdout-path": "/soc@fe000000/serial@11c500"})
    return root, soc, uart


def test_default_addr_format():
    assert get_addr_format(DeviceNode("x")) == (2, 1)


def test_explicit_addr_format():
    node = DeviceNode("x", {"#address-cells": 1, "#size-cells": 2})
    assert get_addr_format(node) == (1, 2)


def test_addr_format_from_bytes():
    node = DeviceNode("x", {"#address-cells": b"\x00\x00\x00\x01"})
    assert get_addr_format(node) == (1, 1)


@pytest.mark.parametrize(
    "props",
    [
        {"#address-cells": 5},
        {"#size-cells": 3},
        {"#address-cells": [1, 1]},
    ],
)
def test_bad_addr_format(props):
    with pytest.raises(BadTreeError):
        get_addr_format(DeviceNode("x", props))


def test_addr_format_nozero_rejects_zero():
    node = DeviceNode("x", {"#size-cells": 0})
    assert get_addr_format(node) == (2, 0)
    with pytest.raises(BadTreeError):
        get_addr_format_nozero(node)


def test_prop_cells_bytes_big_endian():
    node = DeviceNode("x", {"reg": b"\x00\x00\x00\x01\x00\x00\x00\x02"})
    assert node.prop_cells("reg") == [1, 2]


def test_prop_cells_bad_length_and_missing():
    node = DeviceNode("x", {"reg": b"\x00\x01"})
    with pytest.raises(BadTreeError):
        node.prop_cells("reg")
    with pytest.raises(NotFoundError):
        node.prop_cells("missing")


def test_find_paths():
    root, soc, uart = build_tree()
    assert root.find("/soc@fe000000/serial@11c500") is uart
    assert root.find("/soc/serial") is uart
    assert soc.find("serial@11c500") is uart
    assert uart.find("/soc@fe000000") is soc
    assert uart.path == "/soc@fe000000/serial@11c500"
    with pytest.raises(NotFoundError):
        root.find("/soc/nothing")


def test_get_stdout():
    root, _, uart = build_tree()
    assert get_stdout(root) is uart


def test_get_stdout_bytes_path():
    root, _, uart = build_tree()
    root.find("/chosen").properties["linux,stdout-path"] = b"/soc/serial\0"
    assert get_stdout(root) is uart


def test_get_stdout_missing_chosen_and_property():
    root = DeviceNode("")
    with pytest.raises(NotFoundError):
        get_stdout(root)
    root.add_child("chosen")
    with pytest.raises(NotFoundError):
        get_stdout(root)


def test_get_stdout_bad_path():
    root = DeviceNode("")
    root.add_child("chosen", {"linux,stdout-path": "/nowhere"})
    with pytest.raises(BadTreeError):
        get_stdout(root)


def test_dt_get_reg_translates_through_ranges():
    _, _, uart = build_tree()
    assert dt_get_reg(uart) == (SOC_BASE + UART_OFFSET, 0x100)
    assert dt_get_reg(uart, 1) == (SOC_BASE + UART_OFFSET + 0x100, 0x80)


def test_dt_get_reg_missing_entry():
    _, _, uart = build_tree()
    with pytest.raises(BadTreeError):
        dt_get_reg(uart, 2)


def test_dt_get_reg_without_ranges():
    _, soc, uart = build_tree()
    del soc.properties["ranges"]
    with pytest.raises(NoTranslationError):
        dt_get_reg(uart)


def test_empty_ranges_is_identity():
    _, soc, uart = build_tree()
    soc.properties["ranges"] = b""
    assert dt_get_reg(uart) == (UART_OFFSET, 0x100)


def test_dt_get_reg_outside_ranges():
    _, _, uart = build_tree()
    uart.properties["reg"] = [SOC_SIZE + 4, 0x10]
    with pytest.raises(NotFoundError):
        dt_get_reg(uart)


def test_dt_get_reg_zero_size_cells():
    root = DeviceNode("", {"#size-cells": 0})
    node = root.add_child("dev", {"reg": [0, 0x1000]})
    with pytest.raises(NoTranslationError):
        dt_get_reg(node)


def test_xlate_one_with_size():
    addr, size = xlate_one(0x100, [0, SOC_BASE, SOC_SIZE], 1, 1, 1, 1, True)
    assert addr == SOC_BASE + 0x100
    assert size == SOC_SIZE - 0x100


def test_xlate_one_without_size():
    addr, size = xlate_one(0x100, [0, SOC_BASE, SOC_SIZE], 1, 1, 1, 1)
    assert addr == SOC_BASE + 0x100
    assert size is None


def test_xlate_one_wrapping_range_rejected():
    with pytest.raises(NoTranslationError):
        xlate_one(0x10, [0, 0xF0000000, 0x20000000], 1, 1, 1, 1)


def test_xlate_one_not_found_and_bad_entry():
    with pytest.raises(NotFoundError):
        xlate_one(0x2000, [0, SOC_BASE, 0x1000], 1, 1, 1, 1)
    with pytest.raises(BadTreeError):
        xlate_one(0x10, [0, SOC_BASE], 1, 1, 1, 1)


def test_xlate_reg_raw_keeps_high_cells():
    root = DeviceNode("", {"#address-cells": 4, "#size-cells": 1})
    node = root.add_child("dev")
    addr, size = xlate_reg_raw(node, [1, 0, 0, 0x100, 0x20], 4, 1)
    assert addr == (1 << 96) | 0x100
    assert size == 0x20


def test_xlate_reg_rejects_addresses_above_64_bits():
    root = DeviceNode("", {"#address-cells": 4, "#size-cells": 1})
    node = root.add_child("dev")
    with pytest.raises(BadTreeError):
        xlate_reg(node, [1, 0, 0, 0x100, 0x20])


def test_xlate_reg_two_size_cells():
    root = DeviceNode("", {"#address-cells": 2, "#size-cells": 2})
    node = root.add_child("memory", {"reg": [0, 0x1000, 1, 0]})
    assert dt_get_reg(node) == (0x1000, 1 << 32)


def test_root_has_no_reg():
    root = DeviceNode("", {"reg": [0, 0, 0]})
    with pytest.raises(NotFoundError):
        dt_get_reg(root)