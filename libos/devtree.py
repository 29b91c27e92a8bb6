"""Device tree nodes and translation of "reg" addresses to CPU addresses.

Only generic buses without special address encodings are supported; in
particular PCI is not.  Addresses are handled as integers of up to four
32-bit cells, and only the start of a reg block is translated: a reg block
is assumed to fit in a range if its first byte does.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence, Union

from .errors import BadTreeError, NoTranslationError, NotFoundError

MAX_ADDR_CELLS = 4
MAX_SIZE_CELLS = 2
CELL_SIZE = 4

DEFAULT_ADDR_CELLS = 2
DEFAULT_SIZE_CELLS = 1

_CELL_MASK = 0xFFFFFFFF
_FULL_BITS = 32 * MAX_ADDR_CELLS

PropertyValue = Union[bytes, bytearray, str, int, Sequence[int]]


@dataclass(eq=False)
class DeviceNode:
    """A device tree node with named properties and child nodes.

    Property values may be raw big-endian bytes, a string, a single cell
    or a sequence of 32-bit cells.
    """

    name: str = ""
    properties: dict[str, PropertyValue] = field(default_factory=dict)
    parent: Optional["DeviceNode"] = field(default=None, repr=False)
    children: list["DeviceNode"] = field(default_factory=list, repr=False)

    def add_child(
        self, name: str, properties: Optional[dict[str, PropertyValue]] = None
    ) -> "DeviceNode":
        """Create, attach and return a child node."""
        child = DeviceNode(name, dict(properties or {}), parent=self)
        self.children.append(child)
        return child

    @property
    def root(self) -> "DeviceNode":
        node = self
        while node.parent is not None:
            node = node.parent
        return node

    @property
    def path(self) -> str:
        names = []
        node = self
        while node.parent is not None:
            names.append(node.name)
            node = node.parent
        return "/" + "/".join(reversed(names))

    def find(self, path: str) -> "DeviceNode":
        """Look up a node by path; absolute paths start at the root.

        A component without a unit address also matches a node name that
        has one.  Raises NotFoundError if no node matches.
        """
        node = self.root if path.startswith("/") else self
        for component in filter(None, path.split("/")):
            node = _matching_child(node, component, path)
        return node

    def prop_cells(self, name: str) -> list[int]:
        """Return a property as a list of 32-bit cells.

        Raises NotFoundError if the property is missing and BadTreeError
        if its length is not a whole number of cells.
        """
        try:
            value = self.properties[name]
        except KeyError:
            raise NotFoundError(f"{self.path}: no property {name!r}") from None
        return _cells_of(value, name)


def _matching_child(node: DeviceNode, component: str, path: str) -> DeviceNode:
    for child in node.children:
        if child.name == component:
            return child
    if "@" not in component:
        for child in node.children:
            if child.name.split("@", 1)[0] == component:
                return child
    raise NotFoundError(f"no node at {path!r}")


def _cells_of(value: PropertyValue, name: str) -> list[int]:
    if isinstance(value, str):
        value = value.encode() + b"\0"
    if isinstance(value, (bytes, bytearray)):
        if len(value) % CELL_SIZE:
            raise BadTreeError(f"property {name!r} is not a whole number of cells")
        return [
            int.from_bytes(value[i : i + CELL_SIZE], "big")
            for i in range(0, len(value), CELL_SIZE)
        ]
    cells = [value] if isinstance(value, int) else list(value)
    for cell in cells:
        if not 0 <= cell <= _CELL_MASK:
            raise ValueError(f"property {name!r}: cell out of range: {cell}")
    return cells


def _prop_text(node: DeviceNode, name: str) -> str:
    try:
        value = node.properties[name]
    except KeyError:
        raise NotFoundError(f"{node.path}: no property {name!r}") from None
    if isinstance(value, (bytes, bytearray)):
        value = bytes(value).split(b"\0", 1)[0].decode("latin-1")
    if not isinstance(value, str):
        raise BadTreeError(f"{node.path}: property {name!r} is not a string")
    return value.split("\0", 1)[0]


def _value(cells: Iterable[int]) -> int:
    result = 0
    for cell in cells:
        result = (result << 32) | (cell & _CELL_MASK)
    return result


def _add_cells(value: int, add: int, ncells: int) -> Optional[int]:
    """Add within the low ``ncells`` cells; None if it carries out."""
    mask = (1 << (32 * ncells)) - 1
    total = (value & mask) + (add & mask)
    if total > mask:
        return None
    return (value & ~mask) | total


def _read_cells(node: DeviceNode, name: str, default: int) -> int:
    if name not in node.properties:
        return default
    cells = node.prop_cells(name)
    limit = MAX_ADDR_CELLS if name == "#address-cells" else MAX_SIZE_CELLS
    if len(cells) != 1 or cells[0] > limit:
        raise BadTreeError(f"{node.path}: bad {name} {cells}")
    return cells[0]


def get_addr_format(node: DeviceNode) -> tuple[int, int]:
    """Return the (#address-cells, #size-cells) that ``node`` gives its children."""
    naddr = _read_cells(node, "#address-cells", DEFAULT_ADDR_CELLS)
    nsize = _read_cells(node, "#size-cells", DEFAULT_SIZE_CELLS)
    return naddr, nsize


def get_addr_format_nozero(node: DeviceNode) -> tuple[int, int]:
    """Like get_addr_format, but zero address or size cells are an error."""
    naddr, nsize = get_addr_format(node)
    if naddr == 0 or nsize == 0:
        raise BadTreeError(f"{node.path}: bad addr/size cells {naddr}/{nsize}")
    return naddr, nsize


def _in_range(reg: int, start: int, size: int) -> bool:
    if reg < start:
        return False
    end = start + size
    # A size that carries off the last cell puts the end beyond any reg.
    if end >> _FULL_BITS:
        return True
    return reg < end


def _find_range(
    reg: int, ranges: Sequence[int], nregaddr: int, naddr: int, nsize: int
) -> Optional[int]:
    nrange = nregaddr + naddr + nsize
    if nrange <= 0:
        raise BadTreeError("empty ranges entry")
    for offset in range(0, len(ranges), nrange):
        if offset + nrange > len(ranges):
            raise BadTreeError("truncated ranges entry")
        start = _value(ranges[offset : offset + nregaddr])
        size_at = offset + nregaddr + naddr
        size = _value(ranges[size_at : size_at + nsize])
        if _in_range(reg, start, size):
            return offset
    return None


def xlate_one(
    addr: int,
    ranges: Sequence[int],
    naddr: int,
    nsize: int,
    prev_naddr: int,
    prev_nsize: int,
    want_size: bool = False,
) -> tuple[int, Optional[int]]:
    """Translate ``addr`` one bus level up through a "ranges" property.

    ``prev_naddr``/``prev_nsize`` describe the child bus and ``naddr``/
    ``nsize`` the parent bus.  Returns the translated address and, with
    ``want_size``, the size left in the matching range from ``addr`` on.
    """
    offset = _find_range(addr, ranges, prev_naddr, naddr, prev_nsize)
    if offset is None:
        raise NotFoundError(f"address {addr:#x} is not in any range")

    entry = ranges[offset:]
    child_base = _value(entry[:prev_naddr])
    parent_cells = entry[prev_naddr : prev_naddr + naddr]
    size_cells = entry[prev_naddr + naddr : prev_naddr + naddr + prev_nsize]

    addr -= child_base
    if addr < 0:
        raise BadTreeError("address below range start")

    rangesize = None
    if want_size:
        left = _value(size_cells) - addr
        if left < 0:
            raise BadTreeError("address beyond range size")
        rangesize = left & ((1 << 64) - 1)

    parent_base = _value(parent_cells)
    translated = _add_cells(addr, parent_base, naddr)
    if translated is None:
        raise BadTreeError("translated address overflows")

    # Ranges that wrap around the address space act as blacklist entries.
    span = _value(entry[prev_naddr + naddr : prev_naddr + naddr + nsize])
    if _add_cells(parent_base, span, naddr) is None:
        raise NoTranslationError("range wraps around the address space")

    return translated, rangesize


def _reg_size(reg: Sequence[int], naddr: int, nsize: int) -> int:
    if len(reg) < naddr + max(nsize, 1):
        raise BadTreeError("reg entry too short")
    if nsize == 2:
        return (reg[naddr] << 32) | reg[naddr + 1]
    return reg[naddr]


def xlate_reg_raw(
    node: DeviceNode, reg: Sequence[int], naddr: int, nsize: int
) -> tuple[int, int]:
    """Translate a reg entry of ``node`` through every parent bus.

    Returns the full (up to 128-bit) address and the entry's size.
    """
    parent = node.parent
    if parent is None:
        raise NotFoundError("the root node has no reg translation")

    addr = _value(reg[:naddr])
    size = _reg_size(reg, naddr, nsize)

    while True:
        prev_naddr, prev_nsize = naddr, nsize
        node = parent
        parent = node.parent
        if parent is None:
            break

        naddr, nsize = get_addr_format(parent)

        if "ranges" not in node.properties:
            raise NoTranslationError(f"{node.path}: no ranges property")
        ranges = node.prop_cells("ranges")
        if not ranges:
            continue

        addr, _ = xlate_one(addr, ranges, naddr, nsize, prev_naddr, prev_nsize)

    return addr, size


def xlate_reg(node: DeviceNode, reg: Sequence[int]) -> tuple[int, int]:
    """Translate a reg entry to a 64-bit CPU address; returns (address, size)."""
    parent = node.parent
    if parent is None:
        raise NotFoundError("the root node has no reg translation")
    naddr, nsize = get_addr_format(parent)
    addr, size = xlate_reg_raw(node, reg, naddr, nsize)
    if addr >> 64:
        raise BadTreeError(f"address {addr:#x} does not fit in 64 bits")
    return addr, size


def dt_get_reg(node: DeviceNode, index: int = 0) -> tuple[int, int]:
    """Return the CPU address and size of reg entry ``index`` of ``node``."""
    reg = node.prop_cells("reg")
    parent = node.parent
    if parent is None:
        raise NotFoundError("the root node has no reg translation")
    naddr, nsize = get_addr_format(parent)
    if naddr == 0 or nsize == 0:
        raise NoTranslationError(f"{parent.path}: no address translation")
    stride = naddr + nsize
    if len(reg) < stride * (index + 1):
        raise BadTreeError(f"{node.path}: reg has no entry {index}")
    return xlate_reg(node, reg[stride * index :])


def get_stdout(root: DeviceNode) -> DeviceNode:
    """Return the node named by /chosen's linux,stdout-path."""
    chosen = _matching_child(root, "chosen", "/chosen")
    path = _prop_text(chosen, "linux,stdout-path")
    try:
        return root.find(path)
    except NotFoundError:
        raise BadTreeError(f"stdout path {path!r} does not exist") from None