"""TLB page-size arithmetic and CPU capability description."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntFlag

TLB_TSIZE_4K = 2
TLB_TSIZE_8K = 3
TLB_TSIZE_16K = 4
TLB_TSIZE_64K = 6
TLB_TSIZE_1M = 10
TLB_TSIZE_4M = 12
TLB_TSIZE_16M = 14
TLB_TSIZE_256M = 18
TLB_TSIZE_1G = 20
TLB_TSIZE_4G = 22
TLB_TSIZE_1T = 30

_TSIZE_LIMIT = 31


class CpuFeature(IntFlag):
    """CPU features that can be queried."""

    MMUV2 = 1 << 0
    L2_CORE_LOCAL = 1 << 1
    THREADS = 1 << 2
    TLB0_HES = 1 << 3
    TLB1_IND = 1 << 4
    LRAT = 1 << 5
    ALTIVEC = 1 << 6
    PWRMGTCR0 = 1 << 7


@dataclass
class CpuCaps:
    """CPU capabilities: TLB and cache geometry plus a feature set."""

    tlb0_nentries: int = 0
    tlb0_assoc: int = 0
    tlb1_nentries: int = 0
    tlb1_assoc: int = 0
    valid_tsizes: int = 0
    lrat_nentries: int = 0
    l1_size: int = 0
    l1_blocksize: int = 0
    l1_nways: int = 0
    l2_size: int = 0
    l2_blocksize: int = 0
    l2_nways: int = 0
    threads_per_core: int = 1
    features: CpuFeature = CpuFeature(0)

    def has_feature(self, feature: CpuFeature) -> bool:
        """Return True if any of the given feature bits is supported."""
        return bool(self.features & feature)


def _ilog2(value: int) -> int:
    return value.bit_length() - 1


def _count_lsb_zeroes(value: int) -> int:
    return (value & -value).bit_length() - 1


def _count_msb_zeroes_32(value: int) -> int:
    return 32 - (value & 0xFFFFFFFF).bit_length()


def pages_to_tsize_msb(epn: int) -> int:
    """Return the TSIZE of the largest power of two not above ``epn`` pages."""
    if epn == 0:
        return 0
    return min(_ilog2(epn) + 2, _TSIZE_LIMIT)


def pages_to_tsize_lsb(epn: int) -> int:
    """Return the TSIZE matching the lowest set bit of ``epn``."""
    if epn == 0:
        return 0
    return min(_count_lsb_zeroes(epn) + 2, _TSIZE_LIMIT)


def max_valid_tsize(tsize: int, valid_tsizes: int) -> int:
    """Return the largest TSIZE in ``valid_tsizes`` not above ``tsize``.

    Bit n of ``valid_tsizes`` marks TSIZE n as supported.
    """
    if not TLB_TSIZE_4K <= tsize <= _TSIZE_LIMIT:
        raise ValueError(f"tsize out of range: {tsize}")
    shifted = (valid_tsizes << (_TSIZE_LIMIT - tsize)) & 0xFFFFFFFF
    return tsize - _count_msb_zeroes_32(shifted)


def natural_alignment(epn: int, valid_tsizes: int) -> int:
    """Return the largest valid TSIZE to which page number ``epn`` is aligned."""
    if epn != 0:
        return max_valid_tsize(pages_to_tsize_lsb(epn), valid_tsizes)
    return max_valid_tsize(TLB_TSIZE_1T, valid_tsizes)


def tsize_to_pages(tsize: int) -> int:
    """Return the number of 4K pages covered by ``tsize`` (0 for TSIZE 0)."""
    if tsize == 0:
        return 0
    if tsize < TLB_TSIZE_4K:
        raise ValueError(f"tsize below one page: {tsize}")
    return 1 << (tsize - 2)


def tsize_to_pages_roundup(tsize: int) -> int:
    """Like tsize_to_pages, but sizes below one page count as one page."""
    return 1 << (tsize - 2) if tsize > 1 else 1


def max_page_size(start: int, num: int, valid_tsizes: int) -> int:
    """Return the largest TSIZE usable to map ``num`` pages at page ``start``."""
    return min(
        natural_alignment(start, valid_tsizes),
        max_valid_tsize(pages_to_tsize_msb(num), valid_tsizes),
    )


def max_page_tsize(start: int, tsize: int, valid_tsizes: int) -> int:
    """Return the largest TSIZE up to ``tsize`` usable at page ``start``."""
    return min(natural_alignment(start, valid_tsizes), max_valid_tsize(tsize, valid_tsizes))