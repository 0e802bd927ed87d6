"""Scalefactor-band quantization, bandwidth limits and short-window grouping."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, MutableSequence, Sequence

from aaccore.huffman import Book, BlockType, CoderInfo, WindowGroups, choose_book

DEFQUAL = 100
MAXQUAL = 5000
MAXQUALADTS = MAXQUAL
MINQUAL = 10
SF_OFFSET = 100

BLOCK_LEN_SHORT = 128
BLOCK_LEN_LONG = 1024
MAX_SHORT_WINDOWS = 8

MAGIC_NUMBER = 0.4054
NOISEFLOOR = 0.4
NOISETONE = 0.2
MINSFB = 2

_SFSTEP = 1.0 / math.log10(math.sqrt(math.sqrt(2.0)))
_MASK_POWER = 0.4
_GROUP_THRESHOLD = 3.0
_SF_DIFF_LIMIT = 60
_INTENSITY_BOOKS = (int(Book.INTENSITY), int(Book.INTENSITY2))


@dataclass
class QuantConfig:
    """Quantizer settings and the band limits derived from the bandwidth."""

    quality: float = DEFQUAL
    max_cbl: int = 0
    max_cbs: int = 0
    max_l: int = 0
    pnslevel: int = 0


def _lines(xr: Sequence[float], base: int, gsize: int, start: int, end: int) -> Iterator[float]:
    """Yield the spectral lines ``start:end`` of every window in a group."""
    for win in range(gsize):
        offset = base + win * BLOCK_LEN_SHORT
        yield from xr[offset + start:offset + end]


def _bands(coder: CoderInfo) -> list[tuple[int, int]]:
    offsets = coder.sfb_offset
    return [(offsets[sfb], offsets[sfb + 1]) for sfb in range(coder.sfbn)]


def _band_mask(coder: CoderInfo, xr: Sequence[float], base: int, gsize: int,
               quality: float) -> list[float]:
    """Return the target quality level of each band of a window group."""
    bands = _bands(coder)
    totenrg = 0.0
    count = 0
    for start, end in bands:
        for x in _lines(xr, base, gsize, start, end):
            totenrg += x * x
            count += 1

    if totenrg < (NOISEFLOOR * NOISEFLOOR) * float(count):
        return [0.0] * coder.sfbn

    short = coder.block_type == BlockType.ONLY_SHORT_WINDOW
    last = BLOCK_LEN_SHORT if short else BLOCK_LEN_LONG
    levels = []
    for start, end in bands:
        avge = 0.0
        maxe = 0.0
        for x in _lines(xr, base, gsize, start, end):
            e = x * x
            avge += e
            maxe = max(maxe, e)
        maxe *= gsize

        avgenrg = totenrg / last * (end - start)
        target = NOISETONE * (avge / avgenrg) ** _MASK_POWER
        target += (1.0 - NOISETONE) * 0.45 * (maxe / avgenrg) ** _MASK_POWER
        if short:
            target *= 1.5
        target *= 10.0 / (1.0 + (start + end) / last)
        levels.append(target * quality)
    return levels


def _reserve(coder: CoderInfo, index: int) -> None:
    if index >= len(coder.book):
        coder.book.extend([int(Book.NONE)] * (index + 1 - len(coder.book)))
    if index >= len(coder.sf):
        coder.sf.extend([0] * (index + 1 - len(coder.sf)))


def _quantize_line(x: float, sfacfix: float) -> int:
    tmp = abs(x) * sfacfix
    tmp = math.sqrt(tmp * math.sqrt(tmp))
    q = int(tmp + MAGIC_NUMBER)
    return -q if x < 0 else q


def _quantize_group(coder: CoderInfo, xr: Sequence[float], base: int, gsize: int,
                    bandqual: Sequence[float], pnslevel: int) -> None:
    """Quantize and Huffman-code the bands of one window group."""
    pnsthr = 0.1 * pnslevel
    for sb, (start, end) in enumerate(_bands(coder)):
        index = coder.bandcnt
        _reserve(coder, index)
        if coder.book[index] != Book.NONE:
            coder.bandcnt += 1
            continue

        etot = sum(x * x for x in _lines(xr, base, gsize, start, end)) / float(gsize)
        rmsx = math.sqrt(etot / (end - start))

        if rmsx < NOISEFLOOR or not bandqual[sb]:
            coder.book[index] = int(Book.ZERO)
            coder.bandcnt += 1
            continue

        if bandqual[sb] < pnsthr:
            coder.book[index] = int(Book.PNS)
            coder.sf[index] += round(math.log10(etot) * (0.5 * _SFSTEP))
            coder.bandcnt += 1
            continue

        sfac = round(math.log10(bandqual[sb] / rmsx) * _SFSTEP)
        sfacfix = 0.0 if SF_OFFSET - sfac < 10 else 10.0 ** (sfac / _SFSTEP)

        quantized = [_quantize_line(x, sfacfix) for x in _lines(xr, base, gsize, start, end)]
        choose_book(coder, quantized)
        coder.sf[index] += SF_OFFSET - sfac
        coder.bandcnt += 1


def _clamp(diff: int) -> int:
    return max(-_SF_DIFF_LIMIT, min(_SF_DIFF_LIMIT, diff))


def quantize_block(coder: CoderInfo, xr: Sequence[float], cfg: QuantConfig) -> None:
    """Quantize the spectrum ``xr`` of one block into ``coder``, in place.

    Bands whose book is already set (not ``Book.NONE``) are left alone.
    """
    coder.global_gain = 0
    coder.bandcnt = 0
    coder.data.clear()

    base = 0
    for gsize in coder.groups.lengths:
        levels = _band_mask(coder, xr, base, gsize, float(cfg.quality) / DEFQUAL)
        _quantize_group(coder, xr, base, gsize, levels, cfg.pnslevel)
        base += gsize * BLOCK_LEN_SHORT

    used = list(zip(coder.book[:coder.bandcnt], coder.sf))
    coder.global_gain = next(
        (sf for book, sf in used if book and book not in _INTENSITY_BOOKS), 0
    )

    last_sf = coder.global_gain
    last_is = 0
    for index, book in enumerate(coder.book[:coder.bandcnt]):
        if book in _INTENSITY_BOOKS:
            last_is += _clamp(coder.sf[index] - last_is)
            coder.sf[index] = last_is
        elif book == Book.ESC:
            last_sf += _clamp(coder.sf[index] - last_sf)
            coder.sf[index] = last_sf


def _bands_below(limit: int, widths: Sequence[int]) -> tuple[int, int]:
    """Return how many bands are needed to reach ``limit`` lines, and their line count."""
    lines = 0
    for count, width in enumerate(widths):
        if lines >= limit:
            return count, lines
        lines += width
    return len(widths), lines


def calc_bandwidth(bandwidth: int, rate: int, cb_width_short: Sequence[int],
                   cb_width_long: Sequence[int], cfg: QuantConfig) -> int:
    """Set the band limits in ``cfg`` for ``bandwidth`` Hz and return the effective bandwidth."""
    if rate <= 0:
        raise ValueError(f"sample rate must be positive, got {rate}")
    if bandwidth < 0:
        raise ValueError(f"bandwidth must not be negative, got {bandwidth}")

    short_span = BLOCK_LEN_SHORT * 2
    count, lines = _bands_below(bandwidth * short_span // rate, cb_width_short)
    cfg.max_cbs = count
    if cfg.pnslevel:
        bandwidth = int(float(lines) * rate / short_span)

    long_span = BLOCK_LEN_LONG * 2
    count, lines = _bands_below(bandwidth * long_span // rate, cb_width_long)
    cfg.max_cbl = count
    cfg.max_l = lines
    return int(float(lines) * rate / long_span)


def _band_energies(xr: MutableSequence[float], offset: int, bands: Sequence[int],
                   maxsfb: int, maxl: int) -> list[float]:
    """Mute one window's lines above the cutoff and return its band energies."""
    for line in range(maxl, bands[maxsfb]):
        xr[offset + line] = 0.0
    return [
        sum(x * x for x in xr[offset + bands[sfb]:offset + bands[sfb + 1]])
        for sfb in range(MINSFB, maxsfb)
    ]


def group_windows(xr: MutableSequence[float], coder: CoderInfo, cfg: QuantConfig) -> None:
    """Group the short windows of a block whose band energies stay similar.

    Lines above the cutoff are muted in ``xr``. Long blocks get a single group.
    """
    if coder.block_type != BlockType.ONLY_SHORT_WINDOW:
        coder.groups = WindowGroups([1])
        return

    maxl = cfg.max_l // 8
    maxsfb = cfg.max_cbs
    fastmin = ((maxsfb - MINSFB) * 3) >> 2
    bands = coder.sfb_offset

    energies = _band_energies(xr, 0, bands, maxsfb, maxl)
    lows = list(energies)
    highs = list(energies)
    lengths: list[int] = []
    win0 = 0
    for win in range(1, MAX_SHORT_WINDOWS):
        energies = _band_energies(xr, win * BLOCK_LEN_SHORT, bands, maxsfb, maxl)
        fast = 0
        for i, e in enumerate(energies):
            lows[i] = min(lows[i], e)
            highs[i] = max(highs[i], e)
            if highs[i] > _GROUP_THRESHOLD * lows[i]:
                fast += 1
        if fast > fastmin:
            lengths.append(win - win0)
            win0 = win
            lows = list(energies)
            highs = list(energies)
    lengths.append(MAX_SHORT_WINDOWS - win0)
    coder.groups = WindowGroups(lengths)