"""Joint stereo coding: mid/side and intensity stereo decisions per scalefactor band."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field
from typing import MutableSequence, Sequence

from aaccore.huffman import Book, BlockType, CoderInfo
from aaccore.quantize import BLOCK_LEN_SHORT

_THR075 = 1.09 - 1.0  # ~0.75 dB
_THRMAX = 1.25 - 1.0  # ~2 dB
_SIDEMIN = 0.1  # -20 dB
_SIDEMAX = 0.3  # ~-10.5 dB
_ISTHRMAX = math.sqrt(2.0) - 1.0
_IS_STEP = 10 / 1.50515
_PAN_LIMIT = 30


class StereoMode(enum.IntEnum):
    """Joint stereo coding mode."""

    NONE = 0
    JOINT_MS = 1
    JOINT_IS = 2


@dataclass
class MSInfo:
    """Mid/side flags of a channel."""

    is_present: bool = False
    ms_used: list[int] = field(default_factory=list)


@dataclass
class ChannelInfo:
    """How a channel is paired with another one."""

    present: bool = True
    cpe: bool = False
    ch_is_left: bool = False
    paired_ch: int = 0
    common_window: bool = False
    ms_info: MSInfo = field(default_factory=MSInfo)


def _store(items: list, index: int, value, fill) -> None:
    if index >= len(items):
        items.extend([fill] * (index + 1 - len(items)))
    items[index] = value


def _positions(wstart: int, wend: int, start: int, end: int) -> list[int]:
    return [
        win * BLOCK_LEN_SHORT + line
        for win in range(wstart, wend)
        for line in range(start, end)
    ]


def _first_band(coder: CoderInfo) -> int:
    return 1 if coder.block_type == BlockType.ONLY_SHORT_WINDOW else 8


def _energies(sl: Sequence[float], sr: Sequence[float], positions: list[int],
              scale: float) -> tuple[float, float, float, float]:
    enrgs = enrgd = enrgl = enrgr = 0.0
    for i in positions:
        lx, rx = sl[i], sr[i]
        total = scale * (lx + rx)
        diff = scale * (lx - rx)
        enrgs += total * total
        enrgd += diff * diff
        enrgl += lx * lx
        enrgr += rx * rx
    return enrgs, enrgd, enrgl, enrgr


def _intensity(cl: CoderInfo, cr: CoderInfo, sl: MutableSequence[float],
               sr: MutableSequence[float], sfcnt: int, wstart: int, wend: int,
               isthr: float) -> int:
    """Apply intensity stereo to one window group; return the next band counter."""
    if not isthr:
        return sfcnt
    phthr = 1.0 / isthr
    sfmin = _first_band(cl)
    sfcnt += sfmin

    for sfb in range(sfmin, cl.sfbn):
        start, end = cl.sfb_offset[sfb], cl.sfb_offset[sfb + 1]
        positions = _positions(wstart, wend, start, end)
        enrgs, enrgd, enrgl, enrgr = _energies(sl, sr, positions, 1.0)

        ethr = (math.sqrt(enrgl) + math.sqrt(enrgr)) ** 2 * phthr
        efix = enrgl + enrgr
        if efix == 0.0:
            sfcnt += 1
            continue
        if enrgs >= ethr:
            hcb, vfix = Book.INTENSITY, math.sqrt(efix / enrgs)
        elif enrgd >= ethr:
            hcb, vfix = Book.INTENSITY2, math.sqrt(efix / enrgd)
        else:
            sfcnt += 1
            continue

        if enrgl == 0.0:
            _store(cl.book, sfcnt, int(Book.ZERO), int(Book.NONE))
            sfcnt += 1
            continue
        if enrgr == 0.0:
            _store(cr.book, sfcnt, int(Book.ZERO), int(Book.NONE))
            sfcnt += 1
            continue

        sf = round(math.log10(enrgl / efix) * _IS_STEP)
        pan = round(math.log10(enrgr / efix) * _IS_STEP) - sf
        if pan > _PAN_LIMIT:
            _store(cl.book, sfcnt, int(Book.ZERO), int(Book.NONE))
        elif pan < -_PAN_LIMIT:
            _store(cr.book, sfcnt, int(Book.ZERO), int(Book.NONE))
        else:
            _store(cl.sf, sfcnt, sf, 0)
            _store(cr.sf, sfcnt, -pan, 0)
            _store(cr.book, sfcnt, int(hcb), int(Book.NONE))
            for i in positions:
                total = sl[i] + sr[i] if hcb == Book.INTENSITY else sl[i] - sr[i]
                sl[i] = total * vfix
        sfcnt += 1
    return sfcnt


def _midside(coder: CoderInfo, channel: ChannelInfo, sl: MutableSequence[float],
             sr: MutableSequence[float], sfcnt: int, wstart: int, wend: int,
             thrmid: float, thrside: float) -> int:
    """Apply mid/side coding to one window group; return the next band counter."""
    ms_used = channel.ms_info.ms_used
    sfmin = _first_band(coder)
    for _ in range(sfmin):
        _store(ms_used, sfcnt, 0, 0)
        sfcnt += 1

    for sfb in range(sfmin, coder.sfbn):
        start, end = coder.sfb_offset[sfb], coder.sfb_offset[sfb + 1]
        positions = _positions(wstart, wend, start, end)
        enrgs, enrgd, enrgl, enrgr = _energies(sl, sr, positions, 0.5)

        ms = 0
        if min(enrgl, enrgr) * thrmid >= max(enrgs, enrgd):
            in_phase = None
            if enrgs * thrmid * 2.0 >= enrgl + enrgr:
                ms, in_phase = 1, True
            elif enrgd * thrmid * 2.0 >= enrgl + enrgr:
                ms, in_phase = 1, False
            if ms:
                for i in positions:
                    if in_phase:
                        total, diff = sl[i] + sr[i], 0.0
                    else:
                        total, diff = 0.0, sl[i] - sr[i]
                    sl[i] = 0.5 * total
                    sr[i] = 0.5 * diff

        if min(enrgl, enrgr) <= thrside * max(enrgl, enrgr):
            quiet = sl if enrgl < enrgr else sr
            for i in positions:
                quiet[i] = 0.0

        _store(ms_used, sfcnt, ms, 0)
        sfcnt += 1
    return sfcnt


def apply_stereo(coders: Sequence[CoderInfo], channels: Sequence[ChannelInfo],
                 spectra: Sequence[MutableSequence[float]], quality: float,
                 mode: StereoMode) -> None:
    """Reset band books and apply joint stereo coding to every channel pair, in place.

    ``spectra`` holds one spectrum per channel; paired spectra are modified.
    Raises ValueError for a non-positive ``quality`` in a joint mode.
    """
    mode = StereoMode(mode)
    thrmid, thrside, isthr = 1.0, 0.0, 1.0
    if mode != StereoMode.NONE and quality <= 0:
        raise ValueError(f"quality must be positive, got {quality}")
    if mode == StereoMode.JOINT_MS:
        thrmid = min(_THR075 / quality, _THRMAX) + 1.0
        thrside = min(_SIDEMIN / quality, _SIDEMAX)
    elif mode == StereoMode.JOINT_IS:
        isthr = min(0.18 / (quality * quality), _ISTHRMAX) + 1.0

    thrmid *= thrmid
    thrside *= thrside
    isthr *= isthr

    for coder, channel in zip(coders, channels):
        if channel.present:
            count = coder.groups.n * coder.sfbn
            coder.book = [int(Book.NONE)] * count
            coder.sf = [0] * count

    for chn, channel in enumerate(channels):
        if not (channel.present and channel.cpe and channel.ch_is_left):
            continue
        rch = channel.paired_ch
        right = channels[rch]
        left_coder, right_coder = coders[chn], coders[rch]

        channel.common_window = False
        channel.ms_info.is_present = False
        right.ms_info.is_present = False

        if left_coder.block_type != right_coder.block_type:
            continue
        if left_coder.groups.lengths != right_coder.groups.lengths:
            continue

        channel.common_window = True
        if mode == StereoMode.JOINT_MS:
            channel.ms_info.is_present = True
            right.ms_info.is_present = True

        sfcnt = 0
        start = 0
        for glen in coders[0].groups.lengths:
            end = start + glen
            if mode == StereoMode.JOINT_MS:
                sfcnt = _midside(left_coder, channel, spectra[chn], spectra[rch],
                                 sfcnt, start, end, thrmid, thrside)
            elif mode == StereoMode.JOINT_IS:
                sfcnt = _intensity(left_coder, right_coder, spectra[chn], spectra[rch],
                                   sfcnt, start, end, isthr)
            start = end