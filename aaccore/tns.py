"""Temporal noise shaping: setup, analysis and in-place filtering of spectra."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import MutableSequence, Sequence

from aaccore.huffman import BlockType
from aaccore.lpc import (
    levinson_durbin,
    quantize_reflection_coeffs,
    step_up,
    tns_filter,
    tns_inv_filter,
    truncate_coeffs,
)
from aaccore.quantize import BLOCK_LEN_LONG, BLOCK_LEN_SHORT, MAX_SHORT_WINDOWS

TNS_MAX_ORDER = 20
DEF_TNS_COEFF_RES = 4
DEF_TNS_GAIN_THRESH = 1.4
DEF_TNS_COEFF_THRESH = 0.1

MPEG2 = 1
MPEG4 = 0

# Limit bands to > 2.0 kHz
_MIN_BAND_LONG = (11, 12, 15, 16, 17, 20, 25, 26, 24, 28, 30, 31)
_MIN_BAND_SHORT = (2, 2, 2, 3, 3, 4, 6, 6, 8, 10, 10, 12)

_MAX_BANDS_LONG_MAIN_LOW = (31, 31, 34, 40, 42, 51, 46, 46, 42, 42, 42, 39)
_MAX_BANDS_SHORT_MAIN_LOW = (9, 9, 10, 14, 14, 14, 14, 14, 14, 14, 14, 14)

_MAX_ORDER_LONG_MAIN = 20
_MAX_ORDER_LONG_LOW = 12
_MAX_ORDER_SHORT_MAIN_LOW = 7


class ObjectType(enum.IntEnum):
    """AAC audio object type (profile)."""

    MAIN = 1
    LOW = 2
    SSR = 3
    LTP = 4


@dataclass
class TnsFilterData:
    """One TNS filter applied to a window."""

    order: int = 0
    direction: int = 0
    coef_compress: int = 0
    length: int = 0
    k_coeffs: list[float] = field(default_factory=list)
    a_coeffs: list[float] = field(default_factory=list)
    index: list[int] = field(default_factory=list)


@dataclass
class TnsWindowData:
    """TNS filters of one window."""

    coef_resolution: int = DEF_TNS_COEFF_RES
    filters: list[TnsFilterData] = field(default_factory=list)

    @property
    def num_filters(self) -> int:
        """Number of filters in use."""
        return len(self.filters)


@dataclass
class TnsInfo:
    """Per-channel TNS limits and the filters chosen for the current block."""

    tns_data_present: bool = False
    tns_min_band_number_long: int = 0
    tns_min_band_number_short: int = 0
    tns_max_bands_long: int = 0
    tns_max_bands_short: int = 0
    tns_max_order_long: int = 0
    tns_max_order_short: int = 0
    window_data: list[TnsWindowData] = field(
        default_factory=lambda: [TnsWindowData() for _ in range(MAX_SHORT_WINDOWS)]
    )


def tns_init(fs_index: int, profile: ObjectType, mpeg_version: int) -> TnsInfo:
    """Return the TNS limits for a sampling-frequency index, profile and MPEG version."""
    if not 0 <= fs_index < len(_MIN_BAND_LONG):
        raise ValueError(f"sampling frequency index {fs_index} out of range")
    profile = ObjectType(profile)
    info = TnsInfo()
    if profile in (ObjectType.MAIN, ObjectType.LTP, ObjectType.LOW):
        info.tns_max_bands_long = _MAX_BANDS_LONG_MAIN_LOW[fs_index]
        info.tns_max_bands_short = _MAX_BANDS_SHORT_MAIN_LOW[fs_index]
        if mpeg_version == MPEG2:
            info.tns_max_order_long = (
                _MAX_ORDER_LONG_LOW if profile == ObjectType.LOW else _MAX_ORDER_LONG_MAIN
            )
        else:
            # sample rates above 32 kHz
            info.tns_max_order_long = 12 if fs_index <= 5 else 20
        info.tns_max_order_short = _MAX_ORDER_SHORT_MAIN_LOW
    info.tns_min_band_number_long = _MIN_BAND_LONG[fs_index]
    info.tns_min_band_number_short = _MIN_BAND_SHORT[fs_index]
    return info


def _band_range(info: TnsInfo, number_of_bands: int, max_sfb: int,
                short: bool) -> tuple[int, int]:
    if short:
        start = min(info.tns_min_band_number_short, info.tns_max_bands_short)
        stop = min(number_of_bands, info.tns_max_bands_short)
    else:
        start = min(info.tns_min_band_number_long, info.tns_max_bands_long)
        stop = min(number_of_bands, info.tns_max_bands_long)
    start = max(min(start, max_sfb), 0)
    stop = max(min(stop, max_sfb), 0)
    return start, stop


def tns_encode(info: TnsInfo, number_of_bands: int, max_sfb: int, block_type: BlockType,
               sfb_offsets: Sequence[int], spec: MutableSequence[float]) -> None:
    """Analyse ``spec`` and, where it pays, filter it in place and record the filter.

    Short blocks are never filtered.
    """
    block_type = BlockType(block_type)
    if block_type == BlockType.ONLY_SHORT_WINDOW:
        info.tns_data_present = False
        return

    length_in_bands = number_of_bands - info.tns_min_band_number_long
    order = info.tns_max_order_long
    start_band, stop_band = _band_range(info, number_of_bands, max_sfb, short=False)

    info.tns_data_present = False
    window = info.window_data[0]
    window.filters = []
    window.coef_resolution = DEF_TNS_COEFF_RES

    start = sfb_offsets[start_band]
    length = sfb_offsets[stop_band] - sfb_offsets[start_band]
    segment = list(spec[start:start + max(length, 0)])
    gain, k = levinson_durbin(segment, order)
    if gain <= DEF_TNS_GAIN_THRESH:
        return

    info.tns_data_present = True
    indices, k = quantize_reflection_coeffs(k, order, DEF_TNS_COEFF_RES)
    truncated, k = truncate_coeffs(k, order, DEF_TNS_COEFF_THRESH)
    a = step_up(k, truncated)
    filt = TnsFilterData(
        order=truncated,
        direction=0,
        coef_compress=0,
        length=length_in_bands,
        k_coeffs=k,
        a_coeffs=a,
        index=indices,
    )
    window.filters.append(filt)
    spec[start:start + length] = tns_inv_filter(segment, filt.order, filt.a_coeffs,
                                                filt.direction)


def _apply(info: TnsInfo, number_of_bands: int, max_sfb: int, block_type: BlockType,
           sfb_offsets: Sequence[int], spec: MutableSequence[float], synthesis: bool) -> None:
    short = BlockType(block_type) == BlockType.ONLY_SHORT_WINDOW
    windows, window_size = (MAX_SHORT_WINDOWS, BLOCK_LEN_SHORT) if short else (1, BLOCK_LEN_LONG)
    start_band, stop_band = _band_range(info, number_of_bands, max_sfb, short)
    length = sfb_offsets[stop_band] - sfb_offsets[start_band]
    if not info.tns_data_present or length <= 0:
        return
    run = tns_filter if synthesis else tns_inv_filter
    for w, window in enumerate(info.window_data[:windows]):
        if not window.num_filters:
            continue
        filt = window.filters[0]
        start = w * window_size + sfb_offsets[start_band]
        spec[start:start + length] = run(spec[start:start + length], filt.order,
                                         filt.a_coeffs, filt.direction)


def tns_encode_filter_only(info: TnsInfo, number_of_bands: int, max_sfb: int,
                           block_type: BlockType, sfb_offsets: Sequence[int],
                           spec: MutableSequence[float]) -> None:
    """Apply the recorded analysis filters to ``spec`` in place."""
    _apply(info, number_of_bands, max_sfb, block_type, sfb_offsets, spec, synthesis=False)


def tns_decode_filter_only(info: TnsInfo, number_of_bands: int, max_sfb: int,
                           block_type: BlockType, sfb_offsets: Sequence[int],
                           spec: MutableSequence[float]) -> None:
    """Apply the recorded synthesis filters to ``spec`` in place, undoing the analysis."""
    _apply(info, number_of_bands, max_sfb, block_type, sfb_offsets, spec, synthesis=True)