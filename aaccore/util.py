"""Sample-rate and bit-budget helpers for the AAC encoder."""

from __future__ import annotations

import math

FRAME_LEN = 1024
"""Samples per channel in one AAC frame."""

MAX_CHANNEL_BITS = 6144
"""Largest number of bits one channel may use in a frame."""

_SR_THRESHOLDS = (92017, 75132, 55426, 46009, 37566, 27713, 23004, 18783, 13856, 11502, 9391)


def sample_rate_index(sample_rate: int) -> int:
    """Return the AAC sampling-frequency index (0-11) nearest to ``sample_rate``."""
    return next(
        (index for index, threshold in enumerate(_SR_THRESHOLDS) if sample_rate >= threshold),
        len(_SR_THRESHOLDS),
    )


def max_bitrate(sample_rate: int) -> int:
    """Return the highest bitrate that keeps ADTS frames within 8 KiB."""
    return int(0x2000 * 8 * float(sample_rate) / FRAME_LEN)


def min_bitrate() -> int:
    """Return the lowest bitrate per channel."""
    return 8000


def bit_allocation(pe: float, short_block: bool) -> int:
    """Return the bit allocation for a block of perceptual entropy ``pe``.

    Raises ValueError for a negative ``pe``.
    """
    if pe < 0:
        raise ValueError("perceptual entropy must not be negative")
    if short_block:
        pew1, pew2 = 0.6, 24.0
    else:
        pew1, pew2 = 0.3, 6.0
    allocation = pew1 * pe + pew2 * math.sqrt(pe)
    allocation = min(max(0.0, allocation), float(MAX_CHANNEL_BITS))
    return int(allocation + 0.5)


def max_bitres_size(bit_rate: int, sample_rate: int) -> int:
    """Return the maximum bit-reservoir size for the given rates."""
    return MAX_CHANNEL_BITS - int(float(bit_rate) / float(sample_rate) * FRAME_LEN)