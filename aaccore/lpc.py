"""Linear prediction helpers for temporal noise shaping."""

from __future__ import annotations

import math
from typing import Sequence


def autocorrelation(data: Sequence[float], max_order: int) -> list[float]:
    """Return the autocorrelation of ``data`` for lags 0..``max_order``."""
    if max_order < 0:
        raise ValueError(f"order must not be negative, got {max_order}")
    n = len(data)
    return [
        sum(data[i] * data[i + lag] for i in range(n - lag))
        for lag in range(max_order + 1)
    ]


def levinson_durbin(data: Sequence[float], order: int) -> tuple[float, list[float]]:
    """Return the prediction gain and the reflection coefficients k[0..order].

    k[0] is always 1.0. Silent data gives a gain of 0 and zero coefficients.
    """
    r = autocorrelation(data, order)
    signal = r[0]
    k = [1.0] + [0.0] * order
    if not signal:
        return 0.0, k

    a_last = [1.0] + [0.0] * order
    error = r[0]
    for m in range(1, order + 1):
        if error == 0.0:
            return math.inf, k
        ktemp = -sum(a_last[i] * r[m - i] for i in range(m)) / error
        k[m] = ktemp
        a = list(a_last)
        a[m] = ktemp
        for i in range(1, m):
            a[i] = a_last[i] + ktemp * a_last[m - i]
        error *= 1.0 - ktemp * ktemp
        a_last = a
    if error == 0.0:
        return math.inf, k
    return signal / error, k


def step_up(k: Sequence[float], order: int) -> list[float]:
    """Convert reflection coefficients into predictor coefficients a[0..order]."""
    if len(k) < order + 1:
        raise ValueError(f"need {order + 1} reflection coefficients, got {len(k)}")
    a = [1.0] + [0.0] * order
    for m in range(1, order + 1):
        prev = list(a)
        for i in range(1, m + 1):
            a[i] = prev[i] + k[m] * prev[m - i]
    return a


def quantize_reflection_coeffs(k: Sequence[float], order: int,
                               coeff_res: int) -> tuple[list[int], list[float]]:
    """Quantize k[1..order] to ``coeff_res`` bits.

    Returns the indices (index 0 unused, set to 0) and the coefficients
    after inverse quantization.
    """
    if coeff_res < 1:
        raise ValueError(f"coefficient resolution must be at least 1, got {coeff_res}")
    if len(k) < order + 1:
        raise ValueError(f"need {order + 1} reflection coefficients, got {len(k)}")
    iqfac = ((1 << (coeff_res - 1)) - 0.5) / (math.pi / 2)
    iqfac_m = ((1 << (coeff_res - 1)) + 0.5) / (math.pi / 2)
    indices = [0] * (order + 1)
    quantized = list(k)
    for i in range(1, order + 1):
        angle = math.asin(k[i])
        if k[i] >= 0:
            index = int(0.5 + angle * iqfac)
        else:
            index = int(-0.5 + angle * iqfac_m)
        indices[i] = index
        quantized[i] = math.sin(index / (iqfac if index >= 0 else iqfac_m))
    return indices, quantized


def truncate_coeffs(k: Sequence[float], order: int,
                    threshold: float) -> tuple[int, list[float]]:
    """Zero the tail coefficients not above ``threshold`` in magnitude.

    Returns the truncated order and the new coefficients.
    """
    result = list(k)
    for i in range(order, -1, -1):
        if abs(result[i]) > threshold:
            return i, result
        result[i] = 0.0
    return 0, result


def _check_filter(a: Sequence[float], order: int) -> None:
    if order < 0:
        raise ValueError(f"order must not be negative, got {order}")
    if len(a) < order + 1:
        raise ValueError(f"need {order + 1} predictor coefficients, got {len(a)}")


def tns_filter(spec: Sequence[float], order: int, a: Sequence[float],
               direction: int = 0) -> list[float]:
    """Return ``spec`` through the all-pole synthesis filter ``a``.

    A non-zero ``direction`` filters from the top of the spectrum downwards.
    """
    _check_filter(a, order)
    out = [float(v) for v in spec]
    length = len(out)
    if direction:
        for i in range(length - 1, -1, -1):
            for j in range(1, min(length - 1 - i, order) + 1):
                out[i] -= out[i + j] * a[j]
    else:
        for i in range(length):
            for j in range(1, min(i, order) + 1):
                out[i] -= out[i - j] * a[j]
    return out


def tns_inv_filter(spec: Sequence[float], order: int, a: Sequence[float],
                   direction: int = 0) -> list[float]:
    """Return ``spec`` through the all-zero analysis filter ``a``.

    This undoes :func:`tns_filter` with the same coefficients and direction.
    """
    _check_filter(a, order)
    original = [float(v) for v in spec]
    out = list(original)
    length = len(out)
    if direction:
        for i in range(length):
            for j in range(1, min(length - 1 - i, order) + 1):
                out[i] += original[i + j] * a[j]
    else:
        for i in range(length):
            for j in range(1, min(i, order) + 1):
                out[i] += original[i - j] * a[j]
    return out