import pytest

from aaccore.util import (
    FRAME_LEN,
    bit_allocation,
    max_bitrate,
    max_bitres_size,
    min_bitrate,
    sample_rate_index,
)

THRESHOLDS = [92017, 75132, 55426, 46009, 37566, 27713, 23004, 18783, 13856, 11502, 9391]


@pytest.mark.parametrize("index,threshold", list(enumerate(THRESHOLDS)))
def test_sample_rate_index_boundaries(index, threshold):
    assert sample_rate_index(threshold) == index
    assert sample_rate_index(threshold - 1) == index + 1


def test_sample_rate_index_extremes():
    assert sample_rate_index(10**7) == 0
    assert sample_rate_index(0) == 11


def test_sample_rate_index_is_non_increasing():
    rates = range(0, 100001, 97)
    indices = [sample_rate_index(rate) for rate in rates]
    assert all(a >= b for a, b in zip(indices, indices[1:]))


def test_max_bitrate_for_one_frame_per_second():
    assert max_bitrate(FRAME_LEN) == 0x2000 * 8


def test_max_bitrate_scales_with_rate():
    assert max_bitrate(2 * 48000) == 2 * max_bitrate(48000)
    assert max_bitrate(0) == 0


def test_min_bitrate():
    assert min_bitrate() == 8000


def test_bit_allocation_zero():
    assert bit_allocation(0.0, False) == 0
    assert bit_allocation(0.0, True) == 0


def test_bit_allocation_long_block_value():
    assert bit_allocation(100.0, False) == 90


def test_bit_allocation_capped():
    assert bit_allocation(1e9, False) == 6144
    assert bit_allocation(1e9, True) == 6144


def test_bit_allocation_short_exceeds_long():
    for pe in (1.0, 10.0, 500.0, 2000.0):
        assert bit_allocation(pe, True) >= bit_allocation(pe, False)


def test_bit_allocation_monotonic():
    values = [bit_allocation(float(pe), False) for pe in range(0, 20000, 50)]
    assert all(a <= b for a, b in zip(values, values[1:]))


def test_bit_allocation_negative_raises():
    with pytest.raises(ValueError):
        bit_allocation(-1.0, False)


def test_max_bitres_size_zero_rate():
    assert max_bitres_size(0, 44100) == 6144


def test_max_bitres_size_decreases_with_bitrate():
    sizes = [max_bitres_size(rate, 44100) for rate in (32000, 64000, 128000, 192000)]
    assert all(a > b for a, b in zip(sizes, sizes[1:]))
    assert all(size < 6144 for size in sizes)


def test_max_bitres_size_one_bit_per_sample():
    assert max_bitres_size(48000, 48000) == 6144 - FRAME_LEN