import math

import pytest

from aaccore.huffman import BlockType
from aaccore.tns import (
    MPEG2,
    MPEG4,
    ObjectType,
    TnsInfo,
    tns_decode_filter_only,
    tns_encode,
    tns_encode_filter_only,
    tns_init,
)

OFFSETS = list(range(0, 1025, 16))
BANDS = 49


def _spectrum():
    return [0.9 ** (i % 400) * math.cos(0.3 * i) * 100.0 for i in range(1024)]


def _encoded():
    info = tns_init(4, ObjectType.LOW, MPEG4)
    spec = _spectrum()
    tns_encode(info, BANDS, BANDS, BlockType.ONLY_LONG_WINDOW, OFFSETS, spec)
    return info, spec


def test_init_low_mpeg2_tables():
    info = tns_init(4, ObjectType.LOW, MPEG2)
    assert info.tns_max_bands_long == 42
    assert info.tns_max_bands_short == 14
    assert info.tns_max_order_long == 12
    assert info.tns_max_order_short == 7
    assert info.tns_min_band_number_long == 17
    assert info.tns_min_band_number_short == 3


def test_init_main_mpeg2_order():
    assert tns_init(0, ObjectType.MAIN, MPEG2).tns_max_order_long == 20


@pytest.mark.parametrize("fs_index,order", [(5, 12), (6, 20)])
def test_init_mpeg4_order_depends_on_rate(fs_index, order):
    assert tns_init(fs_index, ObjectType.LTP, MPEG4).tns_max_order_long == order


def test_init_rejects_bad_index():
    with pytest.raises(ValueError):
        tns_init(12, ObjectType.LOW, MPEG4)


def test_short_block_not_filtered():
    info = tns_init(4, ObjectType.LOW, MPEG4)
    spec = _spectrum()
    tns_encode(info, BANDS, BANDS, BlockType.ONLY_SHORT_WINDOW, OFFSETS, spec)
    assert info.tns_data_present is False
    assert spec == _spectrum()


def test_silent_spectrum_not_filtered():
    info = tns_init(4, ObjectType.LOW, MPEG4)
    spec = [0.0] * 1024
    tns_encode(info, BANDS, BANDS, BlockType.ONLY_LONG_WINDOW, OFFSETS, spec)
    assert info.tns_data_present is False
    assert info.window_data[0].num_filters == 0
    assert spec == [0.0] * 1024


def test_predictable_spectrum_gets_filter():
    info, spec = _encoded()
    assert info.tns_data_present is True
    filt = info.window_data[0].filters[0]
    assert 0 < filt.order <= info.tns_max_order_long
    assert filt.length == BANDS - info.tns_min_band_number_long
    assert filt.direction == 0
    assert spec != _spectrum()


def test_lines_outside_range_untouched():
    info, spec = _encoded()
    original = _spectrum()
    start = OFFSETS[info.tns_min_band_number_long]
    stop = OFFSETS[info.tns_max_bands_long]
    assert spec[:start] == original[:start]
    assert spec[stop:] == original[stop:]


def test_decode_undoes_encode():
    info, spec = _encoded()
    tns_decode_filter_only(info, BANDS, BANDS, BlockType.ONLY_LONG_WINDOW, OFFSETS, spec)
    assert spec == pytest.approx(_spectrum(), rel=1e-9, abs=1e-9)


def test_encode_filter_only_matches_encode():
    info, encoded = _encoded()
    spec = _spectrum()
    tns_encode_filter_only(info, BANDS, BANDS, BlockType.ONLY_LONG_WINDOW, OFFSETS, spec)
    assert spec == pytest.approx(encoded)


def test_filter_only_without_data_is_noop():
    info = TnsInfo()
    spec = _spectrum()
    tns_decode_filter_only(info, BANDS, BANDS, BlockType.ONLY_LONG_WINDOW, OFFSETS, spec)
    tns_encode_filter_only(info, BANDS, BANDS, BlockType.ONLY_LONG_WINDOW, OFFSETS, spec)
    assert spec == _spectrum()


def test_invalid_block_type_rejected():
    info = tns_init(4, ObjectType.LOW, MPEG4)
    with pytest.raises(ValueError):
        tns_encode(info, BANDS, BANDS, 9, OFFSETS, _spectrum())