import pytest

from aaccore.codebooks import codebook
from aaccore.huffman import (
    BitWriter,
    BlockType,
    Book,
    Codeword,
    CoderInfo,
    WindowGroups,
    choose_book,
    encode_spectrum,
    escape_code,
    spectrum_bits,
    write_books,
    write_scalefactors,
)


def _bits(writer):
    raw = "".join(format(b, "08b") for b in writer.to_bytes())
    return raw[:len(writer)]


def _decode_escape(bits):
    prefix = len(bits) - len(bits.lstrip("1"))
    assert bits[prefix] == "0"
    return (1 << (prefix + 4)) + int(bits[prefix + 1:], 2)


def test_escape_of_sixteen():
    assert escape_code(16) == Codeword(5, 0)


@pytest.mark.parametrize("x", [16, 17, 31, 32, 63, 100, 1000, 4095, 8191])
def test_escape_round_trip(x):
    code = escape_code(x)
    assert len(code.bits) == code.length
    assert _decode_escape(code.bits) == x


@pytest.mark.parametrize("x", [15, 8192, 9000])
def test_escape_rejects_out_of_range(x):
    with pytest.raises(ValueError):
        escape_code(x)


def test_zero_quad_book1():
    assert spectrum_bits([0, 0, 0, 0], 1) == codebook(1)[40].length


def test_unsigned_book_adds_sign_bits():
    assert spectrum_bits([1, 0, 0, 0], 3) == codebook(3)[27].length + 1


def test_sign_bits_in_data():
    coder = CoderInfo()
    encode_spectrum([-1, 1], 7, coder)
    base = codebook(7)[9]
    assert coder.data == [Codeword(base.length + 2, (base.data << 2) | 0b10)]


def test_escape_book_emits_escape_after_pair():
    coder = CoderInfo()
    bits = encode_spectrum([20, 0], 11, coder)
    base = codebook(11)[16 * 17]
    assert coder.data == [Codeword(base.length + 1, base.data << 1), escape_code(20)]
    assert bits == sum(code.length for code in coder.data)


def test_encode_matches_count():
    qs = [1, -2, 0, 3, -4, 4, 2, 0]
    coder = CoderInfo()
    assert encode_spectrum(qs, 5, coder) == spectrum_bits(qs, 5)
    assert coder.datacnt == 4


@pytest.mark.parametrize("book", [0, 12, 13, -1])
def test_invalid_book(book):
    with pytest.raises(ValueError):
        spectrum_bits([0, 0, 0, 0], book)


def test_value_out_of_book_range():
    with pytest.raises(ValueError):
        spectrum_bits([2, 0, 0, 0], 1)


def test_length_not_multiple():
    with pytest.raises(ValueError):
        spectrum_bits([0, 0, 0], 1)


def test_choose_book_zero():
    coder = CoderInfo()
    assert choose_book(coder, [0] * 8) == Book.ZERO
    assert coder.book == [Book.ZERO]
    assert coder.data == []


@pytest.mark.parametrize(
    "qs, pair",
    [([1, -1, 0, 1], (1, 2)), ([2, 0, 1, 0], (3, 4)), ([4, -3], (5, 6)),
     ([7, 0], (7, 8)), ([12, -5], (9, 10))],
)
def test_choose_book_picks_cheaper(qs, pair):
    coder = CoderInfo()
    chosen = choose_book(coder, qs)
    assert chosen in pair
    assert spectrum_bits(qs, chosen) == min(spectrum_bits(qs, b) for b in pair)
    assert sum(c.length for c in coder.data) == spectrum_bits(qs, chosen)


def test_choose_book_escape_and_band_index():
    coder = CoderInfo(bandcnt=2)
    assert choose_book(coder, [20, -13]) == Book.ESC
    assert coder.book[2] == Book.ESC
    assert coder.bandcnt == 2


def test_bitwriter_bytes():
    writer = BitWriter()
    writer.put(0b101, 3)
    writer.put(1, 1)
    assert len(writer) == 4
    assert writer.to_bytes() == b"\xb0"


def test_bitwriter_negative_count():
    with pytest.raises(ValueError):
        BitWriter().put(1, -1)


def test_write_books_runs():
    coder = CoderInfo(sfbn=3, book=[1, 1, 5])
    writer = BitWriter()
    bits = write_books(coder, writer)
    assert bits == len(writer)
    assert _bits(writer) == "0001" + "00010" + "0101" + "00001"


def test_write_books_long_run_escape():
    coder = CoderInfo(sfbn=31, book=[7] * 31)
    writer = BitWriter()
    write_books(coder, writer)
    assert _bits(writer) == "0111" + "11111" + "00000"


def test_write_books_short_groups():
    coder = CoderInfo(
        block_type=BlockType.ONLY_SHORT_WINDOW,
        sfbn=2,
        groups=WindowGroups([4, 4]),
        book=[3, 3, 0, 9],
    )
    writer = BitWriter()
    bits = write_books(coder, writer)
    assert bits == len(writer)
    assert _bits(writer) == "0011010" + "0000001" + "1001001"


def test_write_scalefactors_zero_diff():
    coder = CoderInfo(book=[Book.ESC], sf=[100], global_gain=100, bandcnt=1)
    assert write_scalefactors(coder) == codebook(12)[60].length


def test_write_scalefactors_clamps():
    coder = CoderInfo(book=[Book.ESC], sf=[300], global_gain=100, bandcnt=1)
    writer = BitWriter()
    bits = write_scalefactors(coder, writer)
    top = codebook(12)[120]
    assert bits == top.length
    assert _bits(writer) == top.bits


def test_write_scalefactors_first_pns_raw():
    coder = CoderInfo(book=[Book.PNS], sf=[15], global_gain=100, bandcnt=1)
    writer = BitWriter()
    assert write_scalefactors(coder, writer) == 9
    assert int(_bits(writer), 2) - 256 + (100 - 90) == 15


def test_write_scalefactors_skips_zero_bands():
    coder = CoderInfo(book=[Book.ZERO, Book.ZERO], sf=[5, 9], global_gain=50, bandcnt=2)
    writer = BitWriter()
    assert write_scalefactors(coder, writer) == 0
    assert len(writer) == 0