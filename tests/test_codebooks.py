import pytest

from aaccore.codebooks import HuffCode, codebook

EXPECTED_SIZES = {
    1: 81, 2: 81, 3: 81, 4: 81, 5: 81, 6: 81,
    7: 64, 8: 64, 9: 169, 10: 169, 11: 289, 12: 121,
}


@pytest.mark.parametrize("number,size", sorted(EXPECTED_SIZES.items()))
def test_codebook_sizes(number, size):
    assert len(codebook(number)) == size


@pytest.mark.parametrize("number", sorted(EXPECTED_SIZES))
def test_codewords_fit_their_length(number):
    for code in codebook(number):
        assert 1 <= code.length <= 19
        assert 0 <= code.data < (1 << code.length)


@pytest.mark.parametrize("number", sorted(EXPECTED_SIZES))
def test_codebooks_are_prefix_free(number):
    words = sorted(code.bits for code in codebook(number))
    assert len(set(words)) == len(words)
    for shorter, following in zip(words, words[1:]):
        assert not following.startswith(shorter)


@pytest.mark.parametrize("number", sorted(EXPECTED_SIZES))
def test_kraft_inequality(number):
    total = sum(2.0 ** -code.length for code in codebook(number))
    assert total <= 1.0 + 1e-12


def test_zero_entries_are_shortest():
    assert codebook(1)[40] == HuffCode(1, 0)
    assert codebook(12)[60] == HuffCode(1, 0)
    assert codebook(11)[0] == HuffCode(4, 0)


def test_bits_property():
    code = codebook(12)[59]
    assert code == HuffCode(3, 4)
    assert code.bits == "100"
    assert codebook(3)[74].bits == "1" * 15 + "0"


def test_scalefactor_book_has_long_escape_codes():
    book = codebook(12)
    assert book[0] == HuffCode(18, 262120)
    assert book[120] == HuffCode(19, 524275)
    assert max(code.length for code in book) == 19


@pytest.mark.parametrize("number", [0, 13, -1, "1", None])
def test_unknown_codebook_raises(number):
    with pytest.raises(ValueError):
        codebook(number)