"""Huffman coding of quantized spectra, section data and scalefactors."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from itertools import groupby
from typing import Iterable, Iterator, NamedTuple, Optional

from aaccore.codebooks import codebook

BOOK_BITS = 4
"""Bits used to transmit a section's codebook number."""

ESCAPE_LIMIT = 8192
"""Escape sequences can represent magnitudes below this value only."""


class BlockType(enum.IntEnum):
    """Window sequence of a block."""

    ONLY_LONG_WINDOW = 0
    LONG_SHORT_WINDOW = 1
    ONLY_SHORT_WINDOW = 2
    SHORT_LONG_WINDOW = 3


class Book(enum.IntEnum):
    """Special codebook numbers."""

    ZERO = 0
    ESC = 11
    PNS = 13
    INTENSITY2 = 14
    INTENSITY = 15
    NONE = 16


class Codeword(NamedTuple):
    """A variable-length codeword: its length in bits and its value."""

    length: int
    data: int

    @property
    def bits(self) -> str:
        """The codeword as a string of '0' and '1' characters."""
        return format(self.data, f"0{self.length}b") if self.length else ""


@dataclass
class WindowGroups:
    """Lengths, in windows, of the window groups of a block."""

    lengths: list[int] = field(default_factory=lambda: [1])

    @property
    def n(self) -> int:
        """Number of groups."""
        return len(self.lengths)


@dataclass
class CoderInfo:
    """Per-channel coding state for one block."""

    block_type: BlockType = BlockType.ONLY_LONG_WINDOW
    sfbn: int = 0
    sfb_offset: list[int] = field(default_factory=list)
    groups: WindowGroups = field(default_factory=WindowGroups)
    book: list[int] = field(default_factory=list)
    sf: list[int] = field(default_factory=list)
    global_gain: int = 0
    bandcnt: int = 0
    data: list[Codeword] = field(default_factory=list)

    @property
    def datacnt(self) -> int:
        """Number of spectral codewords collected so far."""
        return len(self.data)


class BitWriter:
    """Collects bit fields most significant bit first."""

    def __init__(self) -> None:
        self._value = 0
        self._nbits = 0

    def put(self, value: int, nbits: int) -> None:
        """Append the low ``nbits`` bits of ``value``."""
        if nbits < 0:
            raise ValueError("bit count must not be negative")
        self._value = (self._value << nbits) | (value & ((1 << nbits) - 1))
        self._nbits += nbits

    def __len__(self) -> int:
        return self._nbits

    def to_bytes(self) -> bytes:
        """Return the written bits, zero-padded to a whole number of bytes."""
        pad = -self._nbits % 8
        return (self._value << pad).to_bytes((self._nbits + pad) // 8, "big")


class _Layout(NamedTuple):
    dim: int
    base: int
    signed: bool
    offset: int


_LAYOUTS = {
    1: _Layout(4, 3, True, 40),
    2: _Layout(4, 3, True, 40),
    3: _Layout(4, 3, False, 0),
    4: _Layout(4, 3, False, 0),
    5: _Layout(2, 9, True, 40),
    6: _Layout(2, 9, True, 40),
    7: _Layout(2, 8, False, 0),
    8: _Layout(2, 8, False, 0),
    9: _Layout(2, 13, False, 0),
    10: _Layout(2, 13, False, 0),
    11: _Layout(2, 17, False, 0),
}

# (exclusive limit of the largest magnitude, first of the two candidate books)
_BOOK_CANDIDATES = ((2, 1), (3, 3), (5, 5), (8, 7), (13, 9))


def escape_code(x: int) -> Codeword:
    """Return the escape sequence for a magnitude ``x`` of 16 or more."""
    if x >= ESCAPE_LIMIT:
        raise ValueError(f"quantized value {x} too large for an escape sequence")
    if x < 16:
        raise ValueError(f"quantized value {x} needs no escape sequence")
    prefix_len = x.bit_length() - 5
    base = 1 << (prefix_len + 4)
    prefix = (1 << prefix_len) - 1
    code = (prefix << (prefix_len + 5)) | (x - base)
    return Codeword(2 * prefix_len + 5, code)


def _codewords(qs: Iterable[int], book: int) -> Iterator[Codeword]:
    layout = _LAYOUTS.get(int(book)) if isinstance(book, int) else None
    if layout is None:
        raise ValueError(f"spectral codebook {book!r} out of range")
    table = codebook(int(book))
    values = list(qs)
    if len(values) % layout.dim:
        raise ValueError(f"spectrum length {len(values)} is not a multiple of {layout.dim}")
    for quad in zip(*[iter(values)] * layout.dim):
        if book == Book.ESC:
            digits = [min(abs(v), 16) for v in quad]
        elif layout.signed:
            digits = list(quad)
        else:
            digits = [abs(v) for v in quad]
        index = 0
        for digit in digits:
            index = index * layout.base + digit
        index += layout.offset
        if not 0 <= index < len(table):
            raise ValueError(f"values {quad} cannot be coded with codebook {int(book)}")
        length, data = table[index]
        if not layout.signed:
            for v in quad:
                if v:
                    length += 1
                    data = (data << 1) | (v < 0)
        yield Codeword(length, data)
        if book == Book.ESC:
            for v in quad:
                if abs(v) >= 16:
                    yield escape_code(abs(v))


def spectrum_bits(qs: Iterable[int], book: int) -> int:
    """Return the number of bits needed to code ``qs`` with codebook ``book``."""
    return sum(code.length for code in _codewords(qs, book))


def encode_spectrum(qs: Iterable[int], book: int, coder: CoderInfo) -> int:
    """Append the codewords of ``qs`` to ``coder.data`` and return their total bits."""
    codes = list(_codewords(qs, book))
    coder.data.extend(codes)
    return sum(code.length for code in codes)


def _store(items: list[int], index: int, value: int) -> None:
    if index >= len(items):
        items.extend([int(Book.NONE)] * (index + 1 - len(items)))
    items[index] = value


def choose_book(coder: CoderInfo, qs: Iterable[int]) -> int:
    """Pick the cheapest codebook for ``qs``, code it, and record it for the current band."""
    values = list(qs)
    maxq = max((abs(v) for v in values), default=0)
    if maxq < 1:
        chosen = int(Book.ZERO)
    else:
        chosen = next((first for limit, first in _BOOK_CANDIDATES if maxq < limit), int(Book.ESC))
        if chosen != Book.ESC and spectrum_bits(values, chosen + 1) < spectrum_bits(values, chosen):
            chosen += 1
    if chosen > Book.ZERO:
        encode_spectrum(values, chosen, coder)
    _store(coder.book, coder.bandcnt, chosen)
    return chosen


def write_books(coder: CoderInfo, writer: Optional[BitWriter] = None) -> int:
    """Write the section data and return its size in bits."""
    if coder.block_type == BlockType.ONLY_SHORT_WINDOW:
        maxcnt, cntbits = 7, 3
    else:
        maxcnt, cntbits = 31, 5
    bits = 0
    for group in range(coder.groups.n):
        bands = coder.book[group * coder.sfbn:(group + 1) * coder.sfbn]
        for book, run in groupby(bands):
            count = sum(1 for _ in run)
            full, rest = divmod(count, maxcnt)
            fields = [(book, BOOK_BITS)] + [(maxcnt, cntbits)] * full + [(rest, cntbits)]
            for value, nbits in fields:
                if writer is not None:
                    writer.put(value, nbits)
                bits += nbits
    return bits


def _clamp(diff: int) -> int:
    return max(-60, min(60, diff))


def write_scalefactors(coder: CoderInfo, writer: Optional[BitWriter] = None) -> int:
    """Write the scalefactor data and return its size in bits."""
    table = codebook(12)
    bits = 0
    last_sf = coder.global_gain
    last_is = 0
    last_pns = coder.global_gain - 90
    first_pns = True
    for book, sf in zip(coder.book[:coder.bandcnt], coder.sf):
        if book in (Book.INTENSITY, Book.INTENSITY2):
            diff = _clamp(sf - last_is)
            last_is += diff
            code = Codeword(*table[60 + diff])
        elif book == Book.PNS:
            diff = sf - last_pns
            if first_pns:
                first_pns = False
                code = Codeword(9, diff + 256)
            else:
                diff = _clamp(diff)
                code = Codeword(*table[60 + diff])
            last_pns += diff
        elif book:
            diff = _clamp(sf - last_sf)
            last_sf += diff
            code = Codeword(*table[60 + diff])
        else:
            continue
        bits += code.length
        if writer is not None:
            writer.put(code.data, code.length)
    return bits