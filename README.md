# aaccore

Pure-Python building blocks for an AAC (Advanced Audio Coding) encoder.
The package needs nothing outside the standard library.

## What is inside

- `aaccore.codebooks`: the spectral Huffman codebooks 1–11 and the
  scalefactor codebook 12. `codebook(number)` returns a tuple of `HuffCode`
  entries (`length`, `data`, and `bits` as a string of `0`/`1`); an unknown
  number raises `ValueError`.
- `aaccore.util`: `sample_rate_index`, `max_bitrate`, `min_bitrate`,
  `bit_allocation` (bits from perceptual entropy, capped at 6144) and
  `max_bitres_size`.
- `aaccore.huffman`: spectral Huffman coding. `spectrum_bits` counts the
  bits for a codebook, `encode_spectrum` appends the codewords to a
  `CoderInfo`, `choose_book` picks the cheapest codebook for a band, codes it
  and records it, and `escape_code` builds the escape sequence for magnitudes
  from 16 up to 8191. `write_books` (section data) and `write_scalefactors`
  return their size in bits and, when given a `BitWriter`, write the bits.
  Also `BlockType`, `Book`, `Codeword` and `WindowGroups`.
- `aaccore.quantize`: band masking and quantization of a block
  (`quantize_block`), bandwidth limits (`calc_bandwidth`) and grouping of
  short windows (`group_windows`), configured through `QuantConfig`.
- `aaccore.stereo`: mid/side and intensity stereo decisions for channel
  pairs (`apply_stereo`, `StereoMode`, `ChannelInfo`, `MSInfo`). Spectra are
  changed in place.
- `aaccore.lpc`: autocorrelation, Levinson-Durbin recursion, reflection
  coefficient quantization and truncation, `step_up`, and the TNS analysis
  and synthesis filters `tns_inv_filter` and `tns_filter`.
- `aaccore.tns`: temporal noise shaping. `tns_init` gives the limits for a
  sampling-frequency index, `ObjectType` and MPEG version; `tns_encode`
  analyses and filters a long block in place (short blocks are left alone);
  `tns_encode_filter_only` and `tns_decode_filter_only` reapply or undo the
  recorded filters.
- `aaccore.version_tool`: reads the version given to `AC_INIT` in a
  `configure.ac` file (`parse_version`, `clean_string`, `main`).

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Examples

Counting and writing Huffman bits:

```python
from aaccore.huffman import BitWriter, spectrum_bits

spectrum_bits([1, 0, -1, 0], 1)   # 7

writer = BitWriter()
writer.put(0b101, 3)
writer.to_bytes()                 # b'\xa0'
```

Sample-rate helpers:

```python
from aaccore.util import sample_rate_index, max_bitrate

sample_rate_index(44100)   # 4
max_bitrate(44100)
```

## Command line

`aaccore-ac2ver` reads a `configure.ac` file and prints the library's version
as a C define:

```
aaccore-ac2ver faac path/to/configure.ac
```

The output looks like `#define PACKAGE_VERSION "1.30"`. The exit status is
1 when the arguments are wrong, the file cannot be opened, or it holds no
version.

## What it does not do

This is not a complete encoder. It has no FFT or MDCT filterbank, no
psychoacoustic model, no ADTS or other bitstream framing and no reading of
audio files. It works on spectra that have already been computed, and
produces codewords and bit counts for them.