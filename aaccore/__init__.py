"""Building blocks of an AAC audio encoder: Huffman coding, quantization, stereo and TNS."""

__version__ = "0.1.0"

__all__ = [
    "codebooks",
    "util",
    "huffman",
    "version_tool",
    "quantize",
    "stereo",
    "lpc",
    "tns",
]