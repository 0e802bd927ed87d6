[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "aaccore"
version = "0.1.0"
description = "Core building blocks of an AAC audio encoder: Huffman coding, quantization, stereo coding and TNS"
requires-python = ">=3.10"
dependencies = []
keywords = ["aac", "audio", "encoder", "huffman", "tns", "quantization", "stereo"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Sound/Audio :: Conversion",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
aaccore-ac2ver = "aaccore.version_tool:main"

[tool.hatch.build.targets.wheel]
packages = ["aaccore"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
