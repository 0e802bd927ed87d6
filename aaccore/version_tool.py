"""Extract the version number from an AC_INIT line of a configure script."""

from __future__ import annotations

import re
import sys
from typing import Iterable, Optional, Sequence

_ALLOWED = "._-"


def clean_string(text: str) -> str:
    """Keep only ASCII letters, digits, '.', '_' and '-'."""
    return "".join(c for c in text if (c.isascii() and c.isalnum()) or c in _ALLOWED)


def _pattern(lib_name: str) -> re.Pattern[str]:
    literal = "".join(
        r"\s*" if part.isspace() else re.escape(part)
        for part in re.split(r"(\s+)", lib_name)
    )
    return re.compile(r"AC_INIT\s*\(\s*" + literal + r"\s*,\s*(\S+)")


def parse_version(lines: Iterable[str], lib_name: str) -> Optional[str]:
    """Return the cleaned version given to AC_INIT for ``lib_name``, or None."""
    pattern = _pattern(lib_name)
    for line in lines:
        match = pattern.match(line.lstrip())
        if match:
            version = clean_string(match.group(1))
            if version:
                return version
    return None


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Print a PACKAGE_VERSION define for the library named on the command line."""
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) != 2 or not all(args):
        print("usage: version_tool <lib_name> <path/to/configure.ac>\n", file=sys.stderr)
        return 1
    lib_name, path = args
    try:
        with open(path, encoding="utf-8", errors="replace") as handle:
            version = parse_version(handle, lib_name)
    except OSError:
        print(f"Error: Failed to open input file!\n{path}\n", file=sys.stderr)
        return 1
    if version is None:
        print("Error: Version string could not be found!\n", file=sys.stderr)
        return 1
    print(f'#define PACKAGE_VERSION "{version}"')
    return 0


if __name__ == "__main__":
    sys.exit(main())