from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path


def expand_home(path: str | Path) -> Path:
    """Expand a leading '~' to the user's home directory."""
    return Path(path).expanduser()


def split_lines(text: str) -> Iterator[tuple[int, str]]:
    """Yield (line_number, line) for every non-blank line, numbering from 1."""
    for number, line in enumerate(text.splitlines(), start=1):
        if line.strip():
            yield number, line
