from __future__ import annotations

from enum import Enum


class KernelCategory(str, Enum):
    """Human-readable release flavor of a kernel package."""

    LTO = "lto optimized"
    LONGTERM = "longterm"
    ZEN = "zen-kernel"
    HARDENED = "hardened-kernel"
    NEXT = "next release"
    MAINLINE = "mainline branch"
    MASTER = "master branch"
    STABLE = "stable"

    def __str__(self) -> str:
        return self.value


LOCAL_REPOSITORY = "local"
HEADERS_SUFFIX = "-headers"
