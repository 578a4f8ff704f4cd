"""
Release flavor classification for kernel package names.
"""

from __future__ import annotations

from ..shared import KernelCategory

# Tested in order; the first keyword contained in the name decides.
CATEGORY_KEYWORDS: tuple[tuple[str, KernelCategory], ...] = (
    ("lto", KernelCategory.LTO),
    ("lts", KernelCategory.LONGTERM),
    ("zen", KernelCategory.ZEN),
    ("hardened", KernelCategory.HARDENED),
    ("next", KernelCategory.NEXT),
    ("mainline", KernelCategory.MAINLINE),
    ("git", KernelCategory.MASTER),
)


def classify(name: str) -> KernelCategory:
    """Map a kernel package name to its release category.

    Args:
        name: The kernel package name, e.g. "linux-cachyos-lts"

    Returns:
        The category of the first matching keyword, or STABLE when none match
    """
    for keyword, category in CATEGORY_KEYWORDS:
        if keyword in name:
            return category
    return KernelCategory.STABLE
