"""
Tests for kernel release flavor classification.
"""

import pytest
from kernel_manager.kernel.classifier import CATEGORY_KEYWORDS, classify
from kernel_manager.shared import KernelCategory


class TestClassify:
    """Test keyword based classification."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("linux-cachyos-lto", KernelCategory.LTO),
            ("linux-lts", KernelCategory.LONGTERM),
            ("linux-zen", KernelCategory.ZEN),
            ("linux-hardened", KernelCategory.HARDENED),
            ("linux-next", KernelCategory.NEXT),
            ("linux-mainline", KernelCategory.MAINLINE),
            ("linux-git", KernelCategory.MASTER),
            ("linux", KernelCategory.STABLE),
            ("linux-cachyos", KernelCategory.STABLE),
        ],
    )
    def test_single_keyword(self, name: str, expected: KernelCategory) -> None:
        """Each keyword maps to its category."""
        assert classify(name) == expected

    def test_priority_beats_position(self) -> None:
        """The keyword tested first wins, wherever it sits in the name."""
        assert classify("linux-git-lts") == KernelCategory.LONGTERM
        assert classify("linux-zen-lts") == KernelCategory.LONGTERM
        assert classify("linux-lts-lto") == KernelCategory.LTO
        assert classify("linux-next-git") == KernelCategory.NEXT

    def test_empty_name_is_stable(self) -> None:
        """Classification is total."""
        assert classify("") == KernelCategory.STABLE

    def test_keyword_table_order(self) -> None:
        """The tie-break order is the documented one."""
        assert [keyword for keyword, _ in CATEGORY_KEYWORDS] == ["lto", "lts", "zen", "hardened", "next", "mainline", "git"]

    def test_category_labels(self) -> None:
        """Categories render as their human readable labels."""
        assert str(KernelCategory.LTO) == "lto optimized"
        assert KernelCategory.MASTER.value == "master branch"
