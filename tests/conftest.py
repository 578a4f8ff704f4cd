"""
Shared fixtures.
"""

import pytest
from fakes import FakeDatabase


@pytest.fixture
def db() -> FakeDatabase:
    return (
        FakeDatabase()
        .add("core", "linux", "6.6.1-1")
        .add("core", "linux-headers", "6.6.1-1")
        .add("core", "linux-lts", "6.1.50-1")
        .add("core", "linux-lts-headers", "6.1.50-1")
        .add("core", "linux-firmware", "20240101-1")
        .add("core", "linux-api-headers", "6.4-1")
        .add("extra", "linux-zen", "6.6.1.zen1-1")
        .add("extra", "linux-zen-headers", "6.6.1.zen1-1")
        .add("extra", "linux-zen-zfs", "2.2.2-1")
        .add("extra", "linux-hardened", "6.5.9.hardened1-1")
        .add("extra", "linux", "6.7.0-1")
    )
