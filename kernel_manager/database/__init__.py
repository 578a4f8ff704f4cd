from .alpm import AlpmDatabase, open_database
from .base import PackageDatabase, PackageRecord, Transaction

__all__ = [
    "AlpmDatabase",
    "PackageDatabase",
    "PackageRecord",
    "Transaction",
    "open_database",
]
