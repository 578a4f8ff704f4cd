"""
Kernel discovery and classification.

This package builds the catalog of installable kernels from the package
database and classifies each one by release flavor.
"""

from .catalog import CatalogSnapshot, build_catalog, is_kernel_package_name
from .classifier import CATEGORY_KEYWORDS, classify
from .model import Kernel, headers_name_for

__all__ = [
    "CATEGORY_KEYWORDS",
    "CatalogSnapshot",
    "Kernel",
    "build_catalog",
    "classify",
    "headers_name_for",
    "is_kernel_package_name",
]
