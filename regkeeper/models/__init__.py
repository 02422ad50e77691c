"""
Unified data model exports for regkeeper.

Example:
    >>> from regkeeper.models import RepositoryCoordinate, RegistryEntry
"""

from __future__ import annotations

from regkeeper.models.coordinate import RepositoryCoordinate
from regkeeper.models.manifest import (
    AppMetadata,
    ManifestInfo,
    extract_core_range,
    is_placeholder_range,
)
from regkeeper.models.registry import (
    CompatibilityVerdict,
    EpochSource,
    IndexRelease,
    PackageIndexInfo,
    RegistryEntry,
    RegistryReport,
    RepositoryMetadata,
    TagInfo,
    epoch_label,
)

__all__ = [
    "RepositoryCoordinate",
    "AppMetadata",
    "ManifestInfo",
    "extract_core_range",
    "is_placeholder_range",
    "CompatibilityVerdict",
    "EpochSource",
    "IndexRelease",
    "PackageIndexInfo",
    "RegistryEntry",
    "RegistryReport",
    "RepositoryMetadata",
    "TagInfo",
    "epoch_label",
]
