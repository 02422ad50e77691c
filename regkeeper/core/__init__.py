"""
Resolution engine for regkeeper.

- Range classification into epochs (:mod:`regkeeper.core.epochs`)
- Representative version selection (:mod:`regkeeper.core.selector`)
- Manifest resolution and evidence aggregation
- Batch orchestration across a catalog
- GitHub and npm transports
"""

from __future__ import annotations

from regkeeper.core.aggregator import (
    EvidenceAggregator,
    build_index_info,
    build_tag_info,
    select_branch_candidates,
)
from regkeeper.core.app_metadata import AppMetadataResolver
from regkeeper.core.catalog import load_catalog, write_report
from regkeeper.core.epochs import (
    classify,
    dominant_epoch,
    epoch_band,
    intersects_epoch,
    normalize_range,
    supported_epochs,
)
from regkeeper.core.github import GitHubClient
from regkeeper.core.manifest import ManifestResolver
from regkeeper.core.npm import NpmRegistryClient
from regkeeper.core.orchestrator import BatchOrchestrator
from regkeeper.core.providers import PackageIndexProvider, RepositoryContentProvider
from regkeeper.core.ranges import parse_range
from regkeeper.core.selector import select_best

__all__ = [
    # Classification
    "classify",
    "dominant_epoch",
    "epoch_band",
    "intersects_epoch",
    "normalize_range",
    "supported_epochs",
    "parse_range",
    "select_best",
    # Resolution
    "ManifestResolver",
    "EvidenceAggregator",
    "AppMetadataResolver",
    "BatchOrchestrator",
    "build_index_info",
    "build_tag_info",
    "select_branch_candidates",
    # Providers
    "RepositoryContentProvider",
    "PackageIndexProvider",
    "GitHubClient",
    "NpmRegistryClient",
    # Files
    "load_catalog",
    "write_report",
]
