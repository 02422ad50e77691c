"""
Evidence aggregation: fold branch, tag and package-index signals into a
per-epoch :class:`~regkeeper.models.CompatibilityVerdict`.

Evidence sources:

1. **Branch manifests**: a manifest whose own version has major ``M``
   and whose core range intersects epoch ``M`` marks ``M`` supported. The
   first candidate branch (in preference order) to claim an epoch is
   recorded as its source branch.
2. **Package index**: the best published version of each epoch supports
   that epoch when its core range intersects it. When the core range is
   unambiguously anchored to a different epoch, the anchored epoch is
   marked supported too and a version-mismatch issue is recorded.

Support is the union of all evidence; anything without evidence is
unsupported.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from regkeeper.constants import DEFAULT_CORE_PACKAGE, DEFAULT_EPOCHS
from regkeeper.core.epochs import dominant_epoch, intersects_epoch
from regkeeper.core.manifest import ManifestResolver
from regkeeper.core.selector import select_best
from regkeeper.models import (
    CompatibilityVerdict,
    EpochSource,
    IndexRelease,
    ManifestInfo,
    PackageIndexInfo,
    RepositoryCoordinate,
    TagInfo,
    epoch_label,
    extract_core_range,
)
from regkeeper.utils.logger import get_logger
from regkeeper.utils.version_utils import parse_version

logger = get_logger("aggregator")


# ---------------------------------------------------------------------------
# Evidence builders
# ---------------------------------------------------------------------------


def select_branch_candidates(
    branches: Iterable[str], preferred: Sequence[str]
) -> List[str]:
    """Return the preferred branch names that exist, in preference order."""
    existing = set(branches)
    return [name for name in preferred if name in existing]


def build_tag_info(
    repo: str, tag_names: Iterable[str], epochs: Iterable[int]
) -> TagInfo:
    """Pick the best tag of every epoch."""
    names = list(tag_names)
    return TagInfo(
        repo=repo,
        per_epoch={epoch: select_best(names, epoch) for epoch in epochs},
    )


def build_index_info(
    package_id: str,
    versions_meta: Optional[Mapping[str, Any]],
    epochs: Iterable[int],
    core_package: str = DEFAULT_CORE_PACKAGE,
) -> PackageIndexInfo:
    """Pick the best published version of every epoch and its core range.

    Args:
        package_id: Package name on the index.
        versions_meta: ``version → version manifest`` map, or ``None`` when
            the package is not published.
        epochs: Epochs to evaluate.
        core_package: Core dependency whose range is recorded.
    """
    meta = versions_meta or {}
    per_epoch: Dict[int, IndexRelease] = {}

    for epoch in epochs:
        version = select_best(meta.keys(), epoch)
        core_range = extract_core_range(meta.get(version), core_package) if version else None
        per_epoch[epoch] = IndexRelease(version=version, core_range=core_range)

    return PackageIndexInfo(package_id=package_id, per_epoch=per_epoch)


def mismatch_issue(epoch: int, version: str, dominant: int, core_range: str) -> str:
    return (
        f"{epoch_label(epoch)} package ({version}) depends on "
        f"{epoch_label(dominant)} core ({core_range}) - version mismatch"
    )


# ---------------------------------------------------------------------------
# Aggregator
# ---------------------------------------------------------------------------


class EvidenceAggregator:
    """Reconcile manifest, tag and index evidence for one repository.

    Args:
        resolver: Manifest resolver used for every candidate branch.
        epochs: Epochs to evaluate, in report order.
    """

    def __init__(
        self,
        resolver: ManifestResolver,
        epochs: Sequence[int] = DEFAULT_EPOCHS,
    ) -> None:
        self.resolver = resolver
        self.epochs = tuple(epochs)

    async def _resolve_manifests(
        self, coord: RepositoryCoordinate, branches: Sequence[str]
    ) -> List[ManifestInfo]:
        results = await asyncio.gather(
            *(self.resolver.resolve(coord, branch) for branch in branches),
            return_exceptions=True,
        )

        manifests: List[ManifestInfo] = []
        for branch, result in zip(branches, results):
            if isinstance(result, BaseException):
                logger.warning(
                    "Failed to resolve manifest of %s@%s: %s",
                    coord.slug,
                    branch,
                    result,
                )
            elif result is not None:
                manifests.append(result)
        return manifests

    async def aggregate(
        self,
        coord: RepositoryCoordinate,
        branch_candidates: Sequence[str],
        tag_info: TagInfo,
        index_info: PackageIndexInfo,
    ) -> CompatibilityVerdict:
        """Build the compatibility verdict for ``coord``.

        Args:
            coord: Repository being evaluated.
            branch_candidates: Existing branches to inspect, in preference
                order.
            tag_info: Best tag per epoch.
            index_info: Best published version and core range per epoch.
        """
        supports: Dict[int, bool] = {epoch: False for epoch in self.epochs}
        branches: Dict[int, str] = {}
        manifest_versions: Dict[int, str] = {}
        issues: List[str] = []

        for info in await self._resolve_manifests(coord, branch_candidates):
            if not info.version or not info.core_range:
                continue
            parsed = parse_version(info.version)
            if parsed is None:
                continue

            major = int(parsed.major)
            if major not in supports or major in branches:
                continue
            if intersects_epoch(info.core_range, major):
                supports[major] = True
                branches[major] = info.source_branch
                manifest_versions[major] = info.version

        for epoch in self.epochs:
            release = index_info.release_for(epoch)
            if not release.version or not release.core_range:
                continue
            parsed = parse_version(release.version)
            if parsed is None:
                continue

            if parsed.major == epoch and intersects_epoch(release.core_range, epoch):
                supports[epoch] = True

            dominant = dominant_epoch(release.core_range)
            if dominant is not None and dominant != epoch:
                issues.append(
                    mismatch_issue(epoch, release.version, dominant, release.core_range)
                )
                if dominant in supports:
                    supports[dominant] = True

        sources = {
            epoch: EpochSource(
                version=(
                    tag_info.tag_for(epoch)
                    or index_info.release_for(epoch).version
                    or manifest_versions.get(epoch)
                ),
                branch=branches.get(epoch),
            )
            for epoch in self.epochs
        }

        logger.info(
            "%s → %s",
            coord.slug,
            " ".join(f"{epoch_label(e)}:{supports[e]}" for e in self.epochs),
        )
        return CompatibilityVerdict(
            supports=supports, sources=sources, issues=tuple(issues)
        )
