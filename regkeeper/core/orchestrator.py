"""Batch orchestration: resolve a whole catalog into a :class:`RegistryReport`.

Entries are processed in key order, ``batch_size`` at a time. Entries of
one batch run concurrently; batches run one after another with a pause in
between to stay clear of API rate limits.

Each entry is isolated. Provider failures become empty evidence and are
folded into one issue note for the entry. Any unexpected error produces a
degraded entry (all epochs unsupported) plus a single issue note. One bad
repository never aborts the run.

Typical usage::

    async with HTTPClient(max_retries=config.retry_attempts - 1) as http:
        orchestrator = BatchOrchestrator(
            GitHubClient(http, token), NpmRegistryClient(http), config
        )
        report = await orchestrator.run(load_catalog("index.json"))
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import (
    Any,
    Awaitable,
    Dict,
    List,
    Mapping,
    Optional,
    Tuple,
    TypeVar,
)

from regkeeper.config import RegKeeperConfig
from regkeeper.core.aggregator import (
    EvidenceAggregator,
    build_index_info,
    build_tag_info,
    select_branch_candidates,
)
from regkeeper.core.app_metadata import AppMetadataResolver
from regkeeper.core.manifest import ManifestResolver
from regkeeper.core.providers import PackageIndexProvider, RepositoryContentProvider
from regkeeper.exceptions import ParseError, RegKeeperError
from regkeeper.models import (
    RegistryEntry,
    RegistryReport,
    RepositoryCoordinate,
    RepositoryMetadata,
)
from regkeeper.utils.logger import get_logger

logger = get_logger("orchestrator")

T = TypeVar("T")

#: Branch names quoted in the "no standard branches" note.
_BRANCH_PREVIEW = 3


def standard_branches_issue(branches: List[str]) -> str:
    preview = ", ".join(branches[:_BRANCH_PREVIEW])
    more = "..." if len(branches) > _BRANCH_PREVIEW else ""
    return f"No standard branches found (has: {preview}{more})"


def fetch_failure_issue(failures: List[Tuple[str, str]]) -> Optional[str]:
    """Fold an entry's provider failures into a single issue note.

    Args:
        failures: ``(label, message)`` pairs in fetch order.

    Returns:
        ``None`` when nothing failed, otherwise one note naming every
        failed fetch, e.g. ``"Failed to list branches, list tags: a; b"``.
    """
    if not failures:
        return None
    labels = ", ".join(label for label, _ in failures)
    messages = "; ".join(message for _, message in failures)
    return f"Failed to {labels}: {messages}"


class BatchOrchestrator:
    """Drive evidence aggregation across a catalog.

    Args:
        repository_provider: Source of branches, tags, files and metadata.
        index_provider: Source of published package versions.
        config: Run configuration; defaults apply when omitted.
    """

    def __init__(
        self,
        repository_provider: RepositoryContentProvider,
        index_provider: PackageIndexProvider,
        config: Optional[RegKeeperConfig] = None,
    ) -> None:
        self.repository_provider = repository_provider
        self.index_provider = index_provider
        self.config = config or RegKeeperConfig()
        self.epochs = tuple(self.config.epochs)

        resolver = ManifestResolver(
            repository_provider,
            core_package=self.config.core_package,
            secondary_path=self.config.secondary_manifest_path,
        )
        self.aggregator = EvidenceAggregator(resolver, self.epochs)
        self.app_resolver = AppMetadataResolver(
            repository_provider,
            secondary_manifest_path=self.config.secondary_manifest_path,
        )

    # ------------------------------------------------------------------
    # Catalog preparation
    # ------------------------------------------------------------------

    def filter_catalog(
        self, catalog: Mapping[Any, Any]
    ) -> List[Tuple[str, RepositoryCoordinate]]:
        """Return processable entries sorted by identifier.

        Entries with a blank identifier, a non-string reference or an
        unparseable repository reference are dropped and logged.
        """
        entries: List[Tuple[str, RepositoryCoordinate]] = []

        for key, value in catalog.items():
            if not isinstance(key, str) or not key.strip():
                logger.info("Filtering out entry: %r -> %r", key, value)
                continue
            try:
                coord = RepositoryCoordinate.parse(value)
            except ParseError as exc:
                logger.info("Filtering out entry %r: %s", key, exc)
                continue
            entries.append((key, coord))

        entries.sort(key=lambda item: item[0])
        logger.info("Filtered to %d valid entries", len(entries))
        return entries

    def guess_package_name(self, catalog_id: str) -> str:
        """Map a catalog identifier to its package-index name."""
        for prefix, replacement in self.config.package_scope_aliases.items():
            if prefix and catalog_id.startswith(prefix):
                return replacement + catalog_id[len(prefix):]
        return catalog_id

    # ------------------------------------------------------------------
    # Per-entry resolution
    # ------------------------------------------------------------------

    @staticmethod
    async def _fetch(
        label: str, awaitable: Awaitable[T]
    ) -> Tuple[Optional[T], Optional[Tuple[str, str]]]:
        """Await a provider call, turning a provider error into a failure record."""
        try:
            return await awaitable, None
        except RegKeeperError as exc:
            logger.warning("Failed to %s: %s", label, exc)
            return None, (label, exc.message)

    async def resolve_entry(
        self, catalog_id: str, coord: RepositoryCoordinate
    ) -> Tuple[RegistryEntry, List[str]]:
        """Resolve one catalog entry.

        Returns:
            The entry and its issue notes, in reporting order.
        """
        logger.info("Processing %s (%s)", catalog_id, coord.slug)
        package_id = self.guess_package_name(catalog_id)
        repo = self.repository_provider

        (
            (branches, branch_failure),
            (tags, tag_failure),
            (metadata, metadata_failure),
            (versions_meta, index_failure),
        ) = await asyncio.gather(
            self._fetch("list branches", repo.list_branches(coord)),
            self._fetch("list tags", repo.list_tags(coord)),
            self._fetch("fetch repository metadata", repo.get_repository_metadata(coord)),
            self._fetch(
                f"fetch {package_id} from the package index",
                self.index_provider.get_package_metadata(package_id),
            ),
        )

        issues: List[str] = []
        branch_names = list(branches or [])
        candidates = select_branch_candidates(branch_names, self.config.branch_candidates)
        if branch_failure is None:
            if not branch_names:
                issues.append("No branches found")
            elif not candidates:
                issues.append(standard_branches_issue(branch_names))

        # One note per entry however many of its fetches failed
        fetch_issue = fetch_failure_issue(
            [
                failure
                for failure in (branch_failure, tag_failure, metadata_failure, index_failure)
                if failure is not None
            ]
        )
        if fetch_issue is not None:
            issues.append(fetch_issue)

        tag_info = build_tag_info(coord.slug, tags or [], self.epochs)
        index_info = build_index_info(
            package_id, versions_meta, self.epochs, self.config.core_package
        )
        verdict = await self.aggregator.aggregate(coord, candidates, tag_info, index_info)
        issues.extend(verdict.issues)

        app = await self.app_resolver.resolve(coord, catalog_id, candidates)

        entry = RegistryEntry(
            tag_info=tag_info,
            index_info=index_info,
            verdict=verdict,
            metadata=metadata or RepositoryMetadata(),
            app=app,
        )
        return entry, issues

    async def _resolve_isolated(
        self, catalog_id: str, coord: RepositoryCoordinate
    ) -> Tuple[RegistryEntry, List[str]]:
        try:
            return await self.resolve_entry(catalog_id, coord)
        except Exception as exc:
            logger.error("Processing %s failed: %s", catalog_id, exc, exc_info=True)
            entry = RegistryEntry.degraded(
                coord.slug, self.guess_package_name(catalog_id), self.epochs
            )
            return entry, [f"Processing failed: {exc}"]

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def run(self, catalog: Mapping[Any, Any]) -> RegistryReport:
        """Resolve every valid catalog entry into a report."""
        entries = self.filter_catalog(catalog)
        batch_size = max(1, self.config.batch_size)
        total_batches = (len(entries) + batch_size - 1) // batch_size

        registry: Dict[str, RegistryEntry] = {}
        issues: Dict[str, Tuple[str, ...]] = {}

        logger.info(
            "Processing %d repositories in batches of %d", len(entries), batch_size
        )

        for index in range(total_batches):
            batch = entries[index * batch_size:(index + 1) * batch_size]
            logger.info(
                "Processing batch %d/%d (%d repos)", index + 1, total_batches, len(batch)
            )

            results = await asyncio.gather(
                *(self._resolve_isolated(catalog_id, coord) for catalog_id, coord in batch)
            )

            for (catalog_id, _), (entry, notes) in zip(batch, results):
                registry[catalog_id] = entry
                if notes:
                    issues[catalog_id] = tuple(notes)

            if index < total_batches - 1 and self.config.batch_delay > 0:
                await asyncio.sleep(self.config.batch_delay)

        return RegistryReport(
            last_updated_at=datetime.now(timezone.utc),
            registry={key: registry[key] for key in sorted(registry)},
            issues={key: issues[key] for key in sorted(issues)},
        )
