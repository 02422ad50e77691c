from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import pytest

from regkeeper.config import RegKeeperConfig
from regkeeper.models import RepositoryCoordinate, RepositoryMetadata


@dataclass
class FakeRepo:
    """In-memory repository served by :class:`FakeRepositoryProvider`.

    ``files`` maps ``(path, ref)`` to a JSON-able value, raw bytes, or an
    exception to raise. ``failures`` maps ``"branches"``, ``"tags"`` or
    ``"metadata"`` to an exception to raise.
    """

    branches: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    metadata: RepositoryMetadata = field(default_factory=RepositoryMetadata)
    files: Dict[Tuple[str, str], Any] = field(default_factory=dict)
    failures: Dict[str, Exception] = field(default_factory=dict)


class FakeRepositoryProvider:
    """RepositoryContentProvider over :class:`FakeRepo` objects keyed by slug.

    Unknown repositories raise ``KeyError``, which is not a provider error.
    """

    def __init__(self, repos: Optional[Dict[str, FakeRepo]] = None) -> None:
        self.repos = repos or {}
        self.file_calls: List[Tuple[str, str, str, Optional[int]]] = []

    def _repo(self, coord: RepositoryCoordinate) -> FakeRepo:
        return self.repos[coord.slug]

    def _maybe_fail(self, repo: FakeRepo, key: str) -> None:
        if key in repo.failures:
            raise repo.failures[key]

    async def list_branches(self, coord: RepositoryCoordinate) -> List[str]:
        repo = self._repo(coord)
        self._maybe_fail(repo, "branches")
        return list(repo.branches)

    async def list_tags(self, coord: RepositoryCoordinate) -> List[str]:
        repo = self._repo(coord)
        self._maybe_fail(repo, "tags")
        return list(repo.tags)

    async def get_repository_metadata(
        self, coord: RepositoryCoordinate
    ) -> RepositoryMetadata:
        repo = self._repo(coord)
        self._maybe_fail(repo, "metadata")
        return repo.metadata

    async def get_file_content(
        self,
        coord: RepositoryCoordinate,
        path: str,
        ref: str,
        *,
        retries: Optional[int] = None,
    ) -> Optional[bytes]:
        self.file_calls.append((coord.slug, path, ref, retries))
        value = self._repo(coord).files.get((path, ref))
        if isinstance(value, Exception):
            raise value
        if value is None or isinstance(value, bytes):
            return value
        return json.dumps(value).encode("utf-8")


class FakeIndexProvider:
    """PackageIndexProvider over a dict of package id → versions map."""

    def __init__(self, packages: Optional[Dict[str, Any]] = None) -> None:
        self.packages = packages or {}
        self.calls: List[str] = []

    async def get_package_metadata(self, package_id: str) -> Optional[Dict[str, Any]]:
        self.calls.append(package_id)
        value = self.packages.get(package_id)
        if isinstance(value, Exception):
            raise value
        return value


def manifest(version: Optional[str] = None, core: Optional[str] = None, **extra: Any) -> Dict[str, Any]:
    """Build a package.json-like dict depending on ``@elizaos/core``."""
    data: Dict[str, Any] = dict(extra)
    if version is not None:
        data["version"] = version
    if core is not None:
        data.setdefault("dependencies", {})["@elizaos/core"] = core
    return data


@pytest.fixture
def coord() -> RepositoryCoordinate:
    return RepositoryCoordinate(owner="acme", name="plugin-foo")


@pytest.fixture
def fast_config() -> RegKeeperConfig:
    """Default configuration without the pause between batches."""
    return RegKeeperConfig(batch_delay_ms=0)
