"""
Report data models for regkeeper.

These types make up one run's output: per-epoch tag and package-index
evidence, the compatibility verdict, repository metadata and the final
:class:`RegistryReport`. All of them are frozen; they are built once per
catalog entry and never modified afterwards.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from regkeeper.models.manifest import AppMetadata


def epoch_label(epoch: int) -> str:
    """Return the report label of an epoch (``2`` → ``"v2"``)."""
    return f"v{epoch}"


@dataclass(frozen=True)
class RepositoryMetadata:
    """Descriptive repository fields copied into the report."""

    description: Optional[str] = None
    homepage: Optional[str] = None
    topics: Tuple[str, ...] = field(default_factory=tuple)
    stargazers_count: int = 0
    language: Optional[str] = None

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "RepositoryMetadata":
        """Build from a GitHub ``GET /repos/{owner}/{repo}`` payload."""
        topics = data.get("topics")
        stars = data.get("stargazers_count")
        return cls(
            description=data.get("description") or None,
            homepage=data.get("homepage") or None,
            topics=tuple(t for t in topics if isinstance(t, str))
            if isinstance(topics, list)
            else (),
            stargazers_count=stars if isinstance(stars, int) and stars > 0 else 0,
            language=data.get("language") or None,
        )


@dataclass(frozen=True)
class TagInfo:
    """Best git tag per epoch for one repository."""

    repo: str
    per_epoch: Mapping[int, Optional[str]] = field(default_factory=dict)

    def tag_for(self, epoch: int) -> Optional[str]:
        return self.per_epoch.get(epoch)

    @classmethod
    def empty(cls, repo: str, epochs: Iterable[int]) -> "TagInfo":
        return cls(repo=repo, per_epoch={epoch: None for epoch in epochs})

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"repo": self.repo}
        for epoch in sorted(self.per_epoch):
            result[epoch_label(epoch)] = self.per_epoch[epoch]
        return result


@dataclass(frozen=True)
class IndexRelease:
    """Best published version of an epoch and its declared core range."""

    version: Optional[str] = None
    core_range: Optional[str] = None


@dataclass(frozen=True)
class PackageIndexInfo:
    """Package-index evidence for one package, keyed by epoch."""

    package_id: str
    per_epoch: Mapping[int, IndexRelease] = field(default_factory=dict)

    def release_for(self, epoch: int) -> IndexRelease:
        return self.per_epoch.get(epoch) or IndexRelease()

    @classmethod
    def empty(cls, package_id: str, epochs: Iterable[int]) -> "PackageIndexInfo":
        return cls(
            package_id=package_id,
            per_epoch={epoch: IndexRelease() for epoch in epochs},
        )

    def to_dict(self) -> Dict[str, Any]:
        epochs = sorted(self.per_epoch)
        result: Dict[str, Any] = {"repo": self.package_id}
        for epoch in epochs:
            result[epoch_label(epoch)] = self.per_epoch[epoch].version
        for epoch in epochs:
            result[f"{epoch_label(epoch)}CoreRange"] = self.per_epoch[epoch].core_range
        return result


@dataclass(frozen=True)
class EpochSource:
    """Representative version and branch chosen for an epoch."""

    version: Optional[str] = None
    branch: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"version": self.version, "branch": self.branch}


@dataclass(frozen=True)
class CompatibilityVerdict:
    """Per-epoch support decision for one repository.

    Attributes:
        supports: Epoch → supported flag, for every evaluated epoch.
        sources: Epoch → chosen version/branch.
        issues: Contradiction and warning notes, in the order found.
    """

    supports: Mapping[int, bool] = field(default_factory=dict)
    sources: Mapping[int, EpochSource] = field(default_factory=dict)
    issues: Tuple[str, ...] = field(default_factory=tuple)

    def is_supported(self, epoch: int) -> bool:
        return self.supports.get(epoch, False)

    @property
    def supported_epochs(self) -> Tuple[int, ...]:
        return tuple(sorted(e for e, ok in self.supports.items() if ok))

    @classmethod
    def unsupported(cls, epochs: Iterable[int]) -> "CompatibilityVerdict":
        epoch_list = list(epochs)
        return cls(
            supports={epoch: False for epoch in epoch_list},
            sources={epoch: EpochSource() for epoch in epoch_list},
        )

    def supports_dict(self) -> Dict[str, bool]:
        return {epoch_label(e): self.supports[e] for e in sorted(self.supports)}


@dataclass(frozen=True)
class RegistryEntry:
    """Everything the report records for one catalog entry."""

    tag_info: TagInfo
    index_info: PackageIndexInfo
    verdict: CompatibilityVerdict
    metadata: RepositoryMetadata = field(default_factory=RepositoryMetadata)
    app: Optional[AppMetadata] = None

    @property
    def is_app(self) -> bool:
        return self.app is not None

    @classmethod
    def degraded(
        cls,
        repo: str,
        package_id: str,
        epochs: Iterable[int],
    ) -> "RegistryEntry":
        """Entry used when resolution failed outright: nothing supported."""
        epoch_list = list(epochs)
        return cls(
            tag_info=TagInfo.empty(repo, epoch_list),
            index_info=PackageIndexInfo.empty(package_id, epoch_list),
            verdict=CompatibilityVerdict.unsupported(epoch_list),
        )

    def git_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"repo": self.tag_info.repo}
        for epoch in sorted(self.verdict.supports):
            source = self.verdict.sources.get(epoch) or EpochSource()
            result[epoch_label(epoch)] = source.to_dict()
        return result

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "git": self.git_dict(),
            "npm": self.index_info.to_dict(),
            "supports": self.verdict.supports_dict(),
            "description": self.metadata.description,
            "homepage": self.metadata.homepage,
            "topics": list(self.metadata.topics),
            "stargazers_count": self.metadata.stargazers_count,
            "language": self.metadata.language,
        }
        if self.app is not None:
            result["kind"] = "app"
            result["app"] = self.app.to_dict()
        return result


def _isoformat(moment: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a ``Z`` suffix."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    text = moment.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")


@dataclass(frozen=True)
class RegistryReport:
    """Immutable snapshot produced by one run.

    Attributes:
        last_updated_at: Generation time.
        registry: Catalog id → entry, in lexicographic key order.
        issues: Catalog id → issue notes, only for ids that have any.
    """

    last_updated_at: datetime
    registry: Mapping[str, RegistryEntry] = field(default_factory=dict)
    issues: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)

    @property
    def issue_count(self) -> int:
        return sum(len(notes) for notes in self.issues.values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lastUpdatedAt": _isoformat(self.last_updated_at),
            "registry": {key: self.registry[key].to_dict() for key in self.registry},
        }

    def to_json(self, *, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)
