"""
Manifest data models for regkeeper.

Manifests are arbitrary JSON. Every accessor here is total over missing
or wrongly typed fields: a value that is absent or not of the expected
type is treated as absent.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from regkeeper.constants import WORKSPACE_RANGE_PREFIX


def _string(value: Any) -> Optional[str]:
    """Return ``value`` if it is a non-empty string, else ``None``."""
    if isinstance(value, str) and value:
        return value
    return None


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _positive_int(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        return None
    return value


def extract_core_range(manifest: Any, core_package: str) -> Optional[str]:
    """Return the declared range for ``core_package``.

    ``dependencies`` wins over ``peerDependencies``; empty strings fall
    through to the next source.

    Example::

        >>> extract_core_range({"peerDependencies": {"@elizaos/core": "^1.0.0"}}, "@elizaos/core")
        '^1.0.0'
    """
    data = _mapping(manifest)
    return _string(_mapping(data.get("dependencies")).get(core_package)) or _string(
        _mapping(data.get("peerDependencies")).get(core_package)
    )


def is_placeholder_range(core_range: Optional[str]) -> bool:
    """True for workspace-internal ranges such as ``workspace:*``."""
    return bool(core_range) and core_range.startswith(WORKSPACE_RANGE_PREFIX)


@dataclass(frozen=True)
class ManifestInfo:
    """Version and core dependency range read from one branch's manifest.

    Attributes:
        source_branch: Branch (or other ref) the manifest was read from.
        version: The manifest's own ``version`` field.
        core_range: Declared range for the platform core package.
    """

    source_branch: str
    version: Optional[str] = None
    core_range: Optional[str] = None

    @classmethod
    def from_manifest(
        cls,
        manifest: Any,
        *,
        core_package: str,
        source_branch: str,
    ) -> "ManifestInfo":
        return cls(
            source_branch=source_branch,
            version=_string(_mapping(manifest).get("version")),
            core_range=extract_core_range(manifest, core_package),
        )

    @property
    def has_placeholder_range(self) -> bool:
        return is_placeholder_range(self.core_range)

    @property
    def has_resolvable_range(self) -> bool:
        """A core range is present and is not a workspace placeholder."""
        return self.core_range is not None and not self.has_placeholder_range


@dataclass(frozen=True)
class AppMetadata:
    """Application metadata for repositories that self-declare as apps.

    Attributes:
        display_name: Human-readable name.
        category: App category; ``"game"`` when undeclared.
        launch_type: How the app is launched; ``"url"`` when undeclared.
        launch_url: Launch target, if any.
        icon: Icon URL or path, if any.
        capabilities: Declared capability names.
        min_players: Minimum player count, if declared.
        max_players: Maximum player count, if declared.
    """

    display_name: str
    category: str = "game"
    launch_type: str = "url"
    launch_url: Optional[str] = None
    icon: Optional[str] = None
    capabilities: Tuple[str, ...] = field(default_factory=tuple)
    min_players: Optional[int] = None
    max_players: Optional[int] = None

    @classmethod
    def from_declaration(
        cls,
        app: Mapping[str, Any],
        *,
        manifest_name: Any,
        fallback_name: str,
    ) -> "AppMetadata":
        """Build from an ``app`` object, applying the documented defaults."""
        raw_capabilities = app.get("capabilities")
        capabilities: List[str] = []
        if isinstance(raw_capabilities, list):
            capabilities = [c for c in raw_capabilities if isinstance(c, str)]

        return cls(
            display_name=(
                _string(app.get("displayName"))
                or _string(manifest_name)
                or fallback_name
            ),
            category=_string(app.get("category")) or "game",
            launch_type=_string(app.get("launchType")) or "url",
            launch_url=_string(app.get("launchUrl")),
            icon=_string(app.get("icon")),
            capabilities=tuple(capabilities),
            min_players=_positive_int(app.get("minPlayers")),
            max_players=_positive_int(app.get("maxPlayers")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "displayName": self.display_name,
            "category": self.category,
            "launchType": self.launch_type,
            "launchUrl": self.launch_url,
            "icon": self.icon,
            "capabilities": list(self.capabilities),
            "minPlayers": self.min_players,
            "maxPlayers": self.max_players,
        }
