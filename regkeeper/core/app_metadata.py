"""
Detection of repositories that declare themselves as applications.

A repository is an app when one of these, read from its preferred branch,
says so:

1. ``elizaos.plugin.json`` with ``"kind": "app"`` and an ``app`` object;
2. ``package.json`` with ``elizaos.kind == "app"`` and ``elizaos.app``;
3. the nested ``elizaos.plugin.json`` next to the secondary manifest
   (``typescript/elizaos.plugin.json`` by default), like (1).

Every lookup is a single attempt; a missing or unreadable file just moves
on to the next location.
"""

from __future__ import annotations

import posixpath
from typing import Any, Mapping, Optional, Sequence

from regkeeper.constants import (
    APP_ID_PREFIX,
    DEFAULT_SECONDARY_MANIFEST_PATH,
    PLUGIN_MANIFEST_PATH,
    ROOT_MANIFEST_PATH,
)
from regkeeper.core.manifest import decode_json
from regkeeper.core.providers import RepositoryContentProvider
from regkeeper.exceptions import RegKeeperError
from regkeeper.models import AppMetadata, RepositoryCoordinate
from regkeeper.utils.logger import get_logger

logger = get_logger("app_metadata")

_APP_KIND = "app"


def pick_app_branch(branch_candidates: Sequence[str]) -> str:
    """``main``, else ``master``, else the first candidate, else ``main``."""
    for name in ("main", "master"):
        if name in branch_candidates:
            return name
    return branch_candidates[0] if branch_candidates else "main"


def app_fallback_name(catalog_id: str) -> str:
    """Catalog id without the app scope prefix."""
    if catalog_id.startswith(APP_ID_PREFIX):
        return catalog_id[len(APP_ID_PREFIX):]
    return catalog_id


def _declared_app(container: Any) -> Optional[Mapping[str, Any]]:
    if not isinstance(container, Mapping) or container.get("kind") != _APP_KIND:
        return None
    app = container.get("app")
    return app if isinstance(app, Mapping) and app else None


class AppMetadataResolver:
    """Look up app declarations in a repository.

    Args:
        provider: Repository content source.
        secondary_manifest_path: Nested manifest whose directory may hold a
            second plugin manifest.
    """

    def __init__(
        self,
        provider: RepositoryContentProvider,
        secondary_manifest_path: str = DEFAULT_SECONDARY_MANIFEST_PATH,
    ) -> None:
        self.provider = provider
        nested_dir = posixpath.dirname(secondary_manifest_path)
        self.nested_plugin_manifest: Optional[str] = (
            posixpath.join(nested_dir, PLUGIN_MANIFEST_PATH) if nested_dir else None
        )

    async def _fetch_json(
        self, coord: RepositoryCoordinate, path: str, ref: str
    ) -> Optional[Any]:
        try:
            content = await self.provider.get_file_content(
                coord, path, ref, retries=0
            )
        except RegKeeperError as exc:
            logger.debug("No %s in %s@%s: %s", path, coord.slug, ref, exc)
            return None
        return decode_json(content)

    async def resolve(
        self,
        coord: RepositoryCoordinate,
        catalog_id: str,
        branch_candidates: Sequence[str],
    ) -> Optional[AppMetadata]:
        """Return the app metadata of ``coord``, or ``None`` for plugins."""
        ref = pick_app_branch(branch_candidates)
        fallback = app_fallback_name(catalog_id)

        plugin_manifest = await self._fetch_json(coord, PLUGIN_MANIFEST_PATH, ref)
        app = _declared_app(plugin_manifest)
        if app is not None:
            return self._build(app, plugin_manifest, fallback)

        package_manifest = await self._fetch_json(coord, ROOT_MANIFEST_PATH, ref)
        if isinstance(package_manifest, Mapping):
            app = _declared_app(package_manifest.get("elizaos"))
            if app is not None:
                return self._build(app, package_manifest, fallback)

        if self.nested_plugin_manifest is not None:
            nested = await self._fetch_json(coord, self.nested_plugin_manifest, ref)
            app = _declared_app(nested)
            if app is not None:
                return self._build(app, nested, fallback)

        return None

    @staticmethod
    def _build(
        app: Mapping[str, Any], manifest: Mapping[str, Any], fallback: str
    ) -> AppMetadata:
        metadata = AppMetadata.from_declaration(
            app, manifest_name=manifest.get("name"), fallback_name=fallback
        )
        logger.info(
            "Detected app: %s (%s)", metadata.display_name, metadata.launch_type
        )
        return metadata
