"""
Manifest resolution for one repository ref.

The root ``package.json`` is authoritative unless its core dependency is a
workspace placeholder (or missing), which is how monorepos declare the
core they are developed against. In that case the nested publishable
package (``typescript/package.json`` by default) is consulted, and its
range wins if it is a real one.

Typical usage::

    resolver = ManifestResolver(github, core_package="@elizaos/core")
    info = await resolver.resolve(coord, "main")
    if info is not None:
        print(info.version, info.core_range)
"""

from __future__ import annotations

import json
from typing import Any, Optional

from regkeeper.constants import (
    DEFAULT_CORE_PACKAGE,
    DEFAULT_SECONDARY_MANIFEST_PATH,
    ROOT_MANIFEST_PATH,
)
from regkeeper.core.providers import RepositoryContentProvider
from regkeeper.exceptions import RegKeeperError
from regkeeper.models import ManifestInfo, RepositoryCoordinate
from regkeeper.utils.logger import get_logger

logger = get_logger("manifest")


def decode_json(content: Optional[bytes]) -> Optional[Any]:
    """Decode a JSON document fetched from a repository.

    Returns ``None`` for missing content and for anything that is not valid
    UTF-8 JSON.
    """
    if content is None:
        return None
    try:
        return json.loads(content.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        return None


class ManifestResolver:
    """Fetch and prioritize manifest evidence for a repository ref.

    Args:
        provider: Repository content source.
        core_package: Name of the platform core dependency.
        secondary_path: Nested manifest consulted for placeholder ranges.
    """

    def __init__(
        self,
        provider: RepositoryContentProvider,
        core_package: str = DEFAULT_CORE_PACKAGE,
        secondary_path: str = DEFAULT_SECONDARY_MANIFEST_PATH,
    ) -> None:
        self.provider = provider
        self.core_package = core_package
        self.secondary_path = secondary_path

    async def resolve(
        self, coord: RepositoryCoordinate, ref: str
    ) -> Optional[ManifestInfo]:
        """Return manifest evidence for ``ref``, or ``None`` if unavailable.

        Failures of the root fetch are logged and yield ``None``; failures
        of the secondary fetch are silent.
        """
        try:
            content = await self.provider.get_file_content(
                coord, ROOT_MANIFEST_PATH, ref
            )
        except RegKeeperError as exc:
            logger.warning(
                "Failed to fetch %s from %s@%s: %s",
                ROOT_MANIFEST_PATH,
                coord.slug,
                ref,
                exc.message,
            )
            return None

        manifest = decode_json(content)
        if not isinstance(manifest, dict):
            return None

        root = ManifestInfo.from_manifest(
            manifest, core_package=self.core_package, source_branch=ref
        )
        if root.has_resolvable_range:
            return root

        secondary = await self._resolve_secondary(coord, ref)
        if secondary is not None and secondary.has_resolvable_range:
            logger.debug(
                "Using %s for %s@%s", self.secondary_path, coord.slug, ref
            )
            return secondary
        return root

    async def _resolve_secondary(
        self, coord: RepositoryCoordinate, ref: str
    ) -> Optional[ManifestInfo]:
        try:
            content = await self.provider.get_file_content(
                coord, self.secondary_path, ref, retries=0
            )
        except RegKeeperError:
            return None

        manifest = decode_json(content)
        if not isinstance(manifest, dict):
            return None
        return ManifestInfo.from_manifest(
            manifest, core_package=self.core_package, source_branch=ref
        )
