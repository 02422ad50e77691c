"""
Capability interfaces consumed by the resolution core.

The core never talks to GitHub or npm directly; it depends on these
protocols so transports can be swapped (and faked in tests).
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol

from regkeeper.models import RepositoryCoordinate, RepositoryMetadata


class RepositoryContentProvider(Protocol):
    """Read access to a hosted source repository."""

    async def list_branches(self, coord: RepositoryCoordinate) -> List[str]:
        """Return the repository's branch names.

        Raises:
            RegKeeperError: The listing could not be obtained.
        """
        ...

    async def get_file_content(
        self,
        coord: RepositoryCoordinate,
        path: str,
        ref: str,
        *,
        retries: Optional[int] = None,
    ) -> Optional[bytes]:
        """Return the raw bytes of ``path`` at ``ref``.

        Returns ``None`` when the file does not exist. ``retries`` overrides
        the provider's retry policy (``0`` means a single attempt).
        """
        ...

    async def list_tags(self, coord: RepositoryCoordinate) -> List[str]:
        """Return the repository's tag names."""
        ...

    async def get_repository_metadata(
        self, coord: RepositoryCoordinate
    ) -> RepositoryMetadata:
        """Return descriptive repository fields."""
        ...


class PackageIndexProvider(Protocol):
    """Read access to a public package index."""

    async def get_package_metadata(
        self, package_id: str
    ) -> Optional[Dict[str, Any]]:
        """Return ``version → version manifest`` for a package.

        Returns ``None`` when the package is unknown to the index.
        """
        ...
