"""
GitHub REST client: the repository content provider used in production.

All requests go through the shared :class:`~regkeeper.utils.http.HTTPClient`,
which owns the retry policy. Failures surface as :class:`GitHubError`; a
missing file is not a failure and yields ``None``.

Typical usage::

    async with HTTPClient(max_retries=2) as http:
        github = GitHubClient(http, token=os.environ["GITHUB_TOKEN"])
        branches = await github.list_branches(coord)
"""

from __future__ import annotations

import base64
import binascii
from typing import Any, Dict, List, Optional, Type
from urllib.parse import quote

from regkeeper.constants import (
    GITHUB_API_BASE,
    GITHUB_API_VERSION,
    GITHUB_PAGE_SIZE,
)
from regkeeper.exceptions import GitHubError, NetworkError, NotFoundError
from regkeeper.models import RepositoryCoordinate, RepositoryMetadata
from regkeeper.utils.http import HTTPClient
from regkeeper.utils.logger import get_logger

logger = get_logger("github")

#: Upper bound on pages fetched from a list endpoint.
_MAX_PAGES = 10


class GitHubClient:
    """Read-only GitHub REST API client.

    Args:
        http: Shared HTTP transport.
        token: Personal access token sent as a bearer token.
        base_url: API root (override for GitHub Enterprise).
    """

    def __init__(
        self,
        http: HTTPClient,
        token: Optional[str] = None,
        base_url: str = GITHUB_API_BASE,
    ) -> None:
        self.http = http
        self.token = token
        self.base_url = base_url.rstrip("/")

    def _get_headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _repo_url(self, coord: RepositoryCoordinate, suffix: str = "") -> str:
        return (
            f"{self.base_url}/repos/{quote(coord.owner, safe='')}/"
            f"{quote(coord.name, safe='')}{suffix}"
        )

    async def _get_json(
        self,
        coord: RepositoryCoordinate,
        url: str,
        *,
        expected_type: Type[Any] = dict,
        retries: Optional[int] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        try:
            return await self.http.get_json(
                url,
                retries=retries,
                expected_type=expected_type,
                headers=self._get_headers(),
                params=params,
            )
        except NetworkError as exc:
            raise GitHubError(
                f"GitHub request failed: {exc.message}",
                repository=coord.slug,
                url=exc.url,
                status_code=exc.status_code,
            ) from exc

    async def _list_names(self, coord: RepositoryCoordinate, suffix: str) -> List[str]:
        """Collect ``name`` fields across the pages of a list endpoint."""
        names: List[str] = []
        url = self._repo_url(coord, suffix)

        for page in range(1, _MAX_PAGES + 1):
            items = await self._get_json(
                coord,
                url,
                expected_type=list,
                params={"per_page": GITHUB_PAGE_SIZE, "page": page},
            )
            names.extend(
                item["name"]
                for item in items
                if isinstance(item, dict) and isinstance(item.get("name"), str)
            )
            if len(items) < GITHUB_PAGE_SIZE:
                break

        return names

    # ------------------------------------------------------------------
    # RepositoryContentProvider
    # ------------------------------------------------------------------

    async def list_branches(self, coord: RepositoryCoordinate) -> List[str]:
        """Return all branch names of ``coord``.

        Raises:
            GitHubError: The listing failed after retries.
        """
        branches = await self._list_names(coord, "/branches")
        logger.debug("%s has %d branches", coord.slug, len(branches))
        return branches

    async def list_tags(self, coord: RepositoryCoordinate) -> List[str]:
        """Return the tag names of ``coord``.

        Raises:
            GitHubError: The listing failed after retries.
        """
        return await self._list_names(coord, "/tags")

    async def get_repository_metadata(
        self, coord: RepositoryCoordinate
    ) -> RepositoryMetadata:
        """Return description, homepage, topics, stars and language.

        Raises:
            GitHubError: The request failed after retries.
        """
        data = await self._get_json(coord, self._repo_url(coord))
        return RepositoryMetadata.from_api(data)

    async def get_file_content(
        self,
        coord: RepositoryCoordinate,
        path: str,
        ref: str,
        *,
        retries: Optional[int] = None,
    ) -> Optional[bytes]:
        """Return the decoded content of ``path`` at ``ref``.

        Returns:
            The file bytes, or ``None`` when the path does not exist, is a
            directory, or carries no inline content.

        Raises:
            GitHubError: The request failed (other than 404).
        """
        url = self._repo_url(coord, f"/contents/{quote(path)}")

        try:
            data = await self.http.get_json(
                url,
                retries=retries,
                expected_type=object,
                headers=self._get_headers(),
                params={"ref": ref},
            )
        except NotFoundError:
            return None
        except NetworkError as exc:
            raise GitHubError(
                f"Failed to fetch {path}@{ref}: {exc.message}",
                repository=coord.slug,
                url=exc.url,
                status_code=exc.status_code,
            ) from exc

        if not isinstance(data, dict) or data.get("type", "file") != "file":
            return None

        content = data.get("content")
        if not isinstance(content, str) or data.get("encoding") != "base64":
            return None

        try:
            return base64.b64decode(content)
        except (binascii.Error, ValueError):
            logger.warning("Undecodable content for %s in %s@%s", path, coord.slug, ref)
            return None
