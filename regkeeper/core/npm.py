"""
npm registry client: the package index provider used in production.

Only the ``versions`` map of the packument is used. The registry is
queried with a single attempt; an unknown package is not an error.
"""

from __future__ import annotations

from typing import Any, Dict, Optional
from urllib.parse import quote

from regkeeper.constants import NPM_PACKAGE_URL
from regkeeper.exceptions import NetworkError, NotFoundError, NpmError
from regkeeper.utils.http import HTTPClient
from regkeeper.utils.logger import get_logger

logger = get_logger("npm")


def package_url(package_id: str) -> str:
    """Registry URL of a package; scoped names keep ``@`` and escape ``/``.

    Example:
        >>> package_url("@elizaos/plugin-sql")
        'https://registry.npmjs.org/@elizaos%2Fplugin-sql'
    """
    return NPM_PACKAGE_URL.format(package=quote(package_id, safe="@"))


class NpmRegistryClient:
    """Fetch published version metadata from the npm registry.

    Args:
        http: Shared HTTP transport.
    """

    def __init__(self, http: HTTPClient) -> None:
        self.http = http

    async def get_package_metadata(
        self, package_id: str
    ) -> Optional[Dict[str, Any]]:
        """Return ``version → version manifest`` for ``package_id``.

        Returns:
            The ``versions`` map, or ``None`` if the package is not
            published or has no versions.

        Raises:
            NpmError: The registry could not be queried.
        """
        url = package_url(package_id)

        try:
            data = await self.http.get_json(url, retries=0)
        except NotFoundError:
            logger.debug("%s is not published on npm", package_id)
            return None
        except NetworkError as exc:
            raise NpmError(
                f"npm lookup failed: {exc.message}",
                package_name=package_id,
                url=exc.url,
                status_code=exc.status_code,
            ) from exc

        versions = data.get("versions")
        if not isinstance(versions, dict) or not versions:
            return None
        return versions
