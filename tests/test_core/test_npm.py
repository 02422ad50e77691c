from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from regkeeper.core.npm import NpmRegistryClient, package_url
from regkeeper.exceptions import NetworkError, NotFoundError, NpmError
from regkeeper.utils.http import HTTPClient


def _client(**get_json) -> NpmRegistryClient:
    http = MagicMock(spec=HTTPClient)
    http.get_json = AsyncMock(**get_json)
    return NpmRegistryClient(http)


@pytest.mark.unit
class TestPackageUrl:
    """Tests for package_url."""

    def test_scoped_package(self) -> None:
        assert package_url("@elizaos/plugin-sql") == "https://registry.npmjs.org/@elizaos%2Fplugin-sql"

    def test_unscoped_package(self) -> None:
        assert package_url("left-pad") == "https://registry.npmjs.org/left-pad"


@pytest.mark.unit
class TestNpmRegistryClient:
    """Tests for NpmRegistryClient.get_package_metadata."""

    @pytest.mark.asyncio
    async def test_returns_versions_map(self) -> None:
        versions = {"1.0.0": {"dependencies": {"@elizaos/core": "^1.0.0"}}}
        client = _client(return_value={"name": "@elizaos/plugin-x", "versions": versions})

        assert await client.get_package_metadata("@elizaos/plugin-x") == versions
        client.http.get_json.assert_awaited_once_with(
            "https://registry.npmjs.org/@elizaos%2Fplugin-x", retries=0
        )

    @pytest.mark.asyncio
    async def test_unpublished_package(self) -> None:
        client = _client(side_effect=NotFoundError("Resource not found", status_code=404))

        assert await client.get_package_metadata("@elizaos/nothing") is None

    @pytest.mark.parametrize("payload", [{}, {"versions": {}}, {"versions": ["1.0.0"]}])
    @pytest.mark.asyncio
    async def test_no_versions(self, payload) -> None:
        assert await _client(return_value=payload).get_package_metadata("x") is None

    @pytest.mark.asyncio
    async def test_registry_failure_raises(self) -> None:
        client = _client(
            side_effect=NetworkError("HTTP 500 error", url="https://registry.npmjs.org/x", status_code=500)
        )

        with pytest.raises(NpmError) as exc_info:
            await client.get_package_metadata("x")

        assert exc_info.value.package_name == "x"
        assert exc_info.value.status_code == 500
