from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import AsyncMock, patch

import click
import pytest
from click.testing import CliRunner

from regkeeper.cli import cli, main
from regkeeper.config import RegKeeperConfig
from regkeeper.models import RegistryEntry, RegistryReport, RepositoryMetadata

from conftest import FakeIndexProvider, FakeRepo, FakeRepositoryProvider, manifest


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Empty working directory with a two-entry catalog."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("REGKEEPER_CONFIG", raising=False)
    monkeypatch.delenv("BATCH_SIZE", raising=False)
    (tmp_path / "index.json").write_text(
        json.dumps(
            {
                "@elizaos-plugins/plugin-foo": "github:acme/plugin-foo",
                "@elizaos-plugins/plugin-bar": "github:acme/plugin-bar",
            }
        ),
        encoding="utf-8",
    )
    return tmp_path


def _report() -> RegistryReport:
    return RegistryReport(
        last_updated_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
        registry={"a": RegistryEntry.degraded("acme/a", "a", (0, 1, 2))},
        issues={"a": ("Processing failed: boom",)},
    )


@pytest.mark.unit
class TestGlobalOptions:
    """Tests for the cli group."""

    def test_version(self) -> None:
        result = CliRunner().invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert result.output.startswith("regkeeper ")

    def test_help_lists_generate(self) -> None:
        result = CliRunner().invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "generate" in result.output

    def test_invalid_config_file(self, workspace: Path) -> None:
        (workspace / "regkeeper.toml").write_text("[regkeeper]\nunknown = 1\n")

        result = CliRunner().invoke(cli, ["generate"], env={"GITHUB_TOKEN": "t"})

        assert result.exit_code == 1
        assert "Unknown configuration keys" in result.output


@pytest.mark.unit
class TestGenerateCommand:
    """Tests for ``regkeeper generate``."""

    def test_missing_token(self, workspace: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)

        with patch(
            "regkeeper.commands.generate._generate_async", new_callable=AsyncMock
        ) as mock_generate:
            result = CliRunner().invoke(cli, ["generate"])

        assert result.exit_code == 1
        assert "GITHUB_TOKEN" in result.output
        mock_generate.assert_not_called()
        assert not (workspace / "generated-registry.json").exists()

    def test_missing_catalog(self, workspace: Path) -> None:
        result = CliRunner().invoke(
            cli, ["generate", "nope.json"], env={"GITHUB_TOKEN": "t"}
        )

        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_writes_report(self, workspace: Path) -> None:
        with patch(
            "regkeeper.commands.generate._generate_async",
            new=AsyncMock(return_value=_report()),
        ) as mock_generate:
            result = CliRunner().invoke(
                cli,
                ["generate", "-o", "out/registry.json", "--batch-size", "4", "-f", "none"],
                env={"GITHUB_TOKEN": "ghp_token"},
            )

        assert result.exit_code == 0, result.output
        config, token, catalog = mock_generate.await_args.args
        assert isinstance(config, RegKeeperConfig)
        assert config.batch_size == 4
        assert token == "ghp_token"
        assert len(catalog) == 2
        data = json.loads((workspace / "out" / "registry.json").read_text(encoding="utf-8"))
        assert data["lastUpdatedAt"] == "2025-01-01T00:00:00.000Z"
        assert list(data["registry"]) == ["a"]

    def test_json_format(self, workspace: Path) -> None:
        with patch(
            "regkeeper.commands.generate._generate_async",
            new=AsyncMock(return_value=_report()),
        ):
            result = CliRunner().invoke(
                cli, ["generate", "--format", "json"], env={"GITHUB_TOKEN": "t"}
            )

        assert result.exit_code == 0
        assert '"lastUpdatedAt": "2025-01-01T00:00:00.000Z"' in result.output
        assert "Processing failed: boom" in result.output
        assert (workspace / "generated-registry.json").exists()

    def test_invalid_batch_size(self, workspace: Path) -> None:
        result = CliRunner().invoke(
            cli, ["generate", "--batch-size", "0"], env={"GITHUB_TOKEN": "t"}
        )

        assert result.exit_code == 2

    def test_end_to_end_with_fake_providers(self, workspace: Path) -> None:
        repos = FakeRepositoryProvider(
            {
                "acme/plugin-foo": FakeRepo(
                    branches=["main", "0.x"],
                    tags=["v1.0.0"],
                    metadata=RepositoryMetadata(description="Foo"),
                    files={
                        ("package.json", "main"): manifest("1.0.0", "^1.0.0"),
                        ("package.json", "0.x"): manifest("0.25.9", "^0.25.0"),
                    },
                ),
                "acme/plugin-bar": FakeRepo(branches=["dev"]),
            }
        )
        index = FakeIndexProvider(
            {"@elizaos/plugin-foo": {"1.0.1": {"dependencies": {"@elizaos/core": "^1.0.0"}}}}
        )

        with patch(
            "regkeeper.commands.generate.GitHubClient", return_value=repos
        ) as github_cls, patch(
            "regkeeper.commands.generate.NpmRegistryClient", return_value=index
        ):
            result = CliRunner().invoke(cli, ["generate"], env={"GITHUB_TOKEN": "tok"})

        assert result.exit_code == 0, result.output
        assert github_cls.call_args.kwargs["token"] == "tok"
        data = json.loads((workspace / "generated-registry.json").read_text(encoding="utf-8"))
        assert list(data["registry"]) == [
            "@elizaos-plugins/plugin-bar",
            "@elizaos-plugins/plugin-foo",
        ]
        foo = data["registry"]["@elizaos-plugins/plugin-foo"]
        assert foo["supports"] == {"v0": True, "v1": True, "v2": False}
        assert foo["git"]["v1"] == {"version": "v1.0.0", "branch": "main"}
        assert foo["npm"]["v1"] == "1.0.1"
        assert foo["description"] == "Foo"
        bar = data["registry"]["@elizaos-plugins/plugin-bar"]
        assert bar["supports"] == {"v0": False, "v1": False, "v2": False}
        assert "No standard branches found (has: dev)" in result.output


@pytest.mark.unit
class TestMainExitCodes:
    """Tests for cli.main exit code mapping."""

    @pytest.mark.parametrize(
        "raised,expected",
        [
            (click.UsageError("bad option"), 2),
            (click.Abort(), 130),
            (KeyboardInterrupt(), 130),
            (SystemExit(1), 1),
            (SystemExit("message"), 1),
            (RuntimeError("boom"), 1),
        ],
    )
    def test_exception_mapping(self, raised: BaseException, expected: int) -> None:
        with patch("regkeeper.cli.cli", side_effect=raised):
            assert main() == expected

    def test_success(self) -> None:
        with patch("regkeeper.cli.cli", return_value=None):
            assert main() == 0
