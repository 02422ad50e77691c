"""Configuration file loader for regkeeper.

Handles discovery, loading, parsing, and validation of configuration files.
Supports two formats:

- ``regkeeper.toml``: settings under a ``[regkeeper]`` table
- ``pyproject.toml``: settings under a ``[tool.regkeeper]`` table

Discovery order:

1. Explicit path from ``--config`` or ``REGKEEPER_CONFIG``
2. ``regkeeper.toml`` in current directory
3. ``pyproject.toml`` with ``[tool.regkeeper]`` section

Configuration precedence: defaults < config file < environment < CLI args.
The environment may override ``BATCH_SIZE``, ``RETRY_ATTEMPTS`` and
``BATCH_DELAY_MS``. The GitHub token is never read from a file.

Typical usage::

    config = load_config()  # Auto-discover
    config = load_config(Path("custom.toml"))  # Explicit path
    token = require_github_token()

Example (``regkeeper.toml``)::

    [regkeeper]
    batch_size = 5
    epochs = [1, 2]
    branch_candidates = ["main", "1.x", "develop"]

    [regkeeper.package_scope_aliases]
    "@elizaos-plugins/" = "@elizaos/"
"""

from __future__ import annotations

import os
import tomli as tomllib
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional
from dataclasses import dataclass, field

from regkeeper.exceptions import ConfigError
from regkeeper.utils.logger import get_logger
from regkeeper.constants import (
    DEFAULT_BATCH_DELAY_MS,
    DEFAULT_BATCH_SIZE,
    DEFAULT_BRANCH_CANDIDATES,
    DEFAULT_CORE_PACKAGE,
    DEFAULT_EPOCHS,
    DEFAULT_PACKAGE_SCOPE_ALIASES,
    DEFAULT_RETRY_ATTEMPTS,
    DEFAULT_SECONDARY_MANIFEST_PATH,
    ENV_GITHUB_TOKEN,
)

logger = get_logger("config")

#: Environment variable naming an explicit configuration file.
ENV_CONFIG_PATH = "REGKEEPER_CONFIG"

#: Environment variables overriding numeric options.
ENV_OVERRIDES: Mapping[str, str] = {
    "BATCH_SIZE": "batch_size",
    "RETRY_ATTEMPTS": "retry_attempts",
    "BATCH_DELAY_MS": "batch_delay_ms",
}


@dataclass
class RegKeeperConfig:
    """Parsed and validated regkeeper configuration.

    All fields have defaults, so empty config files are valid.

    Attributes:
        batch_size: Catalog entries resolved concurrently per batch.
        retry_attempts: Total attempts for GitHub reads.
        batch_delay_ms: Pause between batches in milliseconds.
        core_package: Platform core dependency that defines the epoch.
        epochs: Epochs evaluated for every entry, in report order.
        branch_candidates: Branches inspected for manifests, in preference
            order.
        secondary_manifest_path: Nested manifest consulted when the root
            one declares a workspace placeholder.
        package_scope_aliases: Catalog scope prefix → npm scope prefix.
        source_path: Path to loaded config file, or ``None`` if using defaults.
    """

    batch_size: int = DEFAULT_BATCH_SIZE
    retry_attempts: int = DEFAULT_RETRY_ATTEMPTS
    batch_delay_ms: int = DEFAULT_BATCH_DELAY_MS
    core_package: str = DEFAULT_CORE_PACKAGE
    epochs: List[int] = field(default_factory=lambda: list(DEFAULT_EPOCHS))
    branch_candidates: List[str] = field(
        default_factory=lambda: list(DEFAULT_BRANCH_CANDIDATES)
    )
    secondary_manifest_path: str = DEFAULT_SECONDARY_MANIFEST_PATH
    package_scope_aliases: Dict[str, str] = field(
        default_factory=lambda: dict(DEFAULT_PACKAGE_SCOPE_ALIASES)
    )

    # Metadata (not a user-facing option)
    source_path: Optional[Path] = field(default=None, repr=False)

    @property
    def batch_delay(self) -> float:
        """Pause between batches in seconds."""
        return self.batch_delay_ms / 1000.0

    def to_log_dict(self) -> Dict[str, Any]:
        """Return configuration as dictionary for debug logging.

        Excludes ``source_path`` metadata.
        """
        return {
            "batch_size": self.batch_size,
            "retry_attempts": self.retry_attempts,
            "batch_delay_ms": self.batch_delay_ms,
            "core_package": self.core_package,
            "epochs": list(self.epochs),
            "branch_candidates": list(self.branch_candidates),
            "secondary_manifest_path": self.secondary_manifest_path,
            "package_scope_aliases": dict(self.package_scope_aliases),
        }


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


def discover_config_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Find the configuration file to load.

    Args:
        explicit_path: Explicit config path. If provided, must exist.

    Returns:
        Resolved path to config file, or ``None`` if not found.

    Raises:
        ConfigError: Explicit path provided but does not exist.
    """
    if explicit_path is not None:
        resolved = explicit_path.resolve()
        if not resolved.is_file():
            raise ConfigError(
                f"Configuration file not found: {explicit_path}",
                config_path=str(explicit_path),
            )
        logger.debug("Using explicit config: %s", resolved)
        return resolved

    cwd = Path.cwd()

    regkeeper_toml = cwd / "regkeeper.toml"
    if regkeeper_toml.is_file():
        logger.debug("Found regkeeper.toml: %s", regkeeper_toml)
        return regkeeper_toml

    pyproject_toml = cwd / "pyproject.toml"
    if pyproject_toml.is_file() and _pyproject_has_regkeeper_section(pyproject_toml):
        logger.debug("Found [tool.regkeeper] in pyproject.toml: %s", pyproject_toml)
        return pyproject_toml

    logger.debug("No configuration file found")
    return None


def _pyproject_has_regkeeper_section(path: Path) -> bool:
    """Check if pyproject.toml contains a ``[tool.regkeeper]`` section.

    An unreadable pyproject.toml is treated as having no section.
    """
    try:
        raw = _read_toml(path)
    except ConfigError:
        return False
    tool = raw.get("tool", {})
    return isinstance(tool, dict) and "regkeeper" in tool


def load_config(
    config_path: Optional[Path] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> RegKeeperConfig:
    """Load and validate regkeeper configuration.

    Discovers the config file (or uses the provided path), parses and
    validates it, then applies environment overrides.

    Args:
        config_path: Explicit path to config file. If ``None``, uses
            auto-discovery (see :func:`discover_config_file`).
        environ: Environment to read overrides from (defaults to
            ``os.environ``).

    Returns:
        Validated :class:`RegKeeperConfig`.

    Raises:
        ConfigError: File cannot be parsed, has unknown keys, or invalid values.
    """
    env = os.environ if environ is None else environ
    resolved = discover_config_file(config_path)

    if resolved is None:
        logger.debug("No config file found, using defaults")
        config = RegKeeperConfig()
    else:
        logger.info("Loading configuration from %s", resolved)
        raw = _read_toml(resolved)

        if resolved.name == "pyproject.toml":
            section = raw.get("tool", {}).get("regkeeper", {})
        else:
            section = raw.get("regkeeper", {})

        if not section:
            logger.debug("Config file found but no regkeeper section, using defaults")
            config = RegKeeperConfig()
        else:
            config = _parse_section(section, config_path=str(resolved))
        config.source_path = resolved

    apply_env_overrides(config, env)
    logger.debug("Loaded configuration: %s", config.to_log_dict())
    return config


def apply_env_overrides(config: RegKeeperConfig, environ: Mapping[str, str]) -> None:
    """Apply ``BATCH_SIZE``/``RETRY_ATTEMPTS``/``BATCH_DELAY_MS`` in place.

    Values that are not valid integers for their option are ignored with a
    warning.
    """
    for env_name, option in ENV_OVERRIDES.items():
        raw = environ.get(env_name)
        if raw is None or not raw.strip():
            continue

        try:
            value = int(raw.strip())
        except ValueError:
            logger.warning("Ignoring %s=%r: not an integer", env_name, raw)
            continue

        minimum = 0 if option == "batch_delay_ms" else 1
        if value < minimum:
            logger.warning("Ignoring %s=%r: must be >= %d", env_name, raw, minimum)
            continue

        setattr(config, option, value)


def require_github_token(environ: Optional[Mapping[str, str]] = None) -> str:
    """Return the GitHub token from the environment.

    Raises:
        ConfigError: The token is missing or blank.
    """
    env = os.environ if environ is None else environ
    token = (env.get(ENV_GITHUB_TOKEN) or "").strip()
    if not token:
        raise ConfigError(
            f"{ENV_GITHUB_TOKEN} environment variable is required",
            option=ENV_GITHUB_TOKEN,
        )
    return token


def _read_toml(path: Path) -> Dict[str, Any]:
    """Read and parse a TOML file.

    Raises:
        ConfigError: File cannot be read or is not valid TOML.
    """
    try:
        with open(path, "rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(
            f"Invalid TOML in {path.name}: {exc}",
            config_path=str(path),
        ) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read configuration file {path}: {exc}",
            config_path=str(path),
        ) from exc


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def _int_option(minimum: int) -> Callable[[str, Any, str], Any]:
    def check(name: str, val: Any, config_path: str) -> int:
        if isinstance(val, bool) or not isinstance(val, int):
            raise ConfigError(
                f"{name} must be an integer, got {type(val).__name__}",
                config_path=config_path,
                option=name,
            )
        if val < minimum:
            raise ConfigError(
                f"{name} must be >= {minimum}, got {val}",
                config_path=config_path,
                option=name,
            )
        return val

    return check


def _str_option(name: str, val: Any, config_path: str) -> str:
    if not isinstance(val, str) or not val.strip():
        raise ConfigError(
            f"{name} must be a non-empty string, got {type(val).__name__}",
            config_path=config_path,
            option=name,
        )
    return val.strip()


def _epochs_option(name: str, val: Any, config_path: str) -> List[int]:
    if (
        not isinstance(val, list)
        or not val
        or any(isinstance(e, bool) or not isinstance(e, int) or e < 0 for e in val)
    ):
        raise ConfigError(
            f"{name} must be a non-empty list of non-negative integers",
            config_path=config_path,
            option=name,
        )
    if len(set(val)) != len(val):
        raise ConfigError(
            f"{name} must not contain duplicates",
            config_path=config_path,
            option=name,
        )
    return list(val)


def _branches_option(name: str, val: Any, config_path: str) -> List[str]:
    if not isinstance(val, list) or any(
        not isinstance(b, str) or not b.strip() for b in val
    ):
        raise ConfigError(
            f"{name} must be a list of branch names",
            config_path=config_path,
            option=name,
        )
    return [b.strip() for b in val]


def _aliases_option(name: str, val: Any, config_path: str) -> Dict[str, str]:
    if not isinstance(val, dict) or any(
        not isinstance(k, str) or not isinstance(v, str) for k, v in val.items()
    ):
        raise ConfigError(
            f"{name} must be a table of string prefixes",
            config_path=config_path,
            option=name,
        )
    return dict(val)


_VALIDATORS: Dict[str, Callable[[str, Any, str], Any]] = {
    "batch_size": _int_option(1),
    "retry_attempts": _int_option(1),
    "batch_delay_ms": _int_option(0),
    "core_package": _str_option,
    "epochs": _epochs_option,
    "branch_candidates": _branches_option,
    "secondary_manifest_path": _str_option,
    "package_scope_aliases": _aliases_option,
}


def _parse_section(
    section: Dict[str, Any],
    *,
    config_path: str,
) -> RegKeeperConfig:
    """Parse and validate a ``[regkeeper]`` or ``[tool.regkeeper]`` table.

    Raises:
        ConfigError: Unknown keys or values of the wrong type or range.
    """
    config = RegKeeperConfig()

    unknown = set(section.keys()) - set(_VALIDATORS)
    if unknown:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(sorted(unknown))}",
            config_path=config_path,
        )

    for name, validate in _VALIDATORS.items():
        if name in section:
            setattr(config, name, validate(name, section[name], config_path))

    return config
