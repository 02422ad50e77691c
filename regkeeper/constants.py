"""
Centralized constants for regkeeper.

Network endpoints, processing defaults, manifest locations and logging
formats. All values are intended to be treated as read-only.
"""

from typing import Final, Mapping, Sequence

# ---------------------------------------------------------------------------
# Project metadata
# ---------------------------------------------------------------------------

#: HTTP User-Agent template used for outbound requests.
USER_AGENT_TEMPLATE: Final[str] = "regkeeper/{version}"

# ---------------------------------------------------------------------------
# Remote endpoints
# ---------------------------------------------------------------------------

#: Base URL for the GitHub REST API.
GITHUB_API_BASE: Final[str] = "https://api.github.com"

#: GitHub REST API version header value.
GITHUB_API_VERSION: Final[str] = "2022-11-28"

#: Packument URL for the npm registry.
NPM_PACKAGE_URL: Final[str] = "https://registry.npmjs.org/{package}"

#: Environment variable holding the GitHub access token.
ENV_GITHUB_TOKEN: Final[str] = "GITHUB_TOKEN"

#: Prefix of a catalog repository reference.
GITHUB_REF_PREFIX: Final[str] = "github:"

# ---------------------------------------------------------------------------
# HTTP configuration
# ---------------------------------------------------------------------------

#: Default network timeout in seconds.
DEFAULT_TIMEOUT: Final[int] = 30

#: Total attempts for idempotent GitHub reads (first try included).
DEFAULT_RETRY_ATTEMPTS: Final[int] = 3

#: Page size for GitHub list endpoints.
GITHUB_PAGE_SIZE: Final[int] = 100

# ---------------------------------------------------------------------------
# Batch processing
# ---------------------------------------------------------------------------

#: Number of catalog entries resolved concurrently.
DEFAULT_BATCH_SIZE: Final[int] = 10

#: Pause between batches, in milliseconds.
DEFAULT_BATCH_DELAY_MS: Final[int] = 1000

# ---------------------------------------------------------------------------
# Compatibility model
# ---------------------------------------------------------------------------

#: Platform core package whose dependency range defines the epoch.
DEFAULT_CORE_PACKAGE: Final[str] = "@elizaos/core"

#: Epochs evaluated for every catalog entry.
DEFAULT_EPOCHS: Final[Sequence[int]] = (0, 1, 2)

#: Branch names inspected for manifests, in preference order.
DEFAULT_BRANCH_CANDIDATES: Final[Sequence[str]] = (
    "main",
    "master",
    "0.x",
    "1.x",
    "2.x",
    "next",
)

#: Catalog scope prefixes rewritten before the npm lookup.
DEFAULT_PACKAGE_SCOPE_ALIASES: Final[Mapping[str, str]] = {
    "@elizaos-plugins/": "@elizaos/",
}

#: Root manifest of a repository.
ROOT_MANIFEST_PATH: Final[str] = "package.json"

#: Nested publishable package inside a monorepo.
DEFAULT_SECONDARY_MANIFEST_PATH: Final[str] = "typescript/package.json"

#: Plugin manifest that may declare an application.
PLUGIN_MANIFEST_PATH: Final[str] = "elizaos.plugin.json"

#: Prefix of a workspace-internal dependency range.
WORKSPACE_RANGE_PREFIX: Final[str] = "workspace:"

#: Range prefixes that never describe a semantic version range.
NON_SEMANTIC_RANGE_PREFIXES: Final[Sequence[str]] = (
    "http",
    "git",
    "file:",
    "link:",
    "portal:",
    "npm:",
    WORKSPACE_RANGE_PREFIX,
)

#: Catalog id prefix stripped when deriving an app display name.
APP_ID_PREFIX: Final[str] = "@elizaos/app-"

# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------

#: Default catalog file.
DEFAULT_CATALOG_FILE: Final[str] = "index.json"

#: Default report file.
DEFAULT_OUTPUT_FILE: Final[str] = "generated-registry.json"

#: Maximum allowed catalog size in bytes.
MAX_FILE_SIZE: Final[int] = 10 * 1024 * 1024  # 10 MB

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
