"""
regkeeper: plugin registry compatibility generator.

For every package in a plugin catalog, regkeeper inspects the source
repository (branches, tags, manifests) and the npm registry, works out
which major epochs of the platform core the package supports, and writes
a machine-readable compatibility registry.

Features include:
    • npm range classification into epoch bands
    • Manifest evidence from preferred branches and monorepo packages
    • Tag and npm version evidence with mismatch detection
    • App self-declaration detection
    • Paced, bounded batch processing with per-entry fault isolation
"""

from __future__ import annotations

from regkeeper.__version__ import __version__

# ---------------------------------------------------------------------------
# Package Metadata
# ---------------------------------------------------------------------------

__author__ = "regkeeper Contributors"
__license__ = "Apache-2.0"
__description__ = "Plugin registry epoch-compatibility generator."

__all__ = [
    "__version__",
]
