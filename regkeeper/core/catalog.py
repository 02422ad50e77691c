"""
Catalog loading and report writing.

The catalog is a flat JSON object mapping a package identifier to a
``github:<owner>/<repo>`` reference. Validation of individual entries is
left to the orchestrator, which skips bad ones instead of failing the run.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Union

from regkeeper.exceptions import ParseError
from regkeeper.models import RegistryReport
from regkeeper.utils.filesystem import safe_read_file, safe_write_file
from regkeeper.utils.logger import get_logger

logger = get_logger("catalog")


def load_catalog(path: Union[str, Path]) -> Dict[str, Any]:
    """Read a catalog file.

    Raises:
        FileOperationError: The file is missing or unreadable.
        ParseError: The file is not a JSON object.
    """
    text = safe_read_file(path)

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ParseError(
            f"Catalog is not valid JSON: {exc.msg} (line {exc.lineno})",
            source=str(path),
        ) from exc

    if not isinstance(data, dict):
        raise ParseError(
            "Catalog must be a JSON object of id → repository reference",
            value=type(data).__name__,
            source=str(path),
        )

    logger.info("Read %d catalog entries from %s", len(data), path)
    return data


def write_report(report: RegistryReport, path: Union[str, Path]) -> Path:
    """Write ``report`` as pretty-printed JSON; returns the path written."""
    written = safe_write_file(path, report.to_json() + "\n")
    logger.info("Wrote %d entries to %s", len(report.registry), written)
    return written
