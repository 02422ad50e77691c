"""
Filesystem utilities for regkeeper.

Size-limited reads for the catalog and atomic writes for the report. All
filesystem errors are normalized to ``FileOperationError``.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from regkeeper.utils.logger import get_logger
from regkeeper.exceptions import FileOperationError
from regkeeper.constants import MAX_FILE_SIZE

logger = get_logger("filesystem")

PathLike = Union[str, Path]


def _validated_file(path: Path) -> Path:
    """Resolve ``path`` and make sure it is an existing regular file."""
    if not path.exists():
        raise FileOperationError(
            f"File not found: {path}",
            file_path=str(path),
            operation="read",
        )
    if not path.is_file():
        raise FileOperationError(
            f"Not a file: {path}",
            file_path=str(path),
            operation="read",
        )
    return path.resolve()


def _atomic_write(target: Path, content: str) -> None:
    """Write text through a temporary sibling file and an atomic replace."""
    target.parent.mkdir(parents=True, exist_ok=True)
    temp_path: Optional[Path] = None

    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=str(target.parent),
            delete=False,
            prefix=f".{target.name}.",
            suffix=".tmp",
        ) as tmp:
            temp_path = Path(tmp.name)
            tmp.write(content)
            tmp.flush()
            os.fsync(tmp.fileno())

        temp_path.replace(target)

    except OSError as exc:
        if temp_path and temp_path.exists():
            try:
                temp_path.unlink()
                logger.debug("Cleaned up temporary file: %s", temp_path)
            except OSError as cleanup_exc:
                logger.warning(
                    "Failed to clean up temporary file %s: %s",
                    temp_path,
                    cleanup_exc,
                )

        raise FileOperationError(
            f"Atomic write failed: {exc}",
            file_path=str(target),
            operation="write",
            original_error=exc,
        ) from exc


def safe_read_file(
    file_path: PathLike,
    *,
    max_size: Optional[int] = MAX_FILE_SIZE,
    encoding: str = "utf-8",
) -> str:
    """Read a text file, refusing files above ``max_size`` bytes.

    Args:
        file_path: Path to the file.
        max_size: Maximum allowed file size in bytes (None disables limit).
        encoding: Text encoding.

    Returns:
        File contents as a string.

    Raises:
        FileOperationError: Missing file, oversized file or read failure.
    """
    path = _validated_file(Path(file_path))
    size = path.stat().st_size

    if max_size is not None and size > max_size:
        raise FileOperationError(
            f"File too large: {size} bytes (max {max_size})",
            file_path=str(path),
            operation="read",
        )

    try:
        return path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as exc:
        raise FileOperationError(
            f"Failed to read file: {exc}",
            file_path=str(path),
            operation="read",
            original_error=exc,
        ) from exc


def safe_write_file(file_path: PathLike, content: str) -> Path:
    """Atomically write ``content`` to ``file_path``.

    Returns:
        The path written.
    """
    path = Path(file_path)
    _atomic_write(path, content)
    logger.debug("Wrote %d bytes to %s", len(content), path)
    return path
