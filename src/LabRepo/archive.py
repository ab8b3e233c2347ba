"""Writing repository archives to disk."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable

from LabRepo.errors import ArchiveWriteError

logger = logging.getLogger(__name__)


def materialize(
    chunks: Iterable[bytes],
    filename: str,
    directory: str | os.PathLike | None = None,
    *,
    default_directory: str | os.PathLike,
) -> Path:
    """Drain ``chunks`` into ``directory / filename`` and return the path.

    The data is written to a temporary file next to the target and renamed
    over it only after the whole stream has been written, so an existing
    archive is replaced in one step and a failed download never leaves a
    truncated file behind.

    Args:
        chunks: Byte chunks, consumed once.
        filename: Bare file name (no directory part).
        directory: Target directory. ``None`` uses ``default_directory``.
        default_directory: Configured fallback directory.

    Raises:
        ArchiveWriteError: on any local I/O failure.
    """
    target_dir = Path(directory if directory is not None else default_directory)
    if not target_dir.is_dir():
        raise ArchiveWriteError(f"Archive directory does not exist: {target_dir}")

    target = target_dir / filename
    try:
        fd, tmp_name = tempfile.mkstemp(dir=target_dir, prefix=f".{filename}.", suffix=".part")
    except OSError as exc:
        raise ArchiveWriteError(f"Cannot create file in {target_dir}: {exc}", cause=exc) from exc

    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as fh:
            for chunk in chunks:
                fh.write(chunk)
        os.replace(tmp_path, target)
    except OSError as exc:
        tmp_path.unlink(missing_ok=True)
        raise ArchiveWriteError(f"Failed to write archive {target}: {exc}", cause=exc) from exc
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise

    logger.info("Saved archive to %s", target)
    return target
