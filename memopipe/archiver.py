"""
Date-partitioned archiving of processed memos.

After a memo has been published, its three artifacts (original audio,
converted audio, transcript) are moved to ``archives/<YYYY-MM-DD>/`` under
the source file's base name::

    archives/2024-01-15/foo.m4a
    archives/2024-01-15/foo.wav
    archives/2024-01-15/foo.txt

Moves overwrite an existing entry with the same name.  If one move fails the
call stops there; artifacts already moved stay in the archive.
"""

from __future__ import annotations

import logging
import shutil
from datetime import date
from pathlib import Path
from typing import List, Optional, Union

from .errors import FilesystemError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def archive_dir_for(archive_root: PathLike, today: Optional[date] = None) -> Path:
    today = today or date.today()
    return Path(archive_root) / today.strftime("%Y-%m-%d")


def archive_files(
    source_path: PathLike,
    converted_path: PathLike,
    transcript_path: PathLike,
    archive_root: PathLike,
    *,
    today: Optional[date] = None,
) -> Path:
    """Move a memo's artifacts into today's archive directory.

    Args:
        source_path: Original audio file.  Its stem names every archived file.
        converted_path: Converted audio; keeps its own extension.
        transcript_path: Raw transcript; archived with a ``.txt`` extension.
        archive_root: Directory holding the per-day folders.
        today: Date used for the folder name (defaults to the current date).

    Returns:
        The archive directory the artifacts were moved into.

    Raises:
        FilesystemError: If the directory cannot be created or any move fails.
    """
    source_path = Path(source_path)
    converted_path = Path(converted_path)
    transcript_path = Path(transcript_path)
    target_dir = archive_dir_for(archive_root, today)

    logger.info("Archiving files to %s...", target_dir)
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise FilesystemError(f"Failed to create archive directory {target_dir}: {exc}") from exc

    base_name = source_path.stem
    artifacts = [
        ("source", source_path, source_path.suffix),
        ("converted", converted_path, converted_path.suffix),
        ("transcription", transcript_path, ".txt"),
    ]
    moved: List[str] = []
    for kind, path, suffix in artifacts:
        if not path.is_file():
            continue
        destination = target_dir / f"{base_name}{suffix}"
        try:
            shutil.move(str(path), str(destination))
        except OSError as exc:
            raise FilesystemError(
                f"Failed to archive {kind} file {path}: {exc}", moved=moved
            ) from exc
        moved.append(str(destination))
        logger.info("Archived %s file: %s", kind, destination.name)
    return target_dir
