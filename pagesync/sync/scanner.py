"""Content scanner: turns a build directory into FileRecords.

Walks the tree once, skips the reserved control files at any depth,
and fingerprints the remaining files on a thread pool. Any read error
aborts the whole scan; a partial file list would produce a manifest
that silently drops assets.
"""

import logging
import mimetypes
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional

from pagesync.sync.hasher import fingerprint_file
from pagesync.sync.types import DEFAULT_MIME_TYPE, RESERVED_FILENAMES, FileRecord

logger = logging.getLogger(__name__)

DEFAULT_HASH_WORKERS = 8


def scan_directory(root: Path, workers: Optional[int] = None) -> list[FileRecord]:
    """Scan *root* recursively and return one FileRecord per asset.

    Records are ordered by public path so repeated scans of the same
    tree yield identical output.

    Raises:
        FileNotFoundError: *root* does not exist.
        NotADirectoryError: *root* is not a directory.
        OSError: Any file could not be stat'ed or read.
    """
    root = Path(root).resolve()
    if not root.exists():
        raise FileNotFoundError(f"Upload directory does not exist: {root}")
    if not root.is_dir():
        raise NotADirectoryError(f"Upload path is not a directory: {root}")

    paths = _collect_files(root)
    logger.info("Collected %d uploadable files in %s", len(paths), root)

    if not paths:
        return []

    with ThreadPoolExecutor(max_workers=workers or DEFAULT_HASH_WORKERS) as pool:
        # map() re-raises the first worker exception when iterated
        records = list(pool.map(lambda p: _build_record(root, p), paths))

    return sorted(records, key=lambda r: r.public_path)


def to_public_path(root: Path, path: Path) -> str:
    """Map a file under *root* to its served path ("/a/b.css")."""
    return "/" + path.relative_to(root).as_posix()


def guess_mime_type(path: Path) -> str:
    mime, _ = mimetypes.guess_type(path.name, strict=False)
    return mime or DEFAULT_MIME_TYPE


def _collect_files(root: Path) -> list[Path]:
    """List regular files under *root*, excluding reserved names."""
    files: list[Path] = []

    def _raise(exc: OSError) -> None:
        raise exc

    for dirpath, _dirnames, filenames in os.walk(root, onerror=_raise):
        for name in filenames:
            if name in RESERVED_FILENAMES:
                logger.debug("Skipping reserved file %s", Path(dirpath) / name)
                continue
            path = Path(dirpath) / name
            # Only regular files; a symlink may point outside the build tree
            if path.is_symlink():
                logger.debug("Skipping symlink %s", path)
                continue
            if not path.is_file():
                continue
            files.append(path)

    return files


def _build_record(root: Path, path: Path) -> FileRecord:
    return FileRecord(
        absolute_path=path,
        public_path=to_public_path(root, path),
        size=path.stat().st_size,
        mime_type=guess_mime_type(path),
        fingerprint=fingerprint_file(path),
    )
