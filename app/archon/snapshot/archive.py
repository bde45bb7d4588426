"""Zip codec for snapshot archives.

A snapshot archive is a plain zip of the staging directory: the manifest
at the root and one top-level directory per storage category. Extraction
treats the archive as untrusted input. Every entry is checked for path
traversal and decompression-bomb characteristics before anything is
written to disk.
"""

import logging
import os
import zipfile
from pathlib import Path, PureWindowsPath

from archon.snapshot.errors import ArchiveBombError, ArchiveError, UnsafeArchivePathError

logger = logging.getLogger(__name__)

# Largest uncompressed size accepted for a single entry (1 TiB)
MAX_UNCOMPRESSED_SIZE = 1 << 40

# Largest accepted uncompressed/compressed size ratio for a single entry
MAX_COMPRESSION_RATIO = 100

# Bytes tolerated beyond an entry's declared size while extracting (10 MiB)
READ_SLACK = 10 * 1024 * 1024

# Magic bytes at the start of a zip local file header
ZIP_MAGIC = b"PK\x03\x04"

_CHUNK_SIZE = 1024 * 1024
_DEFAULT_FILE_MODE = 0o644
_DIR_MODE = 0o755

# ZipInfo.create_system of archives written on unix hosts
_UNIX_SYSTEM = 3


def compress(source_dir: Path, archive_path: Path) -> Path:
    """Zip a directory tree.

    Entry names are relative to source_dir with forward slashes; directory
    entries are included and unix permission bits are stored. A partially
    written archive is removed on failure.

    Args:
        source_dir: Directory whose contents are archived.
        archive_path: Zip file to create; it must not exist yet.

    Returns:
        Path of the written archive.

    Raises:
        ArchiveError: If the archive already exists, the tree cannot be read
            or the archive cannot be written.
    """
    count = 0
    try:
        archive_path.parent.mkdir(parents=True, exist_ok=True)
        # Files older than 1980 are stored with the earliest zip timestamp
        with zipfile.ZipFile(
            archive_path, "x", compression=zipfile.ZIP_DEFLATED, strict_timestamps=False
        ) as zf:
            for path in sorted(source_dir.rglob("*")):
                zf.write(path, path.relative_to(source_dir).as_posix())
                count += 1
    except FileExistsError as e:
        raise ArchiveError(f"Archive {archive_path} already exists") from e
    except (OSError, ValueError) as e:
        archive_path.unlink(missing_ok=True)
        raise ArchiveError(f"Failed to create archive {archive_path}: {e}") from e

    logger.info("Wrote %d entries to %s", count, archive_path)
    return archive_path


def extract(archive_path: Path, dest_dir: Path) -> Path:
    """Extract a snapshot archive into a directory.

    All entries are validated before the first one is written, so a
    hostile archive leaves nothing behind.

    Args:
        archive_path: Zip file to read.
        dest_dir: Directory receiving the contents (created if missing).

    Returns:
        The destination directory.

    Raises:
        UnsafeArchivePathError: If an entry would land outside dest_dir.
        ArchiveBombError: If an entry is too large or too compressed.
        ArchiveError: If the archive is unreadable or corrupt.
    """
    root = os.path.abspath(dest_dir)
    try:
        with zipfile.ZipFile(archive_path) as zf:
            infos = zf.infolist()
            targets = [(info, _safe_target(root, info.filename)) for info in infos]
            for info, _ in targets:
                check_entry_size(info)

            os.makedirs(root, mode=_DIR_MODE, exist_ok=True)
            for info, target in targets:
                _extract_entry(zf, info, target)
    except zipfile.BadZipFile as e:
        raise ArchiveError(f"Corrupt archive {archive_path}: {e}") from e
    except OSError as e:
        raise ArchiveError(f"Failed to extract {archive_path}: {e}") from e

    logger.info("Extracted %d entries from %s", len(targets), archive_path)
    return Path(root)


def is_zip_file(path: Path) -> bool:
    """Check that a path names a zip archive by extension and magic bytes."""
    if path.suffix.lower() != ".zip":
        return False
    try:
        with open(path, "rb") as f:
            return f.read(len(ZIP_MAGIC)) == ZIP_MAGIC
    except OSError:
        return False


def check_entry_size(info: zipfile.ZipInfo) -> None:
    """Reject entries whose declared size or compression ratio is excessive.

    Raises:
        ArchiveBombError: If the entry exceeds MAX_UNCOMPRESSED_SIZE or
            MAX_COMPRESSION_RATIO.
    """
    if info.file_size > MAX_UNCOMPRESSED_SIZE:
        msg = f"Archive entry {info.filename} is too large ({info.file_size} bytes)"
        raise ArchiveBombError(msg)
    if info.compress_size > 0 and info.file_size / info.compress_size > MAX_COMPRESSION_RATIO:
        msg = (
            f"Archive entry {info.filename} has a suspicious compression ratio "
            f"({info.file_size} / {info.compress_size} bytes)"
        )
        raise ArchiveBombError(msg)


def _safe_target(root: str, name: str) -> str:
    """Compute where an entry is written, refusing anything outside root."""
    if name.startswith(("/", "\\")) or PureWindowsPath(name).drive:
        raise UnsafeArchivePathError(f"Archive entry has an absolute path: {name}")
    target = os.path.normpath(os.path.join(root, name))
    if target != root and not target.startswith(root.rstrip(os.sep) + os.sep):
        raise UnsafeArchivePathError(f"Archive entry escapes the extraction directory: {name}")
    return target


def _extract_entry(zf: zipfile.ZipFile, info: zipfile.ZipInfo, target: str) -> None:
    if info.is_dir():
        os.makedirs(target, mode=_DIR_MODE, exist_ok=True)
        return

    os.makedirs(os.path.dirname(target), mode=_DIR_MODE, exist_ok=True)
    limit = info.file_size + READ_SLACK
    written = 0
    with zf.open(info) as src, open(target, "wb") as dst:
        while chunk := src.read(_CHUNK_SIZE):
            written += len(chunk)
            if written > limit:
                msg = f"Archive entry {info.filename} holds more data than it declares"
                raise ArchiveBombError(msg)
            dst.write(chunk)

    mode = _DEFAULT_FILE_MODE
    if info.create_system == _UNIX_SYSTEM:
        mode = (info.external_attr >> 16) & 0o777 or _DEFAULT_FILE_MODE
    os.chmod(target, mode)
    logger.debug("Extracted %s (%d bytes)", info.filename, written)
