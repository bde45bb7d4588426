"""File copy helpers shared by backup and restore.

Provides recursive copying that preserves timestamps and merges into
existing directories.
"""

import logging
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)


def copy_file_or_dir(source: Path, dest: Path) -> None:
    """Copy a file or a directory tree, overwriting existing files.

    Directories are merged into an existing destination; files already
    present at the destination are replaced. Whatever occupies dest with
    the wrong kind is removed first: a file or symlink in the way of a
    directory, a directory in the way of a file. A symlink at dest is
    replaced, never written through. Parent directories of dest are
    created as needed.

    Args:
        source: File or directory to copy.
        dest: Destination path (the copy itself, not its parent).

    Raises:
        OSError: If the source cannot be read or the destination written.
    """
    if source.is_dir():
        logger.debug("Copying directory %s -> %s", source, dest)
        if dest.is_symlink() or (dest.exists() and not dest.is_dir()):
            logger.debug("Removing %s in the way of a directory", dest)
            dest.unlink()
        dest.mkdir(parents=True, exist_ok=True)
        shutil.copytree(source, dest, dirs_exist_ok=True)
        return

    logger.debug("Copying file %s -> %s", source, dest)
    dest.parent.mkdir(parents=True, exist_ok=True)
    if dest.is_symlink():
        dest.unlink()
    elif dest.is_dir():
        shutil.rmtree(dest)
    shutil.copy2(source, dest)
