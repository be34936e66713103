"""Recursive discovery of candidate font files."""

import logging
import os
from collections.abc import Iterable

logger = logging.getLogger(__name__)


def walk_files(roots: Iterable[str], allowed_extensions: Iterable[str]) -> list[str]:
    """
    Collect files under ``roots`` whose extension is allowed.

    Symbolic links are never followed and directories that cannot be opened
    are skipped. The order of the result is unspecified.

    Args:
        roots: Directories to scan recursively
        allowed_extensions: Extensions including the dot, matched case-insensitively

    Returns:
        Absolute paths of matching files
    """
    allowed = {ext.lower() for ext in allowed_extensions}
    results: list[str] = []
    pending = [os.path.abspath(os.path.expanduser(str(root))) for root in roots]

    while pending:
        current = pending.pop()
        try:
            with os.scandir(current) as entries:
                children = list(entries)
        except OSError as e:
            logger.debug(f"Skipping unreadable directory {current}: {e}")
            continue

        for entry in children:
            try:
                if entry.is_symlink():
                    continue
                if entry.is_dir(follow_symlinks=False):
                    pending.append(entry.path)
                    continue
                if not entry.is_file(follow_symlinks=False):
                    continue
            except OSError:
                continue

            if os.path.splitext(entry.name)[1].lower() in allowed:
                results.append(entry.path)

    return results
