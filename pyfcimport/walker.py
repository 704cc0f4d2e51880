"""Explicit pre-order directory walker."""

import os
from pathlib import Path
from typing import Callable

from .exceptions import ResourceReadError

DirectoryCallback = Callable[[Path], None]
FileCallback = Callable[[Path], None]


def _is_hidden(name: str) -> bool:
    return name.startswith(".")


def walk_tree(
    root: Path,
    on_directory: DirectoryCallback,
    on_file: FileCallback,
    include_hidden: bool = False,
) -> None:
    """Visit every directory and file under ``root`` exactly once.

    Directories are reported before their children, starting with ``root``
    itself. Entries of a directory are visited in sorted name order, files
    and subdirectories interleaved. Symlinked directories are not followed.
    A directory that cannot be listed raises ``ResourceReadError``; errors
    raised by a callback propagate unchanged. Either stops the walk.

    Args:
        root: Directory to walk
        on_directory: Called with each directory path
        on_file: Called with each regular file path
        include_hidden: Also visit entries whose name starts with '.'
    """
    on_directory(root)
    try:
        with os.scandir(root) as it:
            entries = sorted(it, key=lambda entry: entry.name)
    except OSError as e:
        raise ResourceReadError(str(root), f"Could not list {root}: {e}") from e

    for entry in entries:
        if not include_hidden and _is_hidden(entry.name):
            continue
        path = Path(entry.path)
        if entry.is_dir(follow_symlinks=False):
            walk_tree(path, on_directory, on_file, include_hidden)
        elif entry.is_file():
            on_file(path)
