"""
Filesystem primitives used while walking the input tree.
"""

import os
from typing import Callable, Iterator


def file_exists(name: str) -> bool:
    """Return whether the path exists and is a regular file."""
    return os.path.isfile(name)


def directory_exists(name: str) -> bool:
    """Return whether the path exists and is a directory."""
    return os.path.isdir(name)


def read_file(name: str) -> str:
    with open(name, 'r', encoding='utf-8') as f:
        return f.read()


def iter_files(root: str) -> Iterator[str]:
    """
    Yield every regular file below root.

    In every directory the files are yielded first (sorted by name), then its
    subdirectories are queued, so the walk is breadth-first across the tree.
    """
    queue = [root]
    while queue:
        directory = queue.pop(0)
        subdirectories = []
        for name in sorted(os.listdir(directory)):
            path = os.path.join(directory, name)
            if file_exists(path):
                yield path
            elif directory_exists(path):
                subdirectories.append(path)
        queue.extend(subdirectories)


def walk_dir(root: str, callback: Callable[[str], None]) -> None:
    """Call callback on every file yielded by iter_files, stopping on the first error."""
    for path in iter_files(root):
        callback(path)
