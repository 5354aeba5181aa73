"""Helpers for checking and creating files on disk."""

from __future__ import annotations

import logging
import os
import stat

log = logging.getLogger(__name__)


def _exists(path: str | os.PathLike[str], is_dir: bool) -> bool:
    if not os.fspath(path):
        log.debug("Path is empty")
        return False
    try:
        info = os.stat(path)
    except OSError:
        return False
    return stat.S_ISDIR(info.st_mode) == is_dir


def folder_exists(path: str | os.PathLike[str]) -> bool:
    """Report whether the given directory exists."""
    return _exists(path, True)


def file_exists(path: str | os.PathLike[str]) -> bool:
    """Report whether the given path exists and is not a directory."""
    return _exists(path, False)


def create_file(filepath: str | os.PathLike[str]) -> None:
    """Create an empty file along with any missing parent directories.

    Raises FileExistsError if the file is already there, and OSError if the
    directory or the file cannot be created.
    """
    path = os.path.normpath(os.fspath(filepath))
    if file_exists(path):
        raise FileExistsError(f"file {path} already exists")

    directory = os.path.dirname(path) or "."
    if not folder_exists(directory):
        try:
            os.makedirs(directory, exist_ok=True)
        except OSError as err:
            raise OSError(f"failed to create directory {directory}") from err

    try:
        with open(path, "w", encoding="utf-8"):
            pass
    except OSError as err:
        raise OSError(f"failed to create file {path}: {err}") from err