"""File system and string helpers used by connectors and model libraries."""

from __future__ import annotations

import os
import shutil
from collections.abc import Iterable


def file_exists(fname: str) -> bool:
    """Return whether *fname* names an existing file system entry."""
    try:
        os.stat(fname)
    except (OSError, ValueError):
        return False
    return True


def is_directory(fname: str) -> bool:
    """Return whether *fname* names an existing directory."""
    try:
        return os.path.isdir(fname)
    except ValueError:
        return False


def file_last_modif(fname: str) -> int:
    """Return the last modification time of *fname*, in whole seconds.

    Raises :class:`OSError` when the file cannot be examined.
    """
    return int(os.stat(fname).st_mtime)


def _is_real_dir(entry: os.DirEntry) -> bool:
    return entry.is_dir(follow_symlinks=False)


def list_directory(repo: str, files: bool, dirs: bool) -> set[str]:
    """List entries of *repo* as ``repo/name`` paths.

    Regular files and links are included when *files* is true; directories
    and links whose name does not start with a dot when *dirs* is true.
    Raises :class:`OSError` when *repo* cannot be opened.
    """
    found: set[str] = set()
    with os.scandir(repo) as entries:
        for entry in entries:
            is_link = entry.is_symlink()
            want_file = files and (entry.is_file(follow_symlinks=False) or is_link)
            want_dir = (
                dirs
                and (_is_real_dir(entry) or is_link)
                and not entry.name.startswith(".")
            )
            if want_file or want_dir:
                found.add(f"{repo}/{entry.name}")
    return found


def _remove_entry(path: str, is_dir: bool) -> bool:
    try:
        if is_dir:
            os.rmdir(path)
        else:
            os.remove(path)
    except OSError:
        return False
    return True


def clear_directory(repo: str) -> list[str]:
    """Remove everything in *repo*, including first-level sub-directories.

    Sub-directories are emptied of their own entries and then removed.
    Returns the paths that could not be removed; raises :class:`OSError`
    when *repo* itself cannot be opened.
    """
    failed: list[str] = []
    with os.scandir(repo) as entries:
        snapshot = list(entries)
    for entry in snapshot:
        is_dir = _is_real_dir(entry)
        if is_dir and entry.name.startswith("."):
            continue
        path = f"{repo}/{entry.name}"
        if is_dir:
            try:
                failed.extend(remove_directory_files(path, ()))
            except OSError:
                failed.append(path)
                continue
        if not _remove_entry(path, is_dir):
            failed.append(path)
    return failed


def remove_directory_files(repo: str, extensions: Iterable[str]) -> list[str]:
    """Remove the entries of *repo* whose name contains one of *extensions*.

    An empty *extensions* matches every entry. Directories whose name starts
    with a dot are left alone. Returns the paths that could not be removed;
    raises :class:`OSError` when *repo* cannot be opened.
    """
    patterns = list(extensions)
    failed: list[str] = []
    with os.scandir(repo) as entries:
        snapshot = list(entries)
    for entry in snapshot:
        is_dir = _is_real_dir(entry)
        if is_dir and entry.name.startswith("."):
            continue
        if patterns and not any(pattern in entry.name for pattern in patterns):
            continue
        path = f"{repo}/{entry.name}"
        if not _remove_entry(path, is_dir):
            failed.append(path)
    return failed


def copy_file(fin: str, fout: str) -> None:
    """Copy the content of *fin* into *fout*."""
    shutil.copyfile(fin, fout)


def remove_file(repo: str, f: str) -> None:
    """Remove the file *f* located in *repo*."""
    os.remove(f"{repo}/{f}")


def split(s: str, delim: str) -> list[str]:
    """Split *s* on *delim*, dropping empty items."""
    return [item for item in s.split(delim) if item]


def iequals(a: str, b: str) -> bool:
    """Compare two strings without regard to case."""
    return len(a) == len(b) and a.lower() == b.lower()