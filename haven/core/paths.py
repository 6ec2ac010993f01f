"""
Local and remote path mapping.

All local lookups are keyed by canonical paths: absolute, with ``~``
expanded and symlinks and relative segments resolved. Remote paths are
always POSIX.
"""
import os
import posixpath
from typing import Callable, Optional


def expand_path(path: str) -> str:
    """Expand ~ and make the path absolute (no symlink resolution)"""
    if path == "~" or path.startswith("~/"):
        path = os.path.expanduser(path)
    return os.path.abspath(path)


def canonical_path(path: str) -> str:
    """Expand ~, resolve symlinks and relative segments"""
    return os.path.realpath(expand_path(path))


def contract_path(path: str) -> str:
    """Replace the home directory prefix with ~ for display"""
    home = os.path.expanduser("~")
    if path == home:
        return "~"
    if path.startswith(home + "/"):
        return "~" + path[len(home):]
    return path


def is_directory(path: str) -> bool:
    return os.path.isdir(expand_path(path))


def base_name(path: str) -> str:
    return os.path.basename(expand_path(path).rstrip("/")) or "/"


def find_upward(start_path: str, predicate: Callable[[str], bool]) -> Optional[str]:
    """
    Walk from start_path up to the filesystem root.

    Args:
        start_path: Directory to start from (canonicalized first)
        predicate: Called with each canonical directory, nearest first

    Returns:
        The first directory for which predicate is true, or None
    """
    current = canonical_path(start_path)
    while True:
        if predicate(current):
            return current
        parent = os.path.dirname(current)
        if parent == current:
            return None
        current = parent


def relative_of(root: str, path: str) -> str:
    """
    Path of ``path`` relative to ``root``.

    Returns "." for the root itself. A path that is not under root is
    returned as its absolute canonical form.
    """
    abs_root = canonical_path(root)
    abs_path = canonical_path(path)

    if abs_path == abs_root:
        return "."
    prefix = abs_root if abs_root.endswith("/") else abs_root + "/"
    if abs_path.startswith(prefix):
        return abs_path[len(prefix):]
    return abs_path


def map_to_remote(local_root: str, remote_root: str, local_path: str) -> str:
    """
    Map a local path to its counterpart under remote_root.

    Args:
        local_root: Local directory synced to remote_root
        remote_root: Absolute remote directory
        local_path: Local path at or below local_root

    Returns:
        Remote POSIX path
    """
    relative = relative_of(local_root, local_path)
    if relative == ".":
        return remote_root
    return posixpath.normpath(posixpath.join(remote_root, relative))
