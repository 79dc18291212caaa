"""Filesystem helpers used by the source downloader."""

import logging
import os
import re
import shutil
from pathlib import Path
from typing import Optional, Union
from urllib.parse import unquote

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

_LOCAL_PATH = re.compile(
    r"^(file://(?!//)|/(?!/)|/?[a-z]:[\\/]|\.\.?[\\/]|[a-z0-9_.-]+[\\/])",
    re.IGNORECASE,
)


def is_local_path(url: str) -> bool:
    """
    Check if a repository URL is a local filesystem path rather than a remote URL.

    Local paths include ".", "..", absolute paths, drive-letter paths, relative
    paths with a separator and file:// URLs.

    Args:
        url: Repository URL or path

    Returns:
        True if this is a local filesystem path
    """
    url = url.strip()
    if url in (".", ".."):
        return True
    return bool(_LOCAL_PATH.match(url))


def resolve_local_path(url: str, base_dir: Optional[Path] = None) -> str:
    """
    Resolve a local repository URL to an absolute filesystem path.

    A file:// prefix is preserved and percent-encoded characters are decoded.
    Remote URLs are returned unchanged.

    Args:
        url: Local path (e.g., ".", "/home/user/repo", "file:///path/to/repo")
        base_dir: Directory relative paths are resolved against. Defaults to cwd.

    Returns:
        Resolved absolute path, or the URL itself when it is not local
    """
    if not is_local_path(url):
        return url

    prefix = ""
    if url.startswith("file://"):
        prefix = "file://"
        url = url[len(prefix) :]
    if "%" in url:
        url = unquote(url)

    p = Path(url)
    if not p.is_absolute():
        p = (base_dir or Path.cwd()) / p
    return prefix + str(p.resolve())


class Filesystem:
    """Directory operations the downloader delegates to."""

    def remove_directory(self, path: PathLike) -> bool:
        """
        Recursively delete a directory.

        Returns:
            True if the path no longer exists afterwards
        """
        path = Path(path)
        if path.is_symlink() or path.is_file():
            path.unlink()
        elif path.is_dir():
            logger.debug(f"Removing directory {path}")
            shutil.rmtree(path, ignore_errors=True)
        return not os.path.lexists(path)

    def ensure_directory_exists(self, path: PathLike) -> None:
        """
        Create a directory and its parents if needed.

        Raises:
            NotADirectoryError: If the path exists and is not a directory
        """
        path = Path(path)
        if path.exists() and not path.is_dir():
            raise NotADirectoryError(f"{path} exists and is not a directory")
        path.mkdir(parents=True, exist_ok=True)

    def normalize_path(self, path: PathLike) -> str:
        """Collapse redundant separators and up-level references."""
        return os.path.normpath(str(path))
