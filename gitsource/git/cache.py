"""
Local mirror cache for git sources.

Each source URL maps to one mirror clone under the configured cache root:

    <cache-vcs-dir>/
    ├── https---github.com-org-repo/        # git clone --mirror
    └── https---example.com-group-project/

Working copies are cloned from a mirror with --dissociate --reference, so
objects are copied out of the cache and the working copy never depends on
it afterwards. Both remotes of the working copy point at the original URL.

A mirror is trusted for a reference only when `git rev-parse --verify
<ref>^{commit}` succeeds inside it; otherwise the mirror is fetched first.
Every failure here is non-fatal: get_or_refresh() returns None and the
caller clones directly from the remote.

Mirrors are shared between packages with the same source URL. This module
does not lock them; concurrent installs sharing a mirror must be serialized
by the caller.
"""

import logging
import os
import re
from typing import Optional, Tuple

from gitsource.config import Config
from gitsource.exceptions import VcsRuntimeError
from gitsource.filesystem import Filesystem
from gitsource.git.commands import GitCommands
from gitsource.git.runner import GitRunner
from gitsource.process import ProcessExecutor
from gitsource.utils import sanitize_url

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^a-z0-9.]", re.IGNORECASE)
_NULL_DEVICE = re.compile(r"(^|[\\/])(\$null|nul|NUL|/dev/null)([\\/]|$)")


def cache_key(url: str) -> str:
    """
    Directory name for a source URL: every character outside [a-z0-9.] becomes '-'.

    Examples:
        https://example.com/composer/composer -> https---example.com-composer-composer
    """
    return _UNSAFE_CHARS.sub("-", url)


class MirrorCache:
    """Creates, refreshes and validates mirror clones under the cache root."""

    def __init__(
        self,
        config: Config,
        executor: ProcessExecutor,
        runner: GitRunner,
        commands: GitCommands,
        filesystem: Filesystem,
    ):
        self.config = config
        self.executor = executor
        self.runner = runner
        self.commands = commands
        self.filesystem = filesystem

    @property
    def root(self) -> str:
        return self.config.cache_vcs_dir

    def path_for(self, url: str) -> str:
        """Mirror location for a URL. Always ends with a separator."""
        return f"{self.root.rstrip('/')}/{cache_key(url)}/"

    def is_usable(self) -> bool:
        """
        Check that caching is configured and the cache root can be created.
        """
        if not self.root or _NULL_DEVICE.search(self.root):
            return False
        try:
            self.filesystem.ensure_directory_exists(self.root)
        except OSError as e:
            logger.warning(
                f"Could not create cache directory {self.root}: {e}. "
                "Sources will be cloned without a cache."
            )
            return False
        return os.access(self.root, os.W_OK)

    def get_or_refresh(self, url: str, ref: str) -> Optional[str]:
        """
        Make sure the mirror for `url` exists and is as fresh as needed for `ref`.

        Args:
            url: Source URL
            ref: Reference the caller is about to check out

        Returns:
            Path to a verified mirror, or None if the cache cannot be used
        """
        if not self.is_usable():
            return None

        cache_path = self.path_for(url)
        logger.debug(f"Cloning to cache at {cache_path}")
        try:
            is_mirror = self.fetch_ref_or_sync_mirror(url, cache_path, ref)
        except VcsRuntimeError as e:
            logger.debug(f"Mirror for {sanitize_url(url)} unavailable: {e}")
            return None

        if not is_mirror or not os.path.isdir(cache_path):
            return None
        return cache_path

    def fetch_ref_or_sync_mirror(self, url: str, cache_path: str, ref: str) -> bool:
        """
        Skip the network when the mirror already resolves `ref`, sync it otherwise.

        Returns:
            True if `cache_path` holds a valid mirror afterwards

        Raises:
            VcsRuntimeError: If creating the mirror failed
        """
        is_mirror, has_ref = self._inspect(cache_path, ref)
        if has_ref:
            return True

        if is_mirror:
            try:
                self.runner.run_command(
                    lambda u: self.commands.mirror_update(u, sanitize_url(u)),
                    url,
                    cache_path,
                )
            except VcsRuntimeError as e:
                # a stale mirror is still usable
                logger.debug(f"Failed to update mirror at {cache_path}: {e}")
                return True
        else:
            self.filesystem.remove_directory(cache_path)
            self.runner.run_command(
                lambda u: self.commands.mirror_clone(u, cache_path),
                url,
                cache_path,
                initial_clone=True,
            )

        is_mirror, has_ref = self._inspect(cache_path, ref)
        if is_mirror and not has_ref:
            logger.debug(f"Reference {ref} not found in mirror at {cache_path}")
        return is_mirror

    def _inspect(self, cache_path: str, ref: str) -> Tuple[bool, bool]:
        """Return (is a mirror repository, resolves ref to a commit)."""
        if not os.path.isdir(cache_path):
            return False, False
        if self.executor.execute(self.commands.git_dir(), cache_path) != 0:
            return False, False
        if self.executor.get_output().strip() != ".":
            return False, False
        has_ref = self.executor.execute(self.commands.verify_commit(ref), cache_path) == 0
        return True, has_ref
