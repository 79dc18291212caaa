"""
Git building blocks for the source downloader.

    commands  - quoted command lines for every git operation
    version   - memoized `git --version` and feature gates
    urls      - GitHub protocol rewriting and push URLs
    runner    - protocol-aware command execution with failure diagnostics
    cache     - mirror clones under the configured cache root
"""

from .commands import GitCommands
from .version import GitVersion
from .urls import GitHubUrls
from .runner import GitRunner
from .cache import MirrorCache, cache_key

__all__ = [
    "GitCommands",
    "GitVersion",
    "GitHubUrls",
    "GitRunner",
    "MirrorCache",
    "cache_key",
]
