"""
gitsource: install and synchronize package sources from git repositories.
"""

from gitsource.config import Config
from gitsource.downloader import GitDownloader
from gitsource.exceptions import (
    FallbackExhaustedError,
    GitNotFoundError,
    InsecureUrlError,
    InvalidRequestError,
    InvalidUrlError,
    LocalChangesError,
    VcsError,
    VcsRuntimeError,
)
from gitsource.package import PackageDescriptor

__version__ = "0.1.0"

__all__ = [
    "Config",
    "GitDownloader",
    "PackageDescriptor",
    "VcsError",
    "VcsRuntimeError",
    "InvalidRequestError",
    "LocalChangesError",
    "InvalidUrlError",
    "InsecureUrlError",
    "GitNotFoundError",
    "FallbackExhaustedError",
]
