"""
Exception classes for the gitsource package.
"""

from typing import List, Optional, Tuple

from gitsource.utils import indent


class VcsError(Exception):
    """Base exception for all source acquisition errors."""

    pass


class InvalidRequestError(VcsError, ValueError):
    """Raised when a package cannot be installed from source as described."""

    pass


class LocalChangesError(VcsError, RuntimeError):
    """Raised when a working copy holds changes that an operation would discard."""

    def __init__(self, path: str, changes: str, message: str = ""):
        self.path = path
        self.changes = changes
        if not message:
            message = f"Source directory {path} has uncommitted changes."
        super().__init__(f"{message}\n{changes}")


class VcsRuntimeError(VcsError, RuntimeError):
    """Raised when a git command fails."""

    def __init__(
        self,
        message: str,
        command: Optional[str] = None,
        error_output: str = "",
    ):
        self.command = command
        self.error_output = error_output
        super().__init__(message)


class InvalidUrlError(VcsRuntimeError):
    """Raised when a candidate URL is malformed."""

    def __init__(self, url: str, reason: str):
        self.url = url
        super().__init__(f"The source URL {url} is invalid, {reason}")


class InsecureUrlError(VcsRuntimeError):
    """Raised when the configuration does not allow connecting to a URL."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(
            f"Your configuration does not allow connections to {url}. "
            "Enable it with secure-http = false in the [vcs] section."
        )


class GitNotFoundError(VcsRuntimeError):
    """Raised when the git executable cannot be run."""

    def __init__(self, url: str, error_output: str = ""):
        self.url = url
        super().__init__(
            f"Failed to clone {url}, git was not found, check that it is "
            f"installed and in your PATH env.\n\n{error_output}",
            command="git --version",
            error_output=error_output,
        )


class FallbackExhaustedError(VcsRuntimeError):
    """Raised when every candidate URL failed."""

    def __init__(self, failures: List[Tuple[str, Exception]]):
        self.failures = failures
        details = "\n".join(f"- {url}:\n{indent(str(error))}" for url, error in failures)
        last = failures[-1][1] if failures else None
        super().__init__(
            f"Failed to acquire sources from {len(failures)} candidate URL(s):\n{details}",
            command=getattr(last, "command", None),
            error_output=getattr(last, "error_output", ""),
        )
