"""Run git commands against a remote, trying each allowed protocol for GitHub URLs."""

import logging
from typing import Callable, NoReturn, Optional

from gitsource.exceptions import GitNotFoundError, VcsRuntimeError
from gitsource.filesystem import Filesystem
from gitsource.git.urls import GitHubUrls
from gitsource.git.version import GitVersion
from gitsource.process import ProcessExecutor
from gitsource.utils import indent, redact_credentials

logger = logging.getLogger(__name__)

CommandBuilder = Callable[[str], str]


class GitRunner:
    """
    Executes a command built for a remote URL.

    GitHub-style URLs are rewritten once per configured protocol and the
    command is retried with each form until one succeeds. Other URLs are
    tried once.
    """

    def __init__(
        self,
        executor: ProcessExecutor,
        urls: GitHubUrls,
        version: GitVersion,
        filesystem: Filesystem,
    ):
        self.executor = executor
        self.urls = urls
        self.version = version
        self.filesystem = filesystem

    def run_command(
        self,
        build: CommandBuilder,
        url: str,
        cwd: Optional[str],
        initial_clone: bool = False,
    ) -> str:
        """
        Run the command produced by `build` for `url`.

        Args:
            build: Callable rendering the command line for a concrete URL
            url: Candidate remote URL
            cwd: Working copy path. For an initial clone this is the clone
                target: the command runs from the current directory and the
                target is removed after each failed attempt.
            initial_clone: Whether the command creates `cwd`

        Returns:
            The URL form the command succeeded with

        Raises:
            VcsRuntimeError: If every attempt failed
        """
        self.urls.check_allowed(url)

        target = cwd
        if initial_clone:
            cwd = None

        if self.urls.is_github_url(url):
            messages = []
            for protocol_url in self.urls.protocol_urls(url):
                if self.executor.execute(build(protocol_url), cwd) == 0:
                    return protocol_url
                error_output = self.executor.get_error_output()
                logger.debug(f"Attempt with {protocol_url} failed: {error_output.strip()}")
                messages.append(f"- {protocol_url}\n{indent(error_output)}")
                if initial_clone and target:
                    self.filesystem.remove_directory(target)

            self._raise(
                f"Failed to clone {url} via {', '.join(self.urls.protocols)} protocols, aborting.\n\n"
                + "\n".join(messages),
                url,
                command=build(url),
                error_output=error_output,
            )

        command = build(url)
        if self.executor.execute(command, cwd) != 0:
            error_output = self.executor.get_error_output()
            if initial_clone and target:
                self.filesystem.remove_directory(target)
            self._raise(
                f"Failed to execute {command}\n\n{error_output}",
                url,
                command=command,
                error_output=error_output,
            )
        return url

    def _raise(
        self, message: str, url: str, command: str, error_output: str
    ) -> NoReturn:
        if not self.version.check_installed():
            raise GitNotFoundError(
                redact_credentials(url),
                redact_credentials(self.executor.get_error_output()),
            )
        raise VcsRuntimeError(
            redact_credentials(message),
            command=redact_credentials(command),
            error_output=redact_credentials(error_output),
        )
