"""Shell command execution and argument quoting."""

import logging
import platform
import subprocess
from typing import Optional

from gitsource.utils import redact_credentials

logger = logging.getLogger(__name__)

# Exit status reported when the shell could not be started at all
SPAWN_FAILURE = 127


def is_windows() -> bool:
    return platform.system() == "Windows"


def escape(argument: str, windows: Optional[bool] = None) -> str:
    """
    Quote a single shell argument.

    POSIX shells get the argument in single quotes, with embedded single
    quotes encoded as '\\''. The Windows shell gets double quotes, with
    embedded double quotes backslash-escaped and a trailing backslash doubled
    so it cannot escape the closing quote.

    Args:
        argument: Raw argument value
        windows: Force the quoting style (defaults to the current platform)

    Returns:
        The quoted argument, safe to interpolate in a command line
    """
    if windows is None:
        windows = is_windows()
    argument = str(argument)

    if windows:
        if argument.endswith("\\"):
            argument += "\\"
        return '"' + argument.replace('"', '\\"') + '"'

    return "'" + argument.replace("'", "'\\''") + "'"


class ProcessExecutor:
    """
    Runs shell command lines and keeps the output of the last invocation.

    Calls are blocking and have no timeout: a command runs until it exits.
    """

    def __init__(self):
        self._output = ""
        self._error_output = ""

    def execute(self, command: str, cwd: Optional[str] = None) -> int:
        """
        Run a command line through the shell.

        Args:
            command: Fully quoted command line
            cwd: Working directory for the command, None for the current one

        Returns:
            The exit status (0 on success)
        """
        logger.debug(
            f"Executing command ({cwd or 'CWD'}): {redact_credentials(command)}"
        )
        try:
            result = subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                shell=True,
                text=True,
                cwd=cwd,
            )
        except OSError as e:
            self._output = ""
            self._error_output = str(e)
            return SPAWN_FAILURE

        self._output = result.stdout or ""
        self._error_output = result.stderr or ""
        return result.returncode

    def get_output(self) -> str:
        """Standard output of the last command."""
        return self._output

    def get_error_output(self) -> str:
        """Standard error of the last command."""
        return self._error_output
