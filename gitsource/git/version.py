"""Installed git client version, queried once per instance."""

import logging
import re
from typing import Optional

from packaging.version import InvalidVersion, Version

from gitsource.git.commands import VERSION_COMMAND
from gitsource.process import ProcessExecutor

logger = logging.getLogger(__name__)

# --dissociate is only available since git 2.3.0
DISSOCIATE_MIN_VERSION = "2.3.0"

_VERSION_OUTPUT = re.compile(r"^git version (\d+(?:\.\d+)+)", re.MULTILINE)


class GitVersion:
    """
    Memoized `git --version` lookup.

    The first call to get_version() runs the query; later calls return the
    stored value, including a failed lookup (None). set_version() replaces
    the stored state, and set_version(None) forgets it so the next call
    queries again.
    """

    def __init__(self, executor: ProcessExecutor):
        self.executor = executor
        self._queried = False
        self._version: Optional[str] = None

    def get_version(self) -> Optional[str]:
        if not self._queried:
            self._queried = True
            self._version = self._query()
            logger.debug(f"Detected git version: {self._version or 'unknown'}")
        return self._version

    def set_version(self, version: Optional[str]) -> None:
        self._version = version
        self._queried = version is not None

    def check_installed(self) -> bool:
        """
        Run `git --version` again, bypassing the memoized value.

        Used after a failed command to tell a missing git binary apart from
        a remote that could not be reached.
        """
        installed = self.executor.execute(VERSION_COMMAND) == 0
        if installed:
            version = self._parse(self.executor.get_output())
            if version:
                self._version = version
                self._queried = True
        return installed

    def supports_dissociate(self) -> bool:
        return self.is_at_least(DISSOCIATE_MIN_VERSION)

    def is_at_least(self, minimum: str) -> bool:
        version = self.get_version()
        if not version:
            return False
        try:
            return Version(version) >= Version(minimum)
        except InvalidVersion:
            return False

    def _query(self) -> Optional[str]:
        if self.executor.execute(VERSION_COMMAND) != 0:
            return None
        return self._parse(self.executor.get_output())

    @staticmethod
    def _parse(output: str) -> Optional[str]:
        match = _VERSION_OUTPUT.search(output or "")
        return match.group(1) if match else None
