"""Test doubles for the process executor, display and filesystem."""

import re
from typing import Callable, List, Optional, Tuple

from gitsource.filesystem import Filesystem

SHA = "1234567890123456789012345678901234567890"


class FakeExecutor:
    """
    Scripted stand-in for ProcessExecutor that records every call.

    Responses are registered per command, either an exact command line or a
    compiled regex searched in it. Several responses for the same command are
    consumed in order, the last one repeats. Unscripted commands succeed with
    no output.
    """

    def __init__(self):
        self.calls: List[Tuple[str, Optional[str]]] = []
        self._responses = []
        self._output = ""
        self._error_output = ""

    def on(
        self,
        command,
        code: int = 0,
        output: str = "",
        error_output: str = "",
        effect: Optional[Callable[[str, Optional[str]], None]] = None,
    ) -> "FakeExecutor":
        for entry in self._responses:
            if entry[0] == command:
                entry[1].append((code, output, error_output, effect))
                return self
        self._responses.append((command, [(code, output, error_output, effect)]))
        return self

    def _lookup(self, command: str):
        for pattern, queue in self._responses:
            if isinstance(pattern, re.Pattern):
                matched = bool(pattern.search(command))
            else:
                matched = pattern == command
            if matched:
                return queue.pop(0) if len(queue) > 1 else queue[0]
        return 0, "", "", None

    def execute(self, command: str, cwd: Optional[str] = None) -> int:
        self.calls.append((command, cwd))
        code, output, error_output, effect = self._lookup(command)
        if effect is not None:
            effect(command, cwd)
        self._output = output
        self._error_output = error_output
        return code

    def get_output(self) -> str:
        return self._output

    def get_error_output(self) -> str:
        return self._error_output

    @property
    def commands(self) -> List[str]:
        return [command for command, _ in self.calls]


class RecordingDisplay:
    def __init__(self):
        self.statuses: List[str] = []
        self.warnings: List[str] = []

    def status(self, message: str):
        self.statuses.append(message)

    def warning(self, message: str):
        self.warnings.append(message)


class RecordingFilesystem(Filesystem):
    """Filesystem that records removals instead of deleting anything."""

    def __init__(self, remove_result: bool = True):
        self.removed: List[str] = []
        self.remove_result = remove_result

    def remove_directory(self, path) -> bool:
        self.removed.append(str(path))
        return self.remove_result

