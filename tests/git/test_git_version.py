"""Tests for the memoized git version lookup."""

import pytest

from gitsource.git.version import GitVersion

from tests.fakes import FakeExecutor


class TestGitVersion:
    @pytest.mark.short
    def test_version_is_queried_once(self):
        executor = FakeExecutor().on("git --version", output="git version 2.39.2\n")
        version = GitVersion(executor)

        assert version.get_version() == "2.39.2"
        assert version.get_version() == "2.39.2"
        assert executor.commands == ["git --version"]

    @pytest.mark.short
    def test_failed_lookup_is_remembered(self):
        executor = FakeExecutor().on("git --version", code=127)
        version = GitVersion(executor)

        assert version.get_version() is None
        assert version.get_version() is None
        assert len(executor.calls) == 1

    @pytest.mark.short
    def test_platform_suffix_is_ignored(self):
        executor = FakeExecutor().on("git --version", output="git version 2.37.1 (Apple Git-137.1)\n")

        assert GitVersion(executor).get_version() == "2.37.1"

    @pytest.mark.short
    def test_set_version_overrides_and_resets(self):
        executor = FakeExecutor().on("git --version", output="git version 2.40.0\n")
        version = GitVersion(executor)

        version.set_version("2.1.0")
        assert version.get_version() == "2.1.0"
        assert executor.calls == []

        version.set_version(None)
        assert version.get_version() == "2.40.0"

    @pytest.mark.short
    @pytest.mark.parametrize(
        "installed, expected",
        [("2.3.0", True), ("2.17.0", True), ("2.2.9", False), ("1.9.5", False)],
    )
    def test_supports_dissociate(self, installed, expected):
        version = GitVersion(FakeExecutor())
        version.set_version(installed)

        assert version.supports_dissociate() is expected

    @pytest.mark.short
    def test_unknown_version_supports_nothing(self):
        executor = FakeExecutor().on("git --version", code=1)

        assert not GitVersion(executor).supports_dissociate()

    @pytest.mark.short
    def test_check_installed_bypasses_memo(self):
        executor = FakeExecutor().on("git --version", output="git version 2.40.0\n")
        version = GitVersion(executor)
        version.set_version("2.1.0")

        assert version.check_installed()
        assert executor.commands == ["git --version"]
        assert version.get_version() == "2.40.0"

    @pytest.mark.short
    def test_check_installed_missing_git(self):
        executor = FakeExecutor().on("git --version", code=127, error_output="git: not found")

        assert not GitVersion(executor).check_installed()
