"""Tests for git command line rendering."""

import pytest

from gitsource.git.commands import GitCommands
from gitsource.process import escape


@pytest.fixture
def commands():
    return GitCommands(windows=False)


class TestEscape:
    @pytest.mark.short
    def test_posix_single_quotes(self):
        assert escape("path with spaces", windows=False) == "'path with spaces'"

    @pytest.mark.short
    def test_posix_embedded_single_quote(self):
        assert escape("it's", windows=False) == "'it'\\''s'"

    @pytest.mark.short
    def test_posix_shell_metacharacters_stay_literal(self):
        assert escape("$(rm -rf /); `id` && x", windows=False) == "'$(rm -rf /); `id` && x'"

    @pytest.mark.short
    def test_windows_double_quotes(self):
        assert escape('say "hi"', windows=True) == '"say \\"hi\\""'

    @pytest.mark.short
    def test_windows_trailing_backslash_is_doubled(self):
        assert escape("C:\\repo\\", windows=True) == '"C:\\repo\\\\"'


class TestCloneCommands:
    @pytest.mark.short
    def test_clone(self, commands):
        assert commands.clone("https://user:pw@example.com/r", "dest", "https://example.com/r") == (
            "git clone --no-checkout 'https://user:pw@example.com/r' 'dest' && cd 'dest' "
            "&& git remote add composer 'https://user:pw@example.com/r' && git fetch composer "
            "&& git remote set-url origin 'https://example.com/r' "
            "&& git remote set-url composer 'https://example.com/r'"
        )

    @pytest.mark.short
    def test_clone_from_cache(self, commands):
        assert commands.clone_from_cache("/cache/x/", "dest", "https://example.com/r") == (
            "git clone --no-checkout '/cache/x/' 'dest' --dissociate --reference '/cache/x/' "
            "&& cd 'dest' && git remote set-url origin 'https://example.com/r' "
            "&& git remote add composer 'https://example.com/r'"
        )

    @pytest.mark.short
    def test_mirror_clone(self, commands):
        assert commands.mirror_clone("https://example.com/r", "/cache/x/") == (
            "git clone --mirror 'https://example.com/r' '/cache/x/'"
        )

    @pytest.mark.short
    def test_windows_cd_switches_drive(self):
        command = GitCommands(windows=True).clone("u", "D:\\dest", "u")
        assert 'cd /D "D:\\dest"' in command


class TestUpdateCommands:
    @pytest.mark.short
    def test_fetch_reference(self, commands):
        assert commands.fetch_reference("https://example.com/r", "v1.0", "https://example.com/r") == (
            "(git remote set-url composer 'https://example.com/r' "
            "&& git rev-parse --quiet --verify 'v1.0^{commit}' "
            "|| (git fetch composer && git fetch --tags composer)) "
            "&& git remote set-url composer 'https://example.com/r'"
        )

    @pytest.mark.short
    def test_checkout_and_reset(self, commands):
        assert commands.checkout_and_reset("ref") == "git checkout 'ref' -- && git reset --hard 'ref' --"

    @pytest.mark.short
    def test_track_remote_branch(self, commands):
        assert commands.track_remote_branch("main") == (
            "git checkout -B 'main' 'composer/main' -- && git reset --hard 'composer/main' --"
        )

    @pytest.mark.short
    def test_reference_is_quoted(self, commands):
        assert commands.checkout("x'; rm -rf ~") == "git checkout 'x'\\''; rm -rf ~' --"

    @pytest.mark.short
    def test_diff_name_status(self, commands):
        assert commands.diff_name_status("origin/main", "main") == (
            "git diff --name-status 'origin/main...main' --"
        )

    @pytest.mark.short
    def test_push_url(self, commands):
        assert commands.set_push_url("git@github.com:o/r.git") == (
            "git remote set-url --push origin 'git@github.com:o/r.git'"
        )
