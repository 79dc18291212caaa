import io
import logging
import shutil
import subprocess
from pathlib import Path
from typing import Optional

import pytest

from gitsource.config import Config
from gitsource.downloader import GitDownloader
from gitsource.filesystem import Filesystem

from tests.fakes import FakeExecutor, RecordingDisplay


@pytest.fixture
def capture_logs():
    """Fixture to capture log output during tests."""
    log_stream = io.StringIO()
    handler = logging.StreamHandler(log_stream)
    logger = logging.getLogger("gitsource")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)

    yield log_stream

    logger.removeHandler(handler)
    log_stream.close()


@pytest.fixture
def executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture
def display() -> RecordingDisplay:
    return RecordingDisplay()


@pytest.fixture
def config() -> Config:
    """Default settings with the mirror cache disabled."""
    return Config(cache_vcs_dir="")


@pytest.fixture
def make_downloader(executor, display, config):
    """Factory building a downloader wired to the fake executor."""

    def _make(config: Config = config, filesystem: Optional[Filesystem] = None, git_version: str = "1.0.0"):
        downloader = GitDownloader(
            config=config,
            executor=executor,
            filesystem=filesystem,
            display=display,
            windows=False,
        )
        downloader.version.set_version(git_version)
        return downloader

    return _make


@pytest.fixture
def downloader(make_downloader) -> GitDownloader:
    return make_downloader()


@pytest.fixture
def working_copy(tmp_path) -> str:
    """An existing working copy directory with git metadata."""
    path = tmp_path / "working-copy"
    (path / ".git").mkdir(parents=True)
    return str(path)


def git_available() -> bool:
    return shutil.which("git") is not None


@pytest.fixture
def source_repo(tmp_path) -> Path:
    """A real local repository with two commits on main."""
    if not git_available():
        pytest.skip("git executable not available")

    repo = tmp_path / "source"
    repo.mkdir()

    def git(*args):
        subprocess.run(
            ["git", *args],
            cwd=repo,
            check=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )

    git("init", "-q")
    git("checkout", "-q", "-b", "main")
    git("config", "user.email", "test@example.com")
    git("config", "user.name", "Test")
    git("config", "commit.gpgsign", "false")
    (repo / "README.md").write_text("first\n")
    git("add", "README.md")
    git("commit", "-q", "-m", "first")
    (repo / "README.md").write_text("second\n")
    git("commit", "-q", "-am", "second")
    return repo
