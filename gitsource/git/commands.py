"""
Command lines for every git operation the downloader performs.

All interpolated values go through a single quoting function, so the rest
of the package never deals with shell syntax. Multi-step commands are joined
with && so the shell stops at the first failing step and later steps keep
the working directory set by an earlier cd.
"""

from typing import Optional

from gitsource.process import escape, is_windows

REMOTE = "composer"
VERSION_COMMAND = "git --version"


class GitCommands:
    """Render git command lines for POSIX shells or the Windows shell."""

    def __init__(self, windows: Optional[bool] = None):
        self.windows = is_windows() if windows is None else windows

    def quote(self, argument: str) -> str:
        return escape(argument, windows=self.windows)

    def _cd(self, path: str) -> str:
        flag = "/D " if self.windows else ""
        return f"cd {flag}{self.quote(path)}"

    # Cloning

    def clone(self, url: str, path: str, sanitized_url: str) -> str:
        """Clone without checkout, then pin both remotes to the sanitized URL."""
        u, s = self.quote(url), self.quote(sanitized_url)
        return (
            f"git clone --no-checkout {u} {self.quote(path)} && {self._cd(path)} "
            f"&& git remote add {REMOTE} {u} && git fetch {REMOTE} "
            f"&& git remote set-url origin {s} && git remote set-url {REMOTE} {s}"
        )

    def clone_from_cache(self, cache_path: str, path: str, sanitized_url: str) -> str:
        """Clone borrowing objects from a mirror, without keeping the mirror as a dependency."""
        c, s = self.quote(cache_path), self.quote(sanitized_url)
        return (
            f"git clone --no-checkout {c} {self.quote(path)} --dissociate --reference {c} "
            f"&& {self._cd(path)} "
            f"&& git remote set-url origin {s} && git remote add {REMOTE} {s}"
        )

    def mirror_clone(self, url: str, cache_path: str) -> str:
        return f"git clone --mirror {self.quote(url)} {self.quote(cache_path)}"

    def mirror_update(self, url: str, sanitized_url: str) -> str:
        return (
            f"git remote set-url origin {self.quote(url)} "
            f"&& git remote update --prune origin "
            f"&& git remote set-url origin {self.quote(sanitized_url)} && git gc --auto"
        )

    # Updating

    def fetch_reference(self, url: str, ref: str, sanitized_url: str) -> str:
        """Fetch from the secondary remote unless the reference already resolves."""
        return (
            f"(git remote set-url {REMOTE} {self.quote(url)} && {self.verify_commit(ref)} "
            f"|| (git fetch {REMOTE} && git fetch --tags {REMOTE})) "
            f"&& git remote set-url {REMOTE} {self.quote(sanitized_url)}"
        )

    def fetch_all(self) -> str:
        return f"git fetch {REMOTE} && git fetch origin"

    # Inspection

    def git_dir(self) -> str:
        return "git rev-parse --git-dir"

    def verify_commit(self, ref: str) -> str:
        return f"git rev-parse --quiet --verify {self.quote(ref + '^{commit}')}"

    def remote_branches(self) -> str:
        return "git branch -r"

    def remotes(self) -> str:
        return "git remote -v"

    def status(self) -> str:
        return "git status --porcelain --untracked-files=no"

    def show_refs(self) -> str:
        return "git show-ref --head -d"

    def diff_name_status(self, remote_branch: str, branch: str) -> str:
        return f"git diff --name-status {self.quote(remote_branch + '...' + branch)} --"

    def version(self) -> str:
        return VERSION_COMMAND

    # Checkout

    def checkout(self, ref: str) -> str:
        return f"git checkout {self.quote(ref)} --"

    def checkout_new_branch(self, branch: str, start_point: str) -> str:
        return f"git checkout -B {self.quote(branch)} {self.quote(start_point)} --"

    def reset_hard(self, ref: str) -> str:
        return f"git reset --hard {self.quote(ref)} --"

    def checkout_and_reset(self, ref: str) -> str:
        return f"{self.checkout(ref)} && {self.reset_hard(ref)}"

    def track_remote_branch(self, branch: str) -> str:
        start_point = f"{REMOTE}/{branch}"
        return f"{self.checkout_new_branch(branch, start_point)} && {self.reset_hard(start_point)}"

    # Remotes

    def set_remote_url(self, remote: str, url: str) -> str:
        return f"git remote set-url {remote} {self.quote(url)}"

    def set_push_url(self, url: str) -> str:
        return f"git remote set-url --push origin {self.quote(url)}"
