"""
Git source downloader.

Installs a package's source tree as a git working copy and keeps it in sync
when the package moves to another version.

    downloader = GitDownloader(Config.load())
    url = downloader.download(package, "vendor/org/repo")
    downloader.update(package, newer_package, "vendor/org/repo")
    downloader.remove(newer_package, "vendor/org/repo")

Each working copy has two remotes: origin, which users see and push to, and
a secondary remote named "composer" that fetches go through. Candidate URLs
are tried in order and the first that works wins; see fallback.try_each.
"""

import logging
import os
import re
from typing import List, Optional

from gitsource.config import Config
from gitsource.display import ConsoleDisplay, Display
from gitsource.exceptions import (
    InvalidRequestError,
    LocalChangesError,
    VcsRuntimeError,
)
from gitsource.fallback import try_each
from gitsource.filesystem import Filesystem, resolve_local_path
from gitsource.git.cache import MirrorCache
from gitsource.git.commands import REMOTE, GitCommands
from gitsource.git.runner import GitRunner
from gitsource.git.urls import GitHubUrls
from gitsource.git.version import GitVersion
from gitsource.package import PackageDescriptor
from gitsource.process import ProcessExecutor
from gitsource.utils import redact_credentials, sanitize_url
from gitsource.versioning import (
    FloatingPredicate,
    branch_name_from_version,
    is_commit_hash,
    is_floating,
    is_upgrade,
    short_reference,
)

logger = logging.getLogger(__name__)

INSTALLATION_SOURCE = "source"


class GitDownloader:
    """
    Download, update and remove git working copies.

    Args:
        config: Cache and protocol settings (defaults to the user config file)
        executor: Runs command lines
        filesystem: Directory operations
        display: Receives progress notices and warnings
        version: Git version gate, shared with other downloaders if desired
        floating: Predicate telling whether a normalized version tracks a branch
        windows: Render commands for the Windows shell (defaults to the platform)
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        executor: Optional[ProcessExecutor] = None,
        filesystem: Optional[Filesystem] = None,
        display: Optional[Display] = None,
        version: Optional[GitVersion] = None,
        floating: FloatingPredicate = is_floating,
        windows: Optional[bool] = None,
    ):
        self.config = config if config is not None else Config.load()
        self.executor = executor if executor is not None else ProcessExecutor()
        self.filesystem = filesystem if filesystem is not None else Filesystem()
        self.display = display if display is not None else ConsoleDisplay()
        self.version = version if version is not None else GitVersion(self.executor)
        self.is_floating = floating

        self.commands = GitCommands(windows)
        self.urls = GitHubUrls(self.config)
        self.runner = GitRunner(self.executor, self.urls, self.version, self.filesystem)
        self.cache = MirrorCache(
            self.config, self.executor, self.runner, self.commands, self.filesystem
        )

    def get_installation_source(self) -> str:
        return INSTALLATION_SOURCE

    # Download

    def download(self, package: PackageDescriptor, path: str) -> str:
        """
        Clone the package sources into `path` and check out its reference.

        Returns:
            The candidate URL the working copy was cloned from

        Raises:
            InvalidRequestError: If the package has no reference or no URLs
            FallbackExhaustedError: If every candidate URL failed
        """
        ref = self._require_reference(package)
        path = self.filesystem.normalize_path(path)
        urls = self._prepare_urls(package)

        url, _ = try_each(urls, lambda url: self._do_download(package, path, url, ref))
        logger.info(f"Installed {_label(package)}from {sanitize_url(url)} at {path}")
        return url

    def _do_download(self, package: PackageDescriptor, path: str, url: str, ref: str):
        cloned = False
        mirror = self._mirror_for(url, ref)
        if mirror:
            self.display.status(f"Cloning {short_reference(ref)} from cache")
            command = self.commands.clone_from_cache(mirror, path, sanitize_url(url))
            if self.executor.execute(command) == 0:
                cloned = True
            else:
                logger.debug(
                    f"Cloning from cache failed, cloning {sanitize_url(url)} directly: "
                    f"{self.executor.get_error_output().strip()}"
                )
                self.filesystem.remove_directory(path)

        if not cloned:
            self.display.status(f"Cloning {short_reference(ref)}")
            self.runner.run_command(
                lambda u: self.commands.clone(u, path, sanitize_url(u)),
                url,
                path,
                initial_clone=True,
            )

        try:
            source_url = package.source_url
            if source_url and url != source_url:
                self._update_origin_url(path, source_url)
            else:
                self._set_push_url(path, url)

            self._update_to_commit(path, ref, package.pretty_version)
        except VcsRuntimeError:
            # the next candidate clones into the same path
            self.filesystem.remove_directory(path)
            raise

    def _mirror_for(self, url: str, ref: str) -> Optional[str]:
        if not self.config.cache_vcs_dir:
            return None
        if not self.version.supports_dissociate():
            logger.debug(
                f"git {self.version.get_version() or '(unknown version)'} "
                "does not support --dissociate, not using the cache"
            )
            return None
        return self.cache.get_or_refresh(url, ref)

    # Update

    def update(
        self, initial: PackageDescriptor, target: PackageDescriptor, path: str
    ) -> str:
        """
        Move an existing working copy from `initial` to `target`.

        Returns:
            The candidate URL the reference was fetched from

        Raises:
            InvalidRequestError: If the target has no reference or no URLs
            LocalChangesError: If the working copy has uncommitted or unpushed changes
            FallbackExhaustedError: If every candidate URL failed
        """
        ref = self._require_reference(target)
        urls = self._prepare_urls(target)
        path = self.filesystem.normalize_path(path)
        if not self.has_metadata_repository(path):
            raise VcsRuntimeError(f"The .git directory is missing from {path}")

        self.clean_changes(initial, path)
        self._announce(initial, target)

        url, _ = try_each(urls, lambda url: self._do_update(target, path, url, ref))
        return url

    def _do_update(self, target: PackageDescriptor, path: str, url: str, ref: str):
        stale_remotes = self._has_stale_remotes(path, target)

        self.display.status(f"Checking out {short_reference(ref)}")
        self.runner.run_command(
            lambda u: self.commands.fetch_reference(u, ref, sanitize_url(u)),
            url,
            path,
        )
        self._update_to_commit(path, ref, target.pretty_version)

        source_url = target.source_url
        if source_url and (stale_remotes or url != source_url):
            self._update_origin_url(path, source_url)

    def _announce(self, initial: PackageDescriptor, target: PackageDescriptor):
        if initial.pretty_version == target.pretty_version:
            from_label = short_reference(initial.source_reference or "")
            to_label = short_reference(target.source_reference or "")
        else:
            from_label = initial.full_pretty_version
            to_label = target.full_pretty_version

        if is_upgrade(initial.version, target.version, self.is_floating):
            action = "Updating"
        else:
            action = "Downgrading"
        self.display.status(f"{action} {_label(target)}({from_label} => {to_label})")

    def _has_stale_remotes(self, path: str, target: PackageDescriptor) -> bool:
        """
        Check whether origin and the secondary remote still point at a declared URL.

        Only remotes that were both set by a previous install (identical URLs)
        are considered; a user-customized origin is left alone. One
        `git remote -v` lists every remote, so both URLs come from one call.
        """
        if self.executor.execute(self.commands.remotes(), path) != 0:
            return False
        output = self.executor.get_output()
        origin = re.search(r"^origin\s+(\S+)", output, re.MULTILINE)
        secondary = re.search(rf"^{REMOTE}\s+(\S+)", output, re.MULTILINE)
        if not origin or not secondary:
            return False

        declared = {sanitize_url(u) for u in target.source_urls}
        if target.source_url:
            declared.add(sanitize_url(target.source_url))
        return origin.group(1) == secondary.group(1) and secondary.group(1) not in declared

    # Remove

    def remove(self, package: PackageDescriptor, path: str) -> None:
        """
        Delete a working copy after making sure it holds no local work.

        Raises:
            LocalChangesError: If the working copy has uncommitted or unpushed changes
            VcsRuntimeError: If the directory could not be deleted
        """
        path = self.filesystem.normalize_path(path)
        self.clean_changes(package, path)

        self.display.status(f"Removing {_label(package)}at {path}")
        if not self.filesystem.remove_directory(path):
            raise VcsRuntimeError(f"Could not completely delete {path}, aborting.")

    # Local changes

    def has_metadata_repository(self, path: str) -> bool:
        return os.path.isdir(os.path.join(path, ".git"))

    def clean_changes(self, package: PackageDescriptor, path: str) -> None:
        """
        Refuse to go on when the working copy holds unpushed or uncommitted work.

        Nothing is stashed or discarded; callers decide how to recover.
        """
        unpushed = self.get_unpushed_changes(package, path)
        if unpushed:
            raise LocalChangesError(
                path,
                unpushed,
                f"Source directory {path} has unpushed changes on the current branch:",
            )

        changes = self.get_local_changes(package, path)
        if changes:
            raise LocalChangesError(path, changes)

    def get_local_changes(self, package: PackageDescriptor, path: str) -> Optional[str]:
        """Tracked files with uncommitted changes, as reported by git status."""
        path = self.filesystem.normalize_path(path)
        command = self.commands.status()
        if self.executor.execute(command, path) != 0:
            self._fail(command)
        return self.executor.get_output().strip() or None

    def get_unpushed_changes(
        self, package: PackageDescriptor, path: str
    ) -> Optional[str]:
        """
        Describe commits on the current branch that no remote branch contains.

        Detached heads and tags are never reported. When changes are found the
        remotes are fetched once and the check repeated, since an outdated
        remote-tracking branch causes false positives.
        """
        path = self.filesystem.normalize_path(path)
        if not self.has_metadata_repository(path):
            return None

        refs = self._show_refs(path)
        head = re.search(r"^([a-f0-9]+) HEAD$", refs, re.MULTILINE | re.IGNORECASE)
        if not head:
            return None
        branches = re.findall(
            rf"^{head.group(1)} refs/heads/(.+)$", refs, re.MULTILINE | re.IGNORECASE
        )
        if not branches:
            return None

        branch = branches[0]
        unpushed = None
        for attempt in range(2):
            remote_branch = None
            for candidate in branches:
                match = re.search(
                    rf"^[a-f0-9]+ refs/remotes/((?:{REMOTE}|origin)/{re.escape(candidate)})$",
                    refs,
                    re.MULTILINE | re.IGNORECASE,
                )
                if match:
                    branch = candidate
                    remote_branch = match.group(1)
                    break

            if remote_branch is None:
                unpushed = (
                    f"Branch {branch} could not be found on any remote "
                    "and appears to be unpushed"
                )
            else:
                command = self.commands.diff_name_status(remote_branch, branch)
                if self.executor.execute(command, path) != 0:
                    self._fail(command)
                unpushed = self.executor.get_output().strip() or None

            if not unpushed:
                break
            if attempt == 0:
                self.executor.execute(self.commands.fetch_all(), path)
                refs = self._show_refs(path)

        return unpushed

    def _show_refs(self, path: str) -> str:
        command = self.commands.show_refs()
        if self.executor.execute(command, path) != 0:
            self._fail(command)
        return self.executor.get_output().strip()

    # Checkout

    def _update_to_commit(self, path: str, ref: str, pretty_version: Optional[str]):
        """
        Check out `ref`, on a named branch where one matches.

        Branch references that exist on the secondary remote get a local
        branch of the same name. Commit hashes are checked out on the branch
        named by the package version, then hard reset to the commit. Anything
        else is checked out detached.
        """
        branch = branch_name_from_version(pretty_version or "")
        branches = ""
        if self.executor.execute(self.commands.remote_branches(), path) == 0:
            branches = self.executor.get_output()

        if (
            not is_commit_hash(ref)
            and branches
            and _has_remote_branch(branches, ref)
        ):
            if self.executor.execute(self.commands.track_remote_branch(ref), path) == 0:
                return

        if is_commit_hash(ref) and branch:
            # versions like "v1.0" lose their prefix in the pretty version
            if not _has_remote_branch(branches, branch) and _has_remote_branch(
                branches, f"v{branch}"
            ):
                branch = f"v{branch}"

            if (
                self.executor.execute(self.commands.checkout(branch), path) == 0
                or self.executor.execute(
                    self.commands.checkout_new_branch(branch, f"{REMOTE}/{branch}"),
                    path,
                )
                == 0
            ):
                if self.executor.execute(self.commands.reset_hard(ref), path) == 0:
                    return

        command = self.commands.checkout_and_reset(ref)
        if self.executor.execute(command, path) == 0:
            return

        if ref in self.executor.get_error_output():
            self.display.warning(f"{ref} is gone (history was rewritten?)")
        self._fail(command)

    # Remotes

    def _update_origin_url(self, path: str, url: str):
        command = self.commands.set_remote_url("origin", url)
        if self.executor.execute(command, path) != 0:
            logger.debug(f"Could not set origin URL: {self.executor.get_error_output().strip()}")
        self._set_push_url(path, url)

    def _set_push_url(self, path: str, url: str):
        push_url = self.urls.push_url(url)
        if push_url is None:
            return
        if self.executor.execute(self.commands.set_push_url(push_url), path) != 0:
            logger.debug(f"Could not set push URL: {self.executor.get_error_output().strip()}")

    # Helpers

    def _require_reference(self, package: PackageDescriptor) -> str:
        ref = package.source_reference
        if not ref:
            raise InvalidRequestError(
                f"Package {package.name or '(unnamed)'} is missing reference information"
            )
        return ref

    def _prepare_urls(self, package: PackageDescriptor) -> List[str]:
        urls = [resolve_local_path(url) for url in package.source_urls]
        if not urls:
            raise InvalidRequestError(
                f"Package {package.name or '(unnamed)'} has no source URLs"
            )
        return urls

    def _fail(self, command: str):
        error_output = self.executor.get_error_output()
        raise VcsRuntimeError(
            redact_credentials(f"Failed to execute {command}\n\n{error_output}"),
            command=redact_credentials(command),
            error_output=redact_credentials(error_output),
        )


def _has_remote_branch(branches: str, name: str) -> bool:
    return bool(
        re.search(rf"^\s+{REMOTE}/{re.escape(name)}$", branches, re.MULTILINE)
    )


def _label(package: PackageDescriptor) -> str:
    return f"{package.name} " if package.name else ""
