"""Version-control provider interface and git implementation.

The resolver and the metadata stages only need a handful of queries from
source control. They go through VersionControlProvider so tests (and other
SCMs) can supply their own implementation.
"""

import logging
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Sequence

from ..errors import JdkPackError


class VersionControlError(JdkPackError):
    """Raised when a version-control command fails."""

    pass


class VersionControlProvider(ABC):
    """Queries needed from a source repository."""

    @abstractmethod
    def list_tags(self, pattern: str) -> List[str]:
        """List tags matching a glob pattern, in repository order."""
        pass

    @abstractmethod
    def fetch_tags(self) -> None:
        """Fetch tags from the remote. May block for a long time."""
        pass

    @abstractmethod
    def current_commit_short_hash(self) -> Optional[str]:
        """Short hash of HEAD, or None if unavailable."""
        pass

    @abstractmethod
    def remote_url(self) -> Optional[str]:
        """URL of the origin remote, or None if unavailable."""
        pass

    def describe_tag(self) -> Optional[str]:
        """Nearest tag reachable from HEAD, or None if unavailable."""
        return None


class GitProvider(VersionControlProvider):
    """VersionControlProvider backed by the git command line."""

    SHALLOW_LOCK = Path(".git") / "shallow.lock"

    def __init__(
        self,
        repo_dir: Path,
        git_executable: str = "git",
        fetch_args: Sequence[str] = (),
    ):
        """
        Args:
            repo_dir: Repository working tree
            git_executable: git binary to run
            fetch_args: Extra arguments for fetch (e.g. "--depth=1")
        """
        self.repo_dir = Path(repo_dir)
        self.git_executable = git_executable
        self.fetch_args = list(fetch_args)

    def is_repository(self) -> bool:
        return (self.repo_dir / ".git").exists()

    def clear_stale_lock(self) -> bool:
        """Remove a shallow.lock left behind by an interrupted fetch.

        Returns:
            True if a lock file was removed
        """
        lock = self.repo_dir / self.SHALLOW_LOCK
        if lock.exists():
            logging.warning(f"Detected stale lock file {lock}, removing it")
            lock.unlink()
            return True
        return False

    def list_tags(self, pattern: str) -> List[str]:
        output = self._run(["tag", "--list", pattern])
        return [line.strip() for line in output.splitlines() if line.strip()]

    def fetch_tags(self) -> None:
        self.clear_stale_lock()
        logging.info(
            f"Fetching tags in {self.repo_dir}, this can take quite some time"
        )
        self._run(["fetch", "-q", "--tags", *self.fetch_args])

    def current_commit_short_hash(self) -> Optional[str]:
        return self._query(["rev-parse", "--short", "HEAD"])

    def remote_url(self) -> Optional[str]:
        return self._query(["config", "--get", "remote.origin.url"])

    def describe_tag(self) -> Optional[str]:
        return self._query(["describe", "--abbrev=0"])

    def _query(self, args: List[str]) -> Optional[str]:
        """Run a git query, answering None instead of failing."""
        try:
            value = self._run(args).strip()
        except VersionControlError as e:
            logging.info(f"git {' '.join(args)} unavailable: {e}")
            return None
        return value or None

    def _run(self, args: List[str]) -> str:
        cmd = [self.git_executable, "-C", str(self.repo_dir), *args]
        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except FileNotFoundError as e:
            raise VersionControlError(f"git executable not found: {self.git_executable}") from e

        if result.returncode != 0:
            raise VersionControlError(
                f"{' '.join(cmd)} failed with exit code {result.returncode}\n"
                f"stderr: {result.stderr.strip()}"
            )
        return result.stdout
