"""Git access for two-ref comparisons.

Thin read-only wrapper around GitPython: resolve refs, list the files
changed on a branch since its merge-base, and produce the unified diff.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence, Tuple

import git  # GitPython

logger = logging.getLogger(__name__)

# Paths in git's diff order
ChangedFileSet = Tuple[str, ...]


class RefNotFoundError(Exception):
    """A base or head reference does not exist."""


class ComparisonError(Exception):
    """The repository is unreachable or the diff could not be computed."""


@dataclass(frozen=True)
class ComparisonRequest:
    """The two refs under review."""

    base_ref: str
    head_ref: str

    @property
    def range_spec(self) -> str:
        # three dots: changes on head since the merge-base
        return f"{self.base_ref}...{self.head_ref}"


@dataclass(frozen=True)
class ResolvedRef:
    name: str
    hexsha: str


class GitAdapter:
    """Read-only comparison operations against one repository."""

    def __init__(self, repo_path: str | Path = "."):
        try:
            self.repo = git.Repo(repo_path, search_parent_directories=True)
        except (git.InvalidGitRepositoryError, git.NoSuchPathError) as e:
            raise ComparisonError(f"Not in a git repository: {repo_path}") from e

    @property
    def working_dir(self) -> Path:
        return Path(self.repo.working_tree_dir or self.repo.git_dir)

    def resolve_ref(self, name: str) -> ResolvedRef:
        if not name:
            raise RefNotFoundError("Empty reference name")
        try:
            sha = self.repo.git.rev_parse("--verify", "--quiet", f"{name}^{{commit}}")
        except git.GitCommandError as e:
            raise RefNotFoundError(f"Reference '{name}' does not exist") from e
        return ResolvedRef(name=name, hexsha=sha.strip())

    def list_changed_files(
        self,
        base: str,
        head: str,
        pathspecs: Sequence[str] = (),
    ) -> ChangedFileSet:
        """Paths changed between merge-base(base, head) and head.

        Uses NUL-separated output so non-ASCII names come back verbatim
        instead of C-quoted by ``core.quotePath``.
        """
        args = [ComparisonRequest(base, head).range_spec]
        if pathspecs:
            args += ["--", *pathspecs]
        try:
            output = self.repo.git.diff(*args, name_only=True, z=True)
        except git.GitCommandError as e:
            raise ComparisonError(
                f"Failed to list changed files for {base}...{head}: {_stderr(e)}"
            ) from e
        return tuple(path for path in output.split("\0") if path)

    def render_diff(self, base: str, head: str) -> str:
        """Unified diff for base...head. Empty string means no changes."""
        try:
            return self.repo.git.diff(ComparisonRequest(base, head).range_spec, no_color=True)
        except git.GitCommandError as e:
            raise ComparisonError(
                f"Failed to generate diff for {base}...{head}: {_stderr(e)}"
            ) from e

    def fetch(self, remote: str = "origin") -> bool:
        """Refresh remote-tracking refs. Failures are only logged."""
        try:
            self.repo.remote(remote).fetch()
        except (ValueError, git.GitCommandError) as e:
            logger.warning("Failed to fetch from %s: %s", remote, e)
            return False
        logger.debug("Fetched latest changes from %s", remote)
        return True


def _stderr(error: git.GitCommandError) -> str:
    return str(error.stderr or error).strip()[:200]
