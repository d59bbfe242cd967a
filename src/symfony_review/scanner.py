"""Working-tree scanner - project statistics outside the diff.

Counts files under a few well-known Symfony directories, optionally
restricted to files containing a keyword. Missing directories and
unreadable files count as zero so partial project layouts still scan.
"""

from __future__ import annotations

import fnmatch
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Iterator

from .config import VersionSettings
from .features import check_file

logger = logging.getLogger(__name__)

ScanStatistics = Dict[str, int]

IGNORE_DIRS = {
    ".git", "node_modules", "vendor", "var", "__pycache__",
    ".idea", ".vscode", "public/build",
}

DEFAULT_ROOTS = ("src", "tests", "templates", "assets")


@dataclass(frozen=True)
class ScanPattern:
    """One metric: files whose name matches ``glob``, optionally containing ``keyword``."""

    metric: str
    glob: str | tuple[str, ...]
    keyword: str | None = None

    @property
    def globs(self) -> tuple[str, ...]:
        return (self.glob,) if isinstance(self.glob, str) else tuple(self.glob)

    def matches_name(self, name: str) -> bool:
        return any(fnmatch.fnmatchcase(name, g) for g in self.globs)


DEFAULT_PATTERNS = (
    ScanPattern("TotalSourceFiles", "*"),
    ScanPattern("PhpFiles", "*.php"),
    ScanPattern("TwigFiles", "*.twig"),
    ScanPattern("JavaScriptFiles", "*.js"),
    ScanPattern("StylesheetFiles", ("*.css", "*.scss")),
    ScanPattern("StrictTypesFiles", "*.php", "declare(strict_types=1)"),
    ScanPattern("IniSetFiles", "*.php", "ini_set"),
    ScanPattern("LegacyVarFiles", "*.js", "var "),
    ScanPattern("ImportantRuleFiles", ("*.css", "*.scss"), "!important"),
)


@dataclass
class ScanContext:
    """Scan output that is not a plain count."""

    structure: list[str] = field(default_factory=list)
    remaining_files: int = 0
    file_checks: dict[str, list[str]] = field(default_factory=dict)


class ProjectScanner:
    """Read-only scans rooted at the project directory."""

    def __init__(self, project_root: str | Path):
        self.project_root = Path(project_root)

    def scan(
        self,
        root_dirs: Iterable[str] = DEFAULT_ROOTS,
        patterns: Iterable[ScanPattern] = DEFAULT_PATTERNS,
    ) -> ScanStatistics:
        """Count matching files per metric under ``root_dirs``."""
        patterns = list(patterns)
        stats: ScanStatistics = {p.metric: 0 for p in patterns}

        for rel_path, full_path in self._iter_files(root_dirs):
            name = os.path.basename(rel_path)
            content: bytes | None = None
            for pattern in patterns:
                if not pattern.matches_name(name):
                    continue
                if pattern.keyword:
                    if content is None:
                        content = _read_bytes(full_path)
                    if pattern.keyword.encode() not in content:
                        continue
                stats[pattern.metric] += 1

        logger.debug("Scan statistics: %s", stats)
        return stats

    def structure_sample(
        self,
        root_dirs: Iterable[str] = DEFAULT_ROOTS,
        limit: int = 20,
    ) -> tuple[list[str], int]:
        """First ``limit`` files (sorted) and how many were left out."""
        files = sorted(rel for rel, _ in self._iter_files(root_dirs))
        return files[:limit], max(len(files) - limit, 0)

    def inspect_changed_files(
        self,
        paths: Iterable[str],
        versions: VersionSettings,
    ) -> dict[str, list[str]]:
        """Version checks for each changed file still present in the tree."""
        results: dict[str, list[str]] = {}
        for path in paths:
            full_path = self.project_root / path
            if not full_path.is_file():
                continue
            text = _read_bytes(full_path).decode("utf-8", errors="replace")
            results[path] = check_file(path, text, versions)
        return results

    def context(
        self,
        changed: Iterable[str],
        versions: VersionSettings,
        root_dirs: Iterable[str] = DEFAULT_ROOTS,
    ) -> ScanContext:
        structure, remaining = self.structure_sample(root_dirs)
        return ScanContext(
            structure=structure,
            remaining_files=remaining,
            file_checks=self.inspect_changed_files(changed, versions),
        )

    def _iter_files(self, root_dirs: Iterable[str]) -> Iterator[tuple[str, Path]]:
        seen: set[str] = set()
        for root in sorted(set(root_dirs)):
            base = self.project_root / root
            if not base.is_dir():
                logger.debug("Scan root missing, counted as zero: %s", root)
                continue
            for dirpath, dirnames, filenames in os.walk(base):
                rel_dir = Path(os.path.relpath(dirpath, self.project_root)).as_posix()
                dirnames[:] = sorted(
                    d for d in dirnames
                    if d not in IGNORE_DIRS and f"{rel_dir}/{d}" not in IGNORE_DIRS
                )
                for fname in sorted(filenames):
                    rel_file = f"{rel_dir}/{fname}"
                    if rel_file in seen:
                        continue
                    seen.add(rel_file)
                    yield rel_file, Path(dirpath) / fname


def _read_bytes(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as e:
        logger.debug("Unreadable file counted as zero: %s (%s)", path, e)
        return b""
