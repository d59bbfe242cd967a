"""Diff context report.

Turns the changed-file set, its classification and the scan statistics
into an ordered list of Markdown sections. Pure text assembly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Sequence

from .scanner import ScanContext

SUMMARY = "Summary"
CATEGORIES = "Category Breakdown"
SCAN_STATISTICS = "Scan Statistics"
CHANGED_FILES = "Changed Files"

NOT_APPLICABLE = "not applicable"
TOTAL_METRIC = "TotalSourceFiles"


@dataclass(frozen=True)
class Section:
    title: str
    body: str

    def to_markdown(self) -> str:
        return f"## {self.title}\n\n{self.body.rstrip()}\n"


@dataclass(frozen=True)
class Report:
    """Rendered sections in fixed order."""

    sections: tuple[Section, ...]

    @property
    def titles(self) -> list[str]:
        return [s.title for s in self.sections]

    def section(self, title: str) -> Section | None:
        return next((s for s in self.sections if s.title == title), None)

    def to_markdown(self) -> str:
        return "\n".join(s.to_markdown() for s in self.sections)


def touched_percentage(changed_count: int, total_count: int) -> int | None:
    """Share of the project touched, rounded down. None when total is zero."""
    if total_count <= 0:
        return None
    return changed_count * 100 // total_count


def format_percentage(changed_count: int, total_count: int) -> str:
    pct = touched_percentage(changed_count, total_count)
    return NOT_APPLICABLE if pct is None else f"{pct}%"


class ReportRenderer:
    """Renders a Report from classification and scan results."""

    def render(
        self,
        changed: Sequence[str],
        classification: Mapping[str, int],
        stats: Mapping[str, int],
        *,
        distribution: Mapping[str, int] | None = None,
        context: ScanContext | None = None,
        diff_lines: int = 0,
    ) -> Report:
        sections = [
            Section(SUMMARY, self._summary(changed, stats, diff_lines)),
            Section(CATEGORIES, self._categories(classification, distribution)),
        ]
        if stats:
            sections.append(Section(SCAN_STATISTICS, self._scan(stats, context)))
        sections.append(Section(CHANGED_FILES, self._listing(changed)))
        return Report(sections=tuple(sections))

    def _summary(self, changed: Sequence[str], stats: Mapping[str, int], diff_lines: int) -> str:
        total = stats.get(TOTAL_METRIC, 0)
        lines = [
            f"- **Files Changed**: {len(changed)}",
            f"- **Lines Changed**: {diff_lines}",
            f"- **Primary File**: {changed[0] if changed else 'N/A'}",
            f"- **Project Touched**: {format_percentage(len(changed), total)}",
        ]
        return "\n".join(lines)

    def _categories(
        self,
        classification: Mapping[str, int],
        distribution: Mapping[str, int] | None,
    ) -> str:
        lines = [f"- {label}: {count}" for label, count in classification.items()]
        if distribution:
            lines += ["", "### File Type Distribution"]
            lines += [f"- {label} Files: {count}" for label, count in distribution.items()]
        return "\n".join(lines) or "- None"

    def _scan(self, stats: Mapping[str, int], context: ScanContext | None) -> str:
        lines = [f"- **{metric}**: {count}" for metric, count in stats.items()]
        if context is None:
            return "\n".join(lines)

        if context.structure:
            lines += ["", "### Project Structure", "```"]
            lines += context.structure
            if context.remaining_files:
                lines.append(f"... and {context.remaining_files} more files")
            lines.append("```")

        if context.file_checks:
            lines += ["", "### Version-Specific Checks"]
            for path, findings in context.file_checks.items():
                lines += ["", f"#### {path}"]
                lines += [f"- {f}" for f in findings] or ["- No version-specific findings"]
        return "\n".join(lines)

    def _listing(self, changed: Sequence[str]) -> str:
        return "\n".join(["```", *changed, "```"])
