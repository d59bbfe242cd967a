"""Final prompt assembly and the review comments deliverable."""

from __future__ import annotations

import re
from dataclasses import dataclass

from .config import VersionSettings
from .features import php_doc_url, symfony_doc_url
from .report import Report

COMMENT_HEADER_RE = re.compile(r"^#### 🔍 Comment #\d+")
COMMENT_CONTEXT_LINES = 20
_BACKTICK_RUN_RE = re.compile(r"`{3,}")


@dataclass(frozen=True)
class PromptMetadata:
    """Facts about the run shown at the top of the prompt."""

    feature_branch: str
    base_branch: str
    versions: VersionSettings
    diff_lines: int = 0
    changed_count: int = 0
    primary_file: str = ""
    prioritize_latest: bool = True


@dataclass(frozen=True)
class Prompt:
    text: str

    def __str__(self) -> str:
        return self.text


class PromptAssembler:
    """Concatenates header, instructions, report, diff and checklist, in that order."""

    def assemble(
        self,
        report: Report,
        diff_text: str,
        static_instructions: str,
        *,
        metadata: PromptMetadata,
        checklist: str = "",
    ) -> Prompt:
        fence = _fence_for(diff_text)
        parts = [
            self._header(metadata),
            static_instructions.rstrip() + "\n",
            "## 📊 **DIFF CONTEXT REPORT**\n\n" + report.to_markdown(),
            f"## 📁 **GIT DIFF ANALYSIS**\n\n{fence}diff\n{diff_text.rstrip()}\n{fence}\n",
        ]
        if checklist:
            parts.append(checklist.rstrip() + "\n")
        return Prompt(text="\n---\n\n".join(parts))

    def _header(self, meta: PromptMetadata) -> str:
        sf, php = meta.versions.symfony_version, meta.versions.php_version
        latest = "✅ ENABLED" if meta.prioritize_latest else "❌ DISABLED"
        return (
            f"# 🔍 Context-Aware Symfony Code Review - Symfony {sf} & PHP {php}\n"
            "\n"
            "## 📋 Review Context\n"
            f"- **Feature Branch**: `{meta.feature_branch}`\n"
            f"- **Base Branch**: `{meta.base_branch}`\n"
            f"- **Target Versions**: Symfony {sf} ([Docs]({symfony_doc_url(sf)})), "
            f"PHP {php} ([Migration]({php_doc_url(php)}))\n"
            f"- **Lines Changed**: {meta.diff_lines}\n"
            f"- **Files Changed**: {meta.changed_count}\n"
            f"- **Latest Features Priority**: {latest}\n"
            f"- **Primary File**: {meta.primary_file or 'N/A'}\n"
        )


def extract_comments(review_text: str) -> str:
    """Pull numbered comment blocks (plus following context) out of a review.

    Mirrors ``grep -A 20``: overlapping blocks merge, separate blocks are
    joined by ``--``.
    """
    lines = review_text.splitlines()
    keep: list[int] = []
    for i, line in enumerate(lines):
        if COMMENT_HEADER_RE.match(line):
            keep.extend(range(i, min(i + COMMENT_CONTEXT_LINES + 1, len(lines))))
    if not keep:
        return ""

    out: list[str] = []
    previous = None
    for i in sorted(set(keep)):
        if previous is not None and i != previous + 1:
            out.append("--")
        out.append(lines[i])
        previous = i
    return "\n".join(out)


def comments_deliverable(
    review_text: str,
    metadata: PromptMetadata,
    provider: str,
    prompt_path: str,
    timestamp: str,
) -> str:
    """Render the review comments deliverable document."""
    sf, php = metadata.versions.symfony_version, metadata.versions.php_version
    comments = extract_comments(review_text) or (
        f"No detailed comments generated by AI. Use {prompt_path} manually."
    )

    return f"""# 📝 Context-Aware Review Comments Deliverable

## Review Metadata
- **Feature Branch**: `{metadata.feature_branch}`
- **Base Branch**: `{metadata.base_branch}`
- **Timestamp**: {timestamp}
- **AI Provider**: {provider}
- **Changed Files**: {metadata.changed_count}
- **Diff Lines**: {metadata.diff_lines}
- **Versions**: Symfony {sf}, PHP {php}

## Instructions
This file contains CQRS-aligned, context-aware review comments for the git diff. Each comment:
- Focuses on changed code
- Enforces Symfony {sf} and PHP {php} compatibility
- Addresses security, performance, and testing
- Provides actionable solutions

**To use**:
1. Review comments below
2. Apply suggested changes
3. Re-run the review to verify

## Comments
{comments}

## Next Steps
- Address critical and major issues
- Optimize with minor suggestions
- Re-run `symfony-review review {metadata.feature_branch} --show`
- Ensure `.vscode/` is in `.gitignore`
"""


def _fence_for(text: str) -> str:
    longest = max((len(m) for m in _BACKTICK_RUN_RE.findall(text)), default=2)
    return "`" * (longest + 1)
