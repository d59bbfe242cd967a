"""Review pipeline - Resolve, Diff, Classify/Scan, Render, Assemble.

Stages run strictly in order. An empty diff ends the run early with
NO_CHANGES. Ref or repository errors propagate before anything is
written; artifacts are only written from a finished RunResult.
"""

from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .assembler import Prompt, PromptAssembler, PromptMetadata, comments_deliverable
from .backends import (
    BackendFailedError,
    BackendUnavailableError,
    ReviewBackend,
    error_review,
    placeholder_review,
)
from .classifier import REVIEWED_PATHSPECS, FileClassifier
from .config import ReviewConfig
from .features import features_matrix
from .prompts import closing_checklist, review_instructions
from .report import CATEGORIES, CHANGED_FILES, SCAN_STATISTICS, Report, ReportRenderer
from .scanner import ProjectScanner, ScanContext
from .vcs import ChangedFileSet, ComparisonRequest, GitAdapter

logger = logging.getLogger(__name__)


class Outcome(Enum):
    SUCCESS = "success"
    NO_CHANGES = "no_changes"


@dataclass
class RunResult:
    """Everything one run produced."""

    outcome: Outcome
    request: ComparisonRequest
    diff_text: str = ""
    changed: ChangedFileSet = ()
    classification: dict[str, int] = field(default_factory=dict)
    distribution: dict[str, int] = field(default_factory=dict)
    stats: dict[str, int] = field(default_factory=dict)
    context: ScanContext | None = None
    report: Report | None = None
    prompt: Prompt | None = None
    metadata: PromptMetadata | None = None

    @property
    def diff_lines(self) -> int:
        return len(self.diff_text.splitlines())


@dataclass(frozen=True)
class OutputPaths:
    """Artifact locations inside the output directory."""

    root: Path

    @property
    def diff(self) -> Path:
        return self.root / "mr.diff"

    @property
    def changed_files(self) -> Path:
        return self.root / "changed-files.txt"

    @property
    def project_context(self) -> Path:
        return self.root / "project-context.md"

    @property
    def diff_context(self) -> Path:
        return self.root / "diff-context.md"

    @property
    def prompt(self) -> Path:
        return self.root / "symfony-code-review-prompt.md"

    @property
    def review_output(self) -> Path:
        return self.root / "review-output.md"

    @property
    def comments(self) -> Path:
        return self.root / "review-comments-deliverable.md"

    @property
    def features_matrix(self) -> Path:
        return self.root / "symfony-features-matrix.md"


class ReviewPipeline:
    """Runs one comparison end to end. Collaborators are injectable for tests."""

    def __init__(
        self,
        config: ReviewConfig,
        adapter: GitAdapter | None = None,
        classifier: FileClassifier | None = None,
        scanner: ProjectScanner | None = None,
        renderer: ReportRenderer | None = None,
        assembler: PromptAssembler | None = None,
    ):
        self.config = config
        self.adapter = adapter or GitAdapter(config.repo_path)
        self.classifier = classifier or FileClassifier()
        self.scanner = scanner or ProjectScanner(self.adapter.working_dir)
        self.renderer = renderer or ReportRenderer()
        self.assembler = assembler or PromptAssembler()

    def run(self, request: ComparisonRequest) -> RunResult:
        # Resolve
        self.adapter.resolve_ref(request.head_ref)
        self.adapter.resolve_ref(request.base_ref)

        # Diff
        logger.info("Generating diff between %s and %s...", request.base_ref, request.head_ref)
        diff_text = self.adapter.render_diff(request.base_ref, request.head_ref)
        if not diff_text.strip():
            logger.warning("No changes detected")
            return RunResult(outcome=Outcome.NO_CHANGES, request=request)

        changed = self.adapter.list_changed_files(
            request.base_ref, request.head_ref, REVIEWED_PATHSPECS
        )
        result = RunResult(
            outcome=Outcome.SUCCESS, request=request, diff_text=diff_text, changed=changed
        )
        logger.info("Git diff generated (%d lines, %d files)", result.diff_lines, len(changed))

        # Classify / Scan
        result.classification = self.classifier.classify(changed)
        result.distribution = self.classifier.distribution(changed)
        if self.config.scan_enabled:
            logger.info("Scanning project context...")
            result.stats = self.scanner.scan()
            result.context = self.scanner.context(changed, self.config.versions)
        else:
            logger.debug("Project scan disabled")

        # Render
        result.report = self.renderer.render(
            changed,
            result.classification,
            result.stats,
            distribution=result.distribution,
            context=result.context,
            diff_lines=result.diff_lines,
        )

        # Assemble
        versions = self.config.versions
        result.metadata = PromptMetadata(
            feature_branch=request.head_ref,
            base_branch=request.base_ref,
            versions=versions,
            diff_lines=result.diff_lines,
            changed_count=len(changed),
            primary_file=changed[0] if changed else "",
            prioritize_latest=self.config.prioritize_latest,
        )
        result.prompt = self.assembler.assemble(
            result.report,
            diff_text,
            review_instructions(versions, len(changed)),
            metadata=result.metadata,
            checklist=closing_checklist(versions),
        )
        return result


def _encode(text: str) -> bytes:
    # git output is decoded with surrogateescape; write the original bytes back
    return text.encode("utf-8", "surrogateescape")


def write_artifacts(result: RunResult, paths: OutputPaths, config: ReviewConfig) -> list[Path]:
    """Write the run's files. Returns the paths written.

    Every file is rendered and encoded before the output directory is
    touched, so a rendering failure leaves nothing behind.
    """
    if result.outcome is not Outcome.SUCCESS or result.prompt is None or result.report is None:
        raise ValueError("Only successful runs produce artifacts")

    files: dict[Path, str] = {
        paths.features_matrix: features_matrix(config.versions),
        paths.diff: result.diff_text.rstrip("\n") + "\n",
        paths.changed_files: "".join(f"{p}\n" for p in result.changed),
    }

    scan_section = result.report.section(SCAN_STATISTICS)
    if scan_section is not None:
        files[paths.project_context] = "# Global Project Context Analysis\n\n" + scan_section.to_markdown()
        files[paths.diff_context] = "# Diff-Specific Context Analysis\n\n" + "\n".join(
            s.to_markdown() for s in result.report.sections if s.title in (CATEGORIES, CHANGED_FILES)
        )

    files[paths.prompt] = result.prompt.text
    encoded = {path: _encode(content) for path, content in files.items()}

    paths.root.mkdir(parents=True, exist_ok=True)
    for path, data in encoded.items():
        path.write_bytes(data)
        logger.debug("Wrote %s", path)
    return list(encoded)


def submit_for_review(
    backend: ReviewBackend,
    result: RunResult,
    paths: OutputPaths,
    timestamp: str | None = None,
) -> str:
    """Send the prompt to the backend and store its output plus the comments deliverable.

    A backend that ran and failed leaves an error document; a backend that
    is not set up leaves placeholder output. Either way the run goes on.
    """
    if result.prompt is None or result.metadata is None:
        raise ValueError("Nothing to submit: the run produced no prompt")

    logger.info("Executing AI review with %s...", backend.name)
    try:
        review_text = backend.submit_prompt(result.prompt)
        logger.info("%s review completed -> %s", backend.label, paths.review_output)
    except BackendFailedError as e:
        logger.warning("%s review failed - check %s manually: %s", backend.label, paths.review_output, e)
        review_text = error_review(backend.label, str(paths.prompt))
    except BackendUnavailableError as e:
        logger.warning("%s not available: %s", backend.label, e)
        review_text = placeholder_review(backend.label, str(paths.prompt))

    timestamp = timestamp or datetime.datetime.now(datetime.timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    comments = comments_deliverable(review_text, result.metadata, backend.name, str(paths.prompt), timestamp)

    paths.root.mkdir(parents=True, exist_ok=True)
    paths.review_output.write_bytes(_encode(review_text))
    paths.comments.write_bytes(_encode(comments))
    return review_text
