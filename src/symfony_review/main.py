"""symfony-review CLI - context-aware Git diff reviews for Symfony projects.

Usage:
    symfony-review review <feature-branch> [options]
    symfony-review review feature/api-endpoints --show --verbose
    symfony-review review hotfix/security-fix --base origin/develop --ai claude
"""

from __future__ import annotations

import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .backends import BACKENDS, UnsupportedProviderError, create_backend
from .config import (
    DEFAULT_BASE_REF,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_PROVIDER,
    CONFIG_FILENAME,
    ConfigError,
    ReviewConfig,
    VersionSettings,
    load_version_settings,
)
from .features import features_matrix
from .log import setup_logging
from .pipeline import Outcome, OutputPaths, ReviewPipeline, submit_for_review, write_artifacts
from .vcs import ComparisonError, ComparisonRequest, GitAdapter, RefNotFoundError

console = Console()


def _ask(label: str, default: str) -> str:
    return click.prompt(label, default=default)


@click.group()
@click.version_option(version=__version__)
def cli():
    """Symfony Git diff review - build context-aware AI review prompts.

    Compares a feature branch against its base, classifies and scans the
    changes, and writes a review prompt (plus an optional AI review) into
    the .vscode/ directory.
    """
    pass


@cli.command()
@click.argument("feature_branch")
@click.option("--base", "base_ref", default=DEFAULT_BASE_REF, show_default=True, help="Base branch for comparison")
@click.option("--show", is_flag=True, help="Show review output after generation")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--no-context", is_flag=True, help="Skip project context scanning")
@click.option("--latest/--no-latest", default=True, help="Prioritize latest Symfony features")
@click.option("--ai", "provider", default=DEFAULT_PROVIDER, show_default=True, help=f"AI provider: {'|'.join(BACKENDS)}")
@click.option("--model", "-m", default=None, help="Model name for the claude/gpt providers")
@click.option("--fetch/--no-fetch", default=True, help="Fetch origin before comparing")
@click.option("--repo", "repo_path", default=".", type=click.Path(file_okay=False), help="Repository path")
@click.option("--output-dir", "-O", default=DEFAULT_OUTPUT_DIR, show_default=True, help="Directory for generated files")
def review(
    feature_branch: str,
    base_ref: str,
    show: bool,
    verbose: bool,
    no_context: bool,
    latest: bool,
    provider: str,
    model: str | None,
    fetch: bool,
    repo_path: str,
    output_dir: str,
):
    """Generate a review prompt for FEATURE_BRANCH and submit it to an AI backend.

    Examples:

        symfony-review review feature/user-authentication

        symfony-review review feature/api-endpoints --show --verbose

        symfony-review review hotfix/security-fix --base origin/develop --ai claude
    """
    setup_logging(verbose)
    console.print()
    console.print(Panel.fit(
        f"[bold cyan]Symfony Review v{__version__}[/] - Context-Aware Diff Review",
        border_style="cyan",
    ))

    try:
        backend_kwargs = {"model": model} if model and provider.lower() in ("claude", "gpt") else {}
        backend = create_backend(provider, **backend_kwargs)

        adapter = GitAdapter(repo_path)
        project_root = adapter.working_dir
        out = Path(output_dir)
        out = out if out.is_absolute() else project_root / out

        versions = load_version_settings(
            out / CONFIG_FILENAME,
            project_root,
            ask=_ask if sys.stdin.isatty() else None,
        )
        config = ReviewConfig(
            repo_path=project_root,
            base_ref=base_ref,
            scan_enabled=not no_context,
            provider=backend.name,
            prioritize_latest=latest,
            fetch=fetch,
            output_dir=str(out),
            versions=versions,
        )

        if config.fetch:
            adapter.fetch()

        pipeline = ReviewPipeline(config, adapter=adapter)
        result = pipeline.run(ComparisonRequest(base_ref=config.base_ref, head_ref=feature_branch))
    except (RefNotFoundError, ComparisonError, ConfigError, UnsupportedProviderError) as e:
        raise click.ClickException(str(e))

    if result.outcome is Outcome.NO_CHANGES:
        console.print(f"[yellow]No changes between {base_ref} and {feature_branch}[/]")
        return

    paths = OutputPaths(config.output_path)
    try:
        written = write_artifacts(result, paths, config)
        review_text = submit_for_review(backend, result, paths)
    except OSError as e:
        raise click.ClickException(f"Cannot write review files to {paths.root}: {e}")

    if show:
        console.print()
        console.print(Panel(Markdown(review_text), title="Review Output", border_style="magenta"))

    _print_summary(result, written + [paths.review_output, paths.comments, config.config_file])
    _print_next_steps(paths, feature_branch, config.output_dir)


@cli.command()
@click.option("--symfony", "symfony_version", default=None, help="Symfony version (defaults to project config)")
@click.option("--php", "php_version", default=None, help="PHP version (defaults to project config)")
@click.option("--repo", "repo_path", default=".", type=click.Path(file_okay=False), help="Project path")
def matrix(symfony_version: str | None, php_version: str | None, repo_path: str):
    """Print the Symfony/PHP features matrix."""
    root = Path(repo_path).resolve()
    config_file = root / DEFAULT_OUTPUT_DIR / CONFIG_FILENAME
    try:
        versions = (
            load_version_settings(config_file, root)
            if config_file.is_file()
            else VersionSettings()
        )
        versions = VersionSettings(
            symfony_version=symfony_version or versions.symfony_version,
            php_version=php_version or versions.php_version,
        ).validate()
    except ConfigError as e:
        raise click.ClickException(str(e))
    console.print(Markdown(features_matrix(versions)))


@cli.command()
def version():
    """Show version information."""
    console.print(f"symfony-review v{__version__}")
    console.print("Context-aware Git diff review prompts for Symfony projects")


def _print_summary(result, files: list[Path]) -> None:
    """Print run statistics and generated files."""
    table = Table(title="Generated Files", show_header=False, border_style="dim")
    table.add_column("Key", style="bold")
    table.add_column("Value")

    table.add_row("Branches", f"{result.request.base_ref}...{result.request.head_ref}")
    table.add_row("Diff", f"{result.diff_lines:,} lines, {len(result.changed)} files")
    matched = {k: v for k, v in result.classification.items() if v}
    if matched:
        table.add_row("Categories", ", ".join(f"{k} ({v})" for k, v in matched.items()))
    for path in files:
        table.add_row(path.name, str(path))

    console.print()
    console.print(table)
    console.print("\n[green]Context-Aware Code Review Generation Complete![/]")


def _print_next_steps(paths: OutputPaths, feature_branch: str, output_dir: str) -> None:
    console.print()
    console.print("[bold]Next Steps:[/]")
    console.print(f"  1. Review the prompt in {paths.prompt}")
    console.print(f"  2. Check comments in {paths.comments}")
    console.print(f"  3. Apply suggested improvements to {feature_branch}")
    console.print("  4. Re-run review to validate changes")
    console.print(f"\n[dim]Tip: add '{Path(output_dir).name}/' to your .gitignore to keep review files local[/]")


if __name__ == "__main__":
    cli()
