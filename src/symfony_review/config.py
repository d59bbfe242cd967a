"""Run configuration.

Everything a run needs is collected once into an immutable ReviewConfig
and handed to each component. Symfony/PHP target versions are persisted
per project in ``.vscode/review-config.json``.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

logger = logging.getLogger(__name__)

DEFAULT_SYMFONY_VERSION = "7.3"
DEFAULT_PHP_VERSION = "8.4"
DEFAULT_BASE_REF = "origin/main"
DEFAULT_PROVIDER = "copilot"
DEFAULT_OUTPUT_DIR = ".vscode"
CONFIG_FILENAME = "review-config.json"

SYMFONY_VERSION_RE = re.compile(r"^[5-7]\.[0-9]+(\.[0-9]+)?$")
PHP_VERSION_RE = re.compile(r"^[7-8]\.[0-9]+(\.[0-9]+)?$")
_VERSION_IN_CONSTRAINT_RE = re.compile(r"(\d+\.\d+(?:\.\d+)?)")


class ConfigError(Exception):
    """Invalid or unreadable configuration."""


@dataclass(frozen=True)
class VersionSettings:
    """Target framework and language versions for the review."""

    symfony_version: str = DEFAULT_SYMFONY_VERSION
    php_version: str = DEFAULT_PHP_VERSION

    def validate(self) -> "VersionSettings":
        if not SYMFONY_VERSION_RE.match(self.symfony_version):
            raise ConfigError(
                f"Invalid Symfony version: {self.symfony_version} (must be >= 5.4)"
            )
        if not PHP_VERSION_RE.match(self.php_version):
            raise ConfigError(
                f"Invalid PHP version: {self.php_version} (must be >= 7.4)"
            )
        return self

    def to_dict(self) -> dict[str, str]:
        return {
            "symfony_version": self.symfony_version,
            "php_version": self.php_version,
        }


@dataclass(frozen=True)
class ReviewConfig:
    """Immutable settings for a single review run."""

    repo_path: Path = field(default_factory=Path.cwd)
    base_ref: str = DEFAULT_BASE_REF
    scan_enabled: bool = True
    provider: str = DEFAULT_PROVIDER
    prioritize_latest: bool = True
    fetch: bool = True
    output_dir: str = DEFAULT_OUTPUT_DIR
    versions: VersionSettings = field(default_factory=VersionSettings)

    @property
    def output_path(self) -> Path:
        out = Path(self.output_dir)
        return out if out.is_absolute() else self.repo_path / out

    @property
    def config_file(self) -> Path:
        return self.output_path / CONFIG_FILENAME


def detect_versions(project_root: Path) -> VersionSettings:
    """Guess target versions from composer.lock and composer.json.

    Falls back to the defaults for anything that cannot be read.
    """
    symfony = DEFAULT_SYMFONY_VERSION
    php = DEFAULT_PHP_VERSION

    lock = _read_json(project_root / "composer.lock")
    for package in lock.get("packages", []) if isinstance(lock, dict) else []:
        if package.get("name") == "symfony/framework-bundle":
            match = _VERSION_IN_CONSTRAINT_RE.search(str(package.get("version", "")))
            if match:
                symfony = match.group(1)
            break

    manifest = _read_json(project_root / "composer.json")
    if isinstance(manifest, dict):
        constraint = str(manifest.get("require", {}).get("php", ""))
        match = _VERSION_IN_CONSTRAINT_RE.search(constraint)
        if match:
            php = match.group(1)

    logger.debug("Detected Symfony %s, PHP %s", symfony, php)
    return VersionSettings(symfony_version=symfony, php_version=php)


def load_version_settings(
    config_file: Path,
    project_root: Path,
    ask: Callable[[str, str], str] | None = None,
) -> VersionSettings:
    """Load versions from ``config_file``, creating it on first use.

    On first use the detected versions are offered through ``ask`` (label,
    default) so the user can override them, then written back to disk.
    """
    if config_file.is_file():
        data = _read_json(config_file)
        if not isinstance(data, dict):
            raise ConfigError(f"Unreadable configuration: {config_file}")
        settings = VersionSettings(
            symfony_version=str(data.get("symfony_version") or DEFAULT_SYMFONY_VERSION),
            php_version=str(data.get("php_version") or DEFAULT_PHP_VERSION),
        )
        return settings.validate()

    logger.warning("First-time setup: configure project versions")
    detected = detect_versions(project_root)
    symfony, php = detected.symfony_version, detected.php_version
    if ask:
        symfony = ask("Enter Symfony version", symfony) or symfony
        php = ask("Enter PHP version", php) or php

    settings = VersionSettings(symfony_version=symfony, php_version=php).validate()
    save_version_settings(config_file, settings)
    logger.info("Configuration saved to %s", config_file)
    return settings


def save_version_settings(config_file: Path, settings: VersionSettings) -> None:
    config_file.parent.mkdir(parents=True, exist_ok=True)
    config_file.write_text(json.dumps(settings.to_dict(), indent=2) + "\n")


def _read_json(path: Path):
    if not path.is_file():
        return {}
    try:
        return json.loads(path.read_text(errors="replace"))
    except (json.JSONDecodeError, ValueError, OSError):
        return {}
