"""Symfony/PHP feature tables.

Drives the features matrix embedded in the prompt and the per-file
version checks run against changed files.
"""

from __future__ import annotations

import re

from .config import VersionSettings

# (minimum major.minor, feature description, pattern shown when unsupported)
PHP_FEATURES: list[tuple[tuple[int, int], str, str]] = [
    ((7, 4), "Strict Types: Supported (declare(strict_types=1))", ""),
    ((7, 4), "Arrow Functions: Supported", ""),
    ((8, 0), "Union Types: Supported", "Union Types: type1|type2"),
    ((8, 0), "Named Arguments: Supported", "Named Arguments: func(arg: value)"),
    ((8, 0), "Attributes: Supported", ""),
    ((8, 1), "Readonly Properties: Supported", "Readonly Properties: readonly string $prop"),
    ((8, 1), "Enums: Supported", "Match Expression: match($value) { ... }"),
    ((8, 4), "Property Hooks: Supported", "Property Hooks: public $prop { get => ...; }"),
    ((8, 4), "Asymmetric Visibility: Supported", "Asymmetric Visibility: public(private(set)) $prop"),
    ((8, 4), "New Array Functions: Supported (e.g., array_find)", ""),
]

SYMFONY_FEATURES: list[tuple[tuple[int, int], str, str]] = [
    ((5, 4), "Modern Directory Structure: Supported", ""),
    ((5, 4), "SymfonyStyle: Use for console output", ""),
    ((6, 0), "Native Attributes: Supported (e.g., #[Route])", "Native Attributes: #[Route(...)]"),
    ((6, 2), "MapRequestPayload: Use #[MapRequestPayload]", "MapRequestPayload: #[MapRequestPayload]"),
    ((6, 2), "AsConsoleCommand: Use #[AsConsoleCommand]", "AsConsoleCommand: #[AsConsoleCommand]"),
    ((7, 3), "DatePoint: Use Symfony\\Component\\Clock\\DatePoint", "DatePoint: Symfony\\Component\\Clock\\DatePoint"),
    ((7, 3), "AsEventListener: Use #[AsEventListener]", "AsEventListener: #[AsEventListener]"),
]


def major_minor(version: str) -> tuple[int, int]:
    """Parse ``"8.4.1"`` into ``(8, 4)``."""
    parts = version.split(".")
    try:
        return int(parts[0]), int(parts[1]) if len(parts) > 1 else 0
    except ValueError:
        return 0, 0


def major_minor_str(version: str) -> str:
    return "%d.%d" % major_minor(version)


def symfony_doc_url(version: str) -> str:
    return f"https://symfony.com/doc/{major_minor_str(version)}"


def php_doc_url(version: str) -> str:
    return f"https://www.php.net/manual/en/migration{major_minor_str(version).replace('.', '')}.php"


def supported_features(table, version: str) -> list[str]:
    current = major_minor(version)
    return [desc for minimum, desc, _ in table if current >= minimum]


def incompatible_patterns(table, version: str) -> list[str]:
    current = major_minor(version)
    return [pattern for minimum, _, pattern in table if pattern and current < minimum]


def features_matrix(versions: VersionSettings) -> str:
    """Render the version features matrix as Markdown."""
    sf, php = versions.symfony_version, versions.php_version
    sf_url, php_url = symfony_doc_url(sf), php_doc_url(php)

    lines = [
        f"# 🆕 Symfony {sf} & PHP {php} Features Matrix",
        "",
        "## 🎯 Version-Specific Guidelines",
        f"- **Symfony Documentation**: [{major_minor_str(sf)}]({sf_url})",
        f"- **PHP Migration Guide**: [{major_minor_str(php)}]({php_url})",
        f"- **Version Focus**: Symfony {sf} and PHP {php}",
        "",
        "## 🚨 Critical Checks",
        f"### PHP {php} Features",
    ]
    lines += [f"- ✅ {f}" for f in supported_features(PHP_FEATURES, php)] or ["- None"]
    lines += ["", f"### Symfony {sf} Features"]
    lines += [f"- ✅ {f}" for f in supported_features(SYMFONY_FEATURES, sf)] or ["- None"]

    lines += ["", "## 🔍 Detection Patterns", "### PHP Incompatible Patterns"]
    lines += [f"- {p}" for p in incompatible_patterns(PHP_FEATURES, php)] or ["- None"]
    lines += ["", "### Symfony Incompatible Patterns"]
    lines += [f"- {p}" for p in incompatible_patterns(SYMFONY_FEATURES, sf)] or ["- None"]

    lines += [
        "",
        "## 🛠️ Recommendations",
        f"- Use [Symfony {sf} Docs]({sf_url})",
        f"- Verify PHP {php} compatibility with [PHP {php} Migration]({php_url})",
        "- Adopt version-appropriate console command practices",
    ]
    return "\n".join(lines) + "\n"


# --- Per-file checks ---

_PROPERTY_HOOK_RE = re.compile(r"public \$[a-zA-Z0-9_]* \{ get =>")
_BLOCK_RE = re.compile(r"\{% block.*%\}.*\{% endblock %\}")
_IMPORT_RE = re.compile(r"import .* from")
_ARROW_RE = re.compile(r"const .* =>")


def check_file(path: str, text: str, versions: VersionSettings) -> list[str]:
    """Return version-specific findings for one changed file."""
    findings: list[str] = []
    php, sf = versions.php_version, versions.symfony_version
    php_mm, sf_mm = major_minor(php), major_minor(sf)

    if path.endswith(".php"):
        if _PROPERTY_HOOK_RE.search(text):
            if php_mm >= (8, 4):
                findings.append(f"✅ PHP {php}: Property hooks detected")
            else:
                findings.append(f"❌ PHP {php}: Property hooks not supported")
        if php_mm < (8, 1) and "match(" in text:
            findings.append(f"❌ PHP {php}: Match expression not supported")
        if "declare(strict_types=1)" in text:
            findings.append("✅ Strict typing enabled")
        if "ini_set" in text:
            findings.append("⚠️ Resource configuration (ini_set) detected; review for production safety")

        for marker, label, minimum in (
            ("#[AsConsoleCommand]", "AsConsoleCommand", (6, 2)),
            ("#[MapRequestPayload]", "MapRequestPayload", (6, 2)),
            ("Symfony\\Component\\Clock\\DatePoint", "DatePoint", (7, 3)),
        ):
            if marker in text:
                if sf_mm >= minimum:
                    findings.append(f"✅ Symfony {sf}: {label} detected")
                else:
                    findings.append(f"❌ Symfony {sf}: {label} not supported")

    elif path.endswith(".twig"):
        if "{% extends '" in text:
            findings.append("✅ Template inheritance")
        if sf_mm >= (6, 0) and "{{ stimulus_" in text:
            findings.append("✅ Stimulus integration")
        if _BLOCK_RE.search(text):
            findings.append("✅ Proper block structure")
        else:
            findings.append("⚠️ Missing or improper block structure")

    elif path.endswith(".js"):
        if _IMPORT_RE.search(text):
            findings.append("✅ ES6 module syntax")
        if _ARROW_RE.search(text):
            findings.append("✅ Arrow functions")
        if "var " in text:
            findings.append("⚠️ Legacy var usage detected; prefer const/let")

    elif path.endswith((".css", ".scss")):
        if "@mixin" in text:
            findings.append("✅ SCSS mixins")
        if "var(--" in text:
            findings.append("✅ CSS variables")
        if "!important" in text:
            findings.append("⚠️ Use of !important detected; consider alternatives")

    return findings
