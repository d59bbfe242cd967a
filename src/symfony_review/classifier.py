"""Bucket changed paths by Symfony naming conventions.

Matching is a case-sensitive substring or suffix test, so categories
overlap: ``tests/Controller/UserControllerTest.php`` counts as both a
Controller and a Test.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable

FileClassification = Dict[str, int]
FileTypeDistribution = Dict[str, int]


def _contains(fragment: str) -> Callable[[str], bool]:
    return lambda path: fragment in path


def _endswith(*suffixes: str) -> Callable[[str], bool]:
    return lambda path: path.endswith(suffixes)


# Order is the report order
CATEGORIES: list[tuple[str, Callable[[str], bool]]] = [
    ("Controller", _contains("Controller")),
    ("Entity", _contains("Entity")),
    ("Repository", _contains("Repository")),
    ("Service", _contains("Service")),
    ("Command", _contains("Command")),
    ("Handler", _contains("Handler")),
    ("Form", _contains("Form")),
    ("EventSubscriber", _contains("Subscriber")),
    ("Migration", _contains("Migrations/")),
    ("Template", _endswith(".twig")),
    ("Test", _contains("Test")),
]

FILE_TYPES: list[tuple[str, Callable[[str], bool]]] = [
    ("PHP", _endswith(".php")),
    ("Twig", _endswith(".twig")),
    ("JavaScript", _endswith(".js")),
    ("CSS/SCSS", _endswith(".css", ".scss")),
]

# Extensions the review looks at
REVIEWED_PATHSPECS = ("*.php", "*.twig", "*.js", "*.css", "*.scss")


class FileClassifier:
    """Counts paths per category. Deterministic and order independent."""

    def __init__(self, categories=None, file_types=None):
        self.categories = list(categories if categories is not None else CATEGORIES)
        self.file_types = list(file_types if file_types is not None else FILE_TYPES)

    def classify(self, paths: Iterable[str]) -> FileClassification:
        return _count(self.categories, paths)

    def distribution(self, paths: Iterable[str]) -> FileTypeDistribution:
        return _count(self.file_types, paths)


def _count(predicates, paths: Iterable[str]) -> dict[str, int]:
    counts = {label: 0 for label, _ in predicates}
    for path in paths:
        for label, matches in predicates:
            if matches(path):
                counts[label] += 1
    return counts
