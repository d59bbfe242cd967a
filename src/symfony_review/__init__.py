"""symfony-review - context-aware Git diff review prompts for Symfony projects."""

__version__ = "1.5.0"
