"""AI review backends.

One class per provider behind a single ``submit_prompt`` call. The review
text that comes back is passed through untouched.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import tempfile
from abc import ABC, abstractmethod
from typing import Any

import httpx

from .assembler import Prompt
from .prompts import SYSTEM_PROMPT

logger = logging.getLogger(__name__)

ANTHROPIC_BASE_URL = "https://api.anthropic.com"
ANTHROPIC_VERSION = "2023-06-01"
OPENAI_BASE_URL = "https://api.openai.com"
DEFAULT_CLAUDE_MODEL = "claude-sonnet-4-20250514"
DEFAULT_GPT_MODEL = "gpt-4o"
REQUEST_TIMEOUT = 300  # reviews of large diffs are slow
COPILOT_TIMEOUT = 600


class BackendUnavailableError(Exception):
    """The backend could not produce a review."""


class BackendFailedError(BackendUnavailableError):
    """The backend is set up but the review call itself failed."""


class UnsupportedProviderError(Exception):
    """No backend exists for the requested provider name."""


class ReviewBackend(ABC):
    name = ""
    label = ""

    @abstractmethod
    def submit_prompt(self, prompt: Prompt) -> str:
        """Send the prompt, return the review text."""


class CopilotBackend(ReviewBackend):
    """GitHub Copilot through the ``gh`` CLI."""

    name = "copilot"
    label = "GitHub Copilot"

    def __init__(self, timeout: int = COPILOT_TIMEOUT):
        self.timeout = timeout

    def submit_prompt(self, prompt: Prompt) -> str:
        gh = shutil.which("gh")
        if not gh:
            raise BackendUnavailableError(
                "GitHub CLI not found - install 'gh' for Copilot integration"
            )

        with tempfile.NamedTemporaryFile(
            "w", suffix=".md", prefix="symfony-review-", delete=False,
            encoding="utf-8", errors="surrogateescape",
        ) as handle:
            handle.write(prompt.text)
            prompt_file = handle.name

        try:
            result = subprocess.run(
                [gh, "copilot", "suggest", "-f", prompt_file],
                capture_output=True, text=True, timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            raise BackendFailedError(
                f"GitHub Copilot review timed out after {self.timeout}s"
            )
        finally:
            os.unlink(prompt_file)

        if result.returncode != 0:
            raise BackendFailedError(
                f"GitHub Copilot review failed: {(result.stderr or result.stdout)[:200]}"
            )
        return result.stdout


class _HttpBackend(ReviewBackend):
    api_key_env = ""
    default_base_url = ""
    default_model = ""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
    ):
        self.api_key = api_key if api_key is not None else os.environ.get(self.api_key_env, "")
        self.model = model or self.default_model
        self.base_url = (base_url or self.default_base_url).rstrip("/")
        self._client = httpx.Client(timeout=REQUEST_TIMEOUT)

    def submit_prompt(self, prompt: Prompt) -> str:
        if not self.api_key:
            raise BackendUnavailableError(
                f"{self.label} integration requires API key setup ({self.api_key_env})"
            )
        url, headers, payload = self._request(prompt)
        logger.debug("%s request model=%s url=%s", self.label, self.model, url)

        try:
            resp = self._client.post(url, headers=headers, json=payload, timeout=REQUEST_TIMEOUT)
        except httpx.TimeoutException:
            raise BackendFailedError(
                f"{self.label} request timed out after {REQUEST_TIMEOUT}s"
            )
        except httpx.HTTPError as e:
            raise BackendFailedError(f"Cannot reach {self.label}: {e}")

        if resp.status_code != 200:
            raise BackendFailedError(
                f"{self.label} returned {resp.status_code}: {resp.text[:200]}"
            )
        try:
            return self._parse(resp.json())
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise BackendFailedError(f"{self.label} returned an unexpected response: {e}")

    @abstractmethod
    def _request(self, prompt: Prompt) -> tuple[str, dict[str, str], dict[str, Any]]:
        ...

    @abstractmethod
    def _parse(self, data: dict[str, Any]) -> str:
        ...


class ClaudeBackend(_HttpBackend):
    """Anthropic Messages API."""

    name = "claude"
    label = "Claude AI"
    api_key_env = "ANTHROPIC_API_KEY"
    default_base_url = ANTHROPIC_BASE_URL
    default_model = DEFAULT_CLAUDE_MODEL

    def _request(self, prompt):
        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
            "content-type": "application/json",
        }
        payload = {
            "model": self.model,
            "max_tokens": 8192,
            "system": SYSTEM_PROMPT,
            "messages": [{"role": "user", "content": _wire_text(prompt.text)}],
        }
        return f"{self.base_url}/v1/messages", headers, payload

    def _parse(self, data):
        return "".join(
            block.get("text", "") for block in data["content"] if block.get("type") == "text"
        )


class GPTBackend(_HttpBackend):
    """OpenAI Chat Completions API."""

    name = "gpt"
    label = "GPT"
    api_key_env = "OPENAI_API_KEY"
    default_base_url = OPENAI_BASE_URL
    default_model = DEFAULT_GPT_MODEL

    def _request(self, prompt):
        headers = {"Authorization": f"Bearer {self.api_key}"}
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": _wire_text(prompt.text)},
            ],
            "temperature": 0.2,
        }
        return f"{self.base_url}/v1/chat/completions", headers, payload

    def _parse(self, data):
        return data["choices"][0]["message"]["content"] or ""


class PlaceholderBackend(ReviewBackend):
    """No AI call; the prompt is meant to be pasted by hand."""

    name = "placeholder"
    label = "Manual"

    def submit_prompt(self, prompt: Prompt) -> str:
        return placeholder_review(self.label, "the generated review prompt")


BACKENDS: dict[str, type[ReviewBackend]] = {
    CopilotBackend.name: CopilotBackend,
    ClaudeBackend.name: ClaudeBackend,
    GPTBackend.name: GPTBackend,
    PlaceholderBackend.name: PlaceholderBackend,
}


def create_backend(provider: str, **kwargs: Any) -> ReviewBackend:
    """Instantiate the backend registered under ``provider``."""
    backend_cls = BACKENDS.get(provider.lower())
    if backend_cls is None:
        raise UnsupportedProviderError(
            f"Invalid AI provider: {provider} (choose from {', '.join(BACKENDS)})"
        )
    return backend_cls(**kwargs)


def placeholder_review(label: str, prompt_path: str) -> str:
    return f"# {label} Review Placeholder\nUse {prompt_path} with {label} manually.\n"


def error_review(label: str, prompt_path: str) -> str:
    return f"# {label} Review Error\n{label} review failed. Use {prompt_path} manually.\n"


def _wire_text(text: str) -> str:
    # undecodable bytes from the diff become U+FFFD so the JSON body stays valid UTF-8
    return text.encode("utf-8", "surrogateescape").decode("utf-8", "replace")
