"""Tests for the AI review backends."""

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from symfony_review.assembler import Prompt
from symfony_review.backends import (
    BackendFailedError,
    BackendUnavailableError,
    ClaudeBackend,
    CopilotBackend,
    GPTBackend,
    PlaceholderBackend,
    UnsupportedProviderError,
    create_backend,
    error_review,
    placeholder_review,
)

PROMPT = Prompt(text="# Review this diff")


def _response(status, payload=None, text=""):
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = payload or {}
    resp.text = text
    return resp


class TestCreateBackend:
    @pytest.mark.parametrize(
        "name, cls",
        [("copilot", CopilotBackend), ("claude", ClaudeBackend), ("gpt", GPTBackend), ("placeholder", PlaceholderBackend)],
    )
    def test_known_providers(self, name, cls):
        assert isinstance(create_backend(name), cls)

    def test_case_insensitive(self):
        assert isinstance(create_backend("Claude"), ClaudeBackend)

    def test_unknown_provider(self):
        with pytest.raises(UnsupportedProviderError, match="Invalid AI provider: gemini"):
            create_backend("gemini")


class TestClaudeBackend:
    def test_requires_api_key(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        with pytest.raises(BackendUnavailableError, match="API key"):
            ClaudeBackend().submit_prompt(PROMPT)

    @patch("httpx.Client.post")
    def test_success(self, mock_post):
        mock_post.return_value = _response(
            200, {"content": [{"type": "text", "text": "#### 🔍 Comment #1\nLooks fine"}]}
        )
        backend = ClaudeBackend(api_key="sk-test", model="claude-test")
        assert "Looks fine" in backend.submit_prompt(PROMPT)

        _, kwargs = mock_post.call_args
        assert mock_post.call_args[0][0].endswith("/v1/messages")
        assert kwargs["headers"]["x-api-key"] == "sk-test"
        assert kwargs["json"]["model"] == "claude-test"
        assert kwargs["json"]["messages"][0]["content"] == PROMPT.text

    @patch("httpx.Client.post")
    def test_http_error(self, mock_post):
        mock_post.return_value = _response(529, text="overloaded")
        with pytest.raises(BackendFailedError, match="529"):
            ClaudeBackend(api_key="sk-test").submit_prompt(PROMPT)

    @patch("httpx.Client.post")
    def test_timeout(self, mock_post):
        from httpx import TimeoutException

        mock_post.side_effect = TimeoutException("timed out")
        with pytest.raises(BackendUnavailableError, match="timed out"):
            ClaudeBackend(api_key="sk-test").submit_prompt(PROMPT)

    @patch("httpx.Client.post")
    def test_undecodable_diff_bytes_are_replaced(self, mock_post):
        mock_post.return_value = _response(200, {"content": [{"type": "text", "text": "ok"}]})
        ClaudeBackend(api_key="sk-test").submit_prompt(Prompt(text="+// caf\udce9"))
        sent = mock_post.call_args[1]["json"]["messages"][0]["content"]
        assert sent == "+// caf\ufffd"
        sent.encode("utf-8")

    def test_missing_key_is_not_a_failed_call(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        with pytest.raises(BackendUnavailableError) as excinfo:
            ClaudeBackend().submit_prompt(PROMPT)
        assert not isinstance(excinfo.value, BackendFailedError)


class TestGPTBackend:
    @patch("httpx.Client.post")
    def test_success(self, mock_post):
        mock_post.return_value = _response(
            200, {"choices": [{"message": {"content": "Review text"}}]}
        )
        backend = GPTBackend(api_key="sk-test")
        assert backend.submit_prompt(PROMPT) == "Review text"
        _, kwargs = mock_post.call_args
        assert kwargs["headers"]["Authorization"] == "Bearer sk-test"
        assert kwargs["json"]["messages"][-1]["content"] == PROMPT.text

    @patch("httpx.Client.post")
    def test_connect_error(self, mock_post):
        from httpx import ConnectError

        mock_post.side_effect = ConnectError("refused")
        with pytest.raises(BackendUnavailableError, match="Cannot reach"):
            GPTBackend(api_key="sk-test").submit_prompt(PROMPT)

    @patch("httpx.Client.post")
    def test_malformed_response(self, mock_post):
        mock_post.return_value = _response(200, {"choices": []})
        with pytest.raises(BackendUnavailableError, match="unexpected response"):
            GPTBackend(api_key="sk-test").submit_prompt(PROMPT)


class TestCopilotBackend:
    @patch("symfony_review.backends.shutil.which", return_value=None)
    def test_gh_missing(self, _which):
        with pytest.raises(BackendUnavailableError, match="GitHub CLI not found"):
            CopilotBackend().submit_prompt(PROMPT)

    @patch("symfony_review.backends.subprocess.run")
    @patch("symfony_review.backends.shutil.which", return_value="/usr/bin/gh")
    def test_success(self, _which, mock_run):
        mock_run.return_value = subprocess.CompletedProcess([], 0, stdout="copilot says hi", stderr="")
        assert CopilotBackend().submit_prompt(PROMPT) == "copilot says hi"
        cmd = mock_run.call_args[0][0]
        assert cmd[:3] == ["/usr/bin/gh", "copilot", "suggest"]

    @patch("symfony_review.backends.subprocess.run")
    @patch("symfony_review.backends.shutil.which", return_value="/usr/bin/gh")
    def test_failure(self, _which, mock_run):
        mock_run.return_value = subprocess.CompletedProcess([], 1, stdout="", stderr="not logged in")
        with pytest.raises(BackendFailedError, match="not logged in"):
            CopilotBackend().submit_prompt(PROMPT)


class TestPlaceholder:
    def test_returns_manual_instructions(self):
        text = PlaceholderBackend().submit_prompt(PROMPT)
        assert text.startswith("# Manual Review Placeholder")

    def test_placeholder_review(self):
        assert placeholder_review("GPT", ".vscode/p.md") == (
            "# GPT Review Placeholder\nUse .vscode/p.md with GPT manually.\n"
        )

    def test_error_review(self):
        assert error_review("GitHub Copilot", ".vscode/p.md") == (
            "# GitHub Copilot Review Error\nGitHub Copilot review failed. Use .vscode/p.md manually.\n"
        )
