"""Tests for oracle invocation helpers."""

import json
import subprocess
from unittest.mock import MagicMock, patch

from prdsmith.lib.agents_config import AgentsConfig
from prdsmith.pm.claude_utils import extract_json_object, run_claude, strip_markdown_fences


def completed(stdout="", stderr="", returncode=0):
    result = MagicMock()
    result.stdout = stdout
    result.stderr = stderr
    result.returncode = returncode
    return result


class TestRunClaude:
    """Tests for run_claude() with subprocess mocked."""

    @patch("prdsmith.pm.claude_utils.subprocess.run")
    def test_unwraps_json_result(self, mock_run):
        mock_run.return_value = completed(stdout=json.dumps({"result": "Hello there"}))
        success, text = run_claude("prompt")
        assert success is True
        assert text == "Hello there"

        kwargs = mock_run.call_args.kwargs
        assert kwargs["input"] == "prompt"
        assert kwargs["timeout"] == 300
        assert "ANTHROPIC_API_KEY" not in kwargs["env"]

    @patch("prdsmith.pm.claude_utils.subprocess.run")
    def test_plain_output_when_not_json_format(self, mock_run):
        mock_run.return_value = completed(stdout="raw text")
        config = AgentsConfig(stages={"prd_chat": "llm {prompt}"})
        success, text = run_claude("prompt", config=config)
        assert (success, text) == (True, "raw text")
        assert mock_run.call_args.args[0] == ["llm", "prompt"]
        assert mock_run.call_args.kwargs["input"] is None

    @patch("prdsmith.pm.claude_utils.subprocess.run")
    def test_unparseable_wrapper_returns_stdout(self, mock_run):
        mock_run.return_value = completed(stdout="not json")
        assert run_claude("prompt") == (True, "not json")

    @patch("prdsmith.pm.claude_utils.subprocess.run")
    def test_nonzero_exit(self, mock_run):
        mock_run.return_value = completed(stderr="auth required", returncode=1)
        success, text = run_claude("prompt")
        assert success is False
        assert text == "Oracle failed (exit 1): auth required"

    @patch("prdsmith.pm.claude_utils.subprocess.run")
    def test_timeout(self, mock_run):
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="claude", timeout=5)
        assert run_claude("prompt", timeout=5) == (False, "Oracle timed out after 5s")

    @patch("prdsmith.pm.claude_utils.subprocess.run")
    def test_binary_missing(self, mock_run):
        mock_run.side_effect = FileNotFoundError()
        assert run_claude("prompt") == (False, "Oracle CLI not found: claude")


class TestStripMarkdownFences:
    def test_strips_fences(self):
        assert strip_markdown_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_plain_text_unchanged(self):
        assert strip_markdown_fences("  hello ") == "hello"


class TestExtractJsonObject:
    def test_fenced_block_preferred(self):
        text = 'Here {not json}\n```json\n{"score": "good"}\n```'
        assert extract_json_object(text) == {"score": "good"}

    def test_object_in_prose(self):
        text = 'Sure! {"score": "acceptable", "issues": []} Hope that helps.'
        assert extract_json_object(text) == {"score": "acceptable", "issues": []}

    def test_nothing_found(self):
        assert extract_json_object("no braces [1, 2]") is None
