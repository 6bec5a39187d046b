"""Tests for agents_config module."""

import logging
from unittest.mock import patch

import pytest

from prdsmith.lib.agents_config import (
    DEFAULT_STAGE_COMMANDS,
    AgentsConfig,
    get_stage_binary,
    get_stage_command,
    load_agents_config,
    missing_binaries,
)


class TestLoadAgentsConfig:
    """Tests for load_agents_config()."""

    def test_returns_defaults_when_no_config_dir(self):
        config = load_agents_config(None)
        assert config.stages == DEFAULT_STAGE_COMMANDS

    def test_returns_defaults_when_file_missing(self, tmp_path):
        config = load_agents_config(tmp_path)
        assert config.stages == DEFAULT_STAGE_COMMANDS

    def test_loads_custom_config(self, tmp_path):
        (tmp_path / "agents.yaml").write_text(
            "stages:\n  prd_assess: custom-claude --fast -p {prompt}\n"
        )
        config = load_agents_config(tmp_path)
        assert config.stages["prd_assess"] == "custom-claude --fast -p {prompt}"
        # Other stages should still have defaults
        assert config.stages["prd_chat"] == DEFAULT_STAGE_COMMANDS["prd_chat"]

    def test_handles_invalid_yaml(self, tmp_path, caplog):
        (tmp_path / "agents.yaml").write_text("stages: [unclosed\n")
        with caplog.at_level(logging.WARNING):
            config = load_agents_config(tmp_path)
        assert config.stages == DEFAULT_STAGE_COMMANDS
        assert "Failed to parse" in caplog.text

    def test_ignores_empty_command(self, tmp_path):
        (tmp_path / "agents.yaml").write_text("stages:\n  prd_chat: ''\n")
        config = load_agents_config(tmp_path)
        assert config.stages["prd_chat"] == DEFAULT_STAGE_COMMANDS["prd_chat"]

    def test_defaults_not_shared(self):
        config = AgentsConfig()
        config.stages["prd_chat"] = "other"
        assert DEFAULT_STAGE_COMMANDS["prd_chat"] != "other"


class TestGetStageCommand:
    """Tests for get_stage_command()."""

    def test_prompt_via_stdin_when_not_in_template(self):
        result = get_stage_command(AgentsConfig(), "prd_chat", "hello")
        assert result.cmd == ["claude", "-p", "--output-format", "json"]
        assert result.prompt_via_stdin is True
        assert result.get_stdin_input("hello") == "hello"
        assert result.output_format == "json"

    def test_prompt_via_arg_when_in_template(self):
        config = AgentsConfig(stages={"prd_chat": "llm -m fast {prompt}"})
        result = get_stage_command(config, "prd_chat", 'say "hi" it\'s me')
        assert result.cmd == ["llm", "-m", "fast", 'say "hi" it\'s me']
        assert result.prompt_via_stdin is False
        assert result.get_stdin_input("x") is None
        assert result.output_format is None

    def test_output_format_equals_form(self):
        config = AgentsConfig(stages={"prd_assess": "claude -p --output-format=text"})
        assert get_stage_command(config, "prd_assess", "x").output_format == "text"

    def test_unknown_stage(self):
        with pytest.raises(ValueError, match="Unknown stage"):
            get_stage_command(AgentsConfig(), "implement", "x")


class TestBinaries:
    def test_get_stage_binary(self):
        config = AgentsConfig(stages={"prd_chat": "/usr/local/bin/llm chat"})
        assert get_stage_binary(config, "prd_chat") == "/usr/local/bin/llm"

    def test_missing_binaries_groups_stages(self):
        with patch("prdsmith.lib.agents_config.shutil.which", return_value=None):
            missing = missing_binaries(AgentsConfig(), ["prd_chat", "prd_assess", "nope"])
        assert missing == {"claude": ["prd_chat", "prd_assess"]}

    def test_nothing_missing(self):
        with patch("prdsmith.lib.agents_config.shutil.which", return_value="/bin/claude"):
            assert missing_binaries(AgentsConfig(), ["prd_chat"]) == {}
