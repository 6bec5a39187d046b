"""
Oracle command configuration.

Loads agents.yaml to determine which CLI command answers each dialogue
stage. If no config file exists, the Claude CLI is used for everything.

Templates support {prompt}. If present, the prompt is passed as a CLI
argument; otherwise it is sent via stdin (better for long transcripts).

Example agents.yaml:

    stages:
      prd_chat: claude -p --output-format json --model sonnet
      prd_assess: claude -p --output-format json --model haiku
"""

import logging
import shlex
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

AGENTS_FILENAME = "agents.yaml"

DEFAULT_STAGE_COMMANDS = {
    "prd_chat": "claude -p --output-format json",
    # One interview turn: transcript -> next assistant message

    "prd_assess": "claude -p --output-format json",
    # Normalized PRD -> quality assessment JSON
}

_PROMPT_PLACEHOLDER = "__PROMPT_PLACEHOLDER__"


@dataclass
class AgentsConfig:
    """Oracle configuration from agents.yaml."""
    stages: dict[str, str] = field(default_factory=lambda: DEFAULT_STAGE_COMMANDS.copy())


def load_agents_config(config_dir: Optional[Path]) -> AgentsConfig:
    """Load agents.yaml and return AgentsConfig.

    If config_dir is None or file doesn't exist, returns defaults.
    """
    if config_dir is None:
        return AgentsConfig()

    config_path = config_dir / AGENTS_FILENAME
    if not config_path.exists():
        return AgentsConfig()

    try:
        data = yaml.safe_load(config_path.read_text())
    except yaml.YAMLError as e:
        logger.warning(f"Failed to parse {config_path}: {e}")
        return AgentsConfig()

    stages = DEFAULT_STAGE_COMMANDS.copy()
    if isinstance(data, dict) and isinstance(data.get("stages"), dict):
        for stage, command in data["stages"].items():
            if isinstance(command, str) and command.strip():
                stages[stage] = command
            else:
                logger.warning(f"Ignoring empty command for stage '{stage}' in {config_path}")
    return AgentsConfig(stages=stages)


@dataclass
class StageCommand:
    """Result of building a stage command."""
    cmd: list[str]  # Command ready for subprocess
    prompt_via_stdin: bool  # True if prompt should be passed via stdin
    output_format: str | None  # "json" if --output-format json, else None

    def get_stdin_input(self, prompt: str) -> str | None:
        """Return prompt if it should be passed via stdin, else None."""
        return prompt if self.prompt_via_stdin else None


def _detect_output_format(parts: list[str]) -> str | None:
    # Handles both "--output-format json" and "--output-format=json"
    for i, part in enumerate(parts):
        if part == "--output-format" and i + 1 < len(parts):
            return parts[i + 1]
        if part.startswith("--output-format="):
            return part.split("=", 1)[1]
    return None


def get_stage_command(config: AgentsConfig, stage: str, prompt: str) -> StageCommand:
    """Build the command list for a stage.

    Raises:
        ValueError: If stage is unknown.

    Example:
        >>> get_stage_command(AgentsConfig(), "prd_chat", "hi").cmd
        ['claude', '-p', '--output-format', 'json']
    """
    if stage not in config.stages:
        raise ValueError(f"Unknown stage: {stage}")

    cmd_template = config.stages[stage]
    prompt_via_stdin = "{prompt}" not in cmd_template

    # Swap {prompt} out before shlex so quotes in the prompt can't break parsing
    parts = shlex.split(cmd_template.replace("{prompt}", _PROMPT_PLACEHOLDER))
    cmd = [prompt if part == _PROMPT_PLACEHOLDER else part for part in parts]

    return StageCommand(
        cmd=cmd,
        prompt_via_stdin=prompt_via_stdin,
        output_format=_detect_output_format(parts),
    )


def get_stage_binary(config: AgentsConfig, stage: str) -> str:
    """Get the binary name for a stage (first element of command)."""
    if stage not in config.stages:
        raise ValueError(f"Unknown stage: {stage}")
    parts = shlex.split(config.stages[stage])
    return parts[0] if parts else ""


def check_binary_available(binary: str) -> bool:
    """Check if a binary is available in PATH."""
    return shutil.which(binary) is not None


def missing_binaries(config: AgentsConfig, stages: list[str]) -> dict[str, list[str]]:
    """Map each unavailable binary to the stages that need it."""
    missing: dict[str, list[str]] = {}
    for stage in stages:
        if stage not in config.stages:
            continue
        binary = get_stage_binary(config, stage)
        if not check_binary_available(binary):
            missing.setdefault(binary, []).append(stage)
    return missing
