"""
Shared oracle invocation utilities.

The dialogue oracle is an external CLI (Claude by default, configurable
per stage in agents.yaml). Callers get (success, text) back and never see
subprocess details.
"""

import json
import logging
import os
import re
import subprocess

from prdsmith.lib.agents_config import AgentsConfig, get_stage_command

logger = logging.getLogger(__name__)


def run_claude(
    prompt: str,
    stage: str = "prd_chat",
    config: AgentsConfig | None = None,
    timeout: int = 300,
) -> tuple[bool, str]:
    """Run the oracle for a stage and return (success, response).

    Args:
        prompt: The prompt to send
        stage: agents.yaml stage name (prd_chat, prd_assess)
        config: Oracle configuration (defaults when None)
        timeout: Timeout in seconds (default 300)

    Returns:
        Tuple of (success, response_text). On failure the text is a
        human-readable error.
    """
    stage_cmd = get_stage_command(config or AgentsConfig(), stage, prompt)

    # Remove ANTHROPIC_API_KEY so Claude uses OAuth
    env = {k: v for k, v in os.environ.items() if k != "ANTHROPIC_API_KEY"}

    logger.debug(f"Running oracle for stage {stage}: {stage_cmd.cmd[0]}")
    try:
        result = subprocess.run(
            stage_cmd.cmd,
            input=stage_cmd.get_stdin_input(prompt),
            capture_output=True,
            text=True,
            timeout=timeout,
            env=env,
        )
    except subprocess.TimeoutExpired:
        return False, f"Oracle timed out after {timeout}s"
    except FileNotFoundError:
        return False, f"Oracle CLI not found: {stage_cmd.cmd[0]}"

    if result.returncode != 0:
        error_msg = result.stderr.strip() or result.stdout.strip()
        if not error_msg:
            error_msg = f"(no output - check '{stage_cmd.cmd[0]} --version' and auth status)"
        return False, f"Oracle failed (exit {result.returncode}): {error_msg}"

    if stage_cmd.output_format != "json":
        return True, result.stdout

    # Parse JSON wrapper
    try:
        wrapper = json.loads(result.stdout.strip())
        response = wrapper.get("result", result.stdout) if isinstance(wrapper, dict) else result.stdout
    except json.JSONDecodeError:
        response = result.stdout

    return True, response


def strip_markdown_fences(text: str) -> str:
    """Strip markdown code fences from text if present."""
    text = text.strip()
    if text.startswith("```"):
        lines = text.split("\n")
        if lines and lines[0].strip().startswith("```"):
            lines = lines[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        text = "\n".join(lines)
    return text


def extract_json_object(text: str) -> dict | None:
    """Find the first JSON object in free text.

    Tries fenced ```json blocks first, then decodes from each `{`. Returns
    None if nothing parses to a dict.
    """
    candidates = re.findall(r"```(?:json)?\s*(.*?)```", text, flags=re.DOTALL | re.IGNORECASE)
    candidates.append(text)

    decoder = json.JSONDecoder()
    for candidate in candidates:
        for match in re.finditer(r"\{", candidate):
            try:
                parsed, _ = decoder.raw_decode(candidate[match.start():])
            except json.JSONDecodeError:
                continue
            if isinstance(parsed, dict):
                return parsed
    return None
