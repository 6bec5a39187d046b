"""
PM (Product Management) module for prdsmith.

Handles the PRD interview with the dialogue oracle, quality assessment of
normalized PRDs, and storage of PRDs and chat sessions.
"""

from prdsmith.pm.assessment import (
    QualityAssessment,
    QualityIssue,
    assess_prd,
    default_assessment,
    parse_assessment,
    summarize_prd,
)
from prdsmith.pm.claude_utils import extract_json_object, run_claude, strip_markdown_fences
from prdsmith.pm.conversation import (
    ChatSession,
    Message,
    detect_phase,
    extract_prd_block,
    merge_generated_prd,
    send_message,
)
from prdsmith.pm.store import list_prds, load_prd, load_session, save_prd, save_session
from prdsmith.pm.validation import PRDInputError, ValidationEnvelope, load_prd_input, validate_prd_content

__all__ = [
    "QualityAssessment",
    "QualityIssue",
    "assess_prd",
    "default_assessment",
    "parse_assessment",
    "summarize_prd",
    "extract_json_object",
    "run_claude",
    "strip_markdown_fences",
    "ChatSession",
    "Message",
    "detect_phase",
    "extract_prd_block",
    "merge_generated_prd",
    "send_message",
    "list_prds",
    "load_prd",
    "load_session",
    "save_prd",
    "save_session",
    "PRDInputError",
    "ValidationEnvelope",
    "load_prd_input",
    "validate_prd_content",
]
