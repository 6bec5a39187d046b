"""
PRD interview conversation.

The dialogue oracle walks the user through three phases (value, scope,
stories) and finally emits the PRD between ===PRD_START=== and
===PRD_END=== markers. Phase progress is tracked with a transitions state
machine driven by markers in the assistant's text.

Usage:
    session = ChatSession()
    ok, reply = send_message(session, "I want saved searches", config)
    if session.is_complete:
        result = merge_generated_prd(session.prd_data)
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from transitions import Machine

from prdsmith.lib.agents_config import AgentsConfig
from prdsmith.lib.prompts import load_prompt, render_prompt
from prdsmith.pm.claude_utils import extract_json_object, run_claude
from prdsmith.transform import TransformResult, transform

logger = logging.getLogger(__name__)

PRD_START = "===PRD_START==="
PRD_END = "===PRD_END==="

PHASES = ["value", "scope", "stories", "complete"]

TRANSITIONS = [
    {"trigger": "to_scope", "source": "value", "dest": "scope"},
    {"trigger": "to_stories", "source": ["value", "scope"], "dest": "stories"},
    {"trigger": "finish", "source": ["value", "scope", "stories"], "dest": "complete"},
]

# Destination phase -> trigger that reaches it
TRIGGER_FOR = {t["dest"]: t["trigger"] for t in TRANSITIONS}

PHASE_MARKERS = {
    "stories": ("Phase 3:", "Moving to Phase 3"),
    "scope": ("Phase 2:", "Moving to Phase 2"),
}


def detect_phase(assistant_text: str) -> str:
    """Phase signalled by one assistant message."""
    if PRD_START in assistant_text:
        return "complete"
    for phase in ("stories", "scope"):
        if any(marker in assistant_text for marker in PHASE_MARKERS[phase]):
            return phase
    return "value"


def extract_prd_block(text: str) -> Optional[dict]:
    """JSON payload between the PRD markers, or None.

    The end marker is optional; models sometimes stop right after the
    closing brace.
    """
    start = text.find(PRD_START)
    if start == -1:
        return None
    body = text[start + len(PRD_START):]
    end = body.find(PRD_END)
    if end != -1:
        body = body[:end]

    try:
        data = json.loads(body.strip())
    except json.JSONDecodeError:
        data = extract_json_object(body)

    if not isinstance(data, dict):
        logger.warning("PRD block found but it holds no JSON object")
        return None
    return data


class ConversationFSM:
    """Forward-only phase tracker for one interview."""

    def __init__(self, initial: str = "value", on_transition: Callable[[str, str], None] | None = None):
        if initial not in PHASES:
            logger.warning(f"Unknown phase '{initial}', defaulting to 'value'")
            initial = "value"
        self.on_transition = on_transition
        self.machine = Machine(
            model=self,
            states=PHASES,
            transitions=TRANSITIONS,
            initial=initial,
            auto_transitions=False,
            send_event=True,
            after_state_change="on_state_change",
        )

    def on_state_change(self, event) -> None:
        from_phase = event.transition.source
        to_phase = event.transition.dest
        logger.info(f"[chat] phase {from_phase} -> {to_phase}")
        if self.on_transition:
            self.on_transition(from_phase, to_phase)

    def advance_to(self, phase: str) -> bool:
        """Move forward to phase. Returns False if that would go backwards or stay put."""
        if PHASES.index(phase) <= PHASES.index(self.state):
            return False
        return self.trigger(TRIGGER_FOR[phase])


@dataclass
class Message:
    role: str  # user, assistant
    content: str

    def to_dict(self) -> dict:
        return {"role": self.role, "content": self.content}


@dataclass
class ChatSession:
    messages: list[Message] = field(default_factory=list)
    phase: str = "value"
    prd_data: Optional[dict] = None  # {"markdown": {...}, "json": {...}} once complete

    def __post_init__(self):
        self._fsm = ConversationFSM(self.phase, on_transition=self._on_phase_change)
        self.phase = self._fsm.state

    def _on_phase_change(self, from_phase: str, to_phase: str) -> None:
        self.phase = to_phase

    @property
    def is_complete(self) -> bool:
        return self.phase == "complete" and self.prd_data is not None

    def add_user(self, content: str) -> None:
        self.messages.append(Message(role="user", content=content))

    def add_assistant(self, content: str) -> None:
        """Record an assistant turn, advancing the phase and capturing the PRD."""
        self.messages.append(Message(role="assistant", content=content))
        phase = detect_phase(content)
        if phase == "complete":
            prd_data = extract_prd_block(content)
            if prd_data is None:
                # Marker without a payload; stay in the current phase
                return
            self.prd_data = prd_data
        self._fsm.advance_to(phase)

    def to_dict(self) -> dict:
        return {
            "messages": [m.to_dict() for m in self.messages],
            "phase": self.phase,
            "prdData": self.prd_data,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ChatSession":
        return cls(
            messages=[Message(role=m["role"], content=m["content"]) for m in data.get("messages", [])],
            phase=data.get("phase", "value"),
            prd_data=data.get("prdData"),
        )


def build_chat_prompt(session: ChatSession, resume_content: Optional[str] = None) -> str:
    """System prompt plus transcript, ready for the prd_chat stage."""
    parts = [load_prompt("chat_system")]
    if resume_content:
        parts.append(render_prompt("chat_resume", parked_content=resume_content))

    parts.extend(["", "## Conversation so far", ""])
    for message in session.messages:
        speaker = "User" if message.role == "user" else "Assistant"
        parts.append(f"{speaker}: {message.content}")
        parts.append("")

    parts.append("Reply as the assistant with your next message only.")
    return "\n".join(parts)


def send_message(
    session: ChatSession,
    text: str,
    config: AgentsConfig | None = None,
    timeout: int = 300,
    resume_content: Optional[str] = None,
) -> tuple[bool, str]:
    """Send one user turn and record the oracle's reply.

    On failure the user turn is rolled back so it can be retried.
    """
    session.add_user(text)
    success, reply = run_claude(
        build_chat_prompt(session, resume_content),
        stage="prd_chat",
        config=config,
        timeout=timeout,
    )
    if not success:
        session.messages.pop()
        return False, reply

    reply = reply.strip()
    session.add_assistant(reply)
    return True, reply


def merge_generated_prd(prd_data: dict) -> TransformResult:
    """Normalize the PRD emitted at the end of an interview.

    The payload splits content across "markdown" (narrative fields) and
    "json" (build fields); both are merged, build fields winning, and the
    result goes through the same transform as an uploaded file.
    """
    markdown = prd_data.get("markdown")
    build = prd_data.get("json")
    if not isinstance(markdown, dict) and not isinstance(build, dict):
        return transform(prd_data)

    merged = {}
    if isinstance(markdown, dict):
        merged.update(markdown)
    if isinstance(build, dict):
        merged.update(build)
    merged.setdefault("type", "feature")
    return transform(merged)
