"""
prd chat - Interactive PRD interview with the dialogue oracle.

Each turn is saved so an interrupted interview can be picked up again
with --session. Typing /park saves and exits.
"""

import json
from datetime import datetime
from pathlib import Path

from prdsmith.lib.agents_config import load_agents_config, missing_binaries
from prdsmith.lib.config import Settings
from prdsmith.pm.conversation import ChatSession, merge_generated_prd, send_message
from prdsmith.pm.store import format_parked_session, load_session, save_prd, save_session

PHASE_LABELS = {
    "value": "Phase 1: Value & Problem",
    "scope": "Phase 2: Scope & Boundaries",
    "stories": "Phase 3: User Stories",
    "complete": "Complete",
}

OPENING_MESSAGE = "Hi! I'd like to write a PRD for a new feature."


def _read_line(prompt: str) -> str | None:
    try:
        return input(prompt)
    except EOFError:
        return None


def _resume_content(path: Path) -> str:
    """Parked text for the oracle. Saved session files are rendered as a transcript."""
    text = path.read_text()
    if path.suffix == ".json":
        try:
            return format_parked_session(ChatSession.from_dict(json.loads(text)))
        except (json.JSONDecodeError, KeyError, TypeError, AttributeError):
            pass
    return text


def cmd_chat(args, settings: Settings) -> int:
    """Run the interview loop until the PRD is produced or the user parks it."""
    config = load_agents_config(settings.config_dir)
    missing = missing_binaries(config, ["prd_chat"])
    if missing:
        for binary in missing:
            print(f"ERROR: Required tool '{binary}' is not installed.")
        print("Install it, or set 'stages: prd_chat: ...' in agents.yaml.")
        return 2

    name = args.session or datetime.now().strftime("chat-%Y%m%d-%H%M%S")
    session = load_session(settings.output_dir, name) or ChatSession()

    resume_content = None
    if args.resume:
        resume_path = Path(args.resume)
        if not resume_path.exists():
            print(f"ERROR: File not found: {resume_path}")
            return 2
        resume_content = _resume_content(resume_path)

    print(f"PRD interview: {name}")
    print("=" * 60)
    print("Type /park to save and stop, /quit to stop without saving.")
    print()

    text = OPENING_MESSAGE if not session.messages else None
    while not session.is_complete:
        if text is None:
            text = _read_line("you> ")
            if text is None or text.strip() == "/quit":
                return 0
            if text.strip() == "/park":
                path = save_session(settings.output_dir, name, session)
                print(f"Parked session saved to: {path}")
                print(f"Resume with: prd chat --session {name}")
                return 0
            if not text.strip():
                text = None
                continue

        success, reply = send_message(
            session,
            text,
            config=config,
            timeout=settings.oracle_timeout,
            resume_content=resume_content,
        )
        text = None
        if not success:
            print(f"ERROR: {reply}")
            continue

        save_session(settings.output_dir, name, session)
        print()
        print(f"[{PHASE_LABELS[session.phase]}]")
        print(reply)
        print()

    result = merge_generated_prd(session.prd_data)
    if not result.success:
        print("ERROR: The generated PRD could not be normalized:")
        for error in result.errors:
            print(f"  - {error}")
        return 1

    path = save_prd(settings.output_dir, result.document)
    print("-" * 60)
    print(f"PRD saved to: {path}")
    print(f"Markdown:     {path.with_suffix('.md')}")
    for warning in result.warnings:
        print(f"  ! {warning}")
    return 0
