"""
PRD and chat session storage.

PRDs are stored as JSON + markdown pairs in:
  <output_dir>/prds/<slug>.json
  <output_dir>/prds/<slug>.md

Chat sessions (including parked ones) are stored in:
  <output_dir>/sessions/<name>.json
"""

import json
import logging
from pathlib import Path
from typing import Optional

from prdsmith.lib.markdown import format_markdown_prd
from prdsmith.lib.validate import validate_before_write
from prdsmith.pm.conversation import ChatSession
from prdsmith.transform import PRDDocument, validate_prd
from prdsmith.transform.ids import kebab_case

logger = logging.getLogger(__name__)


def get_prds_dir(output_dir: Path) -> Path:
    return output_dir / "prds"


def get_sessions_dir(output_dir: Path) -> Path:
    return output_dir / "sessions"


def prd_slug(document: PRDDocument) -> str:
    """File stem for a PRD, from its branch name without the prefix."""
    branch = document.branch_name.rsplit("/", 1)[-1]
    return kebab_case(branch) or kebab_case(document.feature_name) or "prd"


def save_prd(output_dir: Path, document: PRDDocument) -> Path:
    """Write a PRD as JSON plus markdown. Returns the JSON path.

    Raises:
        ValidationError: If the document doesn't satisfy the canonical schema
    """
    prds_dir = get_prds_dir(output_dir)
    prds_dir.mkdir(parents=True, exist_ok=True)

    data = document.to_dict()
    json_path = prds_dir / f"{prd_slug(document)}.json"
    validate_before_write(data, "prd", json_path)

    json_path.write_text(json.dumps(data, indent=2))
    json_path.with_suffix(".md").write_text(format_markdown_prd(document))
    logger.info(f"Saved PRD to {json_path}")
    return json_path


def load_prd(output_dir: Path, name: str) -> Optional[PRDDocument]:
    """Load a stored PRD by slug."""
    path = get_prds_dir(output_dir) / f"{name}.json"
    if not path.exists():
        return None

    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        logger.warning(f"Failed to load PRD {name}: {e}")
        return None

    result = validate_prd(data)
    if not result.ok:
        logger.warning(f"Stored PRD {name} is not canonical: {result.errors}")
        return None
    return result.document


def list_prds(output_dir: Path) -> list[tuple[str, PRDDocument]]:
    """List all stored PRDs as (slug, document) pairs."""
    prds_dir = get_prds_dir(output_dir)
    if not prds_dir.exists():
        return []

    prds = []
    for f in sorted(prds_dir.glob("*.json")):
        document = load_prd(output_dir, f.stem)
        if document is not None:
            prds.append((f.stem, document))
    return prds


def save_session(output_dir: Path, name: str, session: ChatSession) -> Path:
    sessions_dir = get_sessions_dir(output_dir)
    sessions_dir.mkdir(parents=True, exist_ok=True)
    path = sessions_dir / f"{name}.json"
    path.write_text(json.dumps(session.to_dict(), indent=2))
    return path


def load_session(output_dir: Path, name: str) -> Optional[ChatSession]:
    path = get_sessions_dir(output_dir) / f"{name}.json"
    if not path.exists():
        return None

    try:
        return ChatSession.from_dict(json.loads(path.read_text()))
    except (json.JSONDecodeError, KeyError, TypeError, AttributeError) as e:
        logger.warning(f"Failed to load session {name}: {e}")
        return None


def format_parked_session(session: ChatSession) -> str:
    """Transcript text handed to the oracle when a parked session resumes."""
    lines = [f"Current phase: {session.phase}", ""]
    for message in session.messages:
        speaker = "User" if message.role == "user" else "Assistant"
        lines.append(f"{speaker}: {message.content}")
    return "\n".join(lines)
