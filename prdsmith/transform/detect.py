"""
Dialect detection for PRD-like JSON.

Each detector is a pure predicate over an untyped object. DETECTORS holds
them in priority order; detect_dialect() returns the first match, or
Dialect.UNKNOWN. Detection never raises.
"""

import re
from enum import Enum
from typing import Any, Callable

from prdsmith.lib.validate import is_valid
from prdsmith.transform.fields import is_number, is_present, is_text_list
from prdsmith.transform.ids import is_valid_story_id
from prdsmith.transform.schema import PRD_SCHEMA

FR_ID_PATTERN = re.compile(r'FR-[0-9]{3}')


class Dialect(str, Enum):
    """Known PRD input shapes."""
    STANDARD = "standard"
    FUNCTIONAL_REQUIREMENTS = "functional-requirements"
    FLAT_REQUIREMENTS = "flat-requirements"
    SNAKE_CASE = "snake-case"
    WRONG_IDS = "wrong-ids"
    UNKNOWN = "unknown"


def _is_text(value: Any) -> bool:
    return isinstance(value, str)


# Optional fields are type-checked only when the key is present
_Shape = dict[str, Callable[[Any], bool]]

FUNCTIONAL_TOP_LEVEL: _Shape = {
    "project": _is_text,
    "project_name": _is_text,
    "projectName": _is_text,
    "feature_name": _is_text,
    "featureName": _is_text,
    "name": _is_text,
    "title": _is_text,
    "description": _is_text,
    "problem_statement": _is_text,
    "problemStatement": _is_text,
    "success_metrics": is_text_list,
    "successMetrics": is_text_list,
    "in_scope": is_text_list,
    "inScope": is_text_list,
    "out_of_scope": is_text_list,
    "outOfScope": is_text_list,
    "technical_notes": _is_text,
    "technicalNotes": _is_text,
    "open_questions": is_text_list,
    "openQuestions": is_text_list,
}

FLAT_TOP_LEVEL: _Shape = {
    "project": _is_text,
    "project_name": _is_text,
    "projectName": _is_text,
    "feature_name": _is_text,
    "featureName": _is_text,
    "name": _is_text,
    "title": _is_text,
    "description": _is_text,
    "problem_statement": _is_text,
    "problemStatement": _is_text,
}

SNAKE_TOP_LEVEL: _Shape = {
    "type": lambda v: v == "feature",
    "project": _is_text,
    "branch_name": _is_text,
    "feature_name": _is_text,
    "problem_statement": _is_text,
    "success_metrics": is_text_list,
    "in_scope": is_text_list,
    "out_of_scope": is_text_list,
    "technical_notes": _is_text,
    "open_questions": is_text_list,
}

SNAKE_MARKER_FIELDS = (
    "branch_name",
    "feature_name",
    "problem_statement",
    "success_metrics",
    "in_scope",
    "out_of_scope",
    "user_stories",
    "technical_notes",
    "open_questions",
)

FUNCTIONAL_ITEM: _Shape = {
    "acceptance_criteria": is_text_list,
    "acceptanceCriteria": is_text_list,
    "priority": is_number,
}

LOOSE_ITEM: _Shape = {
    "title": _is_text,
    "description": _is_text,
    "acceptance_criteria": is_text_list,
    "acceptanceCriteria": is_text_list,
}

SNAKE_STORY: _Shape = {
    "title": _is_text,
    "description": _is_text,
    "acceptance_criteria": is_text_list,
    "priority": is_number,
}


def _matches(obj: dict, shape: _Shape) -> bool:
    return all(check(obj[key]) for key, check in shape.items() if key in obj)


def _items_match(items: Any, item_check: Callable[[Any], bool]) -> bool:
    return isinstance(items, list) and all(
        isinstance(item, dict) and item_check(item) for item in items
    )


def _functional_item(item: dict) -> bool:
    return (
        isinstance(item.get("id"), str)
        and bool(FR_ID_PATTERN.fullmatch(item["id"]))
        and isinstance(item.get("description"), str)
        and _matches(item, FUNCTIONAL_ITEM)
    )


def _loose_item(item: dict) -> bool:
    return isinstance(item.get("id"), str) and _matches(item, LOOSE_ITEM)


def _snake_story(item: dict) -> bool:
    return isinstance(item.get("id"), str) and _matches(item, SNAKE_STORY)


def is_standard(data: Any) -> bool:
    """Already satisfies the canonical schema."""
    return isinstance(data, dict) and is_valid(data, PRD_SCHEMA)


def is_functional_requirements(data: Any) -> bool:
    """`requirements.functional` list of FR-NNN items."""
    if not isinstance(data, dict):
        return False
    requirements = data.get("requirements")
    if not isinstance(requirements, dict):
        return False
    return (
        _items_match(requirements.get("functional"), _functional_item)
        and _matches(data, FUNCTIONAL_TOP_LEVEL)
    )


def is_flat_requirements(data: Any) -> bool:
    """Top-level `requirements` list of loosely shaped items with ids."""
    if not isinstance(data, dict):
        return False
    return _items_match(data.get("requirements"), _loose_item) and _matches(data, FLAT_TOP_LEVEL)


def is_snake_case(data: Any) -> bool:
    """Canonical fields spelled with underscores."""
    if not isinstance(data, dict):
        return False
    if not _matches(data, SNAKE_TOP_LEVEL):
        return False
    if "user_stories" in data and not _items_match(data["user_stories"], _snake_story):
        return False
    return any(is_present(data.get(key)) for key in SNAKE_MARKER_FIELDS)


def has_wrong_story_ids(data: Any) -> bool:
    """Canonical `userStories` list where some id is not US-NNN."""
    if not isinstance(data, dict):
        return False
    stories = data.get("userStories")
    if not _items_match(stories, _loose_item):
        return False
    return any(not is_valid_story_id(story["id"]) for story in stories)


# Priority order: first match wins
DETECTORS: tuple[tuple[Dialect, Callable[[Any], bool]], ...] = (
    (Dialect.STANDARD, is_standard),
    (Dialect.FUNCTIONAL_REQUIREMENTS, is_functional_requirements),
    (Dialect.FLAT_REQUIREMENTS, is_flat_requirements),
    (Dialect.SNAKE_CASE, is_snake_case),
    (Dialect.WRONG_IDS, has_wrong_story_ids),
)


def detect_dialect(data: Any) -> Dialect:
    """Classify data into exactly one dialect."""
    for dialect, predicate in DETECTORS:
        if predicate(data):
            return dialect
    return Dialect.UNKNOWN
