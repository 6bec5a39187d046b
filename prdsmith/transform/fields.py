"""
Alias-based field lookup for untyped PRD input.

Each logical field has an ordered list of source names (camelCase first,
then snake_case, then generic fallbacks). The first present, non-empty,
correctly typed value wins.
"""

from dataclasses import dataclass, field
from typing import Any, Optional


def is_present(value: Any) -> bool:
    """Loose presence test used by detectors.

    Empty strings, None, False and zero count as absent. Containers count
    as present even when empty, since an empty list still declares the
    field.
    """
    if value is None or value is False:
        return False
    if isinstance(value, str):
        return value != ""
    if isinstance(value, (int, float)):
        return value != 0
    return True


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_text_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(v, str) for v in value)


def non_text_count(value: Any) -> int:
    """Number of elements pick_list would drop from a list value."""
    if not isinstance(value, list):
        return 0
    return sum(1 for v in value if not isinstance(v, str))


def pick_text(obj: dict, *keys: str) -> tuple[str, Optional[str]]:
    """Return (value, key) for the first non-empty string among keys."""
    for key in keys:
        value = obj.get(key)
        if isinstance(value, str) and value:
            return value, key
    return "", None


def pick_list(obj: dict, *keys: str) -> tuple[list[str], Optional[str]]:
    """Return (strings, key) for the first list among keys with text in it.

    Non-string elements are dropped.
    """
    for key in keys:
        value = obj.get(key)
        if isinstance(value, list):
            items = [v for v in value if isinstance(v, str)]
            if items:
                return items, key
    return [], None


# Top-level aliases, canonical name first
FEATURE_NAME = ("featureName", "feature_name", "name", "title")
PROJECT = ("project", "projectName", "project_name")
BRANCH_NAME = ("branchName", "branch_name")
DESCRIPTION = ("description",)
PROBLEM_STATEMENT = ("problemStatement", "problem_statement", "description")
SUCCESS_METRICS = ("successMetrics", "success_metrics")
IN_SCOPE = ("inScope", "in_scope")
OUT_OF_SCOPE = ("outOfScope", "out_of_scope")
TECHNICAL_NOTES = ("technicalNotes", "technical_notes")
OPEN_QUESTIONS = ("openQuestions", "open_questions")
CONTEXT_DOCS = ("contextDocs", "context_docs")
PARKED_FEATURES = ("parkedFeatures", "parked_features")

# Story/requirement item aliases
ACCEPTANCE_CRITERIA = ("acceptanceCriteria", "acceptance_criteria")


@dataclass
class FieldReader:
    """Reads aliased fields from one raw object and keeps the books.

    Tracks which source keys were consumed and records a rename note each
    time a value came from an alias instead of the canonical name.
    """
    obj: dict
    notes: list[str] = field(default_factory=list)
    consumed: set[str] = field(default_factory=set)

    def _mark(self, keys: tuple[str, ...], used: Optional[str], canonical: str) -> None:
        self.consumed.update(k for k in keys if k in self.obj)
        if used is not None and used != canonical:
            self.notes.append(f"Field: {used} -> {canonical}")

    def text(self, keys: tuple[str, ...], canonical: str = None) -> str:
        value, used = pick_text(self.obj, *keys)
        self._mark(keys, used, canonical or keys[0])
        return value

    def text_list(self, keys: tuple[str, ...], canonical: str = None) -> list[str]:
        value, used = pick_list(self.obj, *keys)
        self._mark(keys, used, canonical or keys[0])
        for key in keys:
            dropped = non_text_count(self.obj.get(key))
            if dropped:
                self.notes.append(f"Dropped {dropped} non-text entries from {key}")
        return value

    def raw(self, key: str) -> Any:
        """Fetch a value without alias handling and mark it consumed."""
        if key in self.obj:
            self.consumed.add(key)
        return self.obj.get(key)

    def unconsumed(self) -> list[str]:
        return [k for k in self.obj if k not in self.consumed]
