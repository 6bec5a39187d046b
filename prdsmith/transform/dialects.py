"""
Dialect transformers.

One function per recognized malformed dialect. Each maps a raw object into
a canonical PRDDocument, recording every rename, id rewrite and coercion as
a transformation note and every placeholder as a warning.
"""

import logging
from typing import Any, Callable, Optional

from prdsmith.transform import fields
from prdsmith.transform.fields import FieldReader, is_number, non_text_count, pick_list, pick_text
from prdsmith.transform.ids import (
    MAX_STORY_NUMBER,
    derive_description,
    format_story_id,
    generate_branch_name,
    normalize_id,
    story_number,
)
from prdsmith.transform.models import ParkedFeature, PRDDocument, TransformResult, UserStory

logger = logging.getLogger(__name__)

DEFAULT_FEATURE_NAME = "Untitled Feature"
DEFAULT_PROJECT = "Project"
NEEDS_PROBLEM_STATEMENT = "[Needs problem statement]"
NEEDS_SUCCESS_METRICS = "[Needs success metrics]"
NEEDS_ACCEPTANCE_CRITERIA = "[Needs acceptance criteria]"
NEEDS_DESCRIPTION = "[Needs description]"
NEEDS_USER_STORY = "[Needs user story]"

# Item keys build_stories reads; STATUS_KEYS only for wrong-ids input
STORY_KEYS = ("id", "title", "description", "priority", *fields.ACCEPTANCE_CRITERIA)
STATUS_KEYS = ("passes", "notes")


class StoryIdsExhausted(ValueError):
    """More stories than there are US-NNN ids to give them."""


def _is_priority(value: Any) -> bool:
    return is_number(value) and value >= 1 and float(value).is_integer()


def _priority(value: Any, index: int) -> int:
    """Positive integer priority, else the item's 1-based position."""
    return int(value) if _is_priority(value) else index + 1


def _free_number(reserved: set[str], start: int) -> Optional[int]:
    """Lowest unused number from start up to 999, then from 1."""
    for number in (*range(start, MAX_STORY_NUMBER + 1), *range(1, start)):
        if format_story_id(number) not in reserved:
            return number
    return None


def _resolve_ids(items: list[dict], positions: list[int]) -> list[tuple[Any, str, Optional[str]]]:
    """Normalize ids and disambiguate collisions.

    Returns (original, final, collided_with) per item. When two items
    reduce to the same US-NNN, later ones get the next unused number
    above the highest id in the batch, or the lowest unused one once
    that passes 999.

    Raises:
        StoryIdsExhausted: every id from US-001 to US-999 is taken
    """
    normalized = [normalize_id(item.get("id"), i) for item, i in zip(items, positions)]
    reserved = set(normalized)
    next_free = max(story_number(n) for n in normalized) + 1 if normalized else 1

    resolved = []
    seen: set[str] = set()
    for item, story_id in zip(items, normalized):
        collided_with = None
        if story_id in seen:
            collided_with = story_id
            number = _free_number(reserved, min(max(next_free, 1), MAX_STORY_NUMBER))
            if number is None:
                raise StoryIdsExhausted(
                    f"Cannot assign a unique id to {len(items)} stories (US-001 to US-{MAX_STORY_NUMBER} all used)"
                )
            next_free = number + 1
            story_id = format_story_id(number)
            reserved.add(story_id)
        seen.add(story_id)
        resolved.append((item.get("id"), story_id, collided_with))
    return resolved


def _account_for_item(
    item: dict,
    story_id: str,
    index: int,
    transformations: list[str],
    keep_status: bool,
) -> None:
    """Note every item value that does not reach the story unchanged."""
    for key in ("title", "description"):
        if key in item and item[key] is not None and not isinstance(item[key], str):
            transformations.append(f"Story {story_id}: dropped non-text {key}: {item[key]!r}")

    for key in fields.ACCEPTANCE_CRITERIA:
        dropped = non_text_count(item.get(key))
        if dropped:
            transformations.append(f"Story {story_id}: dropped {dropped} non-text entries from {key}")

    priority = item.get("priority")
    if priority is not None and not _is_priority(priority):
        transformations.append(f"Story {story_id}: replaced priority {priority!r} with {index + 1}")

    if keep_status:
        if "passes" in item and not isinstance(item["passes"], bool):
            transformations.append(f"Story {story_id}: replaced passes {item['passes']!r} with False")
        if "notes" in item and not isinstance(item["notes"], str):
            transformations.append(f"Story {story_id}: dropped non-text notes: {item['notes']!r}")

    known = STORY_KEYS + STATUS_KEYS if keep_status else STORY_KEYS
    for key in item:
        if key not in known:
            transformations.append(f"Story {story_id}: dropped unrecognized field: {key}")


def build_stories(
    items: list,
    transformations: list[str],
    warnings: list[str],
    title_prefix: str,
    keep_status: bool = False,
) -> list[UserStory]:
    """Map raw requirement/story items into UserStory records.

    Raises:
        StoryIdsExhausted: too many items for unique US-NNN ids
    """
    dict_items = []
    positions = []
    for i, item in enumerate(items):
        if isinstance(item, dict):
            dict_items.append(item)
            positions.append(i)
        else:
            transformations.append(f"Skipped non-object item at index {i}")

    stories = []
    resolved = _resolve_ids(dict_items, positions)
    for item, index, (original, story_id, collided_with) in zip(dict_items, positions, resolved):
        label = original if original not in (None, "") else "(missing)"
        if collided_with:
            transformations.append(f"ID collision: {label} -> {story_id} ({collided_with} already used)")
        elif original != story_id:
            transformations.append(f"ID: {label} -> {story_id}")

        title, _ = pick_text(item, "title", "description")
        if not title:
            title = f"{title_prefix} {story_id}"

        description, _ = pick_text(item, "description", "title")
        if not description:
            description = NEEDS_DESCRIPTION
            warnings.append(f"Story {story_id} has no description")

        criteria, criteria_key = pick_list(item, *fields.ACCEPTANCE_CRITERIA)
        if criteria_key and criteria_key != "acceptanceCriteria":
            transformations.append(f"Story {story_id}: {criteria_key} -> acceptanceCriteria")
        if not criteria:
            criteria = [NEEDS_ACCEPTANCE_CRITERIA]
            warnings.append(f"Story {story_id} has no acceptance criteria")

        passes = False
        notes = ""
        if keep_status:
            passes = item["passes"] if isinstance(item.get("passes"), bool) else False
            notes = item["notes"] if isinstance(item.get("notes"), str) else ""

        _account_for_item(item, story_id, index, transformations, keep_status)

        stories.append(UserStory(
            id=story_id,
            title=title,
            description=description,
            acceptance_criteria=tuple(criteria),
            priority=_priority(item.get("priority"), index),
            passes=passes,
            notes=notes,
        ))

    return stories


def _parked_features(reader: FieldReader, transformations: list[str]) -> Optional[tuple[ParkedFeature, ...]]:
    for key in fields.PARKED_FEATURES:
        value = reader.raw(key)
        if not isinstance(value, list):
            continue
        if key != "parkedFeatures":
            transformations.append(f"Field: {key} -> parkedFeatures")
        parked = []
        for i, entry in enumerate(value):
            if (
                isinstance(entry, dict)
                and isinstance(entry.get("name"), str)
                and isinstance(entry.get("description"), str)
            ):
                parked.append(ParkedFeature(name=entry["name"], description=entry["description"]))
            else:
                transformations.append(f"Dropped malformed parked feature at index {i}")
        return tuple(parked) or None
    return None


def assemble_document(
    reader: FieldReader,
    stories: list[UserStory],
    transformations: list[str],
    warnings: list[str],
) -> PRDDocument:
    """Read the top-level fields and build the canonical document.

    Rename notes collected by the reader are appended after any notes the
    caller already recorded.
    """
    kind = reader.raw("type")
    if kind is not None and kind != "feature":
        transformations.append(f"Replaced type {kind!r} with 'feature'")

    feature_name = reader.text(fields.FEATURE_NAME)
    if not feature_name:
        feature_name = DEFAULT_FEATURE_NAME
        warnings.append("No feature name defined")

    project = reader.text(fields.PROJECT)
    if not project:
        project = DEFAULT_PROJECT
        warnings.append("No project name defined")

    problem_statement = reader.text(fields.PROBLEM_STATEMENT)
    if not problem_statement:
        problem_statement = NEEDS_PROBLEM_STATEMENT
        warnings.append("No problem statement defined")

    branch_name = reader.text(fields.BRANCH_NAME)
    if not branch_name:
        branch_name = generate_branch_name(feature_name)
        transformations.append(f"Derived branchName: {branch_name}")

    description = reader.text(fields.DESCRIPTION)
    if not description:
        description = derive_description(feature_name, problem_statement)
        transformations.append("Derived description from featureName and problemStatement")

    success_metrics = reader.text_list(fields.SUCCESS_METRICS)
    if not success_metrics:
        success_metrics = [NEEDS_SUCCESS_METRICS]
        warnings.append("No success metrics defined")

    in_scope = reader.text_list(fields.IN_SCOPE)
    out_of_scope = reader.text_list(fields.OUT_OF_SCOPE)
    technical_notes = reader.text(fields.TECHNICAL_NOTES)
    open_questions = reader.text_list(fields.OPEN_QUESTIONS)
    context_docs = reader.text_list(fields.CONTEXT_DOCS)
    parked = _parked_features(reader, transformations)

    transformations.extend(reader.notes)
    for key in reader.unconsumed():
        transformations.append(f"Dropped unrecognized field: {key}")

    return PRDDocument(
        project=project,
        branch_name=branch_name,
        feature_name=feature_name,
        description=description,
        problem_statement=problem_statement,
        success_metrics=tuple(success_metrics),
        in_scope=tuple(in_scope),
        out_of_scope=tuple(out_of_scope),
        user_stories=tuple(stories),
        technical_notes=technical_notes or None,
        open_questions=tuple(open_questions) or None,
        context_docs=tuple(context_docs) or None,
        parked_features=parked,
    )


def _finish(document: PRDDocument, transformations: list[str], warnings: list[str]) -> TransformResult:
    logger.debug(
        f"Built {len(document.user_stories)} stories with "
        f"{len(transformations)} notes, {len(warnings)} warnings"
    )
    return TransformResult.ok(document, transformations, warnings)


def transform_functional_requirements(raw: dict) -> TransformResult:
    """requirements.functional[] with FR-NNN ids -> canonical PRD."""
    transformations: list[str] = []
    warnings: list[str] = []
    reader = FieldReader(raw)

    requirements = reader.raw("requirements") or {}
    items = requirements.get("functional") or []
    if not items:
        return TransformResult.fail(["No functional requirements found"])

    transformations.append(f"Converted {len(items)} functional requirements to user stories")
    for key in requirements:
        if key != "functional":
            transformations.append(f"Dropped unrecognized field: requirements.{key}")

    stories = build_stories(items, transformations, warnings, title_prefix="Requirement")
    document = assemble_document(reader, stories, transformations, warnings)
    return _finish(document, transformations, warnings)


def transform_flat_requirements(raw: dict) -> TransformResult:
    """Top-level requirements[] -> canonical PRD."""
    transformations: list[str] = []
    warnings: list[str] = []
    reader = FieldReader(raw)

    items = reader.raw("requirements")
    if not items:
        return TransformResult.fail(["No requirements found"])

    transformations.append(f"Converted {len(items)} requirements to user stories")
    stories = build_stories(items, transformations, warnings, title_prefix="Requirement")
    document = assemble_document(reader, stories, transformations, warnings)
    return _finish(document, transformations, warnings)


def placeholder_story() -> UserStory:
    return UserStory(
        id="US-001",
        title=NEEDS_USER_STORY,
        description=NEEDS_DESCRIPTION,
        acceptance_criteria=(NEEDS_ACCEPTANCE_CRITERIA,),
        priority=1,
    )


def transform_snake_case(raw: dict) -> TransformResult:
    """snake_case field names -> canonical PRD.

    Also the last-resort transformer for unrecognized input, so every
    lookup here is alias-tolerant.
    """
    transformations: list[str] = ["Converted snake_case field names to camelCase"]
    warnings: list[str] = []
    reader = FieldReader(raw)

    items: list = []
    for key in ("user_stories", "userStories"):
        value = reader.raw(key)
        if isinstance(value, list) and not items:
            items = value
            if key != "userStories":
                transformations.append(f"Field: {key} -> userStories")

    stories = build_stories(items, transformations, warnings, title_prefix="Story")
    if not stories:
        warnings.append("No user stories found")
        stories = [placeholder_story()]

    document = assemble_document(reader, stories, transformations, warnings)
    return _finish(document, transformations, warnings)


def transform_wrong_ids(raw: dict) -> TransformResult:
    """Canonical userStories with non US-NNN ids -> canonical PRD."""
    transformations: list[str] = []
    warnings: list[str] = []
    reader = FieldReader(raw)

    items = reader.raw("userStories") or []
    stories = build_stories(items, transformations, warnings, title_prefix="Story", keep_status=True)
    document = assemble_document(reader, stories, transformations, warnings)
    return _finish(document, transformations, warnings)


Transformer = Callable[[dict], TransformResult]
