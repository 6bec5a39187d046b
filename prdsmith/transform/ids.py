"""
Identifier and slug helpers shared by every dialect transformer.
"""

import re

STORY_ID_PATTERN = re.compile(r'US-[0-9]{3}')
MAX_STORY_NUMBER = 999
MAX_BRANCH_SLUG_LEN = 50
DESCRIPTION_PROBLEM_CHARS = 100

_DIGITS_RE = re.compile(r'[0-9]+')


def is_valid_story_id(value) -> bool:
    """Check if value is a canonical US-NNN story id."""
    return isinstance(value, str) and bool(STORY_ID_PATTERN.fullmatch(value))


def format_story_id(number: int) -> str:
    return f"US-{number:03d}"


def story_number(story_id: str) -> int:
    """Numeric part of a canonical story id."""
    return int(story_id[3:])


def normalize_id(raw_id, index: int) -> str:
    """Coerce any requirement/story id into US-NNN.

    - US-NNN is returned unchanged
    - otherwise the first run of digits is re-rendered (FR-7 -> US-007)
    - with no usable digits, the position is used (index 0 -> US-001)

    Numbers above 999 cannot be rendered in three digits and fall back
    to the position as well. Positions past 999 are clamped to US-999;
    callers that need unique ids disambiguate afterwards.
    """
    text = "" if raw_id is None else str(raw_id)

    if STORY_ID_PATTERN.fullmatch(text):
        return text

    match = _DIGITS_RE.search(text)
    if match:
        number = int(match.group(0))
        if number <= MAX_STORY_NUMBER:
            return format_story_id(number)

    return format_story_id(min(index + 1, MAX_STORY_NUMBER))


def generate_branch_name(feature_name: str) -> str:
    """Generate a feature/<slug> branch name from a feature name."""
    slug = feature_name.lower()
    slug = re.sub(r'[^a-z0-9\s-]', '', slug)
    slug = re.sub(r'\s+', '-', slug)
    slug = re.sub(r'-+', '-', slug)
    slug = slug[:MAX_BRANCH_SLUG_LEN]
    return f"feature/{slug}"


def derive_description(feature_name: str, problem_statement: str) -> str:
    """Fallback one-line description: '<feature> - <problem prefix>'."""
    return f"{feature_name} - {problem_statement[:DESCRIPTION_PROBLEM_CHARS]}"


def kebab_case(text: str) -> str:
    """Lowercase, non-alphanumeric runs collapsed to single hyphens."""
    return re.sub(r'[^a-z0-9]+', '-', text.lower()).strip('-')
