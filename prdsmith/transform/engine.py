"""
Transformation orchestrator.

transform() is the single entry point: detect the dialect, dispatch to its
transformer, and return a TransformResult. Every outcome is data; nothing
here raises for bad input.
"""

import logging
from typing import Any

from prdsmith.transform.detect import Dialect, detect_dialect
from prdsmith.transform.dialects import (
    StoryIdsExhausted,
    Transformer,
    transform_flat_requirements,
    transform_functional_requirements,
    transform_snake_case,
    transform_wrong_ids,
)
from prdsmith.transform.fields import is_present
from prdsmith.transform.models import TransformResult
from prdsmith.transform.schema import validate_prd

logger = logging.getLogger(__name__)

# Dialect -> transformer, in detection priority order
PIPELINE: tuple[tuple[Dialect, Transformer], ...] = (
    (Dialect.FUNCTIONAL_REQUIREMENTS, transform_functional_requirements),
    (Dialect.FLAT_REQUIREMENTS, transform_flat_requirements),
    (Dialect.SNAKE_CASE, transform_snake_case),
    (Dialect.WRONG_IDS, transform_wrong_ids),
)

TRANSFORMERS: dict[Dialect, Transformer] = dict(PIPELINE)

# Fallback for unknown input is the most permissive transformer
FALLBACK_TRANSFORMER: Transformer = transform_snake_case

STORY_COLLECTION_KEYS = ("userStories", "user_stories", "requirements")
NAME_KEYS = ("featureName", "feature_name", "name", "title")


def _transform_standard(raw: dict) -> TransformResult:
    # Detector and validator must agree; re-check rather than trust it
    validation = validate_prd(raw)
    if validation.ok:
        return TransformResult.ok(validation.document)
    return TransformResult.fail(validation.errors)


def _run(transformer: Transformer, raw: dict) -> TransformResult:
    try:
        return transformer(raw)
    except StoryIdsExhausted as e:
        return TransformResult.fail([str(e)])


def _transform_unknown(raw: dict) -> TransformResult:
    errors = []
    if not any(is_present(raw.get(k)) for k in STORY_COLLECTION_KEYS):
        errors.append("No user stories or requirements found")
    if not any(is_present(raw.get(k)) for k in NAME_KEYS):
        errors.append("No feature name or title found")

    if errors:
        return TransformResult.fail(["Unable to recognize PRD format", *errors])

    logger.info("Unrecognized PRD format, falling back to snake_case transform")
    return _run(FALLBACK_TRANSFORMER, raw)


def _check_output(result: TransformResult) -> TransformResult:
    """Never hand back a document the canonical schema rejects."""
    if not result.success:
        return result
    validation = validate_prd(result.document.to_dict())
    if validation.ok:
        return result
    logger.warning(f"Transformer produced an invalid document: {validation.errors}")
    return TransformResult.fail(validation.errors)


def transform(raw: Any) -> TransformResult:
    """Detect the dialect of raw and normalize it into a canonical PRD.

    Returns:
        TransformResult carrying either the document plus transformation
        notes and warnings, or a list of errors. Never both.
    """
    if not isinstance(raw, dict):
        return TransformResult.fail(["Input must be a valid JSON object"])

    dialect = detect_dialect(raw)
    logger.debug(f"Detected PRD dialect: {dialect.value}")

    if dialect == Dialect.STANDARD:
        result = _transform_standard(raw)
    elif dialect == Dialect.UNKNOWN:
        result = _check_output(_transform_unknown(raw))
    else:
        result = _check_output(_run(TRANSFORMERS[dialect], raw))

    if result.success:
        logger.info(
            f"Normalized {dialect.value} PRD: {len(result.transformations)} transformations, "
            f"{len(result.warnings)} warnings"
        )
    else:
        logger.info(f"Could not normalize {dialect.value} PRD: {len(result.errors)} errors")

    return result.with_dialect(dialect.value)
