"""
PRD validation service.

Boundary around the transformation engine: takes one untyped JSON value,
normalizes it, optionally asks the oracle for a quality assessment, and
returns the envelope consumed by the CLI (and by anything serving
"validate a PRD" requests).
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from prdsmith.lib.agents_config import AgentsConfig
from prdsmith.pm.assessment import QualityAssessment, assess_prd, default_assessment
from prdsmith.pm.claude_utils import extract_json_object
from prdsmith.transform import PRDDocument, transform

logger = logging.getLogger(__name__)


class PRDInputError(Exception):
    """A PRD file could not be read or decoded."""


@dataclass
class ValidationEnvelope:
    valid: bool = False
    transformed: Optional[PRDDocument] = None
    schema_errors: list[str] = field(default_factory=list)  # Errors, or warnings when transformed
    transformations: list[str] = field(default_factory=list)
    quality_assessment: Optional[QualityAssessment] = None
    dialect: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "transformed": self.transformed.to_dict() if self.transformed else None,
            "schemaErrors": list(self.schema_errors),
            "transformations": list(self.transformations),
            "qualityAssessment": self.quality_assessment.to_dict() if self.quality_assessment else None,
            "format": self.dialect,
        }


def validate_prd_content(
    raw: Any,
    assess: bool = True,
    config: AgentsConfig | None = None,
    timeout: int = 120,
) -> ValidationEnvelope:
    """Normalize raw PRD content and (optionally) grade it.

    Oracle trouble never fails the request: an unreachable oracle yields a
    default acceptable assessment carrying a warning, an unusable reply
    yields a default acceptable assessment with no issues.
    """
    result = transform(raw)
    envelope = ValidationEnvelope(dialect=result.dialect)

    if not result.success:
        envelope.schema_errors = list(result.errors) or ["Unknown transformation error"]
        return envelope

    envelope.transformed = result.document
    envelope.transformations = list(result.transformations)
    envelope.schema_errors = list(result.warnings)

    if not assess:
        envelope.valid = True
        return envelope

    assessment, reached = assess_prd(result.document, config=config, timeout=timeout)
    if assessment is None:
        assessment = default_assessment(oracle_failed=not reached)

    envelope.quality_assessment = assessment
    envelope.valid = assessment.acceptable
    logger.info(f"PRD assessed as {assessment.score} (recommendation: {assessment.recommendation})")
    return envelope


def load_prd_input(path: Path) -> Any:
    """Read PRD content from a .json file, or a JSON block inside markdown.

    Raises:
        PRDInputError: If the file is missing or holds no JSON
    """
    if not path.exists():
        raise PRDInputError(f"File not found: {path}")

    try:
        text = path.read_text()
    except OSError as e:
        raise PRDInputError(f"Could not read {path}: {e}") from None

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        embedded = extract_json_object(text)
        if embedded is not None:
            logger.debug(f"Using JSON object embedded in {path}")
            return embedded
        raise PRDInputError(f"Invalid JSON in {path}: {e}") from None
