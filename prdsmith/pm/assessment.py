"""
Quality assessment of normalized PRDs.

The oracle grades a PRD and answers with JSON. Its reply is untrusted:
it is checked against schemas/assessment.schema.json and discarded if it
does not fit.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Optional

from prdsmith.lib.agents_config import AgentsConfig
from prdsmith.lib.prompts import render_prompt
from prdsmith.lib.validate import collect_errors
from prdsmith.pm.claude_utils import extract_json_object, run_claude
from prdsmith.transform.models import PRDDocument

logger = logging.getLogger(__name__)

ASSESSMENT_SCHEMA = "assessment"
SCORES = ("good", "acceptable", "needs-improvement")
RECOMMENDATIONS = ("output", "interview")
SEVERITIES = ("error", "warning", "suggestion")

# Summary limits
SUMMARY_STORIES = 3
SUMMARY_PROBLEM_CHARS = 200
SUMMARY_SCOPE_ITEMS = 3


@dataclass(frozen=True)
class QualityIssue:
    field: str
    issue: str
    severity: str  # error, warning, suggestion

    def to_dict(self) -> dict:
        return {"field": self.field, "issue": self.issue, "severity": self.severity}


@dataclass(frozen=True)
class QualityAssessment:
    score: str  # good, acceptable, needs-improvement
    recommendation: str  # output, interview
    issues: tuple[QualityIssue, ...] = field(default_factory=tuple)

    @property
    def acceptable(self) -> bool:
        """Whether the PRD can be output as-is."""
        return self.score != "needs-improvement" or self.recommendation == "output"

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "issues": [i.to_dict() for i in self.issues],
            "recommendation": self.recommendation,
        }


def parse_assessment(text: str) -> Optional[QualityAssessment]:
    """Parse an oracle reply into a QualityAssessment, or None if it doesn't fit."""
    data = extract_json_object(text or "")
    if data is None:
        logger.warning("Quality assessment reply contained no JSON object")
        return None

    errors = collect_errors(data, ASSESSMENT_SCHEMA)
    if errors:
        logger.warning(f"Quality assessment reply rejected: {errors}")
        return None

    return QualityAssessment(
        score=data["score"],
        recommendation=data["recommendation"],
        issues=tuple(
            QualityIssue(field=i["field"], issue=i["issue"], severity=i["severity"])
            for i in data["issues"]
        ),
    )


def default_assessment(oracle_failed: bool = False) -> QualityAssessment:
    """Stand-in used when no usable assessment is available."""
    issues = ()
    if oracle_failed:
        issues = (QualityIssue(
            field="general",
            issue="Could not perform automated quality assessment",
            severity="warning",
        ),)
    return QualityAssessment(score="acceptable", recommendation="output", issues=issues)


def summarize_prd(document: PRDDocument) -> str:
    """Short plain-text overview of a PRD."""
    stories = document.user_stories
    problem = document.problem_statement
    if len(problem) > SUMMARY_PROBLEM_CHARS:
        problem = problem[:SUMMARY_PROBLEM_CHARS] + "..."

    lines = [
        f"Feature: {document.feature_name}",
        f"Project: {document.project}",
        f"Problem: {problem}",
        "",
        "Success Metrics:",
    ]
    lines.extend(f"  - {m}" for m in document.success_metrics)
    lines.extend([
        "",
        f"In Scope: {', '.join(document.in_scope[:SUMMARY_SCOPE_ITEMS]) or '(none)'}",
        f"Out of Scope: {', '.join(document.out_of_scope[:SUMMARY_SCOPE_ITEMS]) or '(none)'}",
        "",
        f"User Stories ({len(stories)}):",
    ])
    lines.extend(f"  - {s.id}: {s.title}" for s in stories[:SUMMARY_STORIES])
    if len(stories) > SUMMARY_STORIES:
        lines.append(f"  ... and {len(stories) - SUMMARY_STORIES} more stories")
    return "\n".join(lines)


def assess_prd(
    document: PRDDocument,
    config: AgentsConfig | None = None,
    timeout: int = 120,
) -> tuple[Optional[QualityAssessment], bool]:
    """Ask the oracle to grade a PRD.

    Returns:
        (assessment, reached) - reached is False when the oracle could not
        be run at all; assessment is None when it answered with something
        unusable.
    """
    prompt = render_prompt(
        "quality_assessment",
        prd_json=json.dumps(document.to_dict(), indent=2),
    )
    success, response = run_claude(prompt, stage="prd_assess", config=config, timeout=timeout)
    if not success:
        logger.warning(f"Quality assessment unavailable: {response}")
        return None, False
    return parse_assessment(response), True
