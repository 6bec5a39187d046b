"""
Canonical PRD schema check.

validate_prd() never raises for bad input; it returns a SchemaResult with
either the parsed document or one message per violated field rule.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from prdsmith.lib.validate import collect_errors
from prdsmith.transform.models import PRDDocument

PRD_SCHEMA = "prd"


@dataclass(frozen=True)
class SchemaResult:
    ok: bool
    document: Optional[PRDDocument] = None
    errors: list[str] = field(default_factory=list)


def validate_prd(candidate: Any) -> SchemaResult:
    """Check candidate against the canonical PRD schema.

    Error messages name the field path and the rule, e.g.
    `userStories[2].id: must match US-NNN`.
    """
    errors = collect_errors(candidate, PRD_SCHEMA)
    if errors:
        return SchemaResult(ok=False, errors=errors)
    return SchemaResult(ok=True, document=PRDDocument.from_dict(candidate))
