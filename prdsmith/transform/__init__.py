"""
PRD format detection and normalization.

Recognizes which known dialect an arbitrary PRD-like JSON document is in
and rewrites it into the canonical schema, reporting every correction.
"""

from prdsmith.transform.detect import Dialect, detect_dialect
from prdsmith.transform.engine import transform
from prdsmith.transform.ids import generate_branch_name, normalize_id
from prdsmith.transform.models import ParkedFeature, PRDDocument, TransformResult, UserStory
from prdsmith.transform.schema import SchemaResult, validate_prd

__all__ = [
    "Dialect",
    "detect_dialect",
    "transform",
    "generate_branch_name",
    "normalize_id",
    "ParkedFeature",
    "PRDDocument",
    "TransformResult",
    "UserStory",
    "SchemaResult",
    "validate_prd",
]
