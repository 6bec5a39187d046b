"""
Data models for the transformation engine.

PRDDocument is the canonical shape every dialect is normalized into.
Instances are frozen; transformers always build a fresh one.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class UserStory:
    """One vertical slice of functionality with acceptance criteria."""
    id: str                                    # US-001
    title: str
    description: str
    acceptance_criteria: tuple[str, ...]
    priority: int
    passes: bool = False                       # Not yet verified
    notes: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "acceptanceCriteria": list(self.acceptance_criteria),
            "priority": self.priority,
            "passes": self.passes,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "UserStory":
        return cls(
            id=data["id"],
            title=data["title"],
            description=data["description"],
            acceptance_criteria=tuple(data["acceptanceCriteria"]),
            priority=int(data["priority"]),
            passes=data.get("passes", False),
            notes=data.get("notes", ""),
        )


@dataclass(frozen=True)
class ParkedFeature:
    """An idea deliberately deferred out of the current PRD."""
    name: str
    description: str

    def to_dict(self) -> dict:
        return {"name": self.name, "description": self.description}


@dataclass(frozen=True)
class PRDDocument:
    """A canonical Product Requirements Document.

    Field names are snake_case here; to_dict()/from_dict() map to the
    camelCase wire form used in prd.json files.
    """
    project: str
    branch_name: str
    feature_name: str
    description: str
    problem_statement: str
    success_metrics: tuple[str, ...]
    in_scope: tuple[str, ...]
    out_of_scope: tuple[str, ...]
    user_stories: tuple[UserStory, ...]
    technical_notes: Optional[str] = None
    open_questions: Optional[tuple[str, ...]] = None
    context_docs: Optional[tuple[str, ...]] = None
    parked_features: Optional[tuple[ParkedFeature, ...]] = None
    kind: str = "feature"

    def to_dict(self) -> dict:
        """Wire form. Optional fields are omitted when unset."""
        data = {
            "type": self.kind,
            "project": self.project,
            "branchName": self.branch_name,
            "featureName": self.feature_name,
            "description": self.description,
            "problemStatement": self.problem_statement,
            "successMetrics": list(self.success_metrics),
            "inScope": list(self.in_scope),
            "outOfScope": list(self.out_of_scope),
            "userStories": [s.to_dict() for s in self.user_stories],
        }
        if self.technical_notes is not None:
            data["technicalNotes"] = self.technical_notes
        if self.open_questions is not None:
            data["openQuestions"] = list(self.open_questions)
        if self.context_docs is not None:
            data["contextDocs"] = list(self.context_docs)
        if self.parked_features is not None:
            data["parkedFeatures"] = [p.to_dict() for p in self.parked_features]
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "PRDDocument":
        """Build from a wire dict that already passed schema validation."""
        def optional_tuple(key: str) -> Optional[tuple]:
            return tuple(data[key]) if key in data else None

        parked = None
        if "parkedFeatures" in data:
            parked = tuple(
                ParkedFeature(name=p["name"], description=p["description"])
                for p in data["parkedFeatures"]
            )

        return cls(
            kind=data.get("type", "feature"),
            project=data["project"],
            branch_name=data["branchName"],
            feature_name=data["featureName"],
            description=data["description"],
            problem_statement=data["problemStatement"],
            success_metrics=tuple(data["successMetrics"]),
            in_scope=tuple(data["inScope"]),
            out_of_scope=tuple(data["outOfScope"]),
            user_stories=tuple(UserStory.from_dict(s) for s in data["userStories"]),
            technical_notes=data.get("technicalNotes"),
            open_questions=optional_tuple("openQuestions"),
            context_docs=optional_tuple("contextDocs"),
            parked_features=parked,
        )


@dataclass(frozen=True)
class TransformResult:
    """Outcome of normalizing one raw input.

    Exactly one of `document` / `errors` is populated. Use ok()/fail()
    rather than the constructor.
    """
    success: bool
    document: Optional[PRDDocument] = None
    transformations: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    errors: tuple[str, ...] = ()
    dialect: Optional[str] = None

    def __post_init__(self):
        if self.success and (self.document is None or self.errors):
            raise ValueError("Successful TransformResult needs a document and no errors")
        if not self.success and (self.document is not None or not self.errors):
            raise ValueError("Failed TransformResult needs errors and no document")

    @classmethod
    def ok(cls, document: PRDDocument, transformations=(), warnings=(), dialect: str = None) -> "TransformResult":
        return cls(
            success=True,
            document=document,
            transformations=tuple(transformations),
            warnings=tuple(warnings),
            dialect=dialect,
        )

    @classmethod
    def fail(cls, errors, dialect: str = None) -> "TransformResult":
        return cls(success=False, errors=tuple(errors), dialect=dialect)

    def with_dialect(self, dialect: str) -> "TransformResult":
        """Copy of this result tagged with the dialect that produced it."""
        return TransformResult(
            success=self.success,
            document=self.document,
            transformations=self.transformations,
            warnings=self.warnings,
            errors=self.errors,
            dialect=dialect,
        )
