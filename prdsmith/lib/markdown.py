"""
Human-readable markdown rendering of a canonical PRD.
"""

from prdsmith.transform.models import PRDDocument


def _bullets(items, prefix: str = "- ") -> list[str]:
    return [f"{prefix}{item}" for item in items]


def format_markdown_prd(document: PRDDocument) -> str:
    """Render a PRD as markdown."""
    lines = [
        f"# PRD: {document.feature_name}",
        "",
        f"**Project:** {document.project}",
        f"**Branch:** {document.branch_name}",
        "",
        "## Problem Statement",
        document.problem_statement,
        "",
        "## Success Metrics",
        *_bullets(document.success_metrics),
        "",
        "## Scope",
        "",
        "### In Scope",
        *_bullets(document.in_scope),
        "",
        "### Out of Scope",
        *_bullets(document.out_of_scope),
        "",
        "## User Stories",
        "",
    ]

    for story in document.user_stories:
        lines.extend([
            f"### {story.id}: {story.title}",
            story.description,
            "",
            "**Acceptance Criteria:**",
            *_bullets(story.acceptance_criteria, prefix="- [x] " if story.passes else "- [ ] "),
            "",
        ])
        if story.notes:
            lines.extend([f"_Notes: {story.notes}_", ""])

    if document.technical_notes:
        lines.extend([
            "## Technical Notes",
            document.technical_notes,
            "",
        ])

    if document.open_questions:
        lines.extend([
            "## Open Questions",
            *_bullets(document.open_questions),
            "",
        ])

    if document.parked_features:
        lines.append("## Parked Features")
        for parked in document.parked_features:
            lines.append(f"- **{parked.name}**: {parked.description}")
        lines.append("")

    if document.context_docs:
        lines.extend([
            "## Context Docs",
            *_bullets(document.context_docs),
            "",
        ])

    return "\n".join(lines)
