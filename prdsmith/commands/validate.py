"""
prd detect / validate / render - Normalize PRD files.
"""

import json
from pathlib import Path

from prdsmith.lib.agents_config import load_agents_config
from prdsmith.lib.config import Settings
from prdsmith.lib.markdown import format_markdown_prd
from prdsmith.pm.store import save_prd
from prdsmith.pm.validation import PRDInputError, load_prd_input, validate_prd_content
from prdsmith.transform import detect_dialect, transform


def _load(path_arg: str):
    try:
        return load_prd_input(Path(path_arg))
    except PRDInputError as e:
        print(f"ERROR: {e}")
        return None


def cmd_detect(args, settings: Settings) -> int:
    """Print which dialect a PRD file is in."""
    raw = _load(args.file)
    if raw is None:
        return 2
    print(detect_dialect(raw).value)
    return 0


def cmd_validate(args, settings: Settings) -> int:
    """Normalize a PRD file and report what changed.

    Exit code 0 when the PRD is valid (after normalization), 1 otherwise.
    """
    raw = _load(args.file)
    if raw is None:
        return 2

    assess = settings.assess_quality and not args.no_assess
    envelope = validate_prd_content(
        raw,
        assess=assess,
        config=load_agents_config(settings.config_dir),
        timeout=settings.assess_timeout,
    )

    if args.json:
        print(json.dumps(envelope.to_dict(), indent=2))
    else:
        _print_envelope(envelope)

    if args.save and envelope.transformed is not None:
        path = save_prd(settings.output_dir, envelope.transformed)
        if not args.json:
            print()
            print(f"Saved to: {path}")

    return 0 if envelope.valid else 1


def _print_envelope(envelope) -> None:
    print(f"Format: {envelope.dialect}")

    if envelope.transformed is None:
        print("Result: could not normalize")
        print()
        print("Errors:")
        for error in envelope.schema_errors:
            print(f"  - {error}")
        return

    document = envelope.transformed
    print(f"Result: {'valid' if envelope.valid else 'needs work'}")
    print(f"Feature: {document.feature_name} ({len(document.user_stories)} stories)")
    print()

    if envelope.transformations:
        print("Transformations:")
        for note in envelope.transformations:
            print(f"  - {note}")
        print()

    if envelope.schema_errors:
        print("Warnings:")
        for warning in envelope.schema_errors:
            print(f"  ! {warning}")
        print()

    assessment = envelope.quality_assessment
    if assessment:
        print(f"Quality: {assessment.score} (recommendation: {assessment.recommendation})")
        for issue in assessment.issues:
            print(f"  [{issue.severity}] {issue.field}: {issue.issue}")


def cmd_render(args, settings: Settings) -> int:
    """Normalize a PRD file and print it as markdown."""
    raw = _load(args.file)
    if raw is None:
        return 2

    result = transform(raw)
    if not result.success:
        print("ERROR: Could not normalize PRD:")
        for error in result.errors:
            print(f"  - {error}")
        return 1

    print(format_markdown_prd(result.document))
    return 0
