"""
prd list / show - Browse stored PRDs.
"""

from prdsmith.lib.config import Settings
from prdsmith.lib.markdown import format_markdown_prd
from prdsmith.pm.assessment import summarize_prd
from prdsmith.pm.store import list_prds, load_prd


def cmd_list(args, settings: Settings) -> int:
    prds = list_prds(settings.output_dir)
    if not prds:
        print("No PRDs stored yet. Use 'prd chat' or 'prd validate --save <file>'.")
        return 0

    for slug, document in prds:
        print(f"{slug:30} {document.feature_name} ({len(document.user_stories)} stories)")
    return 0


def cmd_show(args, settings: Settings) -> int:
    document = load_prd(settings.output_dir, args.name)
    if document is None:
        print(f"ERROR: PRD '{args.name}' not found.")
        return 1

    if args.summary:
        print(summarize_prd(document))
    else:
        print(format_markdown_prd(document))
    return 0
