#!/usr/bin/env python3
"""prdsmith CLI entrypoint."""

import sys
import logging
import argparse
from pathlib import Path

from prdsmith.lib.config import load_settings
from prdsmith.commands import chat as cmd_chat_module
from prdsmith.commands import library as cmd_library_module
from prdsmith.commands import validate as cmd_validate_module


def get_settings(args):
    """Load settings from --config-dir (default: current directory) and set up logging."""
    config_dir = Path(args.config_dir) if args.config_dir else Path.cwd()
    settings = load_settings(config_dir)

    level = logging.DEBUG if args.verbose else getattr(logging, settings.log_level)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    return settings


def cmd_detect(args):
    return cmd_validate_module.cmd_detect(args, get_settings(args))


def cmd_validate(args):
    return cmd_validate_module.cmd_validate(args, get_settings(args))


def cmd_render(args):
    return cmd_validate_module.cmd_render(args, get_settings(args))


def cmd_chat(args):
    return cmd_chat_module.cmd_chat(args, get_settings(args))


def cmd_list(args):
    return cmd_library_module.cmd_list(args, get_settings(args))


def cmd_show(args):
    return cmd_library_module.cmd_show(args, get_settings(args))


def build_parser():
    parser = argparse.ArgumentParser(prog='prd', description='PRD normalization and interview tool')
    parser.add_argument('--config-dir', '-C', help='Directory holding prdsmith.env and agents.yaml')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')
    subparsers = parser.add_subparsers(dest='command', required=True)

    # prd detect
    p_detect = subparsers.add_parser('detect', help='Print the dialect of a PRD file')
    p_detect.add_argument('file', help='PRD file (JSON, or text containing a JSON object)')
    p_detect.set_defaults(func=cmd_detect)

    # prd validate
    p_validate = subparsers.add_parser('validate', help='Normalize a PRD file and report changes')
    p_validate.add_argument('file', help='PRD file (JSON, or text containing a JSON object)')
    p_validate.add_argument('--no-assess', action='store_true', help='Skip the oracle quality assessment')
    p_validate.add_argument('--json', action='store_true', help='Print the result envelope as JSON')
    p_validate.add_argument('--save', action='store_true', help='Store the normalized PRD')
    p_validate.set_defaults(func=cmd_validate)

    # prd render
    p_render = subparsers.add_parser('render', help='Normalize a PRD file and print it as markdown')
    p_render.add_argument('file', help='PRD file (JSON, or text containing a JSON object)')
    p_render.set_defaults(func=cmd_render)

    # prd chat
    p_chat = subparsers.add_parser('chat', help='Interview with the oracle to write a PRD')
    p_chat.add_argument('--session', '-s', help='Session name (continues it if it exists)')
    p_chat.add_argument('--resume', help='Parked feature file or session JSON to pick up from')
    p_chat.set_defaults(func=cmd_chat)

    # prd list
    p_list = subparsers.add_parser('list', help='List stored PRDs')
    p_list.set_defaults(func=cmd_list)

    # prd show
    p_show = subparsers.add_parser('show', help='Show a stored PRD')
    p_show.add_argument('name', help='PRD slug (see prd list)')
    p_show.add_argument('--summary', action='store_true', help='Show a one-screen summary')
    p_show.set_defaults(func=cmd_show)

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == '__main__':
    sys.exit(main())
