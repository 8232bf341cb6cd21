# uiauto_appium/cli.py
"""
@file cli.py
@brief Command-line interface for uiauto-mobile.
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import List, Optional

from uiauto_core.actionlogger import ACTION_LOGGER
from uiauto_core.config import TimeConfig, available_presets
from uiauto_core.exceptions import ConfigError
from uiauto_core.locators import encode_selector
from uiauto_core.repository import Repository
from uiauto_core.timinglogger import TIMING_LOGGER

EXIT_OK = 0
EXIT_INVALID = 2


def _load_repo(path: str) -> Optional[Repository]:
    try:
        return Repository(path)
    except ConfigError as e:
        print(f"X Elements file is invalid: {e}", file=sys.stderr)
        return None


def _cmd_validate(args: argparse.Namespace) -> int:
    repo = _load_repo(args.elements)
    if repo is None:
        return EXIT_INVALID
    print(f"+ Elements file is valid: {args.elements}")
    print(f"  - Screens: {len(repo.screens)}")
    print(f"  - Targets: {len(repo.list_targets())}")
    return EXIT_OK


def _cmd_list(args: argparse.Namespace) -> int:
    repo = _load_repo(args.elements)
    if repo is None:
        return EXIT_INVALID
    try:
        names = repo.list_targets(args.screen)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_INVALID

    for name in names:
        screen = repo.target_screen(name) or "-"
        print(f"{name}  [screen: {screen}]")
        for i, strategy in enumerate(repo.target(name).strategies, start=1):
            print(f"  {i}. {strategy.kind.value:<16} {encode_selector(strategy)}")
    return EXIT_OK


def _cmd_presets(args: argparse.Namespace) -> int:
    if args.name:
        try:
            data = TimeConfig(args.name).to_dict()
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            return EXIT_INVALID
    else:
        data = available_presets()
    print(json.dumps(data, indent=2, sort_keys=True))
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    argv = argv if argv is not None else sys.argv[1:]
    ACTION_LOGGER.configure_from_env()
    TIMING_LOGGER.configure_from_env()

    p = argparse.ArgumentParser(
        prog="uiauto-mobile",
        description="uiauto-mobile - resilient mobile UI automation",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    # -------------------------
    # validate
    # -------------------------
    valp = sub.add_parser("validate", help="Validate an elements.yaml object map")
    valp.add_argument("--elements", "-e", required=True, help="Path to elements.yaml file")

    # -------------------------
    # list
    # -------------------------
    listp = sub.add_parser("list", help="List targets and their ordered selectors")
    listp.add_argument("--elements", "-e", required=True, help="Path to elements.yaml file")
    listp.add_argument("--screen", default=None, help="Only targets on this screen")

    # -------------------------
    # presets
    # -------------------------
    prep = sub.add_parser("presets", help="Print timing presets as JSON")
    prep.add_argument("name", nargs="?", default=None, help="Print the full resolved values of one preset")

    args = p.parse_args(argv)

    if args.cmd == "validate":
        return _cmd_validate(args)
    if args.cmd == "list":
        return _cmd_list(args)
    return _cmd_presets(args)


if __name__ == "__main__":
    sys.exit(main())
