"""Command-line options — argparse front end over SaveServiceSettings."""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from varsave.app.settings import SaveServiceSettings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="varsave",
        description="Save all dirty registry variables to a configuration file when the trigger variable changes.",
    )
    parser.add_argument("-f", "--file", dest="output_file", type=Path, help="output file name")
    parser.add_argument("-t", "--trigger", dest="trigger_variable", help="trigger variable name")
    parser.add_argument("-v", "--verbose", action="store_true", default=None, help="verbose output")
    parser.add_argument("--variables", dest="variables_file", type=Path, help="YAML variable definitions file")
    parser.add_argument("--journal", dest="journal_file", type=Path, help="append save events to this file")
    parser.add_argument("--console", action="store_true", default=None, help="read name=value lines from stdin")
    parser.add_argument(
        "--no-restore",
        dest="restore_on_start",
        action="store_false",
        default=None,
        help="do not re-apply settings from an existing output file",
    )
    parser.add_argument(
        "--no-fsync", dest="fsync", action="store_false", default=None, help="skip fsync before publishing"
    )
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def apply_overrides(settings: SaveServiceSettings, args: argparse.Namespace) -> SaveServiceSettings:
    """Return ``settings`` re-validated with every flag given on the command line applied."""
    updates: dict[str, Any] = {key: value for key, value in vars(args).items() if value is not None}
    if not updates:
        return settings
    return type(settings).model_validate({**settings.model_dump(), **updates})
