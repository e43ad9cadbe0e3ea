# doorpanel/cli/args.py
from __future__ import annotations

import argparse
from typing import Optional

from doorpanel.app.config import DEFAULT_ENDPOINT

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="doorpanel",
        description="Emulate the GT8-100D/2S-M door panel on a running Zusi 3 simulator.",
    )
    parser.add_argument(
        "endpoint",
        nargs="?",
        default=DEFAULT_ENDPOINT,
        help=f"Simulator host:port or pyserial URL (default: {DEFAULT_ENDPOINT}).",
    )
    parser.add_argument("--layout", default=None, help="Panel layout YAML (default: built-in GT8 layout).")
    parser.add_argument("--log-level", default="INFO", choices=LOG_LEVELS, type=str.upper)
    parser.add_argument("--log-file", default=None, help="Also write the log to this file.")
    return parser


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)
