# castbridge/cli/args.py
from __future__ import annotations

import argparse
from typing import Optional


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="castbridge")
    sub = parser.add_subparsers(dest="cmd", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--device", default=None, help="Friendly name of the cast device.")
    common.add_argument("--host", default=None, help="Known IP/host of the device (skips mDNS lookup).")
    common.add_argument("--config", default=None, help="YAML config file (CLI flags win).")
    common.add_argument("--trace", default=None, help="Record every bridge event as JSON lines here.")
    common.add_argument("--log-file", default=None, help="Also write the app log to this file.")
    common.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr.")

    sub.add_parser("serve", parents=[common], help="Serve JSON-lines requests on stdin/stdout.")
    sub.add_parser("status", parents=[common], help="Print session and player status.")

    return parser


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)
