# castbridge/cli/main.py
from __future__ import annotations

from typing import Optional

from castbridge.core.errors import CastBridgeError

from castbridge.cli.args import parse_args
from castbridge.cli.commands import cmd_serve, cmd_status, configure_logging, load_config


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(verbose=args.verbose, log_path=args.log_file)

    try:
        cfg = load_config(args)
        if cfg.log_path and cfg.log_path != args.log_file:
            configure_logging(verbose=args.verbose, log_path=cfg.log_path)

        if args.cmd == "serve":
            return cmd_serve(cfg)
        if args.cmd == "status":
            return cmd_status(cfg)

        return 2
    except CastBridgeError as e:
        print(f"ERROR: {e.message}")
        if e.hint:
            print(f"Hint: {e.hint}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
