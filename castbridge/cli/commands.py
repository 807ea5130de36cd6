# castbridge/cli/commands.py
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from castbridge.app.channel import JsonLineChannel
from castbridge.app.config import BridgeConfig
from castbridge.app.controller import CastBridgeController
from castbridge.core.errors import BridgeConfigError
from castbridge.core.recording.event_trace import EventTraceLogger
from castbridge.model.status import status_code
from castbridge.runtime.chromecast import ChromecastSessionProvider

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


# ---------------- Logging ----------------

def configure_logging(*, verbose: bool = False, log_path: Optional[str] = None) -> None:
    """
    Log to stderr (stdout carries the channel), plus an optional file (idempotent).
    Kept in CLI (presentation-layer concern).
    """
    root = logging.getLogger()
    level = logging.DEBUG if verbose else logging.INFO

    if not any(getattr(h, "_castbridge_stderr", False) for h in root.handlers):
        sh = logging.StreamHandler(sys.stderr)
        sh.setFormatter(logging.Formatter(LOG_FORMAT))
        sh._castbridge_stderr = True  # type: ignore[attr-defined]
        root.addHandler(sh)
    for h in root.handlers:
        if getattr(h, "_castbridge_stderr", False):
            h.setLevel(level)

    if log_path:
        configure_file_logging(Path(log_path))

    if root.level == logging.NOTSET or root.level > level:
        root.setLevel(level)


def configure_file_logging(app_log_path: Path) -> None:
    root = logging.getLogger()
    app_log_path.parent.mkdir(parents=True, exist_ok=True)
    target = str(app_log_path.resolve())

    for h in root.handlers:
        if isinstance(h, logging.FileHandler) and getattr(h, "baseFilename", None) == target:
            return

    fh = logging.FileHandler(app_log_path, encoding="utf-8", delay=True)
    fh.setLevel(logging.INFO)
    fh.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(fh)

    if root.level > logging.INFO:
        root.setLevel(logging.INFO)


# ---------------- Setup ----------------

def load_config(args: argparse.Namespace) -> BridgeConfig:
    cfg = BridgeConfig.load(args.config) if args.config else BridgeConfig()
    cfg = cfg.with_overrides(
        device_name=args.device,
        device_host=args.host,
        trace_path=args.trace,
        log_path=args.log_file,
    )
    if not cfg.device_name:
        raise BridgeConfigError(
            "No cast device selected.",
            hint="Pass --device <friendly name> or set device_name in the config file.",
        )
    return cfg


def open_provider(cfg: BridgeConfig) -> ChromecastSessionProvider:
    provider = ChromecastSessionProvider(
        cfg.device_name,
        known_host=cfg.device_host,
        discovery_timeout_s=cfg.discovery_timeout_s,
        connect_timeout_s=cfg.connect_timeout_s,
        logger=logging.getLogger("castbridge.chromecast"),
    )
    provider.connect()
    return provider


# ---------------- Status printing ----------------

def print_status(controller: CastBridgeController) -> None:
    session = controller.provider.current_session
    client = session.remote_media_client if session is not None else None
    snapshot = client.media_status if client is not None else None

    print(f"Device:    {controller.config.device_name} connected={controller.dispatch('isConnected')}")
    print(f"Player:    status={int(status_code(snapshot))} playing={controller.dispatch('isPlaying')}")
    print(f"Volume:    {controller.dispatch('getVolume'):.2f} rate={controller.dispatch('getPlaybackRate')}")

    info = controller.dispatch("getMediaInfo")
    if not info:
        print("Media:     (none)")
        return

    print(f"Media:     {info.get('title') or '-'} [{info.get('contentType') or '-'}] {info.get('streamType')}")
    print(f"URL:       {info.get('url')}")
    print(f"Position:  {controller.dispatch('position')} / {controller.dispatch('duration')} ms")
    print(f"Audio:     {info.get('audioTracks')} active={controller.dispatch('getAudioTrack') or '-'}")
    print(f"Subtitles: {info.get('subtitleTracks')} active={controller.dispatch('getSubtitleTrack') or '-'}")


# ---------------- Commands ----------------

def cmd_status(cfg: BridgeConfig) -> int:
    provider = open_provider(cfg)
    try:
        with CastBridgeController(cfg, provider=provider) as controller:
            print_status(controller)
        return 0
    finally:
        provider.close()


def cmd_serve(cfg: BridgeConfig) -> int:
    log = logging.getLogger("castbridge")
    provider = open_provider(cfg)
    try:
        with CastBridgeController(cfg, provider=provider, logger=log) as controller:
            if cfg.trace_path:
                controller.add_sink(
                    EventTraceLogger(logger=logging.getLogger("castbridge.trace"), file_path=Path(cfg.trace_path))
                )

            channel = JsonLineChannel(controller.dispatcher, reader=sys.stdin, writer=sys.stdout, logger=log)
            controller.add_sink(channel)

            log.info("SERVE_START device=%s commands=%s", cfg.device_name, controller.dispatcher.commands)
            try:
                channel.serve()
            except KeyboardInterrupt:
                log.info("SERVE_INTERRUPTED")
        return 0
    finally:
        provider.close()
