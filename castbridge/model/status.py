# castbridge/model/status.py
from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Mapping, Optional, Tuple

from pychromecast.controllers.media import (
    MEDIA_PLAYER_STATE_BUFFERING,
    MEDIA_PLAYER_STATE_IDLE,
    MEDIA_PLAYER_STATE_PAUSED,
    MEDIA_PLAYER_STATE_PLAYING,
    MEDIA_PLAYER_STATE_UNKNOWN,
)

IDLE_REASON_FINISHED = "FINISHED"

# Reported for media errors that carry no detailed error code.
MEDIA_ERROR_FALLBACK_CODE = 100


class PlayerStatusCode(IntEnum):
    BUFFERING = 0
    PLAYING = 1
    IDLE_FINISHED = 2
    PAUSED = 3
    OTHER = 4


_DIRECT_CODES = {
    MEDIA_PLAYER_STATE_BUFFERING: PlayerStatusCode.BUFFERING,
    MEDIA_PLAYER_STATE_PLAYING: PlayerStatusCode.PLAYING,
    MEDIA_PLAYER_STATE_PAUSED: PlayerStatusCode.PAUSED,
}


@dataclass(frozen=True)
class MediaStatusSnapshot:
    """
    Last known receiver media status, as reported by the remote media client.
    """
    player_state: str = MEDIA_PLAYER_STATE_UNKNOWN
    idle_reason: Optional[str] = None
    stream_position_ms: int = 0
    playback_rate: float = 1.0
    active_track_ids: Tuple[int, ...] = ()
    media_info: Optional[Mapping] = None

    @property
    def is_playing(self) -> bool:
        return self.player_state == MEDIA_PLAYER_STATE_PLAYING


def normalize(player_state: Optional[str], idle_reason: Optional[str]) -> PlayerStatusCode:
    """Map a receiver player state (+ idle reason) onto the host status codes."""
    code = _DIRECT_CODES.get(player_state)
    if code is not None:
        return code
    if player_state == MEDIA_PLAYER_STATE_IDLE and idle_reason == IDLE_REASON_FINISHED:
        return PlayerStatusCode.IDLE_FINISHED
    return PlayerStatusCode.OTHER


def status_code(status: Optional[MediaStatusSnapshot]) -> PlayerStatusCode:
    if status is None:
        return PlayerStatusCode.OTHER
    return normalize(status.player_state, status.idle_reason)


def media_error_code(detailed_code: Optional[int]) -> int:
    if detailed_code is None:
        return MEDIA_ERROR_FALLBACK_CODE
    return int(detailed_code)
