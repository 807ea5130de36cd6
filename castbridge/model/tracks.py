# castbridge/model/tracks.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Sequence

TRACK_TYPE_AUDIO = "AUDIO"
TRACK_TYPE_TEXT = "TEXT"
TRACK_SUBTYPE_SUBTITLES = "SUBTITLES"


class TrackCategory(Enum):
    AUDIO = "audio"
    SUBTITLE = "subtitle"


@dataclass(frozen=True)
class Track:
    """A media track as described by the receiver's current media info."""
    track_id: int
    track_type: str
    language: str = ""
    subtype: Optional[str] = None

    @property
    def category(self) -> Optional[TrackCategory]:
        if self.track_type == TRACK_TYPE_AUDIO:
            return TrackCategory.AUDIO
        if self.track_type == TRACK_TYPE_TEXT or self.subtype == TRACK_SUBTYPE_SUBTITLES:
            return TrackCategory.SUBTITLE
        return None

    @classmethod
    def from_native(cls, d: Mapping[str, Any]) -> "Track":
        """Build from a Cast `MediaTrack` dict ({trackId, type, subtype, language})."""
        track_id = d["trackId"]
        if isinstance(track_id, bool) or not isinstance(track_id, int):
            raise TypeError(f"trackId must be int, got {type(track_id).__name__}")
        return cls(
            track_id=track_id,
            track_type=str(d.get("type") or ""),
            language=str(d.get("language") or ""),
            subtype=d.get("subtype"),
        )


def parse_tracks(native_tracks: Optional[Iterable[Any]]) -> List[Track]:
    """Parse native track dicts, skipping entries without a usable integer trackId."""
    out: List[Track] = []
    for d in native_tracks or ():
        if not isinstance(d, Mapping):
            continue
        try:
            out.append(Track.from_native(d))
        except (KeyError, TypeError):
            continue
    return out


def tracks_of(category: TrackCategory, tracks: Iterable[Track]) -> List[Track]:
    return [t for t in tracks if t.category is category]


def select_track(
    category: TrackCategory,
    language: str,
    tracks: Iterable[Track],
    active_ids: Sequence[int],
) -> Optional[List[int]]:
    """
    Compute the active track id list after selecting `language` for `category`.

    Returns None when nothing should change (no track of that language).
    At most one id of `category` is active afterwards; ids of the other
    category keep their position.
    """
    candidates = tracks_of(category, tracks)
    category_ids = {t.track_id for t in candidates}
    remaining = [i for i in active_ids if i not in category_ids]

    # audio cannot be switched off, an empty audio language is matched like any other
    if not language and category is TrackCategory.SUBTITLE:
        return remaining

    match = next((t for t in candidates if t.language == language), None)
    if match is None:
        return None

    remaining.append(match.track_id)
    return remaining


def active_language(
    category: TrackCategory,
    tracks: Iterable[Track],
    active_ids: Sequence[int],
) -> str:
    active = set(active_ids)
    for t in tracks_of(category, tracks):
        if t.track_id in active:
            return t.language
    return ""
