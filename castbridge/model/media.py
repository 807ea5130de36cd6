# castbridge/model/media.py
from __future__ import annotations

import logging
import urllib.parse
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from pychromecast.controllers.media import (
    METADATA_TYPE_MOVIE,
    STREAM_TYPE_BUFFERED,
    STREAM_TYPE_LIVE,
)

from .tracks import TrackCategory, parse_tracks, tracks_of

DEFAULT_CONTENT_TYPE = "video/mp4"

_log = logging.getLogger(__name__)


@dataclass
class MediaDescriptor:
    """
    Host-side description of a media item.

    Built from `loadMedia` arguments when loading, and from the receiver's
    media info when reading the current media back.
    """
    url: str = ""
    content_id: Optional[str] = None
    title: Optional[str] = None
    subtitle: Optional[str] = None
    image_url: Optional[str] = None
    content_type: str = DEFAULT_CONTENT_TYPE
    stream_type: str = STREAM_TYPE_BUFFERED
    custom_data: Optional[Dict[str, Any]] = field(default_factory=dict)
    audio_tracks: List[str] = field(default_factory=list)
    subtitle_tracks: List[str] = field(default_factory=list)

    @property
    def live(self) -> bool:
        return self.stream_type == STREAM_TYPE_LIVE

    @classmethod
    def from_arguments(
        cls,
        args: Mapping[str, Any],
        *,
        default_content_type: str = DEFAULT_CONTENT_TYPE,
    ) -> "MediaDescriptor":
        """`args` are already type-checked `loadMedia` arguments."""
        url = args.get("url") or ""
        return cls(
            url=url,
            content_id=url,
            title=args.get("title"),
            subtitle=args.get("subtitle"),
            image_url=parse_image_url(args.get("image")),
            content_type=args.get("contentType") or default_content_type,
            stream_type=STREAM_TYPE_LIVE if args.get("live") else STREAM_TYPE_BUFFERED,
            custom_data=dict(args.get("customData") or {}),
        )

    def to_map(self) -> Dict[str, Any]:
        """Host-facing dictionary (what `getMediaInfo` returns)."""
        return {
            "id": self.content_id,
            "url": self.url,
            "title": self.title,
            "subtitle": self.subtitle,
            "image": self.image_url,
            "contentType": self.content_type,
            "streamType": self.stream_type,
            "customData": self.custom_data,
            "audioTracks": list(self.audio_tracks),
            "subtitleTracks": list(self.subtitle_tracks),
        }


@dataclass(frozen=True)
class MediaLoadRequest:
    """Native load request: a Cast MediaInformation dict + load options."""
    media: Dict[str, Any]
    custom_data: Dict[str, Any] = field(default_factory=dict)
    autoplay: bool = True


def parse_image_url(value: Any) -> Optional[str]:
    """Return `value` if it is an absolute URL, else None."""
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = urllib.parse.urlparse(value)
    except ValueError:
        _log.debug("IMAGE_URL_DROPPED value=%r", value)
        return None
    if not parsed.scheme or not parsed.netloc:
        _log.debug("IMAGE_URL_DROPPED value=%r", value)
        return None
    return value


def encode(descriptor: MediaDescriptor) -> MediaLoadRequest:
    metadata: Dict[str, Any] = {"metadataType": METADATA_TYPE_MOVIE}
    if descriptor.title is not None:
        metadata["title"] = descriptor.title
    if descriptor.subtitle is not None:
        metadata["subtitle"] = descriptor.subtitle
    if descriptor.image_url:
        metadata["images"] = [{"url": descriptor.image_url}]

    custom_data = descriptor.custom_data if descriptor.custom_data is not None else {}

    media = {
        "contentId": descriptor.content_id or descriptor.url,
        "contentUrl": descriptor.url,
        "contentType": descriptor.content_type,
        "streamType": descriptor.stream_type,
        "metadata": metadata,
        "customData": custom_data,
    }
    return MediaLoadRequest(media=media, custom_data=custom_data)


def decode(media_info: Optional[Mapping[str, Any]]) -> Optional[MediaDescriptor]:
    if media_info is None:
        return None

    content_id = media_info.get("contentId")
    metadata = media_info.get("metadata") or {}
    tracks = parse_tracks(media_info.get("tracks"))

    image_url = None
    images = metadata.get("images") or []
    if images and isinstance(images[0], Mapping):
        image_url = images[0].get("url")

    return MediaDescriptor(
        url=media_info.get("contentUrl") or content_id,
        content_id=content_id,
        title=metadata.get("title"),
        subtitle=metadata.get("subtitle"),
        image_url=image_url,
        content_type=media_info.get("contentType") or "",
        stream_type=STREAM_TYPE_LIVE if media_info.get("streamType") == STREAM_TYPE_LIVE else STREAM_TYPE_BUFFERED,
        custom_data=plain_data(media_info.get("customData")),
        audio_tracks=[t.language for t in tracks_of(TrackCategory.AUDIO, tracks)],
        subtitle_tracks=list(dict.fromkeys(t.language for t in tracks_of(TrackCategory.SUBTITLE, tracks))),
    )


def plain_data(value: Any) -> Any:
    """Convert a structured value into plain dicts/lists (None stays None)."""
    if isinstance(value, Mapping):
        return {str(k): plain_data(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [plain_data(v) for v in value]
    return value


def duration_ms(media_info: Optional[Mapping[str, Any]]) -> int:
    if not media_info:
        return 0
    seconds = media_info.get("duration")
    if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
        return 0
    return int(seconds * 1000)
