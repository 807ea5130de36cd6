from .media import MediaDescriptor, MediaLoadRequest, decode, encode
from .status import MediaStatusSnapshot, PlayerStatusCode, normalize
from .tracks import Track, TrackCategory, active_language, select_track

__all__ = ["MediaDescriptor",
           "MediaLoadRequest",
           "decode",
           "encode",
           "MediaStatusSnapshot",
           "PlayerStatusCode",
           "normalize",
           "Track",
           "TrackCategory",
           "active_language",
           "select_track"]
