from .event_sink import BridgeEvent, EventSink
from .remote import (
    CastButton,
    MediaClientListener,
    RemoteMediaClient,
    RemoteSession,
    RequestCallback,
    SessionListener,
    SessionProvider,
)

__all__ = [
    "BridgeEvent",
    "EventSink",
    "CastButton",
    "MediaClientListener",
    "RemoteMediaClient",
    "RemoteSession",
    "RequestCallback",
    "SessionListener",
    "SessionProvider",
]
