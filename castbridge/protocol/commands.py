# castbridge/protocol/commands.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Tuple


@dataclass(frozen=True)
class ArgSpec:
    key: str
    type_name: str      # "str" | "float" | "bool" | "map"
    default: Any = None


# Keys each command reads, with the value used when a key is missing or mistyped.
# loadMedia.contentType is filled from the bridge config when left as None.
COMMAND_ARGS: Dict[str, Tuple[ArgSpec, ...]] = {
    "loadMedia": (
        ArgSpec("url", "str", ""),
        ArgSpec("title", "str"),
        ArgSpec("subtitle", "str"),
        ArgSpec("image", "str"),
        ArgSpec("contentType", "str"),
        ArgSpec("customData", "map", {}),
        ArgSpec("live", "bool", False),
    ),
    "seek": (
        ArgSpec("relative", "bool", False),
        ArgSpec("interval", "float", 0.0),
    ),
    "setVolume": (ArgSpec("volume", "float", 0.0),),
    "setPlaybackRate": (ArgSpec("rate", "float"),),
    "setAudioTrack": (ArgSpec("lang", "str"),),
    "setSubtitleTrack": (ArgSpec("lang", "str"),),
}


def read_arguments(command: str, raw: Any) -> Dict[str, Any]:
    """
    Resolve the declared arguments of `command` from `raw`.

    Never raises: a non-mapping `raw` counts as empty and every missing or
    wrong-typed value falls back to its declared default.
    """
    specs = COMMAND_ARGS.get(command, ())
    source: Mapping[str, Any] = raw if isinstance(raw, Mapping) else {}

    resolved: Dict[str, Any] = {}
    for spec in specs:
        value = _coerce(source.get(spec.key), spec.type_name)
        if value is None:
            value = dict(spec.default) if isinstance(spec.default, dict) else spec.default
        resolved[spec.key] = value
    return resolved


def _coerce(value: Any, type_name: str) -> Any:
    """Return `value` converted to `type_name`, or None if it does not fit."""
    if value is None:
        return None

    if type_name == "str":
        return value if isinstance(value, str) else None

    if type_name == "float":
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return float(value)

    if type_name == "bool":
        return value if isinstance(value, bool) else None

    if type_name == "map":
        return value if isinstance(value, Mapping) else None

    return None
