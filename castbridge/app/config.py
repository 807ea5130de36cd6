# castbridge/app/config.py
from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from castbridge.core.errors import BridgeConfigError
from castbridge.model.media import DEFAULT_CONTENT_TYPE


@dataclass(frozen=True)
class BridgeConfig:
    device_name: Optional[str] = None
    device_host: Optional[str] = None
    discovery_timeout_s: float = 10.0
    connect_timeout_s: float = 5.0
    default_content_type: str = DEFAULT_CONTENT_TYPE
    trace_path: Optional[str] = None
    log_path: Optional[str] = None

    @classmethod
    def load(cls, path: str | Path) -> "BridgeConfig":
        """Load a YAML mapping of config keys (all optional)."""
        path = Path(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                doc = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise BridgeConfigError(
                "Failed to read bridge config.",
                hint=str(e),
                details={"path": str(path)},
            ) from None

        if not isinstance(doc, dict):
            raise BridgeConfigError(
                "Bridge config must be a mapping.",
                details={"path": str(path)},
            )
        return cls.from_mapping(doc)

    @classmethod
    def from_mapping(cls, doc: Dict[str, Any]) -> "BridgeConfig":
        known = {f.name: f for f in fields(cls)}
        values: Dict[str, Any] = {}
        for key, value in doc.items():
            if key not in known:
                raise BridgeConfigError(
                    f"Unknown config key '{key}'.",
                    hint=f"Valid keys: {sorted(known)}",
                    details={"key": key},
                )
            if value is None:
                # YAML null: keep the field default
                continue
            values[key] = _check_value(key, value, cls._types()[key])
        return cls(**values)

    def with_overrides(self, **overrides: Any) -> "BridgeConfig":
        """Apply non-None overrides (e.g. CLI flags)."""
        changes = {
            k: _check_value(k, v, self._types().get(k, "str"))
            for k, v in overrides.items()
            if v is not None
        }
        return replace(self, **changes)

    @staticmethod
    def _types() -> Dict[str, str]:
        return {
            "device_name": "str",
            "device_host": "str",
            "discovery_timeout_s": "float",
            "connect_timeout_s": "float",
            "default_content_type": "str",
            "trace_path": "str",
            "log_path": "str",
        }


def _check_value(key: str, value: Any, type_name: str) -> Any:
    if type_name == "float":
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
            raise BridgeConfigError(
                f"Config key '{key}' must be a positive number.",
                details={"key": key, "value": value},
            )
        return float(value)
    if not isinstance(value, str):
        raise BridgeConfigError(
            f"Config key '{key}' must be a string.",
            details={"key": key, "value": value},
        )
    return value
