from __future__ import annotations

import pytest

from castbridge.app.config import BridgeConfig
from castbridge.app.controller import CastBridgeController
from castbridge.core.errors import BridgeConfigError


def test_defaults():
    cfg = BridgeConfig()
    assert cfg.device_name is None
    assert cfg.default_content_type == "video/mp4"
    assert cfg.discovery_timeout_s == 10.0


def test_load_yaml(tmp_path):
    p = tmp_path / "bridge.yaml"
    p.write_text(
        "device_name: Living Room\n"
        "device_host: 192.168.1.20\n"
        "connect_timeout_s: 2\n"
        "default_content_type: application/x-mpegURL\n",
        encoding="utf-8",
    )
    cfg = BridgeConfig.load(p)
    assert cfg.device_name == "Living Room"
    assert cfg.device_host == "192.168.1.20"
    assert cfg.connect_timeout_s == 2.0
    assert isinstance(cfg.connect_timeout_s, float)
    assert cfg.default_content_type == "application/x-mpegURL"


def test_load_empty_file_gives_defaults(tmp_path):
    p = tmp_path / "empty.yaml"
    p.write_text("", encoding="utf-8")
    assert BridgeConfig.load(p) == BridgeConfig()


def test_load_missing_file(tmp_path):
    with pytest.raises(BridgeConfigError) as ei:
        BridgeConfig.load(tmp_path / "nope.yaml")
    assert ei.value.details["path"].endswith("nope.yaml")


def test_load_invalid_yaml(tmp_path):
    p = tmp_path / "bad.yaml"
    p.write_text("device_name: [unclosed\n", encoding="utf-8")
    with pytest.raises(BridgeConfigError):
        BridgeConfig.load(p)


def test_load_non_mapping(tmp_path):
    p = tmp_path / "list.yaml"
    p.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(BridgeConfigError, match="mapping"):
        BridgeConfig.load(p)


def test_unknown_key_rejected():
    with pytest.raises(BridgeConfigError) as ei:
        BridgeConfig.from_mapping({"device": "x"})
    assert ei.value.code == "bridge_config_error"
    assert "device_name" in ei.value.hint


@pytest.mark.parametrize(
    "doc",
    [
        {"discovery_timeout_s": 0},
        {"discovery_timeout_s": -1.0},
        {"connect_timeout_s": True},
        {"connect_timeout_s": "5"},
        {"device_name": 42},
    ],
)
def test_bad_values_rejected(doc):
    with pytest.raises(BridgeConfigError):
        BridgeConfig.from_mapping(doc)


def test_with_overrides_ignores_none():
    cfg = BridgeConfig(device_name="Kitchen", trace_path="t.jsonl")
    out = cfg.with_overrides(device_name=None, device_host="10.0.0.2", trace_path=None)
    assert out.device_name == "Kitchen"
    assert out.device_host == "10.0.0.2"
    assert out.trace_path == "t.jsonl"


def test_null_values_keep_defaults(tmp_path):
    p = tmp_path / "nulls.yaml"
    p.write_text(
        "device_name: TV\n"
        "default_content_type:\n"
        "discovery_timeout_s: null\n"
        "connect_timeout_s: ~\n",
        encoding="utf-8",
    )
    cfg = BridgeConfig.load(p)
    assert cfg.device_name == "TV"
    assert cfg.default_content_type == "video/mp4"
    assert cfg.discovery_timeout_s == 10.0
    assert cfg.connect_timeout_s == 5.0


def test_null_content_type_still_loads_default(provider, client):
    cfg = BridgeConfig.from_mapping({"device_name": "TV", "default_content_type": None})
    ctrl = CastBridgeController(cfg, provider=provider)
    ctrl.dispatch("loadMedia", {"url": "http://x/m.mp4"})
    assert client.calls[0][1][0].media["contentType"] == "video/mp4"
