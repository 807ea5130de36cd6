from __future__ import annotations

import castbridge.cli.commands as cmd_mod
from castbridge.cli.main import main
from castbridge.core.errors import DeviceNotFoundError


def test_missing_device_prints_error_and_hint(capsys):
    assert main(["status"]) == 1
    out = capsys.readouterr().out
    assert "ERROR: No cast device selected." in out
    assert "Hint: Pass --device" in out


def test_bad_config_file(tmp_path, capsys):
    p = tmp_path / "c.yaml"
    p.write_text("colour: blue\n", encoding="utf-8")
    assert main(["serve", "--config", str(p)]) == 1
    assert "Unknown config key 'colour'" in capsys.readouterr().out


def test_connect_errors_map_to_exit_code(monkeypatch, capsys):
    def not_found(cfg):
        raise DeviceNotFoundError("Cast device 'TV' not found.", hint="Check the friendly name.")

    monkeypatch.setattr(cmd_mod, "open_provider", not_found)
    assert main(["status", "--device", "TV"]) == 1
    out = capsys.readouterr().out
    assert "ERROR: Cast device 'TV' not found." in out
    assert "Hint: Check the friendly name." in out
