"""Tests for the simtarget command line."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, patch

import pytest

from simtarget.main import cli
from simtarget.models import CapabilitySet, ResolvedTarget, ToolchainDiscoveryError


@pytest.fixture
def caps_file(tmp_path):
    path = tmp_path / "caps.json"
    path.write_text(json.dumps({"app": "settings", "platformVersion": "9.0"}))
    return path


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    from simtarget import config as config_module
    monkeypatch.setattr(config_module, "CONFIG_DIR", tmp_path)
    monkeypatch.setattr(config_module, "API_KEY_FILE", tmp_path / "api-key")
    monkeypatch.setattr(config_module, "USER_CONFIG_FILE", tmp_path / "config.json")


class TestNormalizeCommand:
    def test_prints_normalized_caps(self, caps_file, capsys):
        assert cli(["normalize", str(caps_file)]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["bundleId"] == "com.apple.Preferences"
        assert data["reset"] is True

    def test_validation_error_exit_code(self, tmp_path, capsys):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"platformVersion": "9.0"}))
        assert cli(["normalize", str(path)]) == 1
        assert "Error: [caps]" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        assert cli(["normalize", str(tmp_path / "nope.json")]) == 1
        assert "Error:" in capsys.readouterr().err


class TestResolveCommand:
    def test_prints_target(self, caps_file, capsys):
        target = ResolvedTarget(
            device_string="iPhone 6 (9.0)",
            device="iPhone 6 (9.0) [AAAA-1111]",
            udid="AAAA-1111",
            capabilities=CapabilitySet(bundleId="com.apple.Preferences"),
        )
        with patch("simtarget.main.TargetResolver.resolve", AsyncMock(return_value=target)):
            assert cli(["resolve", str(caps_file)]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["udid"] == "AAAA-1111"
        assert data["capabilities"]["bundleId"] == "com.apple.Preferences"

    def test_no_match_exit_code(self, caps_file, capsys):
        target = ResolvedTarget(device_string="iPhone 6s (9.0)", capabilities=CapabilitySet())
        with patch("simtarget.main.TargetResolver.resolve", AsyncMock(return_value=target)):
            assert cli(["resolve", str(caps_file)]) == 2

    def test_toolchain_error(self, caps_file, capsys):
        with patch("simtarget.main.TargetResolver.resolve", AsyncMock(side_effect=ToolchainDiscoveryError("no xcode"))):
            assert cli(["resolve", str(caps_file)]) == 1
        assert "Error: [xcode] no xcode" in capsys.readouterr().err


class TestRegenerateKey:
    def test_prints_new_key(self, tmp_path, capsys):
        assert cli(["regenerate-key"]) == 0
        assert capsys.readouterr().out.startswith("New API key: ")
        assert (tmp_path / "api-key").exists()


class TestModuleEntryPoint:
    def test_delegates_to_cli(self):
        import simtarget.__main__ as entry
        assert entry.cli is cli
        assert not hasattr(entry, "_maybe_reexec_in_venv")
