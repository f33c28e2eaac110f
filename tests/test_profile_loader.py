from __future__ import annotations

from pathlib import Path

import pytest

from robotctl.core.errors import ProfileValidationError
from robotctl.core.profile_loader import DEFAULT_PROFILE_ID, load_profiles


def _write_profile(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


@pytest.fixture(autouse=True)
def _isolated_xdg(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))


def test_load_packaged_profile() -> None:
    loaded = load_profiles()
    profile = loaded.profiles[DEFAULT_PROFILE_ID]
    assert profile.service_uuid == "48c5d828-ac2a-442d-97a3-0c9822b04979"
    assert profile.tx_char_uuid == "6e400002-b5a3-f393-e0a9-e50e24dcca9e"
    assert profile.agent.command == ("bluetoothctl",)
    assert profile.agent.read_timeout_s == 1.0
    assert profile.discovery_timeout_s is None
    assert loaded.warnings == ()


def test_user_profile_overrides_packaged(tmp_path: Path) -> None:
    _write_profile(
        tmp_path / "cfg" / "robotctl" / "profiles" / "root.yaml",
        """
id: root_robot
name: My Root
service_uuid: "48C5D828-AC2A-442D-97A3-0C9822B04979"
tx_char_uuid: "6e400002-b5a3-f393-e0a9-e50e24dcca9e"
agent:
  command: ["sudo", "bluetoothctl"]
discovery_timeout_s: 30
""",
    )

    loaded = load_profiles()
    profile = loaded.profiles["root_robot"]
    assert profile.name == "My Root"
    assert profile.service_uuid == "48c5d828-ac2a-442d-97a3-0c9822b04979"
    assert profile.agent.command == ("sudo", "bluetoothctl")
    assert profile.agent.read_timeout_s == 1.0
    assert profile.discovery_timeout_s == 30.0
    assert any("overrides" in warning for warning in loaded.warnings)


def test_invalid_uuid_rejected(tmp_path: Path) -> None:
    _write_profile(
        tmp_path / "data" / "robotctl" / "profiles" / "bad.yaml",
        """
id: bad_uuid
name: Bad UUID
service_uuid: "not-a-uuid"
tx_char_uuid: "6e400002-b5a3-f393-e0a9-e50e24dcca9e"
""",
    )

    with pytest.raises(ProfileValidationError):
        load_profiles()


def test_missing_required_keys_rejected(tmp_path: Path) -> None:
    _write_profile(
        tmp_path / "cfg" / "robotctl" / "profiles" / "missing.yaml",
        """
id: missing
name: Missing
service_uuid: "48c5d828-ac2a-442d-97a3-0c9822b04979"
""",
    )

    with pytest.raises(ProfileValidationError):
        load_profiles()


def test_motor_speeds_are_not_configurable(tmp_path: Path) -> None:
    _write_profile(
        tmp_path / "cfg" / "robotctl" / "profiles" / "fast.yaml",
        """
id: fast
name: Fast
service_uuid: "48c5d828-ac2a-442d-97a3-0c9822b04979"
tx_char_uuid: "6e400002-b5a3-f393-e0a9-e50e24dcca9e"
speed: 200
""",
    )

    with pytest.raises(ProfileValidationError):
        load_profiles()


def test_duplicate_yaml_keys_rejected(tmp_path: Path) -> None:
    _write_profile(
        tmp_path / "cfg" / "robotctl" / "profiles" / "dup.yaml",
        """
id: dup
name: Duplicate
service_uuid: "48c5d828-ac2a-442d-97a3-0c9822b04979"
tx_char_uuid: "6e400002-b5a3-f393-e0a9-e50e24dcca9e"
tx_char_uuid: "6e400003-b5a3-f393-e0a9-e50e24dcca9e"
""",
    )

    with pytest.raises(ProfileValidationError):
        load_profiles()


def test_user_profiles_accept_yml_and_skip_other_files(tmp_path: Path) -> None:
    profile_dir = tmp_path / "data" / "robotctl" / "profiles"
    _write_profile(
        profile_dir / "rover.yml",
        """
id: rover
name: Rover
service_uuid: "0000ffe0-0000-1000-8000-00805f9b34fb"
tx_char_uuid: "0000ffe1-0000-1000-8000-00805f9b34fb"
""",
    )
    _write_profile(profile_dir / "notes.txt", "not a profile")

    loaded = load_profiles()
    assert set(loaded.profiles) == {DEFAULT_PROFILE_ID, "rover"}
    assert loaded.profiles["rover"].tx_char_uuid == "0000ffe1-0000-1000-8000-00805f9b34fb"
    assert loaded.warnings == ()
