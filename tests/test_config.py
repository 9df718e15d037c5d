"""Tests for config and profile management."""

import pytest
from pydantic import ValidationError

from droid_agent.config import DeviceProfile, DisplayConfig, DragConfig, ProfileStore


def test_profile_store_lifecycle(tmp_path):
    path = tmp_path / "profiles.json"
    store = ProfileStore(path)

    # Empty initially
    assert store.list() == []

    # Add
    p = DeviceProfile(name="pixel", serial="abc123")
    store.add(p)
    assert len(store.list()) == 1
    assert store.get("pixel").serial == "abc123"

    # Duplicate raises
    with pytest.raises(ValueError):
        store.add(p)

    # Update
    p.display.width = 720
    store.update(p)
    assert store.get("pixel").display.width == 720

    # Remove
    assert store.remove("pixel") is True
    assert store.remove("nonexistent") is False
    assert len(store.list()) == 0


def test_update_missing_profile_raises(tmp_path):
    store = ProfileStore(tmp_path / "profiles.json")
    with pytest.raises(ValueError):
        store.update(DeviceProfile(name="ghost"))


def test_ensure_default(tmp_path):
    path = tmp_path / "profiles.json"
    store = ProfileStore(path)
    store.ensure_default()
    assert path.exists()
    profiles = store.list()
    assert len(profiles) == 1
    assert profiles[0].name == "emulator"
    assert profiles[0].serial == "emulator-5554"


def test_ensure_default_keeps_existing(tmp_path):
    store = ProfileStore(tmp_path / "profiles.json")
    store.add(DeviceProfile(name="tablet"))
    store.ensure_default()
    assert [p.name for p in store.list()] == ["tablet"]


def test_defaults():
    p = DeviceProfile(name="x")
    assert p.serial is None
    assert (p.display.width, p.display.height) == (1080, 2400)
    assert p.drag.default_steps == 10


def test_serial_omitted_when_unset(tmp_path):
    path = tmp_path / "profiles.json"
    ProfileStore(path).add(DeviceProfile(name="x"))
    assert "serial" not in path.read_text(encoding="utf-8")


@pytest.mark.parametrize("kwargs", [{"width": -1}, {"height": 0}])
def test_display_must_be_positive(kwargs):
    with pytest.raises(ValidationError):
        DisplayConfig(**kwargs)


def test_drag_steps_must_be_positive():
    with pytest.raises(ValidationError):
        DragConfig(default_steps=0)
