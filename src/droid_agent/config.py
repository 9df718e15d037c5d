"""Configuration and device profile management."""

from __future__ import annotations

import json
import pathlib
from typing import Any, Optional

from pydantic import BaseModel, Field, PositiveInt

from droid_agent.constants import (
    DEFAULT_DISPLAY_HEIGHT,
    DEFAULT_DISPLAY_WIDTH,
    DEFAULT_DRAG_STEPS,
    PROFILES_FILE,
)


class DisplayConfig(BaseModel):
    width: PositiveInt = DEFAULT_DISPLAY_WIDTH
    height: PositiveInt = DEFAULT_DISPLAY_HEIGHT


class DragConfig(BaseModel):
    default_steps: PositiveInt = DEFAULT_DRAG_STEPS


class DeviceProfile(BaseModel):
    name: str
    serial: Optional[str] = None
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    drag: DragConfig = Field(default_factory=DragConfig)


class ProfileStore:
    """Manages profiles.json read/write."""

    def __init__(self, path: str | pathlib.Path | None = None):
        self.path = pathlib.Path(path or PROFILES_FILE)

    def _load_raw(self) -> list[dict[str, Any]]:
        if not self.path.exists():
            return []
        return json.loads(self.path.read_text(encoding="utf-8"))

    def _save_raw(self, data: list[dict[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8"
        )

    def list(self) -> list[DeviceProfile]:
        return [DeviceProfile(**d) for d in self._load_raw()]

    def get(self, name: str) -> DeviceProfile | None:
        for d in self._load_raw():
            if d.get("name") == name:
                return DeviceProfile(**d)
        return None

    def add(self, profile: DeviceProfile) -> None:
        data = self._load_raw()
        if any(d.get("name") == profile.name for d in data):
            raise ValueError(f"Profile '{profile.name}' already exists")
        data.append(profile.model_dump(exclude_none=True))
        self._save_raw(data)

    def remove(self, name: str) -> bool:
        data = self._load_raw()
        new = [d for d in data if d.get("name") != name]
        if len(new) == len(data):
            return False
        self._save_raw(new)
        return True

    def update(self, profile: DeviceProfile) -> None:
        data = self._load_raw()
        for i, d in enumerate(data):
            if d.get("name") == profile.name:
                data[i] = profile.model_dump(exclude_none=True)
                self._save_raw(data)
                return
        raise ValueError(f"Profile '{profile.name}' not found")

    def ensure_default(self) -> None:
        if not self.path.exists():
            default = DeviceProfile(name="emulator", serial="emulator-5554")
            self._save_raw([default.model_dump(exclude_none=True)])
