"""Read-only accessibility node snapshots."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from droid_agent.a11y.geometry import Bounds


class NodeInfo(BaseModel):
    """Point-in-time view of a node's accessibility properties.

    Built by the accessibility bridge on every request. The tree behind a
    handle changes under us, so callers must not keep one across calls.
    """

    model_config = ConfigDict(frozen=True)

    class_name: Optional[str] = None
    resource_id: Optional[str] = None
    text: Optional[str] = None
    content_desc: Optional[str] = None
    package_name: Optional[str] = None
    visible: bool = True
    password: bool = False
    scrollable: bool = False
    bounds: Bounds = Field(default_factory=lambda: Bounds(0, 0, 0, 0))
    selection_range: Optional[tuple[int, int]] = None

    @field_validator("selection_range")
    @classmethod
    def _normalize_selection(cls, value: Optional[tuple[int, int]]) -> Optional[tuple[int, int]]:
        if value is None:
            return None
        start, end = value
        # Android reports -1 when the node holds no cursor
        if start < 0 or end < 0:
            return None
        return (min(start, end), max(start, end))


class ContentSize(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    width: int
    height: int
    top: int
    left: int
    scrollable_offset: int = Field(default=0, alias="scrollableOffset")

    @classmethod
    def from_bounds(cls, bounds: Bounds, scrollable: bool = False) -> ContentSize:
        return cls(
            width=bounds.width,
            height=bounds.height,
            top=bounds.top,
            left=bounds.left,
            scrollable_offset=bounds.height if scrollable else 0,
        )

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)
