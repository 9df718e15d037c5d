"""Selector descriptors for the two native search APIs."""

from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, TypeAdapter

from droid_agent.a11y.geometry import Bounds
from droid_agent.a11y.node_info import NodeInfo


class By(BaseModel):
    """The caller-facing locator that produced an element."""

    model_config = ConfigDict(frozen=True)

    strategy: str
    value: str

    def describe(self) -> str:
        return f"By.{self.strategy}: {self.value}"


_FLAGS = (
    "checkable",
    "checked",
    "clickable",
    "enabled",
    "focusable",
    "focused",
    "long_clickable",
    "scrollable",
    "selected",
)


class _NodeCriteria(BaseModel):
    """Node properties shared by both selector kinds.

    Unset fields do not constrain the match.
    """

    model_config = ConfigDict(frozen=True)

    class_name: Optional[str] = None
    resource_id: Optional[str] = None
    text: Optional[str] = None
    text_contains: Optional[str] = None
    content_desc: Optional[str] = None
    package_name: Optional[str] = None
    checkable: Optional[bool] = None
    checked: Optional[bool] = None
    clickable: Optional[bool] = None
    enabled: Optional[bool] = None
    focusable: Optional[bool] = None
    focused: Optional[bool] = None
    long_clickable: Optional[bool] = None
    scrollable: Optional[bool] = None
    selected: Optional[bool] = None
    bounds: Optional[Bounds] = None

    def criteria(self) -> dict[str, Any]:
        """Set property constraints, excluding bounds and kind-specific fields."""
        out = {}
        for name in _NodeCriteria.model_fields:
            if name == "bounds":
                continue
            value = getattr(self, name)
            if value is not None:
                out[name] = value
        return out

    def describe(self) -> str:
        parts = []
        if self.class_name:
            parts.append(f"class={self.class_name}")
        if self.resource_id:
            parts.append(f"id={self.resource_id}")
        if self.text is not None:
            parts.append(f"text={self.text!r}")
        if self.text_contains:
            parts.append(f"text~={self.text_contains!r}")
        if self.content_desc is not None:
            parts.append(f"desc={self.content_desc!r}")
        if self.package_name:
            parts.append(f"pkg={self.package_name}")
        for flag in _FLAGS:
            value = getattr(self, flag)
            if value is not None:
                parts.append(f"{flag}={str(value).lower()}")
        if self.bounds is not None:
            parts.append(f"bounds={self.bounds.to_short_string()}")
        return ", ".join(parts)


class LiveSelector(_NodeCriteria):
    """Understood by the live-view handle search API."""

    kind: Literal["live"] = "live"
    max_depth: Optional[NonNegativeInt] = None

    def describe(self) -> str:
        desc = super().describe()
        if self.max_depth is not None:
            desc = f"{desc}, depth<={self.max_depth}" if desc else f"depth<={self.max_depth}"
        return f"live({desc or '*'})"


class ReplaySelector(_NodeCriteria):
    """Understood by the selector-replay handle search API."""

    kind: Literal["replay"] = "replay"
    instance: Optional[NonNegativeInt] = None

    def with_instance(self, instance: int) -> ReplaySelector:
        return self.model_copy(update={"instance": instance})

    def describe(self) -> str:
        parts = [super().describe()]
        if self.instance is not None:
            parts.append(f"instance={self.instance}")
        return f"replay({', '.join(p for p in parts if p) or '*'})"


SelectorDescriptor = Annotated[
    Union[LiveSelector, ReplaySelector], Field(discriminator="kind")
]

_descriptor_adapter: TypeAdapter[Any] = TypeAdapter(SelectorDescriptor)


def parse_selector(data: dict[str, Any]) -> LiveSelector | ReplaySelector:
    """Build a selector descriptor from a plain dict tagged with ``kind``."""
    return _descriptor_adapter.validate_python(data)


# ------------------------------------------------------------------
# Synthesis from a node snapshot
# ------------------------------------------------------------------


def _identity_criteria(info: NodeInfo) -> dict[str, Any]:
    kw: dict[str, Any] = {}
    if not info.bounds.is_empty():
        kw["bounds"] = info.bounds
    if info.class_name:
        kw["class_name"] = info.class_name
    if info.package_name:
        kw["package_name"] = info.package_name
    if info.resource_id:
        kw["resource_id"] = info.resource_id
    if info.text:
        kw["text"] = info.text
    if info.content_desc:
        kw["content_desc"] = info.content_desc
    return kw


def to_replay_selector(info: NodeInfo) -> ReplaySelector:
    """Build a replay selector that re-locates *info*'s node from the root.

    Uniqueness is best effort: two nodes sharing identity and bounds are
    indistinguishable, and the device resolves to the first one in
    traversal order.
    """
    return ReplaySelector(**_identity_criteria(info))


def to_live_selector(info: NodeInfo) -> LiveSelector:
    """Build a live selector for *info*'s node. Same caveats as above."""
    return LiveSelector(**_identity_criteria(info))
