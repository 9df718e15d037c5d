"""Tests for descendant search across handle kinds."""

from unittest.mock import MagicMock

import pytest

from droid_agent.a11y.element import LiveViewElement, ReplayElement
from droid_agent.a11y.handles import DeviceContext
from droid_agent.a11y.hierarchy import (
    HierarchyLiveHandle,
    HierarchyReplayHandle,
    UiHierarchy,
    build_context,
    hierarchy_node_info,
)
from droid_agent.a11y.node_info import NodeInfo
from droid_agent.a11y.resolver import CrossVariantResolver
from droid_agent.a11y.selector import By, LiveSelector, ReplaySelector, to_replay_selector
from droid_agent.core.errors import NativeOperationError, StaleElementError

from conftest import rid

BY = By(strategy="id", value="test")


def _context(device=None, to_node_info=None):
    return DeviceContext(
        device=device or MagicMock(),
        to_node_info=to_node_info or MagicMock(return_value=NodeInfo(class_name="x")),
        position_mapper=MagicMock(),
    )


def test_replay_child_of_live_element_matches_manual_derivation(live, context):
    form = live("form")
    selector = ReplaySelector(class_name="android.widget.EditText", instance=1)

    child = form.get_child(selector)

    assert isinstance(child, ReplayElement)
    anchor = context.device.find_object(to_replay_selector(context.to_node_info(form.handle)))
    manual = ReplayElement(anchor.get_child(selector), context, True, BY)
    for attr in ("class", "resource-id", "bounds"):
        assert child.get_attribute(attr) == manual.get_attribute(attr)
    assert child.get_attribute("resource-id") == rid("password")


def test_replay_children_of_live_element(live):
    titles = live("list").get_children(ReplaySelector(resource_id=rid("title")), BY)
    assert [t.get_attribute("text") for t in titles] == ["Wi-Fi", "Bluetooth", "Hidden"]
    assert all(isinstance(t, ReplayElement) for t in titles)
    assert all(t.by is BY for t in titles)


def test_replay_child_absent_is_none(live):
    assert live("form").get_child(ReplaySelector(class_name="android.widget.Switch")) is None


def test_no_top_level_match_is_none():
    device = MagicMock()
    device.find_object.return_value = None
    context = _context(device=device)
    element = LiveViewElement(MagicMock(), context, True, BY)

    assert element.get_child(ReplaySelector(text="anything")) is None
    assert element.get_children(ReplaySelector(text="anything"), BY) == []


def test_non_replay_relocation_is_none(hierarchy):
    node = next(hierarchy.iter_nodes())
    device = MagicMock()
    device.find_object.return_value = HierarchyLiveHandle(node, hierarchy)
    context = _context(device=device, to_node_info=hierarchy_node_info)
    element = LiveViewElement(HierarchyLiveHandle(node, hierarchy), context, True, BY)

    assert element.get_child(ReplaySelector(text="Wi-Fi")) is None
    assert element.get_children(ReplaySelector(text="Wi-Fi"), BY) == []


def test_bridge_failure_is_no_match():
    context = _context(to_node_info=MagicMock(side_effect=StaleElementError("gone")))
    element = LiveViewElement(MagicMock(), context, True, BY)

    assert element.get_child(ReplaySelector(text="x")) is None
    context.device.find_object.assert_not_called()


def test_stale_live_element_is_no_match(live, hierarchy):
    form = live("form")
    hierarchy.detach(form.handle.node)
    assert form.get_child(ReplaySelector(class_name="android.widget.Button")) is None


def test_child_search_failure_propagates():
    anchor = MagicMock(spec=HierarchyReplayHandle)
    anchor.get_child.side_effect = NativeOperationError("binder died")
    device = MagicMock()
    device.find_object.return_value = anchor
    element = LiveViewElement(MagicMock(), _context(device=device), True, BY)

    with pytest.raises(NativeOperationError):
        element.get_child(ReplaySelector(text="x"))


def test_live_child_of_replay_element(replay):
    row = replay("row", clickable=True, instance=1)
    toggle = row.get_child(LiveSelector(class_name="android.widget.Switch"))
    assert isinstance(toggle, LiveViewElement)
    assert toggle.get_attribute("checked") == "false"


def test_live_children_of_replay_element(replay):
    titles = replay("list").get_children(LiveSelector(resource_id=rid("title")), BY)
    assert [t.get_attribute("text") for t in titles] == ["Wi-Fi", "Bluetooth", "Hidden"]
    assert all(isinstance(t, LiveViewElement) for t in titles)


def test_matching_kinds_pass_through(live):
    form = live("form")
    resolver = CrossVariantResolver(form.context)
    child = resolver.find_child(form, LiveSelector(class_name="android.widget.Button"))
    assert isinstance(child, LiveViewElement)


def test_relocation_tie_break_is_first_in_traversal():
    xml = """<hierarchy rotation="0">
      <node class="android.widget.FrameLayout" bounds="[0,0][100,100]">
        <node class="android.widget.TextView" text="dup" bounds="[0,0][10,10]">
          <node class="android.widget.ImageView" resource-id="a:id/first" bounds="[0,0][5,5]" />
        </node>
        <node class="android.widget.TextView" text="dup" bounds="[0,0][10,10]">
          <node class="android.widget.ImageView" resource-id="a:id/second" bounds="[0,0][5,5]" />
        </node>
      </node>
    </hierarchy>"""
    hierarchy = UiHierarchy.from_xml(xml)
    context = build_context(hierarchy)
    second = hierarchy.roots[0].children[1]
    element = LiveViewElement(HierarchyLiveHandle(second, hierarchy), context, True, BY)

    child = element.get_child(ReplaySelector(class_name="android.widget.ImageView"))

    assert child.get_attribute("resource-id") == "a:id/first"


def test_relocation_prefers_ancestor_with_same_identity():
    xml = """<hierarchy rotation="0">
      <node class="android.widget.FrameLayout" package="a" bounds="[0,0][100,100]">
        <node class="android.widget.FrameLayout" package="a" bounds="[0,0][100,100]" />
      </node>
    </hierarchy>"""
    hierarchy = UiHierarchy.from_xml(xml)
    context = build_context(hierarchy)
    inner = hierarchy.roots[0].children[0]
    element = LiveViewElement(HierarchyLiveHandle(inner, hierarchy), context, True, BY)
    selector_kwargs = {"class_name": "android.widget.FrameLayout"}

    assert element.get_child(LiveSelector(**selector_kwargs)) is None
    # Re-location lands on the outer node, so the search sees the element itself
    child = element.get_child(ReplaySelector(**selector_kwargs))
    assert child.get_attribute("bounds") == "[0,0][100,100]"
    assert child.handle.resolve() is inner
