"""Shared fixtures: a settings-screen hierarchy dump and element factories."""

from __future__ import annotations

import pytest

from droid_agent.a11y.element import LiveViewElement, ReplayElement
from droid_agent.a11y.hierarchy import UiHierarchy, build_context
from droid_agent.a11y.selector import By, LiveSelector, ReplaySelector

PKG = "com.example.settings"

SETTINGS_XML = f"""<?xml version='1.0' encoding='UTF-8' standalone='yes' ?>
<hierarchy rotation="0">
  <node index="0" text="" resource-id="" class="android.widget.FrameLayout" package="{PKG}" content-desc="" bounds="[0,0][1080,2400]">
    <node index="0" text="" resource-id="{PKG}:id/form" class="android.widget.LinearLayout" package="{PKG}" content-desc="" bounds="[0,100][1080,900]">
      <node index="0" text="Hello world" resource-id="{PKG}:id/username" class="android.widget.EditText" package="{PKG}" content-desc="" clickable="true" focusable="true" focused="true" long-clickable="true" selection-start="5" selection-end="2" bounds="[40,120][1040,220]" />
      <node index="1" text="" resource-id="{PKG}:id/password" class="android.widget.EditText" package="{PKG}" content-desc="" clickable="true" focusable="true" password="true" bounds="[40,240][1040,340]" />
      <node index="2" text="Sign in" resource-id="{PKG}:id/submit" class="android.widget.Button" package="{PKG}" content-desc="Submit form" clickable="true" focusable="true" bounds="[40,360][1040,460]" />
    </node>
    <node index="1" text="" resource-id="{PKG}:id/list" class="androidx.recyclerview.widget.RecyclerView" package="{PKG}" content-desc="" scrollable="true" focusable="true" bounds="[0,900][1080,2400]">
      <node index="0" text="" resource-id="{PKG}:id/row" class="android.widget.LinearLayout" package="{PKG}" content-desc="" clickable="true" bounds="[0,900][1080,1100]">
        <node index="0" text="Wi-Fi" resource-id="{PKG}:id/title" class="android.widget.TextView" package="{PKG}" content-desc="" bounds="[40,950][700,1050]" />
        <node index="1" text="" resource-id="{PKG}:id/toggle" class="android.widget.Switch" package="{PKG}" content-desc="" checkable="true" checked="true" clickable="true" bounds="[800,950][1040,1050]" />
      </node>
      <node index="1" text="" resource-id="{PKG}:id/row" class="android.widget.LinearLayout" package="{PKG}" content-desc="" clickable="true" bounds="[0,1100][1080,1300]">
        <node index="0" text="Bluetooth" resource-id="{PKG}:id/title" class="android.widget.TextView" package="{PKG}" content-desc="" bounds="[40,1150][700,1250]" />
        <node index="1" text="" resource-id="{PKG}:id/toggle" class="android.widget.Switch" package="{PKG}" content-desc="" checkable="true" checked="false" clickable="true" bounds="[800,1150][1040,1250]" />
      </node>
      <node index="2" text="" resource-id="{PKG}:id/row" class="android.widget.LinearLayout" package="{PKG}" content-desc="" clickable="true" bounds="[0,2300][1080,2600]">
        <node index="0" text="Hidden" resource-id="{PKG}:id/title" class="android.widget.TextView" package="{PKG}" content-desc="" visible-to-user="false" bounds="[40,2350][700,2450]" />
      </node>
    </node>
  </node>
</hierarchy>"""


def rid(name: str) -> str:
    return f"{PKG}:id/{name}"


@pytest.fixture()
def hierarchy():
    return UiHierarchy.from_xml(SETTINGS_XML)


@pytest.fixture()
def context(hierarchy):
    return build_context(hierarchy)


@pytest.fixture()
def dump_file(tmp_path):
    path = tmp_path / "window_dump.xml"
    path.write_text(SETTINGS_XML, encoding="utf-8")
    return path


@pytest.fixture()
def live(context):
    """Locate a live-view element by resource id name."""

    def _live(name: str, **criteria) -> LiveViewElement:
        selector = LiveSelector(resource_id=rid(name), **criteria)
        handle = context.device.find_object(selector)
        assert handle is not None, f"no live node for {name}"
        return LiveViewElement(handle, context, True, By(strategy="id", value=rid(name)))

    return _live


@pytest.fixture()
def replay(context):
    """Locate a selector-replay element by resource id name."""

    def _replay(name: str, **criteria) -> ReplayElement:
        selector = ReplaySelector(resource_id=rid(name), **criteria)
        handle = context.device.find_object(selector)
        assert handle is not None, f"no replay node for {name}"
        return ReplayElement(
            handle, context, True, By(strategy="-android uiautomator", value=selector.describe())
        )

    return _replay
