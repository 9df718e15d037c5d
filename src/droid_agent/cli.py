"""CLI entry point: click commands over uiautomator dumps."""

from __future__ import annotations

import json
import sys
from typing import Any, Callable

import click

from droid_agent import __version__
from droid_agent.core.errors import EXIT_GENERAL_ERROR, DroidAgentError

_CRITERIA_OPTIONS = (
    ("class", "class_name", "Class name, e.g. android.widget.Button"),
    ("resource-id", "resource_id", "Full resource id, e.g. com.app:id/ok"),
    ("text", "text", "Exact text"),
    ("desc", "content_desc", "Exact content description"),
)


def _criteria_options(prefix: str = "", noun: str = "element"):
    """Attach --class/--resource-id/--text/--desc options (optionally prefixed)."""

    def decorator(f):
        for opt, dest, help_text in reversed(_CRITERIA_OPTIONS):
            f = click.option(
                f"--{prefix}{opt}",
                f"{prefix.replace('-', '_')}{dest}",
                default=None,
                help=f"{help_text} ({noun}).",
            )(f)
        return f

    return decorator


def _pick(kwargs: dict[str, Any], prefix: str = "") -> dict[str, Any]:
    out = {}
    for _, dest, _ in _CRITERIA_OPTIONS:
        value = kwargs.get(f"{prefix}{dest}")
        if value is not None:
            out[dest] = value
    return out


def _run(ctx: click.Context, action: str, args: dict[str, Any], fn: Callable[[], Any]) -> Any:
    """Run *fn*, journal the outcome, and map errors to exit codes."""
    journal = ctx.obj.get("journal") if ctx.obj else None
    try:
        result = fn()
    except DroidAgentError as exc:
        if journal:
            journal.log_step(action, args, error=str(exc))
        click.echo(str(exc), err=True)
        sys.exit(exc.exit_code)
    if journal:
        journal.log_step(action, args, result=result)
    return result


def _locate(dump: str, criteria: dict[str, Any], replay: bool, profile: str | None = None):
    """Load *dump* and locate the first element matching *criteria*."""
    from droid_agent.a11y.element import locate
    from droid_agent.a11y.selector import LiveSelector, ReplaySelector

    hierarchy, context = _load_dump(dump, profile)
    selector = ReplaySelector(**criteria) if replay else LiveSelector(**criteria)
    return hierarchy, locate(context, selector)


def _load_dump(dump: str, profile: str | None = None):
    from droid_agent.a11y.hierarchy import UiHierarchy, build_context
    from droid_agent.a11y.positioning import DisplayPositionMapper

    hierarchy = UiHierarchy.from_file(dump)
    mapper = None
    if profile:
        mapper = DisplayPositionMapper.from_config(_load_profile(profile).display)
    return hierarchy, build_context(hierarchy, mapper)


def _load_profile(name: str):
    from droid_agent.config import ProfileStore

    prof = ProfileStore().get(name)
    if prof is None:
        click.echo(f"Profile '{name}' not found", err=True)
        sys.exit(EXIT_GENERAL_ERROR)
    return prof


@click.group()
@click.version_option(__version__, prog_name="droid-agent")
@click.option(
    "--journal",
    "journal_path",
    default=None,
    metavar="FILE",
    help="Append a JSON line per command to FILE.",
)
@click.pass_context
def main(ctx, journal_path):
    """Android element automation over uiautomator hierarchy dumps."""
    ctx.ensure_object(dict)
    if journal_path:
        from droid_agent.runner.logging import StepLogger

        journal = StepLogger(journal_path, echo=False)
        journal.open()
        ctx.obj["journal"] = journal
        ctx.call_on_close(journal.close)


# ── init ──────────────────────────────────────────────────────────

@main.command()
def init():
    """Create a profiles.json template."""
    from droid_agent.config import ProfileStore

    store = ProfileStore()
    store.ensure_default()
    click.echo(f"Created {store.path}")


# ── attributes ────────────────────────────────────────────────────

@main.command()
def attributes():
    """List the attribute names get-attribute accepts."""
    from droid_agent.a11y.attributes import AttributeKind

    for kind in AttributeKind:
        click.echo(f"  {kind.value:<16} {', '.join(kind.aliases[1:])}".rstrip())


@main.command("get-attribute")
@click.argument("dump", type=click.Path(exists=True, dir_okay=False))
@click.argument("name")
@_criteria_options()
@click.option("--replay", is_flag=True, help="Locate as a selector-replay element.")
@click.pass_context
def get_attribute(ctx, dump, name, replay, **kwargs):
    """Print attribute NAME of the first element in DUMP matching the options."""
    criteria = _pick(kwargs)

    def _do():
        _, element = _locate(dump, criteria, replay)
        return element.get_attribute(name)

    value = _run(ctx, "get_attribute", {"name": name, **criteria}, _do)
    click.echo("(none)" if value is None else value)


# ── children ──────────────────────────────────────────────────────

@main.command()
@click.argument("dump", type=click.Path(exists=True, dir_okay=False))
@_criteria_options()
@_criteria_options(prefix="child-", noun="child")
@click.option("--replay", is_flag=True, help="Locate the parent as a selector-replay element.")
@click.option(
    "--child-kind",
    type=click.Choice(["live", "replay"]),
    default="live",
    show_default=True,
    help="Selector kind used for the child search.",
)
@click.option("--first", is_flag=True, help="Only the first matching child.")
@click.pass_context
def children(ctx, dump, replay, child_kind, first, **kwargs):
    """List descendants of an element in DUMP."""
    from droid_agent.a11y.selector import By, parse_selector

    criteria = _pick(kwargs)
    child_criteria = _pick(kwargs, prefix="child_")
    selector = parse_selector({"kind": child_kind, **child_criteria})
    by = By(strategy="selector", value=selector.describe())

    def _do():
        _, element = _locate(dump, criteria, replay)
        if first:
            child = element.get_child(selector)
            found = [child] if child is not None else []
        else:
            found = element.get_children(selector, by)
        return [
            {
                "variant": type(c).__name__,
                "class": c.get_attribute("class"),
                "resource-id": c.get_attribute("resource-id"),
                "text": c.get_attribute("text"),
                "bounds": c.get_attribute("bounds"),
            }
            for c in found
        ]

    rows = _run(ctx, "children", {"selector": selector.describe(), **criteria}, _do)
    if not rows:
        click.echo("No matching children.")
        return
    for row in rows:
        click.echo(json.dumps(row, ensure_ascii=False))


# ── drag ──────────────────────────────────────────────────────────

@main.command()
@click.argument("dump", type=click.Path(exists=True, dir_okay=False))
@_criteria_options()
@click.option("--replay", is_flag=True, help="Locate as a selector-replay element.")
@click.option("--x", "x", required=True, type=float, help="Destination x (pixels or 0-1 fraction).")
@click.option("--y", "y", required=True, type=float, help="Destination y (pixels or 0-1 fraction).")
@click.option("--steps", default=None, type=int, help="Gesture steps (default from profile).")
@click.option("--profile", default=None, help="Device profile for display size and defaults.")
@click.pass_context
def drag(ctx, dump, replay, x, y, steps, profile, **kwargs):
    """Drag an element in DUMP to a point and print the issued gesture."""
    from droid_agent.constants import DEFAULT_DRAG_STEPS

    criteria = _pick(kwargs)
    if steps is None:
        steps = _load_profile(profile).drag.default_steps if profile else DEFAULT_DRAG_STEPS

    def _do():
        hierarchy, element = _locate(dump, criteria, replay, profile)
        element.drag_to_coordinates(x, y, steps)
        return hierarchy.gestures[-1]

    gesture = _run(ctx, "drag", {"x": x, "y": y, "steps": steps, **criteria}, _do)
    click.echo(json.dumps(gesture))


# ── scenario ──────────────────────────────────────────────────────

@main.command("run")
@click.argument("scenario_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("dump", type=click.Path(exists=True, dir_okay=False))
@click.option("--profile", default=None, help="Override the scenario's profile.")
@click.pass_context
def run_scenario_cmd(ctx, scenario_file, dump, profile):
    """Run the steps of SCENARIO_FILE (YAML) against DUMP."""
    from droid_agent.constants import DEFAULT_DRAG_STEPS
    from droid_agent.core.errors import EXIT_SCENARIO_FAILED
    from droid_agent.runner.scenario import Scenario, run_scenario

    scenario_obj = _run(ctx, "load_scenario", {"file": scenario_file},
                        lambda: Scenario.from_file(scenario_file))
    profile = profile or scenario_obj.profile or None
    steps = _load_profile(profile).drag.default_steps if profile else DEFAULT_DRAG_STEPS

    def _do():
        _, context = _load_dump(dump, profile)
        journal = ctx.obj.get("journal") if ctx.obj else None
        return run_scenario(scenario_obj, context, journal=journal, default_steps=steps)

    click.echo(f"Running scenario '{scenario_obj.id}'...")
    result = _run(ctx, "run_scenario", {"scenario": scenario_obj.id}, _do)
    if result.passed:
        click.echo(f"PASSED ({result.steps_run} steps)")
        return
    click.echo(f"FAILED at step {result.steps_run}")
    for f in result.failures:
        click.echo(f"  - {json.dumps(f, ensure_ascii=False)}")
    sys.exit(EXIT_SCENARIO_FAILED)


# ── profiles ──────────────────────────────────────────────────────

@main.group()
def profiles():
    """Manage device profiles."""
    pass


@profiles.command("list")
def profiles_list():
    """List all profiles."""
    from droid_agent.config import ProfileStore

    for p in ProfileStore().list():
        click.echo(f"  {p.name}")
        if p.serial:
            click.echo(f"    serial: {p.serial}")
        click.echo(f"    display: {p.display.width}x{p.display.height}")
        click.echo(f"    drag steps: {p.drag.default_steps}")


@profiles.command("add")
@click.option("--name", required=True, help="Profile name")
@click.option("--serial", default=None, help="adb serial of the device")
@click.option("--width", default=None, type=int, help="Display width in pixels")
@click.option("--height", default=None, type=int, help="Display height in pixels")
@click.option("--steps", default=None, type=int, help="Default drag steps")
def profiles_add(name, serial, width, height, steps):
    """Add a new profile."""
    from droid_agent.config import DeviceProfile, DisplayConfig, DragConfig, ProfileStore

    size = {k: v for k, v in (("width", width), ("height", height)) if v is not None}
    try:
        display = DisplayConfig(**size)
        drag_cfg = DragConfig(default_steps=steps) if steps is not None else DragConfig()
        profile = DeviceProfile(name=name, serial=serial, display=display, drag=drag_cfg)
        ProfileStore().add(profile)
    except ValueError as exc:
        click.echo(str(exc), err=True)
        sys.exit(EXIT_GENERAL_ERROR)
    click.echo(f"Added profile '{name}'")


@profiles.command("remove")
@click.argument("name")
def profiles_remove(name):
    """Remove a profile."""
    from droid_agent.config import ProfileStore

    if ProfileStore().remove(name):
        click.echo(f"Removed profile '{name}'")
    else:
        click.echo(f"Profile '{name}' not found", err=True)
