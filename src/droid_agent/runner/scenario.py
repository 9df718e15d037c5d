"""Scenario runner: YAML-defined element operations with expectations.

Example::

    id: wifi-toggle
    title: Drag the Wi-Fi toggle
    profile: emulator
    steps:
      - action: get_attribute
        selector: {resource_id: "com.android.settings:id/title", text: "Wi-Fi"}
        args: {name: enabled}
        expected:
          - {type: equals, value: "true"}
      - action: children
        selector: {kind: replay, resource_id: "com.android.settings:id/list"}
        args: {child: {kind: live, class_name: android.widget.Switch}}
        expected:
          - {type: count, value: 2}
      - action: drag
        selector: {class_name: android.widget.Switch}
        args: {x: 0.5, y: 0.9}

Selectors default to ``kind: live``.
"""

from __future__ import annotations

import logging
import pathlib
from dataclasses import dataclass, field
from typing import Any

import yaml
from pydantic import ValidationError

from droid_agent.a11y.element import AndroidElement, locate
from droid_agent.a11y.handles import DeviceContext
from droid_agent.a11y.selector import By, parse_selector
from droid_agent.constants import DEFAULT_DRAG_STEPS
from droid_agent.core.errors import DroidAgentError, ScenarioError
from droid_agent.runner.logging import StepLogger

logger = logging.getLogger(__name__)

ACTIONS = ("get_attribute", "children", "clear", "drag", "drag_to")


@dataclass
class ScenarioStep:
    action: str
    selector: dict[str, Any] = field(default_factory=dict)
    args: dict[str, Any] = field(default_factory=dict)
    expected: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class Scenario:
    id: str
    title: str
    profile: str = ""
    steps: list[ScenarioStep] = field(default_factory=list)

    @classmethod
    def from_yaml(cls, text: str, default_id: str = "scenario") -> Scenario:
        try:
            raw = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ScenarioError(f"Invalid scenario YAML: {exc}") from exc
        if not isinstance(raw, dict):
            raise ScenarioError("Scenario must be a mapping with a 'steps' list")
        steps = []
        for i, s in enumerate(raw.get("steps") or [], start=1):
            if not isinstance(s, dict) or "action" not in s:
                raise ScenarioError(f"Step {i} has no 'action'")
            steps.append(ScenarioStep(
                action=s["action"],
                selector=s.get("selector") or {},
                args=s.get("args") or {},
                expected=s.get("expected") or [],
            ))
        return cls(
            id=str(raw.get("id", default_id)),
            title=raw.get("title", default_id),
            profile=raw.get("profile", ""),
            steps=steps,
        )

    @classmethod
    def from_file(cls, path: str | pathlib.Path) -> Scenario:
        path = pathlib.Path(path)
        return cls.from_yaml(path.read_text(encoding="utf-8"), default_id=path.stem)


class AssertionResult:
    __slots__ = ("passed", "message", "expected", "actual")

    def __init__(self, passed: bool, message: str, expected: Any = None, actual: Any = None):
        self.passed = passed
        self.message = message
        self.expected = expected
        self.actual = actual

    def to_dict(self) -> dict[str, Any]:
        return {
            "passed": self.passed,
            "message": self.message,
            "expected": self.expected,
            "actual": self.actual,
        }


def check_expectation(actual: Any, expectation: dict[str, Any]) -> AssertionResult:
    """Compare a step's outcome against one ``expected`` entry."""
    kind = expectation.get("type")
    expected = expectation.get("value")

    if kind == "equals":
        ok = actual == expected
        msg = f"equals: {actual!r} == {expected!r}" if ok else "equals failed"
        return AssertionResult(ok, msg, expected=expected, actual=actual)

    if kind == "contains":
        ok = isinstance(actual, (str, list)) and str(expected) in actual
        msg = f"contains: {expected!r} in {actual!r}" if ok else "contains failed"
        return AssertionResult(ok, msg, expected=expected, actual=actual)

    if kind == "count":
        count = len(actual) if isinstance(actual, list) else 0
        ok = count == expected
        msg = f"count: {count} == {expected}" if ok else "count failed"
        return AssertionResult(ok, msg, expected=expected, actual=count)

    if kind == "is_none":
        ok = actual is None
        return AssertionResult(ok, "is_none" if ok else "is_none failed", expected=None, actual=actual)

    raise ScenarioError(f"Unknown expectation type: {kind!r}")


@dataclass
class ScenarioResult:
    scenario_id: str
    passed: bool
    steps_run: int
    failures: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "scenario_id": self.scenario_id,
            "passed": self.passed,
            "steps_run": self.steps_run,
            "failures": self.failures,
        }


def run_scenario(
    scenario: Scenario,
    context: DeviceContext,
    journal: StepLogger | None = None,
    default_steps: int = DEFAULT_DRAG_STEPS,
) -> ScenarioResult:
    """Execute *scenario* against *context*; stops at the first failing step."""
    logger.info("Running scenario '%s' (%d steps)", scenario.id, len(scenario.steps))
    result = ScenarioResult(scenario_id=scenario.id, passed=True, steps_run=0)

    for step, scenario_step in enumerate(scenario.steps, start=1):
        result.steps_run = step
        action = scenario_step.action
        args = {**scenario_step.args, "selector": scenario_step.selector}

        try:
            actual = _run_action(context, scenario_step, default_steps)
        except DroidAgentError as exc:
            if journal:
                journal.log_step(action, args, error=str(exc))
            logger.warning("Step %d (%s) failed: %s", step, action, exc)
            result.passed = False
            result.failures.append({"step": step, "action": action, "error": str(exc)})
            break
        if journal:
            journal.log_step(action, args, result=actual)

        for exp in scenario_step.expected:
            outcome = check_expectation(actual, exp)
            if not outcome.passed:
                result.passed = False
                result.failures.append({
                    "step": step,
                    "assertion": exp.get("type"),
                    **outcome.to_dict(),
                })

        if not result.passed:
            break

    return result


def _selector(data: dict[str, Any]):
    try:
        return parse_selector({"kind": "live", **data})
    except ValidationError as exc:
        raise ScenarioError(f"Invalid selector {data!r}: {exc}") from exc


def _run_action(context: DeviceContext, scenario_step: ScenarioStep, default_steps: int) -> Any:
    action = scenario_step.action
    args = scenario_step.args
    if action not in ACTIONS:
        raise ScenarioError(f"Unknown action: {action}")

    element = locate(context, _selector(scenario_step.selector))
    steps = args.get("steps", default_steps)

    if action == "get_attribute":
        if "name" not in args:
            raise ScenarioError("get_attribute needs args.name")
        return element.get_attribute(args["name"])
    if action == "children":
        child = _selector(args.get("child") or {})
        found = _children(element, child, bool(args.get("first")))
        attr = args.get("attribute", "text")
        return [c.get_attribute(attr) for c in found]
    if action == "clear":
        element.clear()
        return None
    if action == "drag":
        if "x" not in args or "y" not in args:
            raise ScenarioError("drag needs args.x and args.y")
        return element.drag_to_coordinates(args["x"], args["y"], steps)
    # drag_to
    target = locate(context, _selector(args.get("target") or {}))
    return element.drag_to(target, steps)


def _children(element: AndroidElement, selector, first: bool) -> list[AndroidElement]:
    if first:
        child = element.get_child(selector)
        return [child] if child is not None else []
    return element.get_children(selector, By(strategy="selector", value=selector.describe()))
