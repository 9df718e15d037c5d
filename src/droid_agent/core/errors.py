"""Exception hierarchy and exit codes."""

from __future__ import annotations

# Exit codes
EXIT_OK = 0
EXIT_GENERAL_ERROR = 1
EXIT_ELEMENT_NOT_FOUND = 2
EXIT_UNSUPPORTED_ATTRIBUTE = 3
EXIT_UNSUPPORTED_DRAG_TARGET = 4
EXIT_INVALID_COORDINATES = 5
EXIT_NATIVE_FAILURE = 6
EXIT_BAD_HIERARCHY = 7
EXIT_SCENARIO_FAILED = 8

_EXIT_DESCRIPTIONS = {
    EXIT_OK: "Success",
    EXIT_GENERAL_ERROR: "General error",
    EXIT_ELEMENT_NOT_FOUND: "UI element not found",
    EXIT_UNSUPPORTED_ATTRIBUTE: "Attribute name is not recognized",
    EXIT_UNSUPPORTED_DRAG_TARGET: "Drag destination is not a supported element",
    EXIT_INVALID_COORDINATES: "Coordinates fall outside the display",
    EXIT_NATIVE_FAILURE: "Accessibility call failed or the element went stale",
    EXIT_BAD_HIERARCHY: "UI hierarchy dump could not be parsed",
    EXIT_SCENARIO_FAILED: "Scenario definition is invalid or a step failed",
}


def exit_description(code: int) -> str:
    """Return a human-readable description for *code*."""
    return _EXIT_DESCRIPTIONS.get(code, f"Unknown error (code {code})")


class DroidAgentError(Exception):
    """Base exception; carries an exit code and an actionable message."""

    def __init__(self, message: str, exit_code: int = EXIT_GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


class UnsupportedAttributeError(DroidAgentError):
    """Raised when an attribute name does not map to a known attribute."""

    def __init__(self, name: str, supported: list[str] | None = None):
        hint = "  Hint: Run `droid-agent attributes` to list the accepted names."
        if supported:
            hint = f"  Hint: Use one of: {', '.join(supported)}."
        msg = f"Unsupported attribute '{name}'.\n{hint}"
        super().__init__(msg, EXIT_UNSUPPORTED_ATTRIBUTE)
        self.name = name


class NativeOperationError(DroidAgentError):
    """The underlying accessibility call failed."""

    def __init__(self, message: str, exit_code: int = EXIT_NATIVE_FAILURE):
        super().__init__(message, exit_code)


class StaleElementError(NativeOperationError):
    """The native handle no longer points at a node in the live tree."""

    def __init__(self, description: str):
        hint = "  Hint: Locate the element again; the screen changed since it was found."
        super().__init__(f"Stale element: {description}.\n{hint}")
        self.description = description


class ObjectNotFoundError(NativeOperationError):
    """A replayed selector no longer matches any node."""

    def __init__(self, selector: str):
        hint = (
            f"  Hint: Selector '{selector}' matched nothing when replayed."
            " Wait for the screen to settle before acting."
        )
        super().__init__(f"UI object not found: '{selector}'.\n{hint}")
        self.selector = selector


class UnsupportedDragTargetError(DroidAgentError):
    """Raised when a drag destination cannot supply a centre point."""

    def __init__(self, target_type: str):
        hint = "  Hint: Drag to a located element or to explicit coordinates."
        msg = (
            f"Unsupported drag destination of type '{target_type}'."
            f" Destination should be either a live-view or a selector-replay element.\n{hint}"
        )
        super().__init__(msg, EXIT_UNSUPPORTED_DRAG_TARGET)
        self.target_type = target_type


class InvalidCoordinatesError(DroidAgentError):
    """Raised when a point maps outside the display."""

    def __init__(self, x: float, y: float, width: int, height: int):
        hint = f"  Hint: Coordinates must lie within the {width}x{height} display."
        msg = f"Invalid coordinates ({x}, {y}).\n{hint}"
        super().__init__(msg, EXIT_INVALID_COORDINATES)
        self.x = x
        self.y = y


class HierarchyParseError(DroidAgentError):
    """A UI hierarchy dump is malformed."""

    def __init__(self, reason: str):
        hint = "  Hint: Capture the dump with `adb shell uiautomator dump`."
        super().__init__(f"Cannot parse UI hierarchy: {reason}.\n{hint}", EXIT_BAD_HIERARCHY)
        self.reason = reason


class ElementNotFoundError(DroidAgentError):
    """Raised when a locator matches no element."""

    def __init__(self, selector: str):
        hint = f"  Hint: Verify the locator '{selector}' against a fresh hierarchy dump."
        msg = f"Element not found: no element matched '{selector}'.\n{hint}"
        super().__init__(msg, EXIT_ELEMENT_NOT_FOUND)
        self.selector = selector


class ScenarioError(DroidAgentError):
    """Scenario definition or execution error."""

    def __init__(self, message: str):
        super().__init__(message, EXIT_SCENARIO_FAILED)
