"""
Input validation for connector routing.

Provides reusable validators that produce clear error messages, both for
typed ``Point``/``Shape`` values handed to the router and for the JSON-ish
dicts received by the MCP server tools.
"""

from __future__ import annotations

import math
from typing import Any

from connector_router.models import Point, Shape


# ---------------------------------------------------------------------------
# Validation result
# ---------------------------------------------------------------------------

class ValidationError(Exception):
    """Raised when input validation fails."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


# ---------------------------------------------------------------------------
# Primitive validators
# ---------------------------------------------------------------------------

def validate_number(
    value: Any,
    field_name: str,
    *,
    min_val: float | None = None,
    max_val: float | None = None,
    finite: bool = True,
) -> float:
    """Validate a numeric value, its finiteness and optional range."""
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise ValidationError(
            f"'{field_name}' must be a number, got {type(value).__name__}."
        )
    val = float(value)
    if finite and not math.isfinite(val):
        raise ValidationError(
            f"'{field_name}' must be a finite number, got {val}."
        )
    if min_val is not None and val < min_val:
        raise ValidationError(
            f"'{field_name}' must be >= {min_val}, got {val}."
        )
    if max_val is not None and val > max_val:
        raise ValidationError(
            f"'{field_name}' must be <= {max_val}, got {val}."
        )
    return val


def validate_non_negative_number(value: Any, field_name: str) -> float:
    """Validate that a number is >= 0."""
    return validate_number(value, field_name, min_val=0)


def validate_dict(value: Any, field_name: str) -> dict:
    """Ensure *value* is a dict."""
    if not isinstance(value, dict):
        raise ValidationError(
            f"'{field_name}' must be a dict/object, got {type(value).__name__}."
        )
    return value


def validate_enum(value: Any, field_name: str, allowed: set[str]) -> str:
    """Validate that a string value is one of the allowed choices (case-insensitive)."""
    if not isinstance(value, str):
        raise ValidationError(
            f"'{field_name}' must be a string, got {type(value).__name__}."
        )
    normalized = value.strip().upper()
    if normalized not in {a.upper() for a in allowed}:
        choices = ", ".join(sorted(allowed))
        raise ValidationError(
            f"'{field_name}' must be one of [{choices}], got '{value}'."
        )
    return normalized


# ---------------------------------------------------------------------------
# Composite / domain validators
# ---------------------------------------------------------------------------

_ROUTE_ACTIONS = {"CONNECT", "TO_POINT", "AUTO"}
_INSPECT_ACTIONS = {"DIRECTION", "BOX", "VERTICES", "CONNECTION_POINTS"}

_SIDES = {"TOP", "RIGHT", "BOTTOM", "LEFT"}


def validate_action(value: Any, tool_name: str, allowed: set[str]) -> str:
    """Validate the action parameter for a tool."""
    if not isinstance(value, str) or not value.strip():
        choices = ", ".join(sorted(a.lower() for a in allowed))
        raise ValidationError(
            f"'{tool_name}' requires an 'action' parameter. Valid actions: {choices}."
        )
    normalized = value.strip().upper()
    if normalized not in allowed:
        choices = ", ".join(sorted(a.lower() for a in allowed))
        raise ValidationError(
            f"Unknown {tool_name} action '{value}'. Valid actions: {choices}."
        )
    return value.strip().lower()


def validate_side(value: Any, field_name: str) -> str:
    """Validate a connection-point side name (top, right, bottom, left)."""
    return validate_enum(value, field_name, _SIDES).lower()


def validate_point(point: Point, name: str) -> Point:
    """Reject points with non-finite coordinates."""
    validate_number(point.x, f"{name}.x")
    validate_number(point.y, f"{name}.y")
    return point


def validate_shape(shape: Shape, name: str) -> Shape:
    """Reject shapes whose geometry would propagate NaN through the router.

    Width and height must be finite and non-negative; position, rotation
    and scale must be finite.
    """
    validate_number(shape.x, f"{name}.x")
    validate_number(shape.y, f"{name}.y")
    validate_non_negative_number(shape.width, f"{name}.width")
    validate_non_negative_number(shape.height, f"{name}.height")
    validate_number(shape.rotation, f"{name}.rotation")
    validate_number(shape.scale_x, f"{name}.scale_x")
    validate_number(shape.scale_y, f"{name}.scale_y")
    return shape


# ---------------------------------------------------------------------------
# Tool input dict validators
# ---------------------------------------------------------------------------

def validate_point_dict(value: Any, field_name: str) -> Point:
    """Validate a ``{"x": .., "y": ..}`` dict and build a ``Point``."""
    d = validate_dict(value, field_name)
    for key in ("x", "y"):
        if key not in d:
            raise ValidationError(f"'{field_name}' missing required key '{key}'.")
    return validate_point(Point(d["x"], d["y"]), field_name)


def validate_shape_dict(value: Any, field_name: str) -> Shape:
    """Validate a shape dict and build a ``Shape``.

    Required keys: x, y, width, height. Optional: rotation, scale_x, scale_y.
    """
    d = validate_dict(value, field_name)
    for key in ("x", "y", "width", "height"):
        if key not in d:
            raise ValidationError(f"'{field_name}' missing required key '{key}'.")
    unknown = set(d) - {"x", "y", "width", "height", "rotation", "scale_x", "scale_y"}
    if unknown:
        raise ValidationError(
            f"'{field_name}' has unknown key(s): {', '.join(sorted(unknown))}."
        )
    # Type-check before the dataclass sees the values.
    for key, val in d.items():
        validate_number(val, f"{field_name}.{key}", finite=False)
    return validate_shape(Shape.from_dict(d), field_name)
