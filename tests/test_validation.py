"""Tests for input validation of routing values and MCP tool arguments."""

import json
import math

import pytest

from connector_router.models import Point, Shape
from connector_router.server import inspect, route
from connector_router.validation import (
    ValidationError,
    validate_action,
    validate_dict,
    validate_enum,
    validate_non_negative_number,
    validate_number,
    validate_point,
    validate_point_dict,
    validate_shape,
    validate_shape_dict,
    validate_side,
    _INSPECT_ACTIONS,
    _ROUTE_ACTIONS,
)


SHAPE = {"x": 0, "y": 0, "width": 100, "height": 100}


# ===================================================================
# Unit tests for primitive validators
# ===================================================================


class TestValidateNumber:
    def test_valid_int(self) -> None:
        assert validate_number(42, "n") == 42.0

    def test_valid_float(self) -> None:
        assert validate_number(3.14, "n") == 3.14

    def test_min_val(self) -> None:
        with pytest.raises(ValidationError, match=">="):
            validate_number(-1, "n", min_val=0)

    def test_max_val(self) -> None:
        with pytest.raises(ValidationError, match="<="):
            validate_number(200, "n", max_val=100)

    def test_not_a_number(self) -> None:
        with pytest.raises(ValidationError, match="number"):
            validate_number("abc", "n")

    def test_bool_rejected(self) -> None:
        with pytest.raises(ValidationError, match="got bool"):
            validate_number(True, "n")

    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
    def test_non_finite_rejected(self, value: float) -> None:
        with pytest.raises(ValidationError, match="finite"):
            validate_number(value, "n")

    def test_non_finite_allowed_when_asked(self) -> None:
        assert math.isinf(validate_number(math.inf, "n", finite=False))


class TestValidateNonNegative:
    def test_non_negative(self) -> None:
        assert validate_non_negative_number(0, "m") == 0
        with pytest.raises(ValidationError, match=">= 0"):
            validate_non_negative_number(-0.1, "m")


class TestValidateDictAndEnum:
    def test_dict(self) -> None:
        assert validate_dict({"a": 1}, "d") == {"a": 1}
        with pytest.raises(ValidationError, match="dict/object"):
            validate_dict([1], "d")

    def test_enum(self) -> None:
        assert validate_enum(" top ", "e", {"TOP", "LEFT"}) == "TOP"
        with pytest.raises(ValidationError, match="must be one of"):
            validate_enum("middle", "e", {"TOP", "LEFT"})


class TestValidateAction:
    def test_valid(self) -> None:
        assert validate_action("connect", "route", _ROUTE_ACTIONS) == "connect"

    def test_case_insensitive(self) -> None:
        assert validate_action("TO_POINT", "route", _ROUTE_ACTIONS) == "to_point"
        assert validate_action(" Box ", "inspect", _INSPECT_ACTIONS) == "box"

    def test_unknown_action(self) -> None:
        with pytest.raises(ValidationError, match="Unknown route action"):
            validate_action("bogus", "route", _ROUTE_ACTIONS)

    def test_empty_action(self) -> None:
        with pytest.raises(ValidationError, match="requires"):
            validate_action("", "inspect", _INSPECT_ACTIONS)


class TestValidateSide:
    def test_valid(self) -> None:
        assert validate_side("TOP", "side") == "top"
        assert validate_side("left", "side") == "left"

    def test_invalid(self) -> None:
        with pytest.raises(ValidationError, match="must be one of"):
            validate_side("middle", "side")


# ===================================================================
# Domain validators
# ===================================================================


class TestValidatePoint:
    def test_valid(self) -> None:
        p = Point(1, 2)
        assert validate_point(p, "start") is p

    def test_nan(self) -> None:
        with pytest.raises(ValidationError, match="'start.x'"):
            validate_point(Point(math.nan, 0), "start")


class TestValidateShape:
    def test_valid(self) -> None:
        s = Shape(0, 0, 0, 0, rotation=-45, scale_x=-1)
        assert validate_shape(s, "owner") is s

    @pytest.mark.parametrize(
        "shape, field",
        [
            (Shape(0, 0, -1, 10), "owner.width"),
            (Shape(0, 0, 10, math.nan), "owner.height"),
            (Shape(math.inf, 0, 10, 10), "owner.x"),
            (Shape(0, 0, 10, 10, rotation=math.nan), "owner.rotation"),
            (Shape(0, 0, 10, 10, scale_y=math.inf), "owner.scale_y"),
        ],
    )
    def test_rejected(self, shape: Shape, field: str) -> None:
        with pytest.raises(ValidationError, match=f"'{field}'"):
            validate_shape(shape, "owner")


class TestValidatePointDict:
    def test_valid(self) -> None:
        assert validate_point_dict({"x": 1, "y": 2.5}, "p") == Point(1, 2.5)

    def test_missing_key(self) -> None:
        with pytest.raises(ValidationError, match="missing required key 'y'"):
            validate_point_dict({"x": 1}, "p")

    def test_not_a_dict(self) -> None:
        with pytest.raises(ValidationError, match="dict/object"):
            validate_point_dict(None, "p")

    def test_string_coordinate(self) -> None:
        with pytest.raises(ValidationError, match="'p.x' must be a number"):
            validate_point_dict({"x": "1", "y": 2}, "p")


class TestValidateShapeDict:
    def test_valid_with_optionals(self) -> None:
        s = validate_shape_dict({**SHAPE, "rotation": 30, "scale_x": 2}, "s")
        assert s == Shape(0, 0, 100, 100, rotation=30, scale_x=2)

    def test_missing_key(self) -> None:
        with pytest.raises(ValidationError, match="missing required key 'height'"):
            validate_shape_dict({"x": 0, "y": 0, "width": 1}, "s")

    def test_unknown_key(self) -> None:
        with pytest.raises(ValidationError, match="unknown key"):
            validate_shape_dict({**SHAPE, "label": "A"}, "s")

    def test_negative_width(self) -> None:
        with pytest.raises(ValidationError, match="'s.width' must be >= 0"):
            validate_shape_dict({**SHAPE, "width": -5}, "s")

    def test_nan_height(self) -> None:
        with pytest.raises(ValidationError, match="'s.height' must be a finite"):
            validate_shape_dict({**SHAPE, "height": math.nan}, "s")


# ===================================================================
# Tool-level validation (errors come back as "Error: ..." strings)
# ===================================================================


class TestRouteValidation:
    def test_invalid_action(self) -> None:
        result = route(action="bogus", start_shape=SHAPE)
        assert result.startswith("Error:")
        assert "Unknown route action" in result

    def test_missing_start_shape(self) -> None:
        result = route(action="connect")
        assert "Error:" in result
        assert "start_shape" in result

    def test_negative_margin(self) -> None:
        result = route(action="auto", start_shape=SHAPE, end_shape=SHAPE, margin=-1)
        assert "Error:" in result
        assert "margin" in result

    def test_connect_missing_end_shape(self) -> None:
        result = route(
            action="connect", start_shape=SHAPE,
            start={"x": 50, "y": 0}, end={"x": 350, "y": 0},
        )
        assert "Error:" in result
        assert "end_shape" in result

    def test_to_point_missing_end(self) -> None:
        result = route(action="to_point", start_shape=SHAPE, start={"x": 50, "y": 0})
        assert "Error:" in result
        assert "'end'" in result

    def test_auto_bad_end_shape(self) -> None:
        result = route(action="auto", start_shape=SHAPE, end_shape={**SHAPE, "width": "wide"})
        assert "Error:" in result
        assert "end_shape.width" in result


class TestInspectValidation:
    def test_invalid_action(self) -> None:
        result = inspect(action="cells", shape=SHAPE)
        assert "Unknown inspect action" in result

    def test_direction_needs_point(self) -> None:
        result = inspect(action="direction", shape=SHAPE)
        assert "Error:" in result
        assert "point" in result

    def test_invalid_side(self) -> None:
        result = inspect(action="connection_points", shape=SHAPE, side="middle")
        assert "Error:" in result

    def test_valid_call_is_json(self) -> None:
        data = json.loads(inspect(action="box", shape=SHAPE))
        assert data["left"] == -50
