"""
Connector Router MCP Server — orthogonal connector routing via Model Context Protocol.

Exposes 2 tools that let an LLM agent (or any MCP client) route connectors
between diagram shapes without a drawing application.

Tools:
  1. route    — paths: connect two shapes, route to a free point, auto-pick ports
  2. inspect  — read-only: exit direction, bounding box, vertices, connection points
"""

from __future__ import annotations

import json
import logging

from mcp.server.fastmcp import FastMCP

from connector_router.geometry import (
    connection_points,
    get_line_direction,
    outer_box,
    rectangle_vertices,
)
from connector_router.models import Point
from connector_router.routing import (
    RoutingConfig,
    compute_connector_path,
    nearest_connection_points,
    route_to_point,
)
from connector_router.validation import (
    ValidationError,
    validate_action,
    validate_non_negative_number,
    validate_point_dict,
    validate_shape_dict,
    validate_side,
    _INSPECT_ACTIONS,
    _ROUTE_ACTIONS,
)

# ---------------------------------------------------------------------------
# Logging — suppress routine FastMCP INFO messages that editors surface
# as warnings (they go to stderr).
# ---------------------------------------------------------------------------
logging.getLogger("mcp.server").setLevel(logging.WARNING)
logger = logging.getLogger("connector-router")

# ---------------------------------------------------------------------------
# MCP Server
# ---------------------------------------------------------------------------
mcp = FastMCP(
    "connector-router",
    instructions=(
        "MCP server computing orthogonal connector paths between shapes.\n\n"
        "=== ONLY 2 TOOLS — use the 'action' parameter to pick the operation ===\n\n"
        "1. route(action, ...) — connect, to_point, auto.\n"
        "2. inspect(action, ...) — direction, box, vertices, connection_points.\n\n"
        "=== CONVENTIONS ===\n"
        "- Shapes are CENTRE based: {x, y, width, height, rotation, scale_x, scale_y}.\n"
        "- rotation is in degrees, clockwise on screen (Y grows downward).\n"
        "- Points are {x, y} in the same page coordinates as the shapes.\n"
        "- Returned paths are JSON lists of {x, y}; draw them as a polyline.\n"
    ),
)


# ===================================================================
# RESOURCES
# ===================================================================

@mcp.resource("router://guide")
def routing_guide() -> str:
    """Return a short description of how connectors are routed."""
    return _GUIDE


_GUIDE = """\
# Connector routing guide

A connector leaves its start shape from the side its connection point faces
(measured from the shape centre; 45° boundaries resolve to up/down), clears
the shape by the configured margin (default 20), and meets the end shape's
leg at one of a few candidate elbow points. Candidates come from the two
shapes' exit points and the midpoint between the shapes' facing sides,
expanded into a small grid.

Among paths that do not cross either shape, the router picks the shortest
(Manhattan length), then the one with fewer turns, then the one through the
midpoint. If every candidate crosses a shape, the best crossing path is
returned instead.

Only the two endpoint shapes are obstacles; other shapes are ignored.

## Recipes
- Connect two known points: route(action='connect', start=..., start_shape=...,
  end=..., end_shape=...)
- Let the router choose the ports: route(action='auto', start_shape=..., end_shape=...)
- Preview while dragging: route(action='to_point', start=..., start_shape=..., end=...)
"""


# ===================================================================
# TOOL 1: route — compute connector paths
# ===================================================================

@mcp.tool()
def route(
    action: str,
    start_shape: dict | None = None,
    end_shape: dict | None = None,
    start: dict | None = None,
    end: dict | None = None,
    margin: float = 20,
) -> str:
    """Compute orthogonal connector paths.

    Actions:
      connect  — Route between two connection points. Params: start, start_shape,
                 end, end_shape, margin.
      to_point — Route from a connection point to a free point (no end shape).
                 Params: start, start_shape, end, margin.
      auto     — Pick the closest pair of edge-midpoint ports and route between
                 them. Params: start_shape, end_shape, margin.

    Args:
        action: One of: connect, to_point, auto.
        start_shape: Shape dict {x, y, width, height, rotation?, scale_x?, scale_y?}.
        end_shape: Shape dict for the end (connect / auto).
        start: Start point dict {x, y}.
        end: End point dict {x, y}.
        margin: Clearance kept between the connector and the shapes.

    Returns:
        JSON list of {x, y} points, or an "Error: ..." string.
    """
    try:
        action = validate_action(action, "route", _ROUTE_ACTIONS)
        config = RoutingConfig(margin=validate_non_negative_number(margin, "margin"))
        src_shape = validate_shape_dict(start_shape, "start_shape")
    except ValidationError as exc:
        return f"Error: {exc.message}"

    if action == "connect":
        try:
            src = validate_point_dict(start, "start")
            dst = validate_point_dict(end, "end")
            dst_shape = validate_shape_dict(end_shape, "end_shape")
            path = compute_connector_path(src, src_shape, dst, dst_shape, config)
        except ValidationError as exc:
            return f"Error: {exc.message}"
        return _path_json(path)

    if action == "to_point":
        try:
            src = validate_point_dict(start, "start")
            dst = validate_point_dict(end, "end")
            path = route_to_point(src, src_shape, dst, config)
        except ValidationError as exc:
            return f"Error: {exc.message}"
        return _path_json(path)

    # auto
    try:
        dst_shape = validate_shape_dict(end_shape, "end_shape")
    except ValidationError as exc:
        return f"Error: {exc.message}"
    (src_side, src), (dst_side, dst) = nearest_connection_points(src_shape, dst_shape)
    logger.debug("auto ports: %s -> %s", src_side, dst_side)
    path = compute_connector_path(src, src_shape, dst, dst_shape, config)
    return json.dumps({
        "start_side": src_side,
        "end_side": dst_side,
        "points": [p.to_dict() for p in path],
    })


# ===================================================================
# TOOL 2: inspect — read-only geometry queries
# ===================================================================

@mcp.tool()
def inspect(
    action: str,
    shape: dict | None = None,
    point: dict | None = None,
    side: str = "",
) -> str:
    """Read-only geometry queries on a single shape.

    Actions:
      direction         — Side a connector from point leaves the shape. Params: shape, point.
      box               — Axis-aligned bounding box of the (rotated) shape. Params: shape.
      vertices          — Rotated corners and edge midpoints. Params: shape.
      connection_points — Edge-midpoint ports, optionally one side only.
                          Params: shape, side (top, right, bottom, left).

    Args:
        action: One of: direction, box, vertices, connection_points.
        shape: Shape dict {x, y, width, height, rotation?, scale_x?, scale_y?}.
        point: Point dict {x, y} for the direction action.
        side: Optional side filter for connection_points.

    Returns:
        JSON data or an "Error: ..." string.
    """
    try:
        action = validate_action(action, "inspect", _INSPECT_ACTIONS)
        s = validate_shape_dict(shape, "shape")
    except ValidationError as exc:
        return f"Error: {exc.message}"

    if action == "direction":
        try:
            p = validate_point_dict(point, "point")
        except ValidationError as exc:
            return f"Error: {exc.message}"
        return json.dumps({"direction": get_line_direction(s.center, p).value})

    if action == "box":
        box = outer_box(s)
        return json.dumps({
            "top": box.top,
            "left": box.left,
            "right": box.right,
            "bottom": box.bottom,
            "center": box.center.to_dict(),
        })

    if action == "vertices":
        v = rectangle_vertices(s)
        return json.dumps({
            name: getattr(v, name).to_dict()
            for name in (
                "top_left", "top_right", "bottom_left", "bottom_right",
                "top_center", "left_center", "right_center", "bottom_center",
            )
        })

    # connection_points
    ports = connection_points(s)
    if side:
        try:
            wanted = validate_side(side, "side")
        except ValidationError as exc:
            return f"Error: {exc.message}"
        return json.dumps({wanted: ports[wanted].to_dict()})
    return json.dumps({name: p.to_dict() for name, p in ports.items()})


# ===================================================================
# Helpers
# ===================================================================

def _path_json(path: list[Point]) -> str:
    return json.dumps([p.to_dict() for p in path])


# ===================================================================
# Entry point
# ===================================================================

def main() -> None:
    """Run the MCP server."""
    mcp.run()


if __name__ == "__main__":
    main()
