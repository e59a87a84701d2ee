"""
Geometry primitives for connector routing.

- Direction classification of a connection point relative to its owner
- Affine transform of rectangle vertices under rotation and scale
- Axis-aligned enclosing boxes and clearance margins
- Segment/segment and segment/box intersection tests
"""

from __future__ import annotations

import math

from connector_router.models import (
    BoxGeometry,
    Direction,
    Point,
    RectangleVertices,
    Shape,
)

# Clearance kept between routed segments and a shape's outline.
CONNECT_LINE_MARGIN = 20

EPSILON = 1e-6


# ---------------------------------------------------------------------------
# Scalar helpers
# ---------------------------------------------------------------------------

def closer(value: float, a: float, b: float) -> float:
    """Return whichever of *a* and *b* is nearer *value* (ties go to *b*)."""
    return a if abs(value - a) < abs(value - b) else b


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


# ---------------------------------------------------------------------------
# Direction classifier
# ---------------------------------------------------------------------------

def calc_radians(origin: Point, point: Point, eps: float = EPSILON) -> float:
    """Clockwise angle from 12 o'clock to ``point - origin``, in ``[0, 2π)``.

    Screen coordinates: Y grows downward, so "up" is decreasing Y.
    A zero vector yields 0 (straight up).
    """
    dx = point.x - origin.x
    dy = point.y - origin.y
    if abs(dx) <= eps and abs(dy) <= eps:
        return 0.0
    return math.atan2(dx, -dy) % (2 * math.pi)


def get_direction(radians: float) -> Direction:
    """Bucket an angle into a cardinal direction.

    Boundary degrees (45, 135, 225, 315) resolve toward UP/DOWN so ties
    favour vertical routing.
    """
    degrees = round_half_up(math.degrees(radians)) % 360
    if degrees <= 45 or degrees >= 315:
        return Direction.UP
    if degrees < 135:
        return Direction.RIGHT
    if degrees <= 225:
        return Direction.DOWN
    return Direction.LEFT


def get_line_direction(origin: Point, point: Point, eps: float = EPSILON) -> Direction:
    """Direction of *point* as seen from *origin* (UP when they coincide)."""
    return get_direction(calc_radians(origin, point, eps))


# ---------------------------------------------------------------------------
# Rectangle vertices / boxes
# ---------------------------------------------------------------------------

def affine_transform(
    local_x: float, local_y: float,
    scale_x: float, scale_y: float,
    radians: float,
    tx: float, ty: float,
) -> Point:
    """Scale, rotate about the origin, then translate a local coordinate."""
    cos_t = math.cos(radians)
    sin_t = math.sin(radians)
    return Point(
        scale_x * cos_t * local_x - scale_y * sin_t * local_y + tx,
        scale_x * sin_t * local_x + scale_y * cos_t * local_y + ty,
    )


def _midpoint(a: Point, b: Point) -> Point:
    return Point((a.x + b.x) / 2, (a.y + b.y) / 2)


def rectangle_vertices(shape: Shape) -> RectangleVertices:
    """Corners and edge midpoints of a rotated, scaled rectangle.

    Midpoints are averaged from the transformed corners rather than
    transformed themselves.
    """
    hw = shape.width / 2
    hh = shape.height / 2
    radians = math.radians(shape.rotation)

    def transform(lx: float, ly: float) -> Point:
        return affine_transform(
            lx, ly, shape.scale_x, shape.scale_y, radians, shape.x, shape.y,
        )

    top_left = transform(-hw, -hh)
    top_right = transform(hw, -hh)
    bottom_left = transform(-hw, hh)
    bottom_right = transform(hw, hh)

    return RectangleVertices(
        top_left=top_left,
        top_right=top_right,
        bottom_left=bottom_left,
        bottom_right=bottom_right,
        top_center=_midpoint(top_left, top_right),
        left_center=_midpoint(top_left, bottom_left),
        right_center=_midpoint(top_right, bottom_right),
        bottom_center=_midpoint(bottom_left, bottom_right),
    )


def outer_box(shape: Shape) -> BoxGeometry:
    """Axis-aligned box enclosing all four transformed corners of *shape*."""
    corners = rectangle_vertices(shape).corners
    xs = [p.x for p in corners]
    ys = [p.y for p in corners]
    return BoxGeometry(top=min(ys), left=min(xs), right=max(xs), bottom=max(ys))


def expand_box(box: BoxGeometry, margin: float = CONNECT_LINE_MARGIN) -> BoxGeometry:
    """Inflate *box* by *margin* on every side."""
    return BoxGeometry(
        top=box.top - margin,
        left=box.left - margin,
        right=box.right + margin,
        bottom=box.bottom + margin,
    )


def connection_points(shape: Shape) -> dict[str, Point]:
    """The four edge midpoints of *shape*, keyed by the unrotated side name."""
    v = rectangle_vertices(shape)
    return {
        "top": v.top_center,
        "right": v.right_center,
        "bottom": v.bottom_center,
        "left": v.left_center,
    }


# ---------------------------------------------------------------------------
# Intersection tests
# ---------------------------------------------------------------------------

def segments_intersect(p1: Point, p2: Point, p3: Point, p4: Point) -> bool:
    """Do segments p1-p2 and p3-p4 meet?

    Endpoints touching count as an intersection; parallel (including
    collinear) and zero-length segments never intersect.
    """
    rx, ry = p2.x - p1.x, p2.y - p1.y
    sx, sy = p4.x - p3.x, p4.y - p3.y
    denom = rx * sy - ry * sx
    if abs(denom) < 1e-12:
        return False
    qx, qy = p3.x - p1.x, p3.y - p1.y
    u = (qx * sy - qy * sx) / denom
    v = (qx * ry - qy * rx) / denom
    return 0 <= u <= 1 and 0 <= v <= 1


def segment_intersects_box(p1: Point, p2: Point, box: BoxGeometry) -> bool:
    """Liang-Barsky parametric clipping test: does segment p1-p2 touch *box*?"""
    dx = p2.x - p1.x
    dy = p2.y - p1.y

    t0, t1 = 0.0, 1.0
    for edge_p, edge_q in [
        (-dx, p1.x - box.left),
        (dx, box.right - p1.x),
        (-dy, p1.y - box.top),
        (dy, box.bottom - p1.y),
    ]:
        if abs(edge_p) < 1e-9:
            if edge_q < 0:
                return False
        else:
            t = edge_q / edge_p
            if edge_p < 0:
                t0 = max(t0, t)
            else:
                t1 = min(t1, t)
    return t0 <= t1


def is_collinear(p1: Point, p2: Point, p3: Point, eps: float = EPSILON) -> bool:
    """Cross-product collinearity test, tolerance relative to segment lengths."""
    ax, ay = p2.x - p1.x, p2.y - p1.y
    bx, by = p3.x - p2.x, p3.y - p2.y
    cross = ax * by - ay * bx
    scale = max(1.0, math.hypot(ax, ay) * math.hypot(bx, by))
    return abs(cross) <= eps * scale
