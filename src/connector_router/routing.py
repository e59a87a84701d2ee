"""
Automatic orthogonal connector routing between two shapes.

Pipeline for one connector:
1. Classify which side each connection point leaves its owner from
2. Seed a handful of candidate waypoints and cross-expand them into a grid
3. For every candidate, build a leg from each endpoint and join them
4. Sort the joined paths into clean and shape-crossing pools
5. Pick the shortest, least-bent, best-centred path and simplify it

Only the two endpoint shapes are treated as obstacles. Every call is a
pure recomputation from the current geometry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from connector_router.geometry import (
    CONNECT_LINE_MARGIN,
    EPSILON,
    closer,
    connection_points,
    expand_box,
    get_line_direction,
    is_collinear,
    outer_box,
    round_half_up,
    segment_intersects_box,
    segments_intersect,
)
from connector_router.models import (
    BoxGeometry,
    Direction,
    GridPoint,
    Point,
    Shape,
    along,
    cross_coord,
    distance,
    main_coord,
    manhattan_distance,
)
from connector_router.validation import validate_point, validate_shape

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@dataclass
class RoutingConfig:
    """Configuration for connector routing."""
    margin: float = CONNECT_LINE_MARGIN   # Clearance between segments and shapes
    epsilon: float = EPSILON              # Tolerance for point/collinearity tests
    round_mid_point: bool = True          # Snap the preferred midpoint to whole units


DEFAULT_CONFIG = RoutingConfig()


# ---------------------------------------------------------------------------
# Single-shape leg
# ---------------------------------------------------------------------------

def build_leg(
    start: Point,
    direction: Direction,
    owner_box: BoxGeometry,
    target: Point,
    margin: float = CONNECT_LINE_MARGIN,
    eps: float = EPSILON,
) -> list[Point]:
    """Route from a connection point out of its owner toward *target*.

    The leg leaves *start* along *direction* to the owner's clearance box,
    then heads for *target*.  Coordinates are handled as "main" (the axis
    of *direction*) and "cross" (the other axis), so one code path serves
    all four directions.

    If the target lies behind the exit side, the leg runs along that side
    instead of doubling back.  If the final stretch would still cut through
    the clearance box it is pushed out to the nearer box side, and when it
    would pass clean through the far side too, the target is appended so
    the leg wraps around the shape.

    Returns 4 points, or 5 when the leg wraps around.  The last point is
    not necessarily *target* when the target sits inside the clearance box.
    """
    box = expand_box(owner_box, margin)

    p2 = along(direction, box.side(direction), cross_coord(direction, start))
    p3 = along(direction, main_coord(direction, target), cross_coord(direction, p2))

    # Target behind the exit side: slide along the side instead.
    if get_line_direction(p2, p3, eps) is not direction:
        p3 = along(direction, main_coord(direction, p2), cross_coord(direction, target))
    p4 = target

    near_a, near_b = box.edge(direction)
    far_a, far_b = box.edge(direction.opposite)
    crosses_near = segments_intersect(near_a, near_b, p3, p4)
    crosses_far = segments_intersect(far_a, far_b, p3, p4)

    if crosses_near:
        low, high = box.cross_bounds(direction)
        clamped = closer(cross_coord(direction, target), low, high)
        p3 = along(direction, main_coord(direction, p3), clamped)
        p4 = along(direction, main_coord(direction, target), clamped)

    leg = [start, p2, p3, p4]
    if crosses_far:
        leg.append(target)
    return leg


def second_route_point(
    point: Point,
    direction: Direction,
    owner_box: BoxGeometry,
    margin: float = CONNECT_LINE_MARGIN,
) -> GridPoint:
    """Where a leg from *point* meets its owner's clearance box."""
    box = expand_box(owner_box, margin)
    p2 = along(direction, box.side(direction), cross_coord(direction, point))
    return GridPoint(p2.x, p2.y)


# ---------------------------------------------------------------------------
# Candidate waypoint grid
# ---------------------------------------------------------------------------

def _grid_contains(grid: list[GridPoint], x: float, y: float, eps: float) -> bool:
    return any(abs(g.x - x) <= eps and abs(g.y - y) <= eps for g in grid)


def add_cross_point(
    grid: list[GridPoint],
    point: GridPoint,
    eps: float = EPSILON,
) -> None:
    """Add *point* to *grid* along with its crossings with existing points.

    Every existing point contributes the two intersections of its
    horizontal/vertical lines with those of *point*; crossings inherit the
    existing point's score.  Points already in the grid are skipped.
    """
    if _grid_contains(grid, point.x, point.y, eps):
        return

    for existing in list(grid):
        if abs(existing.x - point.x) > eps and not _grid_contains(grid, existing.x, point.y, eps):
            grid.append(GridPoint(existing.x, point.y, existing.score))
        if abs(existing.y - point.y) > eps and not _grid_contains(grid, point.x, existing.y, eps):
            grid.append(GridPoint(point.x, existing.y, existing.score))

    grid.append(point)


def preferred_mid_point(
    start_box: BoxGeometry,
    end_box: BoxGeometry,
    start_p2: GridPoint,
    end_p2: GridPoint,
    round_to_unit: bool = True,
) -> GridPoint:
    """Midpoint between the two shapes' facing sides, scored as a tie-break bonus.

    Per axis, each box contributes whichever of its sides is nearer the
    average of the two second route points.
    """
    avg_x = (start_p2.x + end_p2.x) / 2
    avg_y = (start_p2.y + end_p2.y) / 2

    x = (closer(avg_x, start_box.left, start_box.right)
         + closer(avg_x, end_box.left, end_box.right)) / 2
    y = (closer(avg_y, start_box.top, start_box.bottom)
         + closer(avg_y, end_box.top, end_box.bottom)) / 2

    if round_to_unit:
        x, y = round_half_up(x), round_half_up(y)
    return GridPoint(x, y, score=1.0)


def build_candidate_grid(
    seeds: list[GridPoint],
    eps: float = EPSILON,
) -> list[GridPoint]:
    """Cross-expand seed points into a grid of candidate waypoints."""
    grid: list[GridPoint] = []
    for seed in seeds:
        add_cross_point(grid, seed, eps)
    return grid


# ---------------------------------------------------------------------------
# Full-path assembly
# ---------------------------------------------------------------------------

def assemble_path(
    start: Point,
    start_direction: Direction,
    start_box: BoxGeometry,
    end: Point,
    end_direction: Direction,
    end_box: BoxGeometry,
    candidate: GridPoint,
    margin: float = CONNECT_LINE_MARGIN,
    eps: float = EPSILON,
) -> list[Point]:
    """Join a start leg and a reversed end leg through *candidate*.

    Both legs end on the candidate's lines; when their last points do not
    share an x or y the candidate itself is inserted to keep the joint
    orthogonal.
    """
    waypoint = candidate.point
    start_leg = build_leg(start, start_direction, start_box, waypoint, margin, eps)
    end_leg = build_leg(end, end_direction, end_box, waypoint, margin, eps)
    end_leg.reverse()

    a, b = start_leg[-1], end_leg[0]
    if abs(a.x - b.x) > eps and abs(a.y - b.y) > eps:
        return start_leg + [waypoint] + end_leg
    return start_leg + end_leg


def crosses_shapes(path: list[Point], boxes: list[BoxGeometry]) -> bool:
    """Does any interior segment of *path* touch one of *boxes*?

    The first and last segments are skipped: they leave from connection
    points that sit on the shapes themselves.
    """
    for i in range(1, len(path) - 2):
        p1, p2 = path[i], path[i + 1]
        if any(segment_intersects_box(p1, p2, box) for box in boxes):
            return True
    return False


def classify_candidates(
    start: Point,
    start_direction: Direction,
    start_box: BoxGeometry,
    end: Point,
    end_direction: Direction,
    end_box: BoxGeometry,
    grid: list[GridPoint],
    margin: float = CONNECT_LINE_MARGIN,
    eps: float = EPSILON,
) -> tuple[list[list[Point]], list[list[Point]]]:
    """Build a path per candidate and split them into (clean, intersecting)."""
    clean: list[list[Point]] = []
    intersecting: list[list[Point]] = []
    boxes = [start_box, end_box]

    for candidate in grid:
        path = assemble_path(
            start, start_direction, start_box,
            end, end_direction, end_box,
            candidate, margin, eps,
        )
        if crosses_shapes(path, boxes):
            intersecting.append(remove_duplicates(path, eps))
        else:
            clean.append(remove_duplicates(path, eps))

    return clean, intersecting


# ---------------------------------------------------------------------------
# Best-path selection
# ---------------------------------------------------------------------------

def path_length(path: list[Point]) -> float:
    """Total Manhattan length of a path."""
    return sum(manhattan_distance(a, b) for a, b in zip(path, path[1:]))


def count_turns(path: list[Point], eps: float = EPSILON) -> int:
    """Number of interior vertices where the path changes heading."""
    return sum(
        0 if is_collinear(path[i - 1], path[i], path[i + 1], eps) else 1
        for i in range(1, len(path) - 1)
    )


def mid_point_score(path: list[Point], mid_point: GridPoint, eps: float = EPSILON) -> float:
    """Sum of the midpoint's score over the path points that land on it."""
    target = mid_point.point
    return sum(mid_point.score for p in path if p.isclose(target, eps))


def _path_rank(path: list[Point], mid_point: GridPoint, eps: float) -> tuple[int, int, float]:
    return (
        round_half_up(path_length(path)),
        count_turns(path, eps),
        -mid_point_score(path, mid_point, eps),
    )


def select_best_path(
    clean: list[list[Point]],
    intersecting: list[list[Point]],
    mid_point: GridPoint,
    eps: float = EPSILON,
) -> list[Point]:
    """Pick the best path, preferring the clean pool.

    Ranking, in strict priority: shorter rounded length, fewer turns,
    higher midpoint score.  Ties keep the first path seen.
    """
    pool = clean or intersecting
    if not pool:
        raise ValueError("no candidate paths to choose from")
    if not clean:
        logger.debug("No clean route among %d candidates; using an overlapping one", len(pool))

    best = pool[0]
    best_rank = _path_rank(best, mid_point, eps)
    for path in pool[1:]:
        rank = _path_rank(path, mid_point, eps)
        if rank < best_rank:
            best, best_rank = path, rank
    return best


# ---------------------------------------------------------------------------
# Simplification
# ---------------------------------------------------------------------------

def remove_duplicates(path: list[Point], eps: float = EPSILON) -> list[Point]:
    """Drop consecutive points that coincide (within *eps*).

    The first and last input points are kept exactly.
    """
    if not path:
        return []

    result = [path[0]]
    for p in path[1:]:
        if not p.isclose(result[-1], eps):
            result.append(p)

    if len(path) > 1:
        if len(result) == 1:
            result.append(path[-1])
        else:
            result[-1] = path[-1]
    return result


def clean_path(path: list[Point], eps: float = EPSILON) -> list[Point]:
    """Remove the middle point of every collinear triple, scanning backward.

    After a removal the window at the same index is checked again, so no
    collinear triple survives and a second call changes nothing.
    """
    points = list(path)
    i = len(points) - 3
    while i >= 0:
        if i + 2 < len(points) and is_collinear(points[i], points[i + 1], points[i + 2], eps):
            del points[i + 1]
        else:
            i -= 1
    return points


def simplify_path(path: list[Point], eps: float = EPSILON) -> list[Point]:
    """Alternate de-duplication and collinear cleanup until nothing changes."""
    while True:
        simplified = clean_path(remove_duplicates(path, eps), eps)
        if len(simplified) == len(path):
            return simplified
        path = simplified


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

def compute_connector_path(
    start: Point,
    start_owner: Shape,
    end: Point,
    end_owner: Shape,
    config: Optional[RoutingConfig] = None,
) -> list[Point]:
    """Compute an orthogonal connector between two shapes' connection points.

    Args:
        start: Connection point the connector leaves from.
        start_owner: Shape owning *start*.
        end: Connection point the connector arrives at.
        end_owner: Shape owning *end*.
        config: Routing tunables; defaults to ``DEFAULT_CONFIG``.

    Returns:
        Ordered points, first == *start*, last == *end*, no consecutive
        duplicates.

    Raises:
        ValidationError: If a point or shape has non-finite or negative geometry.
    """
    config = config or DEFAULT_CONFIG
    eps = config.epsilon
    validate_point(start, "start")
    validate_shape(start_owner, "start_owner")
    validate_point(end, "end")
    validate_shape(end_owner, "end_owner")

    start_direction = get_line_direction(start_owner.center, start, eps)
    end_direction = get_line_direction(end_owner.center, end, eps)
    start_box = outer_box(start_owner)
    end_box = outer_box(end_owner)

    start_p2 = second_route_point(start, start_direction, start_box, config.margin)
    end_p2 = second_route_point(end, end_direction, end_box, config.margin)
    mid_point = preferred_mid_point(
        start_box, end_box, start_p2, end_p2, config.round_mid_point,
    )
    grid = build_candidate_grid([start_p2, end_p2, mid_point], eps)

    clean, intersecting = classify_candidates(
        start, start_direction, start_box,
        end, end_direction, end_box,
        grid, config.margin, eps,
    )
    logger.debug(
        "Routing %s->%s: %d candidates, %d clean",
        start_direction.value, end_direction.value, len(grid), len(clean),
    )

    best = select_best_path(clean, intersecting, mid_point, eps)
    return simplify_path(best, eps)


def route_to_point(
    start: Point,
    owner: Shape,
    target: Point,
    config: Optional[RoutingConfig] = None,
) -> list[Point]:
    """Route from a shape's connection point to a free point.

    Used while a connector end is being dragged and no target shape exists
    yet.  The path ends exactly at *target*.
    """
    config = config or DEFAULT_CONFIG
    eps = config.epsilon
    validate_point(start, "start")
    validate_shape(owner, "owner")
    validate_point(target, "target")

    direction = get_line_direction(owner.center, start, eps)
    leg = build_leg(start, direction, outer_box(owner), target, config.margin, eps)
    if not leg[-1].isclose(target, eps):
        leg.append(target)
    return simplify_path(leg, eps)


def nearest_connection_points(
    a: Shape,
    b: Shape,
) -> tuple[tuple[str, Point], tuple[str, Point]]:
    """Pick the pair of edge-midpoint connection points closest to each other.

    Returns ``((side_a, point_a), (side_b, point_b))``; ties keep the first
    pair in top, right, bottom, left order.
    """
    pairs = [
        ((side_a, pa), (side_b, pb))
        for side_a, pa in connection_points(a).items()
        for side_b, pb in connection_points(b).items()
    ]
    return min(pairs, key=lambda pair: distance(pair[0][1], pair[1][1]))
