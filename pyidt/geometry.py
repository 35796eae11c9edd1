import numpy as np
from numpy.typing import NDArray

from pyidt.utils import BARYCENTRIC_TOLERANCE, TriangleCoords, Vec2d


def circumcircle_contains(v: Vec2d, p1: Vec2d, p2: Vec2d, p3: Vec2d) -> bool:
    """
    Check whether ``v`` lies inside or on the circumcircle of (p1, p2, p3).

    Plain floating-point arithmetic: near-collinear triangles give an
    unreliable answer. A collinear triangle has no finite circle; its
    "circle" is the supporting line extended to infinity and every point is
    reported as contained.

    Parameters
    ----------
    v : Vec2d
        Query point
    p1, p2, p3 : Vec2d
        Triangle vertices, in any order

    Returns
    -------
    bool
        True if ``v`` is inside the circumcircle or on its boundary
    """
    ab = p1[0] * p1[0] + p1[1] * p1[1]
    cd = p2[0] * p2[0] + p2[1] * p2[1]
    ef = p3[0] * p3[0] + p3[1] * p3[1]

    denom_x = p1[0] * (p3[1] - p2[1]) + p2[0] * (p1[1] - p3[1]) + p3[0] * (p2[1] - p1[1])
    denom_y = p1[1] * (p3[0] - p2[0]) + p2[1] * (p1[0] - p3[0]) + p3[1] * (p2[0] - p1[0])
    if denom_x == 0 or denom_y == 0:
        return True

    circum_x = (ab * (p3[1] - p2[1]) + cd * (p1[1] - p3[1]) + ef * (p2[1] - p1[1])) / denom_x
    circum_y = (ab * (p3[0] - p2[0]) + cd * (p1[0] - p3[0]) + ef * (p2[0] - p1[0])) / denom_y
    center = (0.5 * circum_x, 0.5 * circum_y)

    circum_radius = (p1[0] - center[0]) ** 2 + (p1[1] - center[1]) ** 2
    dist = (v[0] - center[0]) ** 2 + (v[1] - center[1]) ** 2
    return bool(dist <= circum_radius)


def circumcircle(
    p1: Vec2d, p2: Vec2d, p3: Vec2d
) -> tuple[NDArray[np.floating], float] | None:
    """Return (center, radius) of the circle through three points, None if collinear."""
    a, b, c = np.asarray(p1, float), np.asarray(p2, float), np.asarray(p3, float)
    d = 2 * (a[0] * (b[1] - c[1]) + b[0] * (c[1] - a[1]) + c[0] * (a[1] - b[1]))
    if d == 0:
        return None

    ux = (
        np.dot(a, a) * (b[1] - c[1])
        + np.dot(b, b) * (c[1] - a[1])
        + np.dot(c, c) * (a[1] - b[1])
    ) / d
    uy = (
        np.dot(a, a) * (c[0] - b[0])
        + np.dot(b, b) * (a[0] - c[0])
        + np.dot(c, c) * (b[0] - a[0])
    ) / d
    center = np.array([ux, uy])
    return center, float(np.linalg.norm(a - center))


def barycentric_coordinates(
    triangle: TriangleCoords,
    point: Vec2d,
    tolerance: float = BARYCENTRIC_TOLERANCE,
) -> tuple[float, float, float] | None:
    """
    Compute the barycentric coordinates of a point and check it is inside.

    Parameters
    ----------
    triangle : TriangleCoords
        Array of shape (3, 2) with triangle vertices [A, B, C].
    point : Vec2d
        Query point.
    tolerance : float, optional
        Slack on every coordinate so that points on a shared edge are not
        lost to rounding.

    Returns
    -------
    tuple[float, float, float] | None
        ``(u, v, w)`` with ``u + v + w == 1`` when the point is inside (or
        within ``tolerance`` of) the triangle; None if it is outside or the
        triangle is degenerate.
    """
    a, b, c = np.asarray(triangle, dtype=float)
    p = np.asarray(point, dtype=float)

    v0 = b - a
    v1 = c - a
    v2 = p - a

    d00 = np.dot(v0, v0)
    d01 = np.dot(v0, v1)
    d11 = np.dot(v1, v1)
    d20 = np.dot(v2, v0)
    d21 = np.dot(v2, v1)
    denominator = d00 * d11 - d01 * d01
    if denominator == 0:
        return None

    v = (d11 * d20 - d01 * d21) / denominator
    w = (d00 * d21 - d01 * d20) / denominator

    # inside iff 0 <= v, w and v + w <= 1
    if min(v, w) >= -tolerance and max(v, w) <= 1 + tolerance and v + w <= 1 + tolerance:
        return float(1 - v - w), float(v), float(w)
    return None


def orient2d(pa: Vec2d, pb: Vec2d, pc: Vec2d) -> float:
    """
    Floating-point 2D orientation.
    Returns > 0 if points are in counterclockwise order
    Returns < 0 if points are in clockwise order
    Returns = 0 if points are collinear
    """
    detleft = (pa[0] - pc[0]) * (pb[1] - pc[1])
    detright = (pa[1] - pc[1]) * (pb[0] - pc[0])
    return detleft - detright


def triangle_area(pa: Vec2d, pb: Vec2d, pc: Vec2d) -> float:
    return abs(orient2d(pa, pb, pc)) / 2


def ensure_ccw_triangle(vertices: NDArray, points: NDArray) -> NDArray:
    """Ensure triangle vertices are in counterclockwise order"""
    p0, p1, p2 = points[vertices]
    if orient2d(p0, p1, p2) < 0:
        return np.array([vertices[0], vertices[2], vertices[1]])
    return np.asarray(vertices)
