"""Diagnostic queries on a triangulation.

These are read-only checks used to verify the mesh invariants. Unlike the
engine itself, the Delaunay check uses Shewchuk's exact incircle predicate.
"""

import typing
from collections import Counter

import numpy as np
from shewchuk import incircle_test

from pyidt.geometry import circumcircle, ensure_ccw_triangle, orient2d
from pyidt.mesh import TriangleMesh
from pyidt.utils import Edge

if typing.TYPE_CHECKING:
    from pyidt.delaunay import Triangulation


def edge_owner_counts(mesh: TriangleMesh) -> Counter[Edge]:
    """Count the triangles owning each undirected edge of the mesh."""
    counts: Counter[Edge] = Counter()
    for triangle in mesh:
        for v1, v2 in triangle.edges():
            counts[(min(v1, v2), max(v1, v2))] += 1
    return counts


def is_manifold(mesh: TriangleMesh) -> bool:
    return all(count in (1, 2) for count in edge_owner_counts(mesh).values())


def find_delaunay_violations(
    triangulation: "Triangulation",
) -> list[tuple[int, int]]:
    """
    Find (triangle_idx, point_idx) pairs where a point lies strictly inside
    the circumcircle of a triangle it is not a vertex of.

    Only points used by some triangle are checked; points that were dropped
    during insertion are not part of the mesh.
    """
    points = np.asarray(triangulation.points)
    vertices = triangulation.triangle_vertices
    used = np.unique(vertices)

    violations = []
    for tri_idx, tri in enumerate(vertices):
        a, b, c = points[ensure_ccw_triangle(tri, points)]
        if orient2d(a, b, c) == 0:
            continue
        for point_idx in used:
            if point_idx in tri:
                continue
            # incircle_test is positive if the point is inside a CCW triangle's circle
            if incircle_test(*points[point_idx], *a, *b, *c) > 0:
                violations.append((tri_idx, int(point_idx)))
    return violations


def is_delaunay(triangulation: "Triangulation") -> bool:
    return not find_delaunay_violations(triangulation)


def canonical_triangles(mesh: TriangleMesh) -> set[tuple[int, int, int]]:
    """Triangles as sorted vertex triples, independent of order in and across triangles."""
    return {tuple(sorted(t.vertices)) for t in mesh}  # type: ignore[misc]


def max_circumradius(triangulation: "Triangulation", drawable_only: bool = True) -> float:
    """Largest circumradius over the mesh, 0.0 for an empty selection."""
    points = np.asarray(triangulation.points)
    radius = 0.0
    for triangle in triangulation.triangles:
        if drawable_only and not triangle.drawable:
            continue
        circle = circumcircle(*points[list(triangle.vertices)])
        if circle is not None:
            radius = max(radius, circle[1])
    return radius
