from dataclasses import dataclass
from typing import Callable

from loguru import logger

from pyidt.geometry import circumcircle_contains
from pyidt.mesh import PointStore, Triangle, TriangleMesh
from pyidt.utils import Edge


class MeshInvariantError(RuntimeError):
    """The mesh is corrupt; continuing would produce meaningless geometry."""

    def __init__(self, message: str, edge: Edge | None = None, triangle_count: int | None = None):
        details = []
        if edge is not None:
            details.append(f"edge={edge}")
        if triangle_count is not None:
            details.append(f"triangles={triangle_count}")
        if details:
            message = f"{message} ({', '.join(details)})"
        super().__init__(message)
        self.edge = edge
        self.triangle_count = triangle_count


@dataclass(frozen=True)
class EdgeOwner:
    """A triangle incident to an edge.

    Attributes
    ----------
    triangle_idx : int
        Position of the triangle in the mesh
    pos_1 : int
        Local position (0, 1 or 2) of the edge's first vertex
    pos_2 : int
        Local position (0, 1 or 2) of the edge's second vertex
    """

    triangle_idx: int
    pos_1: int
    pos_2: int

    @property
    def opposite_pos(self) -> int:
        # positions are 0, 1, 2 -> the third one completes the sum to 3
        return 3 - self.pos_1 - self.pos_2


def find_vertex_position(triangle: Triangle, vertex: int) -> int:
    """Find the position (0, 1, or 2) of a vertex in a triangle"""
    for i, v in enumerate(triangle.vertices):
        if v == vertex:
            return i
    raise MeshInvariantError(f"Vertex {vertex} not found in triangle {triangle.vertices}")


def find_triangles_sharing_edge(mesh: TriangleMesh, edge: Edge) -> list[EdgeOwner]:
    """
    Find every triangle containing both endpoints of ``edge``.

    Parameters
    ----------
    mesh : TriangleMesh
        The mesh to search (linear scan)
    edge : Edge
        Unordered vertex pair that must currently exist in the mesh

    Returns
    -------
    list[EdgeOwner]
        One owner for a hull edge, two for an interior edge.

    Raises
    ------
    MeshInvariantError
        If the edge has no owner or more than two owners.
    """
    v1, v2 = edge
    owners = []
    for idx, triangle in enumerate(mesh):
        if v1 in triangle and v2 in triangle:
            owners.append(
                EdgeOwner(
                    triangle_idx=idx,
                    pos_1=find_vertex_position(triangle, v1),
                    pos_2=find_vertex_position(triangle, v2),
                )
            )

    if not 1 <= len(owners) <= 2:
        raise MeshInvariantError(
            f"Edge is owned by {len(owners)} triangles",
            edge=edge,
            triangle_count=len(mesh),
        )
    return owners


def flip_edge(points: PointStore, mesh: TriangleMesh, edge: Edge) -> list[Edge]:
    """
    Flip ``edge`` if it violates the empty-circumcircle condition.

    Before flip:
        T = (a, v1, v2) first owner, N = (d, v1, v2) second owner
    After flip:
        (a, v1, d) and (a, d, v2), sharing the new diagonal (a, d)

    Returns
    -------
    list[Edge]
        The four sides of the flipped quadrilateral, empty if nothing changed.
    """
    owners = find_triangles_sharing_edge(mesh, edge)
    if len(owners) == 1:
        # hull edge, legal by definition
        return []

    current, neighbor = owners
    t = mesh[current.triangle_idx]
    n = mesh[neighbor.triangle_idx]
    v1, v2 = edge
    a = t.vertices[current.opposite_pos]
    d = n.vertices[neighbor.opposite_pos]
    if a in (v1, v2) or d in (v1, v2):
        raise MeshInvariantError(
            f"Opposite vertex lookup failed: a={a}, d={d}",
            edge=edge,
            triangle_count=len(mesh),
        )

    if not circumcircle_contains(points[d], *(points[v] for v in t.vertices)):
        return []

    logger.trace(
        f"Point {d} lies in circumcircle of triangle {t.vertices}; flipping {edge} -> {(a, d)}"
    )
    mesh.remove(current.triangle_idx, neighbor.triangle_idx)
    mesh.add(a, v1, d)
    mesh.add(a, d, v2)
    return [(a, v1), (v1, d), (d, v2), (v2, a)]


def lawson_flipping(
    stack: list[Edge],
    points: PointStore,
    mesh: TriangleMesh,
    on_flip: Callable[[int], None] | None = None,
) -> int:
    """
    Restore the Delaunay condition by flipping edges as necessary.

    Edges are re-queried on every pop: a flip invalidates every triangle
    position computed before it.

    :param stack: candidate edges, consumed in LIFO order
    :param points: point coordinates
    :param mesh: triangle mesh, modified in place
    :param on_flip: called with the stack size after every flip
    :return: number of flips performed
    """
    flips = 0
    logger.trace("Lawson flipping phase")
    while stack:
        logger.trace(f"Stack -> {stack}")
        edge = stack.pop()
        new_edges = flip_edge(points, mesh, edge)
        if not new_edges:
            continue
        flips += 1
        stack.extend(new_edges)
        if on_flip is not None:
            on_flip(len(stack))
    return flips
