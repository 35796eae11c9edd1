from dataclasses import dataclass
from enum import Enum, auto

import numpy as np
from loguru import logger

from pyidt.geometry import barycentric_coordinates
from pyidt.mesh import PointStore, TriangleMesh
from pyidt.utils import BARYCENTRIC_TOLERANCE, EPS, Edge, Vec2d


class InsertionStatus(Enum):
    not_enough_points = auto()
    seeded = auto()
    split = auto()
    duplicate = auto()
    outside = auto()


class PointOutsideMeshError(ValueError):
    def __init__(self, point_idx: int, point: Vec2d, status: InsertionStatus):
        super().__init__(
            f"Point {point_idx} at {np.round(point, 2)} could not be meshed ({status.name})"
        )
        self.point_idx = point_idx
        self.status = status


@dataclass(frozen=True)
class ContainingTriangle:
    idx: int
    coordinates: tuple[float, float, float]


@dataclass(frozen=True)
class InsertionResult:
    """Outcome of inserting one point.

    ``flips`` counts the Lawson flips performed to legalize the mesh.
    """

    status: InsertionStatus
    point_idx: int
    flips: int = 0

    @property
    def meshed(self) -> bool:
        return self.status in (InsertionStatus.seeded, InsertionStatus.split)


def find_containing_triangle(
    points: PointStore,
    mesh: TriangleMesh,
    point: Vec2d,
    tolerance: float = BARYCENTRIC_TOLERANCE,
) -> ContainingTriangle | None:
    """
    Find the first triangle containing ``point`` with a linear scan.

    Points on an edge shared by two triangles belong to whichever comes
    first in the mesh.

    Returns
    -------
    ContainingTriangle | None
        Position and barycentric coordinates, or None if no triangle contains
        the point (outside the mesh, or only degenerate candidates).
    """
    for idx, triangle in enumerate(mesh):
        coordinates = barycentric_coordinates(
            points[list(triangle.vertices)], point, tolerance
        )
        if coordinates is not None:
            return ContainingTriangle(idx=idx, coordinates=coordinates)
    return None


def insert_point_into_triangle(
    points: PointStore,
    mesh: TriangleMesh,
    tolerance: float = BARYCENTRIC_TOLERANCE,
    duplicate_tolerance: float = EPS,
) -> tuple[InsertionStatus, list[Edge]]:
    """
    Mesh the most recently stored point.

    The triangle containing the point is replaced by three triangles joining
    the point to each of its edges.

    :param points: point store; its last point is the one being inserted
    :param mesh: triangle mesh, modified in place
    :param tolerance: barycentric slack used by the point locator
    :param duplicate_tolerance: distance under which the point is an existing vertex
    :return: status and the edges of the removed triangle, to be legalized
    """
    n_points = len(points)
    if n_points < 3:
        return InsertionStatus.not_enough_points, []
    if n_points == 3:
        mesh.add(0, 1, 2)
        return InsertionStatus.seeded, []

    point_idx = n_points - 1
    point = points[point_idx]
    containing = find_containing_triangle(points, mesh, point, tolerance)
    if containing is None:
        logger.warning(
            f"Point {point_idx} at {np.round(point, 2)} is not inside any triangle; not meshed"
        )
        return InsertionStatus.outside, []

    v0, v1, v2 = mesh[containing.idx].vertices
    for v in (v0, v1, v2):
        if np.linalg.norm(points[v] - point) <= duplicate_tolerance:
            logger.debug(
                f"Point {point_idx} coincides with vertex {v}! Not adding it to the mesh"
            )
            return InsertionStatus.duplicate, []

    logger.trace(f"Splitting triangle {containing.idx} {(v0, v1, v2)} with point {point_idx}")
    mesh.remove(containing.idx)
    mesh.add(v0, v1, point_idx)
    mesh.add(point_idx, v1, v2)
    mesh.add(v0, point_idx, v2)
    return InsertionStatus.split, [(v0, v1), (v1, v2), (v0, v2)]
