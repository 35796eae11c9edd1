"""Configuration of a triangulation engine."""

from dataclasses import dataclass

import numpy as np

from pyidt.utils import BARYCENTRIC_TOLERANCE, BOUNDING_VERTICES, EPS
from pyidt.geometry import orient2d


@dataclass(frozen=True)
class TriangulationConfig:
    """
    Parameters of a :class:`pyidt.delaunay.Triangulation`.

    Attributes
    ----------
    bounding_vertices : tuple of three (x, y) pairs
        Corners of the super triangle every inserted point must fall into.
    barycentric_tolerance : float
        Slack accepted by the point locator at shared triangle edges.
    duplicate_tolerance : float
        Distance under which an inserted point is treated as an existing vertex.
    strict : bool
        Raise ``PointOutsideMeshError`` instead of silently dropping a point
        that cannot be meshed.
    """

    bounding_vertices: tuple[tuple[float, float], ...] = BOUNDING_VERTICES
    barycentric_tolerance: float = BARYCENTRIC_TOLERANCE
    duplicate_tolerance: float = EPS
    strict: bool = False

    def validate(self) -> None:
        if len(self.bounding_vertices) != 3:
            raise ValueError(
                f"Expected 3 bounding vertices, got {len(self.bounding_vertices)}"
            )
        corners = np.asarray(self.bounding_vertices, dtype=float)
        if corners.shape != (3, 2) or not np.all(np.isfinite(corners)):
            raise ValueError(f"Invalid bounding vertices: {self.bounding_vertices}")
        if orient2d(*corners) == 0:
            raise ValueError("Bounding vertices are collinear")
        if self.barycentric_tolerance < 0:
            raise ValueError("barycentric_tolerance must be non-negative")
        if self.duplicate_tolerance < 0:
            raise ValueError("duplicate_tolerance must be non-negative")
