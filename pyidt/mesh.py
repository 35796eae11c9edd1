"""Index-addressed storage for points and triangles.

Points are referenced by their position in the :class:`PointStore`,
triangles by their position in the :class:`TriangleMesh`. Triangle positions
are only valid until the next mutation of the mesh.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator

import numpy as np
from numpy.typing import NDArray

from pyidt.utils import Edge, Vec2d


class TriangleRole(Enum):
    bounding = auto()
    application = auto()


@dataclass
class Triangle:
    vertices: tuple[int, int, int]
    role: TriangleRole = TriangleRole.application

    @property
    def drawable(self) -> bool:
        return self.role is TriangleRole.application

    def edges(self) -> tuple[Edge, Edge, Edge]:
        v0, v1, v2 = self.vertices
        return (v0, v1), (v1, v2), (v0, v2)

    def __iter__(self) -> Iterator[int]:
        return iter(self.vertices)

    def __contains__(self, vertex: object) -> bool:
        return vertex in self.vertices


class PointStore:
    """Append-only sequence of 2D coordinates."""

    def __init__(self, points: NDArray[np.floating] | None = None) -> None:
        self._coords = np.empty((0, 2), dtype=float)
        if points is not None:
            for point in points:
                self.append(point)

    def append(self, point: Vec2d) -> int:
        """Store a point and return its index."""
        row = np.asarray(point, dtype=float)
        if row.shape != (2,) or not np.all(np.isfinite(row)):
            raise ValueError(f"Expected a finite (x, y) pair, got {point!r}")
        self._coords = np.vstack((self._coords, [row]))
        return len(self._coords) - 1

    def clear(self) -> None:
        self._coords = np.empty((0, 2), dtype=float)

    def view(self) -> NDArray[np.floating]:
        """Read-only view of the stored coordinates, shape (n, 2)."""
        view = self._coords.view()
        view.flags.writeable = False
        return view

    def snapshot(self) -> NDArray[np.floating]:
        return self._coords.copy()

    def __len__(self) -> int:
        return len(self._coords)

    def __getitem__(self, idx):
        return self._coords[idx]


class PointsView:
    """
    Live read-only access to a :class:`PointStore`.

    Unlike :meth:`PointStore.view`, this keeps following the store after
    points are appended or the store is cleared, so it can be held next to
    the mesh's triangle list.
    """

    def __init__(self, store: PointStore) -> None:
        self._store = store

    @property
    def shape(self) -> tuple[int, ...]:
        return self._store.view().shape

    def __array__(self, dtype=None, copy=None) -> NDArray[np.floating]:
        if copy:
            return np.array(self._store.view(), dtype=dtype)
        return np.asarray(self._store.view(), dtype=dtype)

    def __len__(self) -> int:
        return len(self._store)

    def __iter__(self) -> Iterator[NDArray[np.floating]]:
        return iter(self._store.view())

    def __getitem__(self, idx):
        return self._store.view()[idx]

    def __repr__(self) -> str:
        return f"PointsView({self._store.view()!r})"


class TriangleMesh:
    """
    Mutable collection of triangles over a :class:`PointStore`.

    A triangle touching any of ``bounding_vertices`` gets the bounding role
    and is not drawn.
    """

    def __init__(self, bounding_vertices: tuple[int, ...] = (0, 1, 2)) -> None:
        self.bounding_vertices = frozenset(bounding_vertices)
        self.triangles: list[Triangle] = []

    def role_for(self, vertices: tuple[int, int, int]) -> TriangleRole:
        if self.bounding_vertices.intersection(vertices):
            return TriangleRole.bounding
        return TriangleRole.application

    def add(self, v0: int, v1: int, v2: int) -> int:
        """Append a triangle and return its position."""
        vertices = (int(v0), int(v1), int(v2))
        self.triangles.append(Triangle(vertices, self.role_for(vertices)))
        return len(self.triangles) - 1

    def remove(self, *indices: int) -> None:
        """Delete triangles by position, highest position first."""
        for idx in sorted(set(indices), reverse=True):
            del self.triangles[idx]

    def clear(self) -> None:
        self.triangles.clear()

    def vertex_array(self) -> NDArray[np.integer]:
        if not self.triangles:
            return np.empty((0, 3), dtype=int)
        return np.array([t.vertices for t in self.triangles], dtype=int)

    def __len__(self) -> int:
        return len(self.triangles)

    def __iter__(self) -> Iterator[Triangle]:
        return iter(self.triangles)

    def __getitem__(self, idx: int) -> Triangle:
        return self.triangles[idx]
