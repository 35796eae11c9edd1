from typing import TypeAlias
from numpy.typing import NDArray
import numpy as np

EPS = 1e-6
BARYCENTRIC_TOLERANCE = 1e-7
BOUNDING_VERTICES = ((400.0, -1000.0), (-400.0, 700.0), (1200.0, 700.0))
Vec2d: TypeAlias = tuple[float, float] | NDArray[np.floating]
TriangleCoords: TypeAlias = tuple[Vec2d, Vec2d, Vec2d] | NDArray[np.floating]
Edge: TypeAlias = tuple[int, int]
