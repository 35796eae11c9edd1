"""Record every insertion step and export it as a gif."""

import numpy as np

from pyidt.delaunay import Triangulation


if __name__ == "__main__":
    rng = np.random.default_rng(0)
    tri = Triangulation()
    for i, point in enumerate(rng.uniform([200, 150], [600, 450], size=(15, 2))):
        result = tri.insert_point(point)
        tri.plot(title=f"Point {i + 1}: {result.flips} flips", circumcircles=True)

    tri.export_animation("insertions.gif", fps=2)
