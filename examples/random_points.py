import numpy as np

from pyidt.delaunay import triangulate
from pyidt.query import is_delaunay, max_circumradius


if __name__ == "__main__":
    rng = np.random.default_rng(42)
    points = rng.uniform([100, 100], [700, 500], size=(60, 2))

    tri = triangulate(points)
    print(f"{len(tri.points) - 3} points, {len(tri.drawable_triangles())} drawable triangles")
    print(f"Delaunay: {is_delaunay(tri)}, max circumradius: {max_circumradius(tri):.1f}")
    tri.plot(show=True, title="Random points", circumcircles=True)
