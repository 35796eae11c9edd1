"""Tests for the triangulation driver: insertion, rebuild and reset."""

import numpy as np
import pytest

from pyidt.build import InsertionStatus, PointOutsideMeshError
from pyidt.config import TriangulationConfig
from pyidt.delaunay import EngineState, Triangulation, triangulate
from pyidt.geometry import circumcircle_contains, orient2d, triangle_area
from pyidt.query import (
    canonical_triangles,
    edge_owner_counts,
    find_delaunay_violations,
    is_delaunay,
    is_manifold,
)
from pyidt.utils import BOUNDING_VERTICES


def random_points(n, seed):
    rng = np.random.default_rng(seed)
    return rng.uniform([150.0, 150.0], [650.0, 450.0], size=(n, 2))


class TestReset:
    def test_construction_yields_bounding_triangle(self):
        tri = Triangulation()
        assert np.array_equal(tri.get_points(), np.array(BOUNDING_VERTICES))
        assert len(tri.get_triangles()) == 1
        assert tri.get_triangles()[0].vertices == (0, 1, 2)
        assert not tri.get_triangles()[0].drawable
        assert tri.state is EngineState.bounded

    def test_reset_after_insertions(self):
        tri = Triangulation()
        tri.insert_points(random_points(10, seed=0))
        assert tri.state is EngineState.triangulated

        tri.reset()

        assert np.array_equal(tri.points, [[400, -1000], [-400, 700], [1200, 700]])
        assert len(tri.triangles) == 1
        assert not tri.triangles[0].drawable
        assert tri.drawable_triangles() == []
        assert tri.state is EngineState.bounded

    def test_reset_is_repeatable(self):
        tri = Triangulation()
        tri.reset()
        tri.reset()
        assert len(tri.points) == 3
        assert len(tri.triangles) == 1


class TestScenarios:
    def test_first_triangle(self):
        tri = Triangulation()
        triangles = tri.get_triangles()
        assert len(triangles) == 1
        assert not triangles[0].drawable

    def test_fourth_point_split(self):
        tri = Triangulation()
        tri.insert_points([(300.0, 250.0), (500.0, 250.0), (400.0, 400.0)])

        drawable = tri.drawable_triangles()
        assert len(drawable) == 1
        assert set(drawable[0].vertices) == {3, 4, 5}

        result = tri.insert_point((400.0, 300.0))
        assert result.status is InsertionStatus.split
        assert result.point_idx == 6

        drawable = tri.drawable_triangles()
        assert len(drawable) == 3
        assert all(6 in t for t in drawable)
        for t in drawable:
            corners = tri.points[list(t.vertices)]
            for original in (3, 4, 5):
                if original in t:
                    continue
                assert not circumcircle_contains(tri.points[original], *corners)

    def test_square_diagonal(self):
        tri = Triangulation()
        tri.insert_points([(350.0, 250.0), (450.0, 250.0), (450.0, 350.0), (350.0, 350.0)])

        drawable = tri.drawable_triangles()
        assert len(drawable) == 2
        shared = set(drawable[0].vertices) & set(drawable[1].vertices)
        assert shared in ({3, 5}, {4, 6})
        assert set(drawable[0].vertices) | set(drawable[1].vertices) == {3, 4, 5, 6}
        area = sum(triangle_area(*tri.points[list(t.vertices)]) for t in drawable)
        assert area == pytest.approx(100.0 * 100.0)
        assert is_delaunay(tri)

    def test_collinear_points(self):
        tri = Triangulation()
        results = tri.insert_points([(100.0, 300.0), (200.0, 300.0), (300.0, 300.0)])

        assert [r.status for r in results] == [InsertionStatus.split] * 3
        assert tri.drawable_triangles() == []
        assert is_manifold(tri.mesh)
        assert is_delaunay(tri)
        for t in tri.triangles:
            assert orient2d(*tri.points[list(t.vertices)]) != 0

    def test_collinear_point_on_existing_edge(self):
        tri = Triangulation()
        results = tri.insert_points([(100.0, 300.0), (300.0, 300.0), (200.0, 300.0)])

        assert [r.status for r in results] == [InsertionStatus.split] * 3
        assert len(tri.triangles) == 7
        assert is_manifold(tri.mesh)
        assert all(any(idx in t for t in tri.triangles) for idx in (3, 4, 5))


class TestProperties:
    @pytest.mark.parametrize("seed", [0, 1, 2])
    def test_random_points_are_delaunay(self, seed):
        tri = Triangulation()
        results = tri.insert_points(random_points(40, seed))

        assert all(r.meshed for r in results)
        assert find_delaunay_violations(tri) == []
        assert is_manifold(tri.mesh)
        # Euler: n points strictly inside a triangle give 2n + 1 triangles
        assert len(tri.triangles) == 2 * 40 + 1

    def test_every_interior_edge_has_two_owners(self):
        tri = triangulate(random_points(25, seed=3))
        counts = edge_owner_counts(tri.mesh)
        hull = {(0, 1), (1, 2), (0, 2)}
        for edge, count in counts.items():
            assert count == (1 if edge in hull else 2)

    def test_rebuild_is_idempotent(self):
        tri = Triangulation()
        tri.insert_points(random_points(30, seed=4))
        points_before = np.array(tri.points)
        incremental = canonical_triangles(tri.mesh)

        tri.triangulate()
        first = canonical_triangles(tri.mesh)
        tri.triangulate()
        second = canonical_triangles(tri.mesh)

        assert first == second
        assert first == incremental
        assert np.array_equal(tri.points, points_before)
        assert is_delaunay(tri)

    def test_rebuild_keeps_bounding_triangle_hidden(self):
        tri = Triangulation()
        tri.triangulate()
        assert len(tri.triangles) == 1
        assert not tri.triangles[0].drawable

        tri.insert_points(random_points(5, seed=5))
        tri.triangulate()
        assert all(not t.drawable for t in tri.triangles if {0, 1, 2} & set(t.vertices))

    def test_rebuild_without_points_is_a_no_op(self):
        tri = Triangulation()
        tri.store.clear()
        tri.mesh.clear()
        tri.triangulate()
        assert len(tri.points) == 0
        assert len(tri.triangles) == 0
        assert tri.state is EngineState.empty

    def test_flip_instrumentation(self):
        stack_sizes = []
        tri = Triangulation(on_flip=stack_sizes.append)
        results = tri.insert_points(random_points(20, seed=6))

        assert sum(r.flips for r in results) == len(stack_sizes)
        assert len(stack_sizes) > 0
        assert all(size >= 1 for size in stack_sizes)


class TestDegenerateInsertions:
    def test_point_outside_bounding_triangle_is_dropped(self):
        tri = Triangulation()
        result = tri.insert_point((5000.0, 5000.0))

        assert result.status is InsertionStatus.outside
        assert not result.meshed
        assert len(tri.points) == 4
        assert [t.vertices for t in tri.triangles] == [(0, 1, 2)]

    def test_dropped_point_stays_dropped_after_rebuild(self):
        tri = Triangulation()
        tri.insert_points([(400.0, 300.0), (5000.0, 5000.0), (420.0, 320.0)])
        tri.triangulate()
        assert len(tri.points) == 6
        assert all(4 not in t for t in tri.triangles)
        assert is_delaunay(tri)

    def test_duplicate_point_is_dropped(self):
        tri = Triangulation()
        tri.insert_point((400.0, 300.0))
        result = tri.insert_point((400.0, 300.0))

        assert result.status is InsertionStatus.duplicate
        assert len(tri.triangles) == 3
        assert all(4 not in t for t in tri.triangles)

    @pytest.mark.parametrize("duplicate_tolerance", [0.0, 1e-6])
    def test_point_close_to_vertex_is_split(self, duplicate_tolerance):
        tri = Triangulation(config=TriangulationConfig(duplicate_tolerance=duplicate_tolerance))
        tri.insert_point((400.0, 300.0))
        result = tri.insert_point((400.003, 300.0))

        assert result.status is InsertionStatus.split
        assert any(4 in t for t in tri.triangles)
        assert is_manifold(tri.mesh)

    def test_strict_mode_raises(self):
        tri = Triangulation(config=TriangulationConfig(strict=True))
        with pytest.raises(PointOutsideMeshError) as excinfo:
            tri.insert_point((5000.0, 5000.0))
        assert excinfo.value.point_idx == 3
        assert excinfo.value.status is InsertionStatus.outside
        # the point is recorded, the mesh is untouched
        assert len(tri.points) == 4
        assert len(tri.triangles) == 1

    @pytest.mark.parametrize("bad", [(1.0, 2.0, 3.0), (np.nan, 1.0), "ab"])
    def test_invalid_point_is_rejected(self, bad):
        tri = Triangulation()
        with pytest.raises(ValueError):
            tri.insert_point(bad)
        assert len(tri.points) == 3


class TestAccessors:
    def test_points_are_read_only(self):
        tri = Triangulation()
        with pytest.raises(TypeError):
            tri.get_points()[0, 0] = 1.0
        with pytest.raises(ValueError):
            tri.get_points()[0][0] = 1.0

    def test_cached_accessors_follow_insertions(self):
        tri = Triangulation()
        points = tri.get_points()
        triangles = tri.get_triangles()

        tri.insert_point((400.0, 300.0))
        assert len(points) == 4
        for t in triangles:
            assert points[list(t.vertices)].shape == (3, 2)
        assert np.array_equal(points[3], [400.0, 300.0])

        tri.reset()
        assert len(points) == 3
        assert [t.vertices for t in triangles] == [(0, 1, 2)]
        assert np.array_equal(points, np.array(BOUNDING_VERTICES))

    def test_triangle_vertices_array(self):
        tri = triangulate([(400.0, 300.0)])
        assert tri.triangle_vertices.shape == (3, 3)

    def test_custom_bounding_triangle(self):
        config = TriangulationConfig(bounding_vertices=((0.0, 0.0), (10.0, 0.0), (0.0, 10.0)))
        tri = triangulate(np.array([[1.0, 1.0], [3.0, 1.0], [1.0, 3.0], [1.6, 1.7]]), config=config)
        assert len(tri.points) == 7
        assert is_delaunay(tri)
        assert is_manifold(tri.mesh)

    def test_collinear_bounding_triangle_is_rejected(self):
        with pytest.raises(ValueError):
            Triangulation(config=TriangulationConfig(bounding_vertices=((0, 0), (1, 1), (2, 2))))

    def test_negative_tolerance_is_rejected(self):
        with pytest.raises(ValueError):
            TriangulationConfig(barycentric_tolerance=-1.0).validate()
