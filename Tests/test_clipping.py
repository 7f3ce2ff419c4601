"""
Tests for polygon clipping and contact segmentation.
"""
import numpy as np
import pytest

import Mortar3D.Objects.Contact.Clipping as clipping
from conftest import shoelace_area
from Mortar3D.Objects.Contact.Clipping import (calculate_centroid, check_orientation,
                                               create_contact_segmentation, get_cells,
                                               get_polygon_clip, polygon_area)
from Mortar3D.Objects.Contact.Exceptions import GeometricDegeneracyError
from Mortar3D.Objects.FEM import Quad4, Triangle3

EZ = np.array([0.0, 0.0, 1.0])


def _square(x0, y0, size=1.0, z=0.0):
    return np.array([
        [x0, y0, z],
        [x0 + size, y0, z],
        [x0 + size, y0 + size, z],
        [x0, y0 + size, z],
    ])


def _rotation(axis, angle):
    axis = np.asarray(axis, dtype=float) / np.linalg.norm(axis)
    K = np.array([[0.0, -axis[2], axis[1]], [axis[2], 0.0, -axis[0]], [-axis[1], axis[0], 0.0]])
    return np.eye(3) + np.sin(angle) * K + (1.0 - np.cos(angle)) * K @ K


@pytest.mark.unit
@pytest.mark.clipping
class TestPolygonArea:

    @pytest.mark.parametrize("n_sides", [3, 4, 5, 6, 8])
    def test_fan_area_matches_shoelace_in_3d(self, n_sides):
        """Test fan area of a rotated polygon against the shoelace formula."""
        theta = 2.0 * np.pi * np.arange(n_sides) / n_sides
        pts_2d = np.column_stack((np.cos(theta), 0.5 * np.sin(theta)))
        R = _rotation([1.0, 2.0, 0.5], 0.7)
        pts_3d = np.column_stack((pts_2d, np.zeros(n_sides))) @ R.T + [0.3, -1.0, 2.0]
        assert np.isclose(polygon_area(pts_3d), shoelace_area(pts_2d))

    def test_trapezoid_centroid_is_area_weighted(self):
        """Test centroid is area weighted, not the vertex mean."""
        P = np.array([[0.0, 0.0, 0.0], [4.0, 0.0, 0.0], [1.0, 1.0, 0.0], [0.0, 1.0, 0.0]])
        assert np.allclose(calculate_centroid(P), [1.4, 0.4, 0.0])
        assert not np.allclose(calculate_centroid(P), P.mean(axis=0))


@pytest.mark.unit
@pytest.mark.clipping
class TestPolygonClip:

    def test_overlapping_squares(self):
        """Test clip of two partially overlapping squares."""
        P = get_polygon_clip(_square(0.0, 0.0), _square(0.5, 0.5), EZ)
        assert np.isclose(polygon_area(P), 0.25)
        assert np.allclose(P[:, 2], 0.0)
        assert np.allclose(calculate_centroid(P), [0.75, 0.75, 0.0])

    def test_contained_polygon(self):
        """Test clip of a polygon inside another."""
        P = get_polygon_clip(_square(0.0, 0.0, 2.0), _square(0.5, 0.5), EZ)
        assert np.isclose(polygon_area(P), 1.0)

    def test_clip_on_tilted_plane(self):
        """Test clip on an auxiliary plane not aligned with the axes."""
        R = _rotation([0.0, 1.0, 1.0], 0.4)
        S = _square(0.0, 0.0) @ R.T
        M = _square(0.5, 0.0) @ R.T
        P = get_polygon_clip(S, M, R @ EZ)
        assert np.isclose(polygon_area(P), 0.5)

    def test_disjoint(self):
        """Test disjoint polygons give an empty clip."""
        P = get_polygon_clip(_square(0.0, 0.0), _square(3.0, 0.0), EZ)
        assert P.shape == (0, 3)

    def test_touching_edge_has_no_overlap(self):
        """Test polygons sharing an edge give an empty clip."""
        P = get_polygon_clip(_square(0.0, 0.0), _square(1.0, 0.0), EZ)
        assert P.shape == (0, 3)

    def test_touching_corner_has_no_overlap(self):
        """Test polygons sharing a corner give an empty clip."""
        P = get_polygon_clip(_square(0.0, 0.0), _square(1.0, 1.0), EZ)
        assert P.shape == (0, 3)


@pytest.mark.unit
@pytest.mark.clipping
class TestOrientationAndCells:

    def test_clockwise_polygon_is_reversed(self):
        """Test clockwise vertices are reversed."""
        P = _square(0.0, 0.0)[::-1]
        Q = check_orientation(P, EZ)
        assert np.allclose(Q, P[::-1])

    def test_counter_clockwise_polygon_is_kept(self):
        """Test orientation is judged against the plane normal."""
        P = _square(0.0, 0.0)
        assert np.allclose(check_orientation(P, EZ), P)
        # same polygon viewed from the other side
        assert np.allclose(check_orientation(P, -EZ), P[::-1])

    def test_fan_cells_cover_polygon(self):
        """Test fan cells share the centroid and cover the polygon."""
        P = _square(0.0, 0.0)
        C0 = calculate_centroid(P)
        cells = get_cells(P, C0)
        assert len(cells) == 4
        assert np.isclose(sum(c.area for c in cells), 1.0)
        for c in cells:
            assert np.allclose(c.vertices[0], C0)

    def test_cell_weights_sum_to_area(self):
        """Test Gauss weights of all cells sum to the polygon area."""
        P = np.array([[0.0, 0.0, 0.0], [2.0, 0.0, 0.0], [0.0, 1.0, 0.0]])
        for order in range(1, 6):
            cells = get_cells(P, calculate_centroid(P), order)
            assert np.isclose(sum(w for c in cells for _, w in c), 1.0)


@pytest.mark.mortar
@pytest.mark.clipping
class TestContactSegmentation:

    def _pair(self, slave_coords, master_coords, cls=Triangle3):
        n = len(slave_coords)
        slave = cls(list(range(n)))
        master = cls(list(range(n, 2 * n)))
        slave.set_field("geometry", slave_coords)
        master.set_field("geometry", master_coords)
        return slave, master

    def test_coincident_triangles(self, unit_triangle_coords):
        """Test coincident triangles give one full segment."""
        slave, master = self._pair(unit_triangle_coords, unit_triangle_coords)
        x0 = unit_triangle_coords.mean(axis=0)
        segments = create_contact_segmentation(slave, [master], x0, EZ)
        assert len(segments) == 1
        assert segments[0].master_element is master
        assert np.isclose(segments[0].area, 0.5)
        assert np.allclose(segments[0].centroid, [1.0 / 3.0, 1.0 / 3.0, 0.0])

    def test_master_is_projected_onto_plane(self, unit_square_coords):
        """Test master vertices are projected onto the auxiliary plane."""
        master_coords = _square(0.5, 0.0, z=0.3)
        slave, master = self._pair(unit_square_coords, master_coords, Quad4)
        segments = create_contact_segmentation(slave, [master], [0.5, 0.5, 0.0], EZ)
        assert len(segments) == 1
        assert np.isclose(segments[0].area, 0.5)
        assert np.allclose(segments[0].vertices[:, 2], 0.0)

    def test_no_overlap_is_empty(self, unit_triangle_coords):
        """Test no segment for a distant master."""
        slave, master = self._pair(unit_triangle_coords, unit_triangle_coords + [5.0, 0.0, 0.0])
        assert create_contact_segmentation(slave, [master], [0.3, 0.3, 0.0], EZ) == []

    def test_zero_area_clip_raises(self, unit_triangle_coords, monkeypatch):
        """Test GeometricDegeneracyError for a zero-area clip."""
        slave, master = self._pair(unit_triangle_coords, unit_triangle_coords)
        collinear = np.array([[0.0, 0.0, 0.0], [0.5, 0.0, 0.0], [1.0, 0.0, 0.0]])
        monkeypatch.setattr(clipping, "get_polygon_clip", lambda S, M, n0: collinear)
        with pytest.raises(GeometricDegeneracyError):
            create_contact_segmentation(slave, [master], [0.3, 0.3, 0.0], EZ)
