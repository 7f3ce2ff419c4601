"""
Tests for surface elements.

Tests cover:
- Triangle3, Triangle6, Quad4 shape functions
- Surface Jacobian in 3D
- Time-indexed field storage
- Splitting of quadratic triangles
"""
import numpy as np
import pytest

from Mortar3D.Objects.FEM import Quad4, Triangle3, Triangle6, create_elements


def _finite_difference(element, xi, eta, h=1e-7):
    N_p, _, _ = element.N_dN(xi + h, eta)
    N_m, _, _ = element.N_dN(xi - h, eta)
    dxi = (N_p - N_m) / (2 * h)
    N_p, _, _ = element.N_dN(xi, eta + h)
    N_m, _, _ = element.N_dN(xi, eta - h)
    deta = (N_p - N_m) / (2 * h)
    return dxi, deta


@pytest.mark.unit
class TestShapeFunctions:

    @pytest.mark.parametrize("element", [Triangle3([0, 1, 2]),
                                         Triangle6([0, 1, 2, 3, 4, 5]),
                                         Quad4([0, 1, 2, 3])])
    def test_kronecker_delta_at_nodes(self, element):
        """Test shape functions are 1 at their node, 0 at others."""
        for i, (xi, eta) in enumerate(element.reference_coordinates()):
            N, _, _ = element.N_dN(xi, eta)
            expected = np.zeros(element.nd)
            expected[i] = 1.0
            assert np.allclose(N, expected)

    @pytest.mark.parametrize("element", [Triangle3([0, 1, 2]),
                                         Triangle6([0, 1, 2, 3, 4, 5]),
                                         Quad4([0, 1, 2, 3])])
    def test_partition_of_unity(self, element):
        """Test partition of unity: shape functions sum to 1, derivatives to 0."""
        for xi, eta in [(0.2, 0.3), (0.1, 0.1), (0.25, 0.5)]:
            N, dN_dxi, dN_deta = element.N_dN(xi, eta)
            assert np.isclose(N.sum(), 1.0)
            assert np.isclose(dN_dxi.sum(), 0.0)
            assert np.isclose(dN_deta.sum(), 0.0)

    @pytest.mark.parametrize("element", [Triangle6([0, 1, 2, 3, 4, 5]), Quad4([0, 1, 2, 3])])
    def test_derivatives_match_finite_differences(self, element):
        """Test analytical derivatives against central differences."""
        _, dN_dxi, dN_deta = element.N_dN(0.2, 0.3)
        fd_xi, fd_eta = _finite_difference(element, 0.2, 0.3)
        assert np.allclose(dN_dxi, fd_xi, atol=1e-6)
        assert np.allclose(dN_deta, fd_eta, atol=1e-6)

    def test_wrong_node_count(self):
        """Test elements reject a wrong number of nodes."""
        with pytest.raises(ValueError):
            Triangle3([0, 1, 2, 3])
        with pytest.raises(ValueError):
            Quad4([0, 1, 2])


@pytest.mark.unit
class TestSurfaceJacobian:

    def test_triangle3_detJ_is_twice_area(self, triangle3):
        """Test detJ of the unit triangle equals twice its area."""
        X = triangle3.geometry()
        assert np.isclose(triangle3.detJ(X, (0.3, 0.3)), 1.0)
        assert np.isclose(triangle3.reference_area(), 0.5)

    def test_tilted_triangle_normal(self):
        """Test surface normal of a triangle tilted about the y axis."""
        element = Triangle3([0, 1, 2])
        X = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 1.0], [0.0, 1.0, 0.0]])
        n = element.surface_normal(X, (0.2, 0.2))
        assert np.allclose(n / np.linalg.norm(n), np.array([-1.0, 0.0, 1.0]) / np.sqrt(2.0))

    def test_quad4_area(self, quad4):
        """Test area of the unit square."""
        assert np.isclose(quad4.reference_area(), 1.0)

    def test_triangle6_interpolates_midside(self, triangle6):
        """Test interpolation at a mid-side node."""
        X = triangle6.geometry()
        assert np.allclose(triangle6.interpolate(X, (0.5, 0.0)), [0.5, 0.0, 0.0])
        assert np.isclose(triangle6.reference_area(), 0.5)

    def test_contains(self, triangle3, quad4):
        """Test reference domain membership."""
        assert triangle3.contains((0.2, 0.2))
        assert not triangle3.contains((0.8, 0.8))
        assert quad4.contains((-1.0, 1.0))
        assert not quad4.contains((1.2, 0.0))


@pytest.mark.unit
class TestFields:

    def test_time_lookup(self, triangle3):
        """Test field lookup returns the latest value at or before the time."""
        u1 = np.ones((3, 3))
        triangle3.set_field("displacement", u1, time=1.0)
        assert np.allclose(triangle3.get_field("displacement", 0.0), 0.0)
        assert np.allclose(triangle3.get_field("displacement", 1.0), 1.0)
        # between stored times: latest earlier value
        assert np.allclose(triangle3.get_field("displacement", 0.5), 0.0)
        assert np.allclose(triangle3.get_field("displacement", 2.0), 1.0)
        assert np.allclose(triangle3.get_field("displacement"), 1.0)

    def test_missing_field(self, triangle3):
        """Test KeyError for a field never set."""
        with pytest.raises(KeyError):
            triangle3.get_field("normal", 0.0)

    def test_deformed_geometry(self, triangle3):
        """Test deformed geometry adds the displacement."""
        triangle3.set_field("displacement", np.full((3, 3), 0.1), time=0.0)
        assert np.allclose(triangle3.geometry(0.0, deformed=True) - triangle3.geometry(0.0), 0.1)

    def test_master_elements_field_is_not_reshaped(self, triangle3, quad4):
        """Test non-nodal fields are stored as given."""
        triangle3.set_field("master elements", [quad4])
        assert triangle3.get_field("master elements")[0] is quad4


@pytest.mark.unit
class TestTriangle6Split:

    def test_split_covers_parent(self, triangle6):
        """Test the 4 linear facets cover the parent triangle."""
        subs = triangle6.split()
        assert len(subs) == 4
        assert all(isinstance(s, Triangle3) for s in subs)
        assert np.isclose(sum(s.reference_area() for s in subs), 0.5)

    def test_split_keeps_orientation(self, triangle6):
        """Test facets keep the parent normal orientation."""
        for sub in triangle6.split():
            n = sub.surface_normal(sub.geometry(), sub.reference_centroid())
            assert n[2] > 0.0

    def test_split_copies_nodal_fields(self, triangle6):
        """Test facets inherit connectivity and nodal fields."""
        normals = np.tile([0.0, 0.0, 1.0], (6, 1))
        triangle6.set_field("normal", normals)
        sub = triangle6.split()[1]
        assert sub.connect.tolist() == [3, 1, 4]
        assert np.allclose(sub.get_field("geometry"), triangle6.get_field("geometry")[[3, 1, 4]])
        assert np.allclose(sub.get_field("normal"), normals[:3])


@pytest.mark.unit
def test_create_elements_by_size():
    """Test element type is chosen from the connectivity length."""
    elements = create_elements([[0, 1, 2], [0, 1, 2, 3], [0, 1, 2, 3, 4, 5]])
    assert [type(e) for e in elements] == [Triangle3, Quad4, Triangle6]
    with pytest.raises(ValueError):
        create_elements([[0, 1, 2, 3, 4]])
