"""
Shared fixtures for Mortar3D tests.

This module provides simple, reusable fixtures for testing.
"""
import numpy as np
import pytest

from Mortar3D.Objects.Contact.Mortar import MortarContact
from Mortar3D.Objects.Contact.Properties import ContactProperties
from Mortar3D.Objects.FEM.Quads import Quad4
from Mortar3D.Objects.FEM.Triangles import Triangle3, Triangle6
from Mortar3D.Structures.ContactProblem import ContactProblem


# =============================================================================
# Coordinate Fixtures
# =============================================================================

@pytest.fixture
def unit_triangle_coords():
    """Standard unit right triangle in the plane z=0."""
    return np.array([
        [0.0, 0.0, 0.0],
        [1.0, 0.0, 0.0],
        [0.0, 1.0, 0.0],
    ])


@pytest.fixture
def triangle6_coords():
    """Flat 6-node triangle: corners + mid-sides."""
    return np.array([
        [0.0, 0.0, 0.0],  # corner 1
        [1.0, 0.0, 0.0],  # corner 2
        [0.0, 1.0, 0.0],  # corner 3
        [0.5, 0.0, 0.0],  # mid-side 1-2
        [0.5, 0.5, 0.0],  # mid-side 2-3
        [0.0, 0.5, 0.0],  # mid-side 3-1
    ])


@pytest.fixture
def curved_triangle6_coords():
    """6-node triangle on z = 0.1 x^2: mid-side nodes 1-2 and 2-3 lie below their chords."""
    return np.array([
        [0.0, 0.0, 0.0],
        [1.0, 0.0, 0.1],
        [0.0, 1.0, 0.0],
        [0.5, 0.0, 0.025],
        [0.5, 0.5, 0.025],
        [0.0, 0.5, 0.0],
    ])


@pytest.fixture
def unit_square_coords():
    """Unit square (counter-clockwise) in the plane z=0."""
    return np.array([
        [0.0, 0.0, 0.0],
        [1.0, 0.0, 0.0],
        [1.0, 1.0, 0.0],
        [0.0, 1.0, 0.0],
    ])


# =============================================================================
# Element Fixtures
# =============================================================================

@pytest.fixture
def triangle3(unit_triangle_coords):
    """Triangle3 with geometry and zero displacement at t=0."""
    element = Triangle3([0, 1, 2])
    element.set_field("geometry", unit_triangle_coords)
    element.set_field("displacement", np.zeros((3, 3)))
    return element


@pytest.fixture
def triangle6(triangle6_coords):
    element = Triangle6([0, 1, 2, 3, 4, 5])
    element.set_field("geometry", triangle6_coords)
    element.set_field("displacement", np.zeros((6, 3)))
    return element


@pytest.fixture
def quad4(unit_square_coords):
    element = Quad4([0, 1, 2, 3])
    element.set_field("geometry", unit_square_coords)
    element.set_field("displacement", np.zeros((4, 3)))
    return element


# =============================================================================
# Problem Fixtures
# =============================================================================

def make_pair_problem(coords, n_slave_nodes, gap=0.0, **properties):
    """
    Slave surface on nodes [0, n) and an identical master surface on
    nodes [n, 2n), shifted by `gap` along +z.
    """
    coords = np.asarray(coords, dtype=float)
    master = coords.copy()
    master[:, 2] += gap
    all_coords = np.vstack((coords, master))
    slave_conn = [list(range(n_slave_nodes))]
    master_conn = [list(range(n_slave_nodes, 2 * n_slave_nodes))]
    contact = MortarContact(ContactProperties(**properties))
    return ContactProblem.from_arrays(all_coords, slave_conn, master_conn, contact)


@pytest.fixture
def tri3_pair(unit_triangle_coords):
    """Coincident Tri3 slave/master pair at zero gap."""
    return make_pair_problem(unit_triangle_coords, 3)


@pytest.fixture
def quad4_pair(unit_square_coords):
    """Coincident unit square Quad4 pair, quartic-exact cell quadrature."""
    return make_pair_problem(unit_square_coords, 4, integration_order=4)


@pytest.fixture
def tri6_pair(triangle6_coords):
    return make_pair_problem(triangle6_coords, 6)


# =============================================================================
# Helper Functions
# =============================================================================

def tri3_mass_matrix(area):
    """Consistent mass matrix of a linear triangle."""
    return area / 12.0 * np.array([
        [2.0, 1.0, 1.0],
        [1.0, 2.0, 1.0],
        [1.0, 1.0, 2.0],
    ])


def quad4_mass_matrix():
    """Consistent mass matrix of the unit square Quad4."""
    return np.array([
        [4.0, 2.0, 1.0, 2.0],
        [2.0, 4.0, 2.0, 1.0],
        [1.0, 2.0, 4.0, 2.0],
        [2.0, 1.0, 2.0, 4.0],
    ]) / 36.0


def shoelace_area(points_2d):
    """Area of a simple polygon from its 2D vertices."""
    x, y = np.asarray(points_2d).T
    return 0.5 * abs(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1)))


def is_orthonormal(Q, tol=1e-10):
    """Check Q^T Q = I."""
    return np.allclose(Q.T @ Q, np.eye(Q.shape[1]), atol=tol)
