"""
Contact Geometry in 3D
======================

Local frames, auxiliary plane projections and nodal normals used by the
mortar segmentation.

**Orthogonal basis**:
    For a unit normal n the tangents are t1 = n x e_k / ||n x e_k|| and
    t2 = n x t1, where e_k is the coordinate axis giving the largest
    ||n x e_k||. The frame {n, t1, t2} is right-handed and orthonormal.

**Auxiliary plane**:
    Plane through x0 with unit normal n0. Slave and master nodes are
    projected orthogonally onto it before clipping.

**Projection back to a surface**:
    A point p on the auxiliary plane is mapped to the element coordinate
    xi such that x(xi) = p + alpha n0 (Newton iteration on xi, alpha).
"""

import warnings
from typing import Dict, Iterable, Optional, Sequence, Tuple

import numpy as np
import scipy.linalg as la

from .Exceptions import GeometricDegeneracyError, ProjectionError
from .Properties import ContactConstants


def create_orthogonal_basis(n: Sequence[float]) -> Tuple[np.ndarray, np.ndarray]:
    """
    Two unit tangents spanning the orthogonal complement of n.

    Parameters
    ----------
    n : array_like
        Unit normal (3,). Must be nonzero.

    Returns
    -------
    t1, t2 : np.ndarray
        Tangents with n = t1 x t2.
    """
    n = np.asarray(n, dtype=float)
    axes = np.eye(3)
    k = int(np.argmax([np.linalg.norm(np.cross(n, e)) for e in axes]))
    t1 = np.cross(n, axes[k])
    t1 /= np.linalg.norm(t1)
    t2 = np.cross(n, t1)
    return t1, t2


def create_rotation_matrix(element, time: Optional[float] = None) -> np.ndarray:
    """
    Block-diagonal rotation Q = blockdiag([n_i | t1_i | t2_i]) for the
    element nodes. Q.T rotates nodal xyz quantities to the normal-tangent
    frame.
    """
    normals = np.asarray(element.get_field("normal", time), dtype=float)
    blocks = []
    for n in normals:
        t1, t2 = create_orthogonal_basis(n)
        blocks.append(np.column_stack((n, t1, t2)))
    return la.block_diag(*blocks)


def project_vertex_to_auxiliary_plane(p: Sequence[float], x0: Sequence[float],
                                      n0: Sequence[float]) -> np.ndarray:
    """Orthogonal projection of p onto the plane through x0 with normal n0."""
    p = np.asarray(p, dtype=float)
    n0 = np.asarray(n0, dtype=float)
    n0 = n0 / np.linalg.norm(n0)
    return p - np.dot(p - np.asarray(x0, dtype=float), n0) * n0


def project_vertex_to_surface(p: Sequence[float], n0: Sequence[float], element, X: np.ndarray,
                              tolerance: float = ContactConstants.PROJECTION_TOLERANCE,
                              max_iterations: int = ContactConstants.PROJECTION_MAX_ITERATIONS
                              ) -> Tuple[np.ndarray, float]:
    """
    Find natural coordinates xi on `element` with geometry X such that
    x(xi) lies on the line through p along n0.

    Newton iteration on (xi, eta, alpha) for the residual
        R = x(xi, eta) - alpha n0 - p
    with Jacobian [dx/dxi | dx/deta | -n0], starting at the reference
    centroid.

    Returns
    -------
    xi : np.ndarray
        Natural coordinates (2,)
    alpha : float
        Signed distance from p to the surface along n0

    Raises
    ------
    ProjectionError
        If the Newton matrix is singular or the iteration does not converge.
    """
    p = np.asarray(p, dtype=float)
    n0 = np.asarray(n0, dtype=float)
    X = np.asarray(X, dtype=float)

    theta = np.zeros(3)
    theta[:2] = element.reference_centroid()

    for _ in range(max_iterations):
        xi = theta[:2]
        x = element.interpolate(X, xi)
        R = x - theta[2] * n0 - p
        J = np.column_stack((element.jacobian(X, xi), -n0))
        try:
            dtheta = np.linalg.solve(J, -R)
        except np.linalg.LinAlgError as exc:
            raise ProjectionError(
                f"Singular tangent system projecting {p} onto {element}") from exc
        theta += dtheta
        if np.linalg.norm(dtheta) < tolerance:
            return theta[:2].copy(), float(theta[2])

    raise ProjectionError(
        f"Projection of {p} onto {element} did not converge in {max_iterations} iterations")


def calculate_normals(elements: Iterable, time: Optional[float] = None,
                      rotate_normals: bool = False, deformed: bool = False) -> Dict[int, np.ndarray]:
    """
    Nodal normals of a surface as normalized sums of the element normals
    a1 x a2 evaluated at each node.

    Returns
    -------
    dict
        {node_id: unit normal (3,)}
    """
    normals: Dict[int, np.ndarray] = {}
    for element in elements:
        X = element.geometry(time, deformed=deformed)
        for node, xi in zip(element.connect, element.reference_coordinates()):
            n = element.surface_normal(X, xi)
            normals[int(node)] = normals.get(int(node), np.zeros(3)) + n

    for node, n in normals.items():
        length = np.linalg.norm(n)
        if length == 0.0:
            raise GeometricDegeneracyError(f"Zero nodal normal at node {node}")
        normals[node] = -n / length if rotate_normals else n / length
    return normals


def check_reference_domain(element, xi: np.ndarray,
                           tolerance: float = ContactConstants.REFERENCE_DOMAIN_TOLERANCE) -> bool:
    """True if xi lies inside the element's reference domain (up to tolerance)."""
    inside = element.contains(xi, tolerance)
    if not inside:
        warnings.warn(f"Projected point xi={xi} lies outside the reference domain of {element}")
    return inside
