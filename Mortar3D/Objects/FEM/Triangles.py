"""
Triangular Surface Elements in 3D
=================================

This module implements triangular surface elements used by the mortar
contact kernel:

1. **Triangle3**: 3-node linear, flat facet
2. **Triangle6**: 6-node quadratic, curved facet

**Natural (Area) Coordinates for Triangles**:
    Uses coordinates (xi, eta) where:
    - xi = 0 to 1 (from node 1 toward node 2)
    - eta = 0 to 1 (from node 1 toward node 3)
    - zeta = 1 - xi - eta (third coordinate)

The geometry x(xi, eta) = sum_i N_i(xi, eta) X_i lives in 3D, so the
Jacobian is a 3x2 matrix of tangent vectors and detJ = ||a1 x a2||.

Node Numbering (counter-clockwise):
    Triangle3:           Triangle6:
        3                    3
       /\\                   /\\
      /  \\                 6  5
     /    \\               /    \\
    1------2             1---4---2
"""

from typing import List, Sequence, Tuple

import numpy as np

from Mortar3D.Objects.FEM.Element3D import Element3D
from Mortar3D.Objects.FEM.Quads import Quad4


class Triangle3(Element3D):
    """
    3-node linear triangular surface element.

    Natural coordinates: (ξ, η) ∈ [0,1] with ζ = 1-ξ-η
    """
    NB_NODES = 3
    ORDER = 1

    def N_dN(self, xi: float, eta: float) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        N1 = ζ = 1-ξ-η, N2 = ξ, N3 = η
        """
        zeta = 1.0 - xi - eta
        N = np.array([zeta, xi, eta])
        dN_dxi = np.array([-1.0, 1.0, 0.0])
        dN_deta = np.array([-1.0, 0.0, 1.0])
        return N, dN_dxi, dN_deta

    def reference_coordinates(self) -> np.ndarray:
        return np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]])

    def reference_centroid(self) -> np.ndarray:
        return np.array([1.0 / 3.0, 1.0 / 3.0])

    def outline(self) -> List[int]:
        return [0, 1, 2]

    def quad_rule(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        # 1-point rule at centroid (exact for flat facet)
        return np.array([1.0 / 3.0]), np.array([1.0 / 3.0]), np.array([0.5])


class Triangle6(Element3D):
    """
    6-node quadratic triangular surface element.

    Corners 1, 2, 3 are followed by the mid-side nodes 4 (1-2), 5 (2-3) and
    6 (3-1).
    """
    NB_NODES = 6
    ORDER = 2

    # Local node triplets of the four linear facets, ordered so that every
    # facet keeps the orientation of the parent element.
    SUB_TRIANGLES = ((0, 3, 5), (3, 1, 4), (5, 4, 2), (3, 4, 5))

    def N_dN(self, xi: float, eta: float) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        zeta = 1.0 - xi - eta

        N = np.array([
            zeta * (2.0 * zeta - 1.0),
            xi * (2.0 * xi - 1.0),
            eta * (2.0 * eta - 1.0),
            4.0 * xi * zeta,
            4.0 * xi * eta,
            4.0 * eta * zeta,
        ])

        dN_dxi = np.array([
            -(4.0 * zeta - 1.0),
            4.0 * xi - 1.0,
            0.0,
            4.0 * (zeta - xi),
            4.0 * eta,
            -4.0 * eta,
        ])

        dN_deta = np.array([
            -(4.0 * zeta - 1.0),
            0.0,
            4.0 * eta - 1.0,
            -4.0 * xi,
            4.0 * xi,
            4.0 * (zeta - eta),
        ])

        return N, dN_dxi, dN_deta

    def reference_coordinates(self) -> np.ndarray:
        return np.array([
            [0.0, 0.0], [1.0, 0.0], [0.0, 1.0],
            [0.5, 0.0], [0.5, 0.5], [0.0, 0.5],
        ])

    def reference_centroid(self) -> np.ndarray:
        return np.array([1.0 / 3.0, 1.0 / 3.0])

    def outline(self) -> List[int]:
        # Corners only; the curved edges are linearized for clipping
        return [0, 1, 2]

    def quad_rule(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        XI = np.array([1.0 / 6.0, 2.0 / 3.0, 1.0 / 6.0])
        ETA = np.array([1.0 / 6.0, 1.0 / 6.0, 2.0 / 3.0])
        W = np.array([1.0, 1.0, 1.0]) / 6.0
        return XI, ETA, W

    def split(self) -> List[Triangle3]:
        """
        Split into four linear facets carrying copies of all nodal fields.

        Non-nodal fields (e.g. the master element list) are shared.
        """
        sub_elements = []
        for local in self.SUB_TRIANGLES:
            local = list(local)
            sub = Triangle3(self.connect[local])
            for name, data in self.fields.items():
                for time, values in data.items():
                    if name in self.NON_NODAL_FIELDS:
                        sub.set_field(name, values, time)
                    else:
                        sub.set_field(name, np.asarray(values)[local].copy(), time)
            sub_elements.append(sub)
        return sub_elements


def create_elements(connectivity: Sequence[Sequence[int]], element_type=None) -> List[Element3D]:
    """
    Build surface elements from a connectivity table.

    The element type is deduced from the number of nodes per row when
    `element_type` is not given (3 -> Triangle3, 4 -> Quad4, 6 -> Triangle6).
    """
    by_size = {3: Triangle3, 4: Quad4, 6: Triangle6}
    elements = []
    for row in connectivity:
        cls = element_type or by_size.get(len(row))
        if cls is None:
            raise ValueError(f"No surface element with {len(row)} nodes")
        elements.append(cls(row))
    return elements
