from typing import List, Tuple

import numpy as np

from Mortar3D.Objects.FEM.Element3D import Element3D


class Quad4(Element3D):
    """
    4-node bilinear quadrilateral surface element.

    Node numbering (counter-clockwise from bottom-left):
        3-------2
        |       |
        |   η   |
        |   ↑   |
        |   →ξ  |
        0-------1

    Natural coordinates: ξ, η ∈ [-1, 1]
    """
    NB_NODES = 4
    ORDER = 1
    REFERENCE_SHAPE = "quad"

    XI_NODES = np.array([-1.0, 1.0, 1.0, -1.0])
    ETA_NODES = np.array([-1.0, -1.0, 1.0, 1.0])

    def N_dN(self, xi: float, eta: float) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        N_i = 1/4 (1 + ξ ξ_i)(1 + η η_i)
        """
        xi_i, eta_i = self.XI_NODES, self.ETA_NODES
        N = 0.25 * (1.0 + xi * xi_i) * (1.0 + eta * eta_i)
        dN_dxi = 0.25 * xi_i * (1.0 + eta * eta_i)
        dN_deta = 0.25 * eta_i * (1.0 + xi * xi_i)
        return N, dN_dxi, dN_deta

    def reference_coordinates(self) -> np.ndarray:
        return np.column_stack((self.XI_NODES, self.ETA_NODES))

    def reference_centroid(self) -> np.ndarray:
        return np.array([0.0, 0.0])

    def outline(self) -> List[int]:
        return [0, 1, 2, 3]

    def quad_rule(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """2x2 Gauss rule on [-1,1]x[-1,1]."""
        g = 1.0 / np.sqrt(3.0)
        XI = np.array([-g, g, g, -g])
        ETA = np.array([-g, -g, g, g])
        W = np.ones(4)
        return XI, ETA, W
