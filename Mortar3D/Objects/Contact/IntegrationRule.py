from dataclasses import dataclass, field
from typing import List, Tuple

import numpy as np


@dataclass
class IntegrationPoint:
    """
    Integration point of a triangular integration cell.

    Attributes
    ----------
    xi, eta : float
        Natural coordinates in the reference triangle
    weight : float
        Reference weight (weights of a rule sum to 0.5)
    """
    xi: float
    eta: float
    weight: float


def gauss_points_2d_triangle(order: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Gauss quadrature for triangular domains.

    Parameters
    ----------
    order : int
        Integration order (1 to 5)
        - order 1: 1-point rule (exact for linear)
        - order 2: 3-point rule (exact for quadratic)
        - order 3: 4-point rule (exact for cubic)
        - order 4: 6-point rule (exact for quartic)
        - order 5: 7-point rule (exact for quintic)

    Returns
    -------
    points : np.ndarray
        Gauss points in natural coordinates (ξ, η), shape (n_points, 2)
    weights : np.ndarray
        Corresponding weights (sum to 0.5 for unit triangle)
    """
    if order == 1:
        # 1-point rule (centroid)
        points = np.array([[1.0/3.0, 1.0/3.0]])
        weights = np.array([0.5])

    elif order == 2:
        # 3-point rule (vertices of sub-triangle)
        points = np.array([
            [1.0/6.0, 1.0/6.0],
            [2.0/3.0, 1.0/6.0],
            [1.0/6.0, 2.0/3.0]
        ])
        weights = np.array([1.0/6.0, 1.0/6.0, 1.0/6.0])

    elif order == 3:
        # 4-point rule
        a = 1.0 / 3.0
        b = 0.2
        c = 0.6
        points = np.array([
            [a, a],
            [b, b],
            [c, b],
            [b, c]
        ])
        w1 = -27.0 / 96.0
        w2 = 25.0 / 96.0
        weights = np.array([w1, w2, w2, w2])

    elif order == 4:
        # 6-point rule (Strang-Fix / Dunavant)
        a1, b1 = 0.445948490915965, 0.108103018168070
        a2, b2 = 0.091576213509771, 0.816847572980459
        points = np.array([
            [a1, a1], [b1, a1], [a1, b1],
            [a2, a2], [b2, a2], [a2, b2],
        ])
        w1 = 0.223381589678011 / 2.0
        w2 = 0.109951743655322 / 2.0
        weights = np.array([w1, w1, w1, w2, w2, w2])

    elif order == 5:
        # 7-point rule (Dunavant)
        a1, b1 = 0.470142064105115, 0.059715871789770
        a2, b2 = 0.101286507323456, 0.797426985353087
        points = np.array([
            [1.0/3.0, 1.0/3.0],
            [a1, a1], [b1, a1], [a1, b1],
            [a2, a2], [b2, a2], [a2, b2],
        ])
        w0 = 0.225 / 2.0
        w1 = 0.132394152788506 / 2.0
        w2 = 0.125939180544827 / 2.0
        weights = np.array([w0, w1, w1, w1, w2, w2, w2])

    else:
        raise ValueError(f"Unsupported 2D integration order: {order}. "
                         f"Supported orders: 1, 2, 3, 4, 5")

    return points, weights


def get_integration_points(order: int = 2) -> List[IntegrationPoint]:
    points, weights = gauss_points_2d_triangle(order)
    return [IntegrationPoint(float(p[0]), float(p[1]), float(w)) for p, w in zip(points, weights)]


@dataclass
class IntegrationCell:
    """
    Flat triangular sub-region of a contact polygon.

    The cell is parametrized as a linear triangle
        x(ξ, η) = (1-ξ-η) x_1 + ξ x_2 + η x_3
    so its Jacobian determinant is constant.
    """
    vertices: np.ndarray
    order: int = 2
    points: List[IntegrationPoint] = field(init=False, repr=False)

    def __post_init__(self):
        self.vertices = np.asarray(self.vertices, dtype=float)
        if self.vertices.shape != (3, 3):
            raise ValueError(f"Integration cell needs 3 vertices in 3D, got shape {self.vertices.shape}")
        self.points = get_integration_points(self.order)

    def map(self, xi: float, eta: float) -> np.ndarray:
        N = np.array([1.0 - xi - eta, xi, eta])
        return N @ self.vertices

    def detJ(self) -> float:
        a1 = self.vertices[1] - self.vertices[0]
        a2 = self.vertices[2] - self.vertices[0]
        return float(np.linalg.norm(np.cross(a1, a2)))

    @property
    def area(self) -> float:
        return 0.5 * self.detJ()

    def __iter__(self):
        """Yield (x_gauss, w) with w = ip.weight * detJ."""
        detJ = self.detJ()
        for ip in self.points:
            yield self.map(ip.xi, ip.eta), ip.weight * detJ
