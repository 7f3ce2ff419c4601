from abc import abstractmethod
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from Mortar3D.Objects.FEM.BaseFE import BaseFE


class Element3D(BaseFE):
    """
    Isoparametric surface element embedded in 3D space.

    Subclasses provide the shape functions N, dN/dxi, dN/deta, the natural
    coordinates of the nodes and the outline (corner nodes in cyclic order).

    Field data (geometry, displacement, normal, reaction force, master
    elements, ...) is stored per field name and per time. Nodal fields are
    kept as (nd, 3) arrays in the element's local node order.
    """
    DOFS_PER_NODE = 3
    NB_NODES = 0
    ORDER = 1
    REFERENCE_SHAPE = "triangle"
    NON_NODAL_FIELDS = ("master elements",)

    def __init__(self, connect: Sequence[int]):
        """
        Parameters
        ----------
        connect : sequence of int
            Global node ids (0-based) in the element's local node order.
        """
        self.connect = np.asarray(connect, dtype=int)
        self.nd = len(self.connect)
        self.dpn = self.DOFS_PER_NODE
        self.edof = self.nd * self.dpn

        if self.nd != self.NB_NODES:
            raise ValueError(
                f"{type(self).__name__} requires exactly {self.NB_NODES} nodes, got {self.nd}")

        self.fields: Dict[str, Dict[float, object]] = {}

    # ----- API each subclass must provide -----
    @abstractmethod
    def N_dN(self, xi: float, eta: float) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Return (N, dN_dxi, dN_deta) at (xi,eta)
        N: (nd,), dN_dxi: (nd,), dN_deta: (nd,)
        """
        pass

    @abstractmethod
    def reference_coordinates(self) -> np.ndarray:
        """Natural coordinates of the nodes, shape (nd, 2)."""
        pass

    @abstractmethod
    def reference_centroid(self) -> np.ndarray:
        pass

    @abstractmethod
    def outline(self) -> List[int]:
        """Local indices of the corner nodes in cyclic order."""
        pass

    # ----- Field data -----
    def set_field(self, name: str, values, time: float = 0.0):
        """Store field `name` at `time`. Nodal fields are reshaped to (nd, k)."""
        if name not in self.NON_NODAL_FIELDS:
            values = np.array(values, dtype=float).reshape(self.nd, -1)
        self.fields.setdefault(name, {})[float(time)] = values

    def has_field(self, name: str) -> bool:
        return name in self.fields and len(self.fields[name]) > 0

    def get_field(self, name: str, time: Optional[float] = None):
        """
        Return field `name` at `time`.

        The exact time is used when stored, otherwise the latest stored time
        not after `time`, otherwise the earliest one. `time=None` returns the
        latest value.
        """
        if not self.has_field(name):
            raise KeyError(f"Field '{name}' is not defined for element {self.connect.tolist()}")

        data = self.fields[name]
        times = sorted(data)
        if time is None:
            return data[times[-1]]
        time = float(time)
        if time in data:
            return data[time]
        earlier = [t for t in times if t <= time]
        return data[earlier[-1]] if earlier else data[times[0]]

    # ----- Interpolation -----
    def interpolate(self, values: np.ndarray, xi: Sequence[float]) -> np.ndarray:
        """Interpolate nodal values (nd, k) at natural coordinates xi."""
        N, _, _ = self.N_dN(xi[0], xi[1])
        return N @ np.asarray(values, dtype=float)

    def jacobian(self, X: np.ndarray, xi: Sequence[float]) -> np.ndarray:
        """
        Tangent vectors of the surface at xi.

        Returns
        -------
        J : np.ndarray
            (3, 2) matrix [dx/dxi | dx/deta]
        """
        _, dN_dxi, dN_deta = self.N_dN(xi[0], xi[1])
        X = np.asarray(X, dtype=float)
        return np.column_stack((dN_dxi @ X, dN_deta @ X))

    def detJ(self, X: np.ndarray, xi: Sequence[float]) -> float:
        """Surface Jacobian determinant ||a1 x a2||."""
        J = self.jacobian(X, xi)
        return float(np.linalg.norm(np.cross(J[:, 0], J[:, 1])))

    def surface_normal(self, X: np.ndarray, xi: Sequence[float]) -> np.ndarray:
        """Unnormalized normal a1 x a2."""
        J = self.jacobian(X, xi)
        return np.cross(J[:, 0], J[:, 1])

    def geometry(self, time: Optional[float] = None, deformed: bool = False) -> np.ndarray:
        X = np.asarray(self.get_field("geometry", time), dtype=float)
        if deformed and self.has_field("displacement"):
            X = X + np.asarray(self.get_field("displacement", time), dtype=float)
        return X

    def contains(self, xi: Sequence[float], tolerance: float = 0.0) -> bool:
        """True if natural coordinates xi lie in the reference domain."""
        xi = np.asarray(xi, dtype=float)
        if self.REFERENCE_SHAPE == "quad":
            return bool(np.all(np.abs(xi) <= 1.0 + tolerance))
        return bool(xi[0] >= -tolerance and xi[1] >= -tolerance and xi[0] + xi[1] <= 1.0 + tolerance)

    def reference_area(self, time: Optional[float] = None) -> float:
        X = self.geometry(time)
        XI, ETA, W = self.quad_rule()
        return float(sum(w * self.detJ(X, (xi, eta)) for xi, eta, w in zip(XI, ETA, W)))

    @abstractmethod
    def quad_rule(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Return (XI, ETA, W) of quadrature in natural space."""
        pass

    def __repr__(self):
        return f"{type(self).__name__}({self.connect.tolist()})"
