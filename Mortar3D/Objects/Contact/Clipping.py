"""
Polygon Clipping and Contact Segmentation
=========================================

A slave element and each of its master elements are projected onto the
auxiliary plane (x0, n0). Their outlines are intersected in 2D plane
coordinates, the resulting convex polygon is oriented counter-clockwise
about n0 and split into triangular integration cells around its centroid.

    slave outline S  ─┐
                      ├─> clip P = S ∩ M ─> fan(P, C0) ─> IntegrationCell
    master outline M ─┘
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np
from shapely.geometry import Polygon

from .Exceptions import GeometricDegeneracyError
from .Geometry import create_orthogonal_basis, project_vertex_to_auxiliary_plane
from .IntegrationRule import IntegrationCell
from .Properties import ContactConstants


@dataclass
class ContactSegment:
    """
    Overlap of one slave element projection with one master element
    projection on the auxiliary plane.

    Attributes
    ----------
    master_element : Element3D
        Master element of the overlap
    vertices : np.ndarray
        Polygon vertices in 3D (n, 3), counter-clockwise about n0
    centroid : np.ndarray
        Area-weighted centroid (3,)
    area : float
        Polygon area
    """
    master_element: object
    vertices: np.ndarray
    centroid: np.ndarray
    area: float

    @property
    def nb_vertices(self) -> int:
        return len(self.vertices)


def _plane_coordinates(points: np.ndarray, x0: np.ndarray, t1: np.ndarray, t2: np.ndarray) -> np.ndarray:
    d = np.asarray(points, dtype=float) - x0
    return np.column_stack((d @ t1, d @ t2))


def get_polygon_clip(S: Sequence, M: Sequence, n0: Sequence[float]) -> np.ndarray:
    """
    Intersection of two convex polygons lying on the same plane.

    Parameters
    ----------
    S, M : array_like
        Polygon vertices (n, 3) on the plane with normal n0
    n0 : array_like
        Plane normal

    Returns
    -------
    P : np.ndarray
        Vertices of the intersection (k, 3). Empty (0, 3) when the
        polygons only touch or do not overlap.
    """
    S = np.asarray(S, dtype=float)
    M = np.asarray(M, dtype=float)
    n0 = np.asarray(n0, dtype=float)
    n0 = n0 / np.linalg.norm(n0)
    x0 = S.mean(axis=0)
    t1, t2 = create_orthogonal_basis(n0)

    poly_s = Polygon(_plane_coordinates(S, x0, t1, t2))
    poly_m = Polygon(_plane_coordinates(M, x0, t1, t2))
    if not (poly_s.is_valid and poly_m.is_valid) or poly_s.area == 0.0 or poly_m.area == 0.0:
        return np.zeros((0, 3))

    clip = poly_s.intersection(poly_m)
    if clip.is_empty or clip.geom_type != "Polygon":
        return np.zeros((0, 3))

    # exterior ring repeats its first point
    uv = np.asarray(clip.exterior.coords)[:-1]
    if len(uv) < 3:
        return np.zeros((0, 3))
    return x0 + np.outer(uv[:, 0], t1) + np.outer(uv[:, 1], t2)


def check_orientation(P: np.ndarray, n0: Sequence[float]) -> np.ndarray:
    """Return P ordered counter-clockwise when viewed against n0."""
    P = np.asarray(P, dtype=float)
    C = P.mean(axis=0)
    n0 = np.asarray(n0, dtype=float)
    signed = sum(np.dot(np.cross(P[i] - C, P[(i + 1) % len(P)] - C), n0) for i in range(len(P)))
    if signed < 0.0:
        return P[::-1].copy()
    return P


def polygon_area(P: np.ndarray) -> float:
    """Area of a convex polygon by fan-triangulation from the first vertex."""
    P = np.asarray(P, dtype=float)
    return float(sum(0.5 * np.linalg.norm(np.cross(P[i] - P[0], P[i + 1] - P[0]))
                     for i in range(1, len(P) - 1)))


def calculate_centroid(P: np.ndarray) -> np.ndarray:
    """Area-weighted centroid of a convex polygon (fan from the first vertex)."""
    P = np.asarray(P, dtype=float)
    total = 0.0
    C = np.zeros(3)
    for i in range(1, len(P) - 1):
        A = 0.5 * np.linalg.norm(np.cross(P[i] - P[0], P[i + 1] - P[0]))
        C += A * (P[0] + P[i] + P[i + 1]) / 3.0
        total += A
    if total == 0.0:
        return P.mean(axis=0)
    return C / total


def get_cells(P: np.ndarray, C0: np.ndarray, order: int = 2) -> List[IntegrationCell]:
    """Fan-triangulate polygon P around C0 into integration cells [C0, P_i, P_i+1]."""
    P = np.asarray(P, dtype=float)
    n = len(P)
    return [IntegrationCell(np.array([C0, P[i], P[(i + 1) % n]]), order=order) for i in range(n)]


def create_contact_segmentation(slave_element, master_elements, x0: Sequence[float], n0: Sequence[float],
                                time: Optional[float] = None, deformed: bool = False) -> List[ContactSegment]:
    """
    Contact segments between one slave element and a list of master elements.

    Parameters
    ----------
    slave_element : Element3D
        Slave element (its outline nodes are projected)
    master_elements : iterable of Element3D
        Candidate master elements
    x0, n0 : array_like
        Auxiliary plane point and normal
    deformed : bool
        Use X + u instead of X for both sides

    Returns
    -------
    list of ContactSegment
        One per master element with a true (area) overlap. An empty list is
        a valid result (no contact).

    Raises
    ------
    GeometricDegeneracyError
        If a clip passes the vertex filter with (near) zero area.
    """
    x0 = np.asarray(x0, dtype=float)
    n0 = np.asarray(n0, dtype=float)

    x1 = slave_element.geometry(time, deformed)[slave_element.outline()]
    S = np.array([project_vertex_to_auxiliary_plane(p, x0, n0) for p in x1])
    area_scale = polygon_area(S)

    result = []
    for master_element in master_elements:
        x2 = master_element.geometry(time, deformed)[master_element.outline()]
        M = np.array([project_vertex_to_auxiliary_plane(p, x0, n0) for p in x2])
        P = get_polygon_clip(S, M, n0)
        if len(P) < 3:
            continue
        P = check_orientation(P, n0)
        P_area = polygon_area(P)
        if P_area <= ContactConstants.ZERO_AREA_TOLERANCE * area_scale:
            raise GeometricDegeneracyError(
                f"Polygon clip between {slave_element} and {master_element} has zero area")
        C0 = calculate_centroid(P)
        result.append(ContactSegment(master_element, P, C0, P_area))
    return result
