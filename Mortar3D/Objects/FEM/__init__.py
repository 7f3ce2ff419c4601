"""
Surface Finite Element (FEM) Module

This module provides the surface elements consumed by the contact kernel:
basis functions, Jacobians and time-indexed nodal field storage.

Elements
--------
BaseFE : Abstract base class for all surface elements

Element3D : Isoparametric surface element embedded in 3D
    - Triangle3: 3-node linear triangle
    - Triangle6: 6-node quadratic triangle (can be split into 4 Triangle3)
    - Quad4: 4-node bilinear quadrilateral

Fields
------
Each element stores named fields per time: 'geometry', 'displacement',
'normal', 'reaction force' (nodal, shape (nd, 3)) and 'master elements'.
"""

from .BaseFE import BaseFE
from .Element3D import Element3D
from .Quads import Quad4
from .Triangles import Triangle3, Triangle6, create_elements

__all__ = [
    'BaseFE',
    'Element3D',
    'Triangle3',
    'Triangle6',
    'Quad4',
    'create_elements',
]
