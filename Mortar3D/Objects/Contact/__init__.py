"""
Mortar Contact Module

This module provides the 3D mortar (segment-to-segment) contact kernel
between a slave and a master surface.

Pipeline
--------
Geometry : local frames and projections
    - create_orthogonal_basis, create_rotation_matrix
    - project_vertex_to_auxiliary_plane, project_vertex_to_surface
    - calculate_normals

Clipping : polygon clipping and integration cells
    - get_polygon_clip, check_orientation, polygon_area, calculate_centroid
    - create_contact_segmentation, get_cells, ContactSegment

MortarIntegrator : D/M/g integration per segment, dual basis

EdgeTransform : alpha transform for quadratic slave elements

ContactState : active set and operator post-processing

MortarContact : element assembly drivers and the global state machine

Usage
-----
>>> from Mortar3D.Objects.Contact import MortarContact, ContactProperties
>>> contact = MortarContact(ContactProperties(dual_basis=True))
>>> assembly = contact.assemble(problem, time=0.0)
"""

from .BaseContact import BaseContact
from .Clipping import (ContactSegment, calculate_centroid, check_orientation, create_contact_segmentation,
                       get_cells, get_polygon_clip, polygon_area)
from .ContactState import NodeContactState, NodeState, apply_contact_state, classify_nodes, resolve_initial_state
from .EdgeTransform import build_global_transform, edge_transform
from .Exceptions import GeometricDegeneracyError, ProjectionError, SingularDualBasisError
from .Geometry import (calculate_normals, create_orthogonal_basis, create_rotation_matrix,
                       project_vertex_to_auxiliary_plane, project_vertex_to_surface)
from .IntegrationRule import IntegrationCell, IntegrationPoint, gauss_points_2d_triangle
from .Mortar import ContactAssembly, MortarContact
from .MortarIntegrator import SegmentContribution, dual_basis_coefficients, integrate_segment
from .Properties import ContactConstants, ContactProperties, InitialContactState
from .SparseAssembly import SparseMatrixCOO, SparseVectorCOO, drop_small

__all__ = [
    # Formulation
    'BaseContact',
    'MortarContact',
    'ContactAssembly',
    'ContactProperties',
    'ContactConstants',
    'InitialContactState',
    # Geometry
    'create_orthogonal_basis',
    'create_rotation_matrix',
    'project_vertex_to_auxiliary_plane',
    'project_vertex_to_surface',
    'calculate_normals',
    # Clipping
    'ContactSegment',
    'get_polygon_clip',
    'check_orientation',
    'polygon_area',
    'calculate_centroid',
    'create_contact_segmentation',
    'get_cells',
    # Integration
    'IntegrationPoint',
    'IntegrationCell',
    'gauss_points_2d_triangle',
    'SegmentContribution',
    'integrate_segment',
    'dual_basis_coefficients',
    'edge_transform',
    'build_global_transform',
    # State
    'NodeState',
    'NodeContactState',
    'resolve_initial_state',
    'classify_nodes',
    'apply_contact_state',
    # Sparse
    'SparseMatrixCOO',
    'SparseVectorCOO',
    'drop_small',
    # Exceptions
    'GeometricDegeneracyError',
    'SingularDualBasisError',
    'ProjectionError',
]
