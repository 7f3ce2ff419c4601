"""
Mortar3D - 3D Mortar Contact Assembly

A Python framework for segment-to-segment contact between deformable 3D
surfaces discretized by finite elements:
- Auxiliary plane projection and polygon clipping of slave/master elements
- Mortar integration with standard or dual (biorthogonal) basis
- Linear (Tri3, Quad4) and quadratic (Tri6) slave elements
- Active set classification (inactive / active slip) of the slave nodes

Main Components
---------------
Structures : ContactProblem (elements, DOFs, nodal fields)
Objects : Surface elements (FEM) and contact kernel (Contact)
PostProcessing : HDF5 export and 3D plots

Quick Start
-----------
>>> from Mortar3D import ContactProblem, MortarContact, ContactProperties
>>> contact = MortarContact(ContactProperties(contact_state_in_first_iteration="AUTO"))
>>> problem = ContactProblem.from_arrays(coords, slave_connectivity, master_connectivity, contact)
>>> assembly = problem.assemble(time=0.0)
>>> assembly.C2, assembly.D, assembly.g
"""

__version__ = '0.1.0'

from Mortar3D import Objects
from Mortar3D.Objects.Contact import (ContactAssembly, ContactProperties, GeometricDegeneracyError,
                                      InitialContactState, MortarContact, ProjectionError,
                                      SingularDualBasisError)
from Mortar3D.Structures import ContactProblem

__all__ = [
    'Objects',
    'ContactProblem',
    'MortarContact',
    'ContactAssembly',
    'ContactProperties',
    'InitialContactState',
    'GeometricDegeneracyError',
    'SingularDualBasisError',
    'ProjectionError',
]
