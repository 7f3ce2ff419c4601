"""
Mortar3D Objects

Surface elements and the contact kernel.

Subpackages
-----------
FEM : Surface finite elements
    - Triangle3, Triangle6, Quad4

Contact : Mortar contact kernel
    - MortarContact, ContactProperties
"""

from .Contact import ContactProperties, MortarContact
from .FEM import Quad4, Triangle3, Triangle6

__all__ = [
    'Triangle3',
    'Triangle6',
    'Quad4',
    'MortarContact',
    'ContactProperties',
]
