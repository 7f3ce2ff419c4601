"""
Mortar3D Structure Classes

ContactProblem : two-surface contact problem
    - slave / master element lists and candidate assignment
    - node numbering, 3 DOF per node [ux, uy, uz]
    - nodal field distribution (geometry, displacement, reaction force)
"""

from .ContactProblem import ContactProblem

__all__ = ['ContactProblem']
