"""
Post-processing of contact assemblies

ContactPlotter : 3D plots of segmentations and node states
PlotStyle : Plot styling configuration
export_contact_results : HDF5 export of operators and node states
"""

from .Export import export_contact_results, read_sparse
from .Plotter import ContactPlotter, PlotStyle

__all__ = ['ContactPlotter', 'PlotStyle', 'export_contact_results', 'read_sparse']
