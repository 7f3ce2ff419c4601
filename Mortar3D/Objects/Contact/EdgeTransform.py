"""
Edge transform for quadratic (Tri6) slave elements.

The corner shape functions of a Tri6 element integrate to zero, which makes
the standard mortar matrix D singular at the corners. The modified basis
N_hat = T^T N moves a share alpha of every mid-side function to its two
corner nodes:

    T = [ 1   0   0   0       0       0      ]
        [ 0   1   0   0       0       0      ]
        [ 0   0   1   0       0       0      ]
        [ a   a   0   1-2a    0       0      ]
        [ 0   a   a   0       1-2a    0      ]
        [ a   0   a   0       0       1-2a   ]

The assembled operators are brought back to nodal unknowns with
C <- C inv(T), built once for the whole slave surface.
"""

from typing import Iterable, Tuple

import numpy as np
import scipy.sparse as sp

from .SparseAssembly import SparseMatrixCOO


def edge_transform(alpha: float) -> Tuple[np.ndarray, np.ndarray]:
    """
    Local transform Te and its inverse invTe (6x6).

    Raises
    ------
    ValueError
        If alpha == 0.5 (singular transform).
    """
    if np.isclose(1.0 - 2.0 * alpha, 0.0):
        raise ValueError("alpha = 0.5 makes the edge transform singular")

    Te = np.eye(6)
    invTe = np.eye(6)
    b = 1.0 - 2.0 * alpha
    for row, (i, j) in zip((3, 4, 5), ((0, 1), (1, 2), (0, 2))):
        Te[row, row] = b
        Te[row, i] = Te[row, j] = alpha
        invTe[row, row] = 1.0 / b
        invTe[row, i] = invTe[row, j] = -alpha / b
    return Te, invTe


def build_global_transform(problem, elements: Iterable, alpha: float,
                           ndofs: int) -> Tuple[sp.csr_matrix, sp.csr_matrix]:
    """
    Global T and inv(T) for all quadratic slave elements.

    Nodal blocks are scattered per field component over dofs[i::3]. Shared
    entries are replaced, not summed; untouched rows get an identity.
    """
    Te, invTe = edge_transform(alpha)
    field_dim = problem.DOF_PER_NODE
    T = SparseMatrixCOO()
    invT = SparseMatrixCOO()
    for element in elements:
        if element.nd != 6:
            continue
        dofs = problem.get_gdofs(element)
        for i in range(field_dim):
            ldofs = dofs[i::field_dim]
            T.add(ldofs, ldofs, Te)
            invT.add(ldofs, ldofs, invTe)

    T = _replace_duplicates(T, ndofs)
    invT = _replace_duplicates(invT, ndofs)

    d = np.ones(ndofs)
    d[np.unique(T.nonzero()[0])] = 0.0
    T = (T + sp.diags(d)).tocsr()
    invT = (invT + sp.diags(d)).tocsr()
    return T, invT


def _replace_duplicates(A: SparseMatrixCOO, ndofs: int) -> sp.csr_matrix:
    """Compress triplets keeping the last value written for each (row, col)."""
    rows, cols, vals = A.triplets()
    if rows.size == 0:
        return sp.csr_matrix((ndofs, ndofs))
    keys = rows * ndofs + cols
    # last occurrence of each key
    _, idx = np.unique(keys[::-1], return_index=True)
    idx = len(keys) - 1 - idx
    return sp.coo_matrix((vals[idx], (rows[idx], cols[idx])), shape=(ndofs, ndofs)).tocsr()
