"""
Per-Segment Mortar Integrator
=============================

For every integration cell of a contact segment and every Gauss point x_g
on it (weight w = ip.weight * detJ):

    xi_s = projection of x_g along n0 onto the slave element
    xi_m = projection of x_g along n0 onto the master element
    N1 = N_slave(xi_s),  N2 = N_master(xi_m),  Phi = Ae N1

    De += w Phi N1^T            (nsl x nsl)
    Me += w Phi N2^T            (nsl x nm)
    ge[3i:3i+3] += w Phi_i (x_m - x_s)

With the standard basis Ae = I. The dual (biorthogonal) basis uses
Ae = De_b inv(Me_b), where De_b = sum w diag(N1) and Me_b = sum w N1 N1^T
are integrated over all segments of the slave element beforehand.

Quadratic slave elements with an edge transform T use N1 = T^T N in De, Me
and Phi. The slave position x_s is always interpolated with the standard N.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .Clipping import ContactSegment, get_cells
from .Exceptions import SingularDualBasisError
from .Geometry import check_reference_domain, project_vertex_to_surface
from .Properties import ContactConstants


@dataclass
class SegmentContribution:
    """Local mortar matrices of one contact segment."""
    master_element: object
    De: np.ndarray
    Me: np.ndarray
    ge: np.ndarray


def slave_basis(element, xi: np.ndarray, T: Optional[np.ndarray] = None) -> np.ndarray:
    N, _, _ = element.N_dN(xi[0], xi[1])
    if T is not None:
        N = T.T @ N
    return N


def integrate_dual_basis(segment: ContactSegment, slave_element, Xs: np.ndarray, n0: np.ndarray,
                         T: Optional[np.ndarray] = None, order: int = 2,
                         De: Optional[np.ndarray] = None,
                         Me: Optional[np.ndarray] = None) -> Tuple[np.ndarray, np.ndarray]:
    """
    Accumulate the biorthogonality matrices of one segment.

    Returns
    -------
    De : np.ndarray
        sum w diag(N1)
    Me : np.ndarray
        sum w N1 N1^T
    """
    nsl = slave_element.nd
    De = np.zeros((nsl, nsl)) if De is None else De
    Me = np.zeros((nsl, nsl)) if Me is None else Me

    for cell in get_cells(segment.vertices, segment.centroid, order):
        for x_gauss, w in cell:
            xi_s, _ = project_vertex_to_surface(x_gauss, n0, slave_element, Xs)
            N1 = slave_basis(slave_element, xi_s, T)
            De += w * np.diag(N1)
            Me += w * np.outer(N1, N1)
    return De, Me


def dual_basis_coefficients(De: np.ndarray, Me: np.ndarray,
                            condition_limit: float = ContactConstants.DUAL_BASIS_CONDITION_LIMIT
                            ) -> np.ndarray:
    """
    Ae = De inv(Me).

    Raises
    ------
    SingularDualBasisError
        If Me is singular or its condition number exceeds `condition_limit`.
    """
    cond = np.linalg.cond(Me)
    if not np.isfinite(cond) or cond > condition_limit:
        raise SingularDualBasisError(
            f"Dual basis mass matrix is singular (cond = {cond:.3e})")
    # Ae Me = De  <=>  Me^T Ae^T = De^T
    return np.linalg.solve(Me.T, De.T).T


def integrate_segment(segment: ContactSegment, slave_element, master_element,
                      n0: np.ndarray, Xs: np.ndarray, xs: np.ndarray,
                      Xm: np.ndarray, xm: np.ndarray, Ae: np.ndarray,
                      T: Optional[np.ndarray] = None, order: int = 2) -> SegmentContribution:
    """
    Integrate De, Me and ge over one contact segment.

    Parameters
    ----------
    segment : ContactSegment
        Clipped polygon on the auxiliary plane
    slave_element, master_element : Element3D
        Elements the Gauss points are projected onto
    n0 : np.ndarray
        Auxiliary plane normal (projection direction)
    Xs, Xm : np.ndarray
        Nodal coordinates used for the projection
    xs, xm : np.ndarray
        Current nodal coordinates X + u used for the gap
    Ae : np.ndarray
        Dual basis coefficients (identity for the standard basis)
    T : np.ndarray, optional
        Edge transform applied to the slave shape functions
    """
    nsl = slave_element.nd
    nm = master_element.nd
    De = np.zeros((nsl, nsl))
    Me = np.zeros((nsl, nm))
    ge = np.zeros(3 * nsl)

    for cell in get_cells(segment.vertices, segment.centroid, order):
        for x_gauss, w in cell:
            xi_s, _ = project_vertex_to_surface(x_gauss, n0, slave_element, Xs)
            xi_m, _ = project_vertex_to_surface(x_gauss, n0, master_element, Xm)
            check_reference_domain(master_element, xi_m)

            N_std, _, _ = slave_element.N_dN(xi_s[0], xi_s[1])
            N1 = N_std if T is None else T.T @ N_std
            N2, _, _ = master_element.N_dN(xi_m[0], xi_m[1])
            Phi = Ae @ N1

            De += w * np.outer(Phi, N1)
            Me += w * np.outer(Phi, N2)

            # geometry uses the untransformed basis
            x_s = N_std @ xs
            x_m = N2 @ xm
            ge += w * np.outer(Phi, x_m - x_s).ravel()

    return SegmentContribution(master_element, De, Me, ge)


def expand_to_dofs(Ae: np.ndarray, field_dim: int = 3) -> np.ndarray:
    """Replicate a nodal matrix over interleaved DOFs: A3[i::fd, i::fd] = Ae."""
    n_rows, n_cols = Ae.shape
    A3 = np.zeros((field_dim * n_rows, field_dim * n_cols))
    for i in range(field_dim):
        A3[i::field_dim, i::field_dim] = Ae
    return A3


def scatter_segment(assembly, contribution: SegmentContribution, sdofs: np.ndarray,
                    mdofs: np.ndarray, Q: np.ndarray, field_dim: int = 3):
    """
    Add one segment to the global accumulators.

        C1[s, s] += D3,       C1[s, m] -= M3
        C2[s, s] += Q^T D3,   C2[s, m] -= Q^T M3
        g[s]     += Q^T ge
    """
    D3 = expand_to_dofs(contribution.De, field_dim)
    M3 = expand_to_dofs(contribution.Me, field_dim)
    assembly.C1.add(sdofs, sdofs, D3)
    assembly.C1.add(sdofs, mdofs, -M3)
    assembly.C2.add(sdofs, sdofs, Q.T @ D3)
    assembly.C2.add(sdofs, mdofs, -Q.T @ M3)
    assembly.g.add(sdofs, Q.T @ contribution.ge)
