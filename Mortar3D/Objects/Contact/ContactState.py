"""
Global Contact State Machine
============================

Per slave node j (3 DOFs, normal-tangent-tangent frame after rotation):

    weighted_gap[j]     = g[dofs_j]
    contact_pressure[j] = [n.la, t1.la, t2.la]   (zeros if la is unavailable)
    complementarity[j]  = contact_pressure[j] - weighted_gap[j]

    complementarity[j][0] <  0  ->  INACTIVE
    complementarity[j][0] >= 0  ->  ACTIVE_SLIP   (frictionless)

On the first iteration of a load step the initial state policy can force
all nodes ACTIVE or INACTIVE. AUTO resolves to ACTIVE when the initial
normal weighted gaps have zero mean and standard deviation, otherwise to
UNKNOWN (per-node classification above).

Post-processing of the global operators:
    INACTIVE     : rows of C1, C2, D and g are set to zero
    ACTIVE_SLIP  : tangential rows of C2 and g are set to zero and D gets
                   the rows D[t1_dof, dofs] = t1, D[t2_dof, dofs] = t2
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Optional, Tuple

import numpy as np
import scipy.sparse as sp

from .Geometry import create_orthogonal_basis
from .Properties import ContactConstants, InitialContactState
from .SparseAssembly import zero_rows


class NodeState(Enum):
    INACTIVE = 0
    ACTIVE_SLIP = 1
    ACTIVE_STICK = 2


@dataclass
class NodeContactState:
    """
    Contact state of one slave node.

    Attributes
    ----------
    weighted_gap : np.ndarray
        (normal, tangent1, tangent2) components
    contact_pressure : np.ndarray
        Reaction force projected onto (n, t1, t2)
    complementarity : np.ndarray
        contact_pressure - weighted_gap
    state : NodeState
    """
    weighted_gap: np.ndarray
    contact_pressure: np.ndarray
    complementarity: np.ndarray
    state: NodeState = NodeState.INACTIVE

    @property
    def is_active(self) -> bool:
        return self.state is not NodeState.INACTIVE

    @property
    def is_inactive(self) -> bool:
        return self.state is NodeState.INACTIVE

    @property
    def is_slip(self) -> bool:
        return self.state is NodeState.ACTIVE_SLIP

    @property
    def is_stick(self) -> bool:
        return self.state is NodeState.ACTIVE_STICK


def node_dofs(node: int, field_dim: int = 3) -> np.ndarray:
    return field_dim * int(node) + np.arange(field_dim)


def resolve_initial_state(policy: InitialContactState, normal_gaps: Iterable[float],
                          tolerance: float = ContactConstants.AUTO_STATE_TOLERANCE
                          ) -> Tuple[InitialContactState, float, float]:
    """
    Resolve the AUTO policy from the normal weighted gaps of all slave nodes.

    Returns
    -------
    state : InitialContactState
        ACTIVE, INACTIVE or UNKNOWN
    avg_gap, std_gap : float
    """
    gaps = np.asarray(list(normal_gaps), dtype=float)
    avg_gap = float(np.mean(gaps)) if gaps.size else 0.0
    std_gap = float(np.std(gaps, ddof=1)) if gaps.size > 1 else 0.0
    if policy is not InitialContactState.AUTO:
        return policy, avg_gap, std_gap
    if abs(avg_gap) < tolerance and std_gap < tolerance:
        return InitialContactState.ACTIVE, avg_gap, std_gap
    return InitialContactState.UNKNOWN, avg_gap, std_gap


def classify_nodes(normals: Dict[int, np.ndarray], g: np.ndarray, la: Optional[np.ndarray],
                   iteration: int, initial_state: InitialContactState,
                   field_dim: int = 3) -> Dict[int, NodeContactState]:
    """
    Active set classification of all slave nodes.

    `initial_state` must already be resolved (see resolve_initial_state).
    """
    forced = None
    if iteration == 1 and initial_state is InitialContactState.ACTIVE:
        forced = NodeState.ACTIVE_SLIP
    elif iteration == 1 and initial_state is InitialContactState.INACTIVE:
        forced = NodeState.INACTIVE

    states = {}
    for j in sorted(normals):
        dofs = node_dofs(j, field_dim)
        weighted_gap = np.array(g[dofs], dtype=float)
        if la is not None and len(la) > 0:
            normal = normals[j]
            tangent1, tangent2 = create_orthogonal_basis(normal)
            la_j = np.asarray(la)[dofs]
            contact_pressure = np.array([np.dot(normal, la_j),
                                         np.dot(tangent1, la_j),
                                         np.dot(tangent2, la_j)])
        else:
            contact_pressure = np.zeros(3)
        complementarity = contact_pressure - weighted_gap

        if forced is not None:
            state = forced
        elif complementarity[0] < 0.0:
            state = NodeState.INACTIVE
        else:
            state = NodeState.ACTIVE_SLIP

        states[j] = NodeContactState(weighted_gap, contact_pressure, complementarity, state)
    return states


def apply_contact_state(states: Dict[int, NodeContactState], normals: Dict[int, np.ndarray],
                        C1: sp.spmatrix, C2: sp.spmatrix, D: sp.spmatrix, g: np.ndarray,
                        field_dim: int = 3):
    """
    Remove inactive constraints and replace tangential constraints of
    sliding nodes with direct rows in D.

    Returns
    -------
    C1, C2, D : sp.csr_matrix
    g : np.ndarray
    """
    g = np.array(g, dtype=float)

    inactive_rows = [node_dofs(j, field_dim) for j, s in states.items() if s.is_inactive]
    inactive_rows = np.concatenate(inactive_rows) if inactive_rows else np.zeros(0, dtype=int)
    C1 = zero_rows(C1, inactive_rows)
    C2 = zero_rows(C2, inactive_rows)
    D = zero_rows(D, inactive_rows)
    g[inactive_rows] = 0.0

    slip_nodes = [j for j, s in states.items() if s.is_active and s.is_slip]
    if slip_nodes:
        tangential_rows = np.concatenate([node_dofs(j, field_dim)[1:] for j in slip_nodes])
        C2 = zero_rows(C2, tangential_rows)
        g[tangential_rows] = 0.0

        D = D.tolil()
        for j in slip_nodes:
            dofs = node_dofs(j, field_dim)
            tangent1, tangent2 = create_orthogonal_basis(normals[j])
            D[dofs[1], dofs] = tangent1
            D[dofs[2], dofs] = tangent2
        D = D.tocsr()

    return C1, C2, D, g


def format_state_table(states: Dict[int, NodeContactState]) -> str:
    lines = ["# | active | stick | slip | gap | pres | comp"]
    for j, s in states.items():
        lines.append(f"{j} | {int(s.is_active)} | {int(s.is_stick)} | {int(s.is_slip)} | "
                     f"{s.weighted_gap[0]:.3f} | {s.contact_pressure[0]:.3f} | {s.complementarity[0]:.3f}")
    return "\n".join(lines)
