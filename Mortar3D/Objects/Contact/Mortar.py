import warnings
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np
import scipy.sparse as sp

from .BaseContact import BaseContact
from .Clipping import ContactSegment, create_contact_segmentation
from .ContactState import (NodeContactState, NodeState, apply_contact_state, classify_nodes,
                           format_state_table, node_dofs, resolve_initial_state)
from .EdgeTransform import build_global_transform, edge_transform
from .Geometry import calculate_normals, create_orthogonal_basis, create_rotation_matrix
from .MortarIntegrator import (dual_basis_coefficients, integrate_dual_basis, integrate_segment,
                               scatter_segment)
from .Properties import ContactProperties, InitialContactState
from .SparseAssembly import AssemblyBuffers, drop_small


@dataclass
class ContactAssembly:
    """
    Global contact operators of one assembly call.

    Attributes
    ----------
    C1 : sp.csr_matrix
        Mortar coupling in global xyz components
    C2 : sp.csr_matrix
        Mortar coupling rotated to the nodal normal-tangent frames
    D : sp.csr_matrix
        Direct constraint rows (tangential slip rows)
    g : np.ndarray
        Weighted gap in the nodal normal-tangent frames
    c : np.ndarray
        Complementarity value per DOF
    la : np.ndarray or None
        Reaction force used for the contact pressure
    states : dict
        {node_id: NodeContactState}
    normals : dict
        {node_id: unit normal}
    tangents : dict
        {node_id: (t1, t2)}
    initial_state : InitialContactState or None
        Resolved first-iteration policy, None when iteration > 1
    """
    C1: sp.csr_matrix
    C2: sp.csr_matrix
    D: sp.csr_matrix
    g: np.ndarray
    c: np.ndarray
    la: Optional[np.ndarray]
    states: Dict[int, NodeContactState] = field(default_factory=dict)
    normals: Dict[int, np.ndarray] = field(default_factory=dict)
    tangents: Dict[int, Tuple[np.ndarray, np.ndarray]] = field(default_factory=dict)
    initial_state: Optional[InitialContactState] = None
    segments: int = 0

    @property
    def active_nodes(self) -> List[int]:
        return [j for j, s in self.states.items() if s.is_active]

    @property
    def inactive_nodes(self) -> List[int]:
        return [j for j, s in self.states.items() if s.is_inactive]

    def weighted_gap(self, node: int) -> np.ndarray:
        return self.states[node].weighted_gap


class MortarContact(BaseContact):
    """
    Frictionless small sliding mortar contact for 3D surfaces.

    The slave surface carries the Lagrange multipliers. For every slave
    element the master elements are projected onto an auxiliary plane
    through the slave centroid, clipped against the slave outline, and the
    mortar matrices are integrated over the resulting polygons:

        D_ij = ∫ Phi_i N1_j dΓ        (slave-slave)
        M_ik = ∫ Phi_i N2_k dΓ        (slave-master)
        g_i  = ∫ Phi_i (x_m - x_s) dΓ

    After all slave elements, the active set is determined and inactive /
    sliding constraints are removed from the operators.

    Linear slave elements (Triangle3, Quad4) are integrated directly.
    Quadratic slave elements (Triangle6) are split into linear facets with
    one auxiliary plane per facet and may use the edge transform T(alpha).

    Attributes
    ----------
    properties : ContactProperties
        Configuration (dual basis, alpha, distval, ...)
    last_segmentation : dict
        {slave element index: list of ContactSegment} of the last call
    """

    def __init__(self, properties: ContactProperties = None, verbose: bool = False, **kwargs):
        """
        Parameters
        ----------
        properties : ContactProperties, optional
            Configuration. Keyword arguments are used to build one when not
            given, e.g. MortarContact(dual_basis=True, alpha=0.2).
        verbose : bool
            Print progress and the node state table
        """
        if properties is None:
            properties = ContactProperties(**kwargs)
        elif kwargs:
            raise TypeError("Pass either a ContactProperties object or keyword arguments, not both")
        super().__init__(contact_type='mortar', properties=properties, verbose=verbose)
        self.last_segmentation: Dict[int, List[ContactSegment]] = {}

    # =========================================================================
    # GLOBAL ASSEMBLY
    # =========================================================================

    def assemble(self, problem, time: float = 0.0) -> ContactAssembly:
        """
        Assemble C1, C2, D, g for all slave elements of `problem` and update
        the contact state.

        Steps:
            1. Nodal normals of the slave surface (stored as 'normal')
            2. Element contributions (triplet accumulation only)
            3. Compression, edge transform, small value dropping
            4. Active set classification and row post-processing
        """
        props = self.properties
        self.reset_diagnostics()
        self.last_segmentation = {}

        if not problem.slave_elements:
            raise ValueError("Contact problem has no slave elements")

        normals = calculate_normals(problem.slave_elements, time, rotate_normals=props.rotate_normals)
        problem.update_nodal_field("normal", normals, time, elements=problem.slave_elements)

        buffers = AssemblyBuffers()
        for idx, slave_element in enumerate(problem.slave_elements):
            segments = self.assemble_element(problem, buffers, slave_element, time)
            self.last_segmentation[idx] = segments
            self.diagnostics['num_slave_elements'] += 1
            if not segments:
                self.diagnostics['num_skipped_elements'] += 1

        if self.verbose:
            print(f"Mortar contact: {self.diagnostics['num_slave_elements']} slave elements, "
                  f"{self.diagnostics['num_segments']} segments, "
                  f"{self.diagnostics['num_cells']} integration cells")

        return self.update_contact_state(problem, buffers, normals, time)

    def assemble_element(self, problem, buffers: AssemblyBuffers, slave_element,
                         time: float = 0.0) -> List[ContactSegment]:
        """Dispatch on the element order: linear or quadratic driver."""
        if slave_element.ORDER == 1:
            return self.assemble_linear_element(problem, buffers, slave_element, time)
        if slave_element.ORDER == 2 and slave_element.nd == 6:
            return self.assemble_quadratic_element(problem, buffers, slave_element, time)
        raise TypeError(f"No mortar assembly for slave element {type(slave_element).__name__}")

    # =========================================================================
    # ELEMENT DRIVERS
    # =========================================================================

    def candidate_masters(self, slave_element, time: float = 0.0) -> list:
        """Master elements of `slave_element` within distval of its centroid."""
        if not slave_element.has_field("master elements"):
            warnings.warn(f"Slave element {slave_element} has no master elements")
            return []
        masters = list(slave_element.get_field("master elements", time))
        distval = self.properties.distval
        if not np.isfinite(distval):
            return masters

        xs = slave_element.geometry(time).mean(axis=0)
        kept = [m for m in masters if np.linalg.norm(xs - m.geometry(time).mean(axis=0)) <= distval]
        self.diagnostics['num_culled_masters'] += len(masters) - len(kept)
        return kept

    @staticmethod
    def auxiliary_plane(element, time: float = 0.0) -> Tuple[np.ndarray, np.ndarray]:
        """Plane point x0 and unit normal n0 at the reference centroid."""
        xi = element.reference_centroid()
        x0 = element.interpolate(element.geometry(time), xi)
        n0 = element.interpolate(element.get_field("normal", time), xi)
        return x0, n0 / np.linalg.norm(n0)

    def assemble_linear_element(self, problem, buffers: AssemblyBuffers, slave_element,
                                time: float = 0.0) -> List[ContactSegment]:
        props = self.properties
        field_dim = problem.DOF_PER_NODE

        X1 = slave_element.geometry(time)
        x1 = slave_element.geometry(time, deformed=True)
        Q3 = create_rotation_matrix(slave_element, time)
        x0, n0 = self.auxiliary_plane(slave_element, time)

        masters = self.candidate_masters(slave_element, time)
        segmentation = create_contact_segmentation(slave_element, masters, x0, n0, time)
        if not segmentation:
            return segmentation

        Ae = np.eye(slave_element.nd)
        if props.dual_basis:
            De = np.zeros((slave_element.nd, slave_element.nd))
            Me = np.zeros((slave_element.nd, slave_element.nd))
            for segment in segmentation:
                integrate_dual_basis(segment, slave_element, X1, n0, order=props.integration_order,
                                     De=De, Me=Me)
            Ae = dual_basis_coefficients(De, Me)

        sdofs = problem.get_gdofs(slave_element)
        for segment in segmentation:
            master_element = segment.master_element
            Xm = master_element.geometry(time)
            xm = master_element.geometry(time, deformed=True)
            contribution = integrate_segment(segment, slave_element, master_element, n0,
                                             X1, x1, Xm, xm, Ae, order=props.integration_order)
            scatter_segment(buffers, contribution, sdofs, problem.get_gdofs(master_element), Q3, field_dim)
            self._count(segment)

        return segmentation

    def assemble_quadratic_element(self, problem, buffers: AssemblyBuffers, slave_element,
                                   time: float = 0.0) -> List[ContactSegment]:
        props = self.properties
        field_dim = problem.DOF_PER_NODE

        T = edge_transform(props.alpha)[0] if props.alpha != 0.0 else None

        Xs = slave_element.geometry(time)
        xs = slave_element.geometry(time, deformed=True)
        Q3 = create_rotation_matrix(slave_element, time)

        masters = self.candidate_masters(slave_element, time)
        if not masters:
            return []

        # Segmentation on linear facets, one auxiliary plane per slave facet
        facet_segments = []
        for facet in self._facets(slave_element):
            x0, n0 = self.auxiliary_plane(facet, time)
            parents = {}
            master_facets = []
            for master_element in masters:
                for master_facet in self._facets(master_element):
                    parents[id(master_facet)] = master_element
                    master_facets.append(master_facet)
            for segment in create_contact_segmentation(facet, master_facets, x0, n0, time):
                facet_segments.append((n0, segment, parents[id(segment.master_element)]))

        if not facet_segments:
            return []

        Ae = np.eye(slave_element.nd)
        if props.dual_basis:
            De = np.zeros((slave_element.nd, slave_element.nd))
            Me = np.zeros((slave_element.nd, slave_element.nd))
            for n0, segment, _ in facet_segments:
                integrate_dual_basis(segment, slave_element, Xs, n0, T=T,
                                     order=props.integration_order, De=De, Me=Me)
            Ae = dual_basis_coefficients(De, Me)

        # Integration is done on the full quadratic elements
        sdofs = problem.get_gdofs(slave_element)
        for n0, segment, master_element in facet_segments:
            Xm = master_element.geometry(time)
            xm = master_element.geometry(time, deformed=True)
            contribution = integrate_segment(segment, slave_element, master_element, n0,
                                             Xs, xs, Xm, xm, Ae, T=T, order=props.integration_order)
            scatter_segment(buffers, contribution, sdofs, problem.get_gdofs(master_element), Q3, field_dim)
            self._count(segment)

        return [segment for _, segment, _ in facet_segments]

    def _facets(self, element) -> list:
        if self.properties.split_quadratic and element.ORDER == 2 and hasattr(element, "split"):
            return element.split()
        return [element]

    def _count(self, segment: ContactSegment):
        self.diagnostics['num_segments'] += 1
        self.diagnostics['num_cells'] += segment.nb_vertices

    # =========================================================================
    # CONTACT STATE
    # =========================================================================

    def update_contact_state(self, problem, buffers: AssemblyBuffers, normals: Dict[int, np.ndarray],
                             time: float = 0.0) -> ContactAssembly:
        """
        Compress the accumulated operators and apply the active set.

        Must be called once, after all slave element contributions.
        """
        props = self.properties
        field_dim = problem.DOF_PER_NODE
        ndofs = problem.nb_dofs

        C1 = buffers.C1.to_csr((ndofs, ndofs))
        C2 = buffers.C2.to_csr((ndofs, ndofs))
        D = buffers.D.to_csr((ndofs, ndofs))
        g = buffers.g.to_dense(ndofs)

        if props.alpha != 0.0:
            if self.verbose:
                print(f"alpha = {props.alpha}: applying C = C inv(T)")
            _, invT = build_global_transform(problem, problem.slave_elements, props.alpha, ndofs)
            C1 = (C1 @ invT).tocsr()
            C2 = (C2 @ invT).tocsr()

        C1 = drop_small(C1, props.drop_tolerance)
        C2 = drop_small(C2, props.drop_tolerance)

        state = props.contact_state_in_first_iteration
        resolved = None
        if props.iteration == 1:
            normal_gaps = [g[node_dofs(j, field_dim)[0]] for j in sorted(normals)]
            state, avg_gap, std_gap = resolve_initial_state(state, normal_gaps)
            if self.verbose:
                print(f"First contact iteration, initial contact state = "
                      f"{props.contact_state_in_first_iteration.name}")
                print(f"Average weighted gap = {avg_gap:.3e}, std gap = {std_gap:.3e}, "
                      f"resolved contact state = {state.name}")
            resolved = state

        la = problem.la
        states = classify_nodes(normals, g, la, props.iteration, state, field_dim)
        if self.verbose:
            print(format_state_table(states))

        C1, C2, D, g = apply_contact_state(states, normals, C1, C2, D, g, field_dim)

        c = np.zeros(ndofs)
        for j, s in states.items():
            c[node_dofs(j, field_dim)] = s.complementarity

        self.diagnostics['num_active_nodes'] = sum(s.is_active for s in states.values())
        self.diagnostics['num_inactive_nodes'] = sum(s.state is NodeState.INACTIVE for s in states.values())

        tangents = {j: create_orthogonal_basis(n) for j, n in normals.items()}
        return ContactAssembly(C1=C1, C2=C2, D=D, g=g, c=c, la=la, states=states, normals=normals,
                               tangents=tangents, initial_state=resolved, segments=self.diagnostics['num_segments'])

    # =========================================================================
    # INFO
    # =========================================================================

    def get_info(self) -> Dict:
        info = super().get_info()
        info.update({
            'dual_basis': self.properties.dual_basis,
            'alpha': self.properties.alpha,
            'integration_order': self.properties.integration_order,
        })
        return info

    def __repr__(self):
        p = self.properties
        return (f"MortarContact(dual_basis={p.dual_basis}, alpha={p.alpha}, "
                f"iteration={p.iteration}, state0={p.contact_state_in_first_iteration.name})")
