from typing import Dict, Iterable, List, Optional, Sequence, Union

import numpy as np

from Mortar3D.Objects.Contact.Mortar import ContactAssembly, MortarContact
from Mortar3D.Objects.FEM.BaseFE import BaseFE
from Mortar3D.Objects.FEM.Triangles import create_elements


class ContactProblem:
    """
    Two-surface contact problem in 3D.

    Owns the slave and master surface elements, the node numbering and the
    global DOF layout (3 DOFs per node, interleaved: dof = 3*node + k), and
    hands the elements to a contact formulation for assembly.

    Attributes
    ----------
    name : str
    contact : MortarContact
        Contact formulation
    slave_elements, master_elements : list of Element3D
    nb_nodes, nb_dofs : int
    U : np.ndarray
        Global displacement vector
    la : np.ndarray or None
        Global reaction force (Lagrange multipliers); None until available
    assembly : ContactAssembly or None
        Result of the last assembly
    """
    DOF_PER_NODE = 3

    def __init__(self, name: str = "contact", contact: Optional[MortarContact] = None):
        self.name = name
        self.contact = contact if contact is not None else MortarContact()
        self.slave_elements: List[BaseFE] = []
        self.master_elements: List[BaseFE] = []
        self.nb_nodes = 0
        self.nb_dofs = 0
        self.U = np.zeros(0)
        self.la: Optional[np.ndarray] = None
        self.assembly: Optional[ContactAssembly] = None

    @classmethod
    def from_arrays(cls, coords: np.ndarray, slave_connectivity: Sequence[Sequence[int]],
                    master_connectivity: Sequence[Sequence[int]], contact: Optional[MortarContact] = None,
                    name: str = "contact", time: float = 0.0) -> "ContactProblem":
        """
        Build a problem from node coordinates and two connectivity tables.

        Every slave element gets all master elements as candidates.
        """
        problem = cls(name, contact)
        for element in create_elements(slave_connectivity):
            problem.add_slave_element(element)
        for element in create_elements(master_connectivity):
            problem.add_master_element(element)
        problem.make_nodes()
        problem.set_geometry(coords, time)
        problem.assign_master_elements(time=time)
        return problem

    # ----- Elements -----
    def add_slave_element(self, fe: BaseFE):
        if not isinstance(fe, BaseFE):
            raise TypeError(f"Argument must be an instance of BaseFE, got {type(fe).__name__}")
        self.slave_elements.append(fe)

    def add_master_element(self, fe: BaseFE):
        if not isinstance(fe, BaseFE):
            raise TypeError(f"Argument must be an instance of BaseFE, got {type(fe).__name__}")
        self.master_elements.append(fe)

    def assign_master_elements(self, mapping: Optional[Dict[int, Iterable[int]]] = None, time: float = 0.0):
        """
        Set the 'master elements' field of the slave elements.

        Parameters
        ----------
        mapping : dict, optional
            {slave element index: master element indices}. All master
            elements are assigned to every slave element when omitted.
        """
        for i, slave in enumerate(self.slave_elements):
            if mapping is None:
                masters = list(self.master_elements)
            else:
                masters = [self.master_elements[k] for k in mapping.get(i, [])]
            slave.set_field("master elements", masters, time)

    @property
    def elements(self) -> List[BaseFE]:
        return self.slave_elements + self.master_elements

    # ----- Nodes and DOFs -----
    def make_nodes(self):
        """Number the DOFs from the node ids used by the elements."""
        if not self.elements:
            raise ValueError("Contact problem has no elements")
        self.nb_nodes = int(max(fe.connect.max() for fe in self.elements)) + 1
        self.nb_dofs = self.DOF_PER_NODE * self.nb_nodes
        for fe in self.elements:
            fe.dofs = self.get_gdofs(fe)
        self.U = np.zeros(self.nb_dofs, dtype=float)

    def get_dofs_from_node(self, node: int) -> np.ndarray:
        return self.DOF_PER_NODE * int(node) + np.arange(self.DOF_PER_NODE)

    def get_gdofs(self, element) -> np.ndarray:
        """Global DOFs of an element, interleaved per node: [3n, 3n+1, 3n+2, ...]."""
        return np.concatenate([self.get_dofs_from_node(n) for n in element.connect])

    def dofs_defined(self):
        if self.nb_dofs == 0:
            raise ValueError("DOFs are not defined, call make_nodes() first")

    # ----- Field data -----
    def update_nodal_field(self, name: str, values: Union[Dict[int, np.ndarray], np.ndarray],
                           time: float = 0.0, elements: Optional[Iterable[BaseFE]] = None):
        """
        Distribute nodal values to the elements.

        Parameters
        ----------
        values : dict or np.ndarray
            {node_id: vector} or an array (nb_nodes, k) / flat (k*nb_nodes,)
        elements : iterable, optional
            Defaults to all elements of the problem
        """
        elements = self.elements if elements is None else list(elements)
        if isinstance(values, dict):
            for fe in elements:
                fe.set_field(name, np.array([values[int(n)] for n in fe.connect]), time)
            return

        values = np.asarray(values, dtype=float)
        if values.ndim == 1:
            values = values.reshape(-1, self.DOF_PER_NODE)
        for fe in elements:
            fe.set_field(name, values[fe.connect], time)

    def set_geometry(self, coords: np.ndarray, time: float = 0.0):
        coords = np.asarray(coords, dtype=float)
        if coords.ndim != 2 or coords.shape[1] != 3:
            raise ValueError(f"Node coordinates must have shape (n, 3), got {coords.shape}")
        self.update_nodal_field("geometry", coords, time)
        if self.nb_dofs and not any(fe.has_field("displacement") for fe in self.elements):
            self.set_displacement(np.zeros(self.nb_dofs), time)

    def set_displacement(self, u: np.ndarray, time: float = 0.0):
        self.dofs_defined()
        u = np.asarray(u, dtype=float).ravel()
        if u.size != self.nb_dofs:
            raise ValueError(f"Displacement vector must have {self.nb_dofs} entries, got {u.size}")
        self.U = u.copy()
        self.update_nodal_field("displacement", u, time)

    def set_reaction_force(self, la: Optional[np.ndarray], time: float = 0.0):
        """Set the global reaction force; None marks it as unavailable."""
        if la is None:
            self.la = None
            return
        self.dofs_defined()
        la = np.asarray(la, dtype=float).ravel()
        if la.size != self.nb_dofs:
            raise ValueError(f"Reaction force vector must have {self.nb_dofs} entries, got {la.size}")
        self.la = la.copy()
        self.update_nodal_field("reaction force", la, time, elements=self.slave_elements)

    # ----- Assembly -----
    def assemble(self, time: float = 0.0) -> ContactAssembly:
        self.dofs_defined()
        self.assembly = self.contact.assemble(self, time)
        return self.assembly

    def __repr__(self):
        return (f"ContactProblem('{self.name}', slaves={len(self.slave_elements)}, "
                f"masters={len(self.master_elements)}, dofs={self.nb_dofs})")
