import os
from typing import Dict, Optional

import h5py
import numpy as np
import scipy.sparse as sp

from Mortar3D.Objects.Contact.ContactState import NodeState


def _write_sparse(group: h5py.Group, name: str, A: sp.spmatrix):
    A = sp.csr_matrix(A)
    sub = group.create_group(name)
    sub.create_dataset("data", data=A.data)
    sub.create_dataset("indices", data=A.indices)
    sub.create_dataset("indptr", data=A.indptr)
    sub.attrs["shape"] = A.shape


def read_sparse(group: h5py.Group) -> sp.csr_matrix:
    return sp.csr_matrix((group["data"][()], group["indices"][()], group["indptr"][()]),
                         shape=tuple(group.attrs["shape"]))


def export_contact_results(assembly, filepath: str, dir_name: str = "",
                           metadata: Optional[Dict] = None) -> Optional[str]:
    """
    Export the contact operators and node states to an HDF5 file.

    Layout:
        /operators/{C1,C2,D}/{data,indices,indptr}  (CSR, attrs: shape)
        /g, /c                                      (per DOF)
        /nodes/{id,state,weighted_gap,contact_pressure,complementarity,normal}

    Returns the full path, or None if `filepath` is empty.
    """
    if not filepath:
        return None

    if not filepath.endswith('.h5'):
        filepath += ".h5"

    if dir_name:
        os.makedirs(dir_name, exist_ok=True)
    full_path = os.path.join(dir_name, filepath)

    nodes = sorted(assembly.states)
    with h5py.File(full_path, "w") as hf:
        ops = hf.create_group("operators")
        for name in ("C1", "C2", "D"):
            _write_sparse(ops, name, getattr(assembly, name))
        hf.create_dataset("g", data=assembly.g)
        hf.create_dataset("c", data=assembly.c)
        if assembly.la is not None:
            hf.create_dataset("la", data=assembly.la)

        grp = hf.create_group("nodes")
        grp.create_dataset("id", data=np.array(nodes, dtype=int))
        grp.create_dataset("state", data=np.array([assembly.states[j].state.value for j in nodes], dtype=int))
        for key in ("weighted_gap", "contact_pressure", "complementarity"):
            grp.create_dataset(key, data=np.array([getattr(assembly.states[j], key) for j in nodes]).reshape(-1, 3))
        grp.create_dataset("normal", data=np.array([assembly.normals[j] for j in nodes]).reshape(-1, 3))
        grp.attrs["state_names"] = ",".join(s.name for s in NodeState)

        if assembly.initial_state is not None:
            hf.attrs["initial_state"] = assembly.initial_state.name
        hf.attrs["segments"] = assembly.segments
        for k, v in (metadata or {}).items():
            # HDF5 doesn't support None or complex objects in attrs easily
            if v is not None:
                try:
                    hf.attrs[k] = v
                except TypeError:
                    hf.attrs[k] = str(v)

    print(f"Results saved to: {full_path}")
    return full_path
