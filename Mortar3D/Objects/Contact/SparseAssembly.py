from typing import List, Optional, Sequence, Tuple

import numpy as np
import scipy.sparse as sp


class SparseMatrixCOO:
    """
    Append-only triplet accumulator for global operators.

    Contributions are stored as (row, col, value) triplets and only summed
    when converted to compressed form, so element loops never mutate a
    compressed matrix in place.
    """

    def __init__(self):
        self.rows: List[np.ndarray] = []
        self.cols: List[np.ndarray] = []
        self.vals: List[np.ndarray] = []

    def add(self, dofs_rows: Sequence[int], dofs_cols: Sequence[int], local_matrix: np.ndarray):
        """Scatter-add a dense local block at (dofs_rows x dofs_cols)."""
        dofs_rows = np.asarray(dofs_rows, dtype=int)
        dofs_cols = np.asarray(dofs_cols, dtype=int)
        local_matrix = np.asarray(local_matrix, dtype=float)
        if local_matrix.shape != (len(dofs_rows), len(dofs_cols)):
            raise ValueError(
                f"Local matrix shape {local_matrix.shape} does not match "
                f"({len(dofs_rows)}, {len(dofs_cols)}) dofs")

        R, C = np.meshgrid(dofs_rows, dofs_cols, indexing='ij')
        self.rows.append(R.ravel())
        self.cols.append(C.ravel())
        self.vals.append(local_matrix.ravel())

    def __len__(self):
        return int(sum(len(v) for v in self.vals))

    def is_empty(self) -> bool:
        return len(self) == 0

    def triplets(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        if self.is_empty():
            return np.zeros(0, dtype=int), np.zeros(0, dtype=int), np.zeros(0)
        return np.concatenate(self.rows), np.concatenate(self.cols), np.concatenate(self.vals)

    def to_csr(self, shape: Optional[Tuple[int, int]] = None) -> sp.csr_matrix:
        """Compress to CSR. Duplicate triplets are summed."""
        rows, cols, vals = self.triplets()
        if shape is None:
            n = int(max(rows.max(initial=-1), cols.max(initial=-1)) + 1)
            shape = (n, n)
        return sp.coo_matrix((vals, (rows, cols)), shape=shape).tocsr()


class SparseVectorCOO:
    """Triplet accumulator for global vectors."""

    def __init__(self):
        self.dofs: List[np.ndarray] = []
        self.vals: List[np.ndarray] = []

    def add(self, dofs: Sequence[int], local_vector: np.ndarray):
        dofs = np.asarray(dofs, dtype=int)
        local_vector = np.asarray(local_vector, dtype=float).ravel()
        if local_vector.shape != dofs.shape:
            raise ValueError(
                f"Local vector length {local_vector.size} does not match {dofs.size} dofs")
        self.dofs.append(dofs)
        self.vals.append(local_vector)

    def to_dense(self, size: int) -> np.ndarray:
        out = np.zeros(size)
        if self.dofs:
            np.add.at(out, np.concatenate(self.dofs), np.concatenate(self.vals))
        return out


def drop_small(A: sp.spmatrix, tol: float) -> sp.csr_matrix:
    """Remove stored entries with |a_ij| <= tol."""
    A = sp.csr_matrix(A, copy=True)
    if tol > 0:
        A.data[np.abs(A.data) <= tol] = 0.0
    A.eliminate_zeros()
    return A


def zero_rows(A: sp.spmatrix, rows: Sequence[int]) -> sp.csr_matrix:
    """Return a CSR copy of A with the given rows set exactly to zero."""
    A = sp.csr_matrix(A, copy=True)
    rows = np.asarray(rows, dtype=int)
    if rows.size == 0:
        return A
    keep = np.ones(A.shape[0])
    keep[rows] = 0.0
    A = sp.diags(keep) @ A
    A = sp.csr_matrix(A)
    A.eliminate_zeros()
    return A


class AssemblyBuffers:
    """Triplet accumulators of one assembly call: C1, C2, D and g."""

    def __init__(self):
        self.C1 = SparseMatrixCOO()
        self.C2 = SparseMatrixCOO()
        self.D = SparseMatrixCOO()
        self.g = SparseVectorCOO()
