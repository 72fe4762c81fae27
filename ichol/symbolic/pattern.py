__all__ = ["check_csc_structure", "get_lower_triang_pattern", "get_cols_from_colp",
           "get_transpose_matrix"]

import numpy as np
import scipy as sp
from ._utils import *
from ..exceptions import MalformedMatrixError

def get_cols_from_colp(N, colp):
    """expand CSC column pointers into a column index for each nonzero"""
    colp = np.asarray(colp, dtype=np.int64)
    return np.repeat(np.arange(N, dtype=np.int64), np.diff(colp))

def check_csc_structure(N, colp, rows):
    """fail fast on CSC arrays that the factorization kernel can't trust"""
    colp = np.asarray(colp)
    rows = np.asarray(rows)
    if colp.ndim != 1 or colp.shape[0] != N + 1:
        raise MalformedMatrixError(f"column pointers must have length {N+1}, got {colp.shape}")
    if colp[0] != 0:
        raise MalformedMatrixError(f"column pointers must start at 0, got {colp[0]}")
    if np.any(np.diff(colp) < 0):
        raise MalformedMatrixError("column pointers are not monotonic")
    nnz = colp[-1]
    if rows.shape[0] < nnz:
        raise MalformedMatrixError(f"{nnz} nonzeros declared but only {rows.shape[0]} row indices stored")

    rows = rows[:nnz]
    if nnz > 0 and (rows.min() < 0 or rows.max() >= N):
        raise MalformedMatrixError(f"row index out of range [0, {N})")

    # duplicates: each (col, row) pair must be unique
    keys = get_cols_from_colp(N, colp) * N + rows.astype(np.int64)
    if np.unique(keys).shape[0] != nnz:
        raise MalformedMatrixError("duplicate row indices within a column")

def get_lower_triang_pattern(A, strict_lower:bool=False):
    """CSC lower triangle (colp, rows, vals) of a square scipy sparse matrix, entries above the diag are dropped"""
    assert_is_square_sparse(A)
    N = A.shape[0]
    A = A.tocsc()
    colp, rows, vals = A.indptr, A.indices, A.data
    check_csc_structure(N, colp, rows)

    nnz = colp[-1]
    cols = get_cols_from_colp(N, colp)
    rows, vals = rows[:nnz], vals[:nnz]
    keep = rows > cols if strict_lower else rows >= cols

    # rebuild column pointers from the kept counts per column
    L_col_cts = np.bincount(cols[keep], minlength=N)
    L_colp = np.zeros(N + 1, dtype=np.int64)
    L_colp[1:] = np.cumsum(L_col_cts)
    L_rows = rows[keep].astype(np.int64)
    L_vals = vals[keep].astype(np.double)
    return L_colp, L_rows, L_vals

def get_transpose_matrix(L):
    # CSC L and CSR L^T share the same index arrays
    N = L.shape[0]
    L = L.tocsc()
    return sp.sparse.csr_matrix((L.data, L.indices, L.indptr), shape=(N, N))
