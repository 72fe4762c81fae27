__all__ = ["assert_is_square_sparse"]

import scipy as sp
from ..exceptions import MalformedMatrixError

def assert_is_square_sparse(A):
    """check that A is a square scipy sparse matrix (any format, converted to CSC later)"""
    if not sp.sparse.issparse(A):
        raise MalformedMatrixError(f"expected a scipy sparse matrix, got {type(A).__name__}")
    if len(A.shape) != 2 or A.shape[0] != A.shape[1]:
        raise MalformedMatrixError(f"matrix must be square, got shape {A.shape}")
