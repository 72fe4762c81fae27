__all__ = ["IcholOptions", "IcholFactor"]

import math, numbers
import numpy as np
import scipy as sp
from ..exceptions import InvalidParameterError, NotPositiveDefiniteError
from ..symbolic.pattern import get_transpose_matrix

class IcholOptions:
    def __init__(self, alpha:float=0.0, beta:float=0.0, tau:float=0.0, lfill:int=-1):
        # diag shift is d_j = (1+alpha) * scal_j^2 * A_jj + beta
        self.alpha = alpha
        self.beta = beta
        # tau = 0 turns off threshold dropping, lfill < 0 turns off the fill limit
        self.tau = tau
        self.lfill = lfill

    @classmethod
    def no_drop(cls, alpha:float=0.0, beta:float=0.0):
        # keeps all fillin, same as a complete cholesky of the shifted matrix
        return cls(alpha=alpha, beta=beta, tau=0.0, lfill=-1)

    @classmethod
    def threshold(cls, tau:float, alpha:float=0.0, beta:float=0.0):
        return cls(alpha=alpha, beta=beta, tau=tau, lfill=-1)

    @classmethod
    def fill_limited(cls, lfill:int, tau:float=0.0, alpha:float=0.0, beta:float=0.0):
        return cls(alpha=alpha, beta=beta, tau=tau, lfill=lfill)

    @classmethod
    def jacobi(cls, alpha:float=0.0, beta:float=0.0):
        # no offdiag room at all, L is sqrt of the shifted diagonal
        return cls(alpha=alpha, beta=beta, tau=0.0, lfill=0)

    def validate(self):
        for name in ("alpha", "beta", "tau"):
            value = getattr(self, name)
            if not isinstance(value, numbers.Real) or not math.isfinite(value):
                raise InvalidParameterError(f"{name} must be a finite real, got {value!r}")
        if self.tau < 0.0:
            raise InvalidParameterError(f"tau must be >= 0, got {self.tau}")
        if isinstance(self.lfill, bool) or not isinstance(self.lfill, numbers.Integral):
            raise InvalidParameterError(f"lfill must be an integer, got {self.lfill!r}")
        return self

    def __repr__(self):
        return f"IcholOptions(alpha={self.alpha}, beta={self.beta}, tau={self.tau}, lfill={self.lfill})"

class IcholFactor:
    """result of csc_ichol, L is None when info != 0"""

    def __init__(self, L, info:int, lextra:int=0, options:IcholOptions=None):
        self.L = L
        # 0 on success, else the 1-based column/row where the diagonal went non-positive
        self.info = info
        self.lextra = lextra
        self.options = options

    @property
    def success(self) -> bool:
        return self.info == 0

    @property
    def nnz(self) -> int:
        return 0 if self.L is None else self.L.nnz

    @property
    def shape(self):
        return None if self.L is None else self.L.shape

    def check(self):
        """raise if the factorization broke down, otherwise return self for chaining"""
        if not self.success:
            raise NotPositiveDefiniteError(self.info)
        return self

    def get_transpose_matrix(self) -> sp.sparse.csr_matrix:
        self.check()
        return get_transpose_matrix(self.L)

    def diagonal(self) -> np.ndarray:
        # diag entry is always first in each column
        self.check()
        return self.L.data[self.L.indptr[:-1]]

    def __repr__(self):
        if self.success:
            return f"IcholFactor(shape={self.shape}, nnz={self.nnz}, lextra={self.lextra})"
        return f"IcholFactor(failed at index {self.info})"
