__all__ = ["csc_ichol", "CholPrecond"]

import time
import numpy as np
import scipy as sp
import scipy.sparse.linalg
from ._numba import *
from ._helper_classes import IcholOptions, IcholFactor
from ..symbolic.pattern import get_lower_triang_pattern, get_transpose_matrix
from ..exceptions import InvalidParameterError

def _get_scaling(N, scal):
    if scal is None:
        return np.ones(N, dtype=np.double)
    scal = np.asarray(scal, dtype=np.double)
    if scal.ndim != 1 or scal.shape[0] != N:
        raise InvalidParameterError(f"scaling vector must have shape ({N},), got {scal.shape}")
    if not np.all(np.isfinite(scal)):
        raise InvalidParameterError("scaling vector has non-finite entries")
    return scal

def _get_nzmax(N, lower_nnz, lfill):
    # start from the lower triangle of A, the kernel doubles the buffer as needed
    nzmax = max(lower_nnz, N)
    if lfill >= 0:
        # fill limited L never needs more than N + N*lfill
        nzmax = min(nzmax, N + N * lfill)
    return nzmax

def csc_ichol(
    A,
    scal=None,
    alpha:float=0.0,
    beta:float=0.0,
    tau:float=0.0,
    lfill:int=-1,
    options:IcholOptions=None,
    use_numba:bool=True,
    can_print:bool=False,
) -> IcholFactor:
    """
    left-looking incomplete cholesky of diag(scal) A diag(scal) with diag shift (1+alpha) A_jj + beta

    only the lower triangle + diag of A is read. returns an IcholFactor, its info is 0 on success
    or the 1-based index where a pivot or corrected diagonal went non-positive (L is None then).
    pass either options or the alpha/beta/tau/lfill keywords, not both.
    """
    if options is not None:
        given = [name for name, value, default in [
            ("alpha", alpha, 0.0), ("beta", beta, 0.0), ("tau", tau, 0.0), ("lfill", lfill, -1)
        ] if value != default]
        if given:
            raise InvalidParameterError(f"{', '.join(given)} given together with options, set them on options instead")
    else:
        options = IcholOptions(alpha=alpha, beta=beta, tau=tau, lfill=lfill)
    options.validate()

    t0 = time.time()
    L_colp, L_rows, L_vals = get_lower_triang_pattern(A, strict_lower=False)
    N = A.shape[0]
    scal = _get_scaling(N, scal)
    nzmax = _get_nzmax(N, L_rows.shape[0], options.lfill)
    dt = time.time() - t0
    if can_print: print(f"ichol: lower triangle extracted in {dt=:.4e} sec, {N=} nnz={L_rows.shape[0]}")

    t0 = time.time()
    if use_numba:
        # code found in _numba.py in factorization folder
        kernel = _icf_kernel_numba
    else: # outer kernel uncompiled, the select and grow helpers stay compiled
        kernel = _icf_kernel_numba.py_func

    info, Lp, Li, Lx, lnz, lextra = kernel(
        N, L_colp, L_rows, L_vals, scal,
        float(options.alpha), float(options.beta), float(options.tau), int(options.lfill), int(nzmax)
    )
    info, lnz, lextra = int(info), int(lnz), int(lextra)
    dt = time.time() - t0

    if info != 0:
        if can_print: print(f"ichol: non-positive diagonal at index {info} after {dt=:.4e} sec")
        return IcholFactor(None, info, lextra, options)

    L = sp.sparse.csc_matrix((Lx[:lnz].copy(), Li[:lnz].copy(), Lp), shape=(N, N))
    L.has_sorted_indices = True
    if can_print: print(f"ichol: factor computed in {dt=:.4e} sec, nnz(L)={lnz} {lextra=}")
    return IcholFactor(L, info, lextra, options)

class CholPrecond:
    """applies (D^-1 L L^T D^-1)^-1 r = D (L L^T)^-1 D r, D = diag(scal), for use inside a krylov solver"""

    def __init__(self, _L, _LT, scal=None):
        self._L = _L.tocsr()
        self._LT = _LT.tocsr()
        self.N = self._L.shape[0]
        self._scal = None if scal is None else _get_scaling(self.N, scal)

    @classmethod
    def from_factor(cls, factor:IcholFactor, scal=None):
        # pass the same scal the factor was built with to precondition the unscaled A
        factor.check()
        return cls(factor.L, get_transpose_matrix(factor.L), scal=scal)

    def solve(self, _b):
        _b = np.asarray(_b, dtype=np.double)
        _s = None
        if self._scal is not None:
            _s = self._scal if _b.ndim == 1 else self._scal[:, None]
            _b = _s * _b
        _y = sp.sparse.linalg.spsolve_triangular(self._L, _b, lower=True)
        _x = sp.sparse.linalg.spsolve_triangular(self._LT, _y, lower=False)
        if _s is not None:
            _x *= _s
        return _x

    def as_linear_operator(self) -> sp.sparse.linalg.LinearOperator:
        return sp.sparse.linalg.LinearOperator(
            (self.N, self.N), matvec=lambda x: self.solve(np.ravel(x)), dtype=np.double
        )
