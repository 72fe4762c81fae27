# compare CG on a 2D laplacian with and without the incomplete cholesky preconditioner
import numpy as np
import scipy as sp
import scipy.sparse.linalg
from ichol import csc_ichol, CholPrecond, IcholOptions
import argparse

parser = argparse.ArgumentParser()
parser.add_argument("--nxe", type=int, default=30, help="nxe # grid points in x and y-dir")
parser.add_argument("--tau", type=float, default=1e-3, help="drop tolerance, 0 keeps all fillin")
parser.add_argument("--lfill", type=int, default=-1, help="max offdiags per column, negative for no limit")
parser.add_argument("--shift", type=float, default=0.0, help="alpha diagonal shift")
parser.add_argument("--jacobi_scale", action=argparse.BooleanOptionalAction, default=True, help="scale by 1/sqrt(diag(A))")
args = parser.parse_args()

nx = args.nxe
Tx = sp.sparse.diags([-1.0, 2.0, -1.0], [-1, 0, 1], shape=(nx, nx))
A = sp.sparse.kron(sp.sparse.identity(nx), Tx) + sp.sparse.kron(Tx, sp.sparse.identity(nx))
A = sp.sparse.csc_matrix(A)
N = A.shape[0]
b = np.ones(N)

scal = 1.0 / np.sqrt(A.diagonal()) if args.jacobi_scale else None
options = IcholOptions(alpha=args.shift, tau=args.tau, lfill=args.lfill)
fac = csc_ichol(A, scal, options=options, can_print=True)
if not fac.success:
    print(f"ichol broke down at {fac.info}, try a larger --shift")
    raise SystemExit(1)
print(f"{fac=} fill ratio {fac.nnz / sp.sparse.tril(A).nnz:.2f}")

def run_cg(M=None):
    iters = [0]
    def callback(xk):
        iters[0] += 1
    x, info = sp.sparse.linalg.cg(A, b, M=M, maxiter=10 * N, callback=callback)
    return x, info, iters[0]

x0, info0, it0 = run_cg()
M = CholPrecond.from_factor(fac, scal=scal).as_linear_operator()
x1, info1, it1 = run_cg(M)

r0, r1 = np.linalg.norm(b - A @ x0), np.linalg.norm(b - A @ x1)
print(f"CG  : {it0} iters, {info0=} resid {r0:.4e}")
print(f"PCG : {it1} iters, {info1=} resid {r1:.4e}")
