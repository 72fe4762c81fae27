# you have to declare methods here for numba to actually compile them in relative import to other file
__all__ = ["_icf_kernel_numba",
           "_select_largest_numba",
           "_grow_buffer_numba"]

import math
import numpy as np
from numba import njit

"""
* left-looking incomplete cholesky kernel, one column k at a time: gather A(:,k), update from the earlier
  columns of L with a nonzero in row k, drop, then store and correct the remaining diagonal.
* earlier columns are found with index-based linked lists: head[r] starts the list of columns whose next unread
  subdiag entry sits in row r, next[j] links column j. A column is on at most one list at a time.
* columns must run in order (each reads every finished column), so parallel=False everywhere.
"""

@njit(parallel=False)
def _ranks_before(ri, vi, rj, vj):
    # larger magnitude first, ties go to the lower row
    ai, aj = abs(vi), abs(vj)
    return ai > aj or (ai == aj and ri < rj)

@njit(parallel=False)
def _select_largest_numba(wrow, wval, cnt, keep):
    """quickselect on wrow[:cnt] so that wrow[:keep] holds the rows with the keep largest |wval[row]| (unordered)"""
    if keep <= 0 or keep >= cnt:
        return
    lo, hi = 0, cnt - 1
    while lo < hi:
        # random pivot moved to hi, the kept set only depends on _ranks_before
        piv = np.random.randint(lo, hi + 1)
        wrow[piv], wrow[hi] = wrow[hi], wrow[piv]
        pr = wrow[hi]
        pv = wval[pr]

        store = lo
        for t in range(lo, hi):
            r = wrow[t]
            if _ranks_before(r, wval[r], pr, pv):
                wrow[t], wrow[store] = wrow[store], wrow[t]
                store += 1
        wrow[store], wrow[hi] = wrow[hi], wrow[store]

        # pivot is in its final position, everything left of it ranks higher
        if store == keep:
            break
        elif store < keep:
            lo = store + 1
        else:
            hi = store - 1

@njit(parallel=False)
def _grow_buffer_numba(Li, Lx, lnz, need):
    """amortized doubling of the L row/value buffers, keeps the first lnz entries"""
    cap = max(2 * Li.shape[0], need)
    Li_new = np.empty(cap, dtype=np.int64)
    Lx_new = np.empty(cap, dtype=np.double)
    Li_new[:lnz] = Li[:lnz]
    Lx_new[:lnz] = Lx[:lnz]
    return Li_new, Lx_new

@njit(parallel=False)
def _icf_kernel_numba(N, colp, rows, vals, scal, alpha, beta, tau, lfill, nzmax):
    """
    incomplete cholesky of the scaled + shifted lower triangle given in CSC (colp, rows, vals)

    returns info, Lp, Li, Lx, lnz, lextra
        info = 0 on success, else 1-based index of the non-positive pivot or corrected diagonal
        Li[:lnz], Lx[:lnz] hold the factor, Lp its column pointers (only valid on success)
    """
    # scaled, shifted diagonal (missing diagonal entry reads as 0)
    d = np.zeros(N, dtype=np.double)
    for j in range(N):
        for ip in range(colp[j], colp[j+1]):
            if rows[ip] == j:
                d[j] = vals[ip]
                break
        d[j] = (1.0 + alpha) * scal[j] * scal[j] * d[j] + beta

    head = np.full(N, -1, dtype=np.int64)
    next = np.full(N, -1, dtype=np.int64)
    lpos = np.zeros(N, dtype=np.int64)
    flag = np.full(N, -1, dtype=np.int64) # flag[i] == k marks row i as present in column k
    wrow = np.empty(N, dtype=np.int64)
    wval = np.zeros(N, dtype=np.double)

    Lp = np.zeros(N + 1, dtype=np.int64)
    Li = np.empty(nzmax, dtype=np.int64)
    Lx = np.empty(nzmax, dtype=np.double)
    lnz = 0
    lextra = 0

    for k in range(N):
        # gather strict lower part of A(:,k)
        cnt = 0
        for ip in range(colp[k], colp[k+1]):
            i = rows[ip]
            if i <= k: continue
            wval[i] = scal[i] * vals[ip] * scal[k]
            flag[i] = k
            wrow[cnt] = i
            cnt += 1

        # update from every finished column j with l_kj != 0
        j = head[k]
        while j != -1:
            jnext = next[j]
            pos = lpos[j]
            lkj = Lx[pos]
            for ip in range(pos + 1, Lp[j+1]):
                i = Li[ip]
                if flag[i] == k:
                    wval[i] -= lkj * Lx[ip]
                else:
                    # fillin
                    flag[i] = k
                    wval[i] = -lkj * Lx[ip]
                    wrow[cnt] = i
                    cnt += 1

            pos += 1
            lpos[j] = pos
            if pos < Lp[j+1]:
                ancestor = Li[pos]
                next[j] = head[ancestor]
                head[ancestor] = j
            j = jnext
        head[k] = -1

        lkk = d[k]
        if not (lkk > 0.0):
            return k + 1, Lp, Li, Lx, lnz, lextra

        # threshold drop
        if tau > 0.0:
            drop = tau * math.sqrt(lkk)
            m = 0
            for t in range(cnt):
                i = wrow[t]
                if abs(wval[i]) > drop:
                    wrow[m] = i
                    m += 1
            cnt = m

        # fill limit, unused room carries over to later columns
        if lfill >= 0:
            allowed = lfill + lextra
            if cnt > allowed:
                _select_largest_numba(wrow, wval, cnt, allowed)
                cnt = allowed
            lextra = allowed - cnt

        srows = np.sort(wrow[:cnt])

        # store column k, diag first
        need = lnz + 1 + cnt
        if need > Li.shape[0]:
            Li, Lx = _grow_buffer_numba(Li, Lx, lnz, need)

        lkk = math.sqrt(lkk)
        Lp[k] = lnz
        Li[lnz] = k
        Lx[lnz] = lkk
        lnz += 1
        for t in range(cnt):
            i = srows[t]
            lik = wval[i] / lkk
            Li[lnz] = i
            Lx[lnz] = lik
            lnz += 1
            d[i] -= lik * lik
            if not (d[i] > 0.0):
                return i + 1, Lp, Li, Lx, lnz, lextra
        Lp[k+1] = lnz

        # column k enters the list of its first subdiag row
        if cnt > 0:
            first = Lp[k] + 1
            lpos[k] = first
            ancestor = Li[first]
            next[k] = head[ancestor]
            head[ancestor] = k

    return 0, Lp, Li, Lx, lnz, lextra
