import unittest

import numpy as np

from ichol import IcholOptions, get_lower_triang_pattern
from ichol.factorization._numba import _icf_kernel_numba, _select_largest_numba, _grow_buffer_numba
from ichol.factorization.csc_ichol import _get_nzmax
from _utils import get_laplace_csc_mat


class SelectLargestTest(unittest.TestCase):

    def select(self, vals, keep, select_fn=_select_largest_numba):
        N = len(vals)
        wval = np.asarray(vals, dtype=np.double)
        wrow = np.arange(N, dtype=np.int64)
        select_fn(wrow, wval, N, keep)
        return wrow

    def test_keeps_largest_magnitudes(self):
        rng = np.random.default_rng(0)
        vals = rng.standard_normal(50)
        for keep in [1, 7, 25, 49]:
            wrow = self.select(vals, keep)
            expected = np.argsort(-np.abs(vals), kind="stable")[:keep]
            self.assertEqual(set(wrow[:keep]), set(expected))
            # the rest is still a permutation of the remaining rows
            self.assertEqual(sorted(wrow), list(range(50)))

    def test_ties_prefer_lower_row(self):
        wrow = self.select([1.0, -2.0, 2.0, 1.0, -2.0, 2.0], 2)
        self.assertEqual(sorted(wrow[:2]), [1, 2])
        wrow = self.select([3.0] * 8, 3)
        self.assertEqual(sorted(wrow[:3]), [0, 1, 2])

    def test_pure_python_select(self):
        wrow = self.select([0.5, -4.0, 1.0, 3.0], 2, select_fn=_select_largest_numba.py_func)
        self.assertEqual(sorted(wrow[:2]), [1, 3])

    def test_keep_out_of_range_is_noop(self):
        for keep in [0, 4, 9]:
            wrow = self.select([0.5, -4.0, 1.0, 3.0], keep)
            self.assertEqual(list(wrow), [0, 1, 2, 3])

    def test_sorted_and_reversed_inputs(self):
        # already ordered magnitudes would be worst case for a fixed pivot position
        N = 2000
        for vals in [np.arange(1.0, N + 1.0), np.arange(N, 0.0, -1.0)]:
            wrow = self.select(vals, 100)
            self.assertEqual(set(wrow[:100]), set(np.argsort(-vals, kind="stable")[:100]))

    def test_repeatable_kept_set(self):
        vals = np.tile([1.0, -3.0, 2.0, 3.0], 25)
        kept = [sorted(self.select(vals, 30)[:30]) for _ in range(5)]
        for other in kept[1:]:
            self.assertEqual(other, kept[0])
        # 50 entries of magnitude 3 sit at the odd rows, the 30 lowest of them are kept
        self.assertEqual(kept[0], list(range(1, 60, 2)))


class GrowBufferTest(unittest.TestCase):

    def test_doubling_keeps_prefix(self):
        Li = np.arange(4, dtype=np.int64)
        Lx = np.linspace(1.0, 4.0, 4)
        Li2, Lx2 = _grow_buffer_numba(Li, Lx, 3, 5)
        self.assertEqual(Li2.shape[0], 8)
        np.testing.assert_array_equal(Li2[:3], Li[:3])
        np.testing.assert_array_equal(Lx2[:3], Lx[:3])

        Li3, Lx3 = _grow_buffer_numba(Li2, Lx2, 3, 40)
        self.assertEqual(Li3.shape[0], 40)

    def test_initial_capacity_stays_sparse(self):
        N = 1000
        self.assertEqual(_get_nzmax(N, N, 10**9), N)
        self.assertEqual(_get_nzmax(N, 5 * N, 2), 3 * N)
        self.assertEqual(_get_nzmax(N, 5 * N, -1), 5 * N)
        self.assertEqual(_get_nzmax(N, 10, 0), N)

    def test_kernel_small_initial_buffer(self):
        A = get_laplace_csc_mat(6)
        N = A.shape[0]
        colp, rows, vals = get_lower_triang_pattern(A)
        scal = np.ones(N)

        results = []
        for nzmax in [1, 10 * N * N]:
            info, Lp, Li, Lx, lnz, lextra = _icf_kernel_numba(
                N, colp, rows, vals, scal, 0.0, 0.0, 0.0, -1, nzmax
            )
            self.assertEqual(info, 0)
            results += [(Lp.copy(), Li[:lnz].copy(), Lx[:lnz].copy())]

        np.testing.assert_array_equal(results[0][0], results[1][0])
        np.testing.assert_array_equal(results[0][1], results[1][1])
        np.testing.assert_array_equal(results[0][2], results[1][2])


class OptionsTest(unittest.TestCase):

    def test_presets(self):
        opt = IcholOptions.no_drop(alpha=0.1)
        self.assertEqual((opt.alpha, opt.tau, opt.lfill), (0.1, 0.0, -1))
        opt = IcholOptions.fill_limited(5, tau=1e-3)
        self.assertEqual((opt.tau, opt.lfill), (1e-3, 5))
        opt = IcholOptions.jacobi(beta=2.0)
        self.assertEqual((opt.beta, opt.lfill), (2.0, 0))
        self.assertIs(opt.validate(), opt)
        self.assertIn("lfill=0", repr(opt))


if __name__ == '__main__':
    unittest.main()
