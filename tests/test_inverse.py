# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import logging
from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from matfunc.exceptions import DimensionMismatchError
from matfunc.inverse import LUWorkspace, invert, lu_decompose, lu_solve
from matfunc.utils import random_diagonally_dominant

TOL = {np.float32: 1e-4, np.float64: 1e-10}
logger = logging.getLogger(__name__)


def test_invert_2x2():
    A = np.array(
        [
            [4, 3],
            [6, 3],
        ]
    )
    A_inv = invert(A)
    np.testing.assert_allclose(
        A_inv,
        np.array(
            [
                [-0.5, 0.5],
                [1.0, -0.667],
            ]
        ),
        atol=1e-3,
        verbose=True,
    )


@pytest.mark.parametrize("dtype", [np.float32, np.float64])
@pytest.mark.parametrize("n", [1, 3, 10, 40])
def test_inverse_round_trip(n, dtype):
    A = random_diagonally_dominant(n, dtype=dtype, seed=n)
    A_inv = invert(A)
    logger.debug(f"\nA:\n{A}\nA^-1:\n{A_inv}\n")

    assert A_inv.dtype == dtype
    eye = np.eye(n, dtype=dtype)
    np.testing.assert_allclose(A @ A_inv, eye, atol=TOL[dtype])
    np.testing.assert_allclose(A_inv @ A, eye, atol=TOL[dtype])


def test_invert_matches_numpy():
    A = random_diagonally_dominant(25, seed=7)
    np.testing.assert_allclose(invert(A), np.linalg.inv(A), rtol=1e-8, atol=1e-12)


def test_lu_factors():
    A = random_diagonally_dominant(8, seed=3)
    L, U = lu_decompose(A)
    # unit lower / upper triangular
    assert np.allclose(np.diag(L), 1.0)
    assert np.allclose(np.triu(L, 1), 0.0)
    assert np.allclose(np.tril(U, -1), 0.0)
    assert np.allclose(L @ U, A, atol=1e-12)


def test_lu_solve_vector_rhs():
    A = random_diagonally_dominant(12, seed=11)
    x_true = np.random.default_rng(11).normal(size=12)
    b = A @ x_true
    L, U = lu_decompose(A)
    x = lu_solve(L, U, b)
    assert x.shape == (12,)
    np.testing.assert_allclose(x, x_true, rtol=1e-8, atol=1e-12)


def test_zero_leading_pivot_is_not_rescued():
    # invertible, but only with a row exchange
    A = np.array([[0.0, 1.0], [1.0, 0.0]])
    A_inv = invert(A)
    assert not np.all(np.isfinite(A_inv))


def test_singular_matrix_returns_non_finite():
    A = np.array([[1.0, 2.0], [2.0, 4.0]])
    A_inv = invert(A)
    assert np.any(~np.isfinite(A_inv))


def test_workspace_reuse():
    ws = LUWorkspace.for_size(6)
    A = random_diagonally_dominant(6, seed=1)
    B = random_diagonally_dominant(6, seed=2)

    A_inv = invert(A, workspace=ws)
    B_inv = invert(B, workspace=ws)
    assert not np.shares_memory(A_inv, ws.buf)
    np.testing.assert_allclose(A @ A_inv, np.eye(6), atol=1e-10)
    np.testing.assert_allclose(B @ B_inv, np.eye(6), atol=1e-10)


def test_workspace_must_match():
    A = random_diagonally_dominant(4, seed=0)
    with pytest.raises(DimensionMismatchError):
        invert(A, workspace=LUWorkspace.for_size(5))
    with pytest.raises(TypeError):
        invert(A, workspace=LUWorkspace.for_size(4, np.float32))


def test_invert_into_out():
    A = random_diagonally_dominant(5, seed=9)
    out = np.full((5, 5), np.nan)
    A_inv = invert(A, out=out)
    assert A_inv is out
    np.testing.assert_allclose(A @ out, np.eye(5), atol=1e-10)


def test_invert_is_deterministic():
    A = random_diagonally_dominant(15, dtype=np.float32, seed=4)
    np.testing.assert_array_equal(invert(A), invert(A))


def test_concurrent_calls_with_separate_workspaces():
    mats = [random_diagonally_dominant(20, seed=s) for s in range(16)]
    expected = [invert(A) for A in mats]

    def work(A):
        return invert(A, workspace=LUWorkspace.for_size(20))

    with ThreadPoolExecutor(max_workers=4) as pool:
        results = list(pool.map(work, mats))

    for A_inv, ref in zip(results, expected):
        np.testing.assert_array_equal(A_inv, ref)
