# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import numpy as np
import pytest

from matfunc.exceptions import DimensionMismatchError
from matfunc.utils import (
    EPS,
    as_matrix,
    random_diagonally_dominant,
    random_full_rank,
    resolve_dtype,
    scale_tol,
)


def test_resolve_dtype():
    assert resolve_dtype([1, 2], np.arange(3)) == np.float64
    assert resolve_dtype(np.ones(2, dtype=np.float32), [1.0]) == np.float32
    with pytest.raises(TypeError):
        resolve_dtype(np.ones(2, dtype=np.float32), np.ones(2))
    with pytest.raises(TypeError):
        resolve_dtype(np.ones(2, dtype=np.float16))


def test_scale_tol_per_precision():
    A = np.diag([4.0, -8.0])
    assert scale_tol(A) == pytest.approx(8 * EPS[np.dtype(np.float64)])
    eps32 = EPS[np.dtype(np.float32)]
    assert scale_tol(A.astype(np.float32)) == pytest.approx(8 * eps32)
    # relative, with no floor at 1
    eps64 = EPS[np.dtype(np.float64)]
    assert scale_tol(1e-6 * np.eye(2)) == pytest.approx(1e-6 * eps64, rel=1e-9, abs=0)
    # an all-zero matrix falls back to the bare epsilon
    assert scale_tol(np.zeros((2, 2))) == EPS[np.dtype(np.float64)]


def test_as_matrix_is_a_view():
    buf = np.zeros(7)
    M = as_matrix(buf, 2, 3)
    M[1, 2] = 5.0
    assert buf[5] == 5.0
    with pytest.raises(DimensionMismatchError):
        as_matrix(buf, 3, 3)


def test_random_diagonally_dominant():
    A = random_diagonally_dominant(10, seed=0)
    off = np.abs(A).sum(axis=1) - np.abs(np.diag(A))
    assert np.all(np.abs(np.diag(A)) > off)
    assert random_diagonally_dominant(3, dtype=np.float32).dtype == np.float32


def test_random_full_rank():
    A = random_full_rank(4, 9, seed=1)
    assert A.shape == (4, 9)
    assert np.linalg.matrix_rank(A) == 4
