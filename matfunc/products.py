# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Products and transposes
"""

import logging
from typing import Optional

import numpy as np

from .exceptions import DimensionMismatchError
from .utils import as_float, as_matrix, output, output_buffer, resolve_dtype

logger = logging.getLogger(__name__)


def _check_dims(*dims: int):
    for d in dims:
        if int(d) != d or d < 1:
            raise DimensionMismatchError(
                f"dimensions must be positive integers, got {dims}"
            )


def multiply(
    A: np.ndarray,
    B: np.ndarray,
    *,
    out: Optional[np.ndarray] = None,
    check: bool = False,
) -> np.ndarray:
    """
    Matrix product C = A B for A (m, n) and B (n, l).

    Parameters
    ----------
    A : (m, n) array_like
    B : (n, l) array_like
    out : (m, l) ndarray | None
        Caller-allocated result. Must not overlap A or B.
    check : bool
        Raise DimensionMismatchError on non-2-D operands or when the
        inner dimensions differ.

    Returns
    -------
    C : (m, l) ndarray
        Every entry is overwritten.
    """
    dtype = resolve_dtype(A, B, out)
    A = as_float(A, dtype)
    B = as_float(B, dtype)
    if check:
        if A.ndim != 2 or B.ndim != 2:
            raise DimensionMismatchError("multiply expects two 2-D matrices")
        if A.shape[1] != B.shape[0]:
            raise DimensionMismatchError(
                f"inner dimensions differ: {A.shape} x {B.shape}"
            )
    C = output(out, (A.shape[0], B.shape[-1]), dtype)
    np.matmul(A, B, out=C)
    return C


def transpose(A: np.ndarray, *, out: Optional[np.ndarray] = None) -> np.ndarray:
    """Return Aᵀ as a new contiguous (n, m) array, never a view of A."""
    dtype = resolve_dtype(A, out)
    A = np.atleast_2d(as_float(A, dtype))
    m, n = A.shape
    At = output(out, (n, m), dtype)
    At[...] = A.T
    return At


def cross_product(
    A: np.ndarray, B: np.ndarray, *, out: Optional[np.ndarray] = None
) -> np.ndarray:
    """
    Cross product X = A x B of two 3-vectors.

    Column vectors of shape (3, 1) are accepted; the result is always (3,).
    """
    dtype = resolve_dtype(A, B, out)
    a = as_float(A, dtype).reshape(-1)
    b = as_float(B, dtype).reshape(-1)
    if a.size != 3 or b.size != 3:
        raise DimensionMismatchError(
            f"cross product is defined for 3-vectors only, got {a.size} and {b.size}"
        )
    X = output(out, (3,), dtype)
    X[0] = a[1] * b[2] - a[2] * b[1]
    X[1] = a[2] * b[0] - a[0] * b[2]
    X[2] = a[0] * b[1] - a[1] * b[0]
    return X


def multiply_buffer(A, B, m: int, n: int, l: int, out=None, check: bool = False):
    """
    Runtime-sized product on flat row-major buffers: C(m x l) = A(m x n) B(n x l).

    Only the leading m*n, n*l and m*l elements of A, B and out are used.
    Returns the flat output buffer.
    """
    if check:
        _check_dims(m, n, l)
    dtype = resolve_dtype(A, B, out)
    Av = as_matrix(as_float(A, dtype), m, n)
    Bv = as_matrix(as_float(B, dtype), n, l)
    C = output_buffer(out, m, l, dtype)
    np.matmul(Av, Bv, out=as_matrix(C, m, l))
    return C


def transpose_buffer(A, m: int, n: int, out=None):
    """Runtime-sized transpose on flat buffers: writes Aᵀ (n x m) row-major."""
    dtype = resolve_dtype(A, out)
    Av = as_matrix(as_float(A, dtype), m, n)
    At = output_buffer(out, n, m, dtype)
    as_matrix(At, n, m)[...] = Av.T
    return At
