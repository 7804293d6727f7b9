# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

from typing import Optional

import numpy as np

from .exceptions import DimensionMismatchError

DEFAULT_DTYPE = np.float64

# Pivot tolerance per precision, scaled by the matrix magnitude in scale_tol
EPS: dict = {
    np.dtype(np.float32): 1e-6,
    np.dtype(np.float64): 1e-12,
}


def resolve_dtype(*arrays) -> np.dtype:
    """
    Pick the single floating-point precision shared by all operands.

    Non-floating inputs (lists, integer arrays) follow the floating
    operands, or DEFAULT_DTYPE when there are none. float32 and float64
    are never mixed.
    """
    found = set()
    for a in arrays:
        dt = getattr(a, "dtype", None)
        if dt is not None and np.issubdtype(dt, np.floating):
            found.add(np.dtype(dt))
    if not found:
        return np.dtype(DEFAULT_DTYPE)
    if len(found) > 1:
        names = ", ".join(sorted(d.name for d in found))
        raise TypeError(f"operands mix floating-point precisions ({names})")
    dt = found.pop()
    if dt not in EPS:
        raise TypeError(f"unsupported precision {dt.name}; use float32 or float64")
    return dt


def as_float(A, dtype: np.dtype) -> np.ndarray:
    """C-ordered view of A in the requested precision (copy only if needed)."""
    return np.ascontiguousarray(A, dtype=dtype)


def as_matrix(buf: np.ndarray, m: int, n: int) -> np.ndarray:
    """
    Row-major (m, n) view onto the leading m*n elements of a flat buffer.

    The buffer may be larger than m*n; the tail is left untouched.
    """
    flat = buf.reshape(-1)
    if flat.size < m * n:
        raise DimensionMismatchError(
            f"buffer holds {flat.size} elements, {m}x{n} matrix needs {m * n}"
        )
    return flat[: m * n].reshape(m, n)


def output(
    out: Optional[np.ndarray], shape: tuple, dtype: np.dtype
) -> np.ndarray:
    """Return the caller's output array, or allocate one of the given shape."""
    if out is None:
        return np.empty(shape, dtype=dtype)
    if not isinstance(out, np.ndarray):
        raise TypeError("out must be a NumPy ndarray")
    if out.dtype != dtype:
        raise TypeError(f"out has dtype {out.dtype.name}, expected {dtype.name}")
    if out.shape != shape:
        raise DimensionMismatchError(f"out has shape {out.shape}, expected {shape}")
    return out


def output_buffer(
    out: Optional[np.ndarray], m: int, n: int, dtype: np.dtype
) -> np.ndarray:
    """Flat output buffer with capacity >= m*n."""
    if out is None:
        return np.empty(m * n, dtype=dtype)
    if not isinstance(out, np.ndarray):
        raise TypeError("out must be a NumPy ndarray")
    if out.dtype != dtype:
        raise TypeError(f"out has dtype {out.dtype.name}, expected {dtype.name}")
    if not out.flags.c_contiguous:
        # reshape() would copy and the result would never reach the caller
        raise ValueError("out must be a C-contiguous buffer")
    return out


def scale_tol(A: np.ndarray) -> float:
    """
    Return an absolute tolerance relative to the matrix magnitude, EPS * ‖A‖∞.

    An all-zero (or non-finite) A falls back to the bare EPS so that its
    zero pivots still count as negligible.
    """
    eps = EPS.get(np.dtype(A.dtype), EPS[np.dtype(DEFAULT_DTYPE)])
    with np.errstate(invalid="ignore", over="ignore"):
        norm = float(np.linalg.norm(A, ord=np.inf)) if A.size else 0.0
    if norm == 0.0 or not np.isfinite(norm):
        return eps
    return eps * norm


def random_diagonally_dominant(
    n, low=-1.0, high=1.0, dtype=DEFAULT_DTYPE, seed=None
) -> np.ndarray:
    """
    Build an n-by-n matrix whose diagonal strictly dominates each row.

    Every leading principal minor of such a matrix is non-zero, so it can
    be factored without row exchanges.
    """
    rng = np.random.default_rng(seed)
    A = rng.uniform(low, high, size=(n, n))
    # push each diagonal entry past the sum of its row
    row_sums = np.abs(A).sum(axis=1)
    A[np.diag_indices(n)] = row_sums + rng.uniform(1.0, 2.0, size=n)
    return A.astype(dtype)


def random_full_rank(m, n, dtype=DEFAULT_DTYPE, seed=None) -> np.ndarray:
    """
    Random m-by-n matrix with full rank min(m, n).

    Gaussian entries are full rank with probability one; the loop only
    guards the pathological draw.
    """
    rng = np.random.default_rng(seed)
    while True:
        A = rng.standard_normal((m, n))
        if np.linalg.matrix_rank(A) == min(m, n):
            return A.astype(dtype)
