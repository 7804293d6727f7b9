# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Pseudo-inverses built from multiply, transpose and invert
"""

import logging
from typing import Optional

import numpy as np

from .exceptions import DimensionMismatchError, SingularMatrixError
from .inverse import invert
from .products import multiply, transpose
from .utils import as_float, as_matrix, output, output_buffer, resolve_dtype

logger = logging.getLogger(__name__)

# inf/NaN from a singular Gram matrix pass through silently
_QUIET = dict(divide="ignore", invalid="ignore", over="ignore")


def _check_matrix(A: np.ndarray, name: str = "A"):
    if A.ndim != 2:
        raise DimensionMismatchError(f"{name} must be 2-D, got shape {A.shape}")
    if 0 in A.shape:
        raise DimensionMismatchError(f"{name} is empty")


def pseudo_inverse(
    A: np.ndarray,
    *,
    out: Optional[np.ndarray] = None,
    check: bool = False,
    tol: Optional[float] = None,
) -> np.ndarray:
    """
    Moore-Penrose pseudo-inverse of a full-rank m-by-n matrix.

    m <  n (full row rank):     A+ = Aᵀ (A Aᵀ)^{-1}
    m >= n (full column rank):  A+ = (Aᵀ A)^{-1} Aᵀ

    The square case takes the second branch. Rank is never verified:
    a rank-deficient A makes the Gram matrix singular, and the result is
    whatever invert() produces for it (inf/NaN) unless ``check`` is set,
    in which case SingularMatrixError is raised.

    ``tol`` is the pivot threshold for the Gram matrix (A Aᵀ or Aᵀ A), not
    for A itself; by default it is scale_tol() of the Gram matrix.

    Returns
    -------
    A_pinv : (n, m) ndarray
    """
    dtype = resolve_dtype(A, out)
    A = as_float(A, dtype)
    if check:
        _check_matrix(A)
    m, n = A.shape

    At = transpose(A)
    A_pinv = output(out, (n, m), dtype)
    try:
        with np.errstate(**_QUIET):
            if m < n:
                logger.debug(f"pseudo_inverse(): {m}x{n} wide, using Aᵀ(AAᵀ)^-1")
                AAt = multiply(A, At)
                AAt_inv = invert(AAt, check=check, tol=tol)
                multiply(At, AAt_inv, out=A_pinv)
            else:
                logger.debug(f"pseudo_inverse(): {m}x{n} tall, using (AᵀA)^-1Aᵀ")
                AtA = multiply(At, A)
                AtA_inv = invert(AtA, check=check, tol=tol)
                multiply(AtA_inv, At, out=A_pinv)
    except SingularMatrixError as e:
        raise SingularMatrixError(
            f"{m}x{n} matrix is not of full rank {min(m, n)}: {e}",
            pivot_index=e.pivot_index,
        ) from e
    return A_pinv


def weighted_pseudo_inverse(
    A: np.ndarray,
    W: np.ndarray,
    *,
    out: Optional[np.ndarray] = None,
    check: bool = False,
    tol: Optional[float] = None,
) -> np.ndarray:
    """
    Weighted (generalised) pseudo-inverse

        A+_w = W^{-1} Aᵀ (A W^{-1} Aᵀ)^{-1}

    Parameters
    ----------
    A : (m, n) array_like
        Full row rank.
    W : (l, l) array_like
        Invertible weight matrix, l == n.

    Returns
    -------
    A_wp : (l, m) ndarray
        Satisfies A A_wp = I_m. With W = I it equals pseudo_inverse(A)
        for a wide A.

    Notes
    -----
    Both W and the derived m-by-m matrix go through invert(), so the
    no-pivoting caveats apply twice. ``tol`` is used as the pivot
    threshold for both; by default each gets scale_tol() of its own input.
    """
    dtype = resolve_dtype(A, W, out)
    A = as_float(A, dtype)
    W = as_float(W, dtype)
    if check:
        _check_matrix(A)
        _check_matrix(W, "W")
        if W.shape[0] != W.shape[1] or W.shape[0] != A.shape[1]:
            raise DimensionMismatchError(
                f"W must be {A.shape[1]}x{A.shape[1]} for A of shape {A.shape}, "
                f"got {W.shape}"
            )
    m = A.shape[0]
    l = W.shape[0]

    At = transpose(A)
    A_wp = output(out, (l, m), dtype)
    with np.errstate(**_QUIET):
        W_inv = invert(W, check=check, tol=tol)

        AW = multiply(A, W_inv)
        AWA = multiply(AW, At)
        try:
            AWA_inv = invert(AWA, check=check, tol=tol)
        except SingularMatrixError as e:
            raise SingularMatrixError(
                f"A W^-1 Aᵀ is singular, A is not of full row rank: {e}",
                pivot_index=e.pivot_index,
            ) from e

        WA = multiply(W_inv, At)
        multiply(WA, AWA_inv, out=A_wp)
    return A_wp


def pseudo_inverse_buffer(A, m: int, n: int, out=None, check: bool = False, tol=None):
    """Runtime-sized pseudo_inverse(): flat A (m x n) in, flat A+ (n x m) out."""
    if check and any(int(d) != d or d < 1 for d in (m, n)):
        raise DimensionMismatchError(
            f"dimensions must be positive integers, got {(m, n)}"
        )
    dtype = resolve_dtype(A, out)
    Av = as_matrix(as_float(A, dtype), m, n)
    A_pinv = output_buffer(out, n, m, dtype)
    pseudo_inverse(Av, out=as_matrix(A_pinv, n, m), check=check, tol=tol)
    return A_pinv


def weighted_pseudo_inverse_buffer(
    A, W, m: int, n: int, l: int, out=None, check: bool = False, tol=None
):
    """
    Runtime-sized weighted_pseudo_inverse(): flat A (m x n) and W (l x l),
    flat A+_w (l x m) out. n and l must agree.
    """
    if check:
        if any(int(d) != d or d < 1 for d in (m, n, l)):
            raise DimensionMismatchError(
                f"dimensions must be positive integers, got {(m, n, l)}"
            )
        if n != l:
            raise DimensionMismatchError(f"W must be {n}x{n}, declared {l}x{l}")
    dtype = resolve_dtype(A, W, out)
    Av = as_matrix(as_float(A, dtype), m, n)
    Wv = as_matrix(as_float(W, dtype), l, l)
    A_wp = output_buffer(out, l, m, dtype)
    weighted_pseudo_inverse(
        Av, Wv, out=as_matrix(A_wp, l, m), check=check, tol=tol
    )
    return A_wp
