# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .exceptions import DimensionMismatchError, SingularMatrixError
from .utils import (
    DEFAULT_DTYPE,
    as_float,
    as_matrix,
    output,
    output_buffer,
    resolve_dtype,
    scale_tol,
)

logger = logging.getLogger(__name__)


@dataclass
class LUWorkspace:
    """
    Scratch memory for inverting n-by-n matrices.

    L and U receive the factors, buf holds the forward-substitution
    result. Reusing one workspace across calls of the same size avoids
    reallocating; it must not be shared by concurrent calls.
    """

    L: np.ndarray
    U: np.ndarray
    buf: np.ndarray

    @classmethod
    def for_size(cls, n: int, dtype=DEFAULT_DTYPE) -> "LUWorkspace":
        dtype = np.dtype(dtype)
        return cls(
            L=np.empty((n, n), dtype=dtype),
            U=np.empty((n, n), dtype=dtype),
            buf=np.empty((n, n), dtype=dtype),
        )

    @property
    def n(self) -> int:
        return self.L.shape[0]

    @property
    def dtype(self) -> np.dtype:
        return self.L.dtype

    def validate(self, n: int, dtype: np.dtype):
        if self.n != n:
            raise DimensionMismatchError(
                f"workspace is sized for {self.n}x{self.n}, matrix is {n}x{n}"
            )
        if self.dtype != dtype:
            raise TypeError(
                f"workspace has dtype {self.dtype.name}, matrix is {dtype.name}"
            )


def _check_square(A: np.ndarray):
    if A.ndim != 2 or A.shape[0] != A.shape[1]:
        raise DimensionMismatchError(f"expected a square matrix, got shape {A.shape}")
    if A.shape[0] == 0:
        raise DimensionMismatchError("cannot invert an empty matrix")


def lu_decompose(
    A: np.ndarray, workspace: Optional[LUWorkspace] = None
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Doolittle LU factorisation A = L U **without** row exchanges.

    Parameters
    ----------
    A : (n, n) array_like
        Square matrix whose leading principal minors are all non-zero
        (e.g. diagonally dominant). Nothing is checked here.
    workspace : LUWorkspace | None
        When given, the factors are written into workspace.L / workspace.U.

    Returns
    -------
    L : (n, n) ndarray
        Unit lower-triangular.
    U : (n, n) ndarray
        Upper-triangular. A zero on its diagonal turns the entries of L
        below it into inf/NaN; the values are returned as they come out.
    """
    dtype = resolve_dtype(A)
    A = as_float(A, dtype)
    n = A.shape[0]
    if workspace is None:
        workspace = LUWorkspace.for_size(n, dtype)
    else:
        workspace.validate(n, dtype)

    L, U = workspace.L, workspace.U
    L.fill(0.0)
    np.fill_diagonal(L, 1.0)
    U.fill(0.0)

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        for i in range(n):
            # row i of U:  U[i, j] = A[i, j] - sum_{k<i} L[i, k] U[k, j],  j >= i
            U[i, i:] = A[i, i:] - L[i, :i] @ U[:i, i:]
            # column i of L below the diagonal, divided by the pivot
            L[i + 1 :, i] = (A[i + 1 :, i] - L[i + 1 :, :i] @ U[:i, i]) / U[i, i]
    return L, U


def lu_solve(
    L: np.ndarray,
    U: np.ndarray,
    B: Optional[np.ndarray] = None,
    *,
    out: Optional[np.ndarray] = None,
    buf: Optional[np.ndarray] = None,
) -> np.ndarray:
    """
    Solve L U X = B by forward then backward substitution.

    Parameters
    ----------
    L, U : (n, n) ndarray
        Factors from lu_decompose.
    B : (n,) or (n, k) array_like | None
        Right-hand side(s). None means the identity, so X = (LU)^{-1}.
    out : ndarray | None
        Receives X; same shape as B.
    buf : (n, k) ndarray | None
        Scratch for the intermediate Y of L Y = B.

    Returns
    -------
    X : (n,) or (n, k) ndarray
    """
    dtype = resolve_dtype(L, U)
    n = L.shape[0]
    if B is None:
        B = np.eye(n, dtype=dtype)
    else:
        B = as_float(B, resolve_dtype(L, B))
    vector = B.ndim == 1
    if vector:
        # (n,)  →  (n,1)
        B = B[:, None]
    k = B.shape[1]

    Y = np.empty((n, k), dtype=dtype) if buf is None else buf
    Y[...] = B
    if vector:
        X = output(out, (n,), dtype)[:, None]
    else:
        X = output(out, (n, k), dtype)

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        # L has a unit diagonal, so no division on the way down
        for i in range(n):
            Y[i] -= L[i, :i] @ Y[:i]
        for i in reversed(range(n)):
            X[i] = (Y[i] - U[i, i + 1 :] @ X[i + 1 :]) / U[i, i]

    if vector:
        return X.ravel()
    return X


def invert(
    A: np.ndarray,
    *,
    out: Optional[np.ndarray] = None,
    workspace: Optional[LUWorkspace] = None,
    check: bool = False,
    tol: Optional[float] = None,
) -> np.ndarray:
    """
    Inverse of a square matrix through LU decomposition without pivoting.

    Each column k of A^{-1} solves L y = e_k, then U x = y.

    No row exchanges are performed. A matrix that is invertible but has a
    zero leading principal minor, such as [[0, 1], [1, 0]], comes back
    full of inf/NaN just like a singular one. Unless ``check`` is set this
    is not reported in any way.

    Parameters
    ----------
    A : (n, n) array_like
    out : (n, n) ndarray | None
        Caller-allocated result; must not overlap A.
    workspace : LUWorkspace | None
        Reusable scratch for L, U and the substitution buffer.
    check : bool
        Raise DimensionMismatchError for non-square or empty input and
        SingularMatrixError when a pivot satisfies |U[i, i]| <= tol or the
        result is not finite.
    tol : float | None
        Pivot threshold for ``check``; defaults to scale_tol(A), which is
        relative to ‖A‖∞ so uniformly small matrices are not rejected.
        When check fails, ``out`` is left untouched.

    Returns
    -------
    A_inv : (n, n) ndarray
        Same precision as A.
    """
    dtype = resolve_dtype(A, out)
    A = as_float(A, dtype)
    if check:
        _check_square(A)
    n = A.shape[0]
    if workspace is None:
        workspace = LUWorkspace.for_size(n, dtype)
    else:
        workspace.validate(n, dtype)

    L, U = lu_decompose(A, workspace)

    if check:
        tol = scale_tol(A) if tol is None else tol
        pivots = np.diag(U)
        bad = np.flatnonzero(~np.isfinite(pivots) | (np.abs(pivots) <= tol))
        if bad.size:
            i = int(bad[0])
            logger.debug(f"invert(): pivot U[{i},{i}] = {pivots[i]} (tol {tol})")
            raise SingularMatrixError(
                f"zero or negligible pivot at index {i}; the matrix is singular "
                "or needs row exchanges",
                pivot_index=i,
            )

    A_inv = output(out, (n, n), dtype)
    if not check:
        lu_solve(L, U, out=A_inv, buf=workspace.buf)
        return A_inv

    # solve into scratch so a failed check leaves the caller's out untouched
    X = lu_solve(L, U, buf=workspace.buf)
    if not np.all(np.isfinite(X)):
        logger.debug("invert(): non-finite entries in result")
        raise SingularMatrixError("inverse contains non-finite values")
    A_inv[...] = X
    return A_inv


def invert_buffer(
    A,
    n: int,
    out=None,
    workspace: Optional[LUWorkspace] = None,
    check: bool = False,
    tol: Optional[float] = None,
):
    """Runtime-sized invert() on a flat row-major buffer of capacity >= n*n."""
    if check and (int(n) != n or n < 1):
        raise DimensionMismatchError(f"n must be a positive integer, got {n}")
    dtype = resolve_dtype(A, out)
    Av = as_matrix(as_float(A, dtype), n, n)
    A_inv = output_buffer(out, n, n, dtype)
    invert(
        Av,
        out=as_matrix(A_inv, n, n),
        workspace=workspace,
        check=check,
        tol=tol,
    )
    return A_inv
