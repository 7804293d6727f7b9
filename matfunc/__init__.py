# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
matfunc
=======

Dense matrix kernels for small control and sensor-fusion problems:
products, transposes, an LU inverse without pivoting and the
(weighted) pseudo-inverses built on top of it.

Every operation comes in two flavours:

- shape-carrying 2-D arrays (`multiply`, `invert`, ...)
- flat row-major buffers with runtime dimensions (`multiply_buffer`,
  `invert_buffer`, ...)

float32 and float64 are both supported and never mixed within a call.

Public API
~~~~~~~~~~
- Products
    - `multiply`, `transpose`, `cross_product`
- Inversion
    - `invert`, `lu_decompose`, `lu_solve`, `LUWorkspace`
- Pseudo-inverses
    - `pseudo_inverse`, `weighted_pseudo_inverse`
- Errors (only raised with ``check=True``)
    - `MatrixFuncError`, `DimensionMismatchError`, `SingularMatrixError`

Example
-------
>>> import numpy as np, matfunc as mf
>>> A = np.array([[4.0, 3.0], [6.0, 3.0]])
>>> np.allclose(A @ mf.invert(A), np.eye(2))
True
"""

from importlib.metadata import version as _pkg_version

from .exceptions import (
    DimensionMismatchError,
    MatrixFuncError,
    SingularMatrixError,
)
from .inverse import (
    LUWorkspace,
    invert,
    invert_buffer,
    lu_decompose,
    lu_solve,
)

# ---------------------------------------------------------------------
# Re-export the high-level functions users are expected to call.
# Each of these names is implemented in one of the internal sub-modules.
# ---------------------------------------------------------------------
from .products import (
    cross_product,
    multiply,
    multiply_buffer,
    transpose,
    transpose_buffer,
)
from .pseudo_inverse import (
    pseudo_inverse,
    pseudo_inverse_buffer,
    weighted_pseudo_inverse,
    weighted_pseudo_inverse_buffer,
)
from .utils import EPS, scale_tol

__all__ = [
    "multiply",
    "transpose",
    "cross_product",
    "multiply_buffer",
    "transpose_buffer",
    "invert",
    "invert_buffer",
    "lu_decompose",
    "lu_solve",
    "LUWorkspace",
    "pseudo_inverse",
    "pseudo_inverse_buffer",
    "weighted_pseudo_inverse",
    "weighted_pseudo_inverse_buffer",
    "MatrixFuncError",
    "DimensionMismatchError",
    "SingularMatrixError",
    "EPS",
    "scale_tol",
]

# ---------------------------------------------------------------------
# Version string (helps “pip show matfunc”, Sphinx, etc.)
# ---------------------------------------------------------------------
try:  # installed via pip / build backend
    __version__ = _pkg_version(__name__)
except Exception:  # running from a checkout
    __version__ = "0.0.0.dev0"

# ---------------------------------------------------------------------
# Optional: lightweight default logging config so users see debug
# messages only if they deliberately enable them.
# ---------------------------------------------------------------------
import logging as _logging

_logging.getLogger(__name__).addHandler(_logging.NullHandler())
