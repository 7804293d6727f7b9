# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Errors raised by the kernels when called with ``check=True``.

Unchecked calls never raise these for numerical problems; singular
input simply yields inf/NaN in the result.
"""

import numpy as np


class MatrixFuncError(Exception):
    """Base class for every error the kernels raise."""


class DimensionMismatchError(MatrixFuncError, ValueError):
    """Operand shapes, buffer capacities or declared dimensions disagree."""


class SingularMatrixError(MatrixFuncError, np.linalg.LinAlgError):
    """A zero or negligible pivot was hit during LU decomposition."""

    def __init__(self, message, pivot_index=None):
        super().__init__(message)
        self.pivot_index = pivot_index
