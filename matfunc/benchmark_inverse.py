#!/usr/bin/python3
# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import time

import numpy as np
import pandas as pd

from matfunc import LUWorkspace, invert, pseudo_inverse, weighted_pseudo_inverse
from matfunc.utils import random_diagonally_dominant, random_full_rank

REPEATS = 5  # best of 5 runs leads to stable numbers
sizes = [(10, 10), (50, 50), (200, 200), (100, 40)]


def wall(f, *args, **kwargs):
    t0 = time.perf_counter()
    f(*args, **kwargs)
    return time.perf_counter() - t0


def numpy_weighted_pinv(A, W):
    W_inv = np.linalg.inv(W)
    return W_inv @ A.T @ np.linalg.inv(A @ W_inv @ A.T)


def record(records, kernel, size, dtype, t, t_ref, err, err_ref):
    records.append((kernel, size, np.dtype(dtype).name, t, t / t_ref, err, err_ref))


def main():
    records = []
    for m, n in sizes:
        for dtype in (np.float32, np.float64):
            if m == n:
                A = random_diagonally_dominant(n, dtype=dtype, seed=0)
                ws = LUWorkspace.for_size(n, dtype)

                t_np = min(wall(np.linalg.inv, A) for _ in range(REPEATS))
                t_lu = min(wall(invert, A, workspace=ws) for _ in range(REPEATS))
                err = np.linalg.norm(A @ invert(A) - np.eye(n), np.inf)
                err_np = np.linalg.norm(A @ np.linalg.inv(A) - np.eye(n), np.inf)
                record(records, "LU-inv", f"{m}×{n}", dtype, t_lu, t_np, err, err_np)
            else:
                A = random_full_rank(m, n, dtype=dtype, seed=0)
                t_np = min(wall(np.linalg.pinv, A) for _ in range(REPEATS))
                t_pi = min(wall(pseudo_inverse, A) for _ in range(REPEATS))
                err = np.linalg.norm(A @ pseudo_inverse(A) @ A - A, np.inf)
                err_np = np.linalg.norm(A @ np.linalg.pinv(A) @ A - A, np.inf)
                record(records, "pinv", f"{m}×{n}", dtype, t_pi, t_np, err, err_np)

                # wide problem for the weighted variant
                Aw = A.T.copy()
                W = random_diagonally_dominant(m, dtype=dtype, seed=1)
                t_wnp = min(wall(numpy_weighted_pinv, Aw, W) for _ in range(REPEATS))
                t_w = min(wall(weighted_pseudo_inverse, Aw, W) for _ in range(REPEATS))
                I_n = np.eye(n)
                A_wp = weighted_pseudo_inverse(Aw, W)
                err_w = np.linalg.norm(Aw @ A_wp - I_n, np.inf)
                err_wnp = np.linalg.norm(Aw @ numpy_weighted_pinv(Aw, W) - I_n, np.inf)
                record(records, "wpinv", f"{n}×{m}", dtype, t_w, t_wnp, err_w, err_wnp)

    df = pd.DataFrame(
        records,
        columns=[
            "kernel",
            "size",
            "dtype",
            "sec",
            "sec/NumPy",
            "residual",
            "residual NumPy",
        ],
    )
    print(df.to_markdown(index=False))
    df.to_csv("bench_results.csv", index=False)


if __name__ == "__main__":
    main()
