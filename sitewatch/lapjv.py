"""Jonker-Volgenant solver for the linear assignment problem."""

from __future__ import annotations

import math
from typing import NamedTuple, Sequence

LARGE = 1000000


class LapResult(NamedTuple):
    """Outcome of an assignment: total cost and the row and column solutions."""

    cost: float
    rowsol: list[int]
    colsol: list[int]


def _column_reduction(cost, n):
    x = [-1] * n
    v = [float(LARGE)] * n
    y = [0] * n
    for i, row in enumerate(cost):
        for j, c in enumerate(row):
            if c < v[j]:
                v[j] = c
                y[j] = i

    unique = [True] * n
    for j in reversed(range(n)):
        i = y[j]
        if x[i] < 0:
            x[i] = j
        else:
            unique[i] = False
            y[j] = -1

    free_rows = []
    for i in range(n):
        if x[i] < 0:
            free_rows.append(i)
        elif unique[i]:
            j = x[i]
            reduced = [cost[i][j2] - v[j2] for j2 in range(n) if j2 != j]
            v[j] -= min(reduced, default=LARGE)
    return free_rows, x, y, v


def _augmenting_row_reduction(cost, n, n_free_rows, free_rows, x, y, v):
    current = 0
    new_free_rows = 0
    rr_cnt = 0
    while current < n_free_rows:
        rr_cnt += 1
        free_i = free_rows[current]
        current += 1
        row = cost[free_i]

        j1 = 0
        v1 = row[0] - v[0]
        j2 = -1
        v2 = float(LARGE)
        for j in range(1, n):
            c = row[j] - v[j]
            if c < v2:
                if c >= v1:
                    v2 = c
                    j2 = j
                else:
                    v2 = v1
                    v1 = c
                    j2 = j1
                    j1 = j

        i0 = y[j1]
        v1_new = v[j1] - (v2 - v1)
        v1_lowers = v1_new < v[j1]
        if rr_cnt < current * n:
            if v1_lowers:
                v[j1] = v1_new
            elif i0 >= 0 and j2 >= 0:
                j1 = j2
                i0 = y[j2]
            if i0 >= 0:
                if v1_lowers:
                    current -= 1
                    free_rows[current] = i0
                else:
                    free_rows[new_free_rows] = i0
                    new_free_rows += 1
        elif i0 >= 0:
            free_rows[new_free_rows] = i0
            new_free_rows += 1
        x[free_i] = j1
        y[j1] = free_i
    return new_free_rows


def _find(n, lo, d, cols):
    hi = lo + 1
    mind = d[cols[lo]]
    for k in range(lo + 1, n):
        j = cols[k]
        if d[j] <= mind:
            if d[j] < mind:
                hi = lo
                mind = d[j]
            cols[k] = cols[hi]
            cols[hi] = j
            hi += 1
    return hi


def _scan(n, cost, lo, hi, d, cols, pred, y, v):
    """Relax the TODO columns; returns (free column or -1, lo, hi)."""
    start_lo, start_hi = lo, hi
    while lo != hi:
        j = cols[lo]
        lo += 1
        i = y[j]
        mind = d[j]
        row = cost[i]
        h = row[j] - v[j] - mind
        for k in range(hi, n):
            j = cols[k]
            cred_ij = row[j] - v[j] - h
            if cred_ij < d[j]:
                d[j] = cred_ij
                pred[j] = i
                if cred_ij == mind:
                    if y[j] < 0:
                        return j, start_lo, start_hi
                    cols[k] = cols[hi]
                    cols[hi] = j
                    hi += 1
    return -1, lo, hi


def _find_path(n, cost, start_i, y, v, pred):
    lo = hi = 0
    final_j = -1
    n_ready = 0
    cols = list(range(n))
    pred[:] = [start_i] * n
    d = [cost[start_i][i] - v[i] for i in range(n)]

    while final_j == -1:
        if lo == hi:
            n_ready = lo
            hi = _find(n, lo, d, cols)
            for j in cols[lo:hi]:
                if y[j] < 0:
                    final_j = j
        if final_j == -1:
            final_j, lo, hi = _scan(n, cost, lo, hi, d, cols, pred, y, v)

    mind = d[cols[lo]]
    for j in cols[:n_ready]:
        v[j] += d[j] - mind
    return final_j


def _augment(n, cost, free_rows, x, y, v):
    pred = [0] * n
    for free_i in free_rows:
        i = -1
        j = _find_path(n, cost, free_i, y, v, pred)
        while i != free_i:
            i = pred[j]
            y[j] = i
            j, x[i] = x[i], j


def solve_dense(cost: Sequence[Sequence[float]]) -> tuple[list[int], list[int]]:
    """Solve a square assignment problem.

    Returns ``(x, y)`` where ``x[i]`` is the column given to row ``i`` and
    ``y[j]`` the row given to column ``j``.
    """
    matrix = [[float(c) for c in row] for row in cost]
    n = len(matrix)
    if any(len(row) != n for row in matrix):
        raise ValueError("cost matrix must be square")
    if n == 0:
        return [], []

    free, x, y, v = _column_reduction(matrix, n)
    n_free = len(free)
    free_rows = free + [0] * (n - n_free)
    passes = 0
    while n_free > 0 and passes < 2:
        n_free = _augmenting_row_reduction(matrix, n, n_free, free_rows, x, y, v)
        passes += 1
    if n_free > 0:
        _augment(n, matrix, free_rows[:n_free], x, y, v)
    return x, y


def lapjv(
    cost: Sequence[Sequence[float]],
    extend_cost: bool = False,
    cost_limit: float = math.inf,
    return_cost: bool = True,
) -> LapResult:
    """Solve a possibly rectangular assignment problem.

    With ``extend_cost`` or a finite ``cost_limit`` the matrix is padded so that
    rows and columns may stay unassigned; unassigned entries are ``-1``. A pair
    is only kept when its cost is below ``cost_limit``.
    """
    matrix = [[float(c) for c in row] for row in cost]
    n_rows = len(matrix)
    if n_rows == 0:
        raise ValueError("cost matrix is empty")
    n_cols = len(matrix[0])
    if any(len(row) != n_cols for row in matrix):
        raise ValueError("cost matrix rows differ in length")

    limited = cost_limit < math.inf
    if extend_cost or limited:
        n = n_rows + n_cols
        if limited:
            fill = cost_limit / 2.0
        else:
            fill = max((c for row in matrix for c in row), default=-1.0)
            fill = max(fill, -1.0) + 1
        extended = [[fill] * n for _ in range(n)]
        for i in range(n_rows, n):
            extended[i][n_cols:] = [0.0] * n_rows
        for i, row in enumerate(matrix):
            extended[i][:n_cols] = row
        matrix = extended
    elif n_rows == n_cols:
        n = n_rows
    else:
        raise ValueError("rectangular cost matrix needs extend_cost=True or a cost_limit")

    x, y = solve_dense(matrix)

    opt = 0.0
    if n != n_rows:
        rowsol = [j if j < n_cols else -1 for j in x[:n_rows]]
        colsol = [i if i < n_rows else -1 for i in y[:n_cols]]
        if return_cost:
            opt = sum(matrix[i][j] for i, j in enumerate(rowsol) if j != -1)
    else:
        rowsol = list(x)
        colsol = list(y)
        if return_cost:
            opt = sum(matrix[i][j] for i, j in enumerate(rowsol))
    return LapResult(opt, rowsol, colsol)