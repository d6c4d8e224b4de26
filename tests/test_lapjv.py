import itertools
import random

import pytest

from sitewatch.lapjv import lapjv, solve_dense


def _best_cost(cost):
    n = len(cost)
    return min(sum(cost[i][p[i]] for i in range(n)) for p in itertools.permutations(range(n)))


def _random_matrix(rng, n, integers=False):
    if integers:
        return [[rng.randint(0, 4) for _ in range(n)] for _ in range(n)]
    return [[rng.random() for _ in range(n)] for _ in range(n)]


@pytest.mark.parametrize("seed", range(20))
@pytest.mark.parametrize("integers", [False, True])
def test_solve_dense_is_optimal_permutation(seed, integers):
    rng = random.Random(seed)
    n = rng.randint(1, 6)
    cost = _random_matrix(rng, n, integers)
    x, y = solve_dense(cost)
    assert sorted(x) == list(range(n))
    assert all(x[y[j]] == j for j in range(n))
    assert sum(cost[i][x[i]] for i in range(n)) == pytest.approx(_best_cost(cost))


def test_solve_dense_identity_preference():
    cost = [[0, 5, 5], [5, 0, 5], [5, 5, 0]]
    x, y = solve_dense(cost)
    assert x == [0, 1, 2]
    assert y == [0, 1, 2]


def test_solve_dense_rejects_non_square():
    with pytest.raises(ValueError):
        solve_dense([[1, 2, 3], [4, 5, 6]])


def test_solve_dense_empty():
    assert solve_dense([]) == ([], [])


def test_lapjv_square_reports_cost():
    cost = [[4.0, 1.0], [2.0, 8.0]]
    result = lapjv(cost)
    assert result.rowsol == [1, 0]
    assert result.colsol == [1, 0]
    assert result.cost == pytest.approx(3.0)


def test_lapjv_cost_limit_leaves_expensive_pairs_unmatched():
    cost = [[0.1, 0.9], [0.9, 0.95]]
    result = lapjv(cost, extend_cost=True, cost_limit=0.8)
    assert result.rowsol == [0, -1]
    assert result.colsol == [0, -1]
    assert result.cost == pytest.approx(0.1)


def test_lapjv_rectangular_extended():
    cost = [[0.2, 0.7, 0.3], [0.6, 0.1, 0.9]]
    result = lapjv(cost, extend_cost=True)
    assert result.rowsol == [0, 1]
    assert result.colsol == [0, 1, -1]


@pytest.mark.parametrize("seed", range(10))
def test_lapjv_rectangular_solutions_are_consistent(seed):
    rng = random.Random(seed)
    rows, cols = rng.randint(1, 4), rng.randint(1, 4)
    cost = [[rng.random() for _ in range(cols)] for _ in range(rows)]
    result = lapjv(cost, extend_cost=True, cost_limit=0.7)
    assert len(result.rowsol) == rows
    assert len(result.colsol) == cols
    for i, j in enumerate(result.rowsol):
        if j >= 0:
            assert result.colsol[j] == i
            assert cost[i][j] < 0.7
    for j, i in enumerate(result.colsol):
        if i >= 0:
            assert result.rowsol[i] == j


def test_lapjv_return_cost_false():
    result = lapjv([[4.0, 1.0], [2.0, 8.0]], return_cost=False)
    assert result.cost == 0.0
    assert result.rowsol == [1, 0]


def test_lapjv_rectangular_without_extension_raises():
    with pytest.raises(ValueError):
        lapjv([[1.0, 2.0, 3.0]])


def test_lapjv_empty_raises():
    with pytest.raises(ValueError):
        lapjv([])