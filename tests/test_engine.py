import itertools
import random

import pytest

from fruitmachine.games.fruit.logic.engine import (
    SpinStopExhausted,
    circular_distance,
    config_distance,
    count_solutions,
    find_valid_spin_stop,
    is_valid_spin_stop,
    locked_dials,
    min_distance_to_any_solution,
    preview_rows_are_safe,
    shift_config,
)
from fruitmachine.games.fruit.logic.models import build_puzzle

from conftest import SCENARIO_DIALS, SCENARIO_SOLUTION

SIZES = [5, 4, 5, 4, 5]


def test_circular_distance_properties():
    for n in (4, 5):
        for a, b in itertools.product(range(n), repeat=2):
            d = circular_distance(a, b, n)
            assert d == circular_distance(b, a, n)
            assert (d == 0) == (a == b)
            assert d <= n // 2


def test_circular_distance_wraps():
    assert circular_distance(0, 4, 5) == 1
    assert circular_distance(0, 3, 4) == 1
    assert circular_distance(1, 3, 4) == 2


def test_config_distance_sums_dials():
    assert config_distance([0, 0, 0, 0, 0], [4, 2, 1, 3, 2], SIZES) == 1 + 2 + 1 + 1 + 2
    assert config_distance(SCENARIO_SOLUTION, SCENARIO_SOLUTION, SIZES) == 0


def test_min_distance_picks_closest_solution():
    sols = [[0, 0, 0, 0, 0], [2, 2, 2, 2, 2]]
    assert min_distance_to_any_solution([2, 2, 2, 2, 1], sols, SIZES) == 1


def test_shift_config_wraps_each_ring():
    assert shift_config([4, 3, 0, 0, 1], 1, SIZES) == [0, 0, 1, 1, 2]
    assert shift_config([0, 0, 0, 0, 0], -2, SIZES) == [3, 2, 3, 2, 3]


def test_scenario_target_is_unique(scenario_puzzle):
    count, sols = count_solutions(scenario_puzzle)
    assert count == 1
    assert sols == [SCENARIO_SOLUTION]
    assert scenario_puzzle.faces(SCENARIO_SOLUTION) == [9, "+", 12, "*", 7]


def test_seventeen_is_reachable_many_ways():
    # 9 × 2 - 1 is one of them
    puzzle = build_puzzle("seventeen", 17, SCENARIO_DIALS, [[4, 2, 2, 1, 0]])
    count, sols = count_solutions(puzzle)
    assert count == 25
    assert [4, 2, 2, 1, 0] in sols


def test_shipped_catalog_is_unique(catalog):
    assert len(catalog) == 10
    for puzzle in catalog:
        count, sols = count_solutions(puzzle)
        assert count == 1, puzzle.id
        assert sols == [list(puzzle.solutions[0])]


def test_spin_stops_respect_every_rule(catalog):
    rng = random.Random(42)
    for puzzle in catalog:
        sizes = puzzle.dial_sizes
        for _ in range(15):
            stop = find_valid_spin_stop(puzzle, rng=rng)
            assert len(stop) == 5
            assert all(0 <= i < n for i, n in zip(stop, sizes))
            assert min_distance_to_any_solution(stop, puzzle.solutions, sizes) >= 3
            assert puzzle.evaluate(stop) != puzzle.target
            for offset in (-2, -1, 1, 2):
                assert puzzle.evaluate(shift_config(stop, offset, sizes)) != puzzle.target


def test_preview_row_showing_target_is_rejected(scenario_puzzle):
    # one row above the solution: shifting down by one lands on it
    candidate = shift_config(SCENARIO_SOLUTION, -1, SIZES)
    assert not preview_rows_are_safe(scenario_puzzle, candidate)
    assert not is_valid_spin_stop(scenario_puzzle, candidate, min_distance=0)


def test_distance_rule_is_configurable(scenario_puzzle):
    far = find_valid_spin_stop(scenario_puzzle, min_distance=8, rng=random.Random(3))
    assert config_distance(far, SCENARIO_SOLUTION, SIZES) >= 8


def test_exhaustive_sweep_when_sampling_is_skipped(scenario_puzzle):
    first = find_valid_spin_stop(scenario_puzzle, attempts=0)
    assert is_valid_spin_stop(scenario_puzzle, first)
    assert find_valid_spin_stop(scenario_puzzle, attempts=0) == first
    # sweep order is lexicographic, so nothing earlier qualifies
    for combo in itertools.product(*(range(n) for n in SIZES)):
        if list(combo) == first:
            break
        assert not is_valid_spin_stop(scenario_puzzle, combo)


def test_exhausted_dial_space_raises(scenario_puzzle):
    # the farthest any configuration can be is 2 + 2 + 2 + 2 + 2
    with pytest.raises(SpinStopExhausted):
        find_valid_spin_stop(scenario_puzzle, min_distance=11, attempts=10, rng=random.Random(0))


def test_locked_dials_per_mode(catalog):
    puzzle = catalog[0]
    solution = list(puzzle.solutions[0])
    config = [solution[0], solution[1], (solution[2] + 1) % 5, (solution[3] + 1) % 4, solution[4]]
    assert locked_dials(puzzle, config, "hard") == [False] * 5
    assert locked_dials(puzzle, config, "medium") == [False, True, False, False, False]
    assert locked_dials(puzzle, config, "easy") == [True, True, False, False, True]
