# fruitmachine/games/fruit/logic/engine.py
"""
Dial-space geometry for the fruit machine.

Each dial is a ring of faces, so positions are compared with circular
distance; a configuration's distance to a solution is the sum over the five
dials, which is exactly the fewest nudges needed to reach it.

The spin-stop selector picks start positions that
  - sit at least `min_distance` nudges from every solution,
  - do not already show the target,
  - do not show the target in any preview row (all dials shifted by
    -2, -1, +1 or +2 at once, as the faded rows above/below the pay line).
"""
from __future__ import annotations
import itertools
import logging
import random
from typing import Iterable, List, Optional, Sequence, Tuple

from .models import Puzzle, OPERATOR

logger = logging.getLogger(__name__)

DEFAULT_MIN_DISTANCE = 3
SPIN_ATTEMPTS = 500
PREVIEW_OFFSETS = (-2, -1, 1, 2)


class SpinStopExhausted(RuntimeError):
    """No configuration in the whole dial space satisfies the spin-stop rules."""


# ============================================================
# Distance metric
# ============================================================

def circular_distance(a: int, b: int, size: int) -> int:
    diff = abs(a - b)
    return min(diff, size - diff)


def config_distance(config: Sequence[int], solution: Sequence[int], sizes: Sequence[int]) -> int:
    return sum(circular_distance(c, s, n) for c, s, n in zip(config, solution, sizes))


def min_distance_to_any_solution(
    config: Sequence[int],
    solutions: Iterable[Sequence[int]],
    sizes: Sequence[int],
) -> int:
    return min(config_distance(config, sol, sizes) for sol in solutions)


def shift_config(config: Sequence[int], offset: int, sizes: Sequence[int]) -> List[int]:
    """Move every dial by `offset` positions, wrapping on each ring."""
    return [(idx + offset) % n for idx, n in zip(config, sizes)]


# ============================================================
# Spin-stop selection
# ============================================================

def preview_rows_are_safe(puzzle: Puzzle, candidate: Sequence[int], sizes: Optional[Sequence[int]] = None) -> bool:
    sizes = sizes or puzzle.dial_sizes
    for offset in PREVIEW_OFFSETS:
        if puzzle.evaluate(shift_config(candidate, offset, sizes)) == puzzle.target:
            return False
    return True


def is_valid_spin_stop(
    puzzle: Puzzle,
    candidate: Sequence[int],
    min_distance: int = DEFAULT_MIN_DISTANCE,
    sizes: Optional[Sequence[int]] = None,
) -> bool:
    sizes = sizes or puzzle.dial_sizes
    if min_distance_to_any_solution(candidate, puzzle.solutions, sizes) < min_distance:
        return False
    if puzzle.evaluate(candidate) == puzzle.target:
        return False
    return preview_rows_are_safe(puzzle, candidate, sizes)


def find_valid_spin_stop(
    puzzle: Puzzle,
    min_distance: int = DEFAULT_MIN_DISTANCE,
    attempts: int = SPIN_ATTEMPTS,
    rng: Optional[random.Random] = None,
) -> List[int]:
    """Random sampling first; falls back to a full sweep when sampling keeps missing."""
    rng = rng or random
    sizes = puzzle.dial_sizes
    for _ in range(attempts):
        candidate = [rng.randrange(n) for n in sizes]
        if is_valid_spin_stop(puzzle, candidate, min_distance, sizes):
            return candidate

    logger.info("spin-stop sampling missed %d times for %s; sweeping", attempts, puzzle.id)
    return _find_spin_stop_exhaustive(puzzle, min_distance)


def _find_spin_stop_exhaustive(puzzle: Puzzle, min_distance: int) -> List[int]:
    sizes = puzzle.dial_sizes
    # product() walks the space like an odometer: last dial turns fastest
    for candidate in itertools.product(*(range(n) for n in sizes)):
        if is_valid_spin_stop(puzzle, candidate, min_distance, sizes):
            return list(candidate)
    logger.error("no valid spin stop for %s (target=%s, min_distance=%d)",
                 puzzle.id, puzzle.target, min_distance)
    raise SpinStopExhausted(f"No valid spin stop position found for {puzzle.id}")


# ============================================================
# Verification / assists
# ============================================================

def count_solutions(puzzle: Puzzle) -> Tuple[int, List[List[int]]]:
    """Exhaustively count every dial combination that evaluates to the target."""
    solutions = [
        list(combo)
        for combo in itertools.product(*(range(n) for n in puzzle.dial_sizes))
        if puzzle.evaluate(combo) == puzzle.target
    ]
    return len(solutions), solutions


def locked_dials(puzzle: Puzzle, config: Sequence[int], mode: str) -> List[bool]:
    """
    Assist locks for the easier modes:
      hard   -> nothing locks
      medium -> operator dials lock once they sit on the solution
      easy   -> any dial locks once it sits on the solution
    """
    if mode not in ("easy", "medium"):
        return [False] * len(config)
    solution = puzzle.solutions[0]
    out = []
    for i, (idx, dial) in enumerate(zip(config, puzzle.dials)):
        if mode == "medium" and dial.kind != OPERATOR:
            out.append(False)
        else:
            out.append(idx == solution[i])
    return out
