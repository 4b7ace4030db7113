# fruitmachine/games/fruit/logic/generator.py
"""
Offline puzzle generator.

Draw three number dials, enumerate all 5x4x5x4x5 = 2000 dial combinations,
and keep targets that exactly one combination produces. Each accepted puzzle
is re-counted exhaustively before the catalog is handed back.
"""
from __future__ import annotations
import itertools
import logging
import random
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from .evaluator import OPERATORS, evaluate_expression, format_expression
from .models import Puzzle, build_puzzle, NUMBER_DIAL_SIZE, NUMBER_MIN, NUMBER_MAX
from .engine import config_distance, count_solutions, DEFAULT_MIN_DISTANCE

logger = logging.getLogger(__name__)

ACCESSIBLE_MAX = 200
SPREAD_ATTEMPTS = 200
MAX_DRAWS = 10000

NumberDials = Tuple[List[int], List[int], List[int]]


class GenerationError(RuntimeError):
    """An accepted puzzle failed the exhaustive uniqueness recount."""


@dataclass(frozen=True)
class Candidate:
    target: int
    number_dials: NumberDials
    solution: Tuple[int, ...]
    expression: str


@dataclass
class GenerationReport:
    puzzles: List[Puzzle] = field(default_factory=list)
    requested: int = 0
    draws: int = 0

    @property
    def shortfall(self) -> int:
        return max(0, self.requested - len(self.puzzles))


def random_number_dial(rng=None) -> List[int]:
    rng = rng or random
    return rng.sample(range(NUMBER_MIN, NUMBER_MAX + 1), NUMBER_DIAL_SIZE)


def find_unique_targets(number_dials: NumberDials) -> List[Candidate]:
    """Every target produced by exactly one combination of these dials, in discovery order."""
    d0, d2, d4 = number_dials
    buckets: Dict[int, List[Tuple[int, ...]]] = defaultdict(list)
    for i0, i1, i2, i3, i4 in itertools.product(
        range(len(d0)), range(len(OPERATORS)), range(len(d2)), range(len(OPERATORS)), range(len(d4))
    ):
        result = evaluate_expression(d0[i0], OPERATORS[i1], d2[i2], OPERATORS[i3], d4[i4])
        if result is not None:
            buckets[result].append((i0, i1, i2, i3, i4))

    out: List[Candidate] = []
    for target, combos in buckets.items():
        if len(combos) != 1:
            continue
        i0, i1, i2, i3, i4 = combos[0]
        expr = format_expression(d0[i0], OPERATORS[i1], d2[i2], OPERATORS[i3], d4[i4])
        out.append(Candidate(target=target, number_dials=number_dials, solution=combos[0], expression=expr))
    return out


def has_spread(
    solution: Sequence[int],
    sizes: Sequence[int],
    min_distance: int = DEFAULT_MIN_DISTANCE,
    attempts: int = SPREAD_ATTEMPTS,
    rng=None,
) -> bool:
    """True when random sampling finds a configuration far enough from the solution to spin to."""
    rng = rng or random
    for _ in range(attempts):
        candidate = [rng.randrange(n) for n in sizes]
        if config_distance(candidate, solution, sizes) >= min_distance:
            return True
    return False


def generate_catalog(
    count: int,
    rng: Optional[random.Random] = None,
    accessible_max: int = ACCESSIBLE_MAX,
    min_distance: int = DEFAULT_MIN_DISTANCE,
    max_draws: int = MAX_DRAWS,
) -> GenerationReport:
    """
    Draw dial sets until `count` puzzles are accepted or `max_draws` is spent.
    At most one puzzle per draw and no repeated targets across the catalog.
    """
    rng = rng or random.Random()
    report = GenerationReport(requested=count)
    used_targets = set()

    while len(report.puzzles) < count and report.draws < max_draws:
        report.draws += 1
        dials: NumberDials = (random_number_dial(rng), random_number_dial(rng), random_number_dial(rng))
        sizes = [len(dials[0]), len(OPERATORS), len(dials[1]), len(OPERATORS), len(dials[2])]

        # stable sort keeps discovery order within each group
        candidates = sorted(find_unique_targets(dials), key=lambda c: c.target > accessible_max)
        for cand in candidates:
            if cand.target in used_targets:
                continue
            if not has_spread(cand.solution, sizes, min_distance, rng=rng):
                continue
            puzzle = build_puzzle(
                f"puzzle-{len(report.puzzles) + 1:03d}", cand.target, dials, [cand.solution]
            )
            report.puzzles.append(puzzle)
            used_targets.add(cand.target)
            logger.info("%s: target=%d dials=%s/%s/%s solution=%s -> %s",
                        puzzle.id, cand.target, dials[0], dials[1], dials[2],
                        list(cand.solution), cand.expression)
            break

    if report.shortfall:
        logger.error("Only generated %d/%d puzzles after %d draws.",
                     len(report.puzzles), count, report.draws)
    verify_catalog(report.puzzles)
    return report


def verify_catalog(puzzles: Sequence[Puzzle]) -> None:
    """Recount every puzzle over the full dial space; anything but exactly one solution is fatal."""
    for puzzle in puzzles:
        found, solutions = count_solutions(puzzle)
        if found != 1 or [list(s) for s in puzzle.solutions] != solutions:
            logger.error("%s: target=%d solutions found=%d %s",
                         puzzle.id, puzzle.target, found, solutions[:5])
            raise GenerationError(f"{puzzle.id}: expected exactly 1 solution, found {found}")
        logger.debug("%s: target=%d verified", puzzle.id, puzzle.target)
