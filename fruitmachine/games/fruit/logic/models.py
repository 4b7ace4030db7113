# fruitmachine/games/fruit/logic/models.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .evaluator import OPERATORS, MAX_TARGET, evaluate_expression

NUMERIC = "numeric"
OPERATOR = "operator"
DIAL_KINDS = (NUMERIC, OPERATOR, NUMERIC, OPERATOR, NUMERIC)
DIAL_COUNT = len(DIAL_KINDS)
NUMBER_DIAL_SIZE = 5
NUMBER_MIN, NUMBER_MAX = 1, 12

# older catalogs spelled the numeric kind "number"
_KIND_ALIASES = {"number": NUMERIC, "numeric": NUMERIC, "operator": OPERATOR}

UP, DOWN = "up", "down"
DIRECTIONS = (UP, DOWN)


class CatalogError(ValueError):
    """A puzzle record does not describe a valid five-dial puzzle."""


@dataclass(frozen=True)
class DialConfig:
    kind: str
    values: Tuple[Any, ...]

    @property
    def size(self) -> int:
        return len(self.values)


@dataclass(frozen=True)
class Puzzle:
    id: str
    target: int
    dials: Tuple[DialConfig, ...]
    solutions: Tuple[Tuple[int, ...], ...]

    @property
    def dial_sizes(self) -> List[int]:
        return [d.size for d in self.dials]

    def faces(self, indices) -> List[Any]:
        """Face values shown at the given per-dial indices."""
        return [self.dials[i].values[idx] for i, idx in enumerate(indices)]

    def evaluate(self, indices) -> Optional[int]:
        n1, op1, n2, op2, n3 = self.faces(indices)
        return evaluate_expression(n1, op1, n2, op2, n3)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "target": self.target,
            "dials": [{"kind": d.kind, "values": list(d.values)} for d in self.dials],
            "solutions": [list(s) for s in self.solutions],
        }


@dataclass
class DialState:
    index: int
    last_direction: Optional[str] = None


def number_dial(values) -> DialConfig:
    return DialConfig(kind=NUMERIC, values=tuple(int(v) for v in values))


def operator_dial() -> DialConfig:
    return DialConfig(kind=OPERATOR, values=OPERATORS)


def build_puzzle(puzzle_id: str, target: int, number_dials, solutions) -> Puzzle:
    """Assemble the alternating numeric/operator layout from three number dials."""
    d0, d2, d4 = number_dials
    return Puzzle(
        id=str(puzzle_id),
        target=int(target),
        dials=(number_dial(d0), operator_dial(), number_dial(d2), operator_dial(), number_dial(d4)),
        solutions=tuple(tuple(int(i) for i in s) for s in solutions),
    )


def _dial_from_dict(pos: int, raw: Dict[str, Any]) -> DialConfig:
    kind = _KIND_ALIASES.get(str(raw.get("kind") or raw.get("type") or "").strip().lower())
    if kind != DIAL_KINDS[pos]:
        raise CatalogError(f"dial {pos} must be {DIAL_KINDS[pos]}, got {raw.get('kind') or raw.get('type')!r}")
    values = list(raw.get("values") or [])
    if kind == OPERATOR:
        if tuple(values) != OPERATORS:
            raise CatalogError(f"dial {pos} operators must be {list(OPERATORS)}")
        return operator_dial()
    try:
        nums = [int(v) for v in values]
    except (TypeError, ValueError):
        raise CatalogError(f"dial {pos} has non-integer values: {values!r}")
    if len(nums) != NUMBER_DIAL_SIZE or len(set(nums)) != NUMBER_DIAL_SIZE:
        raise CatalogError(f"dial {pos} needs {NUMBER_DIAL_SIZE} distinct values, got {nums}")
    if any(n < NUMBER_MIN or n > NUMBER_MAX for n in nums):
        raise CatalogError(f"dial {pos} values must lie in {NUMBER_MIN}..{NUMBER_MAX}")
    return number_dial(nums)


def puzzle_from_dict(row: Dict[str, Any]) -> Puzzle:
    """
    Parse and validate one catalog record.
    Every listed solution must evaluate to the target; extra solutions the
    record does not list are the generator's concern, not the loader's.
    """
    if not isinstance(row, dict):
        raise CatalogError("puzzle record must be an object")
    dials_raw = row.get("dials") or []
    if len(dials_raw) != DIAL_COUNT:
        raise CatalogError(f"puzzle needs {DIAL_COUNT} dials, got {len(dials_raw)}")
    dials = tuple(_dial_from_dict(i, d or {}) for i, d in enumerate(dials_raw))

    try:
        target = int(row.get("target"))
    except (TypeError, ValueError):
        raise CatalogError(f"target must be an integer, got {row.get('target')!r}")
    if target <= 0 or target > MAX_TARGET:
        raise CatalogError(f"target {target} outside 1..{MAX_TARGET}")

    sols_raw = row.get("solutions") or row.get("solution") or []
    if sols_raw and not isinstance(sols_raw[0], (list, tuple)):
        sols_raw = [sols_raw]
    if not sols_raw:
        raise CatalogError("puzzle has no solutions")

    puzzle = Puzzle(id=str(row.get("id") or ""), target=target, dials=dials, solutions=())
    solutions = []
    for sol in sols_raw:
        idx = tuple(int(i) for i in sol)
        if len(idx) != DIAL_COUNT:
            raise CatalogError(f"solution {list(idx)} must have {DIAL_COUNT} indices")
        if any(i < 0 or i >= d.size for i, d in zip(idx, dials)):
            raise CatalogError(f"solution {list(idx)} indexes past a dial")
        if puzzle.evaluate(idx) != target:
            raise CatalogError(f"solution {list(idx)} does not evaluate to {target}")
        solutions.append(idx)

    return Puzzle(id=puzzle.id, target=target, dials=dials, solutions=tuple(solutions))
