# fruitmachine/games/fruit/logic/session.py
from __future__ import annotations
import logging
import random
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

from .models import Puzzle, DialState, UP, DOWN
from .evaluator import evaluate_for_display, format_expression, format_result
from .engine import (
    find_valid_spin_stop,
    min_distance_to_any_solution,
    locked_dials,
    DEFAULT_MIN_DISTANCE,
)
from .payout import calculate_payout, mode_reduction, normalize_mode, DEFAULT_MODE

logger = logging.getLogger(__name__)

Phase = str  # 'ready'|'spinning'|'playing'|'won'
READY, SPINNING, PLAYING, WON = "ready", "spinning", "playing", "won"

WIN_DELAY_SECONDS = 3.0
PREVIEW_SPAN = (-2, -1, 0, 1, 2)


@dataclass
class WinTimer:
    """Single-shot deferred win; cancelling clears the deadline."""
    due_at: Optional[float] = None

    @property
    def pending(self) -> bool:
        return self.due_at is not None

    def start(self, now: float, delay: float) -> None:
        self.due_at = now + delay

    def cancel(self) -> None:
        self.due_at = None

    def is_due(self, now: float) -> bool:
        return self.due_at is not None and now >= self.due_at


class FruitSession:
    """
    One player's run through the puzzle catalog.

    Phases: ready -> spinning -> playing -> won. The UI drives `spin()`,
    `spin_complete()` (after its own animation) and `nudge()`; calls made in
    the wrong phase are ignored. A match detected while playing banks the
    payout at once and turns into `won` after `win_delay` seconds, on the
    first `tick()` past the deadline, unless the match was undone first.
    """

    def __init__(
        self,
        puzzles: Sequence[Puzzle],
        *,
        win_delay: float = WIN_DELAY_SECONDS,
        min_distance: int = DEFAULT_MIN_DISTANCE,
        clock: Callable[[], float] = time.time,
        rng: Optional[random.Random] = None,
    ):
        if not puzzles:
            raise ValueError("FruitSession needs at least one puzzle")
        self.puzzles = list(puzzles)
        self.win_delay = float(win_delay)
        self.min_distance = int(min_distance)
        self.clock = clock
        self.rng = rng or random.Random()

        self.mode: str = DEFAULT_MODE
        self.total_coins = 0
        self.payouts: Dict[int, int] = {}  # puzzle index -> coins banked for it

        self.puzzle_index = 0
        self.phase: Phase = READY
        self.dials: List[DialState] = []
        self.move_count = 0
        self.nudge_count = 0
        self.min_moves = 0
        self.spin_stop: List[int] = [0] * 5
        self.reduction = 0
        self._has_spun = False
        self._was_correct = False
        self.win_timer = WinTimer()
        self.select_puzzle(0)

    # ---- derived state ----
    @property
    def puzzle(self) -> Puzzle:
        return self.puzzles[self.puzzle_index]

    @property
    def indices(self) -> List[int]:
        return [d.index for d in self.dials]

    @property
    def current_result(self):
        """Live calculation; None outside playing/won or on division by zero."""
        if self.phase not in (PLAYING, WON):
            return None
        n1, op1, n2, op2, n3 = self.puzzle.faces(self.indices)
        return evaluate_for_display(n1, op1, n2, op2, n3)

    @property
    def is_correct(self) -> bool:
        return self.current_result == self.puzzle.target

    @property
    def banked(self) -> int:
        return self.payouts.get(self.puzzle_index, 0)

    @property
    def potential_coins(self) -> int:
        if self.phase != PLAYING or self.is_correct:
            return 0
        return calculate_payout(self.move_count + 1, self.min_moves, self.reduction)

    @property
    def show_hint(self) -> bool:
        """Show 'solvable in N' until the player nudges after a spin."""
        return self.nudge_count == 0

    @property
    def all_solved(self) -> bool:
        return len(self.payouts) >= len(self.puzzles)

    def locked(self) -> List[bool]:
        if self.phase != PLAYING:
            return [False] * len(self.dials)
        return locked_dials(self.puzzle, self.indices, self.mode)

    # ---- lifecycle ----
    def select_puzzle(self, index: int) -> None:
        if index < 0 or index >= len(self.puzzles):
            logger.debug("select_puzzle ignored: index=%s of %d", index, len(self.puzzles))
            return
        self.win_timer.cancel()
        self.puzzle_index = index
        self.phase = READY
        self.move_count = 0
        self.nudge_count = 0
        self.min_moves = 0
        self._has_spun = False
        self._was_correct = False
        rest = find_valid_spin_stop(self.puzzle, self.min_distance, rng=self.rng)
        self.dials = [DialState(index=i) for i in rest]

    def next_puzzle(self) -> None:
        self.select_puzzle((self.puzzle_index + 1) % len(self.puzzles))

    def prev_puzzle(self) -> None:
        self.select_puzzle((self.puzzle_index - 1) % len(self.puzzles))

    def reset_puzzle(self) -> None:
        self.select_puzzle(self.puzzle_index)

    def play_again(self) -> None:
        self.total_coins = 0
        self.payouts.clear()
        self.reduction = 0
        self.select_puzzle(0)

    def set_mode(self, mode: Optional[str]) -> None:
        self.mode = normalize_mode(mode)
        if self.phase in (SPINNING, PLAYING):
            # easier assists used mid-attempt stick until the next spin
            self.reduction = max(self.reduction, mode_reduction(self.mode))

    # ---- actions ----
    def spin(self) -> bool:
        if self.phase not in (READY, PLAYING, WON):
            return False
        self.win_timer.cancel()
        stop = find_valid_spin_stop(self.puzzle, self.min_distance, rng=self.rng)
        self.spin_stop = stop
        self.min_moves = min_distance_to_any_solution(stop, self.puzzle.solutions, self.puzzle.dial_sizes)
        if self._has_spun:
            self.move_count += 1  # re-spin costs a move
        self._has_spun = True
        self._reverse_payout()
        self.reduction = mode_reduction(self.mode)
        self._was_correct = False
        self.phase = SPINNING
        logger.debug("spin %s stop=%s min_moves=%d", self.puzzle.id, stop, self.min_moves)
        return True

    def spin_complete(self) -> bool:
        if self.phase != SPINNING:
            return False
        self.dials = [DialState(index=i) for i in self.spin_stop]
        self.reduction = max(self.reduction, mode_reduction(self.mode))
        self.phase = PLAYING
        self._after_dial_change()
        return True

    def nudge(self, dial_index: int, direction: str) -> bool:
        if self.phase != PLAYING:
            return False
        if dial_index < 0 or dial_index >= len(self.dials) or direction not in (UP, DOWN):
            return False
        if self.locked()[dial_index]:
            return False
        size = self.puzzle.dials[dial_index].size
        state = self.dials[dial_index]
        step = -1 if direction == UP else 1
        self.dials[dial_index] = DialState(index=(state.index + step) % size, last_direction=direction)
        self.move_count += 1
        self.nudge_count += 1
        self._after_dial_change()
        return True

    def tick(self) -> Phase:
        """Apply the deferred win if its deadline has passed and the match still holds."""
        if self.win_timer.is_due(self.clock()):
            self.win_timer.cancel()
            if self.phase == PLAYING and self.is_correct:
                self.phase = WON
                logger.info("won %s in %d moves (par %d), banked=%d",
                            self.puzzle.id, self.move_count, self.min_moves, self.banked)
        return self.phase

    def current_phase(self) -> Phase:
        return self.tick()

    # ---- internals ----
    def _after_dial_change(self) -> None:
        correct = self.is_correct
        if correct and not self._was_correct:
            self._award_payout()
            self.win_timer.start(self.clock(), self.win_delay)
        elif not correct and self._was_correct:
            self.win_timer.cancel()
            self._reverse_payout()
        self._was_correct = correct

    def _award_payout(self) -> None:
        coins = calculate_payout(self.move_count, self.min_moves, self.reduction)
        self.total_coins += coins
        self.payouts[self.puzzle_index] = coins

    def _reverse_payout(self) -> None:
        prev = self.payouts.pop(self.puzzle_index, 0)
        if prev:
            self.total_coins = max(0, self.total_coins - prev)

    # ---- readout ----
    def snapshot(self) -> Dict[str, Any]:
        phase = self.tick()
        puzzle = self.puzzle
        sizes = puzzle.dial_sizes
        locks = self.locked()
        dials = []
        for i, (cfg, state) in enumerate(zip(puzzle.dials, self.dials)):
            preview = [cfg.values[(state.index + off) % sizes[i]] for off in PREVIEW_SPAN]
            dials.append({
                "kind": cfg.kind,
                "values": list(cfg.values),
                "index": state.index,
                "face": cfg.values[state.index],
                "preview": preview,
                "locked": locks[i],
                "last_direction": state.last_direction,
            })
        n1, op1, n2, op2, n3 = puzzle.faces(self.indices)
        return {
            "phase": phase,
            "mode": self.mode,
            "puzzle_id": puzzle.id,
            "puzzle_index": self.puzzle_index,
            "total_puzzles": len(self.puzzles),
            "target": puzzle.target,
            "dials": dials,
            "expression": format_expression(n1, op1, n2, op2, n3),
            "result": format_result(self.current_result),
            "is_correct": self.is_correct,
            "show_hint": self.show_hint,
            "min_moves": self.min_moves,
            "move_count": self.move_count,
            "nudge_count": self.nudge_count,
            "total_coins": self.total_coins,
            "banked": self.banked,
            "potential_coins": self.potential_coins,
            "all_solved": self.all_solved,
            "win_pending": self.win_timer.pending,
        }
