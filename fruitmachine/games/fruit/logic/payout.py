# fruitmachine/games/fruit/logic/payout.py
from __future__ import annotations
from typing import Optional

# (max moves over par, coins); anything beyond the last row pays MIN_PAYOUT
PAYOUT_TIERS = (
    (0, 5),
    (2, 4),
    (5, 3),
    (9, 2),
)
MIN_PAYOUT = 1
MAX_PAYOUT = PAYOUT_TIERS[0][1]

MODES = ("easy", "medium", "hard")
DEFAULT_MODE = "hard"
MODE_REDUCTION = {"hard": 0, "medium": 1, "easy": 2}


def normalize_mode(mode: Optional[str]) -> str:
    """Normalizes UI difficulty -> canonical mode; unknown values fall back to hard."""
    mode = (mode or "").strip().lower()
    return mode if mode in MODES else DEFAULT_MODE


def mode_reduction(mode: Optional[str]) -> int:
    return MODE_REDUCTION[normalize_mode(mode)]


def calculate_payout(move_count: int, min_moves: int, reduction: int = 0) -> int:
    """
    Coins for solving in `move_count` moves when par was `min_moves`.
    Tiers: par = 5, +1-2 = 4, +3-5 = 3, +6-9 = 2, +10 or more = 1;
    `reduction` comes off every tier, never below 1.
    """
    extra = int(move_count) - int(min_moves)
    base = MIN_PAYOUT
    for limit, coins in PAYOUT_TIERS:
        if extra <= limit:
            base = coins
            break
    return max(MIN_PAYOUT, base - int(reduction))
