# fruitmachine/games/fruit/logic/__init__.py
from .evaluator import (
    OPERATORS,
    evaluate_expression,
    evaluate_for_display,
    format_expression,
    format_result,
)
from .models import CatalogError, DialConfig, DialState, Puzzle, build_puzzle, puzzle_from_dict
from .engine import (
    SpinStopExhausted,
    circular_distance,
    config_distance,
    count_solutions,
    find_valid_spin_stop,
    min_distance_to_any_solution,
)
from .payout import calculate_payout
from .generator import GenerationError, generate_catalog, verify_catalog
from .session import FruitSession

__all__ = [
    "OPERATORS", "evaluate_expression", "evaluate_for_display", "format_expression", "format_result",
    "CatalogError", "DialConfig", "DialState", "Puzzle", "build_puzzle", "puzzle_from_dict",
    "SpinStopExhausted", "circular_distance", "config_distance", "count_solutions",
    "find_valid_spin_stop", "min_distance_to_any_solution",
    "calculate_payout",
    "GenerationError", "generate_catalog", "verify_catalog",
    "FruitSession",
]
