# fruitmachine/games/fruit/puzzle_store.py
from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, List, Optional
import json, random, logging

from flask import current_app

from .logic.models import Puzzle, puzzle_from_dict
from .logic.engine import count_solutions
from .logic.generator import generate_catalog, ACCESSIBLE_MAX

logger = logging.getLogger(__name__)

STORE_KEY = "fruit_store"
DEFAULT_CATALOG = Path(__file__).resolve().parent / "static" / "puzzles.json"


class FruitStore:
    """
    Encapsulated, reloadable puzzle catalog.
    Lives inside current_app.extensions['fruit_store'].
    Loads the JSON catalog; if that yields nothing, optionally generates one in memory.
    """
    def __init__(
        self,
        path: Optional[Path] = None,
        generate_fallback: bool = True,
        generate_count: int = 10,
        generate_seed: Optional[int] = None,
        accessible_max: int = ACCESSIBLE_MAX,
    ):
        self.path = Path(path) if path else DEFAULT_CATALOG
        self.generate_fallback = generate_fallback
        self.generate_count = generate_count
        self.generate_seed = generate_seed
        self.accessible_max = accessible_max
        self.puzzles: List[Puzzle] = []
        self.loaded_from = None   # 'json' or 'generated'

    # -------- public API --------
    def load(self, force: bool = False) -> None:
        if self.puzzles and not force:
            return
        puzzles = self._load_from_json()
        self.loaded_from = "json" if puzzles else None
        if not puzzles and self.generate_fallback:
            puzzles = self._generate()
            self.loaded_from = "generated"
        self.puzzles = puzzles
        logger.info("Fruit store loaded (%s): %d puzzles", self.loaded_from or "-", len(puzzles))

    def summary(self) -> List[Dict[str, Any]]:
        return [{"index": i, "id": p.id, "target": p.target} for i, p in enumerate(self.puzzles)]

    def verify(self) -> Dict[str, int]:
        """Exhaustive solution count per puzzle id (1 means unique)."""
        return {p.id: count_solutions(p)[0] for p in self.puzzles}

    # -------- internals --------
    def _load_from_json(self) -> List[Puzzle]:
        if not self.path.exists():
            logger.warning("puzzle catalog missing at %s", self.path)
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.exception("load %s failed", self.path)
            return []
        if isinstance(data, dict):
            for k in ("puzzles", "items", "data"):
                if k in data and isinstance(data[k], list):
                    data = data[k]; break
            else:
                data = []
        if not isinstance(data, list):
            return []

        out: List[Puzzle] = []
        for pos, row in enumerate(data):
            try:
                p = puzzle_from_dict(row)
            except (TypeError, ValueError) as e:
                logger.warning("skip puzzle #%d id=%s: %s", pos,
                               row.get("id") if isinstance(row, dict) else None, e)
                continue
            if not p.id:
                p = Puzzle(id=f"puzzle-{pos + 1:03d}", target=p.target, dials=p.dials, solutions=p.solutions)
            out.append(p)
        return out

    def _generate(self) -> List[Puzzle]:
        logger.warning("generating %d puzzles in memory (seed=%s)", self.generate_count, self.generate_seed)
        report = generate_catalog(
            self.generate_count,
            rng=random.Random(self.generate_seed),
            accessible_max=self.accessible_max,
        )
        return report.puzzles


def write_catalog(puzzles: List[Puzzle], path: Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps([p.to_dict() for p in puzzles], indent=2, ensure_ascii=False) + "\n",
                    encoding="utf-8")


# --------- accessors (store lives on current_app) ----------
def _store_from_config() -> FruitStore:
    cfg = current_app.config
    return FruitStore(
        path=cfg.get("FRUIT_CATALOG_PATH"),
        generate_fallback=bool(cfg.get("FRUIT_GENERATE_FALLBACK", True)),
        generate_count=int(cfg.get("FRUIT_GENERATE_COUNT", 10)),
        generate_seed=cfg.get("FRUIT_GENERATE_SEED"),
        accessible_max=int(cfg.get("FRUIT_ACCESSIBLE_MAX", ACCESSIBLE_MAX)),
    )


def get_store(load: bool = True) -> FruitStore:
    ext = current_app.extensions
    store: Optional[FruitStore] = ext.get(STORE_KEY)
    if store is None:
        store = _store_from_config()
        ext[STORE_KEY] = store
    if load:
        store.load(force=False)
    return store


def warmup_store(force: bool = False) -> FruitStore:
    store = get_store(load=False)
    store.load(force=force)
    return store
