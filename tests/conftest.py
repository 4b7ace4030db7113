import json
import random

import pytest

from fruitmachine import create_app
from fruitmachine.games.core.game_core import reset_sessions
from fruitmachine.games.fruit.puzzle_store import DEFAULT_CATALOG
from fruitmachine.games.fruit.logic.models import build_puzzle, puzzle_from_dict
from fruitmachine.games.fruit.logic.session import FruitSession

# 9 + 12 × 7 = 93 is the only way to make 93 with these dials
SCENARIO_DIALS = ([3, 7, 11, 5, 9], [4, 8, 2, 12, 6], [1, 10, 6, 3, 7])
SCENARIO_TARGET = 93
SCENARIO_SOLUTION = [4, 0, 3, 2, 4]


class FakeClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def shortest_path(start, goal, sizes):
    """Nudges (dial, direction) that walk `start` onto `goal` the short way round each dial."""
    moves = []
    for i, (s, g, n) in enumerate(zip(start, goal, sizes)):
        fwd = (g - s) % n
        if fwd <= n - fwd:
            moves += [(i, "down")] * fwd
        else:
            moves += [(i, "up")] * (n - fwd)
    return moves


@pytest.fixture(scope="session")
def catalog():
    rows = json.loads(DEFAULT_CATALOG.read_text(encoding="utf-8"))
    return [puzzle_from_dict(r) for r in rows]


@pytest.fixture
def scenario_puzzle():
    return build_puzzle("scenario", SCENARIO_TARGET, SCENARIO_DIALS, [SCENARIO_SOLUTION])


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def session(catalog, clock):
    return FruitSession(catalog[:3], clock=clock, rng=random.Random(1234))


def solve(sess):
    """Spin, land, and nudge straight to the solution."""
    sess.spin()
    sess.spin_complete()
    for dial, direction in shortest_path(sess.indices, sess.puzzle.solutions[0], sess.puzzle.dial_sizes):
        assert sess.nudge(dial, direction)
    return sess


@pytest.fixture
def app():
    reset_sessions()
    app = create_app({
        "TESTING": True,
        "RATELIMIT_ENABLED": False,
        "FRUIT_WIN_DELAY_SECONDS": 0.0,
    })
    yield app
    reset_sessions()


@pytest.fixture
def client(app):
    return app.test_client()
