# fruitmachine/games/fruit/routes.py
# JSON API the dial/lever UI drives. Every mutation answers with the full session snapshot.
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from flask import Blueprint, current_app, g, jsonify, request

from fruitmachine.games.core.game_core import SESSION_COOKIE, base_session_id, get_or_create_session_id, get_session
from .puzzle_store import get_store
from .logic.session import FruitSession
from .logic.models import DIRECTIONS
from .logic.payout import MODES

logger = logging.getLogger(__name__)
bp = Blueprint("fruit", __name__, url_prefix="/games/fruit")


# -----------------------------------------------------------------------------
# Small per-request helpers
# -----------------------------------------------------------------------------
def _sid() -> str:
    sid = getattr(g, "fruit_sid", None)
    if sid is None:
        sid = get_or_create_session_id(request)
        g.fruit_sid = sid
    return sid


def _new_session() -> FruitSession:
    cfg = current_app.config
    return FruitSession(
        get_store().puzzles,
        win_delay=float(cfg.get("FRUIT_WIN_DELAY_SECONDS", 3.0)),
        min_distance=int(cfg.get("FRUIT_MIN_SPIN_DISTANCE", 3)),
    )


def _session() -> FruitSession:
    sess = get_session(_sid(), _new_session)
    sess.tick()
    return sess


def _body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _ok(sess: FruitSession, **extra):
    payload = {"ok": True, "state": sess.snapshot()}
    payload.update(extra)
    return jsonify(payload)


def _bad(error: str, status: int = 400, **extra):
    payload = {"ok": False, "error": error}
    payload.update(extra)
    return jsonify(payload), status


def _int_field(data: Dict[str, Any], key: str) -> Optional[int]:
    try:
        return int(data.get(key))
    except (TypeError, ValueError):
        return None


@bp.before_request
def _require_puzzles():
    if not get_store().puzzles:
        logger.warning("fruit API called with an empty catalog")
        return _bad("no_puzzles", 503)
    return None


@bp.after_request
def _remember_session(resp):
    sid = getattr(g, "fruit_sid", None)
    if sid and not request.cookies.get(SESSION_COOKIE):
        resp.set_cookie(SESSION_COOKIE, base_session_id(sid), httponly=True, samesite="Lax")
    return resp


# -----------------------------------------------------------------------------
# Catalog / state
# -----------------------------------------------------------------------------
@bp.get("/api/puzzles")
def api_puzzles():
    store = get_store()
    return jsonify({"ok": True, "source": store.loaded_from, "puzzles": store.summary()})


@bp.get("/api/state")
def api_state():
    return _ok(_session())


# -----------------------------------------------------------------------------
# Navigation
# -----------------------------------------------------------------------------
@bp.post("/api/select")
def api_select():
    idx = _int_field(_body(), "index")
    sess = _session()
    if idx is None or not (0 <= idx < len(sess.puzzles)):
        return _bad("bad_index", total_puzzles=len(sess.puzzles))
    sess.select_puzzle(idx)
    return _ok(sess)


@bp.post("/api/next")
def api_next():
    sess = _session()
    sess.next_puzzle()
    return _ok(sess)


@bp.post("/api/prev")
def api_prev():
    sess = _session()
    sess.prev_puzzle()
    return _ok(sess)


@bp.post("/api/reset")
def api_reset():
    sess = _session()
    sess.reset_puzzle()
    return _ok(sess)


@bp.post("/api/play-again")
def api_play_again():
    sess = _session()
    sess.play_again()
    return _ok(sess)


# -----------------------------------------------------------------------------
# Play
# -----------------------------------------------------------------------------
@bp.post("/api/spin")
def api_spin():
    sess = _session()
    applied = sess.spin()
    logger.debug("spin sid=%s applied=%s phase=%s", _sid(), applied, sess.phase)
    return _ok(sess, applied=applied)


@bp.post("/api/spin/complete")
def api_spin_complete():
    sess = _session()
    applied = sess.spin_complete()
    return _ok(sess, applied=applied)


@bp.post("/api/nudge")
def api_nudge():
    data = _body()
    dial = _int_field(data, "dial")
    direction = str(data.get("direction") or "").strip().lower()
    if dial is None or not (0 <= dial < 5):
        return _bad("bad_dial")
    if direction not in DIRECTIONS:
        return _bad("bad_direction")
    sess = _session()
    # stray input during an animation is ignored, not an error
    applied = sess.nudge(dial, direction)
    return _ok(sess, applied=applied)


@bp.post("/api/mode")
def api_mode():
    mode = str(_body().get("mode") or "").strip().lower()
    if mode not in MODES:
        return _bad("bad_mode", modes=list(MODES))
    sess = _session()
    sess.set_mode(mode)
    return _ok(sess)
