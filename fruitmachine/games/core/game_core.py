# fruitmachine/games/core/game_core.py
from __future__ import annotations
from typing import Any, Callable, Dict, Optional, TypeVar
import uuid
import logging

logger = logging.getLogger(__name__)

T = TypeVar("T")

SESSION_COOKIE = "session_id"
CLIENT_HEADER = "X-Client-Session"
MAX_CLIENT_TAG = 64

# ============================================================
# Session & identity helpers
# ============================================================

def _client_tag(req) -> Optional[str]:
    """Per-tab tag: ?client_id=, then a JSON body's "client_id", then the X-Client-Session header."""
    tag = req.args.get("client_id")
    if not tag and req.is_json:
        body = req.get_json(silent=True)
        if isinstance(body, dict):
            tag = body.get("client_id")
    tag = tag or req.headers.get(CLIENT_HEADER)
    return str(tag)[:MAX_CLIENT_TAG] if tag else None


def get_or_create_session_id(req) -> str:
    """'<cookie>' or '<cookie>:<tab tag>'; a fresh uuid4 stands in for a missing cookie."""
    base = req.cookies.get(SESSION_COOKIE) or uuid.uuid4().hex
    tag = _client_tag(req)
    return f"{base}:{tag}" if tag else base


def base_session_id(sid: str) -> str:
    """Cookie part of a session key (drops any ':<client_id>' suffix)."""
    return sid.split(":", 1)[0]


# ============================================================
# Shared in-memory session store (per server process)
# ============================================================

SESSIONS: Dict[str, Any] = {}
"""
key: session_id (cookie + optional client_id) -> per-session game object.
Nothing outlives the process; "play again" starts over inside the same entry.
"""


def get_session(sid: str, factory: Callable[[], T]) -> T:
    sess = SESSIONS.get(sid)
    if sess is None:
        sess = factory()
        SESSIONS[sid] = sess
        logger.debug("new session %s (%d live)", sid, len(SESSIONS))
    return sess


def reset_sessions() -> None:
    SESSIONS.clear()
