import json

from fruitmachine import create_app
from fruitmachine.games.fruit.puzzle_store import DEFAULT_CATALOG, get_store

from conftest import shortest_path

API = "/games/fruit/api"


def _state(resp):
    assert resp.status_code == 200, resp.get_json()
    body = resp.get_json()
    assert body["ok"] is True
    return body["state"]


def test_health(client):
    resp = client.get("/health")
    assert resp.get_json() == {"ok": True, "service": "fruit-machine"}
    assert resp.headers["X-Frame-Options"] == "DENY"


def test_puzzle_list(client):
    body = client.get(f"{API}/puzzles").get_json()
    assert body["source"] == "json"
    assert len(body["puzzles"]) == 10
    assert body["puzzles"][0] == {"index": 0, "id": "puzzle-001", "target": 58}


def test_state_sets_session_cookie(client):
    resp = client.get(f"{API}/state")
    state = _state(resp)
    assert state["phase"] == "ready"
    assert state["result"] == "??"
    assert "session_id=" in resp.headers.get("Set-Cookie", "")


def test_full_round_over_http(app, client):
    state = _state(client.post(f"{API}/spin"))
    assert state["phase"] == "spinning"
    state = _state(client.post(f"{API}/spin/complete"))
    assert state["phase"] == "playing"
    assert state["show_hint"]

    with app.app_context():
        solution = list(get_store().puzzles[0].solutions[0])
    indices = [d["index"] for d in state["dials"]]
    sizes = [len(d["values"]) for d in state["dials"]]
    for dial, direction in shortest_path(indices, solution, sizes):
        state = _state(client.post(f"{API}/nudge", json={"dial": dial, "direction": direction}))

    # win delay is zero under test, so the same response already reports the win
    assert state["phase"] == "won"
    assert state["is_correct"]
    assert state["result"] == "58"
    assert state["total_coins"] == 5
    assert state["move_count"] == state["min_moves"]

    state = _state(client.post(f"{API}/next"))
    assert state["puzzle_index"] == 1
    assert state["total_coins"] == 5


def test_nudge_validation(client):
    assert client.post(f"{API}/nudge", json={"dial": 7, "direction": "up"}).status_code == 400
    resp = client.post(f"{API}/nudge", json={"dial": 1, "direction": 3})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "bad_direction"
    assert client.post(f"{API}/nudge", json={}).get_json()["error"] == "bad_dial"

    assert client.post(f"{API}/nudge", json=[0, "up"]).get_json()["error"] == "bad_dial"

    resp = client.post(f"{API}/nudge", json={"dial": 0, "direction": "up"})
    body = resp.get_json()
    assert body["applied"] is False
    assert body["state"]["phase"] == "ready"


def test_select_and_navigation(client):
    assert client.post(f"{API}/select", json={"index": 10}).get_json()["error"] == "bad_index"
    assert client.post(f"{API}/select", json={"index": "x"}).status_code == 400
    assert _state(client.post(f"{API}/select", json={"index": 9}))["puzzle_id"] == "puzzle-010"
    assert _state(client.post(f"{API}/next"))["puzzle_index"] == 0
    assert _state(client.post(f"{API}/prev"))["puzzle_index"] == 9
    assert _state(client.post(f"{API}/reset"))["puzzle_index"] == 9


def test_mode_and_play_again(client):
    resp = client.post(f"{API}/mode", json={"mode": "brutal"})
    assert resp.status_code == 400
    assert resp.get_json()["modes"] == ["easy", "medium", "hard"]
    assert _state(client.post(f"{API}/mode", json={"mode": "Easy"}))["mode"] == "easy"

    client.post(f"{API}/select", json={"index": 4})
    state = _state(client.post(f"{API}/play-again"))
    assert state["puzzle_index"] == 0
    assert state["total_coins"] == 0
    assert state["mode"] == "easy"


def test_client_ids_get_separate_sessions(client):
    client.post(f"{API}/select?client_id=tab-a", json={"index": 3})
    assert _state(client.get(f"{API}/state?client_id=tab-a"))["puzzle_index"] == 3
    assert _state(client.get(f"{API}/state?client_id=tab-b"))["puzzle_index"] == 0


def test_empty_catalog_is_unavailable(tmp_path):
    app = create_app({
        "TESTING": True,
        "RATELIMIT_ENABLED": False,
        "FRUIT_CATALOG_PATH": str(tmp_path / "missing.json"),
        "FRUIT_GENERATE_FALLBACK": False,
    })
    resp = app.test_client().get(f"{API}/state")
    assert resp.status_code == 503
    assert resp.get_json() == {"ok": False, "error": "no_puzzles"}


def test_custom_catalog_path(tmp_path):
    bundled = json.loads(DEFAULT_CATALOG.read_text(encoding="utf-8"))
    path = tmp_path / "short.json"
    path.write_text(json.dumps({"puzzles": bundled[3:5]}), encoding="utf-8")
    app = create_app({"TESTING": True, "RATELIMIT_ENABLED": False, "FRUIT_CATALOG_PATH": str(path)})
    state = _state(app.test_client().get(f"{API}/state"))
    assert state["total_puzzles"] == 2
    assert state["puzzle_id"] == "puzzle-004"
