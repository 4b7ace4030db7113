# fruitmachine/__init__.py
from __future__ import annotations
import logging
import secrets
from typing import Any, Mapping, Optional

import click
from flask import Flask, jsonify
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from .config import Config

# dev-friendly in-memory limiter; swap for redis in prod
limiter = Limiter(get_remote_address, storage_uri="memory://")


def create_app(test_config: Optional[Mapping[str, Any]] = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)

    # ---------------------------
    # Config
    # ---------------------------
    app.config.from_object(Config)
    app.config.from_pyfile("config.py", silent=True)  # instance/config.py (optional)
    if test_config:
        app.config.from_mapping(test_config)

    if not app.config.get("SECRET_KEY"):
        app.config["SECRET_KEY"] = secrets.token_hex(32)

    # ---------------------------
    # Logging
    # ---------------------------
    level = logging.getLevelName(str(app.config.get("LOG_LEVEL", "INFO")).upper())
    if not isinstance(level, int):
        level = logging.INFO
    app.logger.setLevel(level)
    for name in ("fruitmachine", "fruitmachine.games.core", "fruitmachine.games.fruit"):
        logging.getLogger(name).setLevel(level)

    # ---------------------------
    # Extensions / blueprints
    # ---------------------------
    limiter.init_app(app)

    from .games.fruit.routes import bp as fruit_bp
    # routes file already sets url_prefix="/games/fruit" in the blueprint
    app.register_blueprint(fruit_bp)

    @app.get("/health")
    def health():
        return jsonify({"ok": True, "service": "fruit-machine"})

    # ---------------------------
    # Warmup puzzle store
    # ---------------------------
    with app.app_context():
        if app.config.get("FRUIT_WARMUP", True):
            from .games.fruit.puzzle_store import warmup_store
            store = warmup_store(force=False)
            app.logger.info("Fruit puzzle store warmed up at startup (%d puzzles).", len(store.puzzles))

    # ---------------------------
    # CLI commands
    # ---------------------------
    @app.cli.command("fruit-rebuild-store")
    def fruit_rebuild_store():
        """Reload the puzzle catalog (falls back to in-memory generation)."""
        from .games.fruit.puzzle_store import warmup_store
        store = warmup_store(force=True)
        click.echo(f"Rebuilt fruit store from {store.loaded_from or '-'}: {len(store.puzzles)} puzzles")

    @app.cli.command("fruit-stats")
    def fruit_stats():
        """Print catalog stats."""
        from .games.fruit.puzzle_store import get_store
        store = get_store()
        click.echo(f"Fruit puzzles loaded: total={len(store.puzzles)}, source={store.loaded_from or '-'}")
        for row in store.summary():
            click.echo(f"  #{row['index']:<3} {row['id']}: target={row['target']}")

    @app.cli.command("fruit-verify")
    def fruit_verify():
        """Recount every catalog puzzle over the full dial space."""
        from .games.fruit.puzzle_store import get_store
        counts = get_store().verify()
        bad = {pid: n for pid, n in counts.items() if n != 1}
        for pid, n in counts.items():
            click.echo(f"{pid}: solutions found={n} {'ok' if n == 1 else 'FAIL'}")
        if bad:
            raise click.ClickException(f"{len(bad)} puzzle(s) without a unique solution")

    @app.after_request
    def set_security_headers(resp):
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return resp

    return app
