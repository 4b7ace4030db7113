import os


def _env_bool(name, default):
    val = os.environ.get(name)
    if val is None:
        return default
    return val.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name, default=None):
    val = os.environ.get(name)
    return int(val) if val not in (None, "") else default


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"

    RATELIMIT_DEFAULT = os.environ.get("RATELIMIT_DEFAULT", "200 per hour; 50 per minute")
    RATELIMIT_ENABLED = _env_bool("RATELIMIT_ENABLED", True)

    # Puzzle catalog (None -> bundled static/puzzles.json)
    FRUIT_CATALOG_PATH = os.environ.get("FRUIT_CATALOG_PATH")
    FRUIT_WARMUP = _env_bool("FRUIT_WARMUP", True)
    FRUIT_GENERATE_FALLBACK = _env_bool("FRUIT_GENERATE_FALLBACK", True)
    FRUIT_GENERATE_COUNT = _env_int("FRUIT_GENERATE_COUNT", 10)
    FRUIT_GENERATE_SEED = _env_int("FRUIT_GENERATE_SEED")
    FRUIT_ACCESSIBLE_MAX = _env_int("FRUIT_ACCESSIBLE_MAX", 200)

    # Gameplay
    FRUIT_MIN_SPIN_DISTANCE = _env_int("FRUIT_MIN_SPIN_DISTANCE", 3)
    FRUIT_WIN_DELAY_SECONDS = float(os.environ.get("FRUIT_WIN_DELAY_SECONDS", "3.0"))
