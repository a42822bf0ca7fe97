import os
import sys


def resolve_async_mode() -> str:
    env_async_mode = os.environ.get("SOCKETIO_ASYNC_MODE", "").strip()
    if env_async_mode:
        return env_async_mode
    # eventlet has known compatibility issues on Windows and Python >= 3.13
    if sys.platform.startswith("win") or sys.version_info >= (3, 13):
        return "threading"
    return "eventlet"


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev")

    # CORS
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    # Reverse proxy / IP headers
    TRUST_PROXY_HEADERS = os.environ.get("TRUST_PROXY_HEADERS", "1") == "1"

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Background room tasks (timers + disconnect housekeeping)
    ROOM_TASKS_ENABLED = os.environ.get("ROOM_TASKS_ENABLED", "1") == "1"
    TICK_INTERVAL_SEC = float(os.environ.get("TICK_INTERVAL_SEC", "0.25"))

    # Game
    MIN_PLAYERS = int(os.environ.get("MIN_PLAYERS", "3"))
    MAX_NAME_LENGTH = int(os.environ.get("MAX_NAME_LENGTH", "16"))
    MAX_CLUE_LENGTH = int(os.environ.get("MAX_CLUE_LENGTH", "100"))
    TURN_DURATION_SEC = int(os.environ.get("TURN_DURATION_SEC", "40"))
    REVEAL_DELAY_SEC = int(os.environ.get("REVEAL_DELAY_SEC", "5"))
    VOTING_DELAY_SEC = int(os.environ.get("VOTING_DELAY_SEC", "10"))
    RESULT_DELAY_SEC = int(os.environ.get("RESULT_DELAY_SEC", "3"))
    DISCONNECT_GRACE_SEC = int(os.environ.get("DISCONNECT_GRACE_SEC", "120"))
