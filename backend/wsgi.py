from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parents[1] / ".env")

try:
    from backend.imposter.server import create_app
except ImportError:  # pragma: no cover
    from imposter.server import create_app

app, socketio = create_app()
