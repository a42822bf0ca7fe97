import logging
import os
from pathlib import Path

from dotenv import load_dotenv


logger = logging.getLogger("imposter")


def main() -> None:
    load_dotenv(Path(__file__).resolve().parents[1] / ".env")

    # imposter.config only needs os/sys, so it is safe to import before
    # monkey patching; flask/socketio must come after.
    try:
        from backend.imposter.config import resolve_async_mode
    except ImportError:  # pragma: no cover
        from imposter.config import resolve_async_mode

    if resolve_async_mode() == "eventlet":
        import eventlet

        eventlet.monkey_patch()

    try:
        from backend.imposter.server import create_app
    except ImportError:  # pragma: no cover
        from imposter.server import create_app

    app, socketio = create_app()

    host = os.environ.get("HOST", "0.0.0.0")
    port = int(os.environ.get("PORT", "5000"))

    logger.info("Imposter server listening on %s:%d", host, port)
    socketio.run(
        app,
        host=host,
        port=port,
        debug=os.environ.get("FLASK_DEBUG", "1") == "1",
        allow_unsafe_werkzeug=os.environ.get("ALLOW_UNSAFE_WERKZEUG", "1") == "1",
        use_reloader=os.environ.get("FLASK_USE_RELOADER", "0") == "1",
    )


if __name__ == "__main__":
    main()
