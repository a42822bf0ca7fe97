from __future__ import annotations

import functools
import logging
from typing import Any, Callable

from flask import request
from flask_socketio import SocketIO

from ..game.errors import GameError
from ..game.service import GameCoordinator
from . import events


logger = logging.getLogger(__name__)


def register_socketio_handlers(
    socketio: SocketIO,
    coordinator: GameCoordinator,
    start_room_tasks: bool = True,
    tick_interval_sec: float = 0.25,
) -> None:
    room_tasks: dict[str, bool] = {}

    def _ensure_room_task(room_code: str) -> None:
        if not start_room_tasks or room_tasks.get(room_code):
            return
        room_tasks[room_code] = True

        def _runner() -> None:
            try:
                while coordinator.tick(room_code) is not None:
                    socketio.sleep(tick_interval_sec)
            except Exception:
                logger.exception("Room task for %s crashed", room_code)
            finally:
                room_tasks.pop(room_code, None)

        socketio.start_background_task(_runner)

    def intent(event: str, failure_event: str = events.ERROR_MESSAGE):
        """Register a handler; GameErrors go back to the sender only."""

        def decorator(fn: Callable[[dict], Any]):
            @functools.wraps(fn)
            def handler(data=None):
                payload = data if isinstance(data, dict) else {}
                try:
                    fn(payload)
                except GameError as exc:
                    logger.debug("%s rejected for %s: %s", event, request.sid, exc.message)
                    socketio.emit(failure_event, {"message": exc.message}, to=request.sid)
                    return {"ok": False, "error": exc.message}
                return {"ok": True}

            socketio.on(event)(handler)
            return handler

        return decorator

    @intent(events.CREATE_ROOM)
    def create_room(payload: dict) -> None:
        room = coordinator.create_room(request.sid, payload.get("playerName"))
        _ensure_room_task(room.code)

    @intent(events.JOIN_ROOM)
    def join_room(payload: dict) -> None:
        room = coordinator.join_room(request.sid, payload.get("roomCode"), payload.get("playerName"))
        _ensure_room_task(room.code)

    @intent(events.RECONNECT_TO_ROOM, failure_event=events.RECONNECT_FAILED)
    def reconnect_to_room(payload: dict) -> None:
        room = coordinator.reconnect(request.sid, payload.get("roomCode"), payload.get("playerName"))
        _ensure_room_task(room.code)

    @intent(events.UPDATE_SETTINGS)
    def update_settings(payload: dict) -> None:
        changes = {k: payload.get(k) for k in ("impostersCount", "category", "mode")}
        coordinator.update_settings(request.sid, changes)

    @intent(events.START_GAME)
    def start_game(payload: dict) -> None:
        room = coordinator.start_game(request.sid)
        _ensure_room_task(room.code)

    @intent(events.REVEAL_WORD)
    def reveal_word(payload: dict) -> None:
        coordinator.reveal_word(request.sid)

    @intent(events.SUBMIT_CLUE)
    def submit_clue(payload: dict) -> None:
        coordinator.submit_clue(request.sid, payload.get("clue"))

    @intent(events.CAST_VOTE)
    def cast_vote(payload: dict) -> None:
        coordinator.cast_vote(request.sid, payload.get("targetId"))

    @intent(events.RESTART_GAME)
    def restart_game(payload: dict) -> None:
        room = coordinator.restart_game(request.sid)
        _ensure_room_task(room.code)

    @socketio.on("disconnect")
    def on_disconnect(reason=None):
        coordinator.disconnect(request.sid)
