from __future__ import annotations

import logging
from typing import Any, Callable

from ..game import views
from ..game.models import Player, Room
from . import events


logger = logging.getLogger(__name__)

Send = Callable[..., Any]
Membership = Callable[[str, str], Any]


class RoomBroadcaster:
    """Emits room snapshots to a room and private payloads to one connection.

    ``send`` has the shape of ``SocketIO.emit`` (``send(event, payload, to=...)``).
    ``enter`` and ``leave`` take ``(sid, room_code)`` and manage a
    connection's membership in the room's broadcast group.
    """

    def __init__(self, send: Send, enter: Membership, leave: Membership) -> None:
        self._send = send
        self._enter = enter
        self._leave = leave

    def enter(self, sid: str, room_code: str) -> None:
        self._enter(sid, room_code)

    def leave(self, sid: str, room_code: str) -> None:
        self._leave(sid, room_code)

    def to_room(self, room: Room, event: str, payload: dict) -> None:
        self._send(event, payload, to=room.code)

    def to_player(self, sid: str, event: str, payload: dict) -> None:
        self._send(event, payload, to=sid)

    def room_update(self, room: Room) -> None:
        self.to_room(room, events.ROOM_UPDATE, views.room_public_state(room))

    def phase_changed(self, room: Room) -> None:
        self.to_room(room, events.PHASE_CHANGED, {"phase": room.phase})

    def turn_changed(self, room: Room) -> None:
        current = room.current_player
        self.to_room(
            room,
            events.TURN_CHANGED,
            {
                "turnIndex": room.turn_index,
                "currentPlayer": views.public_player(current) if current else None,
            },
        )

    def role_assigned(self, room: Room, player: Player) -> None:
        self.to_player(player.sid, events.ROLE_ASSIGNED, views.role_payload(room, player))

    def vote_cast(self, room: Room, voter: Player, eligible: int) -> None:
        self.to_room(
            room,
            events.VOTE_CAST,
            {"voterId": voter.sid, "votesSubmitted": len(room.votes), "totalAlive": eligible},
        )

    def revote_started(self, room: Room, counts: dict[str, int]) -> None:
        tied = [room.player_by_key(k) for k in room.tied_players]
        self.to_room(
            room,
            events.REVOTE_STARTED,
            {
                "tiedPlayers": [{"id": p.sid, "name": p.name} for p in tied if p],
                "voteCounts": views.vote_counts(room, counts),
            },
        )

    def player_eliminated(
        self,
        room: Room,
        player: Player,
        counts: dict[str, int],
        was_revote: bool,
        was_tiebreaker: bool,
    ) -> None:
        self.to_room(
            room,
            events.PLAYER_ELIMINATED,
            {
                "playerId": player.sid,
                "playerName": player.name,
                "role": player.role,
                "voteCounts": views.vote_counts(room, counts),
                "wasRevote": was_revote,
                "wasTiebreaker": was_tiebreaker,
            },
        )

    def game_over(self, room: Room) -> None:
        if room.game_over_data is None:
            logger.warning("Room %s reached game over without a result", room.code)
            return
        self.to_room(room, events.GAME_OVER, room.game_over_data)

    def error(self, sid: str, message: str) -> None:
        self.to_player(sid, events.ERROR_MESSAGE, {"message": message})
