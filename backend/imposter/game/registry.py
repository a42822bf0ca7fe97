from __future__ import annotations

import random
import string

from .models import Player, Room


ROOM_CODE_ALPHABET = string.ascii_uppercase
ROOM_CODE_LENGTH = 6


def normalize_code(code: str | None) -> str:
    return (code or "").strip().upper()


def generate_room_code(
    taken,
    rng: random.Random | None = None,
    length: int = ROOM_CODE_LENGTH,
) -> str:
    r = rng or random
    code = "".join(r.choice(ROOM_CODE_ALPHABET) for _ in range(length))
    while code in taken:
        code = "".join(r.choice(ROOM_CODE_ALPHABET) for _ in range(length))
    return code


class RoomRegistry:
    """Room code -> Room. Owns the lifecycle of every room."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng
        self._rooms: dict[str, Room] = {}

    def create(self, host: Player) -> Room:
        code = generate_room_code(self._rooms, rng=self._rng)
        room = Room(code=code, host_key=host.key, players=[host])
        self._rooms[code] = room
        return room

    def get(self, code: str | None) -> Room | None:
        return self._rooms.get(normalize_code(code))

    def delete(self, code: str) -> bool:
        if code in self._rooms:
            del self._rooms[code]
            return True
        return False

    def list(self) -> list[Room]:
        return list(self._rooms.values())

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and normalize_code(code) in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)


class IdentityTracker:
    """Connection id -> code of the room it is bound to."""

    def __init__(self) -> None:
        self._bindings: dict[str, str] = {}

    def bind(self, sid: str, code: str) -> None:
        self._bindings[sid] = code

    def unbind(self, sid: str) -> str | None:
        return self._bindings.pop(sid, None)

    def room_code_for(self, sid: str) -> str | None:
        return self._bindings.get(sid)

    def __contains__(self, sid: object) -> bool:
        return sid in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)
