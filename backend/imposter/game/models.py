from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Literal


Phase = Literal["lobby", "reveal", "chat", "voting", "revote", "result", "game_over"]
Role = Literal["player", "imposter"]
GameMode = Literal["different_word", "no_word"]
Winner = Literal["players", "imposters"]

GAME_MODES: tuple[str, ...] = ("different_word", "no_word")
RANDOM_CATEGORY = "random"
TIMEOUT_CLUE = "[Timeout - No clue given]"


def new_player_key() -> str:
    return uuid.uuid4().hex


@dataclass
class Player:
    sid: str
    name: str
    key: str = field(default_factory=new_player_key)
    role: Role | None = None
    word: str | None = None
    alive: bool = True
    has_revealed: bool = False
    connected: bool = True
    disconnected_at_ms: int | None = None
    # Grace expired mid-game: no longer waited on for reveal or votes.
    abandoned: bool = False

    @property
    def is_imposter(self) -> bool:
        return self.role == "imposter"


@dataclass
class Clue:
    player_key: str
    player_name: str
    text: str
    round: int


@dataclass
class Settings:
    imposters_count: int = 1
    category: str = RANDOM_CATEGORY
    mode: GameMode = "different_word"


@dataclass
class Room:
    code: str
    host_key: str
    phase: Phase = "lobby"
    settings: Settings = field(default_factory=Settings)
    players: list[Player] = field(default_factory=list)
    round: int = 1
    turn_index: int = 0
    clues: list[Clue] = field(default_factory=list)
    # voter key -> target key
    votes: dict[str, str] = field(default_factory=dict)
    tied_players: list[str] = field(default_factory=list)
    is_revote: bool = False
    actual_word: str | None = None
    imposter_word: str | None = None
    hint: str | None = None
    actual_category: str | None = None
    game_over_data: dict | None = None
    # Deadlines, checked by the room task. Cleared on every phase change.
    chat_starts_at_ms: int | None = None
    turn_ends_at_ms: int | None = None
    voting_starts_at_ms: int | None = None
    result_ends_at_ms: int | None = None

    def player_by_sid(self, sid: str | None) -> Player | None:
        if not sid:
            return None
        return next((p for p in self.players if p.sid == sid), None)

    def player_by_key(self, key: str | None) -> Player | None:
        if not key:
            return None
        return next((p for p in self.players if p.key == key), None)

    def player_by_name(self, name: str) -> Player | None:
        wanted = (name or "").strip().lower()
        return next((p for p in self.players if p.name.lower() == wanted), None)

    @property
    def host(self) -> Player | None:
        return self.player_by_key(self.host_key)

    @property
    def alive_players(self) -> list[Player]:
        return [p for p in self.players if p.alive]

    @property
    def current_player(self) -> Player | None:
        if 0 <= self.turn_index < len(self.players):
            return self.players[self.turn_index]
        return None
