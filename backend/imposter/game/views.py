from __future__ import annotations

from .models import Player, Room, Winner


def public_player(player: Player) -> dict:
    # Never expose role/word/key to other clients.
    return {
        "id": player.sid,
        "name": player.name,
        "alive": player.alive,
        "hasRevealed": player.has_revealed,
        "connected": player.connected,
    }


def _sid_for(room: Room, key: str) -> str | None:
    player = room.player_by_key(key)
    return player.sid if player else None


def room_public_state(room: Room) -> dict:
    host = room.host
    clues = [
        {
            "playerId": _sid_for(room, c.player_key),
            "playerName": c.player_name,
            "clue": c.text,
            "round": c.round,
        }
        for c in room.clues
    ]

    return {
        "roomCode": room.code,
        "hostId": host.sid if host else None,
        "players": [public_player(p) for p in room.players],
        "phase": room.phase,
        "category": room.settings.category,
        "mode": room.settings.mode,
        "impostersCount": room.settings.imposters_count,
        "turnIndex": room.turn_index,
        "round": room.round,
        "clues": clues,
        "tiedPlayers": [_sid_for(room, k) for k in room.tied_players],
        "isRevote": room.is_revote,
        "votesSubmitted": len(room.votes),
        "turnEndsAtMs": room.turn_ends_at_ms,
    }


def role_payload(room: Room, player: Player) -> dict:
    """Private payload: imposters learn category + hint, never the real word."""
    return {
        "role": player.role,
        "word": player.word,
        "category": room.actual_category if player.is_imposter else None,
        "hint": room.hint if player.is_imposter else None,
        "mode": room.settings.mode,
    }


def true_word(room: Room, player: Player) -> str | None:
    if player.is_imposter:
        return room.imposter_word if room.settings.mode == "different_word" else None
    if player.role == "player":
        return room.actual_word
    return None


def game_over_payload(room: Room, winner: Winner) -> dict:
    return {
        "winner": winner,
        "actualWord": room.actual_word,
        "imposterWord": room.imposter_word,
        "players": [
            {"id": p.sid, "name": p.name, "role": p.role, "word": true_word(room, p)}
            for p in room.players
        ],
    }


def vote_counts(room: Room, counts: dict[str, int]) -> dict[str, int]:
    """Re-key a per-candidate tally (stable keys) by current connection id."""
    out: dict[str, int] = {}
    for key, n in counts.items():
        sid = _sid_for(room, key)
        if sid is not None:
            out[sid] = n
    return out
