from __future__ import annotations

import logging
import random
import time
from collections import Counter
from threading import RLock
from typing import TYPE_CHECKING, Any, Callable

from ..config import Config
from ..realtime import events
from . import errors, views, words
from .models import GAME_MODES, RANDOM_CATEGORY, TIMEOUT_CLUE, Clue, Phase, Player, Room, Winner
from .registry import IdentityTracker, RoomRegistry, normalize_code

if TYPE_CHECKING:
    from ..realtime.broadcast import RoomBroadcaster


logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


def _due(deadline_ms: int | None, now: int) -> bool:
    return deadline_ms is not None and now >= deadline_ms


class GameCoordinator:
    """Single owner of every room's state.

    All entry points take the coordinator lock, so intents coming from
    handler threads and deadline ticks from room tasks are applied one at
    a time. Timers are plain deadlines on the Room; ``tick`` fires the due
    ones after re-checking the phase they were armed for.
    """

    def __init__(
        self,
        broadcaster: RoomBroadcaster,
        config: Any = Config,
        rng: random.Random | None = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.broadcaster = broadcaster
        self.config = config
        self.rng = rng or random.Random()
        self.clock = clock
        self.rooms = RoomRegistry()
        self.identities = IdentityTracker()
        self._lock = RLock()

    # ------------------------------------------------------------------
    # Lookups

    def get_room(self, code: str | None) -> Room | None:
        with self._lock:
            return self.rooms.get(code)

    def list_rooms(self) -> list[Room]:
        with self._lock:
            return self.rooms.list()

    def room_for(self, sid: str) -> Room | None:
        with self._lock:
            code = self.identities.room_code_for(sid)
            return self.rooms.get(code) if code else None

    def public_state(self, code: str | None) -> dict | None:
        with self._lock:
            room = self.rooms.get(code)
            return views.room_public_state(room) if room else None

    def _require_room(self, sid: str) -> Room:
        room = self.room_for(sid)
        if room is None:
            raise errors.RoomNotFound()
        return room

    def _require_player(self, room: Room, sid: str) -> Player:
        player = room.player_by_sid(sid)
        if player is None:
            raise errors.PlayerNotFound()
        return player

    def _require_host(self, room: Room, sid: str, message: str) -> Player:
        player = room.player_by_sid(sid)
        if player is None or player.key != room.host_key:
            raise errors.NotHost(message)
        return player

    def _clean_name(self, raw: Any) -> str:
        if raw is None:
            raise errors.NameRequired()
        if not isinstance(raw, str):
            raise errors.InvalidName()
        name = raw.strip()
        if not name:
            raise errors.NameRequired()
        if len(name) > self.config.MAX_NAME_LENGTH:
            raise errors.InvalidName(f"Name must be at most {self.config.MAX_NAME_LENGTH} characters")
        # Avoid obvious HTML/script injection and control characters.
        if "<" in name or ">" in name or any(ord(ch) < 32 for ch in name):
            raise errors.InvalidName()
        return name

    # ------------------------------------------------------------------
    # Membership

    def _attach(self, room: Room, sid: str) -> None:
        self.identities.bind(sid, room.code)
        self.broadcaster.enter(sid, room.code)

    def _detach(self, sid: str) -> Room | None:
        code = self.identities.unbind(sid)
        if code is None:
            return None
        self.broadcaster.leave(sid, code)

        room = self.rooms.get(code)
        if room is None:
            return None

        player = room.player_by_sid(sid)
        if player is not None:
            player.connected = False
            player.disconnected_at_ms = self.clock()
            logger.info("Player %s disconnected from room %s", player.name, room.code)
            self.broadcaster.room_update(room)
        return room

    def create_room(self, sid: str, name: Any) -> Room:
        with self._lock:
            name = self._clean_name(name)
            self._detach(sid)

            host = Player(sid=sid, name=name)
            room = self.rooms.create(host)
            self._attach(room, sid)

            logger.info("Room %s created by %s", room.code, name)
            self.broadcaster.to_player(sid, events.ROOM_CREATED, {"roomCode": room.code})
            self.broadcaster.room_update(room)
            return room

    def join_room(self, sid: str, code: Any, name: Any) -> Room:
        with self._lock:
            code = normalize_code(code) if isinstance(code, str) else ""
            if not code or name is None or (isinstance(name, str) and not name.strip()):
                raise errors.MissingRoomData()
            name = self._clean_name(name)

            room = self.rooms.get(code)
            if room is None:
                raise errors.RoomNotFound()
            if room.player_by_sid(sid) is not None:
                raise errors.AlreadyInRoom()
            if room.phase != "lobby":
                raise errors.GameAlreadyStarted()
            if room.player_by_name(name) is not None:
                raise errors.NameTaken()

            self._detach(sid)
            room.players.append(Player(sid=sid, name=name))
            self._attach(room, sid)

            logger.info("Player %s joined room %s", name, room.code)
            self.broadcaster.to_player(sid, events.ROOM_JOINED, {"roomCode": room.code})
            self.broadcaster.room_update(room)
            return room

    def reconnect(self, sid: str, code: Any, name: Any) -> Room:
        with self._lock:
            code = normalize_code(code) if isinstance(code, str) else ""
            name = name.strip() if isinstance(name, str) else ""
            if not code or not name:
                raise errors.InvalidData()

            room = self.rooms.get(code)
            if room is None:
                raise errors.RoomNotFound("Room no longer exists")

            player = room.player_by_name(name)
            if player is None:
                raise errors.PlayerNotFound()

            old_sid = player.sid
            if old_sid != sid:
                self._detach(sid)
                # The old connection id is stale from here on. Host, turn slot,
                # votes and clues all follow the player's stable key.
                if self.identities.room_code_for(old_sid) == room.code:
                    self.identities.unbind(old_sid)
                self.broadcaster.leave(old_sid, room.code)
                player.sid = sid

            player.connected = True
            player.disconnected_at_ms = None
            player.abandoned = False
            self._attach(room, sid)

            if room.phase != "lobby" and player.role:
                self.broadcaster.role_assigned(room, player)
            if room.phase == "game_over" and room.game_over_data:
                self.broadcaster.to_player(sid, events.GAME_OVER, room.game_over_data)

            logger.info("Player %s reconnected to room %s", player.name, room.code)
            self.broadcaster.to_player(sid, events.RECONNECT_SUCCESS, {"roomCode": room.code})
            self.broadcaster.room_update(room)
            return room

    def disconnect(self, sid: str) -> None:
        with self._lock:
            self._detach(sid)

    # ------------------------------------------------------------------
    # Lobby

    def update_settings(self, sid: str, changes: dict) -> Room:
        with self._lock:
            room = self._require_room(sid)
            self._require_host(room, sid, "Only host can update settings")
            if room.phase != "lobby":
                raise errors.GameInProgress()

            # Fields are applied one by one; a failing field does not undo
            # the ones before it, so always publish what was applied.
            try:
                self._apply_settings(room, changes)
            finally:
                self.broadcaster.room_update(room)
            return room

    def _apply_settings(self, room: Room, changes: dict) -> None:
        count = changes.get("impostersCount")
        if count is not None:
            if isinstance(count, bool) or not isinstance(count, int):
                raise errors.InvalidImpostersCount()
            if count < 1 or count >= len(room.players):
                raise errors.InvalidImpostersCount()
            room.settings.imposters_count = count

        category = changes.get("category")
        if category is not None:
            if not isinstance(category, str):
                raise errors.InvalidCategory()
            if category != RANDOM_CATEGORY and not words.is_category(category):
                raise errors.InvalidCategory()
            room.settings.category = category

        mode = changes.get("mode")
        if mode is not None:
            if not isinstance(mode, str) or mode not in GAME_MODES:
                raise errors.InvalidMode()
            room.settings.mode = mode

    def _check_startable(self, room: Room) -> None:
        if len(room.players) < self.config.MIN_PLAYERS:
            raise errors.NotEnoughPlayers(f"Need at least {self.config.MIN_PLAYERS} players to start")
        if room.settings.imposters_count >= len(room.players):
            raise errors.TooManyImposters()

    def start_game(self, sid: str) -> Room:
        with self._lock:
            room = self._require_room(sid)
            self._require_host(room, sid, "Only host can start game")
            if room.phase != "lobby":
                raise errors.GameAlreadyStarted()
            self._check_startable(room)

            self._assign_roles(room)
            self._set_phase(room, "reveal")
            self.broadcaster.room_update(room)
            logger.info("Room %s started with %d players", room.code, len(room.players))
            return room

    def restart_game(self, sid: str) -> Room:
        with self._lock:
            room = self._require_room(sid)
            self._require_host(room, sid, "Only host can restart game")
            if room.phase != "game_over":
                raise errors.NotGameOver()
            self._check_startable(room)

            for p in room.players:
                p.alive = True
                p.has_revealed = False
                p.abandoned = False
                p.role = None
                p.word = None

            room.round = 1
            room.votes = {}
            room.turn_index = 0
            room.clues = []
            room.tied_players = []
            room.is_revote = False
            room.game_over_data = None

            self._assign_roles(room)
            self._set_phase(room, "reveal")
            self.broadcaster.room_update(room)
            logger.info("Room %s restarted", room.code)
            return room

    def _assign_roles(self, room: Room) -> None:
        category = room.settings.category
        if category == RANDOM_CATEGORY:
            category = self.rng.choice(words.CATEGORIES)

        entry = words.pick_entry(category, self.rng)
        room.actual_word = entry.word
        room.imposter_word = entry.decoy
        room.hint = entry.hint
        room.actual_category = category

        # Shuffle a copy: room order is the turn order and must not change.
        shuffled = list(room.players)
        self.rng.shuffle(shuffled)
        imposter_keys = {p.key for p in shuffled[: room.settings.imposters_count]}

        for player in room.players:
            is_imposter = player.key in imposter_keys
            player.role = "imposter" if is_imposter else "player"
            if not is_imposter:
                player.word = room.actual_word
            elif room.settings.mode == "different_word":
                player.word = room.imposter_word
            else:
                player.word = None
            self.broadcaster.role_assigned(room, player)

    # ------------------------------------------------------------------
    # Phases & turns

    def _set_phase(self, room: Room, phase: Phase) -> None:
        room.phase = phase
        room.chat_starts_at_ms = None
        room.turn_ends_at_ms = None
        room.voting_starts_at_ms = None
        room.result_ends_at_ms = None
        self.broadcaster.phase_changed(room)

    def _first_alive(self, room: Room) -> int:
        return next((i for i, p in enumerate(room.players) if p.alive), 0)

    def _has_spoken(self, room: Room, player: Player) -> bool:
        return any(c.player_key == player.key and c.round == room.round for c in room.clues)

    def _all_alive_have_spoken(self, room: Room) -> bool:
        return all(self._has_spoken(room, p) for p in room.alive_players)

    def reveal_word(self, sid: str) -> Room:
        with self._lock:
            room = self._require_room(sid)
            if room.phase != "reveal":
                raise errors.NotInRevealPhase()
            player = self._require_player(room, sid)
            player.has_revealed = True
            self._arm_chat_if_revealed(room)

            self.broadcaster.room_update(room)
            return room

    def _arm_chat_if_revealed(self, room: Room) -> None:
        if room.chat_starts_at_ms is not None:
            return
        if all(p.has_revealed or p.abandoned for p in room.players):
            room.chat_starts_at_ms = self.clock() + self.config.REVEAL_DELAY_SEC * 1000

    def _start_chat(self, room: Room) -> None:
        self._set_phase(room, "chat")
        room.turn_index = self._first_alive(room)
        self._begin_turn(room)

    def _begin_turn(self, room: Room) -> None:
        room.turn_ends_at_ms = self.clock() + self.config.TURN_DURATION_SEC * 1000
        self.broadcaster.turn_changed(room)
        self.broadcaster.room_update(room)

    def advance_turn(self, room: Room) -> int:
        """Move ``turn_index`` to the next alive player, at most one lap."""
        count = len(room.players)
        for _ in range(count):
            room.turn_index = (room.turn_index + 1) % count
            if room.players[room.turn_index].alive:
                break
        return room.turn_index

    def _next_turn(self, room: Room) -> None:
        room.turn_ends_at_ms = None
        self.advance_turn(room)

        if self._all_alive_have_spoken(room):
            room.voting_starts_at_ms = self.clock() + self.config.VOTING_DELAY_SEC * 1000
            self.broadcaster.room_update(room)
        else:
            self._begin_turn(room)

    def _record_clue(self, room: Room, player: Player, text: str) -> None:
        room.clues.append(Clue(player_key=player.key, player_name=player.name, text=text, round=room.round))

    def submit_clue(self, sid: str, clue: Any) -> Room:
        with self._lock:
            room = self._require_room(sid)
            if room.phase != "chat":
                raise errors.NotInChatPhase()

            player = room.player_by_sid(sid)
            if player is None or not player.alive:
                raise errors.NotAlive()
            if self._has_spoken(room, player):
                raise errors.AlreadySubmittedClue()
            current = room.current_player
            if current is None or current.key != player.key:
                raise errors.NotYourTurn()

            text = clue.strip() if isinstance(clue, str) else ""
            if not text:
                raise errors.EmptyClue()
            if len(text) > self.config.MAX_CLUE_LENGTH:
                raise errors.ClueTooLong(f"Clue must be at most {self.config.MAX_CLUE_LENGTH} characters")

            self._record_clue(room, player, text)
            self.broadcaster.room_update(room)
            self._next_turn(room)
            return room

    def _turn_timed_out(self, room: Room) -> None:
        player = room.current_player
        if player is not None and player.alive and not self._has_spoken(room, player):
            logger.info("Turn timed out for %s in room %s", player.name, room.code)
            self._record_clue(room, player, TIMEOUT_CLUE)
            self.broadcaster.room_update(room)
        self._next_turn(room)

    def _start_voting(self, room: Room) -> None:
        room.votes = {}
        self._set_phase(room, "voting")
        self.broadcaster.room_update(room)

    # ------------------------------------------------------------------
    # Voting

    def _eligible_voters(self, room: Room) -> list[Player]:
        alive = [p for p in room.alive_players if not p.abandoned]
        if room.phase == "revote":
            return [p for p in alive if p.key not in room.tied_players]
        return alive

    def cast_vote(self, sid: str, target_id: Any) -> Room:
        with self._lock:
            room = self._require_room(sid)
            if room.phase not in ("voting", "revote"):
                raise errors.NotInVotingPhase()

            voter = room.player_by_sid(sid)
            if voter is None or not voter.alive:
                raise errors.NotAlive()

            revote = room.phase == "revote"
            if revote and voter.key in room.tied_players:
                raise errors.TiedPlayerCannotVote()
            if target_id == sid:
                raise errors.SelfVote()

            target = room.player_by_sid(target_id if isinstance(target_id, str) else None)
            if target is None or not target.alive:
                raise errors.InvalidTarget()
            if revote and target.key not in room.tied_players:
                raise errors.InvalidTarget("Can only vote for tied players")
            if voter.key in room.votes:
                raise errors.AlreadyVoted()

            room.votes[voter.key] = target.key
            eligible = self._eligible_voters(room)
            self.broadcaster.vote_cast(room, voter, len(eligible))
            self._tally_if_complete(room)
            return room

    def _tally_if_complete(self, room: Room) -> None:
        eligible = self._eligible_voters(room)
        if not eligible:
            # Nobody left to break a revote tie by hand.
            if room.phase == "revote":
                self._eliminate(room, room.tied_players, dict(Counter(room.votes.values())))
            return
        # Votes from players who abandoned after voting still count in the tally.
        if room.votes and all(p.key in room.votes for p in eligible):
            self._tally(room)

    def _tally(self, room: Room) -> None:
        counts = dict(Counter(room.votes.values()))
        top = max(counts.values())
        leaders = [key for key, n in counts.items() if n == top]

        if room.phase == "revote" or len(leaders) == 1:
            self._eliminate(room, leaders, counts)
        else:
            self._start_revote(room, leaders, counts)

    def _start_revote(self, room: Room, leaders: list[str], counts: dict[str, int]) -> None:
        room.tied_players = list(leaders)
        room.is_revote = True
        room.votes = {}
        self._set_phase(room, "revote")
        self.broadcaster.revote_started(room, counts)
        self.broadcaster.room_update(room)
        logger.info("Revote in room %s between %d players", room.code, len(leaders))

        # Everyone alive is tied: nobody is left to revote, break the tie now.
        if not self._eligible_voters(room):
            self._eliminate(room, room.tied_players, counts)

    def _eliminate(self, room: Room, leaders: list[str], counts: dict[str, int]) -> None:
        was_tiebreaker = len(leaders) > 1
        key = self.rng.choice(leaders) if was_tiebreaker else leaders[0]
        player = room.player_by_key(key)
        if player is None:
            logger.warning("Vote target %s missing from room %s", key, room.code)
            return

        player.alive = False
        was_revote = room.is_revote
        self._set_phase(room, "result")
        self.broadcaster.player_eliminated(room, player, counts, was_revote, was_tiebreaker)

        room.is_revote = False
        room.tied_players = []
        room.result_ends_at_ms = self.clock() + self.config.RESULT_DELAY_SEC * 1000
        self.broadcaster.room_update(room)
        logger.info("Player %s (%s) eliminated in room %s", player.name, player.role, room.code)

    def winner(self, room: Room) -> Winner | None:
        alive = room.alive_players
        imposters = sum(1 for p in alive if p.is_imposter)
        if imposters == 0:
            return "players"
        if imposters >= len(alive) - imposters:
            return "imposters"
        return None

    def _finish_result(self, room: Room) -> None:
        winner = self.winner(room)
        if winner is not None:
            self._end_game(room, winner)
            return

        room.round += 1
        room.votes = {}
        self._start_chat(room)

    def _end_game(self, room: Room, winner: Winner) -> None:
        room.game_over_data = views.game_over_payload(room, winner)
        self._set_phase(room, "game_over")
        self.broadcaster.game_over(room)
        self.broadcaster.room_update(room)
        logger.info("Room %s game over, %s win", room.code, winner)

    # ------------------------------------------------------------------
    # Timers & housekeeping

    def tick(self, code: str, now: int | None = None) -> Room | None:
        """Fire due deadlines for one room. Returns None once the room is gone."""
        with self._lock:
            room = self.rooms.get(code)
            if room is None:
                return None
            now = self.clock() if now is None else now

            if not room.players:
                logger.warning("Room %s has no players but is still registered", room.code)
                self._delete_room(room)
                return None

            if room.phase == "reveal" and _due(room.chat_starts_at_ms, now):
                self._start_chat(room)
            elif room.phase == "chat":
                if _due(room.turn_ends_at_ms, now):
                    self._turn_timed_out(room)
                if room.phase == "chat" and _due(room.voting_starts_at_ms, now):
                    self._start_voting(room)
            elif room.phase == "result" and _due(room.result_ends_at_ms, now):
                self._finish_result(room)

            return self._expire_disconnected(room, now)

    def _expire_disconnected(self, room: Room, now: int) -> Room | None:
        grace_ms = self.config.DISCONNECT_GRACE_SEC * 1000
        expired = [
            p
            for p in room.players
            if not p.connected and p.disconnected_at_ms is not None and now - p.disconnected_at_ms >= grace_ms
        ]
        if not expired:
            return room

        expired_keys = {p.key for p in expired}
        if room.phase == "lobby":
            room.players = [p for p in room.players if p.key not in expired_keys]
            if not room.players:
                self._delete_room(room)
                return None
            cap = max(1, len(room.players) - 1)
            if room.settings.imposters_count > cap:
                room.settings.imposters_count = cap
        else:
            # Mid-game the player keeps their role and turn slot, but the
            # room stops waiting for them to reveal or vote.
            for p in expired:
                p.disconnected_at_ms = None
                p.abandoned = True
            if not any(p.connected or p.disconnected_at_ms is not None for p in room.players):
                self._delete_room(room)
                return None
            if room.phase == "reveal":
                self._arm_chat_if_revealed(room)
            elif room.phase in ("voting", "revote"):
                self._tally_if_complete(room)

        if room.host is None or room.host_key in expired_keys:
            candidates = [p for p in room.players if p.connected] or room.players
            room.host_key = candidates[0].key

        logger.info("Room %s dropped %d disconnected players", room.code, len(expired))
        self.broadcaster.room_update(room)
        return room

    def _delete_room(self, room: Room) -> None:
        for p in room.players:
            if self.identities.room_code_for(p.sid) == room.code:
                self.identities.unbind(p.sid)
        self.rooms.delete(room.code)
        logger.info("Room %s deleted", room.code)
