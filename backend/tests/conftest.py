import random

import pytest

from imposter.config import Config
from imposter.game.service import GameCoordinator
from imposter.realtime.broadcast import RoomBroadcaster


class Recorder:
    """Stands in for the Socket.IO server: records emits and room membership."""

    def __init__(self):
        self.sent = []
        self.members = {}

    def send(self, event, payload, to=None):
        self.sent.append((event, payload, to))

    def enter(self, sid, room):
        self.members.setdefault(room, set()).add(sid)

    def leave(self, sid, room):
        self.members.get(room, set()).discard(sid)

    def events(self, name, to=None):
        return [p for e, p, t in self.sent if e == name and (to is None or t == to)]

    def last(self, name, to=None):
        found = self.events(name, to)
        return found[-1] if found else None

    def clear(self):
        self.sent.clear()


class FakeClock:
    def __init__(self, start_ms=1_000_000):
        self.now = start_ms

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += int(seconds * 1000)


class ScriptedRandom(random.Random):
    """Puts the named players first when shuffling and always picks the first choice."""

    def __init__(self, imposters=()):
        super().__init__(1234)
        self.imposters = list(imposters)
        self.choices = []

    def shuffle(self, x):
        x.sort(key=lambda p: self.imposters.index(p.name) if p.name in self.imposters else len(self.imposters))

    def choice(self, seq):
        self.choices.append(list(seq))
        return seq[0]


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_coordinator(recorder, clock):
    def factory(rng=None):
        broadcaster = RoomBroadcaster(send=recorder.send, enter=recorder.enter, leave=recorder.leave)
        return GameCoordinator(broadcaster, config=Config, rng=rng or random.Random(42), clock=clock)

    return factory


@pytest.fixture
def coordinator(make_coordinator):
    return make_coordinator()


@pytest.fixture
def lobby(coordinator):
    """Room hosted by Alice with Bob and Carol (sids a, b, c)."""
    room = coordinator.create_room("a", "Alice")
    coordinator.join_room("b", room.code, "Bob")
    coordinator.join_room("c", room.code, "Carol")
    return room


def play_to_chat(coordinator, clock, room):
    coordinator.start_game(room.host.sid)
    for p in room.players:
        coordinator.reveal_word(p.sid)
    clock.advance(Config.REVEAL_DELAY_SEC)
    coordinator.tick(room.code)
    assert room.phase == "chat"


def play_to_voting(coordinator, clock, room):
    play_to_chat(coordinator, clock, room)
    give_all_clues(coordinator, room)
    clock.advance(Config.VOTING_DELAY_SEC)
    coordinator.tick(room.code)
    assert room.phase == "voting"


def give_all_clues(coordinator, room, text="clue"):
    while room.current_player is not None and not any(
        c.player_key == room.current_player.key and c.round == room.round for c in room.clues
    ):
        coordinator.submit_clue(room.current_player.sid, text)


def start_with_roles(coordinator, room, imposters):
    """Start the game and overwrite roles so the named players are imposters."""
    coordinator.start_game(room.host.sid)
    for p in room.players:
        p.role = "imposter" if p.name in imposters else "player"
    return room
