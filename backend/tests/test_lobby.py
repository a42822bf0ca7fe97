import pytest

from imposter.game import errors


def test_create_room_binds_host_and_announces(coordinator, recorder):
    room = coordinator.create_room("a", "  Alice ")

    assert room.players[0].name == "Alice"
    assert room.host.sid == "a"
    assert coordinator.room_for("a") is room
    assert recorder.members[room.code] == {"a"}
    assert recorder.last("room_created", to="a") == {"roomCode": room.code}

    snapshot = recorder.last("room_update", to=room.code)
    assert snapshot["hostId"] == "a"
    assert snapshot["phase"] == "lobby"
    assert snapshot["players"] == [
        {"id": "a", "name": "Alice", "alive": True, "hasRevealed": False, "connected": True}
    ]


@pytest.mark.parametrize("name, error", [("", errors.NameRequired), ("   ", errors.NameRequired),
                                         ("<b>x</b>", errors.InvalidName), ("x" * 17, errors.InvalidName)])
def test_create_room_rejects_bad_names(coordinator, name, error):
    with pytest.raises(error):
        coordinator.create_room("a", name)
    assert coordinator.list_rooms() == []


def test_join_room(coordinator, recorder):
    room = coordinator.create_room("a", "Alice")
    coordinator.join_room("b", room.code.lower(), "Bob")

    assert [p.name for p in room.players] == ["Alice", "Bob"]
    assert recorder.last("room_joined", to="b") == {"roomCode": room.code}
    assert recorder.members[room.code] == {"a", "b"}
    assert coordinator.room_for("b") is room


def test_join_room_errors(coordinator, lobby):
    with pytest.raises(errors.MissingRoomData):
        coordinator.join_room("d", "", "Dave")
    with pytest.raises(errors.RoomNotFound):
        coordinator.join_room("d", "ZZZZZZ", "Dave")
    with pytest.raises(errors.NameTaken):
        coordinator.join_room("d", lobby.code, "bOB")

    coordinator.start_game("a")
    with pytest.raises(errors.GameAlreadyStarted):
        coordinator.join_room("d", lobby.code, "Dave")
    assert len(lobby.players) == 3


def test_join_room_twice_from_same_connection(coordinator, lobby):
    with pytest.raises(errors.AlreadyInRoom):
        coordinator.join_room("a", lobby.code, "Alicia")

    assert [p.sid for p in lobby.players].count("a") == 1
    assert [p.name for p in lobby.players] == ["Alice", "Bob", "Carol"]
    assert lobby.player_by_sid("a").connected is True


@pytest.mark.parametrize("name", [{"x": 1}, ["Dave"], 42])
def test_non_string_names_rejected(coordinator, lobby, name):
    with pytest.raises(errors.InvalidName):
        coordinator.create_room("x", name)
    with pytest.raises(errors.InvalidName):
        coordinator.join_room("d", lobby.code, name)
    with pytest.raises(errors.MissingRoomData):
        coordinator.join_room("d", ["ABCDEF"], "Dave")

    assert len(coordinator.list_rooms()) == 1
    assert len(lobby.players) == 3


def test_update_settings(coordinator, lobby, recorder):
    coordinator.update_settings("a", {"impostersCount": 2, "category": "Animals", "mode": "no_word"})

    assert lobby.settings.imposters_count == 2
    assert lobby.settings.category == "Animals"
    assert lobby.settings.mode == "no_word"
    snapshot = recorder.last("room_update", to=lobby.code)
    assert snapshot["impostersCount"] == 2
    assert snapshot["category"] == "Animals"
    assert snapshot["mode"] == "no_word"


def test_update_settings_requires_host_in_lobby(coordinator, lobby):
    with pytest.raises(errors.NotHost):
        coordinator.update_settings("b", {"mode": "no_word"})

    coordinator.start_game("a")
    with pytest.raises(errors.GameInProgress):
        coordinator.update_settings("a", {"mode": "no_word"})


@pytest.mark.parametrize("count", [0, 3, 7, "2", True, 1.5])
def test_update_settings_rejects_imposter_counts(coordinator, lobby, count):
    with pytest.raises(errors.InvalidImpostersCount):
        coordinator.update_settings("a", {"impostersCount": count})
    assert lobby.settings.imposters_count == 1


def test_update_settings_applies_fields_up_to_first_failure(coordinator, lobby, recorder):
    recorder.clear()
    with pytest.raises(errors.InvalidCategory):
        coordinator.update_settings("a", {"impostersCount": 2, "category": "Cars", "mode": "no_word"})

    assert lobby.settings.imposters_count == 2
    assert lobby.settings.category == "random"
    assert lobby.settings.mode == "different_word"
    assert recorder.last("room_update", to=lobby.code)["impostersCount"] == 2

    with pytest.raises(errors.InvalidMode):
        coordinator.update_settings("a", {"category": "Food", "mode": "hard"})
    assert lobby.settings.category == "Food"


def test_start_game_validation(coordinator, recorder):
    room = coordinator.create_room("a", "Alice")
    coordinator.join_room("b", room.code, "Bob")

    with pytest.raises(errors.NotHost):
        coordinator.start_game("b")
    with pytest.raises(errors.NotEnoughPlayers):
        coordinator.start_game("a")

    coordinator.join_room("c", room.code, "Carol")
    room.settings.imposters_count = 3
    with pytest.raises(errors.TooManyImposters):
        coordinator.start_game("a")

    room.settings.imposters_count = 1
    coordinator.start_game("a")
    assert room.phase == "reveal"
    assert recorder.last("phase_changed", to=room.code) == {"phase": "reveal"}

    with pytest.raises(errors.GameAlreadyStarted):
        coordinator.start_game("a")


def test_intents_without_room_fail(coordinator):
    with pytest.raises(errors.RoomNotFound):
        coordinator.start_game("nobody")
    with pytest.raises(errors.RoomNotFound):
        coordinator.cast_vote("nobody", "x")


@pytest.mark.parametrize("changes, error", [
    ({"category": ["Animals"]}, errors.InvalidCategory),
    ({"category": {"name": "Animals"}}, errors.InvalidCategory),
    ({"mode": {"x": 1}}, errors.InvalidMode),
    ({"mode": ["no_word"]}, errors.InvalidMode),
])
def test_update_settings_rejects_unhashable_values(coordinator, lobby, changes, error):
    with pytest.raises(error):
        coordinator.update_settings("a", changes)

    assert lobby.settings.category == "random"
    assert lobby.settings.mode == "different_word"
