"""Errors raised by the game coordinator.

Every error is recoverable: the handler reports ``message`` to the
connection that sent the intent and the room is left as it was. The kind
(the direct base class) only matters for logging and tests.
"""

from __future__ import annotations


class GameError(Exception):
    message = "Something went wrong"

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationError(GameError):
    pass


class AuthorizationError(GameError):
    pass


class PhaseError(GameError):
    pass


class StateError(GameError):
    pass


class NotFoundError(GameError):
    pass


# Validation
class NameRequired(ValidationError):
    message = "Player name is required"


class InvalidName(ValidationError):
    message = "Invalid player name"


class MissingRoomData(ValidationError):
    message = "Room code and player name are required"


class InvalidData(ValidationError):
    message = "Invalid reconnection data"


class InvalidImpostersCount(ValidationError):
    message = "Invalid imposter count"


class InvalidCategory(ValidationError):
    message = "Invalid category"


class InvalidMode(ValidationError):
    message = "Invalid game mode"


class EmptyClue(ValidationError):
    message = "Clue cannot be empty"


class ClueTooLong(ValidationError):
    message = "Clue is too long"


# Not found
class RoomNotFound(NotFoundError):
    message = "Room not found"


class PlayerNotFound(NotFoundError):
    message = "Player not found in room"


# Authorization
class NotHost(AuthorizationError):
    message = "Only the host can do that"


# Phase
class GameAlreadyStarted(PhaseError):
    message = "Game already started"


class GameInProgress(PhaseError):
    message = "Cannot update settings after game started"


class NotInRevealPhase(PhaseError):
    message = "Not in reveal phase"


class NotInChatPhase(PhaseError):
    message = "Not in chat phase"


class NotInVotingPhase(PhaseError):
    message = "Not in voting phase"


class NotGameOver(PhaseError):
    message = "Can only restart after game over"


# State
class NameTaken(StateError):
    message = "Name already taken in this room"


class AlreadyInRoom(StateError):
    message = "You are already in this room"


class NotEnoughPlayers(StateError):
    message = "Need at least 3 players to start"


class TooManyImposters(StateError):
    message = "Too many imposters"


class NotAlive(StateError):
    message = "You are not alive"


class NotYourTurn(StateError):
    message = "Not your turn"


class AlreadySubmittedClue(StateError):
    message = "Already submitted clue this round"


class TiedPlayerCannotVote(StateError):
    message = "Tied players cannot vote in revote"


class SelfVote(StateError):
    message = "Cannot vote for yourself"


class InvalidTarget(StateError):
    message = "Invalid vote target"


class AlreadyVoted(StateError):
    message = "Already voted"
