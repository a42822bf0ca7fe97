# Client -> server
CREATE_ROOM = "create_room"
JOIN_ROOM = "join_room"
RECONNECT_TO_ROOM = "reconnect_to_room"
UPDATE_SETTINGS = "update_settings"
START_GAME = "start_game"
REVEAL_WORD = "reveal_word"
SUBMIT_CLUE = "submit_clue"
CAST_VOTE = "cast_vote"
RESTART_GAME = "restart_game"

# Server -> client
ROOM_CREATED = "room_created"
ROOM_JOINED = "room_joined"
RECONNECT_SUCCESS = "reconnect_success"
RECONNECT_FAILED = "reconnect_failed"
ROOM_UPDATE = "room_update"
ROLE_ASSIGNED = "role_assigned"
PHASE_CHANGED = "phase_changed"
TURN_CHANGED = "turn_changed"
VOTE_CAST = "vote_cast"
REVOTE_STARTED = "revote_started"
PLAYER_ELIMINATED = "player_eliminated"
GAME_OVER = "game_over"
ERROR_MESSAGE = "error_message"
