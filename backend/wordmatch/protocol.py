"""Socket message shapes.

Inbound events form a closed set: ``hello``, ``rename`` and ``submit``.
``parse_inbound`` turns an event name plus payload into one of the
dataclasses below, or None for anything unknown or malformed.
"""

from dataclasses import dataclass
from typing import Optional, Union

ROLE_HOST = 'host'
ROLE_PLAYER = 'player'
ROLE_VIEWER = 'viewer'
ROLES = (ROLE_HOST, ROLE_PLAYER, ROLE_VIEWER)

# Client -> server
HELLO = 'hello'
RENAME = 'rename'
SUBMIT = 'submit'
INBOUND_EVENTS = (HELLO, RENAME, SUBMIT)

# Server -> client
HELLO_ACK = 'hello_ack'
HOST_HELLO_ACK = 'host_hello_ack'
VIEWER_HELLO_ACK = 'viewer_hello_ack'
RENAME_ACK = 'rename_ack'
SUBMIT_ACK = 'submit_ack'
SUBMIT_REJECT = 'submit_reject'
ROUND_STARTED = 'round_started'
ROUND_PROGRESS = 'round_progress'
SUBMISSION_COUNT = 'submission_count'
ROUND_REVEALED = 'round_revealed'
PLAYERS_OVERVIEW = 'players_overview'
LEADERBOARD = 'leaderboard'
GAME_RESET = 'game_reset'


@dataclass(frozen=True)
class Hello:
    role: str = ROLE_PLAYER
    player_id: Optional[str] = None
    desired_name: Optional[str] = None


@dataclass(frozen=True)
class Rename:
    name: str


@dataclass(frozen=True)
class Submit:
    word: str


Inbound = Union[Hello, Rename, Submit]


def _optional_str(data: dict, key: str) -> Optional[str]:
    value = data.get(key)
    if value is None or value == '':
        return None
    if not isinstance(value, str):
        raise ValueError(key)
    return value


def _parse_hello(data: dict) -> Hello:
    role = data.get('role') or ROLE_PLAYER
    if role not in ROLES:
        raise ValueError('role')
    return Hello(
        role=role,
        player_id=_optional_str(data, 'playerId'),
        desired_name=_optional_str(data, 'desiredName'),
    )


def _parse_rename(data: dict) -> Rename:
    name = data.get('name')
    if not isinstance(name, str):
        raise ValueError('name')
    return Rename(name=name)


def _parse_submit(data: dict) -> Submit:
    word = data.get('word')
    if not isinstance(word, str):
        raise ValueError('word')
    return Submit(word=word)


_PARSERS = {
    HELLO: _parse_hello,
    RENAME: _parse_rename,
    SUBMIT: _parse_submit,
}


def parse_inbound(event: str, data) -> Optional[Inbound]:
    parser = _PARSERS.get(event)
    if parser is None:
        return None
    if data is None and event == HELLO:
        data = {}
    if not isinstance(data, dict):
        return None
    try:
        return parser(data)
    except ValueError:
        return None
