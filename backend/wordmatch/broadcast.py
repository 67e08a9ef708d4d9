"""Role tagging and fan-out planning for the live stream.

Each connection is tagged once, at handshake, with an immutable role. For
every state change the ``plan_*`` functions decide which audience receives
which projection, as an ordered list of Delivery tuples. The socket layer
only executes the plan, so the visibility rules can be tested without a
socket. Unicast acknowledgements always come first in a plan.
"""

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, NamedTuple, Optional, Tuple, Union

from wordmatch import protocol
from wordmatch.models import COLLECTING, Player, SessionSnapshot
from wordmatch.services import views
from wordmatch.state import CloseOutcome, RenameOutcome, SubmitOutcome


@dataclass(frozen=True)
class HostRole:
    pass


@dataclass(frozen=True)
class ViewerRole:
    pass


@dataclass(frozen=True)
class PlayerRole:
    player_id: str


Role = Union[HostRole, ViewerRole, PlayerRole]

ROOM_PENDING = 'role:pending'
ROOM_HOSTS = 'role:host'
ROOM_PLAYERS = 'role:player'
ROOM_VIEWERS = 'role:viewer'
# Everyone who must never see raw words
PUBLIC_ROOMS = (ROOM_PLAYERS, ROOM_VIEWERS, ROOM_PENDING)


def room_for(role: Role) -> str:
    if isinstance(role, HostRole):
        return ROOM_HOSTS
    if isinstance(role, PlayerRole):
        return ROOM_PLAYERS
    return ROOM_VIEWERS


def role_name(role: Role) -> str:
    if isinstance(role, HostRole):
        return protocol.ROLE_HOST
    if isinstance(role, PlayerRole):
        return protocol.ROLE_PLAYER
    return protocol.ROLE_VIEWER


class ConnectionRegistry:
    """sid -> Role; a sid keeps the first role it was tagged with."""

    def __init__(self):
        self._lock = threading.Lock()
        self._roles: Dict[str, Role] = {}

    def tag(self, sid: str, role: Role) -> Role:
        with self._lock:
            return self._roles.setdefault(sid, role)

    def role_of(self, sid: str) -> Optional[Role]:
        with self._lock:
            return self._roles.get(sid)

    def release(self, sid: str) -> Optional[Role]:
        with self._lock:
            return self._roles.pop(sid, None)

    def release_player(self, sid: str) -> Tuple[Optional[Role], bool]:
        """Untag a sid; the flag tells whether it was the last socket of its player."""
        with self._lock:
            role = self._roles.pop(sid, None)
            if not isinstance(role, PlayerRole):
                return role, False
            return role, role not in self._roles.values()

    def holders(self, player_id: str) -> int:
        with self._lock:
            return sum(1 for r in self._roles.values() if r == PlayerRole(player_id))

    def count(self, role_type) -> int:
        with self._lock:
            return sum(1 for r in self._roles.values() if isinstance(r, role_type))


class Audience(Enum):
    SENDER = 'sender'
    EVERYONE = 'everyone'
    HOSTS = 'hosts'
    PUBLIC = 'public'


class Delivery(NamedTuple):
    audience: Audience
    event: str
    payload: dict


def _msg(audience: Audience, event: str, snap: SessionSnapshot, **fields) -> Delivery:
    payload = dict(fields)
    payload['gameState'] = snap.game_state
    return Delivery(audience, event, payload)


def _overview(snap: SessionSnapshot) -> Delivery:
    return _msg(Audience.HOSTS, protocol.PLAYERS_OVERVIEW, snap,
                players=views.players_overview(snap, include_words=True))


def _leaderboard(snap: SessionSnapshot) -> Delivery:
    return _msg(Audience.EVERYONE, protocol.LEADERBOARD, snap,
                leaderboard=views.leaderboard(snap))


def _progress(snap: SessionSnapshot) -> List[Delivery]:
    ids = views.live_submitted_ids(snap)
    return [
        _msg(Audience.EVERYONE, protocol.SUBMISSION_COUNT, snap, count=len(ids)),
        _msg(Audience.EVERYONE, protocol.ROUND_PROGRESS, snap, submittedIds=ids),
    ]


# ---- handshakes ----

def plan_player_hello(snap: SessionSnapshot, player: Player) -> List[Delivery]:
    ack = _msg(
        Audience.SENDER, protocol.HELLO_ACK, snap,
        playerId=player.id,
        name=player.name,
        round=views.public_round(snap),
        leaderboard=views.leaderboard(snap),
        alreadySubmitted=bool(snap.round and player.id in snap.round.submissions),
        submittedIds=views.live_submitted_ids(snap),
        results=views.round_results(snap),
    )
    return [
        ack,
        _leaderboard(snap),
        _msg(Audience.EVERYONE, protocol.SUBMISSION_COUNT, snap,
             count=len(views.live_submitted_ids(snap))),
        _overview(snap),
    ]


def plan_host_hello(snap: SessionSnapshot) -> List[Delivery]:
    ack = _msg(
        Audience.SENDER, protocol.HOST_HELLO_ACK, snap,
        round=views.public_round(snap),
        leaderboard=views.leaderboard(snap),
        submissionCount=len(views.submitted_ids(snap)),
        submittedIds=views.live_submitted_ids(snap),
        results=views.round_results(snap),
        perPlayerRound=views.per_player_round(snap, include_words=True),
    )
    overview = _msg(Audience.SENDER, protocol.PLAYERS_OVERVIEW, snap,
                    players=views.players_overview(snap, include_words=True))
    return [ack, overview]


def plan_viewer_hello(snap: SessionSnapshot) -> List[Delivery]:
    body = views.public_snapshot(snap)
    body.pop('gameState')
    return [_msg(Audience.SENDER, protocol.VIEWER_HELLO_ACK, snap, **body)]


# ---- player actions ----

def plan_rename(outcome: RenameOutcome) -> List[Delivery]:
    snap = outcome.snapshot
    plan = [_msg(Audience.SENDER, protocol.RENAME_ACK, snap, name=outcome.name)]
    if outcome.changed:
        plan += [_leaderboard(snap), _overview(snap)]
    return plan


def plan_submission(outcome: SubmitOutcome) -> List[Delivery]:
    snap = outcome.snapshot
    if not outcome.accepted:
        plan = [_msg(Audience.SENDER, protocol.SUBMIT_REJECT, snap,
                     reason=outcome.rejection.reason, code=outcome.rejection.code)]
        if outcome.joined:
            plan += [_leaderboard(snap), _overview(snap)]
        return plan

    plan = [_msg(Audience.SENDER, protocol.SUBMIT_ACK, snap, ok=True)]
    if outcome.joined:
        plan.append(_leaderboard(snap))
    plan += _progress(snap)
    plan.append(_overview(snap))
    return plan


def plan_player_left(snap: SessionSnapshot) -> List[Delivery]:
    plan = [_overview(snap), _leaderboard(snap)]
    if snap.game_state == COLLECTING:
        plan += _progress(snap)
    return plan


# ---- host controls ----

def plan_round_started(snap: SessionSnapshot) -> List[Delivery]:
    return [
        _msg(Audience.EVERYONE, protocol.ROUND_STARTED, snap, round=views.public_round(snap)),
        _overview(snap),
    ] + _progress(snap)


def plan_round_revealed(outcome: CloseOutcome) -> List[Delivery]:
    if not outcome.closed:
        return []
    snap = outcome.snapshot
    common = {
        'round': views.public_round(snap),
        'results': views.round_results(snap),
        'leaderboard': views.leaderboard(snap),
    }
    return [
        _msg(Audience.HOSTS, protocol.ROUND_REVEALED, snap,
             perPlayerRound=views.per_player_round(snap, include_words=True), **common),
        _msg(Audience.PUBLIC, protocol.ROUND_REVEALED, snap,
             perPlayerRound=views.per_player_round(snap), **common),
        _overview(snap),
    ]


def plan_game_reset(snap: SessionSnapshot) -> List[Delivery]:
    return [
        _msg(Audience.EVERYONE, protocol.GAME_RESET, snap, round=None,
             leaderboard=views.leaderboard(snap)),
        _overview(snap),
    ]
