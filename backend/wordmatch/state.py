"""Canonical single-room game state.

GameSession owns the active round and the player registry. Every mutator
runs under one lock, because scoring reads across both, and hands back a
SessionSnapshot taken under that same lock. Callers build payloads and do
network I/O from the snapshot after the lock is released.
"""

import logging
import threading
import uuid
from typing import Dict, NamedTuple, Optional

from wordmatch.models import COLLECTING, REVEALED, Player, Round, SessionSnapshot
from wordmatch.services.scoring import score_round
from wordmatch.services.text import sanitize_name
from wordmatch.services.validation import (
    DEFAULT_AFFIX_MIN_LENGTH,
    NOT_COLLECTING,
    Rejection,
    validate_association,
)

logger = logging.getLogger(__name__)


class JoinOutcome(NamedTuple):
    created: bool
    player: Player
    snapshot: SessionSnapshot


class RenameOutcome(NamedTuple):
    name: str
    changed: bool
    snapshot: SessionSnapshot


class SubmitOutcome(NamedTuple):
    rejection: Optional[Rejection]
    joined: bool
    snapshot: SessionSnapshot

    @property
    def accepted(self) -> bool:
        return self.rejection is None


class CloseOutcome(NamedTuple):
    closed: bool
    results: list
    snapshot: SessionSnapshot


def new_id() -> str:
    return uuid.uuid4().hex


class GameSession:
    def __init__(self, name_max_length: int = 24,
                 affix_min_length: int = DEFAULT_AFFIX_MIN_LENGTH):
        self.name_max_length = name_max_length
        self.affix_min_length = affix_min_length
        self._lock = threading.RLock()
        self._round: Optional[Round] = None
        self._players: Dict[str, Player] = {}
        self._join_counter = 0

    # ---- snapshots ----

    def snapshot(self) -> SessionSnapshot:
        with self._lock:
            return self._snapshot()

    def _snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            round=self._round.copy() if self._round else None,
            players=tuple(Player(p.id, p.name, p.score) for p in self._players.values()),
        )

    # ---- registry ----

    def _next_default_name(self) -> str:
        self._join_counter += 1
        return f"Player {self._join_counter}"

    def _clean_or_default(self, name) -> str:
        clean = sanitize_name(name, self.name_max_length) if name is not None else ''
        return clean or self._next_default_name()

    def _ensure(self, player_id: str, desired_name=None):
        player = self._players.get(player_id)
        if player is not None:
            return False, player
        player = Player(id=player_id, name=self._clean_or_default(desired_name))
        self._players[player_id] = player
        logger.info(f"[join] player={player_id} name={player.name!r}")
        return True, player

    def ensure_player(self, player_id: Optional[str] = None, desired_name=None) -> JoinOutcome:
        """Idempotent upsert; an unknown (or missing) id creates a fresh player."""
        with self._lock:
            created, player = self._ensure(player_id or new_id(), desired_name)
            return JoinOutcome(created, Player(player.id, player.name, player.score), self._snapshot())

    def rename(self, player_id: str, new_name) -> RenameOutcome:
        with self._lock:
            created, player = self._ensure(player_id, new_name)
            if created:
                return RenameOutcome(player.name, True, self._snapshot())
            clean = self._clean_or_default(new_name)
            changed = clean != player.name
            if changed:
                player.name = clean
            return RenameOutcome(clean, changed, self._snapshot())

    def remove_player(self, player_id: str) -> Optional[SessionSnapshot]:
        """Drop a player for good; returns None when the id was unknown."""
        with self._lock:
            if self._players.pop(player_id, None) is None:
                return None
            logger.info(f"[leave] player={player_id}")
            return self._snapshot()

    # ---- round lifecycle ----

    def start_round(self, prompt: str = '') -> SessionSnapshot:
        """Open a new collecting round, replacing whatever round existed."""
        with self._lock:
            self._round = Round(id=new_id(), prompt=prompt or '')
            logger.info(f"[round-start] round={self._round.id} prompt={self._round.prompt!r}")
            return self._snapshot()

    def submit(self, player_id: str, raw_word) -> SubmitOutcome:
        """Validate and record (or overwrite) a player's word for the active round."""
        with self._lock:
            joined, _ = self._ensure(player_id)
            rnd = self._round
            if rnd is None or rnd.status != COLLECTING:
                return SubmitOutcome(NOT_COLLECTING, joined, self._snapshot())
            word = raw_word if isinstance(raw_word, str) else ''
            rejection = validate_association(rnd.prompt, word, self.affix_min_length)
            if rejection is None:
                rnd.submissions[player_id] = word
            return SubmitOutcome(rejection, joined, self._snapshot())

    def close_round(self) -> CloseOutcome:
        """Reveal the collecting round and score it once.

        A second call, or a call without a collecting round, is a no-op that
        returns no results.
        """
        with self._lock:
            rnd = self._round
            if rnd is None or rnd.status != COLLECTING:
                return CloseOutcome(False, [], self._snapshot())
            rnd.status = REVEALED
            scored = score_round(rnd.submissions, self._players)
            rnd.results = scored.results
            rnd.points = scored.points
            logger.info(f"[round-close] round={rnd.id} submissions={len(rnd.submissions)} "
                        f"distinct={len(scored.results)}")
            return CloseOutcome(True, [dict(r) for r in scored.results], self._snapshot())

    def reset(self) -> SessionSnapshot:
        """Start a fresh session: no round, no players, default names from 'Player 1'."""
        with self._lock:
            self._round = None
            self._players.clear()
            self._join_counter = 0
            logger.info("[reset] session cleared")
            return self._snapshot()
