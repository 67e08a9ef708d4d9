from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

IDLE = 'idle'
COLLECTING = 'collecting'
REVEALED = 'revealed'


@dataclass
class Player:
    id: str
    name: str
    score: int = 0

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'score': self.score,
        }


@dataclass
class Round:
    id: str
    prompt: str
    status: str = COLLECTING
    # player id -> raw word as typed
    submissions: Dict[str, str] = field(default_factory=dict)
    # Filled on close: public results and points gained per player id
    results: Optional[List[dict]] = None
    points: Dict[str, int] = field(default_factory=dict)

    def copy(self) -> 'Round':
        return Round(
            id=self.id,
            prompt=self.prompt,
            status=self.status,
            submissions=dict(self.submissions),
            results=[dict(r) for r in self.results] if self.results is not None else None,
            points=dict(self.points),
        )


@dataclass(frozen=True)
class SessionSnapshot:
    """Consistent copy of the round and the registry, taken under the session lock."""
    round: Optional[Round]
    players: Tuple[Player, ...]

    @property
    def game_state(self) -> str:
        if self.round is None:
            return IDLE
        return self.round.status

    def player(self, player_id) -> Optional[Player]:
        for p in self.players:
            if p.id == player_id:
                return p
        return None
