from collections import Counter
from typing import Dict, List, Mapping, NamedTuple

from wordmatch.models import Player
from .text import normalize


class RoundScore(NamedTuple):
    results: List[dict]
    points: Dict[str, int]


def tally(submissions: Mapping[str, str]) -> Counter:
    """Frequency of each normalized word."""
    return Counter(normalize(raw) for raw in submissions.values())


def points_for(freq: int) -> int:
    return max(freq - 1, 0)


def score_round(submissions: Mapping[str, str], players: Mapping[str, Player]) -> RoundScore:
    """Apply scoring for a closed round.

    Every submitter earns (frequency of their normalized word - 1), so a
    unique word earns nothing and a word shared by k players earns k-1 each.
    Submissions of players no longer registered still count toward the
    frequencies but award nothing.
    """
    counts = tally(submissions)
    points: Dict[str, int] = {}
    for player_id, raw in submissions.items():
        player = players.get(player_id)
        if player is None:
            continue
        gained = points_for(counts[normalize(raw)])
        player.score += gained
        points[player_id] = gained

    results = [
        {'word': word, 'freq': freq, 'pointsPerPlayer': points_for(freq)}
        for word, freq in counts.items()
    ]
    results.sort(key=lambda r: (-r['freq'], r['word']))
    return RoundScore(results=results, points=points)
