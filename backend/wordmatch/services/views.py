"""Role-scoped projections of a SessionSnapshot.

Only functions taking ``include_words`` can expose raw submitted words, and
only when the caller asks for the host variant.
"""

from typing import List, Optional

from wordmatch.models import COLLECTING, REVEALED, SessionSnapshot


def public_round(snap: SessionSnapshot) -> Optional[dict]:
    # submissionCount counts registered players only; results[].freq also
    # counts words of players who left mid-round
    if snap.round is None:
        return None
    return {
        'id': snap.round.id,
        'prompt': snap.round.prompt,
        'status': snap.round.status,
        'submissionCount': len(submitted_ids(snap)),
    }


def leaderboard(snap: SessionSnapshot) -> List[dict]:
    # sorted() is stable, ties keep join order
    return [p.to_dict() for p in sorted(snap.players, key=lambda p: -p.score)]


def submitted_ids(snap: SessionSnapshot) -> List[str]:
    """Registered players that have a word in the current round."""
    if snap.round is None:
        return []
    known = {p.id for p in snap.players}
    return [pid for pid in snap.round.submissions if pid in known]


def live_submitted_ids(snap: SessionSnapshot) -> List[str]:
    """Who-has-answered set; empty outside collecting."""
    if snap.game_state != COLLECTING:
        return []
    return submitted_ids(snap)


def players_overview(snap: SessionSnapshot, include_words: bool = False) -> List[dict]:
    submissions = snap.round.submissions if snap.round else {}
    rows = []
    for p in snap.players:
        submitted = p.id in submissions
        row = {'id': p.id, 'name': p.name, 'score': p.score, 'submitted': submitted}
        if include_words and submitted:
            row['word'] = submissions[p.id]
        rows.append(row)
    rows.sort(key=lambda r: -r['score'])
    return rows


def round_results(snap: SessionSnapshot) -> List[dict]:
    if snap.round is None or snap.round.status != REVEALED:
        return []
    return [dict(r) for r in snap.round.results or []]


def per_player_round(snap: SessionSnapshot, include_words: bool = False) -> List[dict]:
    """Reveal summary for every registered player."""
    rnd = snap.round
    if rnd is None or rnd.status != REVEALED:
        return []
    rows = []
    for p in snap.players:
        submitted = p.id in rnd.submissions
        row = {
            'id': p.id,
            'name': p.name,
            'submitted': submitted,
            'pointsGained': rnd.points.get(p.id, 0),
            'totalScore': p.score,
        }
        if include_words:
            row['word'] = rnd.submissions[p.id] if submitted else ''
        rows.append(row)
    return rows


def public_snapshot(snap: SessionSnapshot) -> dict:
    """What any observer may see; also the viewer handshake body."""
    payload = {
        'gameState': snap.game_state,
        'round': public_round(snap),
        'leaderboard': leaderboard(snap),
        'submittedIds': live_submitted_ids(snap),
    }
    if snap.game_state == REVEALED:
        payload['results'] = round_results(snap)
    return payload
