import json

import pytest

from wordmatch import protocol
from wordmatch.broadcast import (
    Audience,
    ConnectionRegistry,
    HostRole,
    PlayerRole,
    ViewerRole,
    plan_game_reset,
    plan_host_hello,
    plan_player_hello,
    plan_player_left,
    plan_rename,
    plan_round_revealed,
    plan_round_started,
    plan_submission,
    plan_viewer_hello,
)
from wordmatch.state import GameSession

RAW_WORDS = ('Apfel', 'Birne')


@pytest.fixture()
def revealed():
    session = GameSession()
    for pid in ('p1', 'p2', 'p3'):
        session.ensure_player(pid)
    session.start_round('Obst')
    session.submit('p1', 'Apfel')
    session.submit('p2', 'apfel')
    session.submit('p3', 'Birne')
    return session, session.close_round()


def _public(plan):
    return [d for d in plan if d.audience in (Audience.EVERYONE, Audience.PUBLIC)]


def _leaks_words(deliveries):
    text = json.dumps([d.payload for d in deliveries])
    return any(f'"{w}"' in text for w in RAW_WORDS)


def test_every_payload_carries_game_state(revealed):
    session, outcome = revealed
    plan = plan_round_revealed(outcome) + plan_host_hello(outcome.snapshot)
    assert all(d.payload['gameState'] == 'revealed' for d in plan)


def test_reveal_sends_words_to_hosts_only(revealed):
    _, outcome = revealed
    plan = plan_round_revealed(outcome)
    host_reveal = next(d for d in plan if d.audience is Audience.HOSTS and d.event == protocol.ROUND_REVEALED)
    public_reveal = next(d for d in plan if d.audience is Audience.PUBLIC)

    assert {r['word'] for r in host_reveal.payload['perPlayerRound']} == {'Apfel', 'apfel', 'Birne'}
    assert all('word' not in r for r in public_reveal.payload['perPlayerRound'])
    assert public_reveal.payload['results'] == host_reveal.payload['results']
    assert not _leaks_words(_public(plan))


def test_reveal_per_player_summary(revealed):
    _, outcome = revealed
    public_reveal = next(d for d in plan_round_revealed(outcome) if d.audience is Audience.PUBLIC)
    rows = {r['id']: r for r in public_reveal.payload['perPlayerRound']}
    assert rows['p1']['pointsGained'] == 1 and rows['p1']['totalScore'] == 1
    assert rows['p3']['pointsGained'] == 0 and rows['p3']['submitted']


def test_second_close_plans_nothing(revealed):
    session, _ = revealed
    assert plan_round_revealed(session.close_round()) == []


def test_public_plans_never_contain_raw_words(revealed):
    session, outcome = revealed
    snap = outcome.snapshot
    plans = [
        plan_viewer_hello(snap),
        plan_player_hello(snap, snap.player('p1')),
        plan_player_left(snap),
        plan_game_reset(snap),
        plan_round_started(snap),
    ]
    for plan in plans:
        assert not _leaks_words(_public(plan))
    assert not _leaks_words(plan_viewer_hello(snap))
    # players only see their own flag and ids, never words
    assert not _leaks_words([plan_player_hello(snap, snap.player('p1'))[0]])


def test_collecting_progress_shows_ids_not_words():
    session = GameSession()
    session.ensure_player('p1')
    session.start_round('Obst')
    outcome = session.submit('p1', 'Apfel')
    plan = plan_submission(outcome)

    assert [d.audience for d in plan][0] is Audience.SENDER
    assert plan[0].event == protocol.SUBMIT_ACK
    progress = next(d for d in plan if d.event == protocol.ROUND_PROGRESS)
    assert progress.payload['submittedIds'] == ['p1']
    count = next(d for d in plan if d.event == protocol.SUBMISSION_COUNT)
    assert count.payload['count'] == 1
    overview = next(d for d in plan if d.event == protocol.PLAYERS_OVERVIEW)
    assert overview.audience is Audience.HOSTS
    assert overview.payload['players'][0]['word'] == 'Apfel'
    assert not _leaks_words(_public(plan))


def test_rejected_submission_only_answers_sender():
    session = GameSession()
    session.ensure_player('p1')
    session.start_round('Dachziegel')
    plan = plan_submission(session.submit('p1', 'Dach'))
    assert [(d.audience, d.event) for d in plan] == [(Audience.SENDER, protocol.SUBMIT_REJECT)]
    assert plan[0].payload['code'] == 'affix'


def test_unchanged_rename_only_acks():
    session = GameSession()
    session.ensure_player('p1', 'Anna')
    assert [d.event for d in plan_rename(session.rename('p1', 'Anna'))] == [protocol.RENAME_ACK]
    events = [d.event for d in plan_rename(session.rename('p1', 'Berta'))]
    assert events == [protocol.RENAME_ACK, protocol.LEADERBOARD, protocol.PLAYERS_OVERVIEW]


def test_round_started_resets_progress():
    snap = GameSession().start_round('Obst')
    plan = plan_round_started(snap)
    assert plan[0].event == protocol.ROUND_STARTED
    progress = next(d for d in plan if d.event == protocol.ROUND_PROGRESS)
    assert progress.payload['submittedIds'] == []


def test_player_left_during_idle_skips_progress():
    session = GameSession()
    session.ensure_player('p1')
    session.ensure_player('p2')
    snap = session.remove_player('p1')
    assert [d.event for d in plan_player_left(snap)] == [protocol.PLAYERS_OVERVIEW, protocol.LEADERBOARD]


def test_connection_role_is_fixed_at_first_tag():
    registry = ConnectionRegistry()
    assert registry.tag('sid1', PlayerRole('p1')) == PlayerRole('p1')
    assert registry.tag('sid1', HostRole()) == PlayerRole('p1')
    registry.tag('sid2', ViewerRole())
    assert registry.count(ViewerRole) == 1
    assert registry.release('sid1') == PlayerRole('p1')
    assert registry.role_of('sid1') is None


# ---- inbound protocol ----

def test_parse_hello_defaults_to_player():
    assert protocol.parse_inbound('hello', None) == protocol.Hello()
    msg = protocol.parse_inbound('hello', {'playerId': 'abc', 'desiredName': 'Anna'})
    assert msg == protocol.Hello(role='player', player_id='abc', desired_name='Anna')
    assert protocol.parse_inbound('hello', {'role': 'viewer'}).role == 'viewer'


@pytest.mark.parametrize('event,data', [
    ('bogus', {'word': 'x'}),
    ('hello', {'role': 'admin'}),
    ('hello', {'playerId': 42}),
    ('hello', 'not-a-dict'),
    ('rename', {}),
    ('rename', None),
    ('submit', {'word': 5}),
    ('submit', ['Apfel']),
])
def test_unknown_or_malformed_messages_are_dropped(event, data):
    assert protocol.parse_inbound(event, data) is None


def test_parse_submit_and_rename():
    assert protocol.parse_inbound('submit', {'word': 'Apfel'}) == protocol.Submit('Apfel')
    assert protocol.parse_inbound('rename', {'name': 'Anna'}) == protocol.Rename('Anna')


def test_release_player_reports_last_socket():
    registry = ConnectionRegistry()
    registry.tag('old', PlayerRole('p1'))
    registry.tag('new', PlayerRole('p1'))
    assert registry.holders('p1') == 2

    assert registry.release_player('old') == (PlayerRole('p1'), False)
    assert registry.holders('p1') == 1
    assert registry.release_player('new') == (PlayerRole('p1'), True)
    assert registry.release_player('gone') == (None, False)
    registry.tag('v', ViewerRole())
    assert registry.release_player('v') == (ViewerRole(), False)


def test_departed_submitter_is_left_out_of_projections():
    session = GameSession()
    session.ensure_player('a')
    session.ensure_player('b')
    session.start_round('Obst')
    session.submit('a', 'Apfel')
    session.submit('b', 'Apfel')

    snap = session.remove_player('a')
    plan = plan_player_left(snap)
    overview = next(d for d in plan if d.event == protocol.PLAYERS_OVERVIEW)
    assert [(p['id'], p['word']) for p in overview.payload['players']] == [('b', 'Apfel')]
    progress = next(d for d in plan if d.event == protocol.ROUND_PROGRESS)
    assert progress.payload['submittedIds'] == ['b']
    count = next(d for d in plan if d.event == protocol.SUBMISSION_COUNT)
    assert count.payload['count'] == 1

    reveal = plan_round_revealed(session.close_round())
    host_reveal = reveal[0]
    # the departed word still counts toward the frequency
    assert host_reveal.payload['results'] == [{'word': 'apfel', 'freq': 2, 'pointsPerPlayer': 1}]
    assert host_reveal.payload['round']['submissionCount'] == 1
    rows = host_reveal.payload['perPlayerRound']
    assert [(r['id'], r['pointsGained'], r['totalScore']) for r in rows] == [('b', 1, 1)]
    assert host_reveal.payload['leaderboard'] == [{'id': 'b', 'name': 'Player 2', 'score': 1}]
