from flask import Blueprint, current_app, jsonify, request

from wordmatch import get_session
from wordmatch.broadcast import plan_game_reset, plan_round_revealed, plan_round_started
from wordmatch.services import views
from wordmatch.socketio_events import deliver

host = Blueprint('host', __name__)

_BAD_BODY = object()


def _json_body():
    """Parsed JSON object, {} for an empty body, _BAD_BODY otherwise."""
    if not request.get_data(cache=True):
        return {}
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        return _BAD_BODY
    return data


def _round_response(snap, ok=True, **extra):
    body = {'ok': ok, 'round': views.public_round(snap), 'gameState': snap.game_state}
    body.update(extra)
    return jsonify(body)


def _open_round(prompt):
    snap = get_session().start_round(prompt)
    current_app.logger.info(f"[host-start] round={snap.round.id}")
    deliver(plan_round_started(snap))
    return _round_response(snap)


@host.route('/start', methods=['POST'])
def start_round():
    """Start a new round; a non-empty prompt is required."""
    data = _json_body()
    if data is _BAD_BODY:
        return jsonify({'error': 'bad json'}), 400
    prompt = data.get('prompt')
    if not isinstance(prompt, str) or not prompt:
        return jsonify({'error': 'prompt required'}), 400
    return _open_round(prompt)


@host.route('/next', methods=['POST'])
def next_round():
    """Start the following round; the prompt may be left out."""
    data = _json_body()
    if data is _BAD_BODY:
        return jsonify({'error': 'bad json'}), 400
    prompt = data.get('prompt')
    if prompt is not None and not isinstance(prompt, str):
        return jsonify({'error': 'prompt must be a string'}), 400
    return _open_round(prompt or '')


@host.route('/close', methods=['POST'])
def close_round():
    """Reveal the collecting round. Closing twice scores only once."""
    outcome = get_session().close_round()
    if not outcome.closed:
        current_app.logger.info("[host-close] no collecting round, nothing to do")
        return _round_response(outcome.snapshot, ok=False, results=[])
    deliver(plan_round_revealed(outcome))
    return _round_response(outcome.snapshot, results=outcome.results)


@host.route('/reset', methods=['POST'])
def reset_game():
    """Clear the round and every player; naming restarts at 'Player 1'."""
    snap = get_session().reset()
    current_app.logger.info("[host-reset] session cleared")
    deliver(plan_game_reset(snap))
    return jsonify({'ok': True, 'round': None, 'gameState': snap.game_state})
