from flask import Blueprint, jsonify

from wordmatch import get_session
from wordmatch.services import views

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the word match server!'})


@main.route('/api/state', methods=['GET'])
def get_state():
    """Public snapshot: round, leaderboard and who has answered, never the words."""
    return jsonify(views.public_snapshot(get_session().snapshot()))
