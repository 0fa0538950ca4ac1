from flask import Blueprint, jsonify, request, current_app
from bingo.services.game.errors import InvalidInput, NotRunning, PoolExhausted


session_api = Blueprint('session', __name__)


def _session():
    return current_app.extensions['bingo_session']


def _json_object():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else None


@session_api.route('/ticket', methods=['POST'])
def issue_ticket():
    data = _json_object() or {}
    ticket = _session().issue_ticket(data.get('name'))
    return jsonify({'ticketId': ticket.id})


@session_api.route('/tickets/bulk', methods=['POST'])
def issue_bulk():
    data = _json_object()
    if data is None:
        raise InvalidInput("request body must be an object with a 'names' list")
    # Destructive: replaces every ticket and sets the expected player count
    tickets = _session().issue_bulk(data.get('names'))
    return jsonify([{'ticketId': t.id, 'name': t.name} for t in tickets])


@session_api.route('/ticket/<int:ticket_id>', methods=['GET'])
def get_ticket(ticket_id):
    return jsonify(_session().get_ticket(ticket_id).to_dict())


@session_api.route('/ready/<int:ticket_id>', methods=['POST'])
def mark_ready(ticket_id):
    all_ready = _session().mark_ready(ticket_id)
    return jsonify({'ok': True, 'allReady': all_ready})


@session_api.route('/start', methods=['POST'])
def start_session():
    return jsonify(_session().start())


@session_api.route('/stop', methods=['POST'])
def stop_session():
    _session().stop()
    return jsonify({'ok': True})


@session_api.route('/draw', methods=['GET'])
def draw_number():
    try:
        result = _session().draw_next()
    except NotRunning:
        return jsonify({'ok': False})
    except PoolExhausted:
        return jsonify({'done': True})
    return jsonify(result)


@session_api.route('/bingo/<int:ticket_id>', methods=['POST'])
def submit_bingo(ticket_id):
    data = _json_object() or {}
    winner = _session().submit_bingo(ticket_id, data.get('marked'))
    return jsonify({'winner': winner})


@session_api.route('/reset', methods=['POST'])
def reset_session():
    _session().reset_keep_players()
    return jsonify({'ok': True})


@session_api.route('/newgame', methods=['POST'])
def new_game():
    _session().new_game()
    return jsonify({'ok': True})


@session_api.route('/state', methods=['GET'])
def get_state():
    payload = _session().state()
    payload['type'] = 'state'
    return jsonify(payload)
