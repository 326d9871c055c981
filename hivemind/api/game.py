"""Game API endpoints."""
from flask import Blueprint, request, jsonify
from hivemind.api.responses import command_response
from hivemind.app import get_simulation

game_bp = Blueprint('game', __name__)

@game_bp.before_request
def catch_up_simulation():
    """Apply live ticks for wall-clock time elapsed since the last request."""
    get_simulation().catch_up()

@game_bp.route('/state', methods=['GET'])
def get_game_state():
    """Get current game state."""
    return jsonify({'game_state': get_simulation().get_snapshot()})

@game_bp.route('/catalog', methods=['GET'])
def get_catalog():
    """Get unit and evolution bonus costs and availability."""
    return jsonify({'catalog': get_simulation().get_catalog()})

@game_bp.route('/notifications', methods=['GET'])
def get_notifications():
    """Get active (unexpired) notifications."""
    return jsonify({'notifications': get_simulation().get_snapshot()['notifications']})

@game_bp.route('/notifications/<notification_id>', methods=['DELETE'])
def dismiss_notification(notification_id):
    """Dismiss a notification before it expires."""
    return command_response(get_simulation().dismiss_notification(notification_id), key='dismissed')

@game_bp.route('/start', methods=['POST'])
def start_game():
    """Resume live ticking."""
    simulation = get_simulation()
    simulation.start()
    return jsonify({'success': True, 'game_state': simulation.get_snapshot()})

@game_bp.route('/pause', methods=['POST'])
def pause_game():
    """Pause live ticking."""
    simulation = get_simulation()
    simulation.pause()
    return jsonify({'success': True, 'game_state': simulation.get_snapshot()})

@game_bp.route('/reset', methods=['POST'])
def reset_game():
    """Reset progress to the initial state (paused)."""
    simulation = get_simulation()
    simulation.reset()
    return jsonify({'success': True, 'game_state': simulation.get_snapshot()})

@game_bp.route('/speed', methods=['POST'])
def set_speed():
    """Set the game speed multiplier."""
    data = request.get_json(silent=True) or {}

    if 'multiplier' not in data:
        return jsonify({'error': 'Missing multiplier'}), 400

    return command_response(get_simulation().set_speed(data['multiplier']), key='game_speed')

@game_bp.route('/purchase/unit', methods=['POST'])
def purchase_unit():
    """Purchase one unit of a kind."""
    data = request.get_json(silent=True) or {}

    if not data.get('kind'):
        return jsonify({'error': 'Missing kind'}), 400

    return command_response(get_simulation().purchase_unit(data['kind']))

@game_bp.route('/purchase/bonus', methods=['POST'])
def purchase_bonus():
    """Purchase an evolution bonus with evolution points."""
    data = request.get_json(silent=True) or {}

    if not data.get('flag'):
        return jsonify({'error': 'Missing flag'}), 400

    return command_response(get_simulation().purchase_bonus(data['flag']))
