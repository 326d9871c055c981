"""Save slot API endpoints."""
from flask import Blueprint, request, jsonify
from hivemind.api.responses import command_response
from hivemind.app import get_simulation

saves_bp = Blueprint('saves', __name__)

@saves_bp.before_request
def catch_up_simulation():
    """Saves capture the state as of now, so apply pending ticks first."""
    get_simulation().catch_up()

@saves_bp.route('', methods=['GET'])
def list_saves():
    """List save slots, most recent first."""
    return jsonify({'saves': get_simulation().list_saves()})

@saves_bp.route('', methods=['POST'])
def save_game():
    """Save the current game to a new slot."""
    data = request.get_json(silent=True) or {}
    return command_response(get_simulation().save(data.get('name')), status=201, key='save')

@saves_bp.route('', methods=['DELETE'])
def clear_saves():
    """Delete every save slot."""
    return command_response(get_simulation().clear_saves())

@saves_bp.route('/quick', methods=['POST'])
def quick_save():
    """Save to a new 'Quick Save' slot."""
    return command_response(get_simulation().quick_save(), status=201, key='save')

@saves_bp.route('/quick', methods=['GET'])
def get_quick_save():
    """Most recent quick save slot."""
    slot = get_simulation().get_quick_save()

    if slot is None:
        return jsonify({'error': 'No quick save'}), 404

    return jsonify({'save': slot})

@saves_bp.route('/usage', methods=['GET'])
def storage_usage():
    """Storage used by saves."""
    return jsonify({'usage': get_simulation().storage_usage()})

@saves_bp.route('/import', methods=['POST'])
def import_save():
    """Import an exported save token into a new slot."""
    data = request.get_json(silent=True) or {}

    if not data.get('token'):
        return jsonify({'error': 'Missing token'}), 400

    return command_response(get_simulation().import_save(data['token'], data.get('name')),
                            status=201, key='save')

@saves_bp.route('/<save_id>/load', methods=['POST'])
def load_save(save_id):
    """Replace the current game with a save slot's state."""
    return command_response(get_simulation().load(save_id), key='game_state')

@saves_bp.route('/<save_id>', methods=['PATCH'])
def rename_save(save_id):
    """Rename a save slot."""
    data = request.get_json(silent=True) or {}

    if not data.get('name'):
        return jsonify({'error': 'Missing name'}), 400

    return command_response(get_simulation().rename(save_id, data['name']), key='save')

@saves_bp.route('/<save_id>', methods=['DELETE'])
def delete_save(save_id):
    """Delete a save slot."""
    return command_response(get_simulation().delete(save_id))

@saves_bp.route('/<save_id>/export', methods=['GET'])
def export_save(save_id):
    """Export a save slot as a portable token."""
    return command_response(get_simulation().export(save_id), key='token')
