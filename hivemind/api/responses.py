"""Shared helpers for turning command results into JSON responses."""
from flask import current_app, jsonify

# CommandResult.reason -> HTTP status
REASON_STATUS = {
    'invalid': 400,
    'corrupt_data': 400,
    'not_found': 404,
    'locked': 409,
    'insufficient_resources': 409,
    'migration': 409,
    'storage_quota': 507,
}

def command_response(result, status=200, key='result'):
    """JSON response for a CommandResult."""
    if result.success:
        return jsonify({'success': True, key: result.value}), status

    current_app.logger.info(f"Command rejected ({result.reason}): {result.message}")
    return jsonify({
        'success': False,
        'error': result.message,
        'reason': result.reason
    }), REASON_STATUS.get(result.reason, 400)
