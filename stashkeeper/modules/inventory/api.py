"""
Inventory API Blueprint.

Provides REST API endpoints for inventory upload and the item catalog.

Endpoints:
- POST /api/inventory   - Validate and save a full inventory snapshot
- GET  /api/inventory   - Get the caller's saved snapshot
- GET  /api/items       - List item templates (?id=<key> for one)

Authenticated endpoints expect ``Authorization: Bearer <token>``.
"""

import logging
from flask import Blueprint, current_app, jsonify, request

from stashkeeper.core.auth import bearer_token
from stashkeeper.core.result import ErrorCode, Result

logger = logging.getLogger(__name__)

inventory_bp = Blueprint('inventory', __name__)

STATUS_CODES = {
    ErrorCode.UNAUTHENTICATED.value: 401,
    ErrorCode.NOT_FOUND.value: 404,
    ErrorCode.INVALID_ARGUMENT.value: 400,
    ErrorCode.RATE_LIMITED.value: 429,
    ErrorCode.INFRASTRUCTURE.value: 503,
}


def get_inventory_system():
    """InventorySystem built by create_app for this process."""
    return current_app.extensions['stashkeeper.inventory']


def error_response(result: Result):
    """Translate a failed Result into a JSON error response."""
    status = STATUS_CODES.get(result.error_code, 500)
    response = jsonify({
        'success': False,
        'error': result.message,
        'code': result.error_code,
    })
    if status == 429:
        system = get_inventory_system()
        player = system.authenticate(bearer_token(request.headers.get('Authorization')))
        if player:
            retry = system.rate_limiter.retry_after(player.data, system.clock())
            response.headers['Retry-After'] = str(max(1, int(retry + 0.999)))
    return response, status


def _read_upload_body():
    """
    Decode the upload body.

    An empty body means every section is empty. A body that does not parse
    (including one nested deeper than the JSON decoder can follow) is passed
    on as text, so it fails the shape check after authentication and the
    cooldown like any other bad upload.
    """
    if not request.get_data():
        return {}
    try:
        data = request.get_json(force=True, silent=True)
    except RecursionError:
        data = None
    if data is None:
        return request.get_data(as_text=True)
    return data


@inventory_bp.route('/api/inventory', methods=['POST'])
def api_upload_inventory():
    """
    JSON API: Validate and save a full inventory snapshot.

    Request JSON:
        {
            "stash": [{"t": "weapon:sword", "n": 1, "x": 0, "y": 0}],
            "expedition": [],
            "equipment": [{"t": "armor:iron_chest", "n": 1, "slot": "chest"}]
        }

    Returns:
        {
            "success": true,
            "itemCounts": {"stash": 1, "expedition": 0, "equipment": 1}
        }
    """
    try:
        data = _read_upload_body()
        credential = bearer_token(request.headers.get('Authorization'))
        result = get_inventory_system().upload_inventory(credential, data)

        if result.success:
            return jsonify({
                'success': True,
                'itemCounts': result.data['itemCounts']
            })
        return error_response(result)

    except Exception as e:
        logger.error(f"Error saving inventory: {e}", exc_info=True)
        return jsonify({
            'success': False,
            'error': 'Internal error while saving inventory',
            'code': ErrorCode.UNEXPECTED_ERROR.value
        }), 500


@inventory_bp.route('/api/inventory', methods=['GET'])
def api_get_inventory():
    """
    JSON API: Get the caller's saved snapshot.

    Returns:
        {
            "success": true,
            "inventory": {
                "stash": [...],
                "expedition": [...],
                "equipment": [...],
                "updateCount": 3,
                "lastUpdated": "..."
            }
        }
    """
    try:
        credential = bearer_token(request.headers.get('Authorization'))
        result = get_inventory_system().get_inventory(credential)

        if result.success:
            return jsonify({'success': True, 'inventory': result.data})
        return error_response(result)

    except Exception as e:
        logger.error(f"Error loading inventory: {e}", exc_info=True)
        return jsonify({
            'success': False,
            'error': 'Internal error while loading inventory',
            'code': ErrorCode.UNEXPECTED_ERROR.value
        }), 500


@inventory_bp.route('/api/items')
def api_items():
    """
    JSON API: Item template catalog.

    Query:
        id: Optional template key

    Returns:
        One template document, or a list of them. Cacheable for 5 minutes.
    """
    try:
        key = request.args.get('id')
        if key is not None and not key.strip():
            return error_response(Result.fail("Invalid item id", ErrorCode.INVALID_ARGUMENT))

        result = get_inventory_system().get_templates(key)
        if not result.success:
            return error_response(result)

        response = jsonify(result.data)
        response.headers['Cache-Control'] = 'public, max-age=300'
        return response

    except Exception as e:
        logger.error(f"Error fetching items: {e}", exc_info=True)
        return jsonify({
            'success': False,
            'error': 'Failed to fetch items',
            'code': ErrorCode.UNEXPECTED_ERROR.value
        }), 500


__all__ = ['inventory_bp']
