"""JSON response envelope."""

from flask import jsonify


def success(data=None, message='Success', status=200):
    return jsonify({'success': True, 'message': message, 'data': data}), status


def query_bool(args, name):
    """Tri-state boolean query parameter: True, False or None when absent."""
    value = args.get(name)
    if value is None or value == '':
        return None
    return value.lower() in ('1', 'true', 'yes')
