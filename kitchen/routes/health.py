"""Health check."""

from datetime import datetime

from flask import Blueprint

from kitchen.utils.responses import success

health_bp = Blueprint('health', __name__)


@health_bp.route('/health')
def health():
    return success({'status': 'ok', 'timestamp': datetime.utcnow().isoformat()},
                   'Chuks Kitchen API is running')
