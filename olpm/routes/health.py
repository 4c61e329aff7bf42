"""
Health Routes
Liveness and database status for load balancers
"""
import time

from flask import Blueprint, jsonify
from sqlalchemy.exc import SQLAlchemyError

from olpm.extensions import db
from olpm.utils import now_utc

health_bp = Blueprint('health', __name__)

STARTED_AT = time.monotonic()


@health_bp.route('/health')
def health():
    """Process liveness"""
    return jsonify({
        'status': 'OK',
        'uptime': round(time.monotonic() - STARTED_AT, 3),
        'timestamp': now_utc().isoformat(),
    })


@health_bp.route('/api/status')
def status():
    """API and database status"""
    try:
        db.session.execute(db.text('SELECT 1'))
        database = 'Connected'
    except SQLAlchemyError as exc:
        db.session.rollback()
        database = f'Error: {exc.__class__.__name__}'

    return jsonify({
        'api': 'Online',
        'database': database,
        'timestamp': now_utc().isoformat(),
        'endpoints': {
            'tests': '/api/tests',
        },
    })
