"""
Health check endpoints for monitoring the application and its database.

These endpoints are used by:
- The hosting platform to determine service health
- Load balancers to route traffic only to healthy instances
"""

import os
from datetime import datetime

from flask import Blueprint, current_app, jsonify
from sqlalchemy import inspect, text

from seo_manager.extensions import db


health_bp = Blueprint('health', __name__)

REQUIRED_TABLES = {'users', 'content_items', 'content_seo_overrides', 'seoog_settings'}


@health_bp.route('/health')
def health_check():
    """
    Lightweight health check for load balancer probes.

    Does NOT check database connectivity to keep response time low.
    """
    return jsonify({
        'status': 'healthy',
        'timestamp': datetime.utcnow().isoformat(),
        'service': 'seo-opengraph-manager',
    }), 200


@health_bp.route('/health/ready')
def readiness_check():
    """
    Readiness check including database connectivity and schema.

    Returns 200 only when the database answers and every table the
    SEO engines read from exists.
    """
    checks = {
        'application': 'healthy',
        'database': 'unknown',
        'timestamp': datetime.utcnow().isoformat(),
    }

    status_code = 200

    try:
        db.session.execute(text('SELECT 1'))
        db.session.commit()
        checks['database'] = 'healthy'
    except Exception as exc:
        checks['database'] = 'unhealthy'
        checks['database_error'] = str(exc)
        status_code = 503
        current_app.logger.error('Database health check failed: %s', exc, exc_info=True)
        db.session.rollback()

    if checks['database'] == 'healthy':
        try:
            tables = set(inspect(db.engine).get_table_names())
            missing = REQUIRED_TABLES - tables
            if missing:
                checks['schema'] = 'incomplete'
                checks['missing_tables'] = sorted(missing)
                status_code = 503
            else:
                checks['schema'] = 'complete'
        except Exception as exc:
            checks['schema'] = 'unknown'
            checks['schema_error'] = str(exc)
            current_app.logger.error('Schema health check failed: %s', exc, exc_info=True)

    checks['overall'] = 'healthy' if status_code == 200 else 'unhealthy'

    return jsonify(checks), status_code


@health_bp.route('/health/live')
def liveness_check():
    """Liveness probe: 200 while the process is alive."""
    return jsonify({
        'status': 'alive',
        'pid': os.getpid(),
        'timestamp': datetime.utcnow().isoformat(),
    }), 200
