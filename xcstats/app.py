"""
XC Stats Flask Application.

Main entry point for the web application. Initializes:
- Logging
- Database session factory
- API routes
- Health probe and error handlers

Usage:
    python -m xcstats.app

Or with gunicorn:
    gunicorn 'xcstats.app:create_app()'
"""

import logging
import os
from datetime import date, datetime

from flask import Flask, jsonify
from flask.json.provider import DefaultJSONProvider
from flask_cors import CORS
from sqlalchemy.orm import sessionmaker

from xcstats.config import config, AppConfig
from xcstats.errors import InvalidFilterError, StoreUnavailableError
from xcstats.models import SessionLocal
from xcstats.api import flights_bp, home_bp, pilots_bp, records_bp, takeoffs_bp, wings_bp
from xcstats.queries import check_health

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
)
logger = logging.getLogger(__name__)


class ISODateJSONProvider(DefaultJSONProvider):
    """Serialize dates as ISO 8601 instead of Flask's HTTP date format."""

    @staticmethod
    def default(o):
        if isinstance(o, (date, datetime)):
            return o.isoformat()
        return DefaultJSONProvider.default(o)


def create_app(app_config: AppConfig = None, session_factory: sessionmaker = None) -> Flask:
    """
    Application factory for Flask.

    Args:
        app_config: Settings to use instead of the environment-loaded ones.
        session_factory: Session factory to read through. Tests pass one
                         bound to an in-memory database.

    Returns:
        Configured Flask application instance.
    """
    app_config = app_config or config

    app = Flask(__name__)
    app.json = ISODateJSONProvider(app)

    # Configuration
    app.config['SECRET_KEY'] = app_config.secret_key
    app.config['XCSTATS'] = app_config
    app.config['SESSION_FACTORY'] = session_factory or SessionLocal

    # Enable CORS for API endpoints
    CORS(app, resources={r'/api/*': {'origins': '*'}})

    # Register API blueprints
    app.register_blueprint(flights_bp)
    app.register_blueprint(home_bp)
    app.register_blueprint(records_bp)
    app.register_blueprint(takeoffs_bp)
    app.register_blueprint(wings_bp)
    app.register_blueprint(pilots_bp)

    @app.route('/health')
    def health():
        """Store reachability; 503 when the database cannot be reached."""
        session = app.config['SESSION_FACTORY']()
        try:
            status = check_health(session)
        finally:
            session.close()
        return status.to_dict(), 200 if status.ok else 503

    # -------------------------------------------------------------------------
    # Error handlers
    # -------------------------------------------------------------------------

    @app.errorhandler(InvalidFilterError)
    def invalid_filter(e):
        return jsonify({'error': str(e), 'param': e.key}), 400

    @app.errorhandler(StoreUnavailableError)
    def store_unavailable(e):
        return jsonify({'error': 'Data store unavailable'}), 503

    @app.errorhandler(404)
    def not_found(e):
        return {'error': 'Not found'}, 404

    @app.errorhandler(500)
    def server_error(e):
        logger.error(f'Server error: {e}')
        return {'error': 'Internal server error'}, 500

    logger.info(f'XC Stats app created (database: {app_config.database.url.split("://")[0]})')
    return app


def run_development_server():
    """Run the development server."""
    app = create_app()

    # Get port from environment or default
    port = int(os.environ.get('PORT', 5000))

    logger.info(f'Starting XC Stats on http://localhost:{port}')

    app.run(
        host='0.0.0.0',
        port=port,
        debug=config.debug,
    )


if __name__ == '__main__':
    run_development_server()
