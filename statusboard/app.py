"""
Status Board API - Flask Application Factory

This module builds the Flask application with OpenAPI 3.0 support, wires
configuration, services and middleware, and registers the API blueprints.
"""

import os
from typing import Any, Dict, Optional
from flask import jsonify
from flask_openapi3 import Info, OpenAPI, Tag

from . import __version__
from .middleware.auth import AuthMiddleware, SESSION_COOKIE_NAME
from .middleware.cors import configure_cors
from .middleware.error_handler import ErrorHandlerMiddleware, validation_error_callback
from .observability.config import setup_observability
from .observability.middleware import add_observability_middleware
from .services.auth import AuthService
from .services.health import HealthCheckService
from .services.mongodb import MongoDBService
from .services.news_feed import NewsFeed
from .services.redis import RedisService
from .services.sessions import RedisSessionStore, SessionStore
from .services.status_store import StatusStore


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == 'true'


def load_config() -> Dict[str, Any]:
    """Read application configuration from the environment."""
    environment = os.getenv('ENVIRONMENT', 'development')
    return {
        'ENVIRONMENT': environment,
        'DEBUG': environment == 'development',
        'MONGODB_URI': os.getenv('MONGODB_URI', 'mongodb://localhost:27017/statusboard_dev'),
        'MONGODB_DATABASE': os.getenv('MONGODB_DATABASE', 'statusboard_dev'),
        'REDIS_URL': os.getenv('REDIS_URL', 'redis://localhost:6379'),
        'SESSION_TTL_SECONDS': int(os.getenv('SESSION_TTL_SECONDS', '86400')),
        'SESSION_COOKIE_SECURE': _env_flag('SESSION_COOKIE_SECURE', 'true' if environment == 'production' else 'false'),
        'NEWS_DEFAULT_LIMIT': int(os.getenv('NEWS_DEFAULT_LIMIT', '20')),
        'BCRYPT_ROUNDS': int(os.getenv('BCRYPT_ROUNDS', '12')),
        'OTEL_ENABLED': _env_flag('OTEL_ENABLED', 'true'),
        'FRONTEND_URL': os.getenv('FRONTEND_URL', ''),
    }


def create_app(
    config_overrides: Optional[Dict[str, Any]] = None,
    *,
    mongodb_service: Optional[MongoDBService] = None,
    redis_service: Optional[RedisService] = None,
    status_store: Optional[StatusStore] = None,
    news_feed: Optional[NewsFeed] = None,
    auth_service: Optional[AuthService] = None,
    session_store: Optional[SessionStore] = None
) -> OpenAPI:
    """
    Build the application.

    Args:
        config_overrides: Values replacing the environment configuration
        mongodb_service, redis_service, status_store, news_feed,
        auth_service, session_store: Pre-built services; anything not given
            is created from configuration

    Returns:
        Configured Flask application
    """
    config = load_config()
    config.update(config_overrides or {})

    setup_observability(config['ENVIRONMENT'], config['OTEL_ENABLED'])

    info = Info(
        title="Status Board API",
        version=__version__,
        description="Room safety status board and news feed for a residential complex"
    )
    health_tag = Tag(name="Health", description="Service health")

    app = OpenAPI(
        __name__,
        info=info,
        validation_error_status=400,
        validation_error_callback=validation_error_callback
    )
    app.config.update(config)

    add_observability_middleware(app, instrument=config['OTEL_ENABLED'])

    # Initialize services
    if mongodb_service is None:
        mongodb_service = MongoDBService(config['MONGODB_URI'], config['MONGODB_DATABASE'])
    if session_store is None:
        if redis_service is None:
            redis_service = RedisService(config['REDIS_URL'])
        session_store = RedisSessionStore(redis_service, config['SESSION_TTL_SECONDS'])

    app.mongodb_service = mongodb_service
    app.redis_service = redis_service
    app.status_store = status_store or StatusStore(mongodb_service)
    app.news_feed = news_feed or NewsFeed(mongodb_service, default_limit=config['NEWS_DEFAULT_LIMIT'])
    app.auth_service = auth_service or AuthService(mongodb_service, config['BCRYPT_ROUNDS'])
    app.session_store = session_store
    app.auth_middleware = AuthMiddleware(session_store, SESSION_COOKIE_NAME)
    app.health_service = HealthCheckService(mongodb_service, redis_service)

    # Initialize middleware
    ErrorHandlerMiddleware(app)
    configure_cors(app)

    # Register routes
    from .routes.auth import auth_bp
    from .routes.blocks import blocks_bp, units_bp
    from .routes.news import news_bp

    app.register_api(auth_bp)
    app.register_api(blocks_bp)
    app.register_api(units_bp)
    app.register_api(news_bp)

    @app.get('/api/healthz', tags=[health_tag])
    def health_check():
        """Dependency health; 503 when the service cannot serve requests."""
        health_data = app.health_service.get_health()
        status_code = 503 if health_data["status"] == "unhealthy" else 200
        return jsonify(health_data), status_code

    return app


if __name__ == '__main__':
    # Development server
    app = create_app()
    app.run(
        host='0.0.0.0',
        port=int(os.getenv('PORT', 5000)),
        debug=app.config['DEBUG']
    )
