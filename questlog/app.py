"""
QuestLog - Game collection tracker backed by IGDB
Application factory and start-up
"""
import logging
import os
import sys

import structlog
from flask import Flask
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from questlog.auth import login_manager
from questlog.constants import BUILD_VERSION, CONFIG_DIR, CONFIG_FILE, QUESTLOG_DB
from questlog.db import db, init_db, migrate
from questlog.exceptions import register_exception_handlers
from questlog.metrics import init_metrics
from questlog.routes.catalog import catalog_bp
from questlog.routes.collection import collection_bp
from questlog.routes.settings import settings_bp
from questlog.routes.system import system_bp
from questlog.services.catalog_cache import CatalogCache
from questlog.services.catalog_service import CatalogService
from questlog.services.igdb_client import IGDBClient
from questlog.settings import load_settings, verify_settings
from questlog.utils import (
    ColoredFormatter,
    FilterRemoveDateFromWerkzeugLogs,
    get_or_create_secret_key,
    sanitize_sensitive_data,
)

limiter = Limiter(key_func=get_remote_address)

logger = structlog.get_logger('main')


def configure_logging(level=logging.INFO):
    """Coloured stdlib logging on stdout, with structlog rendering on top"""
    formatter = ColoredFormatter(
        '[%(asctime)s.%(msecs)03d] %(levelname)s (%(module)s) %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    logging.basicConfig(
        level=level,
        handlers=[handler]
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if os.environ.get('LOG_FORMAT') == 'json' else structlog.dev.ConsoleRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Apply filter to hide date from http access logs
    logging.getLogger('werkzeug').addFilter(FilterRemoveDateFromWerkzeugLogs())


def init_catalog(app, app_settings):
    """Create the shared catalog cache, IGDB client and catalog service"""
    igdb_settings = app_settings.get("igdb", {})
    catalog_settings = app_settings.get("catalog", {})

    for section in ("igdb", "catalog"):
        ok, errors = verify_settings(section, app_settings.get(section, {}))
        if not ok:
            for error in errors:
                logger.warning(f"Settings problem at {error['path']}: {error['error']}")

    cache = CatalogCache(
        ttl=catalog_settings.get("cache_ttl", 300),
        token_expiry_margin=catalog_settings.get("token_expiry_margin", 60),
    )
    client = IGDBClient(
        igdb_settings.get("client_id"),
        igdb_settings.get("client_secret"),
        token_cache=cache,
        timeout=igdb_settings.get("timeout", 10),
    )
    app.extensions["catalog_cache"] = cache
    app.extensions["catalog_service"] = CatalogService.from_settings(client, cache, app_settings)


def create_app(config=None):
    """Application factory"""
    config = config or {}
    configure_logging()

    app = Flask(__name__)
    app.config["SQLALCHEMY_DATABASE_URI"] = QUESTLOG_DB
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config["QUESTLOG_CONFIG_FILE"] = CONFIG_FILE
    app.config.update(config)
    if not app.config.get("SECRET_KEY"):
        app.config['SECRET_KEY'] = get_or_create_secret_key(CONFIG_DIR)

    app_settings = load_settings(app.config["QUESTLOG_CONFIG_FILE"], force=True)
    logger.debug(f"Loaded settings: {sanitize_sensitive_data(app_settings)}")
    rate_limits = app_settings.get("server", {}).get("rate_limits") or []
    if rate_limits:
        app.config.setdefault("RATELIMIT_DEFAULT", "; ".join(rate_limits))

    # Initialize components
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    limiter.init_app(app)

    # Register exception handlers
    register_exception_handlers(app)

    # Catalog services are injected through app.extensions
    init_catalog(app, app_settings)

    # Register blueprints
    app.register_blueprint(catalog_bp)
    app.register_blueprint(collection_bp)
    app.register_blueprint(settings_bp)
    app.register_blueprint(system_bp)

    # Initialize metrics
    init_metrics(app)

    init_db(app)

    return app


if __name__ == '__main__':
    app = create_app()
    server = load_settings().get("server", {})
    logger.info(f'Build Version: {BUILD_VERSION}')
    logger.info(f"Starting server on port {server.get('port', 8465)}...")
    app.run(debug=False, use_reloader=False, threaded=True,
            host=server.get("host", "0.0.0.0"), port=server.get("port", 8465))
