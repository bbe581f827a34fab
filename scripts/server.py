"""
Flask API Server for the Product Catalog

Request flow: logging → API key check (under /api) → body parsing and
validation → route handler → error responder.

Run with:
    python scripts/server.py
    flask --app server:create_app run      (from the scripts/ directory)
"""

import sys
from pathlib import Path
from typing import Optional

# Add scripts directory to Python path when run as a file
sys.path.insert(0, str(Path(__file__).parent))

from flask import Flask, jsonify
from flask_cors import CORS

from config import settings as default_settings, Settings
from observability import setup_logging, get_logger
from api.middleware import setup_middleware
from api.routes import api, API_PREFIX, STORE_EXTENSION
from catalog import ProductStore, seed_products

logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None, store: Optional[ProductStore] = None) -> Flask:
    """
    Build the Flask application.

    Args:
        settings: Configuration (default: loaded from the environment)
        store: Product store to serve (default: a new store, seeded
            with the demo catalogue when ``settings.seed_products``)

    Returns:
        Configured Flask application
    """
    settings = settings or default_settings
    if store is None:
        store = ProductStore(products=seed_products() if settings.seed_products else None)

    app = Flask(__name__)
    app.config['INCLUDE_ERROR_STACK'] = not settings.is_production
    app.extensions[STORE_EXTENSION] = store
    CORS(app)

    setup_middleware(app, api_key=settings.api_key, api_prefix=API_PREFIX)

    @app.route('/', methods=['GET'])
    def index():
        """Informational root, outside the authenticated prefix."""
        return 'Welcome to the Product API! Visit /api/products', 200, {'Content-Type': 'text/plain; charset=utf-8'}

    @app.route('/health', methods=['GET'])
    def health_check():
        return jsonify({"status": "ok", "products": len(store)})

    app.register_blueprint(api)

    logger.info(
        "Application created",
        extra={'environment': settings.environment, 'products': len(store)}
    )
    return app


def print_startup_banner(settings: Settings):
    """Print server startup information."""
    banner = f"""
{'='*70}
Product Catalog API
{'='*70}
✓ Server: http://{settings.host}:{settings.port}
✓ Health: http://localhost:{settings.port}/health

Endpoints (require x-api-key):
  GET    {API_PREFIX}/products            - List (category, search, page, limit)
  GET    {API_PREFIX}/products/search     - Search by name
  GET    {API_PREFIX}/products/stats      - Statistics
  GET    {API_PREFIX}/products/<id>       - Fetch one
  POST   {API_PREFIX}/products            - Create
  PUT    {API_PREFIX}/products/<id>       - Replace
  DELETE {API_PREFIX}/products/<id>       - Delete

Configuration:
  Environment: {settings.environment}
  Log Level: {settings.observability.log_level}
  Log Format: {settings.observability.log_format}
  Seed Products: {settings.seed_products}

{'='*70}
"""
    print(banner)


def main(settings: Optional[Settings] = None):
    settings = settings or default_settings

    setup_logging(
        log_level=settings.observability.log_level,
        log_format=settings.observability.log_format,
        log_dir=settings.observability.log_dir,
        enable_file=settings.observability.log_to_file
    )

    app = create_app(settings)
    print_startup_banner(settings)

    app.run(
        host=settings.host,
        port=settings.port,
        debug=settings.debug
    )


if __name__ == '__main__':
    main()
