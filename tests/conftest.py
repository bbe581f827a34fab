"""
Pytest configuration and shared fixtures.
"""

import pytest
import sys
from pathlib import Path

# Add scripts to path BEFORE any other imports
project_root = Path(__file__).parent.parent
scripts_path = str(project_root / 'scripts')
if scripts_path not in sys.path:
    sys.path.insert(0, scripts_path)

from config import Settings
from catalog import Product, ProductStore, seed_products

TEST_API_KEY = 'test-key'


@pytest.fixture
def test_settings():
    """Settings for a development-mode app with a known API key."""
    return Settings(API_KEY=TEST_API_KEY, APP_ENV='development', SEED_PRODUCTS=True)


@pytest.fixture
def production_settings():
    """Settings for a production-mode app (no stack traces)."""
    return Settings(API_KEY=TEST_API_KEY, APP_ENV='production', SEED_PRODUCTS=True)


@pytest.fixture
def seeded_store():
    """Fresh store holding the demo catalogue."""
    return ProductStore(products=seed_products())


@pytest.fixture
def empty_store():
    """Fresh store with no products."""
    return ProductStore()


@pytest.fixture
def sample_payload():
    """Valid product payload in wire format."""
    return {
        "name": "Desk Lamp",
        "description": "LED lamp with adjustable arm",
        "price": 35.5,
        "category": "home",
        "inStock": True
    }


@pytest.fixture
def app(test_settings, seeded_store):
    """Flask app backed by a fresh seeded store."""
    from server import create_app

    flask_app = create_app(test_settings, store=seeded_store)
    flask_app.config['TESTING'] = True
    return flask_app


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture
def auth_headers():
    """Headers carrying the correct API key."""
    return {'x-api-key': TEST_API_KEY}


@pytest.fixture
def make_product():
    """Factory building products for tests."""

    def _make(product_id, name='Item', price=10, category='misc', in_stock=True):
        return Product(
            id=product_id,
            name=name,
            description=f"{name} description",
            price=price,
            category=category,
            in_stock=in_stock
        )

    return _make
