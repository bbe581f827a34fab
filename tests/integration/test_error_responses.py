"""
Integration tests for the error responder.
"""

import pytest
from catalog import ProductStore


class ExplodingStore(ProductStore):
    """Store whose listing fails with an unexpected error."""

    def list(self):
        raise RuntimeError("disk on fire")


@pytest.fixture
def dev_client(test_settings):
    from server import create_app
    return create_app(test_settings, store=ExplodingStore()).test_client()


@pytest.fixture
def prod_client(production_settings):
    from server import create_app
    return create_app(production_settings, store=ExplodingStore()).test_client()


class TestDevelopmentErrors:
    """Outside production, error bodies carry a stack."""

    def test_app_error_has_stack(self, client, auth_headers):
        """Classified errors include the traceback."""
        body = client.get('/api/products/missing', headers=auth_headers).get_json()
        assert body["error"] == "Product not found"
        assert "Traceback" in body["stack"]

    def test_unauthorized_has_stack(self, client):
        """Auth failures use the same body shape."""
        body = client.get('/api/products').get_json()
        assert set(body) == {"error", "stack"}

    def test_unexpected_error(self, dev_client, auth_headers):
        """Unclassified faults become 500 with their message and stack."""
        response = dev_client.get('/api/products', headers=auth_headers)
        assert response.status_code == 500
        body = response.get_json()
        assert body["error"] == "disk on fire"
        assert "RuntimeError" in body["stack"]


class TestProductionErrors:
    """In production, error bodies hold only the message."""

    def test_app_error_without_stack(self, production_settings, auth_headers):
        """Classified errors keep their message but drop the stack."""
        from server import create_app

        client = create_app(production_settings, store=ProductStore()).test_client()
        response = client.get('/api/products/missing', headers=auth_headers)
        assert response.status_code == 404
        assert response.get_json() == {"error": "Product not found"}

    def test_unexpected_error_hides_internals(self, prod_client, auth_headers):
        """Unclassified faults report only the generic message."""
        response = prod_client.get('/api/products', headers=auth_headers)
        assert response.status_code == 500
        assert response.get_json() == {"error": "Internal Server Error"}

    def test_method_not_allowed(self, prod_client, auth_headers):
        """Unsupported methods get a JSON 405."""
        response = prod_client.patch('/api/products/1', json={}, headers=auth_headers)
        assert response.status_code == 405
        assert "error" in response.get_json()
