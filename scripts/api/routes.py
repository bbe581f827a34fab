"""
Product routes mounted under /api.

Handlers raise ``AppError`` on failure and never build error bodies
themselves; the error responder does that.
"""

from flask import Blueprint, current_app, g, jsonify, request

from catalog import ProductStore, compute_stats, query_products, search_by_name
from observability import get_logger
from .middleware import validate_product_body

logger = get_logger(__name__)

API_PREFIX = '/api'
STORE_EXTENSION = 'product_store'

api = Blueprint('api', __name__, url_prefix=API_PREFIX)


def get_store() -> ProductStore:
    """Product store owned by the current application."""
    return current_app.extensions[STORE_EXTENSION]


@api.route('/products', methods=['GET'])
def list_products():
    """
    List products with filtering, search and pagination.

    Query Parameters:
        category: Exact category match
        search: Case-insensitive substring of the name
        page: Page number (default 1)
        limit: Page size (default 10)

    Response:
        {"total": 2, "page": 1, "limit": 10, "results": [...]}
    """
    page = query_products(get_store().list(), request.args)
    return jsonify(page.to_dict())


# Literal sub-paths below outrank /products/<product_id> in Werkzeug's
# rule ordering, so they are never captured as ids.

@api.route('/products/search', methods=['GET'])
def search_products():
    """Search products by name (?name= required), unpaginated."""
    found = search_by_name(get_store().list(), request.args.get('name'))
    return jsonify([product.to_dict() for product in found])


@api.route('/products/stats', methods=['GET'])
def product_stats():
    """
    Catalogue statistics.

    Response:
        {"total": 3, "avgPrice": 683.3333333333334, "countByCategory": {"electronics": 2, "kitchen": 1}}
    """
    return jsonify(compute_stats(get_store().list()).to_dict())


@api.route('/products/<product_id>', methods=['GET'])
def get_product(product_id: str):
    return jsonify(get_store().get(product_id).to_dict())


@api.route('/products', methods=['POST'])
@validate_product_body(require_all=True)
def create_product():
    """
    Create a product.

    Request Body:
        {"name": "...", "description": "...", "price": 10.5,
         "category": "...", "inStock": true}
    """
    product = get_store().create(g.product_payload)
    response = jsonify(product.to_dict())
    response.status_code = 201
    return response


@api.route('/products/<product_id>', methods=['PUT'])
@validate_product_body(require_all=True)
def replace_product(product_id: str):
    """Full replace: every field is overwritten, the id is kept."""
    product = get_store().replace(product_id, g.product_payload)
    return jsonify(product.to_dict())


@api.route('/products/<product_id>', methods=['DELETE'])
def delete_product(product_id: str):
    removed = get_store().remove(product_id)
    return jsonify(removed.to_dict())
