"""
Product catalogue domain.

Provides:
- Product record
- Payload validation
- In-memory store
- Listing, search and statistics queries
"""

from .models import Product
from .validation import collect_violations, validate_product
from .store import ProductStore, seed_products
from .query import (
    QueryPage,
    CatalogStats,
    query_products,
    search_by_name,
    compute_stats,
    parse_positive_int
)

__all__ = [
    'Product',
    'collect_violations',
    'validate_product',
    'ProductStore',
    'seed_products',
    'QueryPage',
    'CatalogStats',
    'query_products',
    'search_by_name',
    'compute_stats',
    'parse_positive_int',
]
