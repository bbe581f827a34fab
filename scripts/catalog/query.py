"""
Read-side queries over the product list.

Provides:
- Filtered, searched and paginated listing
- Explicit name search
- Catalogue statistics
"""

import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from api.errors import AppError, ErrorKind

from .models import Product

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10

_LEADING_INT = re.compile(r'\s*([+-]?\d+)')


@dataclass
class QueryPage:
    """One page of a product listing."""
    total: int
    page: int
    limit: int
    results: List[Product] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total': self.total,
            'page': self.page,
            'limit': self.limit,
            'results': [product.to_dict() for product in self.results],
        }


@dataclass
class CatalogStats:
    """Aggregate figures over the whole catalogue."""
    total: int
    avg_price: float
    count_by_category: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total': self.total,
            'avgPrice': self.avg_price,
            'countByCategory': dict(self.count_by_category),
        }


def parse_positive_int(raw: Optional[str], default: int) -> int:
    """
    Parse a pagination parameter.

    Reads the leading integer of ``raw`` ("2abc" -> 2, "1.9" -> 1).
    Missing, unparsable and zero values give ``default``; anything
    below 1 is clamped to 1.
    """
    if raw is None:
        return default
    match = _LEADING_INT.match(str(raw))
    value = int(match.group(1)) if match else 0
    return max(1, value or default)


def matches_name(product: Product, term: str) -> bool:
    """Case-insensitive substring match against the product name."""
    return term.lower() in product.name.lower()


def query_products(products: Sequence[Product], params: Mapping[str, str]) -> QueryPage:
    """
    List products: filter by category, search by name, then paginate.

    Args:
        products: Full product sequence (copied, never modified)
        params: Query parameters (category, search, page, limit)

    Returns:
        QueryPage with ``total`` counted before pagination
    """
    result = list(products)

    category = params.get('category')
    if category:
        result = [p for p in result if p.category == category]

    search = params.get('search')
    if search:
        result = [p for p in result if matches_name(p, search)]

    page = parse_positive_int(params.get('page'), DEFAULT_PAGE)
    limit = parse_positive_int(params.get('limit'), DEFAULT_LIMIT)
    start = (page - 1) * limit

    return QueryPage(
        total=len(result),
        page=page,
        limit=limit,
        results=result[start:start + limit],
    )


def search_by_name(products: Sequence[Product], name: Optional[str]) -> List[Product]:
    """
    Return every product whose name contains ``name``, unpaginated.

    Raises:
        AppError: VALIDATION when ``name`` is missing or empty
    """
    if not name:
        raise AppError(ErrorKind.VALIDATION, 'Query parameter "name" is required')
    return [p for p in products if matches_name(p, name)]


def compute_stats(products: Sequence[Product]) -> CatalogStats:
    """Count, mean price and per-category counts."""
    total = len(products)
    avg_price = sum(p.price for p in products) / total if total else 0
    return CatalogStats(
        total=total,
        avg_price=avg_price,
        count_by_category=dict(Counter(p.category for p in products)),
    )
