"""
In-memory product store.

One ordered list of products shared by every request. Each operation
holds the store lock for its whole duration, so it either fully applies
or leaves the store untouched.
"""

import threading
import uuid
from typing import Any, Callable, Iterable, List, Mapping, Optional

from api.errors import AppError, ErrorKind
from observability import get_logger

from .models import Product

logger = get_logger(__name__)


def _uuid_factory() -> str:
    return str(uuid.uuid4())


class ProductStore:
    """
    Ordered in-memory collection of products.

    Args:
        id_factory: Callable returning a fresh opaque id (default: uuid4)
        products: Initial products, kept in the given order
    """

    def __init__(
        self,
        id_factory: Optional[Callable[[], str]] = None,
        products: Optional[Iterable[Product]] = None
    ):
        self._id_factory = id_factory or _uuid_factory
        self._products: List[Product] = []
        self._lock = threading.RLock()

        for product in products or ():
            if self._index_of(product.id) is not None:
                raise ValueError(f"Duplicate product id: {product.id}")
            self._products.append(product)

    def __len__(self) -> int:
        with self._lock:
            return len(self._products)

    def __contains__(self, product_id: object) -> bool:
        with self._lock:
            return self._index_of(product_id) is not None

    def list(self) -> List[Product]:
        """Return a snapshot of all products in insertion order."""
        with self._lock:
            return list(self._products)

    def get(self, product_id: str) -> Product:
        with self._lock:
            return self._products[self._require_index(product_id)]

    def create(self, fields: Mapping[str, Any]) -> Product:
        """Store a new product under a freshly generated id."""
        with self._lock:
            product_id = self._id_factory()
            while self._index_of(product_id) is not None:
                product_id = self._id_factory()

            product = Product.from_fields(product_id, fields)
            self._products.append(product)

        logger.info("Product created", extra={'product_id': product.id})
        return product

    def replace(self, product_id: str, fields: Mapping[str, Any]) -> Product:
        """Overwrite every field except the id; position is kept."""
        with self._lock:
            index = self._require_index(product_id)
            product = Product.from_fields(self._products[index].id, fields)
            self._products[index] = product

        logger.info("Product replaced", extra={'product_id': product.id})
        return product

    def remove(self, product_id: str) -> Product:
        with self._lock:
            removed = self._products.pop(self._require_index(product_id))

        logger.info("Product removed", extra={'product_id': removed.id})
        return removed

    def _index_of(self, product_id: object) -> Optional[int]:
        for index, product in enumerate(self._products):
            if product.id == product_id:
                return index
        return None

    def _require_index(self, product_id: str) -> int:
        index = self._index_of(product_id)
        if index is None:
            raise AppError(ErrorKind.NOT_FOUND, "Product not found")
        return index


def seed_products() -> List[Product]:
    """Demo catalogue loaded into a fresh store on startup."""
    return [
        Product(
            id='1',
            name='Laptop',
            description='High-performance laptop with 16GB RAM',
            price=1200,
            category='electronics',
            in_stock=True,
        ),
        Product(
            id='2',
            name='Smartphone',
            description='Latest model with 128GB storage',
            price=800,
            category='electronics',
            in_stock=True,
        ),
        Product(
            id='3',
            name='Coffee Maker',
            description='Programmable coffee maker with timer',
            price=50,
            category='kitchen',
            in_stock=False,
        ),
    ]
