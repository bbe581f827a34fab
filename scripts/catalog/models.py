"""
Product record and its wire format.
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Union

Number = Union[int, float]


@dataclass(frozen=True)
class Product:
    """A sellable item. Replaced wholesale, never mutated in place."""

    id: str
    name: str
    description: str
    price: Number
    category: str
    in_stock: bool

    @classmethod
    def from_fields(cls, product_id: str, fields: Mapping[str, Any]) -> 'Product':
        """Build a product from a validated wire payload."""
        return cls(
            id=product_id,
            name=fields['name'],
            description=fields['description'],
            price=fields['price'],
            category=fields['category'],
            in_stock=fields['inStock'],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'price': self.price,
            'category': self.category,
            'inStock': self.in_stock,
        }
