"""
Product record model.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Mapping


@dataclass
class Product:
    """A row of the Product table. `id` is -1 until the database assigns one."""

    id: int = -1
    name: str = ""
    price: Decimal = field(default_factory=lambda: Decimal("0.0"))
    description: str = ""

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Product":
        """Build a Product from a result row keyed by column name."""
        price = row["price"]
        return cls(
            id=int(row["id"]),
            name=row["name"] or "",
            price=Decimal(str(price)) if price is not None else Decimal("0.0"),
            description=row["description"] or "",
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "description": self.description,
        }
