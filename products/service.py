"""
Business logic for product operations.

Each method maps to exactly one SQL statement. User input is only ever
passed as a bound parameter, including the dynamic filter of
search_products.
"""

import logging
from decimal import Decimal
from typing import Optional, List, Dict, Any, Tuple
from shared.database import QueryExecutor
from shared.errors import NotFoundError
from .models import Product

SELECT_PRODUCTS = "SELECT id, name, price, description FROM Product"
RETURNING_COLUMNS = "RETURNING id, name, price, description"

# An explicit id does not advance the identity sequence, so move it past the
# upserted id; otherwise a later create would be handed that id again.
UPSERT_PRODUCT = """WITH upserted AS (
    INSERT INTO Product (id, name, price, description)
    VALUES (%(id)s, %(name)s, %(price)s, %(description)s)
    ON CONFLICT (id) DO UPDATE SET
        name = EXCLUDED.name,
        price = EXCLUDED.price,
        description = EXCLUDED.description
    RETURNING id, name, price, description
)
SELECT
    upserted.id, upserted.name, upserted.price, upserted.description,
    CASE
        WHEN upserted.id > COALESCE(pg_sequence_last_value(pg_get_serial_sequence('product', 'id')::regclass), 0)
        THEN setval(pg_get_serial_sequence('product', 'id'), upserted.id)
    END AS sequence_value
FROM upserted"""


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so the value matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def build_search_filter(
    name: Optional[str] = None,
    price: Optional[Decimal] = None
) -> Tuple[str, Dict[str, Any]]:
    """
    Build the WHERE clause for a filtered product read.

    `name` is a substring match, `price` an upper bound (price <= value).
    An empty name counts as absent. With neither filter the clause is empty.

    Returns:
        (clause, parameters) where clause is "" or starts with " WHERE "
    """
    conditions = []
    parameters: Dict[str, Any] = {}

    if name:
        conditions.append("name LIKE %(name)s")
        parameters["name"] = f"%{escape_like(name)}%"
    if price is not None:
        conditions.append("price <= %(price)s")
        parameters["price"] = price

    if not conditions:
        return "", parameters
    return " WHERE " + " AND ".join(conditions), parameters


class ProductService:
    """Service class for Product CRUD operations."""
    
    def __init__(self, executor: QueryExecutor, logger: Optional[logging.Logger] = None):
        self.executor = executor
        self.logger = logger or logging.getLogger(__name__)

    @classmethod
    def from_settings(cls) -> "ProductService":
        return cls(QueryExecutor.from_settings())
    
    async def list_products(self) -> List[Product]:
        """
        List every product. An empty table yields an empty list.
        """
        self.logger.info("Read all products")
        try:
            return await self.executor.execute_query(SELECT_PRODUCTS)
        except NotFoundError:
            return []
    
    async def get_product(self, product_id: int) -> List[Product]:
        """
        Get the products with the given id.
        
        Raises:
            NotFoundError: If no product has that id
        """
        self.logger.info(f"Read product with id: {product_id}")
        return await self.executor.execute_query(
            f"{SELECT_PRODUCTS} WHERE id = %(id)s",
            {"id": product_id}
        )
    
    async def get_products_by_name(self, name: str) -> List[Product]:
        """
        Get the products whose name equals `name` exactly.
        
        Raises:
            NotFoundError: If no product has that name
        """
        self.logger.info("Read product matching name")
        return await self.executor.execute_query(
            f"{SELECT_PRODUCTS} WHERE name = %(name)s",
            {"name": name}
        )
    
    async def search_products(
        self,
        name: Optional[str] = None,
        price: Optional[Decimal] = None
    ) -> List[Product]:
        """
        Get the products whose name contains `name` and/or whose price is at
        most `price`. With no filters every product is returned.
        
        Raises:
            NotFoundError: If no product matches
        """
        clause, parameters = build_search_filter(name, price)
        self.logger.info(f"Search products with name: {name}, price: {price}")
        return await self.executor.execute_query(SELECT_PRODUCTS + clause, parameters)
    
    async def create_product(self, product: Product) -> Product:
        """
        Insert a product; the database assigns the id.
        
        Returns:
            The stored product including its new id
        """
        self.logger.info(
            f"Create product with name: {product.name}, price: {product.price}, "
            f"description: {product.description}"
        )
        rows = await self.executor.execute_query(
            "INSERT INTO Product (name, price, description) "
            "VALUES (%(name)s, %(price)s, %(description)s) "
            + RETURNING_COLUMNS,
            {
                "name": product.name,
                "price": product.price,
                "description": product.description,
            }
        )
        return rows[0]
    
    async def upsert_product(self, product: Product) -> Product:
        """
        Update the product with `product.id`, or insert it with that id if
        it does not exist yet.
        
        Returns:
            The stored product
        """
        self.logger.info(
            f"Upsert product with id: {product.id}, name: {product.name}, "
            f"price: {product.price}, description: {product.description}"
        )
        rows = await self.executor.execute_query(UPSERT_PRODUCT, product.to_dict())
        return rows[0]
    
    async def patch_product(
        self,
        product_id: int,
        name: Optional[str] = None,
        price: Optional[Decimal] = None,
        description: Optional[str] = None
    ) -> int:
        """
        Update only the columns whose new value is not None.
        
        Returns:
            Number of rows updated
            
        Raises:
            NotFoundError: If no product has that id
        """
        self.logger.info(f"Patch product with id: {product_id}")
        updated = await self.executor.execute_non_query(
            """UPDATE Product
            SET
                name = CASE WHEN %(name)s::text IS NOT NULL THEN %(name)s::text ELSE name END,
                price = CASE WHEN %(price)s::numeric IS NOT NULL THEN %(price)s::numeric ELSE price END,
                description = CASE WHEN %(description)s::text IS NOT NULL THEN %(description)s::text ELSE description END
            WHERE
                id = %(id)s""",
            {
                "id": product_id,
                "name": name,
                "price": price,
                "description": description,
            }
        )
        if updated == 0:
            raise NotFoundError(f"Product {product_id} not found")
        return updated
    
    async def delete_product(self, product_id: int) -> int:
        """
        Delete a product by id.
        
        Returns:
            Number of rows deleted
            
        Raises:
            NotFoundError: If no product has that id
        """
        self.logger.info(f"Delete product with id: {product_id}")
        deleted = await self.executor.execute_non_query(
            "DELETE FROM Product WHERE id = %(id)s",
            {"id": product_id}
        )
        if deleted == 0:
            raise NotFoundError(f"Product {product_id} not found")
        return deleted
