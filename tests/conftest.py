"""
Pytest configuration and fixtures.

No live database is used: the executor is tested against a fake psycopg
connection, the service against a recording executor and the route handlers
against an in-memory ProductService.
"""

import json
import os
import sys
from decimal import Decimal
from typing import Any, Dict, List, Optional

import pytest
import azure.functions as func

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from products.models import Product
from shared.errors import NotFoundError


def make_request(
    method: str,
    url: str,
    route_params: Optional[Dict[str, str]] = None,
    params: Optional[Dict[str, str]] = None,
    body: Any = None
) -> func.HttpRequest:
    """Build an HttpRequest the way the Functions host hands it to a handler."""
    if body is None:
        data = b""
    elif isinstance(body, bytes):
        data = body
    else:
        data = json.dumps(body).encode("utf-8")
    
    return func.HttpRequest(
        method=method,
        url=url,
        headers={"Content-Type": "application/json"},
        params=params or {},
        route_params=route_params or {},
        body=data
    )


def response_json(response: func.HttpResponse) -> Any:
    return json.loads(response.get_body())


class FakeCursor:
    def __init__(self, rows=None, rowcount=0, error=None):
        self.rows = rows or []
        self.rowcount = rowcount
        self.error = error
        self.executed = []
        self.closed = False
    
    async def __aenter__(self):
        return self
    
    async def __aexit__(self, exc_type, exc, tb):
        self.closed = True
        return False
    
    async def execute(self, statement, parameters=None):
        self.executed.append((statement, parameters))
        if self.error is not None:
            raise self.error
    
    async def fetchall(self):
        return self.rows


class FakeConnection:
    def __init__(self, cursor: FakeCursor):
        self._cursor = cursor
        self.row_factory = None
        self.closed = False
    
    def cursor(self, row_factory=None):
        self.row_factory = row_factory
        return self._cursor
    
    async def __aenter__(self):
        return self
    
    async def __aexit__(self, exc_type, exc, tb):
        self.closed = True
        return False


class FakeConnect:
    """Stands in for psycopg.AsyncConnection.connect."""
    
    def __init__(self, connection: Optional[FakeConnection] = None, error: Optional[Exception] = None):
        self.connection = connection
        self.error = error
        self.calls = []
    
    async def __call__(self, conninfo, **kwargs):
        self.calls.append((conninfo, kwargs))
        if self.error is not None:
            raise self.error
        return self.connection


class RecordingExecutor:
    """QueryExecutor double that records statements and replays canned results."""
    
    def __init__(self, rows: Optional[List[Product]] = None, rowcount: int = 1):
        self.rows = rows if rows is not None else []
        self.rowcount = rowcount
        self.statements = []
    
    async def execute_query(self, statement, parameters=None):
        self.statements.append((statement, parameters or {}))
        if not self.rows:
            raise NotFoundError("No rows returned")
        return list(self.rows)
    
    async def execute_non_query(self, statement, parameters=None):
        self.statements.append((statement, parameters or {}))
        return self.rowcount


class InMemoryProductService:
    """ProductService double backed by a dict, with the same not-found rules."""
    
    def __init__(self, products: Optional[List[Product]] = None):
        self.rows: Dict[int, Product] = {}
        self.next_id = 1
        for product in products or []:
            self.rows[product.id] = product
            self.next_id = max(self.next_id, product.id + 1)
    
    @staticmethod
    def _copy(product: Product) -> Product:
        return Product(product.id, product.name, product.price, product.description)
    
    def _found(self, products: List[Product]) -> List[Product]:
        if not products:
            raise NotFoundError("No rows returned")
        return [self._copy(p) for p in products]
    
    async def list_products(self):
        return [self._copy(p) for p in self.rows.values()]
    
    async def get_product(self, product_id):
        return self._found([p for p in self.rows.values() if p.id == product_id])
    
    async def get_products_by_name(self, name):
        return self._found([p for p in self.rows.values() if p.name == name])
    
    async def search_products(self, name=None, price=None):
        matches = [
            p for p in self.rows.values()
            if (not name or name in p.name) and (price is None or p.price <= price)
        ]
        return self._found(matches)
    
    async def create_product(self, product):
        stored = Product(self.next_id, product.name, product.price, product.description)
        self.rows[stored.id] = stored
        self.next_id += 1
        return self._copy(stored)
    
    async def upsert_product(self, product):
        self.rows[product.id] = self._copy(product)
        self.next_id = max(self.next_id, product.id + 1)
        return self._copy(product)
    
    async def patch_product(self, product_id, name=None, price=None, description=None):
        if product_id not in self.rows:
            raise NotFoundError(f"Product {product_id} not found")
        current = self.rows[product_id]
        if name is not None:
            current.name = name
        if price is not None:
            current.price = price
        if description is not None:
            current.description = description
        return 1
    
    async def delete_product(self, product_id):
        if self.rows.pop(product_id, None) is None:
            raise NotFoundError(f"Product {product_id} not found")
        return 1


@pytest.fixture
def seeded_products():
    return [
        Product(1, "Widget", Decimal("19.99"), "Small widget"),
        Product(2, "Widget Pro", Decimal("49.50"), "Large widget"),
        Product(3, "Gadget", Decimal("75.00"), "Shiny gadget"),
    ]


@pytest.fixture
def service(seeded_products):
    return InMemoryProductService(seeded_products)


@pytest.fixture
def empty_service():
    return InMemoryProductService()
