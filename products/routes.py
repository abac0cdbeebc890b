"""
HTTP route handlers for product endpoints.

The handlers are plain coroutines taking the request and a ProductService,
so they can be exercised without the Functions host. register_product_routes
binds them to the function app.
"""

import json
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, List, Optional, Tuple
import azure.functions as func
from shared.errors import NotFoundError, ExecutionError
from shared.responses import (
    success_response, status_response, error_response, not_found_response,
    validation_error_response, internal_error_response
)
from .models import Product
from .service import ProductService

logger = logging.getLogger(__name__)

TEXT_FIELDS = ("name", "description")
MAX_PRODUCT_ID = 2147483647


def parse_id(req: func.HttpRequest) -> int:
    """Read the integer `id` route parameter; raises ValueError if invalid."""
    raw = req.route_params.get("id") or ""
    # plain ASCII digits only: int() would also take "+5", "1_0" and " 7"
    if not (raw.isascii() and raw.isdigit()):
        raise ValueError("Product ID must be an integer")
    product_id = int(raw)
    if product_id > MAX_PRODUCT_ID:
        raise ValueError("Product ID is out of range")
    return product_id


def parse_price(value: Any) -> Decimal:
    """Parse a price given as a JSON number or numeric string."""
    if isinstance(value, bool) or not isinstance(value, (int, float, str, Decimal)):
        raise ValueError("Price must be a number")
    try:
        price = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError("Price must be a number") from None
    if not price.is_finite():
        raise ValueError("Price must be a number")
    return price


def parse_product_fields(body: Any) -> Tuple[Dict[str, Any], List[Dict[str, str]]]:
    """
    Pick name, price and description out of a request body.
    
    Absent or null fields are left out of the result.
    
    Returns:
        (fields, errors) where errors is a list of {"field", "message"}
    """
    if not isinstance(body, dict):
        return {}, [{"field": "body", "message": "Body must be a JSON object"}]
    
    fields: Dict[str, Any] = {}
    errors = []
    
    for field_name in TEXT_FIELDS:
        value = body.get(field_name)
        if value is None:
            continue
        if not isinstance(value, str):
            errors.append({"field": field_name, "message": f"{field_name.capitalize()} must be a string"})
        else:
            fields[field_name] = value
    
    if body.get("price") is not None:
        try:
            fields["price"] = parse_price(body["price"])
        except ValueError as e:
            errors.append({"field": "price", "message": str(e)})
    
    return fields, errors


def _get_json(req: func.HttpRequest) -> Any:
    """Parse the request body, keeping JSON fractions as Decimal."""
    try:
        return json.loads(req.get_body(), parse_float=Decimal)
    except ValueError:
        raise ValueError("Invalid JSON body") from None


async def read_all_products(req: func.HttpRequest, service: ProductService) -> func.HttpResponse:
    """
    GET /api/products
    List every product; an empty table gives 200 with [].
    """
    try:
        products = await service.list_products()
        return success_response(products)
    except ExecutionError as e:
        logger.error(f"Error listing products: {str(e)}")
        return internal_error_response("Failed to list products")
    except Exception as e:
        logger.error(f"Unexpected error listing products: {str(e)}")
        return internal_error_response("Failed to list products")


async def read_product_by_id(req: func.HttpRequest, service: ProductService) -> func.HttpResponse:
    """
    GET /api/product/{id}
    """
    try:
        product_id = parse_id(req)
        products = await service.get_product(product_id)
        return success_response(products)
    except NotFoundError:
        return not_found_response("Product")
    except ExecutionError as e:
        logger.error(f"Error reading product: {str(e)}")
        return internal_error_response("Failed to read product")
    except ValueError as e:
        return error_response(str(e), 400)
    except Exception as e:
        logger.error(f"Unexpected error reading product: {str(e)}")
        return internal_error_response("Failed to read product")


async def read_product_by_name(req: func.HttpRequest, service: ProductService) -> func.HttpResponse:
    """
    GET /api/product/name/{name}
    Products whose name matches exactly.
    """
    try:
        name = req.route_params.get("name")
        if not name:
            return error_response("Product name is required", 400)
        
        products = await service.get_products_by_name(name)
        return success_response(products)
    except NotFoundError:
        return not_found_response("Product")
    except ExecutionError as e:
        logger.error(f"Error reading product by name: {str(e)}")
        return internal_error_response("Failed to read product")
    except Exception as e:
        logger.error(f"Unexpected error reading product by name: {str(e)}")
        return internal_error_response("Failed to read product")


async def read_products(req: func.HttpRequest, service: ProductService) -> func.HttpResponse:
    """
    GET /api/product?name={name}&price={price}
    Products whose name contains `name` and whose price is at most `price`.
    Either filter may be omitted; with neither every product is returned.
    """
    try:
        name = req.params.get("name") or None
        raw_price = req.params.get("price")
        price = parse_price(raw_price) if raw_price else None
        
        products = await service.search_products(name=name, price=price)
        return success_response(products)
    except NotFoundError:
        return not_found_response("Product")
    except ExecutionError as e:
        logger.error(f"Error searching products: {str(e)}")
        return internal_error_response("Failed to read products")
    except ValueError as e:
        return error_response(str(e), 400)
    except Exception as e:
        logger.error(f"Unexpected error searching products: {str(e)}")
        return internal_error_response("Failed to read products")


async def create_product(req: func.HttpRequest, service: ProductService) -> func.HttpResponse:
    """
    POST /api/product
    Create a product from name, price and description; the id is assigned
    by the database.
    """
    try:
        fields, errors = parse_product_fields(_get_json(req))
        if errors:
            return validation_error_response(errors)
        
        product = await service.create_product(Product(**fields))
        return success_response(product)
    except ExecutionError as e:
        logger.error(f"Error creating product: {str(e)}")
        return internal_error_response("Failed to create product")
    except ValueError as e:
        return error_response(str(e), 400)
    except Exception as e:
        logger.error(f"Unexpected error creating product: {str(e)}")
        return internal_error_response("Failed to create product")


async def upsert_product(req: func.HttpRequest, service: ProductService) -> func.HttpResponse:
    """
    PATCH /api/product/upsert/{id}
    Update the product with this id, or create it with exactly this id.
    """
    try:
        product_id = parse_id(req)
        fields, errors = parse_product_fields(_get_json(req))
        if errors:
            return validation_error_response(errors)
        
        product = await service.upsert_product(Product(id=product_id, **fields))
        return success_response(product)
    except ExecutionError as e:
        logger.error(f"Error upserting product: {str(e)}")
        return internal_error_response("Failed to upsert product")
    except ValueError as e:
        return error_response(str(e), 400)
    except Exception as e:
        logger.error(f"Unexpected error upserting product: {str(e)}")
        return internal_error_response("Failed to upsert product")


async def patch_product(req: func.HttpRequest, service: ProductService) -> func.HttpResponse:
    """
    PATCH /api/product/{id}
    Partial update: fields left out of the body keep their current value.
    """
    try:
        product_id = parse_id(req)
        fields, errors = parse_product_fields(_get_json(req))
        if errors:
            return validation_error_response(errors)
        
        await service.patch_product(product_id, **fields)
        return status_response(200)
    except NotFoundError:
        return not_found_response("Product")
    except ExecutionError as e:
        logger.error(f"Error patching product: {str(e)}")
        return internal_error_response("Failed to update product")
    except ValueError as e:
        return error_response(str(e), 400)
    except Exception as e:
        logger.error(f"Unexpected error patching product: {str(e)}")
        return internal_error_response("Failed to update product")


async def delete_product(req: func.HttpRequest, service: ProductService) -> func.HttpResponse:
    """
    DELETE /api/product/{id}
    """
    try:
        product_id = parse_id(req)
        await service.delete_product(product_id)
        return status_response(200)
    except NotFoundError:
        return not_found_response("Product")
    except ExecutionError as e:
        logger.error(f"Error deleting product: {str(e)}")
        return internal_error_response("Failed to delete product")
    except ValueError as e:
        return error_response(str(e), 400)
    except Exception as e:
        logger.error(f"Unexpected error deleting product: {str(e)}")
        return internal_error_response("Failed to delete product")


def register_product_routes(
    app: func.FunctionApp,
    service_factory: Optional[Callable[[], ProductService]] = None
):
    """
    Register all product routes with the function app.
    
    Args:
        app: The function app
        service_factory: Builds the ProductService for each request
            (default: ProductService.from_settings)
    """
    make_service = service_factory or ProductService.from_settings
    
    @app.function_name(name="ReadAllProducts")
    @app.route(route="products", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
    async def read_all_products_function(req: func.HttpRequest) -> func.HttpResponse:
        return await read_all_products(req, make_service())
    
    @app.function_name(name="ReadProductById")
    @app.route(route="product/{id}", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
    async def read_product_by_id_function(req: func.HttpRequest) -> func.HttpResponse:
        return await read_product_by_id(req, make_service())
    
    @app.function_name(name="ReadProductByName")
    @app.route(route="product/name/{name}", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
    async def read_product_by_name_function(req: func.HttpRequest) -> func.HttpResponse:
        return await read_product_by_name(req, make_service())
    
    @app.function_name(name="ReadProduct")
    @app.route(route="product", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
    async def read_products_function(req: func.HttpRequest) -> func.HttpResponse:
        return await read_products(req, make_service())
    
    @app.function_name(name="CreateProduct")
    @app.route(route="product", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
    async def create_product_function(req: func.HttpRequest) -> func.HttpResponse:
        return await create_product(req, make_service())
    
    @app.function_name(name="UpsertProduct")
    @app.route(route="product/upsert/{id}", methods=["PATCH"], auth_level=func.AuthLevel.ANONYMOUS)
    async def upsert_product_function(req: func.HttpRequest) -> func.HttpResponse:
        return await upsert_product(req, make_service())
    
    @app.function_name(name="PatchProduct")
    @app.route(route="product/{id}", methods=["PATCH"], auth_level=func.AuthLevel.ANONYMOUS)
    async def patch_product_function(req: func.HttpRequest) -> func.HttpResponse:
        return await patch_product(req, make_service())
    
    @app.function_name(name="DeleteProduct")
    @app.route(route="product/{id}", methods=["DELETE"], auth_level=func.AuthLevel.ANONYMOUS)
    async def delete_product_function(req: func.HttpRequest) -> func.HttpResponse:
        return await delete_product(req, make_service())
