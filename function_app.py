"""
Products Backend - Azure Functions Application

HTTP-triggered CRUD functions over the Product table. Each function maps one
route to one SQL statement run through the shared query executor.
"""

import azure.functions as func
import datetime
import json
import logging
import os

from shared.settings import get_log_level

# Configure logging
logging.basicConfig(level=get_log_level())
logger = logging.getLogger(__name__)

# Create the main Function App instance
app = func.FunctionApp(http_auth_level=func.AuthLevel.ANONYMOUS)

from products.routes import register_product_routes

# =============================================================================
# Health Check Endpoint
# =============================================================================

@app.route(route="health", methods=["GET"])
def health_check(req: func.HttpRequest) -> func.HttpResponse:
    """Health check endpoint to verify the Azure Function is running."""
    logger.info("Health check endpoint called.")
    
    health_status = {
        "status": "healthy",
        "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        "service": "Products Backend",
        "environment": os.environ.get("AZURE_FUNCTIONS_ENVIRONMENT", "Development")
    }
    
    return func.HttpResponse(
        json.dumps(health_status),
        status_code=200,
        mimetype="application/json"
    )

# =============================================================================
# Product Endpoints
# =============================================================================

register_product_routes(app)

logger.info("Products Backend Azure Functions initialized successfully.")
