"""
FastAPI Application Entry Point

Festival Stalls Ordering API
Stalls publish menus, customers place orders, stall owners move orders
through their status.

Endpoints:
    - GET /: Admin dashboard (HTML)
    - GET /health: System health check
    - GET /api/stalls: List stalls
    - GET /api/menu/{stall_id}: Menu of one stall
    - POST /api/orders: Place an order
    - GET /api/orders/{stall_id}: Orders of one stall, newest first
    - PATCH /api/orders/{order_id}: Update order status
    - GET /api/orders-detail/{order_id}: One order with references resolved

No endpoint authenticates the caller. Any failure, including a malformed
request body, is answered with 500 and {"error": "<fixed message>"};
missing records come back as null rather than 404.

Author: Festival Stalls Team
Version: 1.0.0
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings, get_settings, setup_logging
from app.database import Database, get_db
from app.schemas import (
    OrderCreate,
    OrderStatusUpdate,
    StallResponse,
    MenuItemResponse,
    OrderResponse,
    OrderDetailResponse,
    OrderCreateResponse,
    ErrorResponse,
    HealthResponse,
)
from app.services import store
from app.services.dashboard import build_dashboard_context

logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))

# Fixed error message per endpoint, keyed by handler name
FAILURE_MESSAGES = {
    "list_stalls": "Failed to fetch stalls",
    "list_menu_items": "Failed to fetch menu items",
    "create_order": "Failed to create order",
    "list_orders": "Failed to fetch orders",
    "update_order_status": "Failed to update order",
    "get_order_detail": "Failed to fetch order details",
}

ERROR_RESPONSES = {500: {"model": ErrorResponse}}


class ApiError(Exception):
    """Raised by route handlers; rendered as {"error": message}."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.
    """
    settings: Settings = app.state.settings

    logger.info("=" * 60)
    logger.info(f"🚀 Starting {settings.app_name}")
    logger.info(f"   Version: {settings.app_version}")
    logger.info(f"   Environment: {settings.env_mode.value}")
    logger.info(f"   Database: {settings.safe_database_url}")
    logger.info("=" * 60)

    if app.state.database is None:
        app.state.database = Database(settings.database_url, echo=settings.database_echo)
    await app.state.database.create_all()
    logger.info("✅ Database initialized")

    yield  # Application runs

    logger.info("Shutting down...")
    await app.state.database.dispose()
    logger.info("✅ Cleanup complete")


# =============================================================================
# ROOT & HEALTH ENDPOINTS
# =============================================================================

router = APIRouter()


@router.get("/", response_class=HTMLResponse, tags=["Dashboard"], include_in_schema=False)
async def dashboard_page(
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """Admin dashboard: counts plus stall, menu item and order tables."""
    settings: Settings = request.app.state.settings
    try:
        context = await build_dashboard_context(db)
    except Exception as e:
        logger.exception(f"Error loading dashboard: {e}")
        return PlainTextResponse("Error loading dashboard", status_code=500)

    context.update(
        app_name=settings.app_name,
        api_url=settings.api_base_url,
        frontend_url=settings.frontend_url,
        database_url=settings.safe_database_url,
    )
    return templates.TemplateResponse(request, "dashboard.html", context)


@router.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="System Health Check",
)
async def health_check(request: Request) -> HealthResponse:
    """Verify the store is reachable."""
    db_status = "healthy"
    try:
        await request.app.state.database.ping()
    except Exception as e:
        db_status = f"unhealthy: {str(e)}"
        logger.error(f"Database health check failed: {e}")

    return HealthResponse(
        status="operational" if db_status == "healthy" else "degraded",
        database=db_status,
        timestamp=datetime.now(),
    )


# =============================================================================
# STALL & MENU ENDPOINTS
# =============================================================================

@router.get(
    "/api/stalls",
    response_model=List[StallResponse],
    responses=ERROR_RESPONSES,
    tags=["Stalls"],
)
async def list_stalls(db: AsyncSession = Depends(get_db)) -> List[StallResponse]:
    """All stalls, sorted by name."""
    try:
        stalls = await store.list_stalls(db)
        return [StallResponse.model_validate(stall) for stall in stalls]
    except Exception as e:
        logger.exception(f"Error fetching stalls: {e}")
        raise ApiError(FAILURE_MESSAGES["list_stalls"]) from e


@router.get(
    "/api/menu/{stall_id}",
    response_model=List[MenuItemResponse],
    responses=ERROR_RESPONSES,
    tags=["Stalls"],
)
async def list_menu_items(
    stall_id: str,
    db: AsyncSession = Depends(get_db),
) -> List[MenuItemResponse]:
    """Menu items of one stall, sorted by name. Unknown stalls have an empty menu."""
    try:
        menu_items = await store.list_menu_items(db, stall_id)
        return [MenuItemResponse.model_validate(item) for item in menu_items]
    except Exception as e:
        logger.exception(f"Error fetching menu items: {e}")
        raise ApiError(FAILURE_MESSAGES["list_menu_items"]) from e


# =============================================================================
# ORDER ENDPOINTS
# =============================================================================

@router.post(
    "/api/orders",
    response_model=OrderCreateResponse,
    responses=ERROR_RESPONSES,
    tags=["Orders"],
    summary="Place Order",
)
async def create_order(
    order_data: OrderCreate,
    db: AsyncSession = Depends(get_db),
) -> OrderCreateResponse:
    """
    Place a new order.

    The order always starts as pending, whatever the body says. Item prices,
    item names and the total are stored as submitted.
    """
    logger.info(f"Creating order for: {order_data.customer_name}")

    try:
        order = await store.create_order(db, order_data)
        return OrderCreateResponse(success=True, order_id=order.id)
    except Exception as e:
        logger.exception(f"Error creating order: {e}")
        raise ApiError(FAILURE_MESSAGES["create_order"]) from e


@router.get(
    "/api/orders/{stall_id}",
    response_model=List[OrderResponse],
    responses=ERROR_RESPONSES,
    tags=["Orders"],
)
async def list_orders(
    stall_id: str,
    db: AsyncSession = Depends(get_db),
) -> List[OrderResponse]:
    """Orders placed at one stall, newest first."""
    try:
        orders = await store.list_orders(db, stall_id)
        return [OrderResponse.model_validate(order) for order in orders]
    except Exception as e:
        logger.exception(f"Error fetching orders: {e}")
        raise ApiError(FAILURE_MESSAGES["list_orders"]) from e


@router.patch(
    "/api/orders/{order_id}",
    response_model=Optional[OrderResponse],
    responses=ERROR_RESPONSES,
    tags=["Orders"],
    summary="Update Order Status",
)
async def update_order_status(
    order_id: str,
    payload: OrderStatusUpdate,
    db: AsyncSession = Depends(get_db),
) -> Optional[OrderResponse]:
    """
    Set the order's status to the given string.

    Neither the value nor the transition is checked. Returns null when the
    order does not exist.
    """
    try:
        order = await store.update_order_status(db, order_id, payload.status)
        return OrderResponse.model_validate(order) if order else None
    except Exception as e:
        logger.exception(f"Error updating order: {e}")
        raise ApiError(FAILURE_MESSAGES["update_order_status"]) from e


@router.get(
    "/api/orders-detail/{order_id}",
    response_model=Optional[OrderDetailResponse],
    responses=ERROR_RESPONSES,
    tags=["Orders"],
)
async def get_order_detail(
    order_id: str,
    db: AsyncSession = Depends(get_db),
) -> Optional[OrderDetailResponse]:
    """One order with its stall and menu items embedded in place of their ids."""
    try:
        populated = await store.get_order_populated(db, order_id)
        if populated is None:
            return None
        return OrderDetailResponse.from_populated(
            populated.order, populated.stall, populated.menu_items
        )
    except Exception as e:
        logger.exception(f"Error fetching order details: {e}")
        raise ApiError(FAILURE_MESSAGES["get_order_detail"]) from e


# =============================================================================
# ERROR HANDLERS
# =============================================================================

async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed input gets the endpoint's usual failure, not a 422."""
    endpoint = request.scope.get("endpoint")
    message = FAILURE_MESSAGES.get(getattr(endpoint, "__name__", ""), "Invalid request")
    logger.warning(f"Rejected request to {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=500, content={"error": message})


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler."""
    logger.exception(f"Unhandled exception: {exc}")
    return JSONResponse(status_code=500, content={"error": "Internal Server Error"})


# =============================================================================
# APPLICATION FACTORY
# =============================================================================

def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """
    Build the API application.

    Args:
        settings: Configuration; defaults to the environment
        database: Store handle; created from settings.database_url at
            startup when omitted

    Returns:
        FastAPI: The configured application
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Ordering API for festival food stalls.",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None if settings.is_production else "/redoc",
    )
    app.state.settings = settings
    app.state.database = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)

    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    return app


setup_logging()
app = create_app()


def run() -> None:
    """Serve the API on the configured host and port."""
    import uvicorn

    settings = get_settings()
    uvicorn.run("app.main:app", host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    run()
