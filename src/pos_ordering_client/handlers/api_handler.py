"""FastAPI application exposing the terminal's catalog, cart and back-office state."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from pos_ordering_client.models.catalog_models import CartItem, Category, Customer, Product
from pos_ordering_client.models.payment_models import FeeType, PaymentMethodConfig, PersistOutcome
from pos_ordering_client.models.table_models import Table, TableStats
from pos_ordering_client.services.app_context import AppContext
from pos_ordering_client.services.payment_method_service import (
    PaymentMethodNotFoundError,
    PaymentMethodValidationError,
    format_fee,
)
from pos_ordering_client.services.table_service import TableNotFoundError, TableValidationError

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    session_open: bool


class CartResponse(BaseModel):
    """Cart contents with derived totals."""

    items: list[CartItem]
    total: Decimal
    item_count: int


class AddCartItemRequest(BaseModel):
    product_id: str


class UpdateQuantityRequest(BaseModel):
    delta: int


class CheckoutResponse(BaseModel):
    """Response model for checkout."""

    success: bool
    transaction_id: str | None = None
    total: Decimal
    item_count: int
    error_message: str | None = None


class PaymentMethodView(BaseModel):
    """Payment method with its display fee."""

    method: PaymentMethodConfig
    fee_display: str | None = None


class PaymentConfigRequest(BaseModel):
    fee: Any
    fee_type: str | None = None
    config: dict[str, Any] | None = None


class CustomMethodRequest(BaseModel):
    name: str
    category: str
    fee: Any = 0
    fee_type: str = FeeType.PERCENTAGE.value


class PersistResponse(BaseModel):
    """Outcome of a payment method write."""

    outcome: PersistOutcome
    message: str
    method: PaymentMethodConfig | None = None


class FeeResponse(BaseModel):
    method_id: str
    total: Decimal
    fee: Decimal


class TableCreateRequest(BaseModel):
    table_number: str
    capacity: int = 2
    area: str = "Indoor"


class TableUpdateRequest(BaseModel):
    table_number: str | None = None
    capacity: int | None = None
    area: str | None = None


class TableStatusRequest(BaseModel):
    status: str
    order_id: str | None = None


class TableWriteResponse(BaseModel):
    """A table write and whether the backend accepted it."""

    table: Table
    synced: bool


def _persist_message(outcome: PersistOutcome, action: str) -> str:
    if outcome is PersistOutcome.LOCAL_ONLY:
        return f"{action} (saved locally, backend unavailable)"
    return action


def create_app(context: AppContext, manage_session: bool = False) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        context: Session context whose components the routes operate on
        manage_session: Start the session on startup and close it on shutdown

    Returns:
        Configured FastAPI application
    """

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        if manage_session:
            await context.start()
        yield
        if manage_session:
            context.close()

    app = FastAPI(
        title="POS Ordering Client",
        description="Catalog, cart, payment method and table state for a point-of-sale terminal",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.context = context

    @app.exception_handler(PaymentMethodValidationError)
    @app.exception_handler(TableValidationError)
    async def validation_error_handler(_request: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(PaymentMethodNotFoundError)
    @app.exception_handler(TableNotFoundError)
    async def not_found_handler(_request: Request, exc: LookupError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    def ctx() -> AppContext:
        current: AppContext = app.state.context
        return current

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="healthy", session_open=ctx().is_open)

    # Catalog

    @app.get("/catalog/categories", response_model=list[Category], tags=["Catalog"])
    async def list_categories() -> list[Category]:
        """Categories with recomputed counts, "all" first."""
        return ctx().catalog.categories

    @app.get("/catalog/products", response_model=list[Product], tags=["Catalog"])
    async def list_products(category_id: str | None = None) -> list[Product]:
        """Products visible under a category.

        Passing ``category_id`` also makes it the selected category.
        """
        catalog = ctx().catalog
        if category_id is not None:
            catalog.select_category(category_id)
        return catalog.visible_products

    @app.get("/catalog/customers", response_model=list[Customer], tags=["Catalog"])
    async def list_customers() -> list[Customer]:
        return ctx().catalog.customers

    @app.post("/catalog/refresh", response_model=list[Category], tags=["Catalog"])
    async def refresh_catalog() -> list[Category]:
        """Refetch the catalog from the backend.

        Raises:
            HTTPException: 502 if the backend could not be reached
        """
        if not await ctx().catalog.load():
            raise HTTPException(status_code=502, detail="Failed to load catalog from backend")
        return ctx().catalog.categories

    # Cart

    def cart_response() -> CartResponse:
        cart = ctx().cart
        return CartResponse(items=cart.items, total=cart.total, item_count=cart.item_count)

    @app.get("/cart", response_model=CartResponse, tags=["Cart"])
    async def get_cart() -> CartResponse:
        return cart_response()

    @app.post("/cart/items", response_model=CartResponse, tags=["Cart"])
    async def add_cart_item(body: AddCartItemRequest) -> CartResponse:
        """Add one unit of a catalog product.

        Raises:
            HTTPException: 404 if the product is not in the catalog
        """
        product = ctx().catalog.get_product(body.product_id)
        if product is None:
            raise HTTPException(status_code=404, detail=f"Product {body.product_id} not found")
        ctx().cart.add_item(product)
        return cart_response()

    @app.patch("/cart/items/{product_id}", response_model=CartResponse, tags=["Cart"])
    async def update_cart_item(product_id: str, body: UpdateQuantityRequest) -> CartResponse:
        ctx().cart.update_quantity(product_id, body.delta)
        return cart_response()

    @app.delete("/cart/items/{product_id}", response_model=CartResponse, tags=["Cart"])
    async def remove_cart_item(product_id: str) -> CartResponse:
        ctx().cart.remove_item(product_id)
        return cart_response()

    @app.post("/cart/checkout", response_model=CheckoutResponse, tags=["Cart"])
    async def checkout() -> CheckoutResponse:
        """Submit the cart as a transaction.

        Raises:
            HTTPException: 400 for an empty cart, 502 if the backend rejected it
        """
        result = await ctx().checkout()
        response = CheckoutResponse(
            success=result.success,
            transaction_id=result.transaction_id,
            total=result.total,
            item_count=result.item_count,
            error_message=result.error_message,
        )

        if not result.success:
            status_code = 400 if result.item_count == 0 else 502
            raise HTTPException(status_code=status_code, detail=response.model_dump(mode="json"))

        logger.info(f"Checkout completed, transaction {result.transaction_id}")
        return response

    # Payment methods

    @app.get("/payment-methods", response_model=list[PaymentMethodView], tags=["Payment Methods"])
    async def list_payment_methods(category: str | None = None) -> list[PaymentMethodView]:
        methods = ctx().payment_methods.methods
        if category is not None:
            methods = [m for m in methods if m.category == category]
        return [PaymentMethodView(method=m, fee_display=format_fee(m.fee, m.fee_type)) for m in methods]

    @app.post(
        "/payment-methods/{method_id}/toggle", response_model=PersistResponse, tags=["Payment Methods"]
    )
    async def toggle_payment_method(method_id: str) -> PersistResponse:
        registry = ctx().payment_methods
        outcome = await registry.toggle(method_id)
        return PersistResponse(
            outcome=outcome,
            message=_persist_message(outcome, "Payment settings saved"),
            method=registry.get(method_id),
        )

    @app.put("/payment-methods/{method_id}", response_model=PersistResponse, tags=["Payment Methods"])
    async def update_payment_method(method_id: str, body: PaymentConfigRequest) -> PersistResponse:
        registry = ctx().payment_methods
        outcome = await registry.update_config(
            method_id, fee=body.fee, fee_type=body.fee_type, config=body.config
        )
        return PersistResponse(
            outcome=outcome,
            message=_persist_message(outcome, "Payment settings saved"),
            method=registry.get(method_id),
        )

    @app.post(
        "/payment-methods/custom",
        response_model=PersistResponse,
        status_code=201,
        tags=["Payment Methods"],
    )
    async def create_custom_payment_method(body: CustomMethodRequest) -> PersistResponse:
        method, outcome = await ctx().payment_methods.create_custom(
            name=body.name, category=body.category, fee=body.fee, fee_type=body.fee_type
        )
        return PersistResponse(
            outcome=outcome,
            message=_persist_message(outcome, "Custom payment method added"),
            method=method,
        )

    @app.delete(
        "/payment-methods/custom/{method_id}", response_model=PersistResponse, tags=["Payment Methods"]
    )
    async def delete_custom_payment_method(method_id: str) -> PersistResponse:
        """Delete a custom method; the caller has already confirmed with the user."""
        outcome = await ctx().payment_methods.delete_custom(method_id)
        return PersistResponse(
            outcome=outcome, message=_persist_message(outcome, "Payment method deleted")
        )

    @app.get(
        "/payment-methods/{method_id}/fee", response_model=FeeResponse, tags=["Payment Methods"]
    )
    async def calculate_payment_fee(method_id: str, total: Decimal) -> FeeResponse:
        """Fee the method would charge on a transaction total."""
        fee = ctx().payment_methods.fee_for(method_id, total)
        return FeeResponse(method_id=method_id, total=total, fee=fee)

    # Tables

    @app.get("/tables", response_model=list[Table], tags=["Tables"])
    async def list_tables(status: str = "all", area: str = "all") -> list[Table]:
        return ctx().tables.filter_tables(status=status, area=area)

    @app.get("/tables/stats", response_model=TableStats, tags=["Tables"])
    async def table_stats() -> TableStats:
        return ctx().tables.stats()

    @app.get("/tables/areas", response_model=list[str], tags=["Tables"])
    async def table_areas() -> list[str]:
        return ctx().tables.areas()

    @app.post("/tables", response_model=TableWriteResponse, status_code=201, tags=["Tables"])
    async def create_table(body: TableCreateRequest) -> TableWriteResponse:
        table, synced = await ctx().tables.create(body.table_number, body.capacity, body.area)
        return TableWriteResponse(table=table, synced=synced)

    @app.put("/tables/{table_id}", response_model=TableWriteResponse, tags=["Tables"])
    async def update_table(table_id: str, body: TableUpdateRequest) -> TableWriteResponse:
        table, synced = await ctx().tables.update(
            table_id, table_number=body.table_number, capacity=body.capacity, area=body.area
        )
        return TableWriteResponse(table=table, synced=synced)

    @app.delete("/tables/{table_id}", tags=["Tables"])
    async def delete_table(table_id: str) -> dict[str, Any]:
        synced = await ctx().tables.delete(table_id)
        return {"id": table_id, "synced": synced}

    @app.put("/tables/{table_id}/status", response_model=TableWriteResponse, tags=["Tables"])
    async def set_table_status(table_id: str, body: TableStatusRequest) -> TableWriteResponse:
        table, synced = await ctx().tables.set_status(table_id, body.status, body.order_id)
        return TableWriteResponse(table=table, synced=synced)

    return app
