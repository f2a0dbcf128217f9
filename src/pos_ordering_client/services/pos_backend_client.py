"""Client for interacting with the POS backend REST API."""

import logging
import time
from decimal import Decimal, InvalidOperation
from typing import Any

import httpx
from pydantic import ValidationError

from pos_ordering_client.models.catalog_models import Category, Customer, Product
from pos_ordering_client.models.payment_models import PaymentMethodRecord
from pos_ordering_client.models.table_models import Table, TableStatus
from pos_ordering_client.models.transaction_models import TransactionRequest
from pos_ordering_client.observability.metrics import record_backend_call

logger = logging.getLogger(__name__)


class PosBackendClient:
    """HTTP client for the POS backend.

    Every call opens a short-lived ``httpx.AsyncClient``. Expected failures
    (HTTP error status, network errors, malformed payloads) are logged and
    reported as ``None`` for reads and ``False``/``None`` for writes; callers
    decide how to degrade.
    """

    def __init__(self, base_url: str, auth_token: str | None = None, timeout: float = 10.0) -> None:
        """Initialize the backend client.

        Args:
            base_url: Base URL of the backend API (e.g., "https://pos.example.com/wp-json/posq/v1")
            auth_token: Optional bearer token sent with every request
            timeout: Per-request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.auth_token = auth_token
        self.timeout = timeout

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.auth_token:
            headers["Authorization"] = f"Bearer {self.auth_token}"
        return headers

    async def _request(
        self, method: str, path: str, json: Any = None, route: str | None = None
    ) -> Any | None:
        """Send one request and return the decoded JSON body.

        Args:
            method: HTTP method
            path: Path relative to the base URL
            json: Optional JSON body
            route: Path template used as the metrics label; defaults to the path

        Returns:
            Decoded body (``{}`` for an empty body), or None on failure
        """
        url = f"{self.base_url}{path}"
        started = time.perf_counter()

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(method, url, json=json, headers=self._headers())
                response.raise_for_status()
                return response.json() if response.content else {}

        except (httpx.HTTPStatusError, httpx.RequestError, ValueError) as e:
            logger.error(f"POS backend {method} {path} failed: {e}")
            return None

        finally:
            record_backend_call(method, route or path, time.perf_counter() - started)

    # Catalog

    async def get_products(self) -> list[Product] | None:
        """Fetch all products.

        Returns:
            List of Product objects, empty list if none exist, or None on failure
        """
        data = await self._request("GET", "/products")
        if data is None:
            return None

        try:
            return [self._parse_product(item) for item in data]
        except (ValidationError, KeyError, TypeError, ValueError, InvalidOperation) as e:
            logger.error(f"Malformed product payload: {e}")
            return None

    @staticmethod
    def _parse_product(item: dict[str, Any]) -> Product:
        category_id = item.get("category_id", item.get("categoryId"))
        return Product(
            id=str(item["id"]),
            name=item["name"],
            price=Decimal(str(item["price"])),
            category=item.get("category_name") or item.get("category") or "Uncategorized",
            category_id=str(category_id) if category_id else None,
            available=item.get("available", True),
            image=item.get("image_url", item.get("image")),
            description=item.get("description"),
            stock=int(item.get("stock") or 0),
        )

    async def get_categories(self) -> list[Category] | None:
        """Fetch all product categories.

        Returns:
            List of Category objects, empty list if none exist, or None on failure
        """
        data = await self._request("GET", "/categories")
        if data is None:
            return None

        try:
            return [
                Category(
                    id=str(item["id"]),
                    name=item["name"],
                    icon=item.get("icon") or "Box",
                    description=item.get("description"),
                )
                for item in data
            ]
        except (ValidationError, KeyError, TypeError) as e:
            logger.error(f"Malformed category payload: {e}")
            return None

    async def get_customers(self) -> list[Customer] | None:
        """Fetch all customers.

        Returns:
            List of Customer objects, empty list if none exist, or None on failure
        """
        data = await self._request("GET", "/customers")
        if data is None:
            return None

        try:
            return [
                Customer(
                    id=str(item["id"]),
                    name=item["name"],
                    email=item.get("email"),
                    phone=item.get("phone"),
                    address=item.get("address"),
                )
                for item in data
            ]
        except (ValidationError, KeyError, TypeError) as e:
            logger.error(f"Malformed customer payload: {e}")
            return None

    # Transactions

    async def create_transaction(self, request: TransactionRequest) -> str | None:
        """Create a transaction.

        Args:
            request: Transaction body built from the cart

        Returns:
            The backend transaction id (empty string if none was returned), or None on failure
        """
        data = await self._request("POST", "/transactions", json=request.to_payload())
        if data is None:
            return None

        transaction_id = data.get("id") if isinstance(data, dict) else None
        return str(transaction_id) if transaction_id is not None else ""

    # Payment methods

    async def get_payment_methods(self) -> list[PaymentMethodRecord] | None:
        """Fetch configured payment methods.

        Returns:
            List of PaymentMethodRecord objects, empty list if none exist, or None on failure
        """
        data = await self._request("GET", "/payment-methods")
        if data is None:
            return None

        try:
            return [PaymentMethodRecord.model_validate(item) for item in data]
        except (ValidationError, TypeError) as e:
            logger.error(f"Malformed payment method payload: {e}")
            return None

    async def update_payment_method(self, method_id: str, payload: dict[str, Any]) -> bool:
        """Update a payment method's enabled flag, fee and config.

        Args:
            method_id: Payment method id
            payload: Body with enabled, fee, feeType and config

        Returns:
            bool: True if the backend accepted the update, False otherwise
        """
        data = await self._request(
            "PUT", f"/payment-methods/{method_id}", json=payload, route="/payment-methods/{id}"
        )
        return data is not None

    async def create_custom_payment_method(self, payload: dict[str, Any]) -> str | None:
        """Create a custom payment method.

        Args:
            payload: Body with name, category, enabled, fee and feeType

        Returns:
            The id assigned by the backend, or None on failure
        """
        data = await self._request("POST", "/payment-methods/custom", json=payload)
        if not isinstance(data, dict) or not data.get("id"):
            return None
        return str(data["id"])

    async def delete_custom_payment_method(self, method_id: str) -> bool:
        """Delete a custom payment method.

        Args:
            method_id: Payment method id

        Returns:
            bool: True if delete succeeded, False otherwise
        """
        data = await self._request(
            "DELETE", f"/payment-methods/custom/{method_id}", route="/payment-methods/custom/{id}"
        )
        return data is not None

    # Tables

    async def get_tables(self) -> list[Table] | None:
        """Fetch all tables.

        Returns:
            List of Table objects, empty list if none exist, or None on failure
        """
        data = await self._request("GET", "/tables")
        if data is None:
            return None

        try:
            return [Table.model_validate(item) for item in data]
        except (ValidationError, TypeError) as e:
            logger.error(f"Malformed table payload: {e}")
            return None

    async def create_table(self, fields: dict[str, Any]) -> Table | None:
        """Create a table.

        Args:
            fields: Body with tableNumber, capacity and area

        Returns:
            The created Table, or None on failure
        """
        data = await self._request("POST", "/tables", json=fields)
        if data is None:
            return None

        try:
            return Table.model_validate(data)
        except ValidationError as e:
            logger.error(f"Malformed table payload: {e}")
            return None

    async def update_table(self, table_id: str, fields: dict[str, Any]) -> bool:
        """Update a table's number, capacity or area.

        Args:
            table_id: Table id
            fields: Changed fields in camelCase

        Returns:
            bool: True if update succeeded, False otherwise
        """
        data = await self._request("PUT", f"/tables/{table_id}", json=fields, route="/tables/{id}")
        return data is not None

    async def delete_table(self, table_id: str) -> bool:
        """Delete a table.

        Args:
            table_id: Table id

        Returns:
            bool: True if delete succeeded, False otherwise
        """
        data = await self._request("DELETE", f"/tables/{table_id}", route="/tables/{id}")
        return data is not None

    async def update_table_status(
        self, table_id: str, status: TableStatus, order_id: str | None = None
    ) -> bool:
        """Change a table's status.

        Args:
            table_id: Table id
            status: New status
            order_id: Optional order attached to the table

        Returns:
            bool: True if update succeeded, False otherwise
        """
        body = {"status": status.value, "currentOrderId": order_id}
        data = await self._request(
            "PUT", f"/tables/{table_id}/status", json=body, route="/tables/{id}/status"
        )
        return data is not None
