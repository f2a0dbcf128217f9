"""Application context owning one terminal session's state."""

import asyncio
import logging

from pos_ordering_client.repositories.cache_repositories import KeyValueStore, PaymentMethodCacheRepository
from pos_ordering_client.services.cart_service import CartStore
from pos_ordering_client.services.catalog_service import CatalogIndex
from pos_ordering_client.services.checkout_service import CheckoutResult, CheckoutService
from pos_ordering_client.services.payment_method_service import PaymentMethodRegistry
from pos_ordering_client.services.pos_backend_client import PosBackendClient
from pos_ordering_client.services.table_service import TableStatusBoard

logger = logging.getLogger(__name__)


class AppContext:
    """Session-scoped container for the catalog, cart and back-office state.

    Components are created once and passed explicitly to whoever needs them.
    ``start`` is called after a successful login and ``close`` on logout.
    """

    def __init__(self, backend_client: PosBackendClient, cache_store: KeyValueStore) -> None:
        """Initialize the context.

        Args:
            backend_client: Client for the POS backend
            cache_store: Durable key-value store for the payment method fallback
        """
        self.backend_client = backend_client
        self.catalog = CatalogIndex(backend_client)
        self.cart = CartStore()
        self.checkout_service = CheckoutService(backend_client)
        self.payment_methods = PaymentMethodRegistry(
            backend_client, PaymentMethodCacheRepository(cache_store)
        )
        self.tables = TableStatusBoard(backend_client)
        self.is_open = False

    async def start(self) -> None:
        """Open the session and load catalog, payment methods and tables concurrently."""
        self.is_open = True
        catalog_loaded, _, tables_loaded = await asyncio.gather(
            self.catalog.load(),
            self.payment_methods.load(),
            self.tables.load(),
        )

        if not catalog_loaded:
            logger.warning("Session started without catalog data")
        if not tables_loaded:
            logger.warning("Session started without table data")

        logger.info("POS session started")

    async def checkout(self) -> CheckoutResult:
        """Submit this session's cart."""
        return await self.checkout_service.checkout(self.cart)

    def close(self) -> None:
        """End the session: clear the cart and reset in-memory state.

        The durable payment method cache survives so the next session can
        still fall back to it.
        """
        self.cart.clear()
        self.payment_methods.reset()
        self.catalog.clear()
        self.tables.clear()
        self.is_open = False
        logger.info("POS session closed")
