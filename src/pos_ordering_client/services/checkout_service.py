"""Checkout service translating the cart into a backend transaction."""

import logging
from dataclasses import dataclass
from decimal import Decimal

from pos_ordering_client.models.transaction_models import TransactionItem, TransactionRequest
from pos_ordering_client.observability import traced
from pos_ordering_client.observability.metrics import record_checkout_failure, record_checkout_success
from pos_ordering_client.services.cart_service import CartStore
from pos_ordering_client.services.pos_backend_client import PosBackendClient

logger = logging.getLogger(__name__)


@dataclass
class CheckoutResult:
    """Result of a checkout attempt.

    Attributes:
        success: Whether the backend accepted the transaction
        transaction_id: Backend transaction id on success, None otherwise
        total: Cart total that was submitted
        item_count: Number of units that were submitted
        error_message: Error message if checkout failed, None otherwise
    """

    success: bool
    total: Decimal
    item_count: int
    transaction_id: str | None = None
    error_message: str | None = None


def build_transaction_request(cart: CartStore) -> TransactionRequest:
    """Translate the cart into a transaction body.

    Args:
        cart: Cart to translate

    Returns:
        TransactionRequest with one item per cart line and the cart total
    """
    return TransactionRequest(
        items=[
            TransactionItem(product_id=item.id, quantity=item.quantity, price=item.price)
            for item in cart.items
        ],
        total=cart.total,
        status="completed",
    )


class CheckoutService:
    """Service for submitting the cart to the backend.

    The submitted lines are removed from the cart only after the backend
    accepts the transaction, so a failed checkout never loses the order.
    """

    def __init__(self, backend_client: PosBackendClient) -> None:
        """Initialize the CheckoutService.

        Args:
            backend_client: Client for creating transactions
        """
        self.backend_client = backend_client

    @traced("checkout")
    async def checkout(self, cart: CartStore) -> CheckoutResult:
        """Submit the cart as a completed transaction.

        Args:
            cart: Cart to submit; the submitted lines are removed on success

        Returns:
            CheckoutResult describing the outcome
        """
        total = cart.total
        item_count = cart.item_count

        if cart.is_empty:
            record_checkout_failure("empty_cart")
            return CheckoutResult(
                success=False,
                total=total,
                item_count=0,
                error_message="Cart is empty",
            )

        request = build_transaction_request(cart)
        transaction_id = await self.backend_client.create_transaction(request)

        if transaction_id is None:
            error_msg = "Failed to create transaction, cart kept for retry"
            logger.error(error_msg)
            record_checkout_failure("backend_error")
            return CheckoutResult(
                success=False,
                total=total,
                item_count=item_count,
                error_message=error_msg,
            )

        # Lines added while the request was in flight stay for the next order
        for item in request.items:
            cart.update_quantity(item.product_id, -item.quantity)
        record_checkout_success(item_count)
        logger.info(f"Transaction {transaction_id} created for {item_count} items, total {total}")

        return CheckoutResult(
            success=True,
            total=total,
            item_count=item_count,
            transaction_id=transaction_id,
        )
