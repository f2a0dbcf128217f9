"""Cart store for pending order lines."""

import logging
from decimal import Decimal

from pos_ordering_client.models.catalog_models import CartItem, Product

logger = logging.getLogger(__name__)


class CartStore:
    """In-memory collection of order lines awaiting checkout.

    Lines are keyed by product id, so the cart never holds two lines for the
    same product, and a line whose quantity drops to zero is removed. Totals
    are derived from the lines on every read.
    """

    def __init__(self) -> None:
        """Initialize an empty cart."""
        # dict preserves insertion order, which is the display order
        self._items: dict[str, CartItem] = {}

    def add_item(self, product: Product) -> CartItem:
        """Add one unit of a product.

        Increments the existing line, or creates a new line that snapshots
        the product's current fields.

        Args:
            product: Product to add

        Returns:
            The affected cart line
        """
        existing = self._items.get(product.id)
        if existing is not None:
            existing.quantity += 1
            return existing

        item = CartItem.from_product(product)
        self._items[product.id] = item
        logger.debug(f"Added product {product.id} to cart")
        return item

    def update_quantity(self, product_id: str, delta: int) -> CartItem | None:
        """Change a line's quantity by a delta.

        The result is clamped at zero, and a line at zero is removed. Unknown
        ids are ignored.

        Args:
            product_id: Product id of the line
            delta: Amount to add (negative to reduce)

        Returns:
            The updated line, or None if it was removed or never existed
        """
        item = self._items.get(product_id)
        if item is None:
            return None

        quantity = max(0, item.quantity + delta)
        if quantity == 0:
            del self._items[product_id]
            return None

        item.quantity = quantity
        return item

    def remove_item(self, product_id: str) -> bool:
        """Remove a line regardless of quantity.

        Args:
            product_id: Product id of the line

        Returns:
            bool: True if a line was removed, False if none existed
        """
        return self._items.pop(product_id, None) is not None

    def clear(self) -> None:
        """Remove every line."""
        self._items.clear()

    def get_item(self, product_id: str) -> CartItem | None:
        """Return the line for a product, if any."""
        return self._items.get(product_id)

    @property
    def items(self) -> list[CartItem]:
        """Copies of the lines, in the order they were first added."""
        return [item.model_copy() for item in self._items.values()]

    @property
    def total(self) -> Decimal:
        """Sum of price times quantity over all lines."""
        return sum((item.line_total for item in self._items.values()), Decimal("0"))

    @property
    def item_count(self) -> int:
        """Sum of quantities over all lines."""
        return sum(item.quantity for item in self._items.values())

    @property
    def is_empty(self) -> bool:
        return not self._items

    def __len__(self) -> int:
        return len(self._items)
