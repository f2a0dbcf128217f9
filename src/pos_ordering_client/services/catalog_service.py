"""Catalog index holding products, categories and customers."""

import asyncio
import logging

from pos_ordering_client.models.catalog_models import ALL_CATEGORY_ID, Category, Customer, Product
from pos_ordering_client.observability import traced
from pos_ordering_client.services.category_filter import count_products, filter_products
from pos_ordering_client.services.pos_backend_client import PosBackendClient

logger = logging.getLogger(__name__)

ALL_CATEGORY_NAME = "All Items"
ALL_CATEGORY_ICON = "📋"


class CatalogIndex:
    """Catalog data as last fetched from the backend.

    Lists are replaced wholesale on every successful load. The category list
    always starts with the synthetic "all" entry, and every category's count
    is recomputed from the product list.
    """

    def __init__(self, backend_client: PosBackendClient) -> None:
        """Initialize an empty catalog.

        Args:
            backend_client: Client for fetching catalog data
        """
        self.backend_client = backend_client
        self.products: list[Product] = []
        self.categories: list[Category] = []
        self.customers: list[Customer] = []
        self.selected_category_id = ALL_CATEGORY_ID

    @traced("catalog.load")
    async def load(self) -> bool:
        """Fetch products, categories and customers.

        Products and categories must both load; a customer fetch failure is
        tolerated and leaves the customer list empty.

        Returns:
            bool: True if the catalog was replaced, False if the previous data was kept
        """
        products, categories, customers = await asyncio.gather(
            self.backend_client.get_products(),
            self.backend_client.get_categories(),
            self.backend_client.get_customers(),
        )

        if products is None or categories is None:
            logger.error("Failed to load catalog, keeping previous data")
            return False

        if customers is None:
            logger.warning("Failed to load customers, continuing without them")
            customers = []

        self.products = products
        self.categories = build_category_list(categories, products)
        self.customers = customers

        logger.info(f"Catalog loaded: {len(products)} products, {len(categories)} categories")
        return True

    def select_category(self, category_id: str) -> None:
        """Change the selected category."""
        self.selected_category_id = category_id

    @property
    def visible_products(self) -> list[Product]:
        """Products under the selected category, recomputed on each read."""
        return filter_products(self.selected_category_id, self.products, self.categories)

    def get_product(self, product_id: str) -> Product | None:
        """Find a product by id.

        Args:
            product_id: Product id

        Returns:
            Product if found, None otherwise
        """
        for product in self.products:
            if product.id == product_id:
                return product
        return None

    def clear(self) -> None:
        """Drop all catalog data and reset the selection."""
        self.products = []
        self.categories = []
        self.customers = []
        self.selected_category_id = ALL_CATEGORY_ID


def build_category_list(categories: list[Category], products: list[Product]) -> list[Category]:
    """Prepend the "all" category and recompute every count.

    Backend categories claiming the reserved "all" id are dropped.

    Args:
        categories: Categories from the backend
        products: Current product list

    Returns:
        New category list starting with the "all" entry
    """
    result = [
        Category(id=ALL_CATEGORY_ID, name=ALL_CATEGORY_NAME, icon=ALL_CATEGORY_ICON, count=len(products))
    ]

    for category in categories:
        if category.id == ALL_CATEGORY_ID:
            logger.warning("Backend returned a category with reserved id 'all', ignoring it")
            continue
        result.append(category.model_copy(update={"count": count_products(category, products)}))

    return result
