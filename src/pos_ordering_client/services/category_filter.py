"""Category filtering for the product display.

Upstream data tags products inconsistently: some carry the category's
machine id, others its display name. A product belongs to a category when
either matches.
"""

from collections.abc import Sequence

from pos_ordering_client.models.catalog_models import ALL_CATEGORY_ID, Category, Product


def resolve_category_name(category_id: str, categories: Sequence[Category]) -> str | None:
    """Find the display name of a category by id.

    Args:
        category_id: Category id to look up
        categories: Known categories

    Returns:
        The category name, or None if the id is unknown
    """
    for category in categories:
        if category.id == category_id:
            return category.name
    return None


def product_matches_category(product: Product, category_id: str, category_name: str | None) -> bool:
    """Check whether a product is tagged with a category's id or name.

    Args:
        product: Product to check
        category_id: Category id
        category_name: Resolved category name; None disables name matching

    Returns:
        bool: True if the product's category equals the id or the name
    """
    if product.category == category_id:
        return True
    return category_name is not None and product.category == category_name


def filter_products(
    selected_category_id: str,
    products: Sequence[Product],
    categories: Sequence[Category],
) -> list[Product]:
    """Return the products visible under the selected category.

    Args:
        selected_category_id: Selected category id, or "all"
        products: Full product list
        categories: Category list used to resolve the selected id's name

    Returns:
        New list of visible products, in catalog order
    """
    if selected_category_id == ALL_CATEGORY_ID:
        return list(products)

    category_name = resolve_category_name(selected_category_id, categories)
    return [
        product
        for product in products
        if product_matches_category(product, selected_category_id, category_name)
    ]


def count_products(category: Category, products: Sequence[Product]) -> int:
    """Count products belonging to a category, by id or name."""
    return sum(1 for product in products if product_matches_category(product, category.id, category.name))
