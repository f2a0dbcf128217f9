"""Catalog data models.

These models represent products, categories and customers as fetched from the
POS backend, plus the cart line that snapshots a product at the moment it is
added. Wire records use camelCase keys; the models accept both spellings.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ALL_CATEGORY_ID = "all"


class Product(BaseModel):
    """Product available for sale."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str = Field(..., description="Unique identifier for the product")
    name: str = Field(..., description="Product name")
    price: Decimal = Field(..., description="Unit price", ge=0)
    category: str = Field(default="", description="Category id or display name")
    category_id: str | None = Field(None, description="Machine category id, when known")
    available: bool = Field(default=True, description="Whether product can be sold")
    image: str | None = Field(None, description="URL to product image")
    description: str | None = Field(None, description="Product description")
    stock: int = Field(default=0, description="Units in stock", ge=0)


class Category(BaseModel):
    """Product category.

    ``count`` is always recomputed from the product list and never trusted
    from the backend.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(..., description="Unique identifier for the category")
    name: str = Field(..., description="Display name")
    icon: str = Field(default="Box", description="Display glyph")
    count: int = Field(default=0, description="Number of products in the category", ge=0)
    description: str | None = Field(None, description="Category description")


class Customer(BaseModel):
    """Customer reference data."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    name: str
    email: str | None = None
    phone: str | None = None
    address: str | None = None


class CartItem(Product):
    """A pending order line.

    Carries a copy of every product field taken when the line was created, so
    later price changes in the catalog do not affect it.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=False)

    quantity: int = Field(default=1, description="Units ordered", ge=1)

    @classmethod
    def from_product(cls, product: Product) -> "CartItem":
        """Create a single-unit cart line from a product."""
        return cls(**product.model_dump(), quantity=1)

    @property
    def line_total(self) -> Decimal:
        """Price multiplied by quantity."""
        return self.price * self.quantity
