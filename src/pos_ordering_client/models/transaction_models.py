"""Transaction payload models sent to the POS backend."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TransactionItem(BaseModel):
    """One line of a transaction."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    product_id: str = Field(..., description="Product being sold")
    quantity: int = Field(..., description="Units sold", ge=1)
    price: Decimal = Field(..., description="Unit price at time of sale", ge=0)


class TransactionRequest(BaseModel):
    """Body of a transaction creation request."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    items: list[TransactionItem] = Field(..., description="Sold lines")
    total: Decimal = Field(..., description="Sum of price times quantity", ge=0)
    status: str = Field(default="completed", description="Initial transaction status")

    def to_payload(self) -> dict:
        """Convert to the JSON body expected by the backend.

        Returns:
            dict: camelCase body with prices as floats
        """
        return {
            "items": [
                {
                    "productId": item.product_id,
                    "quantity": item.quantity,
                    "price": float(item.price),
                }
                for item in self.items
            ],
            "total": float(self.total),
            "status": self.status,
        }
