"""Payment method configuration models.

Default payment methods are described by a static lookup table keyed by
``DefaultMethodId``. Remote records and cached entries are both resolved
against that table to obtain their icon and color.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PaymentCategory(str, Enum):
    """Enumeration of payment method groups."""

    OFFLINE = "offline"
    ONLINE = "online"
    FOOD_DELIVERY = "foodDelivery"


class FeeType(str, Enum):
    """How a method's fee is applied to a transaction total."""

    PERCENTAGE = "percentage"
    FLAT = "flat"


class MethodIcon(str, Enum):
    """Display glyphs for payment methods."""

    BANKNOTE = "banknote"
    QR_CODE = "qr-code"
    BUILDING = "building"
    CREDIT_CARD = "credit-card"
    SMARTPHONE = "smartphone"
    UTENSILS = "utensils"


class DefaultMethodId(str, Enum):
    """Fixed ids of the system-seeded payment methods."""

    CASH = "cash"
    QRIS_STATIC = "qris-static"
    BANK_TRANSFER = "bank-transfer"
    DEBIT = "debit"
    CREDIT = "credit"
    EWALLET = "ewallet"
    GOFOOD = "gofood"
    GRABFOOD = "grabfood"
    SHOPEEFOOD = "shopeefood"


class PersistOutcome(str, Enum):
    """Result of writing payment configuration.

    ``LOCAL_ONLY`` means the backend rejected or could not be reached, but the
    in-memory state and the local cache hold the change.
    """

    REMOTE = "remote"
    LOCAL_ONLY = "local_only"


@dataclass(frozen=True)
class MethodDescriptor:
    """Static description of a payment method."""

    name: str
    category: PaymentCategory
    sub_category: str | None
    icon: MethodIcon
    color: str
    fee: Decimal
    fee_type: FeeType
    enabled: bool = False


DEFAULT_METHOD_DESCRIPTORS: dict[DefaultMethodId, MethodDescriptor] = {
    DefaultMethodId.CASH: MethodDescriptor(
        name="Cash",
        category=PaymentCategory.OFFLINE,
        sub_category="cash",
        icon=MethodIcon.BANKNOTE,
        color="green-500",
        fee=Decimal("0"),
        fee_type=FeeType.FLAT,
        enabled=True,
    ),
    DefaultMethodId.QRIS_STATIC: MethodDescriptor(
        name="QRIS Statis",
        category=PaymentCategory.ONLINE,
        sub_category="qris",
        icon=MethodIcon.QR_CODE,
        color="blue-500",
        fee=Decimal("0.7"),
        fee_type=FeeType.PERCENTAGE,
    ),
    DefaultMethodId.BANK_TRANSFER: MethodDescriptor(
        name="Transfer Bank",
        category=PaymentCategory.ONLINE,
        sub_category="transfer",
        icon=MethodIcon.BUILDING,
        color="purple-500",
        fee=Decimal("0"),
        fee_type=FeeType.FLAT,
    ),
    DefaultMethodId.DEBIT: MethodDescriptor(
        name="Kartu Debit",
        category=PaymentCategory.OFFLINE,
        sub_category="debit",
        icon=MethodIcon.CREDIT_CARD,
        color="indigo-500",
        fee=Decimal("1.5"),
        fee_type=FeeType.PERCENTAGE,
    ),
    DefaultMethodId.CREDIT: MethodDescriptor(
        name="Kartu Kredit",
        category=PaymentCategory.OFFLINE,
        sub_category="credit",
        icon=MethodIcon.CREDIT_CARD,
        color="pink-500",
        fee=Decimal("2.5"),
        fee_type=FeeType.PERCENTAGE,
    ),
    DefaultMethodId.EWALLET: MethodDescriptor(
        name="E-Wallet",
        category=PaymentCategory.ONLINE,
        sub_category="eWallet",
        icon=MethodIcon.SMARTPHONE,
        color="teal-500",
        fee=Decimal("1.0"),
        fee_type=FeeType.PERCENTAGE,
    ),
    DefaultMethodId.GOFOOD: MethodDescriptor(
        name="GoFood",
        category=PaymentCategory.FOOD_DELIVERY,
        sub_category="goFood",
        icon=MethodIcon.UTENSILS,
        color="green-600",
        fee=Decimal("20"),
        fee_type=FeeType.PERCENTAGE,
    ),
    DefaultMethodId.GRABFOOD: MethodDescriptor(
        name="GrabFood",
        category=PaymentCategory.FOOD_DELIVERY,
        sub_category="grabFood",
        icon=MethodIcon.UTENSILS,
        color="emerald-600",
        fee=Decimal("20"),
        fee_type=FeeType.PERCENTAGE,
    ),
    DefaultMethodId.SHOPEEFOOD: MethodDescriptor(
        name="ShopeeFood",
        category=PaymentCategory.FOOD_DELIVERY,
        sub_category="shopeeFood",
        icon=MethodIcon.UTENSILS,
        color="orange-600",
        fee=Decimal("20"),
        fee_type=FeeType.PERCENTAGE,
    ),
}

GENERIC_ICON = MethodIcon.CREDIT_CARD
GENERIC_COLOR = "gray-500"


def find_descriptor(method_id: str | None, sub_category: str | None = None) -> MethodDescriptor | None:
    """Look up a default method descriptor by id, then by sub-category.

    Args:
        method_id: Payment method id
        sub_category: Optional sub-category used when the id is not a default id

    Returns:
        MethodDescriptor if either key matches a default method, None otherwise
    """
    if method_id is not None:
        try:
            return DEFAULT_METHOD_DESCRIPTORS[DefaultMethodId(method_id)]
        except ValueError:
            pass

    if sub_category is not None:
        for descriptor in DEFAULT_METHOD_DESCRIPTORS.values():
            if descriptor.sub_category == sub_category:
                return descriptor

    return None


class PaymentMethodConfig(BaseModel):
    """Locally held configuration for one payment method."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(..., description="Unique method identifier")
    name: str = Field(..., description="Display name")
    category: PaymentCategory = Field(..., description="Method group")
    sub_category: str | None = Field(None, description="Method sub-category")
    enabled: bool = Field(default=False, description="Whether method is offered at checkout")
    is_default: bool = Field(default=False, description="System-seeded, cannot be deleted")
    fee: Decimal = Field(default=Decimal("0"), description="Fee amount or percentage", ge=0)
    fee_type: FeeType = Field(default=FeeType.PERCENTAGE, description="How fee is applied")
    icon: MethodIcon = Field(default=GENERIC_ICON, description="Display glyph")
    color: str = Field(default=GENERIC_COLOR, description="Display color token")
    config: dict[str, Any] = Field(
        default_factory=dict, description="Method-specific settings (QR image, bank details)"
    )

    @classmethod
    def from_descriptor(cls, method_id: DefaultMethodId) -> "PaymentMethodConfig":
        """Build a default method from the static descriptor table.

        Args:
            method_id: Default method to build

        Returns:
            PaymentMethodConfig: Fresh default configuration
        """
        descriptor = DEFAULT_METHOD_DESCRIPTORS[method_id]
        return cls(
            id=method_id.value,
            name=descriptor.name,
            category=descriptor.category,
            sub_category=descriptor.sub_category,
            enabled=descriptor.enabled,
            is_default=True,
            fee=descriptor.fee,
            fee_type=descriptor.fee_type,
            icon=descriptor.icon,
            color=descriptor.color,
            config={},
        )

    @classmethod
    def from_record(cls, record: "PaymentMethodRecord") -> "PaymentMethodConfig":
        """Map a backend record onto a local configuration.

        Missing fields fall back the same way the backend seeds them: the id
        falls back to the sub-category, absent ``isDefault`` means a default
        method, absent fee is zero and absent fee type is percentage.

        Args:
            record: Record returned by the backend

        Returns:
            PaymentMethodConfig: Parsed configuration with resolved icon and color
        """
        method_id = record.id or record.sub_category or ""
        descriptor = find_descriptor(record.id, record.sub_category)

        return cls(
            id=method_id,
            name=record.name,
            category=record.category,
            sub_category=record.sub_category,
            enabled=record.enabled,
            is_default=record.is_default if record.is_default is not None else True,
            fee=record.fee or Decimal("0"),
            fee_type=record.fee_type or FeeType.PERCENTAGE,
            icon=descriptor.icon if descriptor else GENERIC_ICON,
            color=descriptor.color if descriptor else GENERIC_COLOR,
            config=record.config or {},
        )

    def to_update_payload(self) -> dict[str, Any]:
        """Convert to the backend update body.

        Returns:
            dict: JSON-compatible body with enabled, fee, feeType and config
        """
        return {
            "enabled": self.enabled,
            "fee": float(self.fee),
            "feeType": self.fee_type.value,
            "config": self.config,
        }


class PaymentMethodRecord(BaseModel):
    """Payment method as returned by the backend."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str | None = None
    name: str
    category: PaymentCategory
    sub_category: str | None = None
    enabled: bool = False
    is_default: bool | None = None
    fee: Decimal | None = Field(None, ge=0)
    fee_type: FeeType | None = None
    config: dict[str, Any] | None = None


DEFAULT_METHOD_IDS: frozenset[str] = frozenset(m.value for m in DefaultMethodId)


def default_payment_methods() -> list[PaymentMethodConfig]:
    """Return a fresh copy of the full default method table, in display order."""
    return [PaymentMethodConfig.from_descriptor(method_id) for method_id in DefaultMethodId]
