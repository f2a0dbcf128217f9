"""Unit tests for payment method models."""

from decimal import Decimal

import pytest

from pos_ordering_client.models.payment_models import (
    DEFAULT_METHOD_IDS,
    GENERIC_COLOR,
    GENERIC_ICON,
    DefaultMethodId,
    FeeType,
    MethodIcon,
    PaymentCategory,
    PaymentMethodConfig,
    PaymentMethodRecord,
    default_payment_methods,
    find_descriptor,
)


@pytest.mark.unit
class TestDefaultPaymentMethods:
    """Test suite for the default method table."""

    def test_nine_defaults_in_display_order(self) -> None:
        methods = default_payment_methods()

        assert [m.id for m in methods] == [m.value for m in DefaultMethodId]
        assert len(methods) == 9
        assert all(m.is_default for m in methods)

    def test_only_cash_enabled_by_default(self) -> None:
        enabled = [m.id for m in default_payment_methods() if m.enabled]

        assert enabled == ["cash"]

    def test_seeded_fees(self) -> None:
        methods = {m.id: m for m in default_payment_methods()}

        assert methods["qris-static"].fee == Decimal("0.7")
        assert methods["qris-static"].fee_type == FeeType.PERCENTAGE
        assert methods["gofood"].fee == Decimal("20")
        assert methods["cash"].fee_type == FeeType.FLAT

    def test_returns_fresh_copies(self) -> None:
        first = default_payment_methods()
        first[0].config["note"] = "changed"

        assert default_payment_methods()[0].config == {}

    def test_default_ids(self) -> None:
        assert "cash" in DEFAULT_METHOD_IDS
        assert "custom-1" not in DEFAULT_METHOD_IDS


@pytest.mark.unit
class TestFindDescriptor:
    """Test suite for find_descriptor."""

    def test_by_id(self) -> None:
        descriptor = find_descriptor("debit")

        assert descriptor is not None
        assert descriptor.icon == MethodIcon.CREDIT_CARD
        assert descriptor.color == "indigo-500"

    def test_falls_back_to_sub_category(self) -> None:
        descriptor = find_descriptor("17", "goFood")

        assert descriptor is not None
        assert descriptor.name == "GoFood"

    def test_unknown(self) -> None:
        assert find_descriptor("17", "ovo") is None
        assert find_descriptor(None) is None


@pytest.mark.unit
class TestPaymentMethodConfig:
    """Test suite for PaymentMethodConfig."""

    def test_from_record_resolves_icon_and_color(self) -> None:
        record = PaymentMethodRecord.model_validate(
            {"id": "gofood", "name": "GoFood", "category": "foodDelivery", "enabled": True}
        )

        method = PaymentMethodConfig.from_record(record)

        assert method.icon == MethodIcon.UTENSILS
        assert method.color == "green-600"
        assert method.category == PaymentCategory.FOOD_DELIVERY

    def test_from_record_applies_backend_defaults(self) -> None:
        """Test the fallbacks for fields the backend omitted."""
        record = PaymentMethodRecord.model_validate(
            {"name": "Debit", "category": "offline", "subCategory": "debit"}
        )

        method = PaymentMethodConfig.from_record(record)

        assert method.id == "debit"
        assert method.is_default is True
        assert method.fee == Decimal("0")
        assert method.fee_type == FeeType.PERCENTAGE
        assert method.config == {}

    def test_from_record_custom_method_gets_generic_look(self) -> None:
        record = PaymentMethodRecord.model_validate(
            {"id": "42", "name": "OVO", "category": "online", "isDefault": False, "fee": 1}
        )

        method = PaymentMethodConfig.from_record(record)

        assert method.is_default is False
        assert method.icon == GENERIC_ICON
        assert method.color == GENERIC_COLOR

    def test_to_update_payload(self) -> None:
        method = PaymentMethodConfig.from_descriptor(DefaultMethodId.QRIS_STATIC)
        method.config["qrImage"] = "https://example.com/qr.png"

        assert method.to_update_payload() == {
            "enabled": False,
            "fee": 0.7,
            "feeType": "percentage",
            "config": {"qrImage": "https://example.com/qr.png"},
        }

    def test_serializes_with_camel_case(self) -> None:
        dumped = PaymentMethodConfig.from_descriptor(DefaultMethodId.CASH).model_dump(by_alias=True)

        assert dumped["isDefault"] is True
        assert dumped["feeType"] == "flat"
        assert dumped["subCategory"] == "cash"
