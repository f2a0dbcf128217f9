"""Payment method registry with remote-primary, cache-fallback persistence.

Reconciliation rule: a successful backend read wins and is mirrored into the
local cache; when the backend is unreachable the cache wins, overlaid on the
static default table. Writes are applied in memory first, then pushed to the
backend, and always mirrored into the cache, so a backend outage never blocks
back-office edits.
"""

import asyncio
import logging
import time
from collections.abc import Callable
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from pydantic import ValidationError

from pos_ordering_client.models.payment_models import (
    DEFAULT_METHOD_IDS,
    GENERIC_COLOR,
    GENERIC_ICON,
    FeeType,
    PaymentCategory,
    PaymentMethodConfig,
    PersistOutcome,
    default_payment_methods,
)
from pos_ordering_client.observability import traced
from pos_ordering_client.observability.metrics import record_degraded_write
from pos_ordering_client.repositories.cache_repositories import PaymentMethodCacheRepository
from pos_ordering_client.services.pos_backend_client import PosBackendClient

logger = logging.getLogger(__name__)


class PaymentMethodValidationError(ValueError):
    """Raised when a payment method edit is rejected before any change."""


class PaymentMethodNotFoundError(LookupError):
    """Raised when no payment method has the requested id."""


class MethodSource(str, Enum):
    """Where the current method list was loaded from."""

    REMOTE = "remote"
    CACHE = "cache"
    DEFAULTS = "defaults"


def parse_fee(value: Any) -> Decimal:
    """Parse a fee entered by the user.

    Args:
        value: Number or numeric string

    Returns:
        Decimal: The fee

    Raises:
        PaymentMethodValidationError: If the value is not a finite, non-negative number
    """
    if isinstance(value, bool) or value is None:
        raise PaymentMethodValidationError("Fee must be a non-negative number")

    try:
        fee = Decimal(str(value).strip())
    except InvalidOperation:
        raise PaymentMethodValidationError("Fee must be a non-negative number") from None

    if not fee.is_finite() or fee < 0:
        raise PaymentMethodValidationError("Fee must be a non-negative number")

    return fee


def parse_fee_type(value: FeeType | str) -> FeeType:
    """Parse a fee type, rejecting unknown values."""
    try:
        return FeeType(value)
    except ValueError:
        raise PaymentMethodValidationError(f"Unknown fee type: {value!r}") from None


def parse_category(value: PaymentCategory | str) -> PaymentCategory:
    """Parse a payment category, rejecting unknown values."""
    try:
        return PaymentCategory(value)
    except ValueError:
        raise PaymentMethodValidationError(f"Unknown payment category: {value!r}") from None


def calculate_fee(fee: Decimal, fee_type: FeeType, total: Decimal | int | str) -> Decimal:
    """Compute the fee charged on a transaction.

    Percentage fees are ``fee`` percent of the total; flat fees are a fixed
    amount regardless of the total.

    Args:
        fee: Configured fee value
        fee_type: How the fee applies
        total: Transaction total

    Returns:
        Decimal: Fee amount in the same unit as the total
    """
    if fee_type is FeeType.FLAT:
        return fee
    return fee * Decimal(str(total)) / Decimal(100)


def format_fee(fee: Decimal, fee_type: FeeType) -> str | None:
    """Render a fee for display, e.g. "0.7%" or "Rp 5.000".

    Returns:
        Display string, or None when there is no fee
    """
    if fee == 0:
        return None

    if fee_type is FeeType.FLAT:
        # id-ID grouping: "." for thousands, "," for decimals
        grouped = format(fee.normalize(), ",f").translate(str.maketrans({",": ".", ".": ","}))
        return f"Rp {grouped}"

    return f"{format(fee.normalize(), 'f')}%"


class PaymentMethodRegistry:
    """Registry of default and custom payment methods.

    Default methods can be toggled and reconfigured but never deleted;
    custom methods can be created and deleted. Fees are configuration only;
    the registry does not apply them to transactions.
    """

    def __init__(
        self,
        backend_client: PosBackendClient,
        cache_repository: PaymentMethodCacheRepository,
    ) -> None:
        """Initialize an empty registry.

        Args:
            backend_client: Client for the payment method endpoints
            cache_repository: Local fallback store for the method list
        """
        self.backend_client = backend_client
        self.cache_repository = cache_repository
        self._methods: list[PaymentMethodConfig] = []
        self.source: MethodSource | None = None

    @property
    def methods(self) -> list[PaymentMethodConfig]:
        """Current method list in display order."""
        return list(self._methods)

    def get(self, method_id: str) -> PaymentMethodConfig:
        """Return a method by id.

        Raises:
            PaymentMethodNotFoundError: If no method has this id
        """
        for method in self._methods:
            if method.id == method_id:
                return method
        raise PaymentMethodNotFoundError(f"Payment method {method_id} not found")

    def _replace(self, updated: PaymentMethodConfig) -> None:
        self._methods = [updated if m.id == updated.id else m for m in self._methods]

    @traced("payment_methods.load")
    async def load(self) -> list[PaymentMethodConfig]:
        """Load methods from the backend, falling back to cache then defaults.

        Returns:
            The loaded method list
        """
        records = await self.backend_client.get_payment_methods()

        if records is None:
            logger.warning("Failed to load payment methods from backend, using local cache")
            self._methods, self.source = self._restore_from_cache()
        elif records:
            self._methods = [PaymentMethodConfig.from_record(record) for record in records]
            self.source = MethodSource.REMOTE
            self.cache_repository.save_methods(self._methods)
        else:
            logger.info("Backend has no payment methods, seeding defaults")
            self._methods = default_payment_methods()
            self.source = MethodSource.DEFAULTS

        logger.info(f"Loaded {len(self._methods)} payment methods from {self.source.value}")
        return self.methods

    def _restore_from_cache(self) -> tuple[list[PaymentMethodConfig], MethodSource]:
        """Overlay cached entries on the default table.

        Cached entries with a default id overwrite that default's fields;
        cached custom entries are appended in cached order. Entries that fail
        validation are skipped.
        """
        entries = self.cache_repository.load_entries()
        if entries is None:
            return default_payment_methods(), MethodSource.DEFAULTS

        cached_by_id = {entry.get("id"): entry for entry in entries}
        methods: list[PaymentMethodConfig] = []

        for default in default_payment_methods():
            saved = cached_by_id.get(default.id)
            if saved is None:
                methods.append(default)
                continue
            try:
                merged = {**default.model_dump(by_alias=True), **saved, "isDefault": True}
                methods.append(PaymentMethodConfig.model_validate(merged))
            except ValidationError as e:
                logger.warning(f"Ignoring invalid cached entry for {default.id}: {e}")
                methods.append(default)

        for entry in entries:
            is_default = entry.get("isDefault", entry.get("is_default", False))
            if is_default or entry.get("id") in DEFAULT_METHOD_IDS:
                continue
            try:
                methods.append(PaymentMethodConfig.model_validate(entry))
            except ValidationError as e:
                logger.warning(f"Ignoring invalid cached custom method: {e}")

        return methods, MethodSource.CACHE

    @traced("payment_methods.persist")
    async def persist(self, methods: list[PaymentMethodConfig] | None = None) -> PersistOutcome:
        """Push default method settings to the backend and mirror to cache.

        The cache is written whatever the backend outcome, and a backend
        failure never rolls back the in-memory list.

        Args:
            methods: New full method list; defaults to the current list

        Returns:
            PersistOutcome.REMOTE if every update was accepted, LOCAL_ONLY otherwise
        """
        if methods is not None:
            self._methods = list(methods)
        snapshot = self.methods

        results = await asyncio.gather(
            *(
                self.backend_client.update_payment_method(method.id, method.to_update_payload())
                for method in snapshot
                if method.is_default
            )
        )

        if not self.cache_repository.save_methods(snapshot):
            logger.error("Payment methods could not be cached locally")

        if all(results):
            return PersistOutcome.REMOTE

        logger.warning("Payment methods saved locally only, backend update failed")
        record_degraded_write("payment_methods", "persist")
        return PersistOutcome.LOCAL_ONLY

    @traced("payment_methods.toggle")
    async def toggle(self, method_id: str) -> PersistOutcome:
        """Flip a method's enabled flag and persist.

        Raises:
            PaymentMethodNotFoundError: If no method has this id
        """
        method = self.get(method_id)
        self._replace(method.model_copy(update={"enabled": not method.enabled}))
        return await self.persist()

    @traced("payment_methods.update_config")
    async def update_config(
        self,
        method_id: str,
        fee: Any,
        fee_type: FeeType | str | None = None,
        config: dict[str, Any] | None = None,
    ) -> PersistOutcome:
        """Replace a method's fee settings and merge method-specific config.

        Validation happens before anything is changed.

        Args:
            method_id: Method to reconfigure
            fee: New fee, number or numeric string
            fee_type: New fee type; keeps the current one when omitted
            config: Keys to set in the method's config (e.g. QR image, bank details)

        Returns:
            PersistOutcome of the resulting persist

        Raises:
            PaymentMethodNotFoundError: If no method has this id
            PaymentMethodValidationError: If the fee or fee type is invalid
        """
        method = self.get(method_id)
        parsed_fee = parse_fee(fee)
        parsed_fee_type = parse_fee_type(fee_type) if fee_type is not None else method.fee_type

        update: dict[str, Any] = {"fee": parsed_fee, "fee_type": parsed_fee_type}
        if config is not None:
            update["config"] = {**method.config, **config}

        self._replace(method.model_copy(update=update))
        return await self.persist()

    @traced("payment_methods.create_custom")
    async def create_custom(
        self,
        name: str,
        category: PaymentCategory | str,
        fee: Any = 0,
        fee_type: FeeType | str = FeeType.PERCENTAGE,
    ) -> tuple[PaymentMethodConfig, PersistOutcome]:
        """Create a user-defined payment method.

        If the backend does not return an id, a local ``custom-<millis>`` id
        is used so the method is still usable.

        Returns:
            Tuple of (new method, outcome)

        Raises:
            PaymentMethodValidationError: If the name is empty or the fee, fee type or category is invalid
        """
        name = (name or "").strip()
        if not name:
            raise PaymentMethodValidationError("Payment method name is required")
        parsed_category = parse_category(category)
        parsed_fee = parse_fee(fee)
        parsed_fee_type = parse_fee_type(fee_type)

        remote_id = await self.backend_client.create_custom_payment_method(
            {
                "name": name,
                "category": parsed_category.value,
                "enabled": True,
                "fee": float(parsed_fee),
                "feeType": parsed_fee_type.value,
            }
        )

        method = PaymentMethodConfig(
            id=remote_id or self._local_id(),
            name=name,
            category=parsed_category,
            enabled=True,
            is_default=False,
            fee=parsed_fee,
            fee_type=parsed_fee_type,
            icon=GENERIC_ICON,
            color=GENERIC_COLOR,
        )
        self._methods.append(method)
        self.cache_repository.save_methods(self._methods)

        if remote_id is None:
            logger.warning(f"Custom payment method {method.id} saved locally only")
            record_degraded_write("payment_methods", "create_custom")
            return method, PersistOutcome.LOCAL_ONLY

        logger.info(f"Created custom payment method {method.id}")
        return method, PersistOutcome.REMOTE

    def _local_id(self) -> str:
        existing = {m.id for m in self._methods}
        stamp = int(time.time() * 1000)
        while f"custom-{stamp}" in existing:
            stamp += 1
        return f"custom-{stamp}"

    @traced("payment_methods.delete_custom")
    async def delete_custom(
        self,
        method_id: str,
        confirm: Callable[[PaymentMethodConfig], bool] | None = None,
    ) -> PersistOutcome | None:
        """Delete a custom payment method.

        The method is removed from memory and cache before the backend call,
        and stays removed if that call fails.

        Args:
            method_id: Method to delete
            confirm: Optional callback asked before deleting; returning False aborts

        Returns:
            PersistOutcome, or None if the confirmation was declined

        Raises:
            PaymentMethodNotFoundError: If no method has this id
            PaymentMethodValidationError: If the method is a default method
        """
        method = self.get(method_id)
        if method.is_default:
            raise PaymentMethodValidationError("Default payment methods cannot be deleted")

        if confirm is not None and not confirm(method):
            return None

        self._methods = [m for m in self._methods if m.id != method_id]
        self.cache_repository.save_methods(self._methods)

        if not await self.backend_client.delete_custom_payment_method(method_id):
            logger.warning(f"Custom payment method {method_id} deleted locally only")
            record_degraded_write("payment_methods", "delete_custom")
            return PersistOutcome.LOCAL_ONLY

        return PersistOutcome.REMOTE

    def fee_for(self, method_id: str, total: Decimal | int | str) -> Decimal:
        """Fee a given method would charge on a total.

        Raises:
            PaymentMethodNotFoundError: If no method has this id
        """
        method = self.get(method_id)
        return calculate_fee(method.fee, method.fee_type, total)

    def methods_by_category(self) -> dict[PaymentCategory, list[PaymentMethodConfig]]:
        """Group methods by category, every category present."""
        groups: dict[PaymentCategory, list[PaymentMethodConfig]] = {c: [] for c in PaymentCategory}
        for method in self._methods:
            groups[method.category].append(method)
        return groups

    def enabled_methods(self) -> list[PaymentMethodConfig]:
        return [m for m in self._methods if m.enabled]

    def reset(self) -> None:
        """Forget the loaded methods; the durable cache is kept."""
        self._methods = []
        self.source = None
