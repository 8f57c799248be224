"""
Reservation engine.

Binds available duplicate barcode instances to a pending trade and back.

Concurrency model:
    The trade row is locked with ``select_for_update()`` and instances are
    claimed with a conditional UPDATE (``control_bar=2 AND reserved_trade
    IS NULL``). The affected-row count is the single-flight check: when it
    is lower than requested, another transaction got there first and the
    whole operation is rolled back. Nothing here locks in application code
    or retries.
"""

import logging
from typing import Iterable, List, Optional, Tuple

from django.conf import settings
from django.db.models import QuerySet

from apps.barcodes.models import BarcodeInstance, ControlBar
from apps.catalog.models import BeerCap
from apps.common.exceptions import InvalidArgumentError
from apps.common.transactions import store_transaction
from apps.common.validators import normalize_barcode, require_positive_id, require_positive_ids
from apps.trades.models import Trade, TradeStatus

from .exceptions import (
    BarcodeCapMismatchError,
    BarcodeNotFoundError,
    CapNotFoundError,
    InstanceNotAvailableError,
    InstanceNotReservedError,
    TradeNotFoundError,
    TradeNotPendingError,
)

logger = logging.getLogger(__name__)


def _format_ids(ids):
    return ', '.join(str(i) for i in ids)


def lock_pending_trade(trade_id: int, action: str) -> Trade:
    """
    Lock a trade row for the rest of the transaction and check it is pending.

    Must be called inside ``store_transaction()``.

    Raises:
        TradeNotFoundError: If the trade does not exist
        TradeNotPendingError: If the trade is canceled or completed
    """
    try:
        trade = Trade.objects.select_for_update().get(pk=trade_id)
    except Trade.DoesNotExist:
        raise TradeNotFoundError()

    if trade.status != TradeStatus.PENDING:
        logger.warning("Rejected %s on trade %s (status=%s)", action, trade_id, trade.status)
        raise TradeNotPendingError(f"Only pending trades can {action} (trade is {trade.status})")
    return trade


def _available_filter():
    return {
        'control_bar': ControlBar.DUPLICATE,
        'reserved_trade__isnull': True,
        'beer_cap__isnull': False,
    }


def _find_unavailable(instances: Iterable[BarcodeInstance]) -> List[int]:
    return [instance.pk for instance in instances if not instance.is_available]


def _claim_instances(trade: Trade, ids: List[int]) -> int:
    """Conditionally move instances 2 -> 3. Returns the affected-row count."""
    return (
        BarcodeInstance.objects
        .filter(pk__in=ids, **_available_filter())
        .update(control_bar=ControlBar.RESERVED, reserved_trade=trade)
    )


def reserve_instances(*, trade_id: int, instance_ids: Iterable[int]) -> dict:
    """
    Reserve a set of available duplicates for a pending trade.

    All-or-nothing: if any instance is missing or not available, no
    instance is reserved.

    Args:
        trade_id: Pending trade receiving the instances
        instance_ids: Barcode instance ids (duplicates are ignored)

    Returns:
        ``{'reserved_count': n}``

    Raises:
        InvalidArgumentError: If an id is not a positive integer or the set is empty
        TradeNotFoundError: If the trade does not exist
        TradeNotPendingError: If the trade is not pending
        BarcodeNotFoundError: If any instance does not exist
        InstanceNotAvailableError: If any instance is not an available duplicate,
            including when a concurrent reservation claimed it first
    """
    require_positive_id(trade_id, 'trade_id')
    ids = require_positive_ids(instance_ids, 'instance_ids')

    with store_transaction():
        trade = lock_pending_trade(trade_id, 'reserve caps')

        instances = list(
            BarcodeInstance.objects
            .select_for_update()
            .filter(pk__in=ids)
        )
        found = {instance.pk for instance in instances}
        missing = [pk for pk in ids if pk not in found]
        if missing:
            raise BarcodeNotFoundError(f"Barcode instance(s) not found: {_format_ids(missing)}")

        unavailable = _find_unavailable(instances)
        if unavailable:
            logger.warning(
                "Rejected reservation on trade %s: unavailable %s",
                trade_id, _format_ids(unavailable)
            )
            raise InstanceNotAvailableError(
                f"Barcode instance(s) not available: {_format_ids(unavailable)}"
            )

        reserved = _claim_instances(trade, ids)
        if reserved != len(ids):
            # Raising inside the transaction undoes the rows already claimed
            logger.warning(
                "Reservation race on trade %s: claimed %d of %d instances",
                trade_id, reserved, len(ids)
            )
            raise InstanceNotAvailableError(
                "Barcode instance(s) were reserved concurrently; nothing was reserved"
            )

    logger.info("Trade %s reserved %d instance(s): %s", trade_id, reserved, _format_ids(ids))
    return {'reserved_count': reserved}


def reserve_barcode(*, trade_id: int, barcode: str, beer_cap_id: int) -> BarcodeInstance:
    """
    Reserve one scanned barcode for a pending trade.

    The scan must match the cap the user picked, so a mislabelled cap is
    caught before it is packed.

    Raises:
        InvalidArgumentError: If an id or the barcode is malformed
        TradeNotFoundError / TradeNotPendingError: As for reserve_instances
        BarcodeNotFoundError: If the barcode does not exist
        InstanceNotAvailableError: If the barcode is not an available duplicate
        BarcodeCapMismatchError: If the barcode belongs to another cap
    """
    require_positive_id(trade_id, 'trade_id')
    require_positive_id(beer_cap_id, 'beer_cap_id')
    barcode = normalize_barcode(barcode)

    with store_transaction():
        trade = lock_pending_trade(trade_id, 'reserve caps')

        try:
            instance = BarcodeInstance.objects.select_for_update().get(barcode=barcode)
        except BarcodeInstance.DoesNotExist:
            raise BarcodeNotFoundError()

        if instance.control_bar != ControlBar.DUPLICATE:
            raise InstanceNotAvailableError(
                f"Barcode not available (control_bar={instance.control_bar})"
            )
        if instance.reserved_trade_id is not None:
            raise InstanceNotAvailableError("Barcode already reserved")
        if instance.beer_cap_id != beer_cap_id:
            raise BarcodeCapMismatchError()

        if _claim_instances(trade, [instance.pk]) != 1:
            raise InstanceNotAvailableError("Barcode was reserved concurrently")
        instance.refresh_from_db()

    logger.info("Trade %s reserved barcode %s (cap %s)", trade_id, barcode, beer_cap_id)
    return instance


def release_barcode(*, trade_id: int, barcode: str) -> BarcodeInstance:
    """
    Take one reserved barcode out of a pending trade (3 -> 2).

    Raises:
        InvalidArgumentError: If the id or barcode is malformed
        TradeNotFoundError / TradeNotPendingError: As for reserve_instances
        BarcodeNotFoundError: If the barcode does not exist
        InstanceNotReservedError: If the barcode is not reserved for this trade
    """
    require_positive_id(trade_id, 'trade_id')
    barcode = normalize_barcode(barcode)

    with store_transaction():
        trade = lock_pending_trade(trade_id, 'remove caps')

        try:
            instance = BarcodeInstance.objects.select_for_update().get(barcode=barcode)
        except BarcodeInstance.DoesNotExist:
            raise BarcodeNotFoundError()

        if instance.control_bar != ControlBar.RESERVED:
            raise InstanceNotReservedError(
                f"Barcode is not reserved (control_bar={instance.control_bar})"
            )
        if instance.reserved_trade_id != trade.pk:
            raise InstanceNotReservedError("Barcode is reserved for a different trade")

        released = BarcodeInstance.objects.filter(
            pk=instance.pk,
            control_bar=ControlBar.RESERVED,
            reserved_trade=trade
        ).update(control_bar=ControlBar.DUPLICATE, reserved_trade=None)
        if released != 1:
            raise InstanceNotReservedError("Barcode was released concurrently")
        instance.refresh_from_db()

    logger.info("Trade %s released barcode %s", trade_id, barcode)
    return instance


def list_available_for_cap(
    *,
    beer_cap_id: int,
    limit: Optional[int] = None
) -> Tuple[BeerCap, QuerySet[BarcodeInstance]]:
    """
    Available duplicates of a cap, by id ascending.

    ``limit`` defaults to ``CAPS_AVAILABLE_DEFAULT_LIMIT`` and is clamped
    to ``1..CAPS_AVAILABLE_MAX_LIMIT``.

    Returns:
        Tuple of (BeerCap, instances)

    Raises:
        InvalidArgumentError: If beer_cap_id or limit is not an integer
        CapNotFoundError: If the cap does not exist
    """
    require_positive_id(beer_cap_id, 'beer_cap_id')
    if limit is None:
        limit = settings.CAPS_AVAILABLE_DEFAULT_LIMIT
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise InvalidArgumentError("Invalid limit")
    limit = min(settings.CAPS_AVAILABLE_MAX_LIMIT, max(1, limit))

    try:
        cap = BeerCap.objects.get(pk=beer_cap_id)
    except BeerCap.DoesNotExist:
        raise CapNotFoundError()

    instances = (
        BarcodeInstance.objects
        .filter(beer_cap=cap, control_bar=ControlBar.DUPLICATE, reserved_trade__isnull=True)
        .order_by('id')[:limit]
    )
    return cap, instances


def list_reserved_for_trade(*, trade_id: int) -> QuerySet[BarcodeInstance]:
    """Instances reserved for a trade, by id ascending. Empty for unknown trades."""
    require_positive_id(trade_id, 'trade_id')
    return (
        BarcodeInstance.objects
        .filter(reserved_trade_id=trade_id, control_bar=ControlBar.RESERVED)
        .order_by('id')
    )
