"""
Barcode inspection service.

Read-side lookups over barcode instances plus the switch that promotes a
duplicate to be its cap's original.
"""

import logging
from typing import Optional

from django.conf import settings
from django.db.models import QuerySet

from apps.catalog.models import BeerCap
from apps.common.exceptions import InvalidArgumentError
from apps.common.transactions import store_transaction
from apps.common.validators import normalize_barcode, require_positive_id
from apps.barcodes.models import BarcodeInstance, ControlBar

from .exceptions import BarcodeNotFoundError, CapNotFoundError, SwitchNotAllowedError

logger = logging.getLogger(__name__)

SWITCH_BLOCK_REASONS = {
    ControlBar.ORIGINAL: 'Already original',
    ControlBar.RESERVED: 'Pending trade',
    ControlBar.FREE_TOKEN: 'Unassigned token',
}


def inspect_barcode(*, barcode: str) -> BarcodeInstance:
    """
    Look up a scanned barcode with its cap design.

    Raises:
        InvalidArgumentError: If the barcode is malformed
        BarcodeNotFoundError: If no instance carries this barcode
    """
    barcode = normalize_barcode(barcode)
    try:
        return (
            BarcodeInstance.objects
            .select_related('beer_cap', 'beer_cap__country')
            .get(barcode=barcode)
        )
    except BarcodeInstance.DoesNotExist:
        raise BarcodeNotFoundError()


def list_cap_barcodes(*, beer_cap_id: int) -> QuerySet[BarcodeInstance]:
    """
    Barcodes of a cap still in the collection: the original first, then
    the duplicates, each group by barcode. Reserved ones are left out.
    """
    require_positive_id(beer_cap_id, 'beer_cap_id')
    if not BeerCap.objects.filter(pk=beer_cap_id).exists():
        raise CapNotFoundError()

    return (
        BarcodeInstance.objects
        .filter(
            beer_cap_id=beer_cap_id,
            control_bar__in=[ControlBar.ORIGINAL, ControlBar.DUPLICATE]
        )
        .order_by('control_bar', 'barcode')
    )


def barcode_summary() -> dict:
    """Number of cap designs and how many of them have no barcode at all."""
    return {
        'total_caps': BeerCap.objects.count(),
        'missing_barcodes': BeerCap.objects.filter(barcodes__isnull=True).count(),
    }


def list_caps_missing_barcodes(*, limit: Optional[int] = None) -> QuerySet[BeerCap]:
    """
    Cap designs without any barcode, newest first.

    ``limit`` defaults to ``BARCODES_MISSING_DEFAULT_LIMIT`` and is clamped
    to ``1..BARCODES_MISSING_MAX_LIMIT``.

    Raises:
        InvalidArgumentError: If limit is not an integer
    """
    if limit is None:
        limit = settings.BARCODES_MISSING_DEFAULT_LIMIT
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise InvalidArgumentError("Invalid limit")
    limit = min(settings.BARCODES_MISSING_MAX_LIMIT, max(1, limit))

    return (
        BeerCap.objects
        .select_related('country')
        .filter(barcodes__isnull=True)
        .order_by('-id')[:limit]
    )


def switch_original(*, barcode: str, confirm: bool = False) -> dict:
    """
    Make a duplicate the original of its cap.

    Without ``confirm`` only reports whether the switch is possible. With
    ``confirm`` the current original becomes a duplicate and this barcode
    the original, in one transaction.

    Raises:
        InvalidArgumentError: If the barcode is malformed
        BarcodeNotFoundError: If the barcode does not exist
        SwitchNotAllowedError: If confirmed for a barcode that is not an available duplicate
    """
    barcode = normalize_barcode(barcode)

    if not confirm:
        instance = inspect_barcode(barcode=barcode)
        can_switch = instance.control_bar == ControlBar.DUPLICATE
        return {
            'mode': 'status',
            'barcode': instance.barcode,
            'beer_cap_id': instance.beer_cap_id,
            'control_bar': instance.control_bar,
            'can_switch': can_switch,
            'reason': None if can_switch else SWITCH_BLOCK_REASONS.get(instance.control_bar, 'Unknown state'),
        }

    with store_transaction():
        try:
            instance = BarcodeInstance.objects.select_for_update().get(barcode=barcode)
        except BarcodeInstance.DoesNotExist:
            raise BarcodeNotFoundError()

        if instance.control_bar != ControlBar.DUPLICATE or instance.beer_cap_id is None:
            raise SwitchNotAllowedError(
                f"Switch not allowed for this barcode state (control_bar={instance.control_bar})"
            )

        previous = list(
            BarcodeInstance.objects
            .select_for_update()
            .filter(beer_cap_id=instance.beer_cap_id, control_bar=ControlBar.ORIGINAL)
            .values_list('barcode', flat=True)
        )
        BarcodeInstance.objects.filter(
            beer_cap_id=instance.beer_cap_id,
            control_bar=ControlBar.ORIGINAL
        ).update(control_bar=ControlBar.DUPLICATE)

        instance.control_bar = ControlBar.ORIGINAL
        instance.save(update_fields=['control_bar'])

    logger.info(
        "Barcode %s is now the original of cap %s (previous: %s)",
        barcode, instance.beer_cap_id, ', '.join(previous) or 'none'
    )
    return {
        'mode': 'switched',
        'barcode': instance.barcode,
        'beer_cap_id': instance.beer_cap_id,
        'control_bar': instance.control_bar,
        'previous_original': previous[0] if previous else None,
    }
