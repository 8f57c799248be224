"""
Trade lifecycle service.

Handles trade creation, listing, and the two terminal transitions.

Transitions:
    pending -> canceled   reserved instances go back to available duplicates
    pending -> completed  reserved instances are recorded in the trade history
                          and become free tokens for future barcodes

Both transitions lock the trade row, so a trade reaches exactly one
terminal state even under concurrent requests.
"""

import logging
from typing import List, Optional

from django.db.models import Count, F, QuerySet
from django.utils import timezone

from apps.barcodes.models import BarcodeInstance, ControlBar
from apps.catalog.models import BeerCap
from apps.common.exceptions import ConflictError
from apps.common.transactions import store_transaction
from apps.common.validators import require_choice, require_positive_id
from apps.trades.models import Trade, TradeCap, Trader, TradeStatus, TradeType

from .exceptions import TradeNotFoundError, TraderNotFoundError
from .reservation import lock_pending_trade

logger = logging.getLogger(__name__)

TRADE_SORTS = {
    'date_started_desc': ['-date_started', '-id'],
    'date_started_asc': ['date_started', 'id'],
    'caps_count_desc': ['-caps_count', '-date_started'],
    'caps_count_asc': ['caps_count', '-date_started'],
    'country_asc': ['trader__country__name_full', '-date_started'],
    'country_desc': ['-trader__country__name_full', '-date_started'],
}

MIN_FILTER_LENGTH = 2


def _with_caps_count(queryset):
    # Pending trades hold reserved instances, completed ones hold history rows
    return queryset.annotate(
        caps_count=(
            Count('reserved_instances', distinct=True)
            + Count('traded_caps', distinct=True)
        )
    )


def create_trade(
    *,
    trader_id: int,
    trade_type: str = TradeType.SCAN_BASED,
    notes: Optional[str] = None
) -> Trade:
    """
    Open a pending trade with a trader.

    Args:
        trader_id: Counterparty
        trade_type: 'blind' or 'scan_based'
        notes: Free text, blank is stored as NULL

    Returns:
        Created Trade

    Raises:
        InvalidArgumentError: If trader_id or trade_type is invalid
        TraderNotFoundError: If the trader does not exist
    """
    require_positive_id(trader_id, 'trader_id')
    require_choice(trade_type, TradeType.values, 'trade_type')
    notes = (notes or '').strip() or None

    with store_transaction():
        try:
            trader = Trader.objects.get(pk=trader_id)
        except Trader.DoesNotExist:
            raise TraderNotFoundError()

        trade = Trade.objects.create(
            trader=trader,
            trade_type=trade_type,
            status=TradeStatus.PENDING,
            notes=notes
        )

    logger.info("Trade %s opened with trader %s (%s)", trade.pk, trader_id, trade_type)
    return trade


def get_trade(*, trade_id: int) -> Trade:
    """Trade with trader, country and ``caps_count``."""
    require_positive_id(trade_id, 'trade_id')
    queryset = _with_caps_count(
        Trade.objects.select_related('trader', 'trader__country')
    )
    try:
        return queryset.get(pk=trade_id)
    except Trade.DoesNotExist:
        raise TradeNotFoundError()


def list_trades(
    *,
    status: str = TradeStatus.PENDING,
    trade_type: Optional[str] = None,
    trader: str = '',
    country: str = '',
    sort: str = 'date_started_desc'
) -> QuerySet[Trade]:
    """
    Trades in one status, filtered and sorted.

    Trader and country filters are case-insensitive substrings and only
    apply from 2 characters on.

    Raises:
        InvalidArgumentError: On unknown status, trade_type or sort
    """
    require_choice(status, TradeStatus.values, 'status')
    require_choice(sort, TRADE_SORTS, 'sort')

    queryset = _with_caps_count(
        Trade.objects.select_related('trader', 'trader__country').filter(status=status)
    )

    if trade_type:
        require_choice(trade_type, TradeType.values, 'trade_type')
        queryset = queryset.filter(trade_type=trade_type)

    trader = (trader or '').strip()
    if len(trader) >= MIN_FILTER_LENGTH:
        queryset = queryset.filter(trader__name__icontains=trader)

    country = (country or '').strip()
    if len(country) >= MIN_FILTER_LENGTH:
        queryset = queryset.filter(trader__country__name_full__icontains=country)

    return queryset.order_by(*TRADE_SORTS[sort])


def cancel_trade(*, trade_id: int) -> Trade:
    """
    Cancel a pending trade and release its reservations (3 -> 2).

    Returns:
        Updated Trade

    Raises:
        InvalidArgumentError: If trade_id is invalid
        TradeNotFoundError: If the trade does not exist
        TradeNotPendingError: If the trade is already canceled or completed
    """
    require_positive_id(trade_id, 'trade_id')

    with store_transaction():
        trade = lock_pending_trade(trade_id, 'be canceled')

        released = BarcodeInstance.objects.filter(
            reserved_trade=trade,
            control_bar=ControlBar.RESERVED
        ).update(control_bar=ControlBar.DUPLICATE, reserved_trade=None)

        trade.status = TradeStatus.CANCELED
        trade.date_canceled = timezone.now()
        trade.save(update_fields=['status', 'date_canceled'])

    logger.info("Trade %s canceled, released %d instance(s)", trade_id, released)
    return trade


def complete_trade(*, trade_id: int) -> Trade:
    """
    Complete a pending trade.

    Every reserved instance is copied into the trade history and then
    turned into a free token: control_bar 0 with cap, sheet and
    reservation cleared. The printed barcode can then be reused by the
    next allocation.

    Returns:
        Updated Trade

    Raises:
        InvalidArgumentError: If trade_id is invalid
        TradeNotFoundError: If the trade does not exist
        TradeNotPendingError: If the trade is already canceled or completed
        ConflictError: If reserved instances changed underneath the transaction
    """
    require_positive_id(trade_id, 'trade_id')

    with store_transaction():
        trade = lock_pending_trade(trade_id, 'be completed')

        reserved = list(
            BarcodeInstance.objects
            .select_for_update()
            .filter(reserved_trade=trade, control_bar=ControlBar.RESERVED)
            .order_by('id')
        )

        TradeCap.objects.bulk_create([
            TradeCap(
                trade=trade,
                beer_cap_id=instance.beer_cap_id,
                barcode=instance.barcode,
                sheet=instance.sheet
            )
            for instance in reserved
        ])

        freed = BarcodeInstance.objects.filter(
            pk__in=[instance.pk for instance in reserved],
            reserved_trade=trade,
            control_bar=ControlBar.RESERVED
        ).update(
            control_bar=ControlBar.FREE_TOKEN,
            beer_cap=None,
            sheet=None,
            reserved_trade=None
        )
        if freed != len(reserved):
            raise ConflictError("Reserved caps changed while completing the trade")

        trade.status = TradeStatus.COMPLETED
        trade.date_completed = timezone.now()
        trade.save(update_fields=['status', 'date_completed'])

    logger.info("Trade %s completed with %d cap(s)", trade_id, len(reserved))
    return trade


def get_trade_history(*, trade_id: int) -> List[dict]:
    """
    Caps sent in a completed trade, grouped by design.

    Returns:
        List of ``{'beer_cap_id', 'qty', 'cap'}`` ordered by qty descending,
        then cap id.

    Raises:
        InvalidArgumentError: If trade_id is invalid
        TradeNotFoundError: If the trade does not exist
    """
    require_positive_id(trade_id, 'trade_id')
    if not Trade.objects.filter(pk=trade_id).exists():
        raise TradeNotFoundError()

    rows = list(
        TradeCap.objects
        .filter(trade_id=trade_id)
        .values('beer_cap_id')
        .annotate(qty=Count('id'))
        .order_by('-qty', F('beer_cap_id').asc())
    )
    caps = BeerCap.objects.select_related('country').in_bulk(
        [row['beer_cap_id'] for row in rows]
    )
    return [
        {
            'beer_cap_id': row['beer_cap_id'],
            'qty': row['qty'],
            'cap': caps.get(row['beer_cap_id']),
        }
        for row in rows
    ]
