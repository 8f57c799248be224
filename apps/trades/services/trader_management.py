"""
Trader management service.

Handles trader CRUD. A trader referenced by any trade cannot be deleted.
"""

import logging
from typing import Optional

from django.db.models import BooleanField, Count, ExpressionWrapper, Q, QuerySet

from apps.catalog.models import Country
from apps.common.exceptions import InvalidArgumentError
from apps.common.transactions import store_transaction
from apps.common.validators import require_choice, require_positive_id
from apps.trades.models import Trader, TradeStatus

from .exceptions import CountryNotFoundError, TraderHasTradesError, TraderNotFoundError

logger = logging.getLogger(__name__)

TRADER_SORTS = {
    'id_desc': ['-id'],
    'name_asc': ['name', '-id'],
    'name_desc': ['-name', '-id'],
    'country_asc': ['country__name_full', '-id'],
    'country_desc': ['-country__name_full', '-id'],
    'completed_asc': ['completed_trades', '-id'],
    'completed_desc': ['-completed_trades', '-id'],
}

MIN_NAME_LENGTH = 2


def _clean_name(name):
    name = (name or '').strip()
    if len(name) < MIN_NAME_LENGTH:
        raise InvalidArgumentError("Name must be at least 2 characters.")
    return name


def _clean_details(details):
    if details is None:
        return None
    return str(details).strip() or None


def _get_country(country_id):
    require_positive_id(country_id, 'country_id')
    try:
        return Country.objects.get(pk=country_id)
    except Country.DoesNotExist:
        raise CountryNotFoundError()


def create_trader(*, name: str, country_id: int, details: Optional[str] = None) -> Trader:
    """
    Create a trader.

    Raises:
        InvalidArgumentError: If the name is shorter than 2 characters or country_id is invalid
        CountryNotFoundError: If the country does not exist
    """
    name = _clean_name(name)
    country = _get_country(country_id)

    with store_transaction():
        trader = Trader.objects.create(
            name=name,
            country=country,
            details=_clean_details(details)
        )

    logger.info("Trader %s created (%s)", trader.pk, trader.name)
    return trader


def get_trader(*, trader_id: int) -> Trader:
    require_positive_id(trader_id, 'trader_id')
    try:
        return Trader.objects.select_related('country').get(pk=trader_id)
    except Trader.DoesNotExist:
        raise TraderNotFoundError()


def update_trader(
    *,
    trader_id: int,
    name: Optional[str] = None,
    country_id: Optional[int] = None,
    details: Optional[str] = None,
    clear_details: bool = False
) -> Trader:
    """
    Update trader fields. Omitted fields keep their value.

    Raises:
        InvalidArgumentError: On invalid id, name or country_id
        TraderNotFoundError: If the trader does not exist
        CountryNotFoundError: If the new country does not exist
    """
    require_positive_id(trader_id, 'trader_id')
    update_fields = []

    with store_transaction():
        try:
            trader = Trader.objects.select_for_update().get(pk=trader_id)
        except Trader.DoesNotExist:
            raise TraderNotFoundError()

        if name is not None:
            trader.name = _clean_name(name)
            update_fields.append('name')
        if country_id is not None:
            trader.country = _get_country(country_id)
            update_fields.append('country')
        if details is not None or clear_details:
            trader.details = _clean_details(details)
            update_fields.append('details')

        if update_fields:
            trader.save(update_fields=update_fields)

    return trader


def delete_trader(*, trader_id: int) -> None:
    """
    Delete a trader that has no trades.

    Raises:
        TraderNotFoundError: If the trader does not exist
        TraderHasTradesError: If any trade references the trader
    """
    require_positive_id(trader_id, 'trader_id')

    with store_transaction():
        try:
            trader = Trader.objects.select_for_update().get(pk=trader_id)
        except Trader.DoesNotExist:
            raise TraderNotFoundError()

        trades_count = trader.trades.count()
        if trades_count:
            raise TraderHasTradesError(
                f"Cannot delete trader: {trades_count} trade(s) exist for this trader."
            )
        trader.delete()

    logger.info("Trader %s deleted", trader_id)


def list_traders(
    *,
    name: str = '',
    country_id: Optional[int] = None,
    sort: str = 'id_desc'
) -> QuerySet[Trader]:
    """
    Traders annotated with ``completed_trades`` and ``has_trades``.

    Name filtering starts at 2 characters; unknown sort keys are rejected.
    """
    require_choice(sort, TRADER_SORTS, 'sort')

    queryset = Trader.objects.select_related('country').annotate(
        completed_trades=Count('trades', filter=Q(trades__status=TradeStatus.COMPLETED)),
        total_trades=Count('trades'),
    ).annotate(
        has_trades=ExpressionWrapper(Q(total_trades__gt=0), output_field=BooleanField())
    )

    name = (name or '').strip()
    if len(name) >= MIN_NAME_LENGTH:
        queryset = queryset.filter(name__icontains=name)
    if country_id:
        queryset = queryset.filter(country_id=require_positive_id(country_id, 'country_id'))

    return queryset.order_by(*TRADER_SORTS[sort])
