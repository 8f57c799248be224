"""
Trades app services layer.

Services contain business logic for traders, trades and reservations.
All state-changing operations run inside ``store_transaction()`` and
lock the trade row they change.
"""

from .exceptions import (
    BarcodeNotFoundError,
    CapNotFoundError,
    TradeNotFoundError,
    TraderNotFoundError,
    CountryNotFoundError,
    TradeNotPendingError,
    InstanceNotAvailableError,
    InstanceNotReservedError,
    TraderHasTradesError,
    BarcodeCapMismatchError,
)

from .trader_management import (
    create_trader,
    get_trader,
    update_trader,
    delete_trader,
    list_traders,
)

from .trade_management import (
    create_trade,
    get_trade,
    list_trades,
    cancel_trade,
    complete_trade,
    get_trade_history,
)

from .reservation import (
    reserve_instances,
    reserve_barcode,
    release_barcode,
    list_available_for_cap,
    list_reserved_for_trade,
)


__all__ = [
    # Exceptions
    'BarcodeNotFoundError',
    'CapNotFoundError',
    'TradeNotFoundError',
    'TraderNotFoundError',
    'CountryNotFoundError',
    'TradeNotPendingError',
    'InstanceNotAvailableError',
    'InstanceNotReservedError',
    'TraderHasTradesError',
    'BarcodeCapMismatchError',

    # Trader Management
    'create_trader',
    'get_trader',
    'update_trader',
    'delete_trader',
    'list_traders',

    # Trade Management
    'create_trade',
    'get_trade',
    'list_trades',
    'cancel_trade',
    'complete_trade',
    'get_trade_history',

    # Reservation
    'reserve_instances',
    'reserve_barcode',
    'release_barcode',
    'list_available_for_cap',
    'list_reserved_for_trade',
]
