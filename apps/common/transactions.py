"""
Scoped store transactions.

All multi-row state transitions run inside ``store_transaction()`` so a
failure at any point leaves no partial effect behind.
"""

import logging
from contextlib import contextmanager

from django.db import DatabaseError, transaction

from .exceptions import StoreFailureError

logger = logging.getLogger(__name__)


@contextmanager
def store_transaction():
    """
    Run the enclosed block as one atomic unit.

    Commits on normal exit and rolls back on any exception. Domain errors
    propagate unchanged; database errors are re-raised as
    ``StoreFailureError`` once the rollback has happened.

    Usage:
        with store_transaction():
            trade = Trade.objects.select_for_update().get(pk=trade_id)
            ...
    """
    try:
        with transaction.atomic():
            yield
    except DatabaseError as exc:
        logger.exception("Store transaction rolled back")
        raise StoreFailureError(f"Data store failure: {exc}") from exc
