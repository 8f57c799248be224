"""
Management command to find reservations that outlived their trade.

A barcode may be reserved (control_bar 3) only while its trade is pending.
The database guarantees a reserved barcode points at a trade, but not that
the trade is still pending: rows edited by hand can stay held by a canceled
or completed trade.

Usage:
    python manage.py audit_reservations
    python manage.py audit_reservations --fix
"""

import logging

from django.core.management.base import BaseCommand

from apps.barcodes.models import BarcodeInstance, ControlBar
from apps.common.transactions import store_transaction
from apps.trades.models import TradeStatus

logger = logging.getLogger(__name__)


def stale_reservations():
    """Reserved instances whose trade is no longer pending."""
    return (
        BarcodeInstance.objects
        .filter(control_bar=ControlBar.RESERVED)
        .exclude(reserved_trade__status=TradeStatus.PENDING)
        .select_related('reserved_trade', 'beer_cap')
        .order_by('id')
    )


class Command(BaseCommand):
    help = 'Report (and optionally release) reservations held by non-pending trades'

    def add_arguments(self, parser):
        parser.add_argument(
            '--fix',
            action='store_true',
            help='Release stale reservations back to available duplicates',
        )

    def handle(self, *args, **options):
        stale = list(stale_reservations())

        if not stale:
            self.stdout.write(
                self.style.SUCCESS('No stale reservations found.')
            )
            return

        self.stdout.write(f'\nFound {len(stale)} stale reservation(s):\n')

        for instance in stale:
            trade = instance.reserved_trade
            trade_label = f'trade #{trade.pk} ({trade.status})'
            cap = instance.beer_cap.beer_name if instance.beer_cap else 'no cap'
            self.stdout.write(f'  - {instance.barcode} | {cap} | {trade_label}')

        if not options['fix']:
            self.stdout.write(
                self.style.WARNING('\nRun with --fix to release them.')
            )
            return

        with store_transaction():
            released = BarcodeInstance.objects.filter(
                pk__in=[instance.pk for instance in stale],
                control_bar=ControlBar.RESERVED
            ).update(control_bar=ControlBar.DUPLICATE, reserved_trade=None)

        logger.warning("Released %d stale reservation(s)", released)
        self.stdout.write(
            self.style.SUCCESS(f'\nReleased {released} reservation(s).')
        )
