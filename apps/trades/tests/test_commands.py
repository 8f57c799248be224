from io import StringIO

import pytest
from django.core.management import call_command
from django.utils import timezone

from apps.barcodes.models import BarcodeInstance, ControlBar
from apps.trades.models import Trade, TradeStatus
from apps.trades.services import reserve_instances


def _make_stale(trade):
    # Simulates data edited outside the services: trade closed, caps still held
    Trade.objects.filter(pk=trade.pk).update(
        status=TradeStatus.CANCELED,
        date_canceled=timezone.now()
    )


@pytest.mark.django_db
class TestAuditReservations:
    """Tests for the audit_reservations management command."""

    def test_nothing_to_report(self, trade, duplicates):
        reserve_instances(trade_id=trade.id, instance_ids=[101])
        out = StringIO()

        call_command('audit_reservations', stdout=out)

        assert 'No stale reservations found.' in out.getvalue()

    def test_reports_without_fixing(self, trade, duplicates):
        reserve_instances(trade_id=trade.id, instance_ids=[101, 102])
        _make_stale(trade)
        out = StringIO()

        call_command('audit_reservations', stdout=out)

        output = out.getvalue()
        assert 'Found 2 stale reservation(s)' in output
        assert f'trade #{trade.id} (canceled)' in output
        assert BarcodeInstance.objects.filter(control_bar=ControlBar.RESERVED).count() == 2

    def test_fix_releases(self, trade, duplicates):
        reserve_instances(trade_id=trade.id, instance_ids=[101, 102])
        _make_stale(trade)
        out = StringIO()

        call_command('audit_reservations', '--fix', stdout=out)

        assert 'Released 2 reservation(s).' in out.getvalue()
        assert BarcodeInstance.objects.filter(
            pk__in=[101, 102],
            control_bar=ControlBar.DUPLICATE,
            reserved_trade__isnull=True
        ).count() == 2

    def test_reservations_of_pending_trades_are_kept(self, trade, trader, duplicates):
        closed = Trade.objects.create(trader=trader)
        reserve_instances(trade_id=trade.id, instance_ids=[101])
        reserve_instances(trade_id=closed.id, instance_ids=[102])
        _make_stale(closed)
        out = StringIO()

        call_command('audit_reservations', '--fix', stdout=out)

        assert 'Found 1 stale reservation(s)' in out.getvalue()
        assert BarcodeInstance.objects.get(pk=101).reserved_trade_id == trade.id
        assert BarcodeInstance.objects.get(pk=102).control_bar == ControlBar.DUPLICATE
