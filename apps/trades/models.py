from django.db import models
from django.db.models import Q
from django.utils import timezone


class TradeType(models.TextChoices):
    BLIND = 'blind', 'Blind'
    SCAN_BASED = 'scan_based', 'Scan based'


class TradeStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    CANCELED = 'canceled', 'Canceled'
    COMPLETED = 'completed', 'Completed'


class Trader(models.Model):
    """Counterparty in a trade."""

    name = models.CharField(max_length=200)
    country = models.ForeignKey(
        'catalog.Country',
        on_delete=models.PROTECT,
        related_name='traders'
    )
    details = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'traders'
        indexes = [
            models.Index(fields=['name'], name='traders_name_idx'),
            models.Index(fields=['country', 'name'], name='traders_country_name_idx'),
        ]
        ordering = ['-id']

    def __str__(self):
        return self.name


class Trade(models.Model):
    """
    Exchange with a trader.

    Holds reserved barcode instances (``reserved_instances``) while pending.
    Exactly one terminal date is set once the trade is canceled or completed.
    """

    trader = models.ForeignKey(
        Trader,
        on_delete=models.PROTECT,
        related_name='trades'
    )
    trade_type = models.CharField(
        max_length=20,
        choices=TradeType.choices,
        default=TradeType.SCAN_BASED
    )
    status = models.CharField(
        max_length=20,
        choices=TradeStatus.choices,
        default=TradeStatus.PENDING
    )

    date_started = models.DateTimeField(default=timezone.now)
    date_canceled = models.DateTimeField(null=True, blank=True)
    date_completed = models.DateTimeField(null=True, blank=True)

    notes = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'trades'
        indexes = [
            models.Index(fields=['status', 'date_started'], name='trades_status_started_idx'),
            models.Index(fields=['trader', 'status'], name='trades_trader_status_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    (Q(status=TradeStatus.PENDING) & Q(date_canceled__isnull=True) & Q(date_completed__isnull=True))
                    | (Q(status=TradeStatus.CANCELED) & Q(date_canceled__isnull=False) & Q(date_completed__isnull=True))
                    | (Q(status=TradeStatus.COMPLETED) & Q(date_completed__isnull=False) & Q(date_canceled__isnull=True))
                ),
                name='trades_status_matches_dates',
            ),
        ]
        ordering = ['-date_started']

    def __str__(self):
        return f"Trade #{self.pk} with {self.trader} ({self.status})"

    @property
    def is_pending(self):
        return self.status == TradeStatus.PENDING


class TradeCap(models.Model):
    """A physical cap that left the collection in a completed trade."""

    trade = models.ForeignKey(
        Trade,
        on_delete=models.PROTECT,
        related_name='traded_caps'
    )
    beer_cap = models.ForeignKey(
        'catalog.BeerCap',
        on_delete=models.PROTECT,
        related_name='trade_records'
    )
    barcode = models.CharField(max_length=3)
    sheet = models.CharField(max_length=50, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'trade_caps'
        indexes = [
            models.Index(fields=['trade', 'beer_cap'], name='trade_caps_trade_cap_idx'),
        ]
        ordering = ['id']

    def __str__(self):
        return f"{self.barcode} in trade #{self.trade_id}"
