from django.db import models
from django.db.models import Q


class ControlBar(models.IntegerChoices):
    FREE_TOKEN = 0, 'Free token'
    ORIGINAL = 1, 'Original'
    DUPLICATE = 2, 'Duplicate'
    RESERVED = 3, 'Reserved for trade'


class BarcodeInstance(models.Model):
    """One printed barcode for one physical cap of a cap design."""

    barcode = models.CharField(max_length=3, unique=True)
    sheet = models.CharField(max_length=50, null=True, blank=True)

    # Null while the barcode is a free token
    beer_cap = models.ForeignKey(
        'catalog.BeerCap',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='barcodes'
    )

    control_bar = models.PositiveSmallIntegerField(
        choices=ControlBar.choices,
        default=ControlBar.DUPLICATE
    )

    # Set only while control_bar == RESERVED
    reserved_trade = models.ForeignKey(
        'trades.Trade',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='reserved_instances'
    )

    class Meta:
        db_table = 'beer_caps_barcodes'
        indexes = [
            models.Index(fields=['beer_cap', 'control_bar'], name='barcodes_cap_control_idx'),
            models.Index(fields=['reserved_trade', 'control_bar'], name='barcodes_trade_control_idx'),
            models.Index(fields=['control_bar'], name='barcodes_control_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    (Q(control_bar=ControlBar.RESERVED) & Q(reserved_trade__isnull=False))
                    | (~Q(control_bar=ControlBar.RESERVED) & Q(reserved_trade__isnull=True))
                ),
                name='barcodes_reserved_iff_trade',
            ),
        ]
        ordering = ['id']

    def __str__(self):
        return f"{self.barcode} ({self.control_label})"

    @property
    def control_label(self):
        try:
            label = ControlBar(self.control_bar).label
        except ValueError:
            label = 'unknown'
        return f"{self.control_bar} ({label.lower()})"

    @property
    def is_available(self):
        return (
            self.control_bar == ControlBar.DUPLICATE
            and self.reserved_trade_id is None
            and self.beer_cap_id is not None
        )
