from django.conf import settings
from rest_framework import serializers

from apps.barcodes.serializers import BarcodeField, BeerCapMinimalSerializer
from apps.common.validators import MAX_ID
from .models import Trade, Trader, TradeStatus, TradeType
from .services.trade_management import TRADE_SORTS
from .services.trader_management import TRADER_SORTS


# =============================================================================
# Input Serializers
# =============================================================================

class TraderInputSerializer(serializers.Serializer):
    """
    Validate input for creating or updating a trader.

    Fields:
        name (str): At least 2 characters after trimming
        country_id (int): Existing country
        details (str): Free text (optional, blank clears it)
    """

    name = serializers.CharField(max_length=200, min_length=2, trim_whitespace=True)
    country_id = serializers.IntegerField(min_value=1, max_value=MAX_ID)
    details = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class TraderFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for trader listing.

    Query Parameters:
        name (str): Case-insensitive substring, used from 2 characters on
        country_id (int): Exact country
        sort (str): One of the trader sort keys
    """

    name = serializers.CharField(required=False, allow_blank=True, default='')
    country_id = serializers.IntegerField(required=False, min_value=1, max_value=MAX_ID)
    sort = serializers.ChoiceField(choices=list(TRADER_SORTS), default='id_desc')


class CreateTradeInputSerializer(serializers.Serializer):
    trader_id = serializers.IntegerField(min_value=1, max_value=MAX_ID)
    trade_type = serializers.ChoiceField(choices=TradeType.choices, default=TradeType.SCAN_BASED)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class TradeFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for trade listing.

    Query Parameters:
        status (str): pending (default), canceled or completed
        type (str): blind or scan_based (optional)
        trader (str): Trader name substring
        country (str): Country name substring
        sort (str): One of the trade sort keys
        limit (int): Page size, one of TRADES_PAGE_SIZES
    """

    status = serializers.ChoiceField(choices=TradeStatus.choices, default=TradeStatus.PENDING)
    type = serializers.ChoiceField(choices=TradeType.choices, required=False)
    trader = serializers.CharField(required=False, allow_blank=True, default='')
    country = serializers.CharField(required=False, allow_blank=True, default='')
    sort = serializers.ChoiceField(choices=list(TRADE_SORTS), default='date_started_desc')
    limit = serializers.ChoiceField(
        choices=[str(size) for size in settings.TRADES_PAGE_SIZES],
        required=False
    )
    page = serializers.IntegerField(required=False, min_value=1, max_value=MAX_ID)


class ReserveInstancesInputSerializer(serializers.Serializer):
    """
    Validate input for reserving a set of duplicates.

    Fields:
        instance_ids (list[int]): Non-empty list of barcode instance ids
    """

    instance_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1, max_value=MAX_ID),
        allow_empty=False
    )


class ReserveBarcodeInputSerializer(serializers.Serializer):
    """
    Validate input for reserving one scanned barcode.

    Fields:
        barcode (str): Scanned barcode
        beer_cap_id (int): Cap the user picked, must own the barcode
    """

    barcode = BarcodeField()
    beer_cap_id = serializers.IntegerField(min_value=1, max_value=MAX_ID)


class RemoveBarcodeInputSerializer(serializers.Serializer):
    barcode = BarcodeField()


class AvailableDuplicatesFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for the available duplicates listing.

    Query Parameters:
        beer_cap_id (int): Cap design
        limit (int): Clamped to 1..CAPS_AVAILABLE_MAX_LIMIT by the service
    """

    beer_cap_id = serializers.IntegerField(min_value=1, max_value=MAX_ID)
    limit = serializers.IntegerField(required=False)


# =============================================================================
# Output Serializers
# =============================================================================

class TraderSerializer(serializers.ModelSerializer):
    """Trader with country and trade counters (when annotated)."""

    country_id = serializers.IntegerField(read_only=True)
    country_name = serializers.CharField(source='country.name_full', read_only=True)
    completed_trades = serializers.IntegerField(read_only=True, default=0)
    has_trades = serializers.BooleanField(read_only=True, default=False)

    class Meta:
        model = Trader
        fields = [
            'id',
            'name',
            'country_id',
            'country_name',
            'details',
            'completed_trades',
            'has_trades',
            'created_at',
        ]
        read_only_fields = fields


class TraderMinimalSerializer(serializers.ModelSerializer):
    """Minimal trader info for nested serialization."""

    country_name = serializers.CharField(source='country.name_full', read_only=True)

    class Meta:
        model = Trader
        fields = ['id', 'name', 'country_name']
        read_only_fields = fields


class TradeSerializer(serializers.ModelSerializer):
    """Trade with its trader and cap count."""

    trader = TraderMinimalSerializer(read_only=True)
    caps_count = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = Trade
        fields = [
            'id',
            'trader',
            'trade_type',
            'status',
            'date_started',
            'date_canceled',
            'date_completed',
            'notes',
            'caps_count',
        ]
        read_only_fields = fields


class TradeHistoryRowSerializer(serializers.Serializer):
    beer_cap_id = serializers.IntegerField()
    qty = serializers.IntegerField()
    cap = BeerCapMinimalSerializer(allow_null=True)


class ReservedCountSerializer(serializers.Serializer):
    reserved_count = serializers.IntegerField()
