from rest_framework import serializers

from apps.catalog.models import BeerCap
from apps.common.validators import BARCODE_RE, MAX_ID
from .models import BarcodeInstance


# =============================================================================
# Input Serializers
# =============================================================================

class BarcodeField(serializers.RegexField):
    """Three base62 characters, surrounding whitespace ignored."""

    def __init__(self, **kwargs):
        kwargs.setdefault('error_messages', {'invalid': 'Invalid barcode'})
        super().__init__(BARCODE_RE, trim_whitespace=True, **kwargs)


class GenerateBarcodeInputSerializer(serializers.Serializer):
    """
    Validate input for attaching a barcode to a cap.

    Fields:
        beer_cap_id (int): Cap design receiving the barcode
        sheet (str): Storage sheet for duplicates (optional)
    """

    beer_cap_id = serializers.IntegerField(min_value=1, max_value=MAX_ID)
    sheet = serializers.CharField(max_length=50, required=False, allow_blank=True, allow_null=True)


class InspectBarcodeInputSerializer(serializers.Serializer):
    barcode = BarcodeField()


class MissingBarcodesFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for the caps-without-barcode listing.

    Query Parameters:
        limit (int): Clamped to 1..BARCODES_MISSING_MAX_LIMIT by the service
    """

    limit = serializers.IntegerField(required=False)


class SwitchOriginalInputSerializer(serializers.Serializer):
    """
    Validate input for switching a cap's original.

    Fields:
        barcode (str): Duplicate to promote
        confirm (bool): Perform the switch instead of only reporting status
    """

    barcode = BarcodeField()
    confirm = serializers.BooleanField(default=False)


# =============================================================================
# Output Serializers
# =============================================================================

class BeerCapMinimalSerializer(serializers.ModelSerializer):
    """Minimal cap info for nested serialization."""

    country_name = serializers.CharField(source='country.name_full', read_only=True, default=None)

    class Meta:
        model = BeerCap
        fields = ['id', 'beer_name', 'cap_no', 'sheet', 'country_name', 'issued_year']
        read_only_fields = fields


class BarcodeInstanceSerializer(serializers.ModelSerializer):
    """Barcode instance as returned by the trade and barcode endpoints."""

    control_label = serializers.CharField(read_only=True)

    class Meta:
        model = BarcodeInstance
        fields = [
            'id',
            'barcode',
            'beer_cap_id',
            'sheet',
            'control_bar',
            'control_label',
            'reserved_trade_id',
        ]
        read_only_fields = fields


class GeneratedBarcodeSerializer(serializers.Serializer):
    barcode = serializers.CharField()
    beer_cap_id = serializers.IntegerField()
    control_bar = serializers.IntegerField()
    reused = serializers.BooleanField()


class InspectedBarcodeSerializer(serializers.Serializer):
    instance = BarcodeInstanceSerializer()
    cap = BeerCapMinimalSerializer(allow_null=True)


class BarcodeSummarySerializer(serializers.Serializer):
    total_caps = serializers.IntegerField()
    missing_barcodes = serializers.IntegerField()
