from django.contrib import admin

from .models import BarcodeInstance


@admin.register(BarcodeInstance)
class BarcodeInstanceAdmin(admin.ModelAdmin):
    """
    Admin interface for barcode instances.

    Reservation fields are read-only: they change only through the trade
    services so the reservation invariant holds.
    """

    list_display = ['barcode', 'beer_cap', 'sheet', 'control_bar', 'reserved_trade']
    list_filter = ['control_bar']
    search_fields = ['barcode', 'beer_cap__beer_name']
    raw_id_fields = ['beer_cap']
    readonly_fields = ['control_bar', 'reserved_trade']
