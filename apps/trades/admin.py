from django.contrib import admin
from django.utils.html import format_html

from .models import Trade, TradeCap, Trader, TradeStatus


class TradeCapInline(admin.TabularInline):
    """Inline admin for caps sent in a completed trade."""
    model = TradeCap
    extra = 0
    fields = ['beer_cap', 'barcode', 'sheet', 'created_at']
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        """Trade history is written only when a trade completes."""
        return False


@admin.register(Trader)
class TraderAdmin(admin.ModelAdmin):
    list_display = ['name', 'country', 'created_at']
    list_filter = ['country']
    search_fields = ['name', 'details']


@admin.register(Trade)
class TradeAdmin(admin.ModelAdmin):
    """
    Admin interface for trades.

    Status and dates are read-only; transitions go through the
    cancel/complete endpoints which also move the reserved caps.
    """

    list_display = ['id', 'trader', 'trade_type', 'status_badge', 'date_started']
    list_filter = ['status', 'trade_type']
    search_fields = ['trader__name', 'notes']
    readonly_fields = ['status', 'date_started', 'date_canceled', 'date_completed', 'created_at']
    inlines = [TradeCapInline]

    def status_badge(self, obj):
        colors = {
            TradeStatus.PENDING: ('#E5C49A', '#2C1810'),
            TradeStatus.COMPLETED: ('#6B8E5E', 'white'),
            TradeStatus.CANCELED: ('#B85C5C', 'white'),
        }
        bg, fg = colors.get(obj.status, ('#ccc', '#666'))
        return format_html(
            '<span style="background: {}; color: {}; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            bg, fg, obj.get_status_display()
        )
    status_badge.short_description = 'Status'
