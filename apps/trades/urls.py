from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'trades'

# Note: traders must be registered BEFORE empty prefix to avoid URL conflicts
router = DefaultRouter()
router.register(r'traders', views.TraderViewSet, basename='trader')
router.register(r'', views.TradeViewSet, basename='trade')

urlpatterns = [
    # Trader routes
    # GET    /api/trades/traders/          - List traders
    # POST   /api/trades/traders/          - Create trader
    # GET    /api/trades/traders/{id}/     - Get trader
    # PATCH  /api/trades/traders/{id}/     - Update trader
    # DELETE /api/trades/traders/{id}/     - Delete trader (no trades only)

    # Trade routes
    # GET    /api/trades/                  - List trades (status, type, trader, country, sort, limit)
    # POST   /api/trades/                  - Open a trade
    # GET    /api/trades/{id}/             - Get trade

    # Trade actions
    # POST   /api/trades/{id}/reserve/         - Reserve instance ids
    # POST   /api/trades/{id}/reserve_barcode/ - Reserve a scanned barcode
    # POST   /api/trades/{id}/remove_barcode/  - Release a reserved barcode
    # POST   /api/trades/{id}/cancel/          - Cancel trade
    # POST   /api/trades/{id}/complete/        - Complete trade
    # GET    /api/trades/{id}/reserved/        - Reserved instances
    # GET    /api/trades/{id}/history/         - Traded caps grouped by cap
    # GET    /api/trades/available_duplicates/ - Available duplicates of a cap

    path('', include(router.urls)),
]
