import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from apps.barcodes.models import BarcodeInstance, ControlBar
from apps.catalog.models import BeerCap, Country
from apps.trades.models import Trade, Trader, TradeType


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def staff_user(db):
    """Create and return the collection keeper (staff user)."""
    return get_user_model().objects.create_user(
        username='keeper',
        password='TestPass123!',
        is_staff=True,
    )


@pytest.fixture
def staff_client(api_client, staff_user):
    """Return API client authenticated as staff."""
    refresh = RefreshToken.for_user(staff_user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def country(db):
    return Country.objects.create(name_full='Germany', name_abb='DE')


@pytest.fixture
def other_country(db):
    return Country.objects.create(name_full='Belgium', name_abb='BE')


@pytest.fixture
def cap(db, country):
    return BeerCap.objects.create(beer_name='Paulaner', cap_no=1, sheet='S3', country=country)


@pytest.fixture
def other_cap(db, other_country):
    return BeerCap.objects.create(beer_name='Duvel', cap_no=1, country=other_country)


@pytest.fixture
def trader(db, country):
    """Create and return a trader from Germany."""
    return Trader.objects.create(name='Hans Meier', country=country, details='hans@example.com')


@pytest.fixture
def other_trader(db, other_country):
    return Trader.objects.create(name='Luc Peeters', country=other_country)


@pytest.fixture
def trade(db, trader):
    """Create and return a pending scan-based trade."""
    return Trade.objects.create(trader=trader, trade_type=TradeType.SCAN_BASED)


@pytest.fixture
def make_instance(db):
    """Factory for barcode instances (duplicates by default)."""
    def _make(barcode, cap, control_bar=ControlBar.DUPLICATE, **kwargs):
        return BarcodeInstance.objects.create(
            barcode=barcode,
            beer_cap=cap,
            control_bar=control_bar,
            **kwargs
        )
    return _make


@pytest.fixture
def duplicates(db, cap):
    """Available duplicates with ids 101, 102 and 103."""
    return [
        BarcodeInstance.objects.create(
            id=100 + n,
            barcode=f'AB{n}',
            beer_cap=cap,
            sheet='D1',
            control_bar=ControlBar.DUPLICATE,
        )
        for n in (1, 2, 3)
    ]
