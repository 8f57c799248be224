import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from apps.barcodes.models import BarcodeInstance, ControlBar
from apps.catalog.models import BeerCap, Country


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
def regular_user(db):
    return get_user_model().objects.create_user(
        username='visitor',
        password='TestPass123!',
    )


@pytest.fixture
def staff_client(api_client, staff_user):
    """Return API client authenticated as staff."""
    refresh = RefreshToken.for_user(staff_user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def regular_client(api_client, regular_user):
    refresh = RefreshToken.for_user(regular_user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def country(db):
    return Country.objects.create(name_full='Czech Republic', name_abb='CZ')


@pytest.fixture
def cap(db, country):
    """Create and return a cap design stored on sheet S1."""
    return BeerCap.objects.create(
        beer_name='Pilsner Urquell',
        cap_no=1,
        sheet='S1',
        country=country,
        issued_year=2019,
    )


@pytest.fixture
def other_cap(db, country):
    return BeerCap.objects.create(beer_name='Budvar', cap_no=2, country=country)


@pytest.fixture
def make_instance(db):
    """Factory for barcode instances."""
    def _make(barcode, cap=None, control_bar=ControlBar.DUPLICATE, sheet=None, **kwargs):
        return BarcodeInstance.objects.create(
            barcode=barcode,
            beer_cap=cap,
            control_bar=control_bar,
            sheet=sheet,
            **kwargs
        )
    return _make
