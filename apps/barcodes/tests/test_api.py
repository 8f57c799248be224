import pytest
from django.urls import reverse
from rest_framework import status

from apps.barcodes.models import BarcodeInstance, ControlBar


# =============================================================================
# Generate Tests
# =============================================================================

@pytest.mark.django_db
class TestGenerate:
    """Tests for POST /api/barcodes/generate/"""

    def test_generate_original(self, staff_client, cap):
        url = reverse('barcodes:generate')
        response = staff_client.post(url, {'beer_cap_id': cap.id}, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data == {
            'barcode': 'AAA',
            'beer_cap_id': cap.id,
            'control_bar': ControlBar.ORIGINAL,
            'reused': False,
        }

    def test_generate_unknown_cap(self, staff_client):
        url = reverse('barcodes:generate')
        response = staff_client.post(url, {'beer_cap_id': 404}, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data == {'error': 'Cap not found', 'kind': 'not_found'}

    def test_generate_invalid_cap_id(self, staff_client):
        url = reverse('barcodes:generate')
        response = staff_client.post(url, {'beer_cap_id': 0}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert BarcodeInstance.objects.count() == 0

    def test_generate_unauthenticated(self, api_client, cap):
        url = reverse('barcodes:generate')
        response = api_client.post(url, {'beer_cap_id': cap.id}, format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_generate_requires_staff(self, regular_client, cap):
        url = reverse('barcodes:generate')
        response = regular_client.post(url, {'beer_cap_id': cap.id}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN


# =============================================================================
# Inspect Tests
# =============================================================================

@pytest.mark.django_db
class TestInspect:
    """Tests for GET /api/barcodes/inspect/"""

    def test_inspect(self, staff_client, cap, make_instance):
        make_instance('Xy7', cap, sheet='D1')

        url = reverse('barcodes:inspect')
        response = staff_client.get(url, {'barcode': 'Xy7'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['instance']['barcode'] == 'Xy7'
        assert response.data['instance']['control_label'] == '2 (duplicate)'
        assert response.data['cap']['beer_name'] == 'Pilsner Urquell'
        assert response.data['cap']['country_name'] == 'Czech Republic'

    def test_inspect_free_token_has_no_cap(self, staff_client, make_instance):
        make_instance('AAA', None, control_bar=ControlBar.FREE_TOKEN)

        url = reverse('barcodes:inspect')
        response = staff_client.get(url, {'barcode': 'AAA'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['cap'] is None

    def test_inspect_not_found(self, staff_client):
        url = reverse('barcodes:inspect')
        response = staff_client.get(url, {'barcode': 'ZZZ'})

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['kind'] == 'not_found'

    def test_inspect_malformed(self, staff_client):
        url = reverse('barcodes:inspect')
        response = staff_client.get(url, {'barcode': 'ZZZZ'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
class TestCapBarcodes:
    """Tests for GET /api/barcodes/cap/{cap_id}/"""

    def test_cap_barcodes(self, staff_client, cap, make_instance):
        make_instance('AAB', cap)
        make_instance('AAA', cap, control_bar=ControlBar.ORIGINAL)

        url = reverse('barcodes:cap-barcodes', kwargs={'cap_id': cap.id})
        response = staff_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert [b['barcode'] for b in response.data['barcodes']] == ['AAA', 'AAB']

    def test_cap_barcodes_unknown_cap(self, staff_client):
        url = reverse('barcodes:cap-barcodes', kwargs={'cap_id': 777})
        response = staff_client.get(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.django_db
class TestSwitchOriginal:
    """Tests for POST /api/barcodes/switch_original/"""

    def test_status_then_switch(self, staff_client, cap, make_instance):
        make_instance('AAA', cap, control_bar=ControlBar.ORIGINAL)
        make_instance('AAB', cap)
        url = reverse('barcodes:switch-original')

        response = staff_client.post(url, {'barcode': 'AAB'}, format='json')
        assert response.status_code == status.HTTP_200_OK
        assert response.data['can_switch'] is True

        response = staff_client.post(url, {'barcode': 'AAB', 'confirm': True}, format='json')
        assert response.status_code == status.HTTP_200_OK
        assert response.data['previous_original'] == 'AAA'

    def test_switch_rejected(self, staff_client, cap, make_instance):
        make_instance('AAA', cap, control_bar=ControlBar.ORIGINAL)

        url = reverse('barcodes:switch-original')
        response = staff_client.post(url, {'barcode': 'AAA', 'confirm': True}, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['kind'] == 'conflict'


@pytest.mark.django_db
class TestCoverage:
    """Tests for GET /api/barcodes/summary/ and /api/barcodes/missing/"""

    def test_summary(self, staff_client, cap, other_cap, make_instance):
        make_instance('AAA', cap, control_bar=ControlBar.ORIGINAL)

        url = reverse('barcodes:summary')
        response = staff_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {'total_caps': 2, 'missing_barcodes': 1}

    def test_missing(self, staff_client, cap, other_cap, make_instance):
        make_instance('AAA', cap, control_bar=ControlBar.ORIGINAL)

        url = reverse('barcodes:missing')
        response = staff_client.get(url, {'limit': 10})

        assert response.status_code == status.HTTP_200_OK
        assert [c['id'] for c in response.data['caps']] == [other_cap.id]
        assert response.data['caps'][0]['country_name'] == 'Czech Republic'

    def test_missing_bad_limit(self, staff_client):
        url = reverse('barcodes:missing')
        response = staff_client.get(url, {'limit': 'lots'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['kind'] == 'invalid_argument'

    def test_generate_oversized_cap_id(self, staff_client):
        url = reverse('barcodes:generate')
        response = staff_client.post(url, {'beer_cap_id': 2 ** 64}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['kind'] == 'invalid_argument'
