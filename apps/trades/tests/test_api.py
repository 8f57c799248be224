import pytest
from django.urls import reverse
from rest_framework import status

from apps.barcodes.models import BarcodeInstance, ControlBar
from apps.trades.models import Trade, Trader, TradeStatus
from apps.trades.services import cancel_trade, reserve_instances


# =============================================================================
# Trader Tests
# =============================================================================

@pytest.mark.django_db
class TestTraderEndpoints:
    """Tests for /api/trades/traders/"""

    def test_create_trader(self, staff_client, country):
        url = reverse('trades:trader-list')
        data = {'name': 'Marta', 'country_id': country.id, 'details': 'via forum'}
        response = staff_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['name'] == 'Marta'
        assert response.data['country_name'] == 'Germany'
        assert Trader.objects.filter(name='Marta').exists()

    def test_create_trader_unknown_country(self, staff_client):
        url = reverse('trades:trader-list')
        response = staff_client.post(url, {'name': 'Marta', 'country_id': 999}, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data == {'error': 'Invalid country_id.', 'kind': 'not_found'}

    def test_list_traders(self, staff_client, trader, other_trader):
        url = reverse('trades:trader-list')
        response = staff_client.get(url, {'sort': 'name_desc'})

        assert response.status_code == status.HTTP_200_OK
        assert [t['name'] for t in response.data] == ['Luc Peeters', 'Hans Meier']

    def test_list_traders_bad_sort(self, staff_client):
        url = reverse('trades:trader-list')
        response = staff_client.get(url, {'sort': 'shoe_size'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_update_trader(self, staff_client, trader):
        url = reverse('trades:trader-detail', kwargs={'pk': trader.id})
        response = staff_client.patch(url, {'details': ''}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['details'] is None
        assert response.data['name'] == 'Hans Meier'

    def test_delete_trader_with_trades(self, staff_client, trader, trade):
        url = reverse('trades:trader-detail', kwargs={'pk': trader.id})
        response = staff_client.delete(url)

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['kind'] == 'conflict'

    def test_delete_trader(self, staff_client, other_trader):
        url = reverse('trades:trader-detail', kwargs={'pk': other_trader.id})
        response = staff_client.delete(url)

        assert response.status_code == status.HTTP_204_NO_CONTENT


# =============================================================================
# Trade Tests
# =============================================================================

@pytest.mark.django_db
class TestTradeList:
    """Tests for GET /api/trades/"""

    def test_list_pending(self, staff_client, trade, trader):
        cancel_trade(trade_id=Trade.objects.create(trader=trader).id)

        url = reverse('trades:trade-list')
        response = staff_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['results'][0]['id'] == trade.id
        assert response.data['results'][0]['trader']['name'] == 'Hans Meier'
        assert response.data['results'][0]['caps_count'] == 0

    def test_list_page_size(self, staff_client, trader):
        for _ in range(12):
            Trade.objects.create(trader=trader)

        url = reverse('trades:trade-list')
        response = staff_client.get(url, {'limit': '10'})

        assert response.data['count'] == 12
        assert len(response.data['results']) == 10

    def test_list_rejects_other_page_sizes(self, staff_client):
        url = reverse('trades:trade-list')
        response = staff_client.get(url, {'limit': '7'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_list_unauthenticated(self, api_client):
        url = reverse('trades:trade-list')
        response = api_client.get(url)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestTradeCreate:
    """Tests for POST /api/trades/"""

    def test_create_trade(self, staff_client, trader):
        url = reverse('trades:trade-list')
        response = staff_client.post(url, {'trader_id': trader.id, 'trade_type': 'blind'}, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['status'] == TradeStatus.PENDING
        assert response.data['trade_type'] == 'blind'

    def test_create_trade_unknown_trader(self, staff_client):
        url = reverse('trades:trade-list')
        response = staff_client.post(url, {'trader_id': 404}, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['error'] == 'Trader not found'


@pytest.mark.django_db
class TestReservationEndpoints:
    """Tests for the reservation actions on /api/trades/{id}/"""

    def test_reserve_and_list_reserved(self, staff_client, trade, duplicates):
        url = reverse('trades:trade-reserve', kwargs={'pk': trade.id})
        response = staff_client.post(url, {'instance_ids': [101, 102]}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {'reserved_count': 2}

        url = reverse('trades:trade-reserved', kwargs={'pk': trade.id})
        response = staff_client.get(url)

        assert [i['id'] for i in response.data] == [101, 102]
        assert response.data[0]['control_label'] == '3 (reserved for trade)'

    def test_reserve_conflict(self, staff_client, trade, trader, duplicates):
        other = Trade.objects.create(trader=trader)
        reserve_instances(trade_id=other.id, instance_ids=[101])

        url = reverse('trades:trade-reserve', kwargs={'pk': trade.id})
        response = staff_client.post(url, {'instance_ids': [101, 102]}, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['kind'] == 'conflict'
        assert BarcodeInstance.objects.get(pk=102).control_bar == ControlBar.DUPLICATE

    def test_reserve_empty_list(self, staff_client, trade):
        url = reverse('trades:trade-reserve', kwargs={'pk': trade.id})
        response = staff_client.post(url, {'instance_ids': []}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['kind'] == 'invalid_argument'
        assert response.data['error'].startswith('instance_ids: ')
        assert 'instance_ids' in response.data['fields']

    def test_reserve_oversized_id(self, staff_client, trade, duplicates):
        url = reverse('trades:trade-reserve', kwargs={'pk': trade.id})
        response = staff_client.post(url, {'instance_ids': [101, 2 ** 70]}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['kind'] == 'invalid_argument'
        assert BarcodeInstance.objects.get(pk=101).control_bar == ControlBar.DUPLICATE

    def test_reserve_on_oversized_trade_id(self, staff_client, duplicates):
        url = reverse('trades:trade-reserve', kwargs={'pk': 2 ** 70})
        response = staff_client.post(url, {'instance_ids': [101]}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data == {'error': 'Invalid trade_id', 'kind': 'invalid_argument'}

    def test_reserve_unknown_trade(self, staff_client, duplicates):
        url = reverse('trades:trade-reserve', kwargs={'pk': 9999})
        response = staff_client.post(url, {'instance_ids': [101]}, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_scan_and_remove_barcode(self, staff_client, trade, cap, duplicates):
        url = reverse('trades:trade-reserve-barcode', kwargs={'pk': trade.id})
        response = staff_client.post(url, {'barcode': 'AB3', 'beer_cap_id': cap.id}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['reserved_trade_id'] == trade.id

        url = reverse('trades:trade-remove-barcode', kwargs={'pk': trade.id})
        response = staff_client.post(url, {'barcode': 'AB3'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['control_bar'] == ControlBar.DUPLICATE

    def test_scan_wrong_cap(self, staff_client, trade, other_cap, duplicates):
        url = reverse('trades:trade-reserve-barcode', kwargs={'pk': trade.id})
        response = staff_client.post(
            url, {'barcode': 'AB3', 'beer_cap_id': other_cap.id}, format='json'
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['error'] == 'Scanned barcode does not belong to this cap id'

    def test_available_duplicates(self, staff_client, trade, cap, duplicates):
        reserve_instances(trade_id=trade.id, instance_ids=[101])

        url = reverse('trades:trade-available-duplicates')
        response = staff_client.get(url, {'beer_cap_id': cap.id, 'limit': 1})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['cap']['id'] == cap.id
        assert [i['id'] for i in response.data['instances']] == [102]


@pytest.mark.django_db
class TestTransitionEndpoints:
    """Tests for POST /api/trades/{id}/cancel/ and /complete/"""

    def test_cancel(self, staff_client, trade, duplicates):
        reserve_instances(trade_id=trade.id, instance_ids=[101])

        url = reverse('trades:trade-cancel', kwargs={'pk': trade.id})
        response = staff_client.post(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == TradeStatus.CANCELED
        assert response.data['date_canceled'] is not None
        assert BarcodeInstance.objects.get(pk=101).control_bar == ControlBar.DUPLICATE

    def test_cancel_twice_conflicts(self, staff_client, trade):
        url = reverse('trades:trade-cancel', kwargs={'pk': trade.id})
        staff_client.post(url)
        response = staff_client.post(url)

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_complete_and_history(self, staff_client, trade, cap, duplicates):
        reserve_instances(trade_id=trade.id, instance_ids=[101, 102])

        url = reverse('trades:trade-complete', kwargs={'pk': trade.id})
        response = staff_client.post(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == TradeStatus.COMPLETED
        assert response.data['caps_count'] == 2

        url = reverse('trades:trade-history', kwargs={'pk': trade.id})
        response = staff_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 1
        assert response.data[0]['beer_cap_id'] == cap.id
        assert response.data[0]['qty'] == 2
        assert response.data[0]['cap']['beer_name'] == 'Paulaner'
