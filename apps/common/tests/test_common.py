import pytest
from django.db import IntegrityError
from rest_framework import status
from rest_framework.test import APIClient

from apps.common.exceptions import (
    ConflictError,
    InvalidArgumentError,
    NotFoundError,
    StoreFailureError,
)
from apps.common.responses import error_response
from apps.common.transactions import store_transaction
from apps.common.validators import normalize_barcode, require_positive_id, require_positive_ids


class TestValidators:

    def test_positive_id(self):
        assert require_positive_id(7) == 7

    @pytest.mark.parametrize('value', [0, -1, '3', 2.0, None, True, 2 ** 63, 2 ** 70])
    def test_rejects_non_positive_ids(self, value):
        with pytest.raises(InvalidArgumentError):
            require_positive_id(value, 'trade_id')

    def test_ids_are_sorted_and_deduplicated(self):
        assert require_positive_ids([5, 2, 5, 9]) == [2, 5, 9]

    @pytest.mark.parametrize('values', [[], None, '12', [1, 0], 42])
    def test_rejects_bad_id_sets(self, values):
        with pytest.raises(InvalidArgumentError):
            require_positive_ids(values, 'instance_ids')

    def test_normalize_barcode(self):
        assert normalize_barcode(' aZ9\n') == 'aZ9'

    @pytest.mark.parametrize('value', ['', 'AB', 'ABCD', 'A-B', None])
    def test_rejects_bad_barcodes(self, value):
        with pytest.raises(InvalidArgumentError):
            normalize_barcode(value)


class TestErrorResponse:

    @pytest.mark.parametrize('exc, expected_status, kind', [
        (InvalidArgumentError('Invalid trade_id'), status.HTTP_400_BAD_REQUEST, 'invalid_argument'),
        (NotFoundError(), status.HTTP_404_NOT_FOUND, 'not_found'),
        (ConflictError(), status.HTTP_409_CONFLICT, 'conflict'),
        (StoreFailureError(), status.HTTP_503_SERVICE_UNAVAILABLE, 'store_failure'),
    ])
    def test_status_by_kind(self, exc, expected_status, kind):
        response = error_response(exc)

        assert response.status_code == expected_status
        assert response.data == {'error': str(exc), 'kind': kind}


@pytest.mark.django_db
class TestStoreTransaction:

    def test_database_errors_become_store_failures(self):
        with pytest.raises(StoreFailureError) as exc_info:
            with store_transaction():
                raise IntegrityError('duplicate key')

        assert isinstance(exc_info.value.__cause__, IntegrityError)

    def test_domain_errors_propagate(self):
        with pytest.raises(ConflictError):
            with store_transaction():
                raise ConflictError('nope')


@pytest.mark.django_db
class TestApiErrorBodies:
    """Errors raised by the REST framework carry the same body as service errors."""

    def test_requests_are_not_redirected(self, client):
        response = client.get('/api/health/')

        assert response.status_code == status.HTTP_200_OK
        assert response.json()['database'] == 'ok'

    def test_unauthenticated_has_kind(self):
        response = APIClient().get('/api/trades/')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['kind'] == 'not_authenticated'
        assert response.data['error']

    def test_malformed_json_is_invalid_argument(self, django_user_model):
        user = django_user_model.objects.create_user(username='keeper', password='x', is_staff=True)
        api_client = APIClient()
        api_client.force_authenticate(user)

        response = api_client.post(
            '/api/barcodes/generate/', '{"beer_cap_id": ', content_type='application/json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['kind'] == 'invalid_argument'
