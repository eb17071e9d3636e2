from django.core.exceptions import ValidationError
from django.db import IntegrityError, OperationalError
from rest_framework.exceptions import NotFound

from authentication.exceptions import custom_exception_handler
from orders.exceptions import InsufficientStock, InvalidOrderState


def test_api_exception_is_wrapped():
    response = custom_exception_handler(NotFound(), {})
    assert response.status_code == 404
    assert response.data['error'] is True
    assert response.data['code'] == 'not_found'
    assert response.data['status_code'] == 404


def test_domain_errors_keep_their_code_and_message():
    response = custom_exception_handler(InsufficientStock('Latte', 1, 3), {})
    assert response.status_code == 409
    assert response.data['code'] == 'insufficient_stock'
    assert response.data['message'] == 'Insufficient stock for: Latte. Available: 1, requested: 3'

    response = custom_exception_handler(InvalidOrderState('served', 'cancel'), {})
    assert response.data['code'] == 'invalid_state'


def test_django_validation_error():
    response = custom_exception_handler(ValidationError('bad value'), {})
    assert response.status_code == 400
    assert response.data['details'] == {'non_field_errors': ['bad value']}


def test_integrity_error_is_conflict():
    response = custom_exception_handler(IntegrityError('duplicate key'), {})
    assert response.status_code == 409


def test_lock_failure_is_retryable_conflict():
    response = custom_exception_handler(OperationalError('database is locked'), {})
    assert response.status_code == 409
    assert response.data['code'] == 'conflict'


def test_unexpected_error(settings):
    settings.DEBUG = False
    response = custom_exception_handler(RuntimeError('boom'), {})
    assert response.status_code == 500
    assert response.data['details'] == {}
