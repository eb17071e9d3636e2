"""
Order lifecycle errors.

Every failure of an order operation is raised as one of these and rendered by
``authentication.exceptions.custom_exception_handler``. Raising inside
``transaction.atomic()`` rolls back any stock already moved by the call.
"""
from rest_framework import status
from rest_framework.exceptions import APIException


class OrderError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Order operation failed.'
    default_code = 'order_error'


class ResourceNotFound(OrderError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Resource not found.'
    default_code = 'not_found'

    def __init__(self, resource, identifier=None):
        detail = f"{resource} not found" if identifier is None else f"{resource} not found: {identifier}"
        super().__init__(detail)


class InvalidOrderState(OrderError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Order status does not allow this action.'
    default_code = 'invalid_state'

    # Action tokens that do not read as a verb on their own
    ACTION_PHRASES = {
        'edit_items': 'edit items of',
    }

    def __init__(self, current_status, action):
        self.current_status = current_status
        self.action = action
        phrase = self.ACTION_PHRASES.get(action, action)
        super().__init__(f"Cannot {phrase} order with status: {current_status}")


class InsufficientStock(OrderError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Insufficient stock.'
    default_code = 'insufficient_stock'

    def __init__(self, item_name, available, requested):
        self.item_name = item_name
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for: {item_name}. Available: {available}, requested: {requested}"
        )


class ItemUnavailable(OrderError):
    default_detail = 'Menu item not available.'
    default_code = 'item_unavailable'

    def __init__(self, item_name, reason='not available'):
        super().__init__(f"Menu item {reason}: {item_name}")


class InactiveResource(OrderError):
    default_detail = 'Resource is not active.'
    default_code = 'inactive_resource'


class PrivilegedActionRequired(OrderError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'This action requires admin access.'
    default_code = 'unauthorized'
