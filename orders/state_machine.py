"""
Order lifecycle.

    pending --validate--> validated --pay--> paid
       |                    |    \             |
     cancel              cancel   serve      serve
       v                    v       \          v
    cancelled           cancelled    +----> served --unserve--> paid | validated

Stock is reserved once, when an order is validated, and given back only when a
validated order is cancelled or its items are edited down.
"""
from .exceptions import InvalidOrderState
from .models import OrderStatus


class OrderAction:
    VALIDATE = 'validate'
    CANCEL = 'cancel'
    PAY = 'pay'
    SERVE = 'serve'
    UNSERVE = 'unserve'
    EDIT_ITEMS = 'edit_items'

    ALL = (VALIDATE, CANCEL, PAY, SERVE, UNSERVE, EDIT_ITEMS)


# (from, action) -> to; unserve is resolved by whether a payment exists
TRANSITIONS = {
    (OrderStatus.PENDING, OrderAction.VALIDATE): OrderStatus.VALIDATED,
    (OrderStatus.PENDING, OrderAction.CANCEL): OrderStatus.CANCELLED,
    (OrderStatus.PENDING, OrderAction.EDIT_ITEMS): OrderStatus.PENDING,
    (OrderStatus.VALIDATED, OrderAction.CANCEL): OrderStatus.CANCELLED,
    (OrderStatus.VALIDATED, OrderAction.PAY): OrderStatus.PAID,
    (OrderStatus.VALIDATED, OrderAction.SERVE): OrderStatus.SERVED,
    (OrderStatus.VALIDATED, OrderAction.EDIT_ITEMS): OrderStatus.VALIDATED,
    (OrderStatus.PAID, OrderAction.SERVE): OrderStatus.SERVED,
    (OrderStatus.SERVED, OrderAction.UNSERVE): None,
}

# Statuses in which the order's quantities are held out of stock
RESERVING_STATUSES = frozenset({OrderStatus.VALIDATED, OrderStatus.PAID, OrderStatus.SERVED})

# Cancelling from these gives stock back and needs an admin
PRIVILEGED_CANCEL_STATUSES = frozenset({OrderStatus.VALIDATED})


def next_status(current, action, has_payment=False):
    """Return the status ``action`` leads to from ``current`` or raise InvalidOrderState"""
    try:
        target = TRANSITIONS[(OrderStatus(current), action)]
    except (KeyError, ValueError):
        raise InvalidOrderState(current, action) from None

    if target is None:
        return OrderStatus.PAID if has_payment else OrderStatus.VALIDATED
    return target


def allowed_actions(current):
    return [action for (status, action) in TRANSITIONS if status == current]


def holds_reservation(status):
    return status in RESERVING_STATUSES
