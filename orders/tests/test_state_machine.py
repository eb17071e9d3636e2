import itertools

import pytest

from orders.exceptions import InvalidOrderState
from orders.models import OrderStatus
from orders.state_machine import (
    OrderAction, TRANSITIONS, next_status, allowed_actions, holds_reservation,
)

LISTED = {
    (OrderStatus.PENDING, OrderAction.VALIDATE): OrderStatus.VALIDATED,
    (OrderStatus.PENDING, OrderAction.CANCEL): OrderStatus.CANCELLED,
    (OrderStatus.PENDING, OrderAction.EDIT_ITEMS): OrderStatus.PENDING,
    (OrderStatus.VALIDATED, OrderAction.CANCEL): OrderStatus.CANCELLED,
    (OrderStatus.VALIDATED, OrderAction.PAY): OrderStatus.PAID,
    (OrderStatus.VALIDATED, OrderAction.SERVE): OrderStatus.SERVED,
    (OrderStatus.VALIDATED, OrderAction.EDIT_ITEMS): OrderStatus.VALIDATED,
    (OrderStatus.PAID, OrderAction.SERVE): OrderStatus.SERVED,
}


@pytest.mark.parametrize('current,action', list(LISTED))
def test_listed_transitions(current, action):
    assert next_status(current, action) == LISTED[(current, action)]


@pytest.mark.parametrize('current,action', [
    (status, action)
    for status, action in itertools.product(OrderStatus.values, OrderAction.ALL)
    if (status, action) not in TRANSITIONS
])
def test_every_other_transition_is_rejected(current, action):
    with pytest.raises(InvalidOrderState) as excinfo:
        next_status(current, action)
    phrase = 'edit items of' if action == OrderAction.EDIT_ITEMS else action
    assert excinfo.value.status_code == 409
    assert str(excinfo.value.detail) == f"Cannot {phrase} order with status: {current}"


def test_unserve_depends_on_payment():
    assert next_status(OrderStatus.SERVED, OrderAction.UNSERVE, has_payment=True) == OrderStatus.PAID
    assert next_status(OrderStatus.SERVED, OrderAction.UNSERVE, has_payment=False) == OrderStatus.VALIDATED


def test_unknown_status_is_rejected():
    with pytest.raises(InvalidOrderState):
        next_status('refunded', OrderAction.CANCEL)


def test_terminal_and_open_states():
    assert allowed_actions(OrderStatus.CANCELLED) == []
    assert allowed_actions(OrderStatus.SERVED) == [OrderAction.UNSERVE]
    assert set(allowed_actions(OrderStatus.PENDING)) == {
        OrderAction.VALIDATE, OrderAction.CANCEL, OrderAction.EDIT_ITEMS
    }


def test_reserving_statuses():
    assert not holds_reservation(OrderStatus.PENDING)
    assert not holds_reservation(OrderStatus.CANCELLED)
    for status in (OrderStatus.VALIDATED, OrderStatus.PAID, OrderStatus.SERVED):
        assert holds_reservation(status)


def test_action_names_are_identifiers():
    assert OrderAction.EDIT_ITEMS == 'edit_items'
    for action in OrderAction.ALL:
        assert action.isidentifier()
    assert 'edit_items' in allowed_actions(OrderStatus.VALIDATED)
