import threading

import pytest
from django.db import connections

from inventory import stock
from inventory.models import MenuItem
from orders import services
from orders.exceptions import InsufficientStock
from orders.models import Order, OrderStatus


@pytest.mark.django_db
def test_stale_read_cannot_push_stock_below_zero(make_order, latte, croissant, monkeypatch):
    """Guards pass on stale rows; the conditional decrement still refuses and nothing is kept"""
    order = make_order((latte, 2), (croissant, 4))
    MenuItem.objects.filter(pk=croissant.pk).update(stock=1)

    def stale_lock(menu_item_ids):
        items = {item.pk: item for item in MenuItem.objects.filter(pk__in=set(menu_item_ids))}
        for item in items.values():
            item.stock = 100
        return items

    monkeypatch.setattr(stock, 'lock_menu_items', stale_lock)

    with pytest.raises(InsufficientStock):
        services.validate_order(order.pk)

    assert MenuItem.objects.get(pk=latte.pk).stock == 10
    assert MenuItem.objects.get(pk=croissant.pk).stock == 1
    assert Order.objects.get(pk=order.pk).status == OrderStatus.PENDING


@pytest.mark.django_db(transaction=True)
def test_stock_changes_require_a_transaction(latte):
    with pytest.raises(RuntimeError):
        stock.decrement(latte.pk, 1)
    assert MenuItem.objects.get(pk=latte.pk).stock == 10


@pytest.mark.django_db(transaction=True)
def test_concurrent_validations_share_scarce_stock(make_order, croissant):
    first = make_order((croissant, 3))
    second = make_order((croissant, 3))

    barrier = threading.Barrier(2)
    results = {}

    def validate(order_id):
        try:
            barrier.wait()
            services.validate_order(order_id)
            results[order_id] = 'ok'
        except InsufficientStock:
            results[order_id] = 'insufficient'
        except Exception as exc:
            results[order_id] = f'{type(exc).__name__}: {exc}'
        finally:
            connections.close_all()

    threads = [threading.Thread(target=validate, args=(o.pk,)) for o in (first, second)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(results.values()) == ['insufficient', 'ok']
    assert MenuItem.objects.get(pk=croissant.pk).stock == 2
