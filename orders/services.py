"""
Order operations.

Each public function is one request's worth of work and runs in a single
``transaction.atomic()`` block: the order row is locked, every guard is checked
against locked rows, then stock, line items, status and payment are written
together. Any raised OrderError rolls the whole call back.
"""
import logging
from collections import OrderedDict

from django.db import transaction
from django.utils import timezone

from inventory.models import MenuItem
from inventory import stock
from .exceptions import (
    ResourceNotFound, InactiveResource, ItemUnavailable, InsufficientStock,
    PrivilegedActionRequired,
)
from .models import Tables, Order, OrderItem, Payment, OrderStatus, PaymentStatus
from .state_machine import OrderAction, next_status, holds_reservation, PRIVILEGED_CANCEL_STATUSES

logger = logging.getLogger(__name__)


def aggregate_quantities(items):
    """Sum requested quantities per menu item, keeping first-seen order"""
    quantities = OrderedDict()
    for entry in items:
        menu_item_id = entry['menu_item_id']
        quantities[menu_item_id] = quantities.get(menu_item_id, 0) + entry['quantity']
    return quantities


def _line_quantities(lines):
    quantities = OrderedDict()
    for line in lines:
        if line.menu_item_id is None:
            continue
        quantities[line.menu_item_id] = quantities.get(line.menu_item_id, 0) + line.quantity
    return quantities


def _lock_order(order_id):
    order = Order.objects.select_for_update().filter(pk=order_id).first()
    if order is None:
        raise ResourceNotFound("Order", order_id)
    return order


def _require_menu_items(lines):
    """Lines whose menu item was deleted cannot be reserved or reconciled"""
    for line in lines:
        if line.menu_item_id is None:
            raise ItemUnavailable(line.item_name, 'no longer on the menu')


def _check_orderable(item):
    if item.is_archived:
        raise ItemUnavailable(item.name, 'archived')
    if not item.is_available:
        raise ItemUnavailable(item.name, 'not available')


def _check_stock(item, needed):
    if item.stock < needed:
        raise InsufficientStock(item.name, item.stock, needed)


def create_order(table_id, items):
    """Place a pending order for a table; nothing is reserved yet"""
    quantities = aggregate_quantities(items)

    with transaction.atomic():
        table = Tables.objects.filter(pk=table_id).first()
        if table is None:
            raise ResourceNotFound("Table", table_id)
        if not table.is_active:
            raise InactiveResource("Table is not active")

        menu = MenuItem.objects.in_bulk(list(quantities))

        # Checked in passes so the reported error is the most basic one
        for menu_item_id in quantities:
            if menu_item_id not in menu:
                raise ResourceNotFound("Menu item", menu_item_id)
        for menu_item_id in quantities:
            if menu[menu_item_id].is_archived:
                raise ItemUnavailable(menu[menu_item_id].name, 'archived')
        for menu_item_id in quantities:
            if not menu[menu_item_id].is_available:
                raise ItemUnavailable(menu[menu_item_id].name, 'not available')
        for menu_item_id, quantity in quantities.items():
            _check_stock(menu[menu_item_id], quantity)

        order = Order.objects.create(table=table, status=OrderStatus.PENDING)
        lines = [
            OrderItem(
                order=order,
                menu_item=menu[menu_item_id],
                quantity=quantity,
                unit_price=menu[menu_item_id].price,
                item_name=menu[menu_item_id].name,
            )
            for menu_item_id, quantity in quantities.items()
        ]
        OrderItem.objects.bulk_create(lines)
        order.calculate_totals(lines)
        order.save(update_fields=['total_price', 'updated_at'])

    logger.info("Order #%s created for table %s, total %s", order.pk, table.table_number, order.total_price)
    return order


def validate_order(order_id):
    """Confirm a pending order and reserve stock for every line"""
    with transaction.atomic():
        order = _lock_order(order_id)
        target = next_status(order.status, OrderAction.VALIDATE)

        if not order.table.is_active:
            raise InactiveResource("Table is not active")

        lines = list(order.items.all())
        _require_menu_items(lines)

        quantities = _line_quantities(lines)
        menu = stock.lock_menu_items(quantities)

        for menu_item_id, quantity in quantities.items():
            item = menu.get(menu_item_id)
            if item is None:
                raise ResourceNotFound("Menu item", menu_item_id)
            _check_orderable(item)
            _check_stock(item, quantity)

        for menu_item_id, quantity in quantities.items():
            stock.decrement(menu_item_id, quantity)

        order.status = target
        order.validated_at = timezone.now()
        order.save(update_fields=['status', 'validated_at', 'updated_at'])

    logger.info("Order #%s validated, reserved %s item(s)", order.pk, len(quantities))
    return order


def edit_order_items(order_id, items):
    """
    Replace the line items of a pending or validated order.

    Lines that already existed keep their unit price snapshot; new lines take
    the current catalog price. For validated orders the stock reservation is
    moved by the per-item difference between the old and new quantities.
    """
    new_quantities = aggregate_quantities(items)

    with transaction.atomic():
        order = _lock_order(order_id)
        next_status(order.status, OrderAction.EDIT_ITEMS)
        reserved = holds_reservation(order.status)

        old_lines = list(order.items.all())
        _require_menu_items(old_lines)
        old_quantities = _line_quantities(old_lines)
        snapshots = {}
        for line in old_lines:
            snapshots.setdefault(line.menu_item_id, (line.unit_price, line.item_name))

        touched = list(old_quantities)
        touched += [menu_item_id for menu_item_id in new_quantities if menu_item_id not in old_quantities]
        menu = stock.lock_menu_items(touched)

        deltas = OrderedDict()
        for menu_item_id in touched:
            new_qty = new_quantities.get(menu_item_id, 0)
            delta = new_qty - old_quantities.get(menu_item_id, 0)
            deltas[menu_item_id] = delta
            if delta <= 0:
                continue

            item = menu.get(menu_item_id)
            if item is None:
                raise ResourceNotFound("Menu item", menu_item_id)
            _check_orderable(item)
            # Pending orders hold nothing yet, so the whole quantity has to fit
            _check_stock(item, delta if reserved else new_qty)

        new_lines = []
        for menu_item_id, quantity in new_quantities.items():
            if menu_item_id in snapshots:
                unit_price, item_name = snapshots[menu_item_id]
            else:
                unit_price, item_name = menu[menu_item_id].price, menu[menu_item_id].name
            new_lines.append(OrderItem(
                order=order,
                menu_item_id=menu_item_id,
                quantity=quantity,
                unit_price=unit_price,
                item_name=item_name,
            ))

        if reserved:
            for menu_item_id, delta in deltas.items():
                stock.apply_delta(menu_item_id, delta)

        order.items.all().delete()
        OrderItem.objects.bulk_create(new_lines)
        order.calculate_totals(new_lines)
        order.save(update_fields=['total_price', 'updated_at'])

    logger.info(
        "Order #%s items edited (%s), total %s",
        order.pk, ", ".join(f"{k}:{v:+d}" for k, v in deltas.items() if v) or "no change", order.total_price
    )
    return order


def pay_order(order_id, method):
    """Record the single successful payment of a validated order"""
    with transaction.atomic():
        order = _lock_order(order_id)
        target = next_status(order.status, OrderAction.PAY)

        payment = Payment.objects.create(
            order=order,
            method=method,
            status=PaymentStatus.SUCCESS,
            paid_at=timezone.now(),
        )
        order.status = target
        order.payment_method = method
        order.save(update_fields=['status', 'payment_method', 'updated_at'])

    logger.info("Order #%s paid by %s (%s)", order.pk, method, order.total_price)
    return order, payment


def serve_order(order_id):
    with transaction.atomic():
        order = _lock_order(order_id)
        order.status = next_status(order.status, OrderAction.SERVE)
        order.served_at = timezone.now()
        order.save(update_fields=['status', 'served_at', 'updated_at'])

    logger.info("Order #%s served", order.pk)
    return order


def unserve_order(order_id):
    """Undo a serve; the order returns to paid if it was paid, else validated"""
    with transaction.atomic():
        order = _lock_order(order_id)
        has_payment = order.payments.filter(status=PaymentStatus.SUCCESS).exists()
        order.status = next_status(order.status, OrderAction.UNSERVE, has_payment=has_payment)
        order.served_at = None
        order.save(update_fields=['status', 'served_at', 'updated_at'])

    logger.info("Order #%s unserved back to %s", order.pk, order.status)
    return order


def cancel_order(order_id, privileged=False):
    """
    Cancel a pending or validated order.

    Anyone may cancel a pending order. Cancelling a validated order releases
    its stock reservation and is restricted to privileged callers.
    """
    with transaction.atomic():
        order = _lock_order(order_id)
        previous = order.status
        target = next_status(previous, OrderAction.CANCEL)

        if previous in PRIVILEGED_CANCEL_STATUSES and not privileged:
            logger.warning("Unprivileged cancel attempt on validated order #%s", order.pk)
            raise PrivilegedActionRequired("Cancelling a validated order requires admin access")

        if holds_reservation(previous):
            for menu_item_id, quantity in _line_quantities(order.items.all()).items():
                stock.increment(menu_item_id, quantity)

        order.status = target
        order.cancelled_at = timezone.now()
        order.save(update_fields=['status', 'cancelled_at', 'updated_at'])

    logger.info("Order #%s cancelled from %s", order.pk, previous)
    return order
