"""
Stock ledger.

Stock is only ever moved by the order lifecycle, inside the transaction of the
order mutation that motivates it. Decrements are conditional UPDATEs so the
floor check and the write happen in one statement.
"""
import logging

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from orders.exceptions import InsufficientStock, ResourceNotFound
from .models import MenuItem

logger = logging.getLogger(__name__)


def _require_transaction():
    if not transaction.get_connection().in_atomic_block:
        raise RuntimeError("Stock can only be changed inside transaction.atomic()")


def _require_positive(quantity):
    if quantity <= 0:
        raise ValueError(f"Stock quantity must be positive, got {quantity}")


def lock_menu_items(menu_item_ids):
    """Lock the given menu items for the rest of the transaction, keyed by id.

    Rows are locked in primary-key order so concurrent callers touching
    overlapping items cannot deadlock.
    """
    _require_transaction()
    items = MenuItem.objects.select_for_update().filter(pk__in=set(menu_item_ids)).order_by('pk')
    return {item.pk: item for item in items}


def decrement(menu_item_id, quantity):
    """Reserve ``quantity`` units; raises InsufficientStock if stock would go negative"""
    _require_transaction()
    _require_positive(quantity)

    updated = MenuItem.objects.filter(pk=menu_item_id, stock__gte=quantity).update(
        stock=F('stock') - quantity, updated_at=timezone.now()
    )
    if not updated:
        item = MenuItem.objects.filter(pk=menu_item_id).only('name', 'stock').first()
        if item is None:
            raise ResourceNotFound("Menu item", menu_item_id)
        logger.warning("Stock floor hit for %s: available %s, requested %s", item.name, item.stock, quantity)
        raise InsufficientStock(item.name, item.stock, quantity)

    logger.debug("Stock -%s for menu item %s", quantity, menu_item_id)


def increment(menu_item_id, quantity):
    """Return ``quantity`` previously reserved units to stock"""
    _require_transaction()
    _require_positive(quantity)

    updated = MenuItem.objects.filter(pk=menu_item_id).update(
        stock=F('stock') + quantity, updated_at=timezone.now()
    )
    if not updated:
        # Items are archived, never deleted, so this only happens on a broken reference
        logger.error("Cannot restore %s units to missing menu item %s", quantity, menu_item_id)
        raise ResourceNotFound("Menu item", menu_item_id)

    logger.debug("Stock +%s for menu item %s", quantity, menu_item_id)


def apply_delta(menu_item_id, delta):
    """Positive delta reserves more stock, negative delta releases it"""
    if delta > 0:
        decrement(menu_item_id, delta)
    elif delta < 0:
        increment(menu_item_id, -delta)
