import pytest
from rest_framework.test import APIClient

from authentication.models import CustomUser
from inventory.models import MenuCategory, MenuItem
from orders.models import Tables
from orders import services


@pytest.fixture
def api_client():
    return APIClient()


def _make_user(username, role):
    return CustomUser.objects.create_user(
        username=username,
        email=f"{username}@cafe.test",
        password="s3cret-pass",
        role=role,
    )


@pytest.fixture
def owner(db):
    return _make_user('owner', CustomUser.ROLE_OWNER)


@pytest.fixture
def kitchen_user(db):
    return _make_user('kitchen', CustomUser.ROLE_KITCHEN)


@pytest.fixture
def admin_client(owner):
    client = APIClient()
    client.force_authenticate(user=owner)
    return client


@pytest.fixture
def kitchen_client(kitchen_user):
    client = APIClient()
    client.force_authenticate(user=kitchen_user)
    return client


@pytest.fixture
def table(db):
    return Tables.objects.create(table_number=1)


@pytest.fixture
def category(db):
    return MenuCategory.objects.create(name='Coffee')


@pytest.fixture
def latte(category):
    return MenuItem.objects.create(category=category, name='Latte', price=25000, stock=10)


@pytest.fixture
def croissant(db):
    return MenuItem.objects.create(name='Croissant', price=18000, stock=5)


@pytest.fixture
def make_order(table):
    """Create an order for ``table`` from (menu_item, quantity) pairs"""
    def _make(*lines, table_obj=None):
        items = [{'menu_item_id': item.pk, 'quantity': quantity} for item, quantity in lines]
        return services.create_order((table_obj or table).pk, items)
    return _make
