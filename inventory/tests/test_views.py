import pytest

from inventory.models import MenuCategory, MenuItem
from inventory.serializers import MenuItemCreateUpdateSerializer
from orders import services

pytestmark = pytest.mark.django_db

CATEGORIES_URL = '/menu/categories/'
ITEMS_URL = '/menu/items/'


def rows(response):
    return response.data['results'] if isinstance(response.data, dict) else response.data


class TestCategories:
    def test_list_is_public_with_counts(self, api_client, latte):
        response = api_client.get(CATEGORIES_URL)
        assert response.status_code == 200
        assert rows(response)[0]['name'] == 'Coffee'
        assert rows(response)[0]['items_count'] == 1

    def test_create_requires_admin(self, api_client, kitchen_client, admin_client):
        assert api_client.post(CATEGORIES_URL, {'name': 'Tea'}, format='json').status_code in (401, 403)
        assert kitchen_client.post(CATEGORIES_URL, {'name': 'Tea'}, format='json').status_code == 403
        assert admin_client.post(CATEGORIES_URL, {'name': 'Tea'}, format='json').status_code == 201

    def test_name_is_unique_case_insensitive(self, admin_client, category):
        response = admin_client.post(CATEGORIES_URL, {'name': 'coffee'}, format='json')
        assert response.status_code == 400

    def test_cannot_delete_category_with_items(self, admin_client, category, latte):
        response = admin_client.delete(f'{CATEGORIES_URL}{category.pk}/')
        assert response.status_code == 400
        assert response.data['code'] == 'category_not_empty'

    def test_delete_empty_category(self, admin_client):
        category = MenuCategory.objects.create(name='Seasonal')
        response = admin_client.delete(f'{CATEGORIES_URL}{category.pk}/')
        assert response.status_code == 204
        assert not MenuCategory.objects.filter(pk=category.pk).exists()


class TestMenuItems:
    def test_list_hides_unavailable_and_archived_by_default(self, api_client, latte, croissant):
        MenuItem.objects.create(name='Old Muffin', price=10000, stock=3, is_archived=True)
        MenuItem.objects.create(name='Sold Out Tart', price=15000, stock=0, is_available=False)

        names = {row['name'] for row in rows(api_client.get(ITEMS_URL))}
        assert names == {'Latte', 'Croissant'}

        names = {row['name'] for row in rows(api_client.get(ITEMS_URL, {'only_available': 'false'}))}
        assert names == {'Latte', 'Croissant', 'Sold Out Tart'}

        names = {
            row['name'] for row in rows(api_client.get(ITEMS_URL, {'only_available': 'false', 'include_archived': 'true'}))
        }
        assert 'Old Muffin' in names

    def test_filter_by_category(self, api_client, latte, croissant, category):
        data = rows(api_client.get(ITEMS_URL, {'category_id': category.pk}))
        assert [row['name'] for row in data] == ['Latte']
        assert data[0]['category_name'] == 'Coffee'

    def test_create_item(self, admin_client, category):
        response = admin_client.post(ITEMS_URL, {
            'category': category.pk, 'name': 'Mocha', 'price': 28000, 'stock': 12,
        }, format='json')
        assert response.status_code == 201
        assert response.data['category_name'] == 'Coffee'
        assert response.data['is_archived'] is False

    @pytest.mark.parametrize('payload', [
        {'name': 'M', 'price': 1000},
        {'name': 'Mocha', 'price': -1},
        {'name': 'Mocha', 'price': 1000, 'stock': -2},
        {'name': 'Mocha', 'price': 1000, 'category': 999},
        {'name': 'Mocha', 'price': 1000, 'is_archived': True},
    ])
    def test_create_item_validation(self, admin_client, payload):
        response = admin_client.post(ITEMS_URL, payload, format='json')
        assert response.status_code == 400

    def test_delete_archives(self, admin_client, latte):
        response = admin_client.delete(f'{ITEMS_URL}{latte.pk}/')
        assert response.status_code == 200
        assert response.data == {'success': True}

        latte.refresh_from_db()
        assert latte.is_archived
        assert not latte.is_available

    def test_restock(self, admin_client, croissant):
        response = admin_client.patch(f'{ITEMS_URL}{croissant.pk}/', {'stock': 20}, format='json')
        assert response.status_code == 200
        assert response.data['stock'] == 20

    def test_price_change_keeps_concurrent_reservation(self, make_order, croissant):
        order = make_order((croissant, 5))
        loaded = MenuItem.objects.get(pk=croissant.pk)
        services.validate_order(order.pk)

        serializer = MenuItemCreateUpdateSerializer(loaded, data={'price': 19000}, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()

        croissant.refresh_from_db()
        assert croissant.price == 19000
        assert croissant.stock == 0

    def test_patch_price_only(self, admin_client, make_order, croissant):
        services.validate_order(make_order((croissant, 2)).pk)
        response = admin_client.patch(f'{ITEMS_URL}{croissant.pk}/', {'price': 20000}, format='json')
        assert response.status_code == 200
        assert response.data['price'] == 20000
        assert response.data['stock'] == 3
