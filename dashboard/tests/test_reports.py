from datetime import datetime, timedelta

import pytest
from django.urls import reverse
from django.utils import timezone

from dashboard import views
from inventory.models import MenuItem
from orders import services
from orders.models import Order, PaymentMethod, Tables

pytestmark = pytest.mark.django_db

DAY = datetime(2025, 12, 13, 12, 0)


def place_on(order, when):
    Order.objects.filter(pk=order.pk).update(created_at=timezone.make_aware(when))


@pytest.fixture
def paid_orders(make_order, latte, croissant):
    """Two paid orders on DAY (one served), plus noise that must not be counted"""
    second_table = Tables.objects.create(table_number=2)

    first = make_order((latte, 2), (croissant, 1))
    services.validate_order(first.pk)
    services.pay_order(first.pk, PaymentMethod.CASH)

    second = make_order((latte, 1), table_obj=second_table)
    services.validate_order(second.pk)
    services.pay_order(second.pk, PaymentMethod.QRIS)
    services.serve_order(second.pk)

    validated_only = make_order((croissant, 2))
    services.validate_order(validated_only.pk)
    pending = make_order((latte, 1))
    earlier = make_order((croissant, 1))
    services.validate_order(earlier.pk)
    services.pay_order(earlier.pk, PaymentMethod.CASH)

    for order in (first, second, validated_only, pending):
        place_on(order, DAY)
    place_on(earlier, DAY - timedelta(days=3))
    return first, second, earlier


class TestDailyReport:
    def test_counts_only_paid_orders_of_the_day(self, admin_client, paid_orders):
        response = admin_client.get(reverse('daily-report'), {'date': '2025-12-13'})
        assert response.status_code == 200

        summary = response.data['summary']
        assert summary['total_orders'] == 2
        assert summary['total_revenue'] == 68000 + 25000
        assert summary['average_order_value'] == round(93000 / 2)

        assert response.data['revenue_by_method'] == {'cash': 68000, 'qris': 25000}
        assert response.data['revenue_by_table'] == {
            '1': {'revenue': 68000, 'orders': 1},
            '2': {'revenue': 25000, 'orders': 1},
        }

    def test_top_items_use_snapshots(self, admin_client, paid_orders, latte):
        MenuItem.objects.filter(pk=latte.pk).update(name='Renamed', price=1)

        top = admin_client.get(reverse('daily-report'), {'date': '2025-12-13'}).data['top_items']
        assert top[0] == {
            'menu_item_id': latte.pk,
            'name': 'Latte',
            'category': 'Coffee',
            'quantity': 3,
            'revenue': 75000,
        }
        assert top[1]['category'] == 'Uncategorized'

    def test_empty_day(self, admin_client, db):
        response = admin_client.get(reverse('daily-report'), {'date': '2020-01-01'})
        assert response.data['summary'] == {'total_orders': 0, 'total_revenue': 0, 'average_order_value': 0}
        assert response.data['top_items'] == []

    @pytest.mark.parametrize('query', [{}, {'date': '13-12-2025'}, {'date': '2025-02-30'}])
    def test_bad_date(self, admin_client, query):
        response = admin_client.get(reverse('daily-report'), query)
        assert response.status_code == 400

    def test_admin_only(self, kitchen_client):
        response = kitchen_client.get(reverse('daily-report'), {'date': '2025-12-13'})
        assert response.status_code == 403


class TestSummaryReport:
    def test_range(self, admin_client, paid_orders):
        response = admin_client.get(reverse('summary-report'), {
            'start_date': '2025-12-01', 'end_date': '2025-12-31',
        })
        assert response.status_code == 200
        assert response.data['summary']['total_orders'] == 3
        assert response.data['revenue_by_method'] == {
            'cash': {'count': 2, 'revenue': 68000 + 18000},
            'qris': {'count': 1, 'revenue': 25000},
        }
        assert response.data['revenue_by_category'] == {
            'Coffee': {'revenue': 75000, 'items_sold': 3},
            'Uncategorized': {'revenue': 36000, 'items_sold': 2},
        }
        assert response.data['inventory'] == {
            'total_menu_items': 2, 'total_categories': 1, 'total_tables': 2,
        }

    def test_range_excludes_outside_days(self, admin_client, paid_orders):
        response = admin_client.get(reverse('summary-report'), {
            'start_date': '2025-12-12', 'end_date': '2025-12-13',
        })
        assert response.data['summary']['total_orders'] == 2

    def test_defaults_to_last_thirty_days(self, admin_client, db):
        response = admin_client.get(reverse('summary-report'))
        end = timezone.localdate()
        assert response.data['date_range'] == {
            'start_date': (end - timedelta(days=30)).isoformat(),
            'end_date': end.isoformat(),
        }

    def test_reversed_range(self, admin_client, db):
        response = admin_client.get(reverse('summary-report'), {
            'start_date': '2025-12-31', 'end_date': '2025-12-01',
        })
        assert response.status_code == 400


def test_top_items_rank_by_quantity(paid_orders, latte, croissant):
    top = views.get_top_selling_items(views.paid_orders(), limit=1)
    assert len(top) == 1
    assert top[0]['menu_item_id'] == latte.pk
    assert top[0]['quantity'] == 3
    assert top[0]['revenue'] == 75000
