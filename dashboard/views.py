import re
from datetime import timedelta

from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from django.db.models import Sum, Count, Max, F, IntegerField
from django.utils import timezone
from django.utils.dateparse import parse_date
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi

from authentication.permissions import IsAdminRole
from inventory.models import MenuItem, MenuCategory
from orders.models import Order, OrderItem, Tables, PaymentStatus

DATE_RE = re.compile(r'^\d{4}-\d{2}-\d{2}$')
UNCATEGORIZED = 'Uncategorized'
SUMMARY_DEFAULT_DAYS = 30

LINE_REVENUE = Sum(F('unit_price') * F('quantity'), output_field=IntegerField())


def parse_report_date(value, name):
    if not DATE_RE.match(value):
        raise ValidationError({name: "Invalid date format. Use: YYYY-MM-DD"})
    try:
        parsed = parse_date(value)
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValidationError({name: "Invalid date."})
    return parsed


def paid_orders():
    """Orders with a successful payment, whether or not they were served since"""
    return Order.objects.filter(payments__status=PaymentStatus.SUCCESS)


def get_sales_summary(orders):
    totals = orders.aggregate(total_orders=Count('id'), total_revenue=Sum('total_price'))
    total_orders = totals['total_orders'] or 0
    total_revenue = totals['total_revenue'] or 0
    return {
        'total_orders': total_orders,
        'total_revenue': total_revenue,
        'average_order_value': round(total_revenue / total_orders) if total_orders else 0,
    }


def get_payment_breakdown(orders):
    """Payment method -> order count and revenue"""
    rows = orders.values('payment_method').annotate(
        count=Count('id'),
        revenue=Sum('total_price')
    ).order_by('-revenue')
    return {
        row['payment_method'] or 'unknown': {'count': row['count'], 'revenue': row['revenue'] or 0}
        for row in rows
    }


def get_table_breakdown(orders):
    rows = orders.values('table__table_number').annotate(
        orders=Count('id'),
        revenue=Sum('total_price')
    ).order_by('table__table_number')
    return {
        str(row['table__table_number']): {'revenue': row['revenue'] or 0, 'orders': row['orders']}
        for row in rows
    }


def get_top_selling_items(orders, limit=10):
    """Best sellers by quantity, named by their order-time snapshot"""
    rows = OrderItem.objects.filter(order__in=orders).values('menu_item_id').annotate(
        name=Max('item_name'),
        category=Max('menu_item__category__name'),
        revenue=LINE_REVENUE,
        quantity_sold=Sum('quantity'),
    ).order_by('-quantity_sold', 'name')[:limit]
    return [
        {
            'menu_item_id': row['menu_item_id'],
            'name': row['name'],
            'category': row['category'] or UNCATEGORIZED,
            'quantity': row['quantity_sold'],
            'revenue': row['revenue'] or 0,
        }
        for row in rows
    ]


def get_category_breakdown(orders):
    rows = OrderItem.objects.filter(order__in=orders).values('menu_item__category__name').annotate(
        revenue=LINE_REVENUE,
        items_sold=Sum('quantity'),
    ).order_by('-revenue')

    breakdown = {}
    for row in rows:
        name = row['menu_item__category__name'] or UNCATEGORIZED
        entry = breakdown.setdefault(name, {'revenue': 0, 'items_sold': 0})
        entry['revenue'] += row['revenue'] or 0
        entry['items_sold'] += row['items_sold'] or 0
    return breakdown


@swagger_auto_schema(
    method='get',
    operation_description="Sales of paid orders created on one day",
    manual_parameters=[
        openapi.Parameter('date', openapi.IN_QUERY, description="Day to report (YYYY-MM-DD)", type=openapi.TYPE_STRING, required=True),
    ]
)
@api_view(['GET'])
@permission_classes([IsAdminRole])
def daily_report(request):
    date_str = request.query_params.get('date')
    if not date_str:
        raise ValidationError({'date': "date parameter is required. Example: ?date=2025-12-13"})
    day = parse_report_date(date_str, 'date')

    orders = paid_orders().filter(created_at__date=day)

    return Response({
        'date': day.isoformat(),
        'summary': get_sales_summary(orders),
        'revenue_by_method': {
            method: entry['revenue'] for method, entry in get_payment_breakdown(orders).items()
        },
        'revenue_by_table': get_table_breakdown(orders),
        'top_items': get_top_selling_items(orders),
    })


@swagger_auto_schema(
    method='get',
    operation_description="Sales of paid orders over a date range (default: last 30 days)",
    manual_parameters=[
        openapi.Parameter('start_date', openapi.IN_QUERY, description="First day (YYYY-MM-DD)", type=openapi.TYPE_STRING),
        openapi.Parameter('end_date', openapi.IN_QUERY, description="Last day (YYYY-MM-DD)", type=openapi.TYPE_STRING),
    ]
)
@api_view(['GET'])
@permission_classes([IsAdminRole])
def summary_report(request):
    start_str = request.query_params.get('start_date')
    end_str = request.query_params.get('end_date')

    end_date = parse_report_date(end_str, 'end_date') if end_str else timezone.localdate()
    start_date = (
        parse_report_date(start_str, 'start_date') if start_str
        else end_date - timedelta(days=SUMMARY_DEFAULT_DAYS)
    )
    if start_date > end_date:
        raise ValidationError({'start_date': "start_date must not be after end_date."})

    orders = paid_orders().filter(created_at__date__gte=start_date, created_at__date__lte=end_date)

    return Response({
        'date_range': {
            'start_date': start_date.isoformat(),
            'end_date': end_date.isoformat(),
        },
        'summary': get_sales_summary(orders),
        'revenue_by_method': get_payment_breakdown(orders),
        'revenue_by_category': get_category_breakdown(orders),
        'inventory': {
            'total_menu_items': MenuItem.objects.count(),
            'total_categories': MenuCategory.objects.count(),
            'total_tables': Tables.objects.count(),
        },
    })
