from django.urls import path
from . import views

app_name = 'orders'

urlpatterns = [
    # Tables
    path('tables/', views.TableListCreateView.as_view(), name='table-list'),
    path('tables/<int:pk>/', views.TableDetailView.as_view(), name='table-detail'),
    path('tables/by-number/<int:table_number>/', views.table_by_number, name='table-by-number'),

    # Orders
    path('orders/', views.OrderListCreateView.as_view(), name='order-list'),
    path('orders/kitchen/', views.kitchen_display, name='kitchen-display'),
    path('orders/<int:pk>/', views.OrderDetailView.as_view(), name='order-detail'),

    # Lifecycle
    path('orders/<int:pk>/validate/', views.validate_order, name='order-validate'),
    path('orders/<int:pk>/items/', views.update_order_items, name='order-items'),
    path('orders/<int:pk>/pay/', views.pay_order, name='order-pay'),
    path('orders/<int:pk>/serve/', views.serve_order, name='order-serve'),
    path('orders/<int:pk>/unserve/', views.unserve_order, name='order-unserve'),
    path('orders/<int:pk>/cancel/', views.cancel_order, name='order-cancel'),
]
