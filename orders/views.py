import logging

from rest_framework import status, generics, filters
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import AllowAny
from django.db.models import Count, ProtectedError
from django.shortcuts import get_object_or_404
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi

from authentication.permissions import IsAdminRole, IsStaffRole, is_privileged
from . import services
from .models import Order, Tables, OrderStatus
from .serializers import (
    TableSerializer, OrderCreateSerializer, OrderItemsUpdateSerializer,
    PaymentCreateSerializer, PaymentSerializer, OrderReadSerializer,
    OrderListSerializer,
)

logger = logging.getLogger(__name__)


def order_detail_queryset():
    return Order.objects.select_related('table').prefetch_related(
        'items__menu_item', 'payments'
    )


def order_response(order, status_code=status.HTTP_200_OK):
    """Serialize a freshly mutated order with its items, table and payments"""
    order = order_detail_queryset().get(pk=order.pk)
    return Response(OrderReadSerializer(order).data, status=status_code)


# =============== TABLES ===============

class TableListCreateView(generics.ListCreateAPIView):
    """
    get: List all tables
    post: Create a table; its QR payload is generated from the number
    """
    queryset = Tables.objects.all()
    serializer_class = TableSerializer
    permission_classes = [IsAdminRole]
    filter_backends = [filters.OrderingFilter]
    ordering = ['table_number']


class TableDetailView(generics.RetrieveUpdateDestroyAPIView):
    """Retrieve, update or delete a table (admins only)"""
    queryset = Tables.objects.all()
    serializer_class = TableSerializer
    permission_classes = [IsAdminRole]

    def destroy(self, request, *args, **kwargs):
        table = self.get_object()
        try:
            table.delete()
        except ProtectedError:
            return Response(
                {
                    'error': True,
                    'message': 'Cannot delete a table that has orders. Deactivate it instead.',
                    'code': 'table_has_orders',
                },
                status=status.HTTP_400_BAD_REQUEST
            )
        logger.info("Deleted table %s", table.table_number)
        return Response(status=status.HTTP_204_NO_CONTENT)


@swagger_auto_schema(
    method='get',
    operation_description="Resolve a scanned table number to an active table",
    responses={200: TableSerializer, 404: 'Table not found'}
)
@api_view(['GET'])
@permission_classes([AllowAny])
def table_by_number(request, table_number):
    """Customer entry point after scanning a table QR code"""
    table = get_object_or_404(Tables, table_number=table_number, is_active=True)
    return Response(TableSerializer(table).data)


# =============== ORDERS ===============

class OrderListCreateView(generics.ListCreateAPIView):
    """
    get: List orders (staff), newest first
    post: Place an order from a table (customers)
    """

    def get_permissions(self):
        if self.request.method == 'POST':
            return [AllowAny()]
        return [IsStaffRole()]

    def get_serializer_class(self):
        if self.request.method == 'POST':
            return OrderCreateSerializer
        return OrderListSerializer

    def get_queryset(self):
        queryset = Order.objects.select_related('table').annotate(items_count=Count('items'))

        status_filter = self.request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)

        table_filter = self.request.query_params.get('table_id')
        if table_filter:
            queryset = queryset.filter(table_id=table_filter)

        return queryset.order_by('-created_at')

    @swagger_auto_schema(
        manual_parameters=[
            openapi.Parameter('status', openapi.IN_QUERY, description="Filter by order status", type=openapi.TYPE_STRING, enum=OrderStatus.values),
            openapi.Parameter('table_id', openapi.IN_QUERY, description="Filter by table", type=openapi.TYPE_INTEGER),
        ]
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    @swagger_auto_schema(
        operation_description="Create a pending order for a table. Stock is reserved later, at validation.",
        request_body=OrderCreateSerializer,
        responses={201: OrderReadSerializer, 400: 'Bad Request', 404: 'Table or menu item not found', 409: 'Insufficient stock'}
    )
    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = services.create_order(**serializer.validated_data)
        return order_response(order, status.HTTP_201_CREATED)


class OrderDetailView(generics.RetrieveAPIView):
    """Order with items, table and payments"""
    serializer_class = OrderReadSerializer
    permission_classes = [AllowAny]

    def get_queryset(self):
        return order_detail_queryset()


@swagger_auto_schema(
    method='get',
    operation_description="Orders the kitchen still has to serve (validated or paid), oldest first",
    responses={200: OrderReadSerializer(many=True)}
)
@api_view(['GET'])
@permission_classes([IsStaffRole])
def kitchen_display(request):
    orders = order_detail_queryset().filter(
        status__in=[OrderStatus.VALIDATED, OrderStatus.PAID]
    ).order_by('validated_at', 'created_at')

    serializer = OrderReadSerializer(orders, many=True)
    return Response(serializer.data)


@swagger_auto_schema(
    method='post',
    operation_description="Validate a pending order and reserve stock for all its items",
    responses={200: OrderReadSerializer, 404: 'Order not found', 409: 'Invalid state or insufficient stock'}
)
@api_view(['POST'])
@permission_classes([IsAdminRole])
def validate_order(request, pk):
    order = services.validate_order(pk)
    return order_response(order)


@swagger_auto_schema(
    method='put',
    operation_description="Replace the items of a pending or validated order",
    request_body=OrderItemsUpdateSerializer,
    responses={200: OrderReadSerializer, 404: 'Order or menu item not found', 409: 'Invalid state or insufficient stock'}
)
@api_view(['PUT'])
@permission_classes([IsAdminRole])
def update_order_items(request, pk):
    serializer = OrderItemsUpdateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    order = services.edit_order_items(pk, serializer.validated_data['items'])
    return order_response(order)


@swagger_auto_schema(
    method='post',
    operation_description="Record payment of a validated order",
    request_body=PaymentCreateSerializer,
    responses={
        200: openapi.Response(
            description="Paid order and its payment",
            schema=openapi.Schema(
                type=openapi.TYPE_OBJECT,
                properties={
                    'order': openapi.Schema(type=openapi.TYPE_OBJECT),
                    'payment': openapi.Schema(type=openapi.TYPE_OBJECT),
                }
            )
        ),
        404: 'Order not found',
        409: 'Order is not validated',
    }
)
@api_view(['POST'])
@permission_classes([IsAdminRole])
def pay_order(request, pk):
    serializer = PaymentCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    order, payment = services.pay_order(pk, serializer.validated_data['method'])

    order = order_detail_queryset().get(pk=order.pk)
    return Response({
        'order': OrderReadSerializer(order).data,
        'payment': PaymentSerializer(payment).data,
    })


@swagger_auto_schema(
    method='post',
    operation_description="Mark a validated or paid order as served",
    responses={200: OrderReadSerializer, 404: 'Order not found', 409: 'Invalid state'}
)
@api_view(['POST'])
@permission_classes([IsStaffRole])
def serve_order(request, pk):
    order = services.serve_order(pk)
    return order_response(order)


@swagger_auto_schema(
    method='post',
    operation_description="Undo serving; returns to paid if a payment exists, otherwise validated",
    responses={200: OrderReadSerializer, 404: 'Order not found', 409: 'Invalid state'}
)
@api_view(['POST'])
@permission_classes([IsStaffRole])
def unserve_order(request, pk):
    order = services.unserve_order(pk)
    return order_response(order)


@swagger_auto_schema(
    method='post',
    operation_description="Cancel an order. Pending orders can be cancelled by the customer; validated orders need an admin.",
    responses={200: OrderReadSerializer, 403: 'Admin required', 404: 'Order not found', 409: 'Invalid state'}
)
@api_view(['POST'])
@permission_classes([AllowAny])
def cancel_order(request, pk):
    order = services.cancel_order(pk, privileged=is_privileged(request.user))
    return order_response(order)
