from rest_framework import serializers

from .models import Order, OrderItem, Tables, Payment, PaymentMethod
from .state_machine import allowed_actions


class TableSerializer(serializers.ModelSerializer):
    table_number = serializers.IntegerField(min_value=1)

    class Meta:
        model = Tables
        fields = ['id', 'table_number', 'qr_code', 'is_active', 'date_added']
        read_only_fields = ['id', 'qr_code', 'date_added']

    def validate_table_number(self, value):
        queryset = Tables.objects.filter(table_number=value)
        if self.instance:
            queryset = queryset.exclude(id=self.instance.id)
        if queryset.exists():
            raise serializers.ValidationError("A table with this number already exists.")
        return value


class OrderItemInputSerializer(serializers.Serializer):
    menu_item_id = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1)


class OrderCreateSerializer(serializers.Serializer):
    table_id = serializers.IntegerField(min_value=1)
    items = OrderItemInputSerializer(many=True, allow_empty=False)


class OrderItemsUpdateSerializer(serializers.Serializer):
    items = OrderItemInputSerializer(many=True, allow_empty=False)


class PaymentCreateSerializer(serializers.Serializer):
    method = serializers.ChoiceField(choices=PaymentMethod.choices)


class PaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Payment
        fields = ['id', 'order', 'method', 'status', 'paid_at']
        read_only_fields = fields


class OrderItemReadSerializer(serializers.ModelSerializer):
    line_total = serializers.IntegerField(read_only=True)
    menu_item_available = serializers.SerializerMethodField()

    class Meta:
        model = OrderItem
        fields = [
            'id', 'menu_item', 'item_name', 'quantity', 'unit_price',
            'line_total', 'menu_item_available'
        ]

    def get_menu_item_available(self, obj):
        menu_item = obj.menu_item
        return bool(menu_item and menu_item.is_orderable)


class OrderReadSerializer(serializers.ModelSerializer):
    items = OrderItemReadSerializer(many=True, read_only=True)
    table_details = TableSerializer(source='table', read_only=True)
    payments = PaymentSerializer(many=True, read_only=True)
    allowed_actions = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            'id', 'table', 'table_details', 'status', 'total_price',
            'payment_method', 'items', 'payments', 'allowed_actions',
            'created_at', 'updated_at', 'validated_at', 'served_at', 'cancelled_at'
        ]
        read_only_fields = fields

    def get_allowed_actions(self, obj):
        return allowed_actions(obj.status)


class OrderListSerializer(serializers.ModelSerializer):
    table_number = serializers.IntegerField(source='table.table_number', read_only=True)
    items_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Order
        fields = [
            'id', 'table', 'table_number', 'status', 'total_price',
            'payment_method', 'items_count', 'created_at', 'validated_at', 'served_at'
        ]
        read_only_fields = fields
