from rest_framework import serializers
from .models import MenuCategory, MenuItem


class MenuCategorySerializer(serializers.ModelSerializer):
    name = serializers.CharField(min_length=2, max_length=100)
    items_count = serializers.SerializerMethodField()

    class Meta:
        model = MenuCategory
        fields = ['id', 'name', 'items_count', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at', 'items_count']

    def get_items_count(self, obj):
        count = getattr(obj, 'items_total', None)
        if count is None:
            count = obj.items.count()
        return count

    def validate_name(self, value):
        """Validate unique category name"""
        value = value.strip()
        queryset = MenuCategory.objects.filter(name__iexact=value)
        if self.instance:
            queryset = queryset.exclude(id=self.instance.id)
        if queryset.exists():
            raise serializers.ValidationError("Category with this name already exists.")
        return value


class MenuItemSerializer(serializers.ModelSerializer):
    category_name = serializers.CharField(source='category.name', read_only=True, default=None)

    class Meta:
        model = MenuItem
        fields = [
            'id', 'category', 'category_name', 'name', 'image_url', 'price',
            'stock', 'is_available', 'is_archived', 'created_at', 'updated_at'
        ]


class MenuItemCreateUpdateSerializer(serializers.ModelSerializer):
    category = serializers.PrimaryKeyRelatedField(
        queryset=MenuCategory.objects.all(),
        required=False,
        allow_null=True,
        error_messages={'does_not_exist': 'Category not found'}
    )
    name = serializers.CharField(min_length=2, max_length=150)
    price = serializers.IntegerField(min_value=0)
    stock = serializers.IntegerField(min_value=0, required=False)

    class Meta:
        model = MenuItem
        fields = [
            'category', 'name', 'image_url', 'price', 'stock',
            'is_available', 'is_archived'
        ]

    def validate(self, attrs):
        # Archiving is done through DELETE; creation never starts archived
        if self.instance is None and attrs.get('is_archived'):
            raise serializers.ValidationError({'is_archived': "New menu items cannot be archived."})
        return attrs

    def update(self, instance, validated_data):
        # Only write what was sent; stock is moved concurrently by the order lifecycle
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.save(update_fields=list(validated_data) + ['updated_at'])
        return instance
