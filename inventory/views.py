import logging

from rest_framework import generics, status
from rest_framework.response import Response
from rest_framework.permissions import AllowAny
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters
from django.db import transaction
from django.db.models import Count
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi

from authentication.permissions import IsAdminRole
from .models import MenuCategory, MenuItem
from .serializers import (
    MenuCategorySerializer, MenuItemSerializer, MenuItemCreateUpdateSerializer
)

logger = logging.getLogger(__name__)


def _query_flag(request, name, default):
    value = request.query_params.get(name)
    if value is None:
        return default
    return value.lower() not in ('false', '0', 'no')


class AdminWriteMixin:
    """Reads are public (customers browse the menu), writes need an admin"""

    def get_permissions(self):
        if self.request.method in ['POST', 'PUT', 'PATCH', 'DELETE']:
            return [IsAdminRole()]
        return [AllowAny()]


# Category Views
class MenuCategoryListCreateView(AdminWriteMixin, generics.ListCreateAPIView):
    """
    get: List all categories with their item counts
    post: Create a new category (admins only)
    """
    queryset = MenuCategory.objects.annotate(items_total=Count('items')).order_by('name')
    serializer_class = MenuCategorySerializer
    filter_backends = [filters.SearchFilter]
    search_fields = ['name']


class MenuCategoryRetrieveUpdateDestroyView(AdminWriteMixin, generics.RetrieveUpdateDestroyAPIView):
    """
    get: Get category details
    put/patch: Rename category (admins only)
    delete: Delete an empty category (admins only)
    """
    queryset = MenuCategory.objects.annotate(items_total=Count('items'))
    serializer_class = MenuCategorySerializer

    def destroy(self, request, *args, **kwargs):
        category = self.get_object()
        if category.items.exists():
            return Response(
                {'error': True, 'message': 'Cannot delete category with existing items', 'code': 'category_not_empty'},
                status=status.HTTP_400_BAD_REQUEST
            )
        category.delete()
        logger.info("Deleted menu category %s", category.name)
        return Response(status=status.HTTP_204_NO_CONTENT)


# Menu Item Views
class MenuItemListCreateView(AdminWriteMixin, generics.ListCreateAPIView):
    """
    get: List menu items (available and unarchived by default)
    post: Create a new menu item (admins only)
    """
    queryset = MenuItem.objects.select_related('category')
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['category']
    search_fields = ['name']
    ordering_fields = ['name', 'price', 'stock', 'created_at']
    ordering = ['-created_at']

    def get_serializer_class(self):
        if self.request.method == 'POST':
            return MenuItemCreateUpdateSerializer
        return MenuItemSerializer

    def get_queryset(self):
        queryset = super().get_queryset()

        category_id = self.request.query_params.get('category_id')
        if category_id:
            queryset = queryset.filter(category_id=category_id)

        if _query_flag(self.request, 'only_available', True):
            queryset = queryset.filter(is_available=True)

        if not _query_flag(self.request, 'include_archived', False):
            queryset = queryset.filter(is_archived=False)

        return queryset

    @swagger_auto_schema(
        manual_parameters=[
            openapi.Parameter('category_id', openapi.IN_QUERY, description="Filter by category", type=openapi.TYPE_INTEGER),
            openapi.Parameter('only_available', openapi.IN_QUERY, description="Only available items (default true)", type=openapi.TYPE_BOOLEAN),
            openapi.Parameter('include_archived', openapi.IN_QUERY, description="Include archived items (default false)", type=openapi.TYPE_BOOLEAN),
        ]
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    @swagger_auto_schema(
        request_body=MenuItemCreateUpdateSerializer,
        responses={201: MenuItemSerializer, 400: 'Bad Request'}
    )
    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        item = serializer.save()
        logger.info("Created menu item %s (stock %s)", item.name, item.stock)
        return Response(MenuItemSerializer(item).data, status=status.HTTP_201_CREATED)


class MenuItemRetrieveUpdateDestroyView(AdminWriteMixin, generics.RetrieveUpdateDestroyAPIView):
    """
    get: Get menu item details
    put/patch: Update menu item (admins only)
    delete: Archive menu item (admins only); past orders keep their snapshots
    """
    queryset = MenuItem.objects.select_related('category')

    def get_serializer_class(self):
        if self.request.method in ['PUT', 'PATCH']:
            return MenuItemCreateUpdateSerializer
        return MenuItemSerializer

    def get_queryset(self):
        if self.request.method in ['PUT', 'PATCH', 'DELETE']:
            # Row lock; the caller holds transaction.atomic()
            return MenuItem.objects.select_for_update()
        return super().get_queryset()

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        with transaction.atomic():
            instance = self.get_object()
            serializer = self.get_serializer(instance, data=request.data, partial=partial)
            serializer.is_valid(raise_exception=True)
            item = serializer.save()
        logger.info("Updated menu item %s: %s", item.name, ", ".join(serializer.validated_data))
        return Response(MenuItemSerializer(item).data)

    def destroy(self, request, *args, **kwargs):
        with transaction.atomic():
            item = self.get_object()
            item.is_archived = True
            item.is_available = False
            item.save(update_fields=['is_archived', 'is_available', 'updated_at'])
        logger.info("Archived menu item %s", item.name)
        return Response({'success': True})
