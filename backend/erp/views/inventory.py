"""Warehouse, item and stock level API views."""

from rest_framework import mixins, viewsets
from rest_framework.decorators import action
from rest_framework.filters import SearchFilter
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..models import Inventory, Item, Warehouse
from ..serializers import (
    InventorySerializer,
    ItemPriceHistorySerializer,
    ItemSerializer,
    WarehouseSerializer,
)


class WarehouseViewSet(viewsets.ModelViewSet):
    serializer_class = WarehouseSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        return Warehouse.objects.all().order_by('name')

    @action(detail=True, methods=['get'])
    def stock(self, request, pk=None):
        warehouse = self.get_object()
        stocks = warehouse.stocks.select_related('item').order_by('item__name')
        return Response(InventorySerializer(stocks, many=True).data)


class ItemViewSet(viewsets.ModelViewSet):
    serializer_class = ItemSerializer
    permission_classes = [IsAuthenticated]
    filter_backends = [SearchFilter]
    search_fields = ['code', 'name']

    def get_queryset(self):
        return Item.objects.select_related('price').order_by('code')

    @action(detail=True, methods=['get'], url_path='price-history')
    def price_history(self, request, pk=None):
        item = self.get_object()
        history = item.price_history.filter(deleted_at__isnull=True)
        return Response(ItemPriceHistorySerializer(history, many=True).data)


class InventoryViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Read-only stock levels; quantities only move through documents."""

    serializer_class = InventorySerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        queryset = Inventory.objects.select_related('item', 'warehouse').order_by('item__code')
        warehouse = self.request.query_params.get('warehouse')
        if warehouse:
            queryset = queryset.filter(warehouse_id=warehouse)
        item = self.request.query_params.get('item')
        if item:
            queryset = queryset.filter(item_id=item)
        return queryset
