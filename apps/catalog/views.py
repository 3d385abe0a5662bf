from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.accounts.permissions import IsAdminOrReadOnlyStaff
from .models import Category, ItemType, WarehouseItem
from .serializers import (
    CategorySerializer,
    ItemTypeSerializer,
    WarehouseItemSerializer,
    ProductAddonSerializer,
    AddAddonSerializer,
    RemoveAddonSerializer,
    ReorderSerializer,
    BulkItemActionSerializer,
    StockAdjustmentSerializer,
    ItemFilterSerializer,
)
from .services import (
    reorder as reorder_rows,
    bulk_update_items,
    adjust_stock,
    low_stock_items,
    filter_items,
    add_addon,
    remove_addon,
    get_item_addons,
    # Exceptions
    ItemNotFoundError,
    UnknownItemsError,
    DuplicateItemsError,
    InvalidBulkActionError,
    InsufficientStockError,
    InvalidAddonError,
)


class CatalogPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class ReorderMixin:
    """Adds POST reorder/ taking the full list of ids in display order."""

    @extend_schema(request=ReorderSerializer, responses={204: None})
    @action(detail=False, methods=['post'])
    def reorder(self, request):
        serializer = ReorderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            reorder_rows(model=self.queryset.model, ordered_ids=serializer.validated_data['ids'])
        except (UnknownItemsError, DuplicateItemsError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(status=status.HTTP_204_NO_CONTENT)


class CategoryViewSet(ReorderMixin, viewsets.ModelViewSet):
    """Warehouse categories. Staff read, admins write."""

    queryset = Category.objects.all()
    serializer_class = CategorySerializer
    permission_classes = [IsAuthenticated, IsAdminOrReadOnlyStaff]


class ItemTypeViewSet(ReorderMixin, viewsets.ModelViewSet):
    """Warehouse item types. Staff read, admins write."""

    queryset = ItemType.objects.all()
    serializer_class = ItemTypeSerializer
    permission_classes = [IsAuthenticated, IsAdminOrReadOnlyStaff]


class WarehouseItemViewSet(viewsets.ModelViewSet):
    """
    Devices and services offered on contracts.

    list: filter by kind, category, item_type, is_active, search
    bulk: POST {ids, action, value}
    adjust_stock: POST {delta}
    low_stock: GET items at or below their minimum stock
    addons: GET list, POST add
    remove_addon: POST {addon_id}
    """

    queryset = WarehouseItem.objects.select_related('category', 'item_type')
    serializer_class = WarehouseItemSerializer
    permission_classes = [IsAuthenticated, IsAdminOrReadOnlyStaff]
    pagination_class = CatalogPagination

    def get_queryset(self):
        queryset = super().get_queryset()
        if self.action != 'list':
            return queryset

        filters = ItemFilterSerializer(data=self.request.query_params.dict())
        filters.is_valid(raise_exception=True)
        return filter_items(queryset, **filters.validated_data)

    def perform_create(self, serializer):
        serializer.save(created_by=self.request.user)

    @extend_schema(request=BulkItemActionSerializer, responses={200: None})
    @action(detail=False, methods=['post'])
    def bulk(self, request):
        serializer = BulkItemActionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            count = bulk_update_items(
                item_ids=serializer.validated_data['ids'],
                action=serializer.validated_data['action'],
                value=serializer.validated_data.get('value'),
            )
        except InvalidBulkActionError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response({'updated': count})

    @extend_schema(request=StockAdjustmentSerializer, responses={200: WarehouseItemSerializer})
    @action(detail=True, methods=['post'])
    def adjust_stock(self, request, pk=None):
        serializer = StockAdjustmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            item = adjust_stock(item_id=pk, delta=serializer.validated_data['delta'])
        except ItemNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except InsufficientStockError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(WarehouseItemSerializer(item).data)

    @action(detail=False, methods=['get'])
    def low_stock(self, request):
        return Response(WarehouseItemSerializer(low_stock_items(), many=True).data)

    @extend_schema(request=AddAddonSerializer, responses={200: ProductAddonSerializer(many=True)})
    @action(detail=True, methods=['get', 'post'])
    def addons(self, request, pk=None):
        if request.method == 'POST':
            serializer = AddAddonSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            try:
                link = add_addon(parent_id=pk, **serializer.validated_data)
            except ItemNotFoundError as e:
                return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
            except InvalidAddonError as e:
                return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
            return Response(ProductAddonSerializer(link).data, status=status.HTTP_201_CREATED)

        try:
            links = get_item_addons(item_id=pk)
        except ItemNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(ProductAddonSerializer(links, many=True).data)

    @extend_schema(request=RemoveAddonSerializer, responses={204: None})
    @action(detail=True, methods=['post'])
    def remove_addon(self, request, pk=None):
        serializer = RemoveAddonSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            remove_addon(parent_id=pk, addon_id=serializer.validated_data['addon_id'])
        except InvalidAddonError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        return Response(status=status.HTTP_204_NO_CONTENT)
