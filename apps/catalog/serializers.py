from rest_framework import serializers

from .models import Category, ItemType, WarehouseItem, ProductAddon, ItemKind
from .services import BULK_ACTIONS


class CategorySerializer(serializers.ModelSerializer):
    item_count = serializers.SerializerMethodField()

    class Meta:
        model = Category
        fields = [
            'id',
            'name',
            'slug',
            'description',
            'color',
            'icon_name',
            'item_type_filter',
            'is_active',
            'position',
            'item_count',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'slug', 'created_at', 'updated_at']

    def get_item_count(self, obj):
        return obj.items.count()


class ItemTypeSerializer(serializers.ModelSerializer):

    class Meta:
        model = ItemType
        fields = [
            'id',
            'name',
            'slug',
            'description',
            'color',
            'icon_name',
            'is_active',
            'position',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'slug', 'created_at', 'updated_at']


class WarehouseItemSerializer(serializers.ModelSerializer):
    category_name = serializers.CharField(source='category.name', read_only=True, default=None)
    item_type_name = serializers.CharField(source='item_type.name', read_only=True, default=None)
    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = WarehouseItem
        fields = [
            'id',
            'name',
            'description',
            'kind',
            'category',
            'category_name',
            'item_type',
            'item_type_name',
            'monthly_fee',
            'setup_fee',
            'company_cost',
            'specifications',
            'custom_fields',
            'image_url',
            'is_active',
            'min_stock',
            'current_stock',
            'is_low_stock',
            'created_by',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'created_by', 'created_at', 'updated_at']


class ProductAddonSerializer(serializers.ModelSerializer):
    addon_product = WarehouseItemSerializer(read_only=True)

    class Meta:
        model = ProductAddon
        fields = ['id', 'addon_product', 'is_required', 'is_default_selected', 'display_order']
        read_only_fields = fields


class AddAddonSerializer(serializers.Serializer):
    addon_id = serializers.UUIDField()
    is_required = serializers.BooleanField(default=False)
    is_default_selected = serializers.BooleanField(default=False)
    display_order = serializers.IntegerField(min_value=0, default=0)


class RemoveAddonSerializer(serializers.Serializer):
    addon_id = serializers.UUIDField()


class ReorderSerializer(serializers.Serializer):
    ids = serializers.ListField(child=serializers.UUIDField(), allow_empty=False)


class BulkItemActionSerializer(serializers.Serializer):
    ids = serializers.ListField(child=serializers.UUIDField(), allow_empty=False)
    action = serializers.ChoiceField(choices=[(a, a) for a in BULK_ACTIONS])
    value = serializers.UUIDField(required=False, allow_null=True)


class StockAdjustmentSerializer(serializers.Serializer):
    delta = serializers.IntegerField()

    def validate_delta(self, value):
        if value == 0:
            raise serializers.ValidationError('Delta must not be zero')
        return value


class ItemFilterSerializer(serializers.Serializer):
    kind = serializers.ChoiceField(choices=ItemKind.choices, required=False)
    category = serializers.UUIDField(required=False)
    item_type = serializers.UUIDField(required=False)
    is_active = serializers.BooleanField(required=False, allow_null=True, default=None)
    search = serializers.CharField(required=False, allow_blank=True)
