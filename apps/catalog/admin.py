from django.contrib import admin
from django.utils.html import format_html

from .models import Category, ItemType, WarehouseItem, ProductAddon


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'item_type_filter', 'position', 'is_active']
    list_editable = ['position', 'is_active']
    list_filter = ['item_type_filter', 'is_active']
    search_fields = ['name']
    readonly_fields = ['slug']


@admin.register(ItemType)
class ItemTypeAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'position', 'is_active']
    list_editable = ['position', 'is_active']
    search_fields = ['name']
    readonly_fields = ['slug']


class ProductAddonInline(admin.TabularInline):
    model = ProductAddon
    fk_name = 'parent_product'
    extra = 0
    raw_id_fields = ['addon_product']


@admin.register(WarehouseItem)
class WarehouseItemAdmin(admin.ModelAdmin):
    list_display = [
        'name',
        'kind',
        'category',
        'monthly_fee',
        'company_cost',
        'stock_badge',
        'is_active',
    ]
    list_filter = ['kind', 'is_active', 'category', 'item_type']
    search_fields = ['name', 'description']
    list_select_related = ['category']
    readonly_fields = ['created_by', 'created_at', 'updated_at']
    inlines = [ProductAddonInline]

    def stock_badge(self, obj):
        if obj.current_stock is None:
            return '-'
        color = '#B85C5C' if obj.is_low_stock else '#6B8E5E'
        return format_html(
            '<span style="background: {}; color: white; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            color,
            obj.current_stock,
        )
    stock_badge.short_description = 'Stock'
    stock_badge.admin_order_field = 'current_stock'
