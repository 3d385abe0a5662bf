from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils.text import slugify
import uuid


class ItemKind(models.TextChoices):
    DEVICE = 'device', 'Device'
    SERVICE = 'service', 'Service'


class CategoryItemFilter(models.TextChoices):
    DEVICE = 'device', 'Devices'
    SERVICE = 'service', 'Services'
    ALL = 'all', 'All'


def unique_slug(model, name, instance_id=None):
    """Slugify `name`, appending -2, -3... until it is unique for `model`."""
    base = slugify(name)[:90] or 'item'
    slug = base
    suffix = 2
    queryset = model.objects.all()
    if instance_id is not None:
        queryset = queryset.exclude(id=instance_id)
    while queryset.filter(slug=slug).exists():
        slug = f"{base}-{suffix}"
        suffix += 1
    return slug


class Category(models.Model):
    """Warehouse category (e.g. POS terminals, software)."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100)
    slug = models.SlugField(max_length=100, unique=True, blank=True)
    description = models.TextField(blank=True)
    color = models.CharField(max_length=7, default='#6B7280')
    icon_name = models.CharField(max_length=50, blank=True)
    item_type_filter = models.CharField(
        max_length=10,
        choices=CategoryItemFilter.choices,
        default=CategoryItemFilter.ALL
    )
    is_active = models.BooleanField(default=True)
    position = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'warehouse_categories'
        verbose_name_plural = 'categories'
        ordering = ['position', 'name']

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_slug(Category, self.name, self.pk)
        super().save(*args, **kwargs)


class ItemType(models.Model):
    """Free-form item classification shown as a badge."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100)
    slug = models.SlugField(max_length=100, unique=True, blank=True)
    description = models.TextField(blank=True)
    color = models.CharField(max_length=7, default='#6B7280')
    icon_name = models.CharField(max_length=50, blank=True)
    is_active = models.BooleanField(default=True)
    position = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'warehouse_item_types'
        ordering = ['position', 'name']

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_slug(ItemType, self.name, self.pk)
        super().save(*args, **kwargs)


class WarehouseItem(models.Model):
    """Device or service that can be put on a contract."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200, db_index=True)
    description = models.TextField(blank=True)
    kind = models.CharField(max_length=10, choices=ItemKind.choices, default=ItemKind.DEVICE)
    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='items'
    )
    item_type = models.ForeignKey(
        ItemType,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='items'
    )

    # Pricing
    monthly_fee = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0'))]
    )
    setup_fee = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0'))]
    )
    company_cost = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0'))]
    )

    specifications = models.JSONField(default=dict, blank=True)
    custom_fields = models.JSONField(default=dict, blank=True)
    image_url = models.URLField(blank=True)
    is_active = models.BooleanField(default=True, db_index=True)

    # Stock tracking is optional: both null means untracked
    min_stock = models.PositiveIntegerField(null=True, blank=True)
    current_stock = models.PositiveIntegerField(null=True, blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='created_warehouse_items'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'warehouse_items'
        indexes = [
            models.Index(fields=['kind', 'is_active']),
            models.Index(fields=['category', 'is_active']),
        ]
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.get_kind_display()})"

    @property
    def is_low_stock(self):
        if self.min_stock is None or self.current_stock is None:
            return False
        return self.current_stock <= self.min_stock


class ProductAddon(models.Model):
    """Item offered as an add-on to another item (e.g. a stand for a terminal)."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    parent_product = models.ForeignKey(WarehouseItem, on_delete=models.CASCADE, related_name='addon_links')
    addon_product = models.ForeignKey(WarehouseItem, on_delete=models.CASCADE, related_name='parent_links')
    is_required = models.BooleanField(default=False)
    is_default_selected = models.BooleanField(default=False)
    display_order = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'product_addons'
        constraints = [
            models.UniqueConstraint(
                fields=['parent_product', 'addon_product'],
                name='unique_product_addon'
            ),
        ]
        ordering = ['display_order']

    def __str__(self):
        return f"{self.parent_product.name} + {self.addon_product.name}"
