"""
Warehouse item operations: ordering, bulk changes and stock.

Stock adjustments use F() expressions inside a locked transaction so that
concurrent adjustments cannot lose updates.
"""

import logging
from typing import Optional, Sequence, Type
from uuid import UUID

from django.db import models, transaction
from django.db.models import F, QuerySet

from apps.catalog.models import Category, WarehouseItem

from .exceptions import (
    ItemNotFoundError,
    UnknownItemsError,
    DuplicateItemsError,
    InvalidBulkActionError,
    InsufficientStockError,
)

logger = logging.getLogger(__name__)

BULK_ACTIONS = ('activate', 'deactivate', 'delete', 'set_category')


@transaction.atomic
def reorder(*, model: Type[models.Model], ordered_ids: Sequence[UUID]) -> None:
    """
    Set `position` of each row to its index in `ordered_ids`.

    Raises:
        DuplicateItemsError: If an id is listed more than once
        UnknownItemsError: If any id does not exist
    """
    ids = [str(pk) for pk in ordered_ids]
    if len(set(ids)) != len(ids):
        raise DuplicateItemsError("Each id may appear only once")
    existing = {
        str(pk) for pk in
        model.objects.select_for_update().filter(id__in=ids).values_list('id', flat=True)
    }
    missing = [pk for pk in ids if pk not in existing]
    if missing:
        raise UnknownItemsError(f"Unknown ids: {', '.join(missing)}")

    rows = []
    for position, pk in enumerate(ids):
        row = model(id=pk, position=position)
        rows.append(row)
    model.objects.bulk_update(rows, ['position'])


@transaction.atomic
def bulk_update_items(
    *,
    item_ids: Sequence[UUID],
    action: str,
    value: Optional[UUID] = None
) -> int:
    """
    Apply one action to many items.

    Actions: activate, deactivate, delete, set_category (value = category
    id, or None to clear the category).

    Returns:
        Number of affected items

    Raises:
        InvalidBulkActionError: If the action is unknown or the category missing
    """
    if action not in BULK_ACTIONS:
        raise InvalidBulkActionError(f"Unsupported action: {action}")

    queryset = WarehouseItem.objects.filter(id__in=item_ids)

    if action == 'activate':
        count = queryset.update(is_active=True)
    elif action == 'deactivate':
        count = queryset.update(is_active=False)
    elif action == 'delete':
        count = queryset.count()
        queryset.delete()
    else:
        category = None
        if value is not None:
            try:
                category = Category.objects.get(id=value)
            except Category.DoesNotExist:
                raise InvalidBulkActionError(f"Category {value} not found")
        count = queryset.update(category=category)

    logger.info("Bulk %s applied to %d warehouse item(s)", action, count)
    return count


@transaction.atomic
def adjust_stock(*, item_id: UUID, delta: int) -> WarehouseItem:
    """
    Add `delta` (may be negative) to the item's current stock.

    Items without tracked stock start from 0.

    Raises:
        ItemNotFoundError: If item doesn't exist
        InsufficientStockError: If the result would be negative
    """
    try:
        item = WarehouseItem.objects.select_for_update().get(id=item_id)
    except WarehouseItem.DoesNotExist:
        raise ItemNotFoundError(f"Warehouse item {item_id} not found")

    current = item.current_stock or 0
    if current + delta < 0:
        raise InsufficientStockError(
            f"Cannot remove {-delta} unit(s) of {item.name}: only {current} in stock"
        )

    if item.current_stock is None:
        WarehouseItem.objects.filter(id=item.id).update(current_stock=delta)
    else:
        WarehouseItem.objects.filter(id=item.id).update(current_stock=F('current_stock') + delta)

    item.refresh_from_db(fields=['current_stock'])

    if item.is_low_stock:
        logger.warning("Warehouse item %s is low on stock (%s left)", item.id, item.current_stock)
    return item


def low_stock_items() -> QuerySet:
    """Active items whose tracked stock is at or below the minimum."""
    return (
        WarehouseItem.objects
        .filter(
            is_active=True,
            min_stock__isnull=False,
            current_stock__isnull=False,
            current_stock__lte=F('min_stock'),
        )
        .select_related('category', 'item_type')
        .order_by('current_stock', 'name')
    )


def filter_items(
    queryset: QuerySet,
    *,
    kind: Optional[str] = None,
    category: Optional[str] = None,
    item_type: Optional[str] = None,
    is_active: Optional[bool] = None,
    search: Optional[str] = None
) -> QuerySet:
    if kind:
        queryset = queryset.filter(kind=kind)
    if category:
        queryset = queryset.filter(category_id=category)
    if item_type:
        queryset = queryset.filter(item_type_id=item_type)
    if is_active is not None:
        queryset = queryset.filter(is_active=is_active)
    if search:
        queryset = queryset.filter(
            models.Q(name__icontains=search) | models.Q(description__icontains=search)
        )
    return queryset
