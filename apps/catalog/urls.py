from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'catalog'

router = DefaultRouter()
router.register(r'categories', views.CategoryViewSet, basename='category')
router.register(r'item-types', views.ItemTypeViewSet, basename='item-type')
router.register(r'items', views.WarehouseItemViewSet, basename='item')

urlpatterns = [
    # GET/POST /api/catalog/categories/             - Categories
    # POST     /api/catalog/categories/reorder/     - Reorder (admin)
    # GET/POST /api/catalog/item-types/             - Item types
    # GET/POST /api/catalog/items/                  - Warehouse items
    # POST     /api/catalog/items/bulk/             - Bulk action (admin)
    # GET      /api/catalog/items/low_stock/        - Low stock report
    # POST     /api/catalog/items/{id}/adjust_stock/
    # GET/POST /api/catalog/items/{id}/addons/
    # POST     /api/catalog/items/{id}/remove_addon/
    path('', include(router.urls)),
]
