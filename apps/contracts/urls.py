from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'contracts'

router = DefaultRouter()
router.register(r'kanban-columns', views.KanbanColumnViewSet, basename='kanban-column')
router.register(r'', views.ContractViewSet, basename='contract')

urlpatterns = [
    # POST /api/contracts/calculator/preview/ - Fee calculation for unsaved data
    path('calculator/preview/', views.calculator_preview, name='calculator-preview'),

    # /api/contracts/                        - List, create
    # /api/contracts/{id}/                   - Detail, update, delete
    # PUT  /api/contracts/{id}/draft/        - Autosave wizard sections
    # POST /api/contracts/{id}/submit/       - Submit for approval
    # POST /api/contracts/{id}/status/       - Kanban status change
    # POST /api/contracts/{id}/sign/         - Record signature
    # POST /api/contracts/{id}/copy/         - Copy segments into a new draft
    # POST /api/contracts/{id}/calculate/    - Recalculate and store fees
    # GET  /api/contracts/kanban/            - Board grouped by columns
    # GET  /api/contracts/export/            - CSV export
    path('', include(router.urls)),
]
