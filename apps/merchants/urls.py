from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'merchants'

router = DefaultRouter()
router.register(r'', views.MerchantViewSet, basename='merchant')

urlpatterns = [
    # Merchant portal (must precede the router's detail route)
    path('me/', views.my_merchant, name='me'),
    path('me/contracts/', views.my_contracts, name='my-contracts'),
    path('me/locations/', views.my_locations, name='my-locations'),

    # GET    /api/merchants/                 - List (staff)
    # GET    /api/merchants/similar/         - Possible duplicates
    # GET    /api/merchants/{id}/overview/   - Summary numbers
    # GET    /api/merchants/{id}/contracts/  - Contracts of merchant
    path('', include(router.urls)),
]
