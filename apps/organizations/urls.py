from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'organizations'

router = DefaultRouter()
# Teams first so that "teams/" is not captured as an organization id
router.register(r'teams', views.TeamViewSet, basename='team')
router.register(r'', views.OrganizationViewSet, basename='organization')

urlpatterns = [
    # GET    /api/organizations/                       - List organizations
    # POST   /api/organizations/                       - Create (admin)
    # GET    /api/organizations/{id}/teams/            - Teams of organization
    # GET    /api/organizations/teams/                 - List teams
    # POST   /api/organizations/teams/{id}/add_member/     - Add member (admin)
    # POST   /api/organizations/teams/{id}/remove_member/  - Remove member (admin)
    path('', include(router.urls)),
]
