from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'users'

router = DefaultRouter()
router.register(r'team-members', views.TeamMemberViewSet, basename='team-member')

urlpatterns = [
    # Authentication
    path('register/', views.register, name='register'),
    path('login/', views.login, name='login'),
    path('logout/', views.logout, name='logout'),

    # User profile
    path('user/', views.get_current_user, name='current-user'),
    path('user/update/', views.update_profile, name='update-profile'),
    path('user/delete/', views.delete_account, name='delete-account'),

    # Email verification
    path('verify-email/', views.verify_email, name='verify-email'),

    # Password reset
    path('password-reset/', views.request_password_reset, name='password-reset'),
    path('password-reset/confirm/', views.confirm_password_reset, name='password-reset-confirm'),

    # Team-member administration (admin)
    # GET    /api/auth/team-members/        - List users
    # POST   /api/auth/team-members/        - Create staff user
    # PATCH  /api/auth/team-members/{id}/   - Update profile, role, team
    # DELETE /api/auth/team-members/{id}/   - Deactivate
    path('', include(router.urls)),
]
