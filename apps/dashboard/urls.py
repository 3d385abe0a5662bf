from django.urls import path
from . import views

app_name = 'dashboard'

urlpatterns = [
    path('stats/', views.admin_stats, name='admin-stats'),
    path('contracts/', views.contracts_stats, name='contracts-stats'),
    path('teams/', views.team_performance, name='team-performance'),
]
