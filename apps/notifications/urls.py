from django.urls import path
from . import views

app_name = 'notifications'

urlpatterns = [
    path('', views.notification_list, name='list'),
    path('unread-count/', views.notification_unread_count, name='unread-count'),
    path('read-all/', views.notification_mark_all_read, name='read-all'),
    path('<uuid:notification_id>/read/', views.notification_mark_read, name='read'),
]
