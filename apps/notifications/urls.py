from django.urls import path
from . import views

app_name = 'notifications'

urlpatterns = [
    # GET    /api/notifications/                   - Latest notifications
    # POST   /api/notifications/read-all/          - Mark all as read
    # POST   /api/notifications/{id}/read/         - Mark one as read
    # DELETE /api/notifications/{id}/              - Delete one
    path('', views.notification_list, name='list'),
    path('read-all/', views.notification_read_all, name='read-all'),
    path('<uuid:notification_id>/read/', views.notification_read, name='read'),
    path('<uuid:notification_id>/', views.notification_delete, name='delete'),
]
