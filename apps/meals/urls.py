from django.urls import path
from . import views

app_name = 'meals'

urlpatterns = [
    # GET/POST  /api/meals/{group_id}/                      - List / add-remove meals
    # GET       /api/meals/{group_id}/stats/                - Meal counts of a period
    # GET/PUT   /api/meals/{group_id}/guests/               - List / set guest meals
    # DELETE    /api/meals/{group_id}/guests/{id}/          - Remove a guest meal
    # GET/PATCH /api/meals/{group_id}/settings/             - Group meal rules
    # GET/PATCH /api/meals/{group_id}/auto-settings/        - Own auto meal subscription
    # POST      /api/meals/{group_id}/auto-process/         - Add auto meals now
    path('<uuid:group_id>/', views.meal_list, name='list'),
    path('<uuid:group_id>/stats/', views.meal_stats, name='stats'),
    path('<uuid:group_id>/guests/', views.guest_meal_list, name='guest-list'),
    path('<uuid:group_id>/guests/<uuid:guest_meal_id>/', views.guest_meal_delete, name='guest-delete'),
    path('<uuid:group_id>/settings/', views.meal_settings, name='settings'),
    path('<uuid:group_id>/auto-settings/', views.auto_meal_settings, name='auto-settings'),
    path('<uuid:group_id>/auto-process/', views.auto_meal_process, name='auto-process'),
]
