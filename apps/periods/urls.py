from django.urls import path
from . import views

app_name = 'periods'

urlpatterns = [
    # GET/POST /api/periods/{group_id}/                          - List / start periods
    # GET      /api/periods/{group_id}/current/                  - Current period
    # GET      /api/periods/{group_id}/by-month/?year=&month=    - Periods of a month
    # POST     /api/periods/{group_id}/end/                      - End the current period
    # GET      /api/periods/{group_id}/{period_id}/              - Period details
    # GET      /api/periods/{group_id}/{period_id}/summary/      - Period totals
    # POST     /api/periods/{group_id}/{period_id}/end/          - End a period
    # POST     /api/periods/{group_id}/{period_id}/lock/         - Lock
    # POST     /api/periods/{group_id}/{period_id}/unlock/       - Unlock
    # POST     /api/periods/{group_id}/{period_id}/archive/      - Archive
    # POST     /api/periods/{group_id}/{period_id}/restart/      - Restart
    path('<uuid:group_id>/', views.period_list, name='list'),
    path('<uuid:group_id>/current/', views.period_current, name='current'),
    path('<uuid:group_id>/by-month/', views.period_by_month, name='by-month'),
    path('<uuid:group_id>/end/', views.period_end, name='end-current'),
    path('<uuid:group_id>/<uuid:period_id>/', views.period_detail, name='detail'),
    path('<uuid:group_id>/<uuid:period_id>/summary/', views.period_summary, name='summary'),
    path('<uuid:group_id>/<uuid:period_id>/end/', views.period_end, name='end'),
    path('<uuid:group_id>/<uuid:period_id>/lock/', views.period_lock, name='lock'),
    path('<uuid:group_id>/<uuid:period_id>/unlock/', views.period_unlock, name='unlock'),
    path('<uuid:group_id>/<uuid:period_id>/archive/', views.period_archive, name='archive'),
    path('<uuid:group_id>/<uuid:period_id>/restart/', views.period_restart, name='restart'),
]
