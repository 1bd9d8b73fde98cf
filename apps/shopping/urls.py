from django.urls import path
from . import views

app_name = 'shopping'

urlpatterns = [
    # GET/POST     /api/shopping/{group_id}/                        - List / add items
    # GET          /api/shopping/{group_id}/summary/                - Counts and totals
    # POST         /api/shopping/{group_id}/clear-purchased/        - Remove purchased items
    # PATCH/DELETE /api/shopping/{group_id}/items/{id}/             - Update / delete item
    # POST         /api/shopping/{group_id}/items/{id}/toggle/      - Flip purchased flag
    # GET/POST     /api/shopping/{group_id}/market-dates/           - List / assign duties
    # PATCH/DELETE /api/shopping/{group_id}/market-dates/{id}/      - Change status / delete
    # POST         /api/shopping/{group_id}/market-dates/{id}/fine/ - Fine a missed duty
    path('<uuid:group_id>/', views.item_list, name='list'),
    path('<uuid:group_id>/summary/', views.item_summary, name='summary'),
    path('<uuid:group_id>/clear-purchased/', views.item_clear_purchased, name='clear-purchased'),
    path('<uuid:group_id>/items/<uuid:item_id>/', views.item_detail, name='detail'),
    path('<uuid:group_id>/items/<uuid:item_id>/toggle/', views.item_toggle, name='toggle'),
    path('<uuid:group_id>/market-dates/', views.market_date_list, name='market-date-list'),
    path(
        '<uuid:group_id>/market-dates/<uuid:market_date_id>/',
        views.market_date_detail,
        name='market-date-detail'
    ),
    path(
        '<uuid:group_id>/market-dates/<uuid:market_date_id>/fine/',
        views.market_date_fine,
        name='market-date-fine'
    ),
]
