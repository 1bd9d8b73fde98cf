from django.urls import path
from . import views

app_name = 'votes'

urlpatterns = [
    # GET/POST         /api/votes/{group_id}/                   - List / open votes
    # GET/PATCH/DELETE /api/votes/{group_id}/{vote_id}/         - Vote detail / edit / delete
    # POST             /api/votes/{group_id}/{vote_id}/cast/    - Cast a ballot
    # GET              /api/votes/{group_id}/{vote_id}/result/  - Tally and winner
    path('<uuid:group_id>/', views.vote_list, name='list'),
    path('<uuid:group_id>/<uuid:vote_id>/', views.vote_detail, name='detail'),
    path('<uuid:group_id>/<uuid:vote_id>/cast/', views.vote_cast, name='cast'),
    path('<uuid:group_id>/<uuid:vote_id>/result/', views.vote_result, name='result'),
]
