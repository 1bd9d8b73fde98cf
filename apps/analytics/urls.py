from django.urls import path
from . import views

app_name = 'analytics'

urlpatterns = [
    # GET /api/analytics/{group_id}/dashboard/  - Home screen figures (cached)
    # GET /api/analytics/{group_id}/meal-rate/  - Meal rate of a period
    # GET /api/analytics/{group_id}/summaries/  - Per-member meals, cost, paid, balance
    # GET /api/analytics/{group_id}/expenses/   - Expense breakdowns
    # GET /api/analytics/{group_id}/trends/     - Meal rate per period, expenses per month
    # GET /api/analytics/groups/                - Own figures across all groups
    path('groups/', views.groups_overview, name='groups-overview'),
    path('<uuid:group_id>/dashboard/', views.dashboard, name='dashboard'),
    path('<uuid:group_id>/meal-rate/', views.meal_rate, name='meal-rate'),
    path('<uuid:group_id>/summaries/', views.user_summaries, name='summaries'),
    path('<uuid:group_id>/expenses/', views.expense_analytics, name='expenses'),
    path('<uuid:group_id>/trends/', views.trends, name='trends'),
]
