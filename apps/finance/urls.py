from django.urls import path
from . import views

app_name = 'finance'

urlpatterns = [
    # GET/POST     /api/finance/{group_id}/payments/                - List / record payments
    # PATCH/DELETE /api/finance/{group_id}/payments/{id}/           - Change status / delete
    # GET/POST     /api/finance/{group_id}/expenses/                - List / add expenses
    # PATCH/DELETE /api/finance/{group_id}/expenses/{id}/           - Update / delete expense
    # GET/POST     /api/finance/{group_id}/transactions/            - Ledger page / new entry
    # PATCH/DELETE /api/finance/{group_id}/transactions/{id}/       - Update / delete entry
    # GET          /api/finance/{group_id}/transactions/{id}/history/ - Audit trail of an entry
    # GET          /api/finance/{group_id}/balance/                 - Balance of a member
    # GET          /api/finance/{group_id}/balance/history/         - Ledger changes of a member
    # GET          /api/finance/{group_id}/balance/summary/         - Balances of all members
    path('<uuid:group_id>/payments/', views.payment_list, name='payment-list'),
    path('<uuid:group_id>/payments/<uuid:payment_id>/', views.payment_detail, name='payment-detail'),
    path('<uuid:group_id>/expenses/', views.expense_list, name='expense-list'),
    path('<uuid:group_id>/expenses/<uuid:expense_id>/', views.expense_detail, name='expense-detail'),
    path('<uuid:group_id>/transactions/', views.transaction_list, name='transaction-list'),
    path(
        '<uuid:group_id>/transactions/<uuid:transaction_id>/',
        views.transaction_detail,
        name='transaction-detail'
    ),
    path(
        '<uuid:group_id>/transactions/<uuid:transaction_id>/history/',
        views.transaction_history,
        name='transaction-history'
    ),
    path('<uuid:group_id>/balance/', views.balance_detail, name='balance'),
    path('<uuid:group_id>/balance/history/', views.balance_history, name='balance-history'),
    path('<uuid:group_id>/balance/summary/', views.balance_summary, name='balance-summary'),
]
