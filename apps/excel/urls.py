from django.urls import path
from . import views

app_name = 'excel'

urlpatterns = [
    # GET  /api/excel/{group_id}/permissions/  - What the member may export/import
    # GET  /api/excel/{group_id}/export/       - Download an xlsx export
    # GET  /api/excel/{group_id}/preview/      - Export rows as JSON
    # POST /api/excel/{group_id}/import/       - Upload an xlsx file
    # GET  /api/excel/template/                - Empty import workbook
    path('template/', views.excel_template, name='template'),
    path('<uuid:group_id>/permissions/', views.excel_permissions, name='permissions'),
    path('<uuid:group_id>/export/', views.excel_export, name='export'),
    path('<uuid:group_id>/preview/', views.excel_preview, name='preview'),
    path('<uuid:group_id>/import/', views.excel_import, name='import'),
]
