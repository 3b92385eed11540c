# apps/analytics/urls.py

from django.urls import path
from . import views

app_name = 'analytics'

urlpatterns = [
    path('analytics/summary/', views.SummaryView.as_view(), name='summary'),
    path('analytics/export/', views.ExportView.as_view(), name='export'),
]
