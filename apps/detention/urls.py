# apps/detention/urls.py

from django.urls import include, path
from rest_framework import routers

from . import views

app_name = 'detention'

router = routers.SimpleRouter()
router.register(r'slots', views.DetentionSlotViewSet, basename='slot')
router.register(r'violations', views.ViolationViewSet, basename='violation')

urlpatterns = [
    path('infractions/', views.InfractionView.as_view(), name='infractions'),
    path('attendance/roster/', views.RosterView.as_view(), name='attendance_roster'),
    path('attendance/mark/', views.MarkAttendanceView.as_view(), name='attendance_mark'),
    path('attendance/bulk/', views.BulkAttendanceView.as_view(), name='attendance_bulk'),
    path('attendance/check-in/', views.CheckInView.as_view(), name='attendance_check_in'),
    path('warnings/counts/<uuid:student_id>/', views.WarningCountsView.as_view(), name='warning_counts'),
    path('', include(router.urls)),
]
