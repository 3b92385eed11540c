# apps/students/urls.py

from django.urls import include, path
from rest_framework import routers

from . import views

app_name = 'students'

router = routers.SimpleRouter()
router.register(r'students', views.StudentViewSet, basename='student')

urlpatterns = [
    path('parent-portal/verify/', views.ParentPortalVerifyView.as_view(), name='parent_portal_verify'),
    path('', include(router.urls)),
]
