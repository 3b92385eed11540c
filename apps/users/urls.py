# apps/users/urls.py

from django.urls import include, path
from rest_framework import routers

from . import views

app_name = 'users'

router = routers.SimpleRouter()
router.register(r'teachers', views.TeacherViewSet, basename='teacher')

urlpatterns = [
    path('auth/login/', views.LoginView.as_view(), name='login'),
    path('auth/logout/', views.LogoutView.as_view(), name='logout'),
    path('auth/me/', views.MeView.as_view(), name='me'),
    path('auth/register/', views.RegisterView.as_view(), name='register'),
    path('', include(router.urls)),
]
