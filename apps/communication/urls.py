# apps/communication/urls.py

from django.urls import include, path
from rest_framework import routers

from . import views

app_name = 'communication'

router = routers.SimpleRouter()
router.register(r'email-templates', views.EmailTemplateViewSet, basename='email-template')
router.register(r'sent-emails', views.SentEmailViewSet, basename='sent-email')

urlpatterns = [
    path('', include(router.urls)),
]
