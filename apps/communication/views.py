# apps/communication/views.py

from rest_framework import mixins, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.core.api import IsAdminRole
from .models import EmailTemplate, SentEmail
from .serializers import EmailTemplateSerializer, SentEmailSerializer
from .services import EmailTemplateService


class EmailTemplateViewSet(viewsets.ModelViewSet):
    """Administrators edit the notification templates."""
    queryset = EmailTemplate.objects.all()
    serializer_class = EmailTemplateSerializer
    permission_classes = [IsAdminRole]

    @action(detail=True, methods=['get'])
    def preview(self, request, pk=None):
        subject, body_html = EmailTemplateService.preview(self.get_object())
        return Response({'subject': subject, 'body_html': body_html})


class SentEmailViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    queryset = SentEmail.objects.select_related('template')
    serializer_class = SentEmailSerializer
    permission_classes = [IsAdminRole]

    def get_queryset(self):
        queryset = super().get_queryset()
        event_kind = self.request.query_params.get('event_kind')
        if event_kind:
            queryset = queryset.filter(event_kind=event_kind)
        failed = self.request.query_params.get('failed')
        if failed in ('1', 'true'):
            queryset = queryset.filter(success=False)
        return queryset
