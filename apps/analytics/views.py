# apps/analytics/views.py

from django.http import HttpResponse
from django.utils import timezone
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.api import IsApprovedStaff
from . import services


class SummaryView(APIView):
    """Violation analytics for the last week, this month or the last year."""
    permission_classes = [IsApprovedStaff]

    def get(self, request):
        return Response(services.violation_summary(request.query_params.get('period', 'month')))


class ExportView(APIView):
    permission_classes = [IsApprovedStaff]

    def get(self, request):
        summary = services.violation_summary(request.query_params.get('period', 'month'))
        response = HttpResponse(services.export_summary_csv(summary), content_type='text/csv')
        response['Content-Disposition'] = (
            f'attachment; filename="behavior-analytics-{timezone.localdate().isoformat()}.csv"'
        )
        return response
