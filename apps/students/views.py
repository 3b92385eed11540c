# apps/students/views.py

from django.http import HttpResponse
from django.utils import timezone
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.api import IsAdminRole, IsApprovedStaff, results_response
from apps.core.exceptions import ValidationError
from apps.detention.serializers import StudentWarningSerializer, ViolationRecordSerializer
from . import services
from .models import Student
from .serializers import AccessCodeSerializer, PortalStudentSerializer, StudentSerializer


def history_payload(history):
    return {
        'violations': ViolationRecordSerializer(history['violations'], many=True).data,
        'warnings': StudentWarningSerializer(history['warnings'], many=True).data,
        'warning_counts': history['warning_counts'],
    }


class StudentViewSet(viewsets.ModelViewSet):
    """
    Student records. Approved staff can create and edit; deleting a student
    (and with it their history) is for administrators only.
    """
    queryset = Student.objects.all()
    serializer_class = StudentSerializer
    permission_classes = [IsApprovedStaff]

    def get_permissions(self):
        if self.action == 'destroy':
            return [IsAdminRole()]
        return super().get_permissions()

    def get_queryset(self):
        queryset = super().get_queryset()
        grade = self.request.query_params.get('grade')
        if grade:
            queryset = queryset.filter(grade=grade)
        return queryset

    @action(detail=False, methods=['get'])
    def search(self, request):
        results = services.search_students(request.query_params.get('q', ''))
        return Response(StudentSerializer(results, many=True).data)

    @action(detail=False, methods=['get'], url_path=r'by-barcode/(?P<barcode>\d{6})')
    def by_barcode(self, request, barcode=None):
        return Response(StudentSerializer(services.get_by_barcode(barcode)).data)

    @action(detail=True, methods=['get'])
    def history(self, request, pk=None):
        student = self.get_object()
        data = history_payload(services.student_history(student))
        data['student'] = StudentSerializer(student).data
        return Response(data)

    @action(detail=True, methods=['post'], url_path='regenerate-code')
    def regenerate_code(self, request, pk=None):
        student = services.regenerate_access_code(self.get_object())
        return Response(StudentSerializer(student).data)

    @action(detail=False, methods=['post'], url_path='import', parser_classes=[MultiPartParser, FormParser])
    def import_file(self, request):
        uploaded_file = request.FILES.get('file')
        if uploaded_file is None:
            raise ValidationError('Please upload a CSV or Excel file.', field='file')
        return results_response(services.import_students(uploaded_file))

    @action(detail=False, methods=['get'])
    def export(self, request):
        response = HttpResponse(services.export_students(self.get_queryset()), content_type='text/csv')
        response['Content-Disposition'] = f'attachment; filename="students_{timezone.now().strftime("%Y%m%d")}.csv"'
        return response


class ParentPortalVerifyView(APIView):
    """
    Anonymous parent access: exchange an access code for the student's record.
    """
    authentication_classes = []
    permission_classes = [permissions.AllowAny]
    throttle_scope = 'parent_portal'

    def post(self, request):
        serializer = AccessCodeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        student, history = services.verify_access_code(serializer.validated_data['code'])
        data = history_payload(history)
        data['student'] = PortalStudentSerializer(student).data
        return Response(data, status=status.HTTP_200_OK)
