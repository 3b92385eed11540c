# apps/detention/views.py

import uuid
from datetime import date

from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.api import IsAdminOrReadOnly, IsApprovedStaff, results_response
from apps.core.exceptions import NotFound, ValidationError
from apps.students.services import get_student
from apps.users.serializers import UserSerializer
from . import allocator, attendance, ledger, slots, violations
from .models import COMMON_VIOLATION_TYPES, DetentionSlot, ViolationRecord
from .serializers import (
    AttendanceMarkSerializer, BulkAttendanceSerializer, CheckInSerializer,
    DetentionSlotSerializer, InfractionSerializer, MonitorSignupSerializer,
    MoveViolationSerializer, SlotCreateSerializer, SlotUpdateSerializer,
    StudentWarningSerializer, ViolationImportRowSerializer, ViolationRecordSerializer,
)

User = get_user_model()


def parse_query_date(value, field='date'):
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"Invalid date '{value}', expected YYYY-MM-DD.", field=field)


def parse_query_id(value, field):
    if not value:
        return None
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise ValidationError(f"Invalid id '{value}'.", field=field)


class DetentionSlotViewSet(viewsets.ModelViewSet):
    """
    Detention sessions. Staff can read; administrators schedule, edit and
    delete. Teachers volunteer through ``signup``.
    """
    queryset = DetentionSlot.objects.select_related('teacher')
    serializer_class = DetentionSlotSerializer
    permission_classes = [IsAdminOrReadOnly]

    def get_queryset(self):
        queryset = super().get_queryset()
        start = parse_query_date(self.request.query_params.get('from'), 'from')
        end = parse_query_date(self.request.query_params.get('to'), 'to')
        if start:
            queryset = queryset.filter(date__gte=start)
        if end:
            queryset = queryset.filter(date__lte=end)
        return queryset

    def create(self, request, *args, **kwargs):
        serializer = SlotCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        teacher = request.user
        if data.get('teacher'):
            try:
                teacher = User.objects.get(pk=data['teacher'])
            except User.DoesNotExist:
                raise NotFound('Teacher not found.')

        slot = slots.create_slot(
            teacher,
            data['date'],
            capacity=data.get('capacity'),
            location=data.get('location'),
            performed_by=request.user,
        )
        return Response(DetentionSlotSerializer(slot).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        serializer = SlotUpdateSerializer(data=request.data, partial=kwargs.get('partial', False))
        serializer.is_valid(raise_exception=True)
        slot = slots.update_slot(
            kwargs['pk'],
            capacity=serializer.validated_data.get('capacity'),
            location=serializer.validated_data.get('location'),
            performed_by=request.user,
        )
        return Response(DetentionSlotSerializer(slot).data)

    def destroy(self, request, *args, **kwargs):
        slots.delete_slot(kwargs['pk'], performed_by=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=['get'])
    def available(self, request):
        days = request.query_params.get('days')
        try:
            days = int(days) if days else None
        except ValueError:
            raise ValidationError('days must be a whole number.', field='days')
        queryset = slots.available_slots(days=days)
        return Response(DetentionSlotSerializer(queryset, many=True).data)

    @action(detail=False, methods=['get'])
    def week(self, request):
        week_of = parse_query_date(request.query_params.get('of'), 'of')
        monday, groups = slots.weekly_schedule(week_of)
        return Response({
            'week_of': monday.isoformat(),
            'teachers': [
                {
                    'teacher': UserSerializer(group['teacher']).data,
                    'slots': DetentionSlotSerializer(group['slots'], many=True).data,
                }
                for group in groups
            ],
        })

    @action(detail=False, methods=['post'], permission_classes=[IsApprovedStaff])
    def signup(self, request):
        serializer = MonitorSignupSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        created = slots.monitor_signup(
            request.user,
            serializer.validated_data['dates'],
            capacity=serializer.validated_data.get('capacity'),
            location=serializer.validated_data.get('location'),
        )
        return Response(DetentionSlotSerializer(created, many=True).data, status=status.HTTP_201_CREATED)


class InfractionView(APIView):
    """
    File an infraction. Below the warning threshold a warning is recorded;
    at the threshold a violation is created on the chosen slot.
    """
    permission_classes = [IsApprovedStaff]

    def get(self, request):
        return Response({
            'violation_types': COMMON_VIOLATION_TYPES,
            'warning_threshold': ledger.warning_threshold(),
        })

    def post(self, request):
        serializer = InfractionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        outcome = violations.file_infraction(
            data['student'],
            request.user,
            data['violation_type'],
            slot_id=data.get('slot'),
            force_warning=data['force_warning'],
        )
        payload = {'kind': outcome.kind, 'warning_count': outcome.warning_count}
        if outcome.warning is not None:
            payload['warning'] = StudentWarningSerializer(outcome.warning).data
        if outcome.violation is not None:
            payload['violation'] = ViolationRecordSerializer(outcome.violation).data
        return Response(payload, status=status.HTTP_201_CREATED)


class ViolationViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    queryset = ViolationRecord.objects.select_related('student', 'slot', 'teacher')
    serializer_class = ViolationRecordSerializer
    permission_classes = [IsApprovedStaff]
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    def get_queryset(self):
        queryset = super().get_queryset()
        params = self.request.query_params
        if params.get('status'):
            queryset = queryset.filter(status=params['status'])
        student_id = parse_query_id(params.get('student'), 'student')
        if student_id:
            queryset = queryset.filter(student_id=student_id)
        detention_date = parse_query_date(params.get('date'))
        if detention_date:
            queryset = queryset.filter(detention_date=detention_date)
        return queryset

    @action(detail=True, methods=['post'])
    def move(self, request, pk=None):
        serializer = MoveViolationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        violation = violations.move_violation(pk, serializer.validated_data['slot'], performed_by=request.user)
        return Response(ViolationRecordSerializer(violation).data)

    @action(detail=True, methods=['post'])
    def reassign(self, request, pk=None):
        result = allocator.reassign(pk, performed_by=request.user)
        return Response(ViolationRecordSerializer(result.violation).data)

    @action(detail=False, methods=['post'], url_path='import')
    def import_rows(self, request):
        """Bulk entry from an uploaded CSV/Excel file or a JSON list of rows."""
        uploaded_file = request.FILES.get('file')
        if uploaded_file is not None:
            results = violations.import_violations_file(uploaded_file, request.user)
        else:
            serializer = ViolationImportRowSerializer(data=request.data.get('rows', []), many=True)
            serializer.is_valid(raise_exception=True)
            results = violations.import_violations(serializer.validated_data, request.user)
        return results_response(results)


class RosterView(APIView):
    permission_classes = [IsApprovedStaff]

    def get(self, request):
        session_date = parse_query_date(request.query_params.get('date')) or timezone.localdate()
        roster = attendance.session_roster(session_date)
        return Response({
            'date': session_date.isoformat(),
            'violations': ViolationRecordSerializer(roster, many=True).data,
        })


class MarkAttendanceView(APIView):
    permission_classes = [IsApprovedStaff]

    def post(self, request):
        serializer = AttendanceMarkSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        outcome = attendance.mark_attendance(
            serializer.validated_data['violation'],
            serializer.validated_data['status'],
            performed_by=request.user,
        )
        data = outcome.as_dict()
        data['violation'] = ViolationRecordSerializer(outcome.violation).data
        return Response(data)


class BulkAttendanceView(APIView):
    permission_classes = [IsApprovedStaff]

    def post(self, request):
        serializer = BulkAttendanceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        results = attendance.mark_bulk(
            serializer.validated_data['violations'],
            serializer.validated_data['status'],
            performed_by=request.user,
        )
        return results_response(results)


class CheckInView(APIView):
    permission_classes = [IsApprovedStaff]

    def post(self, request):
        serializer = CheckInSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        outcome = attendance.check_in_by_barcode(
            serializer.validated_data.get('date') or timezone.localdate(),
            serializer.validated_data['barcode'],
            performed_by=request.user,
        )
        return Response(ViolationRecordSerializer(outcome.violation).data)


class WarningCountsView(APIView):
    permission_classes = [IsApprovedStaff]

    def get(self, request, student_id):
        student = get_student(student_id)
        return Response({
            'student': str(student.pk),
            'threshold': ledger.warning_threshold(),
            'counts': ledger.warning_counts(student),
        })
