# apps/detention/serializers.py

from rest_framework import serializers

from .models import DetentionSlot, StudentWarning, ViolationRecord


class DetentionSlotSerializer(serializers.ModelSerializer):
    """
    Serializer for DetentionSlot model. Seats are read-only; they change
    through violation entry and rescheduling only.
    """
    teacher_name = serializers.CharField(source='teacher.display_name', read_only=True)
    seats_left = serializers.IntegerField(read_only=True)
    start_time = serializers.CharField(read_only=True)

    class Meta:
        model = DetentionSlot
        fields = [
            'id', 'date', 'teacher', 'teacher_name', 'location', 'capacity',
            'current_count', 'seats_left', 'start_time', 'created_at'
        ]
        read_only_fields = ['id', 'teacher', 'current_count', 'created_at']


class SlotCreateSerializer(serializers.Serializer):
    date = serializers.DateField()
    capacity = serializers.IntegerField(min_value=1, required=False)
    location = serializers.CharField(max_length=100, required=False, allow_blank=True)
    teacher = serializers.UUIDField(required=False, help_text='Supervising teacher; defaults to the current user')


class SlotUpdateSerializer(serializers.Serializer):
    capacity = serializers.IntegerField(min_value=1, required=False)
    location = serializers.CharField(max_length=100, required=False, allow_blank=True)


class MonitorSignupSerializer(serializers.Serializer):
    dates = serializers.ListField(child=serializers.DateField(), allow_empty=False)
    capacity = serializers.IntegerField(min_value=1, required=False)
    location = serializers.CharField(max_length=100, required=False, allow_blank=True)


class ViolationRecordSerializer(serializers.ModelSerializer):
    student_name = serializers.CharField(source='student.name', read_only=True)
    student_barcode = serializers.CharField(source='student.barcode', read_only=True)
    student_grade = serializers.IntegerField(source='student.grade', read_only=True)
    teacher_name = serializers.SerializerMethodField()
    location = serializers.CharField(source='slot.location', read_only=True)

    class Meta:
        model = ViolationRecord
        fields = [
            'id', 'student', 'student_name', 'student_barcode', 'student_grade',
            'violation_type', 'assigned_date', 'detention_date', 'slot', 'location',
            'teacher', 'teacher_name', 'status', 'reschedule_count', 'created_at'
        ]
        read_only_fields = fields

    def get_teacher_name(self, obj):
        return obj.teacher.display_name if obj.teacher else None


class StudentWarningSerializer(serializers.ModelSerializer):
    teacher_name = serializers.SerializerMethodField()

    class Meta:
        model = StudentWarning
        fields = ['id', 'student', 'violation_type', 'teacher', 'teacher_name', 'issued_at']
        read_only_fields = fields

    def get_teacher_name(self, obj):
        return obj.teacher.display_name if obj.teacher else None


class InfractionSerializer(serializers.Serializer):
    student = serializers.UUIDField()
    violation_type = serializers.CharField(max_length=100)
    slot = serializers.UUIDField(required=False, allow_null=True)
    force_warning = serializers.BooleanField(required=False, default=False)


class MoveViolationSerializer(serializers.Serializer):
    slot = serializers.UUIDField()


class ViolationImportRowSerializer(serializers.Serializer):
    barcode = serializers.CharField()
    violation_type = serializers.CharField(allow_blank=True)
    detention_date = serializers.CharField()


class AttendanceMarkSerializer(serializers.Serializer):
    violation = serializers.UUIDField()
    status = serializers.ChoiceField(choices=[ViolationRecord.Status.ATTENDED, ViolationRecord.Status.ABSENT])


class BulkAttendanceSerializer(serializers.Serializer):
    violations = serializers.ListField(child=serializers.UUIDField(), allow_empty=False)
    status = serializers.ChoiceField(choices=[ViolationRecord.Status.ATTENDED, ViolationRecord.Status.ABSENT])


class CheckInSerializer(serializers.Serializer):
    barcode = serializers.CharField(max_length=20)
    date = serializers.DateField(required=False)
