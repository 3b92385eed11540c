# apps/students/serializers.py

from rest_framework import serializers

from .models import Student


class StudentSerializer(serializers.ModelSerializer):
    """
    Serializer for Student model. The parent access code is issued by the
    system and can only be regenerated.
    """
    grade_display = serializers.CharField(source='get_grade_display', read_only=True)

    class Meta:
        model = Student
        fields = [
            'id', 'name', 'email', 'parent_email', 'barcode', 'grade', 'grade_display',
            'parent_access_code', 'parent_verified', 'parent_verified_at',
            'created_at', 'updated_at'
        ]
        read_only_fields = [
            'id', 'parent_access_code', 'parent_verified', 'parent_verified_at',
            'created_at', 'updated_at'
        ]


class PortalStudentSerializer(serializers.ModelSerializer):
    """What a parent sees about their student."""

    class Meta:
        model = Student
        fields = ['id', 'name', 'grade', 'parent_verified_at']
        read_only_fields = fields


class AccessCodeSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=20)
