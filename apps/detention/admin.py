# apps/detention/admin.py

from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from .models import DetentionSlot, StudentWarning, ViolationRecord


@admin.register(DetentionSlot)
class DetentionSlotAdmin(admin.ModelAdmin):
    list_display = ['date', 'teacher', 'location', 'current_count', 'capacity']
    list_filter = ['date', 'location']
    search_fields = ['teacher__email', 'teacher__first_name', 'teacher__last_name', 'location']
    readonly_fields = ['current_count', 'created_at', 'updated_at']
    date_hierarchy = 'date'

    fieldsets = (
        (_('Session'), {
            'fields': ('date', 'teacher', 'location')
        }),
        (_('Seats'), {
            'fields': ('capacity', 'current_count')
        }),
        (_('Timestamps'), {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def has_delete_permission(self, request, obj=None):
        """Only empty sessions can be deleted."""
        if obj is not None and obj.current_count > 0:
            return False
        return super().has_delete_permission(request, obj)


@admin.register(ViolationRecord)
class ViolationRecordAdmin(admin.ModelAdmin):
    list_display = ['student', 'violation_type', 'detention_date', 'status', 'reschedule_count', 'teacher']
    list_filter = ['status', 'detention_date', 'violation_type']
    search_fields = ['student__name', 'student__barcode', 'violation_type']
    # Status and seats change through the attendance workflow only
    readonly_fields = [
        'student', 'slot', 'detention_date', 'status', 'reschedule_count',
        'assigned_date', 'created_at', 'updated_at'
    ]
    date_hierarchy = 'detention_date'
    list_select_related = ['student', 'teacher']

    fieldsets = (
        (_('Violation'), {
            'fields': ('student', 'violation_type', 'teacher', 'assigned_date')
        }),
        (_('Detention'), {
            'fields': ('slot', 'detention_date', 'status', 'reschedule_count')
        }),
        (_('Timestamps'), {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(StudentWarning)
class StudentWarningAdmin(admin.ModelAdmin):
    list_display = ['student', 'violation_type', 'teacher', 'issued_at']
    list_filter = ['violation_type', 'issued_at']
    search_fields = ['student__name', 'student__barcode', 'violation_type']
    readonly_fields = ['student', 'teacher', 'violation_type', 'issued_at', 'created_at', 'updated_at']

    def has_change_permission(self, request, obj=None):
        return False
