# apps/students/admin.py

from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from .models import Student


@admin.register(Student)
class StudentAdmin(admin.ModelAdmin):
    list_display = ['name', 'barcode', 'grade', 'email', 'parent_email', 'parent_verified']
    list_filter = ['grade', 'parent_verified']
    search_fields = ['name', 'barcode', 'email', 'parent_email']
    readonly_fields = ['parent_access_code', 'parent_verified_at', 'created_at', 'updated_at']

    fieldsets = (
        (_('Student'), {
            'fields': ('name', 'barcode', 'grade', 'email')
        }),
        (_('Parent Access'), {
            'fields': ('parent_email', 'parent_access_code', 'parent_verified', 'parent_verified_at')
        }),
        (_('Timestamps'), {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )
