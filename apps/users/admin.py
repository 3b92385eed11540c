from django.contrib import admin, messages
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.translation import gettext_lazy as _

from .models import User
from . import services


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    Custom admin interface for User model.
    """
    list_display = ('email', 'full_name', 'role', 'is_approved', 'classroom_number', 'is_active', 'last_login')
    list_filter = ('role', 'is_approved', 'is_active', 'is_superuser', 'date_joined')
    search_fields = ('email', 'first_name', 'last_name', 'classroom_number')
    ordering = ('-date_joined',)
    readonly_fields = ('last_login', 'date_joined', 'approved_at')

    fieldsets = (
        (None, {
            'fields': ('email', 'password')
        }),
        (_('Personal Info'), {
            'fields': ('first_name', 'last_name', 'classroom_number')
        }),
        (_('Monitor Access'), {
            'fields': ('role', 'is_approved', 'approved_at')
        }),
        (_('Permissions'), {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
            'classes': ('collapse',)
        }),
        (_('Important Dates'), {
            'fields': ('last_login', 'date_joined'),
            'classes': ('collapse',)
        }),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'password1', 'password2', 'first_name', 'last_name', 'role'),
        }),
    )

    actions = ['approve_teachers', 'suspend_teachers']

    def full_name(self, obj):
        return obj.full_name
    full_name.short_description = _('Full Name')

    def approve_teachers(self, request, queryset):
        """Admin action to approve selected teachers and notify them."""
        for user in queryset.filter(is_approved=False):
            services.set_approval(user.pk, True, performed_by=request.user)
        self.message_user(request, _('Selected teachers approved.'), messages.SUCCESS)
    approve_teachers.short_description = _('Approve selected teachers')

    def suspend_teachers(self, request, queryset):
        for user in queryset.filter(is_approved=True):
            services.set_approval(user.pk, False, performed_by=request.user)
        self.message_user(request, _('Selected teachers suspended.'), messages.WARNING)
    suspend_teachers.short_description = _('Suspend selected teachers')
