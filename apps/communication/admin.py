# apps/communication/admin.py

from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from .models import EmailTemplate, SentEmail


@admin.register(EmailTemplate)
class EmailTemplateAdmin(admin.ModelAdmin):
    list_display = ['name', 'subject_preview', 'is_active', 'updated_at']
    list_filter = ['is_active']
    search_fields = ['name', 'subject', 'body_text']
    list_editable = ['is_active']
    readonly_fields = ['created_at', 'updated_at']

    fieldsets = (
        (_('Template Information'), {
            'fields': ('name', 'description', 'is_active')
        }),
        (_('Content'), {
            'fields': ('subject', 'body_html', 'body_text')
        }),
        (_('Variables'), {
            'fields': ('variables',),
            'classes': ('collapse',)
        }),
        (_('Timestamps'), {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def subject_preview(self, obj):
        return obj.subject[:50] + '...' if len(obj.subject) > 50 else obj.subject
    subject_preview.short_description = _('Subject Preview')


@admin.register(SentEmail)
class SentEmailAdmin(admin.ModelAdmin):
    list_display = ['subject_preview', 'event_kind', 'recipient_list', 'sent_at', 'success']
    list_filter = ['success', 'event_kind', 'sent_at']
    search_fields = ['subject', 'recipients', 'error_message']
    readonly_fields = [
        'template', 'event_kind', 'recipients', 'cc', 'subject', 'body_html',
        'body_text', 'sent_at', 'success', 'error_message', 'message_id',
        'created_at', 'updated_at'
    ]
    date_hierarchy = 'sent_at'

    fieldsets = (
        (_('Recipient Information'), {
            'fields': ('recipients', 'cc', 'template', 'event_kind')
        }),
        (_('Content'), {
            'fields': ('subject', 'body_html', 'body_text')
        }),
        (_('Delivery Status'), {
            'fields': ('sent_at', 'success', 'error_message')
        }),
        (_('Technical Details'), {
            'fields': ('message_id',),
            'classes': ('collapse',)
        }),
    )

    def has_add_permission(self, request):
        return False

    def subject_preview(self, obj):
        return obj.subject[:50] + '...' if len(obj.subject) > 50 else obj.subject
    subject_preview.short_description = _('Subject Preview')

    def recipient_list(self, obj):
        return ', '.join(obj.recipients)
    recipient_list.short_description = _('Recipients')
