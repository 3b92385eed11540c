# apps/audit/models.py

from django.db import models
from django.conf import settings
from django.utils.translation import gettext_lazy as _
from apps.core.models import CoreBaseModel


class AuditLog(CoreBaseModel):
    """
    Model for tracking audit events: status changes, slot lifecycle and
    teacher account decisions.
    """
    class ActionType(models.TextChoices):
        CREATE = 'create', _('Create')
        UPDATE = 'update', _('Update')
        DELETE = 'delete', _('Delete')
        IMPORT = 'import', _('Import')
        STATUS_CHANGE = 'status_change', _('Status change')
        APPROVE = 'approve', _('Approve')
        SUSPEND = 'suspend', _('Suspend')
        ROLE_CHANGE = 'role_change', _('Role change')

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_logs',
        verbose_name=_('user')
    )
    action = models.CharField(_('action'), max_length=20, choices=ActionType.choices)
    model_name = models.CharField(_('model name'), max_length=100)
    object_id = models.CharField(_('object id'), max_length=100)
    details = models.JSONField(_('details'), default=dict, blank=True)
    timestamp = models.DateTimeField(_('timestamp'), auto_now_add=True)

    class Meta:
        verbose_name = _('Audit Log')
        verbose_name_plural = _('Audit Logs')
        ordering = ['-timestamp']
        indexes = [
            models.Index(fields=['model_name', 'object_id'], name='audit_audit_model_n_3f9a1c_idx'),
            models.Index(fields=['action', 'timestamp'], name='audit_audit_action_7b2e4d_idx'),
        ]

    def __str__(self):
        return f"{self.user} - {self.action} - {self.model_name} - {self.timestamp}"
