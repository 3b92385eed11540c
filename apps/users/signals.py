from django.db.models.signals import post_save
from django.dispatch import receiver
from django.contrib.auth import get_user_model
from apps.audit.models import AuditLog

User = get_user_model()


@receiver(post_save, sender=User)
def audit_teacher_account_changes(sender, instance, created, update_fields=None, **kwargs):
    """Audit log for teacher registration, approval and role changes."""
    performing_user = getattr(instance, '_audit_user', None)
    details = {
        'user_email': instance.email,
        'user_display_name': instance.display_name,
        'role': instance.role,
        'is_approved': instance.is_approved,
    }

    if created:
        action = AuditLog.ActionType.CREATE
    elif update_fields and 'is_approved' in update_fields:
        action = AuditLog.ActionType.APPROVE if instance.is_approved else AuditLog.ActionType.SUSPEND
    elif update_fields and 'role' in update_fields:
        action = AuditLog.ActionType.ROLE_CHANGE
    else:
        # Logins and profile edits are not audited
        return

    AuditLog.objects.create(
        user=performing_user,
        action=action,
        model_name='User',
        object_id=str(instance.id),
        details=details,
    )
