from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from apps.audit.models import AuditLog
from .models import DetentionSlot, ViolationRecord


@receiver(post_save, sender=DetentionSlot)
def audit_slot_creation(sender, instance, created, **kwargs):
    """Audit log for newly scheduled detention sessions."""
    if not created:
        return
    AuditLog.objects.create(
        user=getattr(instance, '_audit_user', None),
        action=AuditLog.ActionType.CREATE,
        model_name='DetentionSlot',
        object_id=str(instance.id),
        details={
            'date': instance.date.isoformat(),
            'teacher_email': instance.teacher.email,
            'location': instance.location,
            'capacity': instance.capacity,
        },
    )


@receiver(post_delete, sender=DetentionSlot)
def audit_slot_deletion(sender, instance, **kwargs):
    AuditLog.objects.create(
        user=getattr(instance, '_audit_user', None),
        action=AuditLog.ActionType.DELETE,
        model_name='DetentionSlot',
        object_id=str(instance.id),
        details={
            'date': instance.date.isoformat(),
            'location': instance.location,
        },
    )


@receiver(post_save, sender=ViolationRecord)
def audit_violation_status_changes(sender, instance, created, update_fields=None, **kwargs):
    """Audit log for violation creation and every attendance status change."""
    if created:
        action = AuditLog.ActionType.CREATE
        details = {
            'student_barcode': instance.student.barcode,
            'violation_type': instance.violation_type,
            'detention_date': instance.detention_date.isoformat(),
        }
    elif update_fields and 'status' in update_fields:
        action = AuditLog.ActionType.STATUS_CHANGE
        details = {
            'from': getattr(instance, '_previous_status', None),
            'to': instance.status,
            'detention_date': instance.detention_date.isoformat(),
        }
    else:
        return

    AuditLog.objects.create(
        user=getattr(instance, '_audit_user', None) or instance.teacher,
        action=action,
        model_name='ViolationRecord',
        object_id=str(instance.id),
        details=details,
    )
