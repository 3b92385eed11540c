# apps/users/services.py
"""
Teacher account lifecycle: registration, approval and role changes.
"""

import logging

from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction

from apps.communication.models import EventKind
from apps.communication.notifications import dispatcher
from apps.core.exceptions import NotFound, ValidationError, persistence_guard
from apps.core.validators import validate_school_email

logger = logging.getLogger(__name__)
User = get_user_model()


def get_teacher(user_id):
    try:
        return User.objects.get(pk=user_id)
    except (User.DoesNotExist, DjangoValidationError, ValueError):
        raise NotFound('Teacher not found.')


def register_teacher(email, password, first_name='', last_name='', classroom_number=''):
    """
    Create an unapproved teacher account.

    The email must belong to the school domain and must not be registered yet.
    """
    email = (email or '').strip().lower()
    if not email or not password:
        raise ValidationError('Email and password are required.')

    try:
        validate_school_email(email)
    except DjangoValidationError as e:
        raise ValidationError(e.messages[0], field='email')

    if User.objects.filter(email__iexact=email).exists():
        raise ValidationError('An account with this email already exists.', field='email')

    candidate = User(email=email, first_name=first_name, last_name=last_name)
    try:
        validate_password(password, user=candidate)
    except DjangoValidationError as e:
        raise ValidationError(' '.join(e.messages), field='password')

    with persistence_guard('register teacher'):
        user = User.objects.create_user(
            email=email,
            password=password,
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            classroom_number=classroom_number.strip(),
            role=User.Role.TEACHER,
            is_approved=False,
        )

    logger.info(f"Teacher registered: {user.email} (awaiting approval)")
    return user


def set_approval(user_id, approved, performed_by=None):
    """
    Approve or suspend a teacher account and email the teacher about it.

    Returns the updated user.
    """
    user = get_teacher(user_id)
    user._audit_user = performed_by

    with transaction.atomic(), persistence_guard('update teacher approval'):
        if approved:
            user.approve()
        else:
            user.suspend()

        dispatcher.send(
            EventKind.TEACHER_APPROVED if approved else EventKind.TEACHER_SUSPENDED,
            {
                'recipients': [user.email],
                'context': {'teacher_name': user.display_name},
            },
        )

    logger.info(f"Teacher {user.email} {'approved' if approved else 'suspended'} by {performed_by}")
    return user


def change_role(user_id, role, performed_by=None):
    if role not in User.Role.values:
        raise ValidationError(f"Unknown role '{role}'.", field='role')

    user = get_teacher(user_id)
    if performed_by is not None and user.pk == performed_by.pk and role != User.Role.ADMIN:
        raise ValidationError('You cannot remove your own administrator role.')

    user._audit_user = performed_by
    user.role = role
    with persistence_guard('change teacher role'):
        user.save(update_fields=['role'])

    logger.info(f"Role of {user.email} changed to {role} by {performed_by}")
    return user


def pending_teachers():
    return User.objects.filter(role=User.Role.TEACHER, is_approved=False, is_active=True)
