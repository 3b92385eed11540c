"""
REST framework glue shared by every app: exception rendering and permissions.
"""

import logging

from django.db import DatabaseError
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from .exceptions import ServiceError, PersistenceError

logger = logging.getLogger(__name__)


def service_exception_handler(exc, context):
    """
    Render service-layer failures as ``{"error": ..., "code": ...}``.

    Anything else falls through to REST framework's default handler.
    """
    if isinstance(exc, DatabaseError):
        logger.error(f"Unhandled database error in {context.get('view').__class__.__name__}: {exc}")
        exc = PersistenceError()

    if isinstance(exc, ServiceError):
        payload = {'error': exc.message, 'code': exc.code}
        if exc.details:
            payload['details'] = exc.details
        return Response(payload, status=exc.status_code)

    response = exception_handler(exc, context)
    if response is not None and isinstance(response.data, dict) and 'detail' in response.data:
        response.data = {'error': str(response.data['detail']), 'code': getattr(exc, 'default_code', 'error')}
    return response


class IsApprovedStaff(permissions.BasePermission):
    """Approved teachers and admins."""

    message = 'Your account is awaiting administrator approval.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.can_use_monitor)


class IsAdminRole(permissions.BasePermission):
    message = 'Administrator access is required.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_admin_user)


class IsAdminOrReadOnly(IsApprovedStaff):
    """Approved staff may read; only admins may write."""

    def has_permission(self, request, view):
        if not super().has_permission(request, view):
            return False
        if request.method in permissions.SAFE_METHODS:
            return True
        return request.user.is_admin_user


def results_response(results, http_status=status.HTTP_200_OK):
    """Per-record outcomes for batch endpoints."""
    succeeded = sum(1 for result in results if result['success'])
    return Response({
        'total': len(results),
        'successful': succeeded,
        'failed': len(results) - succeeded,
        'results': results,
    }, status=http_status)
