# apps/communication/notifications.py
"""
Fire-and-forget notification dispatch.

``send()`` queues a message for delivery once the surrounding database
transaction commits (immediately when there is none). Delivery renders the
event's template and hands the email to ``EmailService``; every failure is
logged and swallowed so the action that produced the event always stands.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List

from django.conf import settings
from django.db import transaction

from apps.core.exceptions import NotificationError
from .services import EmailService, EmailTemplateService

logger = logging.getLogger(__name__)


@dataclass
class Notification:
    kind: str
    recipients: List[str]
    context: Dict = field(default_factory=dict)
    cc: List[str] = field(default_factory=list)


class NotificationDispatcher:
    """Queue notifications behind the current transaction and deliver them in-process."""

    def send(self, event_kind, payload):
        """
        Queue an email for ``event_kind``.

        ``payload`` holds ``recipients``, optional ``cc`` and the template
        ``context``; the school name is added to every context.
        """
        context = {'school_name': getattr(settings, 'SCHOOL_NAME', 'School')}
        context.update(payload.get('context', {}))
        message = Notification(
            kind=str(event_kind),
            recipients=list(payload.get('recipients', [])),
            context=context,
            cc=list(payload.get('cc', [])),
        )
        transaction.on_commit(lambda: self.deliver(message))
        return message

    def deliver(self, message):
        """Send a queued notification. Returns True when the email went out."""
        try:
            template = EmailTemplateService.get_template_by_name(message.kind)
            if template is None:
                raise NotificationError(f"No email template for event {message.kind}")

            success, detail, _ = EmailService.send_templated_email(
                template=template,
                recipients=message.recipients,
                context=message.context,
                cc=message.cc,
                event_kind=message.kind,
            )
            if not success:
                raise NotificationError(detail)
        except Exception as exc:
            logger.warning(f"Notification {message.kind} to {', '.join(message.recipients) or 'nobody'} failed: {exc}")
            return False

        logger.info(f"Notification {message.kind} delivered")
        return True


dispatcher = NotificationDispatcher()


def send(event_kind, payload):
    return dispatcher.send(event_kind, payload)
