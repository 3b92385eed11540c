# apps/communication/models.py

from django.db import models
from django.template import Context, Template
from django.utils.html import strip_tags
from django.utils.translation import gettext_lazy as _

from apps.core.models import CoreBaseModel


class EventKind(models.TextChoices):
    """Notification events; each one is rendered from the template of the same name."""
    VIOLATION_ASSIGNED = 'violation_assigned', _('Detention assigned')
    DETENTION_RESCHEDULED = 'detention_rescheduled', _('Detention rescheduled')
    TEACHER_APPROVED = 'teacher_approved', _('Teacher account approved')
    TEACHER_SUSPENDED = 'teacher_suspended', _('Teacher account suspended')
    MONITOR_SIGNUP = 'monitor_signup', _('Detention monitor signup')
    MONITOR_REMINDER = 'monitor_reminder', _('Detention monitor reminder')
    TEST = 'test', _('Test email')


class EmailTemplate(CoreBaseModel):
    """
    Model for managing email templates.

    Subject and bodies are Django templates; placeholders such as
    ``{{ student_name }}`` are resolved when the email is sent.
    """
    name = models.CharField(
        _('template name'),
        max_length=100,
        unique=True,
        help_text=_('Event kind this template renders, e.g. violation_assigned')
    )
    description = models.CharField(_('description'), max_length=255, blank=True)
    subject = models.CharField(_('email subject'), max_length=200)
    body_html = models.TextField(_('HTML body'), help_text=_('HTML content for the email'))
    body_text = models.TextField(
        _('text body'),
        blank=True,
        help_text=_('Plain text version of the email; generated from the HTML body when empty')
    )
    is_active = models.BooleanField(_('is active'), default=True)
    variables = models.JSONField(
        _('template variables'),
        default=list,
        blank=True,
        help_text=_('Names of the placeholders available to this template')
    )

    class Meta:
        verbose_name = _('Email Template')
        verbose_name_plural = _('Email Templates')
        ordering = ['name']

    def __str__(self):
        return self.name

    def render_template(self, context):
        """
        Render subject, HTML body and text body with the given context.
        Values are HTML-escaped in the HTML body only.
        """
        subject = Template(self.subject).render(Context(context, autoescape=False))
        body_html = Template(self.body_html).render(Context(context))
        if self.body_text:
            body_text = Template(self.body_text).render(Context(context, autoescape=False))
        else:
            body_text = strip_tags(body_html)

        return ' '.join(subject.split()), body_html, body_text.strip()


class SentEmail(CoreBaseModel):
    """
    Model for tracking every email delivery attempt.
    """
    template = models.ForeignKey(
        EmailTemplate,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='sent_emails',
        verbose_name=_('template')
    )
    event_kind = models.CharField(
        _('event kind'),
        max_length=40,
        choices=EventKind.choices,
        blank=True,
        db_index=True
    )
    recipients = models.JSONField(_('recipients'), default=list)
    cc = models.JSONField(_('cc'), default=list, blank=True)
    subject = models.CharField(_('subject'), max_length=200)
    body_html = models.TextField(_('HTML body'))
    body_text = models.TextField(_('text body'), blank=True)
    sent_at = models.DateTimeField(_('sent at'), auto_now_add=True)
    success = models.BooleanField(_('success'), default=False)
    error_message = models.TextField(_('error message'), blank=True)
    message_id = models.CharField(_('message ID'), max_length=200, blank=True)

    class Meta:
        verbose_name = _('Sent Email')
        verbose_name_plural = _('Sent Emails')
        ordering = ['-sent_at']
        indexes = [
            models.Index(fields=['event_kind', 'sent_at'], name='communicati_event_k_5c1d2e_idx'),
            models.Index(fields=['success'], name='communicati_success_8a4f0b_idx'),
        ]

    def __str__(self):
        return f"{self.subject} -> {', '.join(self.recipients)}"
