"""
Email services for the communication app.
Provides utilities for sending emails using templates and tracking sent emails.
"""

import logging
from typing import Dict, List, Optional, Tuple

from django.conf import settings
from django.core.mail import EmailMultiAlternatives, get_connection

from .defaults import DEFAULT_TEMPLATES
from .models import EmailTemplate, SentEmail

logger = logging.getLogger(__name__)


class EmailService:
    """
    Service class for handling email operations.
    """

    @staticmethod
    def send_email(
        recipients: List[str],
        subject: str,
        html_content: str,
        text_content: str = "",
        cc: Optional[List[str]] = None,
        from_email: Optional[str] = None,
        template: Optional[EmailTemplate] = None,
        event_kind: str = "",
    ) -> Tuple[bool, str, Optional[SentEmail]]:
        """
        Send one email to several recipients and track it in the database.

        Args:
            recipients: Addresses for the To header; blanks are dropped
            subject: Email subject
            html_content: HTML content of the email
            text_content: Plain text alternative
            cc: Addresses for the Cc header (optional)
            from_email: Sender email address (defaults to DEFAULT_FROM_EMAIL)
            template: Saved EmailTemplate instance used (optional)
            event_kind: Notification event that produced the email (optional)

        Returns:
            Tuple of (success: bool, message: str, sent_email: SentEmail or None)
        """
        to = [address for address in recipients if address]
        cc = [address for address in (cc or []) if address]
        if not to:
            return False, "No recipients", None

        tracking = {
            'template': template if template is not None and not template._state.adding else None,
            'event_kind': event_kind,
            'recipients': to,
            'cc': cc,
            'subject': subject[:200],
            'body_html': html_content,
            'body_text': text_content,
        }

        try:
            email = EmailMultiAlternatives(
                subject=subject,
                body=text_content or html_content,
                from_email=from_email or settings.DEFAULT_FROM_EMAIL,
                to=to,
                cc=cc,
            )
            email.attach_alternative(html_content, "text/html")
            result = email.send()
        except Exception as e:
            error_msg = f"Error sending email to {', '.join(to)}: {str(e)}"
            logger.error(error_msg)
            EmailService._track(success=False, error_message=str(e), **tracking)
            return False, error_msg, None

        if result > 0:
            sent_email = EmailService._track(
                success=True,
                message_id=email.extra_headers.get('Message-ID', ''),
                **tracking
            )
            logger.info(f"Email sent successfully to {', '.join(to)}")
            return True, "Email sent successfully", sent_email

        logger.error(f"Failed to send email to {', '.join(to)}")
        EmailService._track(success=False, error_message="Backend reported no delivered messages", **tracking)
        return False, "Failed to send email", None

    @staticmethod
    def _track(**fields) -> Optional[SentEmail]:
        try:
            return SentEmail.objects.create(**fields)
        except Exception as db_error:
            logger.error(f"Failed to track email in database: {str(db_error)}")
            return None

    @staticmethod
    def send_templated_email(
        template: EmailTemplate,
        recipients: List[str],
        context: Dict,
        cc: Optional[List[str]] = None,
        from_email: Optional[str] = None,
        event_kind: str = "",
    ) -> Tuple[bool, str, Optional[SentEmail]]:
        """
        Send an email using an EmailTemplate.

        Returns:
            Tuple of (success: bool, message: str, sent_email: SentEmail or None)
        """
        if not template.is_active:
            return False, "Email template is not active", None

        try:
            subject, html_content, text_content = template.render_template(context)
        except Exception as e:
            error_msg = f"Error rendering template {template.name}: {str(e)}"
            logger.error(error_msg)
            return False, error_msg, None

        return EmailService.send_email(
            recipients=recipients,
            subject=subject,
            html_content=html_content,
            text_content=text_content,
            cc=cc,
            from_email=from_email,
            template=template,
            event_kind=event_kind or template.name,
        )

    @staticmethod
    def test_email_connection() -> Tuple[bool, str]:
        """
        Test the email connection configuration.

        Returns:
            Tuple of (success: bool, message: str)
        """
        try:
            connection = get_connection()
            connection.open()
            connection.close()
            return True, "Email connection test successful"
        except Exception as e:
            return False, f"Email connection test failed: {str(e)}"


class EmailTemplateService:
    """
    Service class for managing email templates.
    """

    @staticmethod
    def default_template(name: str) -> Optional[EmailTemplate]:
        """Unsaved EmailTemplate built from the shipped defaults."""
        spec = DEFAULT_TEMPLATES.get(name)
        if spec is None:
            return None
        return EmailTemplate(
            name=name,
            description=spec['description'],
            subject=spec['subject'],
            body_html=spec['body_html'].strip(),
            variables=list(spec['variables']),
        )

    @staticmethod
    def get_template_by_name(name: str) -> Optional[EmailTemplate]:
        """
        Get the active email template for an event, falling back to the shipped default.
        """
        try:
            return EmailTemplate.objects.get(name=name, is_active=True)
        except EmailTemplate.DoesNotExist:
            return EmailTemplateService.default_template(name)

    @staticmethod
    def seed_defaults(overwrite: bool = False) -> List[EmailTemplate]:
        """Copy shipped defaults into the database so administrators can edit them."""
        seeded = []
        for name in DEFAULT_TEMPLATES:
            default = EmailTemplateService.default_template(name)
            fields = {
                'description': default.description,
                'subject': default.subject,
                'body_html': default.body_html,
                'variables': default.variables,
            }
            if overwrite:
                template, _ = EmailTemplate.objects.update_or_create(name=name, defaults=fields)
            else:
                template, created = EmailTemplate.objects.get_or_create(name=name, defaults=fields)
                if not created:
                    continue
            seeded.append(template)
        return seeded

    @staticmethod
    def preview(template: EmailTemplate) -> Tuple[str, str]:
        """Render a template with each variable replaced by a visible ``[name]`` marker."""
        sample = {name: f"[{name}]" for name in template.variables}
        subject, body_html, _ = template.render_template(sample)
        return subject, body_html
