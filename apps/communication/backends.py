# apps/communication/backends.py
"""
Email backend that delivers through the Resend HTTP API.

Enabled in settings when ``RESEND_API_KEY`` is set; SMTP is used otherwise.
"""

import logging

import requests
from django.conf import settings
from django.core.mail.backends.base import BaseEmailBackend

logger = logging.getLogger(__name__)

RESEND_API_URL = 'https://api.resend.com/emails'


class ResendEmailBackend(BaseEmailBackend):
    """
    Django email backend posting each message to Resend.
    """

    def __init__(self, api_key=None, timeout=None, fail_silently=False, **kwargs):
        super().__init__(fail_silently=fail_silently, **kwargs)
        self.api_key = api_key or getattr(settings, 'RESEND_API_KEY', '')
        self.timeout = timeout or getattr(settings, 'EMAIL_TIMEOUT', 30)
        self.session = None

    def open(self):
        if self.session is not None:
            return False
        self.session = requests.Session()
        self.session.headers.update({
            'Authorization': f'Bearer {self.api_key}',
            'Content-Type': 'application/json',
        })
        return True

    def close(self):
        if self.session is None:
            return
        try:
            self.session.close()
        finally:
            self.session = None

    def send_messages(self, email_messages):
        if not email_messages:
            return 0

        new_session = self.open()
        sent = 0
        try:
            for message in email_messages:
                if self._send(message):
                    sent += 1
        finally:
            if new_session:
                self.close()
        return sent

    def _payload(self, message):
        payload = {
            'from': message.from_email,
            'to': list(message.to),
            'subject': message.subject,
            'text': message.body,
        }
        if message.cc:
            payload['cc'] = list(message.cc)
        if message.bcc:
            payload['bcc'] = list(message.bcc)
        if message.reply_to:
            payload['reply_to'] = list(message.reply_to)

        for content, mimetype in getattr(message, 'alternatives', []):
            if mimetype == 'text/html':
                payload['html'] = content
        return payload

    def _send(self, message):
        if not message.recipients():
            return False
        try:
            response = self.session.post(
                RESEND_API_URL,
                json=self._payload(message),
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Resend rejected email to {', '.join(message.to)}: {e}")
            if not self.fail_silently:
                raise
            return False

        message_id = response.json().get('id', '')
        if message_id:
            message.extra_headers['Message-ID'] = message_id
        return True
