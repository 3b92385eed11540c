from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import RegexValidator
from django.utils.translation import gettext_lazy as _


barcode_validator = RegexValidator(
    regex=r'^\d{6}$',
    message=_('Barcode must be 6 digits'),
)

access_code_validator = RegexValidator(
    regex=r'^[A-Z]{2}\d{6}$',
    message=_('Access code must be two letters followed by six digits (e.g. AB123456)'),
)


def validate_school_email(value):
    """Staff accounts must use the school's email domain, when one is configured."""
    domain = getattr(settings, 'TEACHER_EMAIL_DOMAIN', '')
    if domain and not value.lower().endswith(domain.lower()):
        raise ValidationError(
            _('Must be a %(domain)s email address'),
            params={'domain': domain},
            code='email_domain',
        )
