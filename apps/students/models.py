# apps/students/models.py

import secrets
import string

from django.db import models
from django.core.validators import MaxValueValidator, MinValueValidator
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.core.models import CoreBaseModel
from apps.core.validators import access_code_validator, barcode_validator


class StudentQuerySet(models.QuerySet):
    def search(self, term, limit=5):
        """Case-insensitive name match for the entry forms' student picker."""
        return self.filter(name__icontains=term.strip()).order_by('name')[:limit]


class Student(CoreBaseModel):
    """
    A student whose conduct is tracked, identified on campus by the
    barcode printed on their ID card.
    """
    class Grade(models.IntegerChoices):
        FRESHMAN = 9, _('9th grade')
        SOPHOMORE = 10, _('10th grade')
        JUNIOR = 11, _('11th grade')
        SENIOR = 12, _('12th grade')

    name = models.CharField(_('name'), max_length=200, db_index=True)
    email = models.EmailField(_('school email'))
    parent_email = models.EmailField(_('parent email'), blank=True)
    barcode = models.CharField(
        _('barcode'),
        max_length=6,
        unique=True,
        validators=[barcode_validator],
        help_text=_('Six digit number printed on the student ID card')
    )
    grade = models.PositiveSmallIntegerField(
        _('grade'),
        choices=Grade.choices,
        validators=[MinValueValidator(9), MaxValueValidator(12)]
    )
    parent_access_code = models.CharField(
        _('parent access code'),
        max_length=8,
        unique=True,
        blank=True,
        validators=[access_code_validator]
    )
    parent_verified = models.BooleanField(_('parent verified'), default=False)
    parent_verified_at = models.DateTimeField(_('parent verified at'), null=True, blank=True)

    objects = StudentQuerySet.as_manager()

    class Meta:
        verbose_name = _('Student')
        verbose_name_plural = _('Students')
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.barcode})"

    def save(self, *args, **kwargs):
        """Auto-generate the parent access code if not provided."""
        if not self.parent_access_code:
            self.parent_access_code = self.generate_access_code()
        super().save(*args, **kwargs)

    @staticmethod
    def generate_access_code():
        """Generate a unique access code in format: two letters followed by six digits."""
        while True:
            code = ''.join(secrets.choice(string.ascii_uppercase) for _ in range(2))
            code += ''.join(secrets.choice(string.digits) for _ in range(6))
            if not Student.objects.filter(parent_access_code=code).exists():
                return code

    def mark_parent_verified(self):
        if self.parent_verified:
            return False
        self.parent_verified = True
        self.parent_verified_at = timezone.now()
        self.save(update_fields=['parent_verified', 'parent_verified_at', 'updated_at'])
        return True
