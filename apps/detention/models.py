# apps/detention/models.py

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import F, Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.core.models import CoreBaseModel
from apps.students.models import Student


COMMON_VIOLATION_TYPES = [
    'No ID or ID not displayed',
    'Improper phone use',
    'Tardy',
    'Disrespectful behavior',
]


def default_location():
    return getattr(settings, 'DETENTION_DEFAULT_LOCATION', 'Cafeteria')


def default_capacity():
    return getattr(settings, 'DETENTION_DEFAULT_CAPACITY', 20)


class DetentionSlotQuerySet(models.QuerySet):
    def open(self):
        """Slots with at least one free seat."""
        return self.filter(current_count__lt=F('capacity'))

    def upcoming(self, after=None):
        """Slots strictly after ``after`` (today by default)."""
        return self.filter(date__gt=after or timezone.localdate())

    def reschedule_candidates(self, after=None):
        return self.upcoming(after).open().order_by('date', 'created_at')


class DetentionSlot(CoreBaseModel):
    """
    One after-school detention session, supervised by a teacher.

    ``current_count`` is the number of seats taken. It only changes through
    ``apps.detention.seats`` and can never exceed ``capacity``.
    """
    date = models.DateField(_('date'), db_index=True)
    teacher = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='detention_slots',
        verbose_name=_('monitoring teacher')
    )
    location = models.CharField(_('location'), max_length=100, default=default_location)
    capacity = models.PositiveIntegerField(
        _('capacity'),
        default=default_capacity,
        validators=[MinValueValidator(1)]
    )
    current_count = models.PositiveIntegerField(_('seats taken'), default=0, editable=False)

    objects = DetentionSlotQuerySet.as_manager()

    class Meta:
        verbose_name = _('Detention Slot')
        verbose_name_plural = _('Detention Slots')
        ordering = ['date', 'created_at']
        constraints = [
            models.UniqueConstraint(fields=['teacher', 'date'], name='unique_slot_per_teacher_per_day'),
            models.CheckConstraint(condition=Q(capacity__gte=1), name='slot_capacity_positive'),
            models.CheckConstraint(condition=Q(current_count__lte=F('capacity')), name='slot_occupancy_within_capacity'),
        ]

    def __str__(self):
        return f"{self.date} - {self.location} ({self.current_count}/{self.capacity})"

    @property
    def seats_left(self):
        return max(self.capacity - self.current_count, 0)

    @property
    def is_full(self):
        return self.current_count >= self.capacity

    @property
    def start_time(self):
        return getattr(settings, 'DETENTION_START_TIME', '3:45 PM')


class ViolationRecord(CoreBaseModel):
    """
    A conduct violation that earned the student a detention.
    """
    class Status(models.TextChoices):
        PENDING = 'pending', _('Pending')
        ATTENDED = 'attended', _('Attended')
        ABSENT = 'absent', _('Absent')
        REASSIGNED = 'reassigned', _('Reassigned')

    # Allowed status changes; nothing goes back to pending and attended is final.
    TRANSITIONS = {
        Status.PENDING: {Status.ATTENDED, Status.ABSENT},
        Status.ABSENT: {Status.REASSIGNED},
        Status.REASSIGNED: {Status.ATTENDED, Status.ABSENT},
        Status.ATTENDED: set(),
    }

    student = models.ForeignKey(
        Student,
        on_delete=models.CASCADE,
        related_name='violations',
        verbose_name=_('student')
    )
    violation_type = models.CharField(_('violation type'), max_length=100)
    assigned_date = models.DateField(_('assigned date'), default=timezone.localdate)
    detention_date = models.DateField(_('detention date'), db_index=True)
    slot = models.ForeignKey(
        DetentionSlot,
        on_delete=models.PROTECT,
        related_name='violations',
        verbose_name=_('detention slot')
    )
    teacher = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='issued_violations',
        verbose_name=_('issuing teacher')
    )
    status = models.CharField(
        _('status'),
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True
    )
    reschedule_count = models.PositiveSmallIntegerField(
        _('reschedule count'),
        default=0,
        help_text=_('Number of automatic reassignments after missed sessions')
    )

    class Meta:
        verbose_name = _('Violation')
        verbose_name_plural = _('Violations')
        ordering = ['-detention_date', '-created_at']
        indexes = [
            models.Index(fields=['detention_date', 'status'], name='detention_v_detenti_4e8c2a_idx'),
            models.Index(fields=['student', 'violation_type'], name='detention_v_student_9b7d1f_idx'),
        ]

    def __str__(self):
        return f"{self.student.name} - {self.violation_type} ({self.get_status_display()})"

    def can_transition_to(self, status):
        return status in self.TRANSITIONS.get(self.status, set())


class StudentWarning(CoreBaseModel):
    """
    An infraction recorded below the detention threshold. Never edited.
    """
    student = models.ForeignKey(
        Student,
        on_delete=models.CASCADE,
        related_name='warnings',
        verbose_name=_('student')
    )
    teacher = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='issued_warnings',
        verbose_name=_('teacher')
    )
    violation_type = models.CharField(_('violation type'), max_length=100)
    issued_at = models.DateTimeField(_('issued at'), default=timezone.now)

    class Meta:
        verbose_name = _('Warning')
        verbose_name_plural = _('Warnings')
        ordering = ['-issued_at']
        indexes = [
            models.Index(fields=['student', 'violation_type'], name='detention_s_student_2c5e8a_idx'),
        ]

    def __str__(self):
        return f"Warning: {self.student.name} - {self.violation_type}"
