
import uuid
from django.db import models
from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class UserManager(BaseUserManager):
    """
    Custom user manager for email-based authentication.
    """
    use_in_migrations = True

    def get_admin_users(self):
        return self.filter(role=User.Role.ADMIN, is_active=True)

    def approved_teachers(self):
        return self.filter(is_approved=True, is_active=True)

    def create_user(self, email, password=None, **extra_fields):
        """
        Create and return a regular user with an email and password.
        """
        if not email:
            raise ValueError(_('The Email field must be set'))

        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        """
        Create and return a superuser with admin permissions.
        """
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_active', True)
        extra_fields.setdefault('is_approved', True)
        extra_fields.setdefault('role', User.Role.ADMIN)

        if extra_fields.get('is_staff') is not True:
            raise ValueError(_('Superuser must have is_staff=True.'))
        if extra_fields.get('is_superuser') is not True:
            raise ValueError(_('Superuser must have is_superuser=True.'))

        return self.create_user(email, password, **extra_fields)


class User(AbstractUser):
    """
    Staff account (teacher or administrator) with email as primary identifier.
    """
    class Role(models.TextChoices):
        TEACHER = 'teacher', _('Teacher')
        ADMIN = 'admin', _('Administrator')

    id = models.UUIDField(
        default=uuid.uuid4,
        editable=False,
        primary_key=True,
    )
    # Remove username field, use email instead
    username = None
    email = models.EmailField(
        _('email address'),
        unique=True,
        db_index=True,
        help_text=_('Primary email address for communication')
    )

    role = models.CharField(
        _('role'),
        max_length=20,
        choices=Role.choices,
        default=Role.TEACHER,
        db_index=True
    )
    is_approved = models.BooleanField(
        _('approved'),
        default=False,
        help_text=_('New teacher accounts need administrator approval before using the monitor')
    )
    approved_at = models.DateTimeField(_('approved at'), null=True, blank=True)
    classroom_number = models.CharField(_('classroom number'), max_length=20, blank=True)

    # Override AbstractUser fields to make optional
    first_name = models.CharField(_('first name'), max_length=150, blank=True)
    last_name = models.CharField(_('last name'), max_length=150, blank=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    class Meta:
        verbose_name = _('User')
        verbose_name_plural = _('Users')
        ordering = ['-date_joined']
        indexes = [
            models.Index(fields=['role', 'is_approved'], name='users_user_role_9c3b1e_idx'),
        ]

    def __str__(self):
        return self.email

    @property
    def full_name(self):
        """Return the full name of the user."""
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def display_name(self):
        return self.full_name or self.email.split('@', 1)[0]

    @property
    def is_admin_user(self):
        return self.role == self.Role.ADMIN or self.is_superuser

    @property
    def can_use_monitor(self):
        """Approved teachers and every administrator."""
        return self.is_active and (self.is_approved or self.is_admin_user)

    def approve(self):
        self.is_approved = True
        self.approved_at = timezone.now()
        self.save(update_fields=['is_approved', 'approved_at'])

    def suspend(self):
        self.is_approved = False
        self.approved_at = None
        self.save(update_fields=['is_approved', 'approved_at'])
