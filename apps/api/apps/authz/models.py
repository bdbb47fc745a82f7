"""
Authz models: auth_user, auth_role, auth_user_role, practitioner
"""
import uuid
from django.db import models
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin


# ============================================================================
# Enums
# ============================================================================

class PractitionerRoleChoices(models.TextChoices):
    """
    Clinical staff classification.

    - DENTIST: performs procedures and owns treatment plans
    - HYGIENIST: cleanings, periodontal maintenance
    - ASSISTANT: chairside support
    """
    DENTIST = 'dentist', 'Dentist'
    HYGIENIST = 'hygienist', 'Hygienist'
    ASSISTANT = 'assistant', 'Assistant'


class RoleChoices(models.TextChoices):
    """Fixed system role names"""
    ADMIN = 'admin', 'Admin'
    DENTIST = 'dentist', 'Dentist'
    RECEPTION = 'reception', 'Reception'
    ACCOUNTING = 'accounting', 'Accounting'


# ============================================================================
# User Management
# ============================================================================

class UserManager(BaseUserManager):
    """Custom user manager for email-based authentication."""

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError('Email is required')
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_active', True)
        return self.create_user(email, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    """Clinic staff account, logged in by email."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True, max_length=255)
    first_name = models.CharField(max_length=150, blank=True)
    last_name = models.CharField(max_length=150, blank=True)
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)  # Required for admin access
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    class Meta:
        db_table = 'auth_user'
        verbose_name = 'User'
        verbose_name_plural = 'Users'
        indexes = [
            models.Index(fields=['is_active'], name='idx_user_active'),
        ]

    def __str__(self):
        return self.email

    @property
    def role_names(self):
        return set(self.user_roles.values_list('role__name', flat=True))


class Role(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(
        max_length=50,
        unique=True,
        choices=RoleChoices.choices
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'auth_role'
        verbose_name = 'Role'
        verbose_name_plural = 'Roles'

    def __str__(self):
        return self.get_name_display()


class UserRole(models.Model):
    """Many-to-many relationship between users and roles."""
    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='user_roles'
    )
    role = models.ForeignKey(
        Role,
        on_delete=models.CASCADE,
        related_name='user_roles'
    )

    class Meta:
        db_table = 'auth_user_role'
        verbose_name = 'User Role'
        verbose_name_plural = 'User Roles'
        unique_together = [('user', 'role')]

    def __str__(self):
        return f"{self.user.email} - {self.role.name}"


class Practitioner(models.Model):
    """
    Dentists and clinical staff linked to users.

    display_name is what the calendar shows as the staff name on each
    appointment block.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name='practitioner'
    )
    display_name = models.CharField(max_length=255)
    role_type = models.CharField(
        max_length=20,
        choices=PractitionerRoleChoices.choices,
        default=PractitionerRoleChoices.DENTIST,
    )
    specialty = models.CharField(max_length=100, default='General Dentistry')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'practitioner'
        verbose_name = 'Practitioner'
        verbose_name_plural = 'Practitioners'
        indexes = [
            models.Index(fields=['is_active'], name='idx_practitioner_active'),
            models.Index(fields=['display_name'], name='idx_practitioner_name'),
        ]

    def __str__(self):
        return f"{self.display_name} ({self.get_role_type_display()})"
