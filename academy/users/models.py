"""
Academy User Models

This module defines the user-related models for the academy platform,
extending Django's built-in User model with a profile that carries the
user's role and department.

Models:
- Role: The four platform roles
- Profile: Extended user information and system-specific settings

Features:
- Automatic profile creation for new users
- Force password change functionality for admin-created accounts
- Proper signal handling for profile lifecycle management

Author: Academy Development Team
Version: 1.0.0
"""

from django.conf import settings
from django.db import models
from django.db.models.signals import post_save
from django.dispatch import receiver
from django.utils.translation import gettext_lazy as _


class Role(models.TextChoices):
    ADMIN = "Admin", _("Admin")
    HOD = "HOD", _("Head of Department")
    TEACHER = "Teacher", _("Teacher")
    STUDENT = "Student", _("Student")


class Profile(models.Model):
    """
    Extended user profile model for the academy platform.

    Attributes:
        user: One-to-one relationship with Django User model
        role: Platform role deciding permissions and data scope
        department: Department the user belongs to (HODs: the one they lead)
        force_password_change: Security flag requiring password change on next login
        updated_at: Last modification time

    The profile is automatically created when a new user is registered
    and maintains a one-to-one relationship with the User model.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="profile",
        verbose_name=_("User"),
        help_text=_("Associated user account"),
    )

    role = models.CharField(
        max_length=10,
        choices=Role.choices,
        default=Role.STUDENT,
        db_index=True,
        verbose_name=_("Role"),
    )

    department = models.ForeignKey(
        "academy.Department",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="members",
        verbose_name=_("Department"),
    )

    force_password_change = models.BooleanField(
        default=True,
        verbose_name=_("Force Password Change"),
        help_text=_("Require user to change password on next login for security"),
    )

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("User Profile")
        verbose_name_plural = _("User Profiles")
        db_table = "academy_profile"

    def __str__(self) -> str:
        return f"{self.user.username} Profile"

    def __repr__(self) -> str:
        return f"<Profile(user={self.user.username}, role={self.role})>"

    @property
    def needs_password_change(self) -> bool:
        return self.force_password_change

    def mark_password_changed(self) -> None:
        """
        Mark that user has changed their password.

        This method should be called after a successful password change
        to remove the force password change requirement.
        """
        self.force_password_change = False
        self.save(update_fields=["force_password_change", "updated_at"])


def full_name(user) -> str:
    """
    Get formatted full name of the user.

    Returns:
        First and last name, or the username if no names are set
    """
    name = f"{user.first_name} {user.last_name}".strip()
    return name or user.username


# --- Signal Handlers for Automatic Profile Management ---


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def create_user_profile(sender, instance, created: bool, **kwargs) -> None:
    """
    Automatically create a user profile when a new user is created.

    Superusers get the Admin role so that ``createsuperuser`` yields a usable
    platform administrator.
    """
    if created:
        role = Role.ADMIN if instance.is_superuser else Role.STUDENT
        Profile.objects.get_or_create(user=instance, defaults={"role": role})


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def save_user_profile(sender, instance, **kwargs) -> None:
    """
    Ensure user profile exists and is saved when user is saved.
    """
    try:
        instance.profile.save()
    except Profile.DoesNotExist:
        Profile.objects.create(user=instance)
