"""
Academy Organization Models

Models:
- Department: Top level unit, optionally led by a head of department (HOD)
- StudyGroup: Class of students inside a department, led by a teacher

Both are soft deleted through ``is_active``.

Author: Academy Development Team
Version: 1.0.0
"""

from django.conf import settings
from django.core.validators import RegexValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

department_code_validator = RegexValidator(
    regex=r"^[A-Za-z]{2,6}$",
    message=_("Department code must be 2-6 letters"),
)


class Department(models.Model):
    """
    Academic department.

    Attributes:
        name: Unique department name
        code: Unique 2-6 letter code, stored upper case
        description: Optional free text
        hod: Head of department (a user with the HOD role)
        is_active: Soft delete flag
    """

    name = models.CharField(_("Name"), max_length=100, unique=True)
    code = models.CharField(
        _("Code"),
        max_length=6,
        unique=True,
        validators=[department_code_validator],
    )
    description = models.CharField(_("Description"), max_length=500, blank=True)
    hod = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="headed_departments",
        verbose_name=_("Head of Department"),
    )
    is_active = models.BooleanField(_("Active"), default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        verbose_name = _("Department")
        verbose_name_plural = _("Departments")

    def __str__(self) -> str:
        return f"{self.name} ({self.code})"

    def save(self, *args, **kwargs):
        if self.code:
            self.code = self.code.upper()
        super().save(*args, **kwargs)


class StudyGroup(models.Model):
    """
    A group of students within a department.

    Attributes:
        name: Display name
        code: Short code, unique within the department
        department: Owning department
        teacher: Teacher responsible for the group
        students: Member users
        is_active: Soft delete flag
    """

    name = models.CharField(_("Name"), max_length=100)
    code = models.CharField(_("Code"), max_length=20)
    department = models.ForeignKey(
        Department,
        on_delete=models.CASCADE,
        related_name="groups",
        verbose_name=_("Department"),
    )
    teacher = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="taught_groups",
        verbose_name=_("Teacher"),
    )
    students = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        blank=True,
        related_name="study_groups",
        verbose_name=_("Students"),
    )
    description = models.CharField(_("Description"), max_length=500, blank=True)
    is_active = models.BooleanField(_("Active"), default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        verbose_name = _("Study Group")
        verbose_name_plural = _("Study Groups")
        constraints = [
            models.UniqueConstraint(
                fields=["department", "code"], name="unique_group_code_per_department"
            )
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.department.code})"
