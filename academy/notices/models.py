"""
Academy Notice Models

Models:
- Notice: Announcement targeted at everyone, a department, groups or roles
- NoticeRead: Records that a user has read a notice

Author: Academy Development Team
Version: 1.0.0
"""

from django.conf import settings
from django.db import IntegrityError, models, transaction
from django.db.models import F, Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from ..users.models import Role
from ..users.roles import department_id_of, group_ids_of, role_of


class TargetType(models.TextChoices):
    ALL = "all", _("All users")
    DEPARTMENT = "department", _("Department")
    GROUP = "group", _("Groups")
    ROLE = "role", _("Roles")


class Priority(models.TextChoices):
    LOW = "low", _("Low")
    MEDIUM = "medium", _("Medium")
    HIGH = "high", _("High")


PRIORITY_RANK = {Priority.HIGH.value: 3, Priority.MEDIUM.value: 2, Priority.LOW.value: 1}


class NoticeQuerySet(models.QuerySet):
    def unexpired(self, now=None):
        now = now or timezone.now()
        return self.filter(Q(expires_at__isnull=True) | Q(expires_at__gt=now))

    def expired(self, now=None):
        now = now or timezone.now()
        return self.filter(expires_at__isnull=False, expires_at__lte=now)

    def visible(self, now=None):
        return self.filter(is_active=True).unexpired(now)

    def by_priority(self):
        """Order high to low priority, newest first within a priority."""
        return self.annotate(
            priority_rank=models.Case(
                *[
                    models.When(priority=value, then=models.Value(rank))
                    for value, rank in PRIORITY_RANK.items()
                ],
                default=models.Value(0),
                output_field=models.IntegerField(),
            )
        ).order_by("-priority_rank", "-created_at")


class Notice(models.Model):
    """
    Announcement with audience targeting.

    Attributes:
        target_type: Which audience field applies
        target_roles: Role names for ``role`` notices
        department: Department for ``department`` notices
        groups: Groups for ``group`` notices
        expires_at: Optional expiry; expired notices are hidden
        read_count: Number of distinct readers
    """

    title = models.CharField(_("Title"), max_length=200)
    content = models.TextField(_("Content"))
    posted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="posted_notices",
    )
    target_type = models.CharField(
        _("Target type"),
        max_length=12,
        choices=TargetType.choices,
        default=TargetType.ALL,
    )
    target_roles = models.JSONField(_("Target roles"), default=list, blank=True)
    department = models.ForeignKey(
        "academy.Department",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="notices",
    )
    groups = models.ManyToManyField(
        "academy.StudyGroup", blank=True, related_name="notices"
    )
    priority = models.CharField(
        _("Priority"),
        max_length=6,
        choices=Priority.choices,
        default=Priority.MEDIUM,
    )
    expires_at = models.DateTimeField(_("Expires at"), null=True, blank=True)
    is_active = models.BooleanField(_("Active"), default=True)
    read_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = NoticeQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        verbose_name = _("Notice")
        verbose_name_plural = _("Notices")

    def __str__(self) -> str:
        return self.title

    @property
    def is_expired(self) -> bool:
        return self.expires_at is not None and self.expires_at <= timezone.now()

    def has_access(self, user) -> bool:
        """
        Check whether ``user`` is part of the notice's audience.

        Admins always have access. Inactive or expired notices are not
        accessible to anyone else.
        """

        role = role_of(user)
        if role == Role.ADMIN:
            return True
        if not self.is_active or self.is_expired:
            return False

        if self.target_type == TargetType.ALL:
            return True
        if self.target_type == TargetType.ROLE:
            return role in (self.target_roles or [])
        if self.target_type == TargetType.DEPARTMENT:
            dept_id = department_id_of(user)
            return dept_id is not None and dept_id == self.department_id
        if self.target_type == TargetType.GROUP:
            notice_groups = set(self.groups.values_list("id", flat=True))
            return bool(notice_groups & group_ids_of(user))
        return False

    def target_audience(self) -> str:
        if self.target_type == TargetType.ALL:
            return "All users"
        if self.target_type == TargetType.DEPARTMENT:
            return f"Department: {self.department.name if self.department else 'Unknown'}"
        if self.target_type == TargetType.GROUP:
            names = ", ".join(self.groups.values_list("name", flat=True))
            return f"Groups: {names}"
        if self.target_type == TargetType.ROLE:
            return f"Roles: {', '.join(self.target_roles or [])}"
        return "Unknown"

    def is_read_by(self, user) -> bool:
        return self.reads.filter(user=user).exists()

    def mark_as_read(self, user) -> bool:
        """
        Record that ``user`` read the notice.

        Returns:
            True when this was the first read by the user
        """
        try:
            with transaction.atomic():
                NoticeRead.objects.create(notice=self, user=user)
        except IntegrityError:
            return False
        Notice.objects.filter(pk=self.pk).update(read_count=F("read_count") + 1)
        self.refresh_from_db(fields=["read_count"])
        return True


class NoticeRead(models.Model):
    notice = models.ForeignKey(Notice, on_delete=models.CASCADE, related_name="reads")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="notice_reads"
    )
    read_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-read_at"]
        constraints = [
            models.UniqueConstraint(fields=["notice", "user"], name="unique_notice_read")
        ]

    def __str__(self) -> str:
        return f"{self.user.username} read {self.notice.title}"


def deactivate_expired_notices(now=None) -> int:
    """
    Deactivate active notices whose expiry has passed.

    Returns:
        Number of notices deactivated
    """
    return Notice.objects.filter(is_active=True).expired(now).update(is_active=False)
