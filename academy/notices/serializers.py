"""
Academy Notice Serializers

Serializers:
- NoticeSerializer: Notice data with targeting validation on create
- NoticeUpdateSerializer: Editable notice fields
- NoticeDetailSerializer: Notice with audience description and read count

Author: Academy Development Team
Version: 1.0.0
"""

from typing import Any, Dict, List

from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from ..exceptions import AccessDenied, BusinessRuleViolation
from ..organization.models import Department, StudyGroup
from ..organization.serializers import UserSummarySerializer
from ..users.models import Role
from ..users.roles import department_id_of, role_of
from .models import Notice, TargetType


def _future(value):
    if value is not None and value <= timezone.now():
        raise serializers.ValidationError(_("Expiration date must be in the future"))
    return value


class NoticeSerializer(serializers.ModelSerializer):
    """
    Notice data.

    ``isRead`` is resolved from the ``read_ids`` set in the serializer
    context when the view provides it.
    """

    posted_by = UserSummarySerializer(read_only=True)
    department = serializers.PrimaryKeyRelatedField(
        queryset=Department.objects.all(), required=False, allow_null=True
    )
    groups = serializers.PrimaryKeyRelatedField(
        queryset=StudyGroup.objects.all(), many=True, required=False
    )
    target_roles = serializers.ListField(
        child=serializers.ChoiceField(choices=Role.choices), required=False
    )
    isRead = serializers.SerializerMethodField()

    class Meta:
        model = Notice
        fields = (
            "id",
            "title",
            "content",
            "posted_by",
            "target_type",
            "target_roles",
            "department",
            "groups",
            "priority",
            "expires_at",
            "is_active",
            "read_count",
            "isRead",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("id", "is_active", "read_count", "created_at", "updated_at")

    def get_isRead(self, obj: Notice) -> bool:
        read_ids = self.context.get("read_ids")
        if read_ids is not None:
            return obj.pk in read_ids
        request = self.context.get("request")
        if request is None or not request.user.is_authenticated:
            return False
        return obj.is_read_by(request.user)

    def validate_title(self, value: str) -> str:
        value = value.strip()
        if not value:
            raise serializers.ValidationError(_("Notice title is required"))
        return value

    def validate_content(self, value: str) -> str:
        value = value.strip()
        if not value:
            raise serializers.ValidationError(_("Notice content is required"))
        return value

    def validate_expires_at(self, value):
        return _future(value)

    def validate(self, attrs: Dict[str, Any]) -> Dict[str, Any]:
        user = self.context["request"].user
        role = role_of(user)
        target_type = attrs.get("target_type", TargetType.ALL)
        department = attrs.get("department")
        groups: List[StudyGroup] = attrs.get("groups", [])
        target_roles = attrs.get("target_roles", [])

        if target_type == TargetType.DEPARTMENT and department is None:
            raise BusinessRuleViolation(
                _("Department is required for department-specific notices")
            )
        if target_type == TargetType.GROUP and not groups:
            raise BusinessRuleViolation(
                _("At least one group is required for group-specific notices")
            )
        if target_type == TargetType.ROLE and not target_roles:
            raise BusinessRuleViolation(
                _("At least one target role is required for role-specific notices")
            )

        if department is not None:
            if not department.is_active:
                raise BusinessRuleViolation(_("Department not found or inactive"))
            if role == Role.HOD and department.pk != department_id_of(user):
                raise AccessDenied(_("Cannot create notice for another department"))

        if groups:
            if any(not group.is_active for group in groups):
                raise BusinessRuleViolation(_("Some groups are invalid or inactive"))
            if role == Role.TEACHER and any(group.teacher_id != user.pk for group in groups):
                raise AccessDenied(_("Can only create notices for groups you teach"))

        attrs["target_roles"] = list(dict.fromkeys(target_roles))
        return attrs


class NoticeUpdateSerializer(serializers.ModelSerializer):
    """Only the text, priority and expiry of a notice can be edited."""

    class Meta:
        model = Notice
        fields = ("title", "content", "priority", "expires_at")

    def validate_title(self, value: str) -> str:
        value = value.strip()
        if not value:
            raise serializers.ValidationError(_("Title cannot be empty"))
        return value

    def validate_content(self, value: str) -> str:
        value = value.strip()
        if not value:
            raise serializers.ValidationError(_("Content cannot be empty"))
        return value

    def validate_expires_at(self, value):
        return _future(value)


class NoticeDetailSerializer(NoticeSerializer):
    targetAudience = serializers.SerializerMethodField()
    readCount = serializers.IntegerField(source="read_count", read_only=True)

    class Meta(NoticeSerializer.Meta):
        fields = NoticeSerializer.Meta.fields + ("targetAudience", "readCount")

    def get_targetAudience(self, obj: Notice) -> str:
        return obj.target_audience()
