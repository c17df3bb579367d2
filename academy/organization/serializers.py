"""
Academy Organization Serializers

Serializers:
- UserSummarySerializer: Compact user representation used in nested data
- DepartmentSerializer: Department with member counts
- DepartmentDetailSerializer: Department with its active groups
- StudyGroupSerializer: Group with teacher, students and counts

Author: Academy Development Team
Version: 1.0.0
"""

import re
from typing import Any, Dict, Optional

from django.contrib.auth.models import User
from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from ..exceptions import BusinessRuleViolation
from ..users.models import Role, full_name
from ..users.roles import role_of
from .models import Department, StudyGroup

DEPARTMENT_CODE_PATTERN = re.compile(r"[A-Z]{2,6}")


class UserSummarySerializer(serializers.ModelSerializer):
    full_name = serializers.SerializerMethodField()
    role = serializers.CharField(source="profile.role", read_only=True)

    class Meta:
        model = User
        fields = ("id", "email", "first_name", "last_name", "full_name", "role")
        read_only_fields = fields

    def get_full_name(self, obj: User) -> str:
        return full_name(obj)


def _annotated_or(obj, attr: str, fallback):
    value = getattr(obj, attr, None)
    return fallback() if value is None else value


class DepartmentSerializer(serializers.ModelSerializer):
    """
    Department data with active member and group counts.

    The counts are read from queryset annotations when present
    (``teacher_count``, ``student_count``, ``group_count``) and queried
    otherwise.
    """

    hod = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.filter(is_active=True), required=False, allow_null=True
    )
    hod_detail = UserSummarySerializer(source="hod", read_only=True)
    teacherCount = serializers.SerializerMethodField()
    studentCount = serializers.SerializerMethodField()
    groupCount = serializers.SerializerMethodField()

    class Meta:
        model = Department
        fields = (
            "id",
            "name",
            "code",
            "description",
            "hod",
            "hod_detail",
            "is_active",
            "teacherCount",
            "studentCount",
            "groupCount",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("id", "created_at", "updated_at")
        # Uniqueness is checked in validate_name / validate_code
        extra_kwargs = {"name": {"validators": []}, "code": {"validators": []}}

    def _member_count(self, obj: Department, role: str) -> int:
        return obj.members.filter(role=role, user__is_active=True).count()

    def get_teacherCount(self, obj: Department) -> int:
        return _annotated_or(obj, "teacher_count", lambda: self._member_count(obj, Role.TEACHER))

    def get_studentCount(self, obj: Department) -> int:
        return _annotated_or(obj, "student_count", lambda: self._member_count(obj, Role.STUDENT))

    def get_groupCount(self, obj: Department) -> int:
        return _annotated_or(
            obj, "group_count", lambda: obj.groups.filter(is_active=True).count()
        )

    def _others(self):
        return Department.objects.exclude(pk=getattr(self.instance, "pk", None))

    def validate_name(self, value: str) -> str:
        value = value.strip()
        if not value:
            raise serializers.ValidationError(_("Department name is required"))
        if self._others().filter(name__iexact=value).exists():
            raise BusinessRuleViolation(_("Department name already exists"))
        return value

    def validate_code(self, value: str) -> str:
        value = value.strip().upper()
        if not DEPARTMENT_CODE_PATTERN.fullmatch(value):
            raise serializers.ValidationError(
                _("Department code must be 2-6 letters")
            )
        if self._others().filter(code=value).exists():
            raise BusinessRuleViolation(_("Department code already exists"))
        return value

    def validate_description(self, value: str) -> str:
        return value.strip()

    def validate_hod(self, value: Optional[User]) -> Optional[User]:
        if value is not None and role_of(value) != Role.HOD:
            raise BusinessRuleViolation(_("HOD must be a user with HOD role"))
        return value


class GroupInDepartmentSerializer(serializers.ModelSerializer):
    teacher = UserSummarySerializer(read_only=True)
    students = UserSummarySerializer(many=True, read_only=True)

    class Meta:
        model = StudyGroup
        fields = ("id", "name", "code", "teacher", "students")


class DepartmentDetailSerializer(DepartmentSerializer):
    moduleCount = serializers.SerializerMethodField()
    groups = serializers.SerializerMethodField()

    class Meta(DepartmentSerializer.Meta):
        fields = DepartmentSerializer.Meta.fields + ("moduleCount", "groups")

    def get_moduleCount(self, obj: Department) -> int:
        return obj.modules.filter(is_active=True).count()

    def get_groups(self, obj: Department) -> list:
        groups = (
            obj.groups.filter(is_active=True)
            .select_related("teacher__profile")
            .prefetch_related("students__profile")
            .order_by("name")
        )
        return GroupInDepartmentSerializer(groups, many=True).data


class StudyGroupSerializer(serializers.ModelSerializer):
    """
    Study group data.

    ``teacher`` and ``students`` are written as ids and read back expanded in
    ``teacher_detail`` and ``students_detail``.
    """

    department = serializers.PrimaryKeyRelatedField(queryset=Department.objects.all())
    teacher = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.filter(is_active=True), required=False, allow_null=True
    )
    students = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.filter(is_active=True), many=True, required=False
    )
    teacher_detail = UserSummarySerializer(source="teacher", read_only=True)
    department_name = serializers.CharField(source="department.name", read_only=True)
    studentCount = serializers.SerializerMethodField()
    moduleCount = serializers.SerializerMethodField()

    class Meta:
        model = StudyGroup
        fields = (
            "id",
            "name",
            "code",
            "department",
            "department_name",
            "teacher",
            "teacher_detail",
            "students",
            "description",
            "is_active",
            "studentCount",
            "moduleCount",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("id", "created_at", "updated_at")
        validators = []

    def get_studentCount(self, obj: StudyGroup) -> int:
        return _annotated_or(obj, "student_count", lambda: obj.students.count())

    def get_moduleCount(self, obj: StudyGroup) -> int:
        return _annotated_or(
            obj, "module_count", lambda: obj.modules.filter(is_active=True).count()
        )

    def validate_code(self, value: str) -> str:
        return value.strip().upper()

    def validate(self, attrs: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validate department, teacher, students and code uniqueness.

        Raises:
            ValidationError: Inactive department, teacher or students outside
                the department, duplicate code
        """
        department = attrs.get("department") or getattr(self.instance, "department", None)
        if department is not None and not department.is_active:
            raise serializers.ValidationError({"department": _("Department is not active")})

        teacher = attrs.get("teacher")
        if teacher is not None:
            if role_of(teacher) != Role.TEACHER:
                raise serializers.ValidationError(
                    {"teacher": _("Teacher must be a user with Teacher role")}
                )
            if teacher.profile.department_id != department.id:
                raise serializers.ValidationError(
                    {"teacher": _("Teacher must belong to the group's department")}
                )

        for student in attrs.get("students") or []:
            if role_of(student) != Role.STUDENT or student.profile.department_id != department.id:
                raise serializers.ValidationError(
                    {"students": _("Students must be Student users of the group's department")}
                )

        code = attrs.get("code") or getattr(self.instance, "code", None)
        duplicates = StudyGroup.objects.filter(department=department, code=code)
        if self.instance is not None:
            duplicates = duplicates.exclude(pk=self.instance.pk)
        if code and duplicates.exists():
            raise BusinessRuleViolation(_("Group code already exists in this department"))
        return attrs
