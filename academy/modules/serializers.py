"""
Academy Module Serializers

Serializers:
- QuestionSerializer: Question bank entries; answers hidden from students
- NoteSerializer: Study notes
- ModuleSerializer: Modules with validation of groups, prerequisites and tags
- PracticeAttemptSerializer: A student's practice answer to a question

Author: Academy Development Team
Version: 1.0.0
"""

from typing import Any, Dict, List

from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from ..exceptions import AccessDenied, BusinessRuleViolation
from ..organization.models import Department, StudyGroup
from ..organization.serializers import UserSummarySerializer
from ..users.models import Role
from ..users.roles import department_id_of, role_of
from .models import Module, Note, Question, QuestionType
from .services import build_prerequisite_graph, find_prerequisite_cycle

MAX_TAG_LENGTH = 50


def _request_user(serializer: serializers.Serializer):
    request = serializer.context.get("request")
    return getattr(request, "user", None)


def check_department_write_access(user, department: Department) -> None:
    """
    HODs and teachers may only create content for their own department.

    Raises:
        AccessDenied: The department is not the user's own
    """
    role = role_of(user)
    if role == Role.ADMIN:
        return
    if role == Role.HOD and department.hod_id == user.pk:
        return
    if department_id_of(user) != department.pk:
        raise AccessDenied(_("Can only manage content in your department"))


def _active_department(value: Department) -> Department:
    if not value.is_active:
        raise serializers.ValidationError(_("Department not found or inactive"))
    return value


class QuestionSerializer(serializers.ModelSerializer):
    department = serializers.PrimaryKeyRelatedField(queryset=Department.objects.all())
    created_by = UserSummarySerializer(read_only=True)

    class Meta:
        model = Question
        fields = (
            "id",
            "title",
            "text",
            "type",
            "difficulty",
            "department",
            "created_by",
            "options",
            "correct_option",
            "points",
            "is_active",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("id", "created_by", "created_at", "updated_at")

    def validate_department(self, value: Department) -> Department:
        value = _active_department(value)
        check_department_write_access(_request_user(self), value)
        return value

    def validate_options(self, value: Any) -> List[str]:
        if not isinstance(value, list) or not all(isinstance(o, str) for o in value):
            raise serializers.ValidationError(_("Options must be a list of strings"))
        return [option.strip() for option in value]

    def validate(self, attrs: Dict[str, Any]) -> Dict[str, Any]:
        question_type = attrs.get("type", getattr(self.instance, "type", QuestionType.MCQ))
        if question_type != QuestionType.MCQ:
            return attrs

        options = attrs.get("options", getattr(self.instance, "options", []))
        correct = attrs.get("correct_option", getattr(self.instance, "correct_option", None))
        if len(options) < 2:
            raise serializers.ValidationError(
                {"options": _("Multiple choice questions need at least two options")}
            )
        if correct is None or correct >= len(options):
            raise serializers.ValidationError(
                {"correct_option": _("Correct option must be an index into options")}
            )
        return attrs

    def to_representation(self, instance: Question) -> Dict[str, Any]:
        data = super().to_representation(instance)
        if role_of(_request_user(self)) == Role.STUDENT:
            data.pop("correct_option", None)
        return data


class NoteSerializer(serializers.ModelSerializer):
    department = serializers.PrimaryKeyRelatedField(queryset=Department.objects.all())
    uploaded_by = UserSummarySerializer(read_only=True)

    class Meta:
        model = Note
        fields = (
            "id",
            "title",
            "content",
            "department",
            "uploaded_by",
            "attachment_url",
            "is_active",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("id", "uploaded_by", "created_at", "updated_at")

    def validate_department(self, value: Department) -> Department:
        value = _active_department(value)
        check_department_write_access(_request_user(self), value)
        return value


class ModuleSerializer(serializers.ModelSerializer):
    """
    Module data with counts.

    Validation Rules:
    - department must be active and, for HODs, their own
    - groups must be active groups of the department; teachers may only
      assign groups they teach
    - prerequisites must be active modules of the department and must not
      create a cycle
    - tags are trimmed, lower cased and limited to 50 characters
    """

    department = serializers.PrimaryKeyRelatedField(queryset=Department.objects.all())
    groups = serializers.PrimaryKeyRelatedField(
        queryset=StudyGroup.objects.all(), many=True, required=False
    )
    prerequisites = serializers.PrimaryKeyRelatedField(
        queryset=Module.objects.all(), many=True, required=False
    )
    tags = serializers.ListField(
        child=serializers.CharField(allow_blank=True), required=False
    )
    created_by = UserSummarySerializer(read_only=True)
    questionCount = serializers.SerializerMethodField()
    noteCount = serializers.SerializerMethodField()
    assessmentCount = serializers.SerializerMethodField()

    class Meta:
        model = Module
        fields = (
            "id",
            "title",
            "description",
            "department",
            "groups",
            "created_by",
            "difficulty",
            "estimated_hours",
            "tags",
            "prerequisites",
            "questions",
            "notes",
            "sort_order",
            "is_active",
            "questionCount",
            "noteCount",
            "assessmentCount",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("id", "questions", "notes", "created_by", "created_at", "updated_at")

    def get_questionCount(self, obj: Module) -> int:
        value = getattr(obj, "question_count", None)
        return obj.questions.filter(is_active=True).count() if value is None else value

    def get_noteCount(self, obj: Module) -> int:
        value = getattr(obj, "note_count", None)
        return obj.notes.filter(is_active=True).count() if value is None else value

    def get_assessmentCount(self, obj: Module) -> int:
        value = getattr(obj, "assessment_count", None)
        return obj.assessments.filter(is_active=True).count() if value is None else value

    def validate_title(self, value: str) -> str:
        value = value.strip()
        if not value:
            raise serializers.ValidationError(_("Module title cannot be empty"))
        return value

    def validate_tags(self, value: List[str]) -> List[str]:
        tags = []
        for tag in value:
            tag = tag.strip().lower()
            if len(tag) > MAX_TAG_LENGTH:
                raise serializers.ValidationError(
                    _("Each tag cannot exceed 50 characters")
                )
            if tag and tag not in tags:
                tags.append(tag)
        return tags

    def validate(self, attrs: Dict[str, Any]) -> Dict[str, Any]:
        user = _request_user(self)
        department = attrs.get("department")
        if self.instance is not None:
            if department is not None and department.pk != self.instance.department_id:
                raise serializers.ValidationError(
                    {"department": _("Department cannot be changed")}
                )
            department = self.instance.department
        else:
            _active_department(department)
            check_department_write_access(user, department)

        if "groups" in attrs:
            self._validate_groups(attrs["groups"], department, user)
        if "prerequisites" in attrs:
            self._validate_prerequisites(attrs["prerequisites"], department)
        return attrs

    def _validate_groups(self, groups: List[StudyGroup], department: Department, user) -> None:
        for group in groups:
            if not group.is_active or group.department_id != department.pk:
                raise BusinessRuleViolation(
                    _("Some groups are invalid or not in the specified department")
                )
        if role_of(user) == Role.TEACHER and any(g.teacher_id != user.pk for g in groups):
            raise AccessDenied(_("Can only assign modules to groups you teach"))

    def _validate_prerequisites(self, modules: List[Module], department: Department) -> None:
        module_id = self.instance.pk if self.instance is not None else None
        for prerequisite in modules:
            if module_id is not None and prerequisite.pk == module_id:
                raise BusinessRuleViolation(_("Module cannot be a prerequisite of itself"))
            if not prerequisite.is_active or prerequisite.department_id != department.pk:
                raise BusinessRuleViolation(
                    _("Some prerequisite modules are invalid or not in the same department")
                )

        if module_id is None:
            # A module without an id has no incoming edges yet.
            return
        graph = build_prerequisite_graph(
            department.pk, module_id, [m.pk for m in modules]
        )
        if find_prerequisite_cycle(graph, start=module_id) is not None:
            raise BusinessRuleViolation(_("Circular dependency detected in prerequisites"))


class ModuleDetailSerializer(ModuleSerializer):
    groups_detail = serializers.SerializerMethodField()
    prerequisites_detail = serializers.SerializerMethodField()

    class Meta(ModuleSerializer.Meta):
        fields = ModuleSerializer.Meta.fields + ("groups_detail", "prerequisites_detail")

    def get_groups_detail(self, obj: Module) -> list:
        return [
            {"id": g.id, "name": g.name, "code": g.code}
            for g in obj.groups.filter(is_active=True).order_by("name")
        ]

    def get_prerequisites_detail(self, obj: Module) -> list:
        return [
            {"id": m.id, "title": m.title, "difficulty": m.difficulty}
            for m in obj.prerequisites.filter(is_active=True)
        ]


class PracticeAttemptSerializer(serializers.Serializer):
    selectedOption = serializers.IntegerField(min_value=0, required=False)
    passed = serializers.BooleanField(required=False)

    def validate(self, attrs: Dict[str, Any]) -> Dict[str, Any]:
        question: Question = self.context["question"]
        if question.type == QuestionType.MCQ and "selectedOption" not in attrs:
            raise serializers.ValidationError({"selectedOption": _("This field is required.")})
        if question.type == QuestionType.CODING and "passed" not in attrs:
            raise serializers.ValidationError({"passed": _("This field is required.")})
        return attrs
