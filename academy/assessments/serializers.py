"""
Academy Assessment Serializers

Serializers:
- AssessmentSerializer: Assessments with their questions and points
- AssessmentSubmissionSerializer: Submission results
- SubmitAnswersSerializer: Answers sent when submitting an assessment

Author: Academy Development Team
Version: 1.0.0
"""

from typing import Any, Dict, List

from django.db import transaction
from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from ..exceptions import AccessDenied, BusinessRuleViolation
from ..modules.models import Module, Question
from ..modules.serializers import QuestionSerializer, check_department_write_access
from ..organization.models import Department, StudyGroup
from ..organization.serializers import UserSummarySerializer
from ..users.models import Role
from ..users.roles import role_of
from .models import Assessment, AssessmentQuestion, AssessmentSubmission


class AssessmentQuestionInputSerializer(serializers.Serializer):
    question = serializers.PrimaryKeyRelatedField(queryset=Question.objects.all())
    points = serializers.IntegerField(min_value=0, required=False)
    order = serializers.IntegerField(min_value=0, required=False)


class AssessmentSerializer(serializers.ModelSerializer):
    """
    Assessment data.

    ``questions`` is written as ``[{"question": id, "points": n, "order": n}]``;
    points default to the question's own points. Reads return the questions
    in ``questions_detail`` (without answers for students).
    """

    department = serializers.PrimaryKeyRelatedField(queryset=Department.objects.all())
    groups = serializers.PrimaryKeyRelatedField(
        queryset=StudyGroup.objects.all(), many=True, required=False
    )
    modules = serializers.PrimaryKeyRelatedField(
        queryset=Module.objects.all(), many=True, required=False
    )
    questions = AssessmentQuestionInputSerializer(many=True, write_only=True, required=False)
    questions_detail = serializers.SerializerMethodField()
    created_by = UserSummarySerializer(read_only=True)
    totalPoints = serializers.SerializerMethodField()
    endTime = serializers.DateTimeField(source="end_time", read_only=True)

    class Meta:
        model = Assessment
        fields = (
            "id",
            "title",
            "description",
            "department",
            "groups",
            "modules",
            "questions",
            "questions_detail",
            "created_by",
            "start_time",
            "duration",
            "endTime",
            "passing_score",
            "totalPoints",
            "is_active",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("id", "created_by", "created_at", "updated_at")

    def get_totalPoints(self, obj: Assessment) -> int:
        return obj.total_points

    def get_questions_detail(self, obj: Assessment) -> List[Dict[str, Any]]:
        links = obj.assessment_questions.select_related("question")
        return [
            {
                "points": link.points,
                "order": link.order,
                "question": QuestionSerializer(link.question, context=self.context).data,
            }
            for link in links
        ]

    def validate(self, attrs: Dict[str, Any]) -> Dict[str, Any]:
        request = self.context.get("request")
        user = getattr(request, "user", None)

        department = attrs.get("department")
        if self.instance is not None:
            if department is not None and department.pk != self.instance.department_id:
                raise serializers.ValidationError({"department": _("Department cannot be changed")})
            department = self.instance.department
        else:
            if not department.is_active:
                raise serializers.ValidationError({"department": _("Department not found or inactive")})
            check_department_write_access(user, department)

        for group in attrs.get("groups", []):
            if not group.is_active or group.department_id != department.pk:
                raise BusinessRuleViolation(_("Some groups are invalid or not in the department"))
            if role_of(user) == Role.TEACHER and group.teacher_id != user.pk:
                raise AccessDenied(_("Can only assign assessments to groups you teach"))
        for module in attrs.get("modules", []):
            if not module.is_active or module.department_id != department.pk:
                raise BusinessRuleViolation(_("Some modules are invalid or not in the department"))

        questions = attrs.get("questions")
        if questions is not None:
            seen = set()
            for item in questions:
                question = item["question"]
                if not question.is_active or question.department_id != department.pk:
                    raise BusinessRuleViolation(
                        _("Some questions are invalid or not in the department")
                    )
                if question.pk in seen:
                    raise serializers.ValidationError({"questions": _("Duplicate question")})
                seen.add(question.pk)
            total = sum(item.get("points", item["question"].points) for item in questions)
        else:
            total = self.instance.total_points if self.instance is not None else 0

        passing = attrs.get("passing_score", getattr(self.instance, "passing_score", 0))
        if passing > total:
            raise serializers.ValidationError(
                {"passing_score": _("Passing score cannot exceed the total points")}
            )
        return attrs

    def _save_questions(self, assessment: Assessment, questions: List[Dict[str, Any]]) -> None:
        assessment.assessment_questions.all().delete()
        AssessmentQuestion.objects.bulk_create(
            AssessmentQuestion(
                assessment=assessment,
                question=item["question"],
                points=item.get("points", item["question"].points),
                order=item.get("order", index),
            )
            for index, item in enumerate(questions)
        )

    @transaction.atomic
    def create(self, validated_data: Dict[str, Any]) -> Assessment:
        questions = validated_data.pop("questions", [])
        assessment = super().create(validated_data)
        self._save_questions(assessment, questions)
        return assessment

    @transaction.atomic
    def update(self, instance: Assessment, validated_data: Dict[str, Any]) -> Assessment:
        questions = validated_data.pop("questions", None)
        assessment = super().update(instance, validated_data)
        if questions is not None:
            self._save_questions(assessment, questions)
        return assessment


class AssessmentSubmissionSerializer(serializers.ModelSerializer):
    student = UserSummarySerializer(read_only=True)
    assessment_title = serializers.CharField(source="assessment.title", read_only=True)
    percentage = serializers.SerializerMethodField()
    passed = serializers.SerializerMethodField()

    class Meta:
        model = AssessmentSubmission
        fields = (
            "id",
            "assessment",
            "assessment_title",
            "student",
            "status",
            "started_at",
            "submitted_at",
            "time_taken",
            "mcq_score",
            "coding_score",
            "total_score",
            "percentage",
            "passed",
        )
        read_only_fields = fields

    def get_percentage(self, obj: AssessmentSubmission) -> float:
        total = obj.assessment.total_points
        return round(obj.total_score / total * 100, 2) if total else 0

    def get_passed(self, obj: AssessmentSubmission) -> bool:
        return obj.is_submitted and obj.total_score >= obj.assessment.passing_score


class McqAnswerInputSerializer(serializers.Serializer):
    question = serializers.IntegerField(min_value=1)
    selectedOption = serializers.IntegerField(min_value=0, allow_null=True, required=False)


class CodingAnswerInputSerializer(serializers.Serializer):
    question = serializers.IntegerField(min_value=1)
    score = serializers.FloatField(min_value=0, required=False, default=0)
    attempts = serializers.IntegerField(min_value=1, required=False, default=1)


class SubmitAnswersSerializer(serializers.Serializer):
    mcqAnswers = McqAnswerInputSerializer(many=True, required=False, default=list)
    codingAnswers = CodingAnswerInputSerializer(many=True, required=False, default=list)
