"""
Academy Assessment Views

Views:
- AssessmentViewSet: Assessment CRUD, starting and submitting attempts,
  submission listings

Read scope:
- Admin: every assessment
- HOD: assessments of the department they lead
- Teacher: assessments they created or assigned to their groups
- Student: active assessments assigned to their groups

Author: Academy Development Team
Version: 1.0.0
"""

import logging
from typing import Optional

from django.db import transaction
from django.db.models import Q, QuerySet
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response

from ...exceptions import AccessDenied, BusinessRuleViolation
from ...responses import success_response
from ...users.models import Role
from ...users.roles import group_ids_of, role_of, taught_group_ids_of
from ...utils import parse_bool, parse_id
from ...viewsets import AcademyModelViewSet
from ..models import Assessment, AssessmentSubmission
from ..serializers import (
    AssessmentSerializer,
    AssessmentSubmissionSerializer,
    SubmitAnswersSerializer,
)
from ..services import grade_submission, record_assessment_result

logger = logging.getLogger(__name__)


def scope_assessments(queryset: QuerySet, user) -> QuerySet:
    role = role_of(user)
    if role == Role.ADMIN:
        return queryset
    if role == Role.HOD:
        return queryset.filter(department__hod=user)
    if role == Role.TEACHER:
        my_groups = group_ids_of(user) | taught_group_ids_of(user)
        return queryset.filter(Q(created_by=user) | Q(groups__in=my_groups)).distinct()
    return queryset.filter(is_active=True, groups__in=group_ids_of(user)).distinct()


def can_manage_assessment(user, assessment: Assessment) -> bool:
    role = role_of(user)
    if role == Role.ADMIN:
        return True
    if role == Role.HOD:
        return assessment.department.hod_id == user.pk
    if role == Role.TEACHER:
        return assessment.created_by_id == user.pk
    return False


class AssessmentViewSet(AcademyModelViewSet):
    """
    Assessment management and taking.

    Query Parameters (list):
    - isActive: true/false (staff only; students only see active ones)
    - department, group: exact filters
    """

    resource_name = "Assessment"
    serializer_class = AssessmentSerializer
    action_permissions = {
        "create": "manage_assessments",
        "update": "manage_assessments",
        "partial_update": "manage_assessments",
        "destroy": "manage_assessments",
        "submissions": "manage_assessments",
        "start": "take_assessments",
        "submit": "take_assessments",
        "my_submissions": "take_assessments",
    }

    def get_queryset(self) -> QuerySet[Assessment]:
        queryset = scope_assessments(
            Assessment.objects.select_related("department", "created_by__profile").prefetch_related(
                "groups", "modules"
            ),
            self.request.user,
        )
        if self.action == "list":
            params = self.request.query_params
            is_active = parse_bool(params.get("isActive"))
            if is_active is not None:
                queryset = queryset.filter(is_active=is_active)
            if params.get("department"):
                queryset = queryset.filter(department_id=parse_id(params["department"], "department"))
            if params.get("group"):
                queryset = queryset.filter(groups__id=parse_id(params["group"], "group"))
        return queryset.order_by("-start_time")

    def get_managed_object(self) -> Assessment:
        assessment = self.get_object()
        if not can_manage_assessment(self.request.user, assessment):
            raise AccessDenied(_("You do not have permission to manage this assessment"))
        return assessment

    def perform_create(self, serializer: AssessmentSerializer) -> None:
        assessment = serializer.save(created_by=self.request.user)
        logger.info("Assessment %s created by user %s", assessment.pk, self.request.user.pk)

    def update(self, request: Request, *args, **kwargs) -> Response:
        assessment = self.get_managed_object()
        if assessment.submissions.exists() and "questions" in request.data:
            raise BusinessRuleViolation(
                _("Questions cannot be changed after students have started")
            )
        return super().update(request, *args, **kwargs)

    def destroy(self, request: Request, *args, **kwargs) -> Response:
        assessment = self.get_managed_object()
        self.perform_destroy(assessment)
        return success_response(message=_("Assessment deleted successfully"))

    @action(detail=True, methods=["post"], url_path="start")
    def start(self, request: Request, pk: Optional[str] = None) -> Response:
        """
        Start (or resume) the student's attempt.

        The assessment must be active, assigned to one of the student's
        groups and within its time window.
        """
        assessment = self.get_object()
        now = timezone.now()
        if now < assessment.start_time:
            raise BusinessRuleViolation(_("Assessment has not started yet"))
        if now > assessment.end_time:
            raise BusinessRuleViolation(_("Assessment has ended"))

        submission, created = AssessmentSubmission.objects.get_or_create(
            assessment=assessment,
            student=request.user,
            defaults={
                "department_id": assessment.department_id,
                "started_at": now,
            },
        )
        if submission.is_submitted:
            raise BusinessRuleViolation(_("Assessment already submitted"))
        if created:
            logger.info("Student %s started assessment %s", request.user.pk, assessment.pk)

        return success_response(
            data={
                "submission": AssessmentSubmissionSerializer(submission).data,
                "assessment": self.get_serializer(assessment).data,
            },
            message=_("Assessment started") if created else _("Assessment resumed"),
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    @action(detail=True, methods=["post"], url_path="submit")
    def submit(self, request: Request, pk: Optional[str] = None) -> Response:
        """
        Submit answers and grade the attempt.

        Request Body:
            mcqAnswers: [{"question": id, "selectedOption": index}]
            codingAnswers: [{"question": id, "score": points, "attempts": n}]
        """
        assessment = self.get_object()
        serializer = SubmitAnswersSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        with transaction.atomic():
            submission = (
                AssessmentSubmission.objects.select_for_update()
                .filter(assessment=assessment, student=request.user)
                .first()
            )
            if submission is None:
                raise BusinessRuleViolation(_("Assessment has not been started"))
            if submission.is_submitted:
                raise BusinessRuleViolation(_("Assessment already submitted"))
            if timezone.now() > assessment.end_time:
                raise BusinessRuleViolation(_("Assessment time is over"))

            graded = grade_submission(
                submission,
                serializer.validated_data["mcqAnswers"],
                serializer.validated_data["codingAnswers"],
            )
            record_assessment_result(submission, graded.total_points)

        return success_response(
            data={
                "submission": AssessmentSubmissionSerializer(submission).data,
                "totalPoints": graded.total_points,
                "percentage": round(graded.percentage, 2),
                "passed": graded.total_score >= assessment.passing_score,
            },
            message=_("Assessment submitted successfully"),
        )

    @action(detail=True, methods=["get"], url_path="submissions")
    def submissions(self, request: Request, pk: Optional[str] = None) -> Response:
        assessment = self.get_managed_object()
        queryset = assessment.submissions.select_related(
            "student__profile", "assessment"
        ).order_by("-total_score", "submitted_at")
        page = self.paginate_queryset(queryset)
        data = AssessmentSubmissionSerializer(page, many=True).data
        return self.get_paginated_response(data)

    @action(detail=False, methods=["get"], url_path="my-submissions")
    def my_submissions(self, request: Request) -> Response:
        queryset = AssessmentSubmission.objects.filter(student=request.user).select_related(
            "assessment", "student__profile"
        )
        page = self.paginate_queryset(queryset)
        data = AssessmentSubmissionSerializer(page, many=True).data
        return self.get_paginated_response(data)
