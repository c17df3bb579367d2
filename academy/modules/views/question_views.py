"""
Academy Question and Note Views

Views:
- QuestionViewSet: Question bank CRUD and student practice attempts
- NoteViewSet: Study note CRUD

Scope:
- Admin: everything
- HOD: the department they lead
- Teacher: their department; writes only to content they created
- Student: active content of active modules assigned to their groups

Author: Academy Development Team
Version: 1.0.0
"""

import logging
from typing import Optional

from django.db.models import Q, QuerySet
from django.utils.translation import gettext_lazy as _
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response

from ...assessments.services import record_practice_attempt
from ...exceptions import AccessDenied
from ...responses import success_response
from ...users.models import Role
from ...users.roles import department_id_of, group_ids_of, role_of
from ...utils import parse_bool, parse_id
from ...viewsets import AcademyModelViewSet
from ..models import Note, Question, QuestionType
from ..serializers import NoteSerializer, PracticeAttemptSerializer, QuestionSerializer

logger = logging.getLogger(__name__)


def scope_department_content(queryset: QuerySet, user) -> QuerySet:
    """Narrow a question or note queryset to what ``user`` may see."""
    role = role_of(user)
    if role == Role.ADMIN:
        return queryset
    if role == Role.HOD:
        return queryset.filter(department__hod=user)
    if role == Role.TEACHER:
        return queryset.filter(department_id=department_id_of(user))
    return queryset.filter(
        is_active=True,
        modules__is_active=True,
        modules__groups__in=group_ids_of(user),
    ).distinct()


def can_write_content(user, item, owner_field: str) -> bool:
    role = role_of(user)
    if role == Role.ADMIN:
        return True
    if role == Role.HOD:
        return item.department.hod_id == user.pk
    if role == Role.TEACHER:
        return getattr(item, f"{owner_field}_id") == user.pk
    return False


class DepartmentContentViewSet(AcademyModelViewSet):
    """
    Shared list filtering for department owned content.

    Query Parameters (list):
    - department: Department id
    - search: Matches the title and text fields
    - isActive: true/false, defaults to true
    """

    model = None
    owner_field = "created_by"
    search_fields = ("title",)

    def get_writable_object(self):
        item = self.get_object()
        if not can_write_content(self.request.user, item, self.owner_field):
            raise AccessDenied(
                _("You do not have permission to modify this %(resource)s")
                % {"resource": self.resource_name.lower()}
            )
        return item

    def update(self, request: Request, *args, **kwargs) -> Response:
        self.get_writable_object()
        return super().update(request, *args, **kwargs)

    def destroy(self, request: Request, *args, **kwargs) -> Response:
        self.get_writable_object()
        return super().destroy(request, *args, **kwargs)

    def get_queryset(self) -> QuerySet:
        queryset = scope_department_content(
            self.model.objects.select_related("department"), self.request.user
        )
        if self.action == "list":
            queryset = self.filter_list(queryset, self.request.query_params)
        return queryset

    def filter_list(self, queryset: QuerySet, params) -> QuerySet:
        if params.get("department"):
            queryset = queryset.filter(department_id=parse_id(params["department"], "department"))
        search = params.get("search", "").strip()
        if search:
            match = Q()
            for field in self.search_fields:
                match |= Q(**{f"{field}__icontains": search})
            queryset = queryset.filter(match)
        is_active = parse_bool(params.get("isActive"))
        return queryset.filter(is_active=True if is_active is None else is_active)


class QuestionViewSet(DepartmentContentViewSet):
    """
    Question bank.

    Additional list filters: ``type`` (mcq/coding) and ``difficulty``.
    """

    model = Question
    search_fields = ("title", "text")
    resource_name = "Question"
    serializer_class = QuestionSerializer
    action_permissions = {
        "create": "manage_questions",
        "update": "manage_questions",
        "partial_update": "manage_questions",
        "destroy": "manage_questions",
        "attempt": "take_assessments",
    }

    def filter_list(self, queryset: QuerySet, params) -> QuerySet:
        queryset = super().filter_list(queryset, params)
        if params.get("type"):
            queryset = queryset.filter(type=params["type"])
        if params.get("difficulty"):
            queryset = queryset.filter(difficulty=params["difficulty"])
        return queryset

    def perform_create(self, serializer: QuestionSerializer) -> None:
        question = serializer.save(created_by=self.request.user)
        logger.info("Question %s created by user %s", question.pk, self.request.user.pk)

    @action(detail=True, methods=["post"], url_path="attempt")
    def attempt(self, request: Request, pk: Optional[str] = None) -> Response:
        """
        Submit a practice answer.

        Request Body:
            selectedOption: Option index (MCQ questions)
            passed: Whether the solution passed (coding questions)

        The attempt is counted in the student's metrics of every active
        module of their groups that contains the question.
        """
        question = self.get_object()
        serializer = PracticeAttemptSerializer(
            data=request.data, context={"question": question}
        )
        serializer.is_valid(raise_exception=True)

        if question.type == QuestionType.MCQ:
            accepted = question.is_correct(serializer.validated_data["selectedOption"])
        else:
            accepted = serializer.validated_data["passed"]

        updated = record_practice_attempt(request.user, question, accepted)
        data = {"questionId": question.id, "accepted": accepted, "modulesUpdated": updated}
        if question.type == QuestionType.MCQ:
            data["correctOption"] = question.correct_option
        return success_response(data=data)


class NoteViewSet(DepartmentContentViewSet):
    model = Note
    owner_field = "uploaded_by"
    search_fields = ("title", "content")
    resource_name = "Note"
    serializer_class = NoteSerializer
    action_permissions = {
        "create": "manage_notes",
        "update": "manage_notes",
        "partial_update": "manage_notes",
        "destroy": "manage_notes",
    }

    def perform_create(self, serializer: NoteSerializer) -> None:
        note = serializer.save(uploaded_by=self.request.user)
        logger.info("Note %s created by user %s", note.pk, self.request.user.pk)
