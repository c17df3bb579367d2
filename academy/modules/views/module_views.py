"""
Academy Module Views

Views:
- ModuleViewSet: Module CRUD, question and note assignment, student progress

Read scope:
- Admin: every module
- HOD: modules of the department they lead
- Teacher: modules they created or that are assigned to their groups
- Student: modules assigned to their groups

Write scope: Admin any, HOD own department, Teacher own modules.

Author: Academy Development Team
Version: 1.0.0
"""

import logging
from typing import Optional

from django.db.models import Count, Q, QuerySet
from django.utils.translation import gettext_lazy as _
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response

from ...exceptions import AccessDenied, BusinessRuleViolation
from ...responses import success_response
from ...users.models import Role
from ...users.roles import group_ids_of, role_of, taught_group_ids_of
from ...utils import parse_bool, parse_id, parse_id_list, split_csv_param
from ...viewsets import AcademyModelViewSet
from ..models import Module, ModuleDifficulty, Note, Question
from ..serializers import (
    ModuleDetailSerializer,
    ModuleSerializer,
    NoteSerializer,
    QuestionSerializer,
)
from ..services import module_progress, progress_overview

logger = logging.getLogger(__name__)


def scope_modules(queryset: QuerySet, user) -> QuerySet:
    role = role_of(user)
    if role == Role.ADMIN:
        return queryset
    if role == Role.HOD:
        return queryset.filter(department__hod=user)
    if role == Role.TEACHER:
        my_groups = group_ids_of(user) | taught_group_ids_of(user)
        return queryset.filter(Q(created_by=user) | Q(groups__in=my_groups)).distinct()
    return queryset.filter(groups__in=group_ids_of(user)).distinct()


def can_write_module(user, module: Module) -> bool:
    role = role_of(user)
    if role == Role.ADMIN:
        return True
    if role == Role.HOD:
        return module.department.hod_id == user.pk
    if role == Role.TEACHER:
        return module.created_by_id == user.pk
    return False


def annotate_module_counts(queryset: QuerySet) -> QuerySet:
    return queryset.annotate(
        question_count=Count("questions", filter=Q(questions__is_active=True), distinct=True),
        note_count=Count("notes", filter=Q(notes__is_active=True), distinct=True),
        assessment_count=Count(
            "assessments", filter=Q(assessments__is_active=True), distinct=True
        ),
    )


class ModuleViewSet(AcademyModelViewSet):
    """
    Module management.

    Query Parameters (list):
    - isActive: true/false, defaults to true
    - search: Matches title, description or tags
    - department, difficulty, createdBy: exact filters
    - tags: Comma separated, any tag matches
    - hasQuestions: true to only list modules with active questions
    - group: Group id (not available to students)
    """

    resource_name = "Module"
    serializer_class = ModuleSerializer
    action_permissions = {
        "create": "manage_modules",
        "update": "manage_modules",
        "partial_update": "manage_modules",
        "destroy": "manage_modules",
        "add_questions": "manage_modules",
        "remove_question": "manage_modules",
        "add_notes": "manage_modules",
        "remove_note": "manage_modules",
    }

    def get_queryset(self) -> QuerySet[Module]:
        queryset = scope_modules(
            Module.objects.select_related("department", "created_by__profile").prefetch_related(
                "groups", "prerequisites", "questions", "notes"
            ),
            self.request.user,
        )
        if self.action == "list":
            queryset = self._filter_list(queryset)
        return queryset.order_by("sort_order", "-created_at")

    def _filter_list(self, queryset: QuerySet) -> QuerySet:
        params = self.request.query_params
        user = self.request.user

        is_active = parse_bool(params.get("isActive"))
        queryset = queryset.filter(is_active=True if is_active is None else is_active)

        search = params.get("search", "").strip()
        if search:
            queryset = queryset.filter(
                Q(title__icontains=search)
                | Q(description__icontains=search)
                | Q(tags__icontains=search)
            )
        if params.get("department"):
            queryset = queryset.filter(department_id=parse_id(params["department"], "department"))
        difficulty = params.get("difficulty")
        if difficulty:
            if difficulty not in ModuleDifficulty.values:
                raise BusinessRuleViolation(_("Invalid difficulty level"))
            queryset = queryset.filter(difficulty=difficulty)
        if params.get("createdBy"):
            queryset = queryset.filter(created_by_id=parse_id(params["createdBy"], "createdBy"))

        tags = [tag.lower() for tag in split_csv_param(params.get("tags"))]
        if tags:
            tag_filter = Q()
            for tag in tags:
                # tags are stored as a JSON list; match the quoted element
                tag_filter |= Q(tags__icontains=f'"{tag}"')
            queryset = queryset.filter(tag_filter)

        if params.get("group") and role_of(user) != Role.STUDENT:
            queryset = queryset.filter(groups__id=parse_id(params["group"], "group"))

        queryset = annotate_module_counts(queryset)
        if parse_bool(params.get("hasQuestions")):
            queryset = queryset.filter(question_count__gt=0)
        return queryset.distinct()

    def get_serializer_class(self):
        if self.action == "retrieve":
            return ModuleDetailSerializer
        return ModuleSerializer

    def get_writable_object(self) -> Module:
        module = self.get_object()
        if not can_write_module(self.request.user, module):
            raise AccessDenied(_("You do not have permission to modify this module"))
        return module

    def retrieve(self, request: Request, *args, **kwargs) -> Response:
        module = self.get_object()
        data = self.get_serializer(module).data
        progress = module_progress(module)
        if role_of(request.user) == Role.STUDENT:
            progress = [p for p in progress if p["student"]["id"] == request.user.pk]
        data["studentProgress"] = progress
        return success_response(data=data)

    def perform_create(self, serializer: ModuleSerializer) -> None:
        module = serializer.save(created_by=self.request.user)
        logger.info("Module %s created by user %s", module.pk, self.request.user.pk)

    def update(self, request: Request, *args, **kwargs) -> Response:
        self.get_writable_object()
        return super().update(request, *args, **kwargs)

    def destroy(self, request: Request, *args, **kwargs) -> Response:
        module = self.get_writable_object()
        if module.assessments.filter(is_active=True).exists():
            raise BusinessRuleViolation(
                _("Cannot delete module that is used in active assessments")
            )
        if module.required_by.filter(is_active=True).exists():
            raise BusinessRuleViolation(
                _("Cannot delete module that is a prerequisite of other active modules")
            )
        self.perform_destroy(module)
        return success_response(message=_("Module deleted successfully"))

    # --- Question and note assignment ---

    def _add_items(self, request: Request, relation: str, model, field: str, label: str):
        module = self.get_writable_object()
        ids = parse_id_list(request.data.get(field), field)
        found = list(
            model.objects.filter(pk__in=ids, is_active=True, department=module.department)
        )
        if len(found) != len(ids):
            raise BusinessRuleViolation(
                f"Some {label} not found or not in the module's department"
            )

        manager = getattr(module, relation)
        present = set(manager.values_list("id", flat=True))
        new_items = [item for item in found if item.pk not in present]
        if not new_items:
            raise BusinessRuleViolation(
                f"All specified {label} are already in the module"
            )
        manager.add(*new_items)
        logger.info("Added %s %s to module %s", len(new_items), label, module.pk)
        return module, len(new_items)

    def _remove_item(self, relation: str, item_id: Optional[str], label: str) -> Module:
        module = self.get_writable_object()
        manager = getattr(module, relation)
        item_id = parse_id(item_id, f"{label}Id")
        if not manager.filter(pk=item_id).exists():
            raise BusinessRuleViolation(f"{label.capitalize()} not found in module")
        manager.remove(item_id)
        return module

    @action(detail=True, methods=["post"], url_path="questions")
    def add_questions(self, request: Request, pk: Optional[str] = None) -> Response:
        """
        Add questions to the module.

        Request Body:
            questionIds: Active questions of the module's department
        """
        module, added = self._add_items(request, "questions", Question, "questionIds", "questions")
        questions = module.questions.filter(is_active=True)
        return success_response(
            data=QuestionSerializer(questions, many=True, context={"request": request}).data,
            message=f"{added} questions added to module",
        )

    @action(detail=True, methods=["delete"], url_path=r"questions/(?P<question_id>[^/.]+)")
    def remove_question(
        self, request: Request, pk: Optional[str] = None, question_id: Optional[str] = None
    ) -> Response:
        self._remove_item("questions", question_id, "question")
        return success_response(message=_("Question removed from module"))

    @action(detail=True, methods=["post"], url_path="notes")
    def add_notes(self, request: Request, pk: Optional[str] = None) -> Response:
        """
        Add notes to the module.

        Request Body:
            noteIds: Active notes of the module's department
        """
        module, added = self._add_items(request, "notes", Note, "noteIds", "notes")
        notes = module.notes.filter(is_active=True)
        return success_response(
            data=NoteSerializer(notes, many=True, context={"request": request}).data,
            message=f"{added} notes added to module",
        )

    @action(detail=True, methods=["delete"], url_path=r"notes/(?P<note_id>[^/.]+)")
    def remove_note(
        self, request: Request, pk: Optional[str] = None, note_id: Optional[str] = None
    ) -> Response:
        self._remove_item("notes", note_id, "note")
        return success_response(message=_("Note removed from module"))

    @action(detail=True, methods=["get"], url_path="progress")
    def progress(self, request: Request, pk: Optional[str] = None) -> Response:
        module = self.get_object()
        progress = module_progress(module)
        if role_of(request.user) == Role.STUDENT:
            progress = [p for p in progress if p["student"]["id"] == request.user.pk]
        return success_response(
            data={
                "module": {"id": module.id, "title": module.title},
                "overview": progress_overview(progress),
                "students": progress,
            }
        )
