"""
Academy Module Models

This module defines the curriculum models of the academy platform.

Models:
- Question: Question bank entry (multiple choice or coding)
- Note: Study material attached to modules
- Module: Curriculum unit grouping questions and notes, assigned to groups

Features:
- Department scoped content with soft delete through ``is_active``
- Non-symmetric prerequisite relation between modules
- Difficulty grading for modules and questions

Author: Academy Development Team
Version: 1.0.0
"""

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _


class QuestionType(models.TextChoices):
    MCQ = "mcq", _("Multiple choice")
    CODING = "coding", _("Coding")


class QuestionDifficulty(models.TextChoices):
    EASY = "easy", _("Easy")
    MEDIUM = "medium", _("Medium")
    HARD = "hard", _("Hard")


class ModuleDifficulty(models.TextChoices):
    BEGINNER = "beginner", _("Beginner")
    INTERMEDIATE = "intermediate", _("Intermediate")
    ADVANCED = "advanced", _("Advanced")


class Question(models.Model):
    """
    Question bank entry.

    Attributes:
        title: Short title shown in listings
        text: Full question text
        type: ``mcq`` or ``coding``
        difficulty: ``easy``, ``medium`` or ``hard``
        department: Owning department
        created_by: Author
        options: Answer options for MCQ questions
        correct_option: Index into ``options`` of the right answer
        points: Points awarded for a correct answer
    """

    title = models.CharField(_("Title"), max_length=200)
    text = models.TextField(_("Question text"))
    type = models.CharField(
        _("Type"), max_length=10, choices=QuestionType.choices, default=QuestionType.MCQ
    )
    difficulty = models.CharField(
        _("Difficulty"),
        max_length=10,
        choices=QuestionDifficulty.choices,
        default=QuestionDifficulty.EASY,
    )
    department = models.ForeignKey(
        "academy.Department",
        on_delete=models.CASCADE,
        related_name="questions",
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="created_questions",
    )
    options = models.JSONField(_("Options"), default=list, blank=True)
    correct_option = models.PositiveSmallIntegerField(
        _("Correct option"), null=True, blank=True
    )
    points = models.PositiveIntegerField(_("Points"), default=1)
    is_active = models.BooleanField(_("Active"), default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = _("Question")
        verbose_name_plural = _("Questions")

    def __str__(self) -> str:
        return self.title

    def is_correct(self, selected_option) -> bool:
        return (
            self.type == QuestionType.MCQ
            and selected_option is not None
            and self.correct_option is not None
            and int(selected_option) == self.correct_option
        )


class Note(models.Model):
    """Study material that can be attached to modules."""

    title = models.CharField(_("Title"), max_length=200)
    content = models.TextField(_("Content"), blank=True)
    department = models.ForeignKey(
        "academy.Department",
        on_delete=models.CASCADE,
        related_name="notes",
    )
    uploaded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="uploaded_notes",
    )
    attachment_url = models.URLField(_("Attachment URL"), max_length=500, blank=True)
    is_active = models.BooleanField(_("Active"), default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = _("Note")
        verbose_name_plural = _("Notes")

    def __str__(self) -> str:
        return self.title


class Module(models.Model):
    """
    Curriculum unit assigned to study groups.

    Attributes:
        title: Module title
        description: Optional description
        department: Owning department
        groups: Study groups the module is assigned to
        created_by: Author
        difficulty: ``beginner``, ``intermediate`` or ``advanced``
        estimated_hours: Expected effort (1-200 hours)
        tags: Lower case tags
        prerequisites: Modules that should be completed first
        questions: Practice questions of the module
        notes: Study notes of the module
        sort_order: Position in listings

    The prerequisite relation is directed: ``a.prerequisites`` contains ``b``
    when ``b`` must be completed before ``a``. Cycles are rejected by the
    serializer, see ``services.prerequisites``.
    """

    title = models.CharField(_("Title"), max_length=200)
    description = models.TextField(_("Description"), max_length=2000, blank=True)
    department = models.ForeignKey(
        "academy.Department",
        on_delete=models.CASCADE,
        related_name="modules",
    )
    groups = models.ManyToManyField(
        "academy.StudyGroup", blank=True, related_name="modules"
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="created_modules",
    )
    difficulty = models.CharField(
        _("Difficulty"),
        max_length=12,
        choices=ModuleDifficulty.choices,
        default=ModuleDifficulty.BEGINNER,
    )
    estimated_hours = models.PositiveSmallIntegerField(
        _("Estimated hours"),
        null=True,
        blank=True,
        validators=[MinValueValidator(1), MaxValueValidator(200)],
    )
    tags = models.JSONField(_("Tags"), default=list, blank=True)
    prerequisites = models.ManyToManyField(
        "self", symmetrical=False, blank=True, related_name="required_by"
    )
    questions = models.ManyToManyField(Question, blank=True, related_name="modules")
    notes = models.ManyToManyField(Note, blank=True, related_name="modules")
    sort_order = models.PositiveIntegerField(_("Sort order"), default=0)
    is_active = models.BooleanField(_("Active"), default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["sort_order", "-created_at"]
        verbose_name = _("Module")
        verbose_name_plural = _("Modules")

    def __str__(self) -> str:
        return self.title
