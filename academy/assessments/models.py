"""
Academy Assessment Models

Models:
- Assessment: Timed test for study groups of a department
- AssessmentQuestion: Question of an assessment with its points and order
- AssessmentSubmission: A student's attempt at an assessment
- McqAnswer: Answer to a multiple choice question within a submission
- CodingSubmission: Result of a coding question within a submission
- PerformanceMetric: Aggregated activity of a student, used by analytics

Author: Academy Development Team
Version: 1.0.0
"""

from datetime import timedelta

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Sum
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class Assessment(models.Model):
    """
    Timed assessment assigned to study groups.

    Attributes:
        start_time: Moment the assessment opens
        duration: Length of the window in minutes
        passing_score: Points needed to pass
        questions: Questions through ``AssessmentQuestion``
        modules: Modules the assessment covers
    """

    title = models.CharField(_("Title"), max_length=200)
    description = models.TextField(_("Description"), blank=True)
    department = models.ForeignKey(
        "academy.Department",
        on_delete=models.CASCADE,
        related_name="assessments",
    )
    groups = models.ManyToManyField(
        "academy.StudyGroup", blank=True, related_name="assessments"
    )
    modules = models.ManyToManyField(
        "academy.Module", blank=True, related_name="assessments"
    )
    questions = models.ManyToManyField(
        "academy.Question",
        through="AssessmentQuestion",
        blank=True,
        related_name="assessments",
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="created_assessments",
    )
    start_time = models.DateTimeField(_("Start time"))
    duration = models.PositiveIntegerField(
        _("Duration (minutes)"), validators=[MinValueValidator(1)]
    )
    passing_score = models.PositiveIntegerField(_("Passing score"), default=0)
    is_active = models.BooleanField(_("Active"), default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-start_time"]
        verbose_name = _("Assessment")
        verbose_name_plural = _("Assessments")

    def __str__(self) -> str:
        return self.title

    @property
    def end_time(self):
        return self.start_time + timedelta(minutes=self.duration)

    @property
    def total_points(self) -> int:
        return self.assessment_questions.aggregate(total=Sum("points"))["total"] or 0

    def is_open(self, at=None) -> bool:
        at = at or timezone.now()
        return self.start_time <= at <= self.end_time


class AssessmentQuestion(models.Model):
    assessment = models.ForeignKey(
        Assessment, on_delete=models.CASCADE, related_name="assessment_questions"
    )
    question = models.ForeignKey(
        "academy.Question", on_delete=models.CASCADE, related_name="assessment_links"
    )
    points = models.PositiveIntegerField(default=1)
    order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["order", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["assessment", "question"], name="unique_assessment_question"
            )
        ]

    def __str__(self) -> str:
        return f"{self.assessment} #{self.order}"


class SubmissionStatus(models.TextChoices):
    IN_PROGRESS = "in_progress", _("In progress")
    SUBMITTED = "submitted", _("Submitted")


class AssessmentSubmission(models.Model):
    """
    A student's attempt at an assessment.

    Scores are in points; ``time_taken`` is in seconds.
    """

    assessment = models.ForeignKey(
        Assessment, on_delete=models.CASCADE, related_name="submissions"
    )
    student = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="assessment_submissions",
    )
    department = models.ForeignKey(
        "academy.Department",
        on_delete=models.CASCADE,
        related_name="assessment_submissions",
    )
    status = models.CharField(
        max_length=12,
        choices=SubmissionStatus.choices,
        default=SubmissionStatus.IN_PROGRESS,
    )
    started_at = models.DateTimeField(default=timezone.now)
    submitted_at = models.DateTimeField(null=True, blank=True)
    time_taken = models.PositiveIntegerField(default=0)
    mcq_score = models.FloatField(default=0)
    coding_score = models.FloatField(default=0)
    total_score = models.FloatField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["assessment", "student"], name="unique_submission_per_student"
            )
        ]

    def __str__(self) -> str:
        return f"{self.student.username} - {self.assessment.title}"

    @property
    def is_submitted(self) -> bool:
        return self.status == SubmissionStatus.SUBMITTED


class McqAnswer(models.Model):
    submission = models.ForeignKey(
        AssessmentSubmission, on_delete=models.CASCADE, related_name="mcq_answers"
    )
    question = models.ForeignKey(
        "academy.Question", on_delete=models.CASCADE, related_name="mcq_answers"
    )
    selected_option = models.PositiveSmallIntegerField(null=True, blank=True)
    is_correct = models.BooleanField(default=False)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["submission", "question"], name="unique_mcq_answer"
            )
        ]


class CodingSubmission(models.Model):
    submission = models.ForeignKey(
        AssessmentSubmission, on_delete=models.CASCADE, related_name="coding_answers"
    )
    question = models.ForeignKey(
        "academy.Question", on_delete=models.CASCADE, related_name="coding_submissions"
    )
    attempts = models.PositiveIntegerField(default=1)
    best_score = models.FloatField(default=0)
    is_completed = models.BooleanField(default=False)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["submission", "question"], name="unique_coding_answer"
            )
        ]


class PerformanceMetric(models.Model):
    """
    Aggregated activity of one student.

    A row is keyed by student plus either a module (practice and module
    assessments) or an assessment. ``average_assessment_score`` is a running
    average of percentage scores (0-100).
    """

    student = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="performance_metrics",
    )
    department = models.ForeignKey(
        "academy.Department",
        on_delete=models.CASCADE,
        related_name="performance_metrics",
    )
    group = models.ForeignKey(
        "academy.StudyGroup",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="performance_metrics",
    )
    module = models.ForeignKey(
        "academy.Module",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="performance_metrics",
    )
    assessment = models.ForeignKey(
        Assessment,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="performance_metrics",
    )
    total_practice_submissions = models.PositiveIntegerField(default=0)
    accepted_submissions = models.PositiveIntegerField(default=0)
    completed_assessments = models.PositiveIntegerField(default=0)
    average_assessment_score = models.FloatField(default=0)
    last_attempted_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-updated_at"]
        verbose_name = _("Performance Metric")
        verbose_name_plural = _("Performance Metrics")
        constraints = [
            models.UniqueConstraint(
                fields=["student", "module"],
                condition=models.Q(assessment__isnull=True),
                name="unique_module_metric_per_student",
            ),
            models.UniqueConstraint(
                fields=["student", "assessment"],
                condition=models.Q(module__isnull=True),
                name="unique_assessment_metric_per_student",
            ),
        ]

    def __str__(self) -> str:
        target = self.module or self.assessment or self.department
        return f"{self.student.username} - {target}"
