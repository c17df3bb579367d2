"""
Performance metric bookkeeping.

PerformanceMetric rows are the source for module progress and analytics.
Practice attempts update the student's rows for every active module of
their groups containing the question; assessment results update the row of
the assessment and the rows of the modules the assessment covers.
"""

import logging
from typing import Optional

from django.db import transaction
from django.utils import timezone

from ...modules.models import Module
from ..models import AssessmentSubmission, PerformanceMetric

logger = logging.getLogger(__name__)


def _running_average(previous: float, count_before: int, value: float) -> float:
    return (previous * count_before + value) / (count_before + 1)


def _get_metric(student, department_id: int, **target) -> PerformanceMetric:
    # The lookup matches the unique constraints on PerformanceMetric, so a
    # concurrent insert makes get_or_create fall back to fetching that row.
    metric, _created = PerformanceMetric.objects.select_for_update().get_or_create(
        student=student,
        defaults={"department_id": department_id},
        **target,
    )
    return metric


@transaction.atomic
def record_practice_attempt(student, question, accepted: bool) -> int:
    """
    Count a practice submission for ``question``.

    Returns:
        Number of module metrics updated
    """
    student_groups = student.study_groups.filter(is_active=True)
    modules = Module.objects.filter(
        is_active=True, questions=question, groups__in=student_groups
    ).distinct()
    now = timezone.now()
    updated = 0
    for module in modules:
        group = module.groups.filter(pk__in=student_groups).first()
        metric = _get_metric(student, module.department_id, module=module, assessment=None)
        metric.group = metric.group or group
        metric.total_practice_submissions += 1
        if accepted:
            metric.accepted_submissions += 1
        metric.last_attempted_at = now
        metric.save()
        updated += 1
    return updated


@transaction.atomic
def record_assessment_result(
    submission: AssessmentSubmission, total_points: Optional[int] = None
) -> None:
    """
    Fold a submitted assessment into the student's performance metrics.

    The percentage score (total score / total points) is averaged into the
    assessment's metric and into the metric of each covered module.
    """
    assessment = submission.assessment
    total_points = assessment.total_points if total_points is None else total_points
    percentage = (submission.total_score / total_points * 100) if total_points else 0.0
    student = submission.student
    group = assessment.groups.filter(students=student, is_active=True).first()

    targets = [{"assessment": assessment, "module": None}]
    targets += [
        {"module": module, "assessment": None}
        for module in assessment.modules.filter(is_active=True)
    ]
    for target in targets:
        metric = _get_metric(student, assessment.department_id, **target)
        metric.average_assessment_score = _running_average(
            metric.average_assessment_score, metric.completed_assessments, percentage
        )
        metric.completed_assessments += 1
        metric.group = metric.group or group
        metric.last_attempted_at = submission.submitted_at or timezone.now()
        metric.save()

    logger.info(
        "Recorded assessment %s result %.1f%% for student %s",
        assessment.pk,
        percentage,
        student.pk,
    )
