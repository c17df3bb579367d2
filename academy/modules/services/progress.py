"""
Student progress through a module.

Progress is derived from the student's PerformanceMetric rows for the
module: accepted practice submissions count as completed questions.
"""

from collections import defaultdict
from typing import Any, Dict, List

from django.contrib.auth import get_user_model

from ...assessments.models import PerformanceMetric
from ...users.models import full_name

User = get_user_model()


def module_progress(module) -> List[Dict[str, Any]]:
    """
    Compute progress of every student assigned to ``module``.

    Students are the deduplicated members of the module's groups. The result
    is sorted by completion percentage, highest first.
    """
    students = (
        User.objects.filter(study_groups__in=module.groups.all())
        .distinct()
        .order_by("id")
    )
    total_questions = module.questions.filter(is_active=True).count()

    metrics_by_student = defaultdict(list)
    for metric in PerformanceMetric.objects.filter(
        module=module, student__in=students
    ):
        metrics_by_student[metric.student_id].append(metric)

    progress = []
    for student in students:
        metrics = metrics_by_student.get(student.id, [])
        completed = sum(m.accepted_submissions for m in metrics)
        if total_questions:
            percentage = min(100.0, completed / total_questions * 100)
        else:
            percentage = 0.0
        scores = [m.average_assessment_score for m in metrics]
        progress.append(
            {
                "student": {
                    "id": student.id,
                    "name": full_name(student),
                    "email": student.email,
                },
                "completedQuestions": completed,
                "totalQuestions": total_questions,
                "completionPercentage": round(percentage, 2),
                "averageScore": round(sum(scores) / len(scores), 2) if scores else 0,
                "lastActivity": max((m.updated_at for m in metrics), default=None),
            }
        )

    progress.sort(key=lambda item: item["completionPercentage"], reverse=True)
    return progress


def progress_overview(progress: List[Dict[str, Any]]) -> Dict[str, Any]:
    percentages = [item["completionPercentage"] for item in progress]
    return {
        "totalStudents": len(progress),
        "averageCompletion": (
            round(sum(percentages) / len(percentages), 2) if percentages else 0
        ),
        "completedStudents": sum(1 for p in percentages if p >= 100),
        "inProgressStudents": sum(1 for p in percentages if 0 < p < 100),
        "notStartedStudents": sum(1 for p in percentages if p == 0),
    }
