"""
Analytics report builders.

Each builder returns plain dicts ready for the response envelope. Access
control is done by the views before a builder is called.
"""

from collections import defaultdict
from datetime import timedelta
from typing import Any, Dict, List, Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db.models import Avg, Count, Q, Sum
from django.db.models.functions import TruncDate
from django.utils import timezone

from ...assessments.models import (
    Assessment,
    AssessmentSubmission,
    CodingSubmission,
    McqAnswer,
    PerformanceMetric,
    SubmissionStatus,
)
from ...modules.models import Module, Question, QuestionType
from ...organization.models import Department, StudyGroup
from ...users.models import Role, full_name
from .statistics import (
    calculate_current_streak,
    calculate_median,
    safe_percentage,
    score_distribution,
)

User = get_user_model()

RECENT_DAYS = 30

EXPORT_TYPES = ("users", "departments", "groups", "assessments", "performance")


def _round(value: Optional[float]) -> float:
    return round(value or 0, 2)


def _mean(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0


def _user_summary(user) -> Dict[str, Any]:
    return {"id": user.pk, "name": full_name(user), "email": user.email}


def _users_by_role(users) -> List[Dict[str, Any]]:
    counts = dict(
        users.values_list("profile__role").annotate(count=Count("id")).order_by()
    )
    return [{"role": role, "count": counts.get(role, 0)} for role in Role.values]


def _counts_by(queryset, field: str) -> List[Dict[str, Any]]:
    rows = queryset.values(field).annotate(count=Count("id")).order_by(field)
    return [{field: row[field], "count": row["count"]} for row in rows]


def _daily_counts(queryset, field: str, key: str = "count") -> List[Dict[str, Any]]:
    rows = (
        queryset.annotate(day=TruncDate(field))
        .values("day")
        .annotate(total=Count("id"))
        .order_by("day")
    )
    return [{"date": row["day"], key: row["total"]} for row in rows]


def _submissions_with_points(queryset):
    return queryset.annotate(points=Sum("assessment__assessment_questions__points"))


def _percentage_of(submission) -> float:
    return safe_percentage(submission.total_score, submission.points or 0)


def dashboard_report(now=None) -> Dict[str, Any]:
    """System wide overview for administrators."""
    now = now or timezone.now()
    since = now - timedelta(days=RECENT_DAYS)
    active_since = now - timedelta(days=settings.ACADEMY_ACTIVE_USER_WINDOW_DAYS)
    trend_since = now - timedelta(days=settings.ACADEMY_TREND_WINDOW_DAYS)

    users = User.objects.filter(is_active=True)
    questions = Question.objects.filter(is_active=True)

    departments = Department.objects.filter(is_active=True).annotate(
        userCount=Count("members", filter=Q(members__user__is_active=True), distinct=True),
        groupCount=Count("groups", filter=Q(groups__is_active=True), distinct=True),
        moduleCount=Count("modules", filter=Q(modules__is_active=True), distinct=True),
        assessmentCount=Count(
            "assessments", filter=Q(assessments__is_active=True), distinct=True
        ),
    )

    recent = _submissions_with_points(
        AssessmentSubmission.objects.filter(
            status=SubmissionStatus.SUBMITTED, created_at__gte=since
        )
    )
    averages = recent.aggregate(
        avgMcqScore=Avg("mcq_score"),
        avgCodingScore=Avg("coding_score"),
        avgTotalScore=Avg("total_score"),
    )
    percentages = [_percentage_of(submission) for submission in recent]
    passing = settings.ACADEMY_PASSING_PERCENTAGE

    return {
        "overview": {
            "totalUsers": users.count(),
            "activeUsers": users.filter(last_login__gte=active_since).count(),
            "totalDepartments": departments.count(),
            "totalModules": Module.objects.filter(is_active=True).count(),
            "totalQuestions": questions.count(),
            "totalAssessments": Assessment.objects.filter(is_active=True).count(),
            "recentSubmissions": AssessmentSubmission.objects.filter(
                created_at__gte=since
            ).count(),
            "recentAssessments": Assessment.objects.filter(
                is_active=True, created_at__gte=since
            ).count(),
        },
        "userDemographics": {
            "byRole": _users_by_role(users),
            "byDepartment": [
                {
                    "department": {"id": dept.pk, "name": dept.name, "code": dept.code},
                    "userCount": dept.userCount,
                    "groupCount": dept.groupCount,
                    "moduleCount": dept.moduleCount,
                    "assessmentCount": dept.assessmentCount,
                }
                for dept in departments
            ],
        },
        "contentMetrics": {
            "questionsByType": _counts_by(questions, "type"),
            "questionsByDifficulty": _counts_by(questions, "difficulty"),
        },
        "performanceOverview": {
            "averageScores": {
                **{key: _round(value) for key, value in averages.items()},
                "averagePercentage": _round(_mean(percentages)),
                "totalSubmissions": len(percentages),
            },
            "passRate": _round(
                safe_percentage(sum(1 for p in percentages if p >= passing), len(percentages))
            ),
        },
        "trends": {
            "dailyRegistrations": _daily_counts(
                User.objects.filter(date_joined__gte=trend_since), "date_joined"
            ),
            "dailySubmissions": _daily_counts(
                AssessmentSubmission.objects.filter(submitted_at__gte=trend_since),
                "submitted_at",
            ),
        },
    }


def department_report(department: Department, now=None) -> Dict[str, Any]:
    now = now or timezone.now()
    since = now - timedelta(days=RECENT_DAYS)
    members = User.objects.filter(profile__department=department, is_active=True)

    metrics = PerformanceMetric.objects.filter(department=department)
    totals = metrics.aggregate(
        averageAssessmentScore=Avg("average_assessment_score"),
        totalPracticeSubmissions=Sum("total_practice_submissions"),
        completedAssessments=Sum("completed_assessments"),
    )

    group_performance = []
    groups = department.groups.filter(is_active=True).annotate(
        studentCount=Count("students", filter=Q(students__is_active=True), distinct=True)
    )
    for group in groups:
        group_totals = PerformanceMetric.objects.filter(group=group).aggregate(
            averageScore=Avg("average_assessment_score"),
            totalSubmissions=Sum("total_practice_submissions"),
        )
        group_performance.append(
            {
                "group": {"id": group.pk, "name": group.name, "code": group.code},
                "studentCount": group.studentCount,
                "averageScore": _round(group_totals["averageScore"]),
                "totalSubmissions": group_totals["totalSubmissions"] or 0,
            }
        )
    group_performance.sort(key=lambda item: item["averageScore"], reverse=True)

    return {
        "department": {"id": department.pk, "name": department.name, "code": department.code},
        "overview": {
            "totalUsers": members.count(),
            "totalGroups": groups.count(),
            "totalModules": department.modules.filter(is_active=True).count(),
            "totalQuestions": department.questions.filter(is_active=True).count(),
            "totalAssessments": department.assessments.filter(is_active=True).count(),
        },
        "userDemographics": {"byRole": _users_by_role(members)},
        "performance": {
            "averageAssessmentScore": _round(totals["averageAssessmentScore"]),
            "totalPracticeSubmissions": totals["totalPracticeSubmissions"] or 0,
            "completedAssessments": totals["completedAssessments"] or 0,
        },
        "groupPerformance": group_performance,
        "recentActivity": {
            "recentAssessments": department.assessments.filter(
                is_active=True, start_time__gte=since
            ).count(),
            "recentSubmissions": department.assessment_submissions.filter(
                created_at__gte=since
            ).count(),
        },
    }


def group_report(group: StudyGroup) -> Dict[str, Any]:
    students = list(
        group.students.filter(is_active=True, profile__role=Role.STUDENT).order_by("id")
    )
    student_ids = [student.pk for student in students]

    metrics_by_student = defaultdict(list)
    for metric in PerformanceMetric.objects.filter(group=group, student_id__in=student_ids):
        metrics_by_student[metric.student_id].append(metric)

    student_performance = []
    for student in students:
        metrics = metrics_by_student.get(student.pk, [])
        student_performance.append(
            {
                "student": _user_summary(student),
                "practiceSubmissions": sum(m.total_practice_submissions for m in metrics),
                "completedAssessments": sum(m.completed_assessments for m in metrics),
                "averageScore": _round(_mean([m.average_assessment_score for m in metrics])),
                "lastActivity": max((m.updated_at for m in metrics), default=None),
            }
        )
    student_performance.sort(key=lambda item: item["averageScore"], reverse=True)

    module_progress = []
    modules = group.modules.filter(is_active=True)
    for module in modules:
        question_count = module.questions.filter(is_active=True).count()
        completed = dict(
            PerformanceMetric.objects.filter(
                module=module, assessment__isnull=True, student_id__in=student_ids
            ).values_list("student_id", "accepted_submissions")
        )
        progress = safe_percentage(
            sum(completed.values()), len(students) * question_count
        )
        module_progress.append(
            {
                "module": {
                    "id": module.pk,
                    "title": module.title,
                    "difficulty": module.difficulty,
                },
                "questionCount": question_count,
                "averageProgress": _round(min(progress, 100.0)),
                "studentsStarted": sum(1 for value in completed.values() if value > 0),
            }
        )
    module_progress.sort(key=lambda item: item["averageProgress"], reverse=True)

    recent = (
        AssessmentSubmission.objects.filter(
            assessment__groups=group,
            student_id__in=student_ids,
            status=SubmissionStatus.SUBMITTED,
        )
        .select_related("assessment", "student")
        .distinct()
        .order_by("-submitted_at")[:10]
    )

    return {
        "group": {
            "id": group.pk,
            "name": group.name,
            "code": group.code,
            "department": {
                "id": group.department_id,
                "name": group.department.name,
                "code": group.department.code,
            },
        },
        "overview": {
            "studentCount": len(students),
            "moduleCount": modules.count(),
            "assessmentCount": group.assessments.filter(is_active=True).count(),
        },
        "studentPerformance": student_performance,
        "moduleProgress": module_progress,
        "recentSubmissions": [
            {
                "id": submission.pk,
                "assessment": {"id": submission.assessment_id, "title": submission.assessment.title},
                "student": _user_summary(submission.student),
                "totalScore": submission.total_score,
                "submittedAt": submission.submitted_at,
            }
            for submission in recent
        ],
    }


def student_report(student, today=None) -> Dict[str, Any]:
    """
    Performance of one student.

    ``currentStreak`` counts consecutive days with metric updates ending on
    ``today`` (the current local date by default).
    """
    today = today or timezone.localdate()
    metrics = list(
        PerformanceMetric.objects.filter(student=student).select_related("module", "assessment")
    )

    practice = sum(m.total_practice_submissions for m in metrics)
    accepted = sum(m.accepted_submissions for m in metrics)

    by_module = defaultdict(list)
    for metric in metrics:
        if metric.module_id:
            by_module[metric.module_id].append(metric)
    module_performance = []
    for module_metrics in by_module.values():
        module = module_metrics[0].module
        module_practice = sum(m.total_practice_submissions for m in module_metrics)
        module_accepted = sum(m.accepted_submissions for m in module_metrics)
        module_performance.append(
            {
                "module": {"id": module.pk, "title": module.title},
                "practiceSubmissions": module_practice,
                "acceptedSubmissions": module_accepted,
                "successRate": _round(safe_percentage(module_accepted, module_practice)),
                "averageAssessmentScore": _round(
                    _mean([m.average_assessment_score for m in module_metrics])
                ),
            }
        )
    module_performance.sort(key=lambda item: item["averageAssessmentScore"], reverse=True)

    submissions = _submissions_with_points(
        AssessmentSubmission.objects.filter(
            student=student, status=SubmissionStatus.SUBMITTED
        ).select_related("assessment")
    ).order_by("-submitted_at")[:20]
    history = []
    for submission in submissions:
        assessment = submission.assessment
        history.append(
            {
                "assessment": {
                    "id": assessment.pk,
                    "title": assessment.title,
                    "startTime": assessment.start_time,
                    "totalPoints": submission.points or 0,
                },
                "submittedAt": submission.submitted_at,
                "timeTaken": submission.time_taken,
                "scores": {
                    "mcq": submission.mcq_score,
                    "coding": submission.coding_score,
                    "total": submission.total_score,
                    "percentage": _round(_percentage_of(submission)),
                },
                "passed": submission.total_score >= assessment.passing_score,
            }
        )

    since = timezone.now() - timedelta(days=RECENT_DAYS)
    daily_activity = _daily_counts(
        PerformanceMetric.objects.filter(student=student, updated_at__gte=since),
        "updated_at",
        key="activityCount",
    )

    recent = sorted(metrics, key=lambda m: m.updated_at, reverse=True)[:10]
    profile = getattr(student, "profile", None)
    department = profile.department if profile else None

    return {
        "student": {
            **_user_summary(student),
            "department": (
                {"id": department.pk, "name": department.name, "code": department.code}
                if department
                else None
            ),
            "groups": [
                {"id": group.pk, "name": group.name, "code": group.code}
                for group in student.study_groups.filter(is_active=True)
            ],
        },
        "overview": {
            "totalPracticeSubmissions": practice,
            "acceptedSubmissions": accepted,
            "completedAssessments": sum(m.completed_assessments for m in metrics),
            "averageAssessmentScore": _round(
                _mean([m.average_assessment_score for m in metrics])
            ),
            "successRate": _round(safe_percentage(accepted, practice)),
        },
        "modulePerformance": module_performance,
        "assessmentHistory": history,
        "engagement": {
            "activeDays": len(daily_activity),
            "currentStreak": calculate_current_streak(
                (row["date"] for row in daily_activity), today
            ),
            "dailyActivity": daily_activity,
        },
        "recentActivity": [
            {
                "type": "module" if metric.module_id else "assessment",
                "title": metric.module.title if metric.module_id else (
                    metric.assessment.title if metric.assessment_id else None
                ),
                "date": metric.updated_at,
                "score": _round(metric.average_assessment_score),
            }
            for metric in recent
        ],
    }


def _question_analysis(links, submission_ids: List[int]) -> List[Dict[str, Any]]:
    analysis = []
    for index, link in enumerate(links):
        question = link.question
        entry = {
            "questionId": question.pk,
            "title": question.title,
            "type": question.type,
            "index": index,
            "points": link.points,
        }
        if question.type == QuestionType.MCQ:
            answers = McqAnswer.objects.filter(
                submission_id__in=submission_ids, question=question
            )
            attempts = answers.count()
            correct = answers.filter(is_correct=True).count()
            entry.update(
                attempts=attempts,
                correctAnswers=correct,
                successRate=_round(safe_percentage(correct, attempts)),
            )
        else:
            coding = CodingSubmission.objects.filter(
                submission_id__in=submission_ids, question=question
            ).aggregate(
                attempts=Sum("attempts"),
                completed=Count("id", filter=Q(is_completed=True)),
                scoreSum=Sum("best_score"),
            )
            entry.update(
                attempts=coding["attempts"] or 0,
                completed=coding["completed"],
                averageScore=_round((coding["scoreSum"] or 0) / (len(submission_ids) or 1)),
            )
        analysis.append(entry)
    return analysis


def assessment_report(assessment: Assessment) -> Dict[str, Any]:
    """
    Results of one assessment.

    Scores are percentages of the assessment's total points. A submission
    passes when its total score reaches ``passing_score``.
    """
    total_points = assessment.total_points
    submissions = list(
        assessment.submissions.filter(status=SubmissionStatus.SUBMITTED)
        .select_related("student")
        .order_by("-total_score", "time_taken")
    )
    percentages = [safe_percentage(s.total_score, total_points) for s in submissions]
    times = [s.time_taken for s in submissions if s.time_taken]
    passed = sum(1 for s in submissions if s.total_score >= assessment.passing_score)
    submission_ids = [s.pk for s in submissions]

    group_performance = []
    for group in assessment.groups.all():
        member_ids = set(group.students.values_list("id", flat=True))
        scores = [
            percentage
            for submission, percentage in zip(submissions, percentages)
            if submission.student_id in member_ids
        ]
        group_performance.append(
            {
                "group": {"id": group.pk, "name": group.name, "code": group.code},
                "totalStudents": group.students.filter(
                    is_active=True, profile__role=Role.STUDENT
                ).count(),
                "submissions": len(scores),
                "averageScore": _round(_mean(scores)),
            }
        )
    group_performance.sort(key=lambda item: item["averageScore"], reverse=True)

    return {
        "assessment": {
            "id": assessment.pk,
            "title": assessment.title,
            "department": assessment.department_id,
            "groups": [group.pk for group in assessment.groups.all()],
            "totalPoints": total_points,
            "passingScore": assessment.passing_score,
            "startTime": assessment.start_time,
            "duration": assessment.duration,
        },
        "overview": {
            "totalSubmissions": len(submissions),
            "averageScore": _round(_mean(percentages)),
            "medianScore": _round(calculate_median(percentages)),
            "highestScore": _round(max(percentages, default=0)),
            "lowestScore": _round(min(percentages, default=0)),
            "passRate": _round(safe_percentage(passed, len(submissions))),
            "averageTime": _round(_mean(times)),
        },
        "scoreDistribution": score_distribution(percentages),
        "questionAnalysis": _question_analysis(
            assessment.assessment_questions.select_related("question"), submission_ids
        ),
        "groupPerformance": group_performance,
        "topPerformers": [
            {
                "rank": rank,
                "student": _user_summary(submission.student),
                "score": _round(percentage),
                "timeTaken": submission.time_taken,
            }
            for rank, (submission, percentage) in enumerate(
                zip(submissions[:10], percentages[:10]), start=1
            )
        ],
    }


def export_rows(export_type: str) -> List[Dict[str, Any]]:
    """
    Flat rows for the data export.

    Raises:
        ValueError: Unknown export type
    """
    if export_type == "users":
        return [
            {
                "id": user.pk,
                "email": user.email,
                "fullName": full_name(user),
                "role": user.profile.role if hasattr(user, "profile") else Role.STUDENT.value,
                "department": (
                    user.profile.department.code
                    if hasattr(user, "profile") and user.profile.department
                    else None
                ),
                "dateJoined": user.date_joined,
                "lastLogin": user.last_login,
            }
            for user in User.objects.filter(is_active=True)
            .select_related("profile__department")
            .order_by("id")
        ]
    if export_type == "departments":
        return [
            {
                "id": dept.pk,
                "name": dept.name,
                "code": dept.code,
                "description": dept.description,
                "hod": dept.hod.email if dept.hod else None,
                "createdAt": dept.created_at,
            }
            for dept in Department.objects.filter(is_active=True).select_related("hod")
        ]
    if export_type == "groups":
        return [
            {
                "id": group.pk,
                "name": group.name,
                "code": group.code,
                "department": group.department.code,
                "teacher": group.teacher.email if group.teacher else None,
                "studentCount": group.student_count,
            }
            for group in StudyGroup.objects.filter(is_active=True)
            .select_related("department", "teacher")
            .annotate(student_count=Count("students"))
            .order_by("department__code", "name")
        ]
    if export_type == "assessments":
        return [
            {
                "id": assessment.pk,
                "title": assessment.title,
                "department": assessment.department.code,
                "createdBy": assessment.created_by.email if assessment.created_by else None,
                "groups": ", ".join(group.name for group in assessment.groups.all()),
                "startTime": assessment.start_time,
                "duration": assessment.duration,
                "passingScore": assessment.passing_score,
                "totalPoints": assessment.total_points,
            }
            for assessment in Assessment.objects.filter(is_active=True)
            .select_related("department", "created_by")
            .prefetch_related("groups")
        ]
    if export_type == "performance":
        return [
            {
                "id": metric.pk,
                "student": metric.student.email,
                "department": metric.department.code,
                "group": metric.group.name if metric.group else None,
                "module": metric.module.title if metric.module else None,
                "assessment": metric.assessment.title if metric.assessment else None,
                "totalPracticeSubmissions": metric.total_practice_submissions,
                "acceptedSubmissions": metric.accepted_submissions,
                "completedAssessments": metric.completed_assessments,
                "averageAssessmentScore": _round(metric.average_assessment_score),
                "lastAttemptedAt": metric.last_attempted_at,
            }
            for metric in PerformanceMetric.objects.select_related(
                "student", "department", "group", "module", "assessment"
            )
        ]
    raise ValueError(f"Unknown export type: {export_type}")
