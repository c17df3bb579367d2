"""
Shared fixtures for the academy test-suite.

Factories create the minimal organization (department, group, users of each
role) the API tests work on.
"""

from datetime import timedelta

from django.contrib.auth.models import User
from django.utils import timezone

from academy.assessments.models import Assessment, AssessmentQuestion
from academy.modules.models import Module, Question, QuestionType
from academy.organization.models import Department, StudyGroup
from academy.users.models import Role

PASSWORD = "Str0ng-Passw0rd!"


def create_user(email, role=Role.STUDENT, department=None, password=PASSWORD, **extra):
    user = User.objects.create_user(username=email, email=email, password=password, **extra)
    profile = user.profile
    profile.role = role
    profile.department = department
    profile.force_password_change = False
    profile.save()
    return user


def create_department(name="Computer Science", code="CS", hod=None):
    department = Department.objects.create(name=name, code=code, hod=hod)
    if hod is not None:
        hod.profile.department = department
        hod.profile.save()
    return department


def create_group(department, name="CS-A", code="CSA", teacher=None, students=()):
    group = StudyGroup.objects.create(name=name, code=code, department=department, teacher=teacher)
    if students:
        group.students.add(*students)
    return group


def create_mcq(department, title="Lists", correct=1, points=1, created_by=None):
    return Question.objects.create(
        title=title,
        text=f"{title}?",
        type=QuestionType.MCQ,
        department=department,
        created_by=created_by,
        options=["a", "b", "c"],
        correct_option=correct,
        points=points,
    )


def create_coding(department, title="FizzBuzz", points=5, created_by=None):
    return Question.objects.create(
        title=title,
        text="Write it.",
        type=QuestionType.CODING,
        department=department,
        created_by=created_by,
        points=points,
    )


def create_module(department, title="Python Basics", groups=(), questions=(), created_by=None):
    module = Module.objects.create(title=title, department=department, created_by=created_by)
    if groups:
        module.groups.add(*groups)
    if questions:
        module.questions.add(*questions)
    return module


def create_assessment(
    department,
    questions,
    groups=(),
    modules=(),
    created_by=None,
    start=None,
    duration=60,
    passing_score=0,
    title="Midterm",
):
    """
    Create an assessment with ``questions`` given as ``(question, points)``
    pairs. By default the assessment started five minutes ago.
    """
    assessment = Assessment.objects.create(
        title=title,
        department=department,
        created_by=created_by,
        start_time=start or timezone.now() - timedelta(minutes=5),
        duration=duration,
        passing_score=passing_score,
    )
    if groups:
        assessment.groups.add(*groups)
    if modules:
        assessment.modules.add(*modules)
    for order, (question, points) in enumerate(questions):
        AssessmentQuestion.objects.create(
            assessment=assessment, question=question, points=points, order=order
        )
    return assessment
