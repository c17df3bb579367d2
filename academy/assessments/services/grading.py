"""
Assessment grading.

MCQ answers earn the question's assessment points when the selected option
is the correct one. Coding answers carry a score reported by the grader,
clamped to the question's assessment points.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Mapping

from django.db import transaction
from django.utils import timezone
from rest_framework import serializers

from ...modules.models import QuestionType
from ..models import (
    AssessmentSubmission,
    CodingSubmission,
    McqAnswer,
    SubmissionStatus,
)


@dataclass
class GradedSubmission:
    mcq_score: float
    coding_score: float
    total_points: int

    @property
    def total_score(self) -> float:
        return self.mcq_score + self.coding_score

    @property
    def percentage(self) -> float:
        if not self.total_points:
            return 0.0
        return self.total_score / self.total_points * 100


def _unique_by_question(answers: Iterable[Mapping], field: str) -> Dict[int, Mapping]:
    by_question = {}
    for answer in answers:
        question_id = answer["question"]
        if question_id in by_question:
            raise serializers.ValidationError({field: [f"Duplicate answer for question {question_id}"]})
        by_question[question_id] = answer
    return by_question


@transaction.atomic
def grade_submission(
    submission: AssessmentSubmission,
    mcq_answers: Iterable[Mapping],
    coding_answers: Iterable[Mapping],
) -> GradedSubmission:
    """
    Grade and finalize an in-progress submission.

    Args:
        submission: The student's in-progress submission
        mcq_answers: ``{"question": id, "selectedOption": index}`` items
        coding_answers: ``{"question": id, "score": points, "attempts": n}``
            items

    Returns:
        The scores of the submission

    Raises:
        ValidationError: Answers to questions that are not part of the
            assessment, answers of the wrong question type or duplicates
    """
    links = {
        link.question_id: link
        for link in submission.assessment.assessment_questions.select_related("question")
    }
    mcq = _unique_by_question(mcq_answers, "mcqAnswers")
    coding = _unique_by_question(coding_answers, "codingAnswers")

    for field, answers, expected in (
        ("mcqAnswers", mcq, QuestionType.MCQ),
        ("codingAnswers", coding, QuestionType.CODING),
    ):
        for question_id in answers:
            link = links.get(question_id)
            if link is None or link.question.type != expected:
                raise serializers.ValidationError(
                    {field: [f"Question {question_id} is not a {expected} question of this assessment"]}
                )

    mcq_score = 0.0
    for question_id, answer in mcq.items():
        link = links[question_id]
        is_correct = link.question.is_correct(answer.get("selectedOption"))
        McqAnswer.objects.update_or_create(
            submission=submission,
            question_id=question_id,
            defaults={
                "selected_option": answer.get("selectedOption"),
                "is_correct": is_correct,
            },
        )
        if is_correct:
            mcq_score += link.points

    coding_score = 0.0
    for question_id, answer in coding.items():
        link = links[question_id]
        score = min(max(float(answer.get("score", 0)), 0.0), float(link.points))
        CodingSubmission.objects.update_or_create(
            submission=submission,
            question_id=question_id,
            defaults={
                "attempts": max(int(answer.get("attempts", 1)), 1),
                "best_score": score,
                "is_completed": score >= link.points,
            },
        )
        coding_score += score

    now = timezone.now()
    submission.mcq_score = mcq_score
    submission.coding_score = coding_score
    submission.total_score = mcq_score + coding_score
    submission.status = SubmissionStatus.SUBMITTED
    submission.submitted_at = now
    submission.time_taken = max(int((now - submission.started_at).total_seconds()), 0)
    submission.save()

    return GradedSubmission(
        mcq_score=mcq_score,
        coding_score=coding_score,
        total_points=sum(link.points for link in links.values()),
    )
