from .grading import GradedSubmission, grade_submission
from .metrics import record_assessment_result, record_practice_attempt
