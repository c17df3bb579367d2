from .reports import (
    EXPORT_TYPES,
    assessment_report,
    dashboard_report,
    department_report,
    export_rows,
    group_report,
    student_report,
)
from .statistics import (
    SCORE_BINS,
    calculate_current_streak,
    calculate_median,
    rows_to_csv,
    safe_percentage,
    score_distribution,
)
