"""
Academy Package - role-based learning management backend

This package contains every module of the academy learning platform.
It serves the REST API for departments, study groups, learning modules,
questions, assessments, notices and analytics.

Features:
- Role-based access for Admin, HOD, Teacher and Student users
- Department and study group administration
- Modules with prerequisites, questions and notes
- Assessments with automatic MCQ grading and performance metrics
- Targeted notices with per-user read tracking
- Analytics dashboards and data export

Structure:
- users/: Profiles, roles, authentication
- organization/: Departments and study groups
- modules/: Learning modules, questions, notes
- assessments/: Assessments, submissions, performance metrics
- notices/: Announcements and read tracking
- analytics/: Aggregated statistics and export
- management/: Django management commands

Author: Academy Development Team
Version: 1.0.0
"""
