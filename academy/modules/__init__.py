"""
Academy Modules Package

Curriculum modules together with the question bank and the notes that make
them up.

Features:
- Modules assigned to study groups, with prerequisite relationships
- Prerequisite cycle detection over the department's module graph
- Question bank with MCQ and coding questions and practice attempts
- Per student progress through a module

Structure:
- models.py: Module, Question and Note
- serializers.py: API serialization and validation
- services/: prerequisite graph and progress calculations
- views/: module, question and note endpoints

Author: Academy Development Team
Version: 1.0.0
"""
