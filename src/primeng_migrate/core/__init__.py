"""
Core Package.

Contains the rule-driven substitution machinery:
- Rule model and custom transforms
- File scanner
- Change sets and reports
- Migration engine
"""
