"""
AssignHub Package
=================

Flask API for university coursework: teachers publish assignments, tutorials
and lab instructions for a student year, students upload submissions, and
teachers grade them. Backed by Supabase (auth, tables, object storage).

Structure:
- routes/: API route blueprints
- services/: Submission lifecycle, grading, identity and file transfer
- repositories.py: Typed access to the users/assignments/submissions tables
- provisioning/: Bucket and row-level-security setup scripts
- config.py: Configuration management
"""

__version__ = "1.0.0"
