"""Hireflow: multi-tenant applicant tracking backend."""

__version__ = "1.0.0"
