# Master database
from .super_admin import SuperAdmin
from .tenant import SubscriptionPlan, SubscriptionStatus, Tenant

# Tenant databases
from .user import Department, User, UserRole
from .requirement import Requirement
from .job_description import JobDescription
from .candidate import Candidate
from .application import Application

__all__ = [
    "SuperAdmin",
    "Tenant",
    "SubscriptionPlan",
    "SubscriptionStatus",
    "User",
    "UserRole",
    "Department",
    "Requirement",
    "JobDescription",
    "Candidate",
    "Application",
]
