"""
Repositories for the visa reminder feature.
"""

from .reminder_repository import ReminderRepository
from .visa_repository import ProfileRepository, VisaRepository

__all__ = [
    "ProfileRepository",
    "ReminderRepository",
    "VisaRepository",
]
