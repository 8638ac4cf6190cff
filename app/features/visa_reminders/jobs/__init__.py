"""
Job runners for the visa reminder feature.
"""

from .dispatch_job import (
    ReminderDispatchJob,
    reminder_dispatch_job,
    run_reminder_dispatch_once,
    start_reminder_dispatch_scheduler,
)

__all__ = [
    "ReminderDispatchJob",
    "reminder_dispatch_job",
    "run_reminder_dispatch_once",
    "start_reminder_dispatch_scheduler",
]
