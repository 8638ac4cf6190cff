"""
Visa reminder feature package.

This vertical slice keeps every layer of the reminder engine co-located
(domain models, repositories, delivery channels, planner and dispatcher
services, the daily job and the API router).
"""

# Re-export the primary building blocks for easy access.
from .api.router import router as reminders_router  # noqa: F401
from .domain.models import DispatchResult, PlanningResult, ReminderOccurrence, Visa  # noqa: F401
from .jobs.dispatch_job import start_reminder_dispatch_scheduler  # noqa: F401
from .services.dispatcher import ReminderDispatcher, get_reminder_dispatcher  # noqa: F401
from .services.planner import ReminderPlanner, reminder_planner  # noqa: F401
