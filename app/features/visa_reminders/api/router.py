"""
Visa reminder routes.

Usage:
    1. POST /reminders/dispatch - Cron trigger, delivers all due reminders
    2. POST /reminders/plan - Re-plan reminders after a visa create/update
    3. GET /reminders - Current user's reminder occurrences
    4. GET /reminders/visas/risk - Expiry risk for each of the user's visas
"""

import hmac
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, Header, HTTPException, status

from app.auth.verify import get_current_user_id
from app.config import settings
from app.db.helpers import DatabaseError
from app.features.visa_reminders.domain import assess_expiry_risk
from app.features.visa_reminders.repository import ReminderRepository, VisaRepository
from app.features.visa_reminders.services.dispatcher import (
    ReminderDispatcher,
    ReminderDispatchError,
    get_reminder_dispatcher,
)
from app.features.visa_reminders.services.planner import (
    ReminderPlanner,
    ReminderPlannerError,
    reminder_planner,
)
from app.infrastructure.observability.logging import get_logger

from .schemas import (
    DispatchResponse,
    PlanningResponse,
    ReminderListResponse,
    ReminderResponse,
    VisaRiskListResponse,
    VisaRiskResponse,
)

router = APIRouter(prefix="/reminders", tags=["reminders"])
logger = get_logger(__name__)


def get_planner() -> ReminderPlanner:
    return reminder_planner


def get_dispatcher() -> ReminderDispatcher:
    return get_reminder_dispatcher()


def verify_cron_secret(x_cron_secret: str | None = Header(default=None)) -> None:
    expected = settings.REMINDER_CRON_SECRET
    if not expected:
        logger.warning("Dispatch trigger rejected: REMINDER_CRON_SECRET not configured")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Dispatch trigger not configured"
        )

    if not x_cron_secret or not hmac.compare_digest(
        x_cron_secret.encode("utf-8"), expected.encode("utf-8")
    ):
        logger.warning("Dispatch trigger rejected: bad cron secret")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid cron secret")


@router.post(
    "/dispatch",
    response_model=DispatchResponse,
    dependencies=[Depends(verify_cron_secret)],
)
async def dispatch_reminders(dispatcher: ReminderDispatcher = Depends(get_dispatcher)):
    """
    Deliver every unsent reminder whose date has arrived.

    Raises:
        401: Missing or wrong X-Cron-Secret
        503: Due reminders could not be loaded
    """
    try:
        result = await dispatcher.dispatch()
    except ReminderDispatchError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)) from e

    return {"message": result.message, "results": result.to_dict()}


@router.post("/plan", response_model=PlanningResponse)
async def plan_reminders(
    user_id: str = Depends(get_current_user_id),
    planner: ReminderPlanner = Depends(get_planner),
):
    """
    Create any missing reminder occurrences for the user's visas.

    Safe to call repeatedly: existing (visa, offset) pairs are skipped.
    """
    try:
        result = await planner.plan_for_user(user_id)
    except ReminderPlannerError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except DatabaseError as e:
        logger.error("Reminder planning failed", user_id=user_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to plan reminders",
        ) from e

    return result.to_dict()


@router.get("", response_model=ReminderListResponse)
async def list_reminders(user_id: str = Depends(get_current_user_id)):
    try:
        reminders = await ReminderRepository.list_for_user(user_id)
    except DatabaseError as e:
        logger.error("Failed to list reminders", user_id=user_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load reminders",
        ) from e

    items = [
        ReminderResponse(
            id=r.id,
            visa_id=r.visa_id,
            reminder_date=r.reminder_date,
            days_before=r.days_before,
            reminder_type=r.reminder_type,
            channel=r.channel,
            is_sent=r.is_sent,
            sent_at=r.sent_at,
        )
        for r in reminders
    ]
    return ReminderListResponse(reminders=items, count=len(items))


@router.get("/visas/risk", response_model=VisaRiskListResponse)
async def get_visa_risk(user_id: str = Depends(get_current_user_id)):
    try:
        visas = await VisaRepository.list_visas_for_user(user_id)
    except DatabaseError as e:
        logger.error("Failed to load visas for risk check", user_id=user_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load visas",
        ) from e

    today = datetime.now(UTC).date()
    risks = [assess_expiry_risk(visa, today) for visa in visas]

    return VisaRiskListResponse(
        visas=[
            VisaRiskResponse(
                visa_id=risk.visa_id,
                country=risk.country,
                expiry_date=risk.expiry_date,
                days_until_expiry=risk.days_until_expiry,
                level=risk.level,
            )
            for risk in risks
        ],
        expired=sum(1 for risk in risks if risk.level == "expired"),
        expiring=sum(1 for risk in risks if risk.level == "expiring"),
    )
