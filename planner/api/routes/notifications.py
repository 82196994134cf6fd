"""Notification settings and scheduling routes."""

import logging

from fastapi import APIRouter

from planner.api.deps import Container, http_error
from planner.schemas.notifications import NotificationSettings, SchedulingReport, Trigger
from planner.services.errors import PlannerError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("/settings", response_model=NotificationSettings)
async def get_notification_settings(container: Container) -> NotificationSettings:
    return await container.settings_provider.get()


@router.put("/settings", response_model=NotificationSettings)
async def update_notification_settings(
    data: NotificationSettings,
    container: Container,
) -> NotificationSettings:
    """
    Replace the notification settings.

    Every existing schedule may be stale afterwards, so all reminders are
    cancelled and rebuilt from the new settings.
    """
    try:
        saved = await container.settings_provider.save(data)
    except PlannerError as e:
        raise http_error(e) from e

    report = await container.assignments.reschedule_all()
    logger.info(
        "Settings changed: %d notifications scheduled, %d failed",
        report.scheduled,
        report.failed,
    )
    return saved


@router.get("/scheduled", response_model=list[Trigger])
async def list_scheduled(container: Container) -> list[Trigger]:
    """Pending reminders, soonest first."""
    return await container.scheduler.pending()


@router.post("/check", response_model=SchedulingReport)
async def check_notifications(container: Container) -> SchedulingReport:
    """Schedule missing reminders and cancel those no assignment still needs."""
    return await container.assignments.check_notifications()


@router.post("/reschedule", response_model=SchedulingReport)
async def reschedule_notifications(container: Container) -> SchedulingReport:
    """Cancel every reminder and schedule all of them again."""
    return await container.assignments.reschedule_all()
