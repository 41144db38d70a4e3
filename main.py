from fastapi import FastAPI, HTTPException, Header, Depends
from pydantic import BaseModel
from typing import Optional, Callable
from config import settings
from connectors.registry import build_boards, build_connectors, MONDAY, PROPERTY_MELD
from jobs.ingestion import IngestionJob
from jobs.reminder_dispatcher import ReminderDispatcher
from jobs.runner import build_repository
from processors.message_renderer import MessageRenderer
from services.database import FollowUpRepository, RepositoryError
from services.notification_channel import NotificationChannel, TelegramChannel, NotificationError
from models.follow_up import utc_now
from schedulers.reminder_scheduler import start_scheduler, stop_scheduler
import logging

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="PropControl Follow-Ups",
    version="0.1.0",
    description="Board ingestion and hourly reminder dispatch for property follow-ups"
)

scheduler = None


# Dependencies - built per request, never shared between invocations

def verify_api_key(x_api_key: str = Header(None, alias="X-API-Key")):
    """Simple API key auth for cron and manual triggers"""
    if x_api_key != settings.CRON_API_KEY:
        logger.warning(f"Unauthorized trigger attempt with key: {x_api_key[:8] if x_api_key else 'None'}...")
        raise HTTPException(status_code=401, detail="Unauthorized")


def get_repository() -> FollowUpRepository:
    try:
        return build_repository()
    except RepositoryError as e:
        logger.error(f"Follow-up store unavailable: {e}")
        raise HTTPException(status_code=500, detail=str(e))


def get_channel() -> NotificationChannel:
    return TelegramChannel()


def get_connector_builder() -> Callable:
    return build_connectors


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "environment": settings.ENVIRONMENT,
        "service": "PropControl Follow-Ups",
        "scheduler": "running" if scheduler is not None else "off",
    }


@app.post("/jobs/check-reminders", dependencies=[Depends(verify_api_key)])
def check_reminders(
    repository: FollowUpRepository = Depends(get_repository),
    channel: NotificationChannel = Depends(get_channel),
):
    """Run one reminder sweep (hourly cron target)

    Returns 200 with the sweep tally even when some notifications failed.
    """
    try:
        result = ReminderDispatcher(repository=repository, channel=channel).run_sweep()
        return result.model_dump()
    except Exception as e:
        logger.error(f"Error in check-reminders: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


def _run_sync(sources, repository: FollowUpRepository, connector_builder: Callable):
    try:
        job = IngestionJob(repository=repository, connectors=connector_builder(sources))
        result = job.run(build_boards(sources))
        return result.model_dump(mode="json")
    except Exception as e:
        logger.error(f"❌ Sync failed for {sources}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/jobs/sync/monday", dependencies=[Depends(verify_api_key)])
def sync_monday(
    repository: FollowUpRepository = Depends(get_repository),
    connector_builder: Callable = Depends(get_connector_builder),
):
    """Sync every configured Monday.com board"""
    logger.info("Monday.com sync triggered via API")
    return _run_sync([MONDAY], repository, connector_builder)


@app.post("/jobs/sync/property-meld", dependencies=[Depends(verify_api_key)])
def sync_property_meld(
    repository: FollowUpRepository = Depends(get_repository),
    connector_builder: Callable = Depends(get_connector_builder),
):
    """Sync open unit turns from the Property Meld Projects grid"""
    logger.info("Property Meld sync triggered via API")
    return _run_sync([PROPERTY_MELD], repository, connector_builder)


@app.post("/jobs/sync", dependencies=[Depends(verify_api_key)])
def sync_all(
    repository: FollowUpRepository = Depends(get_repository),
    connector_builder: Callable = Depends(get_connector_builder),
):
    """Sync all sources, one after another"""
    logger.info("Full sync triggered via API")
    return _run_sync([MONDAY, PROPERTY_MELD], repository, connector_builder)


@app.get("/follow-ups/due", dependencies=[Depends(verify_api_key)])
def due_follow_ups(repository: FollowUpRepository = Depends(get_repository)):
    """Preview what the next sweep would send, in dispatch order"""
    try:
        due = repository.due_for_reminder(utc_now())
    except RepositoryError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return {
        "count": len(due),
        "follow_ups": [f.model_dump(mode="json") for f in due],
    }


class NotifyRequest(BaseModel):
    message: Optional[str] = None
    priority: str = "MEDIUM"
    follow_up_id: Optional[str] = None


@app.post("/notify", dependencies=[Depends(verify_api_key)])
def send_adhoc_reminder(
    request: NotifyRequest,
    channel: NotificationChannel = Depends(get_channel),
):
    """Push a one-off reminder through the notification channel"""
    if not request.message:
        raise HTTPException(status_code=400, detail="Message is required")

    text = MessageRenderer().render_adhoc(request.message, request.priority)

    try:
        result = channel.send(text)
    except NotificationError as e:
        logger.error(f"Error sending reminder: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    if not result.ok:
        raise HTTPException(status_code=500, detail=f"Failed to send message: {result.error}")

    return {
        "success": True,
        "message_id": result.message_id,
        "follow_up_id": request.follow_up_id,
    }


@app.on_event("startup")
async def startup_event():
    """Start the hourly sweep when enabled"""
    global scheduler
    logger.info("Starting PropControl Follow-Ups")

    if settings.ENABLE_SCHEDULER:
        scheduler = start_scheduler()
    else:
        logger.info("Scheduler disabled - trigger sweeps via POST /jobs/check-reminders")


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on server shutdown"""
    global scheduler
    logger.info("Shutting down PropControl Follow-Ups")
    if scheduler is not None:
        stop_scheduler(scheduler)
        scheduler = None


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000, log_level="info")
