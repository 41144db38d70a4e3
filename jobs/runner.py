"""
Per-invocation wiring for the two jobs.

Clients are built fresh for every run and dropped afterwards, so nothing
outlives a single sweep or sync.
"""

from services.database import FollowUpRepository, create_supabase_client
from services.notification_channel import TelegramChannel
from connectors.registry import build_boards, build_connectors
from jobs.ingestion import IngestionJob
from jobs.reminder_dispatcher import ReminderDispatcher
from models.job_result import SweepResult, IngestionResult
from typing import List


def build_repository() -> FollowUpRepository:
    return FollowUpRepository(create_supabase_client())


def run_reminder_sweep() -> SweepResult:
    dispatcher = ReminderDispatcher(
        repository=build_repository(),
        channel=TelegramChannel(),
    )
    return dispatcher.run_sweep()


def run_ingestion(sources: List[str] = None) -> IngestionResult:
    """Sync the given sources ('monday_com', 'property_meld'); all when None"""
    job = IngestionJob(
        repository=build_repository(),
        connectors=build_connectors(sources),
    )
    return job.run(build_boards(sources))
