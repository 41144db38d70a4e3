# Models module - Pydantic models for the follow-up pipeline
from models.follow_up import (
    FollowUp,
    FollowUpType,
    FollowUpPriority,
    FollowUpStatus,
)
from models.raw_task import RawTask, BoardConfig
from models.job_result import (
    SweepResult,
    DispatchFailure,
    IngestionResult,
    IngestionFailure,
    BoardRun,
)

__all__ = [
    "FollowUp",
    "FollowUpType",
    "FollowUpPriority",
    "FollowUpStatus",
    "RawTask",
    "BoardConfig",
    "SweepResult",
    "DispatchFailure",
    "IngestionResult",
    "IngestionFailure",
    "BoardRun",
]
