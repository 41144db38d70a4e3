from pydantic import BaseModel, Field, field_validator
from typing import Optional, Dict, Any
from datetime import datetime, timezone
from enum import Enum
import json


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class FollowUpType(str, Enum):
    VENDOR_QUOTE = "VENDOR_QUOTE"
    OWNER_APPROVAL = "OWNER_APPROVAL"
    TURN_DEADLINE = "TURN_DEADLINE"
    UNIT_TURN = "UNIT_TURN"
    GENERAL = "GENERAL"


class FollowUpPriority(str, Enum):
    URGENT = "URGENT"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @property
    def rank(self) -> int:
        return PRIORITY_RANK[self]


class FollowUpStatus(str, Enum):
    PENDING = "PENDING"
    REMINDED = "REMINDED"
    COMPLETED = "COMPLETED"

    def advance_to(self, other: "FollowUpStatus") -> "FollowUpStatus":
        """Return whichever of the two states is further along the lifecycle"""
        if STATUS_ORDER[other] > STATUS_ORDER[self]:
            return other
        return self


# Higher rank is notified first
PRIORITY_RANK = {
    FollowUpPriority.URGENT: 4,
    FollowUpPriority.HIGH: 3,
    FollowUpPriority.MEDIUM: 2,
    FollowUpPriority.LOW: 1,
}

STATUS_ORDER = {
    FollowUpStatus.PENDING: 0,
    FollowUpStatus.REMINDED: 1,
    FollowUpStatus.COMPLETED: 2,
}

# States the dispatcher still acts on
OPEN_STATUSES = (FollowUpStatus.PENDING, FollowUpStatus.REMINDED)

# Owned by the dispatcher; re-ingestion never writes these over a stored row
LIFECYCLE_FIELDS = ("created_at", "remind_at", "reminders_sent", "last_reminder_at")


class FollowUp(BaseModel):
    id: str
    type: FollowUpType = FollowUpType.GENERAL
    status: FollowUpStatus = FollowUpStatus.PENDING
    priority: FollowUpPriority = FollowUpPriority.MEDIUM

    # Context (all optional)
    property_id: Optional[str] = None
    property_address: Optional[str] = None
    work_order_id: Optional[str] = None
    vendor_name: Optional[str] = None
    vendor_contact: Optional[str] = None
    owner_name: Optional[str] = None
    owner_contact: Optional[str] = None

    title: str
    description: str
    action_needed: str

    # Temporal
    created_at: datetime = Field(default_factory=utc_now)
    due_date: datetime
    remind_at: datetime
    completed_at: Optional[datetime] = None

    # Escalation
    reminders_sent: int = 0
    last_reminder_at: Optional[datetime] = None

    message_template: Optional[str] = None

    # Provenance only (source, board, raw status, imported_at, ...)
    metadata: Dict[str, Any] = {}

    # Set by the normalizer when the board had no usable due date; never persisted
    due_date_inferred: bool = Field(default=False, exclude=True)

    class Config:
        from_attributes = True

    @field_validator("created_at", "due_date", "remind_at", "completed_at", "last_reminder_at")
    @classmethod
    def assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # follow_ups timestamps written without a zone are UTC
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @field_validator("reminders_sent", mode="before")
    @classmethod
    def null_counter_is_zero(cls, value):
        return 0 if value is None else value

    @field_validator("metadata", mode="before")
    @classmethod
    def null_metadata_is_empty(cls, value):
        if value is None:
            return {}
        if isinstance(value, str):
            # Older rows stored the blob as a JSON string
            try:
                decoded = json.loads(value)
            except ValueError:
                return {"raw": value}
            return decoded if isinstance(decoded, dict) else {"raw": decoded}
        return value

    def is_overdue(self, now: datetime) -> bool:
        return self.due_date < now

    def is_due(self, now: datetime) -> bool:
        return self.status in OPEN_STATUSES and self.remind_at <= now

    def to_record(self) -> Dict[str, Any]:
        """Row payload for the follow_ups table (JSON-safe)"""
        return self.model_dump(mode="json")
