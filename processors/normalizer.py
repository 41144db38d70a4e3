from models.follow_up import (
    FollowUp,
    FollowUpType,
    FollowUpPriority,
    FollowUpStatus,
    utc_now,
)
from models.raw_task import RawTask, BoardConfig
from utils.identity import make_follow_up_id
from dateutil import parser as date_parser
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple
import logging

logger = logging.getLogger(__name__)


# Matched case-insensitively against item name and row text
URGENT_KEYWORDS = ("urgent", "asap")
HIGH_KEYWORDS = ("high priority",)
COMPLETION_KEYWORDS = ("done",)

# Board-name keyword -> follow-up type, first match wins
BOARD_TYPE_RULES = [
    ("move-out", FollowUpType.OWNER_APPROVAL),
    ("move out", FollowUpType.OWNER_APPROVAL),
    ("field", FollowUpType.TURN_DEADLINE),
    ("onboarding", FollowUpType.VENDOR_QUOTE),
]

SOURCE_DEFAULT_TYPES = {
    "monday_com": FollowUpType.VENDOR_QUOTE,
    "property_meld": FollowUpType.UNIT_TURN,
}

SOURCE_LABELS = {
    "monday_com": "MONDAY.COM UPDATE",
    "property_meld": "PROPERTY MELD UNIT TURN",
}


class Normalizer:
    """Maps a scraped RawTask plus its board identity onto a FollowUp"""

    def infer_type(self, board: BoardConfig) -> FollowUpType:
        if board.follow_up_type:
            return board.follow_up_type

        board_name = board.name.lower()
        for keyword, follow_up_type in BOARD_TYPE_RULES:
            if keyword in board_name:
                return follow_up_type

        return SOURCE_DEFAULT_TYPES.get(board.source, FollowUpType.GENERAL)

    def infer_priority(
        self, text: str, default: FollowUpPriority = FollowUpPriority.MEDIUM
    ) -> FollowUpPriority:
        """Crude keyword scan: 'urgent'/'asap' -> URGENT, 'high priority' -> HIGH"""
        lowered = (text or "").lower()

        if any(keyword in lowered for keyword in URGENT_KEYWORDS):
            return FollowUpPriority.URGENT
        if any(keyword in lowered for keyword in HIGH_KEYWORDS):
            return FollowUpPriority.HIGH
        return default

    def infer_status(self, raw_status: str) -> FollowUpStatus:
        lowered = (raw_status or "").lower()
        if any(keyword in lowered for keyword in COMPLETION_KEYWORDS):
            return FollowUpStatus.COMPLETED
        return FollowUpStatus.PENDING

    def parse_due_date(self, text: Optional[str], now: datetime) -> Optional[datetime]:
        """Parse a board date cell; None when there is nothing usable

        Partial dates ('Oct 22') are filled in from now. Naive results are UTC.
        """
        if not text or not text.strip() or text.strip() in ("-", "\u2014"):
            return None

        try:
            parsed = date_parser.parse(
                text,
                default=now.replace(hour=0, minute=0, second=0, microsecond=0, tzinfo=None),
            )
        except (ValueError, OverflowError) as e:
            logger.debug(f"Unparseable due date '{text}': {e}")
            return None

        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    def resolve_dates(
        self, raw_task: RawTask, board: BoardConfig, now: datetime
    ) -> Tuple[datetime, datetime, bool]:
        """Return (due_date, remind_at, due_date_inferred)

        remind_at does not depend on the due date: the first nudge lands
        remind_after_hours after ingestion even when the deadline is far off.
        """
        remind_at = now + timedelta(hours=board.remind_after_hours)

        due_date = self.parse_due_date(raw_task.due_date, now)
        if due_date is not None:
            return due_date, remind_at, False

        return now + timedelta(hours=board.default_due_hours), remind_at, True

    def normalize(
        self, raw_task: RawTask, board: BoardConfig, now: Optional[datetime] = None
    ) -> FollowUp:
        """Build the canonical FollowUp for one scraped record

        Args:
            raw_task: Row extracted by a source connector
            board: Identity of the board the row came from
            now: Ingestion time (defaults to the current UTC time)

        Returns:
            FollowUp whose id depends only on (source, board key, source item id)
        """
        now = now or utc_now()

        follow_up_type = self.infer_type(board)
        priority = self.infer_priority(
            f"{raw_task.name} {raw_task.raw_text}", default=board.default_priority
        )
        status = self.infer_status(raw_task.status)
        due_date, remind_at, due_date_inferred = self.resolve_dates(raw_task, board, now)

        address = raw_task.property_address or raw_task.name

        description_lines = [
            f"Board: {board.name}",
            f"Status: {raw_task.status}",
            f"Assigned: {raw_task.assigned_to}",
        ]
        if raw_task.property_name:
            description_lines.append(f"Property: {raw_task.property_name}")
        if raw_task.unit:
            description_lines.append(f"Unit: {raw_task.unit}")
        if raw_task.url:
            description_lines.append(f"Link: {raw_task.url}")

        return FollowUp(
            id=make_follow_up_id(board.source, board.key, raw_task.source_item_id),
            type=follow_up_type,
            status=status,
            priority=priority,
            property_address=address,
            title=f"{board.name}: {raw_task.name}",
            description="\n".join(description_lines),
            action_needed=f"Follow up on {raw_task.name} - {board.name}",
            created_at=now,
            due_date=due_date,
            remind_at=remind_at,
            completed_at=now if status == FollowUpStatus.COMPLETED else None,
            message_template=self.build_message_template(raw_task, board),
            metadata={
                "source": board.source,
                "board": board.name,
                "board_key": board.key,
                "source_item_id": raw_task.source_item_id,
                "status": raw_task.status,
                "assigned_to": raw_task.assigned_to,
                "due_date": raw_task.due_date,
                "url": raw_task.url,
                "imported_at": now.isoformat(),
            },
            due_date_inferred=due_date_inferred,
        )

    def build_message_template(self, raw_task: RawTask, board: BoardConfig) -> str:
        label = SOURCE_LABELS.get(board.source, "BOARD UPDATE")
        lines = [
            f"📋 {label}",
            "",
            f"Board: {board.name}",
            f"Property: {raw_task.property_address or raw_task.name}",
            f"Status: {raw_task.status}",
            f"Assigned: {raw_task.assigned_to}",
        ]
        if raw_task.due_date:
            lines.append(f"Due: {raw_task.due_date}")
        lines.extend(["", "Action: Follow up needed"])
        return "\n".join(lines)

    def normalize_many(
        self, raw_tasks: List[RawTask], board: BoardConfig, now: Optional[datetime] = None
    ) -> Tuple[List[FollowUp], List[Tuple[RawTask, str]]]:
        """Normalize a board's rows, isolating records that fail validation

        Returns:
            (follow_ups, failures) where failures pairs each bad RawTask with its error
        """
        now = now or utc_now()
        follow_ups = []
        failures = []

        for raw_task in raw_tasks:
            try:
                follow_ups.append(self.normalize(raw_task, board, now=now))
            except Exception as e:
                logger.error(f"Failed to normalize '{raw_task.name}' from {board.name}: {e}")
                failures.append((raw_task, str(e)))

        return follow_ups, failures
