from supabase import create_client, Client
from config import settings
from typing import List, Optional, Dict, Any
from models.follow_up import (
    FollowUp,
    FollowUpStatus,
    OPEN_STATUSES,
    LIFECYCLE_FIELDS,
)
from datetime import datetime
import logging

logger = logging.getLogger(__name__)


class RepositoryError(Exception):
    """A write to the follow_ups table failed"""


class RepositoryUnavailableError(RepositoryError):
    """The follow_ups store could not be reached at all"""


def create_supabase_client(url: str = None, key: str = None) -> Client:
    """Build a Supabase client for one job invocation"""
    url = url or settings.SUPABASE_URL
    key = key or settings.SUPABASE_SERVICE_ROLE_KEY
    if not url or not key:
        raise RepositoryUnavailableError("SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY not configured")
    try:
        return create_client(url, key)
    except Exception as e:
        raise RepositoryUnavailableError(f"Could not create Supabase client: {e}") from e


class FollowUpRepository:
    """Durable store of FollowUp rows (Supabase table follow_ups)"""

    def __init__(self, client: Client, table: str = None):
        self.client = client
        self.table = table or settings.FOLLOW_UPS_TABLE

    def _query(self):
        return self.client.table(self.table)

    def check_connection(self):
        """Cheap read proving the store is reachable; raises RepositoryUnavailableError"""
        try:
            self._query().select("id").limit(1).execute()
        except Exception as e:
            logger.error(f"Follow-up store unreachable: {e}")
            raise RepositoryUnavailableError(str(e)) from e

    def get_follow_up(self, follow_up_id: str) -> Optional[FollowUp]:
        """Get follow-up by ID"""
        try:
            response = (
                self._query()
                .select("*")
                .eq("id", follow_up_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error(f"Error fetching follow-up {follow_up_id}: {e}")
            raise RepositoryUnavailableError(str(e)) from e

        return FollowUp(**response.data[0]) if response.data else None

    def list_follow_ups(self, status: str = None, limit: int = 100) -> List[FollowUp]:
        """Most recently created follow-ups, optionally filtered by status"""
        try:
            query = self._query().select("*")
            if status:
                query = query.eq("status", status)
            response = query.order("created_at", desc=True).limit(limit).execute()
        except Exception as e:
            logger.error(f"Error listing follow-ups: {e}")
            raise RepositoryUnavailableError(str(e)) from e

        return self._parse_rows(response.data)

    def upsert(self, follow_up: FollowUp):
        """Merge-or-insert on id

        A new id is inserted as a full row. A known id is updated in place
        with only the columns the board owns; an upsert would send the
        omitted NOT NULL columns as NULL. Descriptive fields are replaced.
        Reminder lifecycle (created_at, remind_at, reminders_sent,
        last_reminder_at) stays as stored, status only moves forward and a
        defaulted due date never replaces a stored one.
        """
        existing = self.get_follow_up(follow_up.id)
        record = follow_up.to_record()

        if existing:
            for field in LIFECYCLE_FIELDS:
                record.pop(field, None)

            status = existing.status.advance_to(follow_up.status)
            record["status"] = status.value

            if existing.completed_at:
                record.pop("completed_at", None)
            elif status != FollowUpStatus.COMPLETED:
                record["completed_at"] = None

            if follow_up.due_date_inferred:
                record.pop("due_date", None)

            logger.debug(f"Re-ingesting follow-up {follow_up.id} (status {status.value})")

        try:
            if existing:
                self._query().update(record).eq("id", follow_up.id).execute()
            else:
                self._query().upsert(record, on_conflict="id").execute()
        except Exception as e:
            logger.error(f"Error upserting follow-up {follow_up.id}: {e}")
            raise RepositoryError(f"Failed to save follow-up {follow_up.id}: {e}") from e

    def due_for_reminder(self, now: datetime) -> List[FollowUp]:
        """Open follow-ups whose remind_at has passed, most pressing first

        Ordered by priority rank (URGENT > HIGH > MEDIUM > LOW), then by
        due_date ascending. Supabase would sort the priority column
        alphabetically, so ranking happens here.
        """
        try:
            response = (
                self._query()
                .select("*")
                .in_("status", [s.value for s in OPEN_STATUSES])
                .lte("remind_at", now.isoformat())
                .execute()
            )
        except Exception as e:
            logger.error(f"Error fetching due follow-ups: {e}")
            raise RepositoryUnavailableError(str(e)) from e

        due = [f for f in self._parse_rows(response.data) if f.is_due(now)]
        due.sort(key=lambda f: (-f.priority.rank, f.due_date))
        return due

    def mark_reminded(self, follow_up_id: str, sent_at: datetime):
        """Record one successful notification: counter +1, timestamp, status REMINDED"""
        existing = self.get_follow_up(follow_up_id)
        if not existing:
            raise ValueError(f"Follow-up {follow_up_id} not found")

        if existing.status == FollowUpStatus.COMPLETED:
            logger.warning(f"Follow-up {follow_up_id} completed meanwhile, not marking reminded")
            return

        update: Dict[str, Any] = {
            "reminders_sent": existing.reminders_sent + 1,
            "last_reminder_at": sent_at.isoformat(),
            "status": FollowUpStatus.REMINDED.value,
        }

        try:
            (
                self._query()
                .update(update)
                .eq("id", follow_up_id)
                .neq("status", FollowUpStatus.COMPLETED.value)
                .execute()
            )
        except Exception as e:
            logger.error(f"Error marking follow-up {follow_up_id} reminded: {e}")
            raise RepositoryError(str(e)) from e

    def _parse_rows(self, rows: Optional[List[dict]]) -> List[FollowUp]:
        """Build FollowUps, skipping rows that no longer validate"""
        follow_ups = []
        for row in rows or []:
            try:
                follow_ups.append(FollowUp(**row))
            except Exception as e:
                logger.warning(f"Skipping malformed follow-up row {row.get('id')}: {e}")
        return follow_ups
