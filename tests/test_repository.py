"""Tests for FollowUpRepository against the in-memory Supabase fake"""
import pytest
from datetime import datetime, timedelta, timezone
from services.database import (
    FollowUpRepository,
    RepositoryError,
    RepositoryUnavailableError,
    create_supabase_client,
)
from models.follow_up import FollowUp, FollowUpPriority, FollowUpStatus
from processors.normalizer import Normalizer
from tests.fixtures.follow_up_fixtures import (
    NOW,
    make_follow_up,
    make_row,
    unit_turns_board,
    sample_raw_tasks,
)
from tests.fixtures.supabase_fake import FakeSupabaseClient


@pytest.fixture
def client():
    return FakeSupabaseClient()


@pytest.fixture
def repository(client):
    return FollowUpRepository(client, table="follow_ups")


def test_create_client_requires_configuration():
    with pytest.raises(RepositoryUnavailableError):
        create_supabase_client(url="", key="")


def test_upsert_inserts_new_row(repository, client):
    repository.upsert(make_follow_up())

    assert len(client.rows()) == 1
    stored = repository.get_follow_up("monday-com-unit-turns-1001")
    assert stored.status == FollowUpStatus.PENDING
    assert stored.reminders_sent == 0


def test_ingesting_same_record_twice_keeps_one_row(repository, client):
    normalizer = Normalizer()
    raw_task = sample_raw_tasks()[0]

    repository.upsert(normalizer.normalize(raw_task, unit_turns_board(), now=NOW))
    repository.upsert(normalizer.normalize(raw_task, unit_turns_board(), now=NOW + timedelta(hours=1)))

    assert len(client.rows()) == 1


def test_reingest_preserves_reminder_lifecycle(repository):
    """A later sync must not reset status, counter, remind_at or created_at"""
    normalizer = Normalizer()
    raw_task = sample_raw_tasks()[0]

    first = normalizer.normalize(raw_task, unit_turns_board(), now=NOW)
    repository.upsert(first)
    repository.mark_reminded(first.id, NOW + timedelta(hours=13))

    later = NOW + timedelta(days=1)
    repository.upsert(normalizer.normalize(raw_task, unit_turns_board(), now=later))

    stored = repository.get_follow_up(first.id)
    assert stored.status == FollowUpStatus.REMINDED
    assert stored.reminders_sent == 1
    assert stored.remind_at == first.remind_at
    assert stored.created_at == NOW
    assert stored.last_reminder_at == NOW + timedelta(hours=13)


def test_store_rejects_partial_upsert(client):
    """Postgres checks NOT NULL on the whole proposed row, even on conflict"""
    client.table("follow_ups").upsert(make_row(), on_conflict="id").execute()
    partial = make_row()
    del partial["remind_at"]

    with pytest.raises(Exception, match="remind_at"):
        client.table("follow_ups").upsert(partial, on_conflict="id").execute()


def test_reingest_updates_known_row_in_place(repository, client):
    """A known id is written with update(), never a partial upsert"""
    normalizer = Normalizer()
    raw_task = sample_raw_tasks()[1]  # no board due date -> inferred

    first = normalizer.normalize(raw_task, unit_turns_board(), now=NOW)
    repository.upsert(first)
    repository.upsert(normalizer.normalize(raw_task, unit_turns_board(), now=NOW + timedelta(days=1)))

    writes = [action for _, action in client.calls if action in ("upsert", "update")]
    assert writes == ["upsert", "update"]
    stored = repository.get_follow_up(first.id)
    assert stored.due_date == first.due_date
    assert stored.remind_at == first.remind_at


def test_reingest_refreshes_descriptive_fields(repository):
    repository.upsert(make_follow_up(title="Old title"))
    repository.upsert(make_follow_up(title="New title"))

    assert repository.get_follow_up("monday-com-unit-turns-1001").title == "New title"


def test_reingest_never_reopens_completed(repository):
    repository.upsert(make_follow_up(status=FollowUpStatus.COMPLETED, completed_at=NOW))
    repository.upsert(make_follow_up(status=FollowUpStatus.PENDING))

    stored = repository.get_follow_up("monday-com-unit-turns-1001")
    assert stored.status == FollowUpStatus.COMPLETED
    assert stored.completed_at == NOW


def test_reingest_completes_open_follow_up(repository):
    repository.upsert(make_follow_up())
    repository.upsert(make_follow_up(status=FollowUpStatus.COMPLETED, completed_at=NOW))

    stored = repository.get_follow_up("monday-com-unit-turns-1001")
    assert stored.status == FollowUpStatus.COMPLETED
    assert stored.completed_at == NOW


def test_inferred_due_date_does_not_replace_stored(repository):
    board_due = NOW + timedelta(days=3)
    repository.upsert(make_follow_up(due_date=board_due))

    defaulted = make_follow_up(due_date=NOW + timedelta(days=10), due_date_inferred=True)
    repository.upsert(defaulted)

    assert repository.get_follow_up("monday-com-unit-turns-1001").due_date == board_due


def test_upsert_failure_raises_repository_error():
    repository = FollowUpRepository(FakeSupabaseClient(fail_on={"upsert"}))

    with pytest.raises(RepositoryError):
        repository.upsert(make_follow_up())


def test_unreachable_store_raises_unavailable():
    repository = FollowUpRepository(FakeSupabaseClient(fail_on={"select"}))

    with pytest.raises(RepositoryUnavailableError):
        repository.check_connection()
    with pytest.raises(RepositoryUnavailableError):
        repository.due_for_reminder(NOW)


@pytest.mark.parametrize("status", list(FollowUpStatus))
@pytest.mark.parametrize("remind_offset,remind_past", [
    (timedelta(hours=-1), True),
    (timedelta(0), True),
    (timedelta(hours=1), False),
])
def test_due_query(status, remind_offset, remind_past):
    """Due iff status is PENDING/REMINDED and remind_at <= now"""
    client = FakeSupabaseClient(rows=[make_row(status=status, remind_at=NOW + remind_offset)])
    repository = FollowUpRepository(client)

    due = repository.due_for_reminder(NOW)

    expected = remind_past and status != FollowUpStatus.COMPLETED
    assert (len(due) == 1) == expected


def test_due_ordering_by_priority_rank_then_due_date():
    """URGENT before HIGH regardless of how the strings sort"""
    rows = [
        make_row(id="high-1d", priority=FollowUpPriority.HIGH, due_date=NOW + timedelta(days=1)),
        make_row(id="urgent-5d", priority=FollowUpPriority.URGENT, due_date=NOW + timedelta(days=5)),
        make_row(id="low-0d", priority=FollowUpPriority.LOW, due_date=NOW),
        make_row(id="urgent-1d", priority=FollowUpPriority.URGENT, due_date=NOW + timedelta(days=1)),
        make_row(id="medium-2d", priority=FollowUpPriority.MEDIUM, due_date=NOW + timedelta(days=2)),
    ]
    repository = FollowUpRepository(FakeSupabaseClient(rows=rows))

    due = repository.due_for_reminder(NOW)

    assert [f.id for f in due] == ["urgent-1d", "urgent-5d", "high-1d", "medium-2d", "low-0d"]


def test_due_query_skips_malformed_rows():
    broken = make_row(id="broken")
    del broken["title"]
    repository = FollowUpRepository(FakeSupabaseClient(rows=[broken, make_row(id="ok")]))

    due = repository.due_for_reminder(NOW)

    assert [f.id for f in due] == ["ok"]


def test_naive_timestamps_read_as_utc():
    row = make_row()
    row["remind_at"] = "2026-10-19T16:00:00"
    repository = FollowUpRepository(FakeSupabaseClient(rows=[row]))

    follow_up = repository.get_follow_up(row["id"])

    assert follow_up.remind_at == datetime(2026, 10, 19, 16, 0, tzinfo=timezone.utc)


def test_null_counter_and_metadata_tolerated():
    row = make_row()
    row["reminders_sent"] = None
    row["metadata"] = None
    repository = FollowUpRepository(FakeSupabaseClient(rows=[row]))

    follow_up = repository.get_follow_up(row["id"])

    assert follow_up.reminders_sent == 0
    assert follow_up.metadata == {}


def test_mark_reminded_increments(repository, client):
    repository.upsert(make_follow_up())

    repository.mark_reminded("monday-com-unit-turns-1001", NOW)
    repository.mark_reminded("monday-com-unit-turns-1001", NOW + timedelta(hours=1))

    stored = repository.get_follow_up("monday-com-unit-turns-1001")
    assert stored.status == FollowUpStatus.REMINDED
    assert stored.reminders_sent == 2
    assert stored.last_reminder_at == NOW + timedelta(hours=1)


def test_mark_reminded_leaves_completed_alone(repository):
    repository.upsert(make_follow_up(status=FollowUpStatus.COMPLETED, completed_at=NOW))

    repository.mark_reminded("monday-com-unit-turns-1001", NOW)

    stored = repository.get_follow_up("monday-com-unit-turns-1001")
    assert stored.status == FollowUpStatus.COMPLETED
    assert stored.reminders_sent == 0


def test_mark_reminded_unknown_id(repository):
    with pytest.raises(ValueError):
        repository.mark_reminded("missing", NOW)


def test_mark_reminded_failure_raises_repository_error():
    client = FakeSupabaseClient(rows=[make_row()], fail_on={"update"})
    repository = FollowUpRepository(client)

    with pytest.raises(RepositoryError):
        repository.mark_reminded("monday-com-unit-turns-1001", NOW)


def test_list_follow_ups_by_status():
    rows = [
        make_row(id="a", created_at=NOW - timedelta(days=3)),
        make_row(id="b", created_at=NOW - timedelta(days=1)),
        make_row(id="c", status=FollowUpStatus.COMPLETED),
    ]
    repository = FollowUpRepository(FakeSupabaseClient(rows=rows))

    pending = repository.list_follow_ups(status="PENDING")

    assert [f.id for f in pending] == ["b", "a"]
    assert all(isinstance(f, FollowUp) for f in pending)
