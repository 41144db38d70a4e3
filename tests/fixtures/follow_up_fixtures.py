"""
Test fixtures for follow-up ingestion and reminder testing
"""

from datetime import datetime, timedelta, timezone
from models.follow_up import FollowUp, FollowUpPriority, FollowUpStatus, FollowUpType
from models.raw_task import BoardConfig, RawTask

# Fixed clock so due/overdue checks are reproducible
NOW = datetime(2026, 10, 19, 17, 0, tzinfo=timezone.utc)


def make_follow_up(**overrides) -> FollowUp:
    """A due, pending MEDIUM follow-up; override any field"""
    fields = {
        "id": "monday-com-unit-turns-1001",
        "type": FollowUpType.VENDOR_QUOTE,
        "status": FollowUpStatus.PENDING,
        "priority": FollowUpPriority.MEDIUM,
        "property_address": "123 Main St",
        "title": "Unit Turns: 123 Main St - Turn",
        "description": "Board: Unit Turns\nStatus: Working on it\nAssigned: Jordan Lee",
        "action_needed": "Follow up on 123 Main St - Turn - Unit Turns",
        "created_at": NOW - timedelta(days=2),
        "due_date": NOW + timedelta(days=1),
        "remind_at": NOW - timedelta(hours=1),
    }
    fields.update(overrides)
    return FollowUp(**fields)


def make_row(**overrides) -> dict:
    """Stored follow_ups row as Supabase returns it"""
    return make_follow_up(**overrides).to_record()


def unit_turns_board() -> BoardConfig:
    return BoardConfig(
        key="unit-turns",
        name="Unit Turns",
        source="monday_com",
        url="https://example.monday.com/boards/unit-turns",
    )


def field_visits_board() -> BoardConfig:
    return BoardConfig(
        key="field-visits",
        name="Field Visits",
        source="monday_com",
        url="https://example.monday.com/boards/field-visits",
    )


def property_meld_board() -> BoardConfig:
    return BoardConfig(
        key="projects",
        name="Property Meld Unit Turns",
        source="property_meld",
        url="https://app.propertymeld.com/projects/",
        default_priority=FollowUpPriority.HIGH,
        default_due_hours=168,
    )


def sample_raw_tasks():
    """Four rows as a Monday board would yield them"""
    return [
        RawTask(source_item_id="1001", name="123 Main St - Turn", status="Working on it",
                due_date="2026-10-22", assigned_to="Jordan Lee", property_address="123 Main St - Turn"),
        RawTask(source_item_id="1002", name="456 Oak Ave URGENT roof leak", status="Stuck"),
        RawTask(source_item_id="1003", name="789 Pine Rd paint", status="Done"),
        RawTask(source_item_id="1004", name="12 Elm St - high priority carpet", due_date="Oct 30"),
    ]


MONDAY_BOARD_HTML = """
<html><body>
<div class="board">
  <div data-testid="item-row" data-item-id="1234567">
    <div data-testid="cell-0">123 Main St - Turn</div>
    <div data-testid="status-cell">Working on it</div>
    <div data-testid="date-cell">2026-10-22</div>
    <div data-testid="person-cell"><img src="/avatar.png" alt="Jordan Lee"></div>
  </div>
  <div data-testid="item-row">
    <div data-testid="cell-0">456 Oak Ave URGENT roof leak</div>
    <a href="https://example.monday.com/boards/1/pulses/7654321">open</a>
    <span>Stuck</span>
  </div>
  <div data-testid="item-row">
    <div data-testid="cell-0">789 Pine Rd</div>
    <div data-testid="status-cell">Done</div>
  </div>
  <div data-testid="item-row">
    <div data-testid="cell-0">ab</div>
  </div>
  <div data-testid="item-row" data-item-id="1234567">
    <div data-testid="cell-0">123 Main St - Turn</div>
    <div data-testid="status-cell">Working on it</div>
  </div>
</div>
</body></html>
"""

# Older markup without data-testid attributes
MONDAY_LEGACY_HTML = """
<html><body>
  <div class="board-row" data-pulse-id="pulse_55501">
    <span class="name-cell">12 Elm St</span>
    <span class="status-label">Scheduled</span>
    <span class="date-cell">Oct 30</span>
  </div>
</body></html>
"""

EMPTY_BOARD_HTML = "<html><body><p>This board is empty</p></body></html>"

PROPERTY_MELD_GRID_HTML = """
<html><body>
<div role="grid">
  <div role="rowgroup">
    <div role="row">
      <div role="columnheader">Project</div>
      <div role="columnheader">Property</div>
      <div role="columnheader">Address</div>
      <div role="columnheader">Unit</div>
    </div>
  </div>
  <div role="rowgroup">
    <div role="row">
      <div role="gridcell"><a href="/2197/m/2197/projects/88001/summary/">Unit Turn - 4B</a></div>
      <div role="gridcell">Maple Court</div>
      <div role="gridcell">100 Maple Ct</div>
      <div role="gridcell">4B</div>
      <div role="gridcell">In Progress</div>
      <div role="gridcell">10/25/2026</div>
      <div role="gridcell" class="assignee-cell">Sam Ortiz</div>
    </div>
    <div role="row">
      <div role="gridcell">Turn - Birch</div>
      <div role="gridcell">Birch Homes</div>
      <div role="gridcell">22 Birch Ln</div>
      <div role="gridcell"></div>
      <div role="gridcell">Scheduled</div>
    </div>
    <div role="row">
      <div role="gridcell">Loading</div>
      <div role="gridcell"></div>
    </div>
  </div>
</div>
</body></html>
"""
