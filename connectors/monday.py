"""
Monday.com connector

One login covers every board (Unit Turns, Move-Out Inspections, Reno
Projects, New Onboarding, Field Visits). Monday's markup changes often,
so each field is read through a selector chain with text and literal
fallbacks.
"""

from connectors.base import SourceConnector, BrowserSession, ConnectorError
from connectors.extraction import (
    parse_html,
    node_text,
    select_rows,
    first_text,
    first_match,
    first_attr,
    first_link_match,
    DATE_PATTERNS,
)
from models.raw_task import RawTask, BoardConfig
from utils.identity import content_item_id
from selenium.common.exceptions import TimeoutException
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)

EMAIL_INPUTS = ('input[name="email"]', 'input[type="email"]')
PASSWORD_INPUTS = ('input[name="password"]', 'input[type="password"]')
SUBMIT_BUTTONS = ('button[type="submit"]',)

ROW_SELECTORS = [
    '[data-testid="item-row"]',
    ".board-row",
    '[class*="pulse-component"]',
    '[class*="pulse"]',
    '[class*="item"]',
]
NAME_SELECTORS = ['[data-testid="cell-0"]', ".first-cell", '[class*="name"]']
STATUS_SELECTORS = ['[data-testid*="status"]', '[class*="status"]']
DATE_SELECTORS = ['[data-testid*="date"]', '[class*="date"]']
PERSON_SELECTORS = ['[data-testid*="person"]', '[class*="person"]']

ROW_ID_ATTRS = ("data-item-id", "data-pulse-id", "data-id", "id")

# Monday's stock status labels, used when no status cell is found
STATUS_PATTERNS = [
    r"\b(Done|Working on it|Stuck|Not Started|In Progress|Scheduled|Waiting on \w+)\b",
]

MIN_NAME_LENGTH = 3


class MondayConnector(SourceConnector):
    source = "monday_com"

    def login(self, session: BrowserSession):
        session.open(self.login_url)
        session.fill(EMAIL_INPUTS, self.email)

        # Newer sign-in flow asks for the email first, then the password
        try:
            session.fill(PASSWORD_INPUTS, self.password, timeout=3)
        except TimeoutException:
            session.click(SUBMIT_BUTTONS)
            session.fill(PASSWORD_INPUTS, self.password)

        session.click(SUBMIT_BUTTONS)
        try:
            session.wait_until_url_leaves("sign_in")
        except TimeoutException as e:
            raise ConnectorError("Monday.com login was not confirmed (still on sign-in page)") from e

    @property
    def ready_selectors(self):
        return ROW_SELECTORS[:3]

    def parse_rows(self, html: str, board: BoardConfig) -> List[RawTask]:
        """Extract every visible item row of a board page"""
        soup = parse_html(html)
        selector, rows = select_rows(soup, ROW_SELECTORS)
        if not rows:
            return []

        logger.debug(f"{board.name}: {len(rows)} rows via '{selector}'")

        tasks = {}
        for row in rows:
            try:
                task = self.parse_row(row)
            except Exception as e:
                logger.error(f"Error parsing row in {board.name}: {e}")
                continue
            if task is None:
                continue
            if task.source_item_id in tasks:
                logger.debug(f"{board.name}: duplicate row {task.source_item_id} skipped")
                continue
            tasks[task.source_item_id] = task

        return list(tasks.values())

    def parse_row(self, row) -> Optional[RawTask]:
        text = node_text(row)
        if not text:
            return None

        name = first_text(row, NAME_SELECTORS) or text[:60]
        if len(name) < MIN_NAME_LENGTH:
            return None

        status = (
            first_text(row, STATUS_SELECTORS)
            or first_match(text, STATUS_PATTERNS)
            or "Active"
        )
        due_date = first_text(row, DATE_SELECTORS) or first_match(text, DATE_PATTERNS)
        assigned_to = first_text(row, PERSON_SELECTORS, default="Unassigned")

        item_id = (
            first_attr(row, ROW_ID_ATTRS, pattern=r"(\d{3,})")
            or first_link_match(row, r"/pulses/(\d+)")
            or content_item_id(name)
        )

        return RawTask(
            source_item_id=item_id,
            name=name,
            status=status,
            due_date=due_date,
            assigned_to=assigned_to,
            property_address=name,
            raw_text=text,
        )
