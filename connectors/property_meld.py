"""
Property Meld connector - open unit turn projects from the Projects grid
"""

from connectors.base import SourceConnector, BrowserSession, ConnectorError
from connectors.extraction import (
    parse_html,
    node_text,
    select_rows,
    first_text,
    first_match,
    first_link_match,
    first_href,
    DATE_PATTERNS,
)
from models.raw_task import RawTask, BoardConfig
from utils.identity import content_item_id
from selenium.common.exceptions import TimeoutException
from urllib.parse import urljoin
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)

BASE_URL = "https://app.propertymeld.com"

EMAIL_INPUTS = ('input[name="email"]', 'input[type="email"]')
PASSWORD_INPUTS = ('input[name="password"]', 'input[type="password"]')
SUBMIT_BUTTONS = ('button[type="submit"]',)

ROW_SELECTORS = [
    'div[role="grid"] div[role="rowgroup"]:not(:first-child) div[role="row"]',
    'div[role="grid"] div[role="row"]',
    "table tbody tr",
]
CELL_SELECTORS = ['div[role="gridcell"]', "td"]
ASSIGNEE_SELECTORS = ['[data-testid*="assignee"]', '[class*="assignee"]', '[class*="coordinator"]']

STATUS_PATTERNS = [r"\b(Completed|Done|In Progress|Scheduled|On Hold|Canceled)\b"]

# name, property, address, unit
MIN_CELLS = 4


class PropertyMeldConnector(SourceConnector):
    source = "property_meld"

    def login(self, session: BrowserSession):
        session.open(self.login_url)
        session.fill(EMAIL_INPUTS, self.email)
        session.fill(PASSWORD_INPUTS, self.password)
        session.click(SUBMIT_BUTTONS)
        try:
            session.wait_until_url_leaves("login")
        except TimeoutException as e:
            raise ConnectorError("Property Meld login was not confirmed (still on login page)") from e

    @property
    def ready_selectors(self):
        return ('div[role="grid"]', "table")

    def parse_rows(self, html: str, board: BoardConfig) -> List[RawTask]:
        soup = parse_html(html)
        selector, rows = select_rows(soup, ROW_SELECTORS)
        if not rows:
            return []

        logger.debug(f"Found {len(rows)} project rows via '{selector}'")

        tasks = {}
        for row in rows:
            try:
                task = self.parse_row(row)
            except Exception as e:
                logger.error(f"Error parsing project row: {e}")
                continue
            if task is not None:
                tasks[task.source_item_id] = task

        return list(tasks.values())

    def parse_row(self, row) -> Optional[RawTask]:
        cells = []
        for selector in CELL_SELECTORS:
            cells = row.select(selector)
            if cells:
                break

        # Header and spacer rows carry no grid cells
        if len(cells) < MIN_CELLS:
            return None

        project_name = node_text(cells[0])
        property_name = node_text(cells[1])
        address = node_text(cells[2])
        unit = node_text(cells[3])

        if not project_name or not address:
            return None

        row_text = node_text(row)
        trailing_text = " ".join(node_text(cell) for cell in cells[MIN_CELLS:])

        href = first_href(cells[0])
        project_id = (
            first_link_match(cells[0], r"/projects/(\d+)")
            or content_item_id(project_name, address, unit)
        )

        return RawTask(
            source_item_id=project_id,
            name=project_name,
            status=first_match(trailing_text, STATUS_PATTERNS, default="Active"),
            due_date=first_match(trailing_text, DATE_PATTERNS),
            assigned_to=first_text(row, ASSIGNEE_SELECTORS, default="Unassigned"),
            property_name=property_name or None,
            property_address=address,
            unit=unit or None,
            url=urljoin(BASE_URL, href) if href else None,
            raw_text=row_text,
        )
