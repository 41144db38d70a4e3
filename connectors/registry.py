from config import settings
from connectors.base import SourceConnector
from connectors.monday import MondayConnector
from connectors.property_meld import PropertyMeldConnector
from models.follow_up import FollowUpPriority
from models.raw_task import BoardConfig
from utils.text_cleaner import TextCleaner
from typing import Dict, List

MONDAY = "monday_com"
PROPERTY_MELD = "property_meld"

SOURCES = (MONDAY, PROPERTY_MELD)


def monday_boards() -> List[BoardConfig]:
    return [
        BoardConfig(
            key=TextCleaner.slugify(name),
            name=name,
            source=MONDAY,
            url=url,
            default_due_hours=settings.DEFAULT_DUE_HOURS,
            remind_after_hours=settings.REMIND_AFTER_HOURS,
        )
        for name, url in settings.MONDAY_BOARDS.items()
    ]


def property_meld_boards() -> List[BoardConfig]:
    # Unit turns are tracked against a week-out deadline and flagged high
    return [
        BoardConfig(
            key="projects",
            name="Property Meld Unit Turns",
            source=PROPERTY_MELD,
            url=settings.PROPERTY_MELD_PROJECTS_URL,
            default_priority=FollowUpPriority.HIGH,
            default_due_hours=settings.PROPERTY_MELD_DUE_HOURS,
            remind_after_hours=settings.REMIND_AFTER_HOURS,
        )
    ]


def build_boards(sources: List[str] = None) -> List[BoardConfig]:
    """Board configurations for the requested sources (all when None)"""
    sources = sources or list(SOURCES)
    boards = []
    if MONDAY in sources:
        boards.extend(monday_boards())
    if PROPERTY_MELD in sources:
        boards.extend(property_meld_boards())
    return boards


def build_connectors(sources: List[str] = None) -> Dict[str, SourceConnector]:
    """Fresh connectors for one ingestion run, keyed by source"""
    sources = sources or list(SOURCES)
    connectors = {}
    if MONDAY in sources:
        connectors[MONDAY] = MondayConnector(
            email=settings.MONDAY_EMAIL,
            password=settings.MONDAY_PASSWORD,
            login_url=settings.MONDAY_LOGIN_URL,
        )
    if PROPERTY_MELD in sources:
        connectors[PROPERTY_MELD] = PropertyMeldConnector(
            email=settings.PROPERTY_MELD_EMAIL,
            password=settings.PROPERTY_MELD_PASSWORD,
            login_url=settings.PROPERTY_MELD_LOGIN_URL,
        )
    return connectors
