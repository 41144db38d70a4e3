from pydantic import BaseModel
from typing import Optional
from models.follow_up import FollowUpType, FollowUpPriority


class BoardConfig(BaseModel):
    """Identity and defaults for one external board view"""
    key: str  # slug, part of every follow-up id from this board
    name: str  # display name, e.g. 'Move-Out Inspections'
    source: str  # 'monday_com', 'property_meld'
    url: str
    follow_up_type: Optional[FollowUpType] = None  # overrides name-based inference
    default_priority: FollowUpPriority = FollowUpPriority.MEDIUM
    default_due_hours: int = 48
    remind_after_hours: int = 12


class RawTask(BaseModel):
    """Best-effort record scraped from a board row"""
    source_item_id: str  # board-assigned id, or a content hash when the board shows none
    name: str
    status: str = "Active"
    due_date: Optional[str] = None  # raw cell text, parsed by the normalizer
    assigned_to: str = "Unassigned"
    property_name: Optional[str] = None
    property_address: Optional[str] = None
    unit: Optional[str] = None
    url: Optional[str] = None
    raw_text: str = ""
