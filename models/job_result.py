"""
Summary objects returned by the ingestion and reminder jobs.

Every invocation returns one of these, even on partial failure, so the
caller sees an aggregate health signal instead of a crash.
"""

from pydantic import BaseModel
from typing import List, Dict, Optional
from models.follow_up import FollowUp


class DispatchFailure(BaseModel):
    id: str
    title: Optional[str] = None
    error: str


class SweepResult(BaseModel):
    status: str = "success"
    processed: int = 0
    sent: int = 0
    failed: int = 0
    details: List[DispatchFailure] = []
    message: str = ""


class BoardRun(BaseModel):
    key: str
    name: str
    source: str
    status: str  # 'ok' or 'failed'
    items: int = 0
    imported: int = 0
    error: Optional[str] = None


class IngestionFailure(BaseModel):
    board: str
    item: Optional[str] = None  # None when the whole board failed
    error: str


class IngestionResult(BaseModel):
    success: bool = True
    summary: Dict[str, int] = {}
    boards: List[BoardRun] = []
    follow_ups: List[FollowUp] = []
    imported: int = 0
    failed: int = 0
    details: List[IngestionFailure] = []
    message: str = ""
