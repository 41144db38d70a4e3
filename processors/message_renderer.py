from models.follow_up import FollowUp, FollowUpPriority
from config import settings
from datetime import datetime
from zoneinfo import ZoneInfo
from html import escape
from typing import Union


PRIORITY_GLYPHS = {
    FollowUpPriority.URGENT: "🚨",
    FollowUpPriority.HIGH: "⚠️",
    FollowUpPriority.MEDIUM: "📋",
    FollowUpPriority.LOW: "ℹ️",
}
DEFAULT_GLYPH = "📋"

OVERDUE_MARKER = "⏰ <b>OVERDUE</b>"


class MessageRenderer:
    """Renders follow-ups as Telegram HTML messages"""

    def __init__(self, display_timezone: str = None):
        self.display_timezone = ZoneInfo(display_timezone or settings.DISPLAY_TIMEZONE)

    def glyph(self, priority: Union[FollowUpPriority, str]) -> str:
        try:
            return PRIORITY_GLYPHS[FollowUpPriority(priority)]
        except ValueError:
            return DEFAULT_GLYPH

    def format_due(self, due_date: datetime) -> str:
        local = due_date.astimezone(self.display_timezone)
        return local.strftime("%m/%d/%Y %I:%M %p %Z")

    def render(self, follow_up: FollowUp, now: datetime) -> str:
        """Full reminder text: glyph, title, description, action, context lines, due date

        Appends the OVERDUE marker when due_date is already behind now.
        """
        lines = [
            f"{self.glyph(follow_up.priority)} <b>{escape(follow_up.title)}</b>",
            "",
            escape(follow_up.description),
            "",
            f"<b>Action:</b> {escape(follow_up.action_needed)}",
        ]

        if follow_up.property_address:
            lines.append(f"<b>Property:</b> {escape(follow_up.property_address)}")

        if follow_up.vendor_name:
            vendor = escape(follow_up.vendor_name)
            if follow_up.vendor_contact:
                vendor += f" ({escape(follow_up.vendor_contact)})"
            lines.append(f"<b>Vendor:</b> {vendor}")

        if follow_up.owner_name:
            owner = escape(follow_up.owner_name)
            if follow_up.owner_contact:
                owner += f" ({escape(follow_up.owner_contact)})"
            lines.append(f"<b>Owner:</b> {owner}")

        due_line = f"<b>Due:</b> {self.format_due(follow_up.due_date)}"
        if follow_up.is_overdue(now):
            due_line += f" {OVERDUE_MARKER}"

        lines.extend(["", due_line])
        return "\n".join(lines)

    def render_adhoc(self, message: str, priority: str = "MEDIUM") -> str:
        """Manual reminder pushed outside the sweep"""
        return f"{self.glyph(priority)} PropControl Reminder\n\n{escape(message)}"
