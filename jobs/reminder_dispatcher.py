from services.database import FollowUpRepository
from services.notification_channel import NotificationChannel
from processors.message_renderer import MessageRenderer
from models.follow_up import FollowUp, utc_now
from models.job_result import SweepResult, DispatchFailure
from datetime import datetime
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class ReminderDispatcher:
    """Hourly sweep: notify on every due follow-up, one entity at a time

    Lifecycle is PENDING -> REMINDED -> COMPLETED. A REMINDED follow-up whose
    remind_at has passed is picked up again on every sweep until someone
    completes it (escalation); reminders_sent counts those nudges.
    """

    def __init__(
        self,
        repository: FollowUpRepository,
        channel: NotificationChannel,
        renderer: MessageRenderer = None,
    ):
        self.repository = repository
        self.channel = channel
        self.renderer = renderer or MessageRenderer()

    def dispatch(self, follow_up: FollowUp, now: datetime) -> Optional[str]:
        """Send one reminder and record it

        Returns:
            None on success, otherwise the failure reason
        """
        text = self.renderer.render(follow_up, now)
        result = self.channel.send(text)

        if not result.ok:
            return result.error or "channel rejected message"

        # Only a confirmed send advances the lifecycle
        self.repository.mark_reminded(follow_up.id, utc_now())
        return None

    def run_sweep(self, now: Optional[datetime] = None) -> SweepResult:
        """Process every follow-up due at `now`

        A failure on one follow-up (channel rejection, network error, failed
        commit) is recorded and the sweep moves on. Only a failure to query
        the repository propagates.

        Returns:
            SweepResult with processed/sent/failed counts and failure details
        """
        now = now or utc_now()
        logger.info("Checking for due reminders...")

        due = self.repository.due_for_reminder(now)

        if not due:
            logger.info("No reminders due")
            return SweepResult(message="No reminders due")

        logger.info(f"Found {len(due)} due reminders")

        result = SweepResult(processed=len(due))

        for follow_up in due:
            try:
                error = self.dispatch(follow_up, now)
            except Exception as e:
                logger.error(f"Error processing reminder {follow_up.id}: {e}", exc_info=True)
                error = str(e)

            if error is None:
                result.sent += 1
                logger.info(f"Sent reminder for: {follow_up.title}")
            else:
                result.failed += 1
                result.details.append(
                    DispatchFailure(id=follow_up.id, title=follow_up.title, error=error)
                )
                logger.error(f"Failed to send reminder for {follow_up.id}: {error}")

        result.message = "Reminder check complete"
        logger.info(f"Sweep complete: {result.sent} sent, {result.failed} failed")
        return result
