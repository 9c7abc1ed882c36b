"""Outbound workflow notifications.

The workflow hands the email collaborator a recipient, the event context and
operation-specific fields; rendering and delivery are the client's job.
Delivery is best-effort: failures are logged and never reach the caller, and
nothing is retried here (reminder sweeps re-derive who needs chasing).
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Optional

from eventflow.config import settings
from eventflow.datetimes import isoformat
from eventflow.models.event import Event
from eventflow.models.user import User

logger = logging.getLogger(__name__)

EVENT_SUBMITTED = "event_submitted"
REVIEW_DECISION = "review_decision"
ASSIGNEE_UPDATED = "assignee_updated"
POST_EVENT_DIGEST = "post_event_digest"

_SUBJECTS = {
    EVENT_SUBMITTED: "New event ready: {title}",
    REVIEW_DECISION: "Decision on {title}",
    ASSIGNEE_UPDATED: "Assignment update: {title}",
    POST_EVENT_DIGEST: "Post-event debrief: {title}",
}


@dataclass
class Notification:
    kind: str
    recipient_email: str
    recipient_name: str
    event_title: str
    venue_name: Optional[str]
    start_at: Optional[datetime]
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def subject(self) -> str:
        return _SUBJECTS.get(self.kind, "{title}").format(title=self.event_title)


class EmailClient:
    def send(self, notification: Notification) -> None:  # pragma: no cover - interface
        raise NotImplementedError


class ConsoleEmailClient(EmailClient):
    def send(self, notification: Notification) -> None:
        logger.info(
            "Sending email (console) from %s -> %s: %s",
            settings.EMAIL_FROM, notification.recipient_email, notification.subject,
        )
        logger.debug("Email context: %s", notification.extra)


_client: Optional[EmailClient] = None


def get_email_client() -> EmailClient:
    global _client
    if _client is None:
        _client = ConsoleEmailClient()
    return _client


def set_email_client(client: Optional[EmailClient]) -> None:
    """Install the delivery collaborator (None restores the console client)."""
    global _client
    _client = client


def _deliver(notification: Notification) -> bool:
    if not settings.NOTIFICATIONS_ENABLED:
        logger.debug("Notifications disabled; dropping %s to %s", notification.kind, notification.recipient_email)
        return False
    try:
        get_email_client().send(notification)
    except Exception as exc:  # delivery failures never affect the workflow outcome
        logger.warning("Failed to send %s email to %s: %s", notification.kind, notification.recipient_email, exc)
        return False
    return True


def notify(kind: str, recipient: Optional[User], event: Event, **extra: Any) -> bool:
    """Send one notification about ``event``; returns whether it was handed off."""
    if recipient is None or not recipient.email:
        logger.debug("No recipient for %s on event %s", kind, event.id)
        return False
    venue = getattr(event, "venue", None)
    return _deliver(Notification(
        kind=kind,
        recipient_email=recipient.email,
        recipient_name=recipient.display_name,
        event_title=event.title,
        venue_name=venue.name if venue is not None else None,
        start_at=event.start_at,
        extra={"event_id": event.id, "start_at_iso": isoformat(event.start_at), **extra},
    ))


def notify_many(kind: str, recipients: Iterable[User], event: Event, **extra: Any) -> int:
    return sum(1 for recipient in recipients if notify(kind, recipient, event, **extra))
