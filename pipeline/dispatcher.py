"""
Post-commit notification dispatch.

The engine commits a transition first and only then hands its notifications
here. Delivery is best-effort: a failure is logged, written to the email log
as ``failed`` and never propagates back into the committed transition.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

import structlog

from pipeline.repository import AuditLog

logger = structlog.get_logger()


class NotificationKind(str, Enum):
    ASSIGNMENT_INVITE = "assignment_invite"
    REJECTION = "rejection"
    APPROVAL_INVITE = "approval_invite"


@dataclass(frozen=True)
class Notification:
    """One email owed to a candidate as the result of a transition."""

    kind: NotificationKind
    candidate_id: str
    to_email: str
    candidate_name: str
    job_title: str
    link: Optional[str] = None
    reason: Optional[str] = None
    assignment_details: Optional[str] = None


@dataclass(frozen=True)
class DeliveryResult:
    notification: Notification
    delivered: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


class Notifier(Protocol):
    async def send_assignment_invite(
        self,
        to: str,
        candidate_name: str,
        job_title: str,
        assignment_link: str,
        assignment_details: Optional[str] = None,
    ) -> str:
        ...

    async def send_rejection(self, to: str, candidate_name: str, job_title: str, reason: str) -> str:
        ...

    async def send_approval_invite(self, to: str, candidate_name: str, job_title: str, booking_link: str) -> str:
        ...


class SideEffectDispatcher:
    """Delivers notifications after commit and records every attempt."""

    def __init__(self, notifier: Notifier, audit: AuditLog):
        self.notifier = notifier
        self.audit = audit

    async def _send(self, notification: Notification) -> str:
        if notification.kind == NotificationKind.ASSIGNMENT_INVITE:
            return await self.notifier.send_assignment_invite(
                to=notification.to_email,
                candidate_name=notification.candidate_name,
                job_title=notification.job_title,
                assignment_link=notification.link,
                assignment_details=notification.assignment_details,
            )
        if notification.kind == NotificationKind.REJECTION:
            return await self.notifier.send_rejection(
                to=notification.to_email,
                candidate_name=notification.candidate_name,
                job_title=notification.job_title,
                reason=notification.reason,
            )
        return await self.notifier.send_approval_invite(
            to=notification.to_email,
            candidate_name=notification.candidate_name,
            job_title=notification.job_title,
            booking_link=notification.link,
        )

    async def dispatch(self, notifications: list[Notification]) -> list[DeliveryResult]:
        results = []
        for notification in notifications:
            try:
                message_id = await self._send(notification)
            except Exception as e:
                # Delivery never unwinds the committed transition
                logger.error(
                    "Notification delivery failed",
                    kind=notification.kind.value,
                    candidate_id=notification.candidate_id,
                    error=str(e),
                )
                self.audit.record_email(
                    email_type=notification.kind.value,
                    to_email=notification.to_email,
                    candidate_id=notification.candidate_id,
                    status="failed",
                    error=str(e)[:1000],
                )
                results.append(DeliveryResult(notification, delivered=False, error=str(e)))
                continue

            self.audit.record_email(
                email_type=notification.kind.value,
                to_email=notification.to_email,
                candidate_id=notification.candidate_id,
                status="sent",
                message_id=message_id,
            )
            logger.info(
                "Notification delivered",
                kind=notification.kind.value,
                candidate_id=notification.candidate_id,
                message_id=message_id,
            )
            results.append(DeliveryResult(notification, delivered=True, message_id=message_id))
        return results
