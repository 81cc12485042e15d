"""SES integration for candidate notifications."""

import html
from pathlib import Path
from typing import Any, Optional

import boto3
import structlog
from botocore.exceptions import ClientError

from pipeline.config import get_settings
from pipeline.errors import CollaboratorFailure

logger = structlog.get_logger()

TEMPLATE_DIR = Path(__file__).parent.parent / "templates"


class SESNotifier:
    """Sends workflow emails via AWS SES."""

    def __init__(self, client: Optional[Any] = None):
        config = get_settings()
        if client is None:
            client_kwargs = {"region_name": config.SES_REGION}
            if config.SES_ACCESS_KEY_ID and config.SES_SECRET_ACCESS_KEY:
                client_kwargs["aws_access_key_id"] = config.SES_ACCESS_KEY_ID
                client_kwargs["aws_secret_access_key"] = config.SES_SECRET_ACCESS_KEY
            client = boto3.client("ses", **client_kwargs)
        self.client = client
        self.from_email = config.SES_FROM_EMAIL
        self.from_name = config.SES_FROM_NAME

    async def send_email(
        self,
        to: str,
        subject: str,
        html_body: str,
        text_body: Optional[str] = None,
    ) -> str:
        """Send an email via SES.

        Returns:
            SES message ID

        Raises:
            EmailError: If SES rejects the message
        """
        try:
            body = {"Html": {"Data": html_body, "Charset": "utf-8"}}
            if text_body:
                body["Text"] = {"Data": text_body, "Charset": "utf-8"}

            response = self.client.send_email(
                Source=f"{self.from_name} <{self.from_email}>",
                Destination={"ToAddresses": [to]},
                Message={
                    "Subject": {"Data": subject, "Charset": "utf-8"},
                    "Body": body,
                },
            )
            message_id = response["MessageId"]

            logger.info("Email sent", message_id=message_id, to=to, subject=subject)
            return message_id

        except ClientError as e:
            logger.error("SES send failed", error=str(e), to=to)
            raise EmailError(f"Email send failed: {str(e)}") from e

    def _load_template(self, name: str) -> str:
        template_path = TEMPLATE_DIR / name
        if not template_path.exists():
            raise FileNotFoundError(f"Template not found: {template_path}")
        return template_path.read_text(encoding="utf-8")

    def _render_template(self, template: str, **kwargs) -> str:
        """Render a template with {{variable}} substitution."""
        result = template
        for key, value in kwargs.items():
            result = result.replace(f"{{{{{key}}}}}", str(value))
        return result

    async def _send_templated(self, to: str, subject: str, template: str, **template_vars) -> str:
        template_vars.setdefault("from_name", self.from_name)
        html_vars = {
            key: html.escape(str(value)).replace("\n", "<br/>")
            for key, value in template_vars.items()
        }
        html_body = self._render_template(self._load_template(f"{template}.html"), **html_vars)
        text_body = self._render_template(self._load_template(f"{template}.txt"), **template_vars)
        return await self.send_email(to=to, subject=subject, html_body=html_body, text_body=text_body)

    async def send_assignment_invite(
        self,
        to: str,
        candidate_name: str,
        job_title: str,
        assignment_link: str,
        assignment_details: Optional[str] = None,
    ) -> str:
        return await self._send_templated(
            to,
            f"Next Steps: Assignment for {job_title}",
            "assignment_invite",
            candidate_name=candidate_name,
            job_title=job_title,
            assignment_link=assignment_link,
            assignment_details=assignment_details or "",
        )

    async def send_rejection(self, to: str, candidate_name: str, job_title: str, reason: str) -> str:
        return await self._send_templated(
            to,
            f"Update regarding your application for {job_title}",
            "rejection",
            candidate_name=candidate_name,
            job_title=job_title,
            reason=reason,
        )

    async def send_approval_invite(self, to: str, candidate_name: str, job_title: str, booking_link: str) -> str:
        return await self._send_templated(
            to,
            f"Good News! Next Steps for {job_title}",
            "approval_invite",
            candidate_name=candidate_name,
            job_title=job_title,
            booking_link=booking_link,
        )


class EmailError(CollaboratorFailure):
    """Raised when SES rejects a message."""

    def __init__(self, message: str):
        super().__init__(message, retryable=True, collaborator="email")
