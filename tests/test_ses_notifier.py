"""Tests for SES notifications."""

import boto3
import pytest
from moto import mock_aws

from pipeline.config import get_settings
from pipeline.integrations import EmailError, SESNotifier


@pytest.fixture
def ses_client():
    with mock_aws():
        client = boto3.client("ses", region_name="us-east-1")
        client.verify_email_identity(EmailAddress=get_settings().SES_FROM_EMAIL)
        yield client


@pytest.fixture
def captured(monkeypatch):
    """Capture rendered messages instead of sending them."""
    sent = []

    async def fake_send(self, to, subject, html_body, text_body=None):
        sent.append({"to": to, "subject": subject, "html": html_body, "text": text_body})
        return "msg-1"

    monkeypatch.setattr(SESNotifier, "send_email", fake_send)
    return sent


async def test_send_email_through_ses(ses_client):
    notifier = SESNotifier(client=ses_client)
    message_id = await notifier.send_rejection(
        "ada@example.com", "Ada Lovelace", "Backend Engineer", "Position filled"
    )

    assert message_id
    assert ses_client.get_send_quota()["SentLast24Hours"] == 1


async def test_unverified_sender_raises_email_error():
    with mock_aws():
        notifier = SESNotifier(client=boto3.client("ses", region_name="us-east-1"))
        with pytest.raises(EmailError):
            await notifier.send_email("ada@example.com", "Hello", "<p>Hi</p>")


async def test_assignment_invite_template(ses_client, captured):
    notifier = SESNotifier(client=ses_client)
    await notifier.send_assignment_invite(
        "ada@example.com",
        "Ada Lovelace",
        "Backend Engineer",
        "http://frontend.test/assignment/c1",
        "Build a service.\nShip it.",
    )

    [message] = captured
    assert message["subject"] == "Next Steps: Assignment for Backend Engineer"
    assert "http://frontend.test/assignment/c1" in message["html"]
    assert "Build a service.<br/>Ship it." in message["html"]
    assert "Build a service.\nShip it." in message["text"]
    assert "{{" not in message["html"]
    assert "{{" not in message["text"]


async def test_rejection_escapes_html(ses_client, captured):
    notifier = SESNotifier(client=ses_client)
    await notifier.send_rejection("ada@example.com", "<b>Ada</b>", "Backend Engineer", "Not a fit")

    [message] = captured
    assert message["subject"] == "Update regarding your application for Backend Engineer"
    assert "&lt;b&gt;Ada&lt;/b&gt;" in message["html"]
    assert "Not a fit" in message["text"]


async def test_approval_invite_template(ses_client, captured):
    notifier = SESNotifier(client=ses_client)
    await notifier.send_approval_invite("ada@example.com", "Ada", "Backend Engineer", "http://frontend.test/meet/c1")

    [message] = captured
    assert message["subject"] == "Good News! Next Steps for Backend Engineer"
    assert "http://frontend.test/meet/c1" in message["text"]
    assert get_settings().SES_FROM_NAME in message["text"]
