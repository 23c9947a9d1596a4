"""Reset email tests — message content and the SMTP hand-off."""

import pytest

from gamegauge.services import email_service
from gamegauge.services.email_service import RESET_SUBJECT, EmailNotifier, build_reset_link


def test_reset_link_encodes_token():
    link = build_reset_link("abc+/=", frontend_url="https://gamegauge.fr/")
    assert link == "https://gamegauge.fr/reset-password?token=abc%2B%2F%3D"


def test_message_headers_and_link():
    notifier = EmailNotifier(host="smtp.test", from_email="noreply@gamegauge.fr")
    message = notifier.build_message("a@x.com", "tok123")

    assert message["To"] == "a@x.com"
    assert message["From"] == "noreply@gamegauge.fr"
    assert message["Subject"] == RESET_SUBJECT
    assert "reset-password?token=tok123" in message.get_content()


@pytest.mark.asyncio
async def test_send_uses_smtp_settings(monkeypatch):
    calls = []

    async def fake_send(message, **kwargs):
        calls.append((message, kwargs))

    monkeypatch.setattr(email_service.aiosmtplib, "send", fake_send)
    notifier = EmailNotifier(
        host="smtp.test", port=2525, username="u", password="p", use_tls=False
    )
    await notifier.send_reset_link("a@x.com", "tok123")

    [(message, kwargs)] = calls
    assert message["To"] == "a@x.com"
    assert kwargs == {
        "hostname": "smtp.test",
        "port": 2525,
        "username": "u",
        "password": "p",
        "start_tls": False,
    }


@pytest.mark.asyncio
async def test_no_smtp_host_skips_sending(monkeypatch):
    async def fail_send(message, **kwargs):
        raise AssertionError("should not send without a host")

    monkeypatch.setattr(email_service.aiosmtplib, "send", fail_send)
    await EmailNotifier(host="").send_reset_link("a@x.com", "tok123")
