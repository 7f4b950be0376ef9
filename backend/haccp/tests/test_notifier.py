import json
from datetime import datetime

import httpx
import pytest

from haccp.schemas.common import ChatConfig, SmtpConfig
from haccp.services import notifier
from haccp.services.alerts import AlertDraft
from haccp.services.recipients import Recipients

SMTP = SmtpConfig(host="smtp.example.com", port=587, user="alerts@example.com", password="secret")
CHAT = ChatConfig(bot_token="123:abc", chat_id="-100200")


def _notice(reason=None):
    return AlertDraft(
        reading_id="R-7", facility_id="F1", facility_name="Kantine Nord", target_name="Kühlschrank 1",
        checkpoint_name="Luft", value=9.5, min=2.0, max=7.0, timestamp=datetime(2024, 5, 2, 8, 30),
        user_id="U-A", user_name="Anna", reason=reason,
    )


@pytest.fixture
def sent(monkeypatch):
    calls = {"mail": [], "chat": []}

    def fake_mail(config, to_list, subject, body):
        calls["mail"].append((config, list(to_list), subject, body))

    async def fake_chat(token, destination, text):
        calls["chat"].append((token, destination, text))

    monkeypatch.setattr(notifier, "send_mail", fake_mail)
    monkeypatch.setattr(notifier, "send_message", fake_chat)
    return calls


@pytest.mark.asyncio
async def test_one_email_for_all_targets_and_one_chat_message(sent):
    recipients = Recipients(email_targets=["a@example.com", "b@example.com"], chat_eligible=True)
    outcome = await notifier.dispatch(_notice(), recipients, SMTP, CHAT)
    assert outcome.email == notifier.SENT and outcome.chat == notifier.SENT
    assert len(sent["mail"]) == 1
    assert sent["mail"][0][1] == ["a@example.com", "b@example.com"]
    assert sent["chat"] == [("123:abc", "-100200", notifier.format_chat(_notice()))]


@pytest.mark.asyncio
async def test_email_failure_does_not_block_chat(sent, monkeypatch):
    def broken_mail(*args):
        raise notifier.ChannelError("535 authentication failed")

    monkeypatch.setattr(notifier, "send_mail", broken_mail)
    recipients = Recipients(email_targets=["a@example.com"], chat_eligible=True)
    outcome = await notifier.dispatch(_notice(), recipients, SMTP, CHAT)
    assert outcome.email == notifier.FAILED
    assert outcome.chat == notifier.SENT
    assert len(sent["chat"]) == 1


@pytest.mark.asyncio
async def test_unexpected_chat_error_is_swallowed(sent, monkeypatch):
    async def exploding_chat(*args):
        raise RuntimeError("boom")

    monkeypatch.setattr(notifier, "send_message", exploding_chat)
    recipients = Recipients(email_targets=["a@example.com"], chat_eligible=True)
    outcome = await notifier.dispatch(_notice(), recipients, SMTP, CHAT)
    assert outcome.chat == notifier.FAILED
    assert outcome.email == notifier.SENT


@pytest.mark.asyncio
async def test_missing_configuration_skips_channels(sent):
    recipients = Recipients(email_targets=["a@example.com"], chat_eligible=True)
    outcome = await notifier.dispatch(_notice(), recipients, None, None)
    assert outcome.email == notifier.SKIPPED and outcome.chat == notifier.SKIPPED
    assert sent["mail"] == [] and sent["chat"] == []


@pytest.mark.asyncio
async def test_no_recipients_skips_channels(sent):
    outcome = await notifier.dispatch(_notice(), Recipients(), SMTP, CHAT)
    assert outcome.email == notifier.SKIPPED and outcome.chat == notifier.SKIPPED
    assert sent["mail"] == [] and sent["chat"] == []


def test_message_content_includes_band_recorder_and_reason():
    body = notifier.format_body(_notice(reason="Delivery in progress"))
    for fragment in ("Kantine Nord", "Kühlschrank 1", "Luft", "9.5°C", "2°C to 7°C", "Anna",
                     "2024-05-02T08:30:00", "Delivery in progress"):
        assert fragment in body
    assert "Reason" not in notifier.format_body(_notice())
    assert "Delivery in progress" in notifier.format_chat(_notice(reason="Delivery in progress"))


def test_chat_text_escapes_markup():
    notice = AlertDraft(**{**_notice().__dict__, "facility_name": "Bistro <A&B>"})
    assert "Bistro &lt;A&amp;B&gt;" in notifier.format_chat(notice)


def test_sender_defaults_to_login_and_port_465_means_implicit_tls():
    assert SMTP.sender == "alerts@example.com"
    assert SMTP.use_ssl is False
    ssl_cfg = SmtpConfig(host="h", port=465, user="u@example.com", password="p", from_address="ops@example.com")
    assert ssl_cfg.use_ssl is True and ssl_cfg.sender == "ops@example.com"


def _mock_bot(monkeypatch, handler):
    def client():
        return httpx.AsyncClient(base_url="https://bot.test", transport=httpx.MockTransport(handler))
    monkeypatch.setattr(notifier, "_client", client)


@pytest.mark.asyncio
async def test_send_message_posts_to_shared_destination(monkeypatch):
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"ok": True, "result": {"message_id": 1}})

    _mock_bot(monkeypatch, handler)
    await notifier.send_message("123:abc", "-100200", "hello")
    assert seen["path"] == "/bot123:abc/sendMessage"
    assert seen["body"]["chat_id"] == "-100200"
    assert seen["body"]["text"] == "hello"


@pytest.mark.asyncio
async def test_send_message_rejection_raises_channel_error(monkeypatch):
    _mock_bot(monkeypatch, lambda request: httpx.Response(401, json={"ok": False, "description": "Unauthorized"}))
    with pytest.raises(notifier.ChannelError, match="Unauthorized"):
        await notifier.send_message("bad", "-1", "hello")


@pytest.mark.asyncio
async def test_verify_bot_reports_name_or_error(monkeypatch):
    _mock_bot(monkeypatch, lambda request: httpx.Response(200, json={"ok": True, "result": {"username": "haccp_bot"}}))
    status = await notifier.verify_bot("123:abc")
    assert status.ok is True and status.bot_name == "haccp_bot"

    def offline(request):
        raise httpx.ConnectError("unreachable", request=request)

    _mock_bot(monkeypatch, offline)
    status = await notifier.verify_bot("123:abc")
    assert status.ok is False and "unreachable" in status.error


def test_smtp_connection_failure_becomes_channel_error(monkeypatch):
    class Refused:
        def __init__(self, *args, **kwargs):
            raise ConnectionRefusedError("connection refused")

    monkeypatch.setattr(notifier.smtplib, "SMTP", Refused)
    with pytest.raises(notifier.ChannelError, match="smtp.example.com:587"):
        notifier.send_mail(SMTP, ["a@example.com"], "s", "b")
