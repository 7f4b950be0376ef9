"""
Alert notification fan-out.

One alert produces at most one email (addressed to every target) and at most
one chat message (to the shared destination). The two channels run
concurrently; a failure in one is logged and swallowed and never reaches the
caller or the other channel. There is no retry and no outbox: a failed send
is lost for that event.
"""
from __future__ import annotations

import asyncio
import html
import logging
import smtplib
import ssl
from dataclasses import dataclass
from email.message import EmailMessage
from typing import List, Optional

import httpx

from ..core.config import settings
from ..schemas.common import BotStatus, ChatConfig, SmtpConfig
from .alerts import AlertDraft
from .recipients import Recipients

logger = logging.getLogger(__name__)

SENT = "sent"
SKIPPED = "skipped"
FAILED = "failed"


class ChannelError(Exception):
    """Raised by a channel sender when delivery did not succeed."""


@dataclass
class DispatchOutcome:
    email: str = SKIPPED
    chat: str = SKIPPED


def _timeout() -> float:
    return float(settings.NOTIFY_TIMEOUT_SECONDS)


# ── message rendering ─────────────────────────────────────────────────────────

def format_subject(notice: AlertDraft) -> str:
    return f"HACCP alert: {notice.facility_name} / {notice.target_name} at {notice.value:.1f}°C"


def format_body(notice: AlertDraft) -> str:
    lines = [
        "A temperature reading is outside its permitted range.",
        "",
        f"Facility:   {notice.facility_name}",
        f"Target:     {notice.target_name}",
        f"Checkpoint: {notice.checkpoint_name}",
        f"Measured:   {notice.value:.1f}°C",
        f"Allowed:    {notice.min:g}°C to {notice.max:g}°C",
        f"Recorded by {notice.user_name} at {notice.timestamp.isoformat()}",
    ]
    if notice.reason:
        lines.append(f"Reason:     {notice.reason}")
    return "\n".join(lines)


def format_chat(notice: AlertDraft) -> str:
    e = html.escape
    text = (
        f"🚨 <b>HACCP alert</b>\n"
        f"<b>{e(notice.facility_name)}</b> · {e(notice.target_name)} · {e(notice.checkpoint_name)}\n"
        f"Measured <b>{notice.value:.1f}°C</b> (allowed {notice.min:g} to {notice.max:g}°C)\n"
        f"{e(notice.user_name)}, {notice.timestamp.isoformat()}"
    )
    if notice.reason:
        text += f"\nReason: {e(notice.reason)}"
    return text


# ── email ─────────────────────────────────────────────────────────────────────

def send_mail(config: SmtpConfig, to_list: List[str], subject: str, body: str) -> None:
    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = config.sender
    msg["To"] = ", ".join(to_list)
    msg.set_content(body)

    try:
        if config.use_ssl:
            server = smtplib.SMTP_SSL(config.host, config.port, timeout=_timeout(),
                                      context=ssl.create_default_context())
        else:
            server = smtplib.SMTP(config.host, config.port, timeout=_timeout())
        with server:
            if not config.use_ssl:
                server.starttls(context=ssl.create_default_context())
            server.login(config.user, config.password)
            server.send_message(msg, from_addr=config.sender, to_addrs=to_list)
    except (smtplib.SMTPException, OSError) as exc:
        raise ChannelError(f"SMTP delivery via {config.host}:{config.port} failed: {exc}") from exc


# ── chat ──────────────────────────────────────────────────────────────────────

def _client() -> httpx.AsyncClient:
    return httpx.AsyncClient(base_url=settings.TELEGRAM_API_BASE, timeout=_timeout())


async def _call_bot(bot_token: str, method: str, payload: Optional[dict] = None) -> dict:
    try:
        async with _client() as client:
            response = await client.post(f"/bot{bot_token}/{method}", json=payload or {})
        data = response.json()
    except (httpx.HTTPError, ValueError) as exc:
        raise ChannelError(f"Telegram {method} failed: {exc}") from exc
    if not data.get("ok"):
        raise ChannelError(f"Telegram {method} rejected: {data.get('description', response.status_code)}")
    return data.get("result") or {}


async def send_message(bot_token: str, destination: str, text: str) -> None:
    await _call_bot(bot_token, "sendMessage", {
        "chat_id": destination,
        "text": text,
        "parse_mode": "HTML",
    })


async def verify_bot(bot_token: str) -> BotStatus:
    """Connectivity check for the administrator settings screen."""
    try:
        me = await _call_bot(bot_token, "getMe")
    except ChannelError as exc:
        return BotStatus(ok=False, error=str(exc))
    return BotStatus(ok=True, bot_name=me.get("username") or me.get("first_name"))


# ── dispatch ──────────────────────────────────────────────────────────────────

async def _email_channel(notice: AlertDraft, targets: List[str], config: Optional[SmtpConfig]) -> str:
    if not targets or config is None:
        logger.debug("Email skipped for alert on reading %s", notice.reading_id)
        return SKIPPED
    try:
        await asyncio.to_thread(send_mail, config, targets, format_subject(notice), format_body(notice))
    except Exception:
        logger.exception("Email alert for reading %s was not delivered", notice.reading_id)
        return FAILED
    logger.info("Email alert for reading %s sent to %d recipient(s)", notice.reading_id, len(targets))
    return SENT


async def _chat_channel(notice: AlertDraft, eligible: bool, config: Optional[ChatConfig]) -> str:
    if not eligible or config is None:
        logger.debug("Chat skipped for alert on reading %s", notice.reading_id)
        return SKIPPED
    try:
        await send_message(config.bot_token, config.chat_id, format_chat(notice))
    except Exception:
        logger.exception("Chat alert for reading %s was not delivered", notice.reading_id)
        return FAILED
    logger.info("Chat alert for reading %s sent", notice.reading_id)
    return SENT


async def dispatch(
    notice: AlertDraft,
    recipients: Recipients,
    smtp_config: Optional[SmtpConfig],
    chat_config: Optional[ChatConfig],
) -> DispatchOutcome:
    email, chat = await asyncio.gather(
        _email_channel(notice, recipients.email_targets, smtp_config),
        _chat_channel(notice, recipients.chat_eligible, chat_config),
    )
    return DispatchOutcome(email=email, chat=chat)
