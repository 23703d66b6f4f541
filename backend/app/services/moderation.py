"""Chat content moderation — contact-detail redaction before a first completed session."""

import re
from typing import Optional

from app.config import settings

# Checked in order; every match of every pattern is redacted.
CONTACT_PATTERNS = [
    re.compile(r"\b\d{3}[-.]?\d{3}[-.]?\d{4}\b"),                               # phone numbers
    re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b"),          # emails
    re.compile(r"\b(?:wechat|微信)[\s:]*[A-Za-z0-9_-]+", re.IGNORECASE),         # WeChat IDs
    re.compile(r"https?://\S+"),                                                # URLs
    re.compile(r"\b(?:whatsapp|telegram|line|kakao)[\s:]*[A-Za-z0-9_-]+", re.IGNORECASE),  # other messaging apps
]


def check_content(text: str) -> dict:
    """Check a chat message for basic policy violations.

    Returns:
        Dict with 'safe' bool and optional 'reason' string.
    """
    if not text or not text.strip():
        return {"safe": False, "reason": "Message cannot be empty."}

    if len(text) > settings.MAX_CHAT_MESSAGE_LENGTH:
        return {
            "safe": False,
            "reason": f"Message exceeds maximum length of {settings.MAX_CHAT_MESSAGE_LENGTH:,} characters.",
        }

    return {"safe": True, "reason": None}


def sanitize_message(text: str, placeholder: Optional[str] = None) -> tuple[str, bool]:
    """Replace contact details in ``text`` with the redaction placeholder.

    Returns (sanitized_text, contains_contact).
    """
    placeholder = placeholder or settings.CONTACT_REDACTION_PLACEHOLDER
    sanitized = text
    contains_contact = False
    for pattern in CONTACT_PATTERNS:
        if pattern.search(text):
            contains_contact = True
            sanitized = pattern.sub(placeholder, sanitized)
    return sanitized, contains_contact


def redact_unless_trusted(text: str, completed_sessions: int) -> tuple[str, bool]:
    """Apply the first-session trust gate.

    Senders with at least one closed session may share contact details;
    everyone else gets them redacted. Returns (final_text, sanitized).
    """
    if completed_sessions > 0:
        return text, False
    sanitized, contains_contact = sanitize_message(text)
    if contains_contact:
        return sanitized, True
    return text, False
