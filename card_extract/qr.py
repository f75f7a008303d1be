"""
QR payload parsing.

Decoded QR strings come in a few shapes: a vCard, a mailto:/tel: URI, a bare
URL, or free text. Each maps to an ExtractedContact; free text goes through
the regular contact parser.
"""

import logging
import re
from typing import List

from .models import ExtractedContact, LabeledValue
from .parser import extract_contact_from_text

logger = logging.getLogger(__name__)

LINE_BREAK_RE = re.compile(r"\r?\n")
COMPONENT_SPLIT_RE = re.compile(r"(?<!\\);")
VCARD_ESCAPES = (("\\n", "\n"), ("\\N", "\n"), ("\\,", ","), ("\\;", ";"), ("\\:", ":"), ("\\\\", "\\"))


def _unescape(value: str) -> str:
    for escaped, char in VCARD_ESCAPES:
        value = value.replace(escaped, char)
    return value


def _components(value: str) -> List[str]:
    """Split a structured vCard value on unescaped semicolons."""
    return [_unescape(part).strip() for part in COMPONENT_SPLIT_RE.split(value)]


def _unfold(payload: str) -> List[str]:
    """Join vCard continuation lines (leading space or tab) onto the previous line."""
    lines: List[str] = []
    for line in LINE_BREAK_RE.split(payload):
        if not line:
            continue
        if line[0] in " \t" and lines:
            lines[-1] += line[1:].rstrip()
        else:
            lines.append(line.strip())
    return lines


def parse_vcard(payload: str) -> ExtractedContact:
    """
    Parse the vCard 3.0 subset found on business cards.

    Args:
        payload: Full vCard text starting with BEGIN:VCARD

    Returns:
        ExtractedContact with raw_text set to the payload
    """
    contact = ExtractedContact()
    emails: List[str] = []
    phones: List[LabeledValue] = []
    websites: List[str] = []
    addresses: List[LabeledValue] = []

    for line in _unfold(payload):
        key_part, _, value = line.partition(":")
        value = value.strip()
        if not value:
            continue
        # "item1.URL;TYPE=work" -> "URL"
        key = key_part.split(";")[0].split(".")[-1].upper()

        if key == "FN":
            contact.name = _unescape(value)
        elif key == "N":
            parts = _components(value)
            last = parts[0] if parts else ""
            first = parts[1] if len(parts) > 1 else ""
            full = f"{first} {last}".strip()
            if not contact.name and full:
                contact.name = full
        elif key == "ORG":
            contact.company = " ".join(part for part in _components(value) if part)
        elif key == "TITLE":
            contact.title = _unescape(value)
        elif key == "EMAIL":
            emails.append(_unescape(value))
        elif key == "TEL":
            phones.append(LabeledValue(value=_unescape(value)))
        elif key == "URL":
            websites.append(_unescape(value))
        elif key == "ADR":
            joined = ", ".join(part for part in _components(value) if part)
            if joined:
                addresses.append(LabeledValue(value=joined))
        elif key == "NOTE":
            contact.notes = _unescape(value)

    contact.emails = emails or None
    contact.phones = phones or None
    contact.websites = websites or None
    contact.address = addresses or None
    contact.raw_text = payload
    return contact


def extract_contact_from_qr_payload(payload: str) -> ExtractedContact:
    """
    Interpret a decoded QR string as contact data.

    Args:
        payload: Decoded QR content (may be empty)

    Returns:
        ExtractedContact; raw_text is always the trimmed payload
    """
    trimmed = (payload or "").strip()
    if not trimmed:
        return ExtractedContact(raw_text="")

    upper = trimmed.upper()
    if upper.startswith("BEGIN:VCARD"):
        logger.debug("QR payload is a vCard")
        return parse_vcard(trimmed)

    if upper.startswith("MAILTO:"):
        email = trimmed[len("mailto:"):].split("?", 1)[0].strip()
        return ExtractedContact(emails=[email] if email else None, raw_text=trimmed)

    if upper.startswith("TEL:"):
        phone = trimmed[len("tel:"):].strip()
        return ExtractedContact(phones=[LabeledValue(value=phone)] if phone else None, raw_text=trimmed)

    if upper.startswith("HTTP") or upper.startswith("WWW."):
        return ExtractedContact(websites=[trimmed], raw_text=trimmed)

    logger.debug("QR payload is free text, delegating to the contact parser")
    contact = extract_contact_from_text(trimmed)
    contact.raw_text = trimmed
    return contact
