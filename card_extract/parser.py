import logging
import re
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from . import patterns as p
from .models import ExtractedContact, LabeledValue
from .preprocessing import normalize_text

logger = logging.getLogger(__name__)


# =========================
# PARSE STATE
# =========================

@dataclass
class _CardState:
    """Mutable scratch state for one classification pass."""
    emails: List[str] = field(default_factory=list)
    websites: List[str] = field(default_factory=list)
    phones: List[LabeledValue] = field(default_factory=list)
    faxes: List[LabeledValue] = field(default_factory=list)
    remaining: List[str] = field(default_factory=list)
    address_lines: set = field(default_factory=set)
    context_label: Optional[str] = None


LineRule = Tuple[str, Callable[[str], bool], Callable[["ContactParser", str, _CardState], bool]]


def _unique_by_value(values: List[LabeledValue]) -> List[LabeledValue]:
    """Deduplicate by value, keeping the label of the first occurrence."""
    seen = set()
    result = []
    for entry in values:
        key = entry.value.strip().lower()
        if key and key not in seen:
            seen.add(key)
            result.append(entry)
    return result


# =========================
# PARSER
# =========================

class ContactParser:
    """Classifies cleaned business card lines into an ExtractedContact."""

    # =========================
    # LINE RULE ACTIONS
    # =========================

    def _take_context_label(self, line: str, state: _CardState) -> bool:
        state.context_label = p.derive_label(line)
        return True

    def _take_emails(self, line: str, state: _CardState) -> bool:
        state.emails.extend(p.find_emails(p.parse_label_value(line)))
        return True

    def _take_websites(self, line: str, state: _CardState) -> bool:
        state.websites.extend(p.find_urls(p.parse_label_value(line)))
        return True

    def _take_phones(self, line: str, state: _CardState) -> bool:
        value = p.parse_label_value(line)
        for number in p.find_numbers(value or line):
            state.phones.append(LabeledValue(value=number, label=state.context_label))
        return True

    def _take_inline_phones(self, line: str, state: _CardState) -> bool:
        labeled = [LabeledValue(value=number, label=label) for label, number in p.split_inline_labels(line)]
        state.phones.extend(labeled)
        return bool(labeled)

    def _take_faxes(self, line: str, state: _CardState) -> bool:
        value = p.parse_label_value(line)
        for number in p.find_numbers(value or line):
            state.faxes.append(LabeledValue(value=number, label=state.context_label))
        return True

    # Ordered; the first rule whose action returns True consumes the line.
    LINE_RULES: List[LineRule] = [
        ("context_label", lambda line: p.has_label(line, "office", "branch"), _take_context_label),
        ("email_label", lambda line: p.has_label(line, "email"), _take_emails),
        ("web_label", lambda line: p.has_label(line, "web"), _take_websites),
        ("phone_label", lambda line: p.has_label(line, "phone"), _take_phones),
        (
            "inline_phones",
            lambda line: (
                "T " in line or " M " in line
                or bool(p.INLINE_LABEL_HINT_RE.search(line) or p.INLINE_SEPARATOR_RE.search(line))
            ),
            _take_inline_phones,
        ),
        ("fax_label", lambda line: p.has_label(line, "fax"), _take_faxes),
    ]

    # =========================
    # PIPELINE API
    # =========================

    def parse(self, text: str) -> ExtractedContact:
        """
        Classify raw OCR text into a structured contact.

        Never raises; text that yields nothing populates only raw_text.
        """
        block = normalize_text(text)
        lines = block.lines
        if not lines:
            return ExtractedContact(raw_text=block.text)

        state = _CardState()
        self._extract_inline_channels(block.text, state)
        self._classify_lines(lines, state)

        addresses = self._extract_addresses(lines, state) or self._infer_addresses(lines, state)
        default_label = addresses[0].label if addresses else None

        hours_lines = self._hours_block(lines)
        candidates = [
            line for line in state.remaining
            if line not in hours_lines and not p.is_contact_line(line)
        ]
        company = self._extract_company(candidates)
        name, name_lines = self._extract_name(lines, candidates, company)
        title = self._extract_title(candidates, company, name_lines)

        for line in state.remaining:
            if p.is_hours_line(line):
                continue
            state.phones.extend(LabeledValue(value=number) for number in p.find_numbers(line))

        claimed = {company, title, *name_lines}
        notes = self._assemble_notes(state, claimed, hours_lines)

        def with_default(entry: LabeledValue) -> LabeledValue:
            return LabeledValue(value=entry.value, label=entry.label or default_label)

        phones = _unique_by_value([with_default(entry) for entry in state.phones])
        faxes = _unique_by_value([with_default(entry) for entry in state.faxes])
        emails = p.unique_values(state.emails)
        websites = p.clean_urls(state.websites)

        contact = ExtractedContact(
            name=name,
            company=company,
            title=title,
            emails=emails or None,
            phones=phones or None,
            faxes=faxes or None,
            websites=websites or None,
            address=addresses or None,
            notes=notes or None,
            raw_text=block.text,
        )
        logger.debug(
            f"Extracted - Name: {contact.name}, Company: {contact.company}, "
            f"{len(emails)} emails, {len(phones)} phones, {len(addresses)} addresses"
        )
        return contact

    # =========================
    # CORE PARSING
    # =========================

    def _extract_inline_channels(self, text: str, state: _CardState) -> None:
        """Emails and URLs anywhere in the text, not just on labeled lines."""
        state.emails.extend(p.find_emails(text))
        domains = {email.split("@", 1)[1].lower() for email in state.emails}
        without_emails = p.EMAIL_RE.sub(" ", text)
        state.websites.extend(
            url for url in p.clean_urls(p.find_urls(without_emails))
            if p.url_host(url) not in domains
        )

    def _classify_lines(self, lines: List[str], state: _CardState) -> None:
        for line in lines:
            for rule_name, matches, action in self.LINE_RULES:
                if matches(line) and action(self, line, state):
                    logger.debug(f"Line consumed by {rule_name}: {line}")
                    break
            else:
                state.remaining.append(line)

    def _extract_addresses(self, lines: List[str], state: _CardState) -> List[LabeledValue]:
        """One address per office/branch marker, built from the lines that follow it."""
        addresses: List[LabeledValue] = []
        label: Optional[str] = None
        parts: List[str] = []
        used: List[str] = []

        def flush():
            if parts:
                addresses.append(LabeledValue(value=" ".join(parts).strip(), label=label))
                state.address_lines.update(used)

        for line in lines:
            if p.is_contact_line(line):
                flush()
                parts, used = [], []
                continue
            if p.has_label(line, "office", "branch"):
                flush()
                label = p.derive_label(line)
                parts, used = [re.sub(r"\s+", " ", line)], [line]
                continue
            if parts:
                cleaned = p.strip_contact_from_address_line(line)
                if cleaned:
                    parts.append(re.sub(r"\s+", " ", cleaned))
                    used.append(line)

        flush()
        return addresses

    def _infer_addresses(self, lines: List[str], state: _CardState) -> List[LabeledValue]:
        """Fallback: postal-code lines, joined with a preceding street line."""
        addresses = []
        for i, line in enumerate(lines):
            if p.ADDRESS_LABEL_RE.search(line) or p.is_contact_line(line) or p.is_hours_line(line):
                continue
            if not (p.POSTAL_RE.search(line) and p.LETTER_RE.search(line)):
                continue

            parts, used = [], []
            prev = lines[i - 1] if i > 0 else None
            if prev and (p.STREET_RE.search(prev) or re.search(r"\d", prev)) and not p.is_contact_line(prev):
                cleaned_prev = p.strip_contact_from_address_line(prev)
                if cleaned_prev:
                    parts.append(cleaned_prev)
                    used.append(prev)
            cleaned = p.strip_contact_from_address_line(line)
            if cleaned:
                parts.append(cleaned)
                used.append(line)
            if parts:
                addresses.append(LabeledValue(value=" ".join(parts), label="office"))
                state.address_lines.update(used)
        return addresses

    def _hours_block(self, lines: List[str]) -> List[str]:
        """Lines from the opening-hours header onward that are header, day or time lines."""
        for i, line in enumerate(lines):
            if p.HOURS_HEADER_RE.search(line):
                return [entry for entry in lines[i:] if p.is_hours_line(entry)]
        return []

    # =========================
    # IDENTITY
    # =========================

    def _extract_company(self, remaining: List[str]) -> Optional[str]:
        for line in remaining:
            if p.COMPANY_HINT_RE.search(line):
                return line
        for line in remaining:
            if p.CORPORATE_SUFFIX_RE.search(line):
                return line
        return None

    def _extract_name(
        self, lines: List[str], remaining: List[str], company: Optional[str]
    ) -> Tuple[Optional[str], List[str]]:
        """Return the name and the lines it was built from."""
        person_lines = [
            line for line in remaining
            if line != company and p.PERSON_HINT_RE.search(line)
        ]
        if person_lines:
            return " / ".join(person_lines), person_lines

        first = lines[0]
        if first != company and first in remaining and p.is_likely_person_name(first):
            return first, [first]

        for line in remaining:
            if line != company and (p.is_mostly_uppercase(line) or p.COMPANY_MARKER_VI_RE.search(line)):
                return line, [line]
        return None, []

    def _extract_title(
        self, remaining: List[str], company: Optional[str], name_lines: List[str]
    ) -> Optional[str]:
        for line in remaining:
            if line != company and line not in name_lines and p.TITLE_HINT_RE.search(line):
                return line
        return None

    # =========================
    # NOTES
    # =========================

    def _assemble_notes(self, state: _CardState, claimed: set, hours_lines: List[str]) -> str:
        """Opening hours when the card has them, otherwise the unclaimed leftovers."""
        source = hours_lines or state.remaining

        notes = []
        for line in source:
            if line in claimed or p.ADDRESS_LABEL_RE.search(line):
                continue
            if p.has_label(line, "phone", "fax", "email", "web") or p.MARKETING_RE.search(line):
                continue
            if not hours_lines and (p.is_contact_line(line) or line in state.address_lines):
                continue
            notes.append(line)
        return "\n".join(notes)


_default_parser = ContactParser()


def extract_contact_from_text(text: str) -> ExtractedContact:
    """Classify raw OCR text with a shared parser instance."""
    return _default_parser.parse(text)
