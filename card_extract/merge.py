"""
Merging of partial contact extractions (front OCR, back OCR, QR payloads).
"""

import logging
from functools import reduce
from typing import Iterable, List, Optional

from .models import ExtractedContact, LabeledValue, to_labeled_list
from .patterns import unique_values

logger = logging.getLogger(__name__)


def _unique_labeled(values: Iterable[LabeledValue]) -> List[LabeledValue]:
    seen = set()
    result = []
    for value in values:
        if value.key() not in seen:
            seen.add(value.key())
            result.append(value)
    return result


def _join_unique(*values: Optional[str]) -> Optional[str]:
    """Exact-duplicate texts collapse; distinct ones are joined in order."""
    seen = []
    for value in values:
        value = (value or "").strip()
        if value and value not in seen:
            seen.append(value)
    return "\n".join(seen) or None


def merge_contacts(base: ExtractedContact, extra: ExtractedContact) -> ExtractedContact:
    """
    Union two extractions of the same card.

    Scalar fields are left-biased: the first non-empty value of base wins.
    Sequence fields are concatenated base-then-extra and deduplicated, so
    extra only fills gaps and never overwrites.

    Args:
        base: Higher-priority contact (e.g. front OCR)
        extra: Gap-filling contact (e.g. QR payload)

    Returns:
        New merged ExtractedContact
    """
    emails = unique_values((base.emails or []) + (extra.emails or []))
    websites = unique_values((base.websites or []) + (extra.websites or []))
    phones = _unique_labeled(to_labeled_list(base.phones) + to_labeled_list(extra.phones))
    faxes = _unique_labeled(to_labeled_list(base.faxes) + to_labeled_list(extra.faxes))
    address = _unique_labeled(to_labeled_list(base.address) + to_labeled_list(extra.address))

    return ExtractedContact(
        name=base.name or extra.name or None,
        company=base.company or extra.company or None,
        title=base.title or extra.title or None,
        emails=emails or None,
        phones=phones or None,
        faxes=faxes or None,
        websites=websites or None,
        address=address or None,
        notes=_join_unique(base.notes, extra.notes),
        raw_text=_join_unique(base.raw_text, extra.raw_text),
    )


def merge_all(contacts: Iterable[ExtractedContact]) -> ExtractedContact:
    """Fold contacts left to right; earlier contacts win scalar ties."""
    merged = reduce(merge_contacts, contacts, ExtractedContact())
    logger.debug(f"Merged contact has {len(merged.phones or [])} phones, {len(merged.emails or [])} emails")
    return merged
