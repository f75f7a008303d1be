# card_extract/postprocessing.py
"""
Post-processing of extracted contacts.
Projects the primary display fields and applies user edits.
"""
import logging
from dataclasses import replace
from typing import Any, Dict

from .models import ExtractedContact, NormalizedContact, to_labeled_list

logger = logging.getLogger(__name__)


def normalize_contact(contact: ExtractedContact) -> NormalizedContact:
    """
    Derive the flat primary-field view of a contact.

    Each primary field is the first entry of the corresponding contact
    field; absent source fields stay absent.

    Args:
        contact: Extracted (usually merged) contact

    Returns:
        NormalizedContact projection
    """
    phones = to_labeled_list(contact.phones)
    return NormalizedContact(
        full_name=contact.name,
        company=contact.company,
        title=contact.title,
        primary_email=contact.emails[0] if contact.emails else None,
        primary_phone=phones[0].value if phones else None,
        primary_website=contact.websites[0] if contact.websites else None,
    )


def apply_edits(contact: ExtractedContact, edits: Dict[str, Any]) -> ExtractedContact:
    """
    Replace contact fields wholesale with user-submitted values.

    Only keys present in ``edits`` are touched; the classifier is bypassed.

    Raises:
        ContactValidationError: if an edited field has the wrong shape
    """
    parsed = ExtractedContact.from_dict(edits)
    changes = {
        name: getattr(parsed, name)
        for name in ExtractedContact.SCALAR_FIELDS + ExtractedContact.STRING_LIST_FIELDS + ExtractedContact.LABELED_FIELDS
        if name in edits
    }
    logger.info(f"Applying user edits to fields: {sorted(changes)}")
    return replace(contact, **changes)
