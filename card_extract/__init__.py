"""
Source package initialization for the Business Card Extraction service.
"""

from .models import (
    ContactValidationError,
    ExtractedContact,
    LabeledValue,
    NormalizedContact,
    to_labeled_list,
)
from .parser import ContactParser, extract_contact_from_text
from .qr import extract_contact_from_qr_payload
from .merge import merge_all, merge_contacts
from .postprocessing import apply_edits, normalize_contact
from .ocr import extract_ocr_boxes, extract_ocr_dimensions
from .pipeline import CardPipeline

__all__ = [
    "ContactValidationError",
    "ExtractedContact",
    "LabeledValue",
    "NormalizedContact",
    "to_labeled_list",
    "ContactParser",
    "extract_contact_from_text",
    "extract_contact_from_qr_payload",
    "merge_contacts",
    "merge_all",
    "normalize_contact",
    "apply_edits",
    "extract_ocr_boxes",
    "extract_ocr_dimensions",
    "CardPipeline",
]
