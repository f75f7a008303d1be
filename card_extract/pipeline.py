"""
Business Card Extraction Pipeline
Combines front/back OCR text and QR payloads into one contact record

FLOW:
1. Join front and back OCR text and classify it
2. Parse each QR payload (front, then back) and fold them together
3. Merge the QR result into the OCR result (QR only fills gaps)
4. Project the primary fields for list/search display
"""

import logging
import time
from datetime import datetime, timezone
from typing import Dict, List, Optional

from .merge import merge_all, merge_contacts
from .models import ExtractedContact
from .parser import ContactParser
from .postprocessing import normalize_contact
from .qr import extract_contact_from_qr_payload

logger = logging.getLogger(__name__)


class CardPipeline:
    """Pipeline turning the raw text of one card into a stored-ready result."""

    def __init__(self, parser: Optional[ContactParser] = None):
        self.parser = parser or ContactParser()
        logger.info("CardPipeline initialized")

    # ======================================================
    # SINGLE CARD
    # ======================================================

    def extract(
        self,
        front_text: str,
        back_text: Optional[str] = None,
        qr_front: Optional[str] = None,
        qr_back: Optional[str] = None,
    ) -> ExtractedContact:
        """
        Build the merged contact for one card.

        Args:
            front_text: OCR text of the front side
            back_text: OCR text of the back side, if scanned
            qr_front: Decoded QR payload found on the front
            qr_back: Decoded QR payload found on the back

        Returns:
            Merged ExtractedContact
        """
        combined = "\n".join(text for text in (front_text, back_text) if text)
        extracted = self.parser.parse(combined)

        qr_texts = [payload for payload in (qr_front, qr_back) if payload]
        if qr_texts:
            qr_contact = merge_all(extract_contact_from_qr_payload(payload) for payload in qr_texts)
            extracted = merge_contacts(extracted, qr_contact)
            logger.debug(f"Merged {len(qr_texts)} QR payload(s) into OCR result")

        return extracted

    def process_card(
        self,
        front_text: str,
        back_text: Optional[str] = None,
        qr_front: Optional[str] = None,
        qr_back: Optional[str] = None,
    ) -> Dict:
        """
        Process one card and return the result payload.

        Returns:
            Dict with the structured contact, its normalized projection
            and timing information
        """
        start_time = time.time()
        contact = self.extract(front_text, back_text, qr_front, qr_back)
        normalized = normalize_contact(contact)
        total_time = time.time() - start_time

        logger.info(
            f"Processed card in {total_time * 1000:.1f}ms "
            f"(name={normalized.full_name!r}, email={normalized.primary_email!r})"
        )
        return {
            "success": True,
            "contact_data": contact.to_dict(),
            "normalized": normalized.to_dict(),
            "is_empty": contact.is_empty(),
            "processing_time_ms": int(total_time * 1000),
            "processed_at": datetime.now(timezone.utc).isoformat(),
        }

    def process_text(self, text: str) -> Dict:
        """Process a single block of OCR text (no back side, no QR)."""
        return self.process_card(text)

    # ======================================================
    # BATCH
    # ======================================================

    def process_batch(self, cards: List[Dict]) -> Dict:
        """Process multiple cards.

        Args:
            cards: Dicts with "front", and optionally "back" and
                "qr": {"front", "back"}
        """
        results = []
        for card in cards:
            qr = card.get("qr") or {}
            result = self.process_card(
                card.get("front") or "",
                back_text=card.get("back"),
                qr_front=qr.get("front"),
                qr_back=qr.get("back"),
            )
            results.append(result)

        empty_count = sum(1 for result in results if result["is_empty"])
        return {
            "success": True,
            "total": len(cards),
            "with_data": len(cards) - empty_count,
            "empty": empty_count,
            "results": results,
        }

    # ======================================================
    # STATUS
    # ======================================================

    def get_status(self) -> Dict:
        """Get pipeline status information."""
        return {
            "parser": type(self.parser).__name__,
            "line_rules": [rule[0] for rule in self.parser.LINE_RULES],
            "qr_formats": ["vcard", "mailto", "tel", "url", "text"],
        }
