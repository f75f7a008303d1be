"""
API routes for the Business Card Extraction API.

Flask REST API endpoints that turn OCR text and QR payloads into contacts.
"""

import logging
from typing import Optional, Tuple

from flask import Blueprint, request, jsonify, current_app

from card_extract import (
    CardPipeline,
    ContactValidationError,
    ExtractedContact,
    apply_edits,
    extract_contact_from_qr_payload,
    extract_ocr_boxes,
    extract_ocr_dimensions,
    merge_contacts,
    normalize_contact,
)
from config import Config

logger = logging.getLogger(__name__)

# Create Blueprint
api_bp = Blueprint("api", __name__, url_prefix="/api")

# Pipeline instance (lazy initialization)
_pipeline: Optional[CardPipeline] = None


def get_pipeline() -> CardPipeline:
    """Get or create pipeline instance.

    Returns:
        CardPipeline instance
    """
    global _pipeline

    if _pipeline is None:
        _pipeline = CardPipeline()
        logger.info("Pipeline initialized")

    return _pipeline


def error_response(message: str, status: int = 400):
    return jsonify({
        "success": False,
        "error": message
    }), status


def check_text(value, field: str, required: bool = False) -> Optional[str]:
    """Validate an optional text field.

    Returns:
        Error message, or None if the value is acceptable
    """
    if value is None:
        return f"'{field}' is required" if required else None
    if not isinstance(value, str):
        return f"'{field}' must be a string"
    limit = current_app.config.get("MAX_TEXT_LENGTH", Config.MAX_TEXT_LENGTH)
    if len(value) > limit:
        return f"'{field}' exceeds {limit} characters"
    return None


def read_card(data: dict) -> Tuple[Optional[dict], Optional[str]]:
    """Validate one card payload: {"front", "back", "qr": {"front", "back"}}."""
    qr = data.get("qr") or {}
    if not isinstance(qr, dict):
        return None, "'qr' must be an object with 'front'/'back'"

    for value, field in (
        (data.get("front"), "front"),
        (data.get("back"), "back"),
        (qr.get("front"), "qr.front"),
        (qr.get("back"), "qr.back"),
    ):
        problem = check_text(value, field)
        if problem:
            return None, problem

    if not (data.get("front") or qr.get("front") or qr.get("back")):
        return None, "Provide 'front' text or a QR payload"

    return {
        "front": data.get("front") or "",
        "back": data.get("back"),
        "qr": {"front": qr.get("front"), "back": qr.get("back")}
    }, None


def read_contact(data, field: str) -> ExtractedContact:
    if data is None:
        raise ContactValidationError(f"'{field}' is required")
    return ExtractedContact.from_dict(data)


@api_bp.route("/health", methods=["GET"])
def health_check():
    """Health check endpoint.

    Returns:
        JSON with health status
    """
    return jsonify({
        "success": True,
        "status": "healthy",
        "message": "Business Card Extraction API is running",
        "version": "1.0.0"
    }), 200


@api_bp.route("/status", methods=["GET"])
def get_status():
    """Get API and pipeline status.

    Returns:
        JSON with status information
    """
    try:
        pipeline = get_pipeline()
        status = pipeline.get_status()

        return jsonify({
            "success": True,
            "data": {
                "api_status": "running",
                "pipeline_status": status,
                "limits": {
                    "max_content_length": current_app.config.get("MAX_CONTENT_LENGTH"),
                    "max_text_length": current_app.config.get("MAX_TEXT_LENGTH"),
                    "max_batch_size": current_app.config.get("MAX_BATCH_SIZE")
                }
            }
        }), 200

    except Exception as e:
        logger.error(f"Error getting status: {str(e)}")
        return error_response(str(e), 500)


@api_bp.route("/extract", methods=["POST"])
def extract_text():
    """Classify raw OCR text.

    Expects:
        - JSON body with 'text' field

    Returns:
        JSON with the extracted contact and its normalized projection
    """
    data = request.get_json(silent=True)

    if not data or "text" not in data:
        return error_response("No text provided. Send JSON with 'text' field.")

    problem = check_text(data["text"], "text", required=True)
    if problem:
        return error_response(problem)

    result = get_pipeline().process_text(data["text"])
    return jsonify({
        "success": True,
        "data": result
    }), 200


@api_bp.route("/qr", methods=["POST"])
def extract_qr():
    """Parse a decoded QR payload (vCard, mailto:, tel:, URL or free text).

    Expects:
        - JSON body with 'payload' field
    """
    data = request.get_json(silent=True)

    if not data or "payload" not in data:
        return error_response("No payload provided. Send JSON with 'payload' field.")

    problem = check_text(data["payload"], "payload", required=True)
    if problem:
        return error_response(problem)

    contact = extract_contact_from_qr_payload(data["payload"])
    return jsonify({
        "success": True,
        "data": {
            "contact_data": contact.to_dict(),
            "normalized": normalize_contact(contact).to_dict()
        }
    }), 200


@api_bp.route("/process", methods=["POST"])
def process_card():
    """Process one card: front/back OCR text plus optional QR payloads.

    Expects:
        - JSON body {"front": str, "back": str?, "qr": {"front": str?, "back": str?}?}
    """
    data = request.get_json(silent=True)

    if not isinstance(data, dict):
        return error_response("No card provided. Send JSON with 'front' text.")

    card, problem = read_card(data)
    if problem:
        return error_response(problem)

    result = get_pipeline().process_card(
        card["front"],
        back_text=card["back"],
        qr_front=card["qr"]["front"],
        qr_back=card["qr"]["back"]
    )
    return jsonify(result), 200


@api_bp.route("/batch", methods=["POST"])
def process_batch():
    """Process several cards in one request.

    Expects:
        - JSON body {"cards": [card, ...]} with cards shaped as for /process
    """
    data = request.get_json(silent=True)

    if not data or not isinstance(data.get("cards"), list) or not data["cards"]:
        return error_response("No cards provided. Send JSON with a 'cards' list.")

    limit = current_app.config.get("MAX_BATCH_SIZE", Config.MAX_BATCH_SIZE)
    if len(data["cards"]) > limit:
        return error_response(f"Too many cards. Maximum per batch: {limit}")

    cards = []
    for index, raw in enumerate(data["cards"]):
        if not isinstance(raw, dict):
            return error_response(f"Card {index} must be an object")
        card, problem = read_card(raw)
        if problem:
            return error_response(f"Card {index}: {problem}")
        cards.append(card)

    result = get_pipeline().process_batch(cards)
    logger.info(f"Processed batch of {result['total']} cards")
    return jsonify(result), 200


@api_bp.route("/merge", methods=["POST"])
def merge():
    """Merge two contacts; 'base' wins scalar ties.

    Expects:
        - JSON body {"base": contact, "extra": contact}
    """
    data = request.get_json(silent=True)

    if not isinstance(data, dict):
        return error_response("Send JSON with 'base' and 'extra' contacts.")

    try:
        base = read_contact(data.get("base"), "base")
        extra = read_contact(data.get("extra"), "extra")
    except ContactValidationError as e:
        return error_response(str(e))

    merged = merge_contacts(base, extra)
    return jsonify({
        "success": True,
        "data": {
            "contact_data": merged.to_dict(),
            "normalized": normalize_contact(merged).to_dict()
        }
    }), 200


@api_bp.route("/normalize", methods=["POST"])
def normalize():
    """Project the primary display fields of a contact.

    Expects:
        - JSON body {"contact": contact}
    """
    data = request.get_json(silent=True)

    if not isinstance(data, dict):
        return error_response("Send JSON with a 'contact' object.")

    try:
        contact = read_contact(data.get("contact"), "contact")
    except ContactValidationError as e:
        return error_response(str(e))

    return jsonify({
        "success": True,
        "data": normalize_contact(contact).to_dict()
    }), 200


@api_bp.route("/edit", methods=["POST"])
def edit_contact():
    """Apply user edits to a stored contact, replacing fields wholesale.

    Expects:
        - JSON body {"contact": contact, "edits": {field: value, ...}}
    """
    data = request.get_json(silent=True)

    if not isinstance(data, dict) or not isinstance(data.get("edits"), dict):
        return error_response("Send JSON with 'contact' and an 'edits' object.")

    try:
        contact = read_contact(data.get("contact") or {}, "contact")
        edited = apply_edits(contact, data["edits"])
    except ContactValidationError as e:
        return error_response(str(e))

    return jsonify({
        "success": True,
        "data": {
            "contact_data": edited.to_dict(),
            "normalized": normalize_contact(edited).to_dict()
        }
    }), 200


@api_bp.route("/boxes", methods=["POST"])
def ocr_boxes():
    """List positioned text boxes found in a raw OCR provider response.

    Expects:
        - JSON body {"raw": <provider response>}
    """
    data = request.get_json(silent=True)

    if not isinstance(data, dict) or "raw" not in data:
        return error_response("Send JSON with the provider response under 'raw'.")

    boxes = extract_ocr_boxes(data["raw"])
    dimensions = extract_ocr_dimensions(data["raw"])
    return jsonify({
        "success": True,
        "data": {
            "boxes": [box.to_dict() for box in boxes],
            "dimensions": dimensions.to_dict() if dimensions else None
        }
    }), 200


# Error handlers
@api_bp.errorhandler(400)
def bad_request(error):
    """Handle 400 errors."""
    return error_response("Bad request", 400)


@api_bp.errorhandler(500)
def internal_error(error):
    """Handle 500 errors."""
    return error_response("Internal server error", 500)
