"""
Tests for CardPipeline class.

Tests the full processing pipeline.
"""

import pytest
from unittest.mock import Mock

from card_extract.pipeline import CardPipeline
from card_extract.models import ExtractedContact, LabeledValue


class TestCardPipeline:
    """Test cases for CardPipeline."""

    @pytest.fixture
    def pipeline(self):
        """Create pipeline instance."""
        return CardPipeline()

    def test_pipeline_initialization(self, pipeline):
        """Test pipeline initializes correctly."""
        assert pipeline is not None
        assert pipeline.parser is not None

    def test_pipeline_with_custom_parser(self):
        """Test pipeline with an injected parser."""
        mock_parser = Mock()
        mock_parser.parse.return_value = ExtractedContact(name="Mocked")

        pipeline = CardPipeline(parser=mock_parser)
        contact = pipeline.extract("front", back_text="back")

        mock_parser.parse.assert_called_once_with("front\nback")
        assert contact.name == "Mocked"

    def test_get_status(self, pipeline):
        """Test status retrieval."""
        status = pipeline.get_status()

        assert status["parser"] == "ContactParser"
        assert "inline_phones" in status["line_rules"]
        assert "vcard" in status["qr_formats"]

    def test_extract_front_and_back(self, pipeline):
        """Test both sides are classified together."""
        contact = pipeline.extract("Ada Lovelace\nEngineer", back_text="ada@example.com")

        assert contact.name == "Ada Lovelace"
        assert contact.emails == ["ada@example.com"]

    def test_qr_fills_gaps_only(self, pipeline):
        """Test QR data never overwrites OCR scalars."""
        vcard = "BEGIN:VCARD\nFN:Someone Else\nORG:Analytical Engines\nEMAIL:info@example.com\nEND:VCARD"
        contact = pipeline.extract("Ada Lovelace\nada@example.com", qr_front=vcard)

        assert contact.name == "Ada Lovelace"
        assert contact.company == "Analytical Engines"
        assert contact.emails == ["ada@example.com", "info@example.com"]

    def test_front_qr_before_back_qr(self, pipeline):
        """Test the front QR payload wins over the back one."""
        contact = pipeline.extract(
            "",
            qr_front="BEGIN:VCARD\nTITLE:Front Title\nEND:VCARD",
            qr_back="BEGIN:VCARD\nTITLE:Back Title\nTEL:030 111\nEND:VCARD",
        )

        assert contact.title == "Front Title"
        assert contact.phones == [LabeledValue(value="030 111")]

    def test_process_card_result(self, pipeline):
        """Test the result payload shape."""
        result = pipeline.process_card("Ada Lovelace\nada@example.com")

        assert result["success"] is True
        assert result["contact_data"]["emails"] == ["ada@example.com"]
        assert result["normalized"]["full_name"] == "Ada Lovelace"
        assert result["normalized"]["primary_email"] == "ada@example.com"
        assert result["is_empty"] is False
        assert result["processing_time_ms"] >= 0
        assert "processed_at" in result

    def test_process_text_empty(self, pipeline):
        """Test text without data is flagged as empty."""
        result = pipeline.process_text("   ")

        assert result["is_empty"] is True
        assert result["normalized"] == {}

    def test_process_batch(self, pipeline):
        """Test batch processing counts cards with and without data."""
        cards = [
            {"front": "Ada Lovelace\nada@example.com"},
            {"front": "", "qr": {"front": "mailto:jane@example.com"}},
            {"front": "   "},
        ]
        result = pipeline.process_batch(cards)

        assert result["success"] is True
        assert result["total"] == 3
        assert result["with_data"] == 2
        assert result["empty"] == 1
        assert result["results"][1]["contact_data"]["emails"] == ["jane@example.com"]
