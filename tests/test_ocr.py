"""
Tests for OCR response helpers.

Tests box collection across provider response shapes.
"""

import pytest
from card_extract.ocr import (
    BoundingBox,
    extract_ocr_boxes,
    extract_ocr_dimensions,
    parse_box,
)


class TestParseBox:
    """Test cases for parse_box."""

    def test_corner_list(self):
        """Test [x0, y0, x1, y1] lists."""
        assert parse_box([10, 20, 110, 60]) == BoundingBox(10, 20, 100, 40)

    def test_size_list(self):
        """Test [x, y, width, height] lists when corners do not fit."""
        assert parse_box([50, 60, 30, 10]) == BoundingBox(50, 60, 30, 10)

    def test_point_list(self):
        """Test polygon point lists."""
        assert parse_box([[0, 0], [10, 0], [10, 5], [0, 5]]) == BoundingBox(0, 0, 10, 5)

    def test_vertex_dicts(self):
        """Test {x, y} vertex lists, also when nested under 'vertices'."""
        vertices = [{"x": 1, "y": 2}, {"x": 11, "y": 2}, {"x": 11, "y": 8}]

        assert parse_box(vertices) == BoundingBox(1, 2, 10, 6)
        assert parse_box({"vertices": vertices}) == BoundingBox(1, 2, 10, 6)

    def test_dict_aliases(self):
        """Test left/top/right/bottom and x/y/width/height dicts."""
        assert parse_box({"left": 5, "top": 5, "right": 15, "bottom": 25}) == BoundingBox(5, 5, 10, 20)
        assert parse_box({"x": 1, "y": 2, "width": 3, "height": 4}) == BoundingBox(1, 2, 3, 4)

    @pytest.mark.parametrize("value", [None, [], [1, 2, 3], {"x": 1}, [True, 0, 5, 5], "box"])
    def test_unusable_values(self, value):
        """Test shapes without usable geometry are rejected."""
        assert parse_box(value) is None


class TestExtractOcrBoxes:
    """Test cases for extract_ocr_boxes."""

    @pytest.fixture
    def response(self):
        """Provider-style response with pages, lines and words."""
        return {
            "pages": [{
                "dimensions": {"width": 1000, "height": 600},
                "lines": [
                    {
                        "text": "Ada Lovelace",
                        "bbox": [10, 10, 210, 40],
                        "words": [
                            {"text": "Ada", "bbox": [10, 10, 60, 40]},
                            {"text": "Lovelace", "bbox": [70, 10, 210, 40]},
                        ],
                    },
                    {"text": "ada@example.com", "bbox": {"x": 10, "y": 50, "width": 200, "height": 20}},
                    {"text": "ada@example.com", "bbox": {"x": 10, "y": 50, "width": 200, "height": 20}},
                    {"text": "flat", "bbox": [5, 5, 5, 0]},
                    {"text": "", "bbox": [0, 0, 10, 10]},
                ],
            }]
        }

    def test_collects_boxes_with_levels(self, response):
        """Test lines and words are collected in discovery order."""
        boxes = extract_ocr_boxes(response)

        assert [(box.text, box.level) for box in boxes] == [
            ("Ada Lovelace", "line"),
            ("Ada", "word"),
            ("Lovelace", "word"),
            ("ada@example.com", "line"),
        ]

    def test_box_ids_and_geometry(self, response):
        """Test boxes carry ids and normalized geometry."""
        first = extract_ocr_boxes(response)[0]

        assert first.id == "box-0"
        assert first.to_dict() == {
            "id": "box-0",
            "text": "Ada Lovelace",
            "level": "line",
            "bbox": {"x": 10, "y": 10, "width": 200, "height": 30},
        }

    def test_duplicates_and_zero_area_dropped(self, response):
        """Test repeated boxes collapse and flat boxes are skipped."""
        texts = [box.text for box in extract_ocr_boxes(response)]

        assert texts.count("ada@example.com") == 1
        assert "flat" not in texts

    def test_long_text_skipped(self):
        """Test paragraph-sized text nodes are not offered as boxes."""
        raw = [{"text": "x" * 500, "bbox": [0, 0, 10, 10]}]

        assert extract_ocr_boxes(raw) == []

    def test_shared_nodes_visited_once(self):
        """Test a node reachable twice is only collected once."""
        node = {"content": "Shared", "boundingBox": [0, 0, 5, 5]}
        raw = {"a": node, "b": node}

        assert len(extract_ocr_boxes(raw)) == 1

    def test_non_structured_input(self):
        """Test scalars yield no boxes."""
        assert extract_ocr_boxes("text") == []
        assert extract_ocr_boxes(None) == []


class TestExtractOcrDimensions:
    """Test cases for extract_ocr_dimensions."""

    def test_page_dimensions(self):
        """Test the first page's dimensions are read."""
        dims = extract_ocr_dimensions({"pages": [{"dimensions": {"width": 1000, "height": 600}}]})

        assert dims.to_dict() == {"width": 1000, "height": 600}

    @pytest.mark.parametrize("raw", [
        None,
        {},
        {"pages": []},
        {"pages": [{"dimensions": {"width": 0, "height": 600}}]},
        {"pages": [{"dimensions": {"width": "1000", "height": 600}}]},
    ])
    def test_missing_dimensions(self, raw):
        """Test missing or invalid dimensions give None."""
        assert extract_ocr_dimensions(raw) is None
