"""Unit tests for model response parsing."""

import json

import pytest
from pydantic import ValidationError

from orderscan.extraction.parsing import extract_json_object, parse_order_response


class TestExtractJsonObject:
    """Test JSON extraction from raw responses."""

    def test_parse_plain_json(self) -> None:
        """Should parse plain JSON object."""
        assert extract_json_object('{"orderNumber": "123"}') == {"orderNumber": "123"}

    def test_parse_json_with_surrounding_text(self) -> None:
        """Should extract JSON even with surrounding prose."""
        response = 'Here is the result: {"orderNumber":"X","items":[]}  Thanks.'

        assert extract_json_object(response) == {"orderNumber": "X", "items": []}

    def test_parse_json_in_markdown(self) -> None:
        """Should extract JSON from a markdown code block."""
        response = '```json\n{"orderNumber": "456"}\n```'

        assert extract_json_object(response) == {"orderNumber": "456"}

    def test_parse_nested_objects(self) -> None:
        response = 'Result:\n{"items": [{"name": "A"}, {"name": "B"}], "totalAmount": 5}\n'

        assert extract_json_object(response)["items"] == [{"name": "A"}, {"name": "B"}]

    def test_parse_invalid_json_raises(self) -> None:
        """Should raise JSONDecodeError for text without JSON."""
        with pytest.raises(json.JSONDecodeError):
            extract_json_object("not json at all")

    def test_parse_broken_braces_raises(self) -> None:
        with pytest.raises(json.JSONDecodeError):
            extract_json_object('{"orderNumber": "X",, }')

    def test_parse_non_object_raises(self) -> None:
        with pytest.raises(ValueError, match="Expected a JSON object"):
            extract_json_object("[1, 2, 3]")


class TestParseOrderResponse:
    """Test conversion of responses into OrderData."""

    def test_json_embedded_in_prose(self) -> None:
        response = 'Here is the result: {"orderNumber":"X","items":[]}  Thanks.'

        order = parse_order_response(response)

        assert order.order_number == "X"
        assert order.items == []

    def test_missing_items_default_to_empty(self) -> None:
        order = parse_order_response('{"orderNumber": "X"}')

        assert order.items == []

    def test_numeric_coercion(self) -> None:
        response = json.dumps(
            {
                "items": [
                    {"name": "A", "quantity": "3", "unitPrice": "100", "amount": "300"},
                    {"name": "B", "quantity": "three", "unitPrice": "abc", "amount": None},
                ],
                "totalAmount": "300",
            }
        )

        order = parse_order_response(response)

        assert order.items[0].quantity == 3
        assert order.items[0].unit_price == 100
        assert order.items[0].amount == 300
        assert order.items[1].quantity == "three"
        assert order.items[1].unit_price is None
        assert order.total_amount == 300

    def test_invalid_record_raises_value_error(self) -> None:
        """Records with wrongly shaped fields are rejected."""
        with pytest.raises(ValidationError):
            parse_order_response('{"items": "not a list"}')
