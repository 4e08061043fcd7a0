"""Parsing of raw model output into OrderData.

Multimodal models often wrap the requested JSON in prose or markdown, so the
outermost brace-delimited span is located before decoding.
"""

import json
import re
from typing import Any

from orderscan.extraction.schema import OrderData

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


def extract_json_object(response_text: str) -> dict[str, Any]:
    """Extract and parse the JSON object embedded in an LLM response.

    Args:
        response_text: Raw LLM response

    Returns:
        Parsed JSON dict

    Raises:
        json.JSONDecodeError: If no valid JSON found
        ValueError: If the JSON is valid but not an object
    """
    json_match = _JSON_OBJECT.search(response_text)
    json_string = json_match.group(0) if json_match else response_text

    result = json.loads(json_string)
    if not isinstance(result, dict):
        raise ValueError(f"Expected a JSON object, got {type(result).__name__}")
    return result


def parse_order_response(response_text: str) -> OrderData:
    """Parse raw model output into a normalized OrderData record.

    Args:
        response_text: Raw LLM response

    Returns:
        OrderData with numeric fields coerced and items defaulted to []

    Raises:
        ValueError: If no usable record can be parsed (JSONDecodeError and
            pydantic ValidationError are both ValueError subclasses)
    """
    return OrderData.model_validate(extract_json_object(response_text))
