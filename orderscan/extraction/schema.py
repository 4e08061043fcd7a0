"""Purchase order data models for structured extraction.

Field names follow the JSON keys requested from the model (camelCase aliases),
while Python code uses snake_case attributes.
"""

import math
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

_INTEGER_LITERAL = re.compile(r"^[+-]?\d+$")


def parse_integer(value: str) -> int | None:
    """Parse a text value as an integer literal.

    Args:
        value: Text as returned by the model

    Returns:
        Parsed integer, or None if the text is not an integer literal
    """
    text = value.strip()
    if _INTEGER_LITERAL.match(text):
        return int(text)
    return None


def normalize_content_type(value: str | None) -> str | None:
    """Reduce a declared media type to its lowercase type/subtype.

    Parameters such as ``; charset=binary`` are dropped; an empty value becomes None.
    """
    if value is None:
        return None
    media_type = value.split(";")[0].strip().lower()
    return media_type or None


def _drop_non_finite(value: Any) -> Any:
    # json.loads accepts NaN and Infinity
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


class UploadedFile(BaseModel):
    """A file handed in by the user, with its declared media type."""

    filename: str
    content_type: str | None = None
    content: bytes

    @field_validator("content_type", mode="before")
    @classmethod
    def _normalize_content_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            return normalize_content_type(value)
        return value

    @property
    def size(self) -> int:
        """Size of the file in bytes."""
        return len(self.content)


class OrderItem(BaseModel):
    """One line item of a purchase order."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, coerce_numbers_to_str=True
    )

    name: str | None = Field(None, description="Item name")
    quantity: int | float | str | None = Field(
        None, description="Quantity; unparseable text is kept as-is"
    )
    unit_price: int | float | None = Field(None, description="Unit price")
    amount: int | float | None = Field(None, description="Line amount")

    @field_validator("quantity", mode="before")
    @classmethod
    def _coerce_quantity(cls, value: Any) -> Any:
        if isinstance(value, str):
            parsed = parse_integer(value)
            return value if parsed is None else parsed
        return _drop_non_finite(value)

    @field_validator("unit_price", "amount", mode="before")
    @classmethod
    def _coerce_money(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_integer(value)
        return _drop_non_finite(value)


class OrderData(BaseModel):
    """Structured purchase order data extracted from a document.

    No field is required; absence is represented by None. ``items`` is always
    a list, in document row order.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, coerce_numbers_to_str=True
    )

    order_number: str | None = Field(None, description="Purchase order number")
    order_date: str | None = Field(None, description="Order date, free-form text")
    supplier: str | None = Field(None, description="Supplier company name")
    items: list[OrderItem] = Field(default_factory=list, description="Line items")
    total_amount: int | float | None = Field(None, description="Order total")

    @field_validator("items", mode="before")
    @classmethod
    def _default_items(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("total_amount", mode="before")
    @classmethod
    def _coerce_total(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_integer(value)
        return _drop_non_finite(value)

    def is_empty(self) -> bool:
        """Check whether nothing at all was extracted."""
        return not (
            self.order_number or self.order_date or self.supplier or self.items or self.total_amount
        )
