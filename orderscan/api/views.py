"""Results view models.

One view, parameterized by layout:
- compact: headline fields and the total
- detailed: every field, each line item with formatted prices
"""

import math
from typing import Literal

from pydantic import BaseModel

from orderscan.extraction.schema import OrderData

Layout = Literal["compact", "detailed"]

UNKNOWN_TOTAL = "Unknown"


def format_currency(value: int | float | None, symbol: str = "¥") -> str:
    """Format a money value with the currency symbol and thousands separators.

    Zero, missing and non-finite values render as an empty string.
    """
    if not value or not math.isfinite(value):
        return ""
    return f"{symbol}{value:,.0f}"


def format_quantity(value: int | float | str | None) -> str:
    """Render a quantity; integral floats lose their decimal part."""
    if value is None:
        return ""
    if isinstance(value, float):
        if not math.isfinite(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value)


class ItemView(BaseModel):
    name: str
    quantity: str
    unit_price: str
    amount: str


class ResultsView(BaseModel):
    """Display-ready extraction result."""

    layout: Layout
    order_number: str | None = None
    order_date: str | None = None
    supplier: str | None = None
    item_count: int
    items: list[ItemView] | None = None
    total: str
    is_empty: bool


def build_results_view(data: OrderData, layout: Layout = "detailed") -> ResultsView:
    """Build the results view for the requested layout.

    Args:
        data: Extracted order data
        layout: 'compact' or 'detailed'

    Returns:
        ResultsView ready for rendering
    """
    total = format_currency(data.total_amount) or UNKNOWN_TOTAL

    if layout == "compact":
        return ResultsView(
            layout=layout,
            order_number=data.order_number,
            supplier=data.supplier,
            item_count=len(data.items),
            total=total,
            is_empty=data.is_empty(),
        )

    items = [
        ItemView(
            name=item.name or "",
            quantity=format_quantity(item.quantity),
            unit_price=format_currency(item.unit_price),
            amount=format_currency(item.amount),
        )
        for item in data.items
    ]
    return ResultsView(
        layout=layout,
        order_number=data.order_number,
        order_date=data.order_date,
        supplier=data.supplier,
        item_count=len(items),
        items=items,
        total=total,
        is_empty=data.is_empty(),
    )
