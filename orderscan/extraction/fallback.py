"""Demo record returned when no live extraction is possible."""

from orderscan.extraction.schema import OrderData, OrderItem


def build_fallback_order() -> OrderData:
    """Build the fixed demonstration purchase order.

    A new instance is returned on every call so callers may mutate it freely.

    Returns:
        OrderData with three line items and their summed total
    """
    items = [
        OrderItem(name="Laptop", quantity=2, unit_price=120000, amount=240000),
        OrderItem(name="24-inch Monitor", quantity=3, unit_price=25000, amount=75000),
        OrderItem(name="Wireless Mouse", quantity=5, unit_price=3000, amount=15000),
    ]
    return OrderData(
        order_number="PO-2023-0001",
        order_date="March 15, 2023",
        supplier="Sample Co., Ltd.",
        items=items,
        total_amount=sum(item.amount or 0 for item in items),
    )
