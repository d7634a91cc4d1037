"""Invoice arithmetic. All amounts are integer cents."""

from typing import Iterable, Optional


def parse_quantity(quantity) -> float:
    """Decimal-string quantity; missing, zero or unparseable counts as 1"""
    try:
        value = float(quantity)
    except (TypeError, ValueError):
        return 1.0
    return value or 1.0


def line_amount(quantity, unit_price: int) -> int:
    return round(parse_quantity(quantity) * (unit_price or 0))


def calculate_invoice_totals(
    items: Iterable[dict],
    tax_rate: Optional[str] = "0",
    discount_percent: Optional[str] = None,
    discount_amount: Optional[int] = 0,
) -> dict:
    """
    Totals for a set of lines, each a mapping with "quantity" and "unit_price".

    A discount percent, when given, replaces the flat discount amount. Tax is
    charged on the discounted subtotal.
    """
    subtotal = round(sum(parse_quantity(i.get("quantity")) * (i.get("unit_price") or 0) for i in items))

    discount = discount_amount or 0
    if discount_percent not in (None, ""):
        discount = round(subtotal * float(discount_percent) / 100)

    after_discount = subtotal - discount
    tax_amount = round(after_discount * float(tax_rate or 0) / 100)

    return {
        "subtotal": subtotal,
        "discount_amount": discount,
        "tax_amount": tax_amount,
        "total": after_discount + tax_amount,
    }
