"""
WhatsApp deep links and order messages for carts and single products.
"""
from __future__ import annotations

import re
from decimal import Decimal
from typing import Optional, Sequence, Union
from urllib.parse import quote

from online_catalog.services.cart import CartItem

Number = Union[Decimal, int, float, str]


def format_amount(value: Number) -> str:
    """1234 -> '1,234'; 12.5 -> '12.5'; at most two decimals."""
    amount = Decimal(str(value)).quantize(Decimal("0.01"))
    if amount == amount.to_integral_value():
        return f"{int(amount):,}"
    return f"{amount:,.2f}".rstrip("0")


def encode_component(text: str) -> str:
    # Same reserved set as JavaScript's encodeURIComponent
    return quote(text, safe="!*'()")


def phone_digits(number: Optional[str]) -> str:
    return re.sub(r"\D", "", number or "")


def wa_link(number: Optional[str], message: str) -> Optional[str]:
    digits = phone_digits(number)
    if not digits:
        return None
    return f"https://wa.me/{digits}?text={encode_component(message)}"


def cart_message(store_name: str, items: Sequence[CartItem], total: Number, currency: str) -> str:
    header = f"طلب جديد من كتالوج {store_name}:\n\n"
    lines = [f"• {i.name} × {i.quantity} — {format_amount(i.line_total)} {currency}" for i in items]
    total_line = f"\nالإجمالي: {format_amount(total)} {currency}"
    return header + "\n".join(lines) + total_line


def product_message(
    product_name: str,
    store_name: str,
    price: Number,
    product_url: str,
    currency: str,
    variant_name: Optional[str] = None,
) -> str:
    message = f"أرغب في طلب {product_name}"
    if variant_name:
        message += f" ({variant_name})"
    message += f" من {store_name}"
    message += f".\nالسعر: {format_amount(price)} {currency}"
    message += f"\nالتفاصيل: {product_url}"
    return message


def share_links(url: str, text: str) -> dict[str, str]:
    return {
        "whatsapp": f"https://api.whatsapp.com/send?text={encode_component(text + ' ' + url)}",
        # Instagram takes no prefilled text
        "instagram": f"https://www.instagram.com/?url={encode_component(url)}",
    }
