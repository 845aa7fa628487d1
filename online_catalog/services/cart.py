"""
Shopping cart state: merge-by-id add, remove, clamped set-quantity, clear, totals.
The cart lives on the client (a per-catalog cookie); nothing is written server side.
"""
from __future__ import annotations

import base64
import binascii
import json
from decimal import Decimal
from typing import Mapping, Optional

from pydantic import BaseModel, Field, ValidationError

from online_catalog.core.logging import get_logger

logger = get_logger(__name__)


def storage_key(slug: str) -> str:
    return f"cart_{slug}"


class CartItem(BaseModel):
    id: int
    name: str
    price: Decimal
    quantity: int = Field(default=1, ge=1)

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


class Cart:
    def __init__(self, items: Optional[list[CartItem]] = None) -> None:
        self.items: list[CartItem] = list(items or [])

    def add(self, item_id: int, name: str, price: Decimal, qty: int = 1) -> None:
        for i, existing in enumerate(self.items):
            if existing.id == item_id:
                self.items[i] = existing.model_copy(update={"quantity": existing.quantity + qty})
                return
        self.items.append(CartItem(id=item_id, name=name, price=price, quantity=qty))

    def remove(self, item_id: int) -> None:
        self.items = [i for i in self.items if i.id != item_id]

    def set_quantity(self, item_id: int, qty: int) -> None:
        self.items = [
            i.model_copy(update={"quantity": max(1, qty)}) if i.id == item_id else i for i in self.items
        ]

    def clear(self) -> None:
        self.items = []

    @property
    def total(self) -> Decimal:
        return sum((i.line_total for i in self.items), Decimal("0"))

    @property
    def item_count(self) -> int:
        return sum(i.quantity for i in self.items)

    def __len__(self) -> int:
        return len(self.items)

    # Persistence (best effort)

    def dumps(self) -> str:
        raw = json.dumps([i.model_dump(mode="json") for i in self.items])
        # unpadded so the cookie value needs no quoting
        return base64.urlsafe_b64encode(raw.encode()).decode().rstrip("=")

    @classmethod
    def loads(cls, value: Optional[str]) -> "Cart":
        """Anything unreadable loads as an empty cart."""
        if not value:
            return cls()
        try:
            padded = value + "=" * (-len(value) % 4)
            parsed = json.loads(base64.urlsafe_b64decode(padded.encode()))
        except (binascii.Error, ValueError, UnicodeDecodeError):
            logger.info("cart_payload_unreadable")
            return cls()
        if not isinstance(parsed, list):
            return cls()
        try:
            return cls([CartItem.model_validate(i) for i in parsed])
        except ValidationError:
            logger.info("cart_payload_invalid")
            return cls()

    @classmethod
    def load(cls, storage: Mapping[str, str], slug: str) -> "Cart":
        return cls.loads(storage.get(storage_key(slug)))
