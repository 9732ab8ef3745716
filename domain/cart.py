# domain/cart.py
from __future__ import annotations

import copy
from dataclasses import asdict, dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional

from domain.exceptions import ValidationError


@dataclass(frozen=True)
class CartItem:
    id: int
    product_id: int
    title: str
    price: int  # minor units
    quantity: int
    variant_id: int


@dataclass
class Cart:
    token: str
    note: Optional[str] = None
    attributes: Dict[str, Any] = field(default_factory=dict)
    total_price: int = 0
    items: List[CartItem] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not isinstance(self.token, str):
            raise ValidationError(f"Cart token must be a string: {self.token!r}")
        if not self.token.strip():
            raise ValidationError("Cart token must not be empty")

    def with_item(self, item: CartItem) -> "Cart":
        return replace(
            self,
            attributes=copy.deepcopy(self.attributes),
            total_price=self.total_price + item.price * item.quantity,
            items=[*self.items, item],
        )

    def with_attributes(self, attributes: Mapping[str, Any]) -> "Cart":
        merged = copy.deepcopy(self.attributes)
        merged.update(attributes)
        return replace(self, attributes=merged, items=list(self.items))

    def clone(self) -> "Cart":
        return copy.deepcopy(self)

    def next_item_id(self) -> int:
        return max((item.id for item in self.items), default=0) + 1

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Cart":
        try:
            items = [CartItem(**item) for item in data.get("items", [])]
            return cls(
                token=data["token"],
                note=data.get("note"),
                attributes=dict(data.get("attributes") or {}),
                total_price=int(data.get("total_price", 0)),
                items=items,
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Invalid cart payload: {e}") from e
