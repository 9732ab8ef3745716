# application/ports/cart_service.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping

from domain.cart import Cart


class CartServicePort(ABC):
    @abstractmethod
    async def fetch_cart(self, token: str) -> Cart:
        ...

    @abstractmethod
    async def add_to_cart(
        self,
        token: str,
        variant_id: int,
        quantity: int = 1,
        price: int = 0,
        title: str = "Free Gift",
    ) -> Cart:
        ...

    @abstractmethod
    async def update_cart(self, token: str, attributes: Mapping[str, Any]) -> Cart:
        ...
