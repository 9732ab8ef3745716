from __future__ import annotations

import asyncio
from typing import Any, Dict, Mapping

from application.exceptions import CartNotFoundError
from application.ports.cart_service import CartServicePort
from domain.cart import Cart, CartItem

MOCK_CART_TOKEN = "mock-cart-token"
GIFT_PRODUCT_ID = 101


def create_mock_cart(total_price: int, token: str = MOCK_CART_TOKEN) -> Cart:
    return Cart(
        token=token,
        note=None,
        attributes={},
        total_price=total_price,
        items=[
            CartItem(
                id=1,
                product_id=100,
                title="Sample Product",
                price=total_price,
                quantity=1,
                variant_id=200,
            )
        ],
    )


class InMemoryCartService(CartServicePort):
    """
    In-process stand-in for a remote cart API.

    Carts are keyed by token. Every call sleeps for ``latency_sec`` before
    touching the store, and callers always receive a copy. Store updates
    never suspend, so they need no lock within one event loop.
    """

    def __init__(self, latency_sec: float = 0.0) -> None:
        self._carts: Dict[str, Cart] = {}
        self._latency_sec = latency_sec

    def put_cart(self, cart: Cart) -> None:
        self._carts[cart.token] = cart.clone()

    async def fetch_cart(self, token: str) -> Cart:
        await self._simulate_latency()
        return self._get(token).clone()

    async def add_to_cart(
        self,
        token: str,
        variant_id: int,
        quantity: int = 1,
        price: int = 0,
        title: str = "Free Gift",
    ) -> Cart:
        await self._simulate_latency()
        cart = self._get(token)
        item = CartItem(
            id=cart.next_item_id(),
            product_id=GIFT_PRODUCT_ID,
            title=title,
            price=price,
            quantity=quantity,
            variant_id=variant_id,
        )
        updated = cart.with_item(item)
        self._carts[token] = updated
        return updated.clone()

    async def update_cart(self, token: str, attributes: Mapping[str, Any]) -> Cart:
        await self._simulate_latency()
        updated = self._get(token).with_attributes(attributes)
        self._carts[token] = updated
        return updated.clone()

    def _get(self, token: str) -> Cart:
        cart = self._carts.get(token)
        if cart is None:
            raise CartNotFoundError(token)
        return cart

    async def _simulate_latency(self) -> None:
        if self._latency_sec > 0:
            await asyncio.sleep(self._latency_sec)
