# application/steps/gift_chain.py
"""
Free-gift cart chain.

CHECK_AND_ADD_GIFT stops the chain for carts below the threshold and adds the
gift variant otherwise. UPDATE_CART_ATTRIBUTE records the gift variant in the
cart attributes so the storefront can recognise it.
"""
from __future__ import annotations

from dataclasses import dataclass

from application.executor.chain_executor import ChainExecutor
from application.ports.cart_service import CartServicePort
from application.ports.logger import LoggerPort
from domain.cart import Cart
from domain.steps.base import ChainStep
from domain.steps.outcome import StepOutcome, proceed, stop

GIFT_CHAIN_NAME = "gift"


@dataclass(frozen=True)
class GiftChainSettings:
    threshold: int = 10000
    gift_variant_id: int = 123456789
    attribute_key: str = "gift_variant_id"


def check_and_add_gift(
    service: CartServicePort,
    settings: GiftChainSettings,
    logger: LoggerPort,
) -> ChainStep[Cart]:
    async def action(cart: Cart) -> StepOutcome[Cart]:
        logger.info("gift.check", total_price=cart.total_price, threshold=settings.threshold)
        if cart.total_price < settings.threshold:
            logger.info("gift.below_threshold", total_price=cart.total_price)
            return stop(f"total_price {cart.total_price} < {settings.threshold}")

        updated = await service.add_to_cart(cart.token, settings.gift_variant_id)
        logger.info("gift.added", variant_id=settings.gift_variant_id, item_count=len(updated.items))
        return proceed(updated)

    return ChainStep(name="CHECK_AND_ADD_GIFT", action=action)


def update_cart_attribute(
    service: CartServicePort,
    settings: GiftChainSettings,
    logger: LoggerPort,
) -> ChainStep[Cart]:
    async def action(cart: Cart) -> StepOutcome[Cart]:
        attributes = {settings.attribute_key: settings.gift_variant_id}
        updated = await service.update_cart(cart.token, attributes)
        logger.info("gift.attributes_updated", attributes=attributes)
        return proceed(updated)

    return ChainStep(name="UPDATE_CART_ATTRIBUTE", action=action)


def build_gift_chain(
    service: CartServicePort,
    settings: GiftChainSettings,
    logger: LoggerPort,
) -> ChainExecutor[Cart]:
    executor: ChainExecutor[Cart] = ChainExecutor(logger=logger, name=GIFT_CHAIN_NAME)
    executor.add_step(check_and_add_gift(service, settings, logger))
    executor.add_step(update_cart_attribute(service, settings, logger))
    return executor
