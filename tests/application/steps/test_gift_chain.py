import pytest

from application.exceptions import CartNotFoundError
from application.steps.gift_chain import (
    GiftChainSettings,
    build_gift_chain,
    check_and_add_gift,
)
from domain.run import ChainRunStatus
from domain.steps import Continue, Stop
from infrastructure.cart.mock_cart_service import InMemoryCartService, create_mock_cart
from tests.recording_logger import RecordingLogger

SETTINGS = GiftChainSettings(threshold=10000, gift_variant_id=123456789, attribute_key="gift_variant_id")


def _seeded(total: int) -> InMemoryCartService:
    service = InMemoryCartService()
    service.put_cart(create_mock_cart(total))
    return service


class TestCheckAndAddGift:
    @pytest.mark.asyncio
    async def test_below_threshold_stops(self):
        service = _seeded(5000)
        step = check_and_add_gift(service, SETTINGS, RecordingLogger())

        outcome = await step.action(create_mock_cart(5000))

        assert isinstance(outcome, Stop)
        assert "5000" in outcome.reason
        cart = await service.fetch_cart("mock-cart-token")
        assert len(cart.items) == 1

    @pytest.mark.asyncio
    async def test_threshold_is_inclusive(self):
        service = _seeded(10000)
        step = check_and_add_gift(service, SETTINGS, RecordingLogger())

        outcome = await step.action(create_mock_cart(10000))

        assert isinstance(outcome, Continue)
        assert outcome.state.items[-1].variant_id == SETTINGS.gift_variant_id
        assert outcome.state.items[-1].price == 0


class TestGiftChain:
    @pytest.mark.asyncio
    async def test_gift_added_and_attribute_set(self):
        service = _seeded(12000)
        logger = RecordingLogger()
        executor = build_gift_chain(service, SETTINGS, logger)

        result = await executor.run(await service.fetch_cart("mock-cart-token"))

        cart = executor.get_result()
        assert result.status == ChainRunStatus.COMMITTED
        assert [s.name for s in executor.steps] == ["CHECK_AND_ADD_GIFT", "UPDATE_CART_ATTRIBUTE"]
        assert len(cart.items) == 2
        assert cart.attributes == {"gift_variant_id": 123456789}
        assert cart.total_price == 12000
        assert "gift.added" in logger.names()

    @pytest.mark.asyncio
    async def test_low_total_leaves_result_unchanged(self):
        service = _seeded(12000)
        executor = build_gift_chain(service, SETTINGS, RecordingLogger())
        await executor.run(await service.fetch_cart("mock-cart-token"))
        committed = executor.get_result()

        service.put_cart(create_mock_cart(5000))
        result = await executor.run(await service.fetch_cart("mock-cart-token"))

        assert result.status == ChainRunStatus.STOPPED
        assert result.stopped_step == "CHECK_AND_ADD_GIFT"
        assert executor.get_result() is committed

    @pytest.mark.asyncio
    async def test_custom_settings(self):
        settings = GiftChainSettings(threshold=100, gift_variant_id=7, attribute_key="giftId")
        service = _seeded(150)
        executor = build_gift_chain(service, settings, RecordingLogger())

        await executor.run(await service.fetch_cart("mock-cart-token"))

        cart = executor.get_result()
        assert cart.attributes == {"giftId": 7}
        assert cart.items[-1].variant_id == 7

    @pytest.mark.asyncio
    async def test_service_failure_propagates(self):
        service = InMemoryCartService()
        executor = build_gift_chain(service, SETTINGS, RecordingLogger())

        with pytest.raises(CartNotFoundError):
            await executor.run(create_mock_cart(12000, token="unknown"))

        assert executor.get_result() is None

    @pytest.mark.asyncio
    async def test_gift_already_added_is_not_rolled_back_on_later_failure(self):
        service = _seeded(12000)
        executor = build_gift_chain(service, SETTINGS, RecordingLogger())

        async def broken_update(token, attributes):
            raise RuntimeError("update failed")

        service.update_cart = broken_update

        with pytest.raises(RuntimeError):
            await executor.run(await service.fetch_cart("mock-cart-token"))

        remote = await service.fetch_cart("mock-cart-token")
        assert len(remote.items) == 2
        assert executor.get_result() is None
