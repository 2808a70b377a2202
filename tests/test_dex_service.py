"""Tests for the DEX service facade."""

import json
from decimal import Decimal

import httpx
import pytest

from agenpay.ledger.repository import TransactionRepository
from agenpay.routing.base import DirectRoute, SwapResolved, SwapUnavailable
from agenpay.routing.okx import LiveQuoteProvider
from agenpay.services.dex_service import DexService

ETH = "0xEeeeeEeeeEeEeeEeEeEeeEEEeeeeEeeeeeeeEEeE"
USDC = "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913"
WALLET = "0x742d35Cc6464f4F4D4Cc7b5A87e1f0E6D5F3D5B8"


def broken_session_factory():
    raise RuntimeError("database is down")


async def swaps_for(session_factory, payment_request_id: str):
    async with session_factory() as session:
        return await TransactionRepository(session).list_for_payment_request(payment_request_id)


class TestCatalog:
    """Tests for chain and token listings."""

    @pytest.mark.asyncio
    async def test_supported_chains(self, dex_service: DexService):
        result = await dex_service.get_supported_chains()

        assert result.success is True
        assert {c["chainId"] for c in result.data} == {"84532", "11155111"}

    @pytest.mark.asyncio
    async def test_tokens_accept_chain_name(self, dex_service: DexService):
        by_name = await dex_service.get_tokens_for_chain("base-sepolia")
        by_id = await dex_service.get_tokens_for_chain("84532")

        assert by_name.success is True
        assert by_name.data == by_id.data

    @pytest.mark.asyncio
    async def test_catalog_failure_is_reported(self, live_config):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"code": "50011", "msg": "Too Many Requests", "data": []})

        provider = LiveQuoteProvider(live_config, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
        service = DexService(provider)

        result = await service.get_supported_chains()

        assert result.success is False
        assert "Too Many Requests" in result.error
        assert result.data == []


class TestQuotesAndRoutes:
    """Tests for quotes and route decisions."""

    @pytest.mark.asyncio
    async def test_swap_quote(self, dex_service: DexService):
        result = await dex_service.get_swap_quote("84532", ETH, USDC, "1", wallet_address=WALLET)

        assert isinstance(result, SwapResolved)
        assert result.output_amount == "2492.5"
        assert result.slippage_tolerance == "0.5"

    @pytest.mark.asyncio
    async def test_quote_invalid_amount(self, dex_service: DexService):
        result = await dex_service.get_swap_quote("84532", ETH, USDC, "0")

        assert isinstance(result, SwapUnavailable)

    @pytest.mark.asyncio
    async def test_quote_huge_amount_is_unavailable(self, dex_service: DexService):
        result = await dex_service.get_swap_quote("84532", ETH, USDC, "1e999999")

        assert isinstance(result, SwapUnavailable)
        assert result.can_proceed is False

    @pytest.mark.asyncio
    async def test_route_direct(self, dex_service: DexService):
        result = await dex_service.calculate_payment_route(USDC, USDC.lower(), "25", "base-sepolia")

        assert result == DirectRoute(amount="25")

    @pytest.mark.asyncio
    async def test_route_swap(self, dex_service: DexService):
        result = await dex_service.calculate_payment_route(ETH, USDC, "2", "base-sepolia", WALLET)

        assert isinstance(result, SwapResolved)
        assert result.output_amount == "4985"

    @pytest.mark.asyncio
    async def test_route_unknown_token(self, dex_service: DexService):
        result = await dex_service.calculate_payment_route(
            ETH, "0x1111111111111111111111111111111111111111", "1", "84532"
        )

        assert isinstance(result, SwapUnavailable)
        assert result.can_proceed is False


class TestSwapExecution:
    """Tests for swap execution and audit logging."""

    @pytest.mark.asyncio
    async def test_sandbox_swap_is_logged(self, dex_service: DexService, session_factory):
        execution = await dex_service.execute_swap(
            "84532", ETH, USDC, "1", wallet_address=WALLET, payment_request_id="req-42", user_id="user-7"
        )

        assert execution.success is True
        assert execution.is_completed

        records = await swaps_for(session_factory, "req-42")
        assert len(records) == 1
        record = records[0]
        assert record.tx_hash == execution.tx_hash
        assert record.currency == "ETH"
        assert record.network == "84532"
        assert record.user_id == "user-7"
        assert record.amount == Decimal("1")
        assert json.loads(record.metadata_json)["to_amount"] == "2492.5"

    @pytest.mark.asyncio
    async def test_swap_without_payment_request_is_not_logged(self, dex_service: DexService):
        await dex_service.execute_swap("84532", ETH, USDC, "1")

        stats = await dex_service.get_service_stats()
        assert stats.total_swaps == 0

    @pytest.mark.asyncio
    async def test_audit_failure_does_not_fail_swap(self, sandbox_provider):
        service = DexService(sandbox_provider, session_factory=broken_session_factory)

        execution = await service.execute_swap("84532", ETH, USDC, "1", payment_request_id="req-1")

        assert execution.success is True
        assert execution.status == "completed"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", ["0", "-1", "abc", "1e999999"])
    async def test_invalid_amount_fails(self, dex_service: DexService, amount):
        execution = await dex_service.execute_swap("84532", ETH, USDC, amount)

        assert execution.success is False
        assert execution.status == "failed"
        assert execution.error

    @pytest.mark.asyncio
    async def test_unknown_token_fails(self, dex_service: DexService):
        execution = await dex_service.execute_swap(
            "84532", ETH, "0x1111111111111111111111111111111111111111", "1"
        )

        assert execution.success is False
        assert "Unsupported token" in execution.error

    @pytest.mark.asyncio
    async def test_live_swap_requires_quote(self, live_config):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"code": "82000", "msg": "Insufficient liquidity", "data": []})

        provider = LiveQuoteProvider(live_config, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
        service = DexService(provider)

        execution = await service.execute_swap("84532", ETH, USDC, "1", wallet_address=WALLET)

        assert execution.success is False
        assert execution.error.startswith("Failed to get quote")

    @pytest.mark.asyncio
    async def test_live_swap_is_prepared_not_logged(self, live_config, session_factory):
        paths = []

        def handler(request: httpx.Request) -> httpx.Response:
            paths.append(request.url.path.rsplit("/", 1)[-1])
            if request.url.path.endswith("/quote"):
                item = {"toTokenAmount": "2490", "estimatedGas": "150000"}
            else:
                item = {"routerResult": {"toTokenAmount": "2490"}, "tx": {"data": "0x", "gas": "150000"}}
            return httpx.Response(200, json={"code": "0", "msg": "", "data": [item]})

        provider = LiveQuoteProvider(live_config, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
        service = DexService(provider, session_factory=session_factory)

        execution = await service.execute_swap(
            "84532", ETH, USDC, "1", wallet_address=WALLET, payment_request_id="req-live"
        )

        assert paths == ["quote", "swap"]
        assert execution.success is True
        assert execution.status == "prepared"
        assert execution.tx_data == {"data": "0x", "gas": "150000"}
        assert await swaps_for(session_factory, "req-live") == []

    @pytest.mark.asyncio
    async def test_swap_status(self, dex_service: DexService):
        status = await dex_service.get_swap_status("0xabc")

        assert status.tx_hash == "0xabc"
        assert status.status == "completed"


class TestServiceStats:
    """Tests for swap statistics."""

    @pytest.mark.asyncio
    async def test_stats_after_swaps(self, dex_service: DexService):
        await dex_service.execute_swap("84532", ETH, USDC, "1", payment_request_id="req-1")
        await dex_service.execute_swap("84532", USDC, ETH, "100", payment_request_id="req-2")

        stats = await dex_service.get_service_stats()

        assert stats.total_swaps == 2
        assert stats.completed_swaps == 2
        assert stats.success_rate == Decimal("100.00")
        assert stats.supported_chains == 3
        assert stats.sandbox_mode is True
        assert stats.to_dict()["success_rate"] == "100.00"

    @pytest.mark.asyncio
    async def test_stats_on_empty_ledger(self, dex_service: DexService):
        stats = await dex_service.get_service_stats()

        assert stats.total_swaps == 0
        assert stats.success_rate == Decimal("0")

    @pytest.mark.asyncio
    async def test_stats_survive_database_failure(self, sandbox_provider):
        service = DexService(sandbox_provider, session_factory=broken_session_factory)

        stats = await service.get_service_stats()

        assert stats.total_swaps == 0
        assert stats.completed_swaps == 0
        assert stats.supported_chains == 3
