"""Tests for the swap audit ledger."""

import json
from decimal import Decimal

import pytest

from agenpay.ledger.models import TransactionStatus, TransactionType
from agenpay.ledger.repository import TransactionRepository

ETH = "0xEeeeeEeeeEeEeeEeEeEeeEEEeeeeEeeeeeeeEEeE"
USDC = "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913"


async def log_sample_swap(repo: TransactionRepository, **overrides):
    values = dict(
        from_token=ETH,
        to_token=USDC,
        from_amount=Decimal("1.5"),
        to_amount="3738.75",
        currency="ETH",
        network="84532",
        tx_hash="0xabc123",
        payment_request_id="req-1",
    )
    values.update(overrides)
    return await repo.log_swap(**values)


class TestSwapLogging:
    """Tests for writing swap records."""

    @pytest.mark.asyncio
    async def test_log_swap(self, tx_repo: TransactionRepository, db_session):
        """Test a completed swap is stored with its metadata."""
        record = await log_sample_swap(tx_repo)
        await db_session.commit()

        assert record.id is not None
        assert record.type == TransactionType.SWAP.value
        assert record.status == TransactionStatus.COMPLETED.value
        assert record.amount == Decimal("1.5")
        assert record.currency == "ETH"
        assert record.network == "84532"
        assert record.from_address == ETH
        assert record.to_address == USDC
        assert record.related_request_id == "req-1"
        assert record.completed_at is not None

        metadata = json.loads(record.metadata_json)
        assert metadata == {
            "payment_request_id": "req-1",
            "from_token": ETH,
            "to_token": USDC,
            "from_amount": "1.5",
            "to_amount": "3738.75",
            "swap_provider": "OKX_DEX",
        }

    @pytest.mark.asyncio
    async def test_pending_swap_has_no_completion_time(self, tx_repo: TransactionRepository, db_session):
        """Test non-completed swaps leave completed_at empty."""
        record = await log_sample_swap(tx_repo, status=TransactionStatus.PENDING, tx_hash=None)
        await db_session.commit()

        assert record.status == "pending"
        assert record.completed_at is None

    @pytest.mark.asyncio
    async def test_records_get_distinct_ids(self, tx_repo: TransactionRepository, db_session):
        """Test each swap gets its own identifier."""
        first = await log_sample_swap(tx_repo, tx_hash="0x1")
        second = await log_sample_swap(tx_repo, tx_hash="0x2")
        await db_session.commit()

        assert first.id != second.id


class TestSwapQueries:
    """Tests for reading swap records back."""

    @pytest.mark.asyncio
    async def test_get_by_tx_hash(self, tx_repo: TransactionRepository, db_session):
        """Test looking up a swap by transaction hash."""
        await log_sample_swap(tx_repo, tx_hash="0xfeed")
        await db_session.commit()

        found = await tx_repo.get_by_tx_hash("0xfeed")
        missing = await tx_repo.get_by_tx_hash("0xnope")

        assert found is not None
        assert found.tx_hash == "0xfeed"
        assert missing is None

    @pytest.mark.asyncio
    async def test_list_for_payment_request(self, tx_repo: TransactionRepository, db_session):
        """Test swaps are grouped by payment request."""
        await log_sample_swap(tx_repo, tx_hash="0x1", payment_request_id="req-a")
        await log_sample_swap(tx_repo, tx_hash="0x2", payment_request_id="req-a")
        await log_sample_swap(tx_repo, tx_hash="0x3", payment_request_id="req-b")
        await db_session.commit()

        records = await tx_repo.list_for_payment_request("req-a")

        assert {r.tx_hash for r in records} == {"0x1", "0x2"}

    @pytest.mark.asyncio
    async def test_count_swaps(self, tx_repo: TransactionRepository, db_session):
        """Test counting swaps overall and by status."""
        await log_sample_swap(tx_repo, tx_hash="0x1")
        await log_sample_swap(tx_repo, tx_hash="0x2")
        await log_sample_swap(tx_repo, tx_hash="0x3", status=TransactionStatus.FAILED)
        await db_session.commit()

        assert await tx_repo.count_swaps() == 3
        assert await tx_repo.count_swaps(TransactionStatus.COMPLETED) == 2
        assert await tx_repo.count_swaps(TransactionStatus.FAILED) == 1
        assert await tx_repo.count_swaps(TransactionStatus.PREPARED) == 0

    @pytest.mark.asyncio
    async def test_count_on_empty_ledger(self, tx_repo: TransactionRepository):
        """Test an empty ledger counts zero."""
        assert await tx_repo.count_swaps() == 0
