"""Repository for ledger transaction records."""

import json
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from agenpay.ledger.models import Transaction, TransactionStatus, TransactionType

SWAP_PROVIDER_TAG = "OKX_DEX"


class TransactionRepository:
    """Repository for transaction audit records."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def log_swap(
        self,
        *,
        from_token: str,
        to_token: str,
        from_amount: Decimal,
        to_amount: Optional[str],
        currency: str,
        network: str,
        tx_hash: Optional[str],
        status: TransactionStatus = TransactionStatus.COMPLETED,
        payment_request_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> Transaction:
        """Record a swap for audit purposes."""
        now = datetime.now(timezone.utc)
        record = Transaction(
            user_id=user_id,
            type=TransactionType.SWAP.value,
            status=TransactionStatus(status).value,
            amount=from_amount,
            currency=currency,
            network=network,
            description=f"Swap {from_amount} {currency}",
            from_address=from_token,
            to_address=to_token,
            tx_hash=tx_hash,
            related_request_id=payment_request_id,
            metadata_json=json.dumps(
                {
                    "payment_request_id": payment_request_id,
                    "from_token": from_token,
                    "to_token": to_token,
                    "from_amount": str(from_amount),
                    "to_amount": to_amount,
                    "swap_provider": SWAP_PROVIDER_TAG,
                }
            ),
            completed_at=now if status == TransactionStatus.COMPLETED else None,
        )
        self.session.add(record)
        await self.session.flush()
        return record

    async def get_by_tx_hash(self, tx_hash: str) -> Optional[Transaction]:
        """Get a transaction by on-chain hash."""
        stmt = select(Transaction).where(Transaction.tx_hash == tx_hash)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def list_for_payment_request(self, payment_request_id: str) -> list[Transaction]:
        """Get all transactions linked to a payment request, oldest first."""
        stmt = (
            select(Transaction)
            .where(Transaction.related_request_id == payment_request_id)
            .order_by(Transaction.created_at)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_swaps(self, status: Optional[TransactionStatus] = None) -> int:
        """Count swap records, optionally filtered by status."""
        stmt = select(func.count(Transaction.id)).where(Transaction.type == TransactionType.SWAP.value)
        if status is not None:
            stmt = stmt.where(Transaction.status == TransactionStatus(status).value)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())
