"""DEX service for multi-token payments.

Lets a payer settle in any supported token while the payee receives their
preferred one. Route decisions and quotes go through the routing pipeline;
completed swaps are written to the audit ledger on a best-effort basis.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from agenpay.chains import CHAINS, get_token_symbol, resolve_chain_id
from agenpay.config import DexConfig
from agenpay.ledger.models import TransactionStatus
from agenpay.ledger.repository import TransactionRepository
from agenpay.routing.adapter import QuoteAdapter
from agenpay.routing.base import (
    QuoteProvider,
    QuoteQuery,
    QuoteResult,
    RouteRequest,
    RouteResult,
    SwapExecution,
    SwapStatusInfo,
    parse_amount,
)
from agenpay.routing.errors import RoutingError
from agenpay.routing.factory import create_quote_provider
from agenpay.routing.selector import RouteSelector

logger = logging.getLogger(__name__)


@dataclass
class CatalogResult:
    """Chains or tokens listed by the aggregator."""

    success: bool
    data: list[dict] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class ServiceStats:
    """Swap activity summary."""

    total_swaps: int
    completed_swaps: int
    success_rate: Decimal
    supported_chains: int
    sandbox_mode: bool

    def to_dict(self) -> dict:
        return {
            "total_swaps": self.total_swaps,
            "completed_swaps": self.completed_swaps,
            "success_rate": str(self.success_rate),
            "supported_chains": self.supported_chains,
            "sandbox_mode": self.sandbox_mode,
        }


class DexService:
    """Application-facing facade over quote providers and the audit ledger."""

    def __init__(
        self,
        provider: QuoteProvider,
        session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
        default_slippage: str = "0.5",
    ):
        self.provider = provider
        self.adapter = QuoteAdapter(provider)
        self.selector = RouteSelector(self.adapter, slippage=default_slippage)
        self.default_slippage = default_slippage
        self._session_factory = session_factory

        logger.info(
            f"DEX service initialized - mode: {'sandbox' if provider.is_sandbox else 'live'} "
            f"({provider.name})"
        )

    @classmethod
    def from_config(
        cls,
        config: DexConfig,
        session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
    ) -> "DexService":
        return cls(
            create_quote_provider(config),
            session_factory=session_factory,
            default_slippage=config.default_slippage,
        )

    @property
    def sandbox_mode(self) -> bool:
        return self.provider.is_sandbox

    def _get_session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            from agenpay.ledger.database import get_session_factory

            self._session_factory = get_session_factory()
        return self._session_factory

    # ======================
    # Catalog
    # ======================

    async def get_supported_chains(self) -> CatalogResult:
        """List chains supported by the aggregator."""
        try:
            chains = await self.provider.fetch_supported_chains()
        except RoutingError as e:
            logger.error(f"Error fetching supported chains: {e.reason}")
            return CatalogResult(success=False, error=e.reason)
        return CatalogResult(success=True, data=chains)

    async def get_tokens_for_chain(self, chain_id: str) -> CatalogResult:
        """List tokens available on a chain."""
        # The aggregator only understands numeric chain IDs
        resolved_id = resolve_chain_id(chain_id)
        try:
            tokens = await self.provider.fetch_tokens(resolved_id)
        except RoutingError as e:
            logger.error(f"Error fetching tokens for chain {chain_id}: {e.reason}")
            return CatalogResult(success=False, error=e.reason)
        return CatalogResult(success=True, data=tokens)

    # ======================
    # Quotes and routes
    # ======================

    async def get_swap_quote(
        self,
        chain_id: str,
        from_token: str,
        to_token: str,
        amount: str,
        slippage: Optional[Union[str, Decimal]] = None,
        wallet_address: str = "",
    ) -> QuoteResult:
        """Quote a conversion between two tokens."""
        return await self.adapter.get_quote(
            chain_id=resolve_chain_id(chain_id),
            from_token=from_token,
            to_token=to_token,
            amount=amount,
            slippage=slippage if slippage is not None else self.default_slippage,
            wallet_address=wallet_address,
        )

    async def calculate_payment_route(
        self,
        payer_token: str,
        payee_token: str,
        amount: str,
        chain_id: str,
        wallet_address: str = "",
    ) -> RouteResult:
        """Decide whether a payment is direct or needs a swap."""
        request = RouteRequest(
            payer_token=payer_token,
            payee_token=payee_token,
            amount=amount,
            chain_id=resolve_chain_id(chain_id),
            wallet_address=wallet_address,
        )
        return await self.selector.select_route(request)

    # ======================
    # Swaps
    # ======================

    async def execute_swap(
        self,
        chain_id: str,
        from_token: str,
        to_token: str,
        amount: str,
        wallet_address: str = "",
        slippage: Optional[str] = None,
        payment_request_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> SwapExecution:
        """
        Execute a token swap.

        Sandbox swaps complete immediately. Live swaps are re-quoted first and
        come back as unsigned transaction data for the wallet platform.

        Returns:
            SwapExecution; failures have success=False and an error message
        """
        slippage = str(slippage) if slippage is not None else self.default_slippage
        chain_id = resolve_chain_id(chain_id)
        logger.info(f"Executing swap: {amount} {from_token} -> {to_token} on chain {chain_id}")

        try:
            from_amount = parse_amount(amount)
        except RoutingError as e:
            return SwapExecution(success=False, status="failed", provider=self.provider.name, error=e.reason)

        if not self.provider.is_sandbox:
            quote = await self.get_swap_quote(chain_id, from_token, to_token, amount, slippage, wallet_address)
            if not quote.can_proceed:
                return SwapExecution(
                    success=False,
                    status="failed",
                    provider=self.provider.name,
                    error=f"Failed to get quote: {quote.reason}",
                )

        query = QuoteQuery(
            chain_id=str(chain_id),
            from_token=from_token,
            to_token=to_token,
            amount=str(amount).strip(),
            slippage=slippage,
            wallet_address=wallet_address,
        )
        try:
            execution = await self.provider.fetch_swap(query)
        except RoutingError as e:
            logger.error(f"Error executing swap: {e.reason}")
            return SwapExecution(success=False, status="failed", provider=self.provider.name, error=e.reason)

        if execution.is_completed and payment_request_id:
            await self._log_swap(
                chain_id=str(chain_id),
                from_token=from_token,
                to_token=to_token,
                from_amount=from_amount,
                execution=execution,
                payment_request_id=payment_request_id,
                user_id=user_id,
            )

        return execution

    async def _log_swap(
        self,
        chain_id: str,
        from_token: str,
        to_token: str,
        from_amount: Decimal,
        execution: SwapExecution,
        payment_request_id: str,
        user_id: Optional[str],
    ) -> None:
        """Write a completed swap to the audit ledger; failures are only logged."""
        try:
            async with self._get_session_factory()() as session:
                repo = TransactionRepository(session)
                await repo.log_swap(
                    from_token=from_token,
                    to_token=to_token,
                    from_amount=from_amount,
                    to_amount=execution.to_amount,
                    currency=get_token_symbol(from_token, chain_id),
                    network=chain_id,
                    tx_hash=execution.tx_hash,
                    status=TransactionStatus.COMPLETED,
                    payment_request_id=payment_request_id,
                    user_id=user_id,
                )
                await session.commit()
            logger.info(f"Swap transaction logged: {execution.tx_hash}")
        except Exception as e:
            logger.error(f"Error logging swap transaction {execution.tx_hash}: {e}")

    async def get_swap_status(self, tx_hash: str) -> SwapStatusInfo:
        """Get status of a swap transaction."""
        return await self.provider.swap_status(tx_hash)

    async def get_service_stats(self) -> ServiceStats:
        """Summarize recorded swap activity."""
        try:
            async with self._get_session_factory()() as session:
                repo = TransactionRepository(session)
                total = await repo.count_swaps()
                completed = await repo.count_swaps(TransactionStatus.COMPLETED)
        except Exception as e:
            logger.error(f"Error getting service stats: {e}")
            total = completed = 0

        rate = (
            (Decimal(completed) / Decimal(total) * 100).quantize(Decimal("0.01"))
            if total > 0
            else Decimal("0")
        )
        return ServiceStats(
            total_swaps=total,
            completed_swaps=completed,
            success_rate=rate,
            supported_chains=len(CHAINS),
            sandbox_mode=self.sandbox_mode,
        )

    async def aclose(self) -> None:
        """Release provider resources."""
        await self.provider.aclose()
