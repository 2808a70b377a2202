"""Quote adapter: turns provider quotes and failures into route results."""

import logging
from decimal import Decimal
from typing import Union

from agenpay.routing.base import (
    DEFAULT_SLIPPAGE,
    QuoteProvider,
    QuoteQuery,
    QuoteResult,
    SwapResolved,
    SwapUnavailable,
    parse_amount,
)
from agenpay.routing.errors import RoutingError

logger = logging.getLogger(__name__)


class QuoteAdapter:
    """Normalizes quote requests and maps every failure to `SwapUnavailable`.

    Each call makes at most one provider request. Nothing is cached or
    retried; prices move, so callers re-invoke for a fresh quote.
    """

    def __init__(self, provider: QuoteProvider):
        self.provider = provider

    async def get_quote(
        self,
        chain_id: str,
        from_token: str,
        to_token: str,
        amount: str,
        slippage: Union[str, Decimal] = DEFAULT_SLIPPAGE,
        wallet_address: str = "",
    ) -> QuoteResult:
        """
        Get a swap quote.

        Args:
            chain_id: Chain identifier (e.g. "84532")
            from_token: Source token address
            to_token: Destination token address
            amount: Amount of from_token as a decimal string
            slippage: Slippage tolerance in percent
            wallet_address: Payer wallet address

        Returns:
            SwapResolved on success, SwapUnavailable otherwise
        """
        try:
            parse_amount(amount)
        except RoutingError as e:
            logger.info(f"Rejected quote request before provider call: {e.reason}")
            return SwapUnavailable(reason=e.reason)

        query = QuoteQuery(
            chain_id=str(chain_id),
            from_token=from_token,
            to_token=to_token,
            amount=str(amount).strip(),
            slippage=str(slippage),
            wallet_address=wallet_address or "",
        )

        try:
            quote = await self.provider.fetch_quote(query)
        except RoutingError as e:
            logger.warning(f"{self.provider.name} quote failed: {type(e).__name__}: {e.reason}")
            return SwapUnavailable(reason=e.reason)

        logger.info(
            f"Quote from {self.provider.name}: {quote.from_amount} {from_token} -> "
            f"{quote.to_amount} {to_token}"
        )
        return SwapResolved.from_quote(quote)
