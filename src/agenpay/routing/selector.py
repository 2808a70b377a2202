"""Payment route selection."""

import logging

from agenpay.routing.adapter import QuoteAdapter
from agenpay.routing.base import DEFAULT_SLIPPAGE, DirectRoute, RouteRequest, RouteResult, SwapUnavailable

logger = logging.getLogger(__name__)


class RouteSelector:
    """Decides whether a payment is direct or needs a swap.

    `select_route` never raises. Callers only need to look at
    `result.can_proceed` and, when false, show `result.reason`.
    """

    def __init__(self, adapter: QuoteAdapter, slippage: str = DEFAULT_SLIPPAGE):
        self.adapter = adapter
        self.slippage = slippage

    async def select_route(self, request: RouteRequest) -> RouteResult:
        """Resolve a payer/payee token pair into a route."""
        if not request.swap_required:
            logger.debug(f"Direct payment route for {request.payee_token}: {request.amount}")
            return DirectRoute(amount=request.amount)

        logger.info(
            f"Calculating payment route {request.payer_token} -> {request.payee_token} "
            f"on chain {request.chain_id}"
        )
        try:
            return await self.adapter.get_quote(
                chain_id=request.chain_id,
                from_token=request.payer_token,
                to_token=request.payee_token,
                amount=request.amount,
                slippage=self.slippage,
                wallet_address=request.wallet_address,
            )
        except Exception as e:
            logger.exception(f"Unexpected error calculating payment route: {e}")
            return SwapUnavailable(reason=f"Route calculation failed: {type(e).__name__}")
