"""DEX endpoints: catalog, quotes, payment routes and swaps."""

from typing import Optional

from fastapi import APIRouter, Depends

from agenpay.api.contracts import (
    CatalogResponse,
    PaymentRouteRequest,
    PaymentRouteResponse,
    QuoteRequest,
    QuoteResponse,
    StatsResponse,
    SwapRequest,
    SwapResponse,
    SwapStatusResponse,
)
from agenpay.config import get_settings
from agenpay.routing.base import SwapUnavailable
from agenpay.services.dex_service import DexService

router = APIRouter(prefix="/api/v1/dex", tags=["DEX"])

_dex_service: Optional[DexService] = None


def get_dex_service() -> DexService:
    """Get the process-wide DEX service, creating it on first use."""
    global _dex_service
    if _dex_service is None:
        _dex_service = DexService.from_config(get_settings().dex_config())
    return _dex_service


async def close_dex_service() -> None:
    """Release the DEX service's pooled resources."""
    global _dex_service
    if _dex_service is not None:
        await _dex_service.aclose()
        _dex_service = None


@router.get("/chains", response_model=CatalogResponse)
async def list_chains(service: DexService = Depends(get_dex_service)) -> CatalogResponse:
    """List chains supported by the aggregator."""
    result = await service.get_supported_chains()
    return CatalogResponse(success=result.success, data=result.data, error=result.error)


@router.get("/chains/{chain_id}/tokens", response_model=CatalogResponse)
async def list_tokens(chain_id: str, service: DexService = Depends(get_dex_service)) -> CatalogResponse:
    """List tokens tradable on a chain."""
    result = await service.get_tokens_for_chain(chain_id)
    return CatalogResponse(success=result.success, data=result.data, error=result.error)


@router.post("/quote", response_model=QuoteResponse)
async def get_quote(request: QuoteRequest, service: DexService = Depends(get_dex_service)) -> QuoteResponse:
    """Quote a token conversion.

    Unavailable quotes are reported with success=False and the reason in
    `error`, never as an HTTP error.
    """
    result = await service.get_swap_quote(
        chain_id=request.chain_id,
        from_token=request.from_token,
        to_token=request.to_token,
        amount=request.amount,
        slippage=request.slippage,
        wallet_address=request.wallet_address,
    )
    if isinstance(result, SwapUnavailable):
        return QuoteResponse(success=False, error=result.reason)

    data = result.to_dict()
    for key in ("route", "swap_required", "can_proceed"):
        data.pop(key)
    return QuoteResponse(success=True, **data)


@router.post("/route", response_model=PaymentRouteResponse)
async def calculate_route(
    request: PaymentRouteRequest,
    service: DexService = Depends(get_dex_service),
) -> PaymentRouteResponse:
    """Decide whether a payment can be made directly or needs a swap."""
    result = await service.calculate_payment_route(
        payer_token=request.payer_token,
        payee_token=request.payee_token,
        amount=request.amount,
        chain_id=request.chain_id,
        wallet_address=request.wallet_address,
    )
    return PaymentRouteResponse(**result.to_dict())


@router.post("/swap", response_model=SwapResponse)
async def execute_swap(request: SwapRequest, service: DexService = Depends(get_dex_service)) -> SwapResponse:
    """Execute (sandbox) or prepare (live) a token swap."""
    execution = await service.execute_swap(
        chain_id=request.chain_id,
        from_token=request.from_token,
        to_token=request.to_token,
        amount=request.amount,
        wallet_address=request.wallet_address,
        slippage=str(request.slippage),
        payment_request_id=request.payment_request_id,
        user_id=request.user_id,
    )
    return SwapResponse(**execution.to_dict())


@router.get("/swap/{tx_hash}", response_model=SwapStatusResponse)
async def get_swap_status(tx_hash: str, service: DexService = Depends(get_dex_service)) -> SwapStatusResponse:
    """Get status of a swap transaction."""
    status = await service.get_swap_status(tx_hash)
    return SwapStatusResponse(tx_hash=status.tx_hash, status=status.status, confirmations=status.confirmations)


@router.get("/stats", response_model=StatsResponse)
async def get_stats(service: DexService = Depends(get_dex_service)) -> StatsResponse:
    """Get swap activity statistics."""
    stats = await service.get_service_stats()
    return StatsResponse(**stats.to_dict())
