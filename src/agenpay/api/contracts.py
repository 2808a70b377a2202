"""Request and response contracts for the DEX API.

Amounts travel as decimal strings so that provider minimal-unit values are
passed through without float rounding.
"""

from decimal import Decimal
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field


class QuoteRequest(BaseModel):
    """Request for a swap quote."""

    chain_id: str = Field(..., description="Chain ID or name (e.g. 84532, base-sepolia)")
    from_token: str = Field(..., min_length=1, description="Source token address")
    to_token: str = Field(..., min_length=1, description="Destination token address")
    amount: str = Field(..., description="Amount of from_token as a decimal string")
    slippage: Decimal = Field(
        default=Decimal("0.5"),
        ge=0,
        le=50,
        description="Slippage tolerance in percent",
    )
    wallet_address: str = Field(default="", description="Payer wallet address")


class RouteHopModel(BaseModel):
    """A single DEX leg of a route."""

    dex_name: str
    percentage: str


class QuoteResponse(BaseModel):
    """Response containing swap quote details."""

    success: bool = Field(..., description="Whether a quote was obtained")
    input_amount: Optional[str] = None
    output_amount: Optional[str] = None
    estimated_gas: Optional[str] = None
    trade_fee: Optional[str] = None
    trade_fee_bps: Optional[str] = None
    price_impact_pct: Optional[str] = None
    route_hops: list[RouteHopModel] = Field(default_factory=list)
    slippage_tolerance: Optional[str] = None
    provider: Optional[str] = None
    is_simulated: bool = False
    error: Optional[str] = Field(None, description="Reason when no quote is available")


class PaymentRouteRequest(BaseModel):
    """Request to resolve a payment route."""

    payer_token: str = Field(..., min_length=1, description="Token the payer wants to pay with")
    payee_token: str = Field(..., min_length=1, description="Token the payee wants to receive")
    amount: str = Field(..., description="Payment amount as a decimal string")
    chain_id: str = Field(..., description="Chain ID or name")
    wallet_address: str = Field(default="", description="Payer wallet address")


class PaymentRouteResponse(BaseModel):
    """Resolved payment route."""

    route: Literal["direct", "swap", "unavailable"]
    swap_required: bool
    can_proceed: bool
    input_amount: Optional[str] = None
    output_amount: Optional[str] = None
    estimated_gas: Optional[str] = None
    trade_fee: Optional[str] = None
    trade_fee_bps: Optional[str] = None
    price_impact_pct: Optional[str] = None
    route_hops: list[RouteHopModel] = Field(default_factory=list)
    slippage_tolerance: Optional[str] = None
    provider: Optional[str] = None
    is_simulated: bool = False
    reason: Optional[str] = None


class SwapRequest(QuoteRequest):
    """Request to execute a swap."""

    payment_request_id: Optional[str] = Field(None, description="Payment request this swap settles")
    user_id: Optional[str] = Field(None, description="User initiating the swap")


class SwapResponse(BaseModel):
    """Swap execution result."""

    success: bool
    status: str
    provider: str
    tx_hash: Optional[str] = None
    from_amount: Optional[str] = None
    to_amount: Optional[str] = None
    gas_used: Optional[str] = None
    gas_price: Optional[str] = None
    trade_fee: Optional[str] = None
    explorer_url: Optional[str] = None
    tx_data: Optional[dict[str, Any]] = None
    is_simulated: bool = False
    error: Optional[str] = None


class SwapStatusResponse(BaseModel):
    """Status of a swap transaction."""

    tx_hash: str
    status: str
    confirmations: int


class CatalogResponse(BaseModel):
    """Chains or tokens listed by the aggregator."""

    success: bool
    data: list[dict[str, Any]] = Field(default_factory=list)
    error: Optional[str] = None


class StatsResponse(BaseModel):
    """Swap activity summary."""

    total_swaps: int
    completed_swaps: int
    success_rate: str
    supported_chains: int
    sandbox_mode: bool
