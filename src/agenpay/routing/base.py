"""Route and quote types plus the abstract quote provider interface."""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Union

from agenpay.chains import same_token
from agenpay.routing.errors import InvalidAmountError

DEFAULT_SLIPPAGE = "0.5"  # percent

# Largest and smallest decimal exponent an amount may carry (minimal units included)
MAX_AMOUNT_EXPONENT = 60
MIN_AMOUNT_EXPONENT = -60


def parse_amount(amount: Union[str, Decimal, int, None]) -> Decimal:
    """Parse a decimal amount, rejecting anything that cannot be quoted.

    Raises:
        InvalidAmountError: for empty, non-numeric, non-finite, zero,
            negative or out-of-range input
    """
    if amount is None or (isinstance(amount, str) and not amount.strip()):
        raise InvalidAmountError("Amount is required")
    try:
        value = Decimal(str(amount).strip())
    except InvalidOperation:
        raise InvalidAmountError(f"Amount is not a number: {amount!r}") from None
    if not value.is_finite():
        raise InvalidAmountError(f"Amount must be finite: {amount!r}")
    if value <= 0:
        raise InvalidAmountError(f"Amount must be positive: {amount!r}")
    if not MIN_AMOUNT_EXPONENT <= value.adjusted() <= MAX_AMOUNT_EXPONENT:
        raise InvalidAmountError(f"Amount is out of range: {amount!r}")
    return value


def format_amount(value: Decimal) -> str:
    """Render a Decimal as a plain decimal string without exponent."""
    if value == 0:
        return "0"
    return format(value.normalize(), "f")


@dataclass(frozen=True)
class RouteRequest:
    """A payer/payee token pair to resolve into a payment route."""

    payer_token: str
    payee_token: str
    amount: str
    chain_id: str
    wallet_address: str

    @property
    def swap_required(self) -> bool:
        return not same_token(self.payer_token, self.payee_token)


@dataclass(frozen=True)
class QuoteQuery:
    """A normalized aggregator query."""

    chain_id: str
    from_token: str
    to_token: str
    amount: str
    slippage: str = DEFAULT_SLIPPAGE
    wallet_address: str = ""

    def to_params(self) -> dict[str, str]:
        """Query-string parameters in the aggregator's naming."""
        params = {
            "chainId": self.chain_id,
            "fromTokenAddress": self.from_token,
            "toTokenAddress": self.to_token,
            "amount": self.amount,
            "slippage": self.slippage,
        }
        if self.wallet_address:
            params["userWalletAddress"] = self.wallet_address
        return params


@dataclass(frozen=True)
class RouteHop:
    """One DEX leg of a quoted route."""

    dex_name: str
    percentage: Decimal = Decimal("100")

    def to_dict(self) -> dict:
        return {"dex_name": self.dex_name, "percentage": str(self.percentage)}


@dataclass(frozen=True)
class SwapQuote:
    """A swap quote normalized from a provider response."""

    provider: str
    chain_id: str
    from_token: str
    to_token: str
    from_amount: str
    to_amount: str
    estimated_gas: str
    trade_fee: Optional[str]
    price_impact_pct: Optional[str]
    slippage: str
    route_hops: tuple[RouteHop, ...] = ()
    trade_fee_bps: Optional[Decimal] = None
    is_simulated: bool = False
    timestamp: float = field(default_factory=time.time)

    @property
    def effective_rate(self) -> Decimal:
        """Output per unit of input, including fees."""
        from_amount = Decimal(self.from_amount)
        if from_amount == 0:
            return Decimal("0")
        return Decimal(self.to_amount) / from_amount


# ======================
# Route results
# ======================


@dataclass(frozen=True)
class DirectRoute:
    """Payer already holds the payee's token; no conversion needed."""

    amount: str

    kind = "direct"
    swap_required = False
    can_proceed = True

    def to_dict(self) -> dict:
        return {
            "route": self.kind,
            "swap_required": False,
            "can_proceed": True,
            "input_amount": self.amount,
            "output_amount": self.amount,
        }


@dataclass(frozen=True)
class SwapResolved:
    """Conversion is needed and a priced quote backs it."""

    input_amount: str
    output_amount: str
    estimated_gas: str
    trade_fee_bps: Optional[Decimal]
    price_impact_pct: Optional[str]
    route_hops: tuple[RouteHop, ...]
    slippage_tolerance: str
    trade_fee: Optional[str] = None
    provider: str = ""
    is_simulated: bool = False

    kind = "swap"
    swap_required = True
    can_proceed = True

    @classmethod
    def from_quote(cls, quote: SwapQuote) -> "SwapResolved":
        return cls(
            input_amount=quote.from_amount,
            output_amount=quote.to_amount,
            estimated_gas=quote.estimated_gas,
            trade_fee_bps=quote.trade_fee_bps,
            price_impact_pct=quote.price_impact_pct,
            route_hops=quote.route_hops,
            slippage_tolerance=quote.slippage,
            trade_fee=quote.trade_fee,
            provider=quote.provider,
            is_simulated=quote.is_simulated,
        )

    def to_dict(self) -> dict:
        return {
            "route": self.kind,
            "swap_required": True,
            "can_proceed": True,
            "input_amount": self.input_amount,
            "output_amount": self.output_amount,
            "estimated_gas": self.estimated_gas,
            "trade_fee": self.trade_fee,
            "trade_fee_bps": (
                format_amount(self.trade_fee_bps) if self.trade_fee_bps is not None else None
            ),
            "price_impact_pct": self.price_impact_pct,
            "route_hops": [hop.to_dict() for hop in self.route_hops],
            "slippage_tolerance": self.slippage_tolerance,
            "provider": self.provider,
            "is_simulated": self.is_simulated,
        }


@dataclass(frozen=True)
class SwapUnavailable:
    """Conversion is needed but no quote could be obtained."""

    reason: str

    kind = "unavailable"
    swap_required = True
    can_proceed = False

    def to_dict(self) -> dict:
        return {
            "route": self.kind,
            "swap_required": True,
            "can_proceed": False,
            "reason": self.reason,
        }


RouteResult = Union[DirectRoute, SwapResolved, SwapUnavailable]
QuoteResult = Union[SwapResolved, SwapUnavailable]


# ======================
# Swap execution
# ======================


@dataclass
class SwapExecution:
    """Outcome of a swap execution request."""

    success: bool
    status: str
    provider: str = ""
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
    timestamp: float = field(default_factory=time.time)

    @property
    def is_completed(self) -> bool:
        return self.success and self.status == "completed"

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "status": self.status,
            "provider": self.provider,
            "tx_hash": self.tx_hash,
            "from_amount": self.from_amount,
            "to_amount": self.to_amount,
            "gas_used": self.gas_used,
            "gas_price": self.gas_price,
            "trade_fee": self.trade_fee,
            "explorer_url": self.explorer_url,
            "tx_data": self.tx_data,
            "is_simulated": self.is_simulated,
            "error": self.error,
        }


@dataclass(frozen=True)
class SwapStatusInfo:
    """On-chain status of a swap transaction."""

    tx_hash: str
    status: str
    confirmations: int = 0
    timestamp: float = field(default_factory=time.time)


class QuoteProvider(ABC):
    """Abstract source of swap quotes and aggregator catalog data.

    Implementations raise `RoutingError` subclasses on failure; the quote
    adapter turns those into `SwapUnavailable` results.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name identifier."""
        pass

    @property
    @abstractmethod
    def is_sandbox(self) -> bool:
        """Whether quotes are computed locally instead of fetched."""
        pass

    @abstractmethod
    async def fetch_quote(self, query: QuoteQuery) -> SwapQuote:
        """
        Get a swap quote.

        Args:
            query: Normalized aggregator query

        Returns:
            SwapQuote for the requested conversion

        Raises:
            RoutingError: if no quote can be produced
        """
        pass

    @abstractmethod
    async def fetch_supported_chains(self) -> list[dict]:
        """List chains the aggregator can route on."""
        pass

    @abstractmethod
    async def fetch_tokens(self, chain_id: str) -> list[dict]:
        """List tokens tradable on a chain."""
        pass

    @abstractmethod
    async def fetch_swap(self, query: QuoteQuery) -> SwapExecution:
        """
        Execute (sandbox) or prepare (live) a swap.

        Live providers return unsigned transaction data for the custody
        platform to sign and broadcast.
        """
        pass

    @abstractmethod
    async def swap_status(self, tx_hash: str) -> SwapStatusInfo:
        """Get the status of a previously submitted swap."""
        pass

    async def aclose(self) -> None:
        """Release any pooled resources."""
        return None
