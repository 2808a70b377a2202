"""Payment routing: direct-vs-swap decision and swap quoting.

Providers:
- Sandbox: fixed rate table, no network (development and tests)
- OKX DEX: live aggregator quotes with signed requests
"""

from agenpay.routing.adapter import QuoteAdapter
from agenpay.routing.base import (
    DirectRoute,
    QuoteProvider,
    QuoteQuery,
    RouteHop,
    RouteRequest,
    RouteResult,
    SwapExecution,
    SwapQuote,
    SwapResolved,
    SwapStatusInfo,
    SwapUnavailable,
)
from agenpay.routing.errors import (
    InvalidAmountError,
    MalformedResponseError,
    ProviderAuthError,
    RouteUnavailableError,
    RoutingError,
)
from agenpay.routing.factory import create_quote_provider, create_route_selector
from agenpay.routing.okx import LiveQuoteProvider
from agenpay.routing.sandbox import SandboxQuoteProvider
from agenpay.routing.selector import RouteSelector

__all__ = [
    # Requests and results
    "RouteRequest",
    "RouteResult",
    "DirectRoute",
    "SwapResolved",
    "SwapUnavailable",
    "QuoteQuery",
    "SwapQuote",
    "RouteHop",
    "SwapExecution",
    "SwapStatusInfo",
    # Providers
    "QuoteProvider",
    "SandboxQuoteProvider",
    "LiveQuoteProvider",
    # Pipeline
    "QuoteAdapter",
    "RouteSelector",
    "create_quote_provider",
    "create_route_selector",
    # Errors
    "RoutingError",
    "RouteUnavailableError",
    "ProviderAuthError",
    "MalformedResponseError",
    "InvalidAmountError",
]
