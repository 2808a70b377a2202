"""Factory for quote providers and route selectors.

The sandbox/live decision is made once here, from an explicit `DexConfig`.
"""

import logging
from typing import Optional

import httpx

from agenpay.config import DexConfig
from agenpay.routing.adapter import QuoteAdapter
from agenpay.routing.base import QuoteProvider
from agenpay.routing.okx import LiveQuoteProvider
from agenpay.routing.sandbox import SandboxQuoteProvider
from agenpay.routing.selector import RouteSelector

logger = logging.getLogger(__name__)


def create_quote_provider(
    config: DexConfig,
    client: Optional[httpx.AsyncClient] = None,
) -> QuoteProvider:
    """Create the quote provider for a configuration.

    Sandbox is chosen when the config asks for it or when any live
    credential is missing.
    """
    if config.use_sandbox:
        if not config.sandbox:
            logger.warning("OKX credentials incomplete - falling back to sandbox quotes")
        logger.info("Quote provider: sandbox (fixed rate table)")
        return SandboxQuoteProvider(fee_factor=config.sandbox_fee_factor)

    logger.info(f"Quote provider: OKX DEX live ({config.base_url})")
    return LiveQuoteProvider(config, client=client)


def create_route_selector(
    config: DexConfig,
    provider: Optional[QuoteProvider] = None,
) -> RouteSelector:
    """Wire provider -> adapter -> selector."""
    provider = provider or create_quote_provider(config)
    return RouteSelector(QuoteAdapter(provider), slippage=config.default_slippage)
