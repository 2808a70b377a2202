"""Sandbox quote provider for development and tests.

Quotes come from a fixed table of pairwise rates with a flat proportional fee
applied to the output. Nothing here touches the network. The rates are demo
placeholders and say nothing about real market prices.
"""

import logging
import secrets
from decimal import Decimal, DecimalException
from typing import Optional

from agenpay.chains import CHAINS, DEFAULT_CHAIN, UNKNOWN_SYMBOL, get_chain, get_token_symbol
from agenpay.routing.base import (
    QuoteProvider,
    QuoteQuery,
    RouteHop,
    SwapExecution,
    SwapQuote,
    SwapStatusInfo,
    format_amount,
    parse_amount,
)
from agenpay.routing.errors import RouteUnavailableError

logger = logging.getLogger(__name__)

# Pairwise rates: 1 unit of the first token -> rate units of the second
SANDBOX_RATES: dict[tuple[str, str], Decimal] = {
    ("ETH", "USDC"): Decimal("2500"),
    ("ETH", "USDT"): Decimal("2500"),
    ("USDC", "ETH"): Decimal("1") / Decimal("2500"),
    ("USDT", "ETH"): Decimal("1") / Decimal("2500"),
    ("USDC", "USDT"): Decimal("0.999"),
    ("USDT", "USDC"): Decimal("1.001"),
    ("WETH", "ETH"): Decimal("1"),
    ("ETH", "WETH"): Decimal("1"),
}

# Unit prices in USD, used for pairs missing from SANDBOX_RATES
SANDBOX_PRICES: dict[str, Decimal] = {
    "ETH": Decimal("2500.00"),
    "WETH": Decimal("2500.00"),
    "USDC": Decimal("1.00"),
    "USDT": Decimal("1.00"),
}

DEFAULT_FEE_FACTOR = Decimal("0.997")  # 0.3% fee

SANDBOX_CHAINS = [
    {
        "chainId": "84532",
        "chainIndex": "84532",
        "chainName": "Base Sepolia",
        "dexTokenApproveAddress": "0x3E3B5F27bbf5CC967E074b70E9f4046e31663181",
        "isMainnet": False,
    },
    {
        "chainId": "11155111",
        "chainIndex": "11155111",
        "chainName": "Ethereum Sepolia",
        "dexTokenApproveAddress": "0x3E3B5F27bbf5CC967E074b70E9f4046e31663181",
        "isMainnet": False,
    },
]

TOKEN_DETAILS = {
    "ETH": ("Ethereum", 18),
    "USDC": ("USD Coin", 6),
    "USDT": ("Tether USD", 6),
    "WETH": ("Wrapped Ether", 18),
}

SIMULATED_GAS = "21000"
SIMULATED_GAS_PRICE = "20000000000"  # 20 gwei
SIMULATED_TRADE_FEE = "0.1"
SIMULATED_PRICE_IMPACT = "0.01"
SIMULATED_DEX = "Uniswap V3"
SIMULATED_CONFIRMATIONS = 12


class SandboxQuoteProvider(QuoteProvider):
    """
    Deterministic quote provider backed by a fixed rate table.

    output = amount * rate * fee_factor
    """

    def __init__(
        self,
        rates: Optional[dict[tuple[str, str], Decimal]] = None,
        prices: Optional[dict[str, Decimal]] = None,
        fee_factor: Decimal = DEFAULT_FEE_FACTOR,
        explorer_url: str = "https://sepolia.basescan.org",
    ):
        self._rates = dict(SANDBOX_RATES if rates is None else rates)
        self._prices = dict(SANDBOX_PRICES if prices is None else prices)
        for pair, rate in self._rates.items():
            if not rate.is_finite() or rate <= 0:
                raise ValueError(f"Sandbox rate for {pair[0]}/{pair[1]} must be positive, got {rate}")
        for symbol, price in self._prices.items():
            if not price.is_finite() or price <= 0:
                raise ValueError(f"Sandbox price for {symbol} must be positive, got {price}")
        if not Decimal("0") < fee_factor <= Decimal("1"):
            raise ValueError(f"Fee factor must be in (0, 1], got {fee_factor}")
        self.fee_factor = fee_factor
        self.explorer_url = explorer_url.rstrip("/")

    @property
    def name(self) -> str:
        return "sandbox"

    @property
    def is_sandbox(self) -> bool:
        return True

    @property
    def trade_fee_bps(self) -> Decimal:
        """Flat fee expressed in basis points."""
        return (Decimal("1") - self.fee_factor) * Decimal("10000")

    def get_rate(self, from_symbol: str, to_symbol: str) -> Optional[Decimal]:
        """Get the pre-fee conversion rate between two token symbols."""
        from_symbol = from_symbol.upper()
        to_symbol = to_symbol.upper()

        rate = self._rates.get((from_symbol, to_symbol))
        if rate is not None:
            return rate

        from_price = self._prices.get(from_symbol)
        to_price = self._prices.get(to_symbol)
        if from_price is None or to_price is None:
            return None
        return from_price / to_price

    def convert(self, from_symbol: str, to_symbol: str, amount: Decimal) -> Decimal:
        """Convert an amount between symbols, fee included."""
        rate = self.get_rate(from_symbol, to_symbol)
        if rate is None:
            raise RouteUnavailableError(f"No sandbox rate for {from_symbol}/{to_symbol}")
        try:
            result = amount * rate * self.fee_factor
        except DecimalException as e:
            raise RouteUnavailableError(f"Sandbox conversion {from_symbol}/{to_symbol} failed: {type(e).__name__}") from e
        if not result.is_finite() or result <= 0:
            raise RouteUnavailableError(f"Sandbox conversion {from_symbol}/{to_symbol} produced {result}")
        return result

    def _symbols(self, query: QuoteQuery) -> tuple[str, str]:
        from_symbol = get_token_symbol(query.from_token, query.chain_id)
        to_symbol = get_token_symbol(query.to_token, query.chain_id)
        if UNKNOWN_SYMBOL in (from_symbol, to_symbol):
            raise RouteUnavailableError(
                f"Unsupported token on chain {query.chain_id}: "
                f"{query.from_token if from_symbol == UNKNOWN_SYMBOL else query.to_token}"
            )
        return from_symbol, to_symbol

    async def fetch_quote(self, query: QuoteQuery) -> SwapQuote:
        """Compute a quote from the rate table."""
        amount = parse_amount(query.amount)
        from_symbol, to_symbol = self._symbols(query)
        to_amount = self.convert(from_symbol, to_symbol, amount)

        logger.debug(
            f"Sandbox quote: {amount} {from_symbol} -> {to_amount} {to_symbol} "
            f"(fee factor {self.fee_factor})"
        )

        return SwapQuote(
            provider=self.name,
            chain_id=query.chain_id,
            from_token=query.from_token,
            to_token=query.to_token,
            from_amount=query.amount,
            to_amount=format_amount(to_amount),
            estimated_gas=SIMULATED_GAS,
            trade_fee=SIMULATED_TRADE_FEE,
            trade_fee_bps=self.trade_fee_bps,
            price_impact_pct=SIMULATED_PRICE_IMPACT,
            slippage=query.slippage,
            route_hops=(RouteHop(dex_name=SIMULATED_DEX, percentage=Decimal("100")),),
            is_simulated=True,
        )

    async def fetch_supported_chains(self) -> list[dict]:
        return [dict(chain) for chain in SANDBOX_CHAINS]

    async def fetch_tokens(self, chain_id: str) -> list[dict]:
        """Return the sandbox token list for a chain."""
        chain = get_chain(chain_id) or CHAINS[DEFAULT_CHAIN]
        tokens = []
        for symbol, address in chain.token_map().items():
            if symbol not in TOKEN_DETAILS:
                continue
            token_name, decimals = TOKEN_DETAILS[symbol]
            price = self._prices.get(symbol)
            tokens.append(
                {
                    "tokenContractAddress": address,
                    "tokenSymbol": symbol,
                    "tokenName": token_name,
                    "decimals": decimals,
                    "tokenUnitPrice": f"{price:.2f}" if price is not None else None,
                }
            )
        return tokens

    async def fetch_swap(self, query: QuoteQuery) -> SwapExecution:
        """Simulate an immediately completed swap."""
        amount = parse_amount(query.amount)
        from_symbol, to_symbol = self._symbols(query)
        to_amount = self.convert(from_symbol, to_symbol, amount)
        tx_hash = f"0x{secrets.token_hex(32)}"

        logger.info(f"Sandbox swap {tx_hash}: {amount} {from_symbol} -> {to_amount} {to_symbol}")

        return SwapExecution(
            success=True,
            status="completed",
            provider=self.name,
            tx_hash=tx_hash,
            from_amount=query.amount,
            to_amount=format_amount(to_amount),
            gas_used=SIMULATED_GAS,
            gas_price=SIMULATED_GAS_PRICE,
            trade_fee=SIMULATED_TRADE_FEE,
            explorer_url=f"{self.explorer_url}/tx/{tx_hash}",
            is_simulated=True,
        )

    async def swap_status(self, tx_hash: str) -> SwapStatusInfo:
        return SwapStatusInfo(
            tx_hash=tx_hash,
            status="completed",
            confirmations=SIMULATED_CONFIRMATIONS,
        )
