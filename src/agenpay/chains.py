"""Supported chains and well-known token addresses for DEX routing.

Three EVM chains are configured:
- Base Sepolia (default testnet for payments)
- Ethereum mainnet
- Polygon mainnet
"""

from dataclasses import dataclass, field
from typing import Optional

NATIVE_TOKEN_ADDRESS = "0xEeeeeEeeeEeEeeEeEeEeeEEEeeeeEeeeeeeeEEeE"
UNKNOWN_SYMBOL = "UNKNOWN"
DEFAULT_CHAIN = "base-sepolia"


@dataclass(frozen=True)
class ChainConfig:
    """Configuration for an EVM chain the aggregator can route on."""

    name: str
    display_name: str
    chain_id: str
    wrapped_native: str
    usdc_address: str
    usdt_address: str
    native_symbol: str = "ETH"
    wrapped_symbol: str = "WETH"
    native_token: str = NATIVE_TOKEN_ADDRESS
    is_testnet: bool = False
    explorer_url: Optional[str] = None
    tokens: dict[str, str] = field(default_factory=dict)

    @property
    def chain_index(self) -> str:
        """Chain index used by the aggregator (identical to chain ID for EVM)."""
        return self.chain_id

    def token_map(self) -> dict[str, str]:
        """Symbol -> address for every known token on this chain."""
        tokens = {
            self.native_symbol: self.native_token,
            self.wrapped_symbol: self.wrapped_native,
            "USDC": self.usdc_address,
            "USDT": self.usdt_address,
        }
        tokens.update(self.tokens)
        return tokens


# ======================
# Chain Configurations
# ======================

CHAINS: dict[str, ChainConfig] = {
    "base-sepolia": ChainConfig(
        name="base-sepolia",
        display_name="Base Sepolia",
        chain_id="84532",
        wrapped_native="0x4200000000000000000000000000000000000006",
        usdc_address="0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913",  # mock USDC
        usdt_address="0xfde4C96c8593536E31F229EA8f37b2ADa2699bb2",  # mock USDT
        is_testnet=True,
        explorer_url="https://sepolia.basescan.org",
    ),
    "ethereum": ChainConfig(
        name="ethereum",
        display_name="Ethereum",
        chain_id="1",
        wrapped_native="0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2",
        usdc_address="0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
        usdt_address="0xdAC17F958D2ee523a2206206994597C13D831ec7",
        explorer_url="https://etherscan.io",
    ),
    "polygon": ChainConfig(
        name="polygon",
        display_name="Polygon",
        chain_id="137",
        native_symbol="MATIC",
        wrapped_symbol="WMATIC",
        wrapped_native="0x0d500B1d8E8eF31E21C99d1Db9A6444d3ADf1270",
        usdc_address="0x2791Bca1f2de4661ED88A30C99A7a9449Aa84174",
        usdt_address="0xc2132D05D31c914a87C6611C10748AEb04B58e8F",
        explorer_url="https://polygonscan.com",
    ),
}


def get_chain(chain: str) -> Optional[ChainConfig]:
    """Look up a chain by name (e.g. "base-sepolia") or chain ID (e.g. "84532")."""
    key = str(chain).strip().lower()
    if key in CHAINS:
        return CHAINS[key]
    for config in CHAINS.values():
        if config.chain_id == key:
            return config
    return None


def get_token_symbol(token_address: str, chain: str) -> str:
    """Resolve a token address to its symbol.

    Address comparison is case-insensitive. Unknown chains fall back to the
    Base Sepolia table; unknown addresses resolve to "UNKNOWN".
    """
    config = get_chain(chain) or CHAINS[DEFAULT_CHAIN]
    wanted = token_address.lower()
    for symbol, address in config.token_map().items():
        if address.lower() == wanted:
            return symbol
    return UNKNOWN_SYMBOL


def get_token_address(symbol: str, chain: str) -> Optional[str]:
    """Get token contract address by symbol on a chain."""
    config = get_chain(chain)
    if config is None:
        return None
    return config.token_map().get(symbol.upper())


def same_token(first: str, second: str) -> bool:
    """Compare two token addresses ignoring case."""
    return first.strip().lower() == second.strip().lower()


def resolve_chain_id(chain: str) -> str:
    """Map a chain name to its numeric ID; unknown values pass through unchanged."""
    config = get_chain(chain)
    return config.chain_id if config else str(chain).strip()
