"""OKX DEX aggregator integration.

Every request is signed with the account's API secret:

    sign = base64(HMAC-SHA256(secret, timestamp + METHOD + requestPath + query + body))

API docs: https://web3.okx.com/build/dev-docs/dex-api/dex-api-reference
"""

import base64
import hashlib
import hmac
import logging
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Optional
from urllib.parse import urlencode, urlparse

import httpx

from agenpay.config import DexConfig
from agenpay.routing.base import (
    QuoteProvider,
    QuoteQuery,
    RouteHop,
    SwapExecution,
    SwapQuote,
    SwapStatusInfo,
)
from agenpay.routing.errors import (
    MalformedResponseError,
    ProviderAuthError,
    RouteUnavailableError,
)

logger = logging.getLogger(__name__)

SUPPORTED_CHAINS_PATH = "/aggregator/supported/chain"
ALL_TOKENS_PATH = "/aggregator/all-tokens"
QUOTE_PATH = "/aggregator/quote"
SWAP_PATH = "/aggregator/swap"

SUCCESS_CODE = "0"

# Envelope codes for missing/invalid key, timestamp, passphrase or signature
AUTH_ERROR_CODES = {"50103", "50104", "50105", "50111", "50112", "50113", "50114"}


def iso_timestamp(now: Optional[datetime] = None) -> str:
    """UTC timestamp in ISO 8601 with milliseconds, e.g. 2024-01-01T00:00:00.000Z."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def sign_request(
    secret_key: str,
    timestamp: str,
    method: str,
    request_path: str,
    query_string: str = "",
    body: str = "",
) -> str:
    """Compute the base64-encoded HMAC-SHA256 request signature."""
    message = f"{timestamp}{method.upper()}{request_path}{query_string}{body}"
    mac = hmac.new(secret_key.encode(), message.encode(), hashlib.sha256)
    return base64.b64encode(mac.digest()).decode()


class LiveQuoteProvider(QuoteProvider):
    """OKX DEX aggregator provider.

    Quotes and swap data are fetched from the live API. Swap transactions
    come back unsigned; signing and broadcasting belong to the custody
    platform.
    """

    def __init__(self, config: DexConfig, client: Optional[httpx.AsyncClient] = None):
        """Initialize the provider.

        Args:
            config: Credentials, base URL and timeouts
            client: Shared HTTP client; one is created on first use if omitted
        """
        self.config = config
        self.base_url = config.base_url.rstrip("/")
        self._base_path = urlparse(self.base_url).path.rstrip("/")
        self._client = client
        self._owns_client = client is None

    @property
    def name(self) -> str:
        return "okx_dex"

    @property
    def is_sandbox(self) -> bool:
        return False

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient()
        return self._client

    def _get_headers(
        self,
        timestamp: str,
        method: str,
        path: str,
        query_string: str = "",
        body: str = "",
    ) -> dict:
        """Get API headers with request signature."""
        signature = sign_request(
            self.config.secret_key,
            timestamp,
            method,
            f"{self._base_path}{path}",
            query_string,
            body,
        )
        return {
            "Content-Type": "application/json",
            "OK-ACCESS-KEY": self.config.api_key,
            "OK-ACCESS-SIGN": signature,
            "OK-ACCESS-TIMESTAMP": timestamp,
            "OK-ACCESS-PASSPHRASE": self.config.passphrase,
            "OK-ACCESS-PROJECT": self.config.project_id,
        }

    async def _get(self, path: str, params: Optional[dict[str, str]], timeout: float) -> Any:
        """Issue a signed GET and return the envelope's `data` member."""
        if not self.config.has_credentials:
            raise ProviderAuthError("OKX API credentials are not configured")

        query_string = f"?{urlencode(params)}" if params else ""
        timestamp = iso_timestamp()
        headers = self._get_headers(timestamp, "GET", path, query_string)
        url = f"{self.base_url}{path}{query_string}"

        try:
            response = await self._get_client().get(url, headers=headers, timeout=timeout)
        except httpx.TimeoutException as e:
            raise RouteUnavailableError(f"OKX request to {path} timed out after {timeout}s") from e
        except httpx.HTTPError as e:
            raise RouteUnavailableError(f"OKX request to {path} failed: {type(e).__name__}: {e}") from e

        return self._parse_envelope(path, response)

    def _parse_envelope(self, path: str, response: httpx.Response) -> Any:
        if response.status_code in (401, 403):
            logger.warning(f"OKX auth rejected for {path}: {response.status_code}")
            raise ProviderAuthError(f"OKX rejected credentials ({response.status_code})")

        try:
            envelope = response.json()
        except ValueError:
            if response.status_code != 200:
                raise RouteUnavailableError(f"OKX API error: HTTP {response.status_code}") from None
            raise MalformedResponseError(f"OKX returned a non-JSON body for {path}") from None

        if not isinstance(envelope, dict):
            raise MalformedResponseError(f"OKX returned an unexpected envelope for {path}")

        code = str(envelope.get("code", ""))
        msg = envelope.get("msg") or "Unknown error"

        if code in AUTH_ERROR_CODES:
            raise ProviderAuthError(f"OKX auth error {code}: {msg}")
        if response.status_code != 200:
            raise RouteUnavailableError(f"OKX API error: HTTP {response.status_code} - {msg}")
        if code != SUCCESS_CODE:
            raise RouteUnavailableError(f"OKX API error {code or '(none)'}: {msg}")

        return envelope.get("data")

    @staticmethod
    def _first_item(path: str, data: Any) -> dict:
        if not isinstance(data, list) or not data or not isinstance(data[0], dict):
            raise MalformedResponseError(f"OKX returned no data for {path}")
        return data[0]

    @staticmethod
    def _parse_route(item: dict) -> tuple[RouteHop, ...]:
        """Extract DEX legs from either the flat `route` list or `dexRouterList`.

        Raises:
            MalformedResponseError: if either container is present but not a list
        """
        hops = []
        for leg in _dict_items(item, "route"):
            if leg.get("dexName"):
                hops.append(RouteHop(str(leg["dexName"]), _to_decimal(leg.get("percentage"), Decimal("100"))))
        if hops:
            return tuple(hops)

        for router in _dict_items(item, "dexRouterList"):
            for sub in _dict_items(router, "subRouterList"):
                for protocol in _dict_items(sub, "dexProtocol"):
                    if protocol.get("dexName"):
                        hops.append(
                            RouteHop(str(protocol["dexName"]), _to_decimal(protocol.get("percent"), Decimal("100")))
                        )
        return tuple(hops)

    async def fetch_quote(self, query: QuoteQuery) -> SwapQuote:
        """Get swap quote from OKX."""
        logger.info(
            f"OKX quote: {query.amount} {query.from_token} -> {query.to_token} on chain {query.chain_id}"
        )
        data = await self._get(QUOTE_PATH, query.to_params(), self.config.quote_timeout)
        item = self._first_item(QUOTE_PATH, data)

        to_amount = item.get("toTokenAmount")
        parsed = _to_decimal(to_amount)
        if parsed is None or parsed < 0:
            raise MalformedResponseError(f"OKX quote has invalid toTokenAmount: {to_amount!r}")

        price_impact = item.get("priceImpact", item.get("priceImpactPercentage"))

        return SwapQuote(
            provider=self.name,
            chain_id=query.chain_id,
            from_token=query.from_token,
            to_token=query.to_token,
            from_amount=str(item.get("fromTokenAmount") or query.amount),
            to_amount=str(to_amount),
            estimated_gas=str(item.get("estimatedGas") or item.get("estimateGasFee") or "0"),
            trade_fee=str(item["tradeFee"]) if item.get("tradeFee") is not None else None,
            price_impact_pct=str(price_impact) if price_impact is not None else None,
            slippage=str(item.get("slippage") or query.slippage),
            route_hops=self._parse_route(item),
            is_simulated=False,
        )

    async def fetch_supported_chains(self) -> list[dict]:
        data = await self._get(SUPPORTED_CHAINS_PATH, None, self.config.catalog_timeout)
        return data if isinstance(data, list) else []

    async def fetch_tokens(self, chain_id: str) -> list[dict]:
        data = await self._get(ALL_TOKENS_PATH, {"chainId": chain_id}, self.config.catalog_timeout)
        return data if isinstance(data, list) else []

    async def fetch_swap(self, query: QuoteQuery) -> SwapExecution:
        """Fetch unsigned swap transaction data from OKX.

        The returned execution is `prepared`: the transaction still has to be
        signed and broadcast by the wallet platform.
        """
        data = await self._get(SWAP_PATH, query.to_params(), self.config.swap_timeout)
        item = self._first_item(SWAP_PATH, data)

        router_result = item.get("routerResult")
        if not isinstance(router_result, dict):
            router_result = {}
        tx = item.get("tx")
        if not isinstance(tx, dict):
            raise MalformedResponseError("OKX swap response has no transaction data")

        return SwapExecution(
            success=True,
            status="prepared",
            provider=self.name,
            from_amount=str(router_result.get("fromTokenAmount") or query.amount),
            to_amount=_opt_str(router_result.get("toTokenAmount")),
            gas_used=_opt_str(tx.get("gas")),
            gas_price=_opt_str(tx.get("gasPrice")),
            trade_fee=_opt_str(router_result.get("tradeFee")),
            tx_data=tx,
            is_simulated=False,
        )

    async def swap_status(self, tx_hash: str) -> SwapStatusInfo:
        # Receipt lookups go through the custody platform, not the aggregator
        return SwapStatusInfo(tx_hash=tx_hash, status="pending", confirmations=0)

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None


def _to_decimal(value: Any, default: Optional[Decimal] = None) -> Optional[Decimal]:
    if value is None or value == "":
        return default
    try:
        parsed = Decimal(str(value))
    except InvalidOperation:
        return default
    return parsed if parsed.is_finite() else default


def _dict_items(container: dict, key: str) -> list[dict]:
    """Dict entries of a list member; non-dict entries are skipped."""
    value = container.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise MalformedResponseError(f"OKX quote has an invalid {key}: expected a list")
    return [entry for entry in value if isinstance(entry, dict)]


def _opt_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)
