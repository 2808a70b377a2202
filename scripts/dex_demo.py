#!/usr/bin/env python3
"""Walk through the multi-token payment flow: chains, tokens, quote, route.

Usage:
    python scripts/dex_demo.py
    python scripts/dex_demo.py --chain 84532 --amount 1 --from-symbol ETH --to-symbol USDC
    python scripts/dex_demo.py --live   # needs OKX_* credentials in the environment
"""

import argparse
import asyncio
import sys
from dataclasses import replace

from agenpay.chains import get_token_address
from agenpay.config import get_settings
from agenpay.routing.base import SwapUnavailable
from agenpay.routing.factory import create_quote_provider
from agenpay.services.dex_service import DexService

GREEN = "\033[92m"
RED = "\033[91m"
YELLOW = "\033[93m"
RESET = "\033[0m"
CHECK = "✓"
CROSS = "✗"

DEMO_WALLET = "0x742d35Cc6464f4F4D4Cc7b5A87e1f0E6D5F3D5B8"


def print_status(name: str, success: bool, message: str = ""):
    """Print status with color."""
    mark = f"{GREEN}{CHECK}{RESET}" if success else f"{RED}{CROSS}{RESET}"
    print(f"  {mark} {name}" + (f" - {message}" if message else ""))


async def run_demo(args: argparse.Namespace) -> int:
    config = get_settings().dex_config()
    if args.live:
        config = replace(config, sandbox=False)
    if args.live and not config.has_credentials:
        print(f"{YELLOW}OKX credentials incomplete - using sandbox quotes{RESET}")

    service = DexService(create_quote_provider(config), default_slippage=args.slippage)
    mode = "sandbox" if service.sandbox_mode else "live"
    print(f"\nAgenPay DEX demo ({mode} mode)\n")

    try:
        print("Supported chains:")
        chains = await service.get_supported_chains()
        print_status("Chains", chains.success, chains.error or f"{len(chains.data)} available")

        print(f"\nTokens on chain {args.chain}:")
        tokens = await service.get_tokens_for_chain(args.chain)
        print_status("Tokens", tokens.success, tokens.error or f"{len(tokens.data)} available")
        for token in tokens.data[:4]:
            print(f"     - {token.get('tokenSymbol')}: {token.get('tokenName')} "
                  f"({token.get('tokenUnitPrice') or 'N/A'} USD)")

        from_token = get_token_address(args.from_symbol, args.chain)
        to_token = get_token_address(args.to_symbol, args.chain)
        if not from_token or not to_token:
            print_status("Token lookup", False, f"{args.from_symbol}/{args.to_symbol} unknown on {args.chain}")
            return 1

        print(f"\nQuote {args.amount} {args.from_symbol} -> {args.to_symbol}:")
        quote = await service.get_swap_quote(args.chain, from_token, to_token, args.amount,
                                             wallet_address=DEMO_WALLET)
        if isinstance(quote, SwapUnavailable):
            print_status("Quote", False, quote.reason)
        else:
            print_status("Quote", True, f"{quote.output_amount} {args.to_symbol}")
            print(f"     Trade fee: {quote.trade_fee or 'N/A'}  Price impact: {quote.price_impact_pct or 'N/A'}%")

        print("\nPayment route:")
        route = await service.calculate_payment_route(from_token, to_token, args.amount, args.chain,
                                                      wallet_address=DEMO_WALLET)
        details = route.to_dict()
        print_status("Route", route.can_proceed, details.get("reason") or details["route"])
        print(f"     Swap required: {route.swap_required}")
        if route.can_proceed:
            print(f"     Input: {details['input_amount']}  Output: {details['output_amount']}")
        return 0
    finally:
        await service.aclose()


def main() -> int:
    parser = argparse.ArgumentParser(description="AgenPay DEX routing demo")
    parser.add_argument("--chain", default="84532", help="Chain ID or name (default: 84532)")
    parser.add_argument("--amount", default="1", help="Amount to convert (default: 1)")
    parser.add_argument("--from-symbol", default="ETH", help="Token the payer pays with")
    parser.add_argument("--to-symbol", default="USDC", help="Token the payee receives")
    parser.add_argument("--slippage", default="0.5", help="Slippage tolerance in percent")
    parser.add_argument("--live", action="store_true", help="Query the live aggregator")
    args = parser.parse_args()

    return asyncio.run(run_demo(args))


if __name__ == "__main__":
    sys.exit(main())
