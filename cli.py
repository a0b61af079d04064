#!/usr/bin/env python3
"""Simple CLI for trying the price feed and swap session locally"""

import argparse
import asyncio
from typing import Optional

from tokenswap.core.swap import (
    AssetCatalog,
    SwapSession,
    calculate_swap_amount,
    exchange_rate,
    format_price,
    get_asset_by_symbol,
    quote_display,
)
from tokenswap.core.swap.quote import format_rate
from tokenswap.logging_config import setup_logging
from tokenswap.services.price_cache import PriceCache
from tokenswap.services.price_feed import PriceFeed


def print_assets(feed: PriceFeed):
    """Pretty print the tradable asset list"""
    banner = "💾 Cached prices" if feed.warning else "🔄 Live prices"
    if not feed.prices:
        banner = "📦 Fallback prices"

    print(f"\n{banner}")
    print("=" * 50)
    for i, asset in enumerate(feed.assets, 1):
        print(f"{i:2d}. {asset.symbol:<6} {asset.name:<18} ${format_price(asset.price):>14}  bal {asset.balance}")

    if feed.last_updated:
        print(f"\nLast updated: {feed.last_updated.isoformat()}")
    if feed.warning:
        print(f"⚠️  {feed.warning}")
    if feed.error:
        print(f"❌ {feed.error}")


def print_session(session: SwapSession):
    from_symbol = session.from_asset.symbol if session.from_asset else "-"
    to_symbol = session.to_asset.symbol if session.to_asset else "-"
    print(f"\n   {session.input_amount or '0'} {from_symbol} → {session.output_amount} {to_symbol}")
    if session.usd_value != "0":
        print(f"   Swap value: ${session.usd_value} USD")
    if session.exchange_rate:
        print(f"   Rate: 1 {from_symbol} = {session.exchange_rate} {to_symbol}")
    if session.validation_message:
        print(f"   ⚠️  {session.validation_message}")


async def load_feed(use_cache: bool = True) -> PriceFeed:
    feed = PriceFeed(PriceCache())
    await feed.load(use_cache)
    return feed


async def cli_prices():
    """CLI command to list prices"""
    print("🔍 Fetching token prices...")
    feed = await load_feed()
    print_assets(feed)


async def cli_quote(amount: str, from_symbol: str, to_symbol: str):
    """CLI command to quote a single conversion"""
    feed = await load_feed()
    from_asset = get_asset_by_symbol(feed.assets, from_symbol)
    to_asset = get_asset_by_symbol(feed.assets, to_symbol)
    if from_asset is None or to_asset is None:
        print(f"❌ Unknown token. Supported: {', '.join(AssetCatalog().symbols)}")
        return

    quote = calculate_swap_amount(amount, from_asset, to_asset)
    display = quote_display(quote)
    if quote.unpriced:
        print(f"❌ Unable to quote: no price for {to_asset.symbol if to_asset.price <= 0 else from_asset.symbol}")
        return

    print(f"\n{amount} {from_asset.symbol} ≈ {display['output_amount']} {to_asset.symbol}")
    print(f"Value: ${display['usd_value']} USD")
    rate = format_rate(exchange_rate(from_asset, to_asset))
    if rate:
        print(f"Rate: 1 {from_asset.symbol} = {rate} {to_asset.symbol}")
    if feed.warning:
        print(f"⚠️  {feed.warning}")


async def cli_swap():
    """Interactive swap session"""
    feed = await load_feed()
    session = SwapSession(feed.assets)
    feed.subscribe(session.sync_assets)

    print("🔁 Token Swap")
    print("Type 'help' for commands, 'exit' to quit")
    print("-" * 40)
    if feed.error:
        print(f"❌ {feed.error} (using fallback prices)")
    elif feed.warning:
        print(f"⚠️  {feed.warning}")
    print_session(session)

    while True:
        try:
            user_input = input("\n💱 > ").strip()
        except (KeyboardInterrupt, EOFError):
            print("\nGoodbye! 👋")
            break

        if not user_input:
            continue

        command, _, arg = user_input.partition(" ")
        command = command.lower()
        arg = arg.strip()

        if command in ['exit', 'quit', 'q']:
            print("Goodbye! 👋")
            break

        elif command in ['help', 'h']:
            print("\nCommands:")
            print("  from SYMBOL   - Choose the token to sell")
            print("  to SYMBOL     - Choose the token to buy")
            print("  amount VALUE  - Set the amount to sell")
            print("  max           - Sell the full balance")
            print("  flip          - Swap the two tokens")
            print("  tokens        - List tokens and prices")
            print("  refresh       - Refetch prices")
            print("  swap          - Submit the swap")
            print("  exit          - Quit")
            continue

        elif command in ['from', 'to']:
            asset = get_asset_by_symbol(session.assets, arg) if arg else None
            if asset is None:
                print(f"❌ Unknown token: {arg or '(none)'}")
                continue
            if command == 'from':
                session.select_from(asset)
            else:
                session.select_to(asset)

        elif command == 'amount':
            if not session.set_amount(arg):
                print("❌ Amount must be a plain decimal number")
                continue

        elif command == 'max':
            session.max_amount()

        elif command == 'flip':
            session.flip()

        elif command == 'tokens':
            print_assets(feed)
            continue

        elif command == 'refresh':
            await feed.refetch()
            if feed.warning:
                print(f"⚠️  {feed.warning}")

        elif command == 'swap':
            print("⏳ Swapping...")
            result = await session.submit()
            prefix = "✅" if result.ok else "❌"
            print(f"{prefix} {result.message}")

        else:
            print(f"❌ Unknown command: {command}")
            continue

        print_session(session)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Token Swap CLI")
    parser.add_argument("--log-level", default=None, help="Override the configured log level")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("prices", help="List tokens with current prices")

    quote_parser = subparsers.add_parser("quote", help="Quote a conversion between two tokens")
    quote_parser.add_argument("amount", help="Amount of the token to sell")
    quote_parser.add_argument("from_symbol", help="Token to sell")
    quote_parser.add_argument("to_symbol", help="Token to buy")

    subparsers.add_parser("swap", help="Interactive swap session")

    return parser


async def main(argv: Optional[list] = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return

    setup_logging(args.log_level or "WARNING", log_format="console")

    if args.command == "prices":
        await cli_prices()
    elif args.command == "quote":
        await cli_quote(args.amount, args.from_symbol, args.to_symbol)
    elif args.command == "swap":
        await cli_swap()
    else:
        print(f"❌ Unknown command: {args.command}")
        parser.print_help()


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
