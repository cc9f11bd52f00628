#!/usr/bin/env python3
"""Command-line interface for itaulink-uy."""

import argparse
import getpass
import sys
from datetime import date
from pathlib import Path
from typing import Any

from itaulink_uy.client import ItauClient
from itaulink_uy.config import (
    config_exists,
    get_base_url,
    get_credentials,
    get_logging_config,
    get_timeout,
    load_config,
)
from itaulink_uy.credentials import encode_password
from itaulink_uy.errors import ItauError
from itaulink_uy.logging_config import configure_logging
from itaulink_uy.models import Account, Transaction
from itaulink_uy.utils import portal_today


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        description="Download accounts and movements from the Itaú Uruguay web portal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  itaulink-uy --setup
  itaulink-uy --accounts
  itaulink-uy --account 3f2a... -o movements.csv
  itaulink-uy --account 3f2a... --month 1 --year 24 --format tsv --full
  itaulink-uy --encode-password
        """,
    )

    parser.add_argument(
        "--accounts",
        action="store_true",
        help="Log in and list accounts",
    )
    parser.add_argument(
        "--account",
        metavar="HASH",
        help="Account hash to download movements for (see --accounts)",
    )
    parser.add_argument(
        "--month",
        type=int,
        help="Month to download, 1-12 (default: current month)",
    )
    parser.add_argument(
        "--year",
        type=int,
        help="Year counted from 2000, e.g. 24 (default: current year)",
    )
    parser.add_argument(
        "-o",
        "--output",
        default="movements.csv",
        help="Output CSV file (default: movements.csv)",
    )
    parser.add_argument(
        "--format",
        choices=["csv", "tsv"],
        default="csv",
        help="Output format (default: csv)",
    )
    parser.add_argument(
        "--full",
        action="store_true",
        help="Include all fields in output (kind, extra description)",
    )

    # Credentials
    parser.add_argument(
        "--id",
        help="Document number (or ITAU_ID, or configure in config.json)",
    )
    parser.add_argument(
        "--password",
        help="Base64 encoded password (or ITAU_PASSWORD, or configure in config.json)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config.json file",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose output",
    )

    # Setup
    parser.add_argument(
        "--setup",
        action="store_true",
        help="Run interactive setup wizard to store credentials",
    )
    parser.add_argument(
        "--show-config",
        action="store_true",
        help="Show current configuration",
    )
    parser.add_argument(
        "--encode-password",
        action="store_true",
        help="Prompt for a password and print its encoded form",
    )

    return parser


def print_accounts(accounts: list[Account]) -> None:
    """Print a table of accounts."""
    if not accounts:
        print("No accounts found.")
        return

    for account in accounts:
        print(
            f"{account.account_hash}  {account.type:<4} {account.id:<12} "
            f"{account.currency:<4} {account.balance:>14}  {account.owner_name}"
        )


def resolve_month(args: argparse.Namespace, today: date) -> tuple[int, int]:
    """Month and two-digit year to download, defaulting to the current month."""
    month = args.month if args.month is not None else today.month
    year = args.year if args.year is not None else today.year - 2000
    return month, year


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.encode_password:
        password = getpass.getpass("Password: ")
        print(encode_password(password))
        return 0

    # Handle setup first (before loading config)
    if args.setup:
        from itaulink_uy.setup import run_setup

        run_setup(config_path=args.config)
        return 0

    # Load configuration
    config: dict[str, Any] | None = load_config(args.config)

    logging_config = get_logging_config(config)
    configure_logging(
        "DEBUG" if args.verbose else logging_config["level"],
        logging_config["file"],
    )

    if args.show_config:
        from itaulink_uy.setup import show_current_config

        if config:
            show_current_config(config)
        else:
            print("No configuration found.")
            print("Run 'itaulink-uy --setup' to create one.")
        return 0

    if not args.accounts and not args.account:
        if not config_exists() and not args.id:
            print("Welcome to itaulink-uy!")
            print("\nNo configuration found. To set up, run:")
            print("  itaulink-uy --setup")
            return 0
        parser.print_help()
        return 1

    credentials = get_credentials(config, args.id, args.password)
    if credentials is None:
        print("Error: credentials required. Use --id/--password, ITAU_ID/ITAU_PASSWORD "
              "or run 'itaulink-uy --setup'", file=sys.stderr)
        return 1

    with ItauClient(
        credentials,
        base_url=get_base_url(config),
        timeout=get_timeout(config),
    ) as client:
        try:
            accounts = client.login()

            if args.accounts:
                print_accounts(accounts)
                return 0

            month, year = resolve_month(args, portal_today())
            transactions: list[Transaction] = client.get_month(args.account, month, year)
        except ItauError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    account = next((a for a in accounts if a.account_hash == args.account), None)
    if account is None:
        print(f"Warning: {args.account} is not in the account list", file=sys.stderr)

    print(f"Found {len(transactions)} movements", file=sys.stderr)

    output_path = Path(args.output)
    delimiter = "\t" if args.format == "tsv" else ","

    if args.full:
        client.normalizer.write_full_csv(transactions, output_path, delimiter)
    else:
        client.normalizer.write_csv(transactions, output_path, delimiter)

    print(f"Wrote {len(transactions)} movements to {output_path}", file=sys.stderr)

    return 0


if __name__ == "__main__":
    sys.exit(main())
