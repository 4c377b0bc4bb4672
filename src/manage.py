"""Marketplace database management CLI.

Creates and drops the relational schema for the marketplace domain.

Usage:
    python src/manage.py setup-db   # Create all tables
    python src/manage.py drop-db    # Drop all tables
"""

import argparse
import sys


def _initialized_domain():
    from marketplace.domain import marketplace

    print("Initializing marketplace domain...")
    marketplace.init()
    return marketplace


def setup_databases():
    """Create database schemas for every relational provider."""
    from marketplace.utils.db import setup_db

    domain = _initialized_domain()
    print("Creating marketplace database schema...")
    providers = setup_db(domain)
    if providers:
        print(f"  schema ready on: {', '.join(providers)}")
    else:
        print("  no relational providers configured, nothing to do.")

    print("Done.")


def drop_databases():
    """Drop database schemas for every relational provider."""
    from marketplace.utils.db import drop_db

    domain = _initialized_domain()
    print("Dropping marketplace database schema...")
    providers = drop_db(domain)
    if providers:
        print(f"  schema dropped on: {', '.join(providers)}")
    else:
        print("  no relational providers configured, nothing to do.")

    print("Done.")


def main():
    parser = argparse.ArgumentParser(description="Marketplace database management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_databases()
    elif args.command == "drop-db":
        drop_databases()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
