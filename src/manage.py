"""Storefront database management CLI.

Creates or drops the schema for the SQL providers configured in
domain.toml. PROTEAN_ENV picks the overlay (``sqlite`` or ``production``);
on the default in-memory provider both commands do nothing.

Usage:
    python src/manage.py setup-db
    python src/manage.py drop-db
"""

import argparse
import os


def main(argv=None):
    parser = argparse.ArgumentParser(description="Storefront database management")
    parser.add_argument("command", choices=["setup-db", "drop-db"])
    args = parser.parse_args(argv)

    from storefront.domain import storefront
    from storefront.utils.db import drop_db, setup_db

    storefront.init()
    action = setup_db if args.command == "setup-db" else drop_db
    print(f"{args.command}: storefront ({os.getenv('PROTEAN_ENV') or 'default'})")
    action(storefront)
    print("Done.")


if __name__ == "__main__":
    main()
