"""Stockroom database management CLI.

Creates and drops the relational schema shared by every context.

Usage:
    python src/manage.py setup-db   # Create all tables
    python src/manage.py drop-db    # Drop all tables
"""

import argparse
import sys


def setup_database(database_url=None):
    """Create every table in the configured (or given) database."""
    from shared.database import Database, get_database
    from shared.settings import get_settings
    from shared.utils.db import setup_db

    database = _database_for(database_url, Database, get_database, get_settings)
    print(f"Creating schema in {database.engine.url.render_as_string(hide_password=True)}...")
    setup_db(database)
    print("Done.")


def drop_database(database_url=None):
    """Drop every table in the configured (or given) database."""
    from shared.database import Database, get_database
    from shared.settings import get_settings
    from shared.utils.db import drop_db

    database = _database_for(database_url, Database, get_database, get_settings)
    print(f"Dropping schema in {database.engine.url.render_as_string(hide_password=True)}...")
    drop_db(database)
    print("Done.")


def _database_for(database_url, database_cls, get_database, get_settings):
    if not database_url:
        return get_database()
    from dataclasses import replace

    return database_cls.from_settings(replace(get_settings(), database_url=database_url))


def main():
    parser = argparse.ArgumentParser(description="Stockroom database management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (("setup-db", "Create all database tables"), ("drop-db", "Drop all database tables")):
        command_parser = subparsers.add_parser(name, help=help_text)
        command_parser.add_argument(
            "--database-url",
            help="Database to operate on (default: DATABASE_URL)",
        )

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database(args.database_url)
    elif args.command == "drop-db":
        drop_database(args.database_url)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
