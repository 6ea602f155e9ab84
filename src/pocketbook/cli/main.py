"""Main CLI entry point."""

import click

from pocketbook.config import load_settings
from pocketbook.database.factories import create_sqlite_database
from pocketbook.logging_setup import configure_logging

# Import and register all commands at module level
from pocketbook.cli.commands import (
    account,
    budget,
    category,
    report,
    transaction,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides POCKETBOOK_DB_PATH environment variable)",
    envvar="POCKETBOOK_DB_PATH",
)
@click.option(
    "--log-level",
    help="Log level (overrides POCKETBOOK_LOG_LEVEL environment variable)",
    envvar="POCKETBOOK_LOG_LEVEL",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str | None):
    """pocketbook - Personal finance tracker.

    Organize transactions under per-account category trees and keep an eye
    on spending with budgets and alerts.
    """
    ctx.ensure_object(dict)

    try:
        settings = load_settings()
    except ValueError as e:
        raise click.UsageError(str(e))
    configure_logging(log_level or settings.log_level)
    ctx.obj["settings"] = settings

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path or settings.database_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
account.register_commands(cli)
category.register_commands(cli)
transaction.register_commands(cli)
budget.register_commands(cli)
report.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
