"""Main CLI entry point."""

import logging

import click
from stmtimport.database.factories import create_sqlite_database

# Import and register all commands at module level
from stmtimport.cli.commands import import_cmd, transaction


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides STMTIMPORT_DB_PATH environment variable)",
    envvar="STMTIMPORT_DB_PATH",
)
@click.option("-v", "--verbose", is_flag=True, help="Log parsing and import details")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: bool):
    """stmtimport - Bank and card statement importer.

    Import CSV and OFX statements, classify every record with configurable
    mappings and skip entries that were already imported.
    """
    ctx.ensure_object(dict)

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
import_cmd.register_commands(cli)
transaction.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
