"""Transaction listing command."""

import click
from dateutil import parser as date_parser

from stmtimport.domain.transaction import TransactionService


def _parse_bound(ctx, value: str | None, label: str):
    if not value:
        return None
    try:
        return date_parser.parse(value)
    except (ValueError, OverflowError) as e:
        click.echo(f"Error: Invalid {label} date: {e}", err=True)
        ctx.exit(1)


@click.command("list")
@click.option("--user-id", type=int, required=True, help="Owner of the transactions")
@click.option("--start-date", help="Start date (YYYY-MM-DD)")
@click.option("--end-date", help="End date (YYYY-MM-DD)")
@click.pass_context
def list_transactions(ctx, user_id: int, start_date: str | None, end_date: str | None):
    """List stored transactions of a user."""
    db = ctx.obj["db"]
    service = TransactionService(db)

    start = _parse_bound(ctx, start_date, "start")
    end = _parse_bound(ctx, end_date, "end")

    transactions = service.list_transactions(user_id=user_id, start=start, end=end)
    if not transactions:
        click.echo("No transactions found.")
        return

    click.echo(f"\nFound {len(transactions)} transaction(s):")
    click.echo(f"{'ID':<6} {'Date':<20} {'Type':<8} {'Amount':>12} {'Category':>9}  Description")
    click.echo("-" * 80)
    for txn in transactions:
        click.echo(
            f"{txn.id:<6} {txn.date.strftime('%Y-%m-%d %H:%M'):<20} {txn.type.value:<8} "
            f"{txn.amount:>12,.2f} {txn.category_id:>9}  {txn.description}"
        )


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(list_transactions)
