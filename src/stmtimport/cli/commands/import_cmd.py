"""Statement import command."""

import json

import click
from stmtimport.cli.error_handling import handle_import_error
from stmtimport.domain.config import load_configuration
from stmtimport.domain.entities import DuplicatePolicy, ImportFormat
from stmtimport.domain.errors import DomainError
from stmtimport.domain.statement_import import StatementImportService


@click.command("import")
@click.argument("statement_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--config",
    "config_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="JSON import configuration (mappings, defaults, CSV options)",
)
@click.option(
    "--format",
    "fmt",
    type=click.Choice([f.value for f in ImportFormat], case_sensitive=False),
    help="Statement format (overrides the configuration)",
)
@click.option("--user-id", type=int, help="Owner of the imported transactions (overrides the configuration)")
@click.option("--content-type", help="Declared MIME type, used when the format is detected")
@click.option("--dry-run", is_flag=True, help="Preview the import without creating transactions")
@click.option(
    "--allow-duplicates",
    is_flag=True,
    help="Create entries even when a matching transaction already exists",
)
@click.option("--json", "as_json", is_flag=True, help="Print the full result as JSON")
@click.pass_context
def import_statement(
    ctx,
    statement_file: str,
    config_path: str,
    fmt: str | None,
    user_id: int | None,
    content_type: str | None,
    dry_run: bool,
    allow_duplicates: bool,
    as_json: bool,
):
    """Import transactions from a CSV or OFX statement."""
    db = ctx.obj["db"]
    service = StatementImportService(db)

    try:
        config = load_configuration(config_path).with_overrides(
            format=ImportFormat(fmt.lower()) if fmt else None,
            user_id=user_id,
            dry_run=True if dry_run else None,
            duplicate_policy=DuplicatePolicy.ALLOW if allow_duplicates else None,
        )
        result = service.import_file(statement_file, config, content_type=content_type)
    except (DomainError, FileNotFoundError) as e:
        handle_import_error(ctx, e)
        return

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    click.echo("\nDry run complete:" if result.dry_run else "\nImport complete:")
    click.echo(f"  Entries: {result.total_entries}")
    click.echo(f"  Processed: {result.processed_entries}")
    if result.dry_run:
        click.echo(f"  Would create: {len(result.previewed_transactions)} transactions")
    else:
        click.echo(f"  Imported: {result.created_count} transactions")
    click.echo(f"  Skipped: {result.duplicate_count} duplicates")
    if result.ignored_entries:
        click.echo(f"  Ignored: {result.ignored_entries}")
    if result.issues:
        click.echo(f"  Issues: {len(result.issues)}")
        for issue in result.issues:
            reference = f" [{issue.external_reference}]" if issue.external_reference else ""
            click.echo(f"    Line {issue.line_number}{reference} ({issue.kind.value}): {issue.message}", err=True)


def register_commands(cli):
    """Register import command with main CLI."""
    cli.add_command(import_statement)
