"""Statement import command."""

import click
from decimal import Decimal, InvalidOperation

from splitledger.cli.error_handling import handle_domain_error
from splitledger.domain.csv_import import StatementImportService
from splitledger.domain.entities import (
    ResponsibilityAllocation,
    TransactionSource,
    TransactionSubtype,
    TransactionType,
)
from splitledger.domain.errors import DomainError
from splitledger.domain.import_config import (
    CSVConfiguration,
    DuplicateStrategy,
    ImportConfiguration,
)
from splitledger.utils.date_parser import DEFAULT_DATE_PATTERNS


def parse_allocation(value: str) -> ResponsibilityAllocation:
    """Parse "RESPONSIBLE_ID:PERCENTAGE[:NOTES]" into an allocation.

    Raises:
        click.BadParameter: If the value is malformed
    """
    parts = value.split(":", 2)
    if len(parts) < 2:
        raise click.BadParameter(f"'{value}' is not RESPONSIBLE_ID:PERCENTAGE[:NOTES]")
    try:
        responsible_id = int(parts[0])
        percentage = Decimal(parts[1])
    except (ValueError, InvalidOperation):
        raise click.BadParameter(f"'{value}' is not RESPONSIBLE_ID:PERCENTAGE[:NOTES]")
    notes = parts[2] if len(parts) == 3 and parts[2] else None
    return ResponsibilityAllocation(responsible_id, percentage, notes)


def _choice(enum_cls) -> click.Choice:
    return click.Choice([m.value for m in enum_cls], case_sensitive=False)


@click.command("import")
@click.argument("statement_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--owner", type=int, required=True, help="Owner (user) ID")
@click.option("--category", type=int, required=True, help="Default category ID")
@click.option("--subcategory", type=int, help="Default subcategory ID")
@click.option("--source-entity", type=int, help="Default source entity ID")
@click.option("--subtype", type=_choice(TransactionSubtype), default="VARIABLE", show_default=True)
@click.option("--source", type=_choice(TransactionSource), default="BANK_TRANSACTION", show_default=True)
@click.option("--default-type", type=_choice(TransactionType), help="Type for zero amounts")
@click.option(
    "--responsible",
    "responsibles",
    multiple=True,
    help="Allocation as RESPONSIBLE_ID:PERCENTAGE[:NOTES]; repeat to split",
)
@click.option("--delimiter", default=";", show_default=True, help="Column delimiter")
@click.option("--no-header", is_flag=True, help="File has no header row; columns are positions")
@click.option("--date-column", default="date", show_default=True)
@click.option("--description-column", default="description", show_default=True)
@click.option("--amount-column", default="amount", show_default=True)
@click.option("--locale", default="pt-BR", show_default=True, help="Locale for amounts")
@click.option(
    "--date-pattern",
    "date_patterns",
    multiple=True,
    help="strptime pattern, tried in the given order (repeatable)",
)
@click.option("--encoding", default="utf-8-sig", show_default=True)
@click.option(
    "--strategy",
    type=click.Choice(["skip", "overwrite", "create-anyway"], case_sensitive=False),
    default="skip",
    show_default=True,
    help="What to do with duplicate entries",
)
@click.option("--window-days", type=int, default=3, show_default=True, help="Duplicate date tolerance")
@click.option("--replace-allocations", is_flag=True, help="OVERWRITE also replaces categorization and allocations")
@click.option("--ignore", "ignored", multiple=True, help="Description to ignore (repeatable)")
@click.option("--dry-run", is_flag=True, help="Parse, validate and detect duplicates without writing")
@click.pass_context
def import_statement(
    ctx,
    statement_file: str,
    owner: int,
    category: int,
    subcategory: int | None,
    source_entity: int | None,
    subtype: str,
    source: str,
    default_type: str | None,
    responsibles: tuple[str, ...],
    delimiter: str,
    no_header: bool,
    date_column: str,
    description_column: str,
    amount_column: str,
    locale: str,
    date_patterns: tuple[str, ...],
    encoding: str,
    strategy: str,
    window_days: int,
    replace_allocations: bool,
    ignored: tuple[str, ...],
    dry_run: bool,
):
    """Import transactions from a statement file.

    Examples:
        splitledger import nubank.csv --owner 1 --category 3 --responsible 1:100
        splitledger import card.csv --owner 1 --category 3 --responsible 1:60 --responsible 2:40 --dry-run
    """
    db = ctx.obj["db"]
    service = StatementImportService(db)

    try:
        allocations = tuple(parse_allocation(r) for r in responsibles)
    except click.BadParameter as e:
        click.echo(f"Error: {e.message}", err=True)
        ctx.exit(1)

    config = ImportConfiguration(
        owner_id=owner,
        default_category_id=category,
        default_subcategory_id=subcategory,
        default_source_entity_id=source_entity,
        default_subtype=TransactionSubtype(subtype.upper()),
        default_source=TransactionSource(source.upper()),
        default_type=TransactionType(default_type.upper()) if default_type else None,
        responsibilities=allocations,
        csv=CSVConfiguration(
            contains_header=not no_header,
            delimiter=delimiter,
            date_column=date_column,
            description_column=description_column,
            amount_column=amount_column,
            locale=locale,
            date_patterns=tuple(date_patterns) or DEFAULT_DATE_PATTERNS,
            encoding=encoding,
        ),
        duplicate_strategy=DuplicateStrategy(strategy.upper().replace("-", "_")),
        duplicate_window_days=window_days,
        overwrite_replaces_allocations=replace_allocations,
        ignore_descriptions=frozenset(ignored),
        dry_run=dry_run,
    )

    try:
        report = service.import_file(statement_file, config)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nImport complete{' (dry run)' if report.dry_run else ''}:")
    click.echo(f"  Entries: {report.total_entries}")
    click.echo(f"  Created: {report.created_transactions} transactions")
    if report.updated_transactions:
        click.echo(f"  Overwritten: {report.updated_transactions} transactions")
    click.echo(f"  Duplicates: {report.duplicate_entries}")
    if report.issues:
        click.echo(f"  Issues: {len(report.issues)}")
        for issue in report.issues:
            click.echo(f"    Row {issue.row} [{issue.reason}]: {issue.message}", err=True)


def register_commands(cli):
    """Register import command with main CLI."""
    cli.add_command(import_statement)
