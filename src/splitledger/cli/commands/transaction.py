"""Transaction management commands."""

import click
from splitledger.cli.error_handling import handle_domain_error
from splitledger.domain.entities import Transaction, TransactionFilter
from splitledger.domain.errors import DomainError
from splitledger.domain.reconciliation import ReconciliationState
from splitledger.domain.transaction import TransactionService
from splitledger.utils.date_parser import parse_date


def echo_transaction(txn: Transaction) -> None:
    """Print every field of a transaction."""
    click.echo(f"Transaction {txn.id}")
    click.echo(f"  Date: {txn.date}")
    click.echo(f"  Description: {txn.description}")
    click.echo(f"  Amount: {txn.amount:,.2f} ({txn.type.value})")
    click.echo(f"  Subtype/Source: {txn.subtype.value} / {txn.source.value}")
    click.echo(f"  Category: {txn.category_id}")
    if txn.subcategory_id is not None:
        click.echo(f"  Subcategory: {txn.subcategory_id}")
    if txn.source_entity_id is not None:
        click.echo(f"  Source entity: {txn.source_entity_id}")
    click.echo("  Responsibilities:")
    for allocation in txn.responsibilities:
        line = (
            f"    Responsible {allocation.responsible_id}: {allocation.percentage}% "
            f"({allocation.amount_of(txn.amount):,.2f})"
        )
        if allocation.notes:
            line += f" - {allocation.notes}"
        click.echo(line)
    click.echo(f"  Reconciliation: {ReconciliationState.of(txn).value}")
    if txn.reconciled_amount is not None:
        click.echo(f"    Amount: {txn.reconciled_amount:,.2f}")
    if txn.reconciliation_date is not None:
        click.echo(f"    Date: {txn.reconciliation_date}")
    if txn.reconciliation_notes:
        click.echo(f"    Notes: {txn.reconciliation_notes}")
    if txn.bank_reference:
        click.echo(f"    Bank reference: {txn.bank_reference}")
    if txn.external_reference:
        click.echo(f"    External reference: {txn.external_reference}")


@click.group("transaction")
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("list")
@click.option("--owner", type=int, required=True, help="Owner (user) ID")
@click.option("--from", "start_date", help="Start date (YYYY-MM-DD or relative like 'yesterday')")
@click.option("--to", "end_date", help="End date")
@click.option("--category", type=int, help="Category ID")
@click.option("--search", help="Text contained in the description")
@click.option("--reconciled/--unreconciled", default=None, help="Filter on reconciliation state")
@click.option("--limit", type=int, help="Maximum number of rows")
@click.pass_context
def list_transactions(
    ctx,
    owner: int,
    start_date: str | None,
    end_date: str | None,
    category: int | None,
    search: str | None,
    reconciled: bool | None,
    limit: int | None,
):
    """List an owner's transactions, newest first."""
    service = TransactionService(ctx.obj["db"])

    try:
        start = parse_date(start_date) if start_date else None
        end = parse_date(end_date) if end_date else None
    except ValueError as e:
        click.echo(f"Error: Invalid date: {e}", err=True)
        ctx.exit(1)

    criteria = TransactionFilter(
        owner_id=owner,
        category_id=category,
        description=search,
        start_date=start,
        end_date=end,
        reconciled=reconciled,
    )
    transactions = service.list_transactions(criteria, limit=limit)
    if not transactions:
        click.echo("No transactions found.")
        return

    click.echo(f"{'ID':>6}  {'Date':<10}  {'Amount':>12}  {'Rec':<3}  Description")
    for txn in transactions:
        sign = "-" if txn.type.value == "EXPENSE" else ""
        mark = "yes" if ReconciliationState.of(txn) is ReconciliationState.RECONCILED else ""
        click.echo(
            f"{txn.id:>6}  {txn.date.isoformat():<10}  {sign + format(txn.amount, ',.2f'):>12}  "
            f"{mark:<3}  {txn.description}"
        )
    total = service.count_transactions(criteria)
    if total > len(transactions):
        click.echo(f"\nShowing {len(transactions)} of {total} transactions.")


@transaction_group.command("show")
@click.argument("transaction_id", type=int)
@click.option("--owner", type=int, required=True, help="Owner (user) ID")
@click.pass_context
def show_transaction(ctx, transaction_id: int, owner: int):
    """Show one transaction with its allocations and reconciliation."""
    service = TransactionService(ctx.obj["db"])
    txn = service.get_transaction(owner, transaction_id)
    if txn is None:
        click.echo(f"Error: Transaction {transaction_id} not found", err=True)
        ctx.exit(1)
    echo_transaction(txn)


@transaction_group.command("delete")
@click.argument("transaction_id", type=int)
@click.option("--owner", type=int, required=True, help="Owner (user) ID")
@click.pass_context
def delete_transaction(ctx, transaction_id: int, owner: int):
    """Delete a transaction."""
    service = TransactionService(ctx.obj["db"])
    try:
        service.delete(owner, transaction_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Deleted transaction {transaction_id}")


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group)
