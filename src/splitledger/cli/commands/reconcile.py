"""Reconcile command."""

import click
from splitledger.cli.commands.transaction import echo_transaction
from splitledger.cli.error_handling import handle_domain_error
from splitledger.domain.entities import ReconciliationRecord
from splitledger.domain.errors import DomainError
from splitledger.domain.transaction import TransactionService
from splitledger.utils.amount_parser import parse_amount
from splitledger.utils.date_parser import parse_datetime


@click.command("reconcile")
@click.argument("transaction_id", type=int)
@click.option("--owner", type=int, required=True, help="Owner (user) ID")
@click.option("--amount", help="Amount on the external record (e.g., 123.45)")
@click.option("--date", "reconciled_on", help="When it was reconciled (e.g., 2024-01-15 or 'now')")
@click.option("--reconciled/--unreconciled", default=None, help="Reconciliation outcome")
@click.option("--notes", help="Reconciliation notes")
@click.option("--bank-reference", help="Reference on the bank statement")
@click.option("--external-reference", help="Reference in the external system")
@click.pass_context
def reconcile_transaction(
    ctx,
    transaction_id: int,
    owner: int,
    amount: str | None,
    reconciled_on: str | None,
    reconciled: bool | None,
    notes: str | None,
    bank_reference: str | None,
    external_reference: str | None,
):
    """Record the outcome of reconciling a transaction.

    All reconciliation fields are replaced: an option left out clears the
    stored value.

    Examples:
        splitledger reconcile 12 --owner 1 --reconciled --amount 100.00 --date today
        splitledger reconcile 12 --owner 1 --unreconciled
    """
    try:
        reconciled_amount = parse_amount(amount, locale="en-US") if amount else None
        reconciliation_date = parse_datetime(reconciled_on) if reconciled_on else None
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    record = ReconciliationRecord(
        reconciled_amount=reconciled_amount,
        reconciliation_date=reconciliation_date,
        reconciled=reconciled,
        reconciliation_notes=notes,
        bank_reference=bank_reference,
        external_reference=external_reference,
    )
    service = TransactionService(ctx.obj["db"])
    try:
        txn = service.reconcile(owner, transaction_id, record)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    echo_transaction(txn)


def register_commands(cli):
    """Register reconcile command with main CLI."""
    cli.add_command(reconcile_transaction)
