"""Turns statement entries into transaction commands."""

from splitledger.domain.entities import TransactionCommand, TransactionType
from splitledger.domain.errors import ValidationError
from splitledger.domain.import_config import ImportConfiguration, NormalizedEntry


def resolve_type(entry: NormalizedEntry, config: ImportConfiguration) -> TransactionType:
    """Negative amounts are expenses, positive ones income.

    A zero amount falls back to the configured default type.

    Raises:
        ValidationError: If the amount is zero and no default type is set
    """
    if entry.amount < 0:
        return TransactionType.EXPENSE
    if entry.amount > 0:
        return TransactionType.INCOME
    if config.default_type is not None:
        return config.default_type
    raise ValidationError("Unable to determine transaction type")


def build_transaction_command(
    entry: NormalizedEntry, config: ImportConfiguration
) -> TransactionCommand:
    """Combine an entry with the import defaults.

    Date, description and amount come from the entry; categorization and
    responsibility allocations come from the configuration because statement
    rows carry neither. An empty allocation template is passed through as is
    and rejected when the command is validated.
    """
    return TransactionCommand(
        owner_id=config.owner_id,
        type=resolve_type(entry, config),
        subtype=config.default_subtype,
        source=config.default_source,
        description=entry.description,
        amount=abs(entry.amount),
        date=entry.date,
        category_id=config.default_category_id,
        subcategory_id=config.default_subcategory_id,
        source_entity_id=config.default_source_entity_id,
        responsibilities=tuple(config.responsibilities),
    )
