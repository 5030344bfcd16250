"""Drops statement entries whose description is on the ignore list."""

from typing import Iterable

from splitledger.domain.import_config import ImportIssue, IssueReason, NormalizedEntry


def normalize_description(value: str | None) -> str:
    """Key used for case-insensitive description comparison."""
    if value is None:
        return ""
    return value.strip().casefold()


def filter_ignored(
    entries: Iterable[NormalizedEntry], ignore_descriptions: Iterable[str]
) -> tuple[list[NormalizedEntry], list[ImportIssue]]:
    """Partition entries into kept ones and IGNORED issues.

    Args:
        entries: Parsed entries, in file order
        ignore_descriptions: Descriptions to drop (case-insensitive, trimmed)

    Returns:
        Tuple of (kept entries, issues for the ignored ones)
    """
    ignored = {normalize_description(d) for d in ignore_descriptions}
    ignored.discard("")

    kept: list[NormalizedEntry] = []
    issues: list[ImportIssue] = []
    for entry in entries:
        if ignored and normalize_description(entry.description) in ignored:
            issues.append(
                ImportIssue(
                    row=entry.row_number,
                    reason=IssueReason.IGNORED.value,
                    message=f"Ignored due to configured description filter: '{entry.description}'",
                )
            )
        else:
            kept.append(entry)
    return kept, issues
