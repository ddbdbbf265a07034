"""Shared Rich display functions for cache entries and pipeline results.

Provides reusable table builders and summary printers used by the
delete, restore, purge and inspection commands.
"""

import os
from datetime import datetime

from rich.table import Table

from vanish.core.errors import ItemFailure
from vanish.engine.pipeline import Operation, PipelineState, PipelineSummary
from vanish.engine.stats import CacheStats
from vanish.models.entry import CacheEntry, ItemType, PendingItem, RestoreCandidate
from vanish.utils.formatting import (
    console,
    create_table,
    format_size,
    print_error,
    print_info,
    print_success,
    print_warning,
)

DISPLAY_TIME_FORMAT = "%Y-%m-%d %H:%M"

_TYPE_STYLES = {
    ItemType.FILE: "item.file",
    ItemType.DIRECTORY: "item.dir",
    ItemType.SYMLINK: "item.symlink",
}

_DONE_VERBS = {
    Operation.DELETE: "Moved {count} item(s) to cache",
    Operation.RESTORE: "Restored {count} item(s)",
    Operation.PURGE: "Purged {count} item(s)",
}


def _type_label(item_type: ItemType) -> str:
    style = _TYPE_STYLES[item_type]
    return f"[{style}]{item_type.value}[/{style}]"


def _pending_type(item: PendingItem) -> ItemType:
    if item.is_symlink:
        return ItemType.SYMLINK
    if item.is_directory:
        return ItemType.DIRECTORY
    return ItemType.FILE


def create_entries_table(
    entries: list[CacheEntry],
    retention_days: int,
    now: datetime | None = None,
    title: str | None = "Cached Items",
) -> Table:
    """Create a table of cache entries.

    Entries past their expiry deadline are highlighted.

    Args:
        entries: Entries to display, in display order.
        retention_days: Window used to compute expiry deadlines.
        now: Reference time for highlighting expired entries.
        title: Table title.

    Returns:
        Rich Table configured for entry display.
    """
    now = now or datetime.now().astimezone()
    table = create_table(title)
    table.add_column("ID", style="muted", no_wrap=True)
    table.add_column("Type", width=9)
    table.add_column("Original Path", overflow="fold")
    table.add_column("Deleted", no_wrap=True)
    table.add_column("Expires", no_wrap=True)
    table.add_column("Size", style="info", justify="right")

    for entry in entries:
        expires = entry.expires_at(retention_days)
        expires_text = expires.strftime(DISPLAY_TIME_FORMAT)
        if expires <= now:
            expires_text = f"[expired]{expires_text}[/expired]"
        table.add_row(
            entry.id,
            _type_label(entry.item_type),
            entry.original_path,
            entry.delete_time.strftime(DISPLAY_TIME_FORMAT),
            expires_text,
            format_size(entry.size_bytes),
        )
    return table


def entries_to_json(entries: list[CacheEntry], retention_days: int) -> list[dict[str, object]]:
    """Convert entries to JSON-ready dicts, adding the expiry deadline."""
    data: list[dict[str, object]] = []
    for entry in entries:
        item = entry.to_dict()
        item["expires_at"] = entry.expires_at(retention_days).isoformat()
        data.append(item)
    return data


def print_delete_plan(items: list[PendingItem]) -> None:
    """Display the items about to be moved into the cache."""
    table = create_table("Items to Delete")
    table.add_column("Type", width=9)
    table.add_column("Path", overflow="fold")
    table.add_column("Contents", justify="right", style="muted")
    table.add_column("Size", justify="right", style="info")

    for item in items:
        is_dir = item.is_directory and not item.is_symlink
        contents = f"{item.child_count} file(s)" if is_dir else ""
        table.add_row(
            _type_label(_pending_type(item)),
            item.path,
            contents,
            format_size(item.size_bytes),
        )

    console.print(table)
    total = sum(item.size_bytes for item in items)
    console.print(f"[muted]{len(items)} item(s), {format_size(total)} total[/muted]")


def print_restore_plan(candidates: list[RestoreCandidate]) -> None:
    """Display the items about to be restored and where they will go."""
    table = create_table("Items to Restore")
    table.add_column("Type", width=9)
    table.add_column("Original Path", overflow="fold")
    table.add_column("Restore To", overflow="fold")
    table.add_column("Deleted", no_wrap=True)

    for candidate in candidates:
        entry = candidate.entry
        destination = candidate.destination
        if candidate.renamed:
            destination = f"[warning]{destination}[/warning]"
        table.add_row(
            _type_label(entry.item_type),
            entry.original_path,
            destination,
            entry.delete_time.strftime(DISPLAY_TIME_FORMAT),
        )

    console.print(table)


def print_failures(failures: list[ItemFailure] | tuple[ItemFailure, ...]) -> None:
    """Print skipped items with their reasons."""
    if not failures:
        return
    table = create_table("Skipped")
    table.add_column("Path", overflow="fold")
    table.add_column("Reason", style="muted")
    for failure in failures:
        table.add_row(failure.path, failure.error)
    console.print(table)


def print_summary(summary: PipelineSummary, quiet: bool = False) -> None:
    """Print the final report of a pipeline run.

    Args:
        summary: Summary from the finished pipeline.
        quiet: Only print failures and errors.
    """
    if summary.state is PipelineState.ERROR:
        print_failures(summary.skipped)
        print_error(summary.error_message or "Operation failed")
        return

    if summary.state is PipelineState.CANCELLED:
        if not quiet:
            print_info("Cancelled. Nothing was changed.")
        return

    print_failures(summary.skipped)
    for warning in summary.warnings:
        print_warning(warning)

    if quiet:
        return

    if summary.operation is Operation.CLEAR:
        print_success("Cache cleared.")
        return

    headline = _DONE_VERBS[summary.operation].format(count=summary.processed_count)
    if summary.skipped_count:
        skipped = f"[error]{summary.skipped_count} skipped[/error]"
        console.print(f"\n[success]{headline}[/success], {skipped}")
    else:
        print_success(headline)

    for path in summary.first_paths:
        console.print(f"  [muted]{path}[/muted]")
    if summary.more_count:
        console.print(f"  [muted]... and {summary.more_count} more[/muted]")

    if summary.expires_at is not None:
        deadline = summary.expires_at.strftime(DISPLAY_TIME_FORMAT)
        print_info(f"Items can be restored until {deadline}")
    if summary.cleaned_count:
        print_info(f"Cleaned up {summary.cleaned_count} expired item(s)")


def print_entry_details(entry: CacheEntry, retention_days: int) -> None:
    """Print all details of one cache entry."""
    payload = "present" if os.path.lexists(entry.cache_path) else "[error]missing[/error]"
    rows: list[tuple[str, str]] = [
        ("ID", entry.id),
        ("Type", _type_label(entry.item_type)),
        ("Original path", entry.original_path),
        ("Cache path", entry.cache_path),
        ("Deleted", entry.delete_time.strftime(DISPLAY_TIME_FORMAT)),
        ("Expires", entry.expires_at(retention_days).strftime(DISPLAY_TIME_FORMAT)),
        ("Size", format_size(entry.size_bytes)),
    ]
    if entry.is_symlink:
        rows.append(("Link target", entry.link_target or ""))
    elif entry.is_directory:
        rows.append(("Files", str(entry.contained_file_count)))
    rows.append(("Payload", payload))

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="header", no_wrap=True)
    table.add_column(overflow="fold")
    for label, value in rows:
        table.add_row(label, value)
    console.print(table)


def print_stats(stats: CacheStats, retention_days: int) -> None:
    """Print cache statistics."""
    table = create_table("Cache Statistics")
    table.add_column("Metric", style="header")
    table.add_column("Value", justify="right")

    table.add_row("Items", str(stats.total_items))
    table.add_row("Files", str(stats.file_count))
    table.add_row("Directories", str(stats.directory_count))
    table.add_row("Symlinks", str(stats.symlink_count))
    table.add_row("Total size", format_size(stats.total_size))
    table.add_row("Average size", format_size(stats.average_size))
    table.add_row(f"Expired (> {retention_days} days)", str(stats.expired_count))
    if stats.largest is not None:
        table.add_row(
            "Largest",
            f"{stats.largest.original_path} ({format_size(stats.largest.size_bytes)})",
        )
    if stats.oldest is not None:
        table.add_row("Oldest", stats.oldest.delete_time.strftime(DISPLAY_TIME_FORMAT))
    if stats.newest is not None:
        table.add_row("Newest", stats.newest.delete_time.strftime(DISPLAY_TIME_FORMAT))

    console.print(table)
