#!/usr/bin/env python3
"""
report_formatter.py - Markdown report for tracked quiz scams

Renders the tracked contracts as a Markdown table and splices it into an
existing document between two marker comments, leaving everything outside
the markers untouched.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Tuple

from shared.scam_store import UNKNOWN_NAME, TrackedContract
from shared.utils.blockchain_explorer_utils import (
    generate_etherscan_link,
    shorten_address,
)

logger = logging.getLogger(__name__)

MARKER_START = "<!-- SCAM_LIST_START -->"
MARKER_END = "<!-- SCAM_LIST_END -->"
DEFAULT_DOCUMENT = f"# Scam Tracker\n\n{MARKER_START}\n{MARKER_END}"

TABLE_HEADER = "| Name | Address | Balance | Status | First Seen |\n|---|---|---|---|---|\n"


def sort_for_report(contracts: List[TrackedContract]) -> List[TrackedContract]:
    """ACTIVE first, then by balance descending. Returns a new list."""
    return sorted(contracts, key=lambda c: (not c.is_active, -c.balance))


def _table_row(contract: TrackedContract) -> str:
    safe_name = (contract.name or UNKNOWN_NAME).replace("|", "-").strip()
    link = generate_etherscan_link(contract.address, contract.chain)
    first_seen = contract.first_seen.split("T")[0] if contract.first_seen else "Unknown"
    return (
        f"| {safe_name} "
        f"| [{shorten_address(contract.address)}]({link}) "
        f"| **{contract.balance:.4f}** "
        f"| {contract.status} "
        f"| {first_seen} |\n"
    )


def render_scam_table(contracts: List[TrackedContract], now: datetime) -> str:
    """Table plus a trailing last-updated line, framed by newlines for the markers."""
    table = "\n" + TABLE_HEADER
    for contract in sort_for_report(contracts):
        table += _table_row(contract)

    stamp = now.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
    table += f"\n*Last Updated: {stamp} UTC*\n"
    return table


def _marker_span(document: str) -> Optional[Tuple[int, int]]:
    """Span of the innermost start marker preceding an end marker, if any."""
    end = document.find(MARKER_END)
    while end != -1:
        start = document.rfind(MARKER_START, 0, end)
        if start != -1:
            return start, end + len(MARKER_END)
        end = document.find(MARKER_END, end + len(MARKER_END))
    return None


def replace_marker_block(document: str, table: str) -> str:
    """Swap the marker span for the table, or append a marker block if absent."""
    block = f"{MARKER_START}{table}{MARKER_END}"
    span = _marker_span(document)
    if span is None:
        return f"{document}\n\n{block}"
    start, end = span
    return document[:start] + block + document[end:]


def update_readme(path: Path, contracts: List[TrackedContract], now: datetime) -> str:
    """Rewrite the report document in place and return its new content."""
    path = Path(path)
    try:
        # Undecodable bytes become U+FFFD so the rest of the document survives
        document = path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        logger.info(f"No report document at {path}, creating one")
        document = DEFAULT_DOCUMENT

    content = replace_marker_block(document, render_scam_table(contracts, now))
    path.write_text(content, encoding="utf-8")
    return content
