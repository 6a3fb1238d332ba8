"""Render reports as a count, JSON or CSV."""

import csv
import json
import logging
from collections.abc import Sequence
from enum import StrEnum
from pathlib import Path

from rich.console import Console

from .errors import OutputError
from .members import Member, MemberWithDuplicates

logger = logging.getLogger(__name__)

CSV_HEADER = ["email", "name", "org", "role", "last_sso_auth"]
CSV_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class OutputFormat(StrEnum):
    """How the result is emitted."""

    COUNT = "count"
    JSON = "json"
    CSV = "csv"


def render_count(report: Sequence[MemberWithDuplicates], console: Console) -> None:
    console.print(len(report))


def report_to_json(report: Sequence[MemberWithDuplicates]) -> str:
    """Serialize the report as a JSON array."""
    return json.dumps([entry.model_dump(mode="json") for entry in report])


def render_json(report: Sequence[MemberWithDuplicates], console: Console) -> None:
    """Pretty-print the report (colorized when writing to a terminal)."""
    console.print_json(report_to_json(report), indent=2)


def csv_row(member: Member) -> list[str]:
    last_auth = member.last_auth.strftime(CSV_TIME_FORMAT) if member.last_auth else ""
    return [member.email, member.name, member.org, member.role, last_auth]


def write_csv(members: Sequence[Member], path: Path) -> int:
    """
    Write one row per member to *path*.

    Rows are the normalized members as fetched: the email filter and
    dedupe settings do not apply here.

    Returns:
        Number of data rows written
    """
    try:
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(CSV_HEADER)
            for member in members:
                writer.writerow(csv_row(member))
    except OSError as e:
        raise OutputError(f"failed to write {path}: {e}") from e

    logger.debug("Wrote %d rows to %s", len(members), path)
    return len(members)
