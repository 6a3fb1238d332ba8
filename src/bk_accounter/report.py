"""Duplicate account detection."""

from collections.abc import Iterable, Sequence
from enum import StrEnum

from .members import Member, MemberWithDuplicates


class DedupeKey(StrEnum):
    """Attribute used to collapse duplicate report entries."""

    EMAIL = "email"
    NAME = "name"


def dedupe_flags(keys: Iterable[str]) -> tuple[bool, bool]:
    """Translate dedupe keys into ``(by_email, by_name)``."""
    keys = {DedupeKey(k) for k in keys}
    return DedupeKey.EMAIL in keys, DedupeKey.NAME in keys


def build_report(members: Sequence[Member], email: str | None = None) -> list[MemberWithDuplicates]:
    """
    Group members by email and cross-reference them by name.

    Each distinct email, in ascending order, yields one entry whose
    representative is the first member (in fetch order) with that email.
    ``email_duplicates`` holds the other members with the same email and
    ``name_duplicates`` the members with the same name but another email.

    Args:
        members: Normalized members, in fetch order
        email: Only report on this email

    Returns:
        Report entries sorted by representative email
    """
    result: list[MemberWithDuplicates] = []

    for current in sorted({m.email for m in members}):
        if email and email != current:
            continue

        by_email = [m for m in members if m.email == current]
        representative = by_email[0]
        by_name = [
            m for m in members if m.name == representative.name and m.email != representative.email
        ]

        result.append(
            MemberWithDuplicates(
                **representative.model_dump(),
                email_duplicates=by_email[1:],
                name_duplicates=by_name,
            )
        )

    return result


def collapse(
    report: Sequence[MemberWithDuplicates],
    dedupe_by_email: bool = False,
    dedupe_by_name: bool = False,
) -> list[MemberWithDuplicates]:
    """
    Keep only the first-seen entry of each duplicate cluster.

    Walking the report in order, an entry is skipped if its id was already
    seen. A kept entry marks its own id seen, plus the ids of its email
    and/or name duplicates depending on the flags. Skipped entries mark
    nothing.
    """
    if not (dedupe_by_email or dedupe_by_name):
        return list(report)

    kept: list[MemberWithDuplicates] = []
    seen: set[str] = set()

    for entry in report:
        if entry.id in seen:
            continue
        kept.append(entry)
        seen.add(entry.id)

        if dedupe_by_email:
            seen.update(m.id for m in entry.email_duplicates)
        if dedupe_by_name:
            seen.update(m.id for m in entry.name_duplicates)

    return kept
