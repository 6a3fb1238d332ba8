"""Normalized, cross-organization member records."""

import logging
import time
from collections.abc import Iterable
from datetime import datetime
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, SerializerFunctionWrapHandler, model_serializer

from .buildkite.models import OrgMember
from .errors import InvalidEmailError
from .sources import MemberSource

logger = logging.getLogger(__name__)


class Member(BaseModel):
    """A member of one organization, keyed on its effective email."""

    model_config = ConfigDict(frozen=True)

    # Dropped from serialized output when falsy
    omit_if_empty: ClassVar[tuple[str, ...]] = ("complimentary",)

    id: str
    email: str
    domain: str
    name: str
    org: str
    role: str
    last_auth: datetime | None = None
    complimentary: bool = False

    @model_serializer(mode="wrap")
    def _serialize(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        for key in self.omit_if_empty:
            if key in data and not data[key]:
                del data[key]
        return data


class MemberWithDuplicates(Member):
    """A report entry: a representative member and the members that look like it."""

    omit_if_empty: ClassVar[tuple[str, ...]] = (
        "complimentary",
        "name_duplicates",
        "email_duplicates",
    )

    name_duplicates: list[Member] = Field(default_factory=list)
    email_duplicates: list[Member] = Field(default_factory=list)


def email_domain(email: str) -> str:
    """Return everything after the last ``@`` in *email*."""
    _, at, domain = email.rpartition("@")
    if not at:
        raise InvalidEmailError(email)
    return domain


def normalize(org_member: OrgMember, org_slug: str) -> Member:
    """Flatten a raw org member into a :class:`Member`.

    The SSO identity email, when there is one, replaces the account email.
    """
    email = org_member.email
    last_auth = None
    if org_member.authorization is not None:
        email = org_member.authorization.email
        last_auth = org_member.authorization.created_at

    return Member(
        id=org_member.id,
        email=email,
        domain=email_domain(email),
        name=org_member.name,
        org=org_slug,
        role=org_member.role.lower(),
        last_auth=last_auth,
        complimentary=org_member.complimentary,
    )


def collect_members(source: MemberSource, org_slugs: Iterable[str]) -> list[Member]:
    """Fetch and normalize the members of every org, one org at a time."""
    result: list[Member] = []
    org_count = 0

    for org_slug in org_slugs:
        org_count += 1
        logger.debug("Finding members in %s", org_slug)
        start = time.monotonic()

        org_members = source.get_org_members(org_slug)
        result.extend(normalize(m, org_slug) for m in org_members)

        logger.debug(
            "Found %d members in %s in %.2fs", len(org_members), org_slug, time.monotonic() - start
        )

    logger.info("Found %d accounts over %d orgs", len(result), org_count)
    return result
