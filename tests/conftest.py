"""Shared fixtures and factories for bk-accounter tests."""

import json
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

import httpx
import pytest

from bk_accounter.buildkite import BuildkiteClient
from bk_accounter.buildkite.models import Authorization, OrgMember
from bk_accounter.members import Member

TOKEN = "bkua_test_token_1234"
CREATED_AT = datetime(2021, 6, 1, 12, 30, 45, tzinfo=timezone.utc)


def make_member(id: str, email: str, name: str, org: str = "O1", **kwargs: Any) -> Member:
    """Build a normalized member with sensible defaults."""
    return Member(
        id=id,
        email=email,
        domain=email.rpartition("@")[2],
        name=name,
        org=org,
        role=kwargs.pop("role", "member"),
        **kwargs,
    )


def make_org_member(
    id: str,
    email: str,
    name: str = "Llama",
    role: str = "MEMBER",
    sso_email: str | None = None,
) -> OrgMember:
    authorization = None
    if sso_email is not None:
        authorization = Authorization(
            id=f"auth-{id}", email=sso_email, name=name, created_at=CREATED_AT
        )
    return OrgMember(
        id=id,
        name=name,
        email=email,
        role=role,
        created_at=CREATED_AT,
        authorization=authorization,
    )


def member_node(
    id: str,
    email: str,
    name: str = "Llama",
    role: str = "MEMBER",
    sso_email: str | None = None,
) -> dict[str, Any]:
    """A raw ``OrganizationMember`` node as the GraphQL API returns it."""
    auth_edges = []
    if sso_email is not None:
        auth_edges.append(
            {
                "node": {
                    "id": f"auth-{id}",
                    "identity": {"name": name, "email": sso_email},
                    "createdAt": "2021-06-01T12:30:45Z",
                    "expiredAt": None,
                    "revokedAt": None,
                    "userSessionDestroyedAt": None,
                    "state": "VERIFIED",
                }
            }
        )
    return {
        "createdAt": "2020-01-01T00:00:00Z",
        "role": role,
        "complimentary": False,
        "user": {"id": id, "email": email, "name": name, "bot": False},
        "sso": {"authorizations": {"edges": auth_edges}},
    }


def members_page(
    nodes: list[dict[str, Any]], has_next_page: bool = False, end_cursor: str | None = None
) -> dict[str, Any]:
    return {
        "data": {
            "organization": {
                "members": {
                    "pageInfo": {"hasNextPage": has_next_page, "endCursor": end_cursor},
                    "edges": [{"node": n} for n in nodes],
                }
            }
        }
    }


class RecordingTransport:
    """Mock transport that records request bodies and replays canned responses."""

    def __init__(self, responder: Callable[[httpx.Request, dict[str, Any]], httpx.Response]):
        self.responder = responder
        self.requests: list[httpx.Request] = []
        self.payloads: list[dict[str, Any]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        payload = json.loads(request.content)
        self.payloads.append(payload)
        return self.responder(request, payload)


@pytest.fixture
def make_client():
    """Factory for a BuildkiteClient backed by a mock transport."""

    def _make(responder, debug: bool = False) -> tuple[BuildkiteClient, RecordingTransport]:
        transport = RecordingTransport(responder)
        http_client = httpx.Client(transport=httpx.MockTransport(transport))
        client = BuildkiteClient(TOKEN, debug=debug, http_client=http_client)
        return client, transport

    return _make


@pytest.fixture
def llamas() -> list[Member]:
    """Two accounts sharing an email across orgs plus a third with the same name."""
    return [
        make_member("1", "a@x.com", "Llama", org="O1"),
        make_member("2", "a@x.com", "Llama", org="O2"),
        make_member("3", "b@x.com", "Llama", org="O1"),
    ]
