"""Buildkite GraphQL API client."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx
from pydantic import ValidationError

from ..errors import APIError, DecodeError, HTTPStatusError, TransportError
from .models import OrgMember, OrgMembersResponse

logger = logging.getLogger(__name__)

GRAPHQL_ENDPOINT = "https://graphql.buildkite.com/v1"
PAGE_SIZE = 100

ORG_MEMBERS_QUERY = """
query ($orgSlug: ID!, $after: String) {
  organization(slug: $orgSlug) {
    members(first: %d, after: $after) {
      pageInfo {
        hasNextPage
        endCursor
      }
      edges {
        node {
          createdAt
          role
          complimentary
          user {
            id
            email
            name
            bot
          }
          sso {
            authorizations(first: 1) {
              edges {
                node {
                  id
                  identity {
                    name
                    email
                  }
                  createdAt
                  expiredAt
                  revokedAt
                  userSessionDestroyedAt
                  state
                }
              }
            }
          }
        }
      }
    }
  }
}
""" % PAGE_SIZE


def _graphql_error_messages(body: bytes) -> list[str]:
    """Return the messages of a ``{"errors": [...]}`` envelope, if the body is one."""
    try:
        payload = json.loads(body)
    except ValueError:
        return []
    if not isinstance(payload, dict) or not isinstance(payload.get("errors"), list):
        return []
    return [
        str(err.get("message", "")) if isinstance(err, dict) else str(err)
        for err in payload["errors"]
    ]


class BuildkiteClient:
    """Client for the Buildkite GraphQL API."""

    def __init__(
        self,
        token: str,
        endpoint: str = GRAPHQL_ENDPOINT,
        timeout: float = 30.0,
        debug: bool = False,
        http_client: httpx.Client | None = None,
    ):
        """
        Initialize the Buildkite client.

        Args:
            token: GraphQL API access token, sent as a bearer token
            endpoint: GraphQL endpoint URL
            timeout: Request timeout in seconds
            debug: Dump every request and response to the debug log
            http_client: Optional pre-built ``httpx.Client`` (not closed by us)
        """
        self.endpoint = endpoint
        self.debug = debug
        self.headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        self._token = token
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(timeout=httpx.Timeout(timeout))

    def close(self) -> None:
        """Close the HTTP client if we created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> BuildkiteClient:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def _redact(self, text: str) -> str:
        if self._token:
            return text.replace(self._token, "***REDACTED***")
        return text

    def _dump_request(self, request: httpx.Request) -> None:
        headers = "\n".join(f"{k}: {v}" for k, v in request.headers.items())
        logger.debug(
            "DEBUG request uri=%s\n%s %s\n%s\n\n%s",
            request.url,
            request.method,
            request.url,
            self._redact(headers),
            request.content.decode("utf-8", errors="replace"),
        )

    def _dump_response(self, response: httpx.Response) -> None:
        headers = "\n".join(f"{k}: {v}" for k, v in response.headers.items())
        logger.debug(
            "DEBUG response uri=%s\n%s %s\n%s\n\n%s",
            response.request.url,
            response.status_code,
            response.reason_phrase,
            headers,
            response.text,
        )

    def execute(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """
        Send a GraphQL query with bound variables.

        Args:
            query: GraphQL query document
            variables: Query variables

        Returns:
            The decoded JSON response body

        Raises:
            TransportError: The request failed before a response arrived
            APIError: The response carried a GraphQL ``errors`` list
            HTTPStatusError: Non-2xx status without GraphQL errors
            DecodeError: The body is not valid JSON
        """
        request = self._client.build_request(
            "POST",
            self.endpoint,
            headers=self.headers,
            json={"query": query.strip(), "variables": variables or {}},
        )

        if self.debug:
            self._dump_request(request)

        try:
            response = self._client.send(request)
            body = response.read()
        except httpx.TransportError as e:
            raise TransportError(f"request failed: {e}") from e

        if self.debug:
            self._dump_response(response)

        messages = _graphql_error_messages(body)
        if messages:
            raise APIError(messages, status_code=response.status_code)

        if not response.is_success:
            raise HTTPStatusError(response.status_code, response.reason_phrase, response.text)

        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(f"error decoding response: {e}") from e

    def _get_org_members_page(
        self, org_slug: str, after: str | None
    ) -> tuple[list[OrgMember], str | None]:
        """Fetch one page of members; returns the members and the next cursor, if any."""
        data = self.execute(ORG_MEMBERS_QUERY, {"orgSlug": org_slug, "after": after})

        try:
            page = OrgMembersResponse.model_validate(data)
        except ValidationError as e:
            raise DecodeError(f"error decoding members of {org_slug}: {e}") from e

        connection = page.data.organization.members
        members = [edge.node.to_org_member() for edge in connection.edges]

        page_info = connection.page_info
        if page_info.has_next_page and page_info.end_cursor:
            return members, page_info.end_cursor
        return members, None

    def get_org_members(self, org_slug: str) -> list[OrgMember]:
        """Get all members of an organization along with their last SSO authorization."""
        after: str | None = None
        result: list[OrgMember] = []
        pages = 0

        while True:
            members, after = self._get_org_members_page(org_slug, after)
            result.extend(members)
            pages += 1
            logger.debug(
                "Pagination: fetched %d members of %s over %d page(s)", len(result), org_slug, pages
            )

            if after is None:
                break

        return result
