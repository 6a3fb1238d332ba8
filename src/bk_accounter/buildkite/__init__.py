"""Buildkite GraphQL API client."""

from .client import GRAPHQL_ENDPOINT, PAGE_SIZE, BuildkiteClient
from .models import Authorization, OrgMember

__all__ = [
    "BuildkiteClient",
    "GRAPHQL_ENDPOINT",
    "PAGE_SIZE",
    "Authorization",
    "OrgMember",
]
