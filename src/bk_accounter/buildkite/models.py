"""Pydantic models for Buildkite GraphQL entities."""

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, BeforeValidator, Field

# GraphQL returns null for unset display names
OptionalName = Annotated[str, BeforeValidator(lambda v: "" if v is None else v)]


class Authorization(BaseModel):
    """Most recent SSO authorization of an organization member."""

    id: str
    email: str
    name: OptionalName = ""
    created_at: datetime
    expired_at: datetime | None = None
    revoked_at: datetime | None = None
    user_session_destroyed_at: datetime | None = None
    state: str | None = None


class OrgMember(BaseModel):
    """Organization-scoped account as returned by the API."""

    id: str
    name: OptionalName = ""
    email: str
    role: str
    bot: bool = False
    complimentary: bool = False
    created_at: datetime
    authorization: Authorization | None = None


# ── GraphQL response shapes ─────────────────────────────────────────


class PageInfo(BaseModel):
    """Relay-style pagination info."""

    has_next_page: bool = Field(alias="hasNextPage")
    end_cursor: str | None = Field(default=None, alias="endCursor")

    model_config = {"populate_by_name": True}


class Identity(BaseModel):
    name: OptionalName = ""
    email: str


class AuthorizationNode(BaseModel):
    id: str
    identity: Identity
    created_at: datetime = Field(alias="createdAt")
    expired_at: datetime | None = Field(default=None, alias="expiredAt")
    revoked_at: datetime | None = Field(default=None, alias="revokedAt")
    user_session_destroyed_at: datetime | None = Field(
        default=None, alias="userSessionDestroyedAt"
    )
    state: str | None = None

    model_config = {"populate_by_name": True}

    def to_authorization(self) -> Authorization:
        return Authorization(
            id=self.id,
            email=self.identity.email,
            name=self.identity.name,
            created_at=self.created_at,
            expired_at=self.expired_at,
            revoked_at=self.revoked_at,
            user_session_destroyed_at=self.user_session_destroyed_at,
            state=self.state,
        )


class AuthorizationEdge(BaseModel):
    node: AuthorizationNode


class AuthorizationConnection(BaseModel):
    edges: list[AuthorizationEdge] = Field(default_factory=list)


class Sso(BaseModel):
    authorizations: AuthorizationConnection = Field(default_factory=AuthorizationConnection)


class User(BaseModel):
    id: str
    name: OptionalName = ""
    email: str
    bot: bool = False


class MemberNode(BaseModel):
    """An ``OrganizationMember`` node."""

    created_at: datetime = Field(alias="createdAt")
    role: str
    complimentary: bool = False
    user: User
    sso: Sso | None = None

    model_config = {"populate_by_name": True}

    def to_org_member(self) -> OrgMember:
        """Flatten the node, keeping only the first SSO authorization."""
        authorization = None
        if self.sso and self.sso.authorizations.edges:
            authorization = self.sso.authorizations.edges[0].node.to_authorization()

        return OrgMember(
            id=self.user.id,
            name=self.user.name,
            email=self.user.email,
            role=self.role,
            bot=self.user.bot,
            complimentary=self.complimentary,
            created_at=self.created_at,
            authorization=authorization,
        )


class MemberEdge(BaseModel):
    node: MemberNode


class MemberConnection(BaseModel):
    page_info: PageInfo = Field(alias="pageInfo")
    edges: list[MemberEdge] = Field(default_factory=list)

    model_config = {"populate_by_name": True}


class Organization(BaseModel):
    members: MemberConnection


class OrgMembersData(BaseModel):
    organization: Organization


class OrgMembersResponse(BaseModel):
    """Top-level body of the org members query."""

    data: OrgMembersData
