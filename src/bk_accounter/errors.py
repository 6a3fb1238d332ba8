"""Exceptions raised while fetching and reporting on Buildkite members."""


class AccounterError(Exception):
    """Base exception for all bk-accounter errors."""


class ConfigError(AccounterError):
    """Configuration is missing or invalid."""


class TransportError(AccounterError):
    """The request never produced an HTTP response."""


class HTTPStatusError(AccounterError):
    """Non-success HTTP status without a structured GraphQL error body."""

    def __init__(self, status_code: int, reason: str = "", body: str = ""):
        status = f"{status_code} {reason}".strip()
        super().__init__(f"response returned status {status}")
        self.status_code = status_code
        self.reason = reason
        self.body = body


class APIError(AccounterError):
    """The GraphQL API answered with an ``errors`` list."""

    def __init__(self, messages: list[str], status_code: int | None = None):
        super().__init__(f"graphql error: {', '.join(messages)}")
        self.messages = messages
        self.status_code = status_code


class InvalidEmailError(AccounterError):
    """An effective email address has no ``@``."""

    def __init__(self, email: str):
        super().__init__(f"{email} is an invalid email address")
        self.email = email


class DecodeError(AccounterError):
    """A response body or cache file could not be decoded."""


class CacheError(AccounterError, OSError):
    """Reading or writing the member cache failed."""


class OutputError(AccounterError, OSError):
    """Writing an output file failed."""
