"""Logging setup for the CLI."""

import logging

from rich.console import Console
from rich.logging import RichHandler

REDACTED = "***REDACTED***"

stderr_console = Console(stderr=True)


class TokenRedactionFilter(logging.Filter):
    """Logging filter that replaces a raw token with ``***REDACTED***``."""

    def __init__(self, token: str) -> None:
        super().__init__()
        self._token = token

    def _redact(self, value: object) -> object:
        if self._token and self._token in str(value):
            return str(value).replace(self._token, REDACTED)
        return value

    def filter(self, record: logging.LogRecord) -> bool:
        if self._token and self._token in str(record.msg):
            record.msg = str(record.msg).replace(self._token, REDACTED)
        if record.args:
            args = record.args
            if isinstance(args, tuple):
                record.args = tuple(self._redact(a) for a in args)
            elif isinstance(args, dict):
                record.args = {k: self._redact(v) for k, v in args.items()}
        return True


def setup_logging(debug: bool = False, token: str = "") -> None:
    """Configure logging with a RichHandler on stderr."""
    level = logging.DEBUG if debug else logging.WARNING
    handler = RichHandler(console=stderr_console, rich_tracebacks=True, show_path=debug)
    if token:
        handler.addFilter(TokenRedactionFilter(token))

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )

    # httpx logs every request at INFO
    if not debug:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)
