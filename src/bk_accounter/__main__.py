"""Allow ``python -m bk_accounter``."""

from .cli import app

app()
