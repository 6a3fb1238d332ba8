"""Where organization members come from: the API, or a JSON disk cache in front of it."""

import json
import logging
import os
import sys
import tempfile
from pathlib import Path
from typing import Protocol

from pydantic import TypeAdapter, ValidationError

from .buildkite.models import OrgMember
from .errors import CacheError, DecodeError

logger = logging.getLogger(__name__)

_members_adapter = TypeAdapter(list[OrgMember])


class MemberSource(Protocol):
    """Anything that can list the members of an organization."""

    def get_org_members(self, org_slug: str) -> list[OrgMember]: ...


def _secure(path: Path, mode: int) -> None:
    """Restrict permissions on *path* (no-op on Windows)."""
    if sys.platform != "win32":
        os.chmod(path, mode)


class JsonFileCache:
    """
    Cache-first member source.

    Members of each org are stored as ``<cache_dir>/<org_slug>.json``. A file
    that exists is served as-is; otherwise the delegate is asked and its result
    written to disk before being returned. Entries never expire; delete the
    file (or the directory) to refresh.
    """

    def __init__(self, delegate: MemberSource, cache_dir: Path):
        self.delegate = delegate
        self.cache_dir = Path(cache_dir)

    def path_for(self, org_slug: str) -> Path:
        return self.cache_dir / f"{org_slug}.json"

    def _ensure_dir(self) -> None:
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            _secure(self.cache_dir, 0o700)
        except OSError as e:
            raise CacheError(f"failed to create cache dir {self.cache_dir}: {e}") from e

    def load(self, org_slug: str) -> list[OrgMember] | None:
        """Return cached members for *org_slug*, or None on a miss."""
        path = self.path_for(org_slug)
        if not path.exists():
            return None

        try:
            with open(path, encoding="utf-8") as f:
                raw = f.read()
        except OSError as e:
            raise CacheError(f"failed to read {path}: {e}") from e

        try:
            return _members_adapter.validate_json(raw)
        except ValidationError as e:
            raise DecodeError(f"error decoding cache file {path}: {e}") from e

    def store(self, org_slug: str, members: list[OrgMember]) -> None:
        """Atomically write *members* to the cache file for *org_slug*."""
        path = self.path_for(org_slug)
        payload = [m.model_dump(mode="json") for m in members]
        tempname = None
        try:
            # NamedTemporaryFile creates the file with mode 0600
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=self.cache_dir, suffix=".tmp", delete=False
            ) as tf:
                tempname = tf.name
                json.dump(payload, tf)
            os.replace(tempname, path)
        except OSError as e:
            if tempname and os.path.exists(tempname):
                os.remove(tempname)
            raise CacheError(f"failed to write {path}: {e}") from e

    def get_org_members(self, org_slug: str) -> list[OrgMember]:
        self._ensure_dir()

        cached = self.load(org_slug)
        if cached is not None:
            logger.debug("Cache hit for %s (%d members)", org_slug, len(cached))
            return cached

        # slow path
        members = self.delegate.get_org_members(org_slug)
        self.store(org_slug, members)
        logger.debug("Cached %d members of %s in %s", len(members), org_slug, self.path_for(org_slug))
        return members
