"""Content-addressed cache of AI risk assessments.

Entries are keyed by project id and remember the SHA-256 of the
project's package.json at the time the AI was consulted. An entry is
only returned while that hash still matches, so any manifest change
forces a fresh assessment.

File format::

    {"version": 1,
     "entries": {"<projectId>": {"hash": "<hex>",
                                 "assessment": {"className", "score", "reasons", "source"},
                                 "updatedAt": <epoch-ms>}}}
"""

import hashlib
import logging
import time
from pathlib import Path
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from devclean.cache.storage import CacheStorage
from devclean.risk.models import RiskAssessment, RiskSource

logger = logging.getLogger(__name__)

CACHE_VERSION = 1


class CacheEntry(BaseModel):
    """Stored AI assessment for one project.

    Attributes:
        hash: Hex SHA-256 of the manifest bytes when assessed.
        assessment: The AI assessment (source AI).
        updated_at: When the entry was written, in epoch milliseconds.
    """

    model_config = ConfigDict(populate_by_name=True)

    hash: str
    assessment: RiskAssessment
    updated_at: Annotated[int, Field(alias="updatedAt")] = 0


class CacheFile(BaseModel):
    """Versioned mapping from project id to cache entry."""

    version: int = CACHE_VERSION
    entries: dict[str, CacheEntry] = Field(default_factory=lambda: {})


def hash_file(path: Path) -> str | None:
    """Hex SHA-256 of a file's bytes, or None if it cannot be read."""
    try:
        data = path.read_bytes()
    except OSError as e:
        logger.debug("Cannot hash %s: %s", path, e)
        return None
    return hashlib.sha256(data).hexdigest()


class AssessmentCache:
    """In-memory view of a cache file with hash-gated lookups.

    Args:
        data: Initial cache contents (defaults to an empty cache).
    """

    def __init__(self, data: CacheFile | None = None) -> None:
        self._data = data if data is not None else CacheFile()

    @property
    def data(self) -> CacheFile:
        return self._data

    def __len__(self) -> int:
        return len(self._data.entries)

    def lookup(self, project_id: str, content_hash: str) -> RiskAssessment | None:
        """Return the cached assessment only if the stored hash matches exactly."""
        entry = self._data.entries.get(project_id)
        if entry is None or entry.hash != content_hash:
            return None
        return entry.assessment

    def store(
        self,
        project_id: str,
        content_hash: str,
        assessment: RiskAssessment,
        now_ms: int | None = None,
    ) -> None:
        """Record an AI assessment, replacing any previous entry for the project."""
        if assessment.source != RiskSource.AI:
            assessment = assessment.model_copy(update={"source": RiskSource.AI})
        updated_at = now_ms if now_ms is not None else int(time.time() * 1000)
        self._data.entries[project_id] = CacheEntry(
            hash=content_hash,
            assessment=assessment,
            updated_at=updated_at,
        )

    def to_bytes(self) -> bytes:
        """Serialize to pretty-printed JSON."""
        return self._data.model_dump_json(by_alias=True, indent=2).encode("utf-8")

    @classmethod
    def from_bytes(cls, raw: bytes | None) -> "AssessmentCache":
        """Deserialize, treating missing or invalid data as an empty cache."""
        if raw is None:
            return cls()
        try:
            data = CacheFile.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("Ignoring unreadable assessment cache (%d errors)", e.error_count())
            return cls()
        if data.version != CACHE_VERSION:
            logger.warning("Ignoring assessment cache with version %d", data.version)
            return cls()
        return cls(data)

    @classmethod
    def load(cls, storage: CacheStorage, key: str) -> "AssessmentCache":
        """Load the cache for ``key`` from storage (never raises for bad data)."""
        return cls.from_bytes(storage.read(key))

    def save(self, storage: CacheStorage, key: str) -> None:
        """Persist the cache for ``key``.

        Raises:
            OSError: If the storage could not write anywhere.
        """
        storage.write(key, self.to_bytes())
