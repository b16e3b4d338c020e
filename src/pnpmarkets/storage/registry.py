"""Master index of known markets: markets/registry.json."""

from __future__ import annotations

import json
from pathlib import Path

import structlog
from pydantic import ValidationError as PydanticValidationError

from pnpmarkets.errors import AlreadySettled, DuplicateConditionId, NotFound, ValidationError
from pnpmarkets.models import Outcome, Registry, RegistryEntry
from pnpmarkets.storage.files import atomic_write_json, make_lock, read_json
from pnpmarkets.storage.records import REGISTRY_FILENAME

log = structlog.get_logger(__name__)


class RegistryIndex:
    """Reads and writes the registry index.

    Every mutation is a read-modify-write done while holding ``lock``, so
    concurrent agent processes cannot lose each other's updates. ``save``
    replaces the file atomically.
    """

    def __init__(self, base_dir: str | Path, lock_timeout: float = 30.0):
        self.base_dir = Path(base_dir)
        self.path = self.base_dir / REGISTRY_FILENAME
        self.lock = make_lock(self.path, timeout=lock_timeout)

    def load(self) -> Registry:
        """Return the current index, or an empty one if the file does not exist yet."""
        if not self.path.exists():
            return Registry()
        try:
            return Registry.model_validate(read_json(self.path))
        except (json.JSONDecodeError, PydanticValidationError) as e:
            raise ValidationError(f"Corrupt registry {self.path}: {e}") from e

    def save(self, index: Registry) -> None:
        with self.lock:
            atomic_write_json(self.path, index.to_json_dict())

    def get(self, condition_id: str) -> RegistryEntry | None:
        return self.load().get(condition_id)

    def append(self, entry: RegistryEntry) -> None:
        """Add entry. Raises DuplicateConditionId if already present."""
        with self.lock:
            index = self.load()
            if entry.condition_id in index:
                raise DuplicateConditionId(entry.condition_id)
            index.markets.append(entry)
            self.save(index)
        log.info("registry_entry_appended", condition_id=entry.condition_id, end_time_unix=entry.end_time_unix)

    def mark_settled(self, condition_id: str, winner: Outcome) -> RegistryEntry:
        """Set isSettled/winner on the entry. Raises NotFound or AlreadySettled."""
        with self.lock:
            index = self.load()
            for i, entry in enumerate(index.markets):
                if entry.condition_id != condition_id:
                    continue
                if entry.is_settled:
                    raise AlreadySettled(condition_id, entry.winner)
                updated = RegistryEntry(
                    condition_id=entry.condition_id,
                    question=entry.question,
                    end_time_unix=entry.end_time_unix,
                    is_settled=True,
                    winner=winner,
                )
                index.markets[i] = updated
                self.save(index)
                log.info("registry_entry_settled", condition_id=condition_id, winner=winner)
                return updated
        raise NotFound(condition_id, what="registry entry")
