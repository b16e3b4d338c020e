"""Per-market JSON records: markets/<conditionId>.json."""

from __future__ import annotations

import json
import re
from pathlib import Path

import structlog
from pydantic import ValidationError as PydanticValidationError

from pnpmarkets.errors import NotFound, ValidationError
from pnpmarkets.models import MarketRecord
from pnpmarkets.storage.files import atomic_write_json, read_json

log = structlog.get_logger(__name__)

REGISTRY_FILENAME = "registry.json"

# conditionIds are used as file names; keep them to a safe alphabet.
_CONDITION_ID_RE = re.compile(r"^[A-Za-z0-9_\-]+$")


def check_condition_id(condition_id: str) -> str:
    """Validate a conditionId for use as a file name. Returns it unchanged."""
    if not condition_id:
        raise ValidationError("conditionId is required")
    if not _CONDITION_ID_RE.match(condition_id):
        raise ValidationError(f"Invalid conditionId: {condition_id!r}")
    return condition_id


class MarketRecordStore:
    """Reads and writes full MarketRecords, one JSON file per conditionId."""

    def __init__(self, base_dir: str | Path):
        self.base_dir = Path(base_dir)

    def _ensure_dir(self) -> None:
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, condition_id: str) -> Path:
        return self.base_dir / f"{check_condition_id(condition_id)}.json"

    def write(self, record: MarketRecord) -> None:
        """Persist record, overwriting any previous record for the same conditionId."""
        self._ensure_dir()
        path = self.path_for(record.condition_id)
        atomic_write_json(path, record.to_json_dict())
        log.debug(
            "market_record_written",
            condition_id=record.condition_id,
            is_settled=record.settlement.is_settled,
        )

    def read(self, condition_id: str) -> MarketRecord:
        """Return the record for condition_id. Raises NotFound if absent."""
        path = self.path_for(condition_id)
        if not path.exists():
            raise NotFound(condition_id, what="market record")
        try:
            return MarketRecord.model_validate(read_json(path))
        except (json.JSONDecodeError, PydanticValidationError) as e:
            raise ValidationError(f"Corrupt market record {path}: {e}") from e

    def exists(self, condition_id: str) -> bool:
        return self.path_for(condition_id).exists()

    def list_ids(self) -> list[str]:
        """conditionIds of all records on disk, sorted by file name."""
        if not self.base_dir.exists():
            return []
        return sorted(
            p.stem
            for p in self.base_dir.glob("*.json")
            if p.name != REGISTRY_FILENAME and _CONDITION_ID_RE.match(p.stem)
        )
