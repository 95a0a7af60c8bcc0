"""
Exposure history: one record per profile per day, stored as JSON under the data directory.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List

from pydantic import ValidationError

from .report import ExposureRecord
from .util import file_lock, read_json_file, slugify, write_text_file

logger = logging.getLogger(__name__)

HISTORY_DIRNAME = "history"


def history_path(data_dir: Path, profile_id: str) -> Path:
    return Path(data_dir) / HISTORY_DIRNAME / f"{slugify(profile_id)}.json"


def load_history(data_dir: Path, profile_id: str) -> List[ExposureRecord]:
    """
    Return the stored records for a profile, oldest first.

    Entries that no longer validate are dropped with a warning.
    """
    return _parse_records(read_json_file(history_path(data_dir, profile_id)), profile_id)


def _parse_records(payload: object, profile_id: str) -> List[ExposureRecord]:
    if not isinstance(payload, list):
        return []
    records: List[ExposureRecord] = []
    for entry in payload:
        try:
            records.append(ExposureRecord.model_validate(entry))
        except ValidationError as exc:
            logger.warning("Skipping invalid history entry for '%s': %s", profile_id, exc)
    return sorted(records, key=lambda record: record.date)


def record_exposure(data_dir: Path, profile_id: str, record: ExposureRecord) -> List[ExposureRecord]:
    """
    Upsert a record by date and return the updated history.

    A second record for the same date replaces the first. Raises OSError when
    an existing history file cannot be read, leaving it untouched.
    """
    path = history_path(data_dir, profile_id)
    with file_lock(path):
        payload = read_json_file(path)
        if payload is None and path.exists():
            raise OSError(f"Cannot read exposure history at {path}")
        by_date = {existing.date: existing for existing in _parse_records(payload, profile_id)}
        by_date[record.date] = record
        records = [by_date[key] for key in sorted(by_date)]
        payload = [entry.model_dump(mode="json") for entry in records]
        write_text_file(path, json.dumps(payload, indent=2), lock=False)
    logger.debug("Recorded exposure for '%s' on %s (%d entries)", profile_id, record.date, len(records))
    return records
