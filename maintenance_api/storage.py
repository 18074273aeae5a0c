"""
Flat-file data access.

The JSON files under DATA_DIR are the single source of truth and are re-read
on every request. Writes go straight to disk: concurrent PUTs to the same
override are last-writer-wins, and the NDJSON logs rely on append mode.

Layout:
    <data>/flights.json          master document {"flights": [...]}
    <data>/flights/<id>.json     optional per-flight override
    <data>/tuner.json            opaque UI tuner settings
    <data>/logs/*.log            newline-delimited JSON traces
"""
import json
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from maintenance_api.config import Settings
from maintenance_api.errors import BadRequest, StorageError
from maintenance_api.models.flight import Flight, FlightsDocument

logger = logging.getLogger("maintenance-api.storage")

FLIGHT_ID_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


def _read_json(path: Path) -> Any:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def _write_json(path: Path, payload: Any) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def check_flight_id(flight_id: str) -> str:
    """Flight ids become file names, so only allow plain path components."""
    if not FLIGHT_ID_RE.match(flight_id):
        raise BadRequest("invalid flight id", detail=flight_id)
    return flight_id


class FlightStore:
    """Reads and writes the flight, override and tuner documents."""

    def __init__(self, settings: Settings):
        self.flights_file = settings.master_flights_path
        self.overrides_dir = settings.overrides_dir
        self.tuner_file = settings.tuner_path

    # --- Master document ---

    def load_document(self) -> dict:
        """The master document exactly as stored."""
        try:
            payload = _read_json(self.flights_file)
        except OSError as e:
            raise StorageError("failed to read flights", detail=str(e)) from e
        except ValueError as e:
            raise StorageError("invalid flights file", detail=str(e)) from e
        if not isinstance(payload, dict):
            raise StorageError("invalid flights file", detail="top-level value must be an object")
        return payload

    def load_flights(self) -> list[Flight]:
        try:
            return FlightsDocument.model_validate(self.load_document()).flights
        except ValidationError as e:
            raise StorageError("invalid flights file", detail=str(e)) from e

    # --- Per-flight overrides ---

    def override_path(self, flight_id: str) -> Path:
        return self.overrides_dir / f"{check_flight_id(flight_id)}.json"

    def load_override(self, flight_id: str) -> Any:
        """The override document, or None when missing or unreadable."""
        path = self.override_path(flight_id)
        if not path.exists():
            return None
        try:
            return _read_json(path)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable override %s: %s", path, e)
            return None

    def get_flight(self, flight_id: str) -> Any:
        """Raw flight record: the override if present, else the master entry."""
        override = self.load_override(flight_id)
        if override is not None:
            return override
        for record in self.load_document().get("flights") or []:
            if isinstance(record, dict) and record.get("id") == flight_id:
                return record
        return None

    def save_override(self, flight_id: str, payload: Any) -> None:
        path = self.override_path(flight_id)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            _write_json(path, payload)
        except OSError as e:
            raise StorageError("failed to save flight", detail=str(e)) from e
        logger.info("Saved override for %s", flight_id)

    # --- Tuner settings ---

    def load_tuner(self) -> Any:
        """Stored tuner blob; an empty object whenever it can't be read."""
        try:
            return _read_json(self.tuner_file)
        except (OSError, ValueError):
            return {}

    def save_tuner(self, payload: Any) -> None:
        try:
            self.tuner_file.parent.mkdir(parents=True, exist_ok=True)
            _write_json(self.tuner_file, payload)
        except OSError as e:
            raise StorageError("failed to save", detail=str(e)) from e


def append_trace(path: Path, payload: Any) -> None:
    """Append one {"ts", "payload"} line to an NDJSON trace file."""
    line = json.dumps({"ts": utc_timestamp(), "payload": payload}) + "\n"
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(line)
    except OSError as e:
        raise StorageError("failed to append log", detail=str(e)) from e


class AuditLog:
    """Append-only NDJSON audit trail for chat traffic.

    append() never raises: a full disk or a bad payload must not change the
    response the caller gets.
    """

    def __init__(self, path: Path):
        self.path = path

    def append(self, event: str, **fields: Any) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            line = json.dumps({"ts": utc_timestamp(), "event": event, **fields}, default=str)
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(line + "\n")
        except Exception as e:
            logger.debug("Audit write to %s failed: %s", self.path, e)
