"""File-backed stand-in for the remote test result document store."""

from __future__ import annotations

import hashlib
import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from threading import Lock
from typing import Any, Dict, List, Optional
from uuid import uuid4

from hearcare.domain.test_result import TestResult


logger = logging.getLogger(__name__)

def _encode_record(record: Dict[str, Any]) -> Dict[str, Any]:
    encoded = dict(record)
    test_date = encoded.get("testDate")
    if isinstance(test_date, datetime):
        if test_date.tzinfo is None:
            test_date = test_date.replace(tzinfo=timezone.utc)
        encoded["testDate"] = test_date.isoformat()
    return encoded


def _decode_record(record: Dict[str, Any]) -> Dict[str, Any]:
    """Restore the native timestamp; unparseable values are left as-is."""
    decoded = dict(record)
    raw_date = decoded.get("testDate")
    if isinstance(raw_date, str):
        try:
            decoded["testDate"] = datetime.fromisoformat(raw_date)
        except ValueError:
            logger.warning("Invalid stored test date: %s", raw_date)
    return decoded


class TestResultStore:
    """Per-user collections of test result records.

    Records are kept in memory in their document-store shape and mirrored
    to one JSON file per user so results survive a process restart.
    """

    __test__ = False

    def __init__(self, storage_dir: Optional[Path | str] = None) -> None:
        self._lock = Lock()
        storage_env = os.getenv("RESULT_STORAGE_DIR")
        if storage_dir is not None:
            self._storage_dir = Path(storage_dir)
        elif storage_env:
            self._storage_dir = Path(storage_env)
        else:
            self._storage_dir = Path(__file__).resolve().parent.parent / "results"
        self._storage_dir.mkdir(parents=True, exist_ok=True)
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}

    @property
    def storage_dir(self) -> Path:
        return self._storage_dir

    @staticmethod
    def _require_user(user_id: str) -> None:
        if not user_id or not user_id.strip():
            raise ValueError("User ID not found")

    def _collection_path(self, user_id: str) -> Path:
        digest = hashlib.sha256(user_id.encode("utf-8")).hexdigest()
        return self._storage_dir / f"{digest}.json"

    def _load_collection(self, user_id: str) -> Dict[str, Dict[str, Any]]:
        collection = self._collections.get(user_id)
        if collection is not None:
            return collection

        collection = {}
        json_path = self._collection_path(user_id)
        if json_path.exists():
            try:
                with json_path.open("r", encoding="utf-8") as handle:
                    data = json.load(handle)
                if not isinstance(data, dict):
                    raise ValueError("collection file is not a JSON object")
            except (OSError, ValueError) as exc:
                logger.warning("Ignoring unreadable result file: %s (%s)", json_path, exc)
                data = {}
            for result_id, record in data.items():
                if isinstance(record, dict):
                    collection[result_id] = _decode_record(record)
                else:
                    logger.warning("Skipping malformed record %s for user %s", result_id, user_id)
        self._collections[user_id] = collection
        return collection

    def _write_collection(self, user_id: str, collection: Dict[str, Dict[str, Any]]) -> None:
        json_path = self._collection_path(user_id)
        tmp_path = json_path.with_suffix(".json.tmp")
        payload = {result_id: _encode_record(record) for result_id, record in collection.items()}
        try:
            with tmp_path.open("w", encoding="utf-8") as handle:
                json.dump(payload, handle, ensure_ascii=False, indent=2)
            tmp_path.replace(json_path)
        except Exception:
            logger.exception("Failed to write result file: %s", json_path)
            try:
                tmp_path.unlink()
            except OSError:
                logger.debug("Could not remove temporary result file: %s", tmp_path)

    def save(self, user_id: str, result: TestResult) -> str:
        """Store ``result`` under a freshly assigned id and return the id."""
        self._require_user(user_id)
        result_id = uuid4().hex
        with self._lock:
            collection = self._load_collection(user_id)
            collection[result_id] = _decode_record(_encode_record(result.to_record()))
            self._write_collection(user_id, collection)
        logger.info("Saved test result %s for user %s", result_id, user_id)
        return result_id

    def get(self, user_id: str, result_id: str) -> Optional[TestResult]:
        self._require_user(user_id)
        with self._lock:
            record = self._load_collection(user_id).get(result_id)
        if record is None:
            return None
        result = TestResult.from_record(result_id, record)
        if result is None:
            logger.warning("Stored record %s for user %s could not be parsed", result_id, user_id)
        return result

    def history(self, user_id: str) -> List[TestResult]:
        """All parseable results of ``user_id``, newest first."""
        self._require_user(user_id)
        with self._lock:
            records = list(self._load_collection(user_id).items())

        results: List[TestResult] = []
        for result_id, record in records:
            result = TestResult.from_record(result_id, record)
            if result is None:
                logger.warning("Skipping unparseable record %s for user %s", result_id, user_id)
                continue
            results.append(result)
        results.sort(key=_sort_key, reverse=True)
        return results

    def delete(self, user_id: str, result_id: str) -> bool:
        self._require_user(user_id)
        with self._lock:
            collection = self._load_collection(user_id)
            if collection.pop(result_id, None) is None:
                return False
            self._write_collection(user_id, collection)
        logger.info("Deleted test result %s for user %s", result_id, user_id)
        return True


def _sort_key(result: TestResult) -> datetime:
    test_date = result.test_date
    if test_date.tzinfo is None:
        return test_date.replace(tzinfo=timezone.utc)
    return test_date
