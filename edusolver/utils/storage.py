"""
Local persistence for scan history and user preferences.

LocalStorage is a small SQLite-backed key/value store holding JSON
strings under fixed keys. Scans live as one JSON array under SCANS_KEY,
preferences as one JSON object under PREFS_KEY.
"""

import base64
import binascii
import json
import logging
import re
import sqlite3
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Type, TypeVar

from ..models import (
    AppMode,
    EducationLevel,
    ExplanationStyle,
    Scan,
    Subject,
    UserPreferences,
    new_scan_id,
    now_ms,
)
from .config import DEFAULT_DATA_DIR
from .errors import StorageError, ScanNotFoundError

logger = logging.getLogger(__name__)

SCANS_KEY = "edu_solver_scans"
PREFS_KEY = "edu_solver_prefs"
DEFAULT_HISTORY_LIMIT = 50
# 9999-12-31T23:59:59.999Z
MAX_TIMESTAMP_MS = 253402300799999

_DATA_URL_PREFIX = re.compile(r"^data:image/(png|jpeg|jpg|webp);base64,")

E = TypeVar("E")

# One lock per database file, shared by every LocalStorage opened on it
_PATH_LOCKS: Dict[str, threading.RLock] = {}
_PATH_LOCKS_GUARD = threading.Lock()


def _lock_for(path: Path) -> threading.RLock:
    key = str(Path(path).resolve())
    with _PATH_LOCKS_GUARD:
        return _PATH_LOCKS.setdefault(key, threading.RLock())


class LocalStorage:
    """
    SQLite key/value store with string values.

    Usage:
        storage = LocalStorage(path)
        storage.set_item("key", json.dumps(value))
        raw = storage.get_item("key")
    """

    DEFAULT_PATH = DEFAULT_DATA_DIR / "storage.db"

    def __init__(self, db_path: Optional[Path] = None):
        """
        Initialize database connection.

        Args:
            db_path: Path to SQLite database file. Uses default if None.
        """
        self.db_path = db_path or self.DEFAULT_PATH
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.lock = _lock_for(self.db_path)
        self._init_db()

    def _init_db(self):
        """Create the table if it doesn't exist."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS local_storage (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)
            conn.commit()

    def get_item(self, key: str) -> Optional[str]:
        """Return the stored string, or None if the key is absent."""
        try:
            with sqlite3.connect(self.db_path) as conn:
                row = conn.execute(
                    "SELECT value FROM local_storage WHERE key = ?", (key,)
                ).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to read '{key}'", technical_details=str(e))
        return row[0] if row else None

    def set_item(self, key: str, value: str) -> None:
        """Insert or replace the value stored under key."""
        try:
            with sqlite3.connect(self.db_path) as conn:
                conn.execute(
                    """
                    INSERT INTO local_storage (key, value) VALUES (?, ?)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """,
                    (key, value),
                )
                conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to write '{key}'", technical_details=str(e))

    def remove_item(self, key: str) -> bool:
        """Delete a key. Returns True if it existed."""
        try:
            with sqlite3.connect(self.db_path) as conn:
                cursor = conn.execute("DELETE FROM local_storage WHERE key = ?", (key,))
                conn.commit()
                return cursor.rowcount > 0
        except sqlite3.Error as e:
            raise StorageError(f"Failed to remove '{key}'", technical_details=str(e))

    def keys(self) -> List[str]:
        with sqlite3.connect(self.db_path) as conn:
            return [row[0] for row in conn.execute("SELECT key FROM local_storage")]


# === Record conversion ===


def encode_image(data: bytes) -> str:
    """JPEG bytes -> data URL, the on-disk image format."""
    return "data:image/jpeg;base64," + base64.b64encode(data).decode("ascii")


def decode_image(value: str) -> bytes:
    """
    Data URL (or bare base64) -> bytes.

    Raises:
        ValueError: If the payload is not valid base64.
    """
    payload = _DATA_URL_PREFIX.sub("", value.strip())
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid image data: {e}")


def _parse_enum(enum_cls: Type[E], value: Any, default: E) -> E:
    """Look up an enum by stored value, falling back to default."""
    if value is None or value == "":
        return default
    try:
        return enum_cls(value)
    except ValueError:
        logger.warning("Unknown %s value %r, using %s", enum_cls.__name__, value, default)
        return default


def _is_valid_timestamp(value: Any) -> bool:
    """Epoch milliseconds that a datetime can represent. NaN and infinities fail."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return 0 <= value <= MAX_TIMESTAMP_MS


def scan_to_record(scan: Scan) -> Dict[str, Any]:
    """Serialize a Scan to its JSON record."""
    record: Dict[str, Any] = {
        "id": scan.id,
        "timestamp": scan.timestamp,
        "mode": scan.mode.value,
        "images": [encode_image(img) for img in scan.images],
        "textInputs": list(scan.text_inputs),
        "explanationStyle": scan.explanation_style.value,
        "educationLevel": scan.education_level.value,
        "subject": scan.subject.value,
        "loading": scan.loading,
    }
    # Optional fields are omitted rather than written as null
    if scan.custom_subject is not None:
        record["customSubject"] = scan.custom_subject
    if scan.question_count is not None:
        record["questionCount"] = scan.question_count
    if scan.solution is not None:
        record["solution"] = scan.solution
    if scan.error is not None:
        record["error"] = scan.error
    return record


def record_to_scan(item: Dict[str, Any]) -> Scan:
    """
    Deserialize a JSON record, migrating older record shapes.

    - legacy single "imageUrl" becomes a one-element image list
    - missing id/timestamp are generated
    - missing or unknown level/subject/style/mode fall back to defaults
    - undecodable images are dropped
    """
    raw_images: List[Any] = []
    if isinstance(item.get("images"), list):
        raw_images = item["images"]
    elif isinstance(item.get("imageUrl"), str):
        raw_images = [item["imageUrl"]]

    images: List[bytes] = []
    for raw in raw_images:
        if not isinstance(raw, str):
            continue
        try:
            images.append(decode_image(raw))
        except ValueError:
            logger.warning("Dropping undecodable image in scan %s", item.get("id"))

    texts = item.get("textInputs") or []
    if not isinstance(texts, list):
        texts = []

    timestamp = item.get("timestamp")
    if not _is_valid_timestamp(timestamp):
        timestamp = now_ms()

    question_count = item.get("questionCount")
    if not isinstance(question_count, int) or isinstance(question_count, bool):
        question_count = None

    custom_subject = item.get("customSubject")
    if not isinstance(custom_subject, str) or not custom_subject:
        custom_subject = None

    return Scan(
        id=str(item.get("id") or new_scan_id()),
        timestamp=int(timestamp),
        images=images,
        text_inputs=[str(t) for t in texts],
        explanation_style=_parse_enum(
            ExplanationStyle, item.get("explanationStyle"), ExplanationStyle.DETAILED
        ),
        education_level=_parse_enum(
            EducationLevel, item.get("educationLevel"), EducationLevel.AUTO
        ),
        subject=_parse_enum(Subject, item.get("subject"), Subject.AUTO),
        custom_subject=custom_subject,
        mode=_parse_enum(AppMode, item.get("mode"), AppMode.STUDENT),
        question_count=question_count,
        loading=bool(item.get("loading", False)),
        solution=item.get("solution"),
        error=item.get("error"),
    )


# === Stores ===


class HistoryDatabase:
    """
    Scan history kept as a JSON array, newest first.

    Usage:
        db = HistoryDatabase(LocalStorage(path))
        db.save_scan(scan)
        scans = db.get_scans()
    """

    def __init__(self, storage: LocalStorage, limit: int = DEFAULT_HISTORY_LIMIT):
        self.storage = storage
        self.limit = limit

    def _load_records(self) -> List[Dict[str, Any]]:
        """Raw records; a corrupted array is discarded."""
        stored = self.storage.get_item(SCANS_KEY)
        if not stored:
            return []

        try:
            parsed = json.loads(stored)
        except json.JSONDecodeError as e:
            logger.error("Scan history is corrupted, discarding it: %s", e)
            self.storage.remove_item(SCANS_KEY)
            return []

        if not isinstance(parsed, list):
            logger.warning("Scan history is not a list, ignoring it")
            return []

        return [item for item in parsed if isinstance(item, dict)]

    def _write(self, scans: List[Scan]) -> None:
        payload = json.dumps([scan_to_record(s) for s in scans])
        self.storage.set_item(SCANS_KEY, payload)

    def get_scans(self) -> List[Scan]:
        """All scans, newest first, migrated to the current shape."""
        with self.storage.lock:
            records = self._load_records()
            scans = [record_to_scan(item) for item in records]
            if any(not item.get("id") for item in records):
                # Legacy records get their generated ids written back once
                logger.info("Migrating %d legacy scan record(s)", len(records))
                self._write(scans)
            return scans

    def get_scan(self, scan_id: str) -> Scan:
        """
        Look up one scan.

        Raises:
            ScanNotFoundError: If no scan has this id.
        """
        for scan in self.get_scans():
            if scan.id == scan_id:
                return scan
        raise ScanNotFoundError(scan_id)

    def save_scan(self, scan: Scan) -> None:
        """
        Prepend a scan, keeping at most `limit` entries.

        If the full list cannot be written, only the new scan is kept.
        """
        with self.storage.lock:
            scans = [scan] + [s for s in self.get_scans() if s.id != scan.id]
            try:
                self._write(scans[: self.limit])
            except StorageError as e:
                logger.error("Failed to save history, keeping only the new scan: %s", e)
                self._write([scan])

    def update_scan(
        self,
        scan_id: str,
        *,
        solution: Optional[str] = None,
        error: Optional[str] = None,
        loading: Optional[bool] = None,
    ) -> bool:
        """
        Attach a result to a stored scan.

        Called from the solve worker thread while the GUI thread may be
        saving or deleting other scans; the storage lock serializes them.

        Returns:
            True if the scan was found and written
        """
        with self.storage.lock:
            scans = self.get_scans()
            for scan in scans:
                if scan.id == scan_id:
                    if solution is not None:
                        scan.solution = solution
                    if error is not None:
                        scan.error = error
                    if loading is not None:
                        scan.loading = loading
                    self._write(scans)
                    return True
            return False

    def delete_scan(self, scan_id: str) -> bool:
        """Delete a scan by ID."""
        with self.storage.lock:
            scans = self.get_scans()
            remaining = [s for s in scans if s.id != scan_id]
            if len(remaining) == len(scans):
                return False
            self._write(remaining)
            return True

    def clear_all(self) -> int:
        """Clear all history. Returns number of scans deleted."""
        with self.storage.lock:
            count = len(self._load_records())
            self.storage.remove_item(SCANS_KEY)
            return count

    def get_stats(self) -> dict:
        """Get statistics about the saved history."""
        scans = self.get_scans()
        by_subject: Dict[str, int] = {}
        for scan in scans:
            by_subject[scan.display_subject] = by_subject.get(scan.display_subject, 0) + 1

        return {
            "total_entries": len(scans),
            "failed": sum(1 for s in scans if s.error),
            "pending": sum(1 for s in scans if s.loading),
            "by_subject": by_subject,
        }


class PreferenceStore:
    """Last-selected level and subject."""

    def __init__(self, storage: LocalStorage):
        self.storage = storage

    def load(self) -> UserPreferences:
        """Stored preferences, or defaults if missing or unreadable."""
        stored = self.storage.get_item(PREFS_KEY)
        if not stored:
            return UserPreferences()

        try:
            data = json.loads(stored)
        except json.JSONDecodeError as e:
            logger.warning("Preferences are corrupted, using defaults: %s", e)
            return UserPreferences()

        if not isinstance(data, dict):
            return UserPreferences()

        custom = data.get("customSubject")
        return UserPreferences(
            level=_parse_enum(EducationLevel, data.get("level"), EducationLevel.AUTO),
            subject=_parse_enum(Subject, data.get("subject"), Subject.AUTO),
            custom_subject=custom if isinstance(custom, str) else "",
        )

    def save(self, prefs: UserPreferences) -> None:
        self.storage.set_item(
            PREFS_KEY,
            json.dumps(
                {
                    "level": prefs.level.value,
                    "subject": prefs.subject.value,
                    "customSubject": prefs.custom_subject,
                }
            ),
        )
