import json
import logging
from pathlib import Path
from typing import Any, Optional, Protocol

from pydantic import ValidationError

from models import STATUSES, Priority, Status, Task, now_iso

logger = logging.getLogger(__name__)

LEGACY_FILENAME = "tasks.json"
UNMIGRATED_FILENAME = "tasks.unmigrated.json"

_PRIORITIES = {p.value for p in Priority}


class BucketStorage(Protocol):
    """Where the tasks of each status live between requests."""

    def load(self, status: Status) -> list[Task]: ...

    def save(self, status: Status, tasks: list[Task]) -> None: ...


def coerce_task(record: Any, status: Status) -> Optional[Task]:
    """
    Build a Task from a stored record, filling what older records lack.

    The record is pinned to `status`; an unknown or blank priority reads as
    low; a missing `created` is stamped now. Returns None for records that
    still cannot form a task (no id, wrong types).
    """
    if not isinstance(record, dict) or not record.get("id"):
        return None
    record = {
        "text": "",
        "category": "",
        "comment": None,
        "screenshots": [],
        **record,
        "status": status.value,
    }
    if record.get("priority") not in _PRIORITIES:
        record["priority"] = Priority.LOW.value
    if not record.get("created"):
        record["created"] = now_iso()
    if status is Status.DONE:
        record["completed"] = record.get("completed") or record["created"]
    else:
        record["completed"] = None
    try:
        return Task.model_validate(record)
    except ValidationError:
        return None


def parse_bucket(raw: str, status: Status) -> list[Task]:
    """
    Parse a bucket file, falling back to an empty bucket.

    Text that is not a JSON array reads as no tasks at all, so one damaged
    file never takes the whole service down. Inside a readable array, records
    that cannot form a task are skipped one by one; the rest are kept.
    """
    try:
        records = json.loads(raw)
    except ValueError as e:
        logger.warning("Unreadable %s bucket, treating it as empty: %s", status.value, e)
        return []
    if not isinstance(records, list):
        logger.warning("%s bucket does not hold a JSON array, treating it as empty", status.value)
        return []

    tasks = []
    for record in records:
        task = coerce_task(record, status)
        if task is None:
            logger.warning("Skipping unreadable record in %s bucket: %r", status.value, record)
            continue
        tasks.append(task)
    return tasks


def dump_bucket(tasks: list[Task]) -> str:
    return json.dumps([t.model_dump(mode="json") for t in tasks], indent=2)


class JsonBucketStorage:
    """One pretty-printed JSON array per status: open.json, review.json, done.json."""

    def __init__(self, data_dir: str | Path) -> None:
        self.data_dir = Path(data_dir)

    def path_for(self, status: Status) -> Path:
        return self.data_dir / f"{Status(status).value}.json"

    def load(self, status: Status) -> list[Task]:
        path = self.path_for(status)
        if not path.exists():
            return []
        return parse_bucket(path.read_text(encoding="utf-8"), Status(status))

    def save(self, status: Status, tasks: list[Task]) -> None:
        self.path_for(status).write_text(dump_bucket(tasks), encoding="utf-8")


def _legacy_bucket(record: Any) -> Status:
    status = record.get("status") if isinstance(record, dict) else None
    if status == Status.DONE.value:
        return Status.DONE
    if status == Status.REVIEW.value:
        return Status.REVIEW
    return Status.OPEN


def migrate_legacy(data_dir: str | Path) -> bool:
    """
    Split a single-file `tasks.json` store into per-status bucket files.

    Every record that can form a task is migrated. Records that cannot are
    written to `tasks.unmigrated.json` instead of being dropped. Returns True
    when a migration happened. If the legacy file cannot be read or the
    buckets cannot be written, it stays where it is and the error is logged,
    never raised.
    """
    data_dir = Path(data_dir)
    legacy = data_dir / LEGACY_FILENAME
    if not legacy.exists():
        return False

    logger.info("Migrating legacy %s to split files...", legacy.name)
    storage = JsonBucketStorage(data_dir)
    try:
        records = json.loads(legacy.read_text(encoding="utf-8"))
        if not isinstance(records, list):
            raise ValueError(f"{legacy.name} does not hold a JSON array")

        buckets = {status: storage.load(status) for status in STATUSES}
        seen = {t.id for tasks in buckets.values() for t in tasks}
        counts = dict.fromkeys(STATUSES, 0)
        unmigrated = []
        for record in records:
            target = _legacy_bucket(record)
            task = coerce_task(record, target)
            if task is None:
                unmigrated.append(record)
                continue
            if task.id in seen:
                continue
            seen.add(task.id)
            buckets[target].append(task)
            counts[target] += 1

        if unmigrated:
            (data_dir / UNMIGRATED_FILENAME).write_text(json.dumps(unmigrated, indent=2), encoding="utf-8")
            logger.warning("%d legacy records could not be migrated, kept in %s", len(unmigrated), UNMIGRATED_FILENAME)
        for status in STATUSES:
            storage.save(status, buckets[status])
        legacy.unlink()
    except (OSError, ValueError) as e:
        logger.exception("Migration failed, keeping legacy file: %s", e)
        return False

    logger.info(
        "Migrated: %d open, %d review, %d done",
        counts[Status.OPEN], counts[Status.REVIEW], counts[Status.DONE],
    )
    return True


def bootstrap(data_dir: str | Path, screenshots_dir: str | Path) -> None:
    """Create directories, migrate a legacy store, and make sure every bucket file exists."""
    data_dir = Path(data_dir)
    data_dir.mkdir(parents=True, exist_ok=True)
    Path(screenshots_dir).mkdir(parents=True, exist_ok=True)

    migrate_legacy(data_dir)

    storage = JsonBucketStorage(data_dir)
    for status in STATUSES:
        path = storage.path_for(status)
        if not path.exists():
            path.write_text("[]", encoding="utf-8")
