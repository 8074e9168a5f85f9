from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from models import STATUSES, Status, Task, new_task_id, now_iso
from screenshots import ScreenshotStore
from storage import BucketStorage
from tags import parse_tags

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("text", "category", "priority", "comment")


class TaskRepository:
    """
    Task lifecycle on top of per-status buckets.

    Every call reads the buckets it needs from storage and writes whole
    buckets back; nothing is cached between calls. A task lives in exactly
    the bucket matching its status, newest first.
    """

    def __init__(self, storage: BucketStorage, screenshots: ScreenshotStore) -> None:
        self.storage = storage
        self.screenshots = screenshots

    def list(self, status: Optional[Status] = None) -> list[Task]:
        if status is not None:
            return self.storage.load(status)
        tasks = []
        for bucket in STATUSES:
            tasks.extend(self.storage.load(bucket))
        return tasks

    def _locate(self, task_id: str) -> Optional[tuple[Task, Status, list[Task]]]:
        for status in STATUSES:
            tasks = self.storage.load(status)
            for task in tasks:
                if task.id == task_id:
                    return task, status, tasks
        return None

    def find(self, task_id: str) -> Optional[Task]:
        found = self._locate(task_id)
        return found[0] if found else None

    def _fresh_id(self, taken: set[str]) -> str:
        task_id = new_task_id()
        while task_id in taken:
            task_id = new_task_id()
        taken.add(task_id)
        return task_id

    def _taken_ids(self) -> set[str]:
        return {t.id for t in self.list()}

    def create(
        self,
        text: str,
        category: Optional[str] = None,
        priority: Optional[str] = None,
        screenshots: Optional[Iterable[str]] = None,
    ) -> Task:
        parsed = parse_tags(text)
        task_id = self._fresh_id(self._taken_ids())

        saved: list[str] = []
        try:
            for index, data in enumerate(screenshots or []):
                saved.append(self.screenshots.save(task_id, index, data))
        except ValueError:
            for filename in saved:
                self.screenshots.delete(filename)
            raise

        task = Task(
            id=task_id,
            text=parsed.text or text,
            category=category or parsed.category,
            priority=priority or parsed.priority,
            status=Status.OPEN,
            screenshots=saved,
            created=now_iso(),
        )
        tasks = self.storage.load(Status.OPEN)
        tasks.insert(0, task)
        self.storage.save(Status.OPEN, tasks)
        logger.debug("Created task %s", task.id)
        return task

    def create_batch(self, lines: Iterable[str]) -> list[Task]:
        taken = self._taken_ids()
        created = []
        for entry in lines:
            for line in entry.splitlines():
                line = line.strip()
                if not line:
                    continue
                parsed = parse_tags(line)
                created.append(Task(
                    id=self._fresh_id(taken),
                    text=parsed.text,
                    category=parsed.category,
                    priority=parsed.priority,
                    status=Status.OPEN,
                    created=now_iso(),
                ))

        tasks = self.storage.load(Status.OPEN)
        self.storage.save(Status.OPEN, created + tasks)
        logger.debug("Created %d tasks in batch", len(created))
        return created

    def update(self, task_id: str, changes: dict[str, Any]) -> Optional[Task]:
        """
        Apply the fields present in `changes`. A status change moves the task
        to the front of its new bucket and sets or clears `completed`.
        """
        found = self._locate(task_id)
        if found is None:
            return None
        task, source, source_tasks = found

        for field in UPDATABLE_FIELDS:
            if field in changes:
                setattr(task, field, changes[field])

        if "status" in changes and Status(changes["status"]) != task.status:
            target = Status(changes["status"])
            task.status = target
            task.completed = now_iso() if target is Status.DONE else None

            source_tasks.remove(task)
            self.storage.save(source, source_tasks)

            dest_tasks = self.storage.load(target)
            dest_tasks.insert(0, task)
            self.storage.save(target, dest_tasks)
            logger.info("Moved task %s from %s to %s", task.id, source.value, target.value)
            return task

        self.storage.save(source, source_tasks)
        return task

    def attach_screenshot(self, task_id: str, data: str) -> Optional[Task]:
        found = self._locate(task_id)
        if found is None:
            return None
        task, status, tasks = found
        filename = self.screenshots.save(task.id, len(task.screenshots), data)
        task.screenshots.append(filename)
        self.storage.save(status, tasks)
        return task

    def delete(self, task_id: str) -> bool:
        found = self._locate(task_id)
        if found is None:
            return False
        task, status, tasks = found
        for filename in task.screenshots:
            self.screenshots.delete(filename)
        tasks.remove(task)
        self.storage.save(status, tasks)
        logger.info("Deleted task %s", task.id)
        return True
