"""
Post-commit queue - follow-up work deferred until after an action commits.

Tasks are deduplicated and drained in insertion order, right before the
next action or observable read, so they always run against the freshest
state.
"""
from enum import Enum


class PostCommitTask(str, Enum):
    RECONCILE_ACHIEVEMENTS = "reconcile_achievements"
    CHECK_BADGES = "check_badges"


class PostCommitQueue:
    def __init__(self):
        self._pending: list[PostCommitTask] = []

    def enqueue(self, task: PostCommitTask) -> None:
        if task not in self._pending:
            self._pending.append(task)

    def drain(self) -> list[PostCommitTask]:
        tasks, self._pending = self._pending, []
        return tasks

    def __len__(self) -> int:
        return len(self._pending)

    def __contains__(self, task: PostCommitTask) -> bool:
        return task in self._pending
