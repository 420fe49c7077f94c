"""Non-blocking notifications.

A notification is scheduled after the triggering transaction has committed.
Its outcome never changes the caller's result, but every outcome is logged and
kept in ``recent_outcomes`` so it stays observable.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Coroutine
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger(__name__)
_PENDING_TASKS: set[asyncio.Task[Any]] = set()


@dataclass(frozen=True)
class NotificationOutcome:
    name: str
    ok: bool
    error: str | None
    finished_at: datetime


recent_outcomes: deque[NotificationOutcome] = deque(maxlen=200)


def _record(name: str, error: BaseException | None) -> None:
    outcome = NotificationOutcome(
        name=name,
        ok=error is None,
        error=None if error is None else f"{type(error).__name__}: {error}",
        finished_at=datetime.now(timezone.utc),
    )
    recent_outcomes.append(outcome)
    if error is None:
        logger.info("Notification delivered: %s", name)
    else:
        logger.warning("Notification failed: %s (%s)", name, outcome.error)


def notify(coro: Coroutine[Any, Any, Any], *, name: str) -> asyncio.Task[Any] | None:
    """Schedule a best-effort notification and record how it ended."""
    try:
        task = asyncio.create_task(coro, name=name)
    except RuntimeError:
        # No running loop (e.g. during shutdown).
        coro.close()
        _record(name, RuntimeError("no running event loop"))
        return None
    _PENDING_TASKS.add(task)

    def _on_done(done_task: asyncio.Task[Any]) -> None:
        _PENDING_TASKS.discard(done_task)
        if done_task.cancelled():
            _record(name, asyncio.CancelledError("cancelled"))
            return
        _record(name, done_task.exception())

    task.add_done_callback(_on_done)
    return task


async def drain_background_tasks(timeout_seconds: float = 1.0) -> None:
    """Wait for in-flight notifications to finish.

    Used on shutdown and by tests to avoid teardown races.
    """
    pending = {task for task in _PENDING_TASKS if not task.done()}
    if not pending:
        return

    _, still_pending = await asyncio.wait(pending, timeout=timeout_seconds)
    for task in still_pending:
        task.cancel()

    if still_pending:
        await asyncio.gather(*still_pending, return_exceptions=True)
