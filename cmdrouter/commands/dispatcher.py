from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from enum import StrEnum

from cmdrouter.commands.guard import GuardAction, PermissionGuard
from cmdrouter.commands.messages import EngineMessages
from cmdrouter.commands.models import CommandEntry, Matched
from cmdrouter.commands.sender import Sender, safe_send

logger = logging.getLogger(__name__)


class DispatchOutcome(StrEnum):
    DENIED = "denied"
    WRONG_SENDER = "wrong_sender"
    COMPLETED = "completed"
    FAILED = "failed"
    SUBMITTED = "submitted"
    REJECTED = "rejected"


class Dispatcher:
    """Runs resolved commands inline or on a dedicated worker pool.

    Handler exceptions never escape ``invoke``: they are logged with their
    traceback and the sender receives one generic error message.
    """

    def __init__(
        self,
        max_workers: int = 4,
        guard: PermissionGuard | None = None,
        messages: EngineMessages | None = None,
    ) -> None:
        self._guard = guard or PermissionGuard()
        self._messages = messages or EngineMessages()
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="cmdrouter-worker"
        )
        self._in_flight: set[Future] = set()
        self._in_flight_lock = threading.Lock()
        self._closed = False

    @property
    def in_flight(self) -> int:
        with self._in_flight_lock:
            return len(self._in_flight)

    @property
    def closed(self) -> bool:
        return self._closed

    def invoke(self, matched: Matched, sender: Sender) -> DispatchOutcome:
        entry = matched.entry

        decision = self._guard.check(sender, entry)
        if decision.action == GuardAction.DENY:
            safe_send(sender, self._messages.permission_denied)
            return DispatchOutcome.DENIED
        if decision.action == GuardAction.WRONG_SENDER:
            safe_send(sender, self._messages.wrong_sender)
            return DispatchOutcome.WRONG_SENDER

        if self._closed:
            logger.warning("Dispatcher is shut down, refusing %s", entry.path)
            safe_send(sender, self._messages.handler_error)
            return DispatchOutcome.REJECTED

        args = list(matched.remaining_args)
        if not entry.descriptor.is_async:
            ok = self._run(entry, sender, args, matched.label)
            return DispatchOutcome.COMPLETED if ok else DispatchOutcome.FAILED

        try:
            future = self._executor.submit(self._run, entry, sender, args, matched.label)
        except RuntimeError:
            logger.warning("Worker pool unavailable, refusing %s", entry.path)
            safe_send(sender, self._messages.handler_error)
            return DispatchOutcome.REJECTED
        self._track(future)
        return DispatchOutcome.SUBMITTED

    def _run(self, entry: CommandEntry, sender: Sender, args: list[str], label: str) -> bool:
        try:
            entry.binding.invoke(sender, args, label)
            return True
        except Exception:
            logger.exception(
                "Command '%s' (%s) failed for sender %s",
                entry.path,
                entry.binding.name,
                getattr(sender, "name", "?"),
            )
            safe_send(sender, self._messages.handler_error)
            return False

    def _track(self, future: Future) -> None:
        with self._in_flight_lock:
            self._in_flight.add(future)
        future.add_done_callback(self._discard)

    def _discard(self, future: Future) -> None:
        with self._in_flight_lock:
            self._in_flight.discard(future)

    def wait_for_in_flight(self, timeout: float = 30.0) -> bool:
        """Wait for running async commands. Returns True if all finished."""
        with self._in_flight_lock:
            pending = set(self._in_flight)
        if not pending:
            return True
        logger.info("Waiting for %d in-flight commands (timeout=%.1fs)", len(pending), timeout)
        _, not_done = wait(pending, timeout=timeout)
        if not_done:
            logger.warning("%d commands still running after timeout", len(not_done))
        return not not_done

    def shutdown(self, wait: bool = False) -> None:
        """Stop accepting invocations. Running async commands are not cancelled."""
        self._closed = True
        self._executor.shutdown(wait=wait, cancel_futures=False)
        logger.info("Dispatcher shut down")
