from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol

from floorgraph.core.errors import SaveFailed

logger = logging.getLogger(__name__)

DEFAULT_SAVE_ERROR = "Check the logs for the detailed error!"


class Level(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    level: Level
    message: str


class Notifier(Protocol):
    def notify(self, level: Level, message: str) -> None: ...


@dataclass
class NotificationLog:
    """Keeps user-facing notifications in order and mirrors them to the log."""

    items: List[Notification] = field(default_factory=list)

    def notify(self, level: Level, message: str) -> None:
        level = Level(level)
        self.items.append(Notification(level=level, message=str(message)))
        log_level = {Level.INFO: logging.INFO, Level.WARNING: logging.WARNING, Level.ERROR: logging.ERROR}[level]
        logger.log(log_level, "%s", message)

    @property
    def errors(self) -> List[str]:
        return [n.message for n in self.items if n.level is Level.ERROR]

    def clear(self) -> None:
        self.items.clear()


class PersistenceGateway(Protocol):
    def save(self, path: str, payload: Dict[str, Any]) -> None: ...


class SaveStatus(str, Enum):
    IDLE = "idle"
    SAVING = "saving"
    SAVED = "saved"
    FAILED = "failed"


class SaveDispatcher:
    """Fire-and-forget saves.

    Saves run one at a time on a single worker thread, in submission order.
    A failure is reported through the notifier; the caller's local state is
    never touched.
    """

    def __init__(self, gateway: PersistenceGateway, notifier: Notifier, *, synchronous: bool = False) -> None:
        self.gateway = gateway
        self.notifier = notifier
        self._executor: Optional[ThreadPoolExecutor] = None
        if not synchronous:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="floorgraph-save")
        self._lock = threading.Lock()
        self._pending: List[Future] = []
        self._in_flight = 0
        self.status = SaveStatus.IDLE
        self.failures = 0

    def submit(self, path: str, payload: Dict[str, Any]) -> "Future[bool]":
        with self._lock:
            self._in_flight += 1
            self.status = SaveStatus.SAVING
        if self._executor is None:
            fut: Future = Future()
            fut.set_result(self._run(path, payload))
            return fut
        fut = self._executor.submit(self._run, path, payload)
        with self._lock:
            self._pending = [f for f in self._pending if not f.done()]
            self._pending.append(fut)
        return fut

    def _run(self, path: str, payload: Dict[str, Any]) -> bool:
        ok = False
        try:
            self.gateway.save(path, payload)
            ok = True
        except SaveFailed as exc:
            logger.error("save to %s failed: %s", path, exc)
            self.notifier.notify(Level.ERROR, str(exc) or DEFAULT_SAVE_ERROR)
        except Exception as exc:
            failure = SaveFailed(f"Failed to save {path}: {exc}", path=path)
            logger.error("save to %s failed", path, exc_info=True)
            self.notifier.notify(Level.ERROR, str(failure))
        finally:
            with self._lock:
                self._in_flight -= 1
                if not ok:
                    self.failures += 1
                    self.status = SaveStatus.FAILED
                elif self._in_flight == 0:
                    self.status = SaveStatus.SAVED
        return ok

    def flush(self, timeout: Optional[float] = None) -> bool:
        with self._lock:
            pending = list(self._pending)
        done, not_done = wait(pending, timeout=timeout)
        return not not_done

    def shutdown(self) -> None:
        self.flush()
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
