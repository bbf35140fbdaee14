"""
User-facing notifications (toasts) emitted by the canvas store.

Every notification is also written through SmartLogger so headless runs keep
a trace of what the user would have seen.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Deque, List, Optional, TypeVar

from discovery_api.platform.observability.smart_logger import SmartLogger

T = TypeVar("T")


class NotificationLevel(str, Enum):
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"


_LOG_LEVELS = {
    NotificationLevel.LOADING: "DEBUG",
    NotificationLevel.SUCCESS: "INFO",
    NotificationLevel.WARNING: "WARNING",
    NotificationLevel.ERROR: "ERROR",
}


@dataclass(frozen=True)
class Notification:
    level: NotificationLevel
    message: str


class Notifier:
    def __init__(
        self,
        max_recent: int = 50,
        sink: Optional[Callable[[Notification], None]] = None,
    ):
        self._recent: Deque[Notification] = deque(maxlen=max_recent)
        self._sink = sink

    @property
    def recent(self) -> List[Notification]:
        return list(self._recent)

    def messages(self, level: Optional[NotificationLevel] = None) -> List[str]:
        return [n.message for n in self._recent if level is None or n.level == level]

    def clear(self) -> None:
        self._recent.clear()

    def notify(self, level: NotificationLevel, message: str, *, params: Optional[dict] = None) -> Notification:
        notification = Notification(NotificationLevel(level), message)
        self._recent.append(notification)
        SmartLogger.log(
            _LOG_LEVELS[notification.level],
            message,
            category=f"canvas.notify.{notification.level.value}",
            params=params,
        )
        if self._sink is not None:
            self._sink(notification)
        return notification

    def loading(self, message: str, **kwargs: Any) -> Notification:
        return self.notify(NotificationLevel.LOADING, message, **kwargs)

    def success(self, message: str, **kwargs: Any) -> Notification:
        return self.notify(NotificationLevel.SUCCESS, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> Notification:
        return self.notify(NotificationLevel.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> Notification:
        return self.notify(NotificationLevel.ERROR, message, **kwargs)

    async def track(
        self,
        awaitable: Awaitable[T],
        *,
        loading: str,
        success: str,
        error: str,
    ) -> T:
        """
        Loading toast, then success or error toast depending on the outcome.
        The awaitable's exception is re-raised after the error toast.
        """
        self.loading(loading)
        try:
            result = await awaitable
        except Exception as e:
            self.error(error, params={"error": {"type": type(e).__name__, "message": str(e)}})
            raise
        self.success(success)
        return result
