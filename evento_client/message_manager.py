"""Toast messages with timed show, hide and removal."""

from __future__ import annotations

import dataclasses
import datetime as _dt
import enum
import threading
from typing import Callable, Union

from evento_client.views import log_general, log_message_operation

Schedule = Callable[[float, Callable[[], None]], object]
Timeout = Union[float, int, _dt.timedelta]

ANIMATION_LENGTH = 0.2
_SHOW_DELAY = 0.001


class MessageType(enum.Enum):
    """Kind of message, deciding how a toast is styled."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclasses.dataclass(frozen=True)
class MessageData:
    """Content shown by a toast."""

    content: str
    type: MessageType = MessageType.INFO


@dataclasses.dataclass(frozen=True)
class ToastData:
    """One toast instance; elevation 0 means not yet shown."""

    id: int
    elevation: int = 0
    removed: bool = False


def _timer_schedule(delay: float, func: Callable[[], None]) -> threading.Timer:
    timer = threading.Timer(delay, func)
    timer.daemon = True
    timer.start()
    return timer


class MessageManager:
    """Keeps the toast list and drives each toast through its life cycle.

    A toast is created invisible, shown shortly after, marked removed when
    hidden, and deleted once the hide animation has finished. ``schedule``
    runs a function after a delay in seconds.
    """

    log_origin = "MessageManager"

    def __init__(self, schedule: Schedule | None = None) -> None:
        self._schedule: Schedule = schedule if schedule is not None else _timer_schedule
        self._next_id = 0
        self._toasts: list[ToastData] = []
        self._messages: dict[int, MessageData] = {}

    @property
    def toast_list(self) -> tuple[ToastData, ...]:
        """Current toast instances, in creation order."""
        return tuple(self._toasts)

    def show_message(
        self,
        content: str,
        type: MessageType = MessageType.INFO,
        timeout: Timeout = 3.0,
    ) -> int:
        """Show a message and hide it after ``timeout``; return its id."""
        if isinstance(timeout, _dt.timedelta):
            timeout = timeout.total_seconds()
        message_id = self._next_id
        self._next_id += 1

        log_general(self.log_origin, f'new message [{message_id}] content = "{content}"')
        self._new_toast(message_id, MessageData(content, type))
        self._schedule(float(timeout) + ANIMATION_LENGTH, lambda: self.hide_message(message_id))
        return message_id

    def hide_message(self, message_id: int) -> None:
        """Hide a message unless it is already hidden or deleted."""
        index = self._index(message_id)
        if index is not None and not self._toasts[index].removed:
            self._hide_toast(message_id)
        else:
            log_message_operation(
                self.log_origin,
                message_id,
                "scheduled hide cancelled: already hidden or deleted",
            )

    def get_message(self, message_id: int) -> MessageData:
        """Return the data of a live message; raises KeyError once deleted."""
        return self._messages[message_id]

    def _index(self, message_id: int) -> int | None:
        return next(
            (pos for pos, toast in enumerate(self._toasts) if toast.id == message_id), None
        )

    def _update(self, message_id: int, **changes: object) -> None:
        index = self._index(message_id)
        if index is not None:
            self._toasts[index] = dataclasses.replace(self._toasts[index], **changes)

    def _new_toast(self, message_id: int, data: MessageData) -> None:
        self._messages[message_id] = data
        self._toasts.append(ToastData(message_id))
        log_message_operation(self.log_origin, message_id, "instantiate toast, data added")
        # A short delay lets the appearance animate.
        self._schedule(_SHOW_DELAY, lambda: self._show_toast(message_id))

    def _show_toast(self, message_id: int) -> None:
        if self._index(message_id) is None:
            return
        log_message_operation(self.log_origin, message_id, "show")
        self._toasts = [
            dataclasses.replace(toast, elevation=toast.elevation + 1) for toast in self._toasts
        ]

    def _hide_toast(self, message_id: int) -> None:
        self._update(message_id, removed=True)
        log_message_operation(self.log_origin, message_id, "hide")
        self._schedule(ANIMATION_LENGTH, lambda: self._delete_toast(message_id))

    def _delete_toast(self, message_id: int) -> None:
        index = self._index(message_id)
        if index is None:
            return
        removed_elevation = self._toasts[index].elevation
        self._toasts = [
            dataclasses.replace(toast, elevation=toast.elevation - 1)
            if toast.elevation > removed_elevation
            else toast
            for toast in self._toasts
            if toast.id != message_id
        ]
        self._messages.pop(message_id, None)
        log_general(self.log_origin, f"delete message [{message_id}]")