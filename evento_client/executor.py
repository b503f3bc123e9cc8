"""Background asyncio runner that hands results back to the UI thread."""

from __future__ import annotations

import asyncio
import concurrent.futures
import datetime as _dt
import enum
import functools
import logging
import threading
from typing import Any, Awaitable, Callable, Coroutine, Union

logger = logging.getLogger(__name__)

Dispatch = Callable[[Callable[[], Any]], Any]
Interval = Union[float, int, _dt.timedelta]


class TimerFlag(enum.IntFlag):
    """Strategy of a repeating task; exactly two flags must be combined."""

    IMMEDIATE = 1
    DELAY = 1 << 1
    ONCE = 1 << 2
    PERIODIC = 1 << 3


def _validate_flag(flag: int) -> TimerFlag:
    flag = TimerFlag(flag)
    if bin(int(flag)).count("1") != 2:
        raise ValueError("exactly two timer flags must be combined")
    if TimerFlag.IMMEDIATE in flag and TimerFlag.DELAY in flag:
        raise ValueError("IMMEDIATE and DELAY cannot be combined")
    if TimerFlag.PERIODIC in flag and TimerFlag.ONCE in flag:
        raise ValueError("PERIODIC and ONCE cannot be combined")
    return flag


def _seconds(interval: Interval) -> float:
    if isinstance(interval, _dt.timedelta):
        return interval.total_seconds()
    return float(interval)


class AsyncExecutor:
    """Runs coroutines on a private event loop in a worker thread.

    Completion callbacks are passed to ``dispatch``, which is expected to run
    them on the caller's main thread. A coroutine that returns ``None`` has
    its callback called with no arguments; otherwise the result is passed.
    Failures are logged and the callback is skipped.
    """

    def __init__(self, dispatch: Dispatch | None = None) -> None:
        self._dispatch: Dispatch = dispatch if dispatch is not None else (lambda fn: fn())
        self._loop = asyncio.new_event_loop()
        self._handles: set[asyncio.TimerHandle] = set()
        self._closed = False
        self._lock = threading.Lock()
        self._thread = threading.Thread(target=self._run, name="async-executor", daemon=True)
        self._thread.start()

    def _run(self) -> None:
        asyncio.set_event_loop(self._loop)
        try:
            self._loop.run_forever()
        finally:
            pending = asyncio.all_tasks(self._loop)
            for task in pending:
                task.cancel()
            if pending:
                self._loop.run_until_complete(
                    asyncio.gather(*pending, return_exceptions=True)
                )
            self._loop.close()

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("executor is closed")

    def _report(self, future: Any, callback: Callable[..., Any]) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.error("%s", exc)
            return
        value = future.result()
        if value is None:
            self._dispatch(callback)
        else:
            self._dispatch(functools.partial(callback, value))

    def execute(self, coro: Coroutine[Any, Any, Any], callback: Callable[..., Any]) -> None:
        """Run ``coro`` in the background and dispatch ``callback`` with its result."""
        with self._lock:
            if self._closed:
                coro.close()
                raise RuntimeError("executor is closed")
            future: concurrent.futures.Future[Any] = asyncio.run_coroutine_threadsafe(
                coro, self._loop
            )
        future.add_done_callback(lambda done: self._report(done, callback))

    def execute_repeating(
        self,
        func: Callable[[], Awaitable[Any]],
        callback: Callable[..., Any],
        interval: Interval,
        flag: int = TimerFlag.PERIODIC | TimerFlag.IMMEDIATE,
    ) -> None:
        """Run ``func()`` according to ``flag``, dispatching ``callback`` after each run.

        IMMEDIATE runs it now, DELAY waits ``interval`` first; ONCE runs it a
        single time, PERIODIC repeats every ``interval``.
        """
        flag = _validate_flag(flag)
        self._check_open()
        seconds = _seconds(interval)
        if TimerFlag.IMMEDIATE in flag:
            self.execute(func(), callback)
        if TimerFlag.PERIODIC in flag or TimerFlag.DELAY in flag:
            with self._lock:
                self._check_open()
                self._loop.call_soon_threadsafe(
                    self._arm, func, callback, seconds, TimerFlag.PERIODIC in flag
                )

    def _arm(
        self,
        func: Callable[[], Awaitable[Any]],
        callback: Callable[..., Any],
        seconds: float,
        periodic: bool,
    ) -> None:
        if self._closed:
            return
        handle: asyncio.TimerHandle | None = None

        def fire() -> None:
            self._handles.discard(handle)  # type: ignore[arg-type]
            task = asyncio.ensure_future(func(), loop=self._loop)
            task.add_done_callback(lambda done: self._report(done, callback))
            if periodic:
                self._arm(func, callback, seconds, periodic)

        handle = self._loop.call_later(seconds, fire)
        self._handles.add(handle)

    def _shutdown(self) -> None:
        for handle in self._handles:
            handle.cancel()
        self._handles.clear()
        self._loop.stop()

    def close(self) -> None:
        """Stop the loop, cancel timers and pending work, and join the thread."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._loop.call_soon_threadsafe(self._shutdown)
        if self._thread is not threading.current_thread():
            self._thread.join()

    def __enter__(self) -> AsyncExecutor:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


_instance: AsyncExecutor | None = None
_instance_lock = threading.Lock()


def executor() -> AsyncExecutor:
    """Return the process-wide executor, creating it on first use."""
    global _instance
    with _instance_lock:
        if _instance is None:
            _instance = AsyncExecutor()
        return _instance