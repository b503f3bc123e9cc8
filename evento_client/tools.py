"""Small helpers: timestamp parsing, week boundaries, image sniffing, browser launch."""

from __future__ import annotations

import datetime as _dt
import logging
import re
import subprocess
import sys
import threading

logger = logging.getLogger(__name__)

_INT = r"\s*([+-]?\d{1,4})"
_INT2 = r"\s*([+-]?\d{1,2})"
_FLOAT = r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)"

_ISO_PATTERN = re.compile(f"{_INT}-{_INT2}-{_INT2}T{_INT2}:{_INT2}:{_FLOAT}")
_V1_PATTERN = re.compile(f"{_INT}-{_INT2}-{_INT2}\\s*{_INT2}:{_INT2}:{_FLOAT}")

_EPOCH_ORDINAL = _dt.date(1970, 1, 1).toordinal()


def parse_iso8601_utc(date: str, api_v1: bool = False) -> int:
    """Parse a UTC timestamp into seconds since the epoch.

    The default form is ``YYYY-MM-DDTHH:MM:SS[.fff]Z``; with ``api_v1`` it is
    ``YYYY-MM-DD HH:MM:SS``. Out-of-range fields are normalised.
    """
    match = (_V1_PATTERN if api_v1 else _ISO_PATTERN).match(date)
    if match is None:
        raise ValueError(f"not a valid timestamp: {date!r}")
    year, month, day, hour, minute = (int(part) for part in match.groups()[:5])
    seconds = int(float(match.group(6)))

    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    try:
        first_of_month = _dt.date(year, month, 1).toordinal()
    except ValueError as exc:
        raise ValueError(f"not a valid timestamp: {date!r}") from exc
    days = first_of_month - _EPOCH_ORDINAL + day - 1
    return days * 86400 + hour * 3600 + minute * 60 + seconds


def first_datetime_of_week(now: _dt.datetime | None = None) -> str:
    """Return midnight (UTC) of the Monday of the week containing ``now``."""
    if now is None:
        now = _dt.datetime.now(_dt.timezone.utc)
    elif now.tzinfo is not None:
        now = now.astimezone(_dt.timezone.utc)
    monday = now.date() - _dt.timedelta(days=now.weekday())
    return f"{monday.year:04d}-{monday.month:02d}-{monday.day:02d}T00:00:00.000Z"


def guess_image_ext(data: bytes) -> str:
    """Guess an image file extension from its leading bytes."""
    head = bytes(data[:4]).ljust(4, b"\0")
    if head.startswith(b"\xff\xd8\xff"):
        return "jpg"
    if head.startswith(b"\x89PNG"):
        return "png"
    if head.startswith(b"GIF"):
        return "gif"
    if head.startswith(b"BM"):
        return "bmp"
    return "unknown"


def browser_command(url: str, platform: str | None = None) -> list[str]:
    """Return the command line that opens ``url`` in the default browser."""
    platform = sys.platform if platform is None else platform
    if platform.startswith("linux"):
        return ["xdg-open", url]
    if platform in ("win32", "cygwin"):
        return ["cmd", "/c", "start", "", url]
    if platform == "darwin":
        return ["open", url]
    raise OSError(f"unsupported platform: {platform}")


def open_browser(url: str) -> threading.Thread:
    """Open ``url`` in the default browser from a background thread."""
    command = browser_command(url)

    def _run() -> None:
        try:
            result = subprocess.run(command, check=False)
        except OSError as exc:
            logger.error("Failed to open browser: %s", exc)
            return
        if result.returncode:
            logger.error("Failed to open browser, error code: %s", result.returncode)

    thread = threading.Thread(target=_run, daemon=True)
    thread.start()
    return thread