"""Turn service entities into the records the user interface displays."""

from __future__ import annotations

import dataclasses
import datetime as _dt
import enum
import os
from pathlib import Path
from typing import Iterable

from evento_client.entities import EventEntity, FeedbackEntity, State
from evento_client.tools import parse_iso8601_utc

_EPOCH = _dt.datetime(1970, 1, 1, tzinfo=_dt.timezone.utc)


class EventState(enum.IntEnum):
    """Event state as shown by the interface, in the service's declared order."""

    SIGNING_UP = 0
    ACTIVE = 1
    COMPLETED = 2
    CANCELLED = 3


_STATE_POSITION = {state: position for position, state in enumerate(State)}


@dataclasses.dataclass(frozen=True)
class EventView:
    """An event prepared for display."""

    id: int
    summary: str
    summary_abbr: str
    description: str
    time: str
    location: str
    tag: str
    lark_department_name: str
    state: EventState
    is_subscribed: bool
    is_check_in: bool


@dataclasses.dataclass(frozen=True)
class ContributorView:
    """A project contributor: a local avatar image and a profile link."""

    avatar: Path
    html_url: str


@dataclasses.dataclass(frozen=True)
class FeedbackView:
    """A user's feedback on an event, or its absence."""

    success: bool
    has_feedbacked: bool
    rate: int
    content: str


def _from_timestamp(seconds: int) -> _dt.datetime:
    return _EPOCH + _dt.timedelta(seconds=seconds)


def _now_utc(now: _dt.datetime | None) -> _dt.datetime:
    if now is None:
        return _dt.datetime.now(_dt.timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=_dt.timezone.utc)
    return now.astimezone(_dt.timezone.utc)


def _short(moment: _dt.datetime) -> str:
    return f"{moment.month:02d}.{moment.day:02d} {moment.hour:02d}:{moment.minute:02d}"


def convert_time_range(start: str, end: str, now: _dt.datetime | None = None) -> str:
    """Format a start/end pair of UTC timestamps as a compact range.

    Years appear only when they differ from each other or from the current
    year; the end date is left out when the range lies within one day.
    """
    start_date = _from_timestamp(parse_iso8601_utc(start))
    end_date = _from_timestamp(parse_iso8601_utc(end))
    start_str = _short(start_date)
    end_str = _short(end_date)

    if start_date.year != end_date.year:
        return f"{start_date.year:04d} {start_str} - {end_date.year:04d} {end_str}"

    if start_date.year != _now_utc(now).year:
        start_str = f"{start_date.year:04d}.{start_str}"

    if (start_date.month, start_date.day) != (end_date.month, end_date.day):
        return f"{start_str} - {end_str}"
    return f"{start_str} - {end_str[6:]}"


def first_unicode(text: str) -> str:
    """Return the first character of ``text``, or a space if it is empty."""
    if not text:
        return " "
    return text[0]


def event_from_entity(entity: EventEntity, now: _dt.datetime | None = None) -> EventView:
    """Build the display record of one event."""
    summary = entity.summary.strip()
    location = entity.location
    room = entity.lark_meeting_room_name
    return EventView(
        id=entity.id,
        summary=summary,
        summary_abbr=first_unicode(summary),
        description=entity.description,
        time=convert_time_range(entity.start, entity.end, now),
        location=f"{location or ''}{' ' if location is not None else ''}{room or ''}",
        tag=entity.tag,
        lark_department_name=entity.lark_department_name,
        state=EventState(_STATE_POSITION[entity.state]),
        is_subscribed=entity.is_subscribed,
        is_check_in=entity.is_checked_in,
    )


def events_from_entities(
    entities: Iterable[EventEntity], now: _dt.datetime | None = None
) -> list[EventView]:
    """Build display records ordered by how close each event starts to ``now``.

    Events whose start lies exactly as far from ``now`` as an earlier one's
    are dropped; the first of them is kept.
    """
    current = _now_utc(now)
    now_seconds = (current - _EPOCH).total_seconds()
    by_distance: dict[float, EventEntity] = {}
    for entity in entities:
        distance = abs(parse_iso8601_utc(entity.start) - now_seconds)
        by_distance.setdefault(distance, entity)
    return [event_from_entity(by_distance[key], current) for key in sorted(by_distance)]


def contributor_from(avatar: str | os.PathLike[str], html_url: str) -> ContributorView:
    """Build the display record of a contributor."""
    return ContributorView(avatar=Path(avatar), html_url=html_url)


def feedback_from_entity(entity: FeedbackEntity | None) -> FeedbackView:
    """Build the display record of a feedback, or an empty one if there is none."""
    if entity is None:
        return FeedbackView(success=True, has_feedbacked=False, rate=0, content="")
    return FeedbackView(
        success=True,
        has_feedbacked=True,
        rate=entity.rating,
        content=entity.feedback or "",
    )