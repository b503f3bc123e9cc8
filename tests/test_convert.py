import datetime as dt
from pathlib import Path

import pytest

from evento_client.convert import (
    ContributorView,
    EventState,
    EventView,
    FeedbackView,
    contributor_from,
    convert_time_range,
    event_from_entity,
    events_from_entities,
    feedback_from_entity,
    first_unicode,
)
from evento_client.entities import EventEntity, FeedbackEntity, State

UTC = dt.timezone.utc
NOW_2024 = dt.datetime(2024, 3, 5, 12, 0, tzinfo=UTC)
NOW_2023 = dt.datetime(2023, 6, 1, 12, 0, tzinfo=UTC)


def make_event(event_id=1, start="2024-03-05T10:00:00Z", end="2024-03-05T12:30:00Z", **kw):
    values = dict(
        id=event_id,
        summary="  Meetup  ",
        description="desc",
        start=start,
        end=end,
        location="Hall",
        tag="tech",
        lark_meeting_room_name="Room",
        lark_department_name="Dept",
        state=State.ACTIVE,
        is_subscribed=True,
        is_checked_in=False,
    )
    values.update(kw)
    return EventEntity(**values)


def test_same_day_range_omits_end_date():
    result = convert_time_range("2024-03-05T10:00:00Z", "2024-03-05T12:30:00Z", NOW_2024)
    assert result == "03.05 10:00 - 12:30"


def test_different_days_show_both_dates():
    result = convert_time_range("2024-03-05T10:00:00Z", "2024-03-06T09:15:00Z", NOW_2024)
    assert result == "03.05 10:00 - 03.06 09:15"


def test_different_years_show_both_years():
    result = convert_time_range("2023-12-31T23:00:00Z", "2024-01-01T01:00:00Z", NOW_2024)
    assert result == "2023 12.31 23:00 - 2024 01.01 01:00"


def test_start_year_prefixed_when_not_current_year():
    start, end = "2023-07-01T08:00:00Z", "2023-07-01T09:00:00Z"
    this_year = convert_time_range(start, end, NOW_2023)
    other_year = convert_time_range(start, end, NOW_2024)
    assert other_year == "2023." + this_year


def test_invalid_timestamp_raises():
    with pytest.raises(ValueError):
        convert_time_range("yesterday", "2024-03-05T12:30:00Z", NOW_2024)


@pytest.mark.parametrize(
    "text, expected",
    [("", " "), ("abc", "a"), ("活动", "活"), ("😀x", "😀")],
)
def test_first_unicode(text, expected):
    assert first_unicode(text) == expected


def test_event_from_entity_fields():
    view = event_from_entity(make_event(), NOW_2024)
    assert isinstance(view, EventView)
    assert view.summary == "Meetup"
    assert view.summary_abbr == "M"
    assert view.location == "Hall Room"
    assert view.state is EventState.ACTIVE
    assert view.is_subscribed is True
    assert view.is_check_in is False
    assert view.time == convert_time_range(
        "2024-03-05T10:00:00Z", "2024-03-05T12:30:00Z", NOW_2024
    )


@pytest.mark.parametrize(
    "location, room, expected",
    [("Hall", None, "Hall "), (None, "Room", "Room"), (None, None, "")],
)
def test_event_location_combinations(location, room, expected):
    entity = make_event(location=location, lark_meeting_room_name=room)
    assert event_from_entity(entity, NOW_2024).location == expected


def test_state_positions_match_entity_state():
    for state, expected in zip(State, EventState):
        assert event_from_entity(make_event(state=state), NOW_2024).state is expected


def test_empty_summary_gives_space_abbreviation():
    view = event_from_entity(make_event(summary="   "), NOW_2024)
    assert view.summary == ""
    assert view.summary_abbr == " "


def test_events_sorted_by_distance_from_now():
    far = make_event(3, "2024-03-07T12:00:00Z", "2024-03-07T13:00:00Z")
    near = make_event(1, "2024-03-05T13:00:00Z", "2024-03-05T14:00:00Z")
    mid = make_event(2, "2024-03-05T09:00:00Z", "2024-03-05T10:00:00Z")
    views = events_from_entities([far, near, mid], NOW_2024)
    assert [view.id for view in views] == [1, 2, 3]


def test_events_with_equal_distance_keep_first():
    first = make_event(1, "2024-03-05T13:00:00Z", "2024-03-05T14:00:00Z")
    second = make_event(2, "2024-03-05T13:00:00Z", "2024-03-05T15:00:00Z")
    views = events_from_entities([first, second], NOW_2024)
    assert [view.id for view in views] == [1]


def test_events_from_empty_list():
    assert events_from_entities([], NOW_2024) == []


def test_contributor_from():
    view = contributor_from("cache/avatar.png", "https://example.com/someone")
    assert view == ContributorView(Path("cache/avatar.png"), "https://example.com/someone")


def test_feedback_absent():
    assert feedback_from_entity(None) == FeedbackView(True, False, 0, "")


def test_feedback_present():
    view = feedback_from_entity(FeedbackEntity(id=1, rating=4, feedback="nice"))
    assert view == FeedbackView(True, True, 4, "nice")


def test_feedback_without_text_has_empty_content():
    view = feedback_from_entity(FeedbackEntity(rating=2))
    assert view.has_feedbacked is True
    assert view.content == ""
    assert view.rate == 2