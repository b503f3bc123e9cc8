# evento-client

This package is the core of a desktop client for campus events. It has no user interface of its own. It supplies the pieces that a front end builds on.

## Modules

### `evento_client.entities`

Dataclasses for the service's JSON payloads:

- `EventEntity` and `EventEntityV1`
- `EventQueryRes`
- `DepartmentEntity` and `DepartmentEntityV1`
- `FeedbackEntity` and `FeedbackEntityV1`
- `UserInfoEntity`
- `LoginResEntity` and `LoginResEntityV1`
- `ParticipateEntity`
- `ReleaseEntity`
- `SlideEntity`, `SlideEntityV1` and `SlideEntityListV1`
- `AttachmentEntity`
- `ContributorEntity`

Each one inherits `from_json` and `to_json` from `JsonEntity`.

- `from_json` accepts either a decoded dict or a JSON string or bytes.
- Attribute names are snake_case. The JSON keys keep the service's spelling, for example `larkMeetingRoomName`.
- Strict entities raise `EntityError` when a key is missing or a value has the wrong type.
- Lenient entities (feedback, user info, releases, contributors and similar) fall back to their defaults when a key is missing.

Event states are the enums `State` and `StateV1`. An unknown state value decodes to the first member of the enum.

### `evento_client.tools`

- `parse_iso8601_utc(date, api_v1=False)` turns `YYYY-MM-DDTHH:MM:SS[.fff]Z`, or `YYYY-MM-DD HH:MM:SS` when `api_v1` is true, into epoch seconds. Malformed input raises `ValueError`.
- `first_datetime_of_week(now=None)` returns Monday of the given week at midnight UTC, for example `2024-04-29T00:00:00.000Z`.
- `guess_image_ext(data)` returns `"jpg"`, `"png"`, `"gif"`, `"bmp"` or `"unknown"`, judged from the leading bytes.
- `browser_command(url, platform=None)` builds the command that opens a URL on Linux, Windows or macOS. Any other platform raises `OSError`.
- `open_browser(url)` runs that command in a daemon thread and returns the thread.

### `evento_client.executor`

`AsyncExecutor(dispatch=None)` runs coroutines on a private asyncio loop in a worker thread.

- Completion callbacks go to `dispatch`, for example a function that queues work onto your UI thread. When `dispatch` is not given, the callback is called directly on the worker.
- `execute(coro, callback)` runs a coroutine once. If the coroutine returns `None`, the callback is called with no arguments; otherwise it receives the result. An exception is logged, and the callback is then skipped.
- `execute_repeating(func, callback, interval, flag)` combines exactly two `TimerFlag` values:
  - `IMMEDIATE` or `DELAY`
  - `ONCE` or `PERIODIC`

  Any other combination raises `ValueError`. `interval` is given in seconds or as a `timedelta`.
- `close()` cancels timers and pending work and joins the thread. The executor is also a context manager.
- `executor()` returns a process-wide instance.

### `evento_client.views`

- `ViewName` lists every page and overlay.
- `BasicView` is the base class for views. Its hooks are `on_create`, `on_start`, `on_login`, `on_show`, `on_hide`, `on_logout`, `on_stop` and `on_destroy`. The base hooks record the lifecycle in `created`, `running`, `logged_in` and `visible`.
- `view_name(target)` gives a display name, or `"[Unknown View]"` for an unknown view.
- `is_transparent(target)` is true only for `MENU_OVERLAY`.
- `log_general`, `log_view_action`, `log_visibility_changed` and `log_message_operation` write debug logs.

### `evento_client.message_manager`

`MessageManager(schedule=None)` keeps toast messages.

- `show_message(content, type=MessageType.INFO, timeout=3.0)` returns a message id.
- A toast starts as a `ToastData` with elevation 0. It is shown (every toast's elevation rises by one) a millisecond later.
- It is marked `removed` after `timeout` plus a 0.2 s animation. It is deleted 0.2 s after that, and toasts above it drop one elevation.
- `hide_message(message_id)` hides a toast early.
- `get_message(message_id)` returns its `MessageData`. It raises `KeyError` once the toast has been deleted.
- `toast_list` shows the current toasts.
- `schedule(delay_seconds, func)` defaults to `threading.Timer`.

### `evento_client.convert`

Turns entities into display records.

- `event_from_entity(entity, now=None)` returns an `EventView`:
  - the summary, trimmed;
  - its first character in `summary_abbr`;
  - the location and meeting room joined by a space;
  - the state as an `EventState`;
  - a compact time range.
- `convert_time_range(start, end, now=None)` builds that time range:
  - both years appear when they differ;
  - the start year appears when it is not the current year;
  - the end date is omitted for a same-day event.
- `events_from_entities(entities, now=None)` orders events by how close their start is to `now`. Events that tie on that distance are dropped, and only the first is kept.
- `feedback_from_entity(entity)` builds a `FeedbackView`, or an empty one when `entity` is `None`.
- `contributor_from(avatar, html_url)` builds a `ContributorView`.
- `first_unicode(text)` returns the first character of `text`, or a space when `text` is empty.

### `evento_client.account`

`AccountManager(bridge, client, token_store=None, config=None)` tracks login state.

What it expects from its collaborators:

- `bridge` provides `message_manager`, `call(action)` and `invoke_from_event_loop(func)`.
- `client` provides the awaitables `sast_link_login()`, `login_via_sast_link(code)`, `refresh_access_token(token)` and `get_user_info()`, and a writable `token_bytes` attribute.

Methods:

- `request_login()` runs the login on the shared executor. On success it does the following:
  - stores the refresh token;
  - sets the session to expire in 7 days;
  - schedules a token renewal every 55 minutes;
  - calls each view's `on_login`.
- `request_logout()` clears the user, the token and the session, then calls `on_logout`.
- `try_login_directly()` resumes a session from the stored refresh token.
- `load_config()` and `save_config()` read and write the session expiry and the user id in an `AccountConfig`.

Failures are reported through `bridge.message_manager.show_message`. `AuthError` carries a `kind` of `unknown`, `network` or `data`.

## What this package does not do

- It has no window, no screens and no navigation between pages.
- It has no component that owns the views and runs an event loop. You supply the `bridge` object that `AccountManager` expects.
- It has no HTTP client for the event service. You supply the `client` object.
- `TokenStore` keeps tokens in memory only. It does not use the system keychain and does not persist across runs.
- `AccountConfig` is a plain dataclass. Reading it from disk and writing it back is up to you.

## Install

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Example

```python
from evento_client.entities import EventEntity
from evento_client.convert import events_from_entities

payload = {
    "id": 1,
    "summary": "  Workshop ",
    "description": "Intro session",
    "start": "2024-05-01T10:00:00Z",
    "end": "2024-05-01T12:00:00Z",
    "location": "Room 101",
    "tag": "talk",
    "larkMeetingRoomName": None,
    "larkDepartmentName": "Tech",
    "state": "SIGNING_UP",
    "isSubscribed": False,
    "isCheckedIn": False,
}
event = EventEntity.from_json(payload)
for view in events_from_entities([event]):
    print(view.summary, view.time, view.state)
```