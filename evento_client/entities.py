"""Typed records for the JSON payloads exchanged with the event service."""

import json
import types
from dataclasses import Field, dataclass, field, fields
from enum import Enum
from typing import Any, ClassVar, Union, get_args, get_origin


class EntityError(ValueError):
    """Raised when a JSON payload does not match the expected entity shape."""


class State(Enum):
    """Lifecycle state of an event."""

    SIGNING_UP = "SIGNING_UP"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class StateV1(Enum):
    """Lifecycle state of an event in the first API version."""

    UNINITIALIZED = 0
    BEFORE = 1
    REGISTRATION = 2
    ONGOING = 3
    CANCELLED = 4
    OVER = 5


def _alias(key: str, **kwargs: Any) -> Any:
    """A dataclass field whose JSON key differs from the attribute name."""
    return field(metadata={"key": key}, **kwargs)


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _decode_enum(tp: type, value: Any) -> Enum:
    if not isinstance(value, bool):
        for member in tp:
            if member.value == value:
                return member
    # Unknown values fall back to the first declared member.
    return next(iter(tp))


def _decode(tp: Any, value: Any, path: str) -> Any:
    origin = get_origin(tp)
    if origin in (Union, types.UnionType):
        if value is None:
            return None
        inner = [arg for arg in get_args(tp) if arg is not type(None)]
        return _decode(inner[0], value, path)
    if origin is list:
        if not isinstance(value, list):
            raise EntityError(f"{path}: expected an array")
        (item_type,) = get_args(tp)
        return [_decode(item_type, item, f"{path}[{pos}]") for pos, item in enumerate(value)]
    if isinstance(tp, type) and issubclass(tp, Enum):
        return _decode_enum(tp, value)
    if isinstance(tp, type) and issubclass(tp, JsonEntity):
        try:
            return tp.from_json(value)
        except EntityError as exc:
            raise EntityError(f"{path}: {exc}") from exc
    if tp is bool:
        if not isinstance(value, bool):
            raise EntityError(f"{path}: expected a boolean")
        return value
    if tp is int:
        if isinstance(value, (int, float)):
            return int(value)
        raise EntityError(f"{path}: expected a number")
    if tp is str:
        if not isinstance(value, str):
            raise EntityError(f"{path}: expected a string")
        return value
    return value


def _encode(value: Any) -> Any:
    if isinstance(value, JsonEntity):
        return value.to_json()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, list):
        return [_encode(item) for item in value]
    return value


class JsonEntity:
    """Base for dataclass entities that map to and from JSON objects.

    Strict entities require every key to be present; lenient ones fall back
    to field defaults for missing keys. Entities declared with
    ``camel_case=True`` use camelCase JSON keys for their snake_case fields.
    """

    _lenient: ClassVar[bool] = False
    _camel_case: ClassVar[bool] = False

    def __init_subclass__(
        cls, lenient: bool = False, camel_case: bool = False, **kwargs: Any
    ) -> None:
        super().__init_subclass__(**kwargs)
        cls._lenient = lenient
        cls._camel_case = camel_case

    @classmethod
    def _json_key(cls, item: Field) -> str:
        if "key" in item.metadata:
            return item.metadata["key"]
        return _camel(item.name) if cls._camel_case else item.name

    @classmethod
    def from_json(cls, data: Any) -> Any:
        """Build an entity from a decoded JSON object or a JSON document."""
        if isinstance(data, (str, bytes, bytearray)):
            try:
                data = json.loads(data)
            except json.JSONDecodeError as exc:
                raise EntityError(f"invalid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise EntityError(f"{cls.__name__}: expected a JSON object")
        values: dict = {}
        for item in fields(cls):
            key = cls._json_key(item)
            if key not in data:
                if cls._lenient:
                    continue
                raise EntityError(f"{cls.__name__}: missing key {key!r}")
            values[item.name] = _decode(item.type, data[key], f"{cls.__name__}.{key}")
        return cls(**values)

    def to_json(self) -> dict:
        """Return the entity as a JSON-compatible dictionary."""
        return {
            self._json_key(item): _encode(getattr(self, item.name))
            for item in fields(self)
        }


@dataclass
class AttachmentEntity(JsonEntity):
    id: int
    event_id: int = _alias("eventId")
    url: str = _alias("url")


@dataclass
class ContributorEntity(JsonEntity, lenient=True):
    login: str = ""
    avatar_url: str = ""
    html_url: str = ""
    contributions: int = 0


@dataclass
class DepartmentEntity(JsonEntity):
    id: str
    name: str


@dataclass
class DepartmentEntityV1(JsonEntity):
    id: int
    department_name: str = _alias("departmentName")


@dataclass
class EventEntity(JsonEntity):
    id: int
    summary: str
    description: str
    start: str
    end: str
    location: str | None
    tag: str
    lark_meeting_room_name: str | None = _alias("larkMeetingRoomName")
    lark_department_name: str = _alias("larkDepartmentName")
    state: State = _alias("state")
    is_subscribed: bool = _alias("isSubscribed")
    is_checked_in: bool = _alias("isCheckedIn")


@dataclass
class EventEntityV1(JsonEntity):
    id: int
    title: str
    description: str
    gmt_event_start: str = _alias("gmtEventStart")
    gmt_event_end: str = _alias("gmtEventEnd")
    location: str | None = _alias("location")
    tag: str = _alias("tag")
    state: StateV1 = _alias("state")
    departments: list[DepartmentEntityV1] = _alias("departments")


@dataclass
class EventQueryRes(JsonEntity):
    elements: list[EventEntity]
    current: int
    total: int


@dataclass
class FeedbackEntity(JsonEntity, lenient=True):
    id: int = 0
    link_id: int = _alias("linkId", default=0)
    event_id: int = _alias("eventId", default=0)
    rating: int = 0
    feedback: str | None = None


@dataclass
class FeedbackEntityV1(JsonEntity, lenient=True):
    id: int = 0
    event_id: int = _alias("eventId", default=0)
    score: int = 0
    content: str | None = None


@dataclass
class UserInfoEntity(JsonEntity, lenient=True):
    id: str = ""
    link_id: str = _alias("linkId", default="")
    student_id: str = _alias("studentId", default="")
    email: str = ""
    nickname: str = ""
    avatar: str | None = None
    organization: str | None = None
    biography: str | None = None
    link: list[str] | None = None


@dataclass
class LoginResEntity(JsonEntity, camel_case=True):
    access_token: str
    refresh_token: str
    user_info: UserInfoEntity


@dataclass
class LoginResEntityV1(JsonEntity):
    token: str
    user_info: UserInfoEntity = _alias("userInfo")


@dataclass
class ParticipateEntity(JsonEntity, lenient=True):
    is_registration: bool = _alias("isRegistration", default=False)
    is_participate: bool = _alias("isParticipate", default=False)
    is_subscribe: bool = _alias("isSubscribe", default=False)


@dataclass
class ReleaseEntity(JsonEntity, lenient=True):
    tag_name: str = ""
    name: str = ""
    body: str = ""
    html_url: str = ""
    published_at: str = ""


@dataclass
class SlideEntity(JsonEntity):
    id: int
    event_id: int = _alias("eventId")
    url: str = _alias("url")
    link: str = _alias("link")


@dataclass
class SlideEntityV1(JsonEntity):
    id: int
    title: str
    url: str
    link: str


@dataclass
class SlideEntityListV1(JsonEntity, lenient=True):
    slides: list[SlideEntityV1] = field(default_factory=list)