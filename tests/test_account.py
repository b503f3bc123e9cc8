import datetime as dt
import queue

import pytest

from evento_client.account import AccountConfig, AccountManager, AuthError, TokenStore
from evento_client.entities import LoginResEntity, UserInfoEntity
from evento_client.message_manager import MessageType

EXPIRED = "登录过期，请重新登录"
UTC = dt.timezone.utc


class FakeMessages:
    def __init__(self):
        self.shown = []

    def show_message(self, content, type=MessageType.INFO, timeout=3.0):
        self.shown.append((content, type))
        return len(self.shown) - 1


class RecordingView:
    def __init__(self):
        self.events = []

    def on_login(self):
        self.events.append("on_login")

    def on_logout(self):
        self.events.append("on_logout")


class FakeBridge:
    def __init__(self):
        self.message_manager = FakeMessages()
        self.view = RecordingView()
        self.pending = queue.Queue()

    def invoke_from_event_loop(self, func):
        self.pending.put(func)

    def call(self, action, target=None):
        action(self.view)

    def pump(self, count=1):
        for _ in range(count):
            self.pending.get(timeout=5)()


class FakeClient:
    def __init__(
        self,
        *,
        auth_error=None,
        login_error=None,
        refresh_error=None,
        user=None,
        user_error=None,
    ):
        self.auth_error = auth_error
        self.login_error = login_error
        self.refresh_error = refresh_error
        self.user = user or UserInfoEntity(id="u1", nickname="Alice")
        self.user_error = user_error
        self.token_bytes = ""
        self.codes = []
        self.refreshed = []

    async def sast_link_login(self):
        if self.auth_error:
            raise self.auth_error
        return "code"

    async def login_via_sast_link(self, code):
        self.codes.append(code)
        if self.login_error:
            raise self.login_error
        return LoginResEntity(access_token="token", refresh_token="secret", user_info=self.user)

    async def refresh_access_token(self, refresh_token):
        self.refreshed.append(refresh_token)
        if self.refresh_error:
            raise self.refresh_error

    async def get_user_info(self):
        if self.user_error:
            raise self.user_error
        return self.user


def past_config(user_id="u1"):
    return AccountConfig(expire=dt.datetime(2000, 1, 1, tzinfo=UTC), user_id=user_id)


def test_token_store_round_trip():
    store = TokenStore()
    assert store.get("u1") is None
    store.set("u1", "secret")
    assert store.get("u1") == "secret"
    store.set("u1", "")
    assert store.get("u1") is None


def test_initial_state_logged_out():
    bridge = FakeBridge()
    manager = AccountManager(bridge, FakeClient())
    assert manager.is_login() is False
    assert bridge.view.events == []


def test_load_config_sets_user_id():
    manager = AccountManager(FakeBridge(), FakeClient(), config=AccountConfig(user_id="u7"))
    assert manager.user_info().id == "u7"


def test_save_config_round_trip():
    expire = dt.datetime(2024, 5, 1, 8, 30, 15, tzinfo=UTC)
    config = AccountConfig(expire=expire, user_id="u3")
    manager = AccountManager(FakeBridge(), FakeClient(), config=config)
    config.expire = dt.datetime(2000, 1, 1, tzinfo=UTC)
    config.user_id = ""
    manager.save_config()
    assert config.expire == expire
    assert config.user_id == "u3"


def test_login_success():
    bridge = FakeBridge()
    client = FakeClient()
    store = TokenStore()
    config = AccountConfig()
    manager = AccountManager(bridge, client, store, config)
    manager.request_login()
    bridge.pump()
    assert manager.is_login() is True
    assert manager.user_info().nickname == "Alice"
    assert store.get("u1") == "secret"
    assert client.token_bytes == "token"
    assert client.codes == ["code"]
    assert bridge.view.events == ["on_login"]
    assert config.user_id == "u1"
    assert config.expire > dt.datetime.now(UTC)
    manager.request_logout()


def test_login_auth_failure():
    bridge = FakeBridge()
    client = FakeClient(auth_error=RuntimeError("denied"))
    manager = AccountManager(bridge, client)
    manager.request_login()
    bridge.pump()
    assert manager.is_login() is False
    assert bridge.message_manager.shown == [("Auth failed", MessageType.ERROR)]
    assert client.codes == []


def test_login_service_failure():
    bridge = FakeBridge()
    manager = AccountManager(bridge, FakeClient(login_error=RuntimeError("down")))
    manager.request_login()
    bridge.pump()
    assert manager.is_login() is False
    assert bridge.message_manager.shown == [("Login failed", MessageType.ERROR)]


def test_logout_after_login():
    bridge = FakeBridge()
    client = FakeClient()
    manager = AccountManager(bridge, client)
    manager.request_login()
    bridge.pump()
    manager.request_logout()
    assert manager.is_login() is False
    assert manager.user_info().id == ""
    assert client.token_bytes == ""
    assert bridge.view.events == ["on_login", "on_logout"]


def test_logout_when_logged_out_does_nothing():
    bridge = FakeBridge()
    client = FakeClient()
    client.token_bytes = "token"
    manager = AccountManager(bridge, client)
    manager.request_logout()
    assert client.token_bytes == "token"
    assert bridge.view.events == []


def test_try_login_directly_resumes_session():
    bridge = FakeBridge()
    client = FakeClient()
    store = TokenStore()
    store.set("u1", "secret")
    manager = AccountManager(bridge, client, store, past_config())
    manager.try_login_directly()
    assert manager.loading is True
    bridge.pump(2)
    assert client.refreshed == ["secret"]
    assert manager.is_login() is True
    assert manager.loading is False
    assert bridge.view.events == ["on_login"]


def test_try_login_directly_without_token():
    bridge = FakeBridge()
    manager = AccountManager(bridge, FakeClient(), TokenStore(), past_config())
    manager.try_login_directly()
    assert manager.loading is False
    assert manager.is_login() is False
    assert bridge.message_manager.shown == [(EXPIRED, MessageType.INFO)]


def test_try_login_directly_with_far_expiry_shows_message():
    bridge = FakeBridge()
    client = FakeClient()
    store = TokenStore()
    store.set("u1", "secret")
    config = AccountConfig(expire=dt.datetime.now(UTC) + dt.timedelta(days=3), user_id="u1")
    manager = AccountManager(bridge, client, store, config)
    manager.try_login_directly()
    assert bridge.message_manager.shown == [(EXPIRED, MessageType.INFO)]
    assert client.refreshed == []
    assert bridge.pending.empty()


def test_refresh_failure_reports_expiry():
    bridge = FakeBridge()
    client = FakeClient(refresh_error=RuntimeError("offline"))
    store = TokenStore()
    store.set("u1", "secret")
    manager = AccountManager(bridge, client, store, past_config())
    manager.try_login_directly()
    bridge.pump()
    assert manager.is_login() is False
    assert manager.loading is False
    assert bridge.message_manager.shown == [(EXPIRED, MessageType.INFO)]


@pytest.mark.parametrize(
    "error, expected",
    [
        (AuthError("bad data", AuthError.DATA), (EXPIRED, MessageType.INFO)),
        (AuthError("no network", AuthError.NETWORK), ("no network", MessageType.ERROR)),
    ],
)
def test_user_info_failure_messages(error, expected):
    bridge = FakeBridge()
    store = TokenStore()
    store.set("u1", "secret")
    manager = AccountManager(bridge, FakeClient(user_error=error), store, past_config())
    manager.try_login_directly()
    bridge.pump(2)
    assert manager.is_login() is False
    assert bridge.message_manager.shown == [expected]


def test_auth_error_kind_defaults_to_unknown():
    error = AuthError("boom")
    assert error.kind == AuthError.UNKNOWN
    assert str(error) == "boom"