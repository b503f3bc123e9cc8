"""Login state, token persistence and session renewal."""

from __future__ import annotations

import dataclasses
import datetime as _dt
import functools
import logging
import threading
from typing import Any, Callable, Coroutine

from evento_client.entities import UserInfoEntity
from evento_client.executor import executor
from evento_client.message_manager import MessageType
from evento_client.views import log_view_action

logger = logging.getLogger(__name__)

_EPOCH = _dt.datetime(1970, 1, 1, tzinfo=_dt.timezone.utc)
_EXPIRED_MESSAGE = "登录过期，请重新登录"
_RENEW_INTERVAL = _dt.timedelta(minutes=55)
_SESSION_LENGTH = _dt.timedelta(days=7)
_EXPIRY_MARGIN = _dt.timedelta(minutes=15)


class AuthError(Exception):
    """A failed authentication step; ``kind`` is unknown, network or data."""

    UNKNOWN = "unknown"
    NETWORK = "network"
    DATA = "data"

    def __init__(self, message: str, kind: str = UNKNOWN) -> None:
        super().__init__(message)
        self.kind = kind


@dataclasses.dataclass
class AccountConfig:
    """Persisted account settings: session expiry and the last user id."""

    expire: _dt.datetime = _EPOCH
    user_id: str = ""


class TokenStore:
    """Keeps refresh tokens per user id; an empty token counts as none."""

    package = "org.sast.evento"
    service = "refresh-token"

    def __init__(self) -> None:
        self._tokens: dict[str, str] = {}

    def get(self, user_id: str) -> str | None:
        """Return the stored token of ``user_id``, or None."""
        return self._tokens.get(user_id) or None

    def set(self, user_id: str, token: str) -> None:
        """Store ``token`` for ``user_id``; an empty token clears it."""
        self._tokens[user_id] = token


def _aware(moment: _dt.datetime) -> _dt.datetime:
    return moment.astimezone() if moment.tzinfo is None else moment


def _now() -> _dt.datetime:
    return _dt.datetime.now(_dt.timezone.utc)


def _notify_login(view: Any) -> None:
    view.on_login()


def _notify_logout(view: Any) -> None:
    view.on_logout()


class AccountManager:
    """Drives login, logout and token refresh for the application.

    ``bridge`` provides ``message_manager``, ``call(action)`` and
    ``invoke_from_event_loop(func)``. ``client`` provides the awaitables
    ``sast_link_login()``, ``login_via_sast_link(code)``,
    ``refresh_access_token(token)`` and ``get_user_info()``, plus a writable
    ``token_bytes`` attribute holding the access token in use.
    """

    log_origin = "AccountManager"

    def __init__(
        self,
        bridge: Any,
        client: Any,
        token_store: TokenStore | None = None,
        config: AccountConfig | None = None,
    ) -> None:
        self._bridge = bridge
        self._client = client
        self._tokens = token_store if token_store is not None else TokenStore()
        self.config = config if config is not None else AccountConfig()
        self._login_state = False
        self._user_info = UserInfoEntity()
        self._expired_time = _EPOCH
        self._renew_timer: threading.Timer | None = None
        self.loading = False
        self.load_config()

    def is_login(self) -> bool:
        """Whether a user is logged in."""
        return self._login_state

    def request_login(self) -> None:
        """Start an interactive login unless already logged in."""
        if self.is_login():
            return
        self._perform_login()

    def request_logout(self) -> None:
        """Forget the user, the stored token and the session."""
        if not self.is_login():
            return
        self._user_info = UserInfoEntity()
        self._set_refresh_token("")
        self._cancel_renew()
        self._set_network_access_token("")
        self._set_login_state(False)

    def try_login_directly(self) -> None:
        """Resume the previous session from the stored refresh token."""
        if self.is_login():
            return
        if _now() + _EXPIRY_MARGIN < self._expired_time:
            self._bridge.message_manager.show_message(_EXPIRED_MESSAGE, MessageType.INFO)
            return

        logger.info("Try login directly, expired time: %s", self._expired_time.isoformat())
        self.loading = True
        if self._get_refresh_token():
            self._perform_refresh_token()
        else:
            self.loading = False
            self._bridge.message_manager.show_message(_EXPIRED_MESSAGE, MessageType.INFO)

    def user_info(self) -> UserInfoEntity:
        """The current user's information."""
        return self._user_info

    def load_config(self) -> None:
        """Read expiry and user id from the configuration."""
        self._set_login_state(False)
        self._expired_time = _aware(self.config.expire)
        self._user_info.id = self.config.user_id

    def save_config(self) -> None:
        """Write expiry and user id back to the configuration."""
        self.config.expire = self._expired_time.replace(microsecond=0)
        self.config.user_id = self._user_info.id

    def _run(
        self, coro: Coroutine[Any, Any, Any], handler: Callable[[Any], None]
    ) -> None:
        executor().execute(
            coro,
            lambda result: self._bridge.invoke_from_event_loop(
                functools.partial(handler, result)
            ),
        )

    def _perform_login(self) -> None:
        client = self._client

        async def login() -> Any:
            logger.info("Start login")
            try:
                code = await client.sast_link_login()
            except Exception as exc:
                logger.error("SAST Link Auth failed: %s", exc)
                return AuthError("Auth failed")
            logger.info("SAST Link Auth success")
            try:
                return await client.login_via_sast_link(code)
            except Exception as exc:
                logger.error("Login failed: %s", exc)
                return AuthError("Login failed")

        self._run(login(), self._on_login_result)

    def _on_login_result(self, result: Any) -> None:
        if isinstance(result, AuthError):
            self._set_login_state(False)
            self._bridge.message_manager.show_message(str(result), MessageType.ERROR)
            return
        logger.info("Login success")
        self._user_info = result.user_info
        self._set_refresh_token(result.refresh_token)
        self._schedule_renew_access_token()
        self._expired_time = _now() + _SESSION_LENGTH
        self._set_network_access_token(result.access_token)
        self._set_login_state(True)
        self.save_config()

    def _perform_refresh_token(self) -> None:
        client = self._client
        refresh_token = self._get_refresh_token()

        async def refresh() -> Any:
            if refresh_token is None:
                logger.error("No refresh token found")
                return AuthError("No refresh token found")
            try:
                await client.refresh_access_token(refresh_token)
            except Exception as exc:
                logger.error("Failed to refresh token: %s", exc)
                return AuthError("Failed to refresh token", AuthError.NETWORK)
            return True

        self._run(refresh(), self._on_refresh_result)

    def _on_refresh_result(self, result: Any) -> None:
        if isinstance(result, AuthError):
            self._set_login_state(False)
            self._bridge.message_manager.show_message(_EXPIRED_MESSAGE, MessageType.INFO)
            return
        self._perform_get_user_info()
        logger.info("refresh token success")

    def _perform_get_user_info(self) -> None:
        client = self._client

        async def fetch() -> Any:
            try:
                return await client.get_user_info()
            except AuthError as exc:
                logger.error("Failed to get user info: %s", exc)
                return exc
            except Exception as exc:
                logger.error("Failed to get user info: %s", exc)
                return AuthError(str(exc))

        self._run(fetch(), self._on_user_info_result)

    def _on_user_info_result(self, result: Any) -> None:
        if isinstance(result, AuthError):
            if result.kind == AuthError.DATA:
                self._bridge.message_manager.show_message(_EXPIRED_MESSAGE, MessageType.INFO)
            else:
                self._bridge.message_manager.show_message(str(result), MessageType.ERROR)
            self._set_login_state(False)
            return
        self._user_info = result
        logger.info("get user info success")
        self._set_login_state(True)

    def _set_refresh_token(self, refresh_token: str) -> None:
        try:
            self._tokens.set(self._user_info.id, refresh_token)
        except OSError as exc:
            logger.error("Failed to save refresh token: %s", exc)
            return
        logger.info("Save refresh token success")

    def _get_refresh_token(self) -> str | None:
        try:
            token = self._tokens.get(self._user_info.id)
        except OSError as exc:
            logger.error("Failed to get refresh token: %s", exc)
            return None
        return token or None

    def _schedule_renew_access_token(self) -> None:
        self._cancel_renew()
        timer = threading.Timer(
            _RENEW_INTERVAL.total_seconds(),
            lambda: self._bridge.invoke_from_event_loop(self._perform_refresh_token),
        )
        timer.daemon = True
        timer.start()
        self._renew_timer = timer

    def _cancel_renew(self) -> None:
        if self._renew_timer is not None:
            self._renew_timer.cancel()
            self._renew_timer = None

    def _set_network_access_token(self, access_token: str) -> None:
        self._client.token_bytes = access_token

    def _set_login_state(self, new_state: bool) -> None:
        self.loading = False
        if self._login_state != new_state:
            self._login_state = new_state
            self._on_state_changed()

    def _on_state_changed(self) -> None:
        if self.is_login():
            log_view_action(self.log_origin, "onLogin")
            self._bridge.call(_notify_login)
        else:
            log_view_action(self.log_origin, "onLogout")
            self._bridge.call(_notify_logout)