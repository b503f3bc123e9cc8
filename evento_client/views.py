"""View identifiers, the view lifecycle base class and UI logging helpers."""

from __future__ import annotations

import enum
import logging
from typing import Any

logger = logging.getLogger(__name__)


class ViewName(enum.Enum):
    """Every page and overlay the application can show."""

    DISCOVERY_PAGE = "DiscoveryPage"
    SEARCH_PAGE = "SearchPage"
    HISTORY_PAGE = "HistoryPage"
    MY_EVENT_PAGE = "MyEventPage"
    DETAIL_PAGE = "DetailPage"
    ABOUT_PAGE = "AboutPage"
    SETTING_PAGE = "SettingPage"
    LOGIN_OVERLAY = "LoginOverlay"
    MENU_OVERLAY = "MenuOverlay"


_VIEW_NAMES: dict[ViewName, str] = {
    ViewName.DISCOVERY_PAGE: "DiscoveryPage",
    ViewName.SEARCH_PAGE: "SearchPage",
    ViewName.HISTORY_PAGE: "HistoryPage",
    ViewName.MY_EVENT_PAGE: "MyEventPage",
    ViewName.DETAIL_PAGE: "DetailPage",
    ViewName.ABOUT_PAGE: "AboutPage",
    ViewName.SETTING_PAGE: "SettingPage",
    ViewName.LOGIN_OVERLAY: "LoginOverlay",
    ViewName.MENU_OVERLAY: "MenuOverlay",
}

# Views that leave the view beneath them visible.
_TRANSPARENT_VIEWS = frozenset({ViewName.MENU_OVERLAY})


class BasicView:
    """Base for views; the bridge calls these hooks on the UI thread.

    All hooks run while the event loop is running, except ``on_create`` and
    ``on_destroy``. The base hooks keep track of the view's lifecycle in
    ``created``, ``running``, ``logged_in`` and ``visible``; subclasses that
    override a hook may call the base one to keep that record.
    """

    def __init__(self, bridge: Any) -> None:
        self.bridge = bridge
        self.created = False
        self.running = False
        self.logged_in = False
        self.visible = False

    def on_create(self) -> None:
        """Called before the event loop starts."""
        self.created = True

    def on_start(self) -> None:
        """Called once the event loop has started."""
        self.running = True

    def on_login(self) -> None:
        """Called after a successful login or a resumed session."""
        self.logged_in = True

    def on_show(self) -> None:
        """Called after the view has been shown."""
        self.visible = True

    def on_hide(self) -> None:
        """Called before the view is hidden."""
        self.visible = False

    def on_logout(self) -> None:
        """Called when the user logs out."""
        self.logged_in = False

    def on_stop(self) -> None:
        """Called when the event loop begins to stop."""
        self.running = False

    def on_destroy(self) -> None:
        """Called after the event loop has stopped."""
        self.created = False


def view_name(target: Any) -> str:
    """Return the display name of a view, or a placeholder if unknown."""
    return _VIEW_NAMES.get(target, "[Unknown View]")


def is_transparent(target: Any) -> bool:
    """Whether the view lets the view below it stay visible."""
    return target in _TRANSPARENT_VIEWS


def log_general(origin: str, content: str) -> None:
    logger.debug("%s: %s", origin, content)


def log_view_action(origin: str, action_name: str, view_name: str = "All-View") -> None:
    logger.debug("%s: %s: triggered %s", origin, view_name, action_name)


def log_visibility_changed(origin: str, action_name: str, view_name: str) -> None:
    logger.debug("%s: %s visibility changed: %s", origin, view_name, action_name)


def log_message_operation(origin: str, message_id: int, content: str) -> None:
    logger.debug("%s: message [%s]: %s", origin, message_id, content)