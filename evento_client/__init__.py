"""Client-side core for campus events: entities, conversion, toasts, accounts and a task executor."""

__version__ = "0.1.0"

__all__ = [
    "entities",
    "tools",
    "executor",
    "views",
    "message_manager",
    "convert",
    "account",
]