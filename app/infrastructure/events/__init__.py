"""In-process event bus for payment callback outcomes."""

from .dispatcher import CallbackEventDispatcher, Reactor

__all__ = ["CallbackEventDispatcher", "Reactor"]
