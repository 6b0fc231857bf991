from __future__ import annotations

from cmdhooks.exception import DuplicateHookError, InvalidHookError
from cmdhooks.types import HookEventType, HookFilter, HookHandler
from cmdhooks.utils.logging import logger


def coerce_event(event: HookEventType | str) -> HookEventType:
    """Accept an event kind or its string value."""
    try:
        return HookEventType(event)
    except ValueError as e:
        valid = ", ".join(kind.value for kind in HookEventType)
        raise InvalidHookError(f"Unknown hook event '{event}' (expected one of: {valid})") from e


def handler_filter(handler: HookHandler) -> HookFilter | None:
    """The handler's filter; handlers may leave the attribute out."""
    return getattr(handler, "filter", None)


def _applies(handler: HookHandler, command: str) -> bool:
    hook_filter = handler_filter(handler)
    return hook_filter is None or hook_filter.matches(command)


class HookRegistry:
    """Stores registered handlers and answers ordered, filtered lookups.

    Ids are unique across every event. Handlers are kept in registration order,
    so equal priorities run in the order they were registered.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, HookHandler] = {}
        self._by_event: dict[HookEventType, list[HookHandler]] = {}

    def register(self, handler: HookHandler) -> None:
        if handler.id in self._handlers:
            raise DuplicateHookError(handler.id)
        event = coerce_event(handler.event)
        if isinstance(handler.priority, bool) or not isinstance(handler.priority, int):
            raise InvalidHookError(
                f"Hook {handler.id} has non-integer priority {handler.priority!r}"
            )
        hook_filter = handler_filter(handler)
        if hook_filter is not None and not callable(getattr(hook_filter, "matches", None)):
            raise InvalidHookError(
                f"Hook {handler.id} has filter {hook_filter!r} without a matches(command) method"
            )

        self._handlers[handler.id] = handler
        self._by_event.setdefault(event, []).append(handler)
        logger.debug(
            "Registered hook {id} for {event} (priority {priority})",
            id=handler.id,
            event=event.value,
            priority=handler.priority,
        )

    def unregister(self, hook_id: str) -> None:
        handler = self._handlers.pop(hook_id, None)
        if handler is None:
            return
        event = coerce_event(handler.event)
        self._by_event[event] = [h for h in self._by_event.get(event, []) if h.id != hook_id]
        logger.debug("Unregistered hook {id}", id=hook_id)

    def get_handlers(
        self,
        event: HookEventType | str,
        command: str | None = None,
    ) -> list[HookHandler]:
        """Handlers for `event` applicable to `command`, ascending by priority.

        With no command, no filtering is applied.
        """
        handlers = self._by_event.get(coerce_event(event), [])
        if command is not None:
            handlers = [h for h in handlers if _applies(h, command)]
        return sorted(handlers, key=lambda h: h.priority)

    def has(self, hook_id: str) -> bool:
        return hook_id in self._handlers

    def get(self, hook_id: str) -> HookHandler | None:
        return self._handlers.get(hook_id)

    def clear(self) -> None:
        self._handlers.clear()
        self._by_event.clear()

    def get_all_handlers(self) -> list[HookHandler]:
        return list(self._handlers.values())

    def __len__(self) -> int:
        return len(self._handlers)

    def __contains__(self, hook_id: object) -> bool:
        return hook_id in self._handlers
