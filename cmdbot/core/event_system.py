import asyncio
import inspect
import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)


class EventSystem:
    """In-process pub/sub used to announce custom command activity."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[Callable]] = {}
        self._middleware: list[Callable] = []

    def add_middleware(self, middleware: Callable) -> None:
        self._middleware.append(middleware)
        logger.debug(f"Added middleware: {type(middleware).__name__}")

    def remove_middleware(self, middleware: Callable) -> None:
        if middleware in self._middleware:
            self._middleware.remove(middleware)
            logger.debug(f"Removed middleware: {type(middleware).__name__}")

    def listen(self, event_name: str) -> Callable:
        def decorator(func: Callable) -> Callable:
            self.add_listener(event_name, func)
            return func

        return decorator

    def add_listener(self, event_name: str, callback: Callable) -> None:
        self._listeners.setdefault(event_name, []).append(callback)
        logger.debug(f"Added listener for {event_name}: {callback.__name__}")

    def remove_listener(self, event_name: str, callback: Callable) -> None:
        if event_name in self._listeners:
            try:
                self._listeners[event_name].remove(callback)
                logger.debug(f"Removed listener for {event_name}: {callback.__name__}")
            except ValueError:
                logger.warning(f"Listener {callback.__name__} not found for {event_name}")

    async def emit(self, event_name: str, *args: Any, **kwargs: Any) -> None:
        listeners = self._listeners.get(event_name)
        if not listeners:
            return

        event_context: dict[str, Any] = {
            "event_name": event_name,
            "args": args,
            "kwargs": kwargs,
            "stopped": False,
        }

        for middleware in self._middleware:
            try:
                result = await self._call_maybe_async(middleware, event_context, "pre")
                if result is False or event_context.get("stopped"):
                    logger.debug(f"Event {event_name} stopped by middleware")
                    return
            except Exception as e:
                logger.error(f"Error in middleware {type(middleware).__name__}: {e}")

        results = await asyncio.gather(
            *(self._call_maybe_async(listener, *args, **kwargs) for listener in listeners),
            return_exceptions=True,
        )
        for listener, result in zip(listeners, results):
            if isinstance(result, Exception):
                # Only the first failure is kept for the error handler middleware
                event_context.setdefault("error", result)
                logger.error(f"Error in listener {listener.__name__} for {event_name}: {result}")

        for middleware in self._middleware:
            try:
                await self._call_maybe_async(middleware, event_context, "post")
            except Exception as e:
                logger.error(f"Error in middleware {type(middleware).__name__} (post): {e}")

    async def _call_maybe_async(self, func: Callable, *args: Any, **kwargs: Any) -> Any:
        result = func(*args, **kwargs)
        if inspect.isawaitable(result):
            return await result
        return result

    def get_listeners(self, event_name: str) -> list[Callable]:
        return self._listeners.get(event_name, []).copy()

    def get_all_events(self) -> list[str]:
        return list(self._listeners.keys())
